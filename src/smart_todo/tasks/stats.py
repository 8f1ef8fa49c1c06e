# src/smart_todo/tasks/stats.py

from __future__ import annotations

from collections.abc import Iterable
from dataclasses import dataclass
from datetime import date
from typing import Any

from .due_dates import classify_due, reference_date
from .task_models import DueStatus, Priority, Task


@dataclass(slots=True, frozen=True)
class PriorityCounts:
    high: int
    medium: int
    low: int
    none: int


@dataclass(slots=True, frozen=True)
class DueStatusCounts:
    overdue: int
    due_today: int
    upcoming: int


@dataclass(slots=True, frozen=True)
class ProductivityStats:
    total: int
    completed: int
    pending: int
    completion_rate: int  # whole percent, 0..100
    priority: PriorityCounts
    due_status: DueStatusCounts

    def to_dict(self) -> dict[str, Any]:
        return {
            "total": self.total,
            "completed": self.completed,
            "pending": self.pending,
            "completionRate": self.completion_rate,
            "priority": {
                "high": self.priority.high,
                "medium": self.priority.medium,
                "low": self.priority.low,
                "none": self.priority.none,
            },
            "dueStatus": {
                "overdue": self.due_status.overdue,
                "dueToday": self.due_status.due_today,
                "upcoming": self.due_status.upcoming,
            },
        }


def completion_rate(completed: int, total: int) -> int:
    """round(100 * completed / total), halves rounded up; 0 for an empty set."""
    if total <= 0:
        return 0
    return (200 * completed + total) // (2 * total)


def compute_stats(tasks: Iterable[Task], today: date | str) -> ProductivityStats:
    """
    Summarize a user's tasks in one pass.

    The priority histogram covers all tasks; "none" is whatever is left after high/medium/low.
    Due-status counts cover pending tasks only; "upcoming" is whatever is left after
    overdue/due_today.
    """
    ref = reference_date(today)
    total = completed = 0
    high = medium = low = 0
    overdue = due_today = 0

    for task in tasks:
        total += 1

        if task.priority == Priority.HIGH:
            high += 1
        elif task.priority == Priority.MEDIUM:
            medium += 1
        elif task.priority == Priority.LOW:
            low += 1

        if task.is_completed:
            completed += 1
            continue

        status = classify_due(task, ref)
        if status == DueStatus.OVERDUE:
            overdue += 1
        elif status == DueStatus.DUE_TODAY:
            due_today += 1

    pending = total - completed
    return ProductivityStats(
        total=total,
        completed=completed,
        pending=pending,
        completion_rate=completion_rate(completed, total),
        priority=PriorityCounts(high=high, medium=medium, low=low, none=total - high - medium - low),
        due_status=DueStatusCounts(
            overdue=overdue,
            due_today=due_today,
            upcoming=pending - overdue - due_today,
        ),
    )
