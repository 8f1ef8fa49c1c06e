# src/smart_todo/tasks/task_api.py

"""
Task operations exposed to callers (console, API layers).

Every function takes the store first. Writes go through the normalizer; reads are
computed in memory from a snapshot of the user's tasks.
"""

from __future__ import annotations

import logging
from collections.abc import Iterable, Mapping
from dataclasses import dataclass, field
from datetime import date
from typing import Any

from ..core.ports import TaskRepo
from .errors import TaskNotFoundError
from .normalizer import build_new_task, coerce_patch, parse_due_date, parse_priority
from .smart_sort import smart_sort
from .stats import ProductivityStats, compute_stats
from .task_models import Priority, Reminder, Task, TaskPatch

logger = logging.getLogger(__name__)


@dataclass(slots=True)
class BatchUpdateReport:
    """Outcome of batch_update: ids that were written and ids that did not exist."""

    applied: list[int] = field(default_factory=list)
    skipped: list[int] = field(default_factory=list)


# ---- reads ----


def list_for_user(repo: TaskRepo, user_id: str) -> list[Task]:
    return repo.list_tasks_for_user(user_id)


def list_smart_sorted(repo: TaskRepo, user_id: str) -> list[Task]:
    return smart_sort(repo.list_tasks_for_user(user_id))


def list_by_priority(repo: TaskRepo, user_id: str, priority: Priority | str) -> list[Task]:
    return repo.list_tasks_for_user(user_id, priority=parse_priority(priority))


def list_by_due_date(repo: TaskRepo, user_id: str, due_date: date | str) -> list[Task]:
    parsed = parse_due_date(due_date)
    if parsed is None:
        return []
    return repo.list_tasks_for_user(user_id, due_date=parsed)


def get_task(repo: TaskRepo, task_id: int) -> Task:
    task = repo.get_task(task_id)
    if task is None:
        raise TaskNotFoundError(task_id)
    return task


def get_stats(repo: TaskRepo, user_id: str, today: date | str) -> ProductivityStats:
    return compute_stats(repo.list_tasks_for_user(user_id), today)


# ---- writes ----


def create_task(
    repo: TaskRepo,
    *,
    text: str,
    user_id: str,
    priority: Priority | str | None = None,
    due_date: date | str | None = None,
    reminders: Iterable[Reminder | Mapping[str, Any]] | None = None,
    project: str | None = None,
) -> int:
    new_task = build_new_task(
        text=text,
        user_id=user_id,
        priority=priority,
        due_date=due_date,
        reminders=reminders,
        project=project,
    )
    task_id = repo.insert_task(new_task)
    logger.info("Task created id=%s user=%s", task_id, user_id)
    return task_id


def update_task(repo: TaskRepo, task_id: int, patch: TaskPatch) -> None:
    """Apply only the fields set on `patch`. Raises TaskNotFoundError for unknown ids."""
    fields = coerce_patch(patch)
    if repo.get_task(task_id) is None:
        raise TaskNotFoundError(task_id)
    if patch.is_empty():
        logger.debug("Empty patch for id=%s; nothing written", task_id)
        return
    repo.patch_task(task_id, fields)


def toggle_completion(repo: TaskRepo, task_id: int) -> bool:
    """Flip is_completed and return the new value."""
    task = get_task(repo, task_id)
    new_value = not task.is_completed
    repo.patch_task(task_id, {"is_completed": new_value})
    logger.debug("Task toggled id=%s is_completed=%s", task_id, new_value)
    return new_value


def delete_task(repo: TaskRepo, task_id: int) -> bool:
    """Delete by id. Unknown ids are a no-op; returns whether a task was removed."""
    return repo.delete_task(task_id)


def batch_update(
    repo: TaskRepo, updates: Iterable[tuple[int, TaskPatch]]
) -> BatchUpdateReport:
    """
    Best-effort bulk apply.

    All patches are validated before the first write. After that each item is applied on
    its own: unknown ids are skipped and reported, and a store error stops the batch with
    earlier items already written.
    """
    prepared = [(task_id, coerce_patch(patch)) for task_id, patch in updates]

    report = BatchUpdateReport()
    for task_id, fields in prepared:
        if repo.get_task(task_id) is None:
            report.skipped.append(task_id)
            continue
        repo.patch_task(task_id, fields)
        report.applied.append(task_id)

    if report.skipped:
        logger.info("Batch update skipped unknown ids: %s", report.skipped)
    logger.debug("Batch update applied=%d skipped=%d", len(report.applied), len(report.skipped))
    return report
