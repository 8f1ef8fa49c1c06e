# src/smart_todo/tasks/due_dates.py

from __future__ import annotations

from collections.abc import Iterable
from datetime import date

from .errors import ValidationError
from .normalizer import parse_due_date
from .task_models import DueStatus, Task


def reference_date(today: date | str) -> date:
    """
    Accept the reference day as a date, datetime or ISO "YYYY-MM-DD" string.

    Datetimes lose their time part; an empty value is rejected.
    """
    ref = parse_due_date(today)
    if ref is None:
        raise ValidationError("Reference date is required")
    return ref


def classify_due(task: Task, today: date | str) -> DueStatus | None:
    """
    Due-date bucket of `task` relative to `today` (calendar dates only).

    Completed tasks are not classified and return None.
    """
    ref = reference_date(today)
    if task.is_completed:
        return None

    due = task.due_date
    if due is None:
        return DueStatus.UPCOMING

    if due < ref:
        return DueStatus.OVERDUE
    if due == ref:
        return DueStatus.DUE_TODAY
    return DueStatus.UPCOMING


def filter_by_due_status(
    tasks: Iterable[Task], status: DueStatus, today: date | str
) -> list[Task]:
    """Tasks in one due-status bucket, in input order."""
    ref = reference_date(today)
    return [t for t in tasks if classify_due(t, ref) == status]
