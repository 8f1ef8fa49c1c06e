# src/smart_todo/tasks/smart_sort.py

"""
Smart sort: the single display order for a user's tasks.

Precedence:
1. incomplete before completed
2. (incomplete only) higher priority first
3. (incomplete only) tasks with a due date first, earlier date first
4. newer created_at first
Tasks still tied after that (created in the same millisecond) are ordered by id, so the
result does not depend on the input order.
"""

from __future__ import annotations

from collections.abc import Iterable
from datetime import date

from .task_models import Task

# Sorts after every real date; only used for incomplete tasks without a due date.
_NO_DUE_DATE = date.max.toordinal() + 1


def smart_sort_key(task: Task) -> tuple[int, int, int, int, int]:
    if task.is_completed:
        # Priority and due date do not apply to completed tasks.
        return (1, 0, 0, -task.created_at, task.id)

    due = task.due_date.toordinal() if task.due_date is not None else _NO_DUE_DATE
    return (0, -task.priority.rank, due, -task.created_at, task.id)


def smart_sort(tasks: Iterable[Task]) -> list[Task]:
    """Return a new list ordered by smart_sort_key. The input is not modified."""
    return sorted(tasks, key=smart_sort_key)
