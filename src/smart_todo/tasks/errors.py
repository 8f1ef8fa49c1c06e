# src/smart_todo/tasks/errors.py

from __future__ import annotations


class TodoError(Exception):
    """Base class for errors raised by the task core."""


class ValidationError(TodoError, ValueError):
    """Input rejected before anything was written to the store."""


class TaskNotFoundError(TodoError, LookupError):
    def __init__(self, task_id: int) -> None:
        super().__init__(f"Task not found: {task_id}")
        self.task_id = task_id
