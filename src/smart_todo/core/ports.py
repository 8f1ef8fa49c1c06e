# src/smart_todo/core/ports.py

from __future__ import annotations

"""
Ports (interfaces) used by the core.

The core depends on Protocols instead of concrete implementations.
This keeps the storage backend swappable and makes testing easier.
"""

from datetime import date
from typing import Any, Protocol

from ..tasks.task_models import NewTask, Priority, Task


class TaskRepo(Protocol):
    """
    Key-indexed task store.

    Per-record writes are atomic; there is no multi-record transaction.
    """

    def insert_task(self, new_task: NewTask) -> int: ...
    def get_task(self, task_id: int) -> Task | None: ...
    def patch_task(self, task_id: int, fields: dict[str, Any]) -> None: ...
    def delete_task(self, task_id: int) -> bool: ...

    # Newest-created first.
    def list_tasks_for_user(
            self,
            user_id: str,
            *,
            priority: Priority | None = None,
            due_date: date | None = None,
    ) -> list[Task]: ...

    def count_tasks(self) -> int: ...
    def close(self) -> None: ...
