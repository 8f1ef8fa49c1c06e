# src/smart_todo/tasks/task_models.py

from __future__ import annotations

from dataclasses import dataclass
from datetime import date
from enum import StrEnum
from typing import Any, Final

DEFAULT_PROJECT: Final = "Inbox"


class Priority(StrEnum):
    NONE = "none"
    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"

    @property
    def rank(self) -> int:
        return PRIORITY_RANK[self]


PRIORITY_RANK: Final[dict[Priority, int]] = {
    Priority.HIGH: 3,
    Priority.MEDIUM: 2,
    Priority.LOW: 1,
    Priority.NONE: 0,
}


class ReminderType(StrEnum):
    NOTIFICATION = "notification"
    EMAIL = "email"


class DueStatus(StrEnum):
    """Due-date bucket of an incomplete task (completed tasks have none)."""

    OVERDUE = "overdue"
    DUE_TODAY = "dueToday"
    UPCOMING = "upcoming"


@dataclass(slots=True, frozen=True)
class Reminder:
    datetime: str
    type: ReminderType

    def to_dict(self) -> dict[str, str]:
        return {"datetime": self.datetime, "type": self.type.value}


class _Unset:
    """Marker for "leave this field as it is" in a partial update."""

    __slots__ = ()

    def __repr__(self) -> str:
        return "UNSET"

    def __bool__(self) -> bool:
        return False


UNSET: Final = _Unset()


@dataclass(slots=True)
class Task:
    id: int
    user_id: str
    text: str
    is_completed: bool
    created_at: int  # ms since epoch

    priority: Priority
    due_date: date | None
    reminders: tuple[Reminder, ...]
    project: str

    def to_dict(self) -> dict[str, Any]:
        """Record shape as exposed to API consumers (camelCase keys)."""
        return {
            "id": self.id,
            "text": self.text,
            "isCompleted": self.is_completed,
            "userId": self.user_id,
            "createdAt": self.created_at,
            "priority": self.priority.value,
            "dueDate": self.due_date.isoformat() if self.due_date else None,
            "reminders": [r.to_dict() for r in self.reminders],
            "project": self.project,
        }


@dataclass(slots=True, frozen=True)
class NewTask:
    """A fully normalized record, ready to be inserted (no id yet)."""

    user_id: str
    text: str
    created_at: int
    priority: Priority = Priority.NONE
    due_date: date | None = None
    reminders: tuple[Reminder, ...] = ()
    project: str = DEFAULT_PROJECT
    is_completed: bool = False


@dataclass(slots=True, frozen=True)
class TaskPatch:
    """
    Partial update of a task.

    Every field defaults to UNSET ("do not change"). An explicit empty value is a real
    change: due_date=None (or "") clears the due date, reminders=[] clears reminders,
    project="" moves the task back to the default project.
    """

    text: str | _Unset = UNSET
    priority: Priority | str | _Unset = UNSET
    due_date: date | str | None | _Unset = UNSET
    reminders: Any = UNSET
    project: str | None | _Unset = UNSET
    is_completed: bool | _Unset = UNSET

    def is_empty(self) -> bool:
        return all(getattr(self, name) is UNSET for name in self.__dataclass_fields__)
