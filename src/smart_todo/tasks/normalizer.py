# src/smart_todo/tasks/normalizer.py

"""
Boundary normalization for tasks.

Everything that reaches the store goes through here first:
- defaults are applied on create (priority none, no reminders, "Inbox" project),
- enum-like fields are parsed into closed enums,
- partial updates keep only the fields that were explicitly set.

All checks run before the store is touched, so a rejected input never leaves a partial write.
"""

from __future__ import annotations

import time
from collections.abc import Iterable, Mapping
from datetime import date, datetime
from typing import Any

from .errors import ValidationError
from .task_models import (
    DEFAULT_PROJECT,
    UNSET,
    NewTask,
    Priority,
    Reminder,
    ReminderType,
    TaskPatch,
)


def now_ms() -> int:
    return int(time.time() * 1000)


def parse_priority(raw: Priority | str | None) -> Priority:
    if raw is None:
        return Priority.NONE
    if isinstance(raw, Priority):
        return raw
    try:
        return Priority(str(raw).strip().lower())
    except ValueError:
        raise ValidationError(f"Unknown priority: {raw!r}") from None


def parse_due_date(raw: date | str | None) -> date | None:
    """None and "" both mean "no due date". Datetimes are cut down to their calendar date."""
    if raw is None:
        return None
    if isinstance(raw, datetime):
        return raw.date()
    if isinstance(raw, date):
        return raw
    s = str(raw).strip()
    if not s:
        return None
    try:
        return date.fromisoformat(s)
    except ValueError:
        raise ValidationError(f"Invalid due date (expected YYYY-MM-DD): {raw!r}") from None


def _parse_reminder(item: Reminder | Mapping[str, Any]) -> Reminder:
    if isinstance(item, Reminder):
        raw_dt, raw_type = item.datetime, item.type
    elif isinstance(item, Mapping):
        raw_dt, raw_type = item.get("datetime"), item.get("type")
    else:
        raise ValidationError(f"Reminder must be a mapping, got {type(item).__name__}")

    if not isinstance(raw_dt, str) or not raw_dt.strip():
        raise ValidationError("Reminder datetime is required")
    try:
        datetime.fromisoformat(raw_dt.strip())
    except ValueError:
        raise ValidationError(f"Invalid reminder datetime: {raw_dt!r}") from None

    try:
        rtype = ReminderType(raw_type)
    except ValueError:
        raise ValidationError(f"Unknown reminder type: {raw_type!r}") from None

    return Reminder(datetime=raw_dt.strip(), type=rtype)


def parse_reminders(raw: Iterable[Reminder | Mapping[str, Any]] | None) -> tuple[Reminder, ...]:
    if raw is None:
        return ()
    if isinstance(raw, (str, bytes, Mapping)):
        raise ValidationError("Reminders must be a list")
    return tuple(_parse_reminder(item) for item in raw)


def _clean_text(raw: str | None) -> str:
    text = (raw or "").strip()
    if not text:
        raise ValidationError("text is required")
    return text


def _clean_project(raw: str | None) -> str:
    return (raw or "").strip() or DEFAULT_PROJECT


def build_new_task(
    *,
    text: str,
    user_id: str,
    priority: Priority | str | None = None,
    due_date: date | str | None = None,
    reminders: Iterable[Reminder | Mapping[str, Any]] | None = None,
    project: str | None = None,
    created_at: int | None = None,
) -> NewTask:
    """Build a complete record for insertion, applying creation defaults."""
    if not user_id or not str(user_id).strip():
        raise ValidationError("user_id is required")

    return NewTask(
        user_id=str(user_id),
        text=_clean_text(text),
        created_at=now_ms() if created_at is None else int(created_at),
        priority=parse_priority(priority),
        due_date=parse_due_date(due_date),
        reminders=parse_reminders(reminders),
        project=_clean_project(project),
        is_completed=False,
    )


def coerce_patch(patch: TaskPatch) -> dict[str, Any]:
    """
    Return only the fields the patch explicitly sets, validated and normalized.

    Keys match Task attribute names. An all-UNSET patch gives an empty dict.
    """
    fields: dict[str, Any] = {}

    if patch.text is not UNSET:
        fields["text"] = _clean_text(patch.text)  # type: ignore[arg-type]

    if patch.priority is not UNSET:
        fields["priority"] = parse_priority(patch.priority)  # type: ignore[arg-type]

    if patch.due_date is not UNSET:
        fields["due_date"] = parse_due_date(patch.due_date)  # type: ignore[arg-type]

    if patch.reminders is not UNSET:
        fields["reminders"] = parse_reminders(patch.reminders)

    if patch.project is not UNSET:
        fields["project"] = _clean_project(patch.project)  # type: ignore[arg-type]

    if patch.is_completed is not UNSET:
        if not isinstance(patch.is_completed, bool):
            raise ValidationError("is_completed must be a bool")
        fields["is_completed"] = patch.is_completed

    return fields


def patch_from_mapping(data: Mapping[str, Any]) -> TaskPatch:
    """
    Build a TaskPatch from a loose mapping (API payloads, console input).

    Absent keys stay UNSET; keys present with any value (including None or "") are applied.
    Accepts both snake_case and the camelCase record keys.
    """
    aliases = {"dueDate": "due_date", "isCompleted": "is_completed"}
    allowed = set(TaskPatch.__dataclass_fields__)
    kwargs: dict[str, Any] = {}
    for key, value in data.items():
        name = aliases.get(key, key)
        if name not in allowed:
            raise ValidationError(f"Unknown field: {key}")
        kwargs[name] = value
    return TaskPatch(**kwargs)
