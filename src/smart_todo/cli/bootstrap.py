# src/smart_todo/cli/bootstrap.py

"""Builds the AppState the console runs against."""

from __future__ import annotations

from ..config import Settings, get_settings
from ..core.state import AppState
from ..tasks.task_store import TaskStore


def create_initial_state(*, settings: Settings | None = None) -> AppState:
    """Open the SQLite task store named by `settings` (env settings when omitted)."""
    settings = settings or get_settings()
    return AppState(
        settings=settings,
        task_store=TaskStore(settings.tasks_db_path),
        user_id=settings.user_id,
    )
