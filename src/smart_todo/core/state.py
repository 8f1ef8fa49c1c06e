# src/smart_todo/core/state.py

from __future__ import annotations

from dataclasses import dataclass
from typing import Any

from .ports import TaskRepo


@dataclass
class AppState:
    # Settings object (real Settings or a test namespace); read via attributes only.
    settings: Any

    task_store: TaskRepo
    user_id: str
