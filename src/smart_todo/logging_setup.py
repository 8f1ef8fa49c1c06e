# src/smart_todo/logging_setup.py

"""
Logging for the todo console.

stderr gets a filtered, human-sized stream; `<data_dir>/smart_todo.log` gets everything.
"""

from __future__ import annotations

import logging
import sys
from pathlib import Path
from typing import Any

LOG_FILE_NAME = "smart_todo.log"

_FORMAT = "%(asctime)s.%(msecs)03d %(levelname)s %(name)s: %(message)s"
_DATEFMT = "%Y-%m-%d %H:%M:%S"


def console_level(name: str | None) -> int:
    """Map a TODO_LOG_LEVEL value ("debug", "WARNING", ...) to a level; unknown names mean INFO."""
    level = logging.getLevelName(str(name or "INFO").strip().upper())
    return level if isinstance(level, int) else logging.INFO


class _TodoConsoleFilter(logging.Filter):
    # Store debug lines fire on every row written; other libraries only surface warnings.
    def filter(self, record: logging.LogRecord) -> bool:
        if record.name.startswith("smart_todo.tasks.task_store"):
            return record.levelno >= logging.WARNING
        if record.name.startswith("smart_todo."):
            return True
        return record.levelno >= logging.WARNING


def setup_logging(settings: Any, *, file_level: int = logging.DEBUG) -> Path:
    """
    Install the console and file handlers on the root logger and return the log file path.

    Reads `settings.log_level` and `settings.data_dir`. Replaces any handlers already on
    the root logger, so calling it twice does not duplicate output.
    """
    data_dir = Path(settings.data_dir)
    data_dir.mkdir(parents=True, exist_ok=True)
    log_file = data_dir / LOG_FILE_NAME

    root = logging.getLogger()
    root.setLevel(logging.DEBUG)
    for h in list(root.handlers):
        root.removeHandler(h)

    fmt = logging.Formatter(fmt=_FORMAT, datefmt=_DATEFMT)

    ch = logging.StreamHandler(sys.stderr)
    ch.setLevel(console_level(getattr(settings, "log_level", None)))
    ch.setFormatter(fmt)
    ch.addFilter(_TodoConsoleFilter())
    root.addHandler(ch)

    fh = logging.FileHandler(log_file, encoding="utf-8")
    fh.setLevel(file_level)
    fh.setFormatter(fmt)
    root.addHandler(fh)

    logging.captureWarnings(True)
    return log_file
