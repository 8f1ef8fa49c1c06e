"""smart_todo: per-user task storage with smart ordering and productivity stats."""

__version__ = "0.1.0"
