# src/smart_todo/cli/commands.py

from __future__ import annotations

import inspect
import json
import logging
from collections.abc import Callable
from datetime import date
from typing import Any, cast

from ..core.state import AppState
from ..tasks import task_api
from ..tasks.due_dates import filter_by_due_status
from ..tasks.errors import TodoError
from ..tasks.normalizer import patch_from_mapping
from ..tasks.task_models import DueStatus, Priority, Task

CommandHandler2 = Callable[[AppState, list[str]], str]
CommandHandler3 = Callable[[AppState, list[str], date], str]
CommandHandler = CommandHandler2 | CommandHandler3

logger = logging.getLogger(__name__)

# The console leaves its loop on these before dispatching.
EXIT_COMMANDS = ("exit", "quit")


class CommandRegistry:
    """Simple slash-command registry used by the console (/help, /add, ...)."""

    def __init__(self) -> None:
        self._handlers: dict[str, CommandHandler] = {}
        self._help: dict[str, str] = {}

    def register(
        self,
        name: str,
        handler: CommandHandler,
        help_text: str,
        aliases: list[str] | None = None,
    ) -> None:
        aliases = aliases or []
        key = name.lower()
        self._handlers[key] = handler
        self._help[key] = help_text
        for alias in aliases:
            self._handlers[alias.lower()] = handler

    def handle(self, state: AppState, line: str, today: date | None = None) -> str | None:
        """
        Handle a string like "/command args".
        Returns a reply string or None if not a command.

        Handlers taking a third parameter receive `today` (defaults to the local date).
        """
        if not line.startswith("/"):
            return None

        parts = line[1:].split()
        if not parts:
            return "Empty command. Use /help to list available commands."

        name = parts[0].lower()
        args = parts[1:]

        handler = self._handlers.get(name)
        if not handler:
            return f"Unknown command: /{name}. Use /help to list available commands."

        try:
            nparams = len(inspect.signature(handler).parameters)
        except (TypeError, ValueError):
            nparams = 3

        try:
            if nparams >= 3:
                h3 = cast(CommandHandler3, handler)
                return h3(state, args, today or date.today())

            h2 = cast(CommandHandler2, handler)
            return h2(state, args)
        except TodoError as e:
            logger.debug("Command /%s rejected: %s", name, e)
            return f"Error: {e}"

    def build_help(self) -> str:
        lines = ["Available commands:"]
        for name, help_text in self._help.items():
            lines.append(f"  /{name} - {help_text}")
        return "\n".join(lines)


registry = CommandRegistry()


def format_task(task: Task) -> str:
    parts = [f"[{'x' if task.is_completed else ' '}]", f"#{task.id}"]
    if task.priority != Priority.NONE:
        parts.append(f"!{task.priority.value}")
    if task.due_date is not None:
        parts.append(f"@{task.due_date.isoformat()}")
    parts.append(f"({task.project})")
    parts.append(task.text)
    return " ".join(parts)


def _format_list(title: str, tasks: list[Task]) -> str:
    if not tasks:
        return f"{title}: nothing here."
    return "\n".join([f"{title}:"] + [f"  {format_task(t)}" for t in tasks])


def _parse_id(args: list[str]) -> int | None:
    if not args:
        return None
    try:
        return int(args[0].lstrip("#"))
    except ValueError:
        return None


def cmd_help(state: AppState, args: list[str]) -> str:
    return registry.build_help()


def cmd_add(state: AppState, args: list[str]) -> str:
    """
    /add Buy milk !high @2024-01-10 #Errands

    Tokens starting with ! set the priority, @ the due date, # the project.
    Everything else is the task text.
    """
    words: list[str] = []
    options: dict[str, Any] = {}
    for token in args:
        if token.startswith("!") and len(token) > 1:
            options["priority"] = token[1:]
        elif token.startswith("@") and len(token) > 1:
            options["due_date"] = token[1:]
        elif token.startswith("#") and len(token) > 1:
            options["project"] = token[1:]
        else:
            words.append(token)

    task_id = task_api.create_task(
        state.task_store, text=" ".join(words), user_id=state.user_id, **options
    )
    return f"Added #{task_id}."


def cmd_list(state: AppState, args: list[str]) -> str:
    return _format_list("Tasks", task_api.list_for_user(state.task_store, state.user_id))


def cmd_smart(state: AppState, args: list[str]) -> str:
    return _format_list("Smart order", task_api.list_smart_sorted(state.task_store, state.user_id))


def cmd_today(state: AppState, args: list[str], today: date) -> str:
    """Overdue first, then due today, then the remaining pending tasks and the completed ones."""
    tasks = task_api.list_smart_sorted(state.task_store, state.user_id)
    overdue = filter_by_due_status(tasks, DueStatus.OVERDUE, today)
    due_today = filter_by_due_status(tasks, DueStatus.DUE_TODAY, today)
    upcoming = filter_by_due_status(tasks, DueStatus.UPCOMING, today)
    completed = [t for t in tasks if t.is_completed]

    sections = [f"Today, {today.isoformat()}"]
    if overdue:
        sections.append(_format_list(f"Overdue ({len(overdue)})", overdue))
    sections.append(_format_list("Due today", due_today))
    sections.append(_format_list("Upcoming", upcoming))
    if completed:
        sections.append(_format_list(f"Completed ({len(completed)})", completed))
    return "\n".join(sections)


def cmd_priority(state: AppState, args: list[str]) -> str:
    if not args:
        return "Usage: /priority high|medium|low|none"
    tasks = task_api.list_by_priority(state.task_store, state.user_id, args[0])
    return _format_list(f"Priority {args[0].lower()}", tasks)


def cmd_due(state: AppState, args: list[str], today: date) -> str:
    """/due [YYYY-MM-DD]; without a date shows tasks due today."""
    target = args[0] if args else today.isoformat()
    tasks = task_api.list_by_due_date(state.task_store, state.user_id, target)
    return _format_list(f"Due {target}", tasks)


def cmd_show(state: AppState, args: list[str]) -> str:
    """/show <id>: the full record as JSON."""
    task_id = _parse_id(args)
    if task_id is None:
        return "Usage: /show <id>"
    task = task_api.get_task(state.task_store, task_id)
    return json.dumps(task.to_dict(), indent=2, ensure_ascii=False)


def cmd_done(state: AppState, args: list[str]) -> str:
    task_id = _parse_id(args)
    if task_id is None:
        return "Usage: /done <id>"
    completed = task_api.toggle_completion(state.task_store, task_id)
    return f"#{task_id} marked {'done' if completed else 'not done'}."


_EDIT_KEYS = {
    "text": "text",
    "priority": "priority",
    "due": "due_date",
    "project": "project",
    "done": "is_completed",
}


def _parse_edit_fields(tokens: list[str]) -> dict[str, Any]:
    """
    key=value pairs; a token without "=" continues the previous value (for multi-word text).
    An empty value ("due=") is an explicit clear, not an omission.
    """
    fields: dict[str, Any] = {}
    last: str | None = None
    for token in tokens:
        key, sep, value = token.partition("=")
        if sep and key.lower() in _EDIT_KEYS:
            last = _EDIT_KEYS[key.lower()]
            fields[last] = value
        elif last is not None:
            fields[last] = f"{fields[last]} {token}".strip()
        else:
            raise TodoError(f"Expected key=value, got {token!r}")

    if "is_completed" in fields:
        fields["is_completed"] = str(fields["is_completed"]).lower() in {"1", "true", "yes", "y"}
    return fields


def cmd_edit(state: AppState, args: list[str]) -> str:
    """/edit <id> text=... priority=... due=YYYY-MM-DD project=... done=yes|no"""
    task_id = _parse_id(args)
    if task_id is None or len(args) < 2:
        return "Usage: /edit <id> text=... priority=... due=YYYY-MM-DD project=... done=yes|no"
    patch = patch_from_mapping(_parse_edit_fields(args[1:]))
    task_api.update_task(state.task_store, task_id, patch)
    return f"#{task_id} updated."


def cmd_rm(state: AppState, args: list[str]) -> str:
    task_id = _parse_id(args)
    if task_id is None:
        return "Usage: /rm <id>"
    if task_api.delete_task(state.task_store, task_id):
        return f"#{task_id} deleted."
    return f"#{task_id} does not exist."


def cmd_stats(state: AppState, args: list[str], today: date) -> str:
    s = task_api.get_stats(state.task_store, state.user_id, today)
    return (
        "Productivity:\n"
        f"  Total: {s.total}  Completed: {s.completed}  Pending: {s.pending}\n"
        f"  Completion rate: {s.completion_rate}%\n"
        f"  Priority: high={s.priority.high} medium={s.priority.medium} "
        f"low={s.priority.low} none={s.priority.none}\n"
        f"  Due: overdue={s.due_status.overdue} today={s.due_status.due_today} "
        f"upcoming={s.due_status.upcoming}"
    )


def cmd_exit(state: AppState, args: list[str]) -> str:
    return "Bye."


registry.register("help", cmd_help, help_text="Show available commands.", aliases=["h", "?"])
registry.register("add", cmd_add, help_text="Add a task: /add text [!priority] [@YYYY-MM-DD] [#project].")
registry.register("list", cmd_list, help_text="All tasks, newest first.", aliases=["ls"])
registry.register("smart", cmd_smart, help_text="Tasks in smart order.")
registry.register("today", cmd_today, help_text="Overdue / due today / upcoming / completed.")
registry.register("priority", cmd_priority, help_text="Tasks with a priority: /priority high.")
registry.register("due", cmd_due, help_text="Tasks due on a date: /due [YYYY-MM-DD].")
registry.register("show", cmd_show, help_text="Show one task as JSON: /show <id>.")
registry.register("done", cmd_done, help_text="Toggle completion: /done <id>.", aliases=["toggle"])
registry.register("edit", cmd_edit, help_text="Edit fields: /edit <id> key=value ...")
registry.register("rm", cmd_rm, help_text="Delete a task: /rm <id>.", aliases=["delete"])
registry.register("stats", cmd_stats, help_text="Productivity summary.")
registry.register("exit", cmd_exit, help_text="Leave the console.", aliases=["quit"])
