# src/smart_todo/tasks/task_store.py

from __future__ import annotations

import contextlib
import json
import logging
import sqlite3
from datetime import date
from pathlib import Path
from typing import Any

from .task_models import DEFAULT_PROJECT, NewTask, Priority, Reminder, ReminderType, Task

logger = logging.getLogger(__name__)

# Task attribute -> column name. Only these may be patched.
_PATCHABLE_COLUMNS = {
    "text": "text",
    "is_completed": "is_completed",
    "priority": "priority",
    "due_date": "due_date",
    "reminders": "reminders",
    "project": "project",
}


class TaskStore:
    """
    SQLite task store.

    The schema is intentionally simple and migration-safe:
    - create table if missing
    - use PRAGMA table_info to detect missing columns
    - add columns with ALTER TABLE only when needed

    Thread-safety:
    - each method opens its own SQLite connection
    - a single-row UPDATE is atomic; there are no multi-row transactions
    """

    def __init__(self, db_path: str | Path = "tasks.sqlite3") -> None:
        self._db_path = Path(db_path)
        self._db_path.parent.mkdir(parents=True, exist_ok=True)
        self._ensure_schema()
        logger.info("TaskStore ready db=%s total=%s", self._db_path, self.count_tasks())

    def close(self) -> None:
        """Compatibility hook for shutdown (no persistent connections to close)."""
        return

    # ---- low-level helpers ----

    def _get_conn(self) -> sqlite3.Connection:
        conn = sqlite3.connect(str(self._db_path), timeout=30.0)
        conn.row_factory = sqlite3.Row
        self._configure_conn(conn)
        return conn

    @staticmethod
    def _configure_conn(conn: sqlite3.Connection) -> None:
        with contextlib.suppress(sqlite3.DatabaseError):
            conn.execute("PRAGMA journal_mode=WAL")

    def _ensure_schema(self) -> None:
        conn = self._get_conn()
        try:
            cur = conn.cursor()

            cur.execute(
                """
                CREATE TABLE IF NOT EXISTS todos (
                    id INTEGER PRIMARY KEY AUTOINCREMENT,
                    user_id TEXT NOT NULL,
                    text TEXT NOT NULL,
                    is_completed INTEGER NOT NULL DEFAULT 0,
                    created_at INTEGER NOT NULL,
                    priority TEXT NOT NULL DEFAULT 'none',
                    due_date TEXT,
                    reminders TEXT NOT NULL DEFAULT '[]',
                    project TEXT NOT NULL DEFAULT 'Inbox'
                )
                """
            )

            cur.execute("PRAGMA table_info(todos)")
            cols = {row["name"] for row in cur.fetchall()}

            def add_col(name: str, decl: str) -> None:
                if name in cols:
                    return
                cur.execute(f"ALTER TABLE todos ADD COLUMN {name} {decl}")
                logger.info("TaskStore migration: added column %s", name)

            # Older databases predate priority/due dates/reminders/projects.
            add_col("priority", "TEXT NOT NULL DEFAULT 'none'")
            add_col("due_date", "TEXT")
            add_col("reminders", "TEXT NOT NULL DEFAULT '[]'")
            add_col("project", "TEXT NOT NULL DEFAULT 'Inbox'")

            cur.execute("CREATE INDEX IF NOT EXISTS idx_todos_user ON todos(user_id, created_at)")
            cur.execute("CREATE INDEX IF NOT EXISTS idx_todos_due_date ON todos(due_date)")
            cur.execute("CREATE INDEX IF NOT EXISTS idx_todos_priority ON todos(priority)")

            conn.commit()
        finally:
            conn.close()

    @staticmethod
    def _reminders_to_str(reminders: tuple[Reminder, ...]) -> str:
        return json.dumps([r.to_dict() for r in reminders], ensure_ascii=False)

    @staticmethod
    def _str_to_reminders(s: str | None) -> tuple[Reminder, ...]:
        if not s:
            return ()
        items = json.loads(s)
        return tuple(
            Reminder(datetime=str(item["datetime"]), type=ReminderType(item["type"]))
            for item in items
        )

    @staticmethod
    def _due_to_str(due: date | None) -> str | None:
        return due.isoformat() if due is not None else None

    def _to_db_value(self, name: str, value: Any) -> Any:
        if name == "is_completed":
            return 1 if value else 0
        if name == "priority":
            return Priority(value).value
        if name == "due_date":
            return self._due_to_str(value)
        if name == "reminders":
            return self._reminders_to_str(value)
        return value

    def _row_to_task(self, row: sqlite3.Row) -> Task:
        return Task(
            id=int(row["id"]),
            user_id=str(row["user_id"]),
            text=str(row["text"]),
            is_completed=bool(row["is_completed"]),
            created_at=int(row["created_at"]),
            priority=Priority(row["priority"] or Priority.NONE),
            due_date=date.fromisoformat(row["due_date"]) if row["due_date"] else None,
            reminders=self._str_to_reminders(row["reminders"]),
            project=str(row["project"] or DEFAULT_PROJECT),
        )

    # ---- public API ----

    def count_tasks(self) -> int:
        conn = self._get_conn()
        try:
            cur = conn.cursor()
            cur.execute("SELECT COUNT(*) FROM todos")
            (n,) = cur.fetchone()
            return int(n)
        finally:
            conn.close()

    def insert_task(self, new_task: NewTask) -> int:
        conn = self._get_conn()
        try:
            cur = conn.cursor()
            cur.execute(
                """
                INSERT INTO todos(
                    user_id, text, is_completed, created_at,
                    priority, due_date, reminders, project
                )
                VALUES (?, ?, ?, ?, ?, ?, ?, ?)
                """,
                (
                    new_task.user_id,
                    new_task.text,
                    1 if new_task.is_completed else 0,
                    int(new_task.created_at),
                    new_task.priority.value,
                    self._due_to_str(new_task.due_date),
                    self._reminders_to_str(new_task.reminders),
                    new_task.project,
                ),
            )
            conn.commit()
            rowid = cur.lastrowid
            if rowid is None:
                raise RuntimeError("SQLite did not return lastrowid for todos insert")
            task_id = int(rowid)
            logger.debug(
                "Task added id=%s user=%s priority=%s due_date=%s",
                task_id,
                new_task.user_id,
                new_task.priority.value,
                new_task.due_date,
            )
            return task_id
        finally:
            conn.close()

    def get_task(self, task_id: int) -> Task | None:
        conn = self._get_conn()
        try:
            cur = conn.cursor()
            cur.execute("SELECT * FROM todos WHERE id = ?", (int(task_id),))
            row = cur.fetchone()
            return self._row_to_task(row) if row else None
        finally:
            conn.close()

    def patch_task(self, task_id: int, fields: dict[str, Any]) -> None:
        """
        Write the given attributes of one task; everything else is left as is.

        `fields` is keyed by Task attribute name and must already be normalized.
        """
        sets: list[str] = []
        params: list[Any] = []

        for name, value in fields.items():
            column = _PATCHABLE_COLUMNS.get(name)
            if column is None:
                raise KeyError(f"Field is not patchable: {name}")
            sets.append(f"{column} = ?")
            params.append(self._to_db_value(name, value))

        if not sets:
            return

        params.append(int(task_id))
        sql = f"UPDATE todos SET {', '.join(sets)} WHERE id = ?"

        conn = self._get_conn()
        try:
            conn.execute(sql, params)
            conn.commit()
            logger.debug("Task patched id=%s fields=%s", task_id, sorted(fields))
        finally:
            conn.close()

    def delete_task(self, task_id: int) -> bool:
        conn = self._get_conn()
        try:
            cur = conn.cursor()
            cur.execute("DELETE FROM todos WHERE id = ?", (int(task_id),))
            conn.commit()
            deleted = cur.rowcount == 1
            logger.debug("Task delete id=%s deleted=%s", task_id, deleted)
            return deleted
        finally:
            conn.close()

    def list_tasks_for_user(
        self,
        user_id: str,
        *,
        priority: Priority | None = None,
        due_date: date | None = None,
    ) -> list[Task]:
        """
        Tasks owned by `user_id`, newest first.

        Optional equality filters on priority and due date.
        """
        if not user_id:
            return []

        where = ["user_id = ?"]
        params: list[Any] = [user_id]
        if priority is not None:
            where.append("priority = ?")
            params.append(Priority(priority).value)
        if due_date is not None:
            where.append("due_date = ?")
            params.append(due_date.isoformat())

        conn = self._get_conn()
        try:
            cur = conn.cursor()
            cur.execute(
                f"""
                SELECT *
                FROM todos
                WHERE {' AND '.join(where)}
                ORDER BY created_at DESC, id DESC
                """,
                params,
            )
            return [self._row_to_task(r) for r in cur.fetchall()]
        finally:
            conn.close()
