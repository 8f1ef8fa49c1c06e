# tests/fakes.py

from __future__ import annotations

from dataclasses import replace
from datetime import date
from typing import Any

from smart_todo.tasks.task_models import DEFAULT_PROJECT, NewTask, Priority, Reminder, Task


def make_task(
    task_id: int,
    *,
    text: str = "task",
    user_id: str = "u1",
    is_completed: bool = False,
    created_at: int = 1_700_000_000_000,
    priority: Priority = Priority.NONE,
    due_date: date | None = None,
    reminders: tuple[Reminder, ...] = (),
    project: str = DEFAULT_PROJECT,
) -> Task:
    return Task(
        id=task_id,
        user_id=user_id,
        text=text,
        is_completed=is_completed,
        created_at=created_at,
        priority=priority,
        due_date=due_date,
        reminders=reminders,
        project=project,
    )


class StoreDown(RuntimeError):
    pass


class FakeTaskRepo:
    """
    In-memory TaskRepo.

    Keeps task_api tests about operation semantics (presence vs. value, skips, not-found)
    rather than SQLite. `fail_on_patch` makes patch_task raise for one id to simulate a
    store failure part-way through a batch.
    """

    def __init__(self, tasks: list[Task] | None = None) -> None:
        self.tasks: dict[int, Task] = {t.id: t for t in tasks or []}
        self._next_id = max(self.tasks, default=0) + 1
        self.patch_calls: list[tuple[int, dict[str, Any]]] = []
        self.fail_on_patch: int | None = None

    def insert_task(self, new_task: NewTask) -> int:
        task_id = self._next_id
        self._next_id += 1
        self.tasks[task_id] = Task(
            id=task_id,
            user_id=new_task.user_id,
            text=new_task.text,
            is_completed=new_task.is_completed,
            created_at=new_task.created_at,
            priority=new_task.priority,
            due_date=new_task.due_date,
            reminders=new_task.reminders,
            project=new_task.project,
        )
        return task_id

    def get_task(self, task_id: int) -> Task | None:
        return self.tasks.get(task_id)

    def patch_task(self, task_id: int, fields: dict[str, Any]) -> None:
        if task_id == self.fail_on_patch:
            raise StoreDown(f"store unavailable for {task_id}")
        self.patch_calls.append((task_id, dict(fields)))
        t = self.tasks.get(task_id)
        if t is None or not fields:
            return
        self.tasks[task_id] = replace(t, **fields)

    def delete_task(self, task_id: int) -> bool:
        return self.tasks.pop(task_id, None) is not None

    def list_tasks_for_user(
        self,
        user_id: str,
        *,
        priority: Priority | None = None,
        due_date: date | None = None,
    ) -> list[Task]:
        out = [
            t
            for t in self.tasks.values()
            if t.user_id == user_id
            and (priority is None or t.priority == priority)
            and (due_date is None or t.due_date == due_date)
        ]
        out.sort(key=lambda t: (t.created_at, t.id), reverse=True)
        return out

    def count_tasks(self) -> int:
        return len(self.tasks)

    def close(self) -> None:
        return
