# tests/test_task_api.py

from __future__ import annotations

from dataclasses import replace
from datetime import date

import pytest

from smart_todo.tasks import task_api
from smart_todo.tasks.errors import TaskNotFoundError, ValidationError
from smart_todo.tasks.task_models import Priority, TaskPatch
from smart_todo.tasks.task_store import TaskStore

from .fakes import FakeTaskRepo, StoreDown, make_task


def test_create_returns_id_and_stores_defaults(repo: FakeTaskRepo) -> None:
    task_id = task_api.create_task(repo, text="Buy milk", user_id="u1")

    t = task_api.get_task(repo, task_id)
    assert t.priority == Priority.NONE
    assert t.project == "Inbox"
    assert t.reminders == ()
    assert t.created_at > 0


def test_create_validation_happens_before_any_write(repo: FakeTaskRepo) -> None:
    with pytest.raises(ValidationError):
        task_api.create_task(repo, text="x", user_id="u1", priority="urgent")
    assert repo.count_tasks() == 0


def test_update_only_touches_supplied_fields(repo: FakeTaskRepo) -> None:
    repo.tasks[1] = make_task(1, text="old", priority=Priority.LOW, due_date=date(2024, 1, 1))

    task_api.update_task(repo, 1, TaskPatch(text="new"))

    t = repo.tasks[1]
    assert t.text == "new"
    assert t.priority == Priority.LOW
    assert t.due_date == date(2024, 1, 1)


def test_update_can_clear_due_date(repo: FakeTaskRepo) -> None:
    repo.tasks[1] = make_task(1, due_date=date(2024, 1, 1))

    task_api.update_task(repo, 1, TaskPatch(due_date=""))

    assert repo.tasks[1].due_date is None


def test_update_unknown_id_raises_not_found(repo: FakeTaskRepo) -> None:
    with pytest.raises(TaskNotFoundError) as exc:
        task_api.update_task(repo, 42, TaskPatch(text="x"))
    assert exc.value.task_id == 42


def test_toggle_twice_restores_original_state(repo: FakeTaskRepo) -> None:
    original = make_task(1, priority=Priority.HIGH)
    repo.tasks[1] = original

    assert task_api.toggle_completion(repo, 1) is True
    assert task_api.toggle_completion(repo, 1) is False
    assert repo.tasks[1] == original


def test_toggle_unknown_id_raises_not_found(repo: FakeTaskRepo) -> None:
    with pytest.raises(TaskNotFoundError):
        task_api.toggle_completion(repo, 7)


def test_delete_is_idempotent(repo: FakeTaskRepo) -> None:
    repo.tasks[1] = make_task(1)
    assert task_api.delete_task(repo, 1) is True
    assert task_api.delete_task(repo, 1) is False


def test_batch_update_skips_unknown_ids_without_raising(repo: FakeTaskRepo) -> None:
    repo.tasks[1] = make_task(1)
    repo.tasks[2] = make_task(2, text="untouched")
    before_2 = repo.tasks[2]

    report = task_api.batch_update(
        repo,
        [(1, TaskPatch(is_completed=True, priority="high")), (99, TaskPatch(priority="low"))],
    )

    assert report.applied == [1]
    assert report.skipped == [99]
    assert repo.tasks[1].is_completed is True
    assert repo.tasks[1].priority == Priority.HIGH
    assert repo.tasks[2] == before_2
    assert 99 not in repo.tasks


def test_batch_update_validates_everything_before_writing(repo: FakeTaskRepo) -> None:
    repo.tasks[1] = make_task(1)

    with pytest.raises(ValidationError):
        task_api.batch_update(repo, [(1, TaskPatch(project="Work")), (1, TaskPatch(priority="?"))])

    assert repo.patch_calls == []
    assert repo.tasks[1].project == "Inbox"


def test_batch_update_is_not_atomic(repo: FakeTaskRepo) -> None:
    repo.tasks[1] = make_task(1)
    repo.tasks[2] = make_task(2)
    repo.tasks[3] = make_task(3)
    repo.fail_on_patch = 2

    with pytest.raises(StoreDown):
        task_api.batch_update(repo, [(i, TaskPatch(project="Work")) for i in (1, 2, 3)])

    assert repo.tasks[1].project == "Work"
    assert repo.tasks[3].project == "Inbox"


def test_reads_are_scoped_and_filtered(repo: FakeTaskRepo) -> None:
    repo.tasks = {
        1: make_task(1, priority=Priority.LOW, due_date=date(2024, 1, 10), created_at=1),
        2: make_task(2, priority=Priority.HIGH, created_at=2),
        3: make_task(3, is_completed=True, created_at=3),
        4: make_task(4, user_id="u2", priority=Priority.HIGH, created_at=4),
    }

    assert [t.id for t in task_api.list_for_user(repo, "u1")] == [3, 2, 1]
    assert [t.id for t in task_api.list_smart_sorted(repo, "u1")] == [2, 1, 3]
    assert [t.id for t in task_api.list_by_priority(repo, "u1", "high")] == [2]
    assert [t.id for t in task_api.list_by_due_date(repo, "u1", "2024-01-10")] == [1]
    assert task_api.list_by_due_date(repo, "u1", "") == []


def test_get_stats_uses_reference_date(repo: FakeTaskRepo) -> None:
    repo.tasks = {
        1: make_task(1, due_date=date(2024, 1, 4)),
        2: make_task(2, due_date=date(2024, 1, 5)),
    }

    s = task_api.get_stats(repo, "u1", date(2024, 1, 5))
    assert (s.due_status.overdue, s.due_status.due_today) == (1, 1)

    s_next_day = task_api.get_stats(repo, "u1", date(2024, 1, 6))
    assert (s_next_day.due_status.overdue, s_next_day.due_status.due_today) == (2, 0)


def test_operations_against_sqlite_store(store: TaskStore) -> None:
    a = task_api.create_task(store, text="A", user_id="u1", priority="low", due_date="2024-01-10")
    b = task_api.create_task(store, text="B", user_id="u1", priority="high")
    c = task_api.create_task(store, text="C", user_id="u1")
    task_api.toggle_completion(store, c)

    assert [t.text for t in task_api.list_smart_sorted(store, "u1")] == ["B", "A", "C"]

    report = task_api.batch_update(store, [(a, TaskPatch(due_date=None)), (b + 100, TaskPatch(text="x"))])
    assert report.skipped == [b + 100]
    assert task_api.get_task(store, a).due_date is None

    stats = task_api.get_stats(store, "u1", date(2024, 1, 5))
    assert (stats.total, stats.completed, stats.completion_rate) == (3, 1, 33)


def test_toggle_leaves_other_fields_alone(repo: FakeTaskRepo) -> None:
    repo.tasks[1] = make_task(1, text="keep", project="Home")
    task_api.toggle_completion(repo, 1)
    assert repo.tasks[1] == replace(make_task(1, text="keep", project="Home"), is_completed=True)


def test_get_stats_accepts_iso_string_reference_date(repo: FakeTaskRepo) -> None:
    repo.tasks = {
        1: make_task(1, due_date=date(2024, 1, 4)),
        2: make_task(2, due_date=date(2024, 1, 5)),
        3: make_task(3),
    }

    from_string = task_api.get_stats(repo, "u1", "2024-01-05")

    assert from_string == task_api.get_stats(repo, "u1", date(2024, 1, 5))
    assert (from_string.due_status.overdue, from_string.due_status.due_today) == (1, 1)


@pytest.mark.parametrize("bad", ["", "05/01/2024"])
def test_get_stats_rejects_unusable_reference_date(repo: FakeTaskRepo, bad: str) -> None:
    repo.tasks = {1: make_task(1)}  # no due dates: must still be rejected

    with pytest.raises(ValidationError):
        task_api.get_stats(repo, "u1", bad)


def test_empty_update_writes_nothing_but_still_checks_the_id(repo: FakeTaskRepo) -> None:
    repo.tasks[1] = make_task(1)

    task_api.update_task(repo, 1, TaskPatch())
    assert repo.patch_calls == []

    with pytest.raises(TaskNotFoundError):
        task_api.update_task(repo, 2, TaskPatch())
