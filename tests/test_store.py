from __future__ import annotations

from datetime import timedelta

import pytest
from sqlalchemy.exc import OperationalError
from sqlmodel import select

from habit_tracker.models import Task, TaskCompletion, User
from habit_tracker.schemas.task import TaskCreate
from habit_tracker.store import StoreError, TaskNotFoundError, TaskStore

from .fakes import NOW


def _completions(session, task_id):
    return session.exec(
        select(TaskCompletion).where(TaskCompletion.task_id == task_id).order_by(TaskCompletion.completed_at)
    ).all()


def test_create_task_applies_defaults(session, user) -> None:
    store = TaskStore(session)
    task = store.create_task(user.id, TaskCreate(title="  Stretch  ", repeat=None, priority=None))

    assert task.title == "Stretch"
    assert task.repeat == "daily"
    assert task.priority == 1.0
    assert task.completed is False
    assert task.completed_at is None
    assert task.recent_completions == 0


def test_toggle_on_stamps_task_and_appends_log(session, user) -> None:
    store = TaskStore(session)
    created = store.create_task(user.id, TaskCreate(title="Read"))

    toggled = store.toggle_completion(user.id, created.id, now=NOW)

    assert toggled.completed is True
    assert toggled.completed_at == NOW
    assert toggled.recent_completions == 1
    log = _completions(session, created.id)
    assert [c.completed_at for c in log] == [NOW]
    assert log[0].user_id == user.id


def test_toggle_off_clears_task_and_removes_latest_log_row(session, user) -> None:
    store = TaskStore(session)
    created = store.create_task(user.id, TaskCreate(title="Read"))
    earlier = NOW - timedelta(days=2)
    session.add(TaskCompletion(task_id=created.id, user_id=user.id, completed_at=earlier))
    session.commit()

    store.toggle_completion(user.id, created.id, now=NOW)
    assert len(_completions(session, created.id)) == 2

    reopened = store.toggle_completion(user.id, created.id, now=NOW)

    assert reopened.completed is False
    assert reopened.completed_at is None
    assert reopened.recent_completions == 1
    assert [c.completed_at for c in _completions(session, created.id)] == [earlier]


def test_recent_completions_only_count_trailing_window(session, user) -> None:
    store = TaskStore(session)
    created = store.create_task(user.id, TaskCreate(title="Walk"))
    for days_ago in (1, 10, 29, 31, 45):
        session.add(
            TaskCompletion(task_id=created.id, user_id=user.id, completed_at=NOW - timedelta(days=days_ago))
        )
    session.commit()

    [task] = store.list_tasks(user.id, now=NOW)
    assert task.recent_completions == 3


def test_list_recurring_tasks_skips_none_and_null(session, user) -> None:
    session.add(Task(user_id=user.id, title="daily", repeat="daily", created_at=NOW - timedelta(days=3)))
    session.add(Task(user_id=user.id, title="none", repeat="none", created_at=NOW - timedelta(days=2)))
    session.add(Task(user_id=user.id, title="null", repeat=None, created_at=NOW - timedelta(days=1)))
    session.add(Task(user_id=user.id, title="weekly", repeat="weekly_mon", created_at=NOW))
    session.commit()

    store = TaskStore(session)
    assert [t.title for t in store.list_recurring_tasks(user.id, now=NOW)] == ["weekly", "daily"]
    assert len(store.list_tasks(user.id, now=NOW)) == 4


def test_tasks_are_scoped_to_their_owner(session, user) -> None:
    other = User(email="other@example.com", hashed_password="x")
    session.add(other)
    session.commit()

    store = TaskStore(session)
    theirs = store.create_task(other.id, TaskCreate(title="Theirs"))

    assert store.list_tasks(user.id) == []
    with pytest.raises(TaskNotFoundError):
        store.get_task(user.id, theirs.id)
    with pytest.raises(TaskNotFoundError):
        store.toggle_completion(user.id, theirs.id)


def test_list_completions_joins_titles_newest_first(session, user) -> None:
    store = TaskStore(session)
    read = store.create_task(user.id, TaskCreate(title="Read"))
    walk = store.create_task(user.id, TaskCreate(title="Walk"))
    store.toggle_completion(user.id, read.id, now=NOW - timedelta(days=1))
    store.toggle_completion(user.id, walk.id, now=NOW)
    session.add(TaskCompletion(task_id=walk.id, user_id=user.id, completed_at=NOW - timedelta(days=90)))
    session.commit()

    entries = store.list_completions(user.id, since=NOW - timedelta(days=60))

    assert [(e.task_title, e.completed_at) for e in entries] == [
        ("Walk", NOW),
        ("Read", NOW - timedelta(days=1)),
    ]


def test_read_failures_surface_as_store_error(session, user, monkeypatch) -> None:
    def _boom(*args, **kwargs):
        raise OperationalError("SELECT", {}, Exception("database is locked"))

    monkeypatch.setattr(session, "exec", _boom)

    with pytest.raises(StoreError) as excinfo:
        TaskStore(session).list_tasks(user.id)
    assert excinfo.value.message == "Failed to load tasks"


def test_failed_toggle_rolls_back_both_steps(session, user, monkeypatch) -> None:
    store = TaskStore(session)
    created = store.create_task(user.id, TaskCreate(title="Read"))

    def _boom():
        raise OperationalError("COMMIT", {}, Exception("disk I/O error"))

    monkeypatch.setattr(session, "commit", _boom)
    with pytest.raises(StoreError) as excinfo:
        store.toggle_completion(user.id, created.id, now=NOW)
    assert excinfo.value.message == "Failed to toggle task completion"
    monkeypatch.undo()

    row = session.get(Task, created.id)
    assert row.completed is False
    assert row.completed_at is None
    assert _completions(session, created.id) == []


def test_timestamps_round_trip_as_naive_utc(session, user) -> None:
    store = TaskStore(session)
    created = store.create_task(user.id, TaskCreate(title="Read"))
    store.toggle_completion(user.id, created.id, now=NOW)
    session.expire_all()

    row = session.get(Task, created.id)
    assert row.completed_at == NOW
    assert row.completed_at.tzinfo is None
    assert row.created_at.tzinfo is None
    [log] = _completions(session, created.id)
    assert log.completed_at == NOW
    assert log.completed_at.tzinfo is None
    assert session.get(User, user.id).created_at.tzinfo is None


def test_row_without_repeat_stays_null(session, user) -> None:
    session.add(Task(user_id=user.id, title="someday", created_at=NOW))
    session.commit()
    session.expire_all()

    [row] = session.exec(select(Task).where(Task.user_id == user.id)).all()
    assert row.repeat is None
    assert TaskStore(session).list_recurring_tasks(user.id, now=NOW) == []
