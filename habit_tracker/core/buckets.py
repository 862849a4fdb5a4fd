from __future__ import annotations

from dataclasses import dataclass, field
from datetime import timedelta
from typing import Any, Generic, TypeVar

from .recurrence import is_due, to_utc_naive

T = TypeVar("T")

DEFAULT_ARCHIVE_AFTER_DAYS = 7


@dataclass(slots=True)
class TaskBuckets(Generic[T]):
    active: list[T] = field(default_factory=list)
    completed: list[T] = field(default_factory=list)
    archived: list[T] = field(default_factory=list)


def _completed_age(task: Any, today: Any) -> timedelta | None:
    completed_at = to_utc_naive(getattr(task, "completed_at", None))
    now = to_utc_naive(today)
    if completed_at is None or now is None:
        return None
    return now - completed_at


def is_completed_within_days(task: Any, days: int, today: Any) -> bool:
    age = _completed_age(task, today)
    return age is not None and age <= timedelta(days=days)


def is_completed_older_than(task: Any, days: int, today: Any) -> bool:
    age = _completed_age(task, today)
    return age is not None and age > timedelta(days=days)


def split_tasks(tasks: list[T], today: Any, archive_after_days: int = DEFAULT_ARCHIVE_AFTER_DAYS) -> TaskBuckets[T]:
    """Active = open and due today; completed = done recently; archived = done long ago."""
    buckets: TaskBuckets[T] = TaskBuckets()
    for task in tasks:
        if getattr(task, "completed", False):
            if is_completed_within_days(task, archive_after_days, today):
                buckets.completed.append(task)
            elif is_completed_older_than(task, archive_after_days, today):
                buckets.archived.append(task)
        elif is_due(task, today):
            buckets.active.append(task)
    return buckets
