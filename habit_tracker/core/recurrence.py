"""
Recurrence evaluation.

A task's ``repeat`` string decides whether it shows up on a given day:

- ``none`` / null / unknown  -> never due
- ``daily``                  -> always due
- ``every_N_days``           -> due when whole days since creation % N == 0
- ``weekly_mon,wed,fri``     -> due when today's weekday abbreviation is listed
- ``weekly_3x``              -> weekly goal, always due (progress is not counted)

All calendar arithmetic happens on naive UTC datetimes. Nothing here raises on
malformed task data; bad input simply means "not due".
"""

from __future__ import annotations

import re
from datetime import date, datetime, timedelta, timezone
from typing import Any

ONE_DAY = timedelta(days=1)

# date.weekday(): Monday == 0
WEEKDAY_NAMES = ("mon", "tue", "wed", "thu", "fri", "sat", "sun")

REPEAT_NONE = "none"
REPEAT_DAILY = "daily"
EVERY_PREFIX = "every_"
WEEKLY_PREFIX = "weekly_"

_EVERY_RE = re.compile(r"^every_(-?\d+)")


def to_utc_naive(value: Any) -> datetime | None:
    """
    Normalize a datetime / date / ISO-8601 string to a naive UTC datetime.

    Returns None when the value cannot be interpreted.
    """
    if value is None:
        return None

    if isinstance(value, str):
        raw = value.strip()
        if raw.endswith("Z"):
            raw = raw[:-1] + "+00:00"
        try:
            value = datetime.fromisoformat(raw)
        except ValueError:
            return None

    if isinstance(value, datetime):
        if value.tzinfo is not None:
            value = value.astimezone(timezone.utc).replace(tzinfo=None)
        return value

    if isinstance(value, date):
        return datetime(value.year, value.month, value.day)

    return None


def days_between(start: Any, end: Any) -> int:
    """Whole days from start to end, floored (2024-08-01T05:00 -> 2024-08-04T03:00 is 2)."""
    start_dt = to_utc_naive(start)
    end_dt = to_utc_naive(end)
    if start_dt is None or end_dt is None:
        raise ValueError(f"cannot compute days between {start!r} and {end!r}")
    return (end_dt - start_dt) // ONE_DAY


def weekday_abbreviation(day: Any) -> str:
    dt = to_utc_naive(day)
    if dt is None:
        raise ValueError(f"not a calendar instant: {day!r}")
    return WEEKDAY_NAMES[dt.weekday()]


def parse_every_n_days(repeat: str) -> int | None:
    """Interval of an ``every_N_days`` pattern, or None when missing / non-positive."""
    m = _EVERY_RE.match(repeat)
    if not m:
        return None
    n = int(m.group(1))
    return n if n > 0 else None


def is_weekly_goal(repeat: str) -> bool:
    return repeat.startswith(WEEKLY_PREFIX) and repeat.endswith("x")


def is_recurring(repeat: str | None) -> bool:
    return bool(repeat) and repeat != REPEAT_NONE


def is_due(task: Any, today: Any) -> bool:
    """
    Decide whether ``task`` is due on ``today``.

    ``task`` is anything exposing ``repeat`` and ``created_at`` attributes
    (ORM row, API schema, dataclass).
    """
    repeat = getattr(task, "repeat", None)

    if not isinstance(repeat, str) or not is_recurring(repeat):
        return False
    if repeat == REPEAT_DAILY:
        return True

    if repeat.startswith(EVERY_PREFIX):
        interval = parse_every_n_days(repeat)
        if interval is None:
            return False
        created = getattr(task, "created_at", None)
        if to_utc_naive(created) is None or to_utc_naive(today) is None:
            return False
        return days_between(created, today) % interval == 0

    if repeat.startswith(WEEKLY_PREFIX):
        # Weekly goal ("weekly_3x"): shown every day, N is not enforced.
        if is_weekly_goal(repeat):
            return True
        if to_utc_naive(today) is None:
            return False
        days = repeat[len(WEEKLY_PREFIX):].split(",")
        return weekday_abbreviation(today) in days

    return False
