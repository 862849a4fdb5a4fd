"""
Completion history aggregation: streaks, trailing counts and a daily series
for charting. Day keys are ``YYYY-MM-DD`` strings of the UTC calendar day.
"""

from __future__ import annotations

from collections import Counter
from collections.abc import Iterable
from dataclasses import dataclass, field
from datetime import datetime, timedelta
from typing import Any

from .recurrence import ONE_DAY, to_utc_naive

DEFAULT_WINDOW_DAYS = 14


@dataclass(slots=True, frozen=True)
class Streak:
    current: int = 0
    best: int = 0


@dataclass(slots=True, frozen=True)
class DailyCount:
    date: str
    count: int


@dataclass(slots=True)
class CompletionSummary:
    last_7_count: int = 0
    last_30_count: int = 0
    streak: Streak = field(default_factory=Streak)
    daily_series: list[DailyCount] = field(default_factory=list)


def day_key(instant: Any) -> str:
    dt = to_utc_naive(instant)
    if dt is None:
        raise ValueError(f"not a calendar instant: {instant!r}")
    return dt.date().isoformat()


def _parse_day(key: str) -> datetime:
    return datetime.fromisoformat(key)


def difference_in_days(a: str, b: str) -> int:
    return round((_parse_day(a) - _parse_day(b)) / ONE_DAY)


def current_streak(days: set[str], today: Any) -> int:
    """Consecutive days ending today (inclusive); 0 when today has no completion."""
    cursor = to_utc_naive(today)
    if cursor is None:
        return 0

    streak = 0
    while cursor.date().isoformat() in days:
        streak += 1
        cursor -= ONE_DAY
    return streak


def best_streak(days: Iterable[str]) -> int:
    ordered = sorted(set(days))
    if not ordered:
        return 0

    best = current = 1
    for prev, curr in zip(ordered, ordered[1:]):
        if difference_in_days(curr, prev) == 1:
            current += 1
        else:
            current = 1
        best = max(best, current)
    return best


def daily_series(day_counts: dict[str, int], today: Any, window_days: int = DEFAULT_WINDOW_DAYS) -> list[DailyCount]:
    end = to_utc_naive(today)
    if end is None:
        return []
    series = []
    for offset in range(window_days - 1, -1, -1):
        key = (end - timedelta(days=offset)).date().isoformat()
        series.append(DailyCount(date=key, count=day_counts.get(key, 0)))
    return series


def summarize(
    completed_at_values: Iterable[Any],
    now: Any,
    window_days: int = DEFAULT_WINDOW_DAYS,
) -> CompletionSummary:
    """
    Aggregate completion instants into the insights shown next to the task list.

    Trailing counts compare exact instants against ``now - 7d`` / ``now - 30d``;
    streaks and the series work on calendar-day buckets.
    """
    now_dt = to_utc_naive(now)
    if now_dt is None:
        raise ValueError(f"not a calendar instant: {now!r}")

    instants = [dt for dt in (to_utc_naive(v) for v in completed_at_values) if dt is not None]
    day_counts = Counter(dt.date().isoformat() for dt in instants)

    if not instants:
        return CompletionSummary(daily_series=daily_series({}, now_dt, window_days))

    last7_threshold = now_dt - timedelta(days=7)
    last30_threshold = now_dt - timedelta(days=30)
    days = set(day_counts)

    return CompletionSummary(
        last_7_count=sum(1 for dt in instants if dt >= last7_threshold),
        last_30_count=sum(1 for dt in instants if dt >= last30_threshold),
        streak=Streak(current=current_streak(days, now_dt), best=best_streak(days)),
        daily_series=daily_series(day_counts, now_dt, window_days),
    )
