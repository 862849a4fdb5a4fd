"""
Weighted reminder selection.

Among the tasks due today, pick one at random with probability proportional to

    (1 / (1 + recent_completions)) * priority

so neglected and high-priority tasks come up more often. The random source is
injected (anything with a ``random()`` method returning a float in [0, 1)).
"""

from __future__ import annotations

import random as _random
from collections.abc import Iterable, Sequence
from typing import Any, Protocol, TypeVar

from .recurrence import is_due

T = TypeVar("T")

DEFAULT_PRIORITY = 1.0


class RandomSource(Protocol):
    def random(self) -> float: ...


def task_weight(task: Any) -> float:
    recent = getattr(task, "recent_completions", None) or 0
    priority = getattr(task, "priority", None)
    if priority is None:
        priority = DEFAULT_PRIORITY
    return (1.0 / (1 + recent)) * float(priority)


def pick(candidates: Iterable[T], today: Any, rng: RandomSource | None = None) -> T | None:
    due = [task for task in candidates if is_due(task, today)]
    if not due:
        return None

    weighted = [(task, task_weight(task)) for task in due]
    total_weight = sum(weight for _, weight in weighted)
    if total_weight <= 0:
        return weighted[-1][0]

    source = rng if rng is not None else _random
    target = source.random() * total_weight

    cumulative = 0.0
    for task, weight in weighted:
        cumulative += weight
        if target <= cumulative:
            return task

    return weighted[-1][0]


def pick_uniform(tasks: Sequence[T], rng: RandomSource | None = None) -> T | None:
    """Uniform choice over all tasks, ignoring due-ness and weights."""
    if not tasks:
        return None
    source = rng if rng is not None else _random
    index = int(source.random() * len(tasks))
    return tasks[min(index, len(tasks) - 1)]
