from __future__ import annotations

import random
from collections import Counter
from types import SimpleNamespace

import pytest

from habit_tracker.core.selection import pick, pick_uniform, task_weight

from .fakes import NOW, ScriptedRandom


def make_task(task_id: str, repeat="daily", recent_completions=0, priority=1.0):
    return SimpleNamespace(
        id=task_id,
        repeat=repeat,
        created_at=NOW,
        recent_completions=recent_completions,
        priority=priority,
    )


def test_weight_formula() -> None:
    assert task_weight(make_task("a", recent_completions=0, priority=1.0)) == pytest.approx(1.0)
    assert task_weight(make_task("a", recent_completions=3, priority=2.0)) == pytest.approx(0.5)
    assert task_weight(make_task("a", recent_completions=1, priority=None)) == pytest.approx(0.5)
    assert task_weight(make_task("a", recent_completions=None, priority=1.5)) == pytest.approx(1.5)
    assert task_weight(SimpleNamespace(repeat="daily")) == pytest.approx(1.0)


def test_returns_none_when_nothing_is_due() -> None:
    assert pick([make_task("a", repeat="none"), make_task("b", repeat=None)], NOW) is None
    assert pick([], NOW) is None


def test_small_draw_hits_first_candidate_in_input_order() -> None:
    low = make_task("low", recent_completions=0)
    high = make_task("high", recent_completions=4)
    assert pick([low, high], NOW, rng=ScriptedRandom(0.1)).id == "low"


def test_draw_walks_cumulative_weights() -> None:
    # weights 1/6 and 1: total 7/6, 0.5 * 7/6 lands past the first bucket
    high = make_task("high", recent_completions=5)
    low = make_task("low", recent_completions=0)
    assert pick([high, low], NOW, rng=ScriptedRandom(0.5)).id == "low"
    assert pick([high, low], NOW, rng=ScriptedRandom(0.1)).id == "high"


def test_draw_equal_to_cumulative_weight_selects_that_candidate() -> None:
    a, b = make_task("a"), make_task("b")
    # total 2.0, target 1.0 == cumulative weight of "a"
    assert pick([a, b], NOW, rng=ScriptedRandom(0.5)).id == "a"


def test_lower_completion_count_is_favoured() -> None:
    high = make_task("high", recent_completions=5)
    low = make_task("low", recent_completions=0)
    draws = [i / 100 for i in range(100)]
    counts = Counter(pick([high, low], NOW, rng=ScriptedRandom(u)).id for u in draws)

    # "high" owns draws u <= 1/7 of the unit interval
    assert counts == {"high": 15, "low": 85}


def test_higher_priority_is_favoured() -> None:
    normal = make_task("normal", priority=1.0)
    urgent = make_task("urgent", priority=3.0)
    draws = [i / 100 for i in range(100)]
    counts = Counter(pick([normal, urgent], NOW, rng=ScriptedRandom(u)).id for u in draws)
    assert counts["urgent"] > counts["normal"]
    assert counts["normal"] == 26  # u <= 1/4


def test_never_returns_a_task_that_is_not_due() -> None:
    candidates = [
        make_task("off", repeat="none", priority=100.0),
        make_task("tuesday", repeat="weekly_tue", priority=100.0),
        make_task("on", repeat="daily"),
        make_task("goal", repeat="weekly_3x"),
    ]
    rng = random.Random(1234)
    chosen = {pick(candidates, NOW, rng=rng).id for _ in range(200)}
    assert chosen <= {"on", "goal"}
    assert chosen == {"on", "goal"}


def test_zero_total_weight_falls_back_to_last_candidate() -> None:
    candidates = [make_task("a", priority=0.0), make_task("b", priority=0.0), make_task("c", repeat="none")]
    rng = ScriptedRandom(0.0)
    assert pick(candidates, NOW, rng=rng).id == "b"
    assert rng.calls == 0


def test_draw_past_total_falls_back_to_last_candidate() -> None:
    candidates = [make_task("a"), make_task("b")]
    assert pick(candidates, NOW, rng=ScriptedRandom(2.0)).id == "b"


def test_seeded_sources_reproduce_the_same_choice() -> None:
    candidates = [make_task(str(i), recent_completions=i % 3, priority=1 + i / 10) for i in range(10)]
    first = [pick(candidates, NOW, rng=random.Random(7)).id for _ in range(5)]
    second = [pick(candidates, NOW, rng=random.Random(7)).id for _ in range(5)]
    assert first == second


def test_pick_uniform_ignores_due_state_and_weights() -> None:
    tasks = [make_task("a", repeat="none"), make_task("b", priority=0.0), make_task("c")]
    assert pick_uniform(tasks, rng=ScriptedRandom(0.0)).id == "a"
    assert pick_uniform(tasks, rng=ScriptedRandom(0.5)).id == "b"
    assert pick_uniform(tasks, rng=ScriptedRandom(0.99)).id == "c"
    assert pick_uniform([], rng=ScriptedRandom(0.5)) is None
