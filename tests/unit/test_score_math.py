import math

import pytest

from engine.score_math import (
    mean,
    normalize_score,
    round_score,
    should_auto_submit,
    time_efficiency_score,
    time_penalty,
    weighted_answer_score,
)
from engine.types import RubricBreakdown, time_limit_for


def test_time_limits_per_difficulty():
    assert time_limit_for("Easy") == 120
    assert time_limit_for("Medium") == 180
    assert time_limit_for("Hard") == 240


def test_overtime_efficiency_and_penalty():
    assert time_efficiency_score(140, 120) == pytest.approx(83.33, abs=0.01)
    assert time_penalty(140, 120) == -10


def test_within_limit_is_free():
    assert time_efficiency_score(120, 120) == 100.0
    assert time_efficiency_score(0, 120) == 100.0
    assert time_penalty(119.9, 120) == 0.0


def test_penalty_counts_full_intervals_only():
    assert time_penalty(129.9, 120) == 0.0
    assert time_penalty(130, 120) == -5
    assert time_penalty(1000, 120) == -20


def test_efficiency_floors_at_zero():
    assert time_efficiency_score(240, 120) == 0.0
    assert time_efficiency_score(500, 120) == 0.0


def test_auto_submit_threshold():
    assert should_auto_submit(180, 120) is True
    assert should_auto_submit(179, 120) is False


def test_round_score_half_up_and_idempotent():
    assert round_score(2.25) == 2.3
    assert round_score(83.3333) == 83.3
    assert round_score(0.05) == 0.1
    for value in (12.34, 50.05, 99.95, 0.0):
        once = round_score(value)
        assert round_score(once) == once


def test_round_score_zero_decimals():
    assert round_score(125.5, 0) == 126
    assert round_score(124.4, 0) == 124


def test_normalize_clamps():
    assert normalize_score(-4) == 0.0
    assert normalize_score(104) == 100.0
    assert normalize_score(55.5) == 55.5


def test_weighted_score_applies_penalty_and_clamps():
    perfect = RubricBreakdown(accuracy=100, clarity=100, depth=100, relevance=100, time_efficiency=100)
    assert weighted_answer_score(perfect, 0) == 100.0
    assert weighted_answer_score(perfect, -10) == 90.0
    zero = RubricBreakdown(accuracy=0, clarity=0, depth=0, relevance=0, time_efficiency=0)
    assert weighted_answer_score(zero, -20) == 0.0


def test_weighted_score_uses_rubric_weights():
    breakdown = RubricBreakdown(accuracy=80, clarity=60, depth=70, relevance=90, time_efficiency=100)
    expected = 0.30 * 80 + 0.20 * 60 + 0.25 * 70 + 0.15 * 90 + 0.10 * 100
    assert weighted_answer_score(breakdown, 0) == pytest.approx(expected)


def test_rejects_non_finite_and_bad_limits():
    with pytest.raises(ValueError):
        time_penalty(math.nan, 120)
    with pytest.raises(ValueError):
        time_efficiency_score(10, 0)
    with pytest.raises(ValueError):
        normalize_score(math.inf)


def test_mean_default():
    assert mean([]) == 0.0
    assert mean([], 50.0) == 50.0
    assert mean([10, 20]) == 15.0
