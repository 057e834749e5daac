from datetime import datetime, timedelta, timezone

import pytest

from engine.categories import category_deviations, next_category
from engine.difficulty import next_difficulty
from engine.termination import check_termination, should_continue


START = datetime(2026, 1, 5, 9, 0, tzinfo=timezone.utc)


def _at(minutes: float) -> datetime:
    return START + timedelta(minutes=minutes)


# Category allocation


def test_first_question_is_technical():
    assert next_category([], 1) == "Technical"


def test_allocation_converges_on_weights():
    asked = []
    for number in range(1, 6):
        asked.append(next_category(asked, number))
    assert asked == ["Technical", "Conceptual", "Behavioral", "Technical", "Scenario"]


def test_ties_follow_declared_order():
    deviations = category_deviations([], 0)
    assert set(deviations.values()) == {0.0}
    assert next_category([], 0) == "Technical"


def test_deviation_is_expected_minus_actual():
    deviations = category_deviations(["Technical", "Technical"], 3)
    assert deviations["Technical"] == pytest.approx(3 * 0.40 - 2)
    assert deviations["Scenario"] == pytest.approx(3 * 0.15)


# Difficulty transitions


@pytest.mark.parametrize(
    "current, score, number, expected",
    [
        ("Medium", 40, 1, "Easy"),
        ("Medium", 95, 1, "Medium"),
        ("Medium", 95, 2, "Medium"),
        ("Easy", 10, 2, "Easy"),
        ("Medium", 80, 3, "Hard"),
        ("Medium", 75, 4, "Hard"),
        ("Hard", 99, 6, "Hard"),
        ("Hard", 49.9, 6, "Medium"),
        ("Easy", 10, 6, "Easy"),
        ("Medium", 50, 6, "Medium"),
        ("Medium", 74.9, 6, "Medium"),
    ],
)
def test_difficulty_transitions(current, score, number, expected):
    assert next_difficulty(current, score, number) == expected


def test_difficulty_rejects_unknown_level():
    with pytest.raises(ValueError):
        next_difficulty("Impossible", 50, 4)


# Termination


def test_explicit_stop_wins():
    result = check_termination([10, 10, 10, 10], START, _at(60), explicit_stop=True)
    assert result.should_terminate
    assert result.kind == "UserRequested"
    assert result.reason == "Candidate requested termination"


def test_time_cap():
    assert check_termination([90], START, _at(45)).should_terminate is False
    result = check_termination([90], START, _at(46))
    assert result.kind == "MaxTimeExceeded"


def test_low_average_before_streak():
    result = check_termination([30, 30, 30, 30], START, _at(10))
    assert result.kind == "LowAverageScore"
    assert "30.0" in result.reason


def test_consecutive_low_scores():
    result = check_termination([80, 80, 35, 39, 20], START, _at(10))
    assert result.kind == "ConsecutiveLowScores"


def test_no_termination_for_healthy_scores():
    result = check_termination([30, 90, 80], START, _at(10))
    assert result.should_terminate is False
    assert result.reason is None and result.kind is None


def test_three_scores_do_not_trigger_low_average():
    assert check_termination([10, 50, 10], START, _at(5)).should_terminate is False


def test_continuation_bounds():
    low = [10.0] * 12
    assert should_continue(12, [90.0] * 12, START, _at(10)) is False
    assert should_continue(5, low[:5], START, _at(10)) is True
    assert should_continue(7, low[:7], START, _at(60)) is True
    assert should_continue(8, low[:8], START, _at(10)) is False
    assert should_continue(8, [90.0] * 8, START, _at(10)) is True
