"""Early-stop rules and question-count bounds for a running interview."""
from __future__ import annotations

from datetime import datetime
from typing import Sequence

from .score_math import mean
from .types import MAX_INTERVIEW_SECONDS, MAX_QUESTIONS, MIN_QUESTIONS, TerminationCondition

LOW_AVERAGE_THRESHOLD = 35.0
LOW_AVERAGE_MIN_ANSWERS = 4
LOW_STREAK_THRESHOLD = 40.0
LOW_STREAK_LENGTH = 3


def check_termination(
    scores: Sequence[float],
    start_time: datetime,
    now: datetime,
    explicit_stop: bool = False,
) -> TerminationCondition:
    """Evaluate the stop rules in priority order; the first match wins."""

    if explicit_stop:
        return TerminationCondition(
            should_terminate=True,
            reason="Candidate requested termination",
            kind="UserRequested",
        )

    elapsed = (now - start_time).total_seconds()
    if elapsed > MAX_INTERVIEW_SECONDS:
        return TerminationCondition(
            should_terminate=True,
            reason=f"Maximum interview time ({MAX_INTERVIEW_SECONDS // 60} minutes) exceeded",
            kind="MaxTimeExceeded",
        )

    if len(scores) >= LOW_AVERAGE_MIN_ANSWERS:
        average = mean(list(scores))
        if average < LOW_AVERAGE_THRESHOLD:
            return TerminationCondition(
                should_terminate=True,
                reason=f"Average score ({average:.1f}) falls below {LOW_AVERAGE_THRESHOLD:.0f}% threshold",
                kind="LowAverageScore",
            )

    if len(scores) >= LOW_STREAK_LENGTH:
        if all(score < LOW_STREAK_THRESHOLD for score in scores[-LOW_STREAK_LENGTH:]):
            return TerminationCondition(
                should_terminate=True,
                reason=f"Three consecutive answers scored below {LOW_STREAK_THRESHOLD:.0f}%",
                kind="ConsecutiveLowScores",
            )

    return TerminationCondition(should_terminate=False)


def should_continue(
    question_number: int,
    scores: Sequence[float],
    start_time: datetime,
    now: datetime,
) -> bool:
    """Apply the question bounds, then the stop rules in between them."""

    if question_number >= MAX_QUESTIONS:
        return False
    if question_number < MIN_QUESTIONS:
        return True
    return not check_termination(scores, start_time, now).should_terminate


__all__ = ["check_termination", "should_continue"]
