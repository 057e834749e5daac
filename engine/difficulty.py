"""Adaptive difficulty transitions between Easy, Medium and Hard."""
from __future__ import annotations

from .types import DIFFICULTY_LEVELS, WARMUP_QUESTIONS, Difficulty

UPGRADE_AT = 75.0
DOWNGRADE_BELOW = 50.0


def _shift(current: Difficulty, step: int) -> Difficulty:
    index = DIFFICULTY_LEVELS.index(current) + step
    index = max(0, min(len(DIFFICULTY_LEVELS) - 1, index))
    return DIFFICULTY_LEVELS[index]


def next_difficulty(current: Difficulty, score: float, question_number: int) -> Difficulty:
    """Return the difficulty for the next question.

    During the warm-up (first ``WARMUP_QUESTIONS - 1`` answers) the level can
    only drop. Afterwards a strong answer moves one level up, a weak answer
    one level down, and anything in between holds.
    """

    if current not in DIFFICULTY_LEVELS:
        raise ValueError(f"Unknown difficulty: {current!r}")
    if question_number < WARMUP_QUESTIONS:
        return _shift(current, -1) if score < DOWNGRADE_BELOW else current
    if score >= UPGRADE_AT:
        return _shift(current, 1)
    if score < DOWNGRADE_BELOW:
        return _shift(current, -1)
    return current


__all__ = ["next_difficulty", "UPGRADE_AT", "DOWNGRADE_BELOW"]
