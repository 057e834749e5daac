"""Pure numeric helpers for answer scoring and time handling."""
from __future__ import annotations

import math

from .types import (
    AUTO_SUBMIT_MULTIPLIER,
    MAX_PENALTY,
    PENALTY_INTERVAL_S,
    PENALTY_PER_INTERVAL,
    RUBRIC_WEIGHTS,
    RubricBreakdown,
)


def _finite(value: float, name: str) -> float:
    number = float(value)
    if not math.isfinite(number):
        raise ValueError(f"{name} must be finite, got {value!r}")
    return number


def _check_times(time_taken: float, time_limit: float) -> tuple[float, float]:
    taken = _finite(time_taken, "time_taken")
    limit = _finite(time_limit, "time_limit")
    if limit <= 0:
        raise ValueError(f"time_limit must be positive, got {time_limit!r}")
    return taken, limit


def normalize_score(score: float) -> float:
    """Clamp ``score`` into the 0-100 range."""
    return max(0.0, min(100.0, _finite(score, "score")))


def round_score(score: float, decimals: int = 1) -> float:
    """Round half-up to ``decimals`` places."""
    factor = 10 ** decimals
    return math.floor(_finite(score, "score") * factor + 0.5) / factor


def time_efficiency_score(time_taken: float, time_limit: float) -> float:
    """Return 100 inside the limit, decreasing linearly with overtime."""

    taken, limit = _check_times(time_taken, time_limit)
    if taken <= limit:
        return 100.0
    overtime = taken - limit
    penalty = min(100.0, (overtime / limit) * 100.0)
    return max(0.0, 100.0 - penalty)


def time_penalty(time_taken: float, time_limit: float) -> float:
    """Return a non-positive score adjustment: -5 per full 10s over, floored at -20."""

    taken, limit = _check_times(time_taken, time_limit)
    if taken <= limit:
        return 0.0
    intervals = math.floor((taken - limit) / PENALTY_INTERVAL_S)
    return float(max(-MAX_PENALTY, min(0, -intervals * PENALTY_PER_INTERVAL)))


def should_auto_submit(time_taken: float, time_limit: float) -> bool:
    taken, limit = _check_times(time_taken, time_limit)
    return taken >= AUTO_SUBMIT_MULTIPLIER * limit


def weighted_answer_score(breakdown: RubricBreakdown, penalty: float) -> float:
    """Combine rubric scores with their weights, apply ``penalty`` and clamp."""

    values = breakdown.model_dump()
    raw = sum(RUBRIC_WEIGHTS[key] * _finite(values[key], key) for key in RUBRIC_WEIGHTS)
    return normalize_score(raw + _finite(penalty, "penalty"))


def mean(values: list[float], default: float = 0.0) -> float:
    if not values:
        return default
    return sum(values) / len(values)


__all__ = [
    "mean",
    "normalize_score",
    "round_score",
    "should_auto_submit",
    "time_efficiency_score",
    "time_penalty",
    "weighted_answer_score",
]
