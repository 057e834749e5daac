"""Live performance metrics for an in-progress session."""
from __future__ import annotations

from datetime import datetime
from typing import Dict, List, Sequence, Tuple

from .report import performance_trend
from .score_math import mean
from .types import CATEGORIES, Category, Difficulty, PerformanceMetrics


def skill_means(observations: Sequence[Tuple[Category, float]]) -> Dict[str, float]:
    """Mean score per category keyed by lower-cased name; empty categories are omitted."""

    grouped: Dict[Category, List[float]] = {category: [] for category in CATEGORIES}
    for category, score in observations:
        grouped.setdefault(category, []).append(score)
    return {category.lower(): mean(values) for category, values in grouped.items() if values}


def performance_metrics(
    *,
    current_question_number: int,
    observations: Sequence[Tuple[Category, float]],
    current_difficulty: Difficulty,
    start_time: datetime,
    now: datetime,
) -> PerformanceMetrics:
    """Aggregate ``(category, score)`` pairs observed so far, in answer order."""

    scores = [score for _, score in observations]
    return PerformanceMetrics(
        current_question_number=current_question_number,
        total_questions_answered=len(scores),
        average_score=mean(scores),
        current_difficulty=current_difficulty,
        time_elapsed=(now - start_time).total_seconds(),
        last_scores=scores[-3:],
        skill_breakdown=skill_means(observations),
        performance_trend=performance_trend(scores),
    )


__all__ = ["performance_metrics", "skill_means"]
