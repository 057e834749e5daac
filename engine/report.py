"""Trend detection, hiring recommendation and final report synthesis."""
from __future__ import annotations

from datetime import datetime, timezone
from typing import Dict, List, Mapping, Optional, Sequence, Tuple

from .errors import InsufficientDataError
from .score_math import mean, round_score
from .types import (
    CATEGORIES,
    NEUTRAL_SCORE,
    OVERALL_WEIGHTS,
    PerformanceTrend,
    Recommendation,
    ReportSummary,
    ScoredAnswer,
    SkillBreakdown,
    Weakness,
)

TREND_DELTA = 10.0
BASE_CONFIDENCE = 75.0
SPREAD_LIMIT = 30.0
DRIFT_LIMIT = 15.0


def performance_trend(scores: Sequence[float]) -> PerformanceTrend:
    """Compare the mean of the later half of ``scores`` with the earlier half.

    The split index is ``len // 2``, so for odd lengths the middle score
    belongs to the later half.
    """

    if len(scores) < 3:
        return "Stable"
    split = len(scores) // 2
    difference = mean(list(scores[split:])) - mean(list(scores[:split]))
    if difference > TREND_DELTA:
        return "Improving"
    if difference < -TREND_DELTA:
        return "Declining"
    return "Stable"


def recommendation(
    overall_score: float,
    trend: PerformanceTrend,
    skill_breakdown: Mapping[str, object],
) -> Tuple[Recommendation, float]:
    """Return the recommendation and its confidence (40-95)."""

    confidence = BASE_CONFIDENCE
    if trend == "Improving":
        confidence += 10
    elif trend == "Declining":
        confidence -= 10

    verdict: Recommendation
    if overall_score >= 75:
        verdict = "Ready"
        confidence = min(95.0, confidence)
    elif overall_score >= 50:
        verdict = "Needs Practice"
        confidence = min(90.0, confidence)
    else:
        verdict = "Not Ready"
        confidence = min(85.0, confidence)

    values = [
        float(value)
        for value in skill_breakdown.values()
        if isinstance(value, (int, float)) and not isinstance(value, bool)
    ]
    if values:
        if max(values) - min(values) > SPREAD_LIMIT:
            confidence -= 15
        if abs(mean(values) - overall_score) > DRIFT_LIMIT:
            confidence -= 10

    return verdict, max(40.0, min(95.0, confidence))


def strengths_and_weaknesses(
    skill_breakdown: Mapping[str, float],
    feedback_by_skill: Optional[Mapping[str, str]] = None,
) -> Tuple[List[str], List[Weakness]]:
    """Top three skills become strengths, bottom three (worst first) weaknesses."""

    ranked = sorted(skill_breakdown.items(), key=lambda item: item[1], reverse=True)
    strengths = [skill for skill, _ in ranked[:3]]

    lookup = {key.lower(): text for key, text in (feedback_by_skill or {}).items() if text}
    weaknesses: List[Weakness] = []
    for skill, _ in reversed(ranked[-3:]):
        weaknesses.append(
            Weakness(
                skill=skill,
                feedback=lookup.get(skill.lower()) or f"Performance in {skill} needs improvement",
                improvement=f"Focus on improving {skill} skills through practice and learning",
            )
        )
    return strengths, weaknesses


def _feedback_by_skill(answers: Sequence[ScoredAnswer]) -> Dict[str, str]:
    # Lowest-scoring answer with feedback speaks for its skill.
    by_category: Dict[str, ScoredAnswer] = {}
    for answer in answers:
        if not answer.feedback.strip():
            continue
        current = by_category.get(answer.category)
        if current is None or answer.score < current.score:
            by_category[answer.category] = answer
    feedback = {category.lower(): entry.feedback for category, entry in by_category.items()}
    if "scenario" in feedback:
        feedback.setdefault("communication", feedback["scenario"])
    slowest = min(answers, key=lambda answer: answer.time_efficiency, default=None)
    if slowest is not None and slowest.time_efficiency < 100:
        feedback["time_management"] = (
            f"Answers ran past the time limit; the slowest reached {slowest.time_efficiency:.0f}% time efficiency"
        )
    return feedback


def synthesize_report(
    answers: Sequence[ScoredAnswer],
    *,
    total_duration: float,
    question_count: int,
    generated_at: Optional[datetime] = None,
) -> ReportSummary:
    """Compute the final report for a finished session.

    Raises:
        InsufficientDataError: If ``answers`` is empty.
    """

    if not answers:
        raise InsufficientDataError("No answers to evaluate")

    per_category = {
        category.lower(): mean([a.score for a in answers if a.category == category], NEUTRAL_SCORE)
        for category in CATEGORIES
    }
    time_management = mean([a.time_efficiency for a in answers], NEUTRAL_SCORE)
    overall = round_score(
        OVERALL_WEIGHTS["technical"] * per_category["technical"]
        + OVERALL_WEIGHTS["behavioral"] * per_category["behavioral"]
        + OVERALL_WEIGHTS["conceptual"] * per_category["conceptual"]
        + OVERALL_WEIGHTS["scenario"] * per_category["scenario"]
        + OVERALL_WEIGHTS["time_management"] * time_management
    )
    skills = SkillBreakdown(
        technical=round_score(per_category["technical"]),
        behavioral=round_score(per_category["behavioral"]),
        conceptual=round_score(per_category["conceptual"]),
        communication=round_score(0.5 * per_category["behavioral"] + 0.5 * per_category["scenario"]),
        time_management=round_score(time_management),
    )
    skill_map = skills.model_dump()

    trend = performance_trend([a.score for a in answers])
    verdict, confidence = recommendation(overall, trend, skill_map)
    strengths, weaknesses = strengths_and_weaknesses(skill_map, _feedback_by_skill(answers))

    count = max(1, question_count)
    return ReportSummary(
        overall_score=overall,
        skill_breakdown=skills,
        performance_trend=trend,
        strengths=strengths,
        weaknesses=weaknesses,
        recommendation=verdict,
        recommendation_confidence=confidence,
        question_count=question_count,
        average_time_per_question=int(round_score(total_duration / count, 0)),
        generated_at=generated_at or datetime.now(timezone.utc),
    )


__all__ = [
    "performance_trend",
    "recommendation",
    "strengths_and_weaknesses",
    "synthesize_report",
]
