from __future__ import annotations  # Re-export interview engine public API

from .categories import category_deviations, next_category
from .difficulty import next_difficulty
from .metrics import performance_metrics, skill_means
from .errors import (
    InsufficientDataError,
    InterviewError,
    InvalidStateError,
    NotFoundError,
    UpstreamFailureError,
)
from .report import (
    performance_trend,
    recommendation,
    strengths_and_weaknesses,
    synthesize_report,
)
from .score_math import (
    normalize_score,
    round_score,
    should_auto_submit,
    time_efficiency_score,
    time_penalty,
    weighted_answer_score,
)
from .termination import check_termination, should_continue

__all__ = [
    "InsufficientDataError",
    "InterviewError",
    "InvalidStateError",
    "NotFoundError",
    "UpstreamFailureError",
    "category_deviations",
    "check_termination",
    "next_category",
    "next_difficulty",
    "normalize_score",
    "performance_metrics",
    "performance_trend",
    "recommendation",
    "round_score",
    "should_auto_submit",
    "should_continue",
    "skill_means",
    "strengths_and_weaknesses",
    "synthesize_report",
    "time_efficiency_score",
    "time_penalty",
    "weighted_answer_score",
]
