"""Shared type definitions and fixed constants for the interview engine."""
from __future__ import annotations

from datetime import datetime
from typing import Dict, List, Literal, Optional, Tuple

from pydantic import BaseModel, Field

Difficulty = Literal["Easy", "Medium", "Hard"]
Category = Literal["Technical", "Conceptual", "Behavioral", "Scenario"]
SessionStatus = Literal["NotStarted", "InProgress", "Completed", "Terminated"]
PerformanceTrend = Literal["Improving", "Declining", "Stable"]
Recommendation = Literal["Ready", "Needs Practice", "Not Ready"]
TerminationKind = Literal["UserRequested", "MaxTimeExceeded", "LowAverageScore", "ConsecutiveLowScores"]
ExperienceLevel = Literal["Entry", "Mid", "Senior", "Lead"]

DIFFICULTY_LEVELS: Tuple[Difficulty, ...] = ("Easy", "Medium", "Hard")
CATEGORIES: Tuple[Category, ...] = ("Technical", "Conceptual", "Behavioral", "Scenario")

CATEGORY_WEIGHTS: Dict[Category, float] = {
    "Technical": 0.40,
    "Conceptual": 0.25,
    "Behavioral": 0.20,
    "Scenario": 0.15,
}

TIME_LIMITS: Dict[Difficulty, int] = {"Easy": 120, "Medium": 180, "Hard": 240}

RUBRIC_WEIGHTS: Dict[str, float] = {
    "accuracy": 0.30,
    "clarity": 0.20,
    "depth": 0.25,
    "relevance": 0.15,
    "time_efficiency": 0.10,
}

OVERALL_WEIGHTS: Dict[str, float] = {
    "technical": 0.35,
    "behavioral": 0.20,
    "conceptual": 0.20,
    "scenario": 0.15,
    "time_management": 0.10,
}

MIN_QUESTIONS = 8
MAX_QUESTIONS = 12
WARMUP_QUESTIONS = 3
MAX_INTERVIEW_SECONDS = 45 * 60

PENALTY_INTERVAL_S = 10
PENALTY_PER_INTERVAL = 5
MAX_PENALTY = 20
AUTO_SUBMIT_MULTIPLIER = 1.5

NEUTRAL_SCORE = 50.0
START_DIFFICULTY: Difficulty = "Medium"


def time_limit_for(difficulty: Difficulty) -> int:
    """Return the answer time limit in seconds for ``difficulty``."""
    return TIME_LIMITS.get(difficulty, TIME_LIMITS["Medium"])


class TerminationCondition(BaseModel):
    should_terminate: bool
    reason: Optional[str] = None
    kind: Optional[TerminationKind] = None


class RubricBreakdown(BaseModel):
    accuracy: float
    clarity: float
    depth: float
    relevance: float
    time_efficiency: float


class SkillBreakdown(BaseModel):
    technical: float
    behavioral: float
    conceptual: float
    communication: float
    time_management: float


class Weakness(BaseModel):
    skill: str
    feedback: str
    improvement: str


class ScoredAnswer(BaseModel):  # Minimal per-answer view consumed by report synthesis
    category: Category
    score: float
    time_efficiency: float
    feedback: str = ""


class PerformanceMetrics(BaseModel):
    current_question_number: int
    total_questions_answered: int
    average_score: float
    current_difficulty: Difficulty
    time_elapsed: float
    last_scores: List[float] = Field(default_factory=list)
    skill_breakdown: Dict[str, float] = Field(default_factory=dict)
    performance_trend: PerformanceTrend = "Stable"


class ReportSummary(BaseModel):  # Computed report body, before persistence
    overall_score: float
    skill_breakdown: SkillBreakdown
    performance_trend: PerformanceTrend
    strengths: List[str]
    weaknesses: List[Weakness]
    recommendation: Recommendation
    recommendation_confidence: float
    question_count: int
    average_time_per_question: int
    generated_at: datetime


__all__ = [
    "AUTO_SUBMIT_MULTIPLIER",
    "CATEGORIES",
    "CATEGORY_WEIGHTS",
    "Category",
    "DIFFICULTY_LEVELS",
    "Difficulty",
    "ExperienceLevel",
    "MAX_INTERVIEW_SECONDS",
    "MAX_PENALTY",
    "MAX_QUESTIONS",
    "MIN_QUESTIONS",
    "NEUTRAL_SCORE",
    "OVERALL_WEIGHTS",
    "PENALTY_INTERVAL_S",
    "PENALTY_PER_INTERVAL",
    "PerformanceMetrics",
    "PerformanceTrend",
    "RUBRIC_WEIGHTS",
    "Recommendation",
    "ReportSummary",
    "RubricBreakdown",
    "START_DIFFICULTY",
    "ScoredAnswer",
    "SessionStatus",
    "SkillBreakdown",
    "TIME_LIMITS",
    "TerminationCondition",
    "TerminationKind",
    "WARMUP_QUESTIONS",
    "Weakness",
    "time_limit_for",
]
