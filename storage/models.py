"""Persistent records for users, interview sessions and their reports."""
from __future__ import annotations

from datetime import datetime
from typing import List, Optional

from pydantic import BaseModel, Field

from agents.schemas import ParsedJD, ParsedResume
from engine.types import (
    Category,
    Difficulty,
    ReportSummary,
    RubricBreakdown,
    ScoredAnswer,
    SessionStatus,
)


class User(BaseModel):
    id: str
    email: str
    name: str = ""
    created_at: datetime


class Resume(BaseModel):
    id: str
    user_id: str
    file_name: str
    raw_text: str
    parsed: ParsedResume = Field(default_factory=ParsedResume)
    created_at: datetime


class JobDescription(BaseModel):
    id: str
    user_id: str
    title: str
    raw_text: str
    parsed: ParsedJD = Field(default_factory=ParsedJD)
    fit_score: Optional[float] = None
    created_at: datetime


class Session(BaseModel):
    id: str
    user_id: str
    resume_id: str
    jd_id: str
    status: SessionStatus
    current_difficulty: Difficulty
    current_question_number: int = Field(default=0, ge=0)
    start_time: datetime
    end_time: Optional[datetime] = None
    total_duration: Optional[float] = None  # seconds
    early_termination_reason: Optional[str] = None


class Question(BaseModel):
    id: str
    session_id: str
    number: int = Field(ge=1)
    text: str
    category: Category
    difficulty: Difficulty
    time_limit: int
    asked_at: datetime


class Answer(BaseModel):
    id: str
    question_id: str
    response_text: str
    time_taken: float
    score: float
    breakdown: RubricBreakdown
    time_penalty: float
    feedback: str = ""
    strengths: List[str] = Field(default_factory=list)
    improvements: List[str] = Field(default_factory=list)
    created_at: datetime


class FinalReport(ReportSummary):
    id: str
    session_id: str


class HistoryEntry(BaseModel):  # One asked question with its answer, if any
    question: Question
    answer: Optional[Answer] = None


class SessionAggregate(BaseModel):  # Session plus its ordered question history
    session: Session
    history: List[HistoryEntry] = Field(default_factory=list)

    @property
    def answered(self) -> List[HistoryEntry]:
        return [entry for entry in self.history if entry.answer is not None]

    @property
    def pending_question(self) -> Optional[Question]:
        for entry in self.history:
            if entry.answer is None:
                return entry.question
        return None

    def scores(self) -> List[float]:
        return [entry.answer.score for entry in self.answered]  # type: ignore[union-attr]

    def scored_answers(self) -> List[ScoredAnswer]:  # Answers in the shape report synthesis consumes
        return [
            ScoredAnswer(
                category=entry.question.category,
                score=entry.answer.score,  # type: ignore[union-attr]
                time_efficiency=entry.answer.breakdown.time_efficiency,  # type: ignore[union-attr]
                feedback=entry.answer.feedback,  # type: ignore[union-attr]
            )
            for entry in self.answered
        ]


__all__ = [
    "Answer",
    "FinalReport",
    "HistoryEntry",
    "JobDescription",
    "Question",
    "Resume",
    "Session",
    "SessionAggregate",
    "User",
]
