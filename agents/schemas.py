"""Payload schemas exchanged with the LLM collaborator."""
from __future__ import annotations

import math
import re
from typing import Any, List

from pydantic import BaseModel, Field, field_validator

from engine.types import NEUTRAL_SCORE, Category, Difficulty, ExperienceLevel


def _clamp_percent(value: Any) -> float:  # Non-numeric or non-finite values fail validation
    if isinstance(value, bool) or not isinstance(value, (int, float, str)):
        raise ValueError(f"expected a number, got {type(value).__name__}")
    number = float(value)
    if not math.isfinite(number):
        raise ValueError(f"expected a finite number, got {value!r}")
    return max(0.0, min(100.0, number))


class ExperienceEntry(BaseModel):
    company: str = ""
    role: str = ""
    duration: str = ""
    description: List[str] = Field(default_factory=list)


class Project(BaseModel):
    name: str = ""
    description: str = ""
    technologies: List[str] = Field(default_factory=list)
    role: str = ""


class EducationEntry(BaseModel):
    institution: str = ""
    degree: str = ""
    field: str = ""
    year: str = ""


class ParsedResume(BaseModel):
    skills: List[str] = Field(default_factory=list)
    experience: List[ExperienceEntry] = Field(default_factory=list)
    projects: List[Project] = Field(default_factory=list)
    education: List[EducationEntry] = Field(default_factory=list)
    certifications: List[str] = Field(default_factory=list)


class ParsedJD(BaseModel):
    title: str = ""
    requirements: List[str] = Field(default_factory=list)
    skills_required: List[str] = Field(default_factory=list)
    experience_level: ExperienceLevel = "Mid"
    responsibilities: List[str] = Field(default_factory=list)
    key_competencies: List[str] = Field(default_factory=list)

    @field_validator("experience_level", mode="before")
    @classmethod
    def _normalize_level(cls, value: Any) -> str:  # Map free-form level text onto the known levels
        text = str(value or "").strip().lower()
        for level in ("Entry", "Mid", "Senior", "Lead"):
            if text.startswith(level.lower()):
                return level
        return "Mid"


class QuestionContext(BaseModel):  # Inputs for question generation
    candidate_skills: List[str] = Field(default_factory=list)
    candidate_experience: List[ExperienceEntry] = Field(default_factory=list)
    jd_title: str = ""
    jd_requirements: List[str] = Field(default_factory=list)
    jd_skills_required: List[str] = Field(default_factory=list)
    jd_experience_level: ExperienceLevel = "Mid"
    difficulty: Difficulty
    category: Category
    previous_questions: List[str] = Field(default_factory=list)
    previous_scores: List[float] = Field(default_factory=list)


class EvaluationContext(BaseModel):  # Inputs for answer evaluation
    question_text: str
    difficulty: Difficulty
    category: Category
    answer_text: str
    time_taken: float
    time_limit: int
    candidate_skills: List[str] = Field(default_factory=list)
    jd_skills_required: List[str] = Field(default_factory=list)


class QuestionDraft(BaseModel):  # Generated question text
    text: str = Field(min_length=1)

    @classmethod
    def from_raw_content(cls, content: str) -> "QuestionDraft":  # Accept a bare question when JSON is missing
        text = content.strip().strip('"').strip()
        if not text or text.startswith("{"):
            raise ValueError("question reply was empty or malformed JSON")
        return cls(text=text)


class AnswerRubric(BaseModel):  # Rubric scores returned by the evaluator (0-100 each)
    accuracy: float
    clarity: float
    depth: float
    relevance: float
    feedback: str = ""
    strengths: List[str] = Field(default_factory=list)
    improvements: List[str] = Field(default_factory=list)

    @field_validator("accuracy", "clarity", "depth", "relevance", mode="before")
    @classmethod
    def _bound(cls, value: Any) -> float:
        return _clamp_percent(value)

    @classmethod
    def neutral(cls) -> "AnswerRubric":
        return cls(
            accuracy=NEUTRAL_SCORE,
            clarity=NEUTRAL_SCORE,
            depth=NEUTRAL_SCORE,
            relevance=NEUTRAL_SCORE,
        )


class FitEstimate(BaseModel):  # Resume-to-JD fit on a 0-100 scale
    score: float

    @field_validator("score", mode="before")
    @classmethod
    def _bound(cls, value: Any) -> float:
        return _clamp_percent(value)

    @classmethod
    def from_raw_content(cls, content: str) -> "FitEstimate":  # Accept a bare number reply
        match = re.search(r"-?\d+(?:\.\d+)?", content)
        if match is None:
            raise ValueError("fit reply did not contain a number")
        return cls(score=float(match.group(0)))


__all__ = [
    "AnswerRubric",
    "EducationEntry",
    "EvaluationContext",
    "ExperienceEntry",
    "FitEstimate",
    "ParsedJD",
    "ParsedResume",
    "Project",
    "QuestionContext",
    "QuestionDraft",
]
