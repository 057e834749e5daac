"""Pydantic schemas for the interview API."""
from __future__ import annotations

from typing import Optional

from pydantic import BaseModel, Field, field_validator


class _Request(BaseModel):
    @field_validator("*", mode="before")
    @classmethod
    def _strip(cls, value):
        return value.strip() if isinstance(value, str) else value


class CreateUserReq(_Request):
    email: str = Field(min_length=3, pattern=r"^[^@\s]+@[^@\s]+$")
    name: str = ""


class UploadResumeReq(_Request):
    user_id: str = Field(min_length=1)
    file_name: str = Field(default="resume.txt", min_length=1)
    text: str = Field(min_length=1)


class UploadJdReq(_Request):
    user_id: str = Field(min_length=1)
    title: str = Field(min_length=1)
    text: str = Field(min_length=1)


class FitScoreReq(_Request):
    resume_id: str = Field(min_length=1)
    jd_id: str = Field(min_length=1)


class FitScoreResp(BaseModel):
    jd_id: str
    fit_score: float


class StartReq(_Request):
    user_id: str = Field(min_length=1)
    resume_id: str = Field(min_length=1)
    jd_id: str = Field(min_length=1)


class NextQuestionReq(_Request):
    session_id: str = Field(min_length=1)


class SubmitAnswerReq(_Request):
    question_id: str = Field(min_length=1)
    answer_text: str = Field(min_length=1)
    time_taken: float = Field(ge=0, allow_inf_nan=False)


class EndReq(_Request):
    session_id: str = Field(min_length=1)
    reason: Optional[str] = None
