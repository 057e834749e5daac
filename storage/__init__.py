"""Persistence layer for interview sessions."""
from .interview_store import InterviewStore, SqliteInterviewStore, utcnow
from .migrate import migrate
from .models import (
    Answer,
    FinalReport,
    HistoryEntry,
    JobDescription,
    Question,
    Resume,
    Session,
    SessionAggregate,
    User,
)

__all__ = [
    "Answer",
    "FinalReport",
    "HistoryEntry",
    "InterviewStore",
    "JobDescription",
    "Question",
    "Resume",
    "Session",
    "SessionAggregate",
    "SqliteInterviewStore",
    "User",
    "migrate",
    "utcnow",
]
