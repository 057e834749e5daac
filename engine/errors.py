"""Error kinds raised by the interview engine and orchestrator."""
from __future__ import annotations


class InterviewError(RuntimeError):  # Base interview error
    kind = "InterviewError"


class NotFoundError(InterviewError):  # Session, question, resume or JD missing
    kind = "NotFound"


class InvalidStateError(InterviewError):  # Operation not allowed in the current session state
    kind = "InvalidState"


class InsufficientDataError(InterviewError):  # Report requested without any answered question
    kind = "InsufficientData"


class UpstreamFailureError(InterviewError):  # LLM or store call failed without a safe default
    kind = "UpstreamFailure"


__all__ = [
    "InsufficientDataError",
    "InterviewError",
    "InvalidStateError",
    "NotFoundError",
    "UpstreamFailureError",
]
