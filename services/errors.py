"""Error kinds surfaced by interview orchestration."""
from engine.errors import (
    InsufficientDataError,
    InterviewError,
    InvalidStateError,
    NotFoundError,
    UpstreamFailureError,
)

__all__ = [
    "InsufficientDataError",
    "InterviewError",
    "InvalidStateError",
    "NotFoundError",
    "UpstreamFailureError",
]
