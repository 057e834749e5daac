"""Interview orchestration services."""
from .errors import (
    InsufficientDataError,
    InterviewError,
    InvalidStateError,
    NotFoundError,
    UpstreamFailureError,
)
from .notifications import (
    LogNotificationSink,
    NotificationHub,
    NotificationSink,
    NullNotificationSink,
)
from .orchestrator import (
    AnswerOutcome,
    EndOutcome,
    InterviewOrchestrator,
    MAX_QUESTIONS_REASON,
    ReportView,
    StatusSnapshot,
)
from .sessions import SessionLocks

__all__ = [
    "AnswerOutcome",
    "EndOutcome",
    "InsufficientDataError",
    "InterviewError",
    "InterviewOrchestrator",
    "InvalidStateError",
    "LogNotificationSink",
    "MAX_QUESTIONS_REASON",
    "NotFoundError",
    "NotificationHub",
    "NotificationSink",
    "NullNotificationSink",
    "ReportView",
    "SessionLocks",
    "StatusSnapshot",
    "UpstreamFailureError",
]
