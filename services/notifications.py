"""Best-effort session event delivery."""
from __future__ import annotations

import logging
import threading
from collections import defaultdict
from typing import Any, Callable, Dict, List, Literal, Protocol

from observability import log_event


logger = logging.getLogger(__name__)

EventName = Literal["question-ready", "answer-evaluated", "status-changed"]
Subscriber = Callable[[str, EventName, Dict[str, Any]], None]


class NotificationSink(Protocol):  # Receives session events; must never fail the caller
    def notify(self, session_id: str, event: EventName, payload: Dict[str, Any]) -> None: ...


class NullNotificationSink:  # Discards events
    def notify(self, session_id: str, event: EventName, payload: Dict[str, Any]) -> None:
        return None


class LogNotificationSink:  # Writes each event to the structured event log
    def notify(self, session_id: str, event: EventName, payload: Dict[str, Any]) -> None:
        log_event(event, session_id, **payload)


class NotificationHub:  # Fans events out to per-session subscribers and a log sink
    def __init__(self, *, log_events: bool = True) -> None:
        self._subscribers: Dict[str, List[Subscriber]] = defaultdict(list)
        self._guard = threading.Lock()
        self._log = LogNotificationSink() if log_events else NullNotificationSink()

    def subscribe(self, session_id: str, subscriber: Subscriber) -> Callable[[], None]:
        with self._guard:
            self._subscribers[session_id].append(subscriber)

        def _unsubscribe() -> None:
            with self._guard:
                listeners = self._subscribers.get(session_id, [])
                if subscriber in listeners:
                    listeners.remove(subscriber)
                if not listeners:
                    self._subscribers.pop(session_id, None)

        return _unsubscribe

    def notify(self, session_id: str, event: EventName, payload: Dict[str, Any]) -> None:
        with self._guard:
            listeners = list(self._subscribers.get(session_id, ()))
        try:
            self._log.notify(session_id, event, payload)
        except Exception:  # noqa: BLE001
            logger.exception("Event log write failed session=%s event=%s", session_id, event)
        for listener in listeners:
            try:
                listener(session_id, event, payload)
            except Exception:  # noqa: BLE001
                logger.exception("Subscriber failed session=%s event=%s", session_id, event)


__all__ = [
    "EventName",
    "LogNotificationSink",
    "NotificationHub",
    "NotificationSink",
    "NullNotificationSink",
    "Subscriber",
]
