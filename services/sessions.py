"""Per-session serialization for orchestration calls."""
from __future__ import annotations

import threading
from contextlib import contextmanager
from typing import Dict, Iterator


class SessionLocks:  # Registry of one lock per session id
    def __init__(self) -> None:
        self._locks: Dict[str, threading.Lock] = {}
        self._guard = threading.Lock()

    def lock_for(self, session_id: str) -> threading.Lock:
        with self._guard:
            lock = self._locks.get(session_id)
            if lock is None:
                lock = threading.Lock()
                self._locks[session_id] = lock
        return lock

    @contextmanager
    def hold(self, session_id: str) -> Iterator[None]:
        """Run the enclosed block while no other call touches ``session_id``."""

        with self.lock_for(session_id):
            yield

    def __len__(self) -> int:
        return len(self._locks)


__all__ = ["SessionLocks"]
