"""Span helper for timing calls made on behalf of a session."""
from __future__ import annotations

import time
from contextlib import contextmanager
from typing import Any, Dict, Iterator

from .logger import log_event


@contextmanager
def span(session_id: str, name: str, **fields: Any) -> Iterator[Dict[str, Any]]:
    start = time.perf_counter()
    info: Dict[str, Any] = {"span": name, "ok": True}
    try:
        yield info
    except Exception:
        info["ok"] = False
        raise
    finally:
        info["ms"] = int((time.perf_counter() - start) * 1000)
        log_event("span", session_id, **fields, **info)


__all__ = ["span"]
