"""SQLite helpers for the persistence layer."""
from __future__ import annotations

import os
import sqlite3
from contextlib import contextmanager
from typing import Iterator, Optional

from config.settings import settings


def connect(db_path: str) -> sqlite3.Connection:
    """Open a connection with row access by name and foreign keys enforced."""

    directory = os.path.dirname(db_path) or "."
    os.makedirs(directory, exist_ok=True)
    conn = sqlite3.connect(db_path)
    conn.row_factory = sqlite3.Row
    conn.execute("PRAGMA foreign_keys = ON")
    return conn


@contextmanager
def get_conn(db_path: Optional[str] = None) -> Iterator[sqlite3.Connection]:
    """Yield a connection that commits on success and always closes."""

    conn = connect(db_path or settings.DB_PATH)
    try:
        yield conn
        conn.commit()
    finally:
        conn.close()
