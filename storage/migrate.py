"""SQLite schema migrations."""
from __future__ import annotations

import sqlite3
from typing import Iterable, Optional

from config.settings import settings

from .sqlite import get_conn

SCHEMA: Iterable[str] = [
    """
CREATE TABLE IF NOT EXISTS users (
  id TEXT PRIMARY KEY,
  email TEXT NOT NULL UNIQUE,
  name TEXT NOT NULL,
  created_at TEXT NOT NULL
);
""",
    """
CREATE TABLE IF NOT EXISTS resumes (
  id TEXT PRIMARY KEY,
  user_id TEXT NOT NULL REFERENCES users(id),
  file_name TEXT NOT NULL,
  raw_text TEXT NOT NULL,
  parsed_json TEXT NOT NULL,
  created_at TEXT NOT NULL
);
""",
    """
CREATE TABLE IF NOT EXISTS job_descriptions (
  id TEXT PRIMARY KEY,
  user_id TEXT NOT NULL REFERENCES users(id),
  title TEXT NOT NULL,
  raw_text TEXT NOT NULL,
  parsed_json TEXT NOT NULL,
  fit_score REAL,
  created_at TEXT NOT NULL
);
""",
    """
CREATE TABLE IF NOT EXISTS sessions (
  id TEXT PRIMARY KEY,
  user_id TEXT NOT NULL REFERENCES users(id),
  resume_id TEXT NOT NULL REFERENCES resumes(id),
  jd_id TEXT NOT NULL REFERENCES job_descriptions(id),
  status TEXT NOT NULL,
  current_difficulty TEXT NOT NULL,
  current_question_number INTEGER NOT NULL DEFAULT 0,
  start_time TEXT NOT NULL,
  end_time TEXT,
  total_duration REAL,
  early_termination_reason TEXT
);
""",
    """
CREATE TABLE IF NOT EXISTS questions (
  id TEXT PRIMARY KEY,
  session_id TEXT NOT NULL REFERENCES sessions(id) ON DELETE CASCADE,
  number INTEGER NOT NULL,
  text TEXT NOT NULL,
  category TEXT NOT NULL,
  difficulty TEXT NOT NULL,
  time_limit INTEGER NOT NULL,
  asked_at TEXT NOT NULL,
  UNIQUE(session_id, number)
);
""",
    """
CREATE TABLE IF NOT EXISTS answers (
  id TEXT PRIMARY KEY,
  question_id TEXT NOT NULL UNIQUE REFERENCES questions(id) ON DELETE CASCADE,
  response_text TEXT NOT NULL,
  time_taken REAL NOT NULL,
  score REAL NOT NULL,
  breakdown_json TEXT NOT NULL,
  time_penalty REAL NOT NULL,
  feedback TEXT NOT NULL,
  strengths_json TEXT NOT NULL,
  improvements_json TEXT NOT NULL,
  created_at TEXT NOT NULL
);
""",
    """
CREATE TABLE IF NOT EXISTS reports (
  id TEXT PRIMARY KEY,
  session_id TEXT NOT NULL UNIQUE REFERENCES sessions(id) ON DELETE CASCADE,
  overall_score REAL NOT NULL,
  skill_breakdown_json TEXT NOT NULL,
  performance_trend TEXT NOT NULL,
  strengths_json TEXT NOT NULL,
  weaknesses_json TEXT NOT NULL,
  recommendation TEXT NOT NULL,
  recommendation_confidence REAL NOT NULL,
  question_count INTEGER NOT NULL,
  average_time_per_question INTEGER NOT NULL,
  generated_at TEXT NOT NULL
);
""",
    "CREATE INDEX IF NOT EXISTS idx_questions_session ON questions(session_id, number);",
    "CREATE INDEX IF NOT EXISTS idx_sessions_user ON sessions(user_id);",
]


def apply_schema(conn: sqlite3.Connection) -> None:
    cur = conn.cursor()
    for stmt in SCHEMA:
        cur.execute(stmt)


def migrate(db_path: Optional[str] = None) -> None:
    """Apply schema migrations to the SQLite database."""

    with get_conn(db_path or settings.DB_PATH) as conn:
        apply_schema(conn)


if __name__ == "__main__":
    migrate()
