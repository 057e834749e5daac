"""Lightweight CLI helpers for inspecting stored interview sessions."""
from __future__ import annotations

import argparse
from pathlib import Path
from typing import List, Optional

from config.settings import settings
from storage import SqliteInterviewStore


def session_lines(store: SqliteInterviewStore, user_id: Optional[str] = None, limit: int = 20) -> List[str]:
    lines: List[str] = []
    for session in store.list_sessions(user_id)[:limit]:
        reason = f" reason={session.early_termination_reason}" if session.early_termination_reason else ""
        lines.append(
            f"[{session.start_time:%Y-%m-%d %H:%M:%S}] {session.id} user={session.user_id} "
            f"status={session.status} q={session.current_question_number} "
            f"difficulty={session.current_difficulty}{reason}"
        )
    return lines


def history_lines(store: SqliteInterviewStore, session_id: str) -> List[str]:
    aggregate = store.get_session(session_id, with_history=True)
    if aggregate is None:
        return [f"session {session_id} not found"]
    lines: List[str] = []
    for entry in aggregate.history:
        question = entry.question
        score = f"{entry.answer.score:.1f}" if entry.answer is not None else "-"
        taken = f"{entry.answer.time_taken:.0f}s" if entry.answer is not None else "pending"
        lines.append(
            f"#{question.number} {question.category}/{question.difficulty} score={score} time={taken} :: {question.text[:80]}"
        )
    report = store.get_report(session_id)
    if report is not None:
        lines.append(
            f"report overall={report.overall_score} trend={report.performance_trend} "
            f"recommendation={report.recommendation} ({report.recommendation_confidence:.0f}%)"
        )
    return lines


def main(argv: Optional[List[str]] = None) -> None:
    parser = argparse.ArgumentParser()
    parser.add_argument("--db", default=settings.DB_PATH, help="SQLite database path")
    parser.add_argument("--sessions", type=int, help="Show the latest sessions")
    parser.add_argument("--user", help="Restrict --sessions to one user id")
    parser.add_argument("--history", help="Show question history for a session id")
    args = parser.parse_args(argv)

    store = SqliteInterviewStore(Path(args.db))
    if args.sessions:
        for line in session_lines(store, args.user, args.sessions):
            print(line)
    if args.history:
        for line in history_lines(store, args.history):
            print(line)


if __name__ == "__main__":
    main()
