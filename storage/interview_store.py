from __future__ import annotations  # Interview persistence port and its SQLite implementation

import json
import sqlite3
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Dict, Iterable, List, Optional, Protocol, Tuple
from uuid import uuid4

from agents.schemas import ParsedJD, ParsedResume
from engine.types import Category, Difficulty, ReportSummary, RubricBreakdown, SessionStatus, SkillBreakdown, Weakness

from .migrate import apply_schema
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
from .sqlite import connect


SESSION_PATCH_FIELDS = frozenset(
    {
        "status",
        "current_difficulty",
        "current_question_number",
        "end_time",
        "total_duration",
        "early_termination_reason",
    }
)


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


def _new_id() -> str:
    return uuid4().hex


def _iso(value: Optional[datetime]) -> Optional[str]:
    return value.isoformat() if value is not None else None


class InterviewStore(Protocol):  # Persistence operations the orchestrator relies on
    def get_or_create_user(self, email: str, name: str = "") -> User: ...

    def get_user(self, user_id: str) -> Optional[User]: ...

    def create_resume(self, *, user_id: str, file_name: str, raw_text: str, parsed: ParsedResume) -> Resume: ...

    def get_resume(self, resume_id: str) -> Optional[Resume]: ...

    def create_job_description(self, *, user_id: str, title: str, raw_text: str, parsed: ParsedJD) -> JobDescription: ...

    def get_job_description(self, jd_id: str) -> Optional[JobDescription]: ...

    def update_job_description_fit(self, jd_id: str, fit_score: float) -> JobDescription: ...

    def create_session(
        self,
        *,
        user_id: str,
        resume_id: str,
        jd_id: str,
        difficulty: Difficulty,
        start_time: datetime,
    ) -> Session: ...

    def get_session(self, session_id: str, *, with_history: bool = False) -> Optional[SessionAggregate]: ...

    def update_session(self, session_id: str, **patch: Any) -> Session: ...

    def list_sessions(self, user_id: Optional[str] = None) -> List[Session]: ...

    def create_question(
        self,
        *,
        session_id: str,
        number: int,
        text: str,
        category: Category,
        difficulty: Difficulty,
        time_limit: int,
        asked_at: datetime,
    ) -> Question: ...

    def get_question(self, question_id: str) -> Optional[Question]: ...

    def get_answer(self, question_id: str) -> Optional[Answer]: ...

    def create_answer(
        self,
        *,
        question_id: str,
        response_text: str,
        time_taken: float,
        score: float,
        breakdown: RubricBreakdown,
        time_penalty: float,
        feedback: str,
        strengths: List[str],
        improvements: List[str],
        created_at: datetime,
    ) -> Answer: ...

    def create_report(self, session_id: str, summary: ReportSummary) -> FinalReport: ...

    def finish_session(
        self,
        session_id: str,
        *,
        status: SessionStatus,
        end_time: datetime,
        total_duration: float,
        early_termination_reason: Optional[str],
        summary: Optional[ReportSummary] = None,
    ) -> Tuple[Session, Optional[FinalReport]]: ...

    def get_report(self, session_id: str) -> Optional[FinalReport]: ...


class SqliteInterviewStore:  # SQLite-backed interview storage
    def __init__(self, path: Path) -> None:
        self._path = Path(path)
        self._ensure_schema()

    def _connect(self) -> sqlite3.Connection:
        return connect(str(self._path))

    def _ensure_schema(self) -> None:
        conn = self._connect()
        try:
            apply_schema(conn)
            conn.commit()
        finally:
            conn.close()

    # Users -----------------------------------------------------------------

    def get_or_create_user(self, email: str, name: str = "") -> User:
        normalized = email.strip().lower()
        conn = self._connect()
        try:
            row = conn.execute("SELECT * FROM users WHERE email = ?", (normalized,)).fetchone()
            if row is not None:
                return _user_from_row(row)
            user = User(id=_new_id(), email=normalized, name=name.strip(), created_at=utcnow())
            conn.execute(
                "INSERT INTO users (id, email, name, created_at) VALUES (?, ?, ?, ?)",
                (user.id, user.email, user.name, _iso(user.created_at)),
            )
            conn.commit()
            return user
        finally:
            conn.close()

    def get_user(self, user_id: str) -> Optional[User]:
        conn = self._connect()
        try:
            row = conn.execute("SELECT * FROM users WHERE id = ?", (user_id,)).fetchone()
            return _user_from_row(row) if row is not None else None
        finally:
            conn.close()

    # Resumes and job descriptions --------------------------------------------

    def create_resume(self, *, user_id: str, file_name: str, raw_text: str, parsed: ParsedResume) -> Resume:
        resume = Resume(
            id=_new_id(),
            user_id=user_id,
            file_name=file_name,
            raw_text=raw_text,
            parsed=parsed,
            created_at=utcnow(),
        )
        conn = self._connect()
        try:
            conn.execute(
                """
                INSERT INTO resumes (id, user_id, file_name, raw_text, parsed_json, created_at)
                VALUES (?, ?, ?, ?, ?, ?)
                """,
                (resume.id, user_id, file_name, raw_text, parsed.model_dump_json(), _iso(resume.created_at)),
            )
            conn.commit()
            return resume
        finally:
            conn.close()

    def get_resume(self, resume_id: str) -> Optional[Resume]:
        conn = self._connect()
        try:
            row = conn.execute("SELECT * FROM resumes WHERE id = ?", (resume_id,)).fetchone()
            if row is None:
                return None
            return Resume(
                id=row["id"],
                user_id=row["user_id"],
                file_name=row["file_name"],
                raw_text=row["raw_text"],
                parsed=ParsedResume.model_validate_json(row["parsed_json"]),
                created_at=row["created_at"],
            )
        finally:
            conn.close()

    def create_job_description(self, *, user_id: str, title: str, raw_text: str, parsed: ParsedJD) -> JobDescription:
        jd = JobDescription(
            id=_new_id(),
            user_id=user_id,
            title=title,
            raw_text=raw_text,
            parsed=parsed,
            created_at=utcnow(),
        )
        conn = self._connect()
        try:
            conn.execute(
                """
                INSERT INTO job_descriptions (id, user_id, title, raw_text, parsed_json, fit_score, created_at)
                VALUES (?, ?, ?, ?, ?, NULL, ?)
                """,
                (jd.id, user_id, title, raw_text, parsed.model_dump_json(), _iso(jd.created_at)),
            )
            conn.commit()
            return jd
        finally:
            conn.close()

    def get_job_description(self, jd_id: str) -> Optional[JobDescription]:
        conn = self._connect()
        try:
            row = conn.execute("SELECT * FROM job_descriptions WHERE id = ?", (jd_id,)).fetchone()
            return _jd_from_row(row) if row is not None else None
        finally:
            conn.close()

    def update_job_description_fit(self, jd_id: str, fit_score: float) -> JobDescription:
        conn = self._connect()
        try:
            cur = conn.execute("UPDATE job_descriptions SET fit_score = ? WHERE id = ?", (fit_score, jd_id))
            if cur.rowcount == 0:
                raise KeyError(jd_id)
            conn.commit()
            row = conn.execute("SELECT * FROM job_descriptions WHERE id = ?", (jd_id,)).fetchone()
            return _jd_from_row(row)
        finally:
            conn.close()

    # Sessions ------------------------------------------------------------------

    def create_session(
        self,
        *,
        user_id: str,
        resume_id: str,
        jd_id: str,
        difficulty: Difficulty,
        start_time: datetime,
    ) -> Session:
        session = Session(
            id=_new_id(),
            user_id=user_id,
            resume_id=resume_id,
            jd_id=jd_id,
            status="InProgress",
            current_difficulty=difficulty,
            current_question_number=0,
            start_time=start_time,
        )
        conn = self._connect()
        try:
            conn.execute(
                """
                INSERT INTO sessions (
                    id, user_id, resume_id, jd_id, status, current_difficulty,
                    current_question_number, start_time
                )
                VALUES (?, ?, ?, ?, ?, ?, 0, ?)
                """,
                (
                    session.id,
                    user_id,
                    resume_id,
                    jd_id,
                    session.status,
                    session.current_difficulty,
                    _iso(start_time),
                ),
            )
            conn.commit()
            return session
        finally:
            conn.close()

    def get_session(self, session_id: str, *, with_history: bool = False) -> Optional[SessionAggregate]:
        conn = self._connect()
        try:
            row = conn.execute("SELECT * FROM sessions WHERE id = ?", (session_id,)).fetchone()
            if row is None:
                return None
            aggregate = SessionAggregate(session=_session_from_row(row))
            if with_history:
                aggregate.history = list(self._history(conn, session_id))
            return aggregate
        finally:
            conn.close()

    def _history(self, conn: sqlite3.Connection, session_id: str) -> Iterable[HistoryEntry]:
        rows = conn.execute(
            """
            SELECT q.id AS q_id, q.session_id, q.number, q.text, q.category, q.difficulty,
                   q.time_limit, q.asked_at, a.id AS a_id, a.response_text, a.time_taken,
                   a.score, a.breakdown_json, a.time_penalty, a.feedback, a.strengths_json,
                   a.improvements_json, a.created_at AS a_created_at
            FROM questions q
            LEFT JOIN answers a ON a.question_id = q.id
            WHERE q.session_id = ?
            ORDER BY q.number ASC
            """,
            (session_id,),
        ).fetchall()
        for row in rows:
            question = Question(
                id=row["q_id"],
                session_id=row["session_id"],
                number=row["number"],
                text=row["text"],
                category=row["category"],
                difficulty=row["difficulty"],
                time_limit=row["time_limit"],
                asked_at=row["asked_at"],
            )
            answer = None
            if row["a_id"] is not None:
                answer = Answer(
                    id=row["a_id"],
                    question_id=row["q_id"],
                    response_text=row["response_text"],
                    time_taken=row["time_taken"],
                    score=row["score"],
                    breakdown=RubricBreakdown.model_validate_json(row["breakdown_json"]),
                    time_penalty=row["time_penalty"],
                    feedback=row["feedback"],
                    strengths=json.loads(row["strengths_json"]),
                    improvements=json.loads(row["improvements_json"]),
                    created_at=row["a_created_at"],
                )
            yield HistoryEntry(question=question, answer=answer)

    def update_session(self, session_id: str, **patch: Any) -> Session:
        unknown = set(patch) - SESSION_PATCH_FIELDS
        if unknown:
            raise ValueError(f"Cannot update session fields: {', '.join(sorted(unknown))}")
        values: Dict[str, Any] = {
            key: _iso(value) if isinstance(value, datetime) else value for key, value in patch.items()
        }
        conn = self._connect()
        try:
            if values:
                assignments = ", ".join(f"{key} = ?" for key in values)
                cur = conn.execute(
                    f"UPDATE sessions SET {assignments} WHERE id = ?",
                    (*values.values(), session_id),
                )
                if cur.rowcount == 0:
                    raise KeyError(session_id)
                conn.commit()
            row = conn.execute("SELECT * FROM sessions WHERE id = ?", (session_id,)).fetchone()
            if row is None:
                raise KeyError(session_id)
            return _session_from_row(row)
        finally:
            conn.close()

    def list_sessions(self, user_id: Optional[str] = None) -> List[Session]:
        conn = self._connect()
        try:
            if user_id is None:
                rows = conn.execute("SELECT * FROM sessions ORDER BY start_time DESC").fetchall()
            else:
                rows = conn.execute(
                    "SELECT * FROM sessions WHERE user_id = ? ORDER BY start_time DESC",
                    (user_id,),
                ).fetchall()
            return [_session_from_row(row) for row in rows]
        finally:
            conn.close()

    # Questions and answers -----------------------------------------------------

    def create_question(
        self,
        *,
        session_id: str,
        number: int,
        text: str,
        category: Category,
        difficulty: Difficulty,
        time_limit: int,
        asked_at: datetime,
    ) -> Question:
        question = Question(
            id=_new_id(),
            session_id=session_id,
            number=number,
            text=text,
            category=category,
            difficulty=difficulty,
            time_limit=time_limit,
            asked_at=asked_at,
        )
        conn = self._connect()
        try:
            # The counter moves in the same transaction as the insert.
            conn.execute(
                """
                INSERT INTO questions (id, session_id, number, text, category, difficulty, time_limit, asked_at)
                VALUES (?, ?, ?, ?, ?, ?, ?, ?)
                """,
                (question.id, session_id, number, text, category, difficulty, time_limit, _iso(asked_at)),
            )
            conn.execute(
                "UPDATE sessions SET current_question_number = ? WHERE id = ?",
                (number, session_id),
            )
            conn.commit()
            return question
        finally:
            conn.close()

    def get_question(self, question_id: str) -> Optional[Question]:
        conn = self._connect()
        try:
            row = conn.execute("SELECT * FROM questions WHERE id = ?", (question_id,)).fetchone()
            if row is None:
                return None
            return Question(
                id=row["id"],
                session_id=row["session_id"],
                number=row["number"],
                text=row["text"],
                category=row["category"],
                difficulty=row["difficulty"],
                time_limit=row["time_limit"],
                asked_at=row["asked_at"],
            )
        finally:
            conn.close()

    def get_answer(self, question_id: str) -> Optional[Answer]:
        conn = self._connect()
        try:
            row = conn.execute("SELECT * FROM answers WHERE question_id = ?", (question_id,)).fetchone()
            return _answer_from_row(row) if row is not None else None
        finally:
            conn.close()

    def create_answer(
        self,
        *,
        question_id: str,
        response_text: str,
        time_taken: float,
        score: float,
        breakdown: RubricBreakdown,
        time_penalty: float,
        feedback: str,
        strengths: List[str],
        improvements: List[str],
        created_at: datetime,
    ) -> Answer:
        answer = Answer(
            id=_new_id(),
            question_id=question_id,
            response_text=response_text,
            time_taken=time_taken,
            score=score,
            breakdown=breakdown,
            time_penalty=time_penalty,
            feedback=feedback,
            strengths=list(strengths),
            improvements=list(improvements),
            created_at=created_at,
        )
        conn = self._connect()
        try:
            conn.execute(
                """
                INSERT INTO answers (
                    id, question_id, response_text, time_taken, score, breakdown_json,
                    time_penalty, feedback, strengths_json, improvements_json, created_at
                )
                VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?)
                """,
                (
                    answer.id,
                    question_id,
                    response_text,
                    time_taken,
                    score,
                    breakdown.model_dump_json(),
                    time_penalty,
                    feedback,
                    json.dumps(answer.strengths),
                    json.dumps(answer.improvements),
                    _iso(created_at),
                ),
            )
            conn.commit()
            return answer
        finally:
            conn.close()

    # Reports ---------------------------------------------------------------------

    def create_report(self, session_id: str, summary: ReportSummary) -> FinalReport:
        conn = self._connect()
        try:
            report = _insert_report(conn, session_id, summary)
            conn.commit()
            return report
        finally:
            conn.close()

    def finish_session(
        self,
        session_id: str,
        *,
        status: SessionStatus,
        end_time: datetime,
        total_duration: float,
        early_termination_reason: Optional[str],
        summary: Optional[ReportSummary] = None,
    ) -> Tuple[Session, Optional[FinalReport]]:
        """Write the report (if any) and the terminal session fields in one transaction."""

        conn = self._connect()
        try:
            report = _insert_report(conn, session_id, summary) if summary is not None else None
            cur = conn.execute(
                """
                UPDATE sessions
                SET status = ?, end_time = ?, total_duration = ?, early_termination_reason = ?
                WHERE id = ?
                """,
                (status, _iso(end_time), total_duration, early_termination_reason, session_id),
            )
            if cur.rowcount == 0:
                raise KeyError(session_id)
            row = conn.execute("SELECT * FROM sessions WHERE id = ?", (session_id,)).fetchone()
            conn.commit()
            return _session_from_row(row), report
        except (sqlite3.Error, KeyError):
            conn.rollback()
            raise
        finally:
            conn.close()

    def get_report(self, session_id: str) -> Optional[FinalReport]:
        conn = self._connect()
        try:
            row = conn.execute("SELECT * FROM reports WHERE session_id = ?", (session_id,)).fetchone()
            if row is None:
                return None
            return FinalReport(
                id=row["id"],
                session_id=row["session_id"],
                overall_score=row["overall_score"],
                skill_breakdown=SkillBreakdown.model_validate_json(row["skill_breakdown_json"]),
                performance_trend=row["performance_trend"],
                strengths=json.loads(row["strengths_json"]),
                weaknesses=[Weakness.model_validate(item) for item in json.loads(row["weaknesses_json"])],
                recommendation=row["recommendation"],
                recommendation_confidence=row["recommendation_confidence"],
                question_count=row["question_count"],
                average_time_per_question=row["average_time_per_question"],
                generated_at=row["generated_at"],
            )
        finally:
            conn.close()


def _insert_report(conn: sqlite3.Connection, session_id: str, summary: ReportSummary) -> FinalReport:
    report = FinalReport(id=_new_id(), session_id=session_id, **summary.model_dump())
    conn.execute(
        """
        INSERT INTO reports (
            id, session_id, overall_score, skill_breakdown_json, performance_trend,
            strengths_json, weaknesses_json, recommendation, recommendation_confidence,
            question_count, average_time_per_question, generated_at
        )
        VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?)
        """,
        (
            report.id,
            session_id,
            report.overall_score,
            report.skill_breakdown.model_dump_json(),
            report.performance_trend,
            json.dumps(report.strengths),
            json.dumps([item.model_dump() for item in report.weaknesses]),
            report.recommendation,
            report.recommendation_confidence,
            report.question_count,
            report.average_time_per_question,
            _iso(report.generated_at),
        ),
    )
    return report


def _user_from_row(row: sqlite3.Row) -> User:
    return User(id=row["id"], email=row["email"], name=row["name"], created_at=row["created_at"])


def _jd_from_row(row: sqlite3.Row) -> JobDescription:
    return JobDescription(
        id=row["id"],
        user_id=row["user_id"],
        title=row["title"],
        raw_text=row["raw_text"],
        parsed=ParsedJD.model_validate_json(row["parsed_json"]),
        fit_score=row["fit_score"],
        created_at=row["created_at"],
    )


def _session_from_row(row: sqlite3.Row) -> Session:
    return Session(
        id=row["id"],
        user_id=row["user_id"],
        resume_id=row["resume_id"],
        jd_id=row["jd_id"],
        status=row["status"],
        current_difficulty=row["current_difficulty"],
        current_question_number=row["current_question_number"],
        start_time=row["start_time"],
        end_time=row["end_time"],
        total_duration=row["total_duration"],
        early_termination_reason=row["early_termination_reason"],
    )


def _answer_from_row(row: sqlite3.Row) -> Answer:
    return Answer(
        id=row["id"],
        question_id=row["question_id"],
        response_text=row["response_text"],
        time_taken=row["time_taken"],
        score=row["score"],
        breakdown=RubricBreakdown.model_validate_json(row["breakdown_json"]),
        time_penalty=row["time_penalty"],
        feedback=row["feedback"],
        strengths=json.loads(row["strengths_json"]),
        improvements=json.loads(row["improvements_json"]),
        created_at=row["created_at"],
    )


__all__ = ["InterviewStore", "SESSION_PATCH_FIELDS", "SqliteInterviewStore", "utcnow"]
