"""Interview orchestration: ties the adaptive engine to storage, the LLM and notifications.

Every call that reads or changes one session runs under that session's lock,
so concurrent requests for the same interview are applied one at a time while
different interviews proceed independently.
"""
from __future__ import annotations

import functools
import logging
import math
import sqlite3
from datetime import datetime
from typing import Callable, List, Optional

from pydantic import BaseModel, Field

from agents import AnswerRubric, EvaluationContext, InterviewLlmPort, ParsedJD, ParsedResume, QuestionContext
from engine import (
    check_termination,
    next_category,
    next_difficulty,
    performance_metrics,
    round_score,
    should_auto_submit,
    should_continue,
    synthesize_report,
    time_efficiency_score,
    time_penalty,
    weighted_answer_score,
)
from engine.types import (
    MAX_QUESTIONS,
    MIN_QUESTIONS,
    NEUTRAL_SCORE,
    START_DIFFICULTY,
    Difficulty,
    PerformanceMetrics,
    ReportSummary,
    RubricBreakdown,
    SessionStatus,
    time_limit_for,
)
from llm_gateway import LlmGatewayError, LlmOutputError
from observability import span
from storage import (
    FinalReport,
    HistoryEntry,
    InterviewStore,
    JobDescription,
    Question,
    Resume,
    Session,
    SessionAggregate,
    User,
    utcnow,
)

from .errors import InsufficientDataError, InvalidStateError, NotFoundError, UpstreamFailureError
from .notifications import NotificationSink, NullNotificationSink
from .sessions import SessionLocks


logger = logging.getLogger(__name__)

MAX_QUESTIONS_REASON = "Maximum questions reached"


def _store_failures(method):  # Storage errors surface as upstream failures
    @functools.wraps(method)
    def wrapper(self, *args, **kwargs):
        try:
            return method(self, *args, **kwargs)
        except sqlite3.Error as exc:
            logger.error("Store call failed in %s: %s", method.__name__, exc)
            raise UpstreamFailureError(f"Storage failure: {exc}") from exc

    return wrapper


class AnswerOutcome(BaseModel):  # Result of scoring one answer
    question_id: str
    score: float
    breakdown: RubricBreakdown
    time_penalty: float
    feedback: str
    strengths: List[str] = Field(default_factory=list)
    improvements: List[str] = Field(default_factory=list)
    next_difficulty: Difficulty
    auto_submitted: bool = False
    interview_complete: bool = False
    termination_reason: Optional[str] = None
    report: Optional[FinalReport] = None


class EndOutcome(BaseModel):  # Final state of an ended session
    session: Session
    report: Optional[FinalReport] = None


class StatusSnapshot(BaseModel):
    session_id: str
    status: SessionStatus
    metrics: PerformanceMetrics
    pending_question: Optional[Question] = None


class ReportView(BaseModel):  # Persisted report plus session timing
    report: FinalReport
    status: SessionStatus
    start_time: datetime
    end_time: Optional[datetime] = None
    total_duration: Optional[float] = None
    early_termination_reason: Optional[str] = None


class InterviewOrchestrator:
    def __init__(
        self,
        store: InterviewStore,
        llm: InterviewLlmPort,
        *,
        sink: Optional[NotificationSink] = None,
        locks: Optional[SessionLocks] = None,
        clock: Optional[Callable[[], datetime]] = None,
    ) -> None:
        self._store = store
        self._llm = llm
        self._sink = sink or NullNotificationSink()
        self._locks = locks or SessionLocks()
        self._clock = clock or utcnow

    @property
    def sink(self) -> NotificationSink:
        return self._sink

    # Candidate material ------------------------------------------------------------

    @_store_failures
    def register_user(self, email: str, name: str = "") -> User:
        return self._store.get_or_create_user(email, name)

    @_store_failures
    def upload_resume(self, user_id: str, file_name: str, text: str) -> Resume:
        self._require_user(user_id)
        try:
            with span(user_id, "llm.parse_resume"):
                parsed = self._llm.parse_resume(text)
        except LlmOutputError as exc:
            logger.warning("Resume parse returned unusable output, storing empty structure: %s", exc)
            parsed = ParsedResume()
        except LlmGatewayError as exc:
            raise UpstreamFailureError(f"Resume parsing failed: {exc}") from exc
        return self._store.create_resume(user_id=user_id, file_name=file_name, raw_text=text, parsed=parsed)

    @_store_failures
    def upload_job_description(self, user_id: str, title: str, text: str) -> JobDescription:
        self._require_user(user_id)
        try:
            with span(user_id, "llm.parse_job_description"):
                parsed = self._llm.parse_job_description(text)
        except LlmOutputError as exc:
            logger.warning("JD parse returned unusable output, storing empty structure: %s", exc)
            parsed = ParsedJD(title=title)
        except LlmGatewayError as exc:
            raise UpstreamFailureError(f"Job description parsing failed: {exc}") from exc
        if not parsed.title:
            parsed = parsed.model_copy(update={"title": title})
        return self._store.create_job_description(user_id=user_id, title=title, raw_text=text, parsed=parsed)

    @_store_failures
    def calculate_fit(self, resume_id: str, jd_id: str) -> JobDescription:
        resume = self._require_resume(resume_id)
        jd = self._require_jd(jd_id)
        try:
            with span(jd_id, "llm.estimate_fit"):
                fit = self._llm.estimate_fit(resume.parsed, jd.parsed)
        except LlmGatewayError as exc:
            logger.warning("Fit estimation failed, using neutral score: %s", exc)
            fit = NEUTRAL_SCORE
        return self._store.update_job_description_fit(jd_id, round_score(max(0.0, min(100.0, fit))))

    # Session lifecycle -----------------------------------------------------------------

    @_store_failures
    def start_session(self, user_id: str, resume_id: str, jd_id: str) -> Session:
        self._require_user(user_id)
        self._require_resume(resume_id)
        self._require_jd(jd_id)
        session = self._store.create_session(
            user_id=user_id,
            resume_id=resume_id,
            jd_id=jd_id,
            difficulty=START_DIFFICULTY,
            start_time=self._clock(),
        )
        logger.info("Session started id=%s user=%s", session.id, user_id)
        self._notify(session.id, "status-changed", {"status": session.status, "reason": None})
        return session

    @_store_failures
    def next_question(self, session_id: str) -> Question:
        with self._locks.hold(session_id):
            aggregate = self._load(session_id, with_history=True)
            session = aggregate.session
            self._require_in_progress(session)
            if session.current_question_number >= MAX_QUESTIONS:
                self._finish(aggregate, MAX_QUESTIONS_REASON, status="Completed")
                raise InvalidStateError("Interview completed: maximum questions reached")
            if aggregate.pending_question is not None:
                raise InvalidStateError("The previous question has not been answered yet")

            number = session.current_question_number + 1
            category = next_category([entry.question.category for entry in aggregate.history], number)
            difficulty = session.current_difficulty
            context = self._question_context(aggregate, category=category, difficulty=difficulty)
            try:
                with span(session_id, "llm.generate_question", question_number=number):
                    text = self._llm.generate_question_text(context)
            except LlmGatewayError as exc:
                raise UpstreamFailureError(f"Question generation failed: {exc}") from exc

            question = self._store.create_question(
                session_id=session_id,
                number=number,
                text=text,
                category=category,
                difficulty=difficulty,
                time_limit=time_limit_for(difficulty),
                asked_at=self._clock(),
            )
        self._notify(
            session_id,
            "question-ready",
            {
                "question_id": question.id,
                "question_number": question.number,
                "category": question.category,
                "difficulty": question.difficulty,
                "time_limit": question.time_limit,
            },
        )
        return question

    @_store_failures
    def submit_answer(self, question_id: str, response_text: str, time_taken: float) -> AnswerOutcome:
        if not math.isfinite(time_taken) or time_taken < 0:
            raise ValueError("time_taken must be a non-negative number of seconds")
        question = self._store.get_question(question_id)
        if question is None:
            raise NotFoundError(f"Question {question_id} not found")

        with self._locks.hold(question.session_id):
            aggregate = self._load(question.session_id, with_history=True)
            session = aggregate.session
            if self._store.get_answer(question_id) is not None:
                raise InvalidStateError("Question has already been answered")
            self._require_in_progress(session)

            rubric = self._evaluate(aggregate, question, response_text, time_taken)
            efficiency = time_efficiency_score(time_taken, question.time_limit)
            penalty = time_penalty(time_taken, question.time_limit)
            breakdown = RubricBreakdown(
                accuracy=rubric.accuracy,
                clarity=rubric.clarity,
                depth=rubric.depth,
                relevance=rubric.relevance,
                time_efficiency=efficiency,
            )
            score = weighted_answer_score(breakdown, penalty)
            now = self._clock()
            self._store.create_answer(
                question_id=question_id,
                response_text=response_text,
                time_taken=time_taken,
                score=score,
                breakdown=breakdown,
                time_penalty=penalty,
                feedback=rubric.feedback,
                strengths=rubric.strengths,
                improvements=rubric.improvements,
                created_at=now,
            )

            difficulty = next_difficulty(session.current_difficulty, score, question.number)
            self._store.update_session(session.id, current_difficulty=difficulty)

            scores = aggregate.scores() + [score]
            termination = check_termination(scores, session.start_time, now)
            keep_going = should_continue(question.number, scores, session.start_time, now)
            reason: Optional[str] = None
            report: Optional[FinalReport] = None
            if not keep_going:
                refreshed = self._load(session.id, with_history=True)
                if termination.should_terminate:
                    reason = termination.reason
                    report = self._finish(refreshed, reason, status="Terminated").report
                else:
                    reason = MAX_QUESTIONS_REASON
                    report = self._finish(refreshed, reason, status="Completed").report

        self._notify(
            session.id,
            "answer-evaluated",
            {
                "question_id": question_id,
                "question_number": question.number,
                "score": round_score(score),
                "difficulty": difficulty,
            },
        )
        return AnswerOutcome(
            question_id=question_id,
            score=round_score(score),
            breakdown=RubricBreakdown(**{key: round_score(value) for key, value in breakdown.model_dump().items()}),
            time_penalty=penalty,
            feedback=rubric.feedback,
            strengths=rubric.strengths,
            improvements=rubric.improvements,
            next_difficulty=difficulty,
            auto_submitted=should_auto_submit(time_taken, question.time_limit),
            interview_complete=not keep_going,
            termination_reason=reason,
            report=report,
        )

    @_store_failures
    def end_session(self, session_id: str, reason: Optional[str] = None) -> EndOutcome:
        """End an in-progress session on request and produce its report.

        Sessions with at least the minimum number of answers are Completed,
        shorter ones Terminated. A session with no answers gets no report.
        """

        with self._locks.hold(session_id):
            aggregate = self._load(session_id, with_history=True)
            self._require_in_progress(aggregate.session)
            requested = check_termination(aggregate.scores(), aggregate.session.start_time, self._clock(), explicit_stop=True)
            status: SessionStatus = "Completed" if len(aggregate.answered) >= MIN_QUESTIONS else "Terminated"
            return self._finish(aggregate, reason or requested.reason, status=status)

    @_store_failures
    def get_status(self, session_id: str) -> StatusSnapshot:
        with self._locks.hold(session_id):
            aggregate = self._load(session_id, with_history=True)
        session = aggregate.session
        metrics = performance_metrics(
            current_question_number=session.current_question_number,
            observations=[(entry.question.category, entry.answer.score) for entry in aggregate.answered],  # type: ignore[union-attr]
            current_difficulty=session.current_difficulty,
            start_time=session.start_time,
            now=session.end_time or self._clock(),
        )
        metrics = metrics.model_copy(
            update={
                "average_score": round_score(metrics.average_score),
                "skill_breakdown": {key: round_score(value) for key, value in metrics.skill_breakdown.items()},
            }
        )
        return StatusSnapshot(
            session_id=session.id,
            status=session.status,
            metrics=metrics,
            pending_question=aggregate.pending_question,
        )

    @_store_failures
    def get_report(self, session_id: str) -> ReportView:
        aggregate = self._load(session_id)
        session = aggregate.session
        report = self._store.get_report(session_id)
        if report is None:
            if session.status == "InProgress":
                raise InvalidStateError("Report not yet generated; the interview is still in progress")
            raise InsufficientDataError("No report available: the session ended without any answers")
        return ReportView(
            report=report,
            status=session.status,
            start_time=session.start_time,
            end_time=session.end_time,
            total_duration=session.total_duration,
            early_termination_reason=session.early_termination_reason,
        )

    @_store_failures
    def get_session(self, session_id: str) -> Session:
        return self._load(session_id).session

    @_store_failures
    def get_history(self, session_id: str) -> List[HistoryEntry]:
        return self._load(session_id, with_history=True).history

    # Internals ---------------------------------------------------------------------------

    def _finish(self, aggregate: SessionAggregate, reason: Optional[str], *, status: SessionStatus) -> EndOutcome:
        # Caller holds the session lock.
        session = aggregate.session
        end_time = self._clock()
        total_duration = float(math.floor(max(0.0, (end_time - session.start_time).total_seconds())))
        summary: Optional[ReportSummary] = None
        if aggregate.answered:
            summary = synthesize_report(
                aggregate.scored_answers(),
                total_duration=total_duration,
                question_count=len(aggregate.history),
                generated_at=end_time,
            )
        else:
            status = "Terminated"
            logger.info("Session %s ended without answers; no report generated", session.id)
        updated, report = self._store.finish_session(
            session.id,
            status=status,
            end_time=end_time,
            total_duration=total_duration,
            early_termination_reason=reason,
            summary=summary,
        )
        logger.info("Session ended id=%s status=%s reason=%s", session.id, status, reason)
        self._notify(session.id, "status-changed", {"status": status, "reason": reason})
        return EndOutcome(session=updated, report=report)

    def _evaluate(
        self,
        aggregate: SessionAggregate,
        question: Question,
        response_text: str,
        time_taken: float,
    ) -> AnswerRubric:
        resume, jd = self._materials(aggregate.session)
        context = EvaluationContext(
            question_text=question.text,
            difficulty=question.difficulty,
            category=question.category,
            answer_text=response_text,
            time_taken=time_taken,
            time_limit=question.time_limit,
            candidate_skills=resume.skills,
            jd_skills_required=jd.skills_required,
        )
        try:
            with span(question.session_id, "llm.evaluate_answer", question_number=question.number):
                return self._llm.evaluate_answer(context)
        except LlmOutputError as exc:
            logger.warning("Evaluation output unusable for question %s, scoring neutral: %s", question.id, exc)
            return AnswerRubric.neutral()
        except LlmGatewayError as exc:
            raise UpstreamFailureError(f"Answer evaluation failed: {exc}") from exc

    def _question_context(self, aggregate: SessionAggregate, *, category, difficulty) -> QuestionContext:
        resume, jd = self._materials(aggregate.session)
        return QuestionContext(
            candidate_skills=resume.skills,
            candidate_experience=resume.experience,
            jd_title=jd.title,
            jd_requirements=jd.requirements,
            jd_skills_required=jd.skills_required,
            jd_experience_level=jd.experience_level,
            difficulty=difficulty,
            category=category,
            previous_questions=[entry.question.text for entry in aggregate.history],
            previous_scores=aggregate.scores(),
        )

    def _materials(self, session: Session) -> tuple[ParsedResume, ParsedJD]:
        resume = self._store.get_resume(session.resume_id)
        jd = self._store.get_job_description(session.jd_id)
        return (
            resume.parsed if resume is not None else ParsedResume(),
            jd.parsed if jd is not None else ParsedJD(),
        )

    def _load(self, session_id: str, *, with_history: bool = False) -> SessionAggregate:
        aggregate = self._store.get_session(session_id, with_history=with_history)
        if aggregate is None:
            raise NotFoundError(f"Session {session_id} not found")
        return aggregate

    def _require_user(self, user_id: str) -> User:
        user = self._store.get_user(user_id)
        if user is None:
            raise NotFoundError(f"User {user_id} not found")
        return user

    def _require_resume(self, resume_id: str) -> Resume:
        resume = self._store.get_resume(resume_id)
        if resume is None:
            raise NotFoundError(f"Resume {resume_id} not found")
        return resume

    def _require_jd(self, jd_id: str) -> JobDescription:
        jd = self._store.get_job_description(jd_id)
        if jd is None:
            raise NotFoundError(f"Job description {jd_id} not found")
        return jd

    @staticmethod
    def _require_in_progress(session: Session) -> None:
        if session.status != "InProgress":
            raise InvalidStateError(f"Interview is {session.status}")

    def _notify(self, session_id: str, event, payload: dict) -> None:
        try:
            self._sink.notify(session_id, event, payload)
        except Exception:  # noqa: BLE001
            logger.exception("Notification failed session=%s event=%s", session_id, event)


__all__ = [
    "AnswerOutcome",
    "EndOutcome",
    "InterviewOrchestrator",
    "MAX_QUESTIONS_REASON",
    "ReportView",
    "StatusSnapshot",
]
