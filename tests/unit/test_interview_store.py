import sqlite3
from datetime import datetime, timezone

import pytest

from agents import ParsedJD, ParsedResume
from engine import synthesize_report
from engine.types import RubricBreakdown, ScoredAnswer
from storage import SqliteInterviewStore
from storage.migrate import SCHEMA, migrate


START = datetime(2026, 1, 5, 9, 0, tzinfo=timezone.utc)


def _seed(store: SqliteInterviewStore):
    user = store.get_or_create_user("Grace@Example.com", "Grace")
    resume = store.create_resume(user_id=user.id, file_name="cv.txt", raw_text="cv", parsed=ParsedResume(skills=["go"]))
    jd = store.create_job_description(user_id=user.id, title="SRE", raw_text="jd", parsed=ParsedJD(title="SRE"))
    session = store.create_session(user_id=user.id, resume_id=resume.id, jd_id=jd.id, difficulty="Medium", start_time=START)
    return user, resume, jd, session


def test_migrate_is_idempotent(tmp_db):
    migrate(tmp_db)
    migrate(tmp_db)
    conn = sqlite3.connect(tmp_db)
    try:
        tables = {row[0] for row in conn.execute("SELECT name FROM sqlite_master WHERE type='table'")}
    finally:
        conn.close()
    assert {"users", "resumes", "job_descriptions", "sessions", "questions", "answers", "reports"} <= tables
    assert len(list(SCHEMA)) >= 7


def test_user_get_or_create_is_case_insensitive(store):
    first = store.get_or_create_user("Grace@Example.com", "Grace")
    again = store.get_or_create_user("grace@example.com")
    assert first.id == again.id
    assert store.get_user(first.id).email == "grace@example.com"
    assert store.get_user("missing") is None


def test_resume_and_jd_round_trip_parsed_lists(store):
    _, resume, jd, _ = _seed(store)
    assert store.get_resume(resume.id).parsed.skills == ["go"]
    updated = store.update_job_description_fit(jd.id, 71.5)
    assert updated.fit_score == 71.5
    assert store.get_job_description(jd.id).parsed.title == "SRE"
    with pytest.raises(KeyError):
        store.update_job_description_fit("missing", 10)


def test_question_insert_moves_counter_and_history_is_ordered(store):
    _, _, _, session = _seed(store)
    first = store.create_question(
        session_id=session.id, number=1, text="Q1", category="Technical", difficulty="Medium", time_limit=180, asked_at=START
    )
    store.create_question(
        session_id=session.id, number=2, text="Q2", category="Conceptual", difficulty="Medium", time_limit=180, asked_at=START
    )
    store.create_answer(
        question_id=first.id,
        response_text="answer",
        time_taken=60,
        score=72.5,
        breakdown=RubricBreakdown(accuracy=70, clarity=70, depth=70, relevance=70, time_efficiency=100),
        time_penalty=0,
        feedback="fine",
        strengths=["clear"],
        improvements=[],
        created_at=START,
    )
    aggregate = store.get_session(session.id, with_history=True)
    assert aggregate.session.current_question_number == 2
    assert [entry.question.text for entry in aggregate.history] == ["Q1", "Q2"]
    assert aggregate.history[0].answer.strengths == ["clear"]
    assert aggregate.pending_question.text == "Q2"
    assert aggregate.scores() == [72.5]
    assert store.get_session(session.id).history == []


def test_answer_is_unique_per_question(store):
    _, _, _, session = _seed(store)
    question = store.create_question(
        session_id=session.id, number=1, text="Q1", category="Technical", difficulty="Medium", time_limit=180, asked_at=START
    )
    kwargs = dict(
        question_id=question.id,
        response_text="a",
        time_taken=10,
        score=50,
        breakdown=RubricBreakdown(accuracy=50, clarity=50, depth=50, relevance=50, time_efficiency=100),
        time_penalty=0,
        feedback="",
        strengths=[],
        improvements=[],
        created_at=START,
    )
    store.create_answer(**kwargs)
    with pytest.raises(sqlite3.IntegrityError):
        store.create_answer(**kwargs)


def test_update_session_patch_rules(store):
    _, _, _, session = _seed(store)
    updated = store.update_session(session.id, status="Completed", end_time=START, total_duration=0.0)
    assert updated.status == "Completed"
    assert updated.end_time == START
    with pytest.raises(ValueError):
        store.update_session(session.id, user_id="someone-else")
    with pytest.raises(KeyError):
        store.update_session("missing", status="Completed")


def test_report_round_trip(store):
    user, _, _, session = _seed(store)
    summary = synthesize_report(
        [ScoredAnswer(category="Technical", score=40, time_efficiency=100, feedback="shallow")],
        total_duration=300,
        question_count=1,
        generated_at=START,
    )
    store.create_report(session.id, summary)
    report = store.get_report(session.id)
    assert report.session_id == session.id
    assert report.weaknesses[0].skill == summary.weaknesses[0].skill
    assert report.skill_breakdown == summary.skill_breakdown
    assert store.get_report("missing") is None
    assert [s.id for s in store.list_sessions(user.id)] == [session.id]


def _summary():
    return synthesize_report(
        [ScoredAnswer(category="Behavioral", score=70, time_efficiency=100, feedback="clear")],
        total_duration=120,
        question_count=1,
        generated_at=START,
    )


def test_finish_session_writes_report_and_status_together(store):
    _, _, _, session = _seed(store)
    updated, report = store.finish_session(
        session.id,
        status="Completed",
        end_time=START,
        total_duration=120.0,
        early_termination_reason="Maximum questions reached",
        summary=_summary(),
    )
    assert updated.status == "Completed"
    assert updated.early_termination_reason == "Maximum questions reached"
    assert store.get_report(session.id).id == report.id


def test_finish_session_rolls_back_as_a_unit(store):
    _, _, _, session = _seed(store)
    store.create_report(session.id, _summary())
    with pytest.raises(sqlite3.IntegrityError):
        store.finish_session(
            session.id,
            status="Completed",
            end_time=START,
            total_duration=60.0,
            early_termination_reason=None,
            summary=_summary(),
        )
    assert store.get_session(session.id).session.status == "InProgress"

    with pytest.raises(KeyError):
        store.finish_session("missing", status="Terminated", end_time=START, total_duration=0.0, early_termination_reason=None)


def test_finish_session_without_report(store):
    _, _, _, session = _seed(store)
    updated, report = store.finish_session(
        session.id, status="Terminated", end_time=START, total_duration=0.0, early_termination_reason="stopped"
    )
    assert report is None
    assert updated.status == "Terminated"
    assert store.get_report(session.id) is None
