import sqlite3

import pytest
from fastapi.testclient import TestClient
from starlette.websockets import WebSocketDisconnect

from api_server import create_app
from llm_gateway import LlmGatewayError
from services import InterviewOrchestrator, NotificationHub


@pytest.fixture
def client(orchestrator):
    return TestClient(create_app(orchestrator=orchestrator))


def _prepare(client):
    user = client.post("/api/users", json={"email": "grace@example.com", "name": "Grace"})
    assert user.status_code == 201
    user_id = user.json()["id"]
    resume = client.post("/api/upload-resume", json={"user_id": user_id, "text": "Python, SQL, Kafka"})
    assert resume.status_code == 201
    jd = client.post("/api/upload-jd", json={"user_id": user_id, "title": "Data Engineer", "text": "Pipelines"})
    assert jd.status_code == 201
    return user_id, resume.json()["id"], jd.json()["id"]


def _start(client):
    user_id, resume_id, jd_id = _prepare(client)
    resp = client.post("/api/interview/start", json={"user_id": user_id, "resume_id": resume_id, "jd_id": jd_id})
    assert resp.status_code == 201
    return resp.json()["id"]


def _answer(client, session_id, time_taken=50):
    question = client.post("/api/interview/next-question", json={"session_id": session_id})
    assert question.status_code == 200
    resp = client.post(
        "/api/interview/submit-answer",
        json={"question_id": question.json()["id"], "answer_text": "I would shard by tenant.", "time_taken": time_taken},
    )
    assert resp.status_code == 200
    return resp.json()


def test_full_flow(client):
    user_id, resume_id, jd_id = _prepare(client)
    fit = client.post("/api/fit-score", json={"resume_id": resume_id, "jd_id": jd_id})
    assert fit.status_code == 200
    assert fit.json()["fit_score"] == 72.5

    start = client.post("/api/interview/start", json={"user_id": user_id, "resume_id": resume_id, "jd_id": jd_id})
    session_id = start.json()["id"]
    assert start.json()["status"] == "InProgress"

    first = _answer(client, session_id)
    assert first["score"] == 82.0
    assert first["interview_complete"] is False

    status = client.get(f"/api/interview/{session_id}/status")
    assert status.status_code == 200
    assert status.json()["metrics"]["total_questions_answered"] == 1

    ended = client.post("/api/interview/end", json={"session_id": session_id})
    assert ended.status_code == 200
    assert ended.json()["session"]["status"] == "Terminated"
    assert ended.json()["report"]["question_count"] == 1

    report = client.get(f"/api/interview/{session_id}/report")
    assert report.status_code == 200
    assert report.json()["early_termination_reason"] == "Candidate requested termination"

    pdf = client.get(f"/api/interview/{session_id}/report.pdf")
    assert pdf.status_code == 200
    assert pdf.headers["content-type"] == "application/pdf"
    assert pdf.content.startswith(b"%PDF")


def test_error_mapping(client, fake_llm):
    session_id = _start(client)

    missing = client.get("/api/interview/nope/status")
    assert missing.status_code == 404

    client.post("/api/interview/next-question", json={"session_id": session_id})
    pending = client.post("/api/interview/next-question", json={"session_id": session_id})
    assert pending.status_code == 409

    early_report = client.get(f"/api/interview/{session_id}/report")
    assert early_report.status_code == 409

    negative = client.post(
        "/api/interview/submit-answer",
        json={"question_id": "q", "answer_text": "x", "time_taken": -3},
    )
    assert negative.status_code == 422

    fake_llm.queue_rubrics(LlmGatewayError("refused"))
    question_id = client.get(f"/api/interview/{session_id}/status").json()["pending_question"]["id"]
    upstream = client.post(
        "/api/interview/submit-answer",
        json={"question_id": question_id, "answer_text": "x", "time_taken": 10},
    )
    assert upstream.status_code == 502


def test_report_without_answers(client):
    session_id = _start(client)
    ended = client.post("/api/interview/end", json={"session_id": session_id, "reason": "Changed my mind"})
    assert ended.status_code == 200
    assert ended.json()["report"] is None

    report = client.get(f"/api/interview/{session_id}/report")
    assert report.status_code == 422
    pdf = client.get(f"/api/interview/{session_id}/report.pdf")
    assert pdf.status_code == 422


def test_invalid_email_rejected(client):
    resp = client.post("/api/users", json={"email": "not-an-email"})
    assert resp.status_code == 422


def test_store_failure_maps_to_bad_gateway(client, store, monkeypatch):
    session_id = _start(client)

    def _locked(*args, **kwargs):
        raise sqlite3.OperationalError("database is locked")

    monkeypatch.setattr(store, "get_session", _locked)
    resp = client.get(f"/api/interview/{session_id}/status")
    assert resp.status_code == 502


def test_event_stream_delivers_session_events(store, fake_llm, clock):
    orchestrator = InterviewOrchestrator(store, fake_llm, sink=NotificationHub(log_events=False), clock=clock)
    client = TestClient(create_app(orchestrator=orchestrator))
    session_id = _start(client)

    with client.websocket_connect(f"/api/interview/{session_id}/events") as websocket:
        question = client.post("/api/interview/next-question", json={"session_id": session_id}).json()
        ready = websocket.receive_json()
        assert ready["event"] == "question-ready"
        assert ready["session_id"] == session_id
        assert ready["payload"]["question_id"] == question["id"]

        client.post(
            "/api/interview/submit-answer",
            json={"question_id": question["id"], "answer_text": "Use a queue.", "time_taken": 20},
        )
        evaluated = websocket.receive_json()
        assert evaluated["event"] == "answer-evaluated"
        assert evaluated["payload"]["score"] == 82.0


def test_event_stream_rejected_without_hub(client):
    session_id = _start(client)
    with pytest.raises(WebSocketDisconnect):
        with client.websocket_connect(f"/api/interview/{session_id}/events"):
            pass


def test_event_stream_rejects_unknown_session(store, fake_llm):
    orchestrator = InterviewOrchestrator(store, fake_llm, sink=NotificationHub(log_events=False))
    client = TestClient(create_app(orchestrator=orchestrator))
    with pytest.raises(WebSocketDisconnect):
        with client.websocket_connect("/api/interview/missing/events"):
            pass
