import json
import os
import sys
from datetime import datetime, timedelta, timezone
from pathlib import Path

os.environ.setdefault("ENABLE_FILE_LOGS", "0")

import pytest

ROOT = Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

from agents import AnswerRubric, InterviewLlm, ParsedJD, ParsedResume
from agents.schemas import ExperienceEntry
from config import AppConfig, LlmRoute
from config.settings import settings
from services import InterviewOrchestrator
from storage import SqliteInterviewStore
from storage.migrate import migrate


class FakeClock:
    def __init__(self, start: datetime = datetime(2026, 1, 5, 9, 0, tzinfo=timezone.utc)) -> None:
        self.now = start

    def __call__(self) -> datetime:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += timedelta(seconds=seconds)


class FakeLlm:
    """Scripted stand-in for the LLM collaborator."""

    def __init__(self) -> None:
        self.rubrics = []
        self.default_rubric = 80.0
        self.question_error = None
        self.parse_error = None
        self.fit_error = None
        self.fit = 72.46
        self.resume = ParsedResume(
            skills=["python", "sql"],
            experience=[ExperienceEntry(company="Acme", role="Backend Engineer")],
        )
        self.jd = ParsedJD(title="Backend Engineer", skills_required=["python", "postgres"])
        self.question_contexts = []
        self.evaluation_contexts = []

    def queue_rubrics(self, *values) -> None:
        for value in values:
            if isinstance(value, Exception):
                self.rubrics.append(value)
            else:
                self.rubrics.append(_uniform(value, f"feedback for {value}"))

    def generate_question_text(self, context):
        if self.question_error is not None:
            raise self.question_error
        self.question_contexts.append(context)
        return f"Q{len(self.question_contexts)}: {context.category} question ({context.difficulty})"

    def evaluate_answer(self, context):
        self.evaluation_contexts.append(context)
        item = self.rubrics.pop(0) if self.rubrics else _uniform(self.default_rubric, "solid answer")
        if isinstance(item, Exception):
            raise item
        return item

    def parse_resume(self, text):
        if self.parse_error is not None:
            raise self.parse_error
        return self.resume

    def parse_job_description(self, text):
        if self.parse_error is not None:
            raise self.parse_error
        return self.jd

    def estimate_fit(self, resume, jd):
        if self.fit_error is not None:
            raise self.fit_error
        return self.fit


class RecordingNotificationSink:
    def __init__(self) -> None:
        self.events = []

    def notify(self, session_id, event, payload) -> None:
        self.events.append((session_id, event, dict(payload)))

    def names(self, session_id):
        return [event for sid, event, _ in self.events if sid == session_id]


class ScriptedResponse:
    status_code = 200
    text = ""

    def __init__(self, content: str) -> None:
        self._content = content

    def json(self):
        return {"choices": [{"message": {"content": self._content}}]}


class ScriptedHttpClient:
    """HTTP stand-in replying with queued chat contents, JSON-encoding dicts."""

    def __init__(self, *replies) -> None:
        self.replies = [reply if isinstance(reply, str) else json.dumps(reply) for reply in replies]
        self.payloads = []

    def post(self, url, *, json, headers, timeout):
        self.payloads.append(json)
        return ScriptedResponse(self.replies.pop(0))


def _scripted_interview_llm(*replies):
    """Real agents and gateway on a single no-retry route backed by ``ScriptedHttpClient``."""

    route = LlmRoute(name="scripted", base_url="http://llm.local", model="m", max_retries=0)
    keys = ("question_writer", "answer_evaluator", "resume_parser", "jd_parser", "fit_estimator")
    cfg = AppConfig(llm_routes={"scripted": route}, registry={f"agents.{key}": "scripted" for key in keys})
    client = ScriptedHttpClient(*replies)
    return InterviewLlm(cfg, client=client), client


def _uniform(value: float, feedback: str) -> AnswerRubric:
    return AnswerRubric(
        accuracy=value,
        clarity=value,
        depth=value,
        relevance=value,
        feedback=feedback,
        strengths=["structured"],
        improvements=["more depth"],
    )


@pytest.fixture(autouse=True)
def tmp_db(monkeypatch, tmp_path):
    db_path = str(tmp_path / "test.db")
    monkeypatch.setattr(settings, "DB_PATH", db_path, raising=False)
    migrate(db_path)
    yield db_path


@pytest.fixture
def store(tmp_db):
    return SqliteInterviewStore(Path(tmp_db))


@pytest.fixture
def fake_llm():
    return FakeLlm()


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def sink():
    return RecordingNotificationSink()


@pytest.fixture
def orchestrator(store, fake_llm, clock, sink):
    return InterviewOrchestrator(store, fake_llm, sink=sink, clock=clock)


@pytest.fixture
def started(orchestrator):
    """A fresh in-progress session with its user, resume and job description."""

    user = orchestrator.register_user("ada@example.com", "Ada")
    resume = orchestrator.upload_resume(user.id, "ada.txt", "Python developer with SQL experience")
    jd = orchestrator.upload_job_description(user.id, "Backend Engineer", "Build Python services")
    session = orchestrator.start_session(user.id, resume.id, jd.id)
    return session


@pytest.fixture
def scripted_llm():
    """Factory building an ``InterviewLlm`` whose HTTP replies are scripted in order."""

    return _scripted_interview_llm
