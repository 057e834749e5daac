import json

import pytest
from pydantic import ValidationError

from agents import (
    AnswerEvaluatorAgent,
    EvaluationContext,
    FitEstimatorAgent,
    InterviewLlm,
    JobDescriptionParserAgent,
    ParsedJD,
    ParsedResume,
    QuestionContext,
    QuestionWriterAgent,
    ResumeParserAgent,
)
from agents.schemas import AnswerRubric, FitEstimate
from config import AppConfig, LlmRoute
from llm_gateway import LlmOutputError


class FakeResponse:
    status_code = 200
    text = ""

    def __init__(self, content: str):
        self._content = content

    def json(self):
        return {"choices": [{"message": {"content": self._content}}]}


class RecordingClient:
    def __init__(self, *contents: str):
        self.contents = list(contents)
        self.payloads = []

    def post(self, url, *, json, headers, timeout):
        self.payloads.append(json)
        return FakeResponse(self.contents.pop(0))


def _route() -> LlmRoute:
    return LlmRoute(name="test", base_url="http://llm.local", endpoint="/chat", model="m", timeout_s=1.0)


def _prompt_text(payload) -> str:
    return "\n".join(message["content"] for message in payload["messages"])


def test_question_writer_prompt_carries_context():
    client = RecordingClient(json.dumps({"text": "  Explain   database indexing trade-offs. "}))
    agent = QuestionWriterAgent(_route(), client=client)
    text = agent.invoke(
        QuestionContext(
            candidate_skills=["python"],
            jd_title="Backend Engineer",
            jd_skills_required=["postgres"],
            difficulty="Hard",
            category="Conceptual",
            previous_questions=["What is a B-tree?"],
            previous_scores=[80, 90],
        )
    )
    assert text == "Explain database indexing trade-offs."
    prompt = _prompt_text(client.payloads[0])
    assert "ONE Conceptual interview question for Hard difficulty" in prompt
    assert "Design patterns and principles" in prompt
    assert "What is a B-tree?" in prompt
    assert "85.0" in prompt


def test_answer_evaluator_clamps_and_trims():
    reply = {
        "accuracy": 120,
        "clarity": 70,
        "depth": -5,
        "relevance": 60,
        "feedback": "Good   answer.",
        "strengths": ["a", "b", "c", "d"],
        "improvements": ["", "x"],
    }
    client = RecordingClient(json.dumps(reply))
    agent = AnswerEvaluatorAgent(_route(), client=client)
    rubric = agent.invoke(
        EvaluationContext(
            question_text="Tell me about a conflict.",
            difficulty="Medium",
            category="Behavioral",
            answer_text="Situation, task, action, result.",
            time_taken=90,
            time_limit=180,
        )
    )
    assert rubric.accuracy == 100 and rubric.depth == 0
    assert rubric.feedback == "Good answer."
    assert rubric.strengths == ["a", "b", "c"]
    assert rubric.improvements == ["x"]
    assert "STAR method" in _prompt_text(client.payloads[0])


def test_neutral_rubric():
    neutral = AnswerRubric.neutral()
    assert (neutral.accuracy, neutral.clarity, neutral.depth, neutral.relevance) == (50, 50, 50, 50)
    assert neutral.feedback == ""


def test_profile_parsers_and_fit():
    resume_reply = {"skills": ["python"], "experience": [{"company": "Acme", "role": "Dev"}]}
    jd_reply = {"title": "Platform Engineer", "skills_required": ["go"], "experience_level": "senior engineer"}
    client = RecordingClient(json.dumps(resume_reply), json.dumps(jd_reply), '{"score": 64.5}')
    resume = ResumeParserAgent(_route(), client=client).invoke("resume text")
    jd = JobDescriptionParserAgent(_route(), client=client).invoke("jd text")
    fit = FitEstimatorAgent(_route(), client=client).invoke(resume, jd)
    assert resume.skills == ["python"]
    assert jd.experience_level == "Senior"
    assert fit == 64.5
    assert "Dev at Acme" in _prompt_text(client.payloads[2])


def test_unknown_level_defaults_to_mid():
    assert ParsedJD(experience_level="principal").experience_level == "Mid"
    assert ParsedResume().skills == []


def test_interview_llm_from_registry():
    route = _route()
    cfg = AppConfig(
        llm_routes={"main": route},
        registry={
            "agents.question_writer": "main",
            "agents.answer_evaluator": "main",
            "agents.resume_parser": "main",
            "agents.jd_parser": "main",
            "agents.fit_estimator": "main",
        },
    )
    client = RecordingClient('{"text": "Why Python?"}')
    llm = InterviewLlm(cfg, client=client)
    context = QuestionContext(difficulty="Easy", category="Technical")
    assert llm.generate_question_text(context) == "Why Python?"


def test_null_rubric_field_is_malformed_output():
    reply = json.dumps({"accuracy": None, "clarity": 70, "depth": 70, "relevance": 70})
    client = RecordingClient(reply, reply, reply)
    agent = AnswerEvaluatorAgent(_route(), client=client)
    with pytest.raises(LlmOutputError):
        agent.invoke(
            EvaluationContext(
                question_text="What is MVCC?",
                difficulty="Medium",
                category="Conceptual",
                answer_text="Snapshots.",
                time_taken=30,
                time_limit=180,
            )
        )
    assert client.contents == []


def test_null_fit_score_is_malformed_output():
    client = RecordingClient('{"score": null}', '{"score": null}', '{"score": null}')
    with pytest.raises(LlmOutputError):
        FitEstimatorAgent(_route(), client=client).invoke(ParsedResume(), ParsedJD())


@pytest.mark.parametrize("bad", [None, [70], {"value": 70}, "high", "nan", True])
def test_rubric_rejects_non_numeric_values(bad):
    with pytest.raises(ValidationError):
        AnswerRubric(accuracy=bad, clarity=50, depth=50, relevance=50)
    with pytest.raises(ValidationError):
        FitEstimate(score=bad)
