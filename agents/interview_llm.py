from __future__ import annotations  # Facade bundling every LLM-backed interview agent

import logging
from pathlib import Path
from typing import Optional, Protocol

from config import AppConfig, load_config
from llm_gateway import HttpClient
from .answer_evaluator import ANSWER_EVALUATOR_KEY, AnswerEvaluatorAgent
from .profile_parsers import (
    FIT_ESTIMATOR_KEY,
    JD_PARSER_KEY,
    RESUME_PARSER_KEY,
    FitEstimatorAgent,
    JobDescriptionParserAgent,
    ResumeParserAgent,
)
from .question_writer import QUESTION_WRITER_KEY, QuestionWriterAgent
from .schemas import AnswerRubric, EvaluationContext, ParsedJD, ParsedResume, QuestionContext


logger = logging.getLogger(__name__)


class InterviewLlmPort(Protocol):  # Operations the orchestrator needs from the language model
    def generate_question_text(self, context: QuestionContext) -> str: ...

    def evaluate_answer(self, context: EvaluationContext) -> AnswerRubric: ...

    def parse_resume(self, text: str) -> ParsedResume: ...

    def parse_job_description(self, text: str) -> ParsedJD: ...

    def estimate_fit(self, resume: ParsedResume, jd: ParsedJD) -> float: ...


class InterviewLlm:  # Concrete port wiring one agent per registry key
    def __init__(self, cfg: AppConfig, *, client: Optional[HttpClient] = None) -> None:
        self._question_writer = QuestionWriterAgent(cfg.route_for(QUESTION_WRITER_KEY), client=client)
        self._answer_evaluator = AnswerEvaluatorAgent(cfg.route_for(ANSWER_EVALUATOR_KEY), client=client)
        self._resume_parser = ResumeParserAgent(cfg.route_for(RESUME_PARSER_KEY), client=client)
        self._jd_parser = JobDescriptionParserAgent(cfg.route_for(JD_PARSER_KEY), client=client)
        self._fit_estimator = FitEstimatorAgent(cfg.route_for(FIT_ESTIMATOR_KEY), client=client)

    @classmethod
    def from_config(cls, path: Path, *, client: Optional[HttpClient] = None) -> "InterviewLlm":
        cfg = load_config(path)
        logger.info("Loaded LLM registry from %s (%d routes)", path, len(cfg.llm_routes))
        return cls(cfg, client=client)

    def generate_question_text(self, context: QuestionContext) -> str:
        return self._question_writer.invoke(context)

    def evaluate_answer(self, context: EvaluationContext) -> AnswerRubric:
        return self._answer_evaluator.invoke(context)

    def parse_resume(self, text: str) -> ParsedResume:
        return self._resume_parser.invoke(text)

    def parse_job_description(self, text: str) -> ParsedJD:
        return self._jd_parser.invoke(text)

    def estimate_fit(self, resume: ParsedResume, jd: ParsedJD) -> float:
        return self._fit_estimator.invoke(resume, jd)


__all__ = ["InterviewLlm", "InterviewLlmPort"]
