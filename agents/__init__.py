"""LLM-backed collaborators for the adaptive interview engine."""
from .answer_evaluator import ANSWER_EVALUATOR_KEY, AnswerEvaluatorAgent
from .interview_llm import InterviewLlm, InterviewLlmPort
from .profile_parsers import (
    FIT_ESTIMATOR_KEY,
    JD_PARSER_KEY,
    RESUME_PARSER_KEY,
    FitEstimatorAgent,
    JobDescriptionParserAgent,
    ResumeParserAgent,
)
from .question_writer import QUESTION_WRITER_KEY, QuestionWriterAgent
from .schemas import (
    AnswerRubric,
    EducationEntry,
    EvaluationContext,
    ExperienceEntry,
    FitEstimate,
    ParsedJD,
    ParsedResume,
    Project,
    QuestionContext,
    QuestionDraft,
)

__all__ = [
    "ANSWER_EVALUATOR_KEY",
    "AnswerEvaluatorAgent",
    "AnswerRubric",
    "EducationEntry",
    "EvaluationContext",
    "ExperienceEntry",
    "FIT_ESTIMATOR_KEY",
    "FitEstimate",
    "FitEstimatorAgent",
    "InterviewLlm",
    "InterviewLlmPort",
    "JD_PARSER_KEY",
    "JobDescriptionParserAgent",
    "ParsedJD",
    "ParsedResume",
    "Project",
    "QUESTION_WRITER_KEY",
    "QuestionContext",
    "QuestionDraft",
    "QuestionWriterAgent",
    "RESUME_PARSER_KEY",
    "ResumeParserAgent",
]
