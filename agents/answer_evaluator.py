from __future__ import annotations  # Answer evaluator agent scoring replies against the rubric

from textwrap import dedent
from typing import Dict, Optional, Type

from langchain_core.prompts import ChatPromptTemplate

from config import LlmRoute
from engine.types import Category
from llm_gateway import HttpClient, runnable as llm_runnable
from .schemas import AnswerRubric, EvaluationContext
from .toolkit import clamp_text, comma_list


ANSWER_EVALUATOR_KEY = "agents.answer_evaluator"  # Registry key for evaluator configuration

RUBRIC_GUIDANCE: Dict[Category, str] = {
    "Technical": dedent(
        """
        Evaluate technical answers on:
        - Accuracy (30%): correct terminology, concepts and information
        - Clarity (20%): clear communication of technical concepts
        - Depth (25%): practical understanding, code quality, best practices
        - Relevance (15%): alignment with the question asked
        Completeness and mentioned best practices should raise depth.
        """
    ).strip(),
    "Conceptual": dedent(
        """
        Evaluate conceptual answers on:
        - Accuracy (30%): correct theoretical understanding
        - Clarity (20%): clear explanation of concepts
        - Depth (25%): understanding of underlying principles
        - Relevance (15%): alignment with the question
        """
    ).strip(),
    "Behavioral": dedent(
        """
        Evaluate behavioral answers on:
        - Accuracy (30%): use of the STAR method (Situation, Task, Action, Result)
        - Clarity (20%): communication clarity
        - Depth (25%): specific examples and self-awareness
        - Relevance (15%): alignment with the question
        """
    ).strip(),
    "Scenario": dedent(
        """
        Evaluate scenario-based answers on:
        - Accuracy (30%): appropriate solution to the scenario
        - Clarity (20%): clear explanation of the approach
        - Depth (25%): consideration of alternatives and trade-offs
        - Relevance (15%): alignment with the scenario
        """
    ).strip(),
}

EVALUATOR_GUIDANCE = dedent(
    """
    You are an expert interview evaluator. Score each criterion on a 0-100 scale.
    Time efficiency is measured separately; do not score it.
    Return accuracy, clarity, depth, relevance, a short feedback paragraph,
    up to three strengths and up to three improvements.
    """
).strip()


class AnswerEvaluatorAgent:  # Agent scoring a candidate answer
    def __init__(
        self,
        route: LlmRoute,
        schema: Type[AnswerRubric] = AnswerRubric,
        *,
        client: Optional[HttpClient] = None,
    ) -> None:
        self._route = route
        self._schema = schema
        self._prompt = ChatPromptTemplate.from_messages(
            [
                ("system", "{instructions}"),
                (
                    "human",
                    (
                        "Question: {question}\n"
                        "Difficulty: {difficulty}\n"
                        "Category: {category}\n\n"
                        "Candidate Answer:\n{answer}\n\n"
                        "Time Taken: {time_taken}s / {time_limit}s\n"
                        "Candidate Skills: {candidate_skills}\n"
                        "Required Skills: {jd_skills}\n\n"
                        "Evaluate this answer and return the JSON response."
                    ),
                ),
            ]
        )
        self._chain = self._prompt | llm_runnable(self._route, self._schema, client=client)

    def invoke(self, context: EvaluationContext) -> AnswerRubric:  # Score an answer; raises LlmGatewayError upstream
        instructions = EVALUATOR_GUIDANCE + "\n\n" + RUBRIC_GUIDANCE.get(context.category, RUBRIC_GUIDANCE["Technical"])
        rubric = self._chain.invoke(
            {
                "instructions": instructions,
                "question": context.question_text.strip(),
                "difficulty": context.difficulty,
                "category": context.category,
                "answer": clamp_text(context.answer_text, limit=4000),
                "time_taken": f"{context.time_taken:.0f}",
                "time_limit": context.time_limit,
                "candidate_skills": comma_list(context.candidate_skills),
                "jd_skills": comma_list(context.jd_skills_required),
            }
        )
        return rubric.model_copy(
            update={
                "feedback": " ".join(rubric.feedback.split()),
                "strengths": [item.strip() for item in rubric.strengths if item.strip()][:3],
                "improvements": [item.strip() for item in rubric.improvements if item.strip()][:3],
            }
        )


__all__ = ["ANSWER_EVALUATOR_KEY", "AnswerEvaluatorAgent", "RUBRIC_GUIDANCE"]
