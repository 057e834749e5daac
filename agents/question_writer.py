from __future__ import annotations  # Question writer agent for adaptive interviews

from textwrap import dedent
from typing import Dict, Optional, Type

from langchain_core.prompts import ChatPromptTemplate

from config import LlmRoute
from engine.types import Category
from llm_gateway import HttpClient, runnable as llm_runnable
from .schemas import QuestionContext, QuestionDraft
from .toolkit import average_text, bullet_list, clamp_text, comma_list


QUESTION_WRITER_KEY = "agents.question_writer"  # Registry key for question writer configuration

CATEGORY_GUIDANCE: Dict[Category, str] = {
    "Technical": dedent(
        """
        Generate technical questions that assess:
        - Practical knowledge and coding abilities
        - Framework and technology understanding
        - Problem-solving skills
        - Code quality and best practices
        - System design capabilities
        """
    ).strip(),
    "Conceptual": dedent(
        """
        Generate conceptual questions that assess:
        - Theoretical understanding
        - Architectural concepts
        - Design patterns and principles
        - Technology trade-offs
        - Fundamental concepts
        """
    ).strip(),
    "Behavioral": dedent(
        """
        Generate behavioral questions that assess:
        - Problem-solving approach
        - Team collaboration
        - Leadership abilities
        - Conflict resolution
        - Communication skills
        """
    ).strip(),
    "Scenario": dedent(
        """
        Generate scenario-based questions that assess:
        - Practical application of knowledge
        - Real-world problem solving
        - Decision-making under pressure
        - Prioritization skills
        - Customer and user focus
        """
    ).strip(),
}

QUESTION_RULES = dedent(
    """
    Rules:
    1. Ask exactly one question and nothing else.
    2. Match the requested difficulty level.
    3. Align the question with the required skills and the candidate background.
    4. Keep it clear, specific and answerable within the time limit.
    5. Never repeat a previous question.
    6. Lean harder when previous scores are high (above 75) and easier when they are low (below 50).
    """
).strip()


class QuestionWriterAgent:  # Agent writing the next interview question
    def __init__(
        self,
        route: LlmRoute,
        schema: Type[QuestionDraft] = QuestionDraft,
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
                        "Generate ONE {category} interview question for {difficulty} difficulty.\n\n"
                        "Role: {jd_title} ({experience_level} level)\n"
                        "Candidate Skills: {candidate_skills}\n"
                        "Candidate Experience:\n{candidate_experience}\n"
                        "Job Requirements:\n{jd_requirements}\n"
                        "Required Skills: {jd_skills}\n"
                        "Previous Questions:\n{previous_questions}\n"
                        "Average Previous Score: {average_score}\n\n"
                        "Return JSON with a single `text` field holding the question."
                    ),
                ),
            ]
        )
        self._chain = self._prompt | llm_runnable(self._route, self._schema, client=client)

    def invoke(self, context: QuestionContext) -> str:  # Produce question text for the given context
        instructions = (
            f"You are an expert interviewer for {context.jd_experience_level} level positions.\n"
            "Generate focused, relevant interview questions that assess candidate capabilities.\n\n"
            f"{CATEGORY_GUIDANCE.get(context.category, CATEGORY_GUIDANCE['Technical'])}\n\n"
            f"{QUESTION_RULES}"
        )
        draft = self._chain.invoke(
            {
                "instructions": instructions,
                "category": context.category,
                "difficulty": context.difficulty,
                "jd_title": context.jd_title or "(untitled role)",
                "experience_level": context.jd_experience_level,
                "candidate_skills": comma_list(context.candidate_skills),
                "candidate_experience": bullet_list(
                    f"{entry.role} at {entry.company}"
                    for entry in context.candidate_experience
                    if entry.role or entry.company
                ),
                "jd_requirements": bullet_list(context.jd_requirements),
                "jd_skills": comma_list(context.jd_skills_required),
                "previous_questions": bullet_list(clamp_text(text, limit=200) for text in context.previous_questions),
                "average_score": average_text(context.previous_scores),
            }
        )
        return " ".join(draft.text.split())


__all__ = ["CATEGORY_GUIDANCE", "QUESTION_WRITER_KEY", "QuestionWriterAgent"]
