from __future__ import annotations  # Resume, job description and fit agents

from textwrap import dedent
from typing import Optional

from langchain_core.prompts import ChatPromptTemplate

from config import LlmRoute
from llm_gateway import HttpClient, runnable as llm_runnable
from .schemas import FitEstimate, ParsedJD, ParsedResume
from .toolkit import clamp_text, comma_list


RESUME_PARSER_KEY = "agents.resume_parser"
JD_PARSER_KEY = "agents.jd_parser"
FIT_ESTIMATOR_KEY = "agents.fit_estimator"

RESUME_GUIDANCE = dedent(
    """
    You are an expert resume parser. Extract skills, work experience (company, role,
    duration, description bullets), projects (name, description, technologies, role),
    education (institution, degree, field, year) and certifications.
    Use empty lists for anything the resume does not mention.
    """
).strip()

JD_GUIDANCE = dedent(
    """
    You are an expert job description parser. Extract the title, requirements,
    skills_required, experience_level (one of Entry, Mid, Senior, Lead),
    responsibilities and key_competencies.
    Infer the experience level from the description. Use empty lists when absent.
    """
).strip()

FIT_GUIDANCE = dedent(
    """
    You are an expert recruiter evaluating candidate fit for a position.
    Consider skills match, experience level match, project relevance and education alignment.
    Return the fit as `score`, a number from 0 to 100.
    """
).strip()


class ResumeParserAgent:  # Agent extracting a structured resume
    def __init__(self, route: LlmRoute, *, client: Optional[HttpClient] = None) -> None:
        self._prompt = ChatPromptTemplate.from_messages(
            [
                ("system", "{instructions}"),
                ("human", "Parse this resume and extract the information:\n\n{resume}"),
            ]
        )
        self._chain = self._prompt | llm_runnable(route, ParsedResume, client=client)

    def invoke(self, resume_text: str) -> ParsedResume:
        return self._chain.invoke({"instructions": RESUME_GUIDANCE, "resume": resume_text.strip()})


class JobDescriptionParserAgent:  # Agent extracting a structured job description
    def __init__(self, route: LlmRoute, *, client: Optional[HttpClient] = None) -> None:
        self._prompt = ChatPromptTemplate.from_messages(
            [
                ("system", "{instructions}"),
                ("human", "Parse this job description and extract the information:\n\n{jd}"),
            ]
        )
        self._chain = self._prompt | llm_runnable(route, ParsedJD, client=client)

    def invoke(self, jd_text: str) -> ParsedJD:
        return self._chain.invoke({"instructions": JD_GUIDANCE, "jd": jd_text.strip()})


class FitEstimatorAgent:  # Agent estimating resume-to-JD alignment
    def __init__(self, route: LlmRoute, *, client: Optional[HttpClient] = None) -> None:
        self._prompt = ChatPromptTemplate.from_messages(
            [
                ("system", "{instructions}"),
                (
                    "human",
                    (
                        "Resume Summary:\n"
                        "Skills: {skills}\n"
                        "Experience: {experience}\n"
                        "Education: {education}\n\n"
                        "Job Description:\n"
                        "Title: {title}\n"
                        "Required Skills: {required}\n"
                        "Experience Level: {level}\n"
                        "Key Responsibilities: {responsibilities}\n\n"
                        "Evaluate the candidate's fit."
                    ),
                ),
            ]
        )
        self._chain = self._prompt | llm_runnable(route, FitEstimate, client=client)

    def invoke(self, resume: ParsedResume, jd: ParsedJD) -> float:
        estimate = self._chain.invoke(
            {
                "instructions": FIT_GUIDANCE,
                "skills": comma_list(resume.skills),
                "experience": comma_list(f"{e.role} at {e.company}" for e in resume.experience if e.role or e.company),
                "education": comma_list(
                    f"{e.degree} in {e.field} from {e.institution}" for e in resume.education if e.institution
                ),
                "title": jd.title or "(untitled role)",
                "required": comma_list(jd.skills_required),
                "level": jd.experience_level,
                "responsibilities": clamp_text("; ".join(jd.responsibilities), limit=900) or "None provided.",
            }
        )
        return estimate.score


__all__ = [
    "FIT_ESTIMATOR_KEY",
    "FitEstimatorAgent",
    "JD_PARSER_KEY",
    "JobDescriptionParserAgent",
    "RESUME_PARSER_KEY",
    "ResumeParserAgent",
]
