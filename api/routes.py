"""FastAPI routes for resumes, job descriptions and interview sessions."""
from __future__ import annotations

import asyncio
import logging
from typing import Any, Dict, NoReturn

from fastapi import APIRouter, Depends, HTTPException, Request, Response, WebSocket
from fastapi import status as ws_status

from api.schemas import (
    CreateUserReq,
    EndReq,
    FitScoreReq,
    FitScoreResp,
    NextQuestionReq,
    StartReq,
    SubmitAnswerReq,
    UploadJdReq,
    UploadResumeReq,
)
from services import (
    AnswerOutcome,
    EndOutcome,
    InterviewError,
    InterviewOrchestrator,
    NotificationHub,
    ReportView,
    StatusSnapshot,
)
from session_reports import render_report_pdf
from storage import JobDescription, Question, Resume, Session, User


logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api")

STATUS_BY_KIND = {
    "NotFound": 404,
    "InvalidState": 409,
    "InsufficientData": 422,
    "UpstreamFailure": 502,
}


def get_orchestrator(request: Request) -> InterviewOrchestrator:
    return request.app.state.orchestrator


def _raise_http(exc: Exception) -> NoReturn:
    if isinstance(exc, InterviewError):
        status = STATUS_BY_KIND.get(exc.kind, 500)
        if status >= 500:
            logger.error("Interview call failed kind=%s: %s", exc.kind, exc)
        raise HTTPException(status_code=status, detail=str(exc)) from exc
    if isinstance(exc, ValueError):
        raise HTTPException(status_code=422, detail=str(exc)) from exc
    raise exc


@router.post("/users", response_model=User, status_code=201)
def create_user(payload: CreateUserReq, orchestrator: InterviewOrchestrator = Depends(get_orchestrator)) -> User:
    return orchestrator.register_user(payload.email, payload.name)


@router.post("/upload-resume", response_model=Resume, status_code=201)
def upload_resume(payload: UploadResumeReq, orchestrator: InterviewOrchestrator = Depends(get_orchestrator)) -> Resume:
    try:
        return orchestrator.upload_resume(payload.user_id, payload.file_name, payload.text)
    except (InterviewError, ValueError) as exc:
        _raise_http(exc)


@router.post("/upload-jd", response_model=JobDescription, status_code=201)
def upload_jd(payload: UploadJdReq, orchestrator: InterviewOrchestrator = Depends(get_orchestrator)) -> JobDescription:
    try:
        return orchestrator.upload_job_description(payload.user_id, payload.title, payload.text)
    except (InterviewError, ValueError) as exc:
        _raise_http(exc)


@router.post("/fit-score", response_model=FitScoreResp)
def fit_score(payload: FitScoreReq, orchestrator: InterviewOrchestrator = Depends(get_orchestrator)) -> FitScoreResp:
    try:
        jd = orchestrator.calculate_fit(payload.resume_id, payload.jd_id)
    except (InterviewError, ValueError) as exc:
        _raise_http(exc)
    return FitScoreResp(jd_id=jd.id, fit_score=jd.fit_score or 0.0)


@router.post("/interview/start", response_model=Session, status_code=201)
def start_interview(payload: StartReq, orchestrator: InterviewOrchestrator = Depends(get_orchestrator)) -> Session:
    try:
        return orchestrator.start_session(payload.user_id, payload.resume_id, payload.jd_id)
    except (InterviewError, ValueError) as exc:
        _raise_http(exc)


@router.post("/interview/next-question", response_model=Question)
def next_question(payload: NextQuestionReq, orchestrator: InterviewOrchestrator = Depends(get_orchestrator)) -> Question:
    try:
        return orchestrator.next_question(payload.session_id)
    except (InterviewError, ValueError) as exc:
        _raise_http(exc)


@router.post("/interview/submit-answer", response_model=AnswerOutcome)
def submit_answer(
    payload: SubmitAnswerReq,
    orchestrator: InterviewOrchestrator = Depends(get_orchestrator),
) -> AnswerOutcome:
    try:
        return orchestrator.submit_answer(payload.question_id, payload.answer_text, payload.time_taken)
    except (InterviewError, ValueError) as exc:
        _raise_http(exc)


@router.get("/interview/{session_id}/status", response_model=StatusSnapshot)
def interview_status(session_id: str, orchestrator: InterviewOrchestrator = Depends(get_orchestrator)) -> StatusSnapshot:
    try:
        return orchestrator.get_status(session_id)
    except (InterviewError, ValueError) as exc:
        _raise_http(exc)


@router.post("/interview/end", response_model=EndOutcome)
def end_interview(payload: EndReq, orchestrator: InterviewOrchestrator = Depends(get_orchestrator)) -> EndOutcome:
    try:
        return orchestrator.end_session(payload.session_id, payload.reason or None)
    except (InterviewError, ValueError) as exc:
        _raise_http(exc)


@router.get("/interview/{session_id}/report", response_model=ReportView)
def interview_report(session_id: str, orchestrator: InterviewOrchestrator = Depends(get_orchestrator)) -> ReportView:
    try:
        return orchestrator.get_report(session_id)
    except (InterviewError, ValueError) as exc:
        _raise_http(exc)


@router.get("/interview/{session_id}/report.pdf")
def interview_report_pdf(session_id: str, orchestrator: InterviewOrchestrator = Depends(get_orchestrator)) -> Response:
    try:
        view = orchestrator.get_report(session_id)
        history = orchestrator.get_history(session_id)
    except (InterviewError, ValueError) as exc:
        _raise_http(exc)
    pdf_bytes = render_report_pdf(view, history)
    headers = {"Content-Disposition": f'attachment; filename="interview-report-{session_id}.pdf"'}
    return Response(content=pdf_bytes, media_type="application/pdf", headers=headers)


@router.websocket("/interview/{session_id}/events")
async def interview_events(websocket: WebSocket, session_id: str) -> None:
    """Stream question-ready, answer-evaluated and status-changed events for one session."""

    orchestrator: InterviewOrchestrator = websocket.app.state.orchestrator
    hub = orchestrator.sink
    if not isinstance(hub, NotificationHub):
        await websocket.close(code=ws_status.WS_1008_POLICY_VIOLATION, reason="Notifications are disabled")
        return
    try:
        orchestrator.get_session(session_id)
    except InterviewError as exc:
        await websocket.close(code=ws_status.WS_1008_POLICY_VIOLATION, reason=str(exc))
        return

    loop = asyncio.get_running_loop()
    queue: "asyncio.Queue[Dict[str, Any]]" = asyncio.Queue()

    def _forward(sid: str, event: str, payload: Dict[str, Any]) -> None:
        # Called from worker threads; hand the event to this socket's loop.
        loop.call_soon_threadsafe(queue.put_nowait, {"event": event, "session_id": sid, "payload": payload})

    async def _pump() -> None:
        while True:
            await websocket.send_json(await queue.get())

    unsubscribe = hub.subscribe(session_id, _forward)
    pump = None
    try:
        await websocket.accept()
        pump = asyncio.create_task(_pump())
        while True:
            message = await websocket.receive()
            if message["type"] == "websocket.disconnect":
                break
    finally:
        unsubscribe()
        if pump is not None:
            pump.cancel()
