from __future__ import annotations  # FastAPI server exposing the adaptive mock interview API

import logging
from pathlib import Path
from typing import Optional

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from agents import InterviewLlm, InterviewLlmPort
from api.routes import router
from config.settings import Settings, settings as default_settings
from services import InterviewOrchestrator, NotificationHub, NotificationSink, NullNotificationSink
from storage import InterviewStore, SqliteInterviewStore


logger = logging.getLogger(__name__)

ROOT = Path(__file__).resolve().parent


def _resolve(path: str) -> Path:  # Relative paths are anchored at the project root
    candidate = Path(path)
    return candidate if candidate.is_absolute() else ROOT / candidate


def build_orchestrator(
    cfg: Optional[Settings] = None,
    *,
    store: Optional[InterviewStore] = None,
    llm: Optional[InterviewLlmPort] = None,
    sink: Optional[NotificationSink] = None,
) -> InterviewOrchestrator:  # Wire store, LLM and notifications once per process
    cfg = cfg or default_settings
    if store is None:
        store = SqliteInterviewStore(_resolve(cfg.DB_PATH))
    if llm is None:
        llm = InterviewLlm.from_config(_resolve(cfg.APP_CONFIG_PATH))
    if sink is None:
        sink = NotificationHub() if cfg.NOTIFICATIONS_ENABLED else NullNotificationSink()
    return InterviewOrchestrator(store, llm, sink=sink)


def create_app(orchestrator: Optional[InterviewOrchestrator] = None, cfg: Optional[Settings] = None) -> FastAPI:
    cfg = cfg or default_settings
    app = FastAPI(title="Adaptive Mock Interview API")
    origins = [origin.strip() for origin in cfg.CORS_ORIGINS.split(",") if origin.strip()] or ["*"]
    app.add_middleware(
        CORSMiddleware,
        allow_origins=origins,
        allow_credentials=False,
        allow_methods=["*"],
        allow_headers=["*"],
    )
    app.state.orchestrator = orchestrator or build_orchestrator(cfg)
    app.include_router(router)
    logger.info("Interview API ready db=%s", cfg.DB_PATH)
    return app


if __name__ == "__main__":
    import uvicorn

    uvicorn.run(create_app(), host="0.0.0.0", port=8000)
