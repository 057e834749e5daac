import json

import pytest
from pydantic import ValidationError

from agents import InterviewLlm
from config import AppConfig, load_config
from config.settings import Settings

from api_server import ROOT


def test_settings_defaults():
    cfg = Settings(_env_file=None)
    assert cfg.DB_PATH.endswith(".db")
    assert cfg.APP_CONFIG_PATH == "app_config.json"
    assert cfg.NOTIFICATIONS_ENABLED is True


def test_settings_read_environment(monkeypatch):
    monkeypatch.setenv("NOTIFICATIONS_ENABLED", "false")
    monkeypatch.setenv("CORS_ORIGINS", "http://localhost:3000")
    cfg = Settings(_env_file=None)
    assert cfg.NOTIFICATIONS_ENABLED is False
    assert cfg.CORS_ORIGINS == "http://localhost:3000"


def test_bundled_app_config_covers_every_agent():
    cfg = load_config(ROOT / "app_config.json")
    llm = InterviewLlm(cfg)
    assert llm is not None


def test_registry_rejects_unknown_routes():
    with pytest.raises(ValidationError):
        AppConfig(llm_routes={}, registry={"agents.question_writer": "missing"})


def test_route_for_missing_key(tmp_path):
    path = tmp_path / "config.json"
    path.write_text(json.dumps({"llm_routes": {}, "registry": {}}), encoding="utf-8")
    with pytest.raises(KeyError):
        InterviewLlm.from_config(path)
