from __future__ import annotations  # LLM route configuration

from pathlib import Path
from typing import Dict

from pydantic import BaseModel, Field, model_validator


class LlmRoute(BaseModel):  # One OpenAI-compatible chat endpoint
    name: str
    base_url: str
    endpoint: str = "/v1/chat/completions"
    model: str
    timeout_s: float = Field(default=30.0, ge=0.1)
    max_retries: int = Field(default=2, ge=0)
    api_key_env: str | None = None
    response_format: str | None = None
    extra_headers: Dict[str, str] = Field(default_factory=dict)
    sequential: bool = False
    enforce_json: bool = True


class AppConfig(BaseModel):  # Routes plus the agent-key to route-id registry
    llm_routes: Dict[str, LlmRoute]
    registry: Dict[str, str]

    @model_validator(mode="after")
    def _registry_targets_exist(self) -> "AppConfig":
        unknown = sorted({route_id for route_id in self.registry.values() if route_id not in self.llm_routes})
        if unknown:
            raise ValueError(f"Registry references unknown routes: {', '.join(unknown)}")
        return self

    def route_for(self, key: str) -> LlmRoute:  # Route configured for an agent key
        try:
            return self.llm_routes[self.registry[key]]
        except KeyError as exc:
            raise KeyError(f"Registry entry missing for '{key}'") from exc


def load_config(path: Path) -> AppConfig:
    data = Path(path).read_text(encoding="utf-8")
    return AppConfig.model_validate_json(data)

