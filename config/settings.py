"""Application settings and configuration management."""
from __future__ import annotations

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Settings loaded from environment variables or defaults."""

    DB_PATH: str = Field(default="data/interview.db")
    APP_CONFIG_PATH: str = Field(default="app_config.json")

    NOTIFICATIONS_ENABLED: bool = True
    CORS_ORIGINS: str = "*"

    model_config = SettingsConfigDict(env_file=".env", validate_assignment=True)


settings = Settings()
