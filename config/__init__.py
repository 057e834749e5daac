"""Configuration package for the mock interview service."""
from .llm import AppConfig, LlmRoute, load_config
from .settings import Settings, settings

__all__ = [
    "AppConfig",
    "LlmRoute",
    "load_config",
    "Settings",
    "settings",
]
