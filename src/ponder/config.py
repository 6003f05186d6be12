"""Configuration management for Ponder."""

from __future__ import annotations

import os
from pathlib import Path
from typing import Any

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

DEFAULT_API_BASE = "https://api.openai.com/v1"
DEFAULT_MODEL = "gpt-4o-mini"
DEFAULT_HOME = "~/.ponder"
FALLBACK_API_KEY_ENV = "OPENAI_API_KEY"


class Settings(BaseSettings):
    """Application settings."""

    model_config = SettingsConfigDict(
        env_prefix="PONDER_",
        case_sensitive=False,
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # API Configuration
    api_key: str | None = Field(None, description="Bearer credential for the completion endpoint")
    api_base: str = Field(default=DEFAULT_API_BASE, description="Base URL of the OpenAI-compatible API")
    model: str = Field(default=DEFAULT_MODEL, description="Model used for every round")
    timeout_seconds: int = Field(default=120, description="HTTP timeout for one remote call")

    # Reasoning Configuration
    rounds: int = Field(default=3, ge=1, description="Number of private reasoning rounds")
    reasoning_max_tokens: int = Field(default=1024, ge=1, description="Token cap for one reasoning round")

    # Storage Configuration
    home: str = Field(default=DEFAULT_HOME, description="Per-user data directory")

    # Logging Configuration
    log_level: str = Field(default="WARNING", description="Log level")

    @property
    def resolved_api_key(self) -> str | None:
        if self.api_key:
            return self.api_key
        return os.getenv(FALLBACK_API_KEY_ENV) or None

    def resolve_home(self) -> Path:
        return Path(self.home).expanduser()

    @property
    def conversations_dir(self) -> Path:
        return self.resolve_home() / "conversations"


def get_settings(**overrides: Any) -> Settings:
    """Build settings from the environment, applying non-empty overrides.

    Args:
        overrides: Field values taking precedence over the environment

    Returns:
        Settings instance
    """
    values = {key: value for key, value in overrides.items() if value is not None}
    return Settings(**values)
