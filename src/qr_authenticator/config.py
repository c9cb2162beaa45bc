"""Configuration for the QR authenticator.

Loads settings from a ``.env`` file and ``QR_AUTH_*`` environment variables.
"""

from __future__ import annotations

import logging
import os
from functools import lru_cache
from pathlib import Path

from dotenv import load_dotenv
from pydantic import BaseModel, Field, ValidationError, field_validator

ENV_PREFIX = "QR_AUTH_"


class ConfigError(RuntimeError):
    """Raised when the configuration cannot be loaded."""


class Settings(BaseModel):
    """Runtime settings for the session and its account service client."""

    service_url: str = Field(
        default="http://localhost:7071", description="Base URL of the account service"
    )
    request_timeout: float = Field(
        default=10.0, gt=0, description="Timeout in seconds for each account service request"
    )
    poll_fallback_seconds: float = Field(
        default=30.0, gt=0, description="Poll interval when the service reports no validity window"
    )
    retry_backoff_seconds: float = Field(
        default=30.0, gt=0, description="Delay before retrying a failed token poll"
    )
    tick_seconds: float = Field(default=1.0, gt=0, description="Countdown tick interval")
    log_level: str = Field(default="WARNING", description="Root log level")

    @field_validator("log_level")
    @classmethod
    def _known_level(cls, value: str) -> str:
        level = value.upper()
        if level not in logging.getLevelNamesMapping():
            raise ValueError(f"Unknown log level: {value}")
        return level


def _env(key: str) -> str | None:
    val = os.environ.get(ENV_PREFIX + key, "").strip().strip('"')
    return val or None


def load_settings(env_file: Path | None = None) -> Settings:
    """Build settings from the environment, after loading ``env_file`` if given."""
    if env_file is not None:
        load_dotenv(env_file)
    else:
        load_dotenv()

    values: dict[str, str] = {}
    for name in Settings.model_fields:
        raw = _env(name.upper())
        if raw is not None:
            values[name] = raw
    try:
        return Settings(**values)
    except ValidationError as exc:
        raise ConfigError(f"Invalid {ENV_PREFIX}* configuration: {exc}") from exc


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    """Load and cache the application settings."""
    return load_settings()
