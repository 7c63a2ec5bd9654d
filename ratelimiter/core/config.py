"""Application configuration using Pydantic Settings.

Configuration is environment-aware:
- APP_ENV determines which .env file to load
- Supports: development, testing, staging, production
- Each environment has its own .env.{environment} file
"""

from __future__ import annotations

import os
from pathlib import Path
from typing import Literal

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


APP_ENV = os.getenv("APP_ENV", "development")

# Project root (so .env resolution doesn't depend on current working directory)
PROJECT_ROOT = Path(__file__).resolve().parents[2]

ENV_FILE_MAP = {
    "development": ".env.development",
    "testing": ".env.testing",
    "staging": ".env.staging",
    "production": ".env.production",
}

_env_filename = ENV_FILE_MAP.get(APP_ENV, ".env.development")
_env_path = PROJECT_ROOT / _env_filename

# Only load from file if it exists (production might inject via env vars only)
_env_file = str(_env_path) if _env_path.is_file() else None


# Nested BaseSettings don't inherit env_file, so populate os.environ first.
if _env_file:
    from dotenv import load_dotenv
    load_dotenv(_env_file, override=True)


StrategyName = Literal["fixedwindow", "slidingwindow", "swcounter", "tokenbucket"]


def _build_rate_limit_settings() -> "RateLimitSettings":
    """Build rate limit settings from environment."""

    return RateLimitSettings()


def _build_log_settings() -> "LogSettings":
    return LogSettings()


def _build_server_settings() -> "ServerSettings":
    return ServerSettings()


class RateLimitSettings(BaseSettings):
    """Rate limiting configuration.

    ``limit`` and ``window_seconds`` fall back to the selected strategy's
    defaults when unset (see ``ratelimiter.adapters.rate_limit.factory``).
    For the token bucket they mean capacity and refill period.
    """

    enabled: bool = Field(
        True,
        description="Enforce per-client rate limiting on limited routes",
    )
    strategy: StrategyName = Field(
        "tokenbucket",
        description="Rate limiting algorithm: fixedwindow, slidingwindow, swcounter or tokenbucket",
    )
    limit: int | None = Field(
        None,
        description="Maximum requests per window (token bucket: capacity)",
        ge=1,
    )
    window_seconds: float | None = Field(
        None,
        description="Window size in seconds (token bucket: refill period)",
        gt=0,
        allow_inf_nan=False,
    )

    model_config = SettingsConfigDict(
        env_prefix="RATE_LIMIT_",
        case_sensitive=False,
    )


class LogSettings(BaseSettings):
    """Logging configuration."""

    level: str = Field("INFO", description="Root log level")
    format: Literal["json", "plain"] = Field("json", description="Log line format")
    output: Literal["stdout", "file"] = Field("stdout", description="Log destination")
    file_path: str | None = Field(None, description="Log file path when output=file")
    max_bytes: int = Field(
        10 * 1024 * 1024,
        description="Rotate the log file at this size (0 disables rotation)",
        ge=0,
    )
    backup_count: int = Field(5, description="Rotated log files to keep", ge=0)
    request_id_header: str = Field(
        "X-Request-ID",
        description="Header used to read and echo the request correlation id",
    )

    model_config = SettingsConfigDict(
        env_prefix="LOG_",
        case_sensitive=False,
    )


class ServerSettings(BaseSettings):
    """HTTP server bind configuration."""

    host: str = Field("0.0.0.0", description="Interface to bind")
    port: int = Field(8080, description="Port to listen on", ge=1, le=65535)

    model_config = SettingsConfigDict(
        env_prefix="SERVER_",
        case_sensitive=False,
    )


class Settings(BaseSettings):
    """Main application settings container.

    Automatically loads from the appropriate .env.{APP_ENV} file.
    Raises validation errors on startup if settings are invalid.
    """

    app_env: str = APP_ENV
    rate_limit: RateLimitSettings = Field(default_factory=_build_rate_limit_settings)
    log: LogSettings = Field(default_factory=_build_log_settings)
    server: ServerSettings = Field(default_factory=_build_server_settings)

    model_config = SettingsConfigDict(
        case_sensitive=False,
    )


settings = Settings()
