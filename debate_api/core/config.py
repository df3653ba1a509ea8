"""Application configuration using Pydantic Settings.

Configuration is environment-aware:
- APP_ENV determines which .env file to load
- Supports: development, testing, staging, production
- Each environment has its own .env.{environment} file
"""

from __future__ import annotations

import os
from pathlib import Path

from pydantic import BaseModel, Field
from pydantic_settings import BaseSettings, SettingsConfigDict


APP_ENV = os.getenv("APP_ENV", "development")

# Project root, so .env resolution doesn't depend on the working directory
PROJECT_ROOT = Path(__file__).resolve().parents[2]

ENV_FILE_MAP = {
    "development": ".env.development",
    "testing": ".env.testing",
    "staging": ".env.staging",
    "production": ".env.production",
}

_env_filename = ENV_FILE_MAP.get(APP_ENV, ".env.development")
_env_path = PROJECT_ROOT / _env_filename

# Production may inject everything through the environment instead
_env_file = str(_env_path) if _env_path.is_file() else None


# Nested BaseSettings don't inherit env_file, so populate os.environ up front.
if _env_file and os.getenv("TESTING") != "true":
    from dotenv import load_dotenv
    load_dotenv(_env_file, override=True)


class AppSettings(BaseSettings):
    """Application-wide configuration."""

    title: str = Field(
        "DebateAI API",
        description="Title shown in the generated OpenAPI document",
    )

    model_config = SettingsConfigDict(
        env_prefix="APP_",
        case_sensitive=False,
    )


class LogSettings(BaseSettings):
    """Logging output configuration."""

    level: str = Field("INFO", description="Root log level")
    format: str = Field("json", description="Either 'json' or 'plain'")
    output: str = Field("stdout", description="Either 'stdout' or 'file'")
    file_path: str | None = Field(None, description="Log file path when output=file")
    max_bytes: int = Field(
        10 * 1024 * 1024,
        description="Rotate the log file at this size (0 disables rotation)",
        ge=0,
    )
    backup_count: int = Field(5, description="Rotated files to keep", ge=0)
    request_id_header: str = Field(
        "X-Request-ID",
        description="Header used to read and echo the request correlation id",
    )

    model_config = SettingsConfigDict(
        env_prefix="LOG_",
        case_sensitive=False,
    )


class RateLimitPolicy(BaseModel):
    """One named quota: ``max_requests`` per ``window_ms`` milliseconds."""

    max_requests: int = Field(..., ge=1)
    window_ms: int = Field(..., ge=1)


def _default_policies() -> dict[str, RateLimitPolicy]:
    return {
        "public": RateLimitPolicy(max_requests=60, window_ms=60_000),
        "ip": RateLimitPolicy(max_requests=15, window_ms=60_000),
        "user": RateLimitPolicy(max_requests=5, window_ms=60_000),
    }


class RateLimitSettings(BaseSettings):
    """Rate limiting configuration.

    ``policies`` can be overridden with a JSON object, e.g.
    ``RATE_LIMIT_POLICIES='{"public": {"max_requests": 10, "window_ms": 60000}}'``.
    """

    enabled: bool = Field(
        True,
        description="Enable per-IP and per-user rate limiting",
    )
    cleanup_interval_ms: int = Field(
        60_000,
        description="Minimum delay between sweeps of expired limiter entries",
        ge=0,
    )
    policies: dict[str, RateLimitPolicy] = Field(
        default_factory=_default_policies,
        description="Named quota policies; one limiter is created per policy",
    )

    model_config = SettingsConfigDict(
        env_prefix="RATE_LIMIT_",
        case_sensitive=False,
    )


def _build_app_settings() -> AppSettings:
    """Build app settings from environment.

    Static type checkers treat BaseSettings fields as constructor arguments,
    which is not how BaseSettings is meant to be used.
    """

    return AppSettings()  # type: ignore[call-arg]


def _build_log_settings() -> LogSettings:
    return LogSettings()  # type: ignore[call-arg]


def _build_rate_limit_settings() -> RateLimitSettings:
    return RateLimitSettings()  # type: ignore[call-arg]


class Settings(BaseSettings):
    """Main application settings container.

    Loads from the matching .env.{APP_ENV} file when present. Invalid values
    fail at startup rather than on the first request.
    """

    app_env: str = APP_ENV
    app: AppSettings = Field(default_factory=_build_app_settings)
    log: LogSettings = Field(default_factory=_build_log_settings)
    rate_limit: RateLimitSettings = Field(default_factory=_build_rate_limit_settings)

    model_config = SettingsConfigDict(
        case_sensitive=False,
    )


# Nested settings are created via default_factory so env loading works.
settings = Settings()
