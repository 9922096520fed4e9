"""Application configuration using pydantic-settings."""

from __future__ import annotations

from functools import lru_cache
from typing import Literal

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

SERVICE_NAME = "cloudhop-mcp"
VERSION = "0.1.0"


class Settings(BaseSettings):
    """Settings loaded from `CLOUDHOP_*` environment variables or `.env`."""

    model_config = SettingsConfigDict(
        env_prefix="CLOUDHOP_",
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # Rate limiting
    rate_limit_max_requests: int = Field(default=50, ge=1)
    rate_limit_window_ms: int = Field(default=60_000, gt=0)

    # Provider HTTP calls
    provider_timeout_seconds: float = Field(default=30.0, gt=0)

    # Logging
    log_level: Literal["DEBUG", "INFO", "WARNING", "ERROR"] = "INFO"
    log_format: Literal["console", "json"] = "console"

    # Transport
    http_mode: bool = False
    http_host: str = "0.0.0.0"
    http_port: int = Field(default=3000, ge=1, le=65535)


@lru_cache
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()
