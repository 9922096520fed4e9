"""Deployment domain models shared by every platform adapter."""

from __future__ import annotations

from datetime import UTC, datetime
from enum import StrEnum
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, field_validator
from pydantic.alias_generators import to_camel

from cloudhop.core.sanitize import check_project_name


class Platform(StrEnum):
    """Supported cloud platforms."""

    CLOUDFLARE = "cloudflare"
    VERCEL = "vercel"
    RAILWAY = "railway"


class Environment(StrEnum):
    """Deployment target environment."""

    DEVELOPMENT = "development"
    STAGING = "staging"
    PRODUCTION = "production"


class DeploymentStatus(StrEnum):
    """Normalized deployment lifecycle state."""

    PENDING = "pending"
    BUILDING = "building"
    READY = "ready"
    ERROR = "error"
    CANCELED = "canceled"


class _FrozenModel(BaseModel):
    model_config = ConfigDict(
        frozen=True,
        alias_generator=to_camel,
        populate_by_name=True,
        extra="forbid",
    )


class DeploymentConfig(_FrozenModel):
    """Validated deployment request for one platform."""

    platform: Platform
    project_name: str
    environment: Environment = Environment.PRODUCTION
    build_command: str | None = None
    output_directory: str | None = None
    environment_variables: dict[str, str] | None = None
    domains: tuple[str, ...] | None = None
    region: str | None = None

    @field_validator("project_name")
    @classmethod
    def _check_project_name(cls, value: str) -> str:
        return check_project_name(value)

    @property
    def targets_static_site(self) -> bool:
        """True when the config carries build settings."""
        return bool(self.build_command or self.output_directory)


class DeploymentResult(_FrozenModel):
    """Snapshot of one deployment as reported by a provider."""

    platform: Platform
    deployment_id: str
    url: str
    status: DeploymentStatus
    build_time: int | None = None
    cost: float | None = None
    region: str | None = None
    timestamp: datetime = Field(default_factory=lambda: datetime.now(UTC))


class PlatformAnalytics(_FrozenModel):
    """Aggregate deployment statistics for one project on one platform."""

    platform: Platform
    project_name: str
    total_deployments: int = 0
    success_rate: float = Field(default=0.0, ge=0.0, le=1.0)
    average_build_time: float = 0.0
    total_cost: float = 0.0
    performance_score: float = Field(default=0.0, ge=0.0, le=100.0)
    last_deployment: datetime | None = None

    @classmethod
    def empty(cls, platform: Platform, project_name: str) -> PlatformAnalytics:
        """All-zero analytics record."""
        return cls(platform=platform, project_name=project_name)


def parse_timestamp(value: Any) -> datetime:
    """Parse provider timestamps (ISO-8601 strings or epoch milliseconds).

    Falls back to the current time when the value is missing or unreadable.
    """
    if isinstance(value, bool):
        return datetime.now(UTC)
    if isinstance(value, int | float):
        try:
            return datetime.fromtimestamp(value / 1000, tz=UTC)
        except (ValueError, OverflowError, OSError):
            return datetime.now(UTC)
    if isinstance(value, str) and value:
        try:
            parsed = datetime.fromisoformat(value.replace("Z", "+00:00"))
        except ValueError:
            return datetime.now(UTC)
        if parsed.tzinfo is None:
            parsed = parsed.replace(tzinfo=UTC)
        return parsed
    return datetime.now(UTC)
