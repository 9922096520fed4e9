from __future__ import annotations

from datetime import UTC, datetime

import pydantic
import pytest

from cloudhop.models.deployment import (
    DeploymentConfig,
    DeploymentResult,
    DeploymentStatus,
    Platform,
    PlatformAnalytics,
    parse_timestamp,
)


def test_config_accepts_camel_case_aliases() -> None:
    config = DeploymentConfig.model_validate({"platform": "vercel", "projectName": "app", "buildCommand": "make"})
    assert config.project_name == "app"
    assert config.targets_static_site
    assert config.model_dump(by_alias=True)["projectName"] == "app"


def test_config_revalidates_project_name() -> None:
    with pytest.raises(pydantic.ValidationError, match="letters, numbers, hyphens"):
        DeploymentConfig(platform=Platform.VERCEL, project_name="bad name")


def test_models_are_frozen() -> None:
    result = DeploymentResult(platform=Platform.RAILWAY, deployment_id="i1", url="", status=DeploymentStatus.READY)
    with pytest.raises(pydantic.ValidationError):
        result.status = DeploymentStatus.ERROR  # type: ignore[misc]


def test_analytics_bounds() -> None:
    with pytest.raises(pydantic.ValidationError):
        PlatformAnalytics(platform=Platform.VERCEL, project_name="a", success_rate=1.5)
    empty = PlatformAnalytics.empty(Platform.VERCEL, "a")
    assert (empty.total_deployments, empty.total_cost, empty.performance_score) == (0, 0.0, 0.0)


def test_parse_timestamp_formats() -> None:
    assert parse_timestamp("2026-01-02T03:04:05Z") == datetime(2026, 1, 2, 3, 4, 5, tzinfo=UTC)
    assert parse_timestamp(1_700_000_000_000) == datetime.fromtimestamp(1_700_000_000, tz=UTC)
    assert parse_timestamp("2026-01-02T03:04:05").tzinfo is UTC
    before = datetime.now(UTC)
    assert parse_timestamp("garbage") >= before
    assert parse_timestamp(None) >= before


def test_parse_timestamp_out_of_range_epoch_falls_back_to_now() -> None:
    before = datetime.now(UTC)
    assert parse_timestamp(10**30) >= before
    assert parse_timestamp(float("nan")) >= before
    assert parse_timestamp(-(10**20)) >= before
