"""Coordinate tool requests across platform adapters."""

from __future__ import annotations

import asyncio
from collections.abc import Awaitable, Callable, Sequence
from dataclasses import dataclass, field

import structlog

from cloudhop.core.errors import CloudhopError, NotAuthenticatedError
from cloudhop.models.deployment import (
    DeploymentConfig,
    DeploymentResult,
    Platform,
    PlatformAnalytics,
)
from cloudhop.platforms.base import PlatformAdapter
from cloudhop.platforms.registry import AdapterRegistry

logger = structlog.get_logger(__name__)


@dataclass(slots=True)
class PlatformFailure:
    """One platform that could not contribute to an aggregate report."""

    platform: Platform
    message: str


@dataclass(slots=True)
class DeployOutcome:
    result: DeploymentResult
    team_id: str | None = None
    # Whether the platform actually gave `team_id` access.
    shared: bool = False


@dataclass(slots=True)
class CostComparison:
    project_name: str
    analytics: list[PlatformAnalytics] = field(default_factory=list)
    failures: list[PlatformFailure] = field(default_factory=list)
    # Order in which platforms were requested.
    order: list[Platform] = field(default_factory=list)


@dataclass(slots=True)
class DeploymentListing:
    deployments: list[DeploymentResult]
    total: int
    failures: list[PlatformFailure] = field(default_factory=list)
    platform: Platform | None = None


@dataclass(slots=True)
class AnalyticsReport:
    project_name: str
    analytics: list[PlatformAnalytics] = field(default_factory=list)
    failures: list[PlatformFailure] = field(default_factory=list)
    skipped: list[Platform] = field(default_factory=list)

    @property
    def best_performer(self) -> PlatformAnalytics | None:
        return max(self.analytics, key=lambda item: item.performance_score, default=None)


def _failure_message(exc: BaseException) -> str:
    if isinstance(exc, CloudhopError):
        return exc.message
    return f"{type(exc).__name__}: {exc}"


class DeploymentService:
    """Run tool operations against the adapter registry.

    Aggregate operations fan out to distinct adapters concurrently; each
    platform's failure is isolated and reported next to the others' results.
    """

    def __init__(self, registry: AdapterRegistry) -> None:
        self._registry = registry

    @property
    def registry(self) -> AdapterRegistry:
        return self._registry

    async def authenticate(self, platform: Platform, credentials: dict[str, str]) -> bool:
        adapter = self._registry.get(platform)
        return await adapter.authenticate(credentials)

    async def deploy(self, config: DeploymentConfig, *, team_id: str | None = None) -> DeployOutcome:
        adapter = self._registry.get(config.platform)
        if not adapter.is_authenticated():
            raise NotAuthenticatedError(config.platform.value)
        result = await adapter.deploy(config)
        if team_id is None:
            return DeployOutcome(result=result)
        shared = await adapter.share_with_team(result.deployment_id, team_id)
        if not shared:
            logger.warning("service.share_failed", platform=config.platform.value, team_id=team_id)
        return DeployOutcome(result=result, team_id=team_id, shared=shared)

    async def status(self, platform: Platform, deployment_id: str) -> DeploymentResult:
        adapter = self._registry.get(platform)
        if not adapter.is_authenticated():
            raise NotAuthenticatedError(platform.value)
        return await adapter.get_status(deployment_id)

    async def compare_costs(
        self,
        project_name: str,
        platforms: Sequence[Platform] | None = None,
    ) -> CostComparison:
        adapters = self._adapters(platforms)
        comparison = CostComparison(project_name=project_name, order=[a.platform for a in adapters])
        ready = [adapter for adapter in adapters if adapter.is_authenticated()]
        comparison.failures.extend(
            PlatformFailure(adapter.platform, "Not authenticated")
            for adapter in adapters
            if not adapter.is_authenticated()
        )
        results = await self._fan_out(ready, lambda adapter: adapter.get_analytics(project_name))
        for adapter, outcome in zip(ready, results, strict=True):
            if isinstance(outcome, BaseException):
                comparison.failures.append(PlatformFailure(adapter.platform, _failure_message(outcome)))
            else:
                comparison.analytics.append(outcome)
        return comparison

    async def list_deployments(
        self,
        *,
        platform: Platform | None = None,
        limit: int,
        team_id: str | None = None,
    ) -> DeploymentListing:
        adapters = self._adapters([platform] if platform else None)
        failures = [
            PlatformFailure(adapter.platform, "Not authenticated")
            for adapter in adapters
            if not adapter.is_authenticated()
        ]
        ready = [adapter for adapter in adapters if adapter.is_authenticated()]

        def fetch(adapter: PlatformAdapter) -> Awaitable[list[DeploymentResult]]:
            if team_id is not None:
                return adapter.get_team_deployments(team_id)
            return adapter.get_deployments()

        collected: list[DeploymentResult] = []
        for adapter, outcome in zip(ready, await self._fan_out(ready, fetch), strict=True):
            if isinstance(outcome, BaseException):
                failures.append(PlatformFailure(adapter.platform, _failure_message(outcome)))
            else:
                collected.extend(outcome)
        collected.sort(key=lambda item: item.timestamp, reverse=True)
        return DeploymentListing(
            deployments=collected[:limit],
            total=len(collected),
            failures=failures,
            platform=platform,
        )

    async def analytics(
        self,
        project_name: str,
        platforms: Sequence[Platform] | None = None,
    ) -> AnalyticsReport:
        adapters = self._adapters(platforms)
        report = AnalyticsReport(project_name=project_name)
        ready = [adapter for adapter in adapters if adapter.is_authenticated()]
        report.skipped.extend(adapter.platform for adapter in adapters if not adapter.is_authenticated())
        results = await self._fan_out(ready, lambda adapter: adapter.get_analytics(project_name))
        for adapter, outcome in zip(ready, results, strict=True):
            if isinstance(outcome, BaseException):
                logger.warning("analytics.platform_failed", platform=adapter.platform.value)
                report.failures.append(PlatformFailure(adapter.platform, _failure_message(outcome)))
            elif outcome.total_deployments or outcome.total_cost:
                report.analytics.append(outcome)
        return report

    def _adapters(self, platforms: Sequence[Platform] | None) -> list[PlatformAdapter]:
        chosen = list(platforms) if platforms else self._registry.platforms()
        return [self._registry.get(platform) for platform in chosen]

    @staticmethod
    async def _fan_out[T](
        adapters: Sequence[PlatformAdapter],
        call: Callable[[PlatformAdapter], Awaitable[T]],
    ) -> list[T | BaseException]:
        return await asyncio.gather(*(call(adapter) for adapter in adapters), return_exceptions=True)
