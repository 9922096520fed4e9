"""Uniform adapter contract shared by every cloud platform."""

from __future__ import annotations

import asyncio
import math
import time
from abc import ABC, abstractmethod
from collections.abc import Awaitable, Callable, Mapping, Sequence
from dataclasses import dataclass
from typing import Any, ClassVar, Final

import httpx
import structlog

from cloudhop.core.errors import (
    AuthenticationError,
    NotAuthenticatedError,
    ProviderRequestError,
    ValidationError,
    redact,
)
from cloudhop.models.deployment import (
    DeploymentConfig,
    DeploymentResult,
    DeploymentStatus,
    Platform,
    PlatformAnalytics,
)
from cloudhop.platforms.http import DEFAULT_TIMEOUT_SECONDS, ProviderHTTPClient

logger = structlog.get_logger(__name__)


@dataclass(slots=True, frozen=True)
class OperationPolicy:
    """How an adapter operation treats authentication and provider failures."""

    requires_auth: bool = True
    best_effort: bool = False


OPERATION_POLICIES: Final[dict[str, OperationPolicy]] = {
    "deploy": OperationPolicy(),
    "get_status": OperationPolicy(),
    "get_deployments": OperationPolicy(),
    "get_cost": OperationPolicy(best_effort=True),
    "get_analytics": OperationPolicy(best_effort=True),
    "share_with_team": OperationPolicy(best_effort=True),
    "get_team_deployments": OperationPolicy(best_effort=True),
}

# Raised while reading a provider payload that does not have the expected shape.
_SHAPE_ERRORS = (KeyError, TypeError, AttributeError, IndexError, ValueError, OverflowError, OSError)


def provider_number(platform: Platform, value: Any, field: str) -> float:
    """Read a numeric provider field; missing counts as zero."""
    if value is None or value == "":
        return 0.0
    try:
        number = float(value)
    except (TypeError, ValueError, OverflowError):
        number = math.nan
    if isinstance(value, bool) or not math.isfinite(number):
        raise ProviderRequestError(
            f"{platform.value}: unreadable {field} in response",
            platform=platform.value,
            category="invalid_payload",
        )
    return number


class PlatformAdapter(ABC):
    """One cloud platform behind the uniform deployment contract.

    Subclasses implement the underscored provider calls; the public methods
    apply the operation policy table, the authentication gate and the
    per-adapter lock so every variant behaves the same way.
    """

    platform: ClassVar[Platform]
    display_name: ClassVar[str]
    base_url: ClassVar[str]
    required_credentials: ClassVar[tuple[str, ...]] = ("apiToken",)
    optional_credentials: ClassVar[tuple[str, ...]] = ()
    supports_domains: ClassVar[bool] = False

    def __init__(
        self,
        *,
        timeout: float = DEFAULT_TIMEOUT_SECONDS,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self._http = ProviderHTTPClient(
            self.platform.value,
            self.base_url,
            timeout=timeout,
            transport=transport,
        )
        self._credentials: dict[str, str] = {}
        self._authenticated = False
        self._lock = asyncio.Lock()

    # -- authentication -------------------------------------------------

    async def authenticate(self, credentials: Mapping[str, str]) -> bool:
        fields = self._select_credentials(credentials)
        async with self._lock:
            self._authenticated = False
            self._credentials = {}
            try:
                accepted = await self._verify(fields)
            except ProviderRequestError as exc:
                message = redact(exc.message, fields.values())
                raise AuthenticationError(
                    self.platform.value,
                    f"{self.display_name} authentication failed: {message}",
                ) from None
            except _SHAPE_ERRORS:
                raise AuthenticationError(
                    self.platform.value,
                    f"{self.display_name} authentication failed: unexpected response",
                ) from None
            if not accepted:
                raise AuthenticationError(
                    self.platform.value,
                    f"{self.display_name} rejected the supplied credentials",
                )
            self._credentials = fields
            self._authenticated = True
        logger.info("adapter.authenticated", platform=self.platform.value)
        return True

    def is_authenticated(self) -> bool:
        return self._authenticated and all(
            self._credentials.get(name) for name in self.required_credentials
        )

    def logout(self) -> None:
        """Forget credentials and return to the unauthenticated state."""
        self._credentials = {}
        self._authenticated = False
        logger.info("adapter.logged_out", platform=self.platform.value)

    def _select_credentials(self, credentials: Mapping[str, str]) -> dict[str, str]:
        missing = [name for name in self.required_credentials if not credentials.get(name)]
        if missing:
            required = " and ".join(self.required_credentials)
            raise AuthenticationError(
                self.platform.value,
                f"{self.display_name} requires {required}",
            )
        known = (*self.required_credentials, *self.optional_credentials)
        ignored = sorted(name for name in credentials if name not in known)
        if ignored:
            logger.debug("adapter.credentials_ignored", platform=self.platform.value, fields=ignored)
        return {name: credentials[name] for name in known if credentials.get(name)}

    def _credential(self, name: str) -> str:
        return self._credentials.get(name, "")

    # -- contract ---------------------------------------------------------

    async def deploy(self, config: DeploymentConfig) -> DeploymentResult:
        if config.platform is not self.platform:
            raise ValidationError(
                "platform",
                f"Invalid platform: config targets {config.platform.value}, "
                f"adapter serves {self.platform.value}",
            )
        if config.domains and not self.supports_domains:
            raise ValidationError(
                "domains",
                f"Custom domains are not supported on {self.platform.value}",
            )
        started = time.monotonic()
        result = await self._run("deploy", lambda: self._deploy(config))
        elapsed_ms = int((time.monotonic() - started) * 1000)
        logger.info(
            "adapter.deployed",
            platform=self.platform.value,
            deployment_id=result.deployment_id,
            status=result.status.value,
        )
        return result.model_copy(update={"build_time": elapsed_ms})

    async def get_status(self, deployment_id: str) -> DeploymentResult:
        return await self._run("get_status", lambda: self._get_status(deployment_id))

    async def get_deployments(self) -> list[DeploymentResult]:
        return await self._run("get_deployments", self._list_deployments)

    async def get_cost(self, deployment_id: str) -> float:
        return await self._run("get_cost", lambda: self._get_cost(deployment_id), lambda: 0.0)

    async def get_analytics(self, project_name: str) -> PlatformAnalytics:
        return await self._run(
            "get_analytics",
            lambda: self._get_analytics(project_name),
            lambda: PlatformAnalytics.empty(self.platform, project_name),
        )

    async def share_with_team(self, deployment_id: str, team_id: str) -> bool:
        """Give `team_id` access to a deployment; False when it did not happen."""
        return await self._run(
            "share_with_team",
            lambda: self._share_with_team(deployment_id, team_id),
            lambda: False,
        )

    async def get_team_deployments(self, team_id: str) -> list[DeploymentResult]:
        return await self._run(
            "get_team_deployments",
            lambda: self._team_deployments(team_id),
            list,
        )

    async def _run[T](
        self,
        operation: str,
        call: Callable[[], Awaitable[T]],
        default: Callable[[], T] | None = None,
    ) -> T:
        policy = OPERATION_POLICIES[operation]
        async with self._lock:
            if policy.requires_auth and not self.is_authenticated():
                raise NotAuthenticatedError(self.platform.value)
            try:
                try:
                    return await call()
                except _SHAPE_ERRORS as exc:
                    raise ProviderRequestError(
                        f"{self.platform.value}: unexpected response shape ({type(exc).__name__})",
                        platform=self.platform.value,
                        category="invalid_payload",
                    ) from exc
            except ProviderRequestError as exc:
                if policy.best_effort and default is not None:
                    logger.warning(
                        "adapter.best_effort_fallback",
                        platform=self.platform.value,
                        operation=operation,
                        category=exc.category,
                    )
                    return default()
                raise ProviderRequestError(
                    redact(exc.message, self._credentials.values()),
                    platform=self.platform.value,
                    category=exc.category,
                    status_code=exc.status_code,
                ) from None

    # -- provider calls -----------------------------------------------------

    @abstractmethod
    async def _verify(self, credentials: Mapping[str, str]) -> bool:
        """Check credentials against the provider; runs before they are stored."""

    @abstractmethod
    async def _deploy(self, config: DeploymentConfig) -> DeploymentResult: ...

    @abstractmethod
    async def _get_status(self, deployment_id: str) -> DeploymentResult: ...

    @abstractmethod
    async def _list_deployments(self) -> list[DeploymentResult]: ...

    @abstractmethod
    async def _get_cost(self, deployment_id: str) -> float: ...

    @abstractmethod
    async def _get_analytics(self, project_name: str) -> PlatformAnalytics: ...

    async def _share_with_team(self, deployment_id: str, team_id: str) -> bool:
        logger.info(
            "adapter.share_skipped",
            platform=self.platform.value,
            deployment_id=deployment_id,
            team_id=team_id,
        )
        return False

    async def _team_deployments(self, team_id: str) -> list[DeploymentResult]:
        return await self._list_deployments()

    def _summarize(
        self,
        project_name: str,
        deployments: Sequence[DeploymentResult],
        *,
        total_cost: float,
        performance_ceiling: float,
    ) -> PlatformAnalytics:
        total = len(deployments)
        ready = sum(1 for item in deployments if item.status is DeploymentStatus.READY)
        success_rate = ready / total if total else 0.0
        build_times = [item.build_time for item in deployments if item.build_time]
        average_build_time = sum(build_times) / len(build_times) if build_times else 0.0
        last = max((item.timestamp for item in deployments), default=None)
        return PlatformAnalytics(
            platform=self.platform,
            project_name=project_name,
            total_deployments=total,
            success_rate=success_rate,
            average_build_time=average_build_time,
            total_cost=total_cost,
            performance_score=round(success_rate * performance_ceiling, 2),
            last_deployment=last,
        )
