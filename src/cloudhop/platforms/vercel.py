"""Static/serverless platform adapter (Vercel REST API)."""

from __future__ import annotations

import json
from collections.abc import Mapping, Sequence
from datetime import UTC, datetime, timedelta
from typing import Any, Final

import structlog

from cloudhop.core.errors import ProviderRequestError
from cloudhop.models.deployment import (
    DeploymentConfig,
    DeploymentResult,
    DeploymentStatus,
    Environment,
    Platform,
    PlatformAnalytics,
    parse_timestamp,
)
from cloudhop.platforms.base import PlatformAdapter, provider_number

logger = structlog.get_logger(__name__)

VERCEL_STATUS_MAP: Final[dict[str, DeploymentStatus]] = {
    "QUEUED": DeploymentStatus.PENDING,
    "INITIALIZING": DeploymentStatus.PENDING,
    "BUILDING": DeploymentStatus.BUILDING,
    "READY": DeploymentStatus.READY,
    "ERROR": DeploymentStatus.ERROR,
    "CANCELED": DeploymentStatus.CANCELED,
}

# Usage pricing beyond the included allowance.
FREE_EXECUTIONS = 100_000
EXECUTION_PRICE = 0.0000004
GIGABYTE = 1024**3
FREE_BANDWIDTH_BYTES = 100 * GIGABYTE
BANDWIDTH_PRICE_PER_GB = 0.15


def map_vercel_status(state: str | None) -> DeploymentStatus:
    """Map a Vercel `readyState` onto the normalized status; unknown means pending."""
    return VERCEL_STATUS_MAP.get((state or "").upper(), DeploymentStatus.PENDING)


def _build_time_ms(deployment: Mapping[str, Any]) -> int | None:
    building_at = deployment.get("buildingAt")
    ready = deployment.get("ready")
    if not isinstance(building_at, int | float) or not isinstance(ready, int | float):
        return None
    return max(0, int(ready - building_at))


class VercelAdapter(PlatformAdapter):
    """Deploy through the Vercel deployments API.

    When credentials carry a `teamId`, every request is scoped to that team.
    """

    platform = Platform.VERCEL
    display_name = "Vercel"
    base_url = "https://api.vercel.com"
    optional_credentials = ("teamId",)
    supports_domains = True

    async def _call(
        self,
        method: str,
        path: str,
        *,
        params: Mapping[str, Any] | None = None,
        json_body: Any = None,
        team_id: str | None = None,
    ) -> Any:
        query = dict(params or {})
        scope = team_id or self._credential("teamId")
        if scope:
            query["teamId"] = scope
        return await self._http.request(
            method,
            path,
            token=self._credential("apiToken"),
            params=query or None,
            json=json_body,
        )

    async def _verify(self, credentials: Mapping[str, str]) -> bool:
        body = await self._http.request("GET", "/v2/user", token=credentials["apiToken"])
        return bool(body)

    def _to_result(self, deployment: Mapping[str, Any]) -> DeploymentResult:
        regions = deployment.get("regions") or []
        return DeploymentResult(
            platform=self.platform,
            deployment_id=str(deployment.get("id") or deployment["uid"]),
            url=f"https://{deployment['url']}",
            status=map_vercel_status(deployment.get("readyState") or deployment.get("state")),
            build_time=_build_time_ms(deployment),
            region=regions[0] if regions else "global",
            timestamp=parse_timestamp(deployment.get("createdAt") or deployment.get("created")),
        )

    async def _deploy(self, config: DeploymentConfig) -> DeploymentResult:
        name = config.project_name
        package_json = {
            "name": name,
            "version": "1.0.0",
            "scripts": {"build": config.build_command or 'echo "No build command"'},
        }
        payload: dict[str, Any] = {
            "name": name,
            "files": [
                {"file": "package.json", "data": json.dumps(package_json)},
                {
                    "file": "index.html",
                    "data": (
                        "<!DOCTYPE html>\n<html>\n"
                        f"<head><title>{name}</title></head>\n"
                        f"<body><h1>Hello from {name}!</h1></body>\n</html>"
                    ),
                },
            ],
            "projectSettings": {
                "buildCommand": config.build_command,
                "outputDirectory": config.output_directory,
                "installCommand": "npm install",
            },
            "env": dict(config.environment_variables or {}),
        }
        # Omitting the target produces a preview deployment.
        if config.environment is not Environment.DEVELOPMENT:
            payload["target"] = config.environment.value
        if config.region:
            payload["regions"] = [config.region]

        deployment = await self._call("POST", "/v13/deployments", json_body=payload)
        if config.domains:
            project_id = str(deployment.get("projectId") or name)
            await self._attach_domains(project_id, str(deployment["id"]), config.domains)
        regions = deployment.get("regions") or []
        return DeploymentResult(
            platform=self.platform,
            deployment_id=str(deployment["id"]),
            url=f"https://{deployment['url']}",
            status=map_vercel_status(deployment.get("readyState")),
            region=regions[0] if regions else (config.region or "global"),
        )

    async def _attach_domains(self, project_id: str, deployment_id: str, domains: Sequence[str]) -> None:
        for domain in domains:
            try:
                await self._call("POST", f"/v10/projects/{project_id}/domains", json_body={"name": domain})
            except ProviderRequestError as exc:
                raise ProviderRequestError(
                    f"vercel: deployment {deployment_id} created but domain {domain} was not added: {exc.message}",
                    platform=self.platform.value,
                    category=exc.category,
                    status_code=exc.status_code,
                ) from None
            logger.info("vercel.domain_added", project_id=project_id, domain=domain)

    async def _get_status(self, deployment_id: str) -> DeploymentResult:
        deployment = await self._call("GET", f"/v13/deployments/{deployment_id}")
        return self._to_result(deployment)

    async def _list_deployments(self, *, team_id: str | None = None) -> list[DeploymentResult]:
        body = await self._call("GET", "/v6/deployments", params={"limit": 100}, team_id=team_id)
        return [self._to_result(item) for item in body.get("deployments") or []]

    async def _get_cost(self, deployment_id: str) -> float:
        until = datetime.now(UTC)
        since = until - timedelta(days=30)
        usage = await self._call(
            "GET",
            "/v1/usage",
            params={"since": since.isoformat(), "until": until.isoformat()},
        )
        executions = provider_number(self.platform, usage.get("executions"), "executions")
        bandwidth = provider_number(self.platform, usage.get("bandwidth"), "bandwidth")
        execution_cost = max(0.0, (executions - FREE_EXECUTIONS) * EXECUTION_PRICE)
        bandwidth_cost = max(0.0, (bandwidth - FREE_BANDWIDTH_BYTES) * BANDWIDTH_PRICE_PER_GB / GIGABYTE)
        return execution_cost + bandwidth_cost

    async def _get_analytics(self, project_name: str) -> PlatformAnalytics:
        body = await self._call(
            "GET",
            "/v6/deployments",
            params={"projectId": project_name, "limit": 100},
        )
        deployments = [self._to_result(item) for item in body.get("deployments") or []]
        try:
            total_cost = await self._get_cost("")
        except ProviderRequestError:
            total_cost = 0.0
        return self._summarize(
            project_name,
            deployments,
            total_cost=total_cost,
            performance_ceiling=100.0,
        )

    async def _share_with_team(self, deployment_id: str, team_id: str) -> bool:
        # Team-scoped deployments are visible to every member of the team.
        if team_id != self._credential("teamId"):
            logger.info("vercel.share_outside_scope", deployment_id=deployment_id, team_id=team_id)
            return False
        logger.info("vercel.shared_by_scope", deployment_id=deployment_id, team_id=team_id)
        return True

    async def _team_deployments(self, team_id: str) -> list[DeploymentResult]:
        return await self._list_deployments(team_id=team_id)
