"""Full-stack app platform adapter (Railway GraphQL API)."""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass
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

DEFAULT_REGION = "us-west1"

RAILWAY_STATUS_MAP: Final[dict[str, DeploymentStatus]] = {
    "INITIALIZING": DeploymentStatus.PENDING,
    "QUEUED": DeploymentStatus.PENDING,
    "BUILDING": DeploymentStatus.BUILDING,
    "DEPLOYING": DeploymentStatus.BUILDING,
    "SUCCESS": DeploymentStatus.READY,
    "RUNNING": DeploymentStatus.READY,
    "FAILED": DeploymentStatus.ERROR,
    "CRASHED": DeploymentStatus.ERROR,
    "REMOVED": DeploymentStatus.CANCELED,
}

# Usage pricing per unit.
CPU_PRICE_PER_VCPU_SECOND = 0.000463
MEMORY_PRICE_PER_GB_SECOND = 0.000231
NETWORK_PRICE_PER_GB = 0.10

ME_QUERY = """
query {
  me { id name email }
}
"""

PROJECTS_QUERY = """
query {
  projects { edges { node { id name } } }
}
"""

PROJECT_CREATE_MUTATION = """
mutation ProjectCreate($input: ProjectCreateInput!) {
  projectCreate(input: $input) { id name }
}
"""

SERVICE_CREATE_MUTATION = """
mutation ServiceCreate($input: ServiceCreateInput!) {
  serviceCreate(input: $input) { id name }
}
"""

SERVICE_DEPLOY_MUTATION = """
mutation ServiceInstanceDeploy($input: ServiceInstanceDeployInput!) {
  serviceInstanceDeploy(input: $input) { id status url region }
}
"""

VARIABLE_UPSERT_MUTATION = """
mutation VariableUpsert($input: VariableUpsertInput!) {
  variableUpsert(input: $input) { id }
}
"""

SERVICE_INSTANCE_QUERY = """
query ServiceInstance($id: String!) {
  serviceInstance(id: $id) { id status url createdAt updatedAt }
}
"""

SERVICE_INSTANCE_USAGE_QUERY = """
query ServiceInstance($id: String!) {
  serviceInstance(id: $id) { id usage { cpu memory network } }
}
"""

DEPLOYMENTS_QUERY = """
query {
  projects {
    edges {
      node {
        id
        name
        services {
          edges {
            node {
              id
              name
              instances { edges { node { id status url createdAt } } }
            }
          }
        }
      }
    }
  }
}
"""

PROJECT_INVITE_MUTATION = """
mutation ProjectInvite($input: ProjectInviteInput!) {
  projectInvite(input: $input) { id }
}
"""


def map_railway_status(state: str | None) -> DeploymentStatus:
    """Map a Railway instance status onto the normalized status; unknown means pending."""
    return RAILWAY_STATUS_MAP.get((state or "").upper(), DeploymentStatus.PENDING)


@dataclass(slots=True, frozen=True)
class InstanceRecord:
    """One service instance with the project that owns it."""

    project_id: str
    project_name: str
    result: DeploymentResult


class RailwayAdapter(PlatformAdapter):
    """Deploy services through Railway's GraphQL API.

    A deploy finds or creates the project, creates a service in it and
    deploys a service instance; the instance id is the deployment id.
    """

    platform = Platform.RAILWAY
    display_name = "Railway"
    base_url = "https://backboard.railway.app/graphql/v2"

    async def _graphql(
        self,
        query: str,
        variables: Mapping[str, Any] | None = None,
        *,
        token: str | None = None,
    ) -> dict[str, Any]:
        payload: dict[str, Any] = {"query": query}
        if variables:
            payload["variables"] = dict(variables)
        body = await self._http.request(
            "POST",
            "",
            token=token or self._credential("apiToken"),
            json=payload,
        )
        if not isinstance(body, dict):
            raise ProviderRequestError(
                "railway: empty GraphQL response",
                platform=self.platform.value,
                category="invalid_payload",
            )
        errors = body.get("errors")
        if errors:
            first = errors[0].get("message", "unknown error") if isinstance(errors[0], dict) else errors[0]
            raise ProviderRequestError(
                f"railway: GraphQL error: {first}",
                platform=self.platform.value,
                category="graphql_error",
            )
        data = body.get("data")
        if not isinstance(data, dict):
            raise ProviderRequestError(
                "railway: GraphQL response without data",
                platform=self.platform.value,
                category="invalid_payload",
            )
        return data

    async def _verify(self, credentials: Mapping[str, str]) -> bool:
        data = await self._graphql(ME_QUERY, token=credentials["apiToken"])
        return bool(data.get("me"))

    def _to_result(self, instance: Mapping[str, Any]) -> DeploymentResult:
        return DeploymentResult(
            platform=self.platform,
            deployment_id=str(instance["id"]),
            url=str(instance.get("url") or ""),
            status=map_railway_status(instance.get("status")),
            region=str(instance.get("region") or DEFAULT_REGION),
            timestamp=parse_timestamp(instance.get("createdAt")),
        )

    async def _deploy(self, config: DeploymentConfig) -> DeploymentResult:
        project_id = await self._get_or_create_project(config.project_name)
        service = (
            await self._graphql(
                SERVICE_CREATE_MUTATION,
                {"input": {"projectId": project_id, "name": config.project_name}},
            )
        )["serviceCreate"]
        service_id = str(service["id"])

        for name, value in (config.environment_variables or {}).items():
            await self._graphql(
                VARIABLE_UPSERT_MUTATION,
                {"input": {"projectId": project_id, "serviceId": service_id, "name": name, "value": value}},
            )

        environment_id = "production" if config.environment is Environment.PRODUCTION else "staging"
        instance = (
            await self._graphql(
                SERVICE_DEPLOY_MUTATION,
                {"input": {"serviceId": service_id, "environmentId": environment_id}},
            )
        )["serviceInstanceDeploy"]
        return DeploymentResult(
            platform=self.platform,
            deployment_id=str(instance["id"]),
            url=str(instance.get("url") or f"https://{config.project_name}.up.railway.app"),
            status=map_railway_status(instance.get("status") or "BUILDING"),
            region=str(instance.get("region") or config.region or DEFAULT_REGION),
        )

    async def _get_or_create_project(self, name: str) -> str:
        data = await self._graphql(PROJECTS_QUERY)
        for edge in data["projects"]["edges"]:
            if edge["node"]["name"] == name:
                return str(edge["node"]["id"])

        created = await self._graphql(
            PROJECT_CREATE_MUTATION,
            {"input": {"name": name, "description": f"cloudhop deployment: {name}"}},
        )
        logger.info("railway.project_created", project=name)
        return str(created["projectCreate"]["id"])

    async def _get_status(self, deployment_id: str) -> DeploymentResult:
        data = await self._graphql(SERVICE_INSTANCE_QUERY, {"id": deployment_id})
        instance = data.get("serviceInstance")
        if not instance:
            raise ProviderRequestError(
                f"railway: deployment {deployment_id} not found",
                platform=self.platform.value,
                category="invalid_payload",
            )
        return self._to_result(instance)

    async def _list_instances(self) -> list[InstanceRecord]:
        data = await self._graphql(DEPLOYMENTS_QUERY)
        records: list[InstanceRecord] = []
        for project in data["projects"]["edges"]:
            node = project["node"]
            for service in node["services"]["edges"]:
                for instance in service["node"]["instances"]["edges"]:
                    records.append(
                        InstanceRecord(
                            project_id=str(node["id"]),
                            project_name=str(node["name"]),
                            result=self._to_result(instance["node"]),
                        )
                    )
        return records

    async def _list_deployments(self) -> list[DeploymentResult]:
        return [record.result for record in await self._list_instances()]

    async def _get_cost(self, deployment_id: str) -> float:
        if not deployment_id:
            return 0.0
        data = await self._graphql(SERVICE_INSTANCE_USAGE_QUERY, {"id": deployment_id})
        usage = (data.get("serviceInstance") or {}).get("usage") or {}
        cpu = provider_number(self.platform, usage.get("cpu"), "cpu usage")
        memory = provider_number(self.platform, usage.get("memory"), "memory usage")
        network = provider_number(self.platform, usage.get("network"), "network usage")
        cpu_cost = cpu * CPU_PRICE_PER_VCPU_SECOND
        memory_cost = memory * MEMORY_PRICE_PER_GB_SECOND
        network_cost = network * NETWORK_PRICE_PER_GB / 1024**3
        return cpu_cost + memory_cost + network_cost

    async def _get_analytics(self, project_name: str) -> PlatformAnalytics:
        deployments = [
            record.result
            for record in await self._list_instances()
            if record.project_name == project_name
        ]
        deployments.sort(key=lambda item: item.timestamp, reverse=True)
        total_cost = 0.0
        if deployments:
            try:
                total_cost = await self._get_cost(deployments[0].deployment_id)
            except ProviderRequestError:
                total_cost = 0.0
        return self._summarize(
            project_name,
            deployments,
            total_cost=total_cost,
            performance_ceiling=90.0,
        )

    async def _share_with_team(self, deployment_id: str, team_id: str) -> bool:
        owner = next(
            (record for record in await self._list_instances() if record.result.deployment_id == deployment_id),
            None,
        )
        if owner is None:
            raise ProviderRequestError(
                f"railway: deployment {deployment_id} not found",
                platform=self.platform.value,
                category="invalid_payload",
            )
        await self._graphql(
            PROJECT_INVITE_MUTATION,
            {"input": {"projectId": owner.project_id, "email": team_id}},
        )
        logger.info("railway.project_shared", project=owner.project_name, team_id=team_id)
        return True
