"""Edge-worker platform adapter (Cloudflare Workers and Pages)."""

from __future__ import annotations

import re
import time
from collections import OrderedDict
from collections.abc import Mapping
from dataclasses import dataclass
from typing import Any, Literal

import structlog

from cloudhop.core.errors import ProviderRequestError
from cloudhop.models.deployment import (
    DeploymentConfig,
    DeploymentResult,
    DeploymentStatus,
    Platform,
    PlatformAnalytics,
    parse_timestamp,
)
from cloudhop.platforms.base import PlatformAdapter

logger = structlog.get_logger(__name__)

_SUBDOMAIN_UNSAFE = re.compile(r"[^a-z0-9-]")

# Oldest ids are forgotten past this; their status falls back to a script lookup.
MAX_TRACKED_DEPLOYMENTS = 500

_WORKER_TEMPLATE = """export default {{
  async fetch(request) {{
    return new Response('Hello from {name}!', {{
      headers: {{ 'content-type': 'text/plain' }}
    }});
  }}
}};
"""


@dataclass(slots=True, frozen=True)
class ScriptRef:
    """Provider resource behind a deployment id issued by this adapter."""

    kind: Literal["worker", "pages"]
    resource: str
    url: str
    provider_id: str | None = None


class CloudflareAdapter(PlatformAdapter):
    """Deploy workers or Pages projects.

    Worker uploads return no deployment id, so one is synthesized as
    ``<name>-<epoch ms>`` and remembered together with the script name.
    Status is binary: the resource exists (ready) or it does not (error).
    """

    platform = Platform.CLOUDFLARE
    display_name = "Cloudflare"
    base_url = "https://api.cloudflare.com/client/v4"
    required_credentials = ("apiToken", "accountId")

    def __init__(self, **kwargs: Any) -> None:
        super().__init__(**kwargs)
        self._deployments: OrderedDict[str, ScriptRef] = OrderedDict()

    @property
    def _account_path(self) -> str:
        return f"/accounts/{self._credential('accountId')}"

    async def _get(self, path: str) -> Any:
        return await self._http.request("GET", path, token=self._credential("apiToken"))

    async def _verify(self, credentials: Mapping[str, str]) -> bool:
        body = await self._http.request(
            "GET",
            f"/accounts/{credentials['accountId']}",
            token=credentials["apiToken"],
        )
        return bool(body and body.get("success"))

    def logout(self) -> None:
        super().logout()
        self._deployments.clear()

    def _remember(self, deployment_id: str, ref: ScriptRef) -> None:
        self._deployments[deployment_id] = ref
        while len(self._deployments) > MAX_TRACKED_DEPLOYMENTS:
            self._deployments.popitem(last=False)

    def _worker_url(self, name: str) -> str:
        subdomain = _SUBDOMAIN_UNSAFE.sub("-", name.lower())
        return f"https://{subdomain}.{self._credential('accountId')[:8]}.workers.dev"

    async def _deploy(self, config: DeploymentConfig) -> DeploymentResult:
        if config.targets_static_site:
            return await self._deploy_pages(config)
        return await self._deploy_worker(config)

    async def _deploy_worker(self, config: DeploymentConfig) -> DeploymentResult:
        name = config.project_name
        await self._http.request(
            "PUT",
            f"{self._account_path}/workers/scripts/{name}",
            token=self._credential("apiToken"),
            content=_WORKER_TEMPLATE.format(name=name),
            headers={"Content-Type": "application/javascript"},
        )
        if config.environment_variables:
            await self._set_bindings(name, config.environment_variables)

        deployment_id = f"{name}-{int(time.time() * 1000)}"
        url = self._worker_url(name)
        self._remember(deployment_id, ScriptRef(kind="worker", resource=name, url=url))
        return DeploymentResult(
            platform=self.platform,
            deployment_id=deployment_id,
            url=url,
            status=DeploymentStatus.READY,
            region="global",
        )

    async def _set_bindings(self, script: str, variables: Mapping[str, str]) -> None:
        bindings = [
            {"type": "plain_text", "name": name, "text": value} for name, value in variables.items()
        ]
        await self._http.request(
            "PATCH",
            f"{self._account_path}/workers/scripts/{script}/settings",
            token=self._credential("apiToken"),
            json={"bindings": bindings},
        )

    async def _deploy_pages(self, config: DeploymentConfig) -> DeploymentResult:
        project = await self._get_or_create_pages_project(config)
        body = await self._http.request(
            "POST",
            f"{self._account_path}/pages/projects/{project}/deployments",
            token=self._credential("apiToken"),
            json={"environment": config.environment.value},
        )
        result = body["result"]
        deployment_id = str(result["id"])
        url = str(result.get("url") or f"https://{project}.pages.dev")
        self._remember(
            deployment_id,
            ScriptRef(kind="pages", resource=project, url=url, provider_id=deployment_id),
        )
        return DeploymentResult(
            platform=self.platform,
            deployment_id=deployment_id,
            url=url,
            status=DeploymentStatus.BUILDING,
            region="global",
        )

    async def _get_or_create_pages_project(self, config: DeploymentConfig) -> str:
        name = config.project_name
        try:
            body = await self._get(f"{self._account_path}/pages/projects/{name}")
        except ProviderRequestError as exc:
            if exc.status_code != 404:
                raise
        else:
            return str(body["result"]["name"])

        payload: dict[str, Any] = {"name": name, "production_branch": "main"}
        build_config = {
            "build_command": config.build_command,
            "destination_dir": config.output_directory,
        }
        payload["build_config"] = {key: value for key, value in build_config.items() if value}
        body = await self._http.request(
            "POST",
            f"{self._account_path}/pages/projects",
            token=self._credential("apiToken"),
            json=payload,
        )
        logger.info("cloudflare.pages_project_created", project=name)
        return str(body["result"]["name"])

    async def _get_status(self, deployment_id: str) -> DeploymentResult:
        ref = self._deployments.get(deployment_id)
        if ref is None:
            # Ids listed by `get_deployments` are script names.
            ref = ScriptRef(kind="worker", resource=deployment_id, url=self._worker_url(deployment_id))
        if ref.kind == "pages":
            exists = await self._pages_deployment_exists(ref)
        else:
            exists = await self._worker_exists(ref.resource)
        return DeploymentResult(
            platform=self.platform,
            deployment_id=deployment_id,
            url=ref.url,
            status=DeploymentStatus.READY if exists else DeploymentStatus.ERROR,
            region="global",
        )

    async def _worker_exists(self, name: str) -> bool:
        body = await self._get(f"{self._account_path}/workers/scripts")
        return any(script.get("id") == name for script in body.get("result") or [])

    async def _pages_deployment_exists(self, ref: ScriptRef) -> bool:
        try:
            await self._get(
                f"{self._account_path}/pages/projects/{ref.resource}/deployments/{ref.provider_id}"
            )
        except ProviderRequestError as exc:
            if exc.status_code == 404:
                return False
            raise
        return True

    async def _list_deployments(self) -> list[DeploymentResult]:
        workers = (await self._get(f"{self._account_path}/workers/scripts")).get("result") or []
        pages = (await self._get(f"{self._account_path}/pages/projects")).get("result") or []

        deployments = [
            DeploymentResult(
                platform=self.platform,
                deployment_id=str(worker["id"]),
                url=self._worker_url(str(worker["id"])),
                status=DeploymentStatus.READY,
                region="global",
                timestamp=parse_timestamp(worker.get("created_on")),
            )
            for worker in workers
        ]
        deployments.extend(
            DeploymentResult(
                platform=self.platform,
                deployment_id=str(page.get("id") or page["name"]),
                url=f"https://{page.get('subdomain') or page['name'] + '.pages.dev'}",
                status=DeploymentStatus.READY,
                region="global",
                timestamp=parse_timestamp(page.get("created_on")),
            )
            for page in pages
        )
        return deployments

    async def _get_cost(self, deployment_id: str) -> float:
        # Workers and Pages usage here stays within the free tier; no billing API call.
        return 0.0

    async def _get_analytics(self, project_name: str) -> PlatformAnalytics:
        prefix = f"https://{_SUBDOMAIN_UNSAFE.sub('-', project_name.lower())}."
        deployments = [
            item
            for item in await self._list_deployments()
            if item.deployment_id == project_name or item.url.startswith(prefix)
        ]
        return self._summarize(
            project_name,
            deployments,
            total_cost=0.0,
            performance_ceiling=95.0,
        )
