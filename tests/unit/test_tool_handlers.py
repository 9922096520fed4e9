from __future__ import annotations

from typing import Any

import pytest

from cloudhop.core.deployment_service import DeploymentService
from cloudhop.core.rate_limiter import RATE_LIMIT_MESSAGE, RateLimiter
from cloudhop.mcp.dispatcher import ToolDispatcher
from cloudhop.mcp.handlers import create_dispatcher
from cloudhop.platforms.registry import build_default_registry
from tests.support.provider_stubs import FakeClock, ProviderStub

ACCOUNT_ID = "0123456789abcdef"
ACCOUNT = f"/accounts/{ACCOUNT_ID}"


def _setup(limiter: RateLimiter | None = None) -> tuple[ToolDispatcher, ProviderStub]:
    stub = (
        ProviderStub(prefix="/client/v4")
        .on("GET", ACCOUNT, {"success": True})
        .on("PUT", f"{ACCOUNT}/workers/scripts/my-app", {"success": True})
        .on("GET", f"{ACCOUNT}/workers/scripts", {"result": [{"id": "my-app", "created_on": "2026-01-05T10:00:00Z"}]})
        .on("GET", f"{ACCOUNT}/pages/projects", {"result": []})
    )
    service = DeploymentService(build_default_registry(transport=stub.transport))
    return create_dispatcher(service, limiter or RateLimiter()), stub


async def _authenticate(dispatcher: ToolDispatcher) -> None:
    response = await dispatcher.call(
        "authenticate",
        {"platform": "cloudflare", "credentials": {"apiToken": "token", "accountId": ACCOUNT_ID}},
    )
    assert not response.is_error
    assert response.text == "Successfully authenticated with cloudflare"


@pytest.mark.asyncio
async def test_authenticate_then_deploy_worker() -> None:
    dispatcher, _ = _setup()
    await _authenticate(dispatcher)

    response = await dispatcher.call("deploy", {"config": {"platform": "cloudflare", "projectName": "my-app"}})

    assert not response.is_error
    assert "Status: ready" in response.text
    assert "URL: https://my-app.01234567.workers.dev" in response.text
    assert "deployment-status" in response.text


@pytest.mark.asyncio
async def test_deploy_with_team_on_platform_without_sharing_says_so() -> None:
    dispatcher, _ = _setup()
    await _authenticate(dispatcher)

    response = await dispatcher.call(
        "deploy",
        {"config": {"platform": "cloudflare", "projectName": "my-app"}, "teamId": "team_1"},
    )

    assert not response.is_error
    assert "Could not share with team: team_1" in response.text
    assert "Shared with team" not in response.text


@pytest.mark.asyncio
async def test_custom_domains_on_edge_platform_are_rejected_before_upload() -> None:
    dispatcher, stub = _setup()
    await _authenticate(dispatcher)
    before = len(stub.requests)

    response = await dispatcher.call(
        "deploy",
        {"config": {"platform": "cloudflare", "projectName": "my-app", "domains": ["my-app.example.test"]}},
    )

    assert response.is_error
    assert response.text == "Error: Custom domains are not supported on cloudflare"
    assert len(stub.requests) == before


@pytest.mark.asyncio
async def test_invalid_project_name_is_rejected_before_any_provider_call() -> None:
    dispatcher, stub = _setup()

    response = await dispatcher.call("deploy", {"config": {"platform": "cloudflare", "projectName": "bad name!"}})

    assert response.is_error
    assert "project name" in response.text
    assert stub.requests == []


@pytest.mark.asyncio
@pytest.mark.parametrize(
    ("tool", "arguments"),
    [
        ("authenticate", {"platform": "netlify", "credentials": {"apiToken": "t"}}),
        ("deploy", {"config": {"platform": "netlify", "projectName": "my-app"}}),
        ("deployment-status", {"platform": "netlify", "deploymentId": "d1"}),
        ("cost-compare", {"config": {"projectName": "my-app"}, "platforms": ["netlify"]}),
        ("list-deployments", {"platform": "netlify"}),
        ("platform-analytics", {"projectName": "my-app", "platforms": ["netlify"]}),
    ],
)
async def test_unsupported_platform_never_reaches_provider(tool: str, arguments: dict[str, Any]) -> None:
    dispatcher, stub = _setup()

    response = await dispatcher.call(tool, arguments)

    assert response.is_error
    assert "not supported" in response.text
    assert stub.requests == []


@pytest.mark.asyncio
async def test_deploy_without_authentication_is_error() -> None:
    dispatcher, stub = _setup()

    response = await dispatcher.call("deploy", {"config": {"platform": "vercel", "projectName": "my-app"}})

    assert response.is_error
    assert "Not authenticated with vercel" in response.text
    assert stub.requests == []


@pytest.mark.asyncio
async def test_ping_is_rate_limited() -> None:
    clock = FakeClock()
    dispatcher, _ = _setup(RateLimiter(max_requests=2, window_ms=1000, clock=clock))

    results = []
    for _ in range(3):
        results.append(await dispatcher.call("ping", {}))
        clock.advance(150)
    assert [item.is_error for item in results] == [False, False, True]
    assert results[2].text == RATE_LIMIT_MESSAGE

    clock.advance(1100)
    fourth = await dispatcher.call("ping", {})
    assert not fourth.is_error
    assert fourth.text.startswith("pong")


@pytest.mark.asyncio
async def test_help_lists_tools_platforms_and_limit() -> None:
    dispatcher, _ = _setup(RateLimiter(max_requests=50, window_ms=60_000))
    await _authenticate(dispatcher)

    response = await dispatcher.call("help", {})

    assert "- deploy:" in response.text
    assert "cloudflare (authenticated)" in response.text
    assert "vercel (not authenticated)" in response.text
    assert "Rate limit: 50 requests per 60s" in response.text


@pytest.mark.asyncio
async def test_list_deployments_with_nothing_authenticated_is_not_an_error() -> None:
    dispatcher, stub = _setup()

    response = await dispatcher.call("list-deployments", {})

    assert not response.is_error
    assert response.text.startswith("No deployments found.")
    assert "railway: Not authenticated" in response.text
    assert stub.requests == []


@pytest.mark.asyncio
async def test_list_deployments_after_authentication() -> None:
    dispatcher, _ = _setup()
    await _authenticate(dispatcher)

    response = await dispatcher.call("list-deployments", {"limit": 5})

    assert response.text.startswith("Recent Deployments (1/1)")
    assert "CLOUDFLARE" in response.text
    assert "Platform Errors:" in response.text


@pytest.mark.asyncio
async def test_platform_analytics_without_data_is_explicit() -> None:
    dispatcher, _ = _setup()

    response = await dispatcher.call("platform-analytics", {"projectName": "nothing-here"})

    assert not response.is_error
    assert response.text.startswith('No analytics data found for project "nothing-here"')


@pytest.mark.asyncio
async def test_platform_analytics_reports_best_performer() -> None:
    dispatcher, _ = _setup()
    await _authenticate(dispatcher)

    response = await dispatcher.call("platform-analytics", {"projectName": "my-app", "platforms": ["cloudflare"]})

    assert "Total Deployments: 1" in response.text
    assert "Best Performing Platform: CLOUDFLARE" in response.text


@pytest.mark.asyncio
async def test_cost_compare_lists_every_requested_platform() -> None:
    dispatcher, _ = _setup()
    await _authenticate(dispatcher)

    response = await dispatcher.call("cost-compare", {"config": {"projectName": "my-app"}})

    assert not response.is_error
    assert "cloudflare:\n  Estimated Cost: $0.00/month" in response.text
    assert "vercel: Not authenticated" in response.text
    assert "railway: Not authenticated" in response.text
    assert "Recommendations:" in response.text
