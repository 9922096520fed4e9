from __future__ import annotations

import math

import pytest

from cloudhop.core.errors import ProviderRequestError
from cloudhop.models.deployment import Platform
from cloudhop.platforms.base import OPERATION_POLICIES, provider_number
from tests.support.provider_stubs import ScriptedAdapter


@pytest.mark.parametrize(
    ("value", "expected"),
    [(None, 0.0), ("", 0.0), (0, 0.0), (12, 12.0), ("3.5", 3.5)],
)
def test_provider_number_reads_numeric_fields(value: object, expected: float) -> None:
    assert provider_number(Platform.VERCEL, value, "executions") == expected


@pytest.mark.parametrize("value", ["n/a", {"count": 1}, [1], True, math.inf, "nan", 10**400])
def test_provider_number_rejects_unreadable_fields(value: object) -> None:
    with pytest.raises(ProviderRequestError, match="unreadable executions") as excinfo:
        provider_number(Platform.VERCEL, value, "executions")
    assert excinfo.value.category == "invalid_payload"


def test_every_best_effort_operation_requires_authentication() -> None:
    best_effort = {name for name, policy in OPERATION_POLICIES.items() if policy.best_effort}

    assert best_effort == {"get_cost", "get_analytics", "share_with_team", "get_team_deployments"}
    assert all(policy.requires_auth for policy in OPERATION_POLICIES.values())


@pytest.mark.asyncio
@pytest.mark.parametrize("error", [ValueError("could not convert"), OverflowError("too large")])
async def test_malformed_numbers_fall_back_for_best_effort_operations(error: Exception) -> None:
    adapter = ScriptedAdapter(Platform.VERCEL, fail_with=error)
    await adapter.authenticate({"apiToken": "token"})

    assert await adapter.get_cost("dpl_1") == 0.0
    assert await adapter.share_with_team("dpl_1", "team_1") is False


@pytest.mark.asyncio
async def test_malformed_numbers_surface_as_provider_errors_for_required_operations() -> None:
    adapter = ScriptedAdapter(Platform.VERCEL, fail_with=ValueError("could not convert"))
    await adapter.authenticate({"apiToken": "token"})

    with pytest.raises(ProviderRequestError, match="unexpected response shape") as excinfo:
        await adapter.get_status("dpl_1")
    assert excinfo.value.category == "invalid_payload"
