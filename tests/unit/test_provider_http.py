from __future__ import annotations

from collections.abc import Callable

import httpx
import pytest

from cloudhop.core.errors import ProviderRequestError
from cloudhop.platforms.http import USER_AGENT, ProviderHTTPClient


def _client(handler: Callable[[httpx.Request], httpx.Response]) -> ProviderHTTPClient:
    return ProviderHTTPClient("vercel", "https://api.example.test/", transport=httpx.MockTransport(handler))


@pytest.mark.asyncio
async def test_request_sends_bearer_token_and_decodes_json() -> None:
    seen: list[httpx.Request] = []

    def handler(request: httpx.Request) -> httpx.Response:
        seen.append(request)
        return httpx.Response(200, json={"ok": True})

    body = await _client(handler).request("GET", "/v2/user", token="secret", params={"limit": 1})

    assert body == {"ok": True}
    assert str(seen[0].url) == "https://api.example.test/v2/user?limit=1"
    assert seen[0].headers["Authorization"] == "Bearer secret"
    assert seen[0].headers["User-Agent"] == USER_AGENT


@pytest.mark.asyncio
async def test_empty_body_is_none() -> None:
    body = await _client(lambda request: httpx.Response(204)).request("DELETE", "/x")
    assert body is None


@pytest.mark.asyncio
async def test_http_status_error_keeps_status_and_hides_headers() -> None:
    client = _client(lambda request: httpx.Response(403, json={"error": "forbidden"}))

    with pytest.raises(ProviderRequestError) as caught:
        await client.request("GET", "/v2/user", token="secret")

    assert caught.value.category == "http_status"
    assert caught.value.status_code == 403
    assert caught.value.message == "vercel: GET /v2/user returned http status 403"
    assert "secret" not in caught.value.message


@pytest.mark.asyncio
async def test_timeout_is_categorized() -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        raise httpx.ReadTimeout("slow", request=request)

    with pytest.raises(ProviderRequestError) as caught:
        await _client(handler).request("GET", "/v2/user")

    assert caught.value.category == "network_timeout"


@pytest.mark.asyncio
async def test_transport_failure_is_categorized() -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        raise httpx.ConnectError("refused", request=request)

    with pytest.raises(ProviderRequestError) as caught:
        await _client(handler).request("GET", "/v2/user")

    assert caught.value.category == "transport_error"
    assert "ConnectError" in caught.value.message


@pytest.mark.asyncio
async def test_invalid_json_is_categorized() -> None:
    client = _client(lambda request: httpx.Response(200, content=b"<html>"))

    with pytest.raises(ProviderRequestError) as caught:
        await client.request("GET", "/v2/user")

    assert caught.value.category == "invalid_payload"
