from __future__ import annotations

import io
import json

import pytest

from cloudhop.core.deployment_service import DeploymentService
from cloudhop.core.rate_limiter import RateLimiter
from cloudhop.mcp.handlers import create_dispatcher
from cloudhop.mcp.jsonrpc import JSONRPCRouter
from cloudhop.mcp.stdio import serve_stdio
from cloudhop.platforms.registry import build_default_registry
from tests.support.provider_stubs import ProviderStub


def _router() -> JSONRPCRouter:
    registry = build_default_registry(transport=ProviderStub().transport)
    return JSONRPCRouter(create_dispatcher(DeploymentService(registry), RateLimiter()))


@pytest.mark.asyncio
async def test_stdio_answers_each_request_line_in_order() -> None:
    requests = [
        {"jsonrpc": "2.0", "id": 1, "method": "initialize", "params": {}},
        {"jsonrpc": "2.0", "method": "notifications/initialized"},
        {"jsonrpc": "2.0", "id": 2, "method": "tools/call", "params": {"name": "ping", "arguments": {}}},
    ]
    stdin = io.StringIO("".join(json.dumps(item) + "\n" for item in requests) + "\n{not json\n")
    stdout = io.StringIO()

    await serve_stdio(_router(), stdin=stdin, stdout=stdout)

    replies = [json.loads(line) for line in stdout.getvalue().splitlines()]
    assert [reply["id"] for reply in replies] == [1, 2, None]
    assert replies[0]["result"]["serverInfo"]["name"] == "cloudhop-mcp"
    assert replies[1]["result"]["content"][0]["text"].startswith("pong")
    assert replies[2]["error"]["code"] == -32700
