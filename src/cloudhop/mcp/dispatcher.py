"""Tool dispatch: rate limiting, logging and error normalization."""

from __future__ import annotations

from collections.abc import Awaitable, Callable
from dataclasses import dataclass
from typing import Any

import structlog

from cloudhop.core.errors import CloudhopError
from cloudhop.core.rate_limiter import DEFAULT_CLIENT_ID, RATE_LIMIT_MESSAGE, RateLimiter
from cloudhop.mcp.server import MCPTool

logger = structlog.get_logger(__name__)

type ToolHandler = Callable[[dict[str, Any]], Awaitable[str]]


@dataclass(slots=True, frozen=True)
class ToolResponse:
    """Text result of one tool call, flagged when it is an error."""

    text: str
    is_error: bool = False

    def to_payload(self) -> dict[str, Any]:
        return {
            "content": [{"type": "text", "text": self.text}],
            "isError": self.is_error,
        }


@dataclass(slots=True, frozen=True)
class RegisteredTool:
    tool: MCPTool
    handler: ToolHandler


class ToolDispatcher:
    """Single boundary where tool failures become error responses.

    Handlers validate their own arguments and raise `CloudhopError`
    subclasses; nothing raised by a handler escapes `call`.
    """

    def __init__(self, rate_limiter: RateLimiter) -> None:
        self._rate_limiter = rate_limiter
        self._tools: dict[str, RegisteredTool] = {}

    @property
    def rate_limiter(self) -> RateLimiter:
        return self._rate_limiter

    def register(self, tool: MCPTool, handler: ToolHandler) -> None:
        if tool.name in self._tools:
            msg = f"tool already registered: {tool.name}"
            raise ValueError(msg)
        self._tools[tool.name] = RegisteredTool(tool=tool, handler=handler)

    def tools(self) -> list[MCPTool]:
        return [entry.tool for entry in self._tools.values()]

    def find(self, name: str) -> MCPTool | None:
        entry = self._tools.get(name)
        return entry.tool if entry else None

    async def call(
        self,
        name: str,
        arguments: dict[str, Any] | None = None,
        *,
        client_id: str = DEFAULT_CLIENT_ID,
    ) -> ToolResponse:
        if not self._rate_limiter.is_allowed(client_id):
            logger.warning("tool.rate_limited", tool=name)
            return ToolResponse(RATE_LIMIT_MESSAGE, is_error=True)

        arguments = arguments or {}
        logger.info("tool.called", tool=name, args=sorted(str(key) for key in arguments))

        entry = self._tools.get(name)
        if entry is None:
            return ToolResponse(f"Unknown tool: {name}", is_error=True)

        try:
            text = await entry.handler(arguments)
        except CloudhopError as exc:
            logger.warning("tool.failed", tool=name, code=exc.code, platform=exc.platform)
            return ToolResponse(f"Error: {exc.message}", is_error=True)
        except Exception as exc:
            logger.exception("tool.crashed", tool=name)
            return ToolResponse(f"Error: {type(exc).__name__}: {exc}", is_error=True)
        return ToolResponse(text)
