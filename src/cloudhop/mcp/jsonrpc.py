"""JSON-RPC 2.0 method routing shared by the stdio and HTTP transports."""

from __future__ import annotations

from typing import Any

import structlog

from cloudhop.config import SERVICE_NAME, VERSION
from cloudhop.core.rate_limiter import DEFAULT_CLIENT_ID
from cloudhop.mcp.dispatcher import ToolDispatcher

logger = structlog.get_logger(__name__)

PROTOCOL_VERSION = "2025-11-25"

PARSE_ERROR = -32700
INVALID_REQUEST = -32600
METHOD_NOT_FOUND = -32601
INVALID_PARAMS = -32602
INTERNAL_ERROR = -32603


def _response(request_id: str | int | None, result: Any) -> dict[str, Any]:
    return {"jsonrpc": "2.0", "id": request_id, "result": result}


def _error(request_id: str | int | None, code: int, message: str) -> dict[str, Any]:
    return {
        "jsonrpc": "2.0",
        "id": request_id,
        "error": {
            "code": code,
            "message": message,
        },
    }


def parse_error(message: str = "Parse error") -> dict[str, Any]:
    return _error(None, PARSE_ERROR, message)


def is_notification(payload: Any) -> bool:
    """Requests without an id expect no reply."""
    return isinstance(payload, dict) and "id" not in payload


class JSONRPCRouter:
    """Answer MCP lifecycle and tool methods against one dispatcher.

    Domain failures from tools come back as successful `tools/call` results
    flagged `isError`; only protocol mistakes produce JSON-RPC errors.
    """

    def __init__(self, dispatcher: ToolDispatcher) -> None:
        self._dispatcher = dispatcher

    async def handle(self, payload: Any, *, client_id: str = DEFAULT_CLIENT_ID) -> dict[str, Any]:
        if not isinstance(payload, dict):
            return _error(None, INVALID_REQUEST, "Invalid request")

        request_id = payload.get("id")
        method = payload.get("method")
        params = payload.get("params")
        if params is None:
            params = {}

        if not isinstance(method, str):
            return _error(request_id, INVALID_REQUEST, "Invalid method")
        if not isinstance(params, dict):
            return _error(request_id, INVALID_PARAMS, "Invalid params")

        logger.debug("jsonrpc.request", method=method)

        if method == "initialize":
            return _response(
                request_id,
                {
                    "protocolVersion": PROTOCOL_VERSION,
                    "serverInfo": {"name": SERVICE_NAME, "version": VERSION},
                    "capabilities": {"tools": {"listChanged": False}},
                },
            )

        if method in {"notifications/initialized", "ping"}:
            return _response(request_id, {})

        if method == "tools/list":
            tools = [tool.to_payload() for tool in self._dispatcher.tools()]
            return _response(request_id, {"tools": tools})

        if method == "tools/call":
            tool_name = params.get("name")
            arguments = params.get("arguments") or {}
            if not isinstance(tool_name, str):
                return _error(request_id, INVALID_PARAMS, "Missing tool name")
            if not isinstance(arguments, dict):
                return _error(request_id, INVALID_PARAMS, "Invalid tool arguments")
            if self._dispatcher.find(tool_name) is None:
                return _error(request_id, METHOD_NOT_FOUND, f"Unknown tool: {tool_name}")
            result = await self._dispatcher.call(tool_name, arguments, client_id=client_id)
            return _response(request_id, result.to_payload())

        return _error(request_id, METHOD_NOT_FOUND, f"Unknown method: {method}")
