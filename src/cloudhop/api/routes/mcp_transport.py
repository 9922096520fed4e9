"""MCP JSON-RPC transport endpoint."""

from __future__ import annotations

from typing import Any

from fastapi import APIRouter, Depends, Header, Response

from cloudhop.api.deps import get_jsonrpc_router, get_session_registry
from cloudhop.mcp.jsonrpc import JSONRPCRouter
from cloudhop.mcp.sessions import SESSION_HEADER, SessionRegistry

router = APIRouter(tags=["mcp-transport"])


@router.post("/mcp")
async def mcp_transport(
    payload: dict[str, Any],
    response: Response,
    jsonrpc: JSONRPCRouter = Depends(get_jsonrpc_router),
    sessions: SessionRegistry = Depends(get_session_registry),
    mcp_session_id: str | None = Header(default=None),
) -> dict[str, Any]:
    if payload.get("method") == "initialize":
        issued = sessions.issue()
        response.headers[SESSION_HEADER] = issued
        return await jsonrpc.handle(payload, client_id=issued)
    # Unknown session ids share the default rate-limit bucket.
    return await jsonrpc.handle(payload, client_id=sessions.client_id(mcp_session_id))
