"""Health and discovery routes."""

from __future__ import annotations

from datetime import UTC, datetime

from fastapi import APIRouter, Depends

from cloudhop.api.deps import get_dispatcher, get_registry
from cloudhop.api.schemas.system import HealthResponse, MCPDiscoveryResponse, MCPToolResponse
from cloudhop.config import SERVICE_NAME, VERSION
from cloudhop.mcp.dispatcher import ToolDispatcher
from cloudhop.platforms.registry import AdapterRegistry

router = APIRouter(tags=["system"])


@router.get("/health", response_model=HealthResponse)
async def health(registry: AdapterRegistry = Depends(get_registry)) -> HealthResponse:
    return HealthResponse(
        status="healthy",
        service=SERVICE_NAME,
        version=VERSION,
        timestamp=datetime.now(UTC),
        platforms=registry.authenticated(),
    )


@router.get("/api/v1/mcp/.well-known", response_model=MCPDiscoveryResponse)
async def mcp_discovery() -> MCPDiscoveryResponse:
    return MCPDiscoveryResponse(
        name=SERVICE_NAME,
        version=VERSION,
        transport="streamable-http",
        endpoint="/mcp",
    )


@router.get("/api/v1/mcp/tools", response_model=list[MCPToolResponse])
async def mcp_tools(dispatcher: ToolDispatcher = Depends(get_dispatcher)) -> list[MCPToolResponse]:
    return [
        MCPToolResponse(name=tool.name, description=tool.description, input_schema=tool.input_schema)
        for tool in dispatcher.tools()
    ]
