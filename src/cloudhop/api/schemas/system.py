"""System API schemas."""

from __future__ import annotations

from datetime import datetime
from typing import Any

from pydantic import BaseModel


class HealthResponse(BaseModel):
    """Liveness payload with per-platform authentication flags."""

    status: str
    service: str
    version: str
    timestamp: datetime
    platforms: dict[str, bool]


class MCPDiscoveryResponse(BaseModel):
    name: str
    version: str
    transport: str
    endpoint: str


class MCPToolResponse(BaseModel):
    """One tool from the catalog."""

    name: str
    description: str
    input_schema: dict[str, Any]
