"""cloudhop MCP tool catalog."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Final

from cloudhop.models.deployment import Environment, Platform


@dataclass(slots=True)
class MCPTool:
    """MCP tool descriptor exposed by cloudhop."""

    name: str
    description: str
    input_schema: dict[str, Any] = field(default_factory=lambda: {"type": "object", "properties": {}})

    def to_payload(self) -> dict[str, Any]:
        return {"name": self.name, "description": self.description, "inputSchema": self.input_schema}


_PLATFORM_SCHEMA: Final[dict[str, Any]] = {
    "type": "string",
    "enum": [member.value for member in Platform],
}

_PLATFORM_LIST_SCHEMA: Final[dict[str, Any]] = {
    "type": "array",
    "items": _PLATFORM_SCHEMA,
    "description": "Platforms to include (default: all)",
}

_CONFIG_PROPERTIES: Final[dict[str, Any]] = {
    "projectName": {
        "type": "string",
        "minLength": 1,
        "maxLength": 100,
        "pattern": "^[A-Za-z0-9_-]+$",
    },
    "environment": {
        "type": "string",
        "enum": [member.value for member in Environment],
        "default": Environment.PRODUCTION.value,
    },
    "buildCommand": {"type": "string"},
    "outputDirectory": {"type": "string"},
    "environmentVariables": {"type": "object", "additionalProperties": {"type": "string"}},
    "domains": {
        "type": "array",
        "items": {"type": "string"},
        "description": "Custom domains to attach (vercel only)",
    },
    "region": {"type": "string"},
}


def _object(properties: dict[str, Any], required: list[str] | None = None) -> dict[str, Any]:
    schema: dict[str, Any] = {"type": "object", "properties": properties}
    if required:
        schema["required"] = required
    return schema


_REGISTERED_TOOLS: Final[list[MCPTool]] = [
    MCPTool(name="ping", description="Check that the cloudhop MCP server is responding"),
    MCPTool(name="help", description="Show available tools, platforms and limits"),
    MCPTool(
        name="authenticate",
        description="Authenticate with a cloud platform using API credentials",
        input_schema=_object(
            {
                "platform": _PLATFORM_SCHEMA,
                "credentials": {
                    "type": "object",
                    "additionalProperties": {"type": "string"},
                    "description": "Platform credentials, e.g. apiToken and accountId for cloudflare",
                },
            },
            ["platform", "credentials"],
        ),
    ),
    MCPTool(
        name="deploy",
        description="Deploy a project to an authenticated cloud platform",
        input_schema=_object(
            {
                "config": _object(
                    {"platform": _PLATFORM_SCHEMA, **_CONFIG_PROPERTIES},
                    ["platform", "projectName"],
                ),
                "teamId": {"type": "string", "description": "Optional team to share the deployment with"},
            },
            ["config"],
        ),
    ),
    MCPTool(
        name="deployment-status",
        description="Check the status of a deployment",
        input_schema=_object(
            {"platform": _PLATFORM_SCHEMA, "deploymentId": {"type": "string", "minLength": 1}},
            ["platform", "deploymentId"],
        ),
    ),
    MCPTool(
        name="cost-compare",
        description="Compare deployment cost and performance across platforms",
        input_schema=_object(
            {
                "config": _object(_CONFIG_PROPERTIES, ["projectName"]),
                "platforms": _PLATFORM_LIST_SCHEMA,
            },
            ["config"],
        ),
    ),
    MCPTool(
        name="list-deployments",
        description="List recent deployments across platforms, newest first",
        input_schema=_object(
            {
                "platform": _PLATFORM_SCHEMA,
                "limit": {"type": "integer", "minimum": 1, "maximum": 100, "default": 20},
                "teamId": {"type": "string", "description": "List the deployments visible to a team"},
            }
        ),
    ),
    MCPTool(
        name="platform-analytics",
        description="Get deployment analytics for a project across platforms",
        input_schema=_object(
            {"projectName": _CONFIG_PROPERTIES["projectName"], "platforms": _PLATFORM_LIST_SCHEMA},
            ["projectName"],
        ),
    ),
]


def registered_tools() -> list[MCPTool]:
    """Return all cloudhop MCP tools."""
    return list(_REGISTERED_TOOLS)


def find_tool(name: str) -> MCPTool | None:
    """Look up one MCP tool by name."""
    for tool in _REGISTERED_TOOLS:
        if tool.name == name:
            return tool
    return None
