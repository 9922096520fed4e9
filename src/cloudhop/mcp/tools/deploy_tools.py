"""Deploy tool adapters for MCP exposure."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Literal

from cloudhop.core.errors import ValidationError
from cloudhop.core.validation import parse_deployment_config
from cloudhop.mcp.tools.common import optional_value, required_platform, required_value
from cloudhop.models.deployment import DeploymentConfig, Platform

type DeployOperation = Literal["authenticate", "deploy", "status"]


@dataclass(slots=True)
class DeployToolCall:
    """Canonical deploy tool call payload."""

    operation: DeployOperation
    platform: Platform
    config: DeploymentConfig | None = None
    credentials: dict[str, str] | None = None
    deployment_id: str | None = None
    team_id: str | None = None


_DEPLOY_TOOL_OPERATIONS: dict[str, DeployOperation] = {
    "authenticate": "authenticate",
    "deploy": "deploy",
    "deployment-status": "status",
}


def parse_deploy_tool_call(tool_name: str, arguments: dict[str, Any]) -> DeployToolCall | None:
    """Parse MCP deploy tool call into normalized payload.

    Returns `None` when the tool is not a deploy tool.
    Raises `ValidationError` or `PlatformUnsupportedError` for bad arguments.
    """
    operation = _DEPLOY_TOOL_OPERATIONS.get(tool_name)
    if operation is None:
        return None

    if operation == "authenticate":
        platform = required_platform(arguments)
        credentials = required_value(arguments, "credentials", "credentials")
        return DeployToolCall(operation="authenticate", platform=platform, credentials=credentials)

    if operation == "status":
        platform = required_platform(arguments)
        deployment_id = required_value(arguments, "deploymentId", "deployment id")
        return DeployToolCall(operation="status", platform=platform, deployment_id=deployment_id)

    raw_config = arguments.get("config")
    if not isinstance(raw_config, dict):
        raise ValidationError("config", "Invalid config: config object is required")
    platform = required_platform(raw_config)
    config = parse_deployment_config(raw_config, platform=platform)
    team_id = optional_value(arguments, "teamId", "team id")
    return DeployToolCall(operation="deploy", platform=platform, config=config, team_id=team_id)
