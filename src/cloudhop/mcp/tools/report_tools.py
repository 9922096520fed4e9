"""Cross-platform report tool adapters for MCP exposure."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Literal

from cloudhop.core.errors import ValidationError
from cloudhop.core.validation import DEFAULT_LIST_LIMIT, parse_deployment_config, require
from cloudhop.mcp.tools.common import optional_platform, optional_platforms, optional_value, required_value
from cloudhop.models.deployment import Platform

type ReportOperation = Literal["cost-compare", "list", "analytics"]


@dataclass(slots=True)
class ReportToolCall:
    """Canonical report tool call payload."""

    operation: ReportOperation
    project_name: str | None = None
    platforms: list[Platform] | None = None
    limit: int = DEFAULT_LIST_LIMIT
    team_id: str | None = None


_REPORT_TOOL_OPERATIONS: dict[str, ReportOperation] = {
    "cost-compare": "cost-compare",
    "list-deployments": "list",
    "platform-analytics": "analytics",
}


def parse_report_tool_call(tool_name: str, arguments: dict[str, Any]) -> ReportToolCall | None:
    """Parse MCP report tool call into normalized payload.

    Returns `None` when the tool is not a report tool.
    """
    operation = _REPORT_TOOL_OPERATIONS.get(tool_name)
    if operation is None:
        return None

    if operation == "list":
        platform = optional_platform(arguments)
        return ReportToolCall(
            operation="list",
            platforms=[platform] if platform is not None else None,
            limit=require("limit", arguments.get("limit")),
            team_id=optional_value(arguments, "teamId", "team id"),
        )

    platforms = optional_platforms(arguments)
    if operation == "analytics":
        project_name = required_value(arguments, "projectName", "project name")
        return ReportToolCall(operation="analytics", project_name=project_name, platforms=platforms)

    raw_config = arguments.get("config")
    if not isinstance(raw_config, dict):
        raise ValidationError("config", "Invalid config: config object is required")
    if "platform" in raw_config:
        raise ValidationError("config", "Invalid config: use 'platforms' to choose platforms")
    # Platform does not affect field validation; any member works.
    config = parse_deployment_config(raw_config, platform=(platforms or list(Platform))[0])
    return ReportToolCall(operation="cost-compare", project_name=config.project_name, platforms=platforms)
