"""Tool handlers: parse arguments, run the service, render text."""

from __future__ import annotations

from typing import Any

from cloudhop.config import SERVICE_NAME, VERSION
from cloudhop.core.deployment_service import DeploymentService
from cloudhop.core.rate_limiter import RateLimiter
from cloudhop.mcp.dispatcher import ToolDispatcher, ToolHandler
from cloudhop.mcp.server import registered_tools
from cloudhop.mcp.tools import formatting
from cloudhop.mcp.tools.deploy_tools import DeployToolCall, parse_deploy_tool_call
from cloudhop.mcp.tools.report_tools import ReportToolCall, parse_report_tool_call


async def _handle_deploy_tool_call(call: DeployToolCall, service: DeploymentService) -> str:
    if call.operation == "authenticate":
        await service.authenticate(call.platform, call.credentials or {})
        return formatting.format_authenticated(call.platform)

    if call.operation == "status":
        result = await service.status(call.platform, call.deployment_id or "")
        return formatting.format_status(result)

    if call.config is None:
        msg = "deploy call without config"
        raise ValueError(msg)
    outcome = await service.deploy(call.config, team_id=call.team_id)
    return formatting.format_deployment(outcome)


async def _handle_report_tool_call(call: ReportToolCall, service: DeploymentService) -> str:
    if call.operation == "list":
        platform = call.platforms[0] if call.platforms else None
        listing = await service.list_deployments(platform=platform, limit=call.limit, team_id=call.team_id)
        return formatting.format_listing(listing)

    project_name = call.project_name or ""
    if call.operation == "analytics":
        report = await service.analytics(project_name, call.platforms)
        return formatting.format_analytics(report)

    comparison = await service.compare_costs(project_name, call.platforms)
    return formatting.format_cost_comparison(comparison)


def _ping_text() -> str:
    return f"pong from {SERVICE_NAME} {VERSION}"


def _help_text(service: DeploymentService, rate_limiter: RateLimiter) -> str:
    tools = "\n".join(f"- {tool.name}: {tool.description}" for tool in registered_tools())
    platforms = ", ".join(
        f"{platform} ({'authenticated' if flag else 'not authenticated'})"
        for platform, flag in service.registry.authenticated().items()
    )
    window_seconds = rate_limiter.window_ms / 1000
    return "\n".join(
        [
            f"{SERVICE_NAME} {VERSION}",
            "",
            "Tools:",
            tools,
            "",
            f"Platforms: {platforms}",
            f"Rate limit: {rate_limiter.max_requests} requests per {window_seconds:g}s",
        ]
    )


def create_dispatcher(service: DeploymentService, rate_limiter: RateLimiter) -> ToolDispatcher:
    """Register every catalog tool against its handler."""
    dispatcher = ToolDispatcher(rate_limiter)

    async def ping(arguments: dict[str, Any]) -> str:
        return _ping_text()

    async def help_(arguments: dict[str, Any]) -> str:
        return _help_text(service, rate_limiter)

    def family_handler(name: str) -> ToolHandler:
        async def handle(arguments: dict[str, Any]) -> str:
            deploy_call = parse_deploy_tool_call(name, arguments)
            if deploy_call is not None:
                return await _handle_deploy_tool_call(deploy_call, service)
            report_call = parse_report_tool_call(name, arguments)
            if report_call is not None:
                return await _handle_report_tool_call(report_call, service)
            msg = f"Tool handler not implemented: {name}"
            raise NotImplementedError(msg)

        return handle

    system: dict[str, ToolHandler] = {"ping": ping, "help": help_}
    for tool in registered_tools():
        dispatcher.register(tool, system.get(tool.name) or family_handler(tool.name))
    return dispatcher
