"""Shared API dependency providers."""

from __future__ import annotations

from cloudhop.config import Settings, get_settings
from cloudhop.core.deployment_service import DeploymentService
from cloudhop.core.rate_limiter import RateLimiter
from cloudhop.mcp.dispatcher import ToolDispatcher
from cloudhop.mcp.handlers import create_dispatcher
from cloudhop.mcp.jsonrpc import JSONRPCRouter
from cloudhop.mcp.sessions import SessionRegistry
from cloudhop.platforms.registry import AdapterRegistry, build_default_registry

_SETTINGS = get_settings()
_REGISTRY = build_default_registry(timeout=_SETTINGS.provider_timeout_seconds)
_RATE_LIMITER = RateLimiter(
    max_requests=_SETTINGS.rate_limit_max_requests,
    window_ms=_SETTINGS.rate_limit_window_ms,
)
_SERVICE = DeploymentService(_REGISTRY)
_DISPATCHER = create_dispatcher(_SERVICE, _RATE_LIMITER)
_JSONRPC_ROUTER = JSONRPCRouter(_DISPATCHER)
_SESSIONS = SessionRegistry()


def get_app_settings() -> Settings:
    return _SETTINGS


def get_registry() -> AdapterRegistry:
    return _REGISTRY


def get_rate_limiter() -> RateLimiter:
    return _RATE_LIMITER


def get_deployment_service() -> DeploymentService:
    return _SERVICE


def get_dispatcher() -> ToolDispatcher:
    return _DISPATCHER


def get_jsonrpc_router() -> JSONRPCRouter:
    return _JSONRPC_ROUTER


def get_session_registry() -> SessionRegistry:
    return _SESSIONS
