"""FastAPI app entrypoint."""

from __future__ import annotations

import uvicorn
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from cloudhop.api.routes.mcp_transport import router as mcp_transport_router
from cloudhop.api.routes.system import router as system_router
from cloudhop.config import VERSION, Settings, get_settings


def create_app() -> FastAPI:
    app = FastAPI(title="cloudhop MCP", version=VERSION)
    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_methods=["GET", "POST", "OPTIONS"],
        allow_headers=["Content-Type", "Mcp-Session-Id"],
        expose_headers=["Mcp-Session-Id"],
    )
    app.include_router(system_router)
    app.include_router(mcp_transport_router)
    return app


app = create_app()


def run(settings: Settings | None = None) -> None:
    settings = settings or get_settings()
    uvicorn.run(
        "cloudhop.api.app:app",
        host=settings.http_host,
        port=settings.http_port,
        reload=False,
        log_config=None,
    )
