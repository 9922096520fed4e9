"""Command-line entry point: serve MCP over stdio or HTTP."""

from __future__ import annotations

import argparse
import asyncio

import structlog

from cloudhop.config import SERVICE_NAME, VERSION, get_settings
from cloudhop.utils.logging import configure_logging

logger = structlog.get_logger(__name__)


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="cloudhop",
        description="MCP server for deploying to Cloudflare, Vercel and Railway",
    )
    parser.add_argument(
        "--http",
        action="store_true",
        help="Serve JSON-RPC over HTTP instead of stdio (or set CLOUDHOP_HTTP_MODE=true)",
    )
    parser.add_argument("--host", default=None, help="HTTP bind host")
    parser.add_argument("--port", type=int, default=None, help="HTTP port")
    parser.add_argument(
        "--log-level",
        choices=["DEBUG", "INFO", "WARNING", "ERROR"],
        default=None,
        help="Override CLOUDHOP_LOG_LEVEL",
    )
    parser.add_argument("--version", action="version", version=f"{SERVICE_NAME} {VERSION}")
    return parser


def main(argv: list[str] | None = None) -> int:
    args = _build_parser().parse_args(argv)
    overrides = {
        key: value
        for key, value in {
            "http_host": args.host,
            "http_port": args.port,
            "log_level": args.log_level,
        }.items()
        if value is not None
    }
    settings = get_settings().model_copy(update=overrides)
    configure_logging(settings)

    if args.http or settings.http_mode:
        from cloudhop.api.app import run

        logger.info("server.starting", transport="http", host=settings.http_host, port=settings.http_port)
        run(settings)
        return 0

    from cloudhop.api.deps import get_jsonrpc_router
    from cloudhop.mcp.stdio import serve_stdio

    logger.info("server.starting", transport="stdio")
    try:
        asyncio.run(serve_stdio(get_jsonrpc_router()))
    except KeyboardInterrupt:
        logger.info("server.interrupted")
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
