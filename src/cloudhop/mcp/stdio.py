"""Line-delimited JSON-RPC over stdin/stdout."""

from __future__ import annotations

import asyncio
import json
import sys
from typing import Any, TextIO

import structlog

from cloudhop.mcp.jsonrpc import JSONRPCRouter, is_notification, parse_error

logger = structlog.get_logger(__name__)


async def _read_line(stream: TextIO) -> str:
    loop = asyncio.get_running_loop()
    return await loop.run_in_executor(None, stream.readline)


def _write(stream: TextIO, message: dict[str, Any]) -> None:
    stream.write(json.dumps(message) + "\n")
    stream.flush()


async def serve_stdio(
    router: JSONRPCRouter,
    *,
    stdin: TextIO | None = None,
    stdout: TextIO | None = None,
) -> None:
    """Answer one request per line until stdin closes.

    Requests are handled strictly in arrival order.
    """
    stdin = stdin or sys.stdin
    stdout = stdout or sys.stdout
    logger.info("stdio.started")
    while True:
        line = await _read_line(stdin)
        if not line:
            break
        line = line.strip()
        if not line:
            continue
        try:
            payload = json.loads(line)
        except json.JSONDecodeError:
            logger.warning("stdio.invalid_json")
            _write(stdout, parse_error())
            continue
        response = await router.handle(payload)
        if is_notification(payload):
            continue
        _write(stdout, response)
    logger.info("stdio.stopped")
