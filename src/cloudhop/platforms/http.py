"""HTTP access to provider APIs."""

from __future__ import annotations

from collections.abc import Mapping
from typing import Any

import httpx
import structlog

from cloudhop.core.errors import ProviderErrorCategory, ProviderRequestError

logger = structlog.get_logger(__name__)

DEFAULT_TIMEOUT_SECONDS = 30.0
USER_AGENT = "cloudhop-mcp/0.1.0"


class ProviderHTTPClient:
    """Issue one JSON request per call against a provider base URL.

    Every httpx failure is mapped to `ProviderRequestError`. Messages carry the
    method, path and status code only; headers never reach them.
    """

    def __init__(
        self,
        platform: str,
        base_url: str,
        *,
        timeout: float = DEFAULT_TIMEOUT_SECONDS,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self._platform = platform
        self._base_url = base_url.rstrip("/")
        self._timeout = timeout
        self._transport = transport

    @property
    def base_url(self) -> str:
        return self._base_url

    async def request(
        self,
        method: str,
        path: str,
        *,
        token: str | None = None,
        json: Any = None,
        content: str | bytes | None = None,
        params: Mapping[str, Any] | None = None,
        headers: Mapping[str, str] | None = None,
    ) -> Any:
        request_headers = {"User-Agent": USER_AGENT, "Accept": "application/json"}
        if token:
            request_headers["Authorization"] = f"Bearer {token}"
        if headers:
            request_headers.update(headers)
        url = f"{self._base_url}{path}"
        label = f"{method} {path}"

        try:
            async with httpx.AsyncClient(timeout=self._timeout, transport=self._transport) as client:
                response = await client.request(
                    method,
                    url,
                    json=json,
                    content=content,
                    params=params,
                    headers=request_headers,
                )
            response.raise_for_status()
        except httpx.TimeoutException as exc:
            raise self._failure(f"{label} timed out", "network_timeout") from exc
        except httpx.HTTPStatusError as exc:
            status_code = exc.response.status_code
            raise self._failure(
                f"{label} returned http status {status_code}",
                "http_status",
                status_code=status_code,
            ) from exc
        except httpx.HTTPError as exc:
            raise self._failure(f"{label} failed: {type(exc).__name__}", "transport_error") from exc

        if not response.content:
            return None
        try:
            return response.json()
        except ValueError as exc:
            raise self._failure(f"{label} returned invalid JSON", "invalid_payload") from exc

    def _failure(
        self,
        message: str,
        category: ProviderErrorCategory,
        *,
        status_code: int | None = None,
    ) -> ProviderRequestError:
        logger.warning(
            "provider.request_failed",
            platform=self._platform,
            category=category,
            status_code=status_code,
        )
        return ProviderRequestError(
            f"{self._platform}: {message}",
            platform=self._platform,
            category=category,
            status_code=status_code,
        )
