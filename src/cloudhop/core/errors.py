"""Error taxonomy for tool calls and platform adapters."""

from __future__ import annotations

from collections.abc import Iterable
from typing import Literal

type ProviderErrorCategory = Literal[
    "network_timeout",
    "http_status",
    "transport_error",
    "invalid_payload",
    "graphql_error",
]

REDACTED = "***"


class CloudhopError(Exception):
    """Base class for errors surfaced to tool callers."""

    code = "CLOUDHOP_ERROR"

    def __init__(self, message: str, *, platform: str | None = None) -> None:
        super().__init__(message)
        self.message = message
        self.platform = platform


class ValidationError(CloudhopError):
    """A named input failed sanitization or its schema."""

    code = "INVALID_INPUT"

    def __init__(self, field: str, message: str) -> None:
        super().__init__(message)
        self.field = field


class AuthenticationError(CloudhopError):
    """Credential verification failed or auth is missing."""

    code = "AUTH_FAILED"

    def __init__(self, platform: str, message: str | None = None) -> None:
        super().__init__(message or f"Authentication failed for {platform}", platform=platform)


class NotAuthenticatedError(AuthenticationError):
    """An operation requiring authentication ran before `authenticate`."""

    code = "NOT_AUTHENTICATED"

    def __init__(self, platform: str) -> None:
        super().__init__(
            platform,
            f"Not authenticated with {platform}. Use the 'authenticate' tool first.",
        )


class PlatformUnsupportedError(CloudhopError):
    """No adapter is registered for the requested platform."""

    code = "PLATFORM_UNSUPPORTED"

    def __init__(self, platform: str, supported: Iterable[str] = ()) -> None:
        allowed = ", ".join(supported)
        message = f"Platform {platform!r} not supported"
        if allowed:
            message = f"{message} (supported: {allowed})"
        super().__init__(message, platform=platform)


class ProviderRequestError(CloudhopError):
    """The provider HTTP call failed or returned an unusable payload."""

    code = "PROVIDER_REQUEST_FAILED"

    def __init__(
        self,
        message: str,
        *,
        platform: str,
        category: ProviderErrorCategory,
        status_code: int | None = None,
    ) -> None:
        super().__init__(message, platform=platform)
        self.category = category
        self.status_code = status_code


def redact(text: str, secrets: Iterable[str | None]) -> str:
    """Replace every non-empty secret occurring in `text`."""
    for secret in secrets:
        if secret:
            text = text.replace(secret, REDACTED)
    return text
