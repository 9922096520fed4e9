"""Platform identifier to adapter lookup."""

from __future__ import annotations

from collections.abc import Iterable, Iterator, Mapping
from types import MappingProxyType
from typing import Any

import httpx

from cloudhop.core.errors import PlatformUnsupportedError
from cloudhop.core.sanitize import sanitize_input
from cloudhop.models.deployment import Platform
from cloudhop.platforms.base import PlatformAdapter
from cloudhop.platforms.cloudflare import CloudflareAdapter
from cloudhop.platforms.http import DEFAULT_TIMEOUT_SECONDS
from cloudhop.platforms.railway import RailwayAdapter
from cloudhop.platforms.vercel import VercelAdapter

ADAPTER_TYPES: tuple[type[PlatformAdapter], ...] = (
    CloudflareAdapter,
    VercelAdapter,
    RailwayAdapter,
)


class AdapterRegistry:
    """Read-only mapping from platform to its one live adapter."""

    def __init__(self, adapters: Iterable[PlatformAdapter]) -> None:
        table: dict[Platform, PlatformAdapter] = {}
        for adapter in adapters:
            if adapter.platform in table:
                msg = f"duplicate adapter for {adapter.platform.value}"
                raise ValueError(msg)
            table[adapter.platform] = adapter
        self._adapters: Mapping[Platform, PlatformAdapter] = MappingProxyType(table)

    def get(self, platform: Any) -> PlatformAdapter:
        """Return the adapter for `platform` or raise `PlatformUnsupportedError`."""
        key = sanitize_input(platform)
        try:
            adapter = self._adapters.get(Platform(key))
        except (TypeError, ValueError):
            adapter = None
        if adapter is None:
            raise PlatformUnsupportedError(str(key), self.supported())
        return adapter

    def supported(self) -> list[str]:
        return [platform.value for platform in self._adapters]

    def platforms(self) -> list[Platform]:
        return list(self._adapters)

    def authenticated(self) -> dict[str, bool]:
        return {platform.value: adapter.is_authenticated() for platform, adapter in self._adapters.items()}

    def __iter__(self) -> Iterator[PlatformAdapter]:
        return iter(self._adapters.values())

    def __len__(self) -> int:
        return len(self._adapters)


def build_default_registry(
    *,
    timeout: float = DEFAULT_TIMEOUT_SECONDS,
    transport: httpx.AsyncBaseTransport | None = None,
) -> AdapterRegistry:
    """One adapter per supported platform, sharing timeout and transport."""
    return AdapterRegistry(
        adapter_type(timeout=timeout, transport=transport) for adapter_type in ADAPTER_TYPES
    )
