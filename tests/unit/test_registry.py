from __future__ import annotations

import pytest

from cloudhop.core.errors import PlatformUnsupportedError
from cloudhop.models.deployment import Platform
from cloudhop.platforms.cloudflare import CloudflareAdapter
from cloudhop.platforms.registry import AdapterRegistry, build_default_registry
from tests.support.provider_stubs import ProviderStub


def test_default_registry_has_one_adapter_per_platform() -> None:
    registry = build_default_registry()
    assert len(registry) == 3
    assert registry.platforms() == [Platform.CLOUDFLARE, Platform.VERCEL, Platform.RAILWAY]
    assert registry.get("vercel") is registry.get(Platform.VERCEL)
    assert registry.authenticated() == {"cloudflare": False, "vercel": False, "railway": False}


@pytest.mark.parametrize("platform", ["netlify", "", "AWS", None, 3, "<vercel>x"])
def test_unknown_platform_is_not_supported(platform: object) -> None:
    registry = build_default_registry()
    with pytest.raises(PlatformUnsupportedError, match="not supported") as caught:
        registry.get(platform)
    assert "cloudflare, vercel, railway" in caught.value.message


def test_lookup_sanitizes_identifier() -> None:
    registry = build_default_registry()
    assert registry.get(" railway\n").platform is Platform.RAILWAY


def test_duplicate_adapters_are_rejected() -> None:
    with pytest.raises(ValueError, match="duplicate adapter"):
        AdapterRegistry([CloudflareAdapter(), CloudflareAdapter()])


def test_shared_transport_reaches_every_adapter() -> None:
    stub = ProviderStub()
    registry = build_default_registry(transport=stub.transport)
    for adapter in registry:
        assert adapter._http._transport is stub.transport
