# Copyright (c) 2025 CoReason, Inc.
#
# This software is proprietary and dual-licensed.
# Licensed under the Prosperity Public License 3.0 (the "License").
# A copy of the license is available at https://prosperitylicense.com/versions/3.0.0
# For details, see the LICENSE file.
# Commercial use beyond a 30-day trial requires a separate license.
#
# Source Code: https://github.com/CoReason-AI/adfs_signed_assertion

import httpx
import pytest

from adfs_signed_assertion.exceptions import ConfigurationError
from adfs_signed_assertion.host import (
    CredentialDescription,
    CredentialSource,
    CustomSignedAssertionProvider,
    NamedHttpClientRegistry,
    SignedAssertionProviderRegistry,
)


class DummyProvider:
    def __init__(self, name: str) -> None:
        self._name = name

    @property
    def name(self) -> str:
        return self._name

    @property
    def credential_source(self) -> CredentialSource:
        return CredentialSource.CUSTOM_SIGNED_ASSERTION

    async def load(self, descriptor: CredentialDescription) -> None:
        descriptor.cached_value = self


def test_descriptor_defaults() -> None:
    descriptor = CredentialDescription()
    assert descriptor.source == CredentialSource.CUSTOM_SIGNED_ASSERTION
    assert descriptor.provider_data == {}
    assert descriptor.cached_value is None
    assert descriptor.skip is False


def test_descriptor_is_mutable() -> None:
    descriptor = CredentialDescription(provider_name="AdfsSignedAssertion")
    descriptor.skip = True
    descriptor.cached_value = object()
    assert descriptor.skip is True
    assert descriptor.cached_value is not None


def test_descriptor_repr_redacts_provider_data() -> None:
    descriptor = CredentialDescription(provider_data={"ClientSecret": "s3cr3t-value"})
    assert "s3cr3t-value" not in repr(descriptor)
    assert "s3cr3t-value" not in str(descriptor)


def test_named_client_lookup_is_exact() -> None:
    registry = NamedHttpClientRegistry()
    client = httpx.AsyncClient()
    registry.register("AdfsWia", client)

    assert registry.create_client("AdfsWia") is client
    with pytest.raises(ConfigurationError, match="adfswia"):
        registry.create_client("adfswia")


def test_unknown_client_name() -> None:
    with pytest.raises(ConfigurationError, match="No HTTP client registered"):
        NamedHttpClientRegistry().create_client("AdfsWia")


@pytest.mark.asyncio
async def test_registry_aclose_closes_clients() -> None:
    registry = NamedHttpClientRegistry()
    client = httpx.AsyncClient()
    registry.register("AdfsWia", client)

    await registry.aclose()

    assert client.is_closed
    with pytest.raises(ConfigurationError):
        registry.create_client("AdfsWia")


def test_provider_registry_first_registration_wins() -> None:
    registry = SignedAssertionProviderRegistry()
    first, second = DummyProvider("p"), DummyProvider("p")

    assert registry.try_add(first) is True
    assert registry.try_add(second) is False
    assert registry.get("p") is first
    assert len(registry) == 1


def test_provider_registry_lookup() -> None:
    registry = SignedAssertionProviderRegistry()
    registry.try_add(DummyProvider("a"))
    registry.try_add(DummyProvider("b"))

    assert "a" in registry
    assert "c" not in registry
    assert registry.get("c") is None
    assert sorted(p.name for p in registry) == ["a", "b"]


def test_dummy_satisfies_protocol() -> None:
    assert isinstance(DummyProvider("p"), CustomSignedAssertionProvider)
