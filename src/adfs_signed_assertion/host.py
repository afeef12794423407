# Copyright (c) 2025 CoReason, Inc.
#
# This software is proprietary and dual-licensed.
# Licensed under the Prosperity Public License 3.0 (the "License").
# A copy of the license is available at https://prosperitylicense.com/versions/3.0.0
# For details, see the LICENSE file.
# Commercial use beyond a 30-day trial requires a separate license.
#
# Source Code: https://github.com/CoReason-AI/adfs_signed_assertion

"""
Host-side plugin contracts: credential descriptors, named HTTP clients and the provider registry.
"""

from collections.abc import Iterator
from enum import StrEnum
from typing import Any, Protocol, runtime_checkable

import httpx
from opentelemetry.instrumentation.httpx import HTTPXClientInstrumentor
from pydantic import BaseModel, ConfigDict, Field

from adfs_signed_assertion.exceptions import ConfigurationError
from adfs_signed_assertion.utils.logger import logger


class CredentialSource(StrEnum):
    CERTIFICATE = "Certificate"
    CLIENT_SECRET = "ClientSecret"
    SIGNED_ASSERTION_FROM_MANAGED_IDENTITY = "SignedAssertionFromManagedIdentity"
    SIGNED_ASSERTION_FILE_PATH = "SignedAssertionFilePath"
    CUSTOM_SIGNED_ASSERTION = "CustomSignedAssertion"


class CredentialDescription(BaseModel):
    """
    Describes one credential the host may use, and carries per-session state for its provider.

    Unlike the other models this one is mutable: providers write `cached_value` and `skip`.

    Attributes:
        source (CredentialSource): Which strategy supplies the credential.
        provider_name (str | None): Name of the custom signed assertion provider to use.
        provider_data (dict[str, Any]): Provider-specific configuration surfaced by the host.
        cached_value (Any): Provider-owned slot for a reusable instance.
        skip (bool): Set when the provider failed and must not be tried again this session.
    """

    model_config = ConfigDict(arbitrary_types_allowed=True)

    source: CredentialSource = CredentialSource.CUSTOM_SIGNED_ASSERTION
    provider_name: str | None = None
    provider_data: dict[str, Any] = Field(default_factory=dict)
    cached_value: Any = None
    skip: bool = False

    def __repr__(self) -> str:
        # provider_data may hold a client secret
        return (
            f"CredentialDescription(source={self.source!r}, provider_name={self.provider_name!r}, "
            f"provider_data=<REDACTED>, cached={self.cached_value is not None}, skip={self.skip})"
        )

    def __str__(self) -> str:
        return self.__repr__()


@runtime_checkable
class CustomSignedAssertionProvider(Protocol):
    """Plugin contract for suppliers of custom signed assertions."""

    @property
    def name(self) -> str: ...

    @property
    def credential_source(self) -> CredentialSource: ...

    async def load(self, descriptor: CredentialDescription) -> None:
        """
        Prepares the provider for `descriptor`. Raises on failure after marking the descriptor skip.
        """
        ...


class HttpClientFactory(Protocol):
    """Looks up a configured HTTP client by its contract name."""

    def create_client(self, name: str) -> httpx.AsyncClient: ...


class NamedHttpClientRegistry:
    """
    Holds the host's named HTTP clients.

    Clients are registered fully configured (auth, timeouts, TLS) and are instrumented
    for distributed tracing on registration.
    """

    def __init__(self) -> None:
        self._clients: dict[str, httpx.AsyncClient] = {}

    def register(self, name: str, client: httpx.AsyncClient) -> None:
        """
        Registers `client` under `name`, replacing any previous registration.

        Args:
            name: The contract name consumers look the client up by. Matched exactly.
            client: The configured client.
        """
        HTTPXClientInstrumentor().instrument_client(client)
        self._clients[name] = client
        logger.debug(f"Registered HTTP client '{name}'")

    def create_client(self, name: str) -> httpx.AsyncClient:
        """
        Returns the client registered under `name`.

        Raises:
            ConfigurationError: If no client is registered under exactly that name.
        """
        try:
            return self._clients[name]
        except KeyError:
            raise ConfigurationError(f"No HTTP client registered under the name '{name}'") from None

    async def aclose(self) -> None:
        for client in self._clients.values():
            await client.aclose()
        self._clients.clear()


class SignedAssertionProviderRegistry:
    """Registered custom signed assertion providers, keyed by provider name."""

    def __init__(self) -> None:
        self._providers: dict[str, CustomSignedAssertionProvider] = {}

    def try_add(self, provider: CustomSignedAssertionProvider) -> bool:
        """
        Registers `provider` unless a provider with the same name already exists.

        Returns:
            bool: True if the provider was added.
        """
        if provider.name in self._providers:
            logger.debug(f"Provider '{provider.name}' already registered, keeping existing registration")
            return False
        self._providers[provider.name] = provider
        return True

    def get(self, name: str) -> CustomSignedAssertionProvider | None:
        return self._providers.get(name)

    def __contains__(self, name: object) -> bool:
        return name in self._providers

    def __iter__(self) -> Iterator[CustomSignedAssertionProvider]:
        return iter(self._providers.values())

    def __len__(self) -> int:
        return len(self._providers)
