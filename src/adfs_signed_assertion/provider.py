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
AdfsSignedAssertionProvider: the host plugin that supplies AD FS tokens as custom signed assertions.
"""

import anyio

from adfs_signed_assertion.exceptions import ProviderSkippedError
from adfs_signed_assertion.fetcher import AdfsAssertionFetcher
from adfs_signed_assertion.host import (
    CredentialDescription,
    CredentialSource,
    HttpClientFactory,
    NamedHttpClientRegistry,
    SignedAssertionProviderRegistry,
)
from adfs_signed_assertion.models import ClientAssertion
from adfs_signed_assertion.utils.logger import logger

# Contract names shared with the host's registrations
ADFS_HTTP_CLIENT_NAME = "AdfsWia"
ADFS_PROVIDER_NAME = "AdfsSignedAssertion"


class AdfsSignedAssertionProvider:
    """
    Loads an `AdfsAssertionFetcher` for a credential descriptor and hands out its assertions.

    The fetcher is built lazily on first `load`, validated with one warm-up fetch and cached
    on the descriptor. First use is serialized so concurrent callers share one warm-up.
    """

    def __init__(self, clients: HttpClientFactory) -> None:
        """
        Args:
            clients: The host's named HTTP client lookup. The client registered as
                `ADFS_HTTP_CLIENT_NAME` is used for all token requests.

        Raises:
            ConfigurationError: If no client is registered under `ADFS_HTTP_CLIENT_NAME`.
        """
        self._client = clients.create_client(ADFS_HTTP_CLIENT_NAME)
        self._lock: anyio.Lock | None = None

    @property
    def name(self) -> str:
        return ADFS_PROVIDER_NAME

    @property
    def credential_source(self) -> CredentialSource:
        return CredentialSource.CUSTOM_SIGNED_ASSERTION

    async def load(self, descriptor: CredentialDescription) -> None:
        """
        Ensures `descriptor` carries a working fetcher.

        On failure the descriptor is marked skip and the error is re-raised unchanged.
        Cancellation is propagated without marking the descriptor.

        Args:
            descriptor: The host-owned credential descriptor.

        Raises:
            ProviderSkippedError: If the descriptor was already marked skip.
            ConfigurationError: If the provider configuration is invalid.
            TokenRequestError: If the warm-up fetch fails.
        """
        await self._acquire_fetcher(descriptor)

    async def get_assertion(self, descriptor: CredentialDescription) -> ClientAssertion:
        """
        Loads the provider if needed and fetches a fresh assertion for the host's token exchange.
        """
        fetcher = await self._acquire_fetcher(descriptor)
        return await fetcher.get_assertion()

    async def _acquire_fetcher(self, descriptor: CredentialDescription) -> AdfsAssertionFetcher:
        if descriptor.skip:
            raise ProviderSkippedError(f"Provider '{self.name}' is disabled for this session after a failed load.")

        if isinstance(descriptor.cached_value, AdfsAssertionFetcher):
            return descriptor.cached_value

        if self._lock is None:
            self._lock = anyio.Lock()

        async with self._lock:
            # Another task may have finished loading while we waited
            if descriptor.skip:
                raise ProviderSkippedError(
                    f"Provider '{self.name}' is disabled for this session after a failed load."
                )
            if isinstance(descriptor.cached_value, AdfsAssertionFetcher):
                return descriptor.cached_value

            try:
                fetcher = AdfsAssertionFetcher.from_provider_data(descriptor.provider_data, self._client)
                # Warm up once to validate configuration and connectivity
                await fetcher.get_assertion()
            except Exception:
                logger.exception("Failed to load AD FS signed assertion provider.")
                descriptor.skip = True
                raise

            descriptor.cached_value = fetcher
            return fetcher


def add_adfs_signed_assertion_provider(
    providers: SignedAssertionProviderRegistry, clients: NamedHttpClientRegistry
) -> SignedAssertionProviderRegistry:
    """
    Registers the AD FS provider unless a provider with the same name is already registered.

    The host must register its WIA-capable client as `ADFS_HTTP_CLIENT_NAME` first.

    Returns:
        SignedAssertionProviderRegistry: `providers`, for chaining.
    """
    if ADFS_PROVIDER_NAME not in providers:
        providers.try_add(AdfsSignedAssertionProvider(clients))
    return providers
