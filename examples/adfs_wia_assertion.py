# Copyright (c) 2025 CoReason, Inc.
#
# This software is proprietary and dual-licensed.
# Licensed under the Prosperity Public License 3.0 (the "License").
# A copy of the license is available at https://prosperitylicense.com/versions/3.0.0
# For details, see the LICENSE file.
# Commercial use beyond a 30-day trial requires a separate license.
#
# Source Code: https://github.com/CoReason-AI/adfs_signed_assertion

import asyncio
import os

import httpx

from adfs_signed_assertion import (
    ADFS_HTTP_CLIENT_NAME,
    ADFS_PROVIDER_NAME,
    CredentialDescription,
    NamedHttpClientRegistry,
    SignedAssertionProviderRegistry,
    add_adfs_signed_assertion_provider,
    configure_logging,
)


async def main() -> None:
    """
    Registers the AD FS provider the way a host would and prints the assertion expiry.

    For WIA, register a client whose auth performs Negotiate/NTLM with the current Windows identity.
    This example uses ClientSecret when ADFS_CLIENT_SECRET is set so it also runs off-domain.
    """
    configure_logging()

    clients = NamedHttpClientRegistry()
    clients.register(ADFS_HTTP_CLIENT_NAME, httpx.AsyncClient(timeout=10.0))

    providers = add_adfs_signed_assertion_provider(SignedAssertionProviderRegistry(), clients)
    provider = providers.get(ADFS_PROVIDER_NAME)
    assert provider is not None

    data = {
        "Host": os.environ["ADFS_HOST"],
        "ClientId": os.environ["ADFS_CLIENT_ID"],
        "Resource": os.environ["ADFS_RESOURCE"],
    }
    if secret := os.environ.get("ADFS_CLIENT_SECRET"):
        data["AuthType"] = "ClientSecret"
        data["ClientSecret"] = secret

    descriptor = CredentialDescription(provider_name=ADFS_PROVIDER_NAME, provider_data=data)
    try:
        await provider.load(descriptor)
        assertion = await descriptor.cached_value.get_assertion()
        print(f"Assertion acquired, expires {assertion.expires_on.isoformat()}")
    finally:
        await clients.aclose()


if __name__ == "__main__":
    asyncio.run(main())
