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
AD FS client assertions for federated identity credential token exchange.
"""

__version__ = "0.1.0"
__author__ = "Gowtham A Rao"
__email__ = "gowtham.rao@coreason.ai"

from .config import AdfsProviderConfig
from .exceptions import (
    AdfsAssertionError,
    ConfigurationError,
    ProviderSkippedError,
    TokenRequestError,
)
from .fetcher import AdfsAssertionFetcher
from .host import (
    CredentialDescription,
    CredentialSource,
    CustomSignedAssertionProvider,
    NamedHttpClientRegistry,
    SignedAssertionProviderRegistry,
)
from .models import AdfsAuthType, ClientAssertion
from .provider import (
    ADFS_HTTP_CLIENT_NAME,
    ADFS_PROVIDER_NAME,
    AdfsSignedAssertionProvider,
    add_adfs_signed_assertion_provider,
)
from .utils.logger import configure_logging

__all__ = [
    "ADFS_HTTP_CLIENT_NAME",
    "ADFS_PROVIDER_NAME",
    "AdfsAssertionError",
    "AdfsAssertionFetcher",
    "AdfsAuthType",
    "AdfsProviderConfig",
    "AdfsSignedAssertionProvider",
    "ClientAssertion",
    "ConfigurationError",
    "CredentialDescription",
    "CredentialSource",
    "CustomSignedAssertionProvider",
    "NamedHttpClientRegistry",
    "ProviderSkippedError",
    "SignedAssertionProviderRegistry",
    "TokenRequestError",
    "add_adfs_signed_assertion_provider",
    "configure_logging",
]
