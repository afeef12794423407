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
Custom exceptions for the adfs-signed-assertion package.
"""


class AdfsAssertionError(Exception):
    """Base exception for all adfs-signed-assertion errors."""


class ConfigurationError(AdfsAssertionError):
    """
    Raised when the provider configuration is missing a required value.
    The message names the offending host configuration key (e.g. `ClientId`).
    """


class TokenRequestError(AdfsAssertionError):
    """
    Raised when AD FS rejects the token request or returns an unusable token.

    Attributes:
        status_code (int | None): The HTTP status code, or None if no response was received.
        body (str | None): The full response body, if any.
    """

    def __init__(self, message: str, status_code: int | None = None, body: str | None = None) -> None:
        super().__init__(message)
        self.status_code = status_code
        self.body = body


class ProviderSkippedError(AdfsAssertionError):
    """Raised when a provider that already failed to load is asked to load again."""
