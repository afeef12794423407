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
Data models for the adfs-signed-assertion package.
"""

from datetime import UTC, datetime
from enum import StrEnum
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, field_validator


class AdfsAuthType(StrEnum):
    WIA = "WIA"
    CLIENT_SECRET = "ClientSecret"


class ClientAssertion(BaseModel):
    """
    A bearer token issued by AD FS, presented as a client assertion to the cloud identity provider.

    This model is frozen (immutable). The token itself is redacted from `repr`.

    Attributes:
        assertion (str): The raw access token.
        expires_on (datetime): The UTC instant after which the assertion must not be used.
    """

    model_config = ConfigDict(frozen=True, extra="forbid")

    assertion: str = Field(..., min_length=1, description="The raw AD FS access token.")
    expires_on: datetime = Field(..., description="Expiry of the assertion (UTC).")

    @field_validator("assertion")
    @classmethod
    def reject_blank(cls, v: str) -> str:
        if not v.strip():
            raise ValueError("assertion must not be blank")
        return v

    @field_validator("expires_on")
    @classmethod
    def ensure_utc(cls, v: datetime) -> datetime:
        """
        Naive datetimes are interpreted as UTC; aware ones are converted to UTC.
        """
        if v.tzinfo is None:
            return v.replace(tzinfo=UTC)
        return v.astimezone(UTC)

    def __repr__(self) -> str:
        return f"ClientAssertion(assertion='<REDACTED>', expires_on={self.expires_on!r})"

    def __str__(self) -> str:
        return self.__repr__()


def _int_or_none(v: Any) -> int | None:
    # bool is an int subclass but never a valid lifetime
    if isinstance(v, int) and not isinstance(v, bool):
        return v
    return None


def _str_or_none(v: Any) -> str | None:
    return v if isinstance(v, str) else None


class TokenResponse(BaseModel):
    """
    Token endpoint response from AD FS.

    Attributes:
        access_token (str | None): The issued token. Validated by the caller.
        expires_in (int | None): Lifetime in seconds, kept only when it is a JSON integer.
        token_type (str | None): The token type (normally "bearer").
    """

    model_config = ConfigDict(frozen=True, extra="ignore")

    access_token: str | None = None
    expires_in: int | None = None
    token_type: str | None = None

    @field_validator("expires_in", mode="before")
    @classmethod
    def lenient_expires_in(cls, v: Any) -> int | None:
        return _int_or_none(v)

    @field_validator("token_type", mode="before")
    @classmethod
    def lenient_token_type(cls, v: Any) -> str | None:
        """
        token_type is diagnostic only; a non-string value is kept in text form so it can be reported.
        """
        if v is None or isinstance(v, str):
            return v
        return str(v)


class JwtClaims(BaseModel):
    """
    Unverified claims read from a JWT payload, used for diagnostics and expiry only.

    Each claim degrades to None on its own when it has an unexpected type.
    """

    model_config = ConfigDict(frozen=True, extra="ignore")

    exp: int | None = None
    iss: str | None = None
    aud: str | None = None
    sub: str | None = None

    @field_validator("exp", mode="before")
    @classmethod
    def lenient_exp(cls, v: Any) -> int | None:
        return _int_or_none(v)

    @field_validator("iss", "aud", "sub", mode="before")
    @classmethod
    def lenient_str(cls, v: Any) -> str | None:
        return _str_or_none(v)

    @property
    def expires_on(self) -> datetime | None:
        """The `exp` claim as a UTC datetime, or None if absent or out of range."""
        if self.exp is None:
            return None
        try:
            return datetime.fromtimestamp(self.exp, tz=UTC)
        except (OverflowError, OSError, ValueError):
            return None
