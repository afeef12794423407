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
AdfsAssertionFetcher component for obtaining client assertions from AD FS.
"""

import json
from collections.abc import Mapping
from datetime import UTC, datetime, timedelta
from typing import Any

import httpx
from opentelemetry import trace
from opentelemetry.trace import Status, StatusCode
from pydantic import ValidationError

from adfs_signed_assertion.claims import decode_jwt_claims
from adfs_signed_assertion.config import AdfsProviderConfig
from adfs_signed_assertion.exceptions import TokenRequestError
from adfs_signed_assertion.models import AdfsAuthType, ClientAssertion, TokenResponse
from adfs_signed_assertion.utils.logger import logger

tracer = trace.get_tracer(__name__)

DEFAULT_ASSERTION_LIFETIME = timedelta(minutes=60)
MAX_LOGGED_BODY = 512


class AdfsAssertionFetcher:
    """
    Requests an access token from AD FS with the client credentials grant and wraps it as a client assertion.

    With WIA the Kerberos/NTLM negotiation is done by the supplied HTTP client's auth/transport,
    which must be configured for the ambient Windows identity.

    Attributes:
        config (AdfsProviderConfig): The federation target.
        client (httpx.AsyncClient): The client used for the token request. Timeouts are its concern.
    """

    def __init__(self, config: AdfsProviderConfig, client: httpx.AsyncClient) -> None:
        self.config = config
        self.client = client

        logger.debug(
            f"AD FS provider initialized. Endpoint={config.token_endpoint}, ClientId={config.client_id}, "
            f"Resource={config.resource}, AuthType={config.auth_type}"
        )

    @classmethod
    def from_provider_data(cls, data: Mapping[str, Any], client: httpx.AsyncClient) -> "AdfsAssertionFetcher":
        """
        Builds a fetcher from host-surfaced provider configuration.

        Raises:
            ConfigurationError: If a required value is missing.
        """
        return cls(AdfsProviderConfig.from_provider_data(data), client)

    def _request_body(self) -> dict[str, str]:
        body = {
            "client_id": self.config.client_id,
            "resource": self.config.resource,
            "grant_type": "client_credentials",
            "scope": "openid",
        }
        if self.config.auth_type == AdfsAuthType.CLIENT_SECRET and self.config.client_secret is not None:
            body["client_secret"] = self.config.client_secret.get_secret_value()
        else:
            body["use_windows_client_authentication"] = "true"
        return body

    async def get_assertion(self) -> ClientAssertion:
        """
        Fetches a fresh AD FS token and returns it with its expiry.

        Expiry comes from the token's `exp` claim, else `expires_in`, else one hour from now.
        Cancellation of the calling task aborts the request and propagates unchanged.

        Returns:
            ClientAssertion: The token and its UTC expiry.

        Raises:
            TokenRequestError: If the request fails, AD FS answers with a non-2xx status,
                or the response carries no usable access token.
        """
        url = self.config.token_endpoint

        with tracer.start_as_current_span("adfs.get_assertion") as span:
            span.set_attribute("adfs.token_endpoint", url)
            span.set_attribute("adfs.auth_type", str(self.config.auth_type))

            try:
                assertion = await self._fetch(url, span)
            except TokenRequestError as e:
                span.record_exception(e)
                span.set_status(Status(StatusCode.ERROR, str(e)))
                raise

            span.set_status(Status(StatusCode.OK))
            return assertion

    async def _fetch(self, url: str, span: trace.Span) -> ClientAssertion:
        logger.info(
            f"Requesting AD FS token ({self.config.auth_type}) from {url} for resource {self.config.resource}"
        )

        try:
            response = await self.client.post(url, data=self._request_body(), headers={"Accept": "application/json"})
        except httpx.HTTPError as e:
            logger.error(f"AD FS token request to {url} failed: {e}")
            raise TokenRequestError(f"AD FS token request to {url} failed: {e}") from e

        raw = response.text
        span.set_attribute("http.status_code", response.status_code)

        if not response.is_success:
            logger.error(f"AD FS token request failed: {response.status_code}. Body: {raw[:MAX_LOGGED_BODY]}")
            raise TokenRequestError(
                f"AD FS token request failed: {response.status_code} {response.reason_phrase}",
                status_code=response.status_code,
                body=raw,
            )

        token = self._parse(raw, response.status_code)

        if token.token_type and token.token_type.lower() != "bearer":
            logger.warning(f"Unexpected token_type from AD FS: {token.token_type}")

        access_token = token.access_token
        if not access_token or not access_token.strip():
            raise TokenRequestError("AD FS returned empty access_token.", status_code=response.status_code, body=raw)

        claims = decode_jwt_claims(access_token)
        now = datetime.now(UTC)
        expiry = claims.expires_on if claims else None
        if expiry is None and token.expires_in is not None:
            expiry = now + timedelta(seconds=token.expires_in)
        if expiry is None:
            expiry = now + DEFAULT_ASSERTION_LIFETIME

        if claims is None:
            logger.debug("AD FS access token payload is not a decodable JWT; diagnostics unavailable.")
        elif claims.aud and claims.aud != self.config.resource:
            logger.warning(
                f"AD FS token 'aud' does not match configured resource. aud={claims.aud}, resource={self.config.resource}"
            )

        iss = claims.iss if claims and claims.iss else "?"
        sub = claims.sub if claims and claims.sub else "?"
        aud = claims.aud if claims and claims.aud else "?"
        logger.info(f"AD FS assertion acquired. iss={iss}, sub={sub}, aud={aud}, exp={expiry.isoformat()}")

        return ClientAssertion(assertion=access_token, expires_on=expiry)

    @staticmethod
    def _parse(raw: str, status_code: int) -> TokenResponse:
        try:
            data = json.loads(raw)
        except ValueError as e:
            raise TokenRequestError(
                f"Malformed token response from AD FS: {e}", status_code=status_code, body=raw
            ) from e

        if not isinstance(data, dict):
            raise TokenRequestError(
                "Malformed token response from AD FS: expected a JSON object.", status_code=status_code, body=raw
            )

        try:
            return TokenResponse.model_validate(data)
        except ValidationError as e:
            raise TokenRequestError(
                f"Malformed token response from AD FS: {e}", status_code=status_code, body=raw
            ) from e
