# Copyright (c) 2025 CoReason, Inc.
#
# This software is proprietary and dual-licensed.
# Licensed under the Prosperity Public License 3.0 (the "License").
# A copy of the license is available at https://prosperitylicense.com/versions/3.0.0
# For details, see the LICENSE file.
# Commercial use beyond a 30-day trial requires a separate license.
#
# Source Code: https://github.com/CoReason-AI/adfs_signed_assertion

import base64
import json
from collections.abc import Callable, Generator
from typing import Any
from urllib.parse import parse_qs

import httpx
import pytest
from loguru import logger

TOKEN_URL = "https://adfs.example.com/adfs/oauth2/token/"
RESOURCE = "api://contoso-fic"


def _segment(obj: dict[str, Any]) -> str:
    return base64.urlsafe_b64encode(json.dumps(obj).encode("utf-8")).rstrip(b"=").decode("ascii")


def make_jwt(claims: dict[str, Any]) -> str:
    """Builds an unsigned-looking three-part JWT with the given payload."""
    return f"{_segment({'alg': 'RS256', 'typ': 'JWT'})}.{_segment(claims)}.c2lnbmF0dXJl"


def form_body(request: httpx.Request) -> dict[str, str]:
    """Parses a form-encoded request body into a flat dict."""
    return {k: v[0] for k, v in parse_qs(request.content.decode("utf-8")).items()}


@pytest.fixture
def wia_data() -> dict[str, Any]:
    return {
        "Host": "https://adfs.example.com/",
        "ClientId": "11111111-2222-3333-4444-555555555555",
        "Resource": RESOURCE,
    }


@pytest.fixture
def secret_data(wia_data: dict[str, Any]) -> dict[str, Any]:
    return {**wia_data, "AuthType": "ClientSecret", "ClientSecret": "s3cr3t-value"}


@pytest.fixture
def requests_seen() -> list[httpx.Request]:
    return []


@pytest.fixture
def mock_client_factory(
    requests_seen: list[httpx.Request],
) -> Callable[..., httpx.AsyncClient]:
    """
    Returns a factory for AsyncClients whose transport answers every request with the given response.
    Every request is recorded in `requests_seen`.
    """

    def factory(status_code: int = 200, json_data: Any = None, content: bytes | None = None) -> httpx.AsyncClient:
        def handler(request: httpx.Request) -> httpx.Response:
            requests_seen.append(request)
            if json_data is not None:
                return httpx.Response(status_code, json=json_data)
            return httpx.Response(status_code, content=content or b"")

        return httpx.AsyncClient(transport=httpx.MockTransport(handler))

    return factory


@pytest.fixture
def log_messages() -> Generator[list[str], None, None]:
    """Captures Loguru messages emitted during the test."""
    messages: list[str] = []
    handler_id = logger.add(lambda m: messages.append(m.record["message"]), level="DEBUG")
    yield messages
    logger.remove(handler_id)


@pytest.fixture
def jwt_factory() -> Callable[[dict[str, Any]], str]:
    return make_jwt


@pytest.fixture
def parse_form() -> Callable[[httpx.Request], dict[str, str]]:
    return form_body
