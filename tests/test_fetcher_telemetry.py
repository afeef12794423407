# Copyright (c) 2025 CoReason, Inc.
#
# This software is proprietary and dual-licensed.
# Licensed under the Prosperity Public License 3.0 (the "License").
# A copy of the license is available at https://prosperitylicense.com/versions/3.0.0
# For details, see the LICENSE file.
# Commercial use beyond a 30-day trial requires a separate license.
#
# Source Code: https://github.com/CoReason-AI/adfs_signed_assertion

from collections.abc import Callable, Generator
from typing import Any
from unittest.mock import patch

import httpx
import pytest
from opentelemetry.sdk.trace import TracerProvider
from opentelemetry.sdk.trace.export import SimpleSpanProcessor
from opentelemetry.sdk.trace.export.in_memory_span_exporter import InMemorySpanExporter
from opentelemetry.trace import StatusCode

from adfs_signed_assertion.exceptions import TokenRequestError
from adfs_signed_assertion.fetcher import AdfsAssertionFetcher


@pytest.fixture
def exporter() -> Generator[InMemorySpanExporter, None, None]:
    """Routes the fetcher's spans to an in-memory exporter."""
    exporter = InMemorySpanExporter()
    provider = TracerProvider()
    provider.add_span_processor(SimpleSpanProcessor(exporter))
    with patch("adfs_signed_assertion.fetcher.tracer", provider.get_tracer("test_tracer")):
        yield exporter


@pytest.mark.asyncio
async def test_success_span(
    exporter: InMemorySpanExporter,
    wia_data: dict[str, Any],
    mock_client_factory: Callable[..., httpx.AsyncClient],
) -> None:
    client = mock_client_factory(json_data={"access_token": "not-a-jwt"})
    await AdfsAssertionFetcher.from_provider_data(wia_data, client).get_assertion()

    spans = exporter.get_finished_spans()
    assert len(spans) == 1
    span = spans[0]
    assert span.name == "adfs.get_assertion"
    assert span.status.status_code == StatusCode.OK
    assert span.attributes is not None
    assert span.attributes["adfs.token_endpoint"] == "https://adfs.example.com/adfs/oauth2/token/"
    assert span.attributes["adfs.auth_type"] == "WIA"
    assert span.attributes["http.status_code"] == 200


@pytest.mark.asyncio
async def test_failure_span_records_exception(
    exporter: InMemorySpanExporter,
    secret_data: dict[str, Any],
    mock_client_factory: Callable[..., httpx.AsyncClient],
) -> None:
    client = mock_client_factory(status_code=401, json_data={"error": "invalid_client"})
    with pytest.raises(TokenRequestError):
        await AdfsAssertionFetcher.from_provider_data(secret_data, client).get_assertion()

    span = exporter.get_finished_spans()[0]
    assert span.status.status_code == StatusCode.ERROR
    assert any(event.name == "exception" for event in span.events)
    assert span.attributes is not None
    assert span.attributes["http.status_code"] == 401
    assert all(secret_data["ClientSecret"] not in str(v) for v in span.attributes.values())
