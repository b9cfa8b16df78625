"""Tests for the search provider layer."""

from __future__ import annotations

import asyncio

import httpx
import pytest
from pydantic import SecretStr

from typeahead.config import PipelineSettings, ProviderSettings
from typeahead.domain.models import FailedState
from typeahead.pipeline import SearchSession
from typeahead.services.exceptions import ProviderError
from typeahead.services.search import (
    FRUITS,
    HttpSearchService,
    MockSearchService,
    build_provider,
)


def _http_settings(**overrides) -> ProviderSettings:
    values = {
        "kind": "http",
        "base_url": "https://search.example",
        "retry_base_delay": 0,
        "max_attempts": 2,
    }
    values.update(overrides)
    return ProviderSettings(**values)


@pytest.mark.asyncio
async def test_mock_search_returns_everything_for_empty_query():
    service = MockSearchService(latency_seconds=0)
    assert list(await service.search("")) == list(FRUITS)


@pytest.mark.asyncio
async def test_mock_search_filters_case_insensitively_in_order():
    service = MockSearchService(latency_seconds=0)
    assert await service.search("AP") == ["apple", "apricot", "grape", "pineapple"]
    assert await service.search("zzz") == []


@pytest.mark.asyncio
async def test_http_search_success():
    async def handler(request: httpx.Request) -> httpx.Response:
        assert request.url.path == "/search"
        assert request.url.params["q"] == "ber"
        assert request.headers["Authorization"] == "Bearer token"
        return httpx.Response(200, json={"results": ["blueberry", "strawberry"]})

    transport = httpx.MockTransport(handler)
    async with httpx.AsyncClient(transport=transport) as client:
        service = HttpSearchService(client, settings=_http_settings(api_key=SecretStr("token")))
        results = await service.search("ber")

    assert results == ["blueberry", "strawberry"]


@pytest.mark.asyncio
async def test_http_search_accepts_plain_list_and_empty_query():
    async def handler(request: httpx.Request) -> httpx.Response:
        assert request.url.params["q"] == ""
        assert "Authorization" not in request.headers
        return httpx.Response(200, json=["kiwi"])

    transport = httpx.MockTransport(handler)
    async with httpx.AsyncClient(transport=transport) as client:
        service = HttpSearchService(client, settings=_http_settings())
        assert await service.search("") == ["kiwi"]


@pytest.mark.asyncio
async def test_http_search_retries_then_raises():
    attempts: list[int] = []

    async def handler(request: httpx.Request) -> httpx.Response:
        attempts.append(1)
        return httpx.Response(503, text="unavailable")

    transport = httpx.MockTransport(handler)
    async with httpx.AsyncClient(transport=transport) as client:
        service = HttpSearchService(client, settings=_http_settings())
        with pytest.raises(ProviderError) as excinfo:
            await service.search("apple")

    assert len(attempts) == 2
    assert "503" in str(excinfo.value)


@pytest.mark.asyncio
async def test_http_search_recovers_after_transient_error():
    responses = iter([httpx.Response(500), httpx.Response(200, json=["lemon"])])

    async def handler(request: httpx.Request) -> httpx.Response:
        return next(responses)

    transport = httpx.MockTransport(handler)
    async with httpx.AsyncClient(transport=transport) as client:
        service = HttpSearchService(client, settings=_http_settings())
        assert await service.search("lem") == ["lemon"]


@pytest.mark.asyncio
async def test_http_search_rejects_malformed_payload():
    async def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(200, json={"items": "nope"})

    transport = httpx.MockTransport(handler)
    async with httpx.AsyncClient(transport=transport) as client:
        service = HttpSearchService(client, settings=_http_settings())
        with pytest.raises(ProviderError):
            await service.search("x")


@pytest.mark.asyncio
async def test_http_search_requires_base_url():
    async with httpx.AsyncClient() as client:
        service = HttpSearchService(client)
        with pytest.raises(ProviderError):
            await service.search("x")


@pytest.mark.asyncio
async def test_http_failure_reaches_observers_as_failed_state():
    async def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(502, text="bad gateway")

    settings = PipelineSettings(debounce_ms=0, provider=_http_settings(max_attempts=1))
    transport = httpx.MockTransport(handler)
    async with httpx.AsyncClient(transport=transport) as client:
        async with SearchSession(build_provider(settings, client), settings=settings) as session:
            session.push("peach")
            await asyncio.sleep(0.1)
            state = session.results.value

    assert isinstance(state, FailedState)
    assert state.error.type == "ProviderError"


def test_build_provider_defaults_to_mock():
    provider = build_provider(PipelineSettings(provider={"mock_latency_ms": 0}))
    assert isinstance(provider, MockSearchService)


def test_build_provider_http_needs_client():
    settings = PipelineSettings(provider=_http_settings())
    with pytest.raises(ProviderError):
        build_provider(settings)
