"""Shared pytest fixtures for pipeline tests."""

from __future__ import annotations

import asyncio
from typing import Sequence

import pytest
import pytest_asyncio

from typeahead.config import PipelineSettings
from typeahead.pipeline import PipelineState, QueryChannel, SearchPipeline


class FakeProvider:
    """Provider whose latency, results and failures are set per query."""

    def __init__(self, default_delay: float = 0.0) -> None:
        self.default_delay = default_delay
        self.responses: dict[str, Sequence[str]] = {}
        self.delays: dict[str, float] = {}
        self.failures: dict[str, Exception] = {}
        self.calls: list[str] = []
        self.completed: list[str] = []

    async def search(self, query: str) -> Sequence[str]:
        self.calls.append(query)
        delay = self.delays.get(query, self.default_delay)
        if delay:
            await asyncio.sleep(delay)
        if query in self.failures:
            raise self.failures[query]
        self.completed.append(query)
        return self.responses.get(query, [f"{query}-result"])


@pytest.fixture
def settings() -> PipelineSettings:
    return PipelineSettings(debounce_ms=300, provider={"mock_latency_ms": 0})


@pytest.fixture
def provider() -> FakeProvider:
    return FakeProvider()


@pytest_asyncio.fixture
async def make_pipeline(settings):
    created: list[tuple[QueryChannel, SearchPipeline]] = []

    def _make(provider, **kwargs) -> tuple[QueryChannel, SearchPipeline]:
        channel = QueryChannel()
        pipeline = SearchPipeline(channel, provider, settings=settings, **kwargs)
        created.append((channel, pipeline))
        return channel, pipeline

    yield _make

    for channel, pipeline in created:
        if pipeline.state is not PipelineState.DISPOSED:
            pipeline.dispose()
        channel.close()
