"""Console entrypoint: type queries line by line and watch results update."""

from __future__ import annotations

import asyncio
import sys
from typing import TextIO

import httpx

from typeahead.config import PipelineSettings, get_settings
from typeahead.domain.models import EmptyState, FailedState, ResultState
from typeahead.logging import configure_logging, logger
from typeahead.pipeline import SearchSession
from typeahead.services.search import build_provider
from typeahead.streams import Subscription

SETTLE_MARGIN_SECONDS = 0.1


def render_state(state: ResultState) -> str:
    if isinstance(state, FailedState):
        return f"Error: {state.error.type}: {state.error.message}"
    if isinstance(state, EmptyState):
        return "(waiting for results)"
    if not state.items:
        return f"[{state.query!r}] No results found."
    return f"[{state.query!r}] " + ", ".join(state.items)


async def render_results(subscription: Subscription[ResultState], out: TextIO) -> None:
    async for state in subscription:
        print(render_state(state), file=out, flush=True)


async def read_queries(session: SearchSession, source: TextIO) -> None:
    while True:
        line = await asyncio.to_thread(source.readline)
        if not line:
            return
        session.push(line.rstrip("\r\n"))


async def run(
    settings: PipelineSettings,
    *,
    source: TextIO = sys.stdin,
    out: TextIO = sys.stdout,
) -> None:
    async with httpx.AsyncClient() as client:
        provider = build_provider(settings, http_client=client)
        session = SearchSession(provider, settings=settings)
        renderer = asyncio.create_task(render_results(session.subscribe(), out))
        try:
            # Load the full catalogue on start, as an empty field would.
            session.push("")
            await read_queries(session, source)
            # Let the last keystrokes settle before tearing down.
            await asyncio.sleep(_settle_seconds(settings))
        finally:
            session.close()
            await renderer


def _settle_seconds(settings: PipelineSettings) -> float:
    provider = settings.provider
    if provider.kind == "http":
        # Every attempt may time out, with linear backoff between attempts.
        attempts = provider.max_attempts
        backoff = provider.retry_base_delay * attempts * (attempts - 1) / 2
        lookup = attempts * provider.request_timeout_seconds + backoff
    else:
        lookup = provider.mock_latency_ms / 1000
    return settings.debounce_seconds + lookup + SETTLE_MARGIN_SECONDS


async def main() -> None:
    settings = get_settings()
    configure_logging(settings.log_level)
    logger.info(
        "typeahead_starting",
        environment=settings.environment,
        provider=settings.provider.kind,
        debounce_ms=settings.debounce_ms,
    )
    await run(settings)


if __name__ == "__main__":
    asyncio.run(main())
