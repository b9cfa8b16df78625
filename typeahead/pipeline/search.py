"""Debounced, de-duplicated, switch-latest search over a query channel."""

from __future__ import annotations

import asyncio
from enum import Enum
from typing import Any

from typeahead.config import PipelineSettings, get_settings
from typeahead.domain.models import EmptyState, ErrorInfo, FailedState, ReadyState, ResultState
from typeahead.logging import logger
from typeahead.pipeline.channel import QueryChannel
from typeahead.services.exceptions import LookupFailure, PipelineDisposed
from typeahead.services.search import SearchProvider
from typeahead.streams import ReplayLatest, Subscription

_UNSET: Any = object()


class PipelineState(str, Enum):
    CREATED = "created"
    ACTIVE = "active"
    DISPOSED = "disposed"


class SearchPipeline:
    """Turns raw keystrokes into at most one live provider lookup.

    Queries pass through a debounce timer, then an adjacent-duplicate filter,
    and finally start a lookup tagged with a generation number. Only the
    lookup holding the newest generation may write to ``results``; older
    ones are cancelled (when ``cancel_superseded`` is on) and their outcome
    is dropped either way.

    All callbacks run on the event loop that drives ``QueryChannel.push``.
    """

    def __init__(
        self,
        queries: QueryChannel,
        provider: SearchProvider,
        *,
        settings: PipelineSettings | None = None,
        debounce_seconds: float | None = None,
        cancel_superseded: bool | None = None,
    ) -> None:
        settings = settings or get_settings()
        self._provider = provider
        self._debounce_seconds = (
            settings.debounce_seconds if debounce_seconds is None else debounce_seconds
        )
        self._cancel_superseded = (
            settings.cancel_superseded if cancel_superseded is None else cancel_superseded
        )
        self._state = PipelineState.CREATED

        self._results: ReplayLatest[ResultState] = ReplayLatest(EmptyState())
        self._timer: asyncio.TimerHandle | None = None
        self._last_forwarded: str = _UNSET
        self._generation = 0
        self._tasks: set[asyncio.Task] = set()

        self.lookups_started = 0
        self.lookups_cancelled = 0
        self.lookups_discarded = 0

        self._unsubscribe = queries.listen(self._on_query, self._on_source_closed)
        self._state = PipelineState.ACTIVE

    @property
    def state(self) -> PipelineState:
        return self._state

    @property
    def results(self) -> ReplayLatest[ResultState]:
        return self._results

    @property
    def current(self) -> ResultState:
        return self._results.value

    def subscribe(self) -> Subscription[ResultState]:
        """Current state immediately, then every published state until dispose."""

        return self._results.subscribe()

    def dispose(self) -> None:
        if self._state is PipelineState.DISPOSED:
            raise PipelineDisposed("SearchPipeline.dispose() called twice.")
        self._state = PipelineState.DISPOSED

        if self._timer is not None:
            self._timer.cancel()
            self._timer = None
        self._unsubscribe()
        for task in tuple(self._tasks):
            task.cancel()
        self._results.close()
        logger.info(
            "pipeline_disposed",
            lookups_started=self.lookups_started,
            lookups_cancelled=self.lookups_cancelled,
            lookups_discarded=self.lookups_discarded,
        )

    # Stage 1: debounce
    def _on_query(self, query: str) -> None:
        if self._state is not PipelineState.ACTIVE:
            return
        loop = asyncio.get_running_loop()
        if self._timer is not None:
            self._timer.cancel()
        self._timer = loop.call_later(self._debounce_seconds, self._on_debounced, query)

    def _on_source_closed(self) -> None:
        # A pending debounce still fires; the output stays open until dispose.
        logger.debug("query_channel_closed", pending=self._timer is not None)

    # Stage 2: dedupe against the last forwarded query
    def _on_debounced(self, query: str) -> None:
        self._timer = None
        if self._state is not PipelineState.ACTIVE:
            return
        logger.debug("query_debounced", query=query)
        if self._last_forwarded is not _UNSET and query == self._last_forwarded:
            logger.debug("query_deduplicated", query=query)
            return
        self._last_forwarded = query
        self._start_lookup(query)

    # Stage 3: switch to the newest lookup
    def _start_lookup(self, query: str) -> None:
        self._generation += 1
        generation = self._generation
        if self._cancel_superseded:
            for task in tuple(self._tasks):
                task.cancel()

        task = asyncio.get_running_loop().create_task(self._run_lookup(query, generation))
        self._tasks.add(task)
        task.add_done_callback(self._tasks.discard)
        self.lookups_started += 1
        logger.debug("lookup_started", query=query, generation=generation)

    # Stage 4: publish if still the newest
    async def _run_lookup(self, query: str, generation: int) -> None:
        try:
            items = _as_items(await self._provider.search(query))
        except asyncio.CancelledError:
            self.lookups_cancelled += 1
            raise
        except Exception as exc:
            if not self._owns_output(generation):
                self._discard(query, generation, outcome="failure")
                return
            logger.warning(
                "lookup_failed",
                query=query,
                error_type=exc.__class__.__name__,
                error=str(exc),
            )
            self._results.emit(FailedState(query=query, error=ErrorInfo.from_exception(exc)))
            return

        if not self._owns_output(generation):
            self._discard(query, generation, outcome="success")
            return
        self._results.emit(ReadyState(query=query, items=items))

    def _owns_output(self, generation: int) -> bool:
        return self._state is PipelineState.ACTIVE and generation == self._generation

    def _discard(self, query: str, generation: int, *, outcome: str) -> None:
        self.lookups_discarded += 1
        logger.debug(
            "lookup_discarded",
            query=query,
            generation=generation,
            latest_generation=self._generation,
            outcome=outcome,
        )


def _as_items(result: Any) -> tuple[str, ...]:
    if isinstance(result, (str, bytes)):
        raise LookupFailure("Search provider returned a string instead of a sequence.")
    try:
        items = tuple(result)
    except TypeError as exc:
        raise LookupFailure(
            f"Search provider returned a non-iterable {type(result).__name__}."
        ) from exc
    if not all(isinstance(item, str) for item in items):
        raise LookupFailure("Search provider returned non-string items.")
    return items


__all__ = ["PipelineState", "SearchPipeline"]
