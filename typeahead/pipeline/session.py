"""Owner object pairing a query channel with its search pipeline."""

from __future__ import annotations

from typeahead.config import PipelineSettings, get_settings
from typeahead.domain.models import ResultState
from typeahead.pipeline.channel import QueryChannel
from typeahead.pipeline.search import PipelineState, SearchPipeline
from typeahead.services.search import SearchProvider
from typeahead.streams import ReplayLatest, Subscription


class SearchSession:
    """Creates both halves together and tears both down on ``close()``."""

    def __init__(
        self,
        provider: SearchProvider,
        settings: PipelineSettings | None = None,
    ) -> None:
        self.settings = settings or get_settings()
        self.queries = QueryChannel()
        self.pipeline = SearchPipeline(self.queries, provider, settings=self.settings)
        self._closed = False

    @property
    def closed(self) -> bool:
        return self._closed

    @property
    def results(self) -> ReplayLatest[ResultState]:
        return self.pipeline.results

    def push(self, query: str) -> None:
        self.queries.push(query)

    def subscribe(self) -> Subscription[ResultState]:
        return self.pipeline.subscribe()

    def close(self) -> None:
        if self._closed:
            return
        self._closed = True
        try:
            if self.pipeline.state is not PipelineState.DISPOSED:
                self.pipeline.dispose()
        finally:
            self.queries.close()

    async def __aenter__(self) -> "SearchSession":
        return self

    async def __aexit__(self, exc_type, exc, tb) -> None:
        self.close()


__all__ = ["SearchSession"]
