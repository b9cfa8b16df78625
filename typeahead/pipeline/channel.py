"""Write-only ingestion point for raw query strings."""

from __future__ import annotations

from typeahead.services.exceptions import ChannelClosed
from typeahead.streams import Broadcast, Disposer
from typeahead.streams.broadcast import CloseCallback, ValueCallback


class QueryChannel:
    """Broadcasts pushed queries to the listeners attached at push time.

    Nothing is buffered for replay. Pushing after ``close()`` raises
    ``ChannelClosed``.
    """

    def __init__(self) -> None:
        self._source: Broadcast[str] = Broadcast()

    @property
    def closed(self) -> bool:
        return self._source.closed

    def push(self, query: str) -> None:
        if not isinstance(query, str):
            raise TypeError(f"Query must be a string, got {type(query).__name__}.")
        if self._source.closed:
            raise ChannelClosed("Cannot push a query after the channel was closed.")
        self._source.emit(query)

    def listen(
        self,
        on_value: ValueCallback[str],
        on_close: CloseCallback | None = None,
    ) -> Disposer:
        return self._source.listen(on_value, on_close)

    def close(self) -> None:
        self._source.close()


__all__ = ["QueryChannel"]
