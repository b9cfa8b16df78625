from typeahead.streams.broadcast import Broadcast, Disposer, ReplayLatest, Subscription

__all__ = [
    "Broadcast",
    "Disposer",
    "ReplayLatest",
    "Subscription",
]
