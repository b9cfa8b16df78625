"""Domain-specific exceptions."""


class ServiceError(Exception):
    pass


class LookupFailure(ServiceError):
    """A search provider could not produce a result list."""


class ProviderError(LookupFailure):
    """Raised when the HTTP search backend fails or is misconfigured."""


class ChannelClosed(RuntimeError):
    """A value was pushed into a channel that has already been closed."""


class PipelineDisposed(RuntimeError):
    """A pipeline was disposed more than once."""
