class CountryFetcherError(Exception):
    """Base class for every error raised by the countries app."""
    pass


# --- per-query errors (captured in FetchResult.error) ---
class FetchError(CountryFetcherError):
    """Raised when a single query cannot produce a result."""
    pass


class TransportError(FetchError):
    """Connection failure, non-2xx status or unreadable body."""
    pass


class FetchTimeoutError(FetchError, TimeoutError):
    """The query exceeded its timeout."""
    pass


class DecodeError(FetchError):
    """Body is neither an array of countries nor a single country."""
    pass


class EmptyResultError(FetchError):
    """No countries matched, or a region was reduced over zero countries."""
    pass


# --- startup / caller errors ---
class ConfigError(CountryFetcherError, ValueError):
    """Invalid startup configuration (duration, log level, ...)."""
    pass


class CallerContractError(CountryFetcherError, ValueError):
    """Raised when a caller passes a batch the dispatcher does not support."""
    pass


class OutputError(CountryFetcherError):
    """Raised when results cannot be written to the requested destination."""
    pass
