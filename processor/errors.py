"""Error taxonomy for record fetching and place resolution."""


class FetchError(Exception):
    """Base class for record fetch failures."""

    def __init__(self, detail: str):
        super().__init__(detail)
        self.detail = detail


class FetchNetworkError(FetchError):
    """Transport failure or non-success HTTP status from the data source."""


class FetchDecodeError(FetchError):
    """Response payload did not match the expected record structure."""


class ResolveError(Exception):
    """Base class for per-identifier place lookup failures."""

    def __init__(self, identifier: str, detail: str = ''):
        super().__init__(f"{identifier}: {detail}" if detail else identifier)
        self.identifier = identifier
        self.detail = detail


class PlaceNotFoundError(ResolveError):
    """The lookup service has no usable place for the identifier."""


class ResolveNetworkError(ResolveError):
    """Transport or service failure while looking up a place."""


class RateLimitedError(ResolveError):
    """The lookup service rejected the request due to quota."""
