"""Exception hierarchy for the event search pipeline."""


class PlacesHistoryError(Exception):
    """Base class for all errors raised by this package."""


class ValidationError(PlacesHistoryError):
    """Bad request parameters. Always the caller's fault."""


class CoordinateParseFailure(PlacesHistoryError):
    """A single result row had no usable coordinates."""


class UpstreamError(PlacesHistoryError):
    """Request-level failure talking to the SPARQL endpoint.

    ``detail`` holds upstream error text for logging; it is never returned to
    the caller.
    """

    def __init__(self, message: str, status_code: int | None = None, detail: str = ""):
        super().__init__(message)
        self.status_code = status_code
        self.detail = detail


class UpstreamTimeout(UpstreamError):
    pass


class UpstreamRateLimited(UpstreamError):
    pass


class UpstreamServerError(UpstreamError):
    pass


class UpstreamMalformed(UpstreamError):
    """Response was not SPARQL JSON with a results.bindings list."""


class UpstreamRequestError(UpstreamError):
    """Any other non-2xx status or transport failure."""
