class ValidationError(ValueError):
    """Request is missing or has a malformed parameter; upstream is never called."""


class UpstreamError(RuntimeError):
    """Yahoo Finance call failed: network error, timeout, bad status or body."""


class DataUnavailableError(RuntimeError):
    """Market data could not be produced for the request.

    Raised for upstream failures and for upstream answers that carry no usable
    data. The message is generic and safe to return to clients.
    """
