"""Exception hierarchy for callconf.

Transport errors are raised by transport functions and travel through the
post-call chain as settled failures. The remaining errors are raised by the
builder itself and never reach the transport.
"""

from __future__ import annotations


class CallConfigError(Exception):
    """Base class for all callconf errors."""


class InvalidStateError(CallConfigError):
    """A builder was mutated or executed after ``execute()`` ran."""


class CallAbortedError(CallConfigError):
    """A pre-call hook vetoed the call; the transport was never invoked."""

    def __init__(self, reason: str) -> None:
        super().__init__(reason)
        self.reason = reason


class UnknownDataSourceError(CallConfigError, KeyError):
    """No data source is configured for an endpoint key."""

    def __str__(self) -> str:
        return Exception.__str__(self)


class TransportError(CallConfigError):
    """The transport function failed to produce a response."""


class HttpClientError(TransportError):
    """Generic HTTP client failure."""


class RequestTimeoutError(TransportError):
    """The request timed out."""


class RetryableHttpError(TransportError):
    """Connection-level failure that a caller may choose to retry."""


class HttpStatusError(TransportError):
    """Non-2xx response from a client configured to raise on status."""

    def __init__(self, message: str, status_code: int) -> None:
        super().__init__(message)
        self.status_code = status_code
