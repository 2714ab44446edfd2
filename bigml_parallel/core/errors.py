"""Base exception class and retry taxonomy for all bigml-parallel errors."""

from enum import StrEnum

import httpx


class ErrorKind(StrEnum):
    """Closed set of failure kinds, triaged by how they should be retried."""

    PAYMENT_REQUIRED = "payment_required"
    INTERNAL_SERVER_ERROR = "internal_server_error"
    SERVICE_UNAVAILABLE = "service_unavailable"
    GATEWAY_TIMEOUT = "gateway_timeout"
    CONNECTION = "connection"
    UNEXPECTED_HTTP_STATUS = "unexpected_http_status"
    INVALID_RESPONSE = "invalid_response"
    WAIT_FAILED = "wait_failed"
    TIMEOUT = "timeout"
    CONFIGURATION = "configuration"
    OUTPUT_NOT_AVAILABLE = "output_not_available"
    OTHER = "other"


# BigML answers 402 when every processing slot on the account is busy, so
# backing off may free one up.
_TRANSIENT_KINDS: frozenset[ErrorKind] = frozenset(
    {
        ErrorKind.PAYMENT_REQUIRED,
        ErrorKind.INTERNAL_SERVER_ERROR,
        ErrorKind.SERVICE_UNAVAILABLE,
        ErrorKind.GATEWAY_TIMEOUT,
        ErrorKind.CONNECTION,
    }
)


def is_transient(kind: ErrorKind) -> bool:
    """Return True if an error of this kind may go away on its own.

    A failed remote job (``WAIT_FAILED``) is never transient: polling the same
    resource again cannot succeed, only a fresh create can.
    """
    return kind in _TRANSIENT_KINDS


class BigMLError(Exception):
    """Base class for all bigml-parallel errors."""

    def __init__(self, message: str, kind: ErrorKind = ErrorKind.OTHER) -> None:
        super().__init__(message)
        self.kind = kind

    @property
    def retriable(self) -> bool:
        return is_transient(self.kind)

    @property
    def original_error(self) -> "BigMLError":
        """Return the innermost error, skipping context-only wrappers."""
        return self


class WaitTimeoutError(BigMLError):
    """Raised by the wait engine when the next attempt would miss its deadline."""

    def __init__(self, label: str, timeout_seconds: float | None) -> None:
        self.label = label
        self.timeout_seconds = timeout_seconds
        super().__init__(
            f"timed out waiting for {label} after {timeout_seconds}s",
            kind=ErrorKind.TIMEOUT,
        )


def error_kind(exc: BaseException) -> ErrorKind:
    """Map any exception onto an ErrorKind."""
    if isinstance(exc, BigMLError):
        return exc.kind
    if isinstance(exc, httpx.TransportError):
        return ErrorKind.CONNECTION
    return ErrorKind.OTHER
