"""Error types raised by the BigML HTTP client."""

from http import HTTPStatus

import httpx

from bigml_parallel.core.errors import BigMLError, ErrorKind, error_kind
from bigml_parallel.resource.infrastructure.url import (
    redact_api_key,
    url_without_api_key,
)

_STATUS_KINDS: dict[int, ErrorKind] = {
    HTTPStatus.INTERNAL_SERVER_ERROR: ErrorKind.INTERNAL_SERVER_ERROR,
    HTTPStatus.SERVICE_UNAVAILABLE: ErrorKind.SERVICE_UNAVAILABLE,
    HTTPStatus.GATEWAY_TIMEOUT: ErrorKind.GATEWAY_TIMEOUT,
}


class CouldNotAccessUrlError(BigMLError):
    """Raised when a request to BigML fails for any reason.

    The URL and the wrapped error's text are both redacted before they reach
    the message, so the API key never appears in logs or on stderr.
    """

    def __init__(self, url: str, source: Exception) -> None:
        self.url = url_without_api_key(url)
        self.source = source
        super().__init__(
            f"error accessing '{self.url}': {redact_api_key(str(source))}",
            kind=error_kind(source),
        )

    @property
    def original_error(self) -> BigMLError:
        if isinstance(self.source, BigMLError):
            return self.source.original_error
        return self


class PaymentRequiredError(BigMLError):
    """Raised on 402, which BigML sends when all processing slots are in use."""

    def __init__(self, url: str, body: str) -> None:
        self.url = url_without_api_key(url)
        self.body = body
        super().__init__(
            f"BigML payment required for {self.url} ({body})",
            kind=ErrorKind.PAYMENT_REQUIRED,
        )


class UnexpectedHttpStatusError(BigMLError):
    """Raised when BigML answers with a status code we don't handle specially."""

    def __init__(self, url: str, status_code: int, body: str) -> None:
        self.url = url_without_api_key(url)
        self.status_code = status_code
        self.body = body
        super().__init__(
            f"{status_code} for {self.url} ({body})",
            kind=_STATUS_KINDS.get(status_code, ErrorKind.UNEXPECTED_HTTP_STATUS),
        )


class InvalidResponseError(BigMLError):
    """Raised when a successful response body cannot be parsed as a resource."""

    def __init__(self, reason: str) -> None:
        super().__init__(
            f"could not parse BigML response: {reason}",
            kind=ErrorKind.INVALID_RESPONSE,
        )


def response_to_error(response: httpx.Response) -> BigMLError:
    """Build the error matching a non-success HTTP response."""
    url = str(response.request.url)
    if response.status_code == HTTPStatus.PAYMENT_REQUIRED:
        return PaymentRequiredError(url=url, body=response.text)
    return UnexpectedHttpStatusError(
        url=url, status_code=response.status_code, body=response.text
    )
