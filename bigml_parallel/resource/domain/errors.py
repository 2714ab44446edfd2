"""Error types raised by the resource domain."""

from bigml_parallel.core.errors import BigMLError, ErrorKind


class WaitFailedError(BigMLError):
    """Raised when BigML reports that a resource we were waiting on failed.

    The message carries a dashboard URL so the actual error is easy to look up.
    """

    def __init__(self, resource_id: str, message: str) -> None:
        self.resource_id = resource_id
        self.message = message
        super().__init__(
            f"https://bigml.com/dashboard/{resource_id} failed ({message})",
            kind=ErrorKind.WAIT_FAILED,
        )


class WrongResourceTypeError(BigMLError):
    """Raised when a resource id does not have the expected type prefix."""

    def __init__(self, expected: str, found: str) -> None:
        self.expected = expected
        self.found = found
        super().__init__(
            f"expected BigML resource ID starting with '{expected}', found '{found}'",
            kind=ErrorKind.CONFIGURATION,
        )


class OutputNotAvailableError(BigMLError):
    """Raised when a WhizzML output has not been computed (yet?)."""

    def __init__(self) -> None:
        super().__init__(
            "WhizzML output is not (yet?) available",
            kind=ErrorKind.OUTPUT_NOT_AVAILABLE,
        )


class CouldNotGetOutputError(BigMLError):
    """Raised when a named WhizzML output cannot be read."""

    def __init__(self, name: str, source: Exception) -> None:
        self.name = name
        self.source = source
        kind = source.kind if isinstance(source, BigMLError) else ErrorKind.OTHER
        super().__init__(f"could not get WhizzML output '{name}': {source}", kind=kind)

    @property
    def original_error(self) -> BigMLError:
        if isinstance(self.source, BigMLError):
            return self.source.original_error
        return self
