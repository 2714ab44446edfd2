"""Error types raised while preparing executions."""

from bigml_parallel.core.errors import BigMLError, ErrorKind


class InvalidInputError(BigMLError):
    """Raised when a command-line script input is not of the form name=value."""

    def __init__(self, text: str) -> None:
        self.text = text
        super().__init__(
            f'input {text!r} must have form "key=value"',
            kind=ErrorKind.CONFIGURATION,
        )


class InvalidRetryPatternError(BigMLError):
    """Raised when --retry-on is not a valid regular expression."""

    def __init__(self, pattern: str, reason: str) -> None:
        super().__init__(
            f"invalid --retry-on pattern {pattern!r}: {reason}",
            kind=ErrorKind.CONFIGURATION,
        )
