"""Error types raised by config infrastructure."""

from pathlib import Path

from bigml_parallel.core.errors import BigMLError, ErrorKind


class MissingEnvVarsError(BigMLError):
    """Raised when one or more required environment variables are not set."""

    def __init__(self, missing_vars: list[str]) -> None:
        self.missing_vars = missing_vars
        var_list = ", ".join(sorted(missing_vars))
        super().__init__(
            f"failed to load config: missing environment variables: {var_list}",
            kind=ErrorKind.CONFIGURATION,
        )


class ConfigValidationError(BigMLError):
    """Raised when the loaded config fails validation."""

    def __init__(self, reason: str) -> None:
        super().__init__(
            f"failed to validate config: {reason}", kind=ErrorKind.CONFIGURATION
        )


class ConfigLoadError(BigMLError):
    """Raised when the config file cannot be opened or parsed."""

    def __init__(self, path: Path, reason: str = "file not found") -> None:
        self.path = path
        super().__init__(
            f"failed to load config: {reason}: {path}", kind=ErrorKind.CONFIGURATION
        )
