"""Structlog implementation of the WaitObserver port."""

import structlog


class StructlogWaitObserver:
    """Delegates wait engine events to structlog.

    Satisfies the WaitObserver protocol structurally. Routine transitions are
    logged at debug level; retries and failures are surfaced as warnings and
    errors.
    """

    def __init__(self) -> None:
        self._log = structlog.get_logger()

    def wait_started(
        self,
        label: str,
        timeout_seconds: float | None,
        retry_interval_seconds: float,
        allowed_errors: int,
    ) -> None:
        self._log.debug(
            "wait.started",
            label=label,
            timeout_seconds=timeout_seconds,
            retry_interval_seconds=retry_interval_seconds,
            allowed_errors=allowed_errors,
        )

    def wait_pending(self, label: str, attempt: int) -> None:
        self._log.debug("wait.pending", label=label, attempt=attempt)

    def wait_retrying(
        self, label: str, errors_seen: int, allowed_errors: int, reason: str
    ) -> None:
        self._log.warning(
            "wait.retrying",
            label=label,
            errors_seen=errors_seen,
            allowed_errors=allowed_errors,
            reason=reason,
        )

    def wait_sleeping(self, label: str, sleep_seconds: float) -> None:
        self._log.debug("wait.sleeping", label=label, sleep_seconds=sleep_seconds)

    def wait_finished(self, label: str, attempts: int) -> None:
        self._log.debug("wait.finished", label=label, attempts=attempts)

    def wait_failed(self, label: str, reason: str, permanent: bool) -> None:
        self._log.error(
            "wait.failed", label=label, reason=reason, permanent=permanent
        )

    def wait_timed_out(self, label: str, timeout_seconds: float | None) -> None:
        self._log.error(
            "wait.timed_out", label=label, timeout_seconds=timeout_seconds
        )
