"""Observer port for the wait engine — defines events in domain language."""

from typing import Protocol


class WaitObserver(Protocol):
    """Observer port emitting structured events on every wait transition.

    Events are informational only; the engine's behaviour never depends on them.
    """

    def wait_started(
        self,
        label: str,
        timeout_seconds: float | None,
        retry_interval_seconds: float,
        allowed_errors: int,
    ) -> None: ...

    def wait_pending(self, label: str, attempt: int) -> None: ...

    def wait_retrying(
        self, label: str, errors_seen: int, allowed_errors: int, reason: str
    ) -> None: ...

    def wait_sleeping(self, label: str, sleep_seconds: float) -> None: ...

    def wait_finished(self, label: str, attempts: int) -> None: ...

    def wait_failed(self, label: str, reason: str, permanent: bool) -> None: ...

    def wait_timed_out(self, label: str, timeout_seconds: float | None) -> None: ...
