"""Observer port for the execution domain — defines events in domain language."""

from typing import Protocol


class ExecutionObserver(Protocol):
    """Observer port emitting structured events during a parallel run.

    Implementations may log to structlog, render progress, or record for tests.
    """

    def run_started(self, max_tasks: int, retry_count: int) -> None: ...

    def run_completed(self, total_executions: int, elapsed_seconds: float) -> None: ...

    def run_aborted(self, reason: str) -> None: ...

    def input_coerced_to_string(self, name: str, value: str) -> None: ...

    def execution_started(self, resource_id: str) -> None: ...

    def execution_created(self, resource_id: str, execution_id: str) -> None: ...

    def execution_retry(
        self, resource_id: str, execution_id: str, reason: str
    ) -> None: ...

    def execution_completed(self, resource_id: str, execution_id: str) -> None: ...

    def execution_failed(self, resource_id: str, reason: str) -> None: ...
