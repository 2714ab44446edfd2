"""CompositeExecutionObserver — fans out all events to a list of observers."""

from bigml_parallel.execution.domain.observer import ExecutionObserver


class CompositeExecutionObserver:
    """Delegates every observer event to each observer in order.

    Does NOT inherit from ExecutionObserver (structural typing via Protocol).
    """

    def __init__(self, observers: list[ExecutionObserver]) -> None:
        self._observers = observers

    def run_started(self, max_tasks: int, retry_count: int) -> None:
        for obs in self._observers:
            obs.run_started(max_tasks=max_tasks, retry_count=retry_count)

    def run_completed(self, total_executions: int, elapsed_seconds: float) -> None:
        for obs in self._observers:
            obs.run_completed(
                total_executions=total_executions, elapsed_seconds=elapsed_seconds
            )

    def run_aborted(self, reason: str) -> None:
        for obs in self._observers:
            obs.run_aborted(reason=reason)

    def input_coerced_to_string(self, name: str, value: str) -> None:
        for obs in self._observers:
            obs.input_coerced_to_string(name=name, value=value)

    def execution_started(self, resource_id: str) -> None:
        for obs in self._observers:
            obs.execution_started(resource_id=resource_id)

    def execution_created(self, resource_id: str, execution_id: str) -> None:
        for obs in self._observers:
            obs.execution_created(resource_id=resource_id, execution_id=execution_id)

    def execution_retry(self, resource_id: str, execution_id: str, reason: str) -> None:
        for obs in self._observers:
            obs.execution_retry(
                resource_id=resource_id, execution_id=execution_id, reason=reason
            )

    def execution_completed(self, resource_id: str, execution_id: str) -> None:
        for obs in self._observers:
            obs.execution_completed(
                resource_id=resource_id, execution_id=execution_id
            )

    def execution_failed(self, resource_id: str, reason: str) -> None:
        for obs in self._observers:
            obs.execution_failed(resource_id=resource_id, reason=reason)
