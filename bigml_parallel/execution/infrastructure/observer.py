"""Structlog implementation of the ExecutionObserver port."""

import structlog


class StructlogExecutionObserver:
    """Delegates parallel-run events to structlog.

    Satisfies the ExecutionObserver protocol structurally.
    """

    def __init__(self) -> None:
        self._log = structlog.get_logger()

    def run_started(self, max_tasks: int, retry_count: int) -> None:
        self._log.info("run.started", max_tasks=max_tasks, retry_count=retry_count)

    def run_completed(self, total_executions: int, elapsed_seconds: float) -> None:
        self._log.info(
            "run.completed",
            total_executions=total_executions,
            elapsed_seconds=elapsed_seconds,
        )

    def run_aborted(self, reason: str) -> None:
        self._log.warning("run.aborted", reason=reason)

    def input_coerced_to_string(self, name: str, value: str) -> None:
        self._log.warning(
            "input.coerced_to_string",
            name=name,
            value=value,
            hint="value is not valid JSON, passing it as a string",
        )

    def execution_started(self, resource_id: str) -> None:
        self._log.debug("execution.started", resource_id=resource_id)

    def execution_created(self, resource_id: str, execution_id: str) -> None:
        self._log.info(
            "execution.created", resource_id=resource_id, execution_id=execution_id
        )

    def execution_retry(self, resource_id: str, execution_id: str, reason: str) -> None:
        self._log.warning(
            "execution.retry",
            resource_id=resource_id,
            execution_id=execution_id,
            reason=reason,
        )

    def execution_completed(self, resource_id: str, execution_id: str) -> None:
        self._log.info(
            "execution.completed",
            resource_id=resource_id,
            execution_id=execution_id,
        )

    def execution_failed(self, resource_id: str, reason: str) -> None:
        self._log.error("execution.failed", resource_id=resource_id, reason=reason)
