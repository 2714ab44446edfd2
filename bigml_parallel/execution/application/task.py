"""ExecutionTaskRunner — creates one execution and waits for it, with nested retries."""

from bigml_parallel.config.domain.config import PolicySet
from bigml_parallel.core.errors import BigMLError
from bigml_parallel.execution.domain.args import ExecutionArgs
from bigml_parallel.execution.domain.observer import ExecutionObserver
from bigml_parallel.execution.domain.settings import ExecutionSettings
from bigml_parallel.resource.application.poll import wait_for_resource
from bigml_parallel.resource.domain.client import ResourceClient
from bigml_parallel.resource.domain.errors import WaitFailedError
from bigml_parallel.resource.domain.resource import Resource
from bigml_parallel.wait.application.engine import wait
from bigml_parallel.wait.domain.observer import WaitObserver
from bigml_parallel.wait.domain.status import (
    FailedPermanently,
    FailedTemporarily,
    Finished,
    WaitStatus,
    try_wait,
)


class ExecutionTaskRunner:
    """Runs the script over a single resource, retrying at three levels.

    1. The whole create-and-wait cycle is retried under the execution policy
       when the remote job fails with a message matching ``--retry-on``. A
       failed execution cannot be resumed, so each retry creates a new one.
    2. Creation is retried under the create policy for transient errors,
       usually because every processing slot on the account is taken.
    3. Status polling retries transient fetch errors under the poll policy.
    """

    def __init__(
        self,
        client: ResourceClient,
        settings: ExecutionSettings,
        policies: PolicySet,
        observer: ExecutionObserver,
        wait_observer: WaitObserver,
    ) -> None:
        self._client = client
        self._settings = settings
        self._policies = policies
        self._observer = observer
        self._wait_observer = wait_observer

    async def run(self, resource_id: str) -> Resource:
        """Create an execution over ``resource_id`` and return it once finished."""
        args = self._settings.args_for(resource_id)
        policy = self._policies.execution.with_allowed_errors(self._settings.retry_count)
        return await wait(
            policy=policy,
            probe=lambda: self._create_and_wait(resource_id=resource_id, args=args),
            observer=self._wait_observer,
            label=f"execution over {resource_id}",
        )

    async def _create_and_wait(
        self, resource_id: str, args: ExecutionArgs
    ) -> WaitStatus[Resource]:
        try:
            execution = await wait(
                policy=self._policies.create,
                probe=lambda: try_wait(self._client.create(args)),
                observer=self._wait_observer,
                label=f"create over {resource_id}",
            )
        except Exception as exc:  # noqa: BLE001
            # The create policy already spent its own retries.
            return FailedPermanently(exc)

        self._observer.execution_created(
            resource_id=resource_id, execution_id=execution.id
        )

        try:
            finished = await wait_for_resource(
                fetch=self._client.fetch,
                resource_id=execution.id,
                observer=self._wait_observer,
                policy=self._policies.poll,
            )
        except Exception as exc:  # noqa: BLE001
            original = exc.original_error if isinstance(exc, BigMLError) else exc
            if isinstance(original, WaitFailedError) and self._settings.should_retry(
                original.message
            ):
                self._observer.execution_retry(
                    resource_id=resource_id,
                    execution_id=execution.id,
                    reason=str(exc),
                )
                return FailedTemporarily(exc)
            return FailedPermanently(exc)

        return Finished(finished)
