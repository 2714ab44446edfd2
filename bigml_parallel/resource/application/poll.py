"""Resource poll adapter — waits for a remote resource to report a terminal status."""

from collections.abc import Awaitable, Callable
from typing import Protocol

from bigml_parallel.resource.domain.errors import WaitFailedError
from bigml_parallel.resource.domain.status import ResourceStatus
from bigml_parallel.wait.application.engine import wait
from bigml_parallel.wait.domain.observer import WaitObserver
from bigml_parallel.wait.domain.policy import BackoffType, WaitPolicy
from bigml_parallel.wait.domain.status import (
    Disposition,
    FailedPermanently,
    Finished,
    Waiting,
    WaitStatus,
    map_error_to_outcome,
)

# Tuned against BigML's own retry guidance for long-running jobs.
DEFAULT_POLL_POLICY = WaitPolicy(
    retry_interval_seconds=10,
    backoff_type=BackoffType.EXPONENTIAL,
    allowed_errors=6,
)


class Pollable(Protocol):
    @property
    def status(self) -> ResourceStatus: ...


type ProgressCallback[R] = Callable[[R], None]


async def wait_for_resource[R: Pollable](
    fetch: Callable[[str], Awaitable[R]],
    resource_id: str,
    observer: WaitObserver,
    policy: WaitPolicy = DEFAULT_POLL_POLICY,
    progress: ProgressCallback[R] | None = None,
) -> R:
    """Fetch ``resource_id`` until BigML reports it ready, then return it.

    ``progress``, if given, is called with every fetched snapshot.

    Raises:
        WaitFailedError: if BigML reports the resource as failed. Polling the
            same resource again cannot help, so this is never retried here.
        WaitTimeoutError: if the policy deadline is reached.
        Exception: the last fetch error once the error budget is spent, or
            whatever the progress callback raised.
    """

    async def probe() -> WaitStatus[R]:
        try:
            resource = await fetch(resource_id)
        except Exception as exc:  # noqa: BLE001
            return map_error_to_outcome(exc, Disposition.TEMPORARY)

        if progress is not None:
            try:
                progress(resource)
            except Exception as exc:  # noqa: BLE001
                return map_error_to_outcome(exc, Disposition.PERMANENT)

        code = resource.status.code
        if code.is_ready():
            return Finished(resource)
        if code.is_err():
            return FailedPermanently(
                WaitFailedError(
                    resource_id=resource_id, message=resource.status.message
                )
            )
        return Waiting()

    return await wait(policy=policy, probe=probe, observer=observer, label=resource_id)
