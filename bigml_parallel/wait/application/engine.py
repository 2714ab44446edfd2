"""The wait engine — a policy-driven polling loop over an asynchronous probe."""

import asyncio
import time
from collections.abc import Awaitable, Callable

from bigml_parallel.core.errors import WaitTimeoutError
from bigml_parallel.wait.domain.observer import WaitObserver
from bigml_parallel.wait.domain.policy import (
    WaitPolicy,
    effective_sleep,
    next_interval,
    would_exceed_deadline,
)
from bigml_parallel.wait.domain.status import (
    FailedPermanently,
    FailedTemporarily,
    Finished,
    Waiting,
    WaitStatus,
)

type Probe[T] = Callable[[], Awaitable[WaitStatus[T]]]


async def wait[T](
    policy: WaitPolicy,
    probe: Probe[T],
    observer: WaitObserver,
    label: str = "wait",
) -> T:
    """Call ``probe`` repeatedly until it finishes, fails for good, or times out.

    The probe is never called concurrently with itself. The deadline is fixed
    once, here, and checked before each sleep rather than before each probe,
    so a slow probe is never cut short.

    Raises:
        WaitTimeoutError: if the next sleep would cross the policy deadline.
        Exception: the last error reported by the probe, once it fails
            permanently or runs out of allowed temporary errors.
    """
    deadline = policy.deadline(time.monotonic())
    retry_interval = policy.retry_interval_seconds
    errors_seen = 0
    attempts = 0

    observer.wait_started(
        label=label,
        timeout_seconds=policy.timeout_seconds,
        retry_interval_seconds=retry_interval,
        allowed_errors=policy.allowed_errors,
    )

    while True:
        status = await probe()
        attempts += 1

        match status:
            case Finished(value=value):
                observer.wait_finished(label=label, attempts=attempts)
                return value
            case Waiting():
                observer.wait_pending(label=label, attempt=attempts)
            case FailedTemporarily(error=error) if errors_seen < policy.allowed_errors:
                errors_seen += 1
                observer.wait_retrying(
                    label=label,
                    errors_seen=errors_seen,
                    allowed_errors=policy.allowed_errors,
                    reason=str(error),
                )
            case FailedTemporarily(error=error):
                observer.wait_failed(label=label, reason=str(error), permanent=False)
                raise error
            case FailedPermanently(error=error):
                observer.wait_failed(label=label, reason=str(error), permanent=True)
                raise error

        if would_exceed_deadline(time.monotonic(), retry_interval, deadline):
            observer.wait_timed_out(label=label, timeout_seconds=policy.timeout_seconds)
            raise WaitTimeoutError(label=label, timeout_seconds=policy.timeout_seconds)

        sleep_seconds = effective_sleep(retry_interval)
        observer.wait_sleeping(label=label, sleep_seconds=sleep_seconds)
        await asyncio.sleep(sleep_seconds)
        retry_interval = next_interval(retry_interval, policy.backoff_type)
