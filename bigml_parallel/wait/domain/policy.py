"""WaitPolicy value object and the pure time arithmetic used by the wait engine."""

from enum import StrEnum
from typing import Self

from pydantic import BaseModel, Field

# BigML support recommends never polling more often than this, to avoid
# losing API access. Not configurable.
MIN_SLEEP_SECONDS = 4.0


class BackoffType(StrEnum):
    LINEAR = "linear"
    EXPONENTIAL = "exponential"


class WaitPolicy(BaseModel, frozen=True):
    """Options controlling how long we wait and what makes us give up.

    Built by chaining ``with_*`` calls, each of which returns a new policy::

        policy = WaitPolicy().with_timeout(120).with_allowed_errors(5)
    """

    timeout_seconds: float | None = Field(default=None, gt=0)
    retry_interval_seconds: float = Field(default=10.0, gt=0)
    backoff_type: BackoffType = BackoffType.LINEAR
    allowed_errors: int = Field(default=2, ge=0)

    def with_timeout(self, timeout_seconds: float | None) -> Self:
        return self.model_copy(update={"timeout_seconds": timeout_seconds})

    def with_retry_interval(self, seconds: float) -> Self:
        return self.model_copy(update={"retry_interval_seconds": seconds})

    def with_backoff(self, backoff_type: BackoffType) -> Self:
        return self.model_copy(update={"backoff_type": backoff_type})

    def with_allowed_errors(self, count: int) -> Self:
        return self.model_copy(update={"allowed_errors": count})

    def deadline(self, now: float) -> float | None:
        """Absolute deadline for a wait starting at ``now``, if we have a timeout."""
        if self.timeout_seconds is None:
            return None
        return now + self.timeout_seconds


def effective_sleep(interval: float) -> float:
    return max(MIN_SLEEP_SECONDS, interval)


def would_exceed_deadline(now: float, interval: float, deadline: float | None) -> bool:
    """True if sleeping for ``interval`` from ``now`` would land past ``deadline``."""
    if deadline is None:
        return False
    return now + effective_sleep(interval) > deadline


def next_interval(interval: float, backoff_type: BackoffType) -> float:
    if backoff_type is BackoffType.EXPONENTIAL:
        return interval * 2
    return interval
