"""WaitStatus — the outcome of a single probe invocation, plus error triage helpers."""

from collections.abc import Awaitable, Callable
from dataclasses import dataclass
from enum import StrEnum

from bigml_parallel.core.errors import ErrorKind, error_kind
from bigml_parallel.core.errors import is_transient as default_is_transient


@dataclass(frozen=True)
class Finished[T]:
    """The task has finished."""

    value: T


@dataclass(frozen=True)
class Waiting:
    """The task hasn't finished yet, so wait a while and try again."""


@dataclass(frozen=True)
class FailedTemporarily:
    """The task failed, but the failure is believed to be temporary."""

    error: Exception


@dataclass(frozen=True)
class FailedPermanently:
    """The task failed, and we don't believe it will ever succeed."""

    error: Exception


type Failure = FailedTemporarily | FailedPermanently
type WaitStatus[T] = Finished[T] | Waiting | FailedTemporarily | FailedPermanently


class Disposition(StrEnum):
    """How a probe wants an exception turned into a failure outcome."""

    CLASSIFY = "classify"
    TEMPORARY = "temporary"
    PERMANENT = "permanent"


def classify_error(
    exc: Exception,
    is_transient: Callable[[ErrorKind], bool] = default_is_transient,
) -> Failure:
    """Return FailedTemporarily or FailedPermanently depending on ``is_transient``."""
    if is_transient(error_kind(exc)):
        return FailedTemporarily(exc)
    return FailedPermanently(exc)


def map_error_to_outcome(
    exc: Exception, disposition: Disposition = Disposition.CLASSIFY
) -> Failure:
    match disposition:
        case Disposition.TEMPORARY:
            return FailedTemporarily(exc)
        case Disposition.PERMANENT:
            return FailedPermanently(exc)
        case Disposition.CLASSIFY:
            return classify_error(exc)


async def try_wait[T](
    awaitable: Awaitable[T], disposition: Disposition = Disposition.CLASSIFY
) -> WaitStatus[T]:
    """Await ``awaitable`` and report its value as Finished, or its error as a failure.

    With the default disposition the error taxonomy decides whether the wait
    may retry.
    """
    try:
        value = await awaitable
    except Exception as exc:  # noqa: BLE001
        return map_error_to_outcome(exc, disposition)
    return Finished(value)
