"""Top-level ParallelConfig aggregate — the root configuration object."""

from pydantic import BaseModel, Field

from bigml_parallel.wait.domain.policy import BackoffType, WaitPolicy


class BigMLConfig(BaseModel, frozen=True):
    """Credentials and endpoint for the BigML API."""

    username: str = Field(min_length=1)
    api_key: str = Field(min_length=1, repr=False)
    domain: str = Field(default="bigml.io", min_length=1)


class PolicySet(BaseModel, frozen=True):
    """Wait policies for the three nested waits of a parallel execution.

    ``create`` retries creation failures such as running out of slots,
    ``execution`` retries a whole create-and-wait cycle, and ``poll`` governs
    status polling. The execution policy's error budget is replaced by
    ``--retry-count`` at run time.
    """

    create: WaitPolicy = WaitPolicy(
        retry_interval_seconds=60,
        backoff_type=BackoffType.EXPONENTIAL,
        allowed_errors=6,
    )
    execution: WaitPolicy = WaitPolicy(
        retry_interval_seconds=2 * 60,
        backoff_type=BackoffType.EXPONENTIAL,
        allowed_errors=0,
    )
    poll: WaitPolicy = WaitPolicy(
        retry_interval_seconds=10,
        backoff_type=BackoffType.EXPONENTIAL,
        allowed_errors=6,
    )


class ParallelConfig(BaseModel, frozen=True):
    """Root configuration aggregate for a bigml-parallel run."""

    bigml: BigMLConfig
    policies: PolicySet = PolicySet()
