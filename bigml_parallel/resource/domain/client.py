"""ResourceClient Protocol — the two network calls the execution driver needs."""

from typing import Protocol

from bigml_parallel.execution.domain.args import ExecutionArgs
from bigml_parallel.resource.domain.resource import Execution, Resource


class ResourceClient(Protocol):
    """Structural interface satisfied by BigMLClient and by test fakes.

    Each call is a single network attempt; retrying is the caller's job.
    """

    async def create(self, args: ExecutionArgs) -> Execution: ...

    async def fetch(self, resource_id: str) -> Resource: ...
