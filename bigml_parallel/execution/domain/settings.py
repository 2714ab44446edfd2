"""ExecutionSettings — the immutable arguments shared by every execution task."""

import re

from pydantic import BaseModel, Field

from bigml_parallel.execution.domain.args import ExecutionArgs
from bigml_parallel.execution.domain.input import ExecutionInput


class ExecutionSettings(BaseModel, frozen=True):
    """Everything needed to turn one resource id into one execution request."""

    script: str
    name: str | None = None
    resource_input_name: str = Field(default="resource", min_length=1)
    inputs: list[ExecutionInput] = []
    outputs: list[str] = []
    tags: list[str] = []
    retry_on: re.Pattern[str] | None = None
    retry_count: int = Field(default=0, ge=0)
    max_tasks: int = Field(default=2, ge=1)

    def args_for(self, resource_id: str) -> ExecutionArgs:
        """Build the execution request for ``resource_id``."""
        args = ExecutionArgs(script=self.script, name=self.name, tags=list(self.tags))
        args = args.with_input(self.resource_input_name, resource_id)
        for execution_input in self.inputs:
            args = args.with_input(execution_input.name, execution_input.value)
        for output in self.outputs:
            args = args.with_output(output)
        return args

    def should_retry(self, failure_message: str) -> bool:
        """Does ``--retry-on`` match this remote failure message?"""
        return self.retry_on is not None and self.retry_on.search(failure_message) is not None
