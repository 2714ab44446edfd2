"""ExecutionArgs — the request body used to create a WhizzML script execution."""

from typing import Any, ClassVar, Self

from pydantic import BaseModel, field_validator

from bigml_parallel.resource.domain.id import check_resource_id
from bigml_parallel.resource.domain.resource import Execution


class ExecutionArgs(BaseModel, frozen=True):
    """Arguments for creating a script execution.

    Inputs are sent as ``[name, value]`` pairs, in the order they were added.
    """

    create_path: ClassVar[str] = "execution"
    resource_class: ClassVar[type[Execution]] = Execution

    script: str
    name: str | None = None
    inputs: list[tuple[str, Any]] = []
    outputs: list[str] = []
    tags: list[str] = []

    @field_validator("script")
    @classmethod
    def _script_id(cls, value: str) -> str:
        return check_resource_id(value, expected_type="script")

    def with_input(self, name: str, value: Any) -> Self:
        # WhizzML cannot take null inputs: either pass a value or omit the input.
        if value is None:
            return self
        return self.model_copy(update={"inputs": [*self.inputs, (name, value)]})

    def with_output(self, name: str) -> Self:
        return self.model_copy(update={"outputs": [*self.outputs, name]})

    def to_request_body(self) -> dict[str, Any]:
        body: dict[str, Any] = {"script": self.script}
        if self.name is not None:
            body["name"] = self.name
        if self.inputs:
            body["inputs"] = [[name, value] for name, value in self.inputs]
        if self.outputs:
            body["outputs"] = list(self.outputs)
        if self.tags:
            body["tags"] = list(self.tags)
        return body
