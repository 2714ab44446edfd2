"""Resource models — the generic BigML resource envelope and script executions.

Only the fields the library acts on are declared. Everything else BigML sends
is kept as extra data, so a fetched resource serialises back without loss.
"""

from typing import Any

from pydantic import BaseModel, ConfigDict, Field, model_serializer, model_validator

from bigml_parallel.resource.domain.errors import (
    CouldNotGetOutputError,
    OutputNotAvailableError,
)
from bigml_parallel.resource.domain.id import resource_type
from bigml_parallel.resource.domain.status import ResourceStatus


class Resource(BaseModel):
    """A remote, asynchronously processed BigML resource."""

    model_config = ConfigDict(frozen=True, extra="allow")

    resource: str = Field(min_length=1)
    status: ResourceStatus

    @property
    def id(self) -> str:
        return self.resource

    def to_json_dict(self) -> dict[str, Any]:
        """Dump back to BigML's JSON, omitting declared fields BigML never sent."""
        return self.model_dump(mode="json", by_alias=True, exclude_unset=True)


class Output(BaseModel):
    """A named output value from an execution.

    BigML sends outputs as ``[name, value, type]`` triples, and we write them
    back the same way.
    """

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    name: str
    value: Any = None
    type_: str | None = Field(default=None, alias="type")

    @model_validator(mode="before")
    @classmethod
    def _from_triple(cls, data: Any) -> Any:
        if isinstance(data, list | tuple):
            name, value, type_ = (list(data) + [None, None])[:3]
            return {"name": name, "value": value, "type": type_}
        return data

    @model_serializer
    def _to_triple(self) -> list[Any]:
        return [self.name, self.value, self.type_]

    def get(self) -> Any:
        """Return the output value.

        Raises:
            CouldNotGetOutputError: if the value has not been computed yet.
        """
        if self.value is None:
            raise CouldNotGetOutputError(name=self.name, source=OutputNotAvailableError())
        return self.value


class ExecutionData(BaseModel):
    model_config = ConfigDict(frozen=True, extra="allow")

    outputs: list[Output] = []


class Execution(Resource):
    """A WhizzML script execution."""

    execution: ExecutionData = Field(default_factory=ExecutionData)

    def output(self, name: str) -> Output | None:
        return next((o for o in self.execution.outputs if o.name == name), None)


_RESOURCE_CLASSES: dict[str, type[Resource]] = {
    "execution": Execution,
}


def resource_class_for(resource_id: str) -> type[Resource]:
    """Return the model used to parse resources with this id's type prefix."""
    return _RESOURCE_CLASSES.get(resource_type(resource_id), Resource)
