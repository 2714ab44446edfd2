"""ExecutionInput — a ``name=value`` script input given on the command line."""

import json
from typing import Any, Self

from pydantic import BaseModel, Field

from bigml_parallel.execution.domain.errors import InvalidInputError


def _reject_constant(name: str) -> Any:
    # NaN and Infinity are not JSON; such values are sent as plain strings.
    raise json.JSONDecodeError(f"{name} is not a JSON value", name, 0)


class ExecutionInput(BaseModel, frozen=True):
    """A named input for a WhizzML execution.

    ``from_json`` records whether the value parsed as JSON or fell back to a
    plain string.
    """

    name: str = Field(min_length=1)
    value: Any
    from_json: bool = True

    @classmethod
    def parse(cls, text: str) -> Self:
        """Parse ``"name=value"``, treating the value as JSON when possible.

        Raises:
            InvalidInputError: if ``text`` has no ``=`` or an empty name.
        """
        name, sep, raw_value = text.partition("=")
        if not sep or not name:
            raise InvalidInputError(text=text)
        try:
            return cls(
                name=name,
                value=json.loads(raw_value, parse_constant=_reject_constant),
            )
        except json.JSONDecodeError:
            return cls(name=name, value=raw_value, from_json=False)
