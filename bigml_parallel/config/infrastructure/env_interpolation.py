"""Recursive ``${ENV_VAR}`` / ``${ENV_VAR:-default}`` interpolation for raw config data."""

import os
import re

_ENV_VAR_PATTERN = re.compile(
    r"\$\{(?P<name>[A-Za-z_][A-Za-z0-9_]*)(?::-(?P<default>[^}]*))?\}"
)

type RawValue = (
    str | int | float | bool | None | list["RawValue"] | dict[str, "RawValue"]
)


def collect_missing_vars(data: RawValue) -> list[str]:
    """
    Walk the data tree and return the names of all referenced env vars that
    are unset and have no inline default. Every one is collected before returning.
    """
    missing: list[str] = []
    _collect(data, missing)
    return missing


def _collect(data: RawValue, missing: list[str]) -> None:
    if isinstance(data, str):
        for match in _ENV_VAR_PATTERN.finditer(data):
            name = match.group("name")
            if (
                match.group("default") is None
                and name not in os.environ
                and name not in missing
            ):
                missing.append(name)
    elif isinstance(data, list):
        for item in data:
            _collect(item, missing)
    elif isinstance(data, dict):
        for value in data.values():
            _collect(value, missing)


def _substitute(match: re.Match[str]) -> str:
    name = match.group("name")
    default = match.group("default")
    if default is not None:
        return os.environ.get(name, default)
    return os.environ[name]


def interpolate(data: RawValue) -> RawValue:
    """
    Recursively substitute every env var reference with its runtime value.

    Call `collect_missing_vars` first; a reference without a default to an
    unset variable raises KeyError here.
    """
    if isinstance(data, str):
        return _ENV_VAR_PATTERN.sub(_substitute, data)
    if isinstance(data, list):
        return [interpolate(item) for item in data]
    if isinstance(data, dict):
        return {key: interpolate(value) for key, value in data.items()}
    return data
