"""YAML config loader — parses, interpolates env vars, validates, and emits observer events."""

import os
from pathlib import Path
from typing import Any

import yaml
from pydantic import ValidationError

from bigml_parallel.config.domain.config import ParallelConfig
from bigml_parallel.config.domain.observer import ConfigObserver
from bigml_parallel.config.infrastructure.env_interpolation import (
    collect_missing_vars,
    interpolate,
)
from bigml_parallel.config.infrastructure.errors import (
    ConfigLoadError,
    ConfigValidationError,
    MissingEnvVarsError,
)

DOMAIN_ENV_VAR = "BIGML_DOMAIN"

# Used when no --config file is given: credentials come straight from the
# environment and every policy keeps its default.
_DEFAULT_DOCUMENT: dict[str, Any] = {
    "bigml": {
        "username": "${BIGML_USERNAME}",
        "api_key": "${BIGML_API_KEY}",
    },
}


class YamlConfigLoader:
    """Loads, interpolates, validates, and returns a ParallelConfig."""

    def __init__(self, observer: ConfigObserver) -> None:
        self._observer = observer

    def load(self, path: Path | None = None) -> ParallelConfig:
        """
        Load the config from ``path``, or from the environment if ``path`` is None.

        Raises:
            ConfigLoadError: if the file is missing or is not valid YAML.
            MissingEnvVarsError: if any ${ENV_VAR} references are unset (all collected first).
            ConfigValidationError: if the schema is violated.
        """
        raw = _DEFAULT_DOCUMENT if path is None else _parse_yaml(path=path)
        _check_missing_env_vars(raw=raw)
        interpolated = _apply_domain_override(
            raw=interpolate(raw), observer=self._observer
        )
        cfg = _build_config(resolved=interpolated)
        self._observer.config_loaded(
            source="environment" if path is None else str(path),
            domain=cfg.bigml.domain,
        )
        return cfg


def _parse_yaml(path: Path) -> Any:
    try:
        with path.open("r", encoding="utf-8") as fh:
            return yaml.safe_load(fh) or {}
    except FileNotFoundError as exc:
        raise ConfigLoadError(path=path) from exc
    except yaml.YAMLError as exc:
        raise ConfigLoadError(path=path, reason=f"invalid YAML ({exc})") from exc


def _check_missing_env_vars(raw: Any) -> None:
    """Raise MissingEnvVarsError if any ${ENV_VAR} references in raw are unset."""
    missing = collect_missing_vars(raw)
    if missing:
        raise MissingEnvVarsError(missing)


def _apply_domain_override(raw: Any, observer: ConfigObserver) -> Any:
    domain = os.environ.get(DOMAIN_ENV_VAR)
    if not domain or not isinstance(raw, dict):
        return raw
    observer.config_domain_overridden(domain=domain)
    bigml = raw.get("bigml") or {}
    return {**raw, "bigml": {**bigml, "domain": domain}}


def _build_config(resolved: Any) -> ParallelConfig:
    try:
        return ParallelConfig.model_validate(resolved)
    except ValidationError as exc:
        raise ConfigValidationError(str(exc)) from exc
