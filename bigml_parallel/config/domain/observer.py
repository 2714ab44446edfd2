"""Observer port for the config domain."""

from typing import Protocol


class ConfigObserver(Protocol):
    def config_loaded(self, source: str, domain: str) -> None: ...

    def config_domain_overridden(self, domain: str) -> None: ...
