"""Structlog implementation of the ConfigObserver port."""

import structlog


class StructlogConfigObserver:
    """Delegates config domain events to structlog.

    Satisfies the ConfigObserver protocol structurally.
    """

    def __init__(self) -> None:
        self._log = structlog.get_logger()

    def config_loaded(self, source: str, domain: str) -> None:
        self._log.info("config.loaded", source=source, domain=domain)

    def config_domain_overridden(self, domain: str) -> None:
        self._log.info(
            "config.domain_overridden",
            domain=domain,
            message="BIGML_DOMAIN overrides the configured domain",
        )
