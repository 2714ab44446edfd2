"""Structlog implementation of the ClientObserver port."""

import structlog


class StructlogClientObserver:
    """Delegates BigML client events to structlog.

    Satisfies the ClientObserver protocol structurally.
    """

    def __init__(self) -> None:
        self._log = structlog.get_logger()

    def request_sent(self, method: str, url: str) -> None:
        self._log.debug("client.request_sent", method=method, url=url)

    def request_succeeded(self, method: str, url: str, status_code: int) -> None:
        self._log.debug(
            "client.request_succeeded", method=method, url=url, status_code=status_code
        )

    def request_failed(self, method: str, url: str, reason: str) -> None:
        self._log.warning("client.request_failed", method=method, url=url, reason=reason)

    def download_not_ready(self, url: str) -> None:
        self._log.debug("client.download_not_ready", url=url)
