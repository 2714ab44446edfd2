"""Observer port for the BigML client — defines events in domain language."""

from typing import Protocol


class ClientObserver(Protocol):
    """Observer port emitting structured events for each HTTP round trip.

    URLs passed to these events are already redacted.
    """

    def request_sent(self, method: str, url: str) -> None: ...

    def request_succeeded(self, method: str, url: str, status_code: int) -> None: ...

    def request_failed(self, method: str, url: str, reason: str) -> None: ...

    def download_not_ready(self, url: str) -> None: ...
