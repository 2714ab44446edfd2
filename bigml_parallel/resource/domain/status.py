"""Types representing the status of a BigML resource."""

from enum import IntEnum

from pydantic import BaseModel, ConfigDict


class StatusCode(IntEnum):
    """A BigML status code, as serialised on the wire."""

    WAITING = 0
    QUEUED = 1
    STARTED = 2
    IN_PROGRESS = 3
    SUMMARIZED = 4
    FINISHED = 5
    FAULTY = -1
    UNKNOWN = -2

    def is_working(self) -> bool:
        """Is BigML still ingesting or processing this resource?"""
        return 0 <= self.value <= StatusCode.SUMMARIZED.value

    def is_ready(self) -> bool:
        return self is StatusCode.FINISHED

    def is_err(self) -> bool:
        return self in (StatusCode.FAULTY, StatusCode.UNKNOWN)


class ResourceStatus(BaseModel):
    """Status block shared by most BigML resource types."""

    model_config = ConfigDict(frozen=True, extra="allow")

    code: StatusCode
    message: str = ""
    elapsed: int | None = None
    progress: float | None = None
