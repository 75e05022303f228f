"""Remote cast session lifecycle signals."""

from enum import StrEnum


class CastSessionStatus(StrEnum):
    """Lifecycle signal delivered by a remote session.

    Only ``STARTED``, ``RESUMED``, ``ENDED`` and ``FAILED_TO_START`` drive
    playback; everything else arrives as ``OTHER`` and is ignored.
    """

    STARTED = "started"
    RESUMED = "resumed"
    ENDED = "ended"
    FAILED_TO_START = "failedToStart"
    OTHER = "other"

    @classmethod
    def from_string(cls, value: str) -> "CastSessionStatus":
        """Parse a wire status string, mapping unknown values to OTHER."""
        for status in cls:
            if status.value.lower() == value.lower():
                return status
        return cls.OTHER
