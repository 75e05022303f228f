"""Snapshot of a cast receiver's media status."""

from dataclasses import dataclass
from typing import Any


@dataclass(frozen=True, slots=True)
class ReceiverStatus:
    """Media status reported by ``Receiver.GetStatus``.

    Attributes:
        position: Current position in seconds, or None if nothing is loaded.
        duration: Duration in seconds, or None if unknown.
        player_state: Receiver player state ("idle", "buffering", "playing", "paused").
    """

    position: float | None = None
    duration: float | None = None
    player_state: str = "idle"

    @property
    def is_playing(self) -> bool:
        """Return True if the receiver reports active playback."""
        return self.player_state == "playing"

    @classmethod
    def from_dict(cls, data: Any) -> "ReceiverStatus":
        """Parse a ``Receiver.GetStatus`` result, tolerating missing fields."""
        if not isinstance(data, dict):
            return cls()
        return cls(
            position=_as_seconds(data.get("position")),
            duration=_as_seconds(data.get("duration")),
            player_state=str(data.get("state", "idle")),
        )


def _as_seconds(value: Any) -> float | None:
    """Convert a wire number to seconds, rejecting negatives and garbage."""
    if isinstance(value, bool) or not isinstance(value, int | float):
        return None
    if value < 0:
        return None
    return float(value)
