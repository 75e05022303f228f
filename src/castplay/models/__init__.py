"""Data models for playback state, media items and cast sessions."""

from castplay.models.media_item import CastMediaInfo, MediaItem, StreamType
from castplay.models.playback_state import (
    CAST_TIMER_STATES,
    LOCAL_TIMER_STATES,
    ActiveBackend,
    Affordance,
    PlaybackPhase,
    PlaybackState,
)
from castplay.models.receiver_status import ReceiverStatus
from castplay.models.session_status import CastSessionStatus

__all__ = [
    "ActiveBackend",
    "Affordance",
    "CAST_TIMER_STATES",
    "CastMediaInfo",
    "CastSessionStatus",
    "LOCAL_TIMER_STATES",
    "MediaItem",
    "PlaybackPhase",
    "PlaybackState",
    "ReceiverStatus",
    "StreamType",
]
