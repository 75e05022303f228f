"""Playback state model.

The exposed ``PlaybackState`` keeps the eight flat values a player view
reports, while the controller reasons about two orthogonal axes:
which backend is authoritative and which phase playback is in.
"""

from enum import Enum, StrEnum


class ActiveBackend(StrEnum):
    """Backend currently receiving play/pause commands and being polled."""

    LOCAL = "local"
    REMOTE = "remote"


class PlaybackPhase(StrEnum):
    """Playback phase, independent of the authoritative backend."""

    CREATED = "created"
    PLAYING = "playing"
    PAUSED = "paused"
    FINISHED = "finished"


class PlaybackState(Enum):
    """Flat playback state: one value per (backend, phase) pair.

    Example:
        state = PlaybackState.compose(ActiveBackend.REMOTE, PlaybackPhase.PAUSED)
        assert state is PlaybackState.PAUSE_CAST
        assert state.is_cast
    """

    CREATED = (ActiveBackend.LOCAL, PlaybackPhase.CREATED)
    CREATED_CAST = (ActiveBackend.REMOTE, PlaybackPhase.CREATED)
    PLAY = (ActiveBackend.LOCAL, PlaybackPhase.PLAYING)
    PLAY_CAST = (ActiveBackend.REMOTE, PlaybackPhase.PLAYING)
    PAUSE = (ActiveBackend.LOCAL, PlaybackPhase.PAUSED)
    PAUSE_CAST = (ActiveBackend.REMOTE, PlaybackPhase.PAUSED)
    FINISHED = (ActiveBackend.LOCAL, PlaybackPhase.FINISHED)
    FINISHED_CAST = (ActiveBackend.REMOTE, PlaybackPhase.FINISHED)

    @property
    def backend(self) -> ActiveBackend:
        """Return the authoritative backend for this state."""
        return self.value[0]

    @property
    def phase(self) -> PlaybackPhase:
        """Return the playback phase for this state."""
        return self.value[1]

    @property
    def is_cast(self) -> bool:
        """Return True if the remote receiver is authoritative."""
        return self.backend is ActiveBackend.REMOTE

    @property
    def is_playing(self) -> bool:
        """Return True if the authoritative backend is playing."""
        return self.phase is PlaybackPhase.PLAYING

    @classmethod
    def compose(cls, backend: ActiveBackend, phase: PlaybackPhase) -> "PlaybackState":
        """Return the flat state for a (backend, phase) pair."""
        return cls((backend, phase))

    def __str__(self) -> str:
        """Return the lower camel-case name used in logs."""
        return _DISPLAY_NAMES[self]


_DISPLAY_NAMES = {
    PlaybackState.CREATED: "created",
    PlaybackState.CREATED_CAST: "createdCast",
    PlaybackState.PLAY: "play",
    PlaybackState.PLAY_CAST: "playCast",
    PlaybackState.PAUSE: "pause",
    PlaybackState.PAUSE_CAST: "pauseCast",
    PlaybackState.FINISHED: "finished",
    PlaybackState.FINISHED_CAST: "finishedCast",
}

# States in which each progress timer may run
LOCAL_TIMER_STATES = frozenset({PlaybackState.PLAY, PlaybackState.PAUSE, PlaybackState.CREATED})
CAST_TIMER_STATES = frozenset(
    {PlaybackState.PLAY_CAST, PlaybackState.PAUSE_CAST, PlaybackState.CREATED_CAST}
)


class Affordance(StrEnum):
    """What the play/pause button offers when tapped."""

    PLAY = "play"
    PAUSE = "pause"

    @property
    def icon_name(self) -> str:
        """Return the icon resource name for this affordance."""
        return f"icon_{self.value}"
