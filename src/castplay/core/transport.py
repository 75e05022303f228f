"""Local transport contract and its QMediaPlayer adapter.

Positions and durations are exchanged in seconds. ``duration()`` returns
None until the asset has loaded far enough to know it; every caller treats
None as "skip this update".
"""

import logging
from typing import Protocol, runtime_checkable

from PySide6.QtCore import QObject, QUrl, Signal
from PySide6.QtMultimedia import QAudioOutput, QMediaPlayer

logger = logging.getLogger(__name__)

_MS_PER_SECOND = 1000.0


@runtime_checkable
class LocalTransport(Protocol):
    """Primitives the playback controller needs from the on-device player."""

    def play(self) -> None:
        """Start or resume playback."""
        ...

    def pause(self) -> None:
        """Pause playback, keeping the position."""
        ...

    def seek(self, seconds: float) -> None:
        """Move to ``seconds`` from the start."""
        ...

    def current_time(self) -> float | None:
        """Return the current position, or None if no asset is loaded."""
        ...

    def duration(self) -> float | None:
        """Return the asset duration, or None if not yet known."""
        ...


class QtMediaTransport(QObject):
    """LocalTransport backed by ``QMediaPlayer``.

    Example:
        transport = QtMediaTransport()
        transport.set_video_output(video_widget)
        transport.load("https://example.com/movie.mp4")
        transport.play()
    """

    playback_finished = Signal()  # End of media reached
    playing_changed = Signal(bool)
    error_occurred = Signal(str)

    def __init__(self, player: QMediaPlayer | None = None, parent: QObject | None = None) -> None:
        """Initialize the adapter.

        Args:
            player: Player to wrap; a new one with an audio output is created if None.
            parent: Optional parent QObject.
        """
        super().__init__(parent)
        self._audio_output: QAudioOutput | None = None
        if player is None:
            player = QMediaPlayer(self)
            self._audio_output = QAudioOutput(self)
            player.setAudioOutput(self._audio_output)
        self._player = player
        self._loaded = False

        self._player.mediaStatusChanged.connect(self._on_media_status_changed)
        self._player.playbackStateChanged.connect(self._on_playback_state_changed)
        self._player.errorOccurred.connect(self._on_error_occurred)

    @property
    def player(self) -> QMediaPlayer:
        """Return the wrapped player."""
        return self._player

    @property
    def is_loaded(self) -> bool:
        """Return True once the asset is loaded and its duration is known."""
        return self._loaded

    @property
    def is_playing(self) -> bool:
        """Return True while the player is in the playing state."""
        return self._player.playbackState() == QMediaPlayer.PlaybackState.PlayingState

    def set_video_output(self, output: QObject) -> None:
        """Attach a video widget or sink."""
        self._player.setVideoOutput(output)

    def load(self, url: str) -> None:
        """Load an asset from a URL or local path."""
        source = QUrl(url)
        if source.isRelative():
            source = QUrl.fromLocalFile(url)
        logger.debug("Loading local asset %s", source.toString())
        self._loaded = False
        self._player.setSource(source)

    def unload(self) -> None:
        """Stop and drop the current asset."""
        self._player.stop()
        self._player.setSource(QUrl())
        self._loaded = False

    # LocalTransport

    def play(self) -> None:
        """Start or resume playback."""
        self._player.play()

    def pause(self) -> None:
        """Pause playback."""
        self._player.pause()

    def seek(self, seconds: float) -> None:
        """Seek to ``seconds``."""
        self._player.setPosition(int(max(0.0, seconds) * _MS_PER_SECOND))

    def current_time(self) -> float | None:
        """Return the current position in seconds."""
        if self._player.source().isEmpty():
            return None
        return self._player.position() / _MS_PER_SECOND

    def duration(self) -> float | None:
        """Return the duration in seconds, or None if unknown."""
        duration_ms = self._player.duration()
        if duration_ms <= 0:
            return None
        return duration_ms / _MS_PER_SECOND

    # Qt signal handlers

    def _on_media_status_changed(self, status: QMediaPlayer.MediaStatus) -> None:
        """Track load completion and end of media."""
        if status in (
            QMediaPlayer.MediaStatus.LoadedMedia,
            QMediaPlayer.MediaStatus.BufferedMedia,
        ):
            self._loaded = True
        elif status == QMediaPlayer.MediaStatus.EndOfMedia:
            logger.debug("Local asset reached end of media")
            self.playback_finished.emit()
        elif status in (QMediaPlayer.MediaStatus.NoMedia, QMediaPlayer.MediaStatus.InvalidMedia):
            self._loaded = False

    def _on_playback_state_changed(self, state: QMediaPlayer.PlaybackState) -> None:
        """Forward playing/not-playing changes."""
        self.playing_changed.emit(state == QMediaPlayer.PlaybackState.PlayingState)

    def _on_error_occurred(self, error: QMediaPlayer.Error, error_string: str) -> None:
        """Log and forward player errors."""
        message = f"QMediaPlayer error {getattr(error, 'name', error)}: {error_string}"
        logger.error(message)
        self._loaded = False
        self.error_occurred.emit(message)
