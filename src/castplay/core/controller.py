"""Playback state machine arbitrating between the local and remote backends.

The controller is the single source of truth for ``PlaybackState``. It
reacts to user intent (play, pause, seek) and to remote session lifecycle
signals, commands both transports, drives the progress scheduler and tells
the view which affordance the play/pause button offers.

Internally the state is kept as two axes, the authoritative backend and
the playback phase; ``state`` composes them into the flat eight-value enum.

Remote requests complete asynchronously. Each request remembers the
generation it was issued in; every transition bumps the generation, so a
completion arriving after the state moved on is discarded instead of
overriding newer intent.
"""

import logging
from collections.abc import Callable
from typing import TYPE_CHECKING

from PySide6.QtCore import QObject, Signal, Slot

from castplay.core.cast_session import Completion, RemoteSession
from castplay.core.scheduler import (
    DEFAULT_CAST_INTERVAL_MS,
    DEFAULT_LOCAL_INTERVAL_MS,
    ProgressSyncScheduler,
)
from castplay.core.transport import LocalTransport
from castplay.models.media_item import MediaItem
from castplay.models.playback_state import (
    LOCAL_TIMER_STATES,
    ActiveBackend,
    Affordance,
    PlaybackPhase,
    PlaybackState,
)
from castplay.models.session_status import CastSessionStatus

if TYPE_CHECKING:
    from castplay.ui.player_view import PlayerView

logger = logging.getLogger(__name__)


class PlaybackController(QObject):
    """Playback state machine for one media item.

    Example:
        controller = PlaybackController(transport, session, item)
        controller.connect_to_view(view)

        # Flow for a tap on the play button with a receiver connected:
        # PlayerView.play_pressed -> on_user_press_play
        # -> start_remote_play (state playCast, local paused)
        # -> RemoteSession.start_selected_item_remotely
        # -> completion(True) -> scheduler.schedule_cast_timer
    """

    state_changed = Signal(object)  # PlaybackState
    affordance_changed = Signal(object)  # Affordance

    def __init__(
        self,
        transport: LocalTransport,
        remote: RemoteSession,
        media_item: MediaItem,
        local_interval_ms: int = DEFAULT_LOCAL_INTERVAL_MS,
        cast_interval_ms: int = DEFAULT_CAST_INTERVAL_MS,
        parent: QObject | None = None,
    ) -> None:
        """Initialize the controller.

        The initial state is ``createdCast`` when the remote session is
        already connected, ``created`` otherwise.

        Args:
            transport: Local media transport.
            remote: Remote cast session.
            media_item: Item being played.
            local_interval_ms: Progress period while the local backend is authoritative.
            cast_interval_ms: Progress period while the remote backend is authoritative.
            parent: Optional parent QObject.
        """
        super().__init__(parent)
        self._transport = transport
        self._remote = remote
        self._media_item = media_item
        self._generation = 0
        self._affordance = Affordance.PLAY

        initial = (
            PlaybackState.CREATED_CAST
            if remote.has_connection_established
            else PlaybackState.CREATED
        )
        self._backend: ActiveBackend = initial.backend
        self._phase: PlaybackPhase = initial.phase

        self._scheduler = ProgressSyncScheduler(
            lambda: self.state,
            transport,
            remote,
            local_interval_ms=local_interval_ms,
            cast_interval_ms=cast_interval_ms,
            parent=self,
        )

        remote.add_session_status_listener(self.on_session_status)
        remote.add_media_finished_listener(self.on_remote_playback_finished)
        logger.debug("PlaybackController created in %s for %r", initial, media_item.name)

    @property
    def state(self) -> PlaybackState:
        """Return the current playback state."""
        return PlaybackState.compose(self._backend, self._phase)

    @property
    def affordance(self) -> Affordance:
        """Return what the play/pause button currently offers."""
        return self._affordance

    @property
    def scheduler(self) -> ProgressSyncScheduler:
        """Return the progress scheduler driven by this controller."""
        return self._scheduler

    @property
    def media_item(self) -> MediaItem:
        """Return the item being played."""
        return self._media_item

    # User intent

    @Slot()
    def on_user_press_play(self) -> None:
        """Handle a tap on the play affordance.

        Every branch shows the pause affordance before a remote request is
        issued, so a completion that fails over synchronously has the last word.
        """
        state = self.state

        if state.backend is ActiveBackend.LOCAL:
            if state is PlaybackState.FINISHED:
                self._transport.seek(0.0)
            self._resume_local()
        elif state is PlaybackState.CREATED_CAST:
            self._scheduler.schedule_cast_timer()
            self.start_remote_play(resume_on_failure=True)
        elif state is PlaybackState.FINISHED_CAST:
            self._transport.seek(0.0)
            self.start_remote_play(resume_on_failure=True)
        else:
            self._scheduler.schedule_cast_timer()
            self._transport.pause()
            self._set_state(PlaybackState.PLAY_CAST)
            self.continue_remote_play()

    @Slot()
    def on_user_press_pause(self) -> None:
        """Handle a tap on the pause affordance.

        The play affordance is shown before a remote request is issued, so a
        completion that fails over synchronously has the last word.
        """
        state = self.state

        if state is PlaybackState.PLAY:
            self._transport.pause()
            self._set_state(PlaybackState.PAUSE)
            self._set_affordance(Affordance.PLAY)
        elif state.is_cast:
            self._transport.pause()
            self._set_state(PlaybackState.PAUSE_CAST)
            self.pause_remote_play()
        else:
            self._transport.pause()
            self._set_affordance(Affordance.PLAY)

    @Slot(float)
    def seek_to_fraction(self, fraction: float) -> None:
        """Seek to ``fraction`` of the local asset's duration.

        Skipped while the duration is unknown.
        """
        duration = self._transport.duration()
        if duration is None or duration <= 0:
            logger.debug("Ignoring seek to %.3f: duration unknown", fraction)
            return
        self.seek_to(duration * min(1.0, max(0.0, fraction)))

    def seek_to(self, seconds: float) -> None:
        """Seek the local transport, and the receiver while it is authoritative."""
        self._transport.seek(seconds)
        state = self.state

        if state is PlaybackState.FINISHED:
            self._set_state(PlaybackState.PAUSE)
            self._scheduler.schedule_local_timer()
        elif state in (PlaybackState.PLAY_CAST, PlaybackState.PAUSE_CAST):
            completion = self._guard(
                "seek",
                on_success=None,
                on_failure=lambda: self._fail_over_to_local(resume=self.state.is_playing),
            )
            self._remote.seek_selected_item_remotely(seconds, completion)

    # Remote playback

    def start_remote_play(self, resume_on_failure: bool = True) -> None:
        """Hand playback to the receiver at the local position.

        Position and duration are read before the local transport is
        paused, while it is still the source of truth.

        Args:
            resume_on_failure: Whether a failed start falls back to local
                playing (True) or local paused (False).
        """
        position = self._transport.current_time() or 0.0
        duration = self._transport.duration()

        self._set_state(PlaybackState.PLAY_CAST)
        self._transport.pause()
        self._scheduler.schedule_cast_timer()
        self._set_affordance(Affordance.PAUSE)

        media = self._media_item.to_cast_media_info(duration)
        completion = self._guard(
            "start",
            on_success=self._scheduler.schedule_cast_timer,
            on_failure=lambda: self._fail_over_to_local(resume=resume_on_failure),
        )
        logger.info("Starting remote playback of %r at %.1fs", self._media_item.name, position)
        self._remote.start_selected_item_remotely(media, position, completion)

    def continue_remote_play(self) -> None:
        """Resume playback on the receiver."""
        self._set_state(PlaybackState.PLAY_CAST)
        self._transport.pause()
        self._scheduler.schedule_cast_timer()
        self._set_affordance(Affordance.PAUSE)

        completion = self._guard(
            "resume",
            on_success=self._scheduler.schedule_cast_timer,
            on_failure=lambda: self._fail_over_to_local(resume=True),
        )
        self._remote.play_selected_item_remotely(completion)

    def pause_remote_play(self) -> None:
        """Pause playback on the receiver.

        A failed pause falls back to local playing, mirroring the play path.
        """
        self._set_state(PlaybackState.PAUSE_CAST)
        self._transport.pause()
        self._set_affordance(Affordance.PLAY)

        completion = self._guard(
            "pause",
            on_success=None,
            on_failure=lambda: self._fail_over_to_local(resume=True),
        )
        self._remote.pause_selected_item_remotely(completion)

    # Lifecycle and end of media

    def on_session_status(self, status: CastSessionStatus) -> None:
        """React to a remote session lifecycle signal."""
        state = self.state
        logger.debug("Session %s in %s", status, state)

        if status is CastSessionStatus.STARTED:
            self.start_remote_play(resume_on_failure=state.is_playing)
        elif status is CastSessionStatus.RESUMED:
            self.continue_remote_play()
        elif status in (CastSessionStatus.ENDED, CastSessionStatus.FAILED_TO_START):
            if state is PlaybackState.PLAY_CAST:
                self._fail_over_to_local(resume=True)
            elif state is PlaybackState.PAUSE_CAST:
                self._fail_over_to_local(resume=False)

    @Slot()
    def on_local_playback_finished(self) -> None:
        """Handle end of media on the local transport."""
        if self.state is not PlaybackState.PLAY:
            return
        self._scheduler.push_local_progress()
        self._set_state(PlaybackState.FINISHED)
        self._scheduler.stop()
        self._set_affordance(Affordance.PLAY)

    def on_remote_playback_finished(self) -> None:
        """Handle end of media on the receiver."""
        if self.state is not PlaybackState.PLAY_CAST:
            return
        self._set_state(PlaybackState.FINISHED_CAST)
        self._scheduler.stop()
        self._set_affordance(Affordance.PLAY)

    # View wiring

    def connect_to_view(self, view: "PlayerView") -> None:
        """Connect view intent to the controller and progress back to the view.

        Args:
            view: The player view.
        """
        view.play_pressed.connect(self.on_user_press_play)
        view.pause_pressed.connect(self.on_user_press_pause)
        view.seek_requested.connect(self.seek_to_fraction)
        self.affordance_changed.connect(view.set_affordance)
        self._scheduler.progress_updated.connect(view.set_progress)
        self._scheduler.times_updated.connect(view.set_times)
        view.set_affordance(self._affordance)

    def shutdown(self) -> None:
        """Stop progress reporting; pending completions become stale."""
        self._scheduler.stop()
        self._generation += 1

    # Internals

    def _resume_local(self) -> None:
        """Make the local transport authoritative and playing."""
        if self.state not in LOCAL_TIMER_STATES:
            self._set_state(PlaybackState.PAUSE)
        self._scheduler.schedule_local_timer()
        self._transport.play()
        self._set_state(PlaybackState.PLAY)
        self._set_affordance(Affordance.PAUSE)

    def _fail_over_to_local(self, resume: bool) -> None:
        """Make the local transport authoritative after a remote failure.

        Args:
            resume: Whether local playback resumes (True) or stays paused.
        """
        logger.warning(
            "Falling back to local playback from %s (%s)",
            self.state,
            "playing" if resume else "paused",
        )
        if resume:
            self._resume_local()
            return
        self._set_state(PlaybackState.PAUSE)
        self._transport.pause()
        self._scheduler.schedule_local_timer()
        self._set_affordance(Affordance.PLAY)

    def _guard(
        self,
        request: str,
        on_success: Callable[[], None] | None,
        on_failure: Callable[[], None],
    ) -> Completion:
        """Wrap a remote completion so it only acts in the generation it was issued in."""
        token = self._generation

        def completion(done: bool) -> None:
            if token != self._generation:
                logger.debug("Discarding stale %s completion (done=%s)", request, done)
                return
            if done:
                if on_success is not None:
                    on_success()
                return
            logger.warning("Remote %s failed in %s", request, self.state)
            on_failure()

        return completion

    def _set_state(self, state: PlaybackState) -> None:
        """Move to ``state`` and start a new generation."""
        previous = self.state
        self._backend = state.backend
        self._phase = state.phase
        self._generation += 1
        if state is not previous:
            logger.debug("Playback state %s -> %s", previous, state)
            self.state_changed.emit(state)

    def _set_affordance(self, affordance: Affordance) -> None:
        """Update the play/pause affordance shown by the view."""
        self._affordance = affordance
        self.affordance_changed.emit(affordance)
