"""Progress sync scheduler: one periodic position report at a time.

The scheduler is the only owner of the two timer handles. Scheduling one
mode always stops both timers first, so at most one of them is alive, and
a timer is only created when the current playback state allows it.
"""

import logging
from collections.abc import Callable

from PySide6.QtCore import QObject, QTimer, Signal, Slot

from castplay.core.cast_session import RemoteSession
from castplay.core.timefmt import format_clock
from castplay.core.transport import LocalTransport
from castplay.models.playback_state import (
    CAST_TIMER_STATES,
    LOCAL_TIMER_STATES,
    ActiveBackend,
    PlaybackState,
)

logger = logging.getLogger(__name__)

DEFAULT_LOCAL_INTERVAL_MS = 1000
DEFAULT_CAST_INTERVAL_MS = 500

StateProvider = Callable[[], PlaybackState]


class ProgressSyncScheduler(QObject):
    """Pull position from the authoritative transport and push it to the UI.

    Local ticks read the local transport directly. Remote ticks ask the
    remote session for its position and combine it with the duration of
    the local asset, which stays loaded (paused) while casting.

    Example:
        scheduler = ProgressSyncScheduler(lambda: controller.state, transport, session)
        scheduler.progress_updated.connect(view.set_progress)
        scheduler.times_updated.connect(view.set_times)
        scheduler.schedule_local_timer()
    """

    progress_updated = Signal(float)  # Fraction 0.0-1.0
    times_updated = Signal(str, str)  # (current, total) clock strings

    # Routes schedule requests onto this object's thread
    _schedule_requested = Signal(object)

    def __init__(
        self,
        state_provider: StateProvider,
        transport: LocalTransport,
        remote: RemoteSession,
        local_interval_ms: int = DEFAULT_LOCAL_INTERVAL_MS,
        cast_interval_ms: int = DEFAULT_CAST_INTERVAL_MS,
        parent: QObject | None = None,
    ) -> None:
        """Initialize the scheduler.

        Args:
            state_provider: Returns the current playback state.
            transport: Local transport, polled by local ticks.
            remote: Remote session, polled by remote ticks.
            local_interval_ms: Local tick period.
            cast_interval_ms: Remote tick period.
            parent: Optional parent QObject.
        """
        super().__init__(parent)
        self._state_provider = state_provider
        self._transport = transport
        self._remote = remote
        self._local_interval_ms = local_interval_ms
        self._cast_interval_ms = cast_interval_ms
        self._local_timer: QTimer | None = None
        self._cast_timer: QTimer | None = None
        self._position_request_pending = False

        self._schedule_requested.connect(self._apply_schedule)

    @property
    def local_timer_active(self) -> bool:
        """Return True if the local-rate timer is alive."""
        return self._local_timer is not None and self._local_timer.isActive()

    @property
    def cast_timer_active(self) -> bool:
        """Return True if the remote-rate timer is alive."""
        return self._cast_timer is not None and self._cast_timer.isActive()

    @property
    def local_interval_ms(self) -> int:
        """Return the local tick period."""
        return self._local_interval_ms

    @property
    def cast_interval_ms(self) -> int:
        """Return the remote tick period."""
        return self._cast_interval_ms

    def set_intervals(self, local_interval_ms: int, cast_interval_ms: int) -> None:
        """Change tick periods; applies to the next schedule call."""
        self._local_interval_ms = local_interval_ms
        self._cast_interval_ms = cast_interval_ms

    def schedule_local_timer(self) -> None:
        """Replace any timer with a local-rate timer if the state allows it.

        Safe to call from any thread; the swap runs on the scheduler's thread.
        """
        self._schedule_requested.emit(ActiveBackend.LOCAL)

    def schedule_cast_timer(self) -> None:
        """Replace any timer with a remote-rate timer if the state allows it.

        Safe to call from any thread; the swap runs on the scheduler's thread.
        """
        self._schedule_requested.emit(ActiveBackend.REMOTE)

    def stop(self) -> None:
        """Stop both timers."""
        self._invalidate_timers()

    @Slot(object)
    def _apply_schedule(self, backend: ActiveBackend) -> None:
        """Invalidate both timers, then start the requested one if eligible."""
        self._invalidate_timers()
        state = self._state_provider()

        if backend is ActiveBackend.LOCAL:
            if state in LOCAL_TIMER_STATES:
                self._local_timer = self._create_timer(self._local_interval_ms, self._on_local_tick)
                logger.debug("Local timer started (%d ms) in %s", self._local_interval_ms, state)
            else:
                logger.debug("Local timer not started in %s", state)
        elif state in CAST_TIMER_STATES:
            self._cast_timer = self._create_timer(self._cast_interval_ms, self._on_cast_tick)
            logger.debug("Cast timer started (%d ms) in %s", self._cast_interval_ms, state)
        else:
            logger.debug("Cast timer not started in %s", state)

    def _create_timer(self, interval_ms: int, on_timeout: Callable[[], None]) -> QTimer:
        """Create and start a repeating timer owned by this scheduler."""
        timer = QTimer(self)
        timer.setInterval(interval_ms)
        timer.timeout.connect(on_timeout)
        timer.start()
        return timer

    def _invalidate_timers(self) -> None:
        """Stop and release both timer handles."""
        for timer in (self._local_timer, self._cast_timer):
            if timer is not None:
                timer.stop()
                timer.deleteLater()
        self._local_timer = None
        self._cast_timer = None
        self._position_request_pending = False

    # Ticks

    def _on_local_tick(self) -> None:
        """Report the local transport position."""
        self.push_local_progress()

    def push_local_progress(self) -> bool:
        """Push the local position to the UI.

        Returns:
            True if an update was pushed, False if the asset is not ready.
        """
        position = self._transport.current_time()
        duration = self._transport.duration()
        if position is None or duration is None or duration <= 0:
            logger.debug("Skipping progress update: local asset not ready")
            return False
        self._push(position, duration)
        return True

    def _on_cast_tick(self) -> None:
        """Ask the remote session for its position."""
        if self._position_request_pending:
            return
        self._position_request_pending = True
        timer = self._cast_timer
        self._remote.request_remote_position(
            lambda position: self._on_remote_position(timer, position)
        )

    def _on_remote_position(self, timer: QTimer | None, position: float | None) -> None:
        """Push a remote position if the timer that asked is still alive."""
        if timer is None or timer is not self._cast_timer:
            return
        self._position_request_pending = False
        if position is None:
            return
        duration = self._transport.duration()
        if duration is None or duration <= 0:
            logger.debug("Skipping remote progress update: duration unknown")
            return
        self._push(position, duration)

    def _push(self, position: float, duration: float) -> None:
        """Emit slider fraction and clock strings."""
        fraction = min(1.0, max(0.0, position / duration))
        self.progress_updated.emit(fraction)
        self.times_updated.emit(format_clock(position), format_clock(duration))
