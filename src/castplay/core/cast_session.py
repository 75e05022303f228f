"""Remote session contract and its QThread-hosted cast receiver implementation.

The receiver client is asyncio based while the controller lives on the Qt
main thread. ``CastSession`` runs the client's event loop in a QThread and
hands every completion, position answer and lifecycle signal back to the
main thread through queued Qt signals before any callback runs.
"""

import asyncio
import logging
import time
from collections.abc import Awaitable, Callable
from typing import Protocol, runtime_checkable

from PySide6.QtCore import QThread, Qt, Signal, Slot

from castplay.api.client import DEFAULT_RECEIVER_PORT, CastReceiverClient
from castplay.api.protocol import NOTIFY_MEDIA_FINISHED, NOTIFY_SESSION_STATUS, JsonRpcNotification
from castplay.models.media_item import CastMediaInfo
from castplay.models.session_status import CastSessionStatus

logger = logging.getLogger(__name__)

Completion = Callable[[bool], None]
PositionCallback = Callable[[float | None], None]
SessionStatusListener = Callable[[CastSessionStatus], None]
MediaFinishedListener = Callable[[], None]

_MAX_RECONNECT_DELAY = 30.0


@runtime_checkable
class RemoteSession(Protocol):
    """What the playback controller needs from a remote cast session.

    Every completion receives ``True`` when the receiver accepted the
    request and ``False`` otherwise; callbacks always run on the thread
    that owns the controller.
    """

    @property
    def has_connection_established(self) -> bool:
        """Return True if a receiver session is currently connected."""
        ...

    def add_session_status_listener(self, listener: SessionStatusListener) -> None:
        """Register a lifecycle listener."""
        ...

    def add_media_finished_listener(self, listener: MediaFinishedListener) -> None:
        """Register a listener for remote end of media."""
        ...

    def start_selected_item_remotely(
        self, media: CastMediaInfo, at_position: float, completion: Completion
    ) -> None:
        """Load ``media`` on the receiver and start it at ``at_position`` seconds."""
        ...

    def play_selected_item_remotely(self, completion: Completion) -> None:
        """Resume the media loaded on the receiver."""
        ...

    def pause_selected_item_remotely(self, completion: Completion) -> None:
        """Pause the media loaded on the receiver."""
        ...

    def seek_selected_item_remotely(self, position: float, completion: Completion) -> None:
        """Seek the media loaded on the receiver."""
        ...

    def request_remote_position(self, callback: PositionCallback) -> None:
        """Ask the receiver for its position; None if it cannot answer."""
        ...


class CastSession(QThread):
    """Remote session backed by a ``CastReceiverClient`` on a worker thread.

    The first successful connection reports ``STARTED``; a connection
    re-established after a loss reports ``RESUMED``. A failed first
    connection reports ``FAILED_TO_START`` and a dropped connection
    reports ``ENDED``. Reconnects back off from 2 s up to 30 s.

    Example:
        session = CastSession("192.168.1.50")
        controller = PlaybackController(transport, session, item)
        session.start()
        ...
        session.stop()
        session.wait()
    """

    session_status_changed = Signal(object)  # CastSessionStatus, main thread
    media_finished = Signal()
    error_occurred = Signal(object)  # Exception

    # Worker-to-main-thread handoff, always queued
    _status_received = Signal(object)
    _media_finished_received = Signal()
    _completion_ready = Signal(object, bool)
    _position_ready = Signal(object, object)

    def __init__(
        self,
        host: str,
        port: int = DEFAULT_RECEIVER_PORT,
        timeout: float = 10.0,
        reconnect_delay: float = 2.0,
    ) -> None:
        """Initialize the session.

        Args:
            host: Receiver hostname or IP.
            port: Receiver control port.
            timeout: Connection and request timeout in seconds.
            reconnect_delay: Initial delay between reconnect attempts.
        """
        super().__init__()
        self._host = host
        self._port = port
        self._timeout = timeout
        self._reconnect_delay = reconnect_delay
        self._client: CastReceiverClient | None = None
        self._loop: asyncio.AbstractEventLoop | None = None
        self._should_run = True
        self._auto_reconnect = True
        self._has_started = False
        self._status_listeners: list[SessionStatusListener] = []
        self._finished_listeners: list[MediaFinishedListener] = []

        queued = Qt.ConnectionType.QueuedConnection
        self._status_received.connect(self._dispatch_status, queued)
        self._media_finished_received.connect(self._dispatch_media_finished, queued)
        self._completion_ready.connect(self._dispatch_completion, queued)
        self._position_ready.connect(self._dispatch_position, queued)

    @property
    def host(self) -> str:
        """Return receiver host."""
        return self._host

    @property
    def port(self) -> int:
        """Return receiver port."""
        return self._port

    @property
    def has_connection_established(self) -> bool:
        """Return True if the receiver control channel is open."""
        return self._client is not None and self._client.is_connected

    def add_session_status_listener(self, listener: SessionStatusListener) -> None:
        """Register a lifecycle listener (called on the main thread)."""
        self._status_listeners.append(listener)

    def add_media_finished_listener(self, listener: MediaFinishedListener) -> None:
        """Register an end-of-media listener (called on the main thread)."""
        self._finished_listeners.append(listener)

    def stop(self) -> None:
        """Stop the worker and end the session (called from main thread)."""
        self._should_run = False
        if self._client and self._loop and self._loop.is_running():
            asyncio.run_coroutine_threadsafe(self._client.disconnect(), self._loop)

    # Requests (main thread)

    def start_selected_item_remotely(
        self, media: CastMediaInfo, at_position: float, completion: Completion
    ) -> None:
        """Load media on the receiver at ``at_position`` seconds."""
        logger.debug("Remote start of %r at %.1fs", media.title, at_position)
        self._submit(lambda client: client.load(media, at_position), completion)

    def play_selected_item_remotely(self, completion: Completion) -> None:
        """Resume remote playback."""
        self._submit(lambda client: client.play(), completion)

    def pause_selected_item_remotely(self, completion: Completion) -> None:
        """Pause remote playback."""
        self._submit(lambda client: client.pause(), completion)

    def seek_selected_item_remotely(self, position: float, completion: Completion) -> None:
        """Seek remote playback to ``position`` seconds."""
        self._submit(lambda client: client.seek(position), completion)

    def request_remote_position(self, callback: PositionCallback) -> None:
        """Fetch the receiver position; the callback gets None on failure."""
        if not self._loop_ready():
            self._position_ready.emit(callback, None)
            return
        assert self._loop is not None
        asyncio.run_coroutine_threadsafe(self._fetch_position(callback), self._loop)

    def _loop_ready(self) -> bool:
        """Return True if requests can be scheduled on the worker loop."""
        return self._loop is not None and self._loop.is_running() and self.has_connection_established

    def _submit(
        self,
        request: Callable[[CastReceiverClient], Awaitable[None]],
        completion: Completion,
    ) -> None:
        """Schedule a request on the worker loop, failing fast if offline."""
        if not self._loop_ready():
            logger.warning("Remote request dropped: no receiver session")
            self._completion_ready.emit(completion, False)
            return
        assert self._loop is not None
        asyncio.run_coroutine_threadsafe(self._run_request(request, completion), self._loop)

    # Worker thread

    async def _run_request(
        self,
        request: Callable[[CastReceiverClient], Awaitable[None]],
        completion: Completion,
    ) -> None:
        """Run one request and report done/not-done."""
        done = False
        client = self._client
        if client is not None and client.is_connected:
            try:
                await request(client)
                done = True
            except (ConnectionError, RuntimeError, OSError) as e:
                logger.warning("Remote request failed: %s", e)
                self.error_occurred.emit(e)
        self._completion_ready.emit(completion, done)

    async def _fetch_position(self, callback: PositionCallback) -> None:
        """Fetch position from the receiver."""
        position: float | None = None
        client = self._client
        if client is not None and client.is_connected:
            try:
                position = (await client.get_status()).position
            except (ConnectionError, RuntimeError, OSError) as e:
                logger.debug("Remote position unavailable: %s", e)
        self._position_ready.emit(callback, position)

    def run(self) -> None:
        """Run the worker thread (entry point)."""
        self._loop = asyncio.new_event_loop()
        asyncio.set_event_loop(self._loop)

        try:
            self._loop.run_until_complete(self._connection_loop())
        except Exception as e:  # noqa: BLE001
            logger.exception("Cast session worker crashed")
            self.error_occurred.emit(e)
        finally:
            if self._client:
                self._loop.run_until_complete(self._client.disconnect())
            self._loop.close()
            self._loop = None
            self._client = None

    async def _connection_loop(self) -> None:
        """Connect, report lifecycle changes and reconnect with backoff."""
        reconnect_delay = self._reconnect_delay

        while self._should_run:
            self._client = CastReceiverClient(self._host, self._port, self._timeout)
            self._client.set_event_handlers(
                on_notification=self._on_notification,
                on_error=self._on_error,
            )
            try:
                await self._client.connect()
            except ConnectionError as e:
                logger.warning("Cast session connection failed: %s", e)
                self.error_occurred.emit(e)
                if not self._has_started:
                    self._status_received.emit(CastSessionStatus.FAILED_TO_START)
                if not (self._auto_reconnect and self._should_run):
                    break
                await self._sleep_interruptible(reconnect_delay)
                reconnect_delay = min(reconnect_delay * 2, _MAX_RECONNECT_DELAY)
                continue

            reconnect_delay = self._reconnect_delay
            status = CastSessionStatus.RESUMED if self._has_started else CastSessionStatus.STARTED
            self._has_started = True
            logger.info("Cast session %s with %s:%d", status, self._host, self._port)
            self._status_received.emit(status)

            while self._should_run and self._client.is_connected:
                await asyncio.sleep(0.2)

            logger.info("Cast session with %s:%d ended", self._host, self._port)
            self._status_received.emit(CastSessionStatus.ENDED)
            await self._client.disconnect()

            if not (self._auto_reconnect and self._should_run):
                break
            await self._sleep_interruptible(reconnect_delay)

    async def _sleep_interruptible(self, seconds: float) -> None:
        """Sleep in small steps so stop() takes effect quickly."""
        end_time = time.monotonic() + seconds
        while self._should_run and time.monotonic() < end_time:
            await asyncio.sleep(0.1)

    def _on_notification(self, notification: JsonRpcNotification) -> None:
        """Translate receiver notifications into session signals."""
        if notification.method == NOTIFY_SESSION_STATUS:
            status = CastSessionStatus.from_string(str(notification.param("status", "")))
            self._status_received.emit(status)
        elif notification.method == NOTIFY_MEDIA_FINISHED:
            self._media_finished_received.emit()
        else:
            logger.debug("Ignoring receiver notification %s", notification.method)

    def _on_error(self, error: Exception) -> None:
        """Forward client errors."""
        self.error_occurred.emit(error)

    # Main thread delivery

    @Slot(object)
    def _dispatch_status(self, status: CastSessionStatus) -> None:
        """Deliver a lifecycle signal to listeners."""
        self.session_status_changed.emit(status)
        for listener in list(self._status_listeners):
            listener(status)

    @Slot()
    def _dispatch_media_finished(self) -> None:
        """Deliver remote end of media to listeners."""
        self.media_finished.emit()
        for listener in list(self._finished_listeners):
            listener()

    @Slot(object, bool)
    def _dispatch_completion(self, completion: Completion, done: bool) -> None:
        """Run a request completion."""
        completion(done)

    @Slot(object, object)
    def _dispatch_position(self, callback: PositionCallback, position: float | None) -> None:
        """Run a position callback."""
        callback(position)


class NoReceiverSession:
    """Remote session used when no receiver is configured.

    It never connects and reports every request as not done, so the
    controller stays on (or falls back to) the local transport.
    """

    @property
    def has_connection_established(self) -> bool:
        """Return False; there is no receiver."""
        return False

    def add_session_status_listener(self, listener: SessionStatusListener) -> None:  # noqa: ARG002
        """Accept a listener that will never be called."""

    def add_media_finished_listener(self, listener: MediaFinishedListener) -> None:  # noqa: ARG002
        """Accept a listener that will never be called."""

    def start_selected_item_remotely(
        self, media: CastMediaInfo, at_position: float, completion: Completion  # noqa: ARG002
    ) -> None:
        """Fail the request."""
        completion(False)

    def play_selected_item_remotely(self, completion: Completion) -> None:
        """Fail the request."""
        completion(False)

    def pause_selected_item_remotely(self, completion: Completion) -> None:
        """Fail the request."""
        completion(False)

    def seek_selected_item_remotely(self, position: float, completion: Completion) -> None:  # noqa: ARG002
        """Fail the request."""
        completion(False)

    def request_remote_position(self, callback: PositionCallback) -> None:
        """Answer that no position is available."""
        callback(None)
