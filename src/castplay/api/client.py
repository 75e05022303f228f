"""Async TCP client for the cast receiver JSON-RPC control channel.

Each message is a single JSON object terminated by a newline. Responses are
matched to requests by id; anything without an id is a notification.
"""

import asyncio
import json
import logging
from collections.abc import Callable
from contextlib import suppress
from typing import Any

from castplay.api.protocol import (
    METHOD_GET_STATUS,
    METHOD_LOAD,
    METHOD_PAUSE,
    METHOD_PLAY,
    METHOD_SEEK,
    JsonRpcError,
    JsonRpcNotification,
    JsonRpcRequest,
    JsonRpcResponse,
    is_notification,
)
from castplay.models.media_item import CastMediaInfo
from castplay.models.receiver_status import ReceiverStatus

logger = logging.getLogger(__name__)

DEFAULT_RECEIVER_PORT = 8009

ConnectionHandler = Callable[[], None]
NotificationHandler = Callable[[JsonRpcNotification], None]
ErrorHandler = Callable[[Exception], None]


class CastReceiverClient:
    """Async client controlling one cast receiver.

    Example:
        async with CastReceiverClient("192.168.1.50") as client:
            await client.load(item.to_cast_media_info(120.0), position=30.0)
            status = await client.get_status()
            print(status.position)
    """

    _DEFAULT_TIMEOUT: float = 10.0
    _BUFFER_LIMIT: int = 256 * 1024

    def __init__(
        self,
        host: str,
        port: int = DEFAULT_RECEIVER_PORT,
        timeout: float = _DEFAULT_TIMEOUT,
    ) -> None:
        """Initialize the client.

        Args:
            host: Receiver hostname or IP address.
            port: Control port (default 8009).
            timeout: Connection and per-request timeout in seconds.
        """
        self._host = host
        self._port = port
        self._timeout = timeout
        self._reader: asyncio.StreamReader | None = None
        self._writer: asyncio.StreamWriter | None = None
        self._request_id = 0
        self._pending: dict[int, asyncio.Future[JsonRpcResponse]] = {}
        self._connected = False
        self._receive_task: asyncio.Task[None] | None = None

        self._on_notification: NotificationHandler | None = None
        self._on_disconnect: ConnectionHandler | None = None
        self._on_error: ErrorHandler | None = None

    @property
    def host(self) -> str:
        """Return receiver host."""
        return self._host

    @property
    def port(self) -> int:
        """Return receiver port."""
        return self._port

    @property
    def is_connected(self) -> bool:
        """Return True if the control channel is open."""
        return self._connected and self._reader is not None

    def set_event_handlers(
        self,
        on_notification: NotificationHandler | None = None,
        on_disconnect: ConnectionHandler | None = None,
        on_error: ErrorHandler | None = None,
    ) -> None:
        """Set handlers called from the event loop.

        Args:
            on_notification: Called for each receiver notification.
            on_disconnect: Called once when the channel closes.
            on_error: Called for receive-side errors.
        """
        self._on_notification = on_notification
        self._on_disconnect = on_disconnect
        self._on_error = on_error

    async def __aenter__(self) -> "CastReceiverClient":
        """Connect on context entry."""
        await self.connect()
        return self

    async def __aexit__(self, *args: Any) -> None:
        """Disconnect on context exit."""
        await self.disconnect()

    async def connect(self) -> None:
        """Open the control channel.

        Raises:
            ConnectionError: If the receiver cannot be reached in time.
        """
        if self._connected:
            return

        try:
            self._reader, self._writer = await asyncio.wait_for(
                asyncio.open_connection(self._host, self._port, limit=self._BUFFER_LIMIT),
                timeout=self._timeout,
            )
        except (OSError, TimeoutError) as e:
            self._reader = None
            self._writer = None
            raise ConnectionError(f"Failed to connect to {self._host}:{self._port}: {e}") from e

        self._connected = True
        self._receive_task = asyncio.create_task(self._receive_loop())
        logger.info("Connected to receiver %s:%d", self._host, self._port)

    async def disconnect(self) -> None:
        """Close the control channel and fail outstanding requests."""
        self._connected = False

        if self._receive_task:
            self._receive_task.cancel()
            with suppress(asyncio.CancelledError):
                await self._receive_task
            self._receive_task = None

        if self._writer:
            try:
                self._writer.close()
                await asyncio.wait_for(self._writer.wait_closed(), timeout=1.0)
            except (OSError, TimeoutError, asyncio.CancelledError):
                pass
            self._writer = None
        self._reader = None

        for future in self._pending.values():
            if not future.done():
                future.set_exception(ConnectionError("Connection closed"))
        self._pending.clear()

    async def _receive_loop(self) -> None:
        """Read newline-delimited messages until the channel closes."""
        if self._reader is None:
            return

        try:
            while self._connected:
                try:
                    line = await asyncio.wait_for(self._reader.readline(), timeout=self._timeout)
                except TimeoutError:
                    # Idle channel, keep waiting
                    continue
                except ValueError as e:
                    # Line over the stream limit, already discarded by the reader
                    self._emit(self._on_error, e)
                    continue
                if not line:
                    break

                try:
                    text = line.decode("utf-8").strip()
                    if not text:
                        continue
                    data = json.loads(text)
                except (UnicodeDecodeError, json.JSONDecodeError) as e:
                    logger.debug("Dropping unreadable receiver message: %s", e)
                    self._emit(self._on_error, e)
                    continue
                if isinstance(data, dict):
                    self._handle_message(data)

        except asyncio.CancelledError:
            pass
        except (OSError, asyncio.IncompleteReadError) as e:
            self._emit(self._on_error, e)
        finally:
            was_connected = self._connected
            self._connected = False
            for future in self._pending.values():
                if not future.done():
                    future.set_exception(ConnectionError("Connection closed by receiver"))
            self._pending.clear()
            if was_connected:
                self._emit(self._on_disconnect)

    def _handle_message(self, data: dict[str, Any]) -> None:
        """Dispatch a decoded message to a waiting request or a handler."""
        if is_notification(data):
            self._emit(self._on_notification, JsonRpcNotification.from_dict(data))
            return

        response = JsonRpcResponse.from_dict(data)
        if response.id is None:
            logger.debug("Dropping response without id: %s", data)
            return
        future = self._pending.pop(response.id, None)
        if future and not future.done():
            future.set_result(response)

    def _emit(self, handler: Callable[..., None] | None, *args: Any) -> None:
        """Schedule a handler on the running loop."""
        if handler is None:
            return
        try:
            asyncio.get_running_loop().call_soon(handler, *args)
        except RuntimeError:
            logger.debug("Cannot dispatch event: no running event loop")

    def _next_id(self) -> int:
        """Return the next request id."""
        self._request_id += 1
        return self._request_id

    async def call(self, method: str, params: dict[str, Any] | None = None) -> Any:
        """Send a request and wait for its result.

        Args:
            method: Method name.
            params: Method parameters.

        Returns:
            The ``result`` member of the response.

        Raises:
            ConnectionError: If not connected, or the request timed out.
            RuntimeError: If the receiver answered with an error.
        """
        if not self.is_connected or self._writer is None:
            raise ConnectionError("Not connected to receiver")

        request = JsonRpcRequest(id=self._next_id(), method=method, params=params)
        future: asyncio.Future[JsonRpcResponse] = asyncio.get_running_loop().create_future()
        self._pending[request.id] = future

        try:
            self._writer.write((json.dumps(request.to_dict()) + "\n").encode("utf-8"))
            await asyncio.wait_for(self._writer.drain(), timeout=self._timeout)
            response = await asyncio.wait_for(future, timeout=self._timeout)
        except TimeoutError:
            raise ConnectionError(f"{method} (request {request.id}) timed out") from None
        finally:
            self._pending.pop(request.id, None)

        if not response.is_success:
            error = response.error or JsonRpcError(-1, "Unknown error")
            raise RuntimeError(f"{method} failed: {error}")
        return response.result

    # Receiver API

    async def load(self, media: CastMediaInfo, position: float = 0.0) -> None:
        """Load media on the receiver and start playing at ``position``.

        Args:
            media: Media information describing what to play.
            position: Start position in seconds.
        """
        await self.call(METHOD_LOAD, {"media": media.to_params(), "position": max(0.0, position)})

    async def play(self) -> None:
        """Resume playback of the loaded media."""
        await self.call(METHOD_PLAY)

    async def pause(self) -> None:
        """Pause playback of the loaded media."""
        await self.call(METHOD_PAUSE)

    async def seek(self, position: float) -> None:
        """Seek the loaded media.

        Args:
            position: Target position in seconds.
        """
        await self.call(METHOD_SEEK, {"position": max(0.0, position)})

    async def get_status(self) -> ReceiverStatus:
        """Return the receiver's current media status."""
        result = await self.call(METHOD_GET_STATUS)
        return ReceiverStatus.from_dict(result)
