"""JSON-RPC 2.0 message types for the cast receiver control channel.

Messages are newline-delimited JSON objects over TCP. Requests carry an
integer ``id``; receiver notifications carry only ``method``/``params``.
"""

from dataclasses import dataclass
from typing import Any

JSONRPC_VERSION = "2.0"

# Request methods
METHOD_LOAD = "Receiver.Load"
METHOD_PLAY = "Receiver.Play"
METHOD_PAUSE = "Receiver.Pause"
METHOD_SEEK = "Receiver.Seek"
METHOD_GET_STATUS = "Receiver.GetStatus"

# Notification methods
NOTIFY_SESSION_STATUS = "Session.OnStatus"
NOTIFY_MEDIA_FINISHED = "Receiver.OnMediaFinished"

# Standard error code for unsupported methods
ERROR_METHOD_NOT_FOUND = -32601


@dataclass(frozen=True)
class JsonRpcRequest:
    """An outgoing request.

    Attributes:
        id: Request identifier echoed by the receiver.
        method: Method name.
        params: Method parameters, omitted from the wire when None.
    """

    id: int
    method: str
    params: dict[str, Any] | None = None

    def to_dict(self) -> dict[str, Any]:
        """Convert to a JSON-serializable dict."""
        message: dict[str, Any] = {"jsonrpc": JSONRPC_VERSION, "id": self.id, "method": self.method}
        if self.params is not None:
            message["params"] = self.params
        return message


@dataclass(frozen=True)
class JsonRpcError:
    """Error object carried by a failed response."""

    code: int
    message: str
    data: Any = None

    @property
    def is_method_not_found(self) -> bool:
        """Return True if the receiver does not implement the method."""
        return self.code == ERROR_METHOD_NOT_FOUND

    def __str__(self) -> str:
        """Return a compact ``[code] message`` form."""
        if self.data:
            return f"[{self.code}] {self.message}: {self.data}"
        return f"[{self.code}] {self.message}"


@dataclass(frozen=True)
class JsonRpcResponse:
    """A response to a request sent earlier."""

    id: int | None = None
    result: Any = None
    error: JsonRpcError | None = None

    @property
    def is_success(self) -> bool:
        """Return True if the receiver reported no error."""
        return self.error is None

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "JsonRpcResponse":
        """Build a response from a decoded message."""
        raw_error = data.get("error")
        error = None
        if isinstance(raw_error, dict):
            error = JsonRpcError(
                code=raw_error.get("code", -1),
                message=raw_error.get("message", "Unknown error"),
                data=raw_error.get("data"),
            )
        raw_id = data.get("id")
        return cls(id=raw_id if isinstance(raw_id, int) else None, result=data.get("result"), error=error)


@dataclass(frozen=True)
class JsonRpcNotification:
    """A receiver-initiated message without an id."""

    method: str
    params: dict[str, Any] | None = None

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "JsonRpcNotification":
        """Build a notification from a decoded message."""
        params = data.get("params")
        return cls(method=data.get("method", ""), params=params if isinstance(params, dict) else None)

    def param(self, key: str, default: Any = None) -> Any:
        """Return a single parameter, or ``default`` when absent."""
        if self.params is None:
            return default
        return self.params.get(key, default)


def is_notification(data: dict[str, Any]) -> bool:
    """Return True if a decoded message is a notification, not a response."""
    return "id" not in data and "method" in data
