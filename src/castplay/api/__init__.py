"""Cast receiver control API (JSON-RPC over TCP)."""

from castplay.api.client import DEFAULT_RECEIVER_PORT, CastReceiverClient
from castplay.api.protocol import (
    JsonRpcError,
    JsonRpcNotification,
    JsonRpcRequest,
    JsonRpcResponse,
)

__all__ = [
    "CastReceiverClient",
    "DEFAULT_RECEIVER_PORT",
    "JsonRpcError",
    "JsonRpcNotification",
    "JsonRpcRequest",
    "JsonRpcResponse",
]
