"""
wavelink_ws_rpc - asyncio client for the Elgato Wave Link JSON-RPC API

Discovers the local Wave Link WebSocket endpoint, correlates JSON-RPC 2.0
calls with their responses, reconnects after connection loss and turns
server notifications into events.
"""

# Protocol definitions
from wavelink_ws_rpc._internal.protocols import SocketFactory, SocketProtocol

# Configuration classes
from wavelink_ws_rpc.config import (
    DiscoveryConfig,
    RpcBackpressureConfig,
    RpcConnectionConfig,
    WaveLinkClientConfig,
    WebSocketConnectionConfig,
)

# Events
from wavelink_ws_rpc.events import (
    EventEmitter,
    EventName,
    FocusedAppChanged,
    LevelMeterChanged,
    OutputDevicesChanged,
)

# Exceptions
from wavelink_ws_rpc.exceptions import (
    DiscoveryCycleError,
    DiscoveryError,
    MalformedFrameError,
    RemoteError,
    RpcBackpressureError,
    RpcChannelClosedError,
    RpcError,
    RpcInvalidStateError,
    RpcMessageTooLargeError,
    RpcNotConnectedError,
    RpcTransportError,
)

# Logging utilities
from wavelink_ws_rpc.logger import LoggingModes, get_logger, logging_config
from wavelink_ws_rpc.rpc_channel import RpcChannel

# JSON-RPC schemas
from wavelink_ws_rpc.schemas import (
    JsonRpcError,
    JsonRpcErrorCode,
    JsonRpcNotification,
    JsonRpcRequest,
    JsonRpcResponse,
)

# WebSocket abstractions (for advanced usage)
from wavelink_ws_rpc.simplewebsocket import (
    JsonSerializingWebSocket,
    SimpleWebSocket,
    open_websocket,
)
from wavelink_ws_rpc.wavelink_client import ConnectionState, WaveLinkClient

__version__ = "0.1.0"

__all__ = [
    "ConnectionState",
    "DiscoveryConfig",
    "DiscoveryCycleError",
    "DiscoveryError",
    "EventEmitter",
    "EventName",
    "FocusedAppChanged",
    "JsonRpcError",
    "JsonRpcErrorCode",
    "JsonRpcNotification",
    "JsonRpcRequest",
    "JsonRpcResponse",
    "JsonSerializingWebSocket",
    "LevelMeterChanged",
    "LoggingModes",
    "MalformedFrameError",
    "OutputDevicesChanged",
    "RemoteError",
    "RpcBackpressureConfig",
    "RpcBackpressureError",
    "RpcChannel",
    "RpcChannelClosedError",
    "RpcConnectionConfig",
    "RpcError",
    "RpcInvalidStateError",
    "RpcMessageTooLargeError",
    "RpcNotConnectedError",
    "RpcTransportError",
    "SimpleWebSocket",
    "SocketFactory",
    "SocketProtocol",
    "WaveLinkClient",
    "WaveLinkClientConfig",
    "WebSocketConnectionConfig",
    "get_logger",
    "logging_config",
    "open_websocket",
]
