"""
Exception classes for wavelink_ws_rpc.

This module defines all custom exceptions raised by the library.
All exceptions inherit from RpcError, which inherits from Exception.
"""

from __future__ import annotations

from typing import Any


class RpcError(Exception):
    """
    Base exception for all RPC-related errors.

    This is the parent class for all custom exceptions raised by the
    wavelink_ws_rpc library. Catching this exception will catch
    all library-specific errors.
    """


class RpcChannelClosedError(RpcError):
    """
    Raised for every pending call when the connection is lost.

    A call fails with this error only when the socket closes (peer close,
    network failure or an explicit disconnect) before its response arrived.
    The call is not retried; issue a fresh call once reconnected.
    """


class RpcInvalidStateError(RpcError):
    """
    Raised when an RPC operation is attempted in an invalid state.

    Examples of invalid states:
    - Calling RPC methods before connect()
    - Calling methods after disconnect() has been called
    """


class RpcNotConnectedError(RpcInvalidStateError):
    """
    Raised by call() when the client is not in the open state.

    Calls made while disconnected fail fast and nothing is sent or queued.
    """


class RemoteError(RpcError):
    """
    Raised when the server answers a call with a JSON-RPC error envelope.

    The exception message is the envelope's ``error.message``; the numeric
    code and the optional data payload are kept as attributes. Protocol
    errors affect only the caller that issued the request.
    """

    def __init__(self, message: str, code: int | None = None, data: Any = None) -> None:
        super().__init__(message)
        self.message = message
        self.code = code
        self.data = data


class DiscoveryError(RpcError):
    """
    Raised when no port in the probe range accepted a connection.

    This is terminal for the current connect() cycle but not for the
    client: a fresh connect() may be issued at any time.
    """


class DiscoveryCycleError(RpcError):
    """
    Reported (never raised) each time discovery wraps around the port range.

    Delivered through the ``error`` event so consumers can show progress
    while the probe loop keeps going.
    """


class RpcTransportError(RpcError):
    """
    Wraps a socket-level error that is not a close.

    Transport errors are reported through the ``error`` event and do not
    change the connection state on their own.
    """


class MalformedFrameError(RpcError):
    """
    Raised when an inbound frame cannot be decoded into a JSON-RPC envelope.

    The offending frame is dropped and reported through the ``error`` event.
    When the frame still carried a recognizable request id, ``call_id`` holds
    it and only that call is failed; other pending calls are unaffected.
    """

    def __init__(self, message: str, call_id: Any = None) -> None:
        super().__init__(message)
        self.call_id = call_id


class RpcMessageTooLargeError(RpcError):
    """
    Raised when a received message exceeds the configured size limit.

    The size limit is checked before deserialization so that a runaway
    payload cannot exhaust memory or CPU during parsing.
    """


class RpcBackpressureError(RpcError):
    """
    Raised when the client has too many pending requests.

    This indicates backpressure - the caller should slow down or wait
    for pending requests to complete before sending more.
    """
