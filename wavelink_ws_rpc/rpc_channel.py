"""
Definition for the RPC channel on top of a websocket - turning a single
connection into awaitable request/response calls, with server pushes
routed to events.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any

from websockets.exceptions import ConnectionClosed

from ._internal.caller import RpcCaller
from ._internal.notification_router import NotificationRouter
from ._internal.promise_manager import (
    CONNECTION_CLOSED_MESSAGE,
    RpcPromise,
    RpcPromiseManager,
)
from ._internal.protocol_handler import RpcProtocolHandler
from .exceptions import (
    MalformedFrameError,
    RemoteError,
    RpcChannelClosedError,
    RpcNotConnectedError,
    RpcTransportError,
)
from .logger import get_logger
from .schemas import JsonRpcRequest
from .utils import pydantic_dump

if TYPE_CHECKING:
    from .events import EventEmitter
    from .simplewebsocket import SimpleWebSocket

logger = get_logger("RPC_CHANNEL")

# Sentinel object for default timeout (more type-safe than a class)
_DEFAULT_TIMEOUT_SENTINEL = object()

NOT_CONNECTED_MESSAGE = "Not connected to Wave Link"


class RpcChannel:
    """
    A JSON-RPC 2.0 call correlator for one client.

    The channel outlives individual connections: the supervisor binds a
    socket when a connection opens and unbinds it when the connection is
    lost. The pending-call table and its identifier counter belong to the
    channel, so identifiers keep increasing across reconnects.

    Provides a ``.other`` property for calling remote methods, e.g.
    ``await channel.other.getMixes()``.
    """

    def __init__(
        self,
        emitter: EventEmitter,
        default_response_timeout: float | None = None,
        max_pending_requests: int | None = None,
    ) -> None:
        """Initialize an RPC channel.

        Parameters
        ----------
        emitter : EventEmitter
            Registry that server notifications are emitted on.
        default_response_timeout : float | None, optional
            Default timeout for RPC call responses. Defaults to None (no timeout).
        max_pending_requests : int | None, optional
            Maximum number of pending RPC requests before backpressure is applied.
            Defaults to 1000.
        """
        self._promise_manager = RpcPromiseManager(
            max_pending_requests=max_pending_requests
        )
        self._router = NotificationRouter(emitter)
        self._protocol_handler = RpcProtocolHandler(
            self._promise_manager, self._router
        )
        self.default_response_timeout = default_response_timeout
        self._socket: SimpleWebSocket | None = None
        self.other = RpcCaller(self)

    @property
    def socket(self) -> SimpleWebSocket | None:
        return self._socket

    def bind(self, socket: SimpleWebSocket) -> None:
        """Attach the socket of a freshly opened connection."""
        self._socket = socket

    def unbind(self) -> None:
        """Detach the socket. Further calls fail until the next bind()."""
        self._socket = None

    def is_bound(self) -> bool:
        return self._socket is not None

    @property
    def pending_count(self) -> int:
        return self._promise_manager.get_pending_count()

    @property
    def promise_manager(self) -> RpcPromiseManager:
        return self._promise_manager

    def get_saved_promise(self, call_id: int) -> RpcPromise:
        return self._promise_manager.get_saved_promise(call_id)

    def reject_all(self, message: str = CONNECTION_CLOSED_MESSAGE) -> int:
        """
        Fail every pending call with RpcChannelClosedError.

        Returns:
            Number of calls that were failed
        """
        return self._promise_manager.reject_all(RpcChannelClosedError, message)

    async def on_message(self, data: Any) -> None:
        """
        Handle an incoming frame.

        Delegates to the protocol handler for parsing and routing. A malformed
        frame that still names a pending call fails that call.

        Raises:
            MalformedFrameError: If the frame is not a JSON-RPC 2.0 envelope
        """
        try:
            await self._protocol_handler.handle_message(data)
        except MalformedFrameError as e:
            logger.error(f"Error processing RPC message: {type(e).__name__}: {e}")
            if isinstance(e.call_id, int):
                self._promise_manager.reject(e.call_id, e)
            raise

    async def async_call(self, method: str, params: Any = None) -> RpcPromise:
        """
        Send a request and return the promise tracking its response.

        Raises:
            RpcNotConnectedError: If no socket is bound
            RpcBackpressureError: If too many calls are pending
            RpcChannelClosedError: If the connection closed while sending
            RpcTransportError: If the send failed for any other reason
        """
        if self._socket is None:
            raise RpcNotConnectedError(NOT_CONNECTED_MESSAGE)

        request = JsonRpcRequest(
            id=self._promise_manager.next_id(), method=method, params=params
        )
        promise = self._promise_manager.create_promise(request)

        logger.debug("Sending JSON-RPC 2.0 request: %s", request)
        try:
            # params stays in the frame as null when omitted
            await self._socket.send(pydantic_dump(request))
        except ConnectionClosed as e:
            self._promise_manager.clear_saved_call(request.id)
            raise RpcChannelClosedError(CONNECTION_CLOSED_MESSAGE) from e
        except Exception as e:
            self._promise_manager.clear_saved_call(request.id)
            raise RpcTransportError(
                f"Failed to send {method}: {type(e).__name__}: {e}"
            ) from e

        return promise

    async def call(
        self,
        method: str,
        params: Any = None,
        timeout: object | float | None = _DEFAULT_TIMEOUT_SENTINEL,
    ) -> Any:
        """
        Call a method and wait for its result.

        Args:
            method: Name of the remote method
            params: Request params, sent as ``null`` when omitted
            timeout: Maximum time to wait for the response (seconds). Defaults
                to the channel's default_response_timeout; None waits until the
                response arrives or the connection closes.

        Returns:
            The ``result`` member of the response

        Raises:
            RpcNotConnectedError: If no socket is bound
            RemoteError: If the server answered with an error envelope
            RpcChannelClosedError: If the connection closed during the call
            asyncio.TimeoutError: If the call times out
        """
        promise = await self.async_call(method, params)

        actual_timeout: float | None
        if timeout is _DEFAULT_TIMEOUT_SENTINEL:
            actual_timeout = self.default_response_timeout
        else:
            actual_timeout = timeout  # type: ignore[assignment]

        response = await self._promise_manager.wait_for_response(
            promise, actual_timeout
        )
        if response.error is not None:
            raise RemoteError(
                response.error.message,
                code=response.error.code,
                data=response.error.data,
            )
        return response.result
