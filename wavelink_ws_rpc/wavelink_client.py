"""
WaveLinkClient module provides a client that discovers the local Wave Link
endpoint, keeps a connection to it alive and exposes its JSON-RPC methods
and notifications.
"""

from __future__ import annotations

import asyncio
from contextlib import suppress
from enum import Enum
from typing import TYPE_CHECKING, Any

from websockets.exceptions import ConnectionClosed, WebSocketException

from ._internal.endpoint_locator import EndpointLocator
from .api import WaveLinkApi
from .config import WaveLinkClientConfig
from .events import EventEmitter, EventName
from .exceptions import (
    DiscoveryError,
    MalformedFrameError,
    RpcInvalidStateError,
    RpcMessageTooLargeError,
    RpcNotConnectedError,
    RpcTransportError,
)
from .logger import get_logger
from .rpc_channel import NOT_CONNECTED_MESSAGE, RpcChannel
from .simplewebsocket import JsonSerializingWebSocket, SimpleWebSocket, open_websocket
from .utils import build_url

if TYPE_CHECKING:
    from ._internal.protocols import SocketFactory
    from .events import EventCallback
    from .exceptions import DiscoveryCycleError

logger = get_logger(__name__)

CONNECTION_CLOSED_MESSAGE = "Connection closed"


class ConnectionState(str, Enum):
    """
    Lifecycle of the client's single connection.

    IDLE -> CONNECTING -> OPEN -> CLOSING -> IDLE. A lost connection goes
    from OPEN straight back to IDLE, and a reconnection cycle moves IDLE to
    CONNECTING again.
    """

    IDLE = "idle"
    CONNECTING = "connecting"
    OPEN = "open"
    CLOSING = "closing"


class WaveLinkClient(WaveLinkApi):
    """
    Client for the Elgato Wave Link JSON-RPC API.

    This client manages the WebSocket connection lifecycle: it discovers the
    port Wave Link listens on, correlates calls with their responses, turns
    server pushes into events and reconnects after the connection is lost.

    The client can:
    - Call any Wave Link method, via ``call()``, the typed API or ``.other``
    - Deliver notifications to callbacks registered with ``on()``
    - Reconnect automatically with a fixed delay and a bounded number of cycles

    Event subscriptions belong to the client instance and survive reconnects.
    """

    def __init__(
        self,
        config: WaveLinkClientConfig | None = None,
        socket_factory: SocketFactory = open_websocket,
        serializing_socket_cls: type[JsonSerializingWebSocket] = JsonSerializingWebSocket,
    ) -> None:
        """Initialize the WaveLinkClient.

        Parameters
        ----------
        config : WaveLinkClientConfig | None, optional
            Configuration object for all client behavior. If None, uses
            default configuration. Use WaveLinkClientConfig.from_kwargs() for
            the flat option surface, or .development_defaults() for a preset.
        socket_factory : SocketFactory, optional
            Opens a raw socket to a candidate URL. Defaults to
            ``websockets.connect`` via ``open_websocket``.
        serializing_socket_cls : type[JsonSerializingWebSocket], optional
            Class wrapping the raw socket for JSON (de)serialization.

        Examples
        --------
        Using default config::

            async with WaveLinkClient() as client:
                info = await client.get_application_info()
                print(info)

        Using flat options::

            config = WaveLinkClientConfig.from_kwargs(host="192.168.1.20", reconnect_delay=5.0)
            client = WaveLinkClient(config)
            await client.connect()
        """
        # Initialize and validate configuration
        self.config = config or WaveLinkClientConfig()
        self.config.validate()

        self._socket_factory = socket_factory
        self._serializing_socket_cls = serializing_socket_cls
        self.connect_kwargs = self._prepare_connection_kwargs()

        # Subscriber registry and call correlator live as long as the client
        self._events = EventEmitter()
        self.channel = RpcChannel(
            self._events,
            default_response_timeout=self.config.connection.default_response_timeout,
            max_pending_requests=self.config.backpressure.max_pending_requests,
        )
        self._locator = EndpointLocator.from_config(
            self.config.connection.host, self.config.discovery
        )

        # State variables
        self.ws: SimpleWebSocket | None = None
        self._state = ConnectionState.IDLE
        self._port: int | None = None
        self._read_task: asyncio.Task[None] | None = None
        self._connect_task: asyncio.Task[None] | None = None
        self._reconnect_task: asyncio.Task[None] | None = None
        self._manually_disconnected = False
        # Settled when the running disconnect() has finished tearing down
        self._closing: asyncio.Future[None] | None = None
        self._closing_task: asyncio.Task[Any] | None = None
        self._reconnect_attempts = 0
        self._close_code: int | None = None  # WebSocket close code
        self._close_reason: str | None = None  # WebSocket close reason

    def _prepare_connection_kwargs(self) -> dict[str, Any]:
        """Build the keyword arguments passed to the socket factory.

        Explicit ``websocket_kwargs`` win over values derived from the
        structured config.
        """
        ws_config = self.config.websocket
        connect_kwargs: dict[str, Any] = {
            "open_timeout": ws_config.open_timeout,
            "ping_interval": ws_config.ping_interval,
            "ping_timeout": ws_config.ping_timeout,
            "compression": ws_config.compression,
            # Reject oversized messages at the protocol level
            "max_size": self.config.backpressure.max_message_size,
        }
        connect_kwargs.update(self.config.websocket_kwargs)
        return connect_kwargs

    async def _open_socket(self, url: str) -> Any:
        return await self._socket_factory(
            url, origin=self.config.websocket.origin, **self.connect_kwargs
        )

    async def _on_discovery_cycle(self, error: DiscoveryCycleError) -> None:
        await self._events.emit(EventName.ERROR, error)

    # Connection lifecycle

    async def connect(self) -> None:
        """Connect to Wave Link, scanning the port range until a port answers.

        If a connection attempt is already running, waits for it instead of
        starting another one.

        Raises
        ------
        DiscoveryError
            If no port accepted a connection within the attempt budget.
        RpcInvalidStateError
            If disconnect() aborted the attempt, or if called from a callback
            that runs while disconnect() is tearing the connection down.
        """
        closing = self._closing
        if closing is not None and not closing.done():
            if self._closing_task is asyncio.current_task():
                raise RpcInvalidStateError(
                    "Cannot connect() while disconnect() is in progress"
                )
            logger.debug("Waiting for disconnect() to finish before connecting")
            await asyncio.shield(closing)

        self._manually_disconnected = False
        await self._cancel_reconnect()

        if self._state is ConnectionState.OPEN:
            return

        task = self._connect_task
        if task is None or task.done():
            self._locator.reset()
            task = asyncio.create_task(self._establish())
            self._connect_task = task
        else:
            logger.debug("Connection attempt already in progress, joining it")

        try:
            # Shielded so a cancelled caller does not abort a shared attempt
            await asyncio.shield(task)
        except asyncio.CancelledError:
            if task.cancelled():
                raise RpcInvalidStateError(
                    "Connection attempt was aborted by disconnect()"
                ) from None
            raise

    async def _establish(self) -> None:
        self._state = ConnectionState.CONNECTING
        try:
            raw_ws, port = await self._locator.locate(
                self._open_socket, self._on_discovery_cycle
            )
        except DiscoveryError as e:
            self._state = ConnectionState.IDLE
            await self._events.emit(EventName.ERROR, e)
            raise
        except asyncio.CancelledError:
            self._state = ConnectionState.IDLE
            raise
        await self._on_open(raw_ws, port)

    async def _on_open(self, raw_ws: Any, port: int) -> None:
        """Install a freshly opened socket and announce the connection."""
        self.ws = self._serializing_socket_cls(
            raw_ws, max_message_size=self.config.backpressure.max_message_size
        )
        self.channel.bind(self.ws)
        self._port = port
        self._reconnect_attempts = 0
        self._close_code = None
        self._close_reason = None
        self._state = ConnectionState.OPEN
        self._read_task = asyncio.create_task(self.reader(self.ws))
        logger.info(f"Connected to Wave Link at {self.url}")
        await self._events.emit(EventName.CONNECTED)

    async def disconnect(self) -> None:
        """Close the connection and stop reconnecting.

        Pending calls fail with RpcChannelClosedError. This method is
        idempotent and can be safely called multiple times; a call made while
        another disconnect() is running waits for that one to finish.
        """
        self._manually_disconnected = True

        closing = self._closing
        if closing is not None and not closing.done():
            if self._closing_task is not asyncio.current_task():
                await asyncio.shield(closing)
            return

        closing = asyncio.get_running_loop().create_future()
        self._closing = closing
        self._closing_task = asyncio.current_task()
        try:
            await self._teardown()
        finally:
            self._closing_task = None
            closing.set_result(None)

    async def _teardown(self) -> None:
        await self._cancel_reconnect()
        await self._cancel_connect()

        ws = self.ws
        if ws is None:
            self._state = ConnectionState.IDLE
            return

        logger.info("Disconnecting from Wave Link...")
        self._state = ConnectionState.CLOSING

        await self.cancel_reader_task()

        # The connection may already be broken
        with suppress(RuntimeError, ConnectionClosed, WebSocketException, OSError):
            await ws.close()

        await self._handle_close(ws)
        self._state = ConnectionState.IDLE

    async def _handle_close(self, ws: SimpleWebSocket) -> None:
        """Tear down after ``ws`` closed, then reconnect if allowed.

        Only the socket the client currently holds is torn down; a late close
        signal from a socket that has since been replaced is ignored.
        """
        if ws is not self.ws:
            logger.debug("Ignoring close of a connection that was already replaced")
            return

        self.channel.unbind()
        self.ws = None
        if self._state is ConnectionState.OPEN:
            self._state = ConnectionState.IDLE

        # Settle pending calls before any callback can run
        self.channel.reject_all(CONNECTION_CLOSED_MESSAGE)
        await self._events.emit(EventName.DISCONNECTED)

        if self._should_reconnect():
            self._reconnect_task = asyncio.create_task(self._reconnect_loop())

    def _should_reconnect(self) -> bool:
        # A disconnected callback may already have called connect()
        return (
            self.config.connection.auto_reconnect
            and not self._manually_disconnected
            and self._state is ConnectionState.IDLE
            and self._reconnect_attempts < self.config.connection.max_reconnect_attempts
        )

    async def _reconnect_loop(self) -> None:
        """Run reconnection cycles with a fixed delay until one succeeds.

        Each cycle is a full discovery scan. A failed cycle is reported on the
        ``error`` event. When the attempt budget is exhausted the client stays
        idle until connect() is called.
        """
        max_attempts = self.config.connection.max_reconnect_attempts
        delay = self.config.connection.reconnect_delay

        while self._should_reconnect():
            logger.info(
                "Reconnecting in %.1fs (attempt %d/%d)",
                delay,
                self._reconnect_attempts + 1,
                max_attempts,
            )
            await asyncio.sleep(delay)
            self._reconnect_attempts += 1

            self._locator.reset()
            self._state = ConnectionState.CONNECTING
            try:
                raw_ws, port = await self._locator.locate(
                    self._open_socket, self._on_discovery_cycle
                )
            except DiscoveryError as e:
                self._state = ConnectionState.IDLE
                logger.warning(
                    "Reconnection attempt %d failed: %s", self._reconnect_attempts, e
                )
                await self._events.emit(EventName.ERROR, e)
                continue
            except asyncio.CancelledError:
                self._state = ConnectionState.IDLE
                raise

            attempts = self._reconnect_attempts
            # The new connection owns any later reconnect task
            self._reconnect_task = None
            await self._on_open(raw_ws, port)
            logger.info("Reconnection successful after %d attempt(s)", attempts)
            return

        if not self._manually_disconnected:
            logger.error(
                f"All {max_attempts} reconnection attempts exhausted. "
                f"Staying disconnected until connect() is called."
            )

    async def _cancel_reconnect(self) -> None:
        task = self._reconnect_task
        self._reconnect_task = None
        if task is None or task.done() or task is asyncio.current_task():
            return
        logger.debug("Cancelling pending reconnection...")
        task.cancel()
        with suppress(asyncio.CancelledError):
            await task

    async def _cancel_connect(self) -> None:
        task = self._connect_task
        if task is None or task.done() or task is asyncio.current_task():
            return
        task.cancel()
        with suppress(asyncio.CancelledError):
            await task

    async def cancel_reader_task(self) -> None:
        """Cancel the reader task if it exists and wait for cancellation to complete.

        Does nothing when called from inside the reader itself (for example
        by an event callback); the reader then exits on its own once it sees
        the closed socket.
        """
        task = self._read_task
        self._read_task = None
        if task is None or task.done() or task is asyncio.current_task():
            return
        logger.debug("Cancelling reader task...")
        task.cancel()
        with suppress(asyncio.CancelledError):
            await task
        logger.debug("Reader task cancelled successfully")

    async def reader(self, ws: SimpleWebSocket | None = None) -> None:
        """Background task that continuously reads messages from the WebSocket.

        Each frame is fully processed, including every event callback it
        triggers, before the next frame is read. Frames that cannot be decoded
        are reported on the ``error`` event and dropped.

        Parameters
        ----------
        ws : SimpleWebSocket | None, optional
            The connection to read from; defaults to the current one. Close
            signals only tear down the client while it still holds ``ws``.
        """
        ws = ws or self.ws
        if ws is None:
            raise RpcInvalidStateError("WebSocket must be connected")

        try:
            while True:
                try:
                    message = await ws.recv()
                    await self.channel.on_message(message)
                except (MalformedFrameError, RpcMessageTooLargeError) as e:
                    await self._events.emit(EventName.ERROR, e)

        except asyncio.CancelledError:
            # Normal cancellation during disconnect()
            logger.debug("RPC read task was cancelled.")
            raise

        except ConnectionClosed as e:
            if ws is not self.ws:
                logger.debug("Replaced connection finished closing.")
                return

            # Extract close code and reason for diagnostics
            close_info = getattr(e, "rcvd", None)
            if close_info is not None:
                self._close_code = getattr(close_info, "code", None)
                self._close_reason = getattr(close_info, "reason", None)

            if self._close_code is not None:
                logger.info(
                    "Connection was terminated. Close code: %d, reason: %s",
                    self._close_code,
                    self._close_reason or "(no reason provided)",
                )
            else:
                logger.info("Connection was terminated.")

            await self._handle_close(ws)

        except Exception as e:
            # Only websockets close signals are expected from recv(). Anything
            # else leaves the stream in an unknown state, so the connection is
            # dropped and the usual reconnect path takes over.
            logger.exception(f"RPC reader task failed: {type(e).__name__}")
            error = RpcTransportError(f"Transport failure: {type(e).__name__}: {e}")
            error.__cause__ = e
            await self._events.emit(EventName.ERROR, error)
            with suppress(RuntimeError, ConnectionClosed, WebSocketException, OSError):
                await ws.close()
            await self._handle_close(ws)

    async def __aenter__(self) -> WaveLinkClient:
        """Async context manager entry. Connects to Wave Link."""
        await self.connect()
        return self

    async def __aexit__(self, *args: Any, **kwargs: Any) -> None:
        """Async context manager exit. Disconnects from Wave Link."""
        await self.disconnect()

    # Calls

    async def call(
        self, method: str, params: Any = None, timeout: float | None = None
    ) -> Any:
        """Call a Wave Link method and wait for its result.

        Parameters
        ----------
        method : str
            Name of the remote method.
        params : Any, optional
            Request params, sent as ``null`` when omitted.
        timeout : float | None, optional
            Seconds to wait for the response. None falls back to
            ``default_response_timeout`` from the config, which by default
            waits until the response arrives or the connection closes.

        Returns
        -------
        Any
            The ``result`` member of the response, as decoded.

        Raises
        ------
        RpcNotConnectedError
            If the client is not connected. Nothing is sent.
        RemoteError
            If Wave Link answered with an error.
        RpcChannelClosedError
            If the connection was lost before the response arrived.
        RpcTransportError
            If sending the request failed for a reason other than a close.
        """
        if self._state is not ConnectionState.OPEN:
            raise RpcNotConnectedError(NOT_CONNECTED_MESSAGE)
        if timeout is None:
            timeout = self.config.connection.default_response_timeout
        return await self.channel.call(method, params, timeout=timeout)

    @property
    def other(self) -> Any:
        """Dynamic proxy: ``await client.other.getMixes()``."""
        return self.channel.other

    # Events

    @property
    def events(self) -> EventEmitter:
        return self._events

    def on(self, event: EventName | str, callback: EventCallback | None = None) -> Any:
        """Register a callback for an event. Without a callback, returns a decorator."""
        return self._events.on(event, callback)

    def off(self, event: EventName | str, callback: EventCallback) -> bool:
        return self._events.off(event, callback)

    def remove_all_listeners(self, event: EventName | str | None = None) -> None:
        self._events.remove_all_listeners(event)

    # Diagnostics

    @property
    def state(self) -> ConnectionState:
        return self._state

    @property
    def is_connected(self) -> bool:
        """Check if the client holds an open connection."""
        return (
            self._state is ConnectionState.OPEN
            and self.ws is not None
            and not self.ws.closed
        )

    @property
    def host(self) -> str:
        return self.config.connection.host

    @property
    def port(self) -> int | None:
        """Port of the current connection, or None when not connected."""
        return self._port if self.ws is not None else None

    @property
    def url(self) -> str | None:
        port = self.port
        return build_url(self.host, port) if port is not None else None

    @property
    def reconnect_attempts(self) -> int:
        return self._reconnect_attempts

    @property
    def port_attempts(self) -> int:
        """Failed probes in the current discovery scan."""
        return self._locator.attempts

    @property
    def pending_count(self) -> int:
        return self.channel.pending_count

    @property
    def close_code(self) -> int | None:
        """WebSocket close code of the last lost connection, if any."""
        return self._close_code

    @property
    def close_reason(self) -> str | None:
        return self._close_reason
