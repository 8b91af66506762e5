"""
Transport adapters: opening a raw WebSocket to Wave Link and framing JSON
over it.
"""

from __future__ import annotations

import json
from abc import ABC, abstractmethod
from typing import Any

import websockets
from websockets.protocol import State

from .exceptions import MalformedFrameError, RpcMessageTooLargeError
from .logger import get_logger
from .utils import pydantic_serialize

logger = get_logger(__name__)

DEFAULT_MAX_MESSAGE_SIZE = 10 * 1024 * 1024  # 10 MiB


async def open_websocket(uri: str, origin: str | None = None, **kwargs: Any) -> Any:
    """
    Open a raw WebSocket connection to ``uri``.

    Default socket factory for discovery. Resolves once the opening handshake
    has completed.

    Parameters
    ----------
    uri : str
        Candidate endpoint, e.g. ``ws://127.0.0.1:1884``.
    origin : str | None, optional
        ``Origin`` handshake header. Wave Link refuses unknown origins.
    **kwargs : Any
        Forwarded to ``websockets.connect`` (open_timeout, max_size, ...).

    Raises
    ------
    OSError
        If the port is closed.
    websockets.exceptions.InvalidHandshake
        If the server rejects the handshake.
    TimeoutError
        If the handshake does not finish within ``open_timeout``.
    """
    if origin is not None:
        kwargs["origin"] = origin
    return await websockets.connect(uri, **kwargs)


class SimpleWebSocket(ABC):
    """
    Socket interface seen by the client after the handshake.

    ``send`` takes a dict or model, ``recv`` returns decoded JSON.
    """

    @property
    def closed(self) -> bool:
        return False

    @abstractmethod
    async def send(self, message: Any) -> None: ...

    @abstractmethod
    async def recv(self) -> Any: ...

    @abstractmethod
    async def close(self, code: int = 1000) -> None: ...


class JsonSerializingWebSocket(SimpleWebSocket):
    """
    JSON framing over a raw WebSocket connection.

    Inbound frames are measured in UTF-8 bytes before decoding. Oversized
    frames raise RpcMessageTooLargeError and frames that are not JSON raise
    MalformedFrameError; in both cases the connection stays usable and the
    reader simply moves on to the next frame.

    Parameters
    ----------
    websocket : Any
        Raw connection with async send/recv/close, typically from
        ``websockets.connect``.
    max_message_size : int, optional
        Largest accepted inbound frame in bytes (default 10 MiB).

    Examples
    --------
    >>> raw = await open_websocket("ws://127.0.0.1:1884", origin="streamdeck://")
    >>> ws = JsonSerializingWebSocket(raw)
    >>> await ws.send({"id": 1, "jsonrpc": "2.0", "method": "getMixes", "params": None})
    >>> reply = await ws.recv()
    """

    def __init__(
        self, websocket: Any, max_message_size: int = DEFAULT_MAX_MESSAGE_SIZE
    ) -> None:
        self._websocket = websocket
        self._max_message_size = max_message_size

    @property
    def raw(self) -> Any:
        return self._websocket

    @property
    def closed(self) -> bool:
        # websockets >= 13 exposes ``state``; test doubles expose ``closed``
        state = getattr(self._websocket, "state", None)
        if isinstance(state, State):
            return state is State.CLOSED
        return bool(getattr(self._websocket, "closed", False))

    @staticmethod
    def _frame_size(frame: Any) -> int:
        if isinstance(frame, str):
            return len(frame.encode("utf-8"))
        if isinstance(frame, (bytes, bytearray)):
            return len(frame)
        return 0

    def _encode(self, message: Any) -> str:
        if isinstance(message, dict):
            return json.dumps(message)
        return pydantic_serialize(message)

    def _decode(self, frame: Any) -> Any:
        try:
            if isinstance(frame, (bytes, bytearray)):
                frame = frame.decode("utf-8")
            return json.loads(frame)
        except (UnicodeDecodeError, json.JSONDecodeError) as e:
            raise MalformedFrameError(f"Undecodable frame: {e}") from e

    async def send(self, message: Any) -> None:
        """Send a dict or pydantic model as one text frame."""
        await self._websocket.send(self._encode(message))

    async def recv(self) -> Any:
        """
        Wait for the next frame and decode it.

        Raises
        ------
        RpcMessageTooLargeError
            If the frame is larger than ``max_message_size``.
        MalformedFrameError
            If the frame is not UTF-8 JSON.
        websockets.exceptions.ConnectionClosed
            Once the connection is gone.
        """
        frame = await self._websocket.recv()

        size = self._frame_size(frame)
        if size > self._max_message_size:
            logger.error(
                "Dropping %d byte frame (limit: %d bytes)", size, self._max_message_size
            )
            raise RpcMessageTooLargeError(
                f"Incoming message size ({size} bytes) exceeds limit "
                f"({self._max_message_size} bytes)"
            )

        logger.debug("Received %d byte frame", size)
        return self._decode(frame)

    async def close(self, code: int = 1000) -> None:
        await self._websocket.close(code)
