"""
Structural types for the transport seam.

The client never imports a concrete socket class: discovery calls a
``SocketFactory`` and the reader only needs the three ``SocketProtocol``
coroutines. The default factory wraps ``websockets.connect``; the test suite
plugs in in-memory fakes.
"""

from __future__ import annotations

from typing import Any, Protocol, runtime_checkable


@runtime_checkable
class SocketProtocol(Protocol):
    """
    What the client needs from an open connection to Wave Link.

    ``recv()`` must raise ``websockets.exceptions.ConnectionClosed`` once the
    peer is gone; that is how connection loss is detected.
    """

    async def send(self, message: Any) -> None: ...

    async def recv(self) -> Any: ...

    async def close(self, code: int = 1000) -> None: ...


class SocketFactory(Protocol):
    """
    Opens a raw socket to one candidate URL such as ``ws://127.0.0.1:1887``.

    Any exception (refused port, rejected handshake, timeout) makes discovery
    move on to the next port.
    """

    async def __call__(
        self, uri: str, origin: str | None = None, **kwargs: Any
    ) -> SocketProtocol: ...
