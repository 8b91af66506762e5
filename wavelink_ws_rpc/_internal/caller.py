"""
Attribute-style access to Wave Link methods the typed API does not wrap.

``client.other.getMixes()`` sends ``getMixes`` with ``params: null``;
``client.other.setMix(id="mix-1", isMuted=True)`` sends the keyword
arguments as the params object.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any

from ..logger import get_logger

if TYPE_CHECKING:
    from collections.abc import Awaitable

    from ..rpc_channel import RpcChannel

logger = get_logger("RPC_CALLER")


class RpcProxy:
    """A bound remote method: calling it performs one request."""

    def __init__(self, channel: RpcChannel, method_name: str) -> None:
        self.channel = channel
        self.method_name = method_name

    def __repr__(self) -> str:
        return f"<RpcProxy {self.method_name}>"

    def __call__(self, **params: Any) -> Awaitable[Any]:
        # No keyword arguments means a null params member, as getters expect
        logger.debug("Calling %s through the dynamic proxy", self.method_name)
        return self.channel.call(self.method_name, params or None)


class RpcCaller:
    """
    Namespace whose public attributes are remote methods.

    Names starting with "_" are looked up normally so the object stays
    introspectable.
    """

    def __init__(self, channel: RpcChannel) -> None:
        self._channel = channel

    def __getattribute__(self, name: str) -> Any:
        if name.startswith("_"):
            return super().__getattribute__(name)
        return RpcProxy(super().__getattribute__("_channel"), name)
