"""
Protocol handler component for JSON-RPC 2.0 message parsing and routing.

This module decodes inbound frames into responses or notifications and
routes them to the pending-call table or the notification router.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any, Union

from pydantic import ValidationError

from ..exceptions import MalformedFrameError
from ..logger import get_logger
from ..schemas import JSONRPC_VERSION, JsonRpcNotification, JsonRpcResponse
from ..utils import pydantic_parse

if TYPE_CHECKING:
    from .notification_router import NotificationRouter
    from .promise_manager import RpcPromiseManager

logger = get_logger("RPC_PROTOCOL")

InboundFrame = Union[JsonRpcResponse, JsonRpcNotification]


class RpcProtocolHandler:
    """
    Handles JSON-RPC 2.0 protocol message parsing and routing.

    This component:
    - Decodes inbound frames into responses or notifications
    - Hands responses to the promise manager
    - Hands notifications to the notification router
    - Rejects frames that are not valid JSON-RPC 2.0 envelopes

    A frame carrying an ``id`` member is a response; a frame without one but
    with a ``method`` is a notification. The decision is made once, here.
    """

    def __init__(
        self,
        promise_manager: RpcPromiseManager,
        router: NotificationRouter,
    ) -> None:
        """
        Initialize the protocol handler.

        Args:
            promise_manager: Component for managing request/response promises
            router: Component turning notifications into events
        """
        self._promise_manager = promise_manager
        self._router = router

    @staticmethod
    def parse_frame(data: Any) -> InboundFrame:
        """
        Decode a deserialized frame into a response or a notification.

        Args:
            data: The parsed JSON message data

        Returns:
            JsonRpcResponse if the frame has an ``id``, else JsonRpcNotification

        Raises:
            MalformedFrameError: If the frame is not a JSON-RPC 2.0 envelope
        """
        if not isinstance(data, dict):
            raise MalformedFrameError(
                f"Expected a JSON object, got {type(data).__name__}"
            )

        call_id = data.get("id")
        version = data.get("jsonrpc", JSONRPC_VERSION)
        if version != JSONRPC_VERSION:
            raise MalformedFrameError(
                f"Invalid JSON-RPC version: {version!r}", call_id=call_id
            )

        try:
            if "id" in data:
                return pydantic_parse(JsonRpcResponse, data)
            if "method" in data:
                return pydantic_parse(JsonRpcNotification, data)
        except ValidationError as e:
            raise MalformedFrameError(
                f"Invalid JSON-RPC envelope: {e}", call_id=call_id
            ) from e

        raise MalformedFrameError(f"Unknown message format: {data}")

    async def handle_message(self, data: Any) -> None:
        """
        Route an incoming message to the appropriate handler.

        Args:
            data: The parsed JSON message data

        Raises:
            MalformedFrameError: If the message is not a JSON-RPC 2.0 envelope
        """
        logger.debug(f"Processing received message: {data}")
        frame = self.parse_frame(data)
        if isinstance(frame, JsonRpcResponse):
            await self.handle_response(frame)
        else:
            await self.handle_notification(frame)

    async def handle_response(self, response: JsonRpcResponse) -> None:
        """
        Deliver a response to the pending call that awaits it.

        Args:
            response: The JSON-RPC response to handle
        """
        logger.debug(f"Handling RPC response: {response}")
        self._promise_manager.store_response(response)

    async def handle_notification(self, notification: JsonRpcNotification) -> None:
        logger.debug(f"Handling notification: {notification.method}")
        await self._router.dispatch(notification)
