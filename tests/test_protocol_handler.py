"""
Comprehensive tests for RpcProtocolHandler.

This test module covers:
- Frame classification (response vs notification)
- Response routing to the promise manager
- Notification routing to the router
- JSON-RPC 2.0 compliance (version validation, required fields)
- Malformed frame handling
"""

from __future__ import annotations

from unittest.mock import AsyncMock

import pytest

from wavelink_ws_rpc._internal.promise_manager import RpcPromiseManager
from wavelink_ws_rpc._internal.protocol_handler import RpcProtocolHandler
from wavelink_ws_rpc.exceptions import MalformedFrameError
from wavelink_ws_rpc.schemas import (
    JsonRpcNotification,
    JsonRpcRequest,
    JsonRpcResponse,
)

# ============================================================================
# Fixtures
# ============================================================================


@pytest.fixture
def promise_manager() -> RpcPromiseManager:
    """Create promise manager."""
    return RpcPromiseManager()


@pytest.fixture
def mock_router() -> AsyncMock:
    """Create mock notification router."""
    return AsyncMock()


@pytest.fixture
def protocol_handler(
    promise_manager: RpcPromiseManager, mock_router: AsyncMock
) -> RpcProtocolHandler:
    """Create protocol handler with a mocked router."""
    return RpcProtocolHandler(promise_manager, mock_router)


# ============================================================================
# Frame Classification Tests
# ============================================================================


class TestParseFrame:
    """Test decoding of inbound frames."""

    def test_frame_with_id_is_response(self) -> None:
        frame = RpcProtocolHandler.parse_frame(
            {"jsonrpc": "2.0", "id": 3, "result": {"appName": "Wave Link"}}
        )

        assert isinstance(frame, JsonRpcResponse)
        assert frame.id == 3
        assert frame.result == {"appName": "Wave Link"}

    def test_null_result_is_valid_success(self) -> None:
        frame = RpcProtocolHandler.parse_frame({"jsonrpc": "2.0", "id": 1, "result": None})

        assert isinstance(frame, JsonRpcResponse)
        assert frame.is_success

    def test_error_response(self) -> None:
        frame = RpcProtocolHandler.parse_frame(
            {
                "jsonrpc": "2.0",
                "id": 2,
                "error": {"code": -32601, "message": "Method not found"},
            }
        )

        assert isinstance(frame, JsonRpcResponse)
        assert not frame.is_success
        assert frame.error.code == -32601

    def test_frame_without_id_is_notification(self) -> None:
        frame = RpcProtocolHandler.parse_frame(
            {"jsonrpc": "2.0", "method": "mixChanged", "params": {"id": "mix-1"}}
        )

        assert isinstance(frame, JsonRpcNotification)
        assert frame.method == "mixChanged"
        assert frame.params == {"id": "mix-1"}

    def test_missing_version_is_accepted(self) -> None:
        frame = RpcProtocolHandler.parse_frame({"method": "channelsChanged"})

        assert isinstance(frame, JsonRpcNotification)
        assert frame.params is None

    @pytest.mark.parametrize(
        "data",
        [
            "not a dict",
            [1, 2, 3],
            {"jsonrpc": "2.0"},
            {"jsonrpc": "2.0", "something": "else"},
        ],
    )
    def test_unknown_shapes_are_malformed(self, data: object) -> None:
        with pytest.raises(MalformedFrameError):
            RpcProtocolHandler.parse_frame(data)

    def test_wrong_version_is_malformed(self) -> None:
        with pytest.raises(MalformedFrameError, match="version") as exc_info:
            RpcProtocolHandler.parse_frame({"jsonrpc": "1.0", "id": 5, "result": 1})

        assert exc_info.value.call_id == 5

    def test_response_without_result_or_error_is_malformed(self) -> None:
        """
        Verifies that:
        - A response envelope must carry either result or error
        - The request id is kept on the error so its call can be failed
        """
        with pytest.raises(MalformedFrameError) as exc_info:
            RpcProtocolHandler.parse_frame({"jsonrpc": "2.0", "id": 8})

        assert exc_info.value.call_id == 8

    def test_notification_with_invalid_method_is_malformed(self) -> None:
        with pytest.raises(MalformedFrameError):
            RpcProtocolHandler.parse_frame({"jsonrpc": "2.0", "method": 42})


# ============================================================================
# Routing Tests
# ============================================================================


class TestRouting:
    """Test routing of decoded frames."""

    @pytest.mark.asyncio
    async def test_response_settles_pending_call(
        self,
        protocol_handler: RpcProtocolHandler,
        promise_manager: RpcPromiseManager,
        mock_router: AsyncMock,
    ) -> None:
        """
        Verifies that:
        - A response reaches the matching pending call
        - The router is not involved
        """
        promise = promise_manager.create_promise(
            JsonRpcRequest(id=promise_manager.next_id(), method="getMixes")
        )

        await protocol_handler.handle_message(
            {"jsonrpc": "2.0", "id": promise.call_id, "result": {"mixes": []}}
        )

        response = await promise.wait()
        assert response.result == {"mixes": []}
        mock_router.dispatch.assert_not_called()

    @pytest.mark.asyncio
    async def test_unmatched_response_is_dropped(
        self, protocol_handler: RpcProtocolHandler, mock_router: AsyncMock
    ) -> None:
        await protocol_handler.handle_message({"jsonrpc": "2.0", "id": 404, "result": 1})

        mock_router.dispatch.assert_not_called()

    @pytest.mark.asyncio
    async def test_notification_goes_to_router(
        self, protocol_handler: RpcProtocolHandler, mock_router: AsyncMock
    ) -> None:
        await protocol_handler.handle_message(
            {"jsonrpc": "2.0", "method": "levelMeterChanged", "params": [[], [], [], []]}
        )

        mock_router.dispatch.assert_awaited_once()
        (notification,) = mock_router.dispatch.await_args.args
        assert notification.method == "levelMeterChanged"

    @pytest.mark.asyncio
    async def test_malformed_frame_raises(
        self, protocol_handler: RpcProtocolHandler, mock_router: AsyncMock
    ) -> None:
        with pytest.raises(MalformedFrameError):
            await protocol_handler.handle_message({"jsonrpc": "2.0"})

        mock_router.dispatch.assert_not_called()
