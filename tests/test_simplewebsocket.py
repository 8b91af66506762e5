"""
Tests for JsonSerializingWebSocket.
"""

from __future__ import annotations

import json

import pytest
from fakes import FakeWebSocket
from websockets.exceptions import ConnectionClosedOK

from wavelink_ws_rpc.exceptions import MalformedFrameError, RpcMessageTooLargeError
from wavelink_ws_rpc.schemas import JsonRpcRequest
from wavelink_ws_rpc.simplewebsocket import JsonSerializingWebSocket


@pytest.fixture
def raw() -> FakeWebSocket:
    return FakeWebSocket("ws://127.0.0.1:1884")


class TestJsonSerializingWebSocket:
    @pytest.mark.asyncio
    async def test_send_dict_and_model(self, raw: FakeWebSocket) -> None:
        ws = JsonSerializingWebSocket(raw)

        await ws.send({"id": 1, "jsonrpc": "2.0", "method": "getMixes", "params": None})
        await ws.send(JsonRpcRequest(id=2, method="getChannels"))

        assert [json.loads(m)["id"] for m in raw.sent] == [1, 2]
        assert json.loads(raw.sent[1])["params"] is None

    @pytest.mark.asyncio
    async def test_recv_text_and_bytes(self, raw: FakeWebSocket) -> None:
        ws = JsonSerializingWebSocket(raw)
        raw.push('{"jsonrpc": "2.0", "method": "mixChanged"}')
        raw.push(b'{"jsonrpc": "2.0", "id": 1, "result": 5}')

        assert (await ws.recv())["method"] == "mixChanged"
        assert (await ws.recv())["result"] == 5

    @pytest.mark.asyncio
    async def test_undecodable_frame(self, raw: FakeWebSocket) -> None:
        ws = JsonSerializingWebSocket(raw)
        raw.push("not json")
        raw.push(b"\xff\xfe")

        with pytest.raises(MalformedFrameError):
            await ws.recv()
        with pytest.raises(MalformedFrameError):
            await ws.recv()

    @pytest.mark.asyncio
    async def test_size_limit_in_bytes(self, raw: FakeWebSocket) -> None:
        """
        Verifies that:
        - The limit counts UTF-8 bytes, not characters
        - A frame exactly at the limit is accepted
        """
        ws = JsonSerializingWebSocket(raw, max_message_size=8)
        raw.push('"éééé"')  # 10 bytes
        raw.push('"abcdef"')  # 8 bytes

        with pytest.raises(RpcMessageTooLargeError):
            await ws.recv()
        assert await ws.recv() == "abcdef"

    @pytest.mark.asyncio
    async def test_closed_and_close(self, raw: FakeWebSocket) -> None:
        ws = JsonSerializingWebSocket(raw)

        assert not ws.closed
        await ws.close()

        assert ws.closed
        assert ws.raw is raw

    @pytest.mark.asyncio
    async def test_recv_after_local_close(self, raw: FakeWebSocket) -> None:
        """
        Verifies that:
        - recv() after close() raises a clean close, not a protocol error
        - The close frame carries the code passed to close()
        """
        ws = JsonSerializingWebSocket(raw)
        await ws.close(4000)

        with pytest.raises(ConnectionClosedOK) as info:
            await ws.recv()

        assert info.value.rcvd is not None
        assert info.value.rcvd.code == 4000
        assert info.value.rcvd_then_sent is True
