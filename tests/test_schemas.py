"""
Tests for the JSON-RPC 2.0 message models.
"""

from __future__ import annotations

import json

import pytest
from pydantic import ValidationError

from wavelink_ws_rpc.schemas import (
    JsonRpcErrorCode,
    JsonRpcNotification,
    JsonRpcRequest,
    JsonRpcResponse,
)
from wavelink_ws_rpc.utils import pydantic_dump, pydantic_parse, pydantic_serialize


class TestRequest:
    def test_null_params_kept_on_the_wire(self) -> None:
        request = JsonRpcRequest(id=3, method="getMixes")

        assert json.loads(pydantic_serialize(request)) == {
            "id": 3,
            "jsonrpc": "2.0",
            "method": "getMixes",
            "params": None,
        }

    @pytest.mark.parametrize("bad_id", [0, -1])
    def test_non_positive_id_rejected(self, bad_id: int) -> None:
        with pytest.raises(ValidationError):
            JsonRpcRequest(id=bad_id, method="getMixes")

    def test_dump(self) -> None:
        request = JsonRpcRequest(id=1, method="setMix", params={"id": "m"})

        assert pydantic_dump(request)["params"] == {"id": "m"}


class TestResponse:
    def test_null_result_is_success(self) -> None:
        response = pydantic_parse(JsonRpcResponse, {"jsonrpc": "2.0", "id": 1, "result": None})

        assert response.is_success
        assert response.result is None

    def test_error_response(self) -> None:
        response = pydantic_parse(
            JsonRpcResponse,
            {
                "jsonrpc": "2.0",
                "id": 2,
                "error": {"code": -32601, "message": "Method not found"},
            },
        )

        assert not response.is_success
        assert response.error is not None
        assert response.error.code == JsonRpcErrorCode.METHOD_NOT_FOUND
        assert response.error.data is None

    def test_missing_result_and_error_rejected(self) -> None:
        with pytest.raises(ValidationError):
            pydantic_parse(JsonRpcResponse, {"jsonrpc": "2.0", "id": 1})

    def test_both_result_and_error_rejected(self) -> None:
        with pytest.raises(ValidationError):
            pydantic_parse(
                JsonRpcResponse,
                {
                    "jsonrpc": "2.0",
                    "id": 1,
                    "result": {"ok": True},
                    "error": {"code": 1, "message": "no"},
                },
            )


class TestNotification:
    def test_params_any_shape(self) -> None:
        notification = pydantic_parse(
            JsonRpcNotification,
            {"jsonrpc": "2.0", "method": "levelMeterChanged", "params": [[], [], [], []]},
        )

        assert notification.method == "levelMeterChanged"
        assert notification.params == [[], [], [], []]

    def test_missing_method_rejected(self) -> None:
        with pytest.raises(ValidationError):
            pydantic_parse(JsonRpcNotification, {"jsonrpc": "2.0", "params": {}})
