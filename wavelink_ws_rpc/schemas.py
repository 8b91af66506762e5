from enum import Enum
from typing import Any, Optional, Union

from pydantic import BaseModel, field_validator, model_validator

JSONRPC_VERSION = "2.0"


# Standard JSON-RPC 2.0 error codes
# https://www.jsonrpc.org/specification#error_object
class JsonRpcErrorCode(int, Enum):
    """
    Standard JSON-RPC 2.0 error codes.

    The mixer answers with these codes for envelope-level failures; anything
    in the -32000 to -32099 range is an application error defined by the
    server.

    Attributes
    ----------
    PARSE_ERROR : int
        Invalid JSON was received (-32700).
    INVALID_REQUEST : int
        The JSON sent is not a valid Request object (-32600).
    METHOD_NOT_FOUND : int
        The method does not exist or is not available (-32601).
    INVALID_PARAMS : int
        Invalid method parameters (-32602).
    INTERNAL_ERROR : int
        Internal JSON-RPC error (-32603).
    """

    PARSE_ERROR = -32700  # Invalid JSON was received by the server
    INVALID_REQUEST = -32600  # The JSON sent is not a valid Request object
    METHOD_NOT_FOUND = -32601  # The method does not exist / is not available
    INVALID_PARAMS = -32602  # Invalid method parameter(s)
    INTERNAL_ERROR = -32603  # Internal JSON-RPC error


class JsonRpcRequest(BaseModel):
    """
    JSON-RPC 2.0 request format, as sent to the mixer.

    Attributes:
        id: Positive request identifier allocated by the call correlator
        jsonrpc: Protocol version (always "2.0")
        method: Name of the method to call
        params: Method parameters. Always serialized, as ``null`` when omitted.
    """

    id: int
    jsonrpc: str = JSONRPC_VERSION
    method: str
    params: Optional[Any] = None

    @field_validator("id")
    @classmethod
    def validate_id(cls, v: int) -> int:
        """Request identifiers are positive integers.

        Raises
        ------
        ValueError
            If the ID is zero or negative
        """
        if v <= 0:
            raise ValueError("Request ID must be a positive integer")
        return v


class JsonRpcError(BaseModel):
    """
    JSON-RPC 2.0 error object format.

    Parameters
    ----------
    code : int
        Numeric error code indicating the error type.
    message : str
        Human-readable error message; becomes the message of the
        RemoteError raised to the caller.
    data : Any, optional
        Additional error information (default is None).
    """

    code: int
    message: str
    data: Optional[Any] = None


class JsonRpcResponse(BaseModel):
    """
    JSON-RPC 2.0 response message format.

    A response carries the identifier of the request it answers and exactly
    one of ``result`` or ``error``. A ``null`` result is a valid success.

    Examples
    --------
    >>> JsonRpcResponse.model_validate({"jsonrpc": "2.0", "id": 1, "result": None})
    JsonRpcResponse(jsonrpc='2.0', id=1, result=None, error=None)
    """

    jsonrpc: str = JSONRPC_VERSION
    id: Optional[Union[int, str]] = None
    result: Optional[Any] = None
    error: Optional[JsonRpcError] = None

    @model_validator(mode="before")
    @classmethod
    def check_result_or_error(cls, data: Any) -> Any:
        if not isinstance(data, dict):
            return data
        has_error = data.get("error") is not None
        has_result = "result" in data
        if has_error and has_result and data["result"] is not None:
            raise ValueError("Response must not carry both 'result' and 'error'")
        if not has_error and not has_result:
            raise ValueError("Response must carry either 'result' or 'error'")
        return data

    @property
    def is_success(self) -> bool:
        return self.error is None


class JsonRpcNotification(BaseModel):
    """
    JSON-RPC 2.0 notification pushed by the server.

    Notifications carry a method name and no identifier; the absence of
    ``id`` is what tells them apart from responses.
    """

    jsonrpc: str = JSONRPC_VERSION
    method: str
    params: Optional[Any] = None
