"""
Promise management component for tracking RPC requests and responses.

This module handles the lifecycle of pending calls: identifier allocation,
request tracking, response matching, and bulk failure when the connection
is lost.
"""

from __future__ import annotations

import asyncio
import itertools
import time
from typing import TYPE_CHECKING

from ..exceptions import RpcBackpressureError, RpcChannelClosedError, RpcError
from ..logger import get_logger

if TYPE_CHECKING:
    from collections.abc import Awaitable

    from ..schemas import JsonRpcRequest, JsonRpcResponse

logger = get_logger("RPC_PROMISE_MANAGER")

# Default maximum number of pending requests per client
# This prevents resource exhaustion from request flooding
DEFAULT_MAX_PENDING_REQUESTS = 1000

CONNECTION_CLOSED_MESSAGE = "Connection closed"


class RpcPromise:
    """
    Future and id wrapper that holds the state of a pending request.

    The wrapped asyncio.Future is settled exactly once: with the matching
    response, or with an exception when the connection is lost.

    Attributes:
        created_at: Timestamp when the promise was created
    """

    def __init__(self, request: JsonRpcRequest) -> None:
        self._request = request
        self._id = request.id
        self._future: asyncio.Future[JsonRpcResponse] = (
            asyncio.get_running_loop().create_future()
        )
        self.created_at = time.time()

    @property
    def request(self) -> JsonRpcRequest:
        return self._request

    @property
    def call_id(self) -> int:
        return self._id

    def age(self) -> float:
        """
        Get the age of this promise in seconds.
        """
        return time.time() - self.created_at

    def done(self) -> bool:
        return self._future.done()

    def resolve(self, response: JsonRpcResponse) -> bool:
        """
        Settle the promise with its response.

        Returns:
            False if the promise was already settled
        """
        if self._future.done():
            return False
        self._future.set_result(response)
        return True

    def reject(self, error: BaseException) -> bool:
        """
        Settle the promise with an error.

        Returns:
            False if the promise was already settled
        """
        if self._future.done():
            return False
        self._future.set_exception(error)
        return True

    def wait(self) -> Awaitable[JsonRpcResponse]:
        """
        Awaitable that resolves with the response or raises the rejection.
        """
        return self._future


class RpcPromiseManager:
    """
    Manages the lifecycle of RPC promises for tracking requests and responses.

    This component handles:
    - Allocating request identifiers from a monotonic counter
    - Creating and storing promises for outgoing requests
    - Enforcing max pending request limits (backpressure)
    - Matching incoming responses to pending requests
    - Failing every pending request when the connection is lost

    The manager outlives individual connections. Its identifier counter is
    never reset, so a number is never handed out again while a promise that
    carried it might still be referenced.
    """

    def __init__(self, max_pending_requests: int | None = None) -> None:
        """
        Initialize the promise manager.

        Args:
            max_pending_requests: Maximum number of pending requests allowed.
                                 If None, uses DEFAULT_MAX_PENDING_REQUESTS (1000).
                                 When this limit is reached, create_promise() will
                                 raise RpcBackpressureError.
        """
        # Pending requests - id-mapped to promise
        self._requests: dict[int, RpcPromise] = {}
        self._ids = itertools.count(1)
        self._max_pending_requests = (
            max_pending_requests
            if max_pending_requests is not None
            else DEFAULT_MAX_PENDING_REQUESTS
        )

    def next_id(self) -> int:
        """
        Allocate the next request identifier.

        Returns:
            A positive integer never returned before by this manager
        """
        return next(self._ids)

    def create_promise(self, request: JsonRpcRequest) -> RpcPromise:
        """
        Create and store a promise for a request.

        Args:
            request: The JSON-RPC request to create a promise for

        Returns:
            A new RpcPromise instance

        Raises:
            RpcBackpressureError: If max pending requests limit is reached
            ValueError: If the request ID is already in use (collision)
        """
        # Check backpressure limit BEFORE creating the promise
        if len(self._requests) >= self._max_pending_requests:
            raise RpcBackpressureError(
                f"Backpressure: maximum pending requests ({self._max_pending_requests}) "
                f"reached. Wait for responses before sending more requests. "
                f"Current pending: {len(self._requests)}"
            )

        if request.id in self._requests:
            raise ValueError(
                f"Request ID collision detected: '{request.id}' is already in use for a pending request. "
                f"Each RPC call must have a unique ID."
            )

        promise = RpcPromise(request)
        self._requests[request.id] = promise
        return promise

    def store_response(self, response: JsonRpcResponse) -> bool:
        """
        Settle the pending promise matching a response.

        A response for an unknown id is not an error: its caller may already
        have been failed by a disconnect or a timeout.

        Args:
            response: The JSON-RPC response to deliver

        Returns:
            True if the response matched a pending request, False otherwise
        """
        promise = self._requests.pop(response.id, None) if response.id is not None else None
        if promise is None:
            logger.debug(f"Dropping response for unknown request id {response.id!r}")
            return False
        return promise.resolve(response)

    def reject(self, call_id: int, error: BaseException) -> bool:
        """
        Fail a single pending call.

        Returns:
            True if a pending call with this id existed
        """
        promise = self._requests.pop(call_id, None)
        if promise is None:
            return False
        return promise.reject(error)

    def reject_all(
        self,
        error_cls: type[RpcError] = RpcChannelClosedError,
        message: str = CONNECTION_CLOSED_MESSAGE,
    ) -> int:
        """
        Fail every pending call, leaving the table empty.

        The table is cleared before any promise is settled, so callbacks
        woken by the rejections observe an empty table.

        Args:
            error_cls: Exception type raised to each waiting caller
            message: Exception message

        Returns:
            Number of calls that were failed
        """
        pending = list(self._requests.values())
        self._requests.clear()
        for promise in pending:
            promise.reject(error_cls(message))
        if pending:
            logger.info(f"Failed {len(pending)} pending call(s): {message}")
        return len(pending)

    def get_saved_promise(self, call_id: int) -> RpcPromise:
        """
        Retrieve a stored promise by call ID.

        Raises:
            KeyError: If no promise exists for the given call ID
        """
        return self._requests[call_id]

    def clear_saved_call(self, call_id: int) -> None:
        """
        Forget a call without settling it.
        """
        self._requests.pop(call_id, None)

    async def wait_for_response(
        self,
        promise: RpcPromise,
        timeout: float | None = None,
    ) -> JsonRpcResponse:
        """
        Wait for a response, optionally bounded by a timeout.

        Args:
            promise: The promise to wait on
            timeout: Optional timeout in seconds (None = wait until settled)

        Returns:
            The JSON-RPC response for the request

        Raises:
            asyncio.TimeoutError: If the timeout expires
            RpcChannelClosedError: If the connection closes before the response arrives
        """
        try:
            if timeout is None:
                return await promise.wait()
            return await asyncio.wait_for(promise.wait(), timeout)
        except asyncio.TimeoutError:
            raise asyncio.TimeoutError(
                f"Timeout waiting for response to call {promise.call_id}"
            ) from None
        finally:
            # Late responses for this id become no-ops
            self.clear_saved_call(promise.call_id)

    def get_pending_count(self) -> int:
        """
        Get the current number of pending requests.
        """
        return len(self._requests)

    def get_pending_ids(self) -> list[int]:
        return list(self._requests)

    def get_max_pending_requests(self) -> int:
        """
        Get the maximum allowed pending requests.
        """
        return self._max_pending_requests
