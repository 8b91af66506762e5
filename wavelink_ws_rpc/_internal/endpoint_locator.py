"""
Endpoint discovery component for Wave Link connections.

Wave Link listens on the first free port of a small fixed range, so the
client cannot know the endpoint in advance. EndpointLocator probes the range
port by port, wrapping around, until a socket opens or the attempt budget is
spent.
"""

from __future__ import annotations

import inspect
from typing import TYPE_CHECKING, Any, TypeVar

from tenacity import AsyncRetrying, RetryError, retry_if_exception_type, stop_after_attempt

from ..config import DEFAULT_MAX_PORT, DEFAULT_MAX_PORT_ATTEMPTS, DEFAULT_MIN_PORT
from ..exceptions import DiscoveryCycleError, DiscoveryError
from ..logger import get_logger
from ..utils import build_url

if TYPE_CHECKING:
    from collections.abc import Awaitable, Callable

    from ..config import DiscoveryConfig

logger = get_logger("ENDPOINT_LOCATOR")

T = TypeVar("T")


class EndpointLocator:
    """
    Finds the port Wave Link is listening on.

    The locator keeps a cursor over the inclusive range ``[min_port,
    max_port]`` and a count of failed attempts. Each failed probe advances the
    cursor, wrapping from ``max_port`` back to ``min_port``; every wrap is
    reported through the ``on_cycle`` callback. Discovery fails once
    ``max_attempts`` probes in a row have failed, regardless of the range
    width.

    The attempt loop is driven by tenacity with no wait between probes: a
    refused local port fails immediately, so sleeping would only slow down
    the scan.

    Parameters
    ----------
    host : str
        Host to probe.
    min_port : int, optional
        First port of the range (default 1884).
    max_port : int, optional
        Last port of the range (default 1893).
    max_attempts : int, optional
        Total probes before giving up (default 60).

    Examples
    --------
    >>> locator = EndpointLocator("127.0.0.1")
    >>> socket, port = await locator.locate(open_socket)
    """

    def __init__(
        self,
        host: str,
        min_port: int = DEFAULT_MIN_PORT,
        max_port: int = DEFAULT_MAX_PORT,
        max_attempts: int = DEFAULT_MAX_PORT_ATTEMPTS,
    ) -> None:
        if max_port < min_port:
            raise ValueError(
                f"max_port ({max_port}) must be >= min_port ({min_port})"
            )
        if max_attempts < 1:
            raise ValueError(f"max_attempts must be at least 1, got {max_attempts}")

        self._host = host
        self._min_port = min_port
        self._max_port = max_port
        self._max_attempts = max_attempts
        self._current_port = min_port
        self._attempts = 0

    @classmethod
    def from_config(cls, host: str, config: DiscoveryConfig) -> EndpointLocator:
        return cls(
            host,
            min_port=config.min_port,
            max_port=config.max_port,
            max_attempts=config.max_port_attempts,
        )

    @property
    def host(self) -> str:
        return self._host

    @property
    def min_port(self) -> int:
        return self._min_port

    @property
    def max_port(self) -> int:
        return self._max_port

    @property
    def max_attempts(self) -> int:
        return self._max_attempts

    @property
    def width(self) -> int:
        """Number of ports in the range."""
        return self._max_port - self._min_port + 1

    @property
    def current_port(self) -> int:
        """The next port to probe, or the port of the last successful probe."""
        return self._current_port

    @property
    def attempts(self) -> int:
        """Failed probes since the last reset or successful open."""
        return self._attempts

    def reset(self) -> None:
        """
        Move the cursor back to the start of the range and clear the attempt count.
        """
        self._current_port = self._min_port
        self._attempts = 0

    def _advance(self) -> bool:
        """
        Move the cursor to the next port.

        Returns:
            True if the cursor wrapped around to min_port
        """
        if self._current_port >= self._max_port:
            self._current_port = self._min_port
            return True
        self._current_port += 1
        return False

    def _cycle_error(self) -> DiscoveryCycleError:
        return DiscoveryCycleError(
            f"Failed to connect on ports {self._min_port}-{self._max_port}. "
            f"Attempt {self._attempts // self.width + 1}. Retrying..."
        )

    def _exhausted_error(self) -> DiscoveryError:
        return DiscoveryError(
            f"Failed to connect to Wave Link after {self._max_attempts} attempts. "
            f"Tried ports {self._min_port}-{self._max_port}. "
            f"Make sure Wave Link is running."
        )

    async def _probe(
        self,
        open_socket: Callable[[str], Awaitable[T]],
        on_cycle: Callable[[DiscoveryCycleError], Any] | None,
    ) -> T:
        url = build_url(self._host, self._current_port)
        try:
            socket = await open_socket(url)
        except Exception as e:
            self._attempts += 1
            logger.debug(
                f"Probe of {url} failed ({self._attempts}/{self._max_attempts}): {e!r}"
            )
            if self._advance():
                cycle_error = self._cycle_error()
                logger.warning(str(cycle_error))
                if on_cycle is not None:
                    result = on_cycle(cycle_error)
                    if inspect.isawaitable(result):
                        await result
            raise

        self._attempts = 0
        logger.info(f"Connected to Wave Link at {url}")
        return socket

    async def locate(
        self,
        open_socket: Callable[[str], Awaitable[T]],
        on_cycle: Callable[[DiscoveryCycleError], Any] | None = None,
    ) -> tuple[T, int]:
        """
        Probe the port range until a socket opens.

        Parameters
        ----------
        open_socket : Callable[[str], Awaitable[T]]
            Opens a socket to the given ``ws://`` URL, raising on failure.
        on_cycle : Callable[[DiscoveryCycleError], Any] | None, optional
            Called (and awaited, if it returns an awaitable) every time the
            cursor wraps around the range.

        Returns
        -------
        tuple[T, int]
            The opened socket and the port it was opened on.

        Raises
        ------
        DiscoveryError
            If ``max_attempts`` probes failed. The last probe failure is
            chained as the cause.
        """
        remaining = self._max_attempts - self._attempts
        if remaining <= 0:
            raise self._exhausted_error()

        retrying = AsyncRetrying(
            stop=stop_after_attempt(remaining),
            retry=retry_if_exception_type(Exception),
        )
        try:
            async for attempt in retrying:
                with attempt:
                    socket = await self._probe(open_socket, on_cycle)
        except RetryError as e:
            error = self._exhausted_error()
            logger.error(str(error))
            raise error from e.last_attempt.exception()

        return socket, self._current_port
