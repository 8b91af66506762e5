"""Configuration dataclasses for the Wave Link WebSocket RPC client.

This module provides immutable, validated configuration objects for all aspects
of the client behavior including endpoint discovery, reconnection, the
WebSocket handshake and backpressure limits.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any

DEFAULT_HOST = "127.0.0.1"
DEFAULT_ORIGIN = "streamdeck://"

# Wave Link binds to the first free port in this range
DEFAULT_MIN_PORT = 1884
DEFAULT_MAX_PORT = 1893
DEFAULT_MAX_PORT_ATTEMPTS = 60


@dataclass(frozen=True)
class DiscoveryConfig:
    """Configuration for endpoint discovery over the port range.

    The server does not listen on a fixed port, so the client probes an
    inclusive range, wrapping around until it either connects or runs out of
    attempts.

    Parameters
    ----------
    min_port : int, default 1884
        First port of the inclusive probe range.
    max_port : int, default 1893
        Last port of the inclusive probe range.
    max_port_attempts : int, default 60
        Total number of connection attempts before discovery fails. This is
        independent of the range width; with the defaults the range is
        scanned six times.

    Examples
    --------
    >>> config = DiscoveryConfig()
    >>> config.width
    10
    """

    min_port: int = DEFAULT_MIN_PORT
    max_port: int = DEFAULT_MAX_PORT
    max_port_attempts: int = DEFAULT_MAX_PORT_ATTEMPTS

    @property
    def width(self) -> int:
        """Number of ports in the probe range."""
        return self.max_port - self.min_port + 1

    def __post_init__(self) -> None:
        """Validate configuration after initialization.

        Raises
        ------
        ValueError
            If a port is outside 1-65535, if the range is inverted, or if
            max_port_attempts is not positive.
        """
        for name in ("min_port", "max_port"):
            port = getattr(self, name)
            if not 0 < port < 65536:
                raise ValueError(f"{name} must be between 1 and 65535, got {port}")

        if self.max_port < self.min_port:
            raise ValueError(
                f"max_port ({self.max_port}) must be >= min_port ({self.min_port})"
            )

        if self.max_port_attempts < 1:
            raise ValueError(
                f"max_port_attempts must be at least 1, got {self.max_port_attempts}"
            )

    def validate(self) -> None:
        """Explicitly validate the configuration.

        Validation is already done in __post_init__.
        """


@dataclass(frozen=True)
class WebSocketConnectionConfig:
    """Configuration for the WebSocket handshake and protocol settings.

    Parameters
    ----------
    origin : str, default "streamdeck://"
        Value of the ``Origin`` header sent during the opening handshake.
        Wave Link rejects handshakes that lack an allowed origin.
    open_timeout : float, default 2.0
        Seconds allowed for each probe's TCP connect and handshake. Keeps a
        port that accepts TCP but never answers from stalling discovery.
    ping_interval : float | None, default 20.0
        Interval in seconds between protocol-level pings, or None to disable.
    ping_timeout : float | None, default 20.0
        Seconds to wait for a pong before treating the connection as lost.
    compression : str | None, default None
        WebSocket compression ("deflate") or None. The mixer runs on the local
        machine, so compression is off by default.

    Examples
    --------
    >>> config = WebSocketConnectionConfig(origin="myapp://")
    >>> config.validate()
    """

    origin: str = DEFAULT_ORIGIN
    open_timeout: float = 2.0
    ping_interval: float | None = 20.0
    ping_timeout: float | None = 20.0
    compression: str | None = None

    def validate(self) -> None:
        """Explicitly validate the configuration.

        Raises
        ------
        ValueError
            If compression is not None or "deflate", if open_timeout is not
            positive, or if a ping setting is negative.
        """
        if self.compression is not None and self.compression != "deflate":
            raise ValueError(
                f"Invalid compression method: '{self.compression}'. "
                f"Supported values: None (disabled) or 'deflate' (permessage-deflate)"
            )

        if self.open_timeout <= 0:
            raise ValueError(f"open_timeout must be positive, got {self.open_timeout}")

        if self.ping_interval is not None and self.ping_interval < 0:
            raise ValueError(
                f"ping_interval must be non-negative, got {self.ping_interval}"
            )

        if self.ping_timeout is not None and self.ping_timeout < 0:
            raise ValueError(
                f"ping_timeout must be non-negative, got {self.ping_timeout}"
            )

    def __post_init__(self) -> None:
        self.validate()


@dataclass(frozen=True)
class RpcConnectionConfig:
    """Configuration for the connection lifecycle and reconnection.

    Parameters
    ----------
    host : str, default "127.0.0.1"
        Host running Wave Link.
    auto_reconnect : bool, default True
        Reconnect automatically after the connection is lost, unless the
        caller disconnected explicitly.
    reconnect_delay : float, default 2.0
        Fixed delay in seconds before each reconnection cycle.
    max_reconnect_attempts : int, default 10
        Number of reconnection cycles before the client gives up and stays
        idle until connect() is called again.
    default_response_timeout : float | None, default None
        Timeout in seconds applied to calls that do not pass their own. None
        means a call waits until its response arrives or the connection
        closes.

    Examples
    --------
    >>> config = RpcConnectionConfig(reconnect_delay=0.5, max_reconnect_attempts=3)
    >>> assert config.auto_reconnect
    """

    host: str = DEFAULT_HOST
    auto_reconnect: bool = True
    reconnect_delay: float = 2.0
    max_reconnect_attempts: int = 10
    default_response_timeout: float | None = None

    def __post_init__(self) -> None:
        """Validate configuration after initialization.

        Raises
        ------
        ValueError
            If host is empty, if reconnect parameters are invalid, or if
            the response timeout is not positive.
        """
        if not self.host:
            raise ValueError("host must be a non-empty string")

        if self.reconnect_delay < 0:
            raise ValueError(
                f"reconnect_delay must be non-negative, got {self.reconnect_delay}"
            )

        if self.max_reconnect_attempts < 0:
            raise ValueError(
                f"max_reconnect_attempts must be non-negative, got {self.max_reconnect_attempts}"
            )

        if (
            self.default_response_timeout is not None
            and self.default_response_timeout <= 0
        ):
            raise ValueError(
                f"default_response_timeout must be positive, got {self.default_response_timeout}"
            )

    def validate(self) -> None:
        """Explicitly validate the configuration.

        Validation is already done in __post_init__.
        """


@dataclass(frozen=True)
class RpcBackpressureConfig:
    """Configuration for backpressure management and message limits.

    Parameters
    ----------
    max_pending_requests : int, default 1000
        Maximum number of outstanding calls. Further calls fail with
        RpcBackpressureError until responses arrive.
    max_message_size : int, default 10485760
        Maximum size in bytes for a single inbound message (default 10MB).
    """

    max_pending_requests: int = 1000
    max_message_size: int = 10 * 1024 * 1024  # 10MB

    def __post_init__(self) -> None:
        """Validate configuration after initialization.

        Raises
        ------
        ValueError
            If max_pending_requests or max_message_size are not positive.
        """
        if self.max_pending_requests <= 0:
            raise ValueError(
                f"max_pending_requests must be positive, got {self.max_pending_requests}"
            )

        if self.max_message_size <= 0:
            raise ValueError(
                f"max_message_size must be positive, got {self.max_message_size}"
            )

    def validate(self) -> None:
        """Explicitly validate the configuration.

        Validation is already done in __post_init__.
        """


@dataclass(frozen=True)
class WaveLinkClientConfig:
    """Complete configuration for the Wave Link client.

    Parameters
    ----------
    connection : RpcConnectionConfig, default RpcConnectionConfig()
        Host, reconnection and response timeout settings.
    discovery : DiscoveryConfig, default DiscoveryConfig()
        Port range and attempt budget for endpoint discovery.
    websocket : WebSocketConnectionConfig, default WebSocketConnectionConfig()
        Handshake origin and WebSocket protocol settings.
    backpressure : RpcBackpressureConfig, default RpcBackpressureConfig()
        Pending call and message size limits.
    websocket_kwargs : dict[str, Any], default {}
        Additional keyword arguments passed to ``websockets.connect``.

    Examples
    --------
    >>> config = WaveLinkClientConfig.from_kwargs(host="192.168.1.20", origin="myapp://")
    >>> config.connection.host
    '192.168.1.20'

    >>> config = WaveLinkClientConfig.development_defaults()
    >>> assert not config.connection.auto_reconnect
    """

    connection: RpcConnectionConfig = field(default_factory=RpcConnectionConfig)
    discovery: DiscoveryConfig = field(default_factory=DiscoveryConfig)
    websocket: WebSocketConnectionConfig = field(
        default_factory=WebSocketConnectionConfig
    )
    backpressure: RpcBackpressureConfig = field(default_factory=RpcBackpressureConfig)
    websocket_kwargs: dict[str, Any] = field(default_factory=dict)

    def validate(self) -> None:
        """Validate all sub-configurations.

        Raises
        ------
        ValueError
            If any sub-configuration validation fails.
        """
        self.connection.validate()
        self.discovery.validate()
        self.websocket.validate()
        self.backpressure.validate()

    @classmethod
    def from_kwargs(
        cls,
        host: str = DEFAULT_HOST,
        auto_reconnect: bool = True,
        reconnect_delay: float = 2.0,
        max_reconnect_attempts: int = 10,
        origin: str = DEFAULT_ORIGIN,
    ) -> WaveLinkClientConfig:
        """Build a configuration from the flat client options.

        Parameters
        ----------
        host : str
            Host running Wave Link.
        auto_reconnect : bool
            Whether to reconnect after the connection is lost.
        reconnect_delay : float
            Seconds to wait before each reconnection cycle.
        max_reconnect_attempts : int
            Reconnection cycles before giving up.
        origin : str
            Handshake ``Origin`` header value.
        """
        return cls(
            connection=RpcConnectionConfig(
                host=host,
                auto_reconnect=auto_reconnect,
                reconnect_delay=reconnect_delay,
                max_reconnect_attempts=max_reconnect_attempts,
            ),
            websocket=WebSocketConnectionConfig(origin=origin),
        )

    @classmethod
    def defaults(cls) -> WaveLinkClientConfig:
        """Create the configuration matching the mixer's documented defaults."""
        return cls()

    @classmethod
    def development_defaults(cls) -> WaveLinkClientConfig:
        """Create configuration with development-friendly defaults.

        - No automatic reconnection, so a crashed mixer surfaces immediately
        - A single scan of the port range with short probes
        - A 10 second response timeout so a stuck call fails visibly
        """
        return cls(
            connection=RpcConnectionConfig(
                auto_reconnect=False,
                reconnect_delay=0.5,
                default_response_timeout=10.0,
            ),
            discovery=DiscoveryConfig(
                max_port_attempts=DEFAULT_MAX_PORT - DEFAULT_MIN_PORT + 1
            ),
            websocket=WebSocketConnectionConfig(open_timeout=0.5),
        )
