"""
Tests for the client configuration dataclasses.
"""

from __future__ import annotations

import dataclasses

import pytest

from wavelink_ws_rpc.config import (
    DiscoveryConfig,
    RpcBackpressureConfig,
    RpcConnectionConfig,
    WaveLinkClientConfig,
    WebSocketConnectionConfig,
)


class TestDefaults:
    def test_documented_defaults(self) -> None:
        """
        Verifies that:
        - Discovery scans 1884-1893 with 60 attempts
        - Reconnection is on, every 2 seconds, 10 cycles
        - The handshake origin is streamdeck://
        - There is no response timeout
        """
        config = WaveLinkClientConfig.defaults()

        assert config.discovery.min_port == 1884
        assert config.discovery.max_port == 1893
        assert config.discovery.max_port_attempts == 60
        assert config.discovery.width == 10
        assert config.connection.host == "127.0.0.1"
        assert config.connection.auto_reconnect is True
        assert config.connection.reconnect_delay == 2.0
        assert config.connection.max_reconnect_attempts == 10
        assert config.connection.default_response_timeout is None
        assert config.websocket.origin == "streamdeck://"
        assert config.backpressure.max_pending_requests == 1000

    def test_development_defaults(self) -> None:
        config = WaveLinkClientConfig.development_defaults()

        assert config.connection.auto_reconnect is False
        assert config.connection.default_response_timeout == 10.0
        assert config.discovery.max_port_attempts == config.discovery.width

    def test_from_kwargs(self) -> None:
        config = WaveLinkClientConfig.from_kwargs(
            host="192.168.1.20",
            auto_reconnect=False,
            reconnect_delay=5.0,
            max_reconnect_attempts=2,
            origin="myapp://",
        )

        assert config.connection.host == "192.168.1.20"
        assert config.connection.auto_reconnect is False
        assert config.connection.reconnect_delay == 5.0
        assert config.connection.max_reconnect_attempts == 2
        assert config.websocket.origin == "myapp://"
        assert config.discovery == DiscoveryConfig()

    def test_configs_are_frozen(self) -> None:
        config = RpcConnectionConfig()

        with pytest.raises(dataclasses.FrozenInstanceError):
            config.host = "example.com"  # type: ignore[misc]

    def test_validate_all(self) -> None:
        WaveLinkClientConfig().validate()


class TestValidation:
    @pytest.mark.parametrize(
        "kwargs",
        [
            {"min_port": 0},
            {"max_port": 70000},
            {"min_port": 1893, "max_port": 1884},
            {"max_port_attempts": 0},
        ],
    )
    def test_invalid_discovery(self, kwargs: dict) -> None:
        with pytest.raises(ValueError):
            DiscoveryConfig(**kwargs)

    @pytest.mark.parametrize(
        "kwargs",
        [
            {"host": ""},
            {"reconnect_delay": -1.0},
            {"max_reconnect_attempts": -1},
            {"default_response_timeout": 0},
        ],
    )
    def test_invalid_connection(self, kwargs: dict) -> None:
        with pytest.raises(ValueError):
            RpcConnectionConfig(**kwargs)

    @pytest.mark.parametrize(
        "kwargs",
        [
            {"compression": "gzip"},
            {"open_timeout": 0},
            {"ping_interval": -1.0},
            {"ping_timeout": -1.0},
        ],
    )
    def test_invalid_websocket(self, kwargs: dict) -> None:
        with pytest.raises(ValueError):
            WebSocketConnectionConfig(**kwargs)

    @pytest.mark.parametrize(
        "kwargs", [{"max_pending_requests": 0}, {"max_message_size": -1}]
    )
    def test_invalid_backpressure(self, kwargs: dict) -> None:
        with pytest.raises(ValueError):
            RpcBackpressureConfig(**kwargs)

    def test_single_port_range_allowed(self) -> None:
        assert DiscoveryConfig(min_port=1884, max_port=1884).width == 1

    def test_pings_can_be_disabled(self) -> None:
        config = WebSocketConnectionConfig(ping_interval=None, ping_timeout=None)

        assert config.ping_interval is None
