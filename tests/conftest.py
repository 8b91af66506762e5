"""
Pytest configuration and shared fixtures for wavelink_ws_rpc tests.

This module provides:
- Custom pytest markers for test categorization
- Shared fixtures that can be reused across test modules
- Test configuration and setup
"""

from __future__ import annotations

import pytest
import pytest_asyncio
from fakes import FakeWaveLink

from wavelink_ws_rpc.config import (
    DiscoveryConfig,
    RpcConnectionConfig,
    WaveLinkClientConfig,
)
from wavelink_ws_rpc.wavelink_client import WaveLinkClient


def pytest_configure(config: pytest.Config) -> None:
    """
    Register custom pytest markers.

    This function is called during pytest initialization to register
    custom markers that can be used to categorize and filter tests.
    """
    config.addinivalue_line(
        "markers",
        "slow: mark test as slow (stress tests, integration tests with delays)",
    )
    config.addinivalue_line(
        "markers",
        "integration: mark test as integration test (requires external resources)",
    )
    config.addinivalue_line(
        "markers",
        "network: mark test as network test (simulates network failures)",
    )


# ============================================================================
# Shared Fixtures
# ============================================================================


@pytest.fixture
def fast_config() -> WaveLinkClientConfig:
    """Default port range with short reconnect delays so tests run quickly."""
    return WaveLinkClientConfig(
        connection=RpcConnectionConfig(reconnect_delay=0.01, max_reconnect_attempts=3),
        discovery=DiscoveryConfig(max_port_attempts=20),
    )


@pytest.fixture
def wavelink() -> FakeWaveLink:
    """Wave Link listening on the first port of the range."""
    return FakeWaveLink(port=1884)


@pytest_asyncio.fixture
async def client(
    fast_config: WaveLinkClientConfig, wavelink: FakeWaveLink
) -> WaveLinkClient:
    """A client wired to the fake server, not yet connected."""
    client = WaveLinkClient(fast_config, socket_factory=wavelink)
    yield client
    await client.disconnect()


@pytest_asyncio.fixture
async def connected_client(client: WaveLinkClient) -> WaveLinkClient:
    await client.connect()
    return client
