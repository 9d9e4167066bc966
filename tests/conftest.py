"""pytest configuration for Relay Cloud tests."""

import pytest

from relaycloud.config import RelayConfig
from relaycloud.registry import DeviceRegistry

ADMIN = "test-admin-token"


class FakeClock:
    """Manually advanced millisecond clock."""

    def __init__(self, start: int = 1_700_000_000_000) -> None:
        self.now = start

    def __call__(self) -> int:
        return self.now

    def advance(self, ms: int = 1) -> int:
        self.now += ms
        return self.now


@pytest.fixture()
def clock():
    return FakeClock()


@pytest.fixture()
def registry(clock):
    return DeviceRegistry(clock=clock)


@pytest.fixture()
def config():
    return RelayConfig(admin_token=ADMIN)


@pytest.fixture()
def make_client():
    """Factory for a TestClient around a fresh app (and fresh registry)."""
    from fastapi.testclient import TestClient
    from relaycloud.server import create_app

    def _make(config: RelayConfig | None = None) -> TestClient:
        return TestClient(create_app(config or RelayConfig(admin_token=ADMIN)))

    return _make


@pytest.fixture()
def client(make_client):
    return make_client()
