"""
Shared fixtures: an application with its own registry and a controllable clock.
"""

import pytest
from fastapi.testclient import TestClient

from app.config import Settings
from app.devices.registry import DeviceRegistry
from app.main import create_app

DEVICE_TIMEOUT = 30.0


class FakeClock:
    def __init__(self, start: float = 1000.0) -> None:
        self.now = start

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def registry(clock: FakeClock) -> DeviceRegistry:
    return DeviceRegistry(timeout=DEVICE_TIMEOUT, clock=clock)


@pytest.fixture
def client(registry: DeviceRegistry) -> TestClient:
    """TestClient without lifespan: the liveness monitor is not started."""
    app = create_app(Settings(device_timeout=DEVICE_TIMEOUT))
    app.state.registry = registry
    return TestClient(app)
