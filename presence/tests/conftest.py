import sys
from pathlib import Path

import pytest

ROOT = Path(__file__).resolve().parents[2]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

from presence import create_app
from presence.core.clock import ManualClock
from presence.core.presence.registry import PresenceRegistry


# ==================== Pytest Markers ====================
def pytest_configure(config):
    """Register custom pytest markers."""
    config.addinivalue_line("markers", "unit: Unit tests (no external dependencies)")
    config.addinivalue_line("markers", "integration: Integration tests (app, HTTP API)")
    config.addinivalue_line("markers", "slow: Slow running tests")
    config.addinivalue_line("markers", "smoke: Quick smoke tests for CI")


@pytest.fixture()
def clock():
    return ManualClock(start=1000.0)


@pytest.fixture()
def registry(clock):
    """Registry with the default 60s TTL driven by a manual clock."""
    return PresenceRegistry(ttl_seconds=60, clock=clock)


@pytest.fixture()
def app(clock):
    """Per-test app: testing config, sweeper not started, manual clock injected."""
    app = create_app("testing", clock=clock)
    ctx = app.app_context()
    ctx.push()
    try:
        yield app
    finally:
        app.extensions["presence_sweeper"].stop()
        ctx.pop()


@pytest.fixture()
def client(app):
    return app.test_client()


@pytest.fixture()
def app_registry(app) -> PresenceRegistry:
    return app.extensions["presence_registry"]
