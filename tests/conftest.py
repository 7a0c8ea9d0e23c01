"""Pytest configuration and shared fixtures."""

import pytest
import structlog

from shopcore.container import reset_container
from shopcore.events import EventBroker


def pytest_configure(config):
    """Configure pytest markers."""
    config.addinivalue_line("markers", "slow: mark test as slow running")


@pytest.fixture
def broker():
    """Fresh broker isolated from the process container."""
    broker = EventBroker()
    yield broker
    broker.close(timeout=5)


@pytest.fixture(autouse=True)
def _isolate_globals():
    """Drop the global container and structlog config between tests."""
    reset_container()
    yield
    reset_container()
    structlog.reset_defaults()
