"""Pytest configuration and shared fixtures for billing-client-core tests."""

import pytest

from billing_client_core.testing import FakeClock, make_config


@pytest.fixture(autouse=True)
def clear_env(monkeypatch):
    """Auto-cleanup: Clear billing-related environment variables before each test.

    This prevents test pollution when testing credential and config resolution.
    """
    import os

    test_prefixes = ("TEST_", "BILLING_")

    for key in list(os.environ.keys()):
        if any(key.startswith(prefix) for prefix in test_prefixes):
            monkeypatch.delenv(key, raising=False)

    yield


@pytest.fixture
def clock():
    """A manually advanced clock; pass `clock.sleep` as the executor's sleep."""
    return FakeClock()


@pytest.fixture
def config():
    """Test client config: 3 attempts, 30s deadline, no jitter."""
    return make_config()
