"""Shared fixtures for unit tests."""

import pytest
from keepalive_fakes import FakeBackendClient, FakeClock

from guardian.config import GuardianSettings


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def settings() -> GuardianSettings:
    """Valid settings built directly, independent of the environment."""
    return GuardianSettings(
        api_base_url="https://api.example.com",
        keep_alive_email="bot@example.com",
        keep_alive_password="hunter2",
    )


@pytest.fixture
def fake_client() -> FakeBackendClient:
    return FakeBackendClient()
