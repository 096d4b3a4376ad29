"""
Pytest configuration and shared fixtures.

Flow tests run against FakeRecoveryBackend with a short debounce window
so that debounced validation settles quickly.
"""

from collections.abc import AsyncGenerator
from typing import Any

import pytest
import pytest_asyncio

from app.config.settings import Settings
from app.services.flow_controller import FlowController
from tests.helpers.fake_backend import FakeRecoveryBackend


# ==================== PYTEST CONFIGURATION ====================


def pytest_configure(config: Any) -> None:
    """Configure pytest with custom markers."""
    config.addinivalue_line(
        "markers",
        "slow: marks tests as slow (deselect with '-m \"not slow\"')",
    )
    config.addinivalue_line("markers", "critical: marks tests as critical")
    config.addinivalue_line("markers", "integration: marks integration tests")
    config.addinivalue_line("markers", "security: marks security tests")


# ==================== SETTINGS FIXTURES ====================


@pytest.fixture
def test_settings() -> Settings:
    """Settings with short debounce and long-lived notices."""
    return Settings(
        _env_file=None,
        environment="test",
        validation_debounce_ms=10,
        notice_duration=60,
        completion_reset_delay=60,
    )


@pytest.fixture
def fast_settings() -> Settings:
    """Settings whose notice and completion timers fire immediately."""
    return Settings(
        _env_file=None,
        environment="test",
        validation_debounce_ms=10,
        notice_duration=0,
        completion_reset_delay=0,
    )


# ==================== FLOW FIXTURES ====================


@pytest.fixture
def backend() -> FakeRecoveryBackend:
    return FakeRecoveryBackend()


@pytest_asyncio.fixture
async def controller(
    backend: FakeRecoveryBackend,  # pylint: disable=redefined-outer-name
    test_settings: Settings,  # pylint: disable=redefined-outer-name
) -> AsyncGenerator[FlowController, None]:
    """Fresh flow controller, closed after the test."""
    flow = FlowController(backend, test_settings)
    yield flow
    await flow.close()

