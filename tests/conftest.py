# tests/conftest.py

"""Shared pytest fixtures for all tests."""

from collections.abc import Generator
from unittest.mock import patch

import pytest


@pytest.fixture(autouse=True)
def mock_sleep() -> Generator[None, None, None]:
    """Patch time.sleep globally so retry loops run instantly."""
    with patch("time.sleep"):
        yield


@pytest.fixture(autouse=True)
def no_mock_delay() -> Generator[None, None, None]:
    """Disable the mock adapter's simulated network delay."""
    with patch(
        "src.config.settings.Settings.MOCK_DELAY_RANGE", (0.0, 0.0)
    ):
        yield
