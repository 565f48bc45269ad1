"""Pytest fixtures for native-id-storage tests."""

from typing import Generator

import pytest

from src.config.settings import Settings, get_settings


@pytest.fixture
def test_settings() -> Settings:
    """Settings configured for testing."""
    return Settings(
        environment="development",
        log_level="DEBUG",
        metrics_port=9109,
    )


@pytest.fixture(autouse=True)
def _clear_settings_cache() -> Generator[None, None, None]:
    """Reset cached settings so env overrides in one test don't leak."""
    get_settings.cache_clear()
    yield
    get_settings.cache_clear()
