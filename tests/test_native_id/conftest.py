"""Shared fixtures for native id storage tests."""

from pathlib import Path
from typing import Callable

import pytest
from prometheus_client import CollectorRegistry

from src.native_id.config import NativeIdStorageConfig
from src.native_id.schemas import SecurityId
from src.native_id.storage import CsvNativeIdStorage
from src.observability.metrics import MetricsCollector


@pytest.fixture
def metrics() -> MetricsCollector:
    """Metrics collector on a private registry."""
    return MetricsCollector(registry=CollectorRegistry())


@pytest.fixture
def storage_dir(tmp_path: Path) -> Path:
    """Storage directory that does not exist yet."""
    return tmp_path / "native_ids"


@pytest.fixture
def make_storage(
    storage_dir: Path, metrics: MetricsCollector
) -> Callable[..., CsvNativeIdStorage]:
    """Factory for storages pointed at the same directory (simulates restarts)."""

    def _make(config: NativeIdStorageConfig | None = None) -> CsvNativeIdStorage:
        storage = CsvNativeIdStorage(storage_dir, config=config, metrics=metrics)
        storage.init()
        return storage

    return _make


@pytest.fixture
def storage(make_storage: Callable[..., CsvNativeIdStorage]) -> CsvNativeIdStorage:
    """An initialized, empty storage."""
    return make_storage()


@pytest.fixture
def btc() -> SecurityId:
    return SecurityId(security_code="BTCUSD", board_code="BNB")


@pytest.fixture
def eth() -> SecurityId:
    return SecurityId(security_code="ETHUSD", board_code="BNB")
