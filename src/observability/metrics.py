"""
Prometheus metrics for the native identifier storage.

Defines and exposes metrics for:
- Association attempts (added vs. duplicate)
- Append failures after in-memory admission
- Partition load failures and dropped duplicate rows
- Entries held per partition

Metrics are exposed via HTTP endpoint for Prometheus scraping.
"""

import logging

from prometheus_client import (
    REGISTRY,
    CollectorRegistry,
    Counter,
    Gauge,
    start_http_server,
)

from src.config.settings import get_settings

logger = logging.getLogger(__name__)


class MetricsCollector:
    """
    Prometheus metrics collector for the native id storage.

    Usage:
        metrics = MetricsCollector()
        metrics.start_server()

        metrics.record_add("binance", added=True)
        metrics.set_entries("binance", 42)
    """

    def __init__(self, registry: CollectorRegistry | None = None):
        """Initialize Prometheus metrics.

        Args:
            registry: Registry to register metrics with (default: global REGISTRY)
        """
        self.registry = registry or REGISTRY

        self.associations = Counter(
            "native_id_added_total",
            "Total try_add calls by outcome",
            ["partition", "result"],  # result: added, duplicate
            registry=self.registry,
        )

        self.save_errors = Counter(
            "native_id_save_errors_total",
            "Rows that failed to append after in-memory admission",
            ["partition"],
            registry=self.registry,
        )

        self.load_errors = Counter(
            "native_id_load_errors_total",
            "Partition files that failed to load",
            registry=self.registry,
        )

        self.load_duplicates = Counter(
            "native_id_load_duplicates_total",
            "Rows dropped on load because the pair was already bound",
            ["partition"],
            registry=self.registry,
        )

        self.entries = Gauge(
            "native_id_entries",
            "Associations held in memory",
            ["partition"],
            registry=self.registry,
        )

        logger.info("Prometheus metrics initialized")

    def start_server(self, port: int | None = None) -> None:
        """
        Start Prometheus metrics HTTP server.

        Args:
            port: Port to expose metrics on (default from settings)
        """
        settings = get_settings()
        port = port or settings.metrics_port

        start_http_server(port, registry=self.registry)
        logger.info("Prometheus metrics server started on port %d", port)

    # Convenience methods

    def record_add(self, partition: str, added: bool) -> None:
        result = "added" if added else "duplicate"
        self.associations.labels(partition=partition, result=result).inc()

    def record_save_error(self, partition: str) -> None:
        self.save_errors.labels(partition=partition).inc()

    def record_load_error(self) -> None:
        self.load_errors.inc()

    def record_load_duplicates(self, partition: str, count: int) -> None:
        if count > 0:
            self.load_duplicates.labels(partition=partition).inc(count)

    def set_entries(self, partition: str, count: int) -> None:
        self.entries.labels(partition=partition).set(count)


# Global metrics instance
_metrics: MetricsCollector | None = None


def get_metrics() -> MetricsCollector:
    """Get global metrics collector instance."""
    global _metrics
    if _metrics is None:
        _metrics = MetricsCollector()
    return _metrics
