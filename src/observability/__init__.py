"""Observability layer - logging and metrics."""

from src.observability.logging import get_logger, setup_logging
from src.observability.metrics import MetricsCollector, get_metrics

__all__ = ["setup_logging", "get_logger", "MetricsCollector", "get_metrics"]
