"""Shared utilities package."""

from thumbd.shared.logging import setup_logger, get_logger
from thumbd.shared.metrics import MetricsCollector

__all__ = [
    "setup_logger",
    "get_logger",
    "MetricsCollector",
]
