"""Configuration package."""

from thumbd.infrastructure.config.loader import ConfigLoader, WorkerConfig

__all__ = ["ConfigLoader", "WorkerConfig"]
