"""thumbd: queue-driven thumbnail worker."""

__version__ = "2.0.0"
