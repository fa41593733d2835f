"""Storage infrastructure."""

from thumbd.infrastructure.storage.scratch import ScratchArea

__all__ = ['ScratchArea']
