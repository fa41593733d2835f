"""Image rendering infrastructure."""

from thumbd.infrastructure.imaging.renderer import PillowRenderer

__all__ = ["PillowRenderer"]
