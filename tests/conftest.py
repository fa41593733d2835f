import sys
import os

import pytest
from PIL import Image

# Ensure src/ is on sys.path so the 'thumbd' package is importable
SRC = os.path.abspath(os.path.join(os.path.dirname(__file__), '..', 'src'))
if SRC not in sys.path:
    sys.path.insert(0, SRC)


@pytest.fixture
def make_image():
    """Write a solid-colour image and return its path."""
    def _make(path, size=(200, 100), mode='RGB', color=(200, 30, 30)):
        path.parent.mkdir(parents=True, exist_ok=True)
        Image.new(mode, size, color).save(path)
        return path
    return _make
