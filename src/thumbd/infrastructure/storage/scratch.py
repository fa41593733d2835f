"""Scratch area for locally materialized images."""

import os
import tempfile
from pathlib import Path
from typing import Optional

from thumbd.shared.logging import get_logger

logger = get_logger(__name__)


class ScratchArea:
    """
    Hands out scratch file paths under a base directory.

    Each path belongs to the step that asked for it (a download or one
    rendition), and that step is responsible for calling `remove`.
    """

    def __init__(self, base_dir: Optional[Path] = None, prefix: str = "thumbd_"):
        """
        Initialize scratch area.

        Args:
            base_dir: Base directory for scratch files (defaults to system temp)
            prefix: File name prefix
        """
        self.base_dir = Path(base_dir) if base_dir else Path(tempfile.gettempdir())
        self.prefix = prefix
        self._logger = get_logger(__name__)

    def new_path(self, extension: str = "") -> Path:
        """
        Reserve a new, empty scratch file.

        Args:
            extension: File extension with or without the leading dot

        Returns:
            Path of the created file
        """
        self.base_dir.mkdir(parents=True, exist_ok=True)
        suffix = f".{extension.lstrip('.')}" if extension else ""
        fd, name = tempfile.mkstemp(prefix=self.prefix, suffix=suffix, dir=self.base_dir)
        os.close(fd)
        return Path(name)

    def remove(self, path: Optional[Path]) -> None:
        """
        Delete a scratch file if it still exists.

        Failures are logged rather than raised, so callers can use this on
        every exit path.
        """
        if path is None:
            return

        try:
            Path(path).unlink(missing_ok=True)
            self._logger.debug(f"Removed scratch file: {path}")
        except OSError as e:
            self._logger.warning(f"Failed to remove scratch file {path}: {e}")
