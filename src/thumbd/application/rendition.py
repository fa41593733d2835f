"""Rendition unit: render, upload and clean up one thumbnail."""

from pathlib import Path
from typing import Optional, Callable

from thumbd.domain.exceptions import RenderError, UploadError
from thumbd.domain.keys import thumbnail_key
from thumbd.domain.models import ThumbnailDescription, RenditionResult
from thumbd.domain.protocols import IRenderer, IUploader, IMetricsCollector
from thumbd.shared.logging import get_logger

logger = get_logger(__name__)

RENDER = "render"
UPLOAD = "upload"


def destination_for(description: ThumbnailDescription, original: str) -> str:
    """Explicit description path, or the key derived from the original."""
    if description.path:
        return description.path
    return thumbnail_key(original, description.suffix, description.format)


class RenditionUnit:
    """Produces and persists exactly one rendition."""

    def __init__(
        self,
        renderer: IRenderer,
        uploader: IUploader,
        remove_file: Callable[[Path], None],
        metrics: Optional[IMetricsCollector] = None
    ):
        """
        Args:
            renderer: Produces the rendered scratch file
            uploader: Writes it to storage
            remove_file: Deletes a scratch file, tolerating missing files
            metrics: Optional metrics collector
        """
        self._renderer = renderer
        self._uploader = uploader
        self._remove_file = remove_file
        self._metrics = metrics
        self._logger = get_logger(__name__)

    def run(self, description: ThumbnailDescription, source_path: Path, original: str) -> RenditionResult:
        """
        Render `source_path` per `description` and upload the result.

        Never raises: failures are returned as a RenditionResult tagged with
        the failing stage. The rendered file is deleted after the upload
        attempt whatever its outcome; when rendering fails no upload happens.
        """
        key = destination_for(description, original)

        started = self._start(RENDER)
        try:
            rendered = self._renderer.render(description, source_path)
        except Exception as e:
            self._log_failure(RENDER, key, e, expected=RenderError)
            return RenditionResult(success=False, key=key, stage=RENDER, error=str(e))
        finally:
            self._stop(RENDER, started)

        started = self._start(UPLOAD)
        try:
            self._uploader.upload(rendered, key)
        except Exception as e:
            self._log_failure(UPLOAD, key, e, expected=UploadError)
            return RenditionResult(success=False, key=key, stage=UPLOAD, error=str(e))
        finally:
            self._stop(UPLOAD, started)
            self._remove_file(rendered)

        self._logger.info(f"Saved rendition {key}")
        return RenditionResult(success=True, key=key)

    def _start(self, name: str) -> Optional[float]:
        return self._metrics.start_timer(name) if self._metrics else None

    def _stop(self, name: str, started: Optional[float]) -> None:
        if self._metrics and started is not None:
            self._metrics.stop_timer(name, started)

    def _log_failure(self, stage: str, key: str, error: Exception, expected: type) -> None:
        if isinstance(error, expected):
            self._logger.error(f"{stage.capitalize()} failed for {key}: {error}")
        else:
            self._logger.exception(f"Unexpected {stage} failure for {key}: {error}")
