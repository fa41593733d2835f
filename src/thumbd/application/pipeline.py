"""Job pipeline: download, fan out renditions, aggregate, clean up."""

import time
from contextlib import nullcontext
from concurrent.futures import ThreadPoolExecutor
from pathlib import Path
from typing import Callable, List, Optional

from thumbd.application.rendition import RenditionUnit, destination_for
from thumbd.domain.exceptions import DownloadError
from thumbd.domain.models import Job, JobResult, RenditionResult, ThumbnailDescription
from thumbd.domain.protocols import IDownloader, IRenderer, IUploader, IMetricsCollector
from thumbd.shared.logging import get_logger

logger = get_logger(__name__)

DOWNLOAD = "download"


class JobPipeline:
    """
    Runs one job end to end.

    The downloader and uploader are injected, so the same pipeline serves
    both remote storage and a local directory tree.
    """

    def __init__(
        self,
        downloader: IDownloader,
        renderer: IRenderer,
        uploader: IUploader,
        remove_file: Callable[[Path], None],
        metrics: Optional[IMetricsCollector] = None
    ):
        self._downloader = downloader
        self._remove_file = remove_file
        self._metrics = metrics
        self._unit = RenditionUnit(renderer, uploader, remove_file, metrics)
        self._logger = get_logger(__name__)

    def run(self, job: Job) -> JobResult:
        """
        Execute a job.

        1. Download the original; on failure nothing else runs.
        2. Run one rendition unit per description, all concurrently. A
           failing unit does not cancel its siblings.
        3. Succeed only if every unit succeeded.
        4. Delete the downloaded original whatever the outcome.
        """
        started = time.monotonic()
        self._logger.info(f"Starting job for {job.original}: {len(job.descriptions)} rendition(s)")

        try:
            with self._timed(DOWNLOAD):
                source_path = self._downloader.download(job.original)
        except Exception as e:
            if isinstance(e, DownloadError):
                self._logger.error(f"Download failed for {job.original}: {e}")
            else:
                self._logger.exception(f"Unexpected download failure for {job.original}: {e}")
            return JobResult(
                success=False,
                original=job.original,
                stage=DOWNLOAD,
                error=str(e),
                duration_seconds=time.monotonic() - started
            )

        try:
            renditions = self._create_thumbnails(job, source_path)
        finally:
            self._remove_file(source_path)

        failures = [r for r in renditions if not r.success]
        result = JobResult(
            success=not failures,
            original=job.original,
            error=failures[0].error if failures else None,
            renditions=renditions,
            duration_seconds=time.monotonic() - started
        )

        if result.success:
            self._logger.info(
                f"Job for {job.original} succeeded in {result.duration_seconds:.2f}s: "
                f"{', '.join(result.stored_keys) or 'no renditions'}"
            )
        else:
            self._logger.error(
                f"Job for {job.original} failed: {len(failures)} of {len(renditions)} "
                f"rendition(s) failed ({', '.join(f'{r.key} [{r.stage}]' for r in failures)})"
            )

        return result

    def _create_thumbnails(self, job: Job, source_path: Path) -> List[RenditionResult]:
        """Run every rendition unit and collect every outcome, in description order."""
        if not job.descriptions:
            return []

        with ThreadPoolExecutor(
            max_workers=len(job.descriptions),
            thread_name_prefix="rendition"
        ) as executor:
            futures = [
                executor.submit(self._unit.run, description, source_path, job.original)
                for description in job.descriptions
            ]

        # the executor has joined every unit by now
        return [
            self._outcome(future, description, job.original)
            for future, description in zip(futures, job.descriptions)
        ]

    def _outcome(self, future, description: ThumbnailDescription, original: str) -> RenditionResult:
        error = future.exception()
        if error is None:
            return future.result()

        key = destination_for(description, original)
        self._logger.error(f"Rendition unit for {key} crashed: {error}")
        return RenditionResult(success=False, key=key, error=str(error))

    def _timed(self, name: str):
        if self._metrics is not None:
            return self._metrics.timed(name)
        return nullcontext()

