"""Factory wiring pipelines, queues and consumers from configuration."""

from typing import Optional

from thumbd.application.consumer import ConsumerLoop
from thumbd.application.pipeline import JobPipeline
from thumbd.infrastructure.aws import create_client
from thumbd.infrastructure.config import WorkerConfig
from thumbd.infrastructure.imaging import PillowRenderer
from thumbd.infrastructure.io import S3Downloader, S3Uploader, LocalDownloader, LocalUploader
from thumbd.infrastructure.queue import SqsQueue
from thumbd.infrastructure.storage import ScratchArea
from thumbd.shared.logging import get_logger
from thumbd.shared.metrics import MetricsCollector

logger = get_logger(__name__)


class WorkerFactory:
    """
    Builds worker components from one immutable WorkerConfig.

    The storage backend is chosen here, at construction time:
        storage: s3     -> S3Downloader + S3Uploader
        storage: local  -> LocalDownloader + LocalUploader rooted at local_root
    """

    def __init__(self, config: WorkerConfig, metrics: Optional[MetricsCollector] = None):
        self.config = config
        self.metrics = metrics or MetricsCollector()
        self.scratch = ScratchArea(config.tmp_dir)
        self._s3_client = None
        self._logger = get_logger(__name__)

    @property
    def s3_client(self):
        if self._s3_client is None:
            self._s3_client = create_client('s3', self.config)
        return self._s3_client

    def create_downloader(self):
        if self.config.storage == 'local':
            return LocalDownloader(self.config.local_root, self.scratch)
        return S3Downloader(
            self.s3_client,
            self.config.s3_bucket,
            self.scratch,
            timeout=self.config.request_timeout
        )

    def create_uploader(self):
        if self.config.storage == 'local':
            return LocalUploader(self.config.local_root)
        return S3Uploader(
            self.s3_client,
            self.config.s3_bucket,
            acl=self.config.s3_acl,
            storage_class=self.config.s3_storage_class
        )

    def create_renderer(self) -> PillowRenderer:
        return PillowRenderer(self.scratch, default_quality=self.config.default_quality)

    def create_pipeline(self) -> JobPipeline:
        """Pipeline over the configured storage backend."""
        self._logger.info(f"Using {self.config.storage} storage backend")
        return JobPipeline(
            downloader=self.create_downloader(),
            renderer=self.create_renderer(),
            uploader=self.create_uploader(),
            remove_file=self.scratch.remove,
            metrics=self.metrics
        )

    def create_queue(self) -> SqsQueue:
        """
        SQS queue client.

        Raises:
            ConfigurationError: If no queue name or URL is configured
        """
        self.config.require_queue()
        return SqsQueue(
            create_client('sqs', self.config),
            queue_url=self.config.sqs_queue_url,
            queue_name=self.config.sqs_queue,
            wait_time_seconds=self.config.wait_time_seconds,
            visibility_timeout=self.config.visibility_timeout
        )

    def create_consumer(self) -> ConsumerLoop:
        return ConsumerLoop(
            queue=self.create_queue(),
            pipeline=self.create_pipeline(),
            exit_on_decode_error=self.config.exit_on_decode_error,
            metrics=self.metrics
        )
