"""Tests for WorkerFactory wiring."""

from unittest.mock import Mock, patch

import pytest

from thumbd.application.consumer import ConsumerLoop
from thumbd.application.factories import WorkerFactory
from thumbd.application.pipeline import JobPipeline
from thumbd.domain.exceptions import ConfigurationError
from thumbd.infrastructure.config import WorkerConfig
from thumbd.infrastructure.io import LocalDownloader, LocalUploader, S3Downloader, S3Uploader
from thumbd.infrastructure.queue import SqsQueue


@pytest.fixture
def s3_config(tmp_path):
    return WorkerConfig(
        s3_bucket='thumbs',
        s3_acl='public-read',
        sqs_queue='jobs',
        wait_time_seconds=3,
        exit_on_decode_error=False,
        tmp_dir=tmp_path,
        aws_key='key',
        aws_secret='secret'
    )


class TestLocalStorage:
    """Test the local-filesystem backend."""

    def test_local_components(self, tmp_path):
        factory = WorkerFactory(WorkerConfig(storage='local', local_root=tmp_path, tmp_dir=tmp_path))

        assert isinstance(factory.create_downloader(), LocalDownloader)
        assert isinstance(factory.create_uploader(), LocalUploader)
        assert isinstance(factory.create_pipeline(), JobPipeline)

    def test_consumer_requires_queue(self, tmp_path):
        factory = WorkerFactory(WorkerConfig(storage='local', local_root=tmp_path))

        with pytest.raises(ConfigurationError):
            factory.create_consumer()


class TestS3Storage:
    """Test the S3 backend, with boto3 mocked."""

    @patch('thumbd.infrastructure.aws.boto3.client')
    def test_s3_components_share_client(self, mock_client, s3_config):
        factory = WorkerFactory(s3_config)

        downloader = factory.create_downloader()
        uploader = factory.create_uploader()

        assert isinstance(downloader, S3Downloader)
        assert isinstance(uploader, S3Uploader)
        assert uploader.acl == 'public-read'
        mock_client.assert_called_once()
        args, kwargs = mock_client.call_args
        assert args == ('s3',)
        assert kwargs['aws_access_key_id'] == 'key'
        assert kwargs['region_name'] == 'us-east-1'

    @patch('thumbd.infrastructure.aws.boto3.client')
    def test_consumer(self, mock_client, s3_config):
        factory = WorkerFactory(s3_config)

        consumer = factory.create_consumer()

        assert isinstance(consumer, ConsumerLoop)
        assert consumer.exit_on_decode_error is False
        assert any(call.args == ('sqs',) for call in mock_client.call_args_list)

    @patch('thumbd.infrastructure.aws.boto3.client')
    def test_queue_settings(self, mock_client, s3_config):
        queue = WorkerFactory(s3_config).create_queue()

        assert isinstance(queue, SqsQueue)
        assert queue.queue_name == 'jobs'
        assert queue.wait_time_seconds == 3
