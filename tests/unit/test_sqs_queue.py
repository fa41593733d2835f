"""Tests for SqsQueue."""

import base64
import json
from unittest.mock import Mock

import pytest
from botocore.exceptions import ClientError, EndpointConnectionError

from thumbd.domain.exceptions import AckError, TransportError
from thumbd.domain.models import Job, ThumbnailDescription
from thumbd.infrastructure.queue import SqsQueue, encode_job

QUEUE_URL = 'https://sqs.us-east-1.amazonaws.com/123456789012/thumbnails'


@pytest.fixture
def client():
    return Mock()


@pytest.fixture
def queue(client):
    return SqsQueue(client, queue_url=QUEUE_URL, wait_time_seconds=20)


class TestReceive:
    """Test receive."""

    def test_receives_one_message(self, queue, client):
        client.receive_message.return_value = {
            'Messages': [{'ReceiptHandle': 'rh-1', 'Body': '{"original":"x"}', 'MessageId': 'm-1'}]
        }

        message = queue.receive()

        assert message.handle == 'rh-1'
        assert message.body == b'{"original":"x"}'
        assert message.message_id == 'm-1'
        client.receive_message.assert_called_once_with(
            QueueUrl=QUEUE_URL, MaxNumberOfMessages=1, WaitTimeSeconds=20
        )

    def test_empty_queue(self, queue, client):
        client.receive_message.return_value = {}

        assert queue.receive() is None

    def test_visibility_timeout_passed(self, client):
        client.receive_message.return_value = {'Messages': []}
        queue = SqsQueue(client, queue_url=QUEUE_URL, wait_time_seconds=5, visibility_timeout=120)

        queue.receive()

        assert client.receive_message.call_args[1]['VisibilityTimeout'] == 120

    def test_transport_error(self, queue, client):
        client.receive_message.side_effect = EndpointConnectionError(endpoint_url=QUEUE_URL)

        with pytest.raises(TransportError):
            queue.receive()

    def test_queue_url_resolved_by_name(self, client):
        """Test the queue URL is looked up once from the name."""
        client.get_queue_url.return_value = {'QueueUrl': QUEUE_URL}
        client.receive_message.return_value = {}
        queue = SqsQueue(client, queue_name='thumbnails')

        queue.receive()
        queue.receive()

        client.get_queue_url.assert_called_once_with(QueueName='thumbnails')
        assert client.receive_message.call_args[1]['QueueUrl'] == QUEUE_URL

    def test_requires_url_or_name(self, client):
        with pytest.raises(ValueError):
            SqsQueue(client)


class TestDelete:
    """Test delete."""

    def test_delete(self, queue, client):
        queue.delete('rh-1')

        client.delete_message.assert_called_once_with(QueueUrl=QUEUE_URL, ReceiptHandle='rh-1')

    def test_delete_error(self, queue, client):
        client.delete_message.side_effect = ClientError(
            {'Error': {'Code': 'ReceiptHandleIsInvalid', 'Message': 'bad'}}, 'DeleteMessage'
        )

        with pytest.raises(AckError, match="rh-1"):
            queue.delete('rh-1')


class TestSend:
    """Test job submission."""

    JOB = Job(
        original='images/photo.jpg',
        descriptions=(ThumbnailDescription(suffix='small', width=64, height=64),)
    )

    def test_send_json(self, queue, client):
        client.send_message.return_value = {'MessageId': 'm-9'}

        assert queue.send(self.JOB) == 'm-9'

        body = client.send_message.call_args[1]['MessageBody']
        assert json.loads(body) == {
            'original': 'images/photo.jpg',
            'descriptions': [{'suffix': 'small', 'width': 64, 'height': 64}],
        }

    def test_send_base64(self, queue, client):
        client.send_message.return_value = {'MessageId': 'm-9'}

        queue.send(self.JOB, base64=True)

        body = client.send_message.call_args[1]['MessageBody']
        assert json.loads(base64.b64decode(body))['original'] == 'images/photo.jpg'

    def test_encode_job_is_compact(self):
        assert encode_job(Job(original='x')) == '{"original":"x","descriptions":[]}'
