"""SQS job queue client."""

import base64
import json
from typing import Optional

from botocore.exceptions import BotoCoreError, ClientError

from thumbd.domain.exceptions import AckError, TransportError
from thumbd.domain.models import Job, Message
from thumbd.shared.logging import get_logger

logger = get_logger(__name__)


class SqsQueue:
    """
    Job queue backed by Amazon SQS.
    Implements IQueue protocol.
    """

    def __init__(
        self,
        client,
        queue_url: Optional[str] = None,
        queue_name: Optional[str] = None,
        wait_time_seconds: int = 20,
        visibility_timeout: Optional[int] = None
    ):
        """
        Initialize SQS queue.

        Args:
            client: boto3 SQS client
            queue_url: Queue URL; resolved from `queue_name` when omitted
            queue_name: Queue name
            wait_time_seconds: Long-poll interval for receive
            visibility_timeout: Optional per-receive visibility timeout
        """
        if not queue_url and not queue_name:
            raise ValueError("queue_url or queue_name is required")

        self._client = client
        self._queue_url = queue_url
        self.queue_name = queue_name
        self.wait_time_seconds = wait_time_seconds
        self.visibility_timeout = visibility_timeout
        self._logger = get_logger(__name__)

    @property
    def queue_url(self) -> str:
        """Queue URL, looked up once by name if not configured."""
        if not self._queue_url:
            try:
                response = self._client.get_queue_url(QueueName=self.queue_name)
            except (ClientError, BotoCoreError) as e:
                raise TransportError(f"Cannot resolve queue {self.queue_name}: {e}") from e
            self._queue_url = response['QueueUrl']
            self._logger.info(f"Resolved queue {self.queue_name} to {self._queue_url}")
        return self._queue_url

    def receive(self) -> Optional[Message]:
        """
        Long-poll for at most one message.

        Returns:
            The message, or None when none arrived within the poll interval

        Raises:
            TransportError: If the queue cannot be reached
        """
        params = {
            'QueueUrl': self.queue_url,
            'MaxNumberOfMessages': 1,
            'WaitTimeSeconds': self.wait_time_seconds,
        }
        if self.visibility_timeout is not None:
            params['VisibilityTimeout'] = self.visibility_timeout

        try:
            response = self._client.receive_message(**params)
        except (ClientError, BotoCoreError) as e:
            raise TransportError(f"Receive from {self.queue_url} failed: {e}") from e

        messages = response.get('Messages') or []
        if not messages:
            return None

        raw = messages[0]
        return Message(
            handle=raw['ReceiptHandle'],
            body=raw.get('Body', '').encode('utf-8'),
            message_id=raw.get('MessageId')
        )

    def delete(self, handle: str) -> None:
        """
        Delete a message by receipt handle.

        Raises:
            AckError: If the delete call fails
        """
        try:
            self._client.delete_message(QueueUrl=self.queue_url, ReceiptHandle=handle)
        except (ClientError, BotoCoreError, TransportError) as e:
            raise AckError(f"Failed to delete message {handle}: {e}") from e

    def send(self, job: Job, base64: bool = False) -> str:
        """
        Enqueue a job.

        Args:
            job: Job to enqueue
            base64: Wrap the JSON body in base64

        Returns:
            SQS message id
        """
        body = encode_job(job, use_base64=base64)

        try:
            response = self._client.send_message(QueueUrl=self.queue_url, MessageBody=body)
        except (ClientError, BotoCoreError) as e:
            raise TransportError(f"Send to {self.queue_url} failed: {e}") from e

        message_id = response.get('MessageId', '')
        self._logger.info(f"Enqueued thumbnail job for {job.original} (message {message_id})")
        return message_id


def encode_job(job: Job, use_base64: bool = False) -> str:
    """Message body for a job, optionally base64-wrapped."""
    body = json.dumps(job.to_dict(), separators=(',', ':'))
    if use_base64:
        return base64.b64encode(body.encode('utf-8')).decode('ascii')
    return body
