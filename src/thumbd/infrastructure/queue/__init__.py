"""Queue infrastructure."""

from thumbd.infrastructure.queue.sqs import SqsQueue, encode_job

__all__ = ["SqsQueue", "encode_job"]
