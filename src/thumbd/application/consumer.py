"""Consumer loop: receive, process, acknowledge, repeat."""

import threading
from dataclasses import dataclass
from typing import Optional

from thumbd.application.decoder import decode_message
from thumbd.application.pipeline import JobPipeline
from thumbd.domain.exceptions import AckError, DecodeError, TransportError
from thumbd.domain.models import JobResult, Message
from thumbd.domain.protocols import IQueue, IMetricsCollector
from thumbd.shared.logging import get_logger

logger = get_logger(__name__)

# iteration outcomes
IDLE = "idle"
RECEIVE_FAILED = "receive_failed"
DECODE_FAILED = "decode_failed"
JOB_FAILED = "job_failed"
JOB_SUCCEEDED = "job_succeeded"


@dataclass
class Iteration:
    """What one pass through the loop did."""

    outcome: str
    message: Optional[Message] = None
    result: Optional[JobResult] = None
    deleted: bool = False


class ConsumerLoop:
    """
    Processes queue messages strictly one at a time.

    A message is deleted if and only if its whole job succeeded. Failed
    jobs are left for the queue to redeliver after the visibility timeout.
    """

    def __init__(
        self,
        queue: IQueue,
        pipeline: JobPipeline,
        exit_on_decode_error: bool = True,
        metrics: Optional[IMetricsCollector] = None
    ):
        """
        Args:
            queue: Queue to consume from
            pipeline: Pipeline that runs decoded jobs
            exit_on_decode_error: Raise DecodeError out of `run` for a body
                that is neither JSON nor base64 JSON; when False the message
                is logged and left for redelivery
            metrics: Optional metrics collector
        """
        self._queue = queue
        self._pipeline = pipeline
        self.exit_on_decode_error = exit_on_decode_error
        self._metrics = metrics
        self._stop = threading.Event()
        self._logger = get_logger(__name__)

    def run(self) -> None:
        """
        Loop until `stop` is called.

        Raises:
            DecodeError: For an undecodable message when exit_on_decode_error is set
        """
        self._logger.info("Consumer loop started")
        while not self._stop.is_set():
            self.run_once()
        self._logger.info("Consumer loop stopped")

    def stop(self) -> None:
        """Ask the loop to exit once the current iteration finishes."""
        self._stop.set()

    @property
    def stopped(self) -> bool:
        return self._stop.is_set()

    def run_once(self) -> Iteration:
        """Receive at most one message and handle it to completion."""
        self._logger.debug("Waiting for message")

        try:
            message = self._queue.receive()
        except TransportError as e:
            # retried immediately by the next iteration
            self._logger.error(f"Receive failed: {e}")
            self._count("receive_errors")
            return Iteration(outcome=RECEIVE_FAILED)

        if message is None:
            return Iteration(outcome=IDLE)

        self._logger.info(f"Received message {message.handle}")
        return self._handle(message)

    def _handle(self, message: Message) -> Iteration:
        decoded = decode_message(message.body)
        if not decoded.ok:
            error = f"Undecodable message {message.handle}: {decoded.failure}"
            self._count("decode_errors")
            if self.exit_on_decode_error:
                self._logger.critical(error)
                raise DecodeError(error)
            self._logger.error(f"{error}; leaving it for redelivery")
            return Iteration(outcome=DECODE_FAILED, message=message)

        result = self._pipeline.run(decoded.job)

        if not result.success:
            self._count("jobs_failed")
            self._logger.warning(f"Leaving message {message.handle} for redelivery")
            return Iteration(outcome=JOB_FAILED, message=message, result=result)

        self._count("jobs_succeeded")
        return Iteration(
            outcome=JOB_SUCCEEDED,
            message=message,
            result=result,
            deleted=self._delete(message)
        )

    def _delete(self, message: Message) -> bool:
        """Acknowledge a finished job; a failed delete is only logged."""
        try:
            self._queue.delete(message.handle)
        except AckError as e:
            self._logger.error(f"Error deleting thumbnail job {message.handle}: {e}")
            return False

        self._count("messages_deleted")
        self._logger.info(f"Deleted thumbnail job {message.handle}")
        return True

    def _count(self, name: str) -> None:
        if self._metrics is not None:
            self._metrics.increment_counter(name)
