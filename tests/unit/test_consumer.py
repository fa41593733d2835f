"""Tests for ConsumerLoop."""

import base64
import json
from unittest.mock import Mock

import pytest

from thumbd.application.consumer import (
    ConsumerLoop,
    IDLE,
    RECEIVE_FAILED,
    DECODE_FAILED,
    JOB_FAILED,
    JOB_SUCCEEDED,
)
from thumbd.domain.exceptions import AckError, DecodeError, TransportError
from thumbd.domain.models import Job, JobResult, Message
from thumbd.shared.metrics import MetricsCollector


BODY = json.dumps({
    "original": "images/photo.jpg",
    "descriptions": [{"suffix": "small", "width": 64, "height": 64}]
}).encode('utf-8')


def message(body=BODY, handle="handle-1"):
    return Message(handle=handle, body=body)


@pytest.fixture
def queue():
    queue = Mock()
    queue.receive.return_value = message()
    return queue


@pytest.fixture
def pipeline():
    pipeline = Mock()
    pipeline.run.side_effect = lambda job: JobResult(success=True, original=job.original)
    return pipeline


class TestRunOnce:
    """Test a single loop iteration."""

    def test_success_deletes_with_message_handle(self, queue, pipeline):
        """Test exactly one delete with the received handle."""
        loop = ConsumerLoop(queue, pipeline)

        iteration = loop.run_once()

        assert iteration.outcome == JOB_SUCCEEDED
        assert iteration.deleted is True
        queue.delete.assert_called_once_with("handle-1")
        job = pipeline.run.call_args[0][0]
        assert isinstance(job, Job)
        assert job.original == "images/photo.jpg"

    def test_failed_job_is_not_deleted(self, queue, pipeline):
        """Test zero deletes when the pipeline fails."""
        pipeline.run.side_effect = lambda job: JobResult(success=False, original=job.original)
        loop = ConsumerLoop(queue, pipeline)

        iteration = loop.run_once()

        assert iteration.outcome == JOB_FAILED
        queue.delete.assert_not_called()

    def test_empty_receive_is_idle(self, queue, pipeline):
        queue.receive.return_value = None
        loop = ConsumerLoop(queue, pipeline)

        iteration = loop.run_once()

        assert iteration.outcome == IDLE
        pipeline.run.assert_not_called()
        queue.delete.assert_not_called()

    def test_transport_error_is_logged_and_retried(self, queue, pipeline):
        """Test receive errors return to idle and the next receive proceeds."""
        queue.receive.side_effect = [TransportError("unreachable"), message()]
        metrics = MetricsCollector()
        loop = ConsumerLoop(queue, pipeline, metrics=metrics)

        first = loop.run_once()
        second = loop.run_once()

        assert first.outcome == RECEIVE_FAILED
        assert second.outcome == JOB_SUCCEEDED
        assert metrics.get_counter("receive_errors") == 1
        queue.delete.assert_called_once_with("handle-1")

    def test_ack_error_is_logged_only(self, queue, pipeline):
        """Test a failed delete does not turn into a job failure."""
        queue.delete.side_effect = AckError("receipt handle expired")
        loop = ConsumerLoop(queue, pipeline)

        iteration = loop.run_once()

        assert iteration.outcome == JOB_SUCCEEDED
        assert iteration.result.success is True
        assert iteration.deleted is False
        queue.delete.assert_called_once()

    def test_base64_body(self, queue, pipeline):
        """Test base64-wrapped bodies are processed the same way."""
        queue.receive.return_value = message(body=base64.b64encode(BODY))
        loop = ConsumerLoop(queue, pipeline)

        iteration = loop.run_once()

        assert iteration.outcome == JOB_SUCCEEDED
        assert pipeline.run.call_args[0][0].original == "images/photo.jpg"

    def test_undecodable_message_is_fatal(self, queue, pipeline):
        """Test decode failures raise DecodeError without running or deleting."""
        queue.receive.return_value = message(body=b"abc")
        loop = ConsumerLoop(queue, pipeline)

        with pytest.raises(DecodeError, match="handle-1"):
            loop.run_once()

        pipeline.run.assert_not_called()
        queue.delete.assert_not_called()

    def test_undecodable_message_left_when_not_fatal(self, queue, pipeline):
        """Test exit_on_decode_error=False leaves the message for redelivery."""
        queue.receive.return_value = message(body=b"abc")
        loop = ConsumerLoop(queue, pipeline, exit_on_decode_error=False)

        iteration = loop.run_once()

        assert iteration.outcome == DECODE_FAILED
        pipeline.run.assert_not_called()
        queue.delete.assert_not_called()


class TestRun:
    """Test the long-running loop."""

    def test_processes_until_stopped(self, queue, pipeline):
        """Test jobs are handled one after another until stop."""
        messages = [message(handle=f"h{i}") for i in range(3)]
        loop = ConsumerLoop(queue, pipeline)

        def receive():
            if messages:
                return messages.pop(0)
            loop.stop()
            return None

        queue.receive.side_effect = receive

        loop.run()

        assert loop.stopped
        assert [c.args[0] for c in queue.delete.call_args_list] == ["h0", "h1", "h2"]
        assert pipeline.run.call_count == 3

    def test_decode_error_escapes_run(self, queue, pipeline):
        queue.receive.return_value = message(body=b"%%%")
        loop = ConsumerLoop(queue, pipeline)

        with pytest.raises(DecodeError):
            loop.run()
