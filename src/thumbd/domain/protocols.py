"""Protocol definitions for dependency inversion."""

from typing import ContextManager, Protocol, Optional
from pathlib import Path

from thumbd.domain.models import Job, Message, ThumbnailDescription, UploadResult


class IDownloader(Protocol):
    """Interface for fetching the original image into the scratch area."""

    def download(self, remote_key: str) -> Path:
        """Download `remote_key` and return the local scratch path."""
        ...


class IRenderer(Protocol):
    """Interface for producing one rendition from a local source."""

    def render(self, description: ThumbnailDescription, source_path: Path) -> Path:
        """Render the source according to `description`, return the local file."""
        ...


class IUploader(Protocol):
    """Interface for writing files to durable storage."""

    def upload(self, file_path: Path, destination: str) -> UploadResult:
        """Upload a local file to a storage key or URL."""
        ...


class IQueue(Protocol):
    """Interface for the job queue."""

    def receive(self) -> Optional[Message]:
        """Receive at most one message, or None when the queue is empty."""
        ...

    def delete(self, handle: str) -> None:
        """Delete a message by its receipt handle."""
        ...

    def send(self, job: Job, base64: bool = False) -> str:
        """Enqueue a job and return the message id."""
        ...


class IMetricsCollector(Protocol):
    """Interface for collecting metrics."""

    def start_timer(self, name: str) -> float:
        """Start a timer and return its start mark."""
        ...

    def stop_timer(self, name: str, started: float) -> float:
        """Record the time elapsed since `started` under `name`."""
        ...

    def timed(self, name: str) -> ContextManager[None]:
        """Context manager timing the enclosed block."""
        ...

    def increment_counter(self, name: str, amount: int = 1) -> None:
        """Increment a counter."""
        ...

    def get_summary(self) -> dict:
        """Get summary of all metrics."""
        ...
