"""Domain layer package."""

from thumbd.domain.models import (
    Job,
    ThumbnailDescription,
    Message,
    UploadResult,
    RenditionResult,
    JobResult,
)
from thumbd.domain.keys import thumbnail_key, destination_from_url

__all__ = [
    "Job",
    "ThumbnailDescription",
    "Message",
    "UploadResult",
    "RenditionResult",
    "JobResult",
    "thumbnail_key",
    "destination_from_url",
]
