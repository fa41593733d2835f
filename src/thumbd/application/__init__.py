"""Application layer package."""

from thumbd.application.decoder import decode_message, DecodeResult, DecodeFailure
from thumbd.application.rendition import RenditionUnit
from thumbd.application.pipeline import JobPipeline
from thumbd.application.consumer import ConsumerLoop

__all__ = [
    "decode_message",
    "DecodeResult",
    "DecodeFailure",
    "RenditionUnit",
    "JobPipeline",
    "ConsumerLoop",
]
