"""IO utilities package."""

from thumbd.infrastructure.io.downloader import S3Downloader, LocalDownloader
from thumbd.infrastructure.io.uploader import S3Uploader, LocalUploader

__all__ = ["S3Downloader", "LocalDownloader", "S3Uploader", "LocalUploader"]
