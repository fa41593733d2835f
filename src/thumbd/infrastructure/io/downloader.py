"""Downloader implementations."""

import requests
import shutil
from pathlib import Path, PurePosixPath
from urllib.parse import urlparse

from botocore.exceptions import BotoCoreError, ClientError

from thumbd.domain.exceptions import DownloadError
from thumbd.domain.keys import is_url
from thumbd.infrastructure.io.paths import path_under
from thumbd.infrastructure.storage import ScratchArea
from thumbd.shared.logging import get_logger

logger = get_logger(__name__)


def _extension(remote_key: str) -> str:
    """Extension of the object named by a key or URL, without the dot."""
    path = urlparse(remote_key).path if is_url(remote_key) else remote_key
    return PurePosixPath(path).suffix.lstrip('.')


class S3Downloader:
    """
    Fetches original images from an S3 bucket, or over HTTP(S) when the
    original is given as a URL.
    Implements IDownloader protocol.
    """

    def __init__(
        self,
        client,
        bucket: str,
        scratch: ScratchArea,
        timeout: int = 15,
        chunk_size: int = 8192
    ):
        """
        Initialize S3 downloader.

        Args:
            client: boto3 S3 client
            bucket: Source bucket name
            scratch: Scratch area receiving downloaded files
            timeout: HTTP request timeout in seconds
            chunk_size: HTTP download chunk size in bytes
        """
        self._client = client
        self.bucket = bucket
        self.scratch = scratch
        self.timeout = timeout
        self.chunk_size = chunk_size
        self._logger = get_logger(__name__)

    def download(self, remote_key: str) -> Path:
        """
        Download an original image into the scratch area.

        Args:
            remote_key: S3 key or http(s) URL

        Returns:
            Local scratch path

        Raises:
            DownloadError: If the download fails; no scratch file remains
        """
        destination = self.scratch.new_path(_extension(remote_key))

        try:
            if is_url(remote_key):
                self._download_http(remote_key, destination)
            else:
                self._download_s3(remote_key, destination)
        except Exception:
            self.scratch.remove(destination)
            raise

        return destination

    def _download_s3(self, key: str, destination: Path) -> None:
        self._logger.info(f"Downloading s3://{self.bucket}/{key} -> {destination}")

        try:
            self._client.download_file(self.bucket, key, str(destination))
        except (ClientError, BotoCoreError) as e:
            raise DownloadError(f"Failed to download s3://{self.bucket}/{key}: {e}") from e

    def _download_http(self, url: str, destination: Path) -> None:
        self._logger.info(f"Downloading {url} -> {destination}")

        try:
            response = requests.get(url, stream=True, timeout=self.timeout)
            response.raise_for_status()

            downloaded = 0
            with open(destination, 'wb') as f:
                for chunk in response.iter_content(chunk_size=self.chunk_size):
                    if chunk:
                        f.write(chunk)
                        downloaded += len(chunk)

            self._logger.debug(f"Downloaded {downloaded} bytes to {destination}")

        except requests.RequestException as e:
            raise DownloadError(f"Failed to download {url}: {e}") from e
        except OSError as e:
            raise DownloadError(f"Failed to write {destination}: {e}") from e


class LocalDownloader:
    """
    Copies original images from a local directory tree.
    Implements IDownloader protocol.
    """

    def __init__(self, root: Path, scratch: ScratchArea):
        self.root = Path(root)
        self.scratch = scratch
        self._logger = get_logger(__name__)

    def resolve(self, remote_key: str) -> Path:
        """Local path of a key under the root directory."""
        try:
            return path_under(self.root, remote_key)
        except ValueError as e:
            raise DownloadError(str(e)) from e

    def download(self, remote_key: str) -> Path:
        """
        Copy an original image into the scratch area.

        Raises:
            DownloadError: If the source is missing or cannot be copied
        """
        source = self.resolve(remote_key)
        if not source.is_file():
            raise DownloadError(f"File not found: {source}")

        destination = self.scratch.new_path(_extension(remote_key))
        try:
            shutil.copyfile(source, destination)
        except OSError as e:
            self.scratch.remove(destination)
            raise DownloadError(f"Failed to copy {source} to {destination}: {e}") from e

        self._logger.info(f"Copied {source} to {destination}")
        return destination
