"""Uploader implementations."""

import mimetypes
import shutil
from pathlib import Path
from typing import Optional

from boto3.exceptions import S3UploadFailedError
from boto3.s3.transfer import TransferConfig
from botocore.exceptions import BotoCoreError, ClientError

from thumbd.domain.exceptions import UploadError
from thumbd.domain.keys import resolve_key
from thumbd.domain.models import UploadResult
from thumbd.infrastructure.io.paths import path_under
from thumbd.shared.logging import get_logger

logger = get_logger(__name__)


def guess_content_type(file_path: Path) -> str:
    """MIME type for a rendered file, from its extension."""
    content_type, _ = mimetypes.guess_type(str(file_path))
    return content_type or 'application/octet-stream'


class S3Uploader:
    """
    Writes renditions to an S3 bucket.
    Implements IUploader protocol.
    """

    def __init__(
        self,
        client,
        bucket: str,
        acl: Optional[str] = 'private',
        storage_class: Optional[str] = 'STANDARD'
    ):
        """
        Initialize S3 uploader.

        Args:
            client: boto3 S3 client
            bucket: Destination bucket name
            acl: Canned ACL applied to every object
            storage_class: Storage class applied to every object
        """
        self._client = client
        self.bucket = bucket
        self.acl = acl
        self.storage_class = storage_class
        self._logger = get_logger(__name__)

        # Renditions are small; keep them to a single PUT
        self._transfer_config = TransferConfig(
            multipart_threshold=64 * 1024 * 1024,
            use_threads=False
        )

    def upload(self, file_path: Path, destination: str) -> UploadResult:
        """
        Upload a file to the bucket.

        Args:
            file_path: Path to file to upload
            destination: S3 key, or a URL whose host and path form the key

        Returns:
            UploadResult with upload details

        Raises:
            UploadError: If upload fails
        """
        if not file_path.exists():
            raise UploadError(f"File not found: {file_path}")

        key = resolve_key(destination)
        content_type = guess_content_type(file_path)
        file_size = file_path.stat().st_size

        extra_args = {'ContentType': content_type}
        if self.acl:
            extra_args['ACL'] = self.acl
        if self.storage_class:
            extra_args['StorageClass'] = self.storage_class

        try:
            self._client.upload_file(
                str(file_path),
                self.bucket,
                key,
                ExtraArgs=extra_args,
                Config=self._transfer_config
            )
        except (S3UploadFailedError, ClientError, BotoCoreError) as e:
            raise UploadError(f"Upload of {file_path} to s3://{self.bucket}/{key} failed: {e}") from e

        self._logger.info(f"Saved {file_path} to {key}")

        return UploadResult(
            success=True,
            bucket=self.bucket,
            key=key,
            size_bytes=file_size,
            content_type=content_type
        )


class LocalUploader:
    """
    Writes renditions into a local directory tree.
    Implements IUploader protocol.
    """

    def __init__(self, root: Path):
        self.root = Path(root)
        self._logger = get_logger(__name__)

    def upload(self, file_path: Path, destination: str) -> UploadResult:
        if not file_path.exists():
            raise UploadError(f"File not found: {file_path}")

        key = resolve_key(destination)
        try:
            target = path_under(self.root, key)
        except ValueError as e:
            raise UploadError(str(e)) from e

        try:
            target.parent.mkdir(parents=True, exist_ok=True)
            shutil.copyfile(file_path, target)
        except OSError as e:
            raise UploadError(f"Failed to copy {file_path} to {target}: {e}") from e

        self._logger.info(f"Saved {file_path} to {target}")

        return UploadResult(
            success=True,
            bucket=str(self.root),
            key=key,
            size_bytes=target.stat().st_size,
            content_type=guess_content_type(file_path)
        )
