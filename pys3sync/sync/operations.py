"""Sync operations wrapper around the S3 client."""

import logging
from typing import Callable, Optional

from ..api import ProbeResult, S3Client
from ..etag import calculate_etag
from .scanner import LocalFile

logger = logging.getLogger(__name__)


class SyncOperations:
    """Remote and local operations needed to sync a single file."""

    def __init__(self, client: S3Client):
        """Initialize sync operations.

        Args:
            client: S3 client for the destination bucket
        """
        self.client = client

    def probe(self, local_file: LocalFile) -> ProbeResult:
        """Look up the remote ETag for a local file's key."""
        return self.client.probe(local_file.remote_key)

    def local_etag(self, local_file: LocalFile, chunk_size: int) -> str:
        """Compute the S3-compatible ETag of a local file.

        Raises:
            FileReadError: If the file cannot be read
        """
        return calculate_etag(local_file.path, chunk_size)

    def upload_file(
        self,
        local_file: LocalFile,
        progress_callback: Optional[Callable[[int], None]] = None,
    ) -> str:
        """Upload a local file to its remote key.

        Args:
            local_file: Local file to upload
            progress_callback: Optional callback receiving transferred byte counts

        Returns:
            URL of the uploaded object
        """
        logger.info("Uploading %s", local_file.path)
        return self.client.upload_file(
            file_path=local_file.path,
            key=local_file.remote_key,
            progress_callback=progress_callback,
        )
