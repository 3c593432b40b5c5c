"""S3 client used for metadata probes and uploads."""

from __future__ import annotations

import logging
import threading
from dataclasses import dataclass
from datetime import datetime
from enum import Enum
from pathlib import Path
from typing import TYPE_CHECKING, Any, Callable, Optional, Union
from urllib.parse import quote

import boto3
from boto3.exceptions import S3UploadFailedError
from boto3.s3.transfer import TransferConfig
from botocore.config import Config as BotoConfig
from botocore.exceptions import (
    BotoCoreError,
    ClientError,
    HTTPClientError,
)
from botocore.exceptions import (
    ConnectionError as BotoConnectionError,
)

from .exceptions import (
    FileReadError,
    S3APIError,
    S3CredentialsError,
    S3NetworkError,
    S3NotFoundError,
    S3PermissionError,
    S3UploadError,
)
from .utils import DEFAULT_CHUNK_SIZE, DEFAULT_MAX_RETRIES, DEFAULT_TIMEOUT

if TYPE_CHECKING:
    from boto3.session import Session

logger = logging.getLogger(__name__)

NOT_FOUND_CODES = {"404", "NoSuchKey", "NotFound"}
FORBIDDEN_CODES = {"403", "AccessDenied", "Forbidden"}


@dataclass(frozen=True)
class RemoteObject:
    """Metadata of an object returned by a HEAD request."""

    key: str
    """Object key"""

    etag: str
    """ETag exactly as returned by S3, including the surrounding quotes"""

    size: int = 0
    """Content length in bytes"""

    last_modified: Optional[datetime] = None
    """Last modification time reported by S3"""


class ProbeOutcome(str, Enum):
    """Result category of a metadata probe."""

    FOUND = "found"
    NOT_FOUND = "not_found"
    ERROR = "error"


@dataclass(frozen=True)
class ProbeResult:
    """Outcome of :meth:`S3Client.probe`.

    ``NOT_FOUND`` and ``ERROR`` both mean there is no usable remote ETag.
    """

    key: str
    outcome: ProbeOutcome
    remote: Optional[RemoteObject] = None
    error: Optional[Exception] = None

    @property
    def found(self) -> bool:
        return self.outcome == ProbeOutcome.FOUND and self.remote is not None

    @property
    def etag(self) -> Optional[str]:
        return self.remote.etag if self.remote is not None else None


class S3Client:
    """Client for a single S3 bucket."""

    def __init__(
        self,
        bucket: str,
        region: str,
        chunk_size: int = DEFAULT_CHUNK_SIZE,
        max_retries: int = DEFAULT_MAX_RETRIES,
        timeout: float = DEFAULT_TIMEOUT,
        session: Optional[Session] = None,
    ):
        """Initialize S3 client.

        Args:
            bucket: Destination bucket name
            region: Region of the bucket
            chunk_size: Part size for multipart uploads in bytes. Must equal the
                chunk size used for local ETag calculation.
            max_retries: Maximum number of attempts for transient errors
            timeout: Connect/read timeout in seconds
            session: Optional boto3 session (a new one is created if omitted)

        Raises:
            S3CredentialsError: If the AWS configuration cannot be loaded
                (e.g. AWS_PROFILE names an unknown profile)
        """
        self.bucket = bucket
        self.region = region
        self.chunk_size = chunk_size
        self.max_retries = max_retries
        self.timeout = timeout
        if session is None:
            try:
                session = boto3.session.Session(region_name=region)
            except BotoCoreError as e:
                raise S3CredentialsError(
                    f"Can't load the AWS configuration: {e}"
                ) from e
        self.session = session

        self._client: Any = None
        self._lock = threading.Lock()

    def _get_client(self) -> Any:
        """Get or create the boto3 S3 client."""
        with self._lock:
            if self._client is None:
                self._client = self.session.client(
                    "s3",
                    region_name=self.region,
                    config=BotoConfig(
                        connect_timeout=self.timeout,
                        read_timeout=self.timeout,
                        retries={"max_attempts": self.max_retries, "mode": "standard"},
                    ),
                )
            return self._client

    def check_credentials(self) -> None:
        """Ensure the boto3 credential chain provides usable keys.

        Raises:
            S3CredentialsError: If no access key/secret key pair is available
                or the credential chain fails (e.g. an unknown AWS_PROFILE)
        """
        try:
            credentials = self.session.get_credentials()
        except BotoCoreError as e:
            raise S3CredentialsError(f"Can't find valid AWS credentials: {e}") from e
        if credentials is None:
            raise S3CredentialsError("Can't find valid AWS credentials")

        frozen = credentials.get_frozen_credentials()
        if not frozen.access_key or not frozen.secret_key:
            raise S3CredentialsError("Can't find valid AWS credentials")

    def object_url(self, key: str) -> str:
        """Return the virtual-hosted style URL of an object."""
        return (
            f"https://{self.bucket}.s3.{self.region}.amazonaws.com/"
            f"{quote(key.lstrip('/'))}"
        )

    def _translate_error(self, e: Exception, key: str) -> S3APIError:
        """Map a botocore exception to the pys3sync exception hierarchy."""
        if isinstance(e, ClientError):
            error = e.response.get("Error", {})
            code = str(error.get("Code", ""))
            status = e.response.get("ResponseMetadata", {}).get("HTTPStatusCode")
            message = error.get("Message") or str(e)

            if code in NOT_FOUND_CODES or status == 404:
                return S3NotFoundError(
                    f"Object not found: {key}", key=key, status_code=404
                )
            if code in FORBIDDEN_CODES or status == 403:
                return S3PermissionError(
                    f"Access denied for {key}: {message}", key=key, status_code=403
                )
            return S3APIError(
                f"S3 error for {key} ({code}): {message}",
                key=key,
                status_code=status,
            )

        if isinstance(e, (BotoConnectionError, HTTPClientError)):
            return S3NetworkError(f"Network error for {key}: {e}", key=key)

        return S3APIError(f"S3 error for {key}: {e}", key=key)

    def head_object(self, key: str) -> RemoteObject:
        """Fetch object metadata without downloading the body.

        Args:
            key: Object key

        Returns:
            RemoteObject with the quoted ETag

        Raises:
            S3NotFoundError: If the object does not exist
            S3PermissionError: If access is denied
            S3NetworkError: On connection failures
            S3APIError: On any other error
        """
        logger.debug("Checking if %r exists in S3", key)
        try:
            response = self._get_client().head_object(Bucket=self.bucket, Key=key)
        except (ClientError, BotoCoreError) as e:
            raise self._translate_error(e, key) from e

        return RemoteObject(
            key=key,
            etag=response.get("ETag", ""),
            size=response.get("ContentLength", 0),
            last_modified=response.get("LastModified"),
        )

    def probe(self, key: str) -> ProbeResult:
        """Look up the stored ETag of ``key``.

        Never raises for store errors: a missing object and a failed request
        both yield a result without a remote ETag, which callers treat as a
        new file. The two cases are logged differently.

        Args:
            key: Object key

        Returns:
            ProbeResult
        """
        try:
            remote = self.head_object(key)
        except S3NotFoundError as e:
            logger.debug("%s doesn't exist in S3", key)
            return ProbeResult(key=key, outcome=ProbeOutcome.NOT_FOUND, error=e)
        except S3APIError as e:
            logger.warning("Metadata probe for %s failed, treating as new: %s", key, e)
            return ProbeResult(key=key, outcome=ProbeOutcome.ERROR, error=e)

        return ProbeResult(key=key, outcome=ProbeOutcome.FOUND, remote=remote)

    def _transfer_config(self) -> TransferConfig:
        # Files up to one part are sent with a single PUT so that their ETag
        # is a plain MD5, exactly like the locally computed one.
        return TransferConfig(
            multipart_threshold=self.chunk_size + 1,
            multipart_chunksize=self.chunk_size,
        )

    def upload_file(
        self,
        file_path: Union[str, Path],
        key: str,
        progress_callback: Optional[Callable[[int], None]] = None,
    ) -> str:
        """Upload a local file.

        Args:
            file_path: Local file to upload
            key: Destination object key
            progress_callback: Optional callback receiving transferred byte counts

        Returns:
            URL of the uploaded object

        Raises:
            FileReadError: If the local file cannot be opened
            S3UploadError: If the upload fails
        """
        try:
            f = open(file_path, "rb")
        except OSError as e:
            raise FileReadError(
                f"failed to open file {str(file_path)!r}, {e}", path=str(file_path)
            ) from e

        with f:
            try:
                self._get_client().upload_fileobj(
                    f,
                    self.bucket,
                    key,
                    Config=self._transfer_config(),
                    Callback=progress_callback,
                )
            except (ClientError, BotoCoreError, S3UploadFailedError) as e:
                error = self._translate_error(e, key)
                raise S3UploadError(
                    f"failed to upload file, {error}",
                    key=key,
                    status_code=error.status_code,
                ) from e
            except OSError as e:
                raise FileReadError(
                    f"Failed to read {file_path} during upload: {e}",
                    path=str(file_path),
                ) from e

        location = self.object_url(key)
        logger.debug("File uploaded to %s", location)
        return location
