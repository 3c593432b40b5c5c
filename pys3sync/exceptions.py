"""Custom exceptions for pys3sync."""

from typing import Optional


class S3SyncError(Exception):
    """Base exception for all pys3sync errors."""


class ConfigError(S3SyncError):
    """Raised when required configuration is missing or invalid.

    Configuration errors are fatal and are raised before any file is processed.
    """


class S3CredentialsError(ConfigError):
    """Raised when no usable AWS credentials can be found."""


class EnumerationError(S3SyncError):
    """Raised when walking the scan root fails (e.g. the root disappeared)."""


class FileReadError(S3SyncError):
    """Raised when a local file cannot be opened or read."""

    def __init__(self, message: str, path: Optional[str] = None):
        super().__init__(message)
        self.path = path


class MalformedETagError(S3SyncError):
    """Raised when a remote ETag is too short to carry its surrounding quotes."""


class S3APIError(S3SyncError):
    """Base exception for object store errors."""

    def __init__(
        self,
        message: str,
        key: Optional[str] = None,
        status_code: Optional[int] = None,
    ):
        super().__init__(message)
        self.key = key
        self.status_code = status_code


class S3NotFoundError(S3APIError):
    """Raised when the requested object does not exist (404)."""


class S3PermissionError(S3APIError):
    """Raised when access to the object is denied (403)."""


class S3NetworkError(S3APIError):
    """Raised when the object store cannot be reached."""


class S3UploadError(S3APIError):
    """Raised when an upload fails."""
