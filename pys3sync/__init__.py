"""pys3sync - incremental uploads of local folders to Amazon S3."""

from .api import ProbeOutcome, ProbeResult, RemoteObject, S3Client
from .etag import calculate_etag, calculate_etag_from_stream, chunk_count
from .exceptions import (
    ConfigError,
    EnumerationError,
    FileReadError,
    MalformedETagError,
    S3APIError,
    S3CredentialsError,
    S3NetworkError,
    S3NotFoundError,
    S3PermissionError,
    S3SyncError,
    S3UploadError,
)

__version__ = "0.1.0"

__all__ = [
    "S3Client",
    "ProbeOutcome",
    "ProbeResult",
    "RemoteObject",
    "calculate_etag",
    "calculate_etag_from_stream",
    "chunk_count",
    "ConfigError",
    "EnumerationError",
    "FileReadError",
    "MalformedETagError",
    "S3APIError",
    "S3CredentialsError",
    "S3NetworkError",
    "S3NotFoundError",
    "S3PermissionError",
    "S3SyncError",
    "S3UploadError",
]
