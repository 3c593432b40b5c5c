"""Utility functions for pys3sync."""

from datetime import datetime, timedelta

# =============================================================================
# Constants for file operations
# =============================================================================

BYTES_IN_MB: int = 1024 * 1024

# Part size for multipart uploads and ETag calculation (5 MiB).
# Must never change between runs: remote ETags depend on it.
DEFAULT_CHUNK_SIZE: int = 5 * BYTES_IN_MB

# S3 rejects multipart parts smaller than 5 MiB (except the last one)
MIN_CHUNK_SIZE_MB: int = 5
MAX_CHUNK_SIZE_MB: int = 5 * 1024

# Retry configuration for transient errors
DEFAULT_MAX_RETRIES: int = 3
DEFAULT_TIMEOUT: float = 30.0


# =============================================================================
# Formatting utilities
# =============================================================================


def format_size(size_bytes: int) -> str:
    """Format file size in human-readable format.

    Args:
        size_bytes: Size in bytes

    Returns:
        Formatted size string (e.g., "1.5 MB", "256 B")
    """
    if size_bytes < 1024:
        return f"{size_bytes} B"
    elif size_bytes < 1024 * 1024:
        return f"{size_bytes / 1024:.1f} KB"
    elif size_bytes < 1024 * 1024 * 1024:
        return f"{size_bytes / 1024 / 1024:.1f} MB"
    else:
        return f"{size_bytes / 1024 / 1024 / 1024:.1f} GB"


def format_timestamp(value: datetime) -> str:
    """Format a datetime as RFC 3339 with second precision.

    Naive datetimes are interpreted in the local timezone.

    Examples:
        >>> from datetime import timezone
        >>> format_timestamp(datetime(2024, 5, 1, 12, 0, 3, 500, tzinfo=timezone.utc))
        '2024-05-01T12:00:03+00:00'
    """
    if value.tzinfo is None:
        value = value.astimezone()
    return value.replace(microsecond=0).isoformat()


def format_duration(duration: timedelta) -> str:
    """Format a duration compactly, e.g. ``1h2m3.5s`` or ``250ms``.

    Examples:
        >>> format_duration(timedelta(seconds=3723.5))
        '1h2m3.5s'
        >>> format_duration(timedelta(milliseconds=250))
        '250ms'
        >>> format_duration(timedelta(0))
        '0s'
    """
    total = duration.total_seconds()
    if total == 0:
        return "0s"
    if total < 1:
        return f"{total * 1000:.0f}ms"

    hours, remainder = divmod(total, 3600)
    minutes, seconds = divmod(remainder, 60)

    parts = []
    if hours:
        parts.append(f"{int(hours)}h")
    if hours or minutes:
        parts.append(f"{int(minutes)}m")
    parts.append(f"{seconds:.3f}".rstrip("0").rstrip(".") + "s")
    return "".join(parts)
