"""Local calculation of S3 entity tags (ETags).

S3 reports the ETag of an object uploaded in a single request as the hex MD5
of its content. For multipart uploads the ETag is the hex MD5 of the
concatenated binary MD5 digests of every part, followed by ``-<part count>``.
Computing the same value locally lets us detect changed files with a single
``HEAD`` request instead of downloading anything.

The result only matches when the local chunk size equals the part size used
when the object was uploaded. The part size is not recorded anywhere on the
remote side, so changing ``chunk_size`` between runs makes every multipart
object look changed.
"""

import hashlib
import logging
from pathlib import Path
from typing import BinaryIO, Union

from .exceptions import FileReadError
from .utils import DEFAULT_CHUNK_SIZE

logger = logging.getLogger(__name__)


def chunk_count(size: int, chunk_size: int = DEFAULT_CHUNK_SIZE) -> int:
    """Return the number of parts a file of ``size`` bytes is split into.

    An empty file still counts as one (empty) part.

    Examples:
        >>> chunk_count(0)
        1
        >>> chunk_count(5 * 1024 * 1024)
        1
        >>> chunk_count(5 * 1024 * 1024 + 1)
        2
    """
    if chunk_size <= 0:
        raise ValueError(f"chunk_size must be positive, got {chunk_size}")
    if size <= 0:
        return 1
    return (size + chunk_size - 1) // chunk_size


def _read_part(stream: BinaryIO, size: int) -> bytes:
    """Read up to ``size`` bytes, retrying short reads until EOF."""
    buffer = bytearray()
    while len(buffer) < size:
        data = stream.read(size - len(buffer))
        if not data:
            break
        buffer += data
    return bytes(buffer)


def calculate_etag_from_stream(
    stream: BinaryIO, chunk_size: int = DEFAULT_CHUNK_SIZE
) -> str:
    """Calculate the S3 ETag of the bytes read from ``stream``.

    Args:
        stream: Binary file-like object, read until EOF
        chunk_size: Part size in bytes

    Returns:
        ``<hex md5>`` for a single part, ``<hex md5 of md5s>-<N>`` otherwise
    """
    if chunk_size <= 0:
        raise ValueError(f"chunk_size must be positive, got {chunk_size}")

    digests: list[bytes] = []
    while True:
        chunk = _read_part(stream, chunk_size)
        if not chunk:
            break
        digests.append(hashlib.md5(chunk).digest())

    if not digests:
        # Zero-length content is a single empty part
        digests.append(hashlib.md5(b"").digest())

    if len(digests) == 1:
        return digests[0].hex()

    combined = hashlib.md5(b"".join(digests)).hexdigest()
    return f"{combined}-{len(digests)}"


def calculate_etag(
    path: Union[str, Path], chunk_size: int = DEFAULT_CHUNK_SIZE
) -> str:
    """Calculate the S3 ETag of a local file.

    Args:
        path: File to fingerprint
        chunk_size: Part size in bytes (must match the upload part size)

    Returns:
        ETag string without surrounding quotes

    Raises:
        FileReadError: If the file cannot be opened or read

    Examples:
        >>> calculate_etag("empty.txt")  # doctest: +SKIP
        'd41d8cd98f00b204e9800998ecf8427e'
    """
    try:
        with open(path, "rb") as f:
            etag = calculate_etag_from_stream(f, chunk_size)
    except OSError as e:
        raise FileReadError(f"Failed to read {path}: {e}", path=str(path)) from e

    logger.debug("Local ETag of %s: %s", path, etag)
    return etag
