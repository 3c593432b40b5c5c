"""Sync pair definition: a local folder mirrored into a bucket prefix."""

from dataclasses import dataclass
from pathlib import Path
from typing import Union

from ..utils import DEFAULT_CHUNK_SIZE


def build_remote_key(path: str, src: str, dest: str) -> str:
    """Derive the object key for a local path.

    The first occurrence of ``src`` in ``path`` is removed and ``dest`` is
    prepended to what remains. Later occurrences of ``src`` are kept.

    Args:
        path: Local file path
        src: Scan root as given by the user
        dest: Remote key prefix (may be empty)

    Returns:
        Object key

    Examples:
        >>> build_remote_key("/mnt/data/test.jpg", "/mnt/data", "")
        '/test.jpg'
        >>> build_remote_key("/mnt/data/foo/test.jpg", "/mnt/data", "/intern")
        '/intern/foo/test.jpg'
    """
    relative_path = path.replace(src, "", 1)
    return f"{dest}{relative_path}"


@dataclass(frozen=True)
class SyncPair:
    """Configuration of one sync run.

    Examples:
        >>> pair = SyncPair(local=Path("/mnt/data"), bucket="backup", remote="/intern")
        >>> pair.remote_key_for("/mnt/data/foo/test.jpg")
        '/intern/foo/test.jpg'
    """

    local: Path
    """Local scan root"""

    bucket: str
    """Destination bucket"""

    remote: str = ""
    """Remote key prefix"""

    force: bool = False
    """Upload every file without comparing ETags"""

    chunk_size: int = DEFAULT_CHUNK_SIZE
    """Part size used for local ETags and multipart uploads"""

    src: str = ""
    """Scan root exactly as given by the user, used for key derivation
    (defaults to the local path)"""

    def __post_init__(self) -> None:
        """Record the raw root string and normalize the local path."""
        if not self.src:
            object.__setattr__(self, "src", str(self.local))
        if not isinstance(self.local, Path):
            object.__setattr__(self, "local", Path(self.local))
        if self.chunk_size <= 0:
            raise ValueError(f"chunk_size must be positive, got {self.chunk_size}")

    def remote_key_for(self, path: Union[str, Path]) -> str:
        """Return the object key for a local path under this pair."""
        return build_remote_key(str(path), self.src, self.remote)

    def __str__(self) -> str:
        return f"{self.local} -> s3://{self.bucket}{self.remote}"
