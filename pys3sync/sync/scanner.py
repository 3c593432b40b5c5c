"""Candidate enumeration for sync runs.

Candidates come either from a recursive walk of the scan root or from an
explicit list of paths (e.g. piped on stdin). Both sources are lazy
generators so the engine can start processing before enumeration finishes.
"""

import logging
import os
from collections.abc import Generator, Iterable
from dataclasses import dataclass
from pathlib import Path
from typing import Optional, TextIO

from ..exceptions import EnumerationError
from .pair import SyncPair

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class LocalFile:
    """Represents a local file considered for upload."""

    path: Path
    """Path of the file (as enumerated)"""

    size: int
    """File size in bytes"""

    remote_key: str
    """Object key the file maps to"""

    @classmethod
    def from_path(
        cls, file_path: Path, pair: SyncPair, size: Optional[int] = None
    ) -> "LocalFile":
        """Create LocalFile from a path.

        Args:
            file_path: Path to the file
            pair: Sync pair used to derive the remote key
            size: Known file size (stat'ed if omitted)

        Returns:
            LocalFile instance
        """
        if size is None:
            size = file_path.stat().st_size
        return cls(
            path=file_path,
            size=size,
            remote_key=pair.remote_key_for(file_path),
        )


class DirectoryScanner:
    """Walks a directory tree depth-first.

    Examples:
        >>> scanner = DirectoryScanner()
        >>> for path, is_dir in scanner.walk(Path("/mnt/data")):
        ...     print(path, is_dir)
    """

    def walk(self, root: Path) -> Generator[tuple[Path, bool], None, None]:
        """Yield ``(path, is_dir)`` for the root and everything below it.

        Entries are visited depth-first in lexical order, each directory
        before its contents. Symlinks to directories are not followed.

        Directories below the root that cannot be listed are logged and
        skipped together with their contents.

        Raises:
            EnumerationError: If the root itself cannot be accessed or listed
        """
        try:
            is_dir = root.is_dir()
        except OSError as e:
            raise EnumerationError(f"Cannot access {root}: {e}") from e
        if not is_dir and not root.exists():
            raise EnumerationError(f"The folder {str(root)!r} doesn't exist")

        yield root, is_dir
        if is_dir:
            try:
                entries = self._list_dir(root)
            except OSError as e:
                raise EnumerationError(f"Failed to list {root}: {e}") from e
            yield from self._walk_entries(root, entries)

    def _list_dir(self, directory: Path) -> list[os.DirEntry]:
        with os.scandir(directory) as it:
            return sorted(it, key=lambda entry: entry.name)

    def _walk_entries(
        self, directory: Path, entries: list[os.DirEntry]
    ) -> Generator[tuple[Path, bool], None, None]:
        for entry in entries:
            path = directory / entry.name
            try:
                is_dir = entry.is_dir(follow_symlinks=False)
            except OSError:
                is_dir = False

            yield path, is_dir
            if not is_dir:
                continue
            try:
                children = self._list_dir(path)
            except OSError as e:
                logger.error("Failed to list %s, skipping it: %s", path, e)
                continue
            yield from self._walk_entries(path, children)

    def iter_files(
        self, pair: SyncPair
    ) -> Generator[LocalFile, None, None]:
        """Yield a LocalFile for every regular file below the pair's root.

        Directories are traversed but never yielded.
        """
        for path, is_dir in self.walk(pair.local):
            if is_dir:
                continue
            try:
                yield LocalFile.from_path(path, pair)
            except OSError as e:
                # Vanished between listing and stat; the engine still counts it
                logger.debug("Could not stat %s: %s", path, e)
                yield LocalFile(path=path, size=0, remote_key=pair.remote_key_for(path))


def read_path_list(stream: TextIO) -> list[str]:
    """Read one path per line, ignoring empty lines.

    Args:
        stream: Text stream (e.g. stdin)

    Returns:
        List of paths in input order
    """
    paths = []
    for line in stream:
        path = line.rstrip("\r\n")
        if path:
            paths.append(path)
    return paths


def iter_path_list(
    paths: Iterable[str], pair: SyncPair
) -> Generator[LocalFile, None, None]:
    """Yield a LocalFile for each explicitly listed path.

    Paths are used verbatim. Paths that cannot be stat'ed are logged and
    skipped; directories are skipped silently.
    """
    for raw_path in paths:
        path = Path(raw_path)
        try:
            stat = path.stat()
        except OSError as e:
            logger.error("failed to open file %r, %s", raw_path, e)
            continue

        if path.is_dir():
            continue

        yield LocalFile(
            path=path,
            size=stat.st_size,
            remote_key=pair.remote_key_for(raw_path),
        )
