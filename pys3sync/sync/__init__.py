"""Sync engine for pys3sync - incremental uploads to S3."""

from .comparator import ChangeStatus, FileComparator, SyncDecision, strip_etag_quotes
from .engine import SyncEngine
from .operations import SyncOperations
from .pair import SyncPair, build_remote_key
from .scanner import DirectoryScanner, LocalFile, iter_path_list, read_path_list
from .stats import RunStatistics

__all__ = [
    "SyncEngine",
    "SyncPair",
    "SyncOperations",
    "build_remote_key",
    "DirectoryScanner",
    "LocalFile",
    "iter_path_list",
    "read_path_list",
    "FileComparator",
    "ChangeStatus",
    "SyncDecision",
    "strip_etag_quotes",
    "RunStatistics",
]
