"""ETag comparison logic for sync operations."""

import logging
from dataclasses import dataclass
from enum import Enum
from typing import Callable, Optional

from ..api import ProbeResult
from ..exceptions import MalformedETagError
from .scanner import LocalFile

logger = logging.getLogger(__name__)


class ChangeStatus(str, Enum):
    """Classification of a local file against its remote copy."""

    UNCHANGED = "unchanged"
    """Remote ETag equals the local one (skip)"""

    NEW = "new"
    """No usable remote ETag (upload)"""

    CHANGED = "changed"
    """Remote ETag differs from the local one (upload)"""

    FORCED = "forced"
    """Comparison bypassed by force mode (upload)"""


@dataclass
class SyncDecision:
    """Represents a decision about whether to upload a file."""

    status: ChangeStatus
    """Classification of the file"""

    reason: str
    """Human-readable reason for this decision"""

    local_file: LocalFile
    """Local file under consideration"""

    remote_etag: Optional[str] = None
    """Remote ETag with quotes stripped (if available)"""

    local_etag: Optional[str] = None
    """Locally computed ETag (if it was computed)"""

    @property
    def requires_upload(self) -> bool:
        return self.status != ChangeStatus.UNCHANGED


def strip_etag_quotes(etag: str) -> str:
    """Remove exactly one leading and one trailing character from an ETag.

    S3 returns ETags wrapped in double quotes.

    Raises:
        MalformedETagError: If the ETag is shorter than two characters

    Examples:
        >>> strip_etag_quotes('"d41d8cd98f00b204e9800998ecf8427e"')
        'd41d8cd98f00b204e9800998ecf8427e'
    """
    if len(etag) < 2:
        raise MalformedETagError(f"Malformed ETag {etag!r}")
    return etag[1:-1]


class FileComparator:
    """Classifies local files as new, changed or unchanged."""

    @staticmethod
    def classify(local_etag: str, remote_etag: Optional[str]) -> ChangeStatus:
        """Compare a local ETag with a quote-stripped remote ETag.

        Args:
            local_etag: Locally computed ETag
            remote_etag: Remote ETag without quotes, or None if unavailable

        Returns:
            ChangeStatus
        """
        if remote_etag is None:
            return ChangeStatus.NEW
        if local_etag == remote_etag:
            return ChangeStatus.UNCHANGED
        return ChangeStatus.CHANGED

    def compare(
        self,
        local_file: LocalFile,
        probe: ProbeResult,
        local_etag_fn: Callable[[LocalFile], str],
    ) -> SyncDecision:
        """Decide whether a local file differs from its remote copy.

        The local ETag is only computed when the remote copy has a usable
        ETag. Errors raised by ``local_etag_fn`` propagate to the caller.

        Args:
            local_file: File to check
            probe: Result of the remote metadata probe
            local_etag_fn: Computes the local ETag of a file

        Returns:
            SyncDecision
        """
        if not probe.found or probe.etag is None:
            return SyncDecision(
                status=ChangeStatus.NEW,
                reason="File doesn't exist in S3",
                local_file=local_file,
            )

        try:
            remote_etag = strip_etag_quotes(probe.etag)
        except MalformedETagError as e:
            logger.warning("%s: %s, assuming changed", local_file.remote_key, e)
            return SyncDecision(
                status=ChangeStatus.CHANGED,
                reason="Remote ETag is malformed",
                local_file=local_file,
            )

        local_etag = local_etag_fn(local_file)
        status = self.classify(local_etag, remote_etag)

        if status == ChangeStatus.UNCHANGED:
            reason = "File didn't change"
        else:
            reason = "File changed"

        return SyncDecision(
            status=status,
            reason=reason,
            local_file=local_file,
            remote_etag=remote_etag,
            local_etag=local_etag,
        )

    @staticmethod
    def forced(local_file: LocalFile) -> SyncDecision:
        """Decision for force mode: upload without probing or hashing."""
        return SyncDecision(
            status=ChangeStatus.FORCED,
            reason="Forced upload",
            local_file=local_file,
        )
