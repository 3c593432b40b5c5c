"""Run statistics for a sync invocation."""

import threading
from datetime import datetime, timedelta
from typing import Optional

from ..utils import format_duration, format_timestamp

SEPARATOR = "#" * 30


class RunStatistics:
    """Counters and timing of one sync run.

    All ``record_*`` methods are safe to call from worker threads.
    ``skipped`` is always derived as ``file_count - (new + changed)``, so
    files that failed are reported as skipped.
    """

    def __init__(self) -> None:
        self._lock = threading.Lock()
        self.start_time: Optional[datetime] = None
        self.end_time: Optional[datetime] = None
        self.file_count = 0
        self.new = 0
        self.changed = 0
        # Informational only, not part of the printed summary
        self.failed = 0
        self.uploaded_bytes = 0
        self.cancelled = False

    def start(self) -> None:
        self.start_time = datetime.now().astimezone()

    def finish(self) -> None:
        self.end_time = datetime.now().astimezone()

    @property
    def duration(self) -> Optional[timedelta]:
        """Elapsed time between start and finish (None until both are set)."""
        if self.start_time is None or self.end_time is None:
            return None
        return self.end_time - self.start_time

    @property
    def skipped(self) -> int:
        return self.file_count - (self.changed + self.new)

    def record_file(self) -> None:
        with self._lock:
            self.file_count += 1

    def record_new(self) -> None:
        with self._lock:
            self.new += 1

    def record_changed(self) -> None:
        with self._lock:
            self.changed += 1

    def record_failure(self) -> None:
        with self._lock:
            self.failed += 1

    def record_upload(self, size: int) -> None:
        with self._lock:
            self.uploaded_bytes += size

    def summary_lines(self) -> list[str]:
        """Render the fixed-format summary block."""
        start = format_timestamp(self.start_time) if self.start_time else "-"
        end = format_timestamp(self.end_time) if self.end_time else "-"
        duration = format_duration(self.duration) if self.duration is not None else "-"

        return [
            SEPARATOR,
            f"Start Time: {start}",
            f"  End Time: {end}",
            f"  Duration: {duration}",
            "",
            f"  Total File Count: {self.file_count}",
            f"    Uploaded (New): {self.new}",
            f"Uploaded (Changed): {self.changed}",
            f"           Skipped: {self.skipped}",
            SEPARATOR,
        ]

    def to_dict(self) -> dict:
        """Convert statistics to a dictionary for JSON output."""
        return {
            "start_time": self.start_time.isoformat() if self.start_time else None,
            "end_time": self.end_time.isoformat() if self.end_time else None,
            "duration": (
                self.duration.total_seconds() if self.duration is not None else None
            ),
            "file_count": self.file_count,
            "new": self.new,
            "changed": self.changed,
            "skipped": self.skipped,
            "failed": self.failed,
            "uploaded_bytes": self.uploaded_bytes,
            "cancelled": self.cancelled,
        }
