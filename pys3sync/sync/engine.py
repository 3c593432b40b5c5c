"""Core sync engine for executing incremental uploads."""

import logging
import threading
import time
from collections.abc import Iterable, Iterator
from concurrent.futures import FIRST_COMPLETED, Future, ThreadPoolExecutor, wait
from typing import Callable, Optional

from rich.progress import Progress, SpinnerColumn, TextColumn, TimeElapsedColumn

from ..api import S3Client
from ..exceptions import ConfigError, FileReadError, S3SyncError, S3UploadError
from ..output import OutputFormatter
from .comparator import ChangeStatus, FileComparator, SyncDecision
from .operations import SyncOperations
from .pair import SyncPair
from .scanner import DirectoryScanner, LocalFile, iter_path_list
from .stats import RunStatistics

logger = logging.getLogger(__name__)


class SyncEngine:
    """Core sync engine that mirrors a local folder into an S3 bucket."""

    def __init__(
        self,
        client: S3Client,
        output: Optional[OutputFormatter] = None,
    ):
        """Initialize sync engine.

        Args:
            client: S3 client for the destination bucket
            output: Output formatter for displaying progress/status
        """
        self.client = client
        self.output = output or OutputFormatter()
        self.operations = SyncOperations(client)
        self.comparator = FileComparator()
        self.scanner = DirectoryScanner()

    def sync_pair(
        self,
        pair: SyncPair,
        paths: Optional[Iterable[str]] = None,
        dry_run: bool = False,
        max_workers: int = 1,
        timeout: Optional[float] = None,
        cancel_event: Optional[threading.Event] = None,
        show_progress: bool = False,
    ) -> RunStatistics:
        """Sync a single sync pair.

        Args:
            pair: Sync pair to synchronize
            paths: Explicit list of file paths to check. If None, the pair's
                local folder is walked recursively.
            dry_run: If True, classify files without uploading anything
            max_workers: Number of files processed in parallel (default: 1)
            timeout: Stop starting new files after this many seconds
            cancel_event: Stop starting new files once this event is set
            show_progress: Show a spinner with the number of checked files

        Returns:
            RunStatistics of the run. Files still in flight when the run is
            cancelled are completed before returning.

        Raises:
            ConfigError: If the local folder does not exist
            EnumerationError: If walking the local folder fails

        Examples:
            >>> engine = SyncEngine(client)
            >>> pair = SyncPair(Path("/mnt/data"), "backup", "/intern")
            >>> stats = engine.sync_pair(pair)
            >>> print(f"Uploaded {stats.new} new files")
        """
        if not pair.local.exists():
            raise ConfigError(f"The folder {str(pair.local)!r} doesn't exist")
        if max_workers < 1:
            raise ValueError("max_workers must be at least 1")

        if paths is not None:
            candidates: Iterator[LocalFile] = iter_path_list(paths, pair)
        else:
            logger.info("Starting to walk %r", str(pair.local))
            candidates = self.scanner.iter_files(pair)

        if pair.force:
            logger.info("Will force upload every file due to force mode")
        if dry_run:
            self.output.info("Dry run: No files will be uploaded")

        stats = RunStatistics()
        stats.start()
        deadline = time.monotonic() + timeout if timeout is not None else None
        cancel_event = cancel_event or threading.Event()

        progress: Optional[Progress] = None
        if show_progress and not self.output.quiet:
            progress = Progress(
                SpinnerColumn(),
                TextColumn("[progress.description]{task.description}"),
                TimeElapsedColumn(),
                transient=True,
            )

        try:
            if progress is not None:
                with progress:
                    task = progress.add_task("Checking files...", total=None)

                    def advance() -> None:
                        progress.update(
                            task,
                            advance=1,
                            description=f"Checked {stats.file_count} file(s)",
                        )

                    self._run(
                        pair,
                        candidates,
                        stats,
                        dry_run,
                        max_workers,
                        deadline,
                        cancel_event,
                        advance,
                    )
            else:
                self._run(
                    pair,
                    candidates,
                    stats,
                    dry_run,
                    max_workers,
                    deadline,
                    cancel_event,
                    None,
                )
        except KeyboardInterrupt:
            logger.warning("Interrupted, stopping after files in progress")
            cancel_event.set()
            stats.cancelled = True
        finally:
            stats.finish()

        if stats.cancelled:
            self.output.warning("Sync was stopped before all files were checked")
        logger.info("Finished")
        logger.debug(
            "Failed: %d, uploaded %d bytes", stats.failed, stats.uploaded_bytes
        )
        return stats

    def _should_stop(
        self,
        stats: RunStatistics,
        deadline: Optional[float],
        cancel_event: threading.Event,
    ) -> bool:
        """Check whether new files may still be started."""
        if cancel_event.is_set():
            stats.cancelled = True
            return True
        if deadline is not None and time.monotonic() >= deadline:
            logger.warning("Run timed out, not starting any more files")
            cancel_event.set()
            stats.cancelled = True
            return True
        return False

    def _run(
        self,
        pair: SyncPair,
        candidates: Iterator[LocalFile],
        stats: RunStatistics,
        dry_run: bool,
        max_workers: int,
        deadline: Optional[float],
        cancel_event: threading.Event,
        on_done: Optional[Callable[[], None]],
    ) -> None:
        """Process all candidates sequentially or with a worker pool."""
        if max_workers == 1:
            for local_file in candidates:
                if self._should_stop(stats, deadline, cancel_event):
                    break
                self._check_file_isolated(pair, local_file, stats, dry_run)
                if on_done is not None:
                    on_done()
            return

        logger.debug("Processing files with %d workers", max_workers)
        with ThreadPoolExecutor(max_workers=max_workers) as executor:
            pending: set[Future] = set()
            try:
                for local_file in candidates:
                    if self._should_stop(stats, deadline, cancel_event):
                        break
                    # Keep enumeration lazy: only queue a bounded window of files
                    if len(pending) >= max_workers * 2:
                        done, pending = wait(pending, return_when=FIRST_COMPLETED)
                        self._collect(done, on_done)
                    pending.add(
                        executor.submit(
                            self._check_file_isolated, pair, local_file, stats, dry_run
                        )
                    )
            finally:
                if pending:
                    done, _ = wait(pending)
                    self._collect(done, on_done)

    def _collect(
        self, futures: Iterable[Future], on_done: Optional[Callable[[], None]]
    ) -> None:
        for future in futures:
            # _check_file_isolated never raises; result() surfaces bugs only
            future.result()
            if on_done is not None:
                on_done()

    def _check_file_isolated(
        self,
        pair: SyncPair,
        local_file: LocalFile,
        stats: RunStatistics,
        dry_run: bool,
    ) -> Optional[SyncDecision]:
        """Run check_file, logging instead of raising on unexpected errors."""
        try:
            return self.check_file(pair, local_file, stats, dry_run)
        except Exception:
            logger.exception("Unexpected error while processing %s", local_file.path)
            stats.record_failure()
            return None

    def check_file(
        self,
        pair: SyncPair,
        local_file: LocalFile,
        stats: Optional[RunStatistics] = None,
        dry_run: bool = False,
    ) -> Optional[SyncDecision]:
        """Check a single file and upload it if it is new or changed.

        Args:
            pair: Sync pair configuration
            local_file: File to check
            stats: Statistics to update (a throwaway instance if omitted)
            dry_run: If True, do not upload

        Returns:
            The SyncDecision, or None if the file could not be checked
        """
        if stats is None:
            stats = RunStatistics()
        stats.record_file()

        try:
            decision = self._decide(pair, local_file)
        except FileReadError as e:
            logger.error("Failed to calculate ETag of %s: %s", local_file.path, e)
            stats.record_failure()
            return None
        except S3SyncError as e:
            logger.error("Failed to check %s: %s", local_file.path, e)
            stats.record_failure()
            return None

        if decision.status == ChangeStatus.NEW:
            logger.debug("%s: %s -> Uploading", local_file.path, decision.reason)
            stats.record_new()
        elif decision.status == ChangeStatus.CHANGED:
            logger.debug(
                "%s: %s -> Uploading (remote %s, local %s)",
                local_file.path,
                decision.reason,
                decision.remote_etag,
                decision.local_etag,
            )
            stats.record_changed()
        elif decision.status == ChangeStatus.UNCHANGED:
            logger.debug("%s: %s -> Skipping", local_file.path, decision.reason)

        if decision.requires_upload and not dry_run:
            self._upload(local_file, stats)

        return decision

    def _decide(self, pair: SyncPair, local_file: LocalFile) -> SyncDecision:
        """Classify a file, bypassing the comparison in force mode."""
        if pair.force:
            return self.comparator.forced(local_file)

        logger.info("%s", local_file.path)
        probe = self.operations.probe(local_file)
        return self.comparator.compare(
            local_file,
            probe,
            lambda f: self.operations.local_etag(f, pair.chunk_size),
        )

    def _upload(self, local_file: LocalFile, stats: RunStatistics) -> None:
        start = time.time()
        try:
            self.operations.upload_file(local_file)
        except (FileReadError, S3UploadError) as e:
            logger.error("%s", e)
            stats.record_failure()
            return

        stats.record_upload(local_file.size)
        logger.debug(
            "Upload of %s took %.2fs", local_file.path, time.time() - start
        )
