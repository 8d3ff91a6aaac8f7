"""
Batch ingestion service.

Ingests many files sequentially, records a per-file outcome, takes
periodic WAL checkpoints and honours a cancellation token between files.

Dependencies: doclib.application.library_service, doclib.boundary.db
System role: Bulk ingestion orchestration
"""

import logging
import threading
import time
from collections.abc import Callable, Iterable
from pathlib import Path

from doclib.application.library_service import LibraryService
from doclib.boundary.db.index_store import IndexStore
from doclib.core.exceptions import StorageError
from doclib.models import AddOptions, BatchIngestReport, IngestResult

logger = logging.getLogger(__name__)


def shutdown_checkpoint(store: IndexStore, timeout: float = 5.0) -> bool:
    """
    Best-effort checkpoint that never blocks exit for longer than timeout.

    Runs the checkpoint on a daemon thread; if it has not finished in
    time the thread is abandoned.

    Args:
        store: Index store to checkpoint
        timeout: Seconds to wait

    Returns:
        bool: True if the checkpoint completed in time
    """
    completed = threading.Event()

    def run() -> None:
        try:
            store.checkpoint()
        except StorageError as e:
            logger.warning(f"{__name__}:shutdown_checkpoint - Checkpoint failed: {e}")
            return
        completed.set()

    worker = threading.Thread(target=run, name="shutdown-checkpoint", daemon=True)
    worker.start()
    worker.join(timeout)

    if worker.is_alive():
        logger.warning(f"{__name__}:shutdown_checkpoint - Timed out after {timeout}s")
        return False
    return completed.is_set()


class IngestionService:
    """
    Sequential batch ingestion with checkpoints.

    Usage:
        cancel = threading.Event()
        report = IngestionService(library).ingest_many(paths, cancel=cancel)
        for failure in report.failures:
            print(failure.path, failure.error)
    """

    def __init__(self, library: LibraryService, checkpoint_interval: int = 25) -> None:
        """
        Initialize ingestion service.

        Args:
            library: Library service used to add each file
            checkpoint_interval: Successful documents between checkpoints
        """
        self._library = library
        self._checkpoint_interval = max(1, checkpoint_interval)

    def _checkpoint(self) -> bool:
        try:
            self._library.checkpoint()
        except StorageError as e:
            logger.warning(f"{__name__}:ingest_many - Checkpoint failed, continuing: {e}")
            return False
        return True

    def ingest_many(
        self,
        paths: Iterable[str | Path],
        options: AddOptions | Callable[[Path], AddOptions] | None = None,
        cancel: threading.Event | None = None,
        on_result: Callable[[IngestResult], None] | None = None,
    ) -> BatchIngestReport:
        """
        Ingest files one after another.

        A failing file is recorded and skipped. Cancellation is checked
        before each file; files already committed stay in the library.
        A checkpoint is taken every checkpoint_interval successful files
        and once at the end.

        Args:
            paths: Files to ingest
            options: Shared AddOptions, or a callable building them per path
            cancel: Set to stop before the next file
            on_result: Called with each outcome as it is produced

        Returns:
            BatchIngestReport: Per-file outcomes and checkpoint count
        """
        start = time.perf_counter()
        report = BatchIngestReport()
        since_checkpoint = 0

        for path in paths:
            if cancel is not None and cancel.is_set():
                logger.warning(
                    f"{__name__}:ingest_many - Cancelled after {len(report.results)} files"
                )
                report.cancelled = True
                break

            path = Path(path)
            add_options = options(path) if callable(options) else options
            result = self._library.ingest(path, add_options)
            report.results.append(result)
            if on_result is not None:
                on_result(result)

            if result.ok:
                since_checkpoint += 1
                if since_checkpoint >= self._checkpoint_interval:
                    if self._checkpoint():
                        report.checkpoints += 1
                    since_checkpoint = 0

        if self._checkpoint():
            report.checkpoints += 1

        report.processing_time_ms = (time.perf_counter() - start) * 1000
        logger.info(
            f"{__name__}:ingest_many - {report.succeeded} added, {report.failed} failed, "
            f"{report.checkpoints} checkpoints in {report.processing_time_ms:.0f}ms"
        )
        return report
