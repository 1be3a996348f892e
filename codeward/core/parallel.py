#!/usr/bin/env python3
"""
Codeward Workspace Scanner
Runs a per-file scanner over a collection of file records and aggregates
the results into one immutable ScanResult.

Features:
- Sequential or multi-process execution (auto-detect CPU cores)
- Input order preserved in both modes (Pool.imap)
- Sequential fallback where multiprocessing is unavailable
- Cooperative cancellation between files
- Progress tracking with tqdm
"""

import logging
import threading
import time
from datetime import datetime
from multiprocessing import Pool, cpu_count
from typing import Iterable, Iterator, List, Optional, Sequence

from tqdm import tqdm

from codeward.exceptions import ScanCancelledError
from codeward.models import FileRecord, ScanResult, SecurityIssue
from codeward.scanners.base import BaseScanner, FileScanResult

logger = logging.getLogger(__name__)

# Scanner instance installed in each worker process by the pool initializer
_worker_scanner: Optional[BaseScanner] = None


def _init_worker(scanner: BaseScanner):
    global _worker_scanner
    _worker_scanner = scanner


def _scan_in_worker(record: FileRecord) -> FileScanResult:
    return _worker_scanner.scan_file(record)


class WorkspaceScanner:
    """Scan a set of files and build one ScanResult"""

    def __init__(self,
                 scanner: BaseScanner,
                 workers: Optional[int] = 1,
                 show_progress: bool = False):
        self.scanner = scanner
        self.workers = workers or cpu_count()
        self.show_progress = show_progress

    def scan(self,
             files: Sequence[FileRecord],
             cancel_event: Optional[threading.Event] = None) -> ScanResult:
        """
        Scan every file record.

        Args:
            files: Records from the file collector
            cancel_event: Checked before each file is scheduled; once set the
                scan stops and no result is returned

        Returns:
            ScanResult with issues in file order, then rule order, then match order

        Raises:
            ScanCancelledError: if cancel_event was set during the scan
        """
        start = time.perf_counter()
        files = list(files)
        logger.info("Scanning %d files with %d worker(s)", len(files), self.workers)

        issues: List[SecurityIssue] = []
        files_scanned = 0
        skipped_files: List[str] = []
        skipped_matches = []

        for result in self._run(files, cancel_event):
            if not result.success:
                skipped_files.append(result.relative_path)
                continue
            files_scanned += 1
            issues.extend(result.issues)
            for rule_id in result.timed_out_rules:
                skipped_matches.append((result.relative_path, rule_id))

        duration_ms = (time.perf_counter() - start) * 1000
        scan_result = ScanResult.build(
            issues=issues,
            files_scanned=files_scanned,
            scan_duration=duration_ms,
            timestamp=datetime.now(),
            skipped_files=skipped_files,
            skipped_matches=skipped_matches,
        )

        logger.info(
            "Scan finished: %d files, %d issues, %d skipped in %.0fms",
            scan_result.files_scanned, scan_result.total_issues,
            len(skipped_files), duration_ms,
        )
        return scan_result

    def _run(self, files: List[FileRecord],
             cancel_event: Optional[threading.Event]) -> Iterator[FileScanResult]:
        if self.workers <= 1 or len(files) < 2:
            yield from self._scan_sequential(files, cancel_event)
            return

        try:
            pool = Pool(processes=min(self.workers, len(files)),
                        initializer=_init_worker,
                        initargs=(self.scanner,))
        except (PermissionError, OSError) as e:
            # Sandboxed environments (containers, CI runners) may refuse to fork
            logger.warning("Multiprocessing unavailable (%s), falling back to sequential scan", e)
            yield from self._scan_sequential(files, cancel_event)
            return

        with pool:
            # imap drains the schedule on its own thread, so cancellation is
            # also checked as each result comes back
            results = pool.imap(_scan_in_worker, self._schedule(files, cancel_event))
            for result in self._progress(results, len(files)):
                if cancel_event is not None and cancel_event.is_set():
                    logger.info("Cancellation requested, terminating worker pool")
                    pool.terminate()
                    break
                yield result
        self._check_cancelled(cancel_event)

    def _scan_sequential(self, files: List[FileRecord],
                         cancel_event: Optional[threading.Event]) -> Iterator[FileScanResult]:
        for record in self._progress(self._schedule(files, cancel_event), len(files)):
            yield self.scanner.scan_file(record)
        self._check_cancelled(cancel_event)

    def _schedule(self, files: Iterable[FileRecord],
                  cancel_event: Optional[threading.Event]) -> Iterator[FileRecord]:
        """Yield records until cancellation is requested"""
        for record in files:
            if cancel_event is not None and cancel_event.is_set():
                logger.info("Cancellation requested, no further files scheduled")
                return
            yield record

    @staticmethod
    def _check_cancelled(cancel_event: Optional[threading.Event]):
        if cancel_event is not None and cancel_event.is_set():
            raise ScanCancelledError("Scan cancelled")

    def _progress(self, iterable: Iterable, total: int) -> Iterable:
        return tqdm(iterable, total=total, desc="Scanning files", unit="file",
                    disable=not self.show_progress)
