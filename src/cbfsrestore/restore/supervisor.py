"""
Supervisor driving one restore run.

States: INIT -> SCANNING -> DRAINING -> DONE. A fatal error at any point
before DONE leaves the supervisor in FAILED and propagates to the caller;
no summary is produced for a failed run.
"""

import logging
import time
from enum import Enum
from pathlib import Path
from typing import BinaryIO, Optional, Union

from cbfsrestore.archive.reader import ArchiveReader, open_archive
from cbfsrestore.core.config import RestoreConfig
from cbfsrestore.core.errors import FatalRestoreError
from cbfsrestore.restore.path_filter import PathFilter
from cbfsrestore.restore.transport import RestoreTransport
from cbfsrestore.restore.worker_pool import WorkerPool
from cbfsrestore.schemas.records import RunSummary

logger = logging.getLogger(__name__)


class SupervisorState(str, Enum):
    INIT = "init"
    SCANNING = "scanning"
    DRAINING = "draining"
    DONE = "done"
    FAILED = "failed"


class Supervisor:
    """Reads an archive, filters it and feeds matching records to a WorkerPool."""

    def __init__(self, config: RestoreConfig, transport: Optional[RestoreTransport] = None,
                 path_filter: Optional[PathFilter] = None):
        """
        Args:
            config: Run parameters
            transport: Transport to use instead of one built from ``config``
            path_filter: Filter to use instead of one built from ``config.match``
        """
        self.config = config
        self.state = SupervisorState.INIT
        self._transport = transport
        self._path_filter = path_filter

    def run_path(self, archive_path: Union[str, Path]) -> RunSummary:
        """Restore from the archive file at ``archive_path``."""
        self._validate()
        try:
            reader = open_archive(archive_path)
        except FatalRestoreError:
            self.state = SupervisorState.FAILED
            raise
        with reader:
            return self._run(reader)

    def run(self, source: BinaryIO) -> RunSummary:
        """Restore from a binary stream positioned at the start of an archive."""
        self._validate()
        try:
            reader = ArchiveReader(source)
        except FatalRestoreError:
            self.state = SupervisorState.FAILED
            raise
        with reader:
            return self._run(reader)

    def _validate(self):
        if self.state is not SupervisorState.INIT:
            raise RuntimeError(f"Supervisor already used (state={self.state.value})")
        try:
            if self._path_filter is None:
                self._path_filter = PathFilter(self.config.match)
            if self._transport is None:
                self._transport = RestoreTransport(
                    self.config.base_url,
                    dry_run=self.config.dry_run,
                    timeout=self.config.request_timeout,
                )
        except FatalRestoreError:
            self.state = SupervisorState.FAILED
            raise

    def _run(self, reader: ArchiveReader) -> RunSummary:
        start = time.monotonic()
        pool = WorkerPool(self._transport, workers=self.config.workers,
                          queue_size=self.config.queue_size)
        matched = 0

        self.state = SupervisorState.SCANNING
        pool.start()
        try:
            for record in reader:
                if self._path_filter.matches(record.path):
                    matched += 1
                    pool.put(record)
        except BaseException:
            self.state = SupervisorState.FAILED
            pool.abort()
            raise

        self.state = SupervisorState.DRAINING
        pool.drain()

        summary = RunSummary(
            records_read=reader.records_read,
            matched=matched,
            dispatched=matched,
            elapsed=time.monotonic() - start,
            dry_run=self.config.dry_run,
        )
        self.state = SupervisorState.DONE
        logger.info(summary.describe())
        return summary


def run_restore(config: RestoreConfig, archive_path: Union[str, Path]) -> RunSummary:
    """Run a complete restore of ``archive_path`` with ``config``."""
    return Supervisor(config).run_path(archive_path)
