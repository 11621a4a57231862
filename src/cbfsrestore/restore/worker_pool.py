"""
Fixed pool of restore worker threads fed through a bounded handoff queue.
"""

import logging
import queue
import threading
from typing import List

from cbfsrestore.core.constants import DEFAULT_QUEUE_SIZE, DEFAULT_WORKERS
from cbfsrestore.restore.transport import RestoreTransport
from cbfsrestore.schemas.records import ArchiveRecord

logger = logging.getLogger(__name__)

# End-of-stream marker; compared with "is"
SENTINEL = object()


class WorkerPool:
    """
    N threads each pulling one ArchiveRecord at a time and submitting it.

    A failed restore is logged and the worker moves on; nothing a single
    record does can stop a worker or the pool.
    """

    def __init__(self, transport: RestoreTransport, workers: int = DEFAULT_WORKERS,
                 queue_size: int = DEFAULT_QUEUE_SIZE, poll_interval: float = 0.1):
        if int(workers) < 1:
            raise ValueError(f"workers must be positive, got {workers}")
        if int(queue_size) < 1:
            raise ValueError(f"queue_size must be positive, got {queue_size}")

        self.transport = transport
        self.n_workers = int(workers)
        self.poll_interval = poll_interval
        self._queue = queue.Queue(maxsize=int(queue_size))
        self._stop_event = threading.Event()
        self._closed = False
        self.threads: List[threading.Thread] = []

    def start(self):
        for i in range(self.n_workers):
            t = threading.Thread(target=self._worker, name=f"restore-worker-{i}", daemon=True)
            t.start()
            self.threads.append(t)
        logger.debug(f"Started {self.n_workers} restore worker(s)")

    def put(self, record: ArchiveRecord):
        """Hand a record to the pool, blocking while every slot is taken."""
        if self._closed:
            raise RuntimeError("Cannot put records into a closed worker pool")
        self._queue.put(record)

    def close(self):
        """Signal that no more records will arrive."""
        if self._closed:
            return
        self._closed = True
        for _ in self.threads:
            self._queue.put(SENTINEL)

    def join(self):
        for t in self.threads:
            t.join()

    def drain(self):
        """Close the queue and block until every worker has exited."""
        self.close()
        self.join()
        logger.debug("All restore workers finished")

    def abort(self):
        """
        Stop the pool after a fatal error without waiting for it.

        Queued records are discarded; submissions already in flight run to
        completion on their own.
        """
        self._closed = True
        self._stop_event.set()
        while True:
            try:
                self._queue.get_nowait()
            except queue.Empty:
                break
            self._queue.task_done()

    def _worker(self):
        while True:
            try:
                item = self._queue.get(timeout=self.poll_interval)
            except queue.Empty:
                if self._stop_event.is_set():
                    break
                continue

            try:
                if item is SENTINEL:
                    break
                if self._stop_event.is_set():
                    continue
                self._restore(item)
            finally:
                self._queue.task_done()

    def _restore(self, record: ArchiveRecord):
        try:
            outcome = self.transport.submit(record.path, record.meta)
        except Exception:
            logger.exception(f"Error restoring {record.path}: unexpected transport failure")
            return
        if outcome.ok:
            logger.info(f"Restored {record.path}")
        else:
            logger.error(f"Error restoring {record.path}: {outcome.reason}")
