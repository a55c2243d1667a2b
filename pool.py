"""
Fixed-size pool of worker threads fed from a FIFO queue.

Bounds the number of threads serving connections no matter how many clients
arrive; pending jobs wait on the queue until a worker is free.
"""

from __future__ import annotations

import logging
import queue
import threading
from typing import Any, Callable, List

log = logging.getLogger(__name__)

THREAD_POOL_SIZE = 20

_STOP = object()  # sentinel, one per worker on shutdown


class WorkerPool:
    """Runs *handler(job)* for every submitted job on one of *size* threads."""

    def __init__(self, handler: Callable[[Any], None], size: int = THREAD_POOL_SIZE):
        if size < 1:
            raise ValueError(f"pool size must be at least 1, got {size}")
        self._handler = handler
        self.size = size
        self._jobs: queue.Queue[Any] = queue.Queue()
        self._threads: List[threading.Thread] = []

    # ------------------------------------------------------------------  lifecycle
    def start(self):
        if self._threads:
            return
        for i in range(self.size):
            t = threading.Thread(target=self._work, name=f"worker-{i}", daemon=True)
            t.start()
            self._threads.append(t)
        log.debug("Started %d workers", self.size)

    def stop(self, timeout: float | None = None):
        for _ in self._threads:
            self._jobs.put(_STOP)
        for t in self._threads:
            t.join(timeout)
        self._threads.clear()

    # ------------------------------------------------------------------  jobs
    def submit(self, job: Any):
        self._jobs.put(job)

    def pending(self) -> int:
        return self._jobs.qsize()

    def _work(self):
        while True:
            job = self._jobs.get()  # blocks, no spinning
            if job is _STOP:
                break
            try:
                self._handler(job)
            except Exception:
                log.exception("Handler failed on %r", job)
