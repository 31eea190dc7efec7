"""Fixed-size background worker pool.

Tasks are fire-and-forget: there is no ordering between them and no way to
cancel one once submitted. The console workflows themselves run
synchronously and never depend on the pool.
"""

import logging
import threading
from concurrent.futures import Future, ThreadPoolExecutor
from typing import Callable, Optional, TypeVar

logger = logging.getLogger(__name__)

T = TypeVar("T")


class WorkerPool:
    def __init__(self, size: int = 5):
        self._executor = ThreadPoolExecutor(max_workers=size, thread_name_prefix="storedb-worker")
        self._lock = threading.Lock()
        self._shutdown = False

    @property
    def is_shutdown(self) -> bool:
        return self._shutdown

    def execute_async(
        self,
        task: Callable[[], T],
        on_success: Optional[Callable[[T], None]] = None,
        on_error: Optional[Callable[[Exception], None]] = None,
    ) -> None:
        """Run ``task`` in the background and report through the callbacks."""

        def _run():
            try:
                result = task()
            except Exception as e:
                logger.error("Error in background task: %s", e)
                if on_error is not None:
                    on_error(e)
                return
            if on_success is not None:
                on_success(result)

        try:
            self.submit(_run)
        except RuntimeError as e:
            if on_error is not None:
                on_error(e)

    def submit(self, task: Callable[[], T]) -> "Future[T]":
        # Checked under the lock so shutdown cannot slip in before the submit
        with self._lock:
            if self._shutdown:
                raise RuntimeError("WorkerPool has been shut down")
            return self._executor.submit(task)

    def shutdown(self, wait: bool = True) -> None:
        with self._lock:
            if self._shutdown:
                return
            self._shutdown = True
        self._executor.shutdown(wait=wait)
        logger.info("WorkerPool has been shut down")
