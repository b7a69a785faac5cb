"""Bounded worker pool for CPU-bound effect processing.

Admission is limited to ``workers + queue_depth`` in-flight requests by a
bounded semaphore; beyond that, :meth:`WorkerPool.submit` raises
:class:`~rasterfx.exceptions.Busy` immediately instead of queueing. Each
request waits at most ``timeout`` seconds for its result.

Usage:
    pool = WorkerPool(workers=4, queue_depth=8, timeout=30.0)
    outcome = pool.run(selector.process, data, request)
    outcome = await pool.run_async(selector.process, data, request)
"""

from __future__ import annotations

import asyncio
import logging
import threading
from concurrent.futures import Future, ThreadPoolExecutor
from concurrent.futures import TimeoutError as FutureTimeoutError
from typing import Any, Callable, Optional

from .config import settings
from .exceptions import Busy, ProcessingFailure

logger = logging.getLogger(__name__)


class WorkerPool:
    """ThreadPoolExecutor with bounded admission and per-request timeout.

    :param workers: Number of worker threads
    :param queue_depth: Requests allowed to wait beyond the busy workers
    :param timeout: Seconds to wait for a result
    """

    def __init__(
        self,
        workers: Optional[int] = None,
        queue_depth: Optional[int] = None,
        timeout: Optional[float] = None,
    ):
        self.workers = workers if workers is not None else settings.WORKERS
        self.queue_depth = queue_depth if queue_depth is not None else settings.QUEUE_DEPTH
        self.timeout = timeout if timeout is not None else settings.PROCESSING_TIMEOUT
        if self.workers < 1:
            raise ValueError(f"workers must be >= 1, got {self.workers}")
        if self.queue_depth < 0:
            raise ValueError(f"queue_depth must be >= 0, got {self.queue_depth}")
        self.capacity = self.workers + self.queue_depth
        self._slots = threading.BoundedSemaphore(self.capacity)
        self._executor = ThreadPoolExecutor(
            max_workers=self.workers, thread_name_prefix="rasterfx"
        )
        self._lock = threading.Lock()
        self._in_flight = 0

    @property
    def in_flight(self) -> int:
        with self._lock:
            return self._in_flight

    def _release(self, _future: Future) -> None:
        with self._lock:
            self._in_flight -= 1
        self._slots.release()

    def submit(self, fn: Callable[..., Any], *args, **kwargs) -> Future:
        """Admit a job or raise Busy when the pool is full."""
        if not self._slots.acquire(blocking=False):
            logger.warning(f"Worker pool saturated ({self.capacity} requests in flight)")
            raise Busy(f"Server busy: {self.capacity} requests already in flight")
        with self._lock:
            self._in_flight += 1
        try:
            future = self._executor.submit(fn, *args, **kwargs)
        except RuntimeError as e:
            self._release(None)
            raise ProcessingFailure(f"Worker pool unavailable: {e}") from e
        future.add_done_callback(self._release)
        return future

    def run(self, fn: Callable[..., Any], *args, **kwargs) -> Any:
        """Submit and block for the result.

        Raises:
            Busy: If the pool is full
            ProcessingFailure: If the result is not ready within the timeout
        """
        future = self.submit(fn, *args, **kwargs)
        try:
            return future.result(timeout=self.timeout)
        except FutureTimeoutError as e:
            future.cancel()
            logger.error(f"Processing timed out after {self.timeout}s")
            raise ProcessingFailure(f"Processing timed out after {self.timeout}s") from e

    async def run_async(self, fn: Callable[..., Any], *args, **kwargs) -> Any:
        """Awaitable :meth:`run` for the HTTP layer."""
        future = self.submit(fn, *args, **kwargs)
        try:
            return await asyncio.wait_for(asyncio.wrap_future(future), timeout=self.timeout)
        except asyncio.TimeoutError as e:
            future.cancel()
            logger.error(f"Processing timed out after {self.timeout}s")
            raise ProcessingFailure(f"Processing timed out after {self.timeout}s") from e

    def shutdown(self, wait: bool = True) -> None:
        self._executor.shutdown(wait=wait)

    def __enter__(self) -> "WorkerPool":
        return self

    def __exit__(self, *args) -> None:
        self.shutdown()
