"""
Bounded thread pool used by the asynchronous item endpoints.

``concurrent.futures.ThreadPoolExecutor`` queues an unlimited amount of
work, which lets a burst of slow store calls exhaust memory.  The
``BoundedExecutor`` defined here keeps a steady pool of
``min_workers`` threads, buffers at most ``queue_capacity`` pending
work items and starts extra "burst" threads up to ``max_workers`` only
once the queue is full.  Work submitted beyond that is rejected: the
returned future completes with :class:`ExecutorRejectedError` instead
of raising at the call site, so callers handle rejection the same way
as any other failure of the work.

Queued work is started in submission order.  Running work is never
interrupted; ``shutdown`` lets the workers drain the queue.
"""

from __future__ import annotations

import itertools
import logging
import threading
from collections import deque
from concurrent.futures import Future
from typing import Any, Callable, Deque, Optional, Set


logger = logging.getLogger(__name__)


class ExecutorRejectedError(RuntimeError):
    """Raised (through the returned future) when the pool cannot accept work."""


class _WorkItem:
    """A deferred call bound to the future that will carry its result."""

    __slots__ = ("future", "fn", "args", "kwargs")

    def __init__(self, future: Future, fn: Callable[..., Any], args: tuple, kwargs: dict) -> None:
        self.future = future
        self.fn = fn
        self.args = args
        self.kwargs = kwargs

    def run(self) -> None:
        if not self.future.set_running_or_notify_cancel():
            return
        try:
            result = self.fn(*self.args, **self.kwargs)
        except BaseException as exc:
            self.future.set_exception(exc)
        else:
            self.future.set_result(result)


class BoundedExecutor:
    """Fixed-size worker pool with a bounded queue of pending work.

    Parameters
    ----------
    min_workers : int
        Number of threads kept alive once started.
    max_workers : int
        Upper bound on threads, reached only while the queue is full.
    queue_capacity : int
        Maximum number of work items waiting for a worker.  ``0``
        means work is only accepted when a worker can take it.
    name_prefix : str
        Prefix of worker thread names.
    keep_alive : float
        Seconds an idle burst worker waits for work before exiting.
    """

    def __init__(
        self,
        min_workers: int,
        max_workers: int,
        queue_capacity: int,
        name_prefix: str = "AsyncThread-",
        keep_alive: float = 60.0,
    ) -> None:
        if min_workers <= 0 or max_workers <= 0:
            raise ValueError("min_workers and max_workers must be positive")
        if min_workers > max_workers:
            raise ValueError("min_workers must not exceed max_workers")
        if queue_capacity < 0:
            raise ValueError("queue_capacity must not be negative")
        if keep_alive < 0:
            raise ValueError("keep_alive must not be negative")
        self.min_workers = min_workers
        self.max_workers = max_workers
        self.queue_capacity = queue_capacity
        self.name_prefix = name_prefix
        self.keep_alive = keep_alive

        self._queue: Deque[_WorkItem] = deque()
        self._lock = threading.Lock()
        self._work_available = threading.Condition(self._lock)
        self._workers: Set[threading.Thread] = set()
        # Workers blocked waiting for work.  Each one can take a queued
        # item immediately, so it counts as an extra queue slot.
        self._idle = 0
        self._shutdown = False
        self._thread_counter = itertools.count(1)

    @property
    def pool_size(self) -> int:
        """Number of live worker threads."""
        with self._lock:
            return len(self._workers)

    @property
    def queue_size(self) -> int:
        """Number of work items waiting for a worker."""
        with self._lock:
            return len(self._queue)

    @property
    def active_count(self) -> int:
        """Number of workers currently running work."""
        with self._lock:
            return len(self._workers) - self._idle

    def submit(self, fn: Callable[..., Any], *args: Any, **kwargs: Any) -> Future:
        """Schedule ``fn(*args, **kwargs)`` and return a future for its result.

        Never raises for a full pool; the future carries an
        :class:`ExecutorRejectedError` instead.
        """
        future: Future = Future()
        work = _WorkItem(future, fn, args, kwargs)
        with self._lock:
            if self._shutdown:
                reason = "executor is shut down"
            elif len(self._workers) < self.min_workers:
                reason = self._start_worker(work)
                if reason is None:
                    return future
            elif len(self._queue) < self.queue_capacity + self._idle:
                self._queue.append(work)
                self._work_available.notify()
                return future
            elif len(self._workers) < self.max_workers:
                reason = self._start_worker(work)
                if reason is None:
                    return future
            else:
                reason = (
                    f"pool saturated ({len(self._workers)} workers, "
                    f"{len(self._queue)} queued)"
                )
        logger.warning("Rejected work %r: %s", getattr(fn, "__name__", fn), reason)
        future.set_exception(ExecutorRejectedError(reason))
        return future

    def shutdown(self, wait: bool = True) -> None:
        """Stop accepting work.

        Queued work is still executed.  If ``wait`` is true, block until
        every worker has exited.
        """
        with self._lock:
            self._shutdown = True
            self._work_available.notify_all()
            workers = list(self._workers)
        if wait:
            for thread in workers:
                thread.join()

    def __enter__(self) -> "BoundedExecutor":
        return self

    def __exit__(self, exc_type, exc_val, exc_tb) -> None:
        self.shutdown(wait=True)

    def _start_worker(self, first: _WorkItem) -> Optional[str]:
        """Start a worker running ``first``; return a rejection reason on failure."""
        # Caller holds the lock, so the new worker cannot look for more
        # work before it is registered.
        name = f"{self.name_prefix}{next(self._thread_counter)}"
        thread = threading.Thread(target=self._worker, args=(first,), name=name, daemon=True)
        try:
            thread.start()
        except RuntimeError as exc:
            return f"cannot start worker {name}: {exc}"
        self._workers.add(thread)
        logger.debug("Started worker %s (%d live)", name, len(self._workers))
        return None

    def _worker(self, first: _WorkItem) -> None:
        work: Optional[_WorkItem] = first
        try:
            while work is not None:
                work.run()
                del work
                work = self._next_work()
        finally:
            with self._lock:
                self._workers.discard(threading.current_thread())

    def _next_work(self) -> Optional[_WorkItem]:
        current = threading.current_thread()
        with self._lock:
            while not self._queue:
                if self._shutdown:
                    self._workers.discard(current)
                    return None
                burst = len(self._workers) > self.min_workers
                self._idle += 1
                try:
                    notified = self._work_available.wait(self.keep_alive if burst else None)
                finally:
                    self._idle -= 1
                if not notified and not self._queue and len(self._workers) > self.min_workers:
                    self._workers.discard(current)
                    logger.debug("Retired idle worker %s", current.name)
                    return None
            return self._queue.popleft()
