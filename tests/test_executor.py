"""
Tests for the bounded worker pool.

Covers argument validation, FIFO start order, growth towards
``max_workers`` once the queue is full, rejection through the returned
future, hand-off to idle workers, retirement of burst workers and
shutdown.
"""

import threading
import time

import pytest

from item_api.app.core.executor import BoundedExecutor, ExecutorRejectedError


def wait_until(predicate, timeout=2.0):
    deadline = time.monotonic() + timeout
    while time.monotonic() < deadline:
        if predicate():
            return True
        time.sleep(0.01)
    return predicate()


@pytest.fixture
def gate():
    event = threading.Event()
    yield event
    event.set()


@pytest.mark.parametrize(
    "kwargs",
    [
        {"min_workers": 0, "max_workers": 1, "queue_capacity": 1},
        {"min_workers": 1, "max_workers": 0, "queue_capacity": 1},
        {"min_workers": 3, "max_workers": 2, "queue_capacity": 1},
        {"min_workers": 1, "max_workers": 1, "queue_capacity": -1},
    ],
)
def test_rejects_invalid_configuration(kwargs):
    with pytest.raises(ValueError):
        BoundedExecutor(**kwargs)


def test_submit_returns_result_and_names_threads():
    with BoundedExecutor(1, 1, 5, name_prefix="AsyncThread-") as pool:
        future = pool.submit(lambda a, b: (a + b, threading.current_thread().name), 2, b=3)
        total, thread_name = future.result(timeout=2)
    assert total == 5
    assert thread_name == "AsyncThread-1"


def test_exception_is_set_on_future():
    with BoundedExecutor(1, 1, 5) as pool:
        future = pool.submit(lambda: 1 / 0)
        with pytest.raises(ZeroDivisionError):
            future.result(timeout=2)


def test_system_exit_is_set_on_future_and_worker_survives():
    def stop():
        raise SystemExit(3)

    with BoundedExecutor(1, 1, 0) as pool:
        future = pool.submit(stop)
        assert isinstance(future.exception(timeout=2), SystemExit)
        assert wait_until(lambda: pool.active_count == 0)
        assert pool.pool_size == 1
        assert pool.submit(lambda: "next").result(timeout=2) == "next"


def test_thread_start_failure_is_rejection(monkeypatch):
    def cannot_start(self):
        raise RuntimeError("can't start new thread")

    pool = BoundedExecutor(1, 1, 1)
    monkeypatch.setattr(threading.Thread, "start", cannot_start)
    future = pool.submit(lambda: "never")
    monkeypatch.undo()

    assert isinstance(future.exception(timeout=0), ExecutorRejectedError)
    assert "cannot start worker" in str(future.exception(timeout=0))
    assert pool.pool_size == 0
    # The pool still starts workers once threads are available again.
    assert pool.submit(lambda: "later").result(timeout=2) == "later"
    pool.shutdown(wait=True)


def test_queued_work_starts_in_submission_order(gate):
    started = []
    with BoundedExecutor(1, 1, 10) as pool:
        pool.submit(gate.wait)
        futures = [pool.submit(started.append, index) for index in range(5)]
        assert pool.queue_size == 5
        gate.set()
        for future in futures:
            future.result(timeout=2)
    assert started == [0, 1, 2, 3, 4]


def test_full_queue_rejects_through_future(gate):
    pool = BoundedExecutor(1, 1, 1)
    try:
        running = pool.submit(gate.wait)
        queued = pool.submit(lambda: "queued")
        rejected = pool.submit(lambda: "rejected")

        assert rejected.done()
        assert isinstance(rejected.exception(), ExecutorRejectedError)

        gate.set()
        assert running.result(timeout=2) is True
        assert queued.result(timeout=2) == "queued"
    finally:
        pool.shutdown()


def test_grows_to_max_workers_before_rejecting(gate):
    pool = BoundedExecutor(1, 2, 0)
    try:
        first = pool.submit(gate.wait)
        assert pool.pool_size == 1
        second = pool.submit(gate.wait)
        assert pool.pool_size == 2
        third = pool.submit(lambda: None)
        assert isinstance(third.exception(timeout=1), ExecutorRejectedError)

        gate.set()
        assert first.result(timeout=2) and second.result(timeout=2)
    finally:
        pool.shutdown()


def test_idle_worker_accepts_work_without_queue_space():
    with BoundedExecutor(1, 1, 0) as pool:
        assert pool.submit(lambda: 1).result(timeout=2) == 1
        assert wait_until(lambda: pool.active_count == 0)
        assert pool.submit(lambda: 2).result(timeout=2) == 2


def test_idle_burst_workers_retire(gate):
    with BoundedExecutor(1, 3, 0, keep_alive=0.05) as pool:
        futures = [pool.submit(gate.wait) for _ in range(3)]
        assert pool.pool_size == 3
        gate.set()
        for future in futures:
            future.result(timeout=2)
        assert wait_until(lambda: pool.pool_size == 1)


def test_shutdown_drains_queue_and_rejects_new_work(gate):
    pool = BoundedExecutor(1, 1, 5)
    pool.submit(gate.wait)
    queued = pool.submit(lambda: "done")
    gate.set()
    pool.shutdown(wait=True)

    assert queued.result(timeout=0) == "done"
    assert pool.pool_size == 0
    late = pool.submit(lambda: "late")
    assert isinstance(late.exception(timeout=0), ExecutorRejectedError)
