"""
Deadlines and fallback values for asynchronous operations.

``with_timeout`` awaits a unit of work for at most ``deadline``
seconds.  If the work finishes in time its result is returned
unchanged.  If the deadline elapses, the executor rejected the work or
the work raised, the failure is logged, recorded in a
:class:`~item_api.app.core.diagnostics.FallbackRecorder` and replaced
by ``fallback(reason)``.  Callers therefore always receive a value of
the declared result type.

The awaited work is shielded: a timed-out store call keeps running in
its worker thread and whatever it eventually produces is discarded.

``combine`` runs two such operations concurrently and joins their
results under a deadline and fallback of its own.
"""

from __future__ import annotations

import asyncio
import concurrent.futures
import logging
from typing import Any, Awaitable, Callable, Optional, TypeVar, Union

from .diagnostics import FallbackRecorder
from .executor import ExecutorRejectedError


logger = logging.getLogger(__name__)

T = TypeVar("T")
A = TypeVar("A")
B = TypeVar("B")

Handle = Union["concurrent.futures.Future[T]", Awaitable[T]]


class OperationTimeoutError(TimeoutError):
    """Reason passed to the fallback when the deadline elapsed."""

    def __init__(self, operation: str, deadline: float) -> None:
        super().__init__(f"{operation} did not complete within {deadline:g}s")
        self.operation = operation
        self.deadline = deadline


def _as_future(handle: Handle) -> asyncio.Future:
    if isinstance(handle, concurrent.futures.Future):
        if handle.done():
            # ``asyncio.wrap_future`` copies the state on the next loop
            # iteration; copy it now so a zero deadline sees finished work.
            future = asyncio.get_running_loop().create_future()
            if handle.cancelled():
                future.cancel()
            elif handle.exception() is not None:
                future.set_exception(handle.exception())
            else:
                future.set_result(handle.result())
            return future
        return asyncio.wrap_future(handle)
    return asyncio.ensure_future(handle)


def _discard_late_result(operation: str) -> Callable[[asyncio.Future], None]:
    def callback(future: asyncio.Future) -> None:
        if future.cancelled():
            return
        exc = future.exception()
        if exc is not None:
            logger.debug("Abandoned %s finished with %r", operation, exc)
        else:
            logger.debug("Abandoned %s finished after its deadline", operation)

    return callback


def _classify(reason: BaseException) -> str:
    if isinstance(reason, OperationTimeoutError):
        return "timeout"
    if isinstance(reason, ExecutorRejectedError):
        return "rejected"
    return "fault"


async def with_timeout(
    handle: Handle,
    deadline: Optional[float],
    fallback: Callable[[BaseException], T],
    *,
    operation: str,
    recorder: Optional[FallbackRecorder] = None,
    **context: Any,
) -> T:
    """Await ``handle`` for at most ``deadline`` seconds.

    Parameters
    ----------
    handle : concurrent.futures.Future or awaitable
        The work to wait for.  Executor futures and coroutines are both
        accepted.
    deadline : Optional[float]
        Seconds to wait.  ``None`` waits indefinitely; ``0`` returns
        the result only if the work has already finished.
    fallback : Callable[[BaseException], T]
        Builds the value returned instead of the result.  It receives
        the exception that caused the fallback.  Exceptions raised by
        the fallback itself are not caught.
    operation : str
        Name used in the log and in the recorded event.
    recorder : Optional[FallbackRecorder]
        Where to record the fallback, if anywhere.
    **context
        Identifying inputs (``item_id``, ``keyword``...) stored with the
        event.

    Returns
    -------
    T
        The result of the work, or the fallback value.
    """
    if deadline is not None and deadline < 0:
        raise ValueError("deadline must not be negative")
    future = _as_future(handle)
    try:
        return await asyncio.wait_for(asyncio.shield(future), timeout=deadline)
    except Exception as exc:
        if future.done() and not future.cancelled() and future.exception() is exc:
            reason: BaseException = exc
        elif isinstance(exc, asyncio.TimeoutError):
            reason = OperationTimeoutError(operation, deadline or 0)
            future.add_done_callback(_discard_late_result(operation))
        else:
            reason = exc

    kind = _classify(reason)
    detail = str(reason) or type(reason).__name__
    if context:
        logger.error("Async %s failed (%s) %s: %s", operation, kind, context, detail)
    else:
        logger.error("Async %s failed (%s): %s", operation, kind, detail)
    if recorder is not None:
        recorder.record(operation, kind, detail, context)
    return fallback(reason)


async def combine(
    first: Awaitable[A],
    second: Awaitable[B],
    join: Callable[[A, B], T],
    deadline: Optional[float],
    fallback: Callable[[BaseException], T],
    *,
    operation: str,
    recorder: Optional[FallbackRecorder] = None,
    **context: Any,
) -> T:
    """Run ``first`` and ``second`` concurrently and join their results.

    Both awaitables are scheduled before this coroutine waits on either
    of them, so the total latency is that of the slower one.  ``join``
    is called once both have resolved.  A raising ``join`` or an
    elapsed ``deadline`` resolves to ``fallback(reason)``.
    """
    pending = [asyncio.ensure_future(first), asyncio.ensure_future(second)]

    async def joined() -> T:
        result_a, result_b = await asyncio.gather(*pending)
        return join(result_a, result_b)

    return await with_timeout(
        joined(),
        deadline,
        fallback,
        operation=operation,
        recorder=recorder,
        **context,
    )
