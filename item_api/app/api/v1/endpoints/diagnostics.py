"""
Diagnostics endpoints for API v1.

Asynchronous item operations hide their failures behind fallback
values.  These routes expose the recorded fallbacks and the current
state of the worker pool so operators can tell a missing item from a
timed out or failed store call.
"""

from typing import List, Optional

from fastapi import APIRouter, Depends, Query

from item_api.app.api.deps import get_executor, get_recorder
from item_api.app.core.diagnostics import FallbackRecorder
from item_api.app.core.executor import BoundedExecutor
from item_api.app.schemas.diagnostics import ExecutorStats, FallbackEventRead

router = APIRouter()


@router.get("/fallbacks", response_model=List[FallbackEventRead])
async def list_fallbacks(
    operation: Optional[str] = Query(None),
    limit: int = Query(100, ge=1, le=1000),
    recorder: FallbackRecorder = Depends(get_recorder),
) -> List[FallbackEventRead]:
    """Return the most recent fallback events, newest first."""
    events = recorder.events(operation)[::-1][:limit]
    return [FallbackEventRead.model_validate(event) for event in events]


@router.get("/executor", response_model=ExecutorStats)
async def executor_stats(executor: BoundedExecutor = Depends(get_executor)) -> ExecutorStats:
    return ExecutorStats(
        min_workers=executor.min_workers,
        max_workers=executor.max_workers,
        queue_capacity=executor.queue_capacity,
        pool_size=executor.pool_size,
        active_count=executor.active_count,
        queue_size=executor.queue_size,
    )
