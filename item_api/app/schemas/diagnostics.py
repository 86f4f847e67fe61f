"""
Pydantic schemas for the diagnostics endpoints.
"""

from datetime import datetime
from typing import Any, Dict

from pydantic import BaseModel


class FallbackEventRead(BaseModel):
    """A recorded fallback of an asynchronous operation."""

    operation: str
    kind: str
    detail: str
    context: Dict[str, Any]
    occurred_at: datetime

    model_config = {
        "from_attributes": True,
    }


class ExecutorStats(BaseModel):
    """Current state of the async worker pool."""

    min_workers: int
    max_workers: int
    queue_capacity: int
    pool_size: int
    active_count: int
    queue_size: int
