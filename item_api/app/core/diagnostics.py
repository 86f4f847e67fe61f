"""
In-memory record of asynchronous operations that fell back.

When an asynchronous operation times out, is rejected by the executor
or fails in the store, the caller only ever sees the fallback value.
``FallbackRecorder`` keeps the most recent of these events so that the
failure can still be inspected through the diagnostics endpoint.
"""

from __future__ import annotations

import threading
from collections import deque
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any, Deque, Dict, List, Optional


@dataclass(frozen=True)
class FallbackEvent:
    """A single fallback of an asynchronous operation.

    Attributes:
        operation: Name of the operation, e.g. ``get_item``.
        kind: ``timeout``, ``rejected`` or ``fault``.
        detail: Human readable description of the cause.
        context: Identifying inputs such as ``item_id`` or ``keyword``.
        occurred_at: UTC time the fallback was applied.
    """

    operation: str
    kind: str
    detail: str
    context: Dict[str, Any] = field(default_factory=dict)
    occurred_at: datetime = field(default_factory=lambda: datetime.now(timezone.utc))


class FallbackRecorder:
    """Thread-safe bounded log of :class:`FallbackEvent` entries."""

    def __init__(self, capacity: int = 100) -> None:
        if capacity <= 0:
            raise ValueError("capacity must be positive")
        self._events: Deque[FallbackEvent] = deque(maxlen=capacity)
        self._lock = threading.Lock()

    def record(
        self,
        operation: str,
        kind: str,
        detail: str,
        context: Optional[Dict[str, Any]] = None,
    ) -> FallbackEvent:
        event = FallbackEvent(operation=operation, kind=kind, detail=detail, context=dict(context or {}))
        with self._lock:
            self._events.append(event)
        return event

    def events(self, operation: Optional[str] = None) -> List[FallbackEvent]:
        """Return recorded events, oldest first, optionally for one operation."""
        with self._lock:
            events = list(self._events)
        if operation is not None:
            events = [event for event in events if event.operation == operation]
        return events

    def clear(self) -> None:
        with self._lock:
            self._events.clear()

    def __len__(self) -> int:
        with self._lock:
            return len(self._events)
