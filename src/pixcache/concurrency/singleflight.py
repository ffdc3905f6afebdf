"""Per-key in-flight deduplication for async loads."""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Awaitable, Callable
from typing import Generic, TypeVar

logger = logging.getLogger(__name__)

T = TypeVar("T")


class SingleFlight(Generic[T]):
    """Collapses concurrent calls for the same key into one execution.

    The first caller for a key starts the work; callers arriving while it is
    in flight await the same result. A cancelled waiter does not cancel the
    shared task. Once the task finishes the key is forgotten, so later calls
    run again.
    """

    def __init__(self) -> None:
        self._inflight: dict[str, asyncio.Task[T]] = {}
        self._shared = 0

    async def do(self, key: str, fn: Callable[[], Awaitable[T]]) -> T:
        task = self._inflight.get(key)
        if task is None:
            task = asyncio.ensure_future(fn())
            self._inflight[key] = task
            task.add_done_callback(lambda t, k=key: self._forget(k, t))
        else:
            self._shared += 1
            logger.debug("Joining in-flight load for %s", key)
        return await asyncio.shield(task)

    def in_flight(self, key: str) -> bool:
        return key in self._inflight

    @property
    def shared_count(self) -> int:
        """Number of calls that joined an existing in-flight task."""
        return self._shared

    def __len__(self) -> int:
        return len(self._inflight)

    def _forget(self, key: str, task: asyncio.Task[T]) -> None:
        if self._inflight.get(key) is task:
            del self._inflight[key]
