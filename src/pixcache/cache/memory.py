"""L1 in-memory LRU cache."""

from __future__ import annotations

import logging
from collections import OrderedDict
from collections.abc import Callable
from threading import RLock
from typing import Generic, TypeVar

from PIL import Image

from pixcache.imaging.decoder import image_size_bytes
from pixcache.utils.memory import default_memory_capacity

logger = logging.getLogger(__name__)

V = TypeVar("V")


class MemoryCache(Generic[V]):
    """Thread-safe LRU cache with size-based eviction.

    Entry sizes come from ``size_of``; the running total never exceeds
    ``capacity_bytes``. An entry larger than the whole capacity is rejected.
    """

    def __init__(
        self,
        capacity_bytes: int,
        size_of: Callable[[V], int],
    ) -> None:
        if capacity_bytes <= 0:
            raise ValueError(f"capacity_bytes must be positive, got {capacity_bytes}")
        self._store: OrderedDict[str, tuple[V, int]] = OrderedDict()
        self._size_of = size_of
        self._capacity_bytes = capacity_bytes
        self._current_size_bytes = 0
        self._evictions = 0
        self._lock = RLock()

    def get(self, key: str) -> V | None:
        with self._lock:
            item = self._store.get(key)
            if item is None:
                return None
            # Move to end (most recently used)
            self._store.move_to_end(key)
            return item[0]

    def put(self, key: str, value: V) -> bool:
        """Insert *value*; returns False if it alone exceeds capacity."""
        entry_size = self._size_of(value)
        with self._lock:
            self._remove(key)
            if entry_size > self._capacity_bytes:
                logger.debug(
                    "Entry %s (%d bytes) exceeds capacity %d, not cached",
                    key, entry_size, self._capacity_bytes,
                )
                return False
            # Evict until there's room
            while self._current_size_bytes + entry_size > self._capacity_bytes and self._store:
                self._evict_oldest()
            self._store[key] = (value, entry_size)
            self._current_size_bytes += entry_size
            return True

    def remove(self, key: str) -> bool:
        with self._lock:
            return self._remove(key)

    def clear(self) -> None:
        with self._lock:
            self._store.clear()
            self._current_size_bytes = 0

    def keys(self) -> list[str]:
        """Keys from least to most recently used."""
        with self._lock:
            return list(self._store)

    @property
    def size_bytes(self) -> int:
        return self._current_size_bytes

    @property
    def capacity_bytes(self) -> int:
        return self._capacity_bytes

    @property
    def evictions(self) -> int:
        return self._evictions

    def __len__(self) -> int:
        return len(self._store)

    def __contains__(self, key: object) -> bool:
        with self._lock:
            return key in self._store

    def _remove(self, key: str) -> bool:
        item = self._store.pop(key, None)
        if item is None:
            return False
        self._current_size_bytes -= item[1]
        return True

    def _evict_oldest(self) -> None:
        key, (_, size) = self._store.popitem(last=False)
        self._current_size_bytes -= size
        self._evictions += 1
        logger.debug("Evicted %s (%d bytes)", key, size)


def image_memory_cache(
    capacity_bytes: int | None = None,
    fraction: float = 0.125,
) -> MemoryCache[Image.Image]:
    """Memory cache for decoded images, sized by pixel-buffer bytes.

    Default capacity is ``fraction`` of the maximum memory this process may use.
    """
    capacity = capacity_bytes or default_memory_capacity(fraction)
    return MemoryCache(capacity, image_size_bytes)
