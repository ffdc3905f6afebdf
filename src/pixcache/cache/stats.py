"""Cache statistics models."""

from __future__ import annotations

from pydantic import BaseModel


class CacheStats(BaseModel):
    """Aggregate cache statistics."""

    memory_entries: int = 0
    memory_bytes: int = 0
    memory_capacity_bytes: int = 0
    memory_evictions: int = 0
    disk_entries: int = 0
    disk_bytes: int = 0
    memory_hits: int = 0
    disk_hits: int = 0
    misses: int = 0
    fetches: int = 0
    failures: int = 0

    @property
    def hits(self) -> int:
        return self.memory_hits + self.disk_hits

    @property
    def hit_rate(self) -> float:
        total = self.hits + self.misses
        return self.hits / total if total > 0 else 0.0

    @property
    def disk_mb(self) -> float:
        return self.disk_bytes / (1024 * 1024)

    @property
    def memory_mb(self) -> float:
        return self.memory_bytes / (1024 * 1024)
