"""Concurrency: background worker pool and per-key single-flight."""

from pixcache.concurrency.pool import WorkerPool
from pixcache.concurrency.singleflight import SingleFlight

__all__ = ["SingleFlight", "WorkerPool"]
