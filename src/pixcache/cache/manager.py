"""Cache manager: orchestrates L1 (memory), L2 (disk) and the image sources."""

from __future__ import annotations

import logging
from collections.abc import Awaitable, Callable
from pathlib import Path
from types import TracebackType

from PIL import Image

from pixcache.cache.disk import DiskCache
from pixcache.cache.keys import key_for_resource, key_for_url
from pixcache.cache.memory import MemoryCache, image_memory_cache
from pixcache.cache.stats import CacheStats
from pixcache.concurrency.pool import WorkerPool
from pixcache.concurrency.singleflight import SingleFlight
from pixcache.errors.exceptions import (
    DecodeError,
    DiskIOError,
    NetworkError,
    ResourceNotFoundError,
)
from pixcache.fetch.client import ImageFetcher
from pixcache.imaging.decoder import (
    DEFAULT_MAX_HEIGHT,
    DEFAULT_MAX_WIDTH,
    decode_bounded,
    decode_stored,
    encode_lossless,
)
from pixcache.resources import ResourceRegistry
from pixcache.types import CacheSettings, FailureKind, LoadResult, LoadSource

logger = logging.getLogger(__name__)


class CacheManager:
    """Two-tier image cache: L1 in-memory LRU → L2 on-disk files → source.

    Sources are the network (``load_remote``) and bundled resources
    (``load_drawable``). Results populate the tiers they missed on the way
    back. While the manager is open no exception escapes the load methods:
    failures come back as ``None`` or as a non-ok ``LoadResult``. Loading
    through a closed manager raises RuntimeError.

    Concurrent loads of the same key share a single in-flight operation.
    """

    def __init__(
        self,
        cache_dir: Path | None = None,
        resources: ResourceRegistry | None = None,
        fetcher: ImageFetcher | None = None,
        memory: MemoryCache[Image.Image] | None = None,
        memory_bytes: int | None = None,
        memory_fraction: float = 0.125,
        target_width: int = DEFAULT_MAX_WIDTH,
        target_height: int = DEFAULT_MAX_HEIGHT,
        max_workers: int = 4,
    ) -> None:
        self._l1 = memory if memory is not None else image_memory_cache(
            memory_bytes, memory_fraction
        )
        self._l2 = DiskCache(cache_dir)
        self._resources = resources or ResourceRegistry()
        self._fetcher = fetcher or ImageFetcher()
        self._pool = WorkerPool(max_workers=max_workers)
        self._flights: SingleFlight[LoadResult] = SingleFlight()
        self._target = (target_width, target_height)
        self._closed = False

        self._memory_hits = 0
        self._disk_hits = 0
        self._misses = 0
        self._fetches = 0
        self._failures = 0

    @classmethod
    def from_settings(
        cls,
        settings: CacheSettings,
        resources: ResourceRegistry | None = None,
        fetcher: ImageFetcher | None = None,
    ) -> CacheManager:
        if resources is None and settings.resource_dir is not None:
            resources = ResourceRegistry.from_directory(settings.resource_dir)
        if fetcher is None:
            fetcher = ImageFetcher(
                timeout=settings.fetch_timeout,
                max_bytes=settings.fetch_max_bytes,
                max_attempts=settings.fetch_max_attempts,
            )
        return cls(
            cache_dir=settings.cache_dir,
            resources=resources,
            fetcher=fetcher,
            memory_bytes=settings.memory_bytes,
            memory_fraction=settings.memory_fraction,
            target_width=settings.target_width,
            target_height=settings.target_height,
            max_workers=settings.max_workers,
        )

    @property
    def memory(self) -> MemoryCache[Image.Image]:
        return self._l1

    @property
    def disk(self) -> DiskCache:
        return self._l2

    @property
    def resources(self) -> ResourceRegistry:
        return self._resources

    # ── Entry points ──

    async def load_remote(self, url: str) -> Image.Image | None:
        """Decoded image for *url*, or None if it could not be obtained."""
        return (await self.load_remote_result(url)).image

    async def load_drawable(self, resource_id: int) -> Image.Image | None:
        """Decoded bundled resource, or None if it could not be obtained."""
        return (await self.load_drawable_result(resource_id)).image

    async def load_remote_result(self, url: str) -> LoadResult:
        key = key_for_url(url)

        async def fetch() -> bytes:
            self._fetches += 1
            return await self._fetcher.fetch(url)

        return await self._load(key, fetch, LoadSource.NETWORK)

    async def load_drawable_result(self, resource_id: int) -> LoadResult:
        key = key_for_resource(resource_id)

        async def read() -> bytes:
            return await self._pool.run(self._resources.read_bytes, resource_id)

        return await self._load(key, read, LoadSource.RESOURCE)

    # ── Maintenance ──

    def clear_memory(self) -> None:
        self._l1.clear()

    def clear(self) -> int:
        """Clear both tiers; returns the number of disk entries removed."""
        self._l1.clear()
        return self._l2.clear()

    def stats(self) -> CacheStats:
        """Return aggregate cache statistics."""
        return CacheStats(
            memory_entries=len(self._l1),
            memory_bytes=self._l1.size_bytes,
            memory_capacity_bytes=self._l1.capacity_bytes,
            memory_evictions=self._l1.evictions,
            disk_entries=self._l2.entry_count,
            disk_bytes=self._l2.size_bytes,
            memory_hits=self._memory_hits,
            disk_hits=self._disk_hits,
            misses=self._misses,
            fetches=self._fetches,
            failures=self._failures,
        )

    async def close(self) -> None:
        if self._closed:
            return
        self._closed = True
        await self._fetcher.close()
        self._pool.close()

    async def __aenter__(self) -> CacheManager:
        return self

    async def __aexit__(
        self,
        exc_type: type[BaseException] | None,
        exc: BaseException | None,
        tb: TracebackType | None,
    ) -> None:
        await self.close()

    # ── Internals ──

    async def _load(
        self,
        key: str,
        read_source: Callable[[], Awaitable[bytes]],
        source: LoadSource,
    ) -> LoadResult:
        if self._closed:
            raise RuntimeError("CacheManager is closed")

        # L1 lookup is synchronous and never leaves the caller's loop
        cached = self._memory_lookup(key)
        if cached is not None:
            return cached

        try:
            return await self._flights.do(
                key, lambda: self._load_uncached(key, read_source, source)
            )
        except Exception as e:
            self._failures += 1
            logger.exception("Unexpected error loading %s", key)
            return LoadResult.failed(key, None, str(e))

    async def _load_uncached(
        self,
        key: str,
        read_source: Callable[[], Awaitable[bytes]],
        source: LoadSource,
    ) -> LoadResult:
        # Another flight may have populated L1 since the caller looked
        cached = self._memory_lookup(key)
        if cached is not None:
            return cached

        promoted = await self._disk_lookup(key)
        if promoted is not None:
            return promoted

        self._misses += 1
        try:
            data = await read_source()
        except NetworkError as e:
            return self._fail(key, FailureKind.NETWORK, e, not_found=e.is_not_found)
        except ResourceNotFoundError as e:
            return self._fail(key, FailureKind.RESOURCE, e, not_found=True)
        except (OSError, ValueError) as e:
            return self._fail(key, FailureKind.RESOURCE, e)

        try:
            image = await self._pool.run(decode_bounded, data, *self._target)
        except DecodeError as e:
            return self._fail(key, FailureKind.DECODE, e)

        await self._persist(key, image)
        self._l1.put(key, image)
        logger.debug("Loaded %s from %s", key, source.value)
        return LoadResult.hit(key, image, source)

    def _memory_lookup(self, key: str) -> LoadResult | None:
        image = self._l1.get(key)
        if image is None:
            return None
        self._memory_hits += 1
        logger.debug("Loaded image %s from memory cache", key)
        return LoadResult.hit(key, image, LoadSource.MEMORY)

    async def _disk_lookup(self, key: str) -> LoadResult | None:
        data = await self._pool.run(self._l2.read, key)
        if data is None:
            return None
        try:
            image = await self._pool.run(decode_stored, data)
        except DecodeError as e:
            logger.warning("Discarding corrupt disk entry %s: %s", key, e)
            await self._pool.run(self._l2.remove, key)
            return None
        # Promote to L1
        self._l1.put(key, image)
        self._disk_hits += 1
        logger.debug("Loaded image %s from disk cache", key)
        return LoadResult.hit(key, image, LoadSource.DISK)

    async def _persist(self, key: str, image: Image.Image) -> None:
        try:
            await self._pool.run(_encode_and_write, self._l2, key, image)
        except (DiskIOError, OSError, ValueError) as e:
            # The decoded image is still returned; the next load re-fetches
            logger.warning("Could not persist %s to disk cache: %s", key, e)

    def _fail(
        self,
        key: str,
        failure: FailureKind,
        error: Exception,
        not_found: bool = False,
    ) -> LoadResult:
        self._failures += 1
        logger.error("Failed to load image %s (%s): %s", key, failure.value, error)
        if not_found:
            return LoadResult.not_found(key, failure, str(error))
        return LoadResult.failed(key, failure, str(error))


def _encode_and_write(disk: DiskCache, key: str, image: Image.Image) -> None:
    disk.write(key, encode_lossless(image))
