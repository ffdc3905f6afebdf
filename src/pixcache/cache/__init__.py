"""Cache subsystem: two-tier (memory + disk) with content-addressed keys."""

from pixcache.cache.disk import DiskCache
from pixcache.cache.keys import key_for_resource, key_for_url
from pixcache.cache.manager import CacheManager
from pixcache.cache.memory import MemoryCache, image_memory_cache
from pixcache.cache.stats import CacheStats

__all__ = [
    "CacheManager",
    "CacheStats",
    "DiskCache",
    "MemoryCache",
    "image_memory_cache",
    "key_for_resource",
    "key_for_url",
]
