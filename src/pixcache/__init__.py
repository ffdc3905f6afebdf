"""pixcache: two-tier (memory + disk) image cache with bounded decoding."""

from pixcache.cache.manager import CacheManager
from pixcache.core import create_cache_manager, load_drawable, load_remote
from pixcache.resources import ResourceRegistry
from pixcache.types import LoadResult, LoadSource, LoadStatus

__version__ = "0.1.0"

__all__ = [
    "CacheManager",
    "LoadResult",
    "LoadSource",
    "LoadStatus",
    "ResourceRegistry",
    "create_cache_manager",
    "load_drawable",
    "load_remote",
]
