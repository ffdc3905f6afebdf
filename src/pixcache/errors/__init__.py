"""Error handling: exception hierarchy for cache, decode and fetch failures."""

from pixcache.errors.exceptions import (
    DecodeError,
    DigestUnavailable,
    DiskIOError,
    NetworkError,
    PixCacheError,
    ResourceNotFoundError,
)

__all__ = [
    "PixCacheError",
    "DecodeError",
    "NetworkError",
    "DigestUnavailable",
    "DiskIOError",
    "ResourceNotFoundError",
]
