"""Network fetch: async HTTP download of raw image bytes."""

from pixcache.fetch.client import ImageFetcher

__all__ = ["ImageFetcher"]
