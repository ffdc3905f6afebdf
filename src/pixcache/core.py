"""Top-level entry points: create_cache_manager(), load_remote(), load_drawable()."""

from __future__ import annotations

import asyncio
import logging
from typing import Any

from PIL import Image

from pixcache.cache.manager import CacheManager
from pixcache.config.hierarchy import load_settings
from pixcache.fetch.client import ImageFetcher
from pixcache.resources import ResourceRegistry

logger = logging.getLogger(__name__)


def create_cache_manager(
    resources: ResourceRegistry | None = None,
    fetcher: ImageFetcher | None = None,
    **overrides: Any,
) -> CacheManager:
    """Build a CacheManager from the configuration hierarchy.

    Keyword overrides take precedence over config files and environment.
    The caller owns the returned manager and must ``await manager.close()``.
    """
    settings = load_settings(**overrides)
    logger.debug("Creating cache manager with settings: %s", settings)
    return CacheManager.from_settings(settings, resources=resources, fetcher=fetcher)


def load_remote(url: str, **overrides: Any) -> Image.Image | None:
    """Load a remote image through a short-lived cache manager (sync wrapper)."""

    async def _run() -> Image.Image | None:
        async with create_cache_manager(**overrides) as manager:
            return await manager.load_remote(url)

    return asyncio.run(_run())


def load_drawable(
    resource_id: int,
    resources: ResourceRegistry | None = None,
    **overrides: Any,
) -> Image.Image | None:
    """Load a bundled resource through a short-lived cache manager (sync wrapper)."""

    async def _run() -> Image.Image | None:
        async with create_cache_manager(resources=resources, **overrides) as manager:
            return await manager.load_drawable(resource_id)

    return asyncio.run(_run())
