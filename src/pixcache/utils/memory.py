"""Process memory limits used to size the in-memory cache."""

from __future__ import annotations

import logging
import os
import sys

logger = logging.getLogger(__name__)

_FALLBACK_MAX_MEMORY = 2 * 1024 * 1024 * 1024  # 2 GiB


def max_process_memory() -> int:
    """Maximum number of bytes this process is permitted to use.

    Uses the soft address-space limit when one is set, otherwise the physical
    memory of the machine, otherwise a fixed fallback.
    """
    limit = _address_space_limit()
    if limit:
        return limit
    physical = _physical_memory()
    if physical:
        return physical
    logger.debug("Could not determine memory limit, assuming %d bytes", _FALLBACK_MAX_MEMORY)
    return _FALLBACK_MAX_MEMORY


def default_memory_capacity(fraction: float = 0.125) -> int:
    """Share of the process memory budget given to the memory cache."""
    if not 0 < fraction <= 1:
        raise ValueError(f"fraction must be in (0, 1], got {fraction}")
    return max(1, int(max_process_memory() * fraction))


def _address_space_limit() -> int | None:
    if sys.platform == "win32":
        return None
    import resource

    soft, _hard = resource.getrlimit(resource.RLIMIT_AS)
    if soft == resource.RLIM_INFINITY or soft <= 0:
        return None
    return soft


def _physical_memory() -> int | None:
    if not hasattr(os, "sysconf"):
        return None
    try:
        pages = os.sysconf("SC_PHYS_PAGES")
        page_size = os.sysconf("SC_PAGE_SIZE")
    except (ValueError, OSError):
        return None
    if pages <= 0 or page_size <= 0:
        return None
    return pages * page_size
