"""Package-level default configuration values."""

from __future__ import annotations

from pathlib import Path
from typing import Any

# Default cache settings
DEFAULT_CACHE_DIR = Path.home() / ".pixcache" / "image_cache"
DEFAULT_MEMORY_FRACTION = 0.125  # one-eighth of the process memory limit

# Default decode bounds
DEFAULT_TARGET_WIDTH = 1024
DEFAULT_TARGET_HEIGHT = 1024

# Default fetch settings
DEFAULT_FETCH_TIMEOUT = 30.0
DEFAULT_FETCH_MAX_ATTEMPTS = 1
DEFAULT_FETCH_MAX_BYTES = 50 * 1024 * 1024

# Default concurrency settings
DEFAULT_MAX_WORKERS = 4

# Log level
DEFAULT_LOG_LEVEL = "WARNING"


def get_defaults() -> dict[str, Any]:
    """Return all defaults as a flat dictionary for merging."""
    return {
        "cache_dir": DEFAULT_CACHE_DIR,
        "resource_dir": None,
        "memory_fraction": DEFAULT_MEMORY_FRACTION,
        "memory_bytes": None,
        "target_width": DEFAULT_TARGET_WIDTH,
        "target_height": DEFAULT_TARGET_HEIGHT,
        "fetch_timeout": DEFAULT_FETCH_TIMEOUT,
        "fetch_max_attempts": DEFAULT_FETCH_MAX_ATTEMPTS,
        "fetch_max_bytes": DEFAULT_FETCH_MAX_BYTES,
        "max_workers": DEFAULT_MAX_WORKERS,
        "log_level": DEFAULT_LOG_LEVEL,
    }
