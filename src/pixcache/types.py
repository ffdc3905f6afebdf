"""Shared Pydantic models for pixcache."""

from __future__ import annotations

from enum import StrEnum
from pathlib import Path
from typing import Any

from PIL import Image
from pydantic import BaseModel, ConfigDict, Field

# ── Enums ──


class LoadStatus(StrEnum):
    OK = "ok"
    NOT_FOUND = "not_found"
    FAILED = "failed"


class LoadSource(StrEnum):
    MEMORY = "memory"
    DISK = "disk"
    NETWORK = "network"
    RESOURCE = "resource"


class FailureKind(StrEnum):
    DECODE = "decode"
    NETWORK = "network"
    DISK_IO = "disk_io"
    RESOURCE = "resource"


# ── Result models ──


class LoadResult(BaseModel):
    """Outcome of a single load request."""

    model_config = ConfigDict(arbitrary_types_allowed=True)

    key: str
    status: LoadStatus
    image: Image.Image | None = None
    source: LoadSource | None = None
    failure: FailureKind | None = None
    message: str = ""

    @property
    def ok(self) -> bool:
        return self.status == LoadStatus.OK and self.image is not None

    @classmethod
    def hit(cls, key: str, image: Image.Image, source: LoadSource) -> LoadResult:
        return cls(key=key, status=LoadStatus.OK, image=image, source=source)

    @classmethod
    def not_found(cls, key: str, failure: FailureKind, message: str = "") -> LoadResult:
        return cls(key=key, status=LoadStatus.NOT_FOUND, failure=failure, message=message)

    @classmethod
    def failed(cls, key: str, failure: FailureKind | None, message: str = "") -> LoadResult:
        return cls(key=key, status=LoadStatus.FAILED, failure=failure, message=message)


# ── Config models ──


class CacheSettings(BaseModel):
    """Resolved configuration for a CacheManager."""

    cache_dir: Path
    resource_dir: Path | None = None
    memory_fraction: float = Field(default=0.125, gt=0, le=1)
    memory_bytes: int | None = Field(default=None, gt=0)
    target_width: int = Field(default=1024, ge=0)
    target_height: int = Field(default=1024, ge=0)
    fetch_timeout: float = Field(default=30.0, gt=0)
    fetch_max_attempts: int = Field(default=1, ge=1)
    fetch_max_bytes: int = Field(default=50 * 1024 * 1024, gt=0)
    max_workers: int = Field(default=4, ge=1)
    log_level: str = "WARNING"

    @classmethod
    def from_mapping(cls, config: dict[str, Any]) -> CacheSettings:
        """Build settings from a merged config dict, ignoring unknown keys."""
        known = {k: v for k, v in config.items() if k in cls.model_fields and v is not None}
        for path_key in ("cache_dir", "resource_dir"):
            if path_key in known:
                known[path_key] = Path(known[path_key]).expanduser()
        return cls(**known)
