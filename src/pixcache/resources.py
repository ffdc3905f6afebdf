"""Bundled image resources addressed by integer id."""

from __future__ import annotations

import logging
from pathlib import Path

from pixcache.errors.exceptions import ResourceNotFoundError

logger = logging.getLogger(__name__)

_SUPPORTED_EXTENSIONS = {".png", ".jpg", ".jpeg", ".gif", ".bmp", ".webp", ".tiff", ".tif"}
_MAX_RESOURCE_SIZE_BYTES = 50 * 1024 * 1024  # 50 MB


class ResourceRegistry:
    """Maps resource ids to image files shipped with the application."""

    def __init__(self, resources: dict[int, str | Path] | None = None) -> None:
        self._paths: dict[int, Path] = {}
        for resource_id, path in (resources or {}).items():
            self.register(resource_id, path)

    @classmethod
    def from_directory(cls, directory: str | Path) -> ResourceRegistry:
        """Register every ``<id>.<ext>`` image file in *directory*."""
        registry = cls()
        directory = Path(directory)
        if not directory.is_dir():
            logger.warning("Resource directory %s does not exist", directory)
            return registry
        for path in sorted(directory.iterdir()):
            if path.suffix.lower() not in _SUPPORTED_EXTENSIONS or not path.stem.isdigit():
                continue
            registry.register(int(path.stem), path)
        return registry

    def register(self, resource_id: int, path: str | Path) -> None:
        self._paths[resource_id] = Path(path)

    def resolve(self, resource_id: int) -> Path:
        try:
            return self._paths[resource_id]
        except KeyError:
            raise ResourceNotFoundError(
                f"No resource registered for id {resource_id}", resource_id=resource_id
            ) from None

    def read_bytes(self, resource_id: int) -> bytes:
        """Raw encoded bytes of a registered resource."""
        path = self.resolve(resource_id)
        if not path.is_file():
            raise ResourceNotFoundError(
                f"Resource file missing: {path}", resource_id=resource_id
            )
        _validate_path(path)
        return path.read_bytes()

    def __contains__(self, resource_id: object) -> bool:
        return resource_id in self._paths

    def __len__(self) -> int:
        return len(self._paths)


def _validate_path(path: Path) -> None:
    if path.is_symlink():
        raise ValueError(f"Symlinks not allowed: {path}")
    if path.suffix.lower() not in _SUPPORTED_EXTENSIONS:
        raise ValueError(f"Unsupported file type: {path.suffix}")
    size = path.stat().st_size
    if size > _MAX_RESOURCE_SIZE_BYTES:
        raise ValueError(f"File too large ({size} bytes, max {_MAX_RESOURCE_SIZE_BYTES})")
