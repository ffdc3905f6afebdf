"""L2 disk cache: one file per key under a private cache directory."""

from __future__ import annotations

import logging
import os
import tempfile
from pathlib import Path

from pixcache.errors.exceptions import DiskIOError

logger = logging.getLogger(__name__)

_DEFAULT_CACHE_DIR = Path.home() / ".pixcache" / "image_cache"
_TEMP_PREFIX = ".tmp-"


class DiskCache:
    """Content-addressed file store: filename = cache key, contents = PNG bytes.

    There is no index, size cap or expiry. Entries live until the directory is
    cleared externally or via ``clear()``.
    """

    def __init__(self, cache_dir: Path | None = None) -> None:
        self._dir = Path(cache_dir) if cache_dir else _DEFAULT_CACHE_DIR

    @property
    def directory(self) -> Path:
        return self._dir

    def exists(self, key: str) -> bool:
        return self._path(key).is_file()

    def read(self, key: str) -> bytes | None:
        path = self._path(key)
        try:
            return path.read_bytes()
        except FileNotFoundError:
            return None
        except OSError as e:
            logger.warning("Failed to read cache entry %s: %s", path, e)
            return None

    def write(self, key: str, data: bytes) -> None:
        """Atomically write *data* for *key*.

        Readers see either the previous file or the complete new one.
        Raises DiskIOError on failure; no partial file is left behind.
        """
        path = self._path(key)
        self._ensure_dir()
        tmp_name: str | None = None
        try:
            with tempfile.NamedTemporaryFile(
                dir=self._dir, prefix=_TEMP_PREFIX, delete=False
            ) as tmp:
                tmp_name = tmp.name
                tmp.write(data)
                tmp.flush()
                os.fsync(tmp.fileno())
            os.replace(tmp_name, path)
        except OSError as e:
            if tmp_name is not None:
                Path(tmp_name).unlink(missing_ok=True)
            raise DiskIOError(
                f"Failed to write cache entry {path}: {e}", path=str(path), original=e
            ) from e

    def remove(self, key: str) -> bool:
        try:
            self._path(key).unlink()
        except FileNotFoundError:
            return False
        return True

    def clear(self) -> int:
        """Delete every entry; returns the number removed."""
        count = 0
        for path in self._entries():
            try:
                path.unlink()
                count += 1
            except FileNotFoundError:
                continue
        return count

    def keys(self) -> list[str]:
        return sorted(p.name for p in self._entries())

    @property
    def entry_count(self) -> int:
        return sum(1 for _ in self._entries())

    @property
    def size_bytes(self) -> int:
        total = 0
        for path in self._entries():
            try:
                total += path.stat().st_size
            except FileNotFoundError:
                continue
        return total

    def _entries(self) -> list[Path]:
        if not self._dir.is_dir():
            return []
        return [
            p for p in self._dir.iterdir()
            if p.is_file() and not p.name.startswith(_TEMP_PREFIX)
        ]

    def _ensure_dir(self) -> None:
        try:
            self._dir.mkdir(parents=True, exist_ok=True)
        except OSError as e:
            raise DiskIOError(
                f"Cannot create cache directory {self._dir}: {e}", path=str(self._dir), original=e
            ) from e

    def _path(self, key: str) -> Path:
        if not key or "/" in key or "\\" in key or key.startswith("."):
            raise ValueError(f"Invalid cache key: {key!r}")
        return self._dir / key
