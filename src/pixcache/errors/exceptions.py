"""Custom exception hierarchy for pixcache."""

from __future__ import annotations

from typing import Any


class PixCacheError(Exception):
    """Base exception for all pixcache errors."""

    def __init__(self, message: str = "", **kwargs: Any) -> None:
        super().__init__(message)
        self.message = message


class DecodeError(PixCacheError):
    """Image bytes could not be decoded.

    Examples: truncated download, corrupt disk entry, unsupported format.
    """

    def __init__(
        self,
        message: str = "",
        source: str = "",
        original: Exception | None = None,
    ) -> None:
        super().__init__(message)
        self.source = source
        self.original = original


class NetworkError(PixCacheError):
    """Fetching a remote image failed.

    Examples: connection refused, timeout, non-2xx response, oversized body.
    """

    def __init__(
        self,
        message: str = "",
        error_type: str = "connection",
        http_status: int | None = None,
        transient: bool = False,
        original: Exception | None = None,
    ) -> None:
        super().__init__(message)
        self.error_type = error_type
        self.http_status = http_status
        self.transient = transient
        self.original = original

    @property
    def is_not_found(self) -> bool:
        return self.http_status in (404, 410)


class DigestUnavailable(PixCacheError):
    """Requested hash algorithm is not provided by this interpreter build."""

    def __init__(self, message: str = "", algorithm: str = "") -> None:
        super().__init__(message)
        self.algorithm = algorithm


class DiskIOError(PixCacheError):
    """Creating the cache directory or writing an entry failed."""

    def __init__(
        self,
        message: str = "",
        path: str = "",
        original: Exception | None = None,
    ) -> None:
        super().__init__(message)
        self.path = path
        self.original = original


class ResourceNotFoundError(PixCacheError):
    """No bundled resource is registered under the requested id."""

    def __init__(self, message: str = "", resource_id: int | None = None) -> None:
        super().__init__(message)
        self.resource_id = resource_id
