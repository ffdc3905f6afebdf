"""Cache key derivation: deterministic, content-addressed keys."""

from __future__ import annotations

import hashlib
import logging
import zlib

from pixcache.errors.exceptions import DigestUnavailable

logger = logging.getLogger(__name__)

DEFAULT_URL_DIGEST = "md5"
RESOURCE_KEY_PREFIX = "drawable_"


def key_for_resource(resource_id: int) -> str:
    """Key for a bundled resource image."""
    return f"{RESOURCE_KEY_PREFIX}{resource_id}"


def key_for_url(url: str, algorithm: str = DEFAULT_URL_DIGEST) -> str:
    """Hex digest of the URL, used as the disk filename.

    Falls back to a CRC-32 checksum when the digest algorithm is unavailable
    (e.g. MD5 on FIPS-restricted builds). The fallback is stable across
    process restarts, unlike the built-in ``hash()``.
    """
    data = url.encode("utf-8")
    try:
        return hex_digest(data, algorithm)
    except DigestUnavailable as exc:
        logger.warning("%s; falling back to crc32 key for %s", exc, url)
        return _crc32_hex(data)


def hex_digest(data: bytes, algorithm: str = DEFAULT_URL_DIGEST) -> str:
    """Lowercase hex digest of *data*.

    Raises DigestUnavailable if the algorithm cannot be constructed.
    """
    try:
        digest = hashlib.new(algorithm, data, usedforsecurity=False)
    except (ValueError, TypeError) as exc:
        raise DigestUnavailable(
            f"Digest algorithm '{algorithm}' unavailable: {exc}", algorithm=algorithm
        ) from exc
    return digest.hexdigest()


def _crc32_hex(data: bytes) -> str:
    return f"{zlib.crc32(data) & 0xFFFFFFFF:08x}"
