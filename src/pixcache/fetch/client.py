"""Async image fetcher wrapping httpx with optional retry."""

from __future__ import annotations

import logging

import httpx
from tenacity import (
    AsyncRetrying,
    retry_if_exception,
    stop_after_attempt,
    wait_exponential,
)

from pixcache.errors.exceptions import NetworkError

logger = logging.getLogger(__name__)

_DEFAULT_TIMEOUT = 30.0
_DEFAULT_MAX_BYTES = 50 * 1024 * 1024  # 50 MB
_DEFAULT_HEADERS = {
    "User-Agent": "pixcache/0.1",
    "Accept": "image/png,image/jpeg,image/webp,image/gif,*/*;q=0.5",
}


def _is_transient(exc: BaseException) -> bool:
    return isinstance(exc, NetworkError) and exc.transient


class ImageFetcher:
    """Downloads raw image bytes over HTTP(S).

    ``max_attempts`` defaults to 1: failures are reported, not retried.
    """

    def __init__(
        self,
        timeout: float = _DEFAULT_TIMEOUT,
        max_bytes: int = _DEFAULT_MAX_BYTES,
        max_attempts: int = 1,
        client: httpx.AsyncClient | None = None,
    ) -> None:
        self._max_bytes = max_bytes
        self._max_attempts = max_attempts
        self._owns_client = client is None
        self._client = client or httpx.AsyncClient(
            timeout=timeout,
            follow_redirects=True,
            headers=_DEFAULT_HEADERS,
        )

    async def fetch(self, url: str) -> bytes:
        """Return the full response body.

        Raises NetworkError on transport failure, non-2xx status or oversize body.
        """
        async for attempt in AsyncRetrying(
            retry=retry_if_exception(_is_transient),
            wait=wait_exponential(multiplier=0.5, min=0.5, max=10),
            stop=stop_after_attempt(self._max_attempts),
            reraise=True,
        ):
            with attempt:
                return await self._fetch_once(url)
        raise NetworkError(f"No fetch attempt made for {url}")  # pragma: no cover

    async def download(self, url: str) -> bytes | None:
        """Like fetch(), but logs the failure and returns None."""
        try:
            return await self.fetch(url)
        except NetworkError as e:
            logger.error("Error downloading image from %s: %s", url, e)
            return None

    async def close(self) -> None:
        if self._owns_client:
            await self._client.aclose()

    async def _fetch_once(self, url: str) -> bytes:
        logger.debug("Downloading image from URL: %s", url)
        try:
            async with self._client.stream("GET", url) as response:
                if not response.is_success:
                    status = response.status_code
                    raise NetworkError(
                        f"HTTP {status} for {url}",
                        error_type="http_status",
                        http_status=status,
                        transient=status == 429 or status >= 500,
                    )
                chunks: list[bytes] = []
                received = 0
                async for chunk in response.aiter_bytes():
                    received += len(chunk)
                    if received > self._max_bytes:
                        raise NetworkError(
                            f"Response from {url} exceeds {self._max_bytes} bytes",
                            error_type="too_large",
                        )
                    chunks.append(chunk)
        except httpx.TimeoutException as e:
            raise NetworkError(
                f"Timed out fetching {url}: {e}", error_type="timeout", transient=True, original=e
            ) from e
        except (httpx.InvalidURL, httpx.UnsupportedProtocol) as e:
            raise NetworkError(
                f"Invalid URL {url!r}: {e}", error_type="invalid_url", original=e
            ) from e
        except httpx.HTTPError as e:
            raise NetworkError(
                f"Transport error fetching {url}: {e}",
                error_type="connection",
                transient=True,
                original=e,
            ) from e

        data = b"".join(chunks)
        logger.debug("Downloaded %d bytes from %s", len(data), url)
        return data
