"""Bounded image decoding: header-only bounds pass, then subsampled decode."""

from __future__ import annotations

import io
import logging
import math
import struct

from PIL import Image, ImageFile, UnidentifiedImageError

from pixcache.errors.exceptions import DecodeError

logger = logging.getLogger(__name__)

DEFAULT_MAX_WIDTH = 1024
DEFAULT_MAX_HEIGHT = 1024

# Modes kept as decoded; anything else is converted before caching
_CACHEABLE_MODES = {"L", "LA", "RGB", "RGBA"}
_BYTES_PER_BAND = {"I": 4, "F": 4, "I;16": 2, "I;16B": 2, "I;16L": 2}
_DECODE_ERRORS = (
    UnidentifiedImageError,
    Image.DecompressionBombError,
    OSError,
    ValueError,
    SyntaxError,
    EOFError,
)


def read_bounds(data: bytes) -> tuple[int, int]:
    """Return (width, height) without decoding pixel data."""
    try:
        with _open_unchecked(data) as img:
            return img.size
    except _DECODE_ERRORS as e:
        raise DecodeError(f"Cannot read image bounds: {e}", original=e) from e


def compute_sample_size(width: int, height: int, max_width: int, max_height: int) -> int:
    """Integer subsampling factor that brings the image near the target bounds.

    A zero (or negative) bound disables scaling.
    """
    if max_width <= 0 or max_height <= 0:
        return 1
    sample_size = 1
    if height > max_height or width > max_width:
        height_ratio = _round_half_up(height / max_height)
        width_ratio = _round_half_up(width / max_width)
        sample_size = min(height_ratio, width_ratio)
    return max(sample_size, 1)


def decode_bounded(
    data: bytes,
    max_width: int = DEFAULT_MAX_WIDTH,
    max_height: int = DEFAULT_MAX_HEIGHT,
) -> Image.Image:
    """Decode *data*, subsampled so large sources stay near the target bounds.

    Raises DecodeError for malformed or truncated input.
    """
    width, height = read_bounds(data)
    sample_size = compute_sample_size(width, height, max_width, max_height)
    target = (max(1, width // sample_size), max(1, height // sample_size))

    try:
        with _open_unchecked(data) as img:
            if sample_size > 1:
                # JPEG decodes at 1/2, 1/4 or 1/8 scale directly; no-op elsewhere
                img.draft(img.mode, target)
            _check_pixel_budget(img.size)
            img.load()
            decoded = _normalize_mode(img)
            factor = min(decoded.width // target[0], decoded.height // target[1])
            if factor > 1:
                decoded = decoded.reduce(factor)
            elif decoded is img:
                decoded = img.copy()
    except _DECODE_ERRORS as e:
        raise DecodeError(f"Cannot decode image: {e}", original=e) from e

    if sample_size > 1:
        logger.debug(
            "Decoded %dx%d -> %dx%d (sample size %d)",
            width, height, decoded.width, decoded.height, sample_size,
        )
    return decoded


def decode_stored(data: bytes) -> Image.Image:
    """Decode a disk-tier entry at its stored size.

    Entries were bounded when first cached. Bounding them again would shrink
    anything JPEG ``draft`` left above the target.
    """
    return decode_bounded(data, 0, 0)


def encode_lossless(image: Image.Image) -> bytes:
    """PNG-encode a decoded image for the disk tier."""
    buf = io.BytesIO()
    image.save(buf, format="PNG")
    return buf.getvalue()


def image_size_bytes(image: Image.Image) -> int:
    """Byte count of the decoded pixel buffer (not the encoded file)."""
    per_band = _BYTES_PER_BAND.get(image.mode, 1)
    return image.width * image.height * len(image.getbands()) * per_band


def _open_unchecked(data: bytes) -> ImageFile.ImageFile:
    """Like ``Image.open`` but without its pixel-count guard.

    ``Image.open`` checks the full header size before ``draft()`` can shrink
    it; the guard is applied to the drafted size in ``_check_pixel_budget``.
    """
    Image.init()
    fp = io.BytesIO(data)
    prefix = fp.read(16)
    for format_id in Image.ID:
        factory, accept = Image.OPEN[format_id]
        accepted = accept(prefix) if accept else True
        if not accepted or isinstance(accepted, str):
            continue
        fp.seek(0)
        try:
            return factory(fp, None)
        except (SyntaxError, IndexError, TypeError, struct.error):
            continue
    raise UnidentifiedImageError("cannot identify image file")


def _check_pixel_budget(size: tuple[int, int]) -> None:
    limit = Image.MAX_IMAGE_PIXELS
    if limit is None:
        return
    pixels = size[0] * size[1]
    if pixels > 2 * limit:
        raise Image.DecompressionBombError(
            f"Image size ({pixels} pixels) exceeds limit of {2 * limit} pixels"
        )


def _normalize_mode(img: Image.Image) -> Image.Image:
    if img.mode in _CACHEABLE_MODES:
        return img
    if img.mode.startswith("I") or img.mode == "F":
        return img.convert("L")
    has_alpha = "transparency" in img.info or img.mode.endswith("A")
    return img.convert("RGBA" if has_alpha else "RGB")


def _round_half_up(value: float) -> int:
    return math.floor(value + 0.5)
