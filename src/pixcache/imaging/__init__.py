"""Imaging: bounded decode and lossless re-encode."""

from pixcache.imaging.decoder import (
    compute_sample_size,
    decode_bounded,
    decode_stored,
    encode_lossless,
    image_size_bytes,
    read_bounds,
)

__all__ = [
    "compute_sample_size",
    "decode_bounded",
    "decode_stored",
    "encode_lossless",
    "image_size_bytes",
    "read_bounds",
]
