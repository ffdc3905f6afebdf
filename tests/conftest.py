import io
from unittest.mock import AsyncMock

import pytest
from PIL import Image

from pixcache.fetch.client import ImageFetcher


def make_image(width: int, height: int, mode: str = "RGB") -> Image.Image:
    """Deterministic gradient image so pixel comparisons are meaningful."""
    gradient = Image.linear_gradient("L").resize((width, height))
    return gradient.convert(mode)


def encode(image: Image.Image, fmt: str = "PNG") -> bytes:
    buf = io.BytesIO()
    image.save(buf, format=fmt)
    return buf.getvalue()


@pytest.fixture
def png_bytes():
    """64x48 RGB gradient encoded as PNG."""
    return encode(make_image(64, 48))


@pytest.fixture
def fetcher(png_bytes):
    """Fetcher stub that serves ``png_bytes`` and counts calls."""
    mock = AsyncMock(spec=ImageFetcher)
    mock.fetch.return_value = png_bytes
    return mock


@pytest.fixture
def resource_dir(tmp_path):
    """Directory with resources 1 (PNG) and 2 (JPEG)."""
    path = tmp_path / "resources"
    path.mkdir()
    make_image(32, 32).save(path / "1.png")
    make_image(40, 20).save(path / "2.jpg", quality=95)
    (path / "notes.txt").write_text("not an image")
    return path


@pytest.fixture
def image_factory():
    return make_image


@pytest.fixture
def encode_image():
    return encode


@pytest.fixture(autouse=True)
def isolated_config(tmp_path, monkeypatch):
    """Keep user config files and PIXCACHE_* variables out of every test."""
    import os

    from pixcache.config import hierarchy

    monkeypatch.setattr(hierarchy, "_GLOBAL_CONFIG_PATH", tmp_path / "no-global" / "config.yaml")
    for name in list(os.environ):
        if name.startswith("PIXCACHE_"):
            monkeypatch.delenv(name)
