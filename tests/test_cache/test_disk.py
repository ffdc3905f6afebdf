"""Tests for the file-per-key disk cache."""

import os

import pytest

from pixcache.cache.disk import DiskCache
from pixcache.errors.exceptions import DiskIOError
from pixcache.imaging.decoder import decode_bounded, encode_lossless


class TestDiskCache:
    def test_write_read(self, tmp_path):
        cache = DiskCache(tmp_path / "cache")
        cache.write("k1", b"hello")
        assert cache.read("k1") == b"hello"
        assert cache.exists("k1")

    def test_read_miss(self, tmp_path):
        cache = DiskCache(tmp_path / "cache")
        assert cache.read("nonexistent") is None
        assert not cache.exists("nonexistent")

    def test_directory_created_on_first_write(self, tmp_path):
        cache_dir = tmp_path / "nested" / "cache"
        cache = DiskCache(cache_dir)
        assert not cache_dir.exists()
        cache.write("k1", b"x")
        assert cache_dir.is_dir()

    def test_filename_is_key(self, tmp_path):
        cache = DiskCache(tmp_path)
        cache.write("drawable_3", b"x")
        assert (tmp_path / "drawable_3").read_bytes() == b"x"

    def test_overwrite_existing_key(self, tmp_path):
        cache = DiskCache(tmp_path)
        cache.write("k1", b"first")
        cache.write("k1", b"second")
        assert cache.read("k1") == b"second"
        assert cache.entry_count == 1

    def test_failed_write_leaves_no_files(self, tmp_path, monkeypatch):
        cache = DiskCache(tmp_path)
        cache.write("k1", b"original")

        def boom(src, dst):
            raise OSError("disk full")

        monkeypatch.setattr(os, "replace", boom)
        with pytest.raises(DiskIOError):
            cache.write("k1", b"replacement")
        # Previous contents intact and no temp file left behind
        assert cache.read("k1") == b"original"
        assert sorted(p.name for p in tmp_path.iterdir()) == ["k1"]

    def test_unwritable_directory_raises(self, tmp_path):
        blocker = tmp_path / "file"
        blocker.write_text("not a directory")
        cache = DiskCache(blocker / "cache")
        with pytest.raises(DiskIOError):
            cache.write("k1", b"x")

    def test_rejects_path_like_keys(self, tmp_path):
        cache = DiskCache(tmp_path)
        with pytest.raises(ValueError):
            cache.write("../escape", b"x")
        with pytest.raises(ValueError):
            cache.read("")

    def test_remove(self, tmp_path):
        cache = DiskCache(tmp_path)
        cache.write("k1", b"x")
        assert cache.remove("k1") is True
        assert cache.remove("k1") is False
        assert cache.read("k1") is None

    def test_clear_and_counts(self, tmp_path):
        cache = DiskCache(tmp_path)
        assert cache.entry_count == 0
        cache.write("k1", b"abc")
        cache.write("k2", b"de")
        assert cache.entry_count == 2
        assert cache.size_bytes == 5
        assert cache.keys() == ["k1", "k2"]
        assert cache.clear() == 2
        assert cache.entry_count == 0

    def test_counts_on_missing_directory(self, tmp_path):
        cache = DiskCache(tmp_path / "missing")
        assert cache.entry_count == 0
        assert cache.size_bytes == 0
        assert cache.clear() == 0

    def test_persistence(self, tmp_path):
        DiskCache(tmp_path).write("k1", b"persistent data")
        # Reopen
        assert DiskCache(tmp_path).read("k1") == b"persistent data"

    def test_round_trip_pixels(self, tmp_path, image_factory):
        original = image_factory(300, 200, "RGBA")
        cache = DiskCache(tmp_path)
        cache.write("k1", encode_lossless(original))
        restored = decode_bounded(cache.read("k1"), 1024, 1024)
        assert restored.size == original.size
        assert restored.mode == original.mode
        assert restored.tobytes() == original.tobytes()
