"""Tests for in-memory LRU cache."""

import random
import threading

import pytest

from pixcache.cache.memory import MemoryCache, image_memory_cache


def _cache(capacity: int = 100) -> MemoryCache[str]:
    # Size of a value is its length
    return MemoryCache(capacity, len)


class TestMemoryCache:
    def test_get_set(self):
        cache = _cache()
        cache.put("k1", "hello")
        assert cache.get("k1") == "hello"

    def test_get_miss(self):
        cache = _cache()
        assert cache.get("nonexistent") is None

    def test_rejects_non_positive_capacity(self):
        with pytest.raises(ValueError):
            MemoryCache(0, len)

    def test_lru_eviction(self):
        cache = _cache(capacity=10)
        cache.put("k1", "a" * 6)
        cache.put("k2", "b" * 6)
        # k1 should have been evicted to make room for k2
        assert cache.get("k1") is None
        assert cache.get("k2") == "b" * 6
        assert cache.evictions == 1

    def test_lru_order_preserved(self):
        cache = _cache(capacity=10)
        cache.put("k1", "a" * 4)
        cache.put("k2", "b" * 4)
        # Access k1 to make it most recently used
        cache.get("k1")
        # Add k3 to trigger eviction; k2 should be evicted (least recently used)
        cache.put("k3", "c" * 4)
        assert cache.get("k1") is not None
        assert cache.get("k2") is None
        assert cache.get("k3") is not None

    def test_oversized_entry_discarded(self):
        cache = _cache(capacity=10)
        cache.put("small", "x" * 3)
        assert cache.put("huge", "y" * 11) is False
        assert "huge" not in cache
        # Existing entries are not flushed by a rejected insert
        assert cache.get("small") == "xxx"

    def test_oversized_replacement_removes_old_value(self):
        cache = _cache(capacity=10)
        cache.put("k1", "x" * 3)
        cache.put("k1", "y" * 20)
        assert cache.get("k1") is None
        assert cache.size_bytes == 0

    def test_overwrite_existing_key(self):
        cache = _cache()
        cache.put("k1", "first")
        cache.put("k1", "second!")
        assert cache.get("k1") == "second!"
        assert len(cache) == 1
        assert cache.size_bytes == 7

    def test_size_tracks_entries(self):
        cache = _cache()
        cache.put("k1", "abc")
        cache.put("k2", "de")
        assert cache.size_bytes == 5
        cache.remove("k1")
        assert cache.size_bytes == 2

    def test_clear(self):
        cache = _cache()
        cache.put("k1", "a")
        cache.put("k2", "b")
        cache.clear()
        assert len(cache) == 0
        assert cache.size_bytes == 0
        assert cache.get("k1") is None

    def test_keys_in_lru_order(self):
        cache = _cache()
        cache.put("a", "1")
        cache.put("b", "2")
        cache.get("a")
        assert cache.keys() == ["b", "a"]

    def test_total_never_exceeds_capacity(self):
        rng = random.Random(1234)
        cache = _cache(capacity=50)
        for i in range(500):
            cache.put(f"k{rng.randint(0, 40)}", "z" * rng.randint(0, 60))
            if i % 3 == 0:
                cache.get(f"k{rng.randint(0, 40)}")
            assert cache.size_bytes <= cache.capacity_bytes
            assert cache.size_bytes == sum(len(cache.get(k) or "") for k in cache.keys())

    def test_thread_safety(self):
        cache = _cache(capacity=40)

        def worker(start: int) -> None:
            for i in range(start, start + 200):
                cache.put(str(i % 25), "v" * (i % 7))
                cache.get(str((i + 3) % 25))

        threads = [threading.Thread(target=worker, args=(n * 200,)) for n in range(4)]
        for thread in threads:
            thread.start()
        for thread in threads:
            thread.join()

        assert cache.size_bytes <= cache.capacity_bytes


class TestImageMemoryCache:
    def test_sizes_by_pixel_buffer(self, image_factory):
        cache = image_memory_cache(capacity_bytes=10_000)
        cache.put("img", image_factory(10, 10, "RGBA"))
        assert cache.size_bytes == 400

    def test_default_capacity_from_process_memory(self, monkeypatch):
        monkeypatch.setattr("pixcache.cache.memory.default_memory_capacity", lambda f: 4096)
        cache = image_memory_cache()
        assert cache.capacity_bytes == 4096
