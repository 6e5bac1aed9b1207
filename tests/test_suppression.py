"""Tests for suppression cache module."""

import threading

import pytest
from pathlib import Path

from src.treesync.suppression import DEFAULT_CAPACITY, SuppressionCache


class TestSuppressionCache:
    """Tests for SuppressionCache class."""

    def test_default_capacity(self):
        assert SuppressionCache().capacity == DEFAULT_CAPACITY == 1000

    def test_invalid_capacity(self):
        with pytest.raises(ValueError):
            SuppressionCache(0)

    def test_insert_and_consume(self, tmp_path):
        cache = SuppressionCache()
        cache.insert(tmp_path / "x")

        assert tmp_path / "x" in cache
        assert cache.consume(tmp_path / "x") is True
        assert cache.consume(tmp_path / "x") is False
        assert len(cache) == 0

    def test_consume_unknown(self, tmp_path):
        cache = SuppressionCache()
        assert cache.consume(tmp_path / "never") is False

    def test_str_and_path_keys_match(self, tmp_path):
        cache = SuppressionCache()
        cache.insert(str(tmp_path / "x"))
        assert cache.consume(Path(tmp_path / "x")) is True

    def test_duplicate_insert(self, tmp_path):
        cache = SuppressionCache()
        cache.insert(tmp_path / "x")
        cache.insert(tmp_path / "x")
        assert len(cache) == 1

    def test_cleared_when_full(self, tmp_path):
        cache = SuppressionCache(capacity=3)
        for name in ("a", "b", "c"):
            cache.insert(tmp_path / name)
        assert len(cache) == 3

        cache.insert(tmp_path / "d")

        assert len(cache) == 1
        assert cache.clear_count == 1
        assert tmp_path / "d" in cache
        assert tmp_path / "a" not in cache

    def test_reinsert_existing_when_full(self, tmp_path):
        cache = SuppressionCache(capacity=2)
        cache.insert(tmp_path / "a")
        cache.insert(tmp_path / "b")

        cache.insert(tmp_path / "a")

        assert len(cache) == 2
        assert cache.clear_count == 0

    def test_discard(self, tmp_path):
        cache = SuppressionCache()
        cache.insert(tmp_path / "x")
        cache.discard(tmp_path / "x")
        cache.discard(tmp_path / "missing")
        assert len(cache) == 0

    def test_clear(self, tmp_path):
        cache = SuppressionCache()
        cache.insert(tmp_path / "a")
        cache.insert(tmp_path / "b")
        assert cache.clear() == 2
        assert len(cache) == 0

    def test_concurrent_inserts(self, tmp_path):
        cache = SuppressionCache(capacity=10000)

        def worker(n):
            for i in range(100):
                cache.insert(tmp_path / f"w{n}" / str(i))

        threads = [threading.Thread(target=worker, args=(n,)) for n in range(8)]
        for t in threads:
            t.start()
        for t in threads:
            t.join()

        assert len(cache) == 800
