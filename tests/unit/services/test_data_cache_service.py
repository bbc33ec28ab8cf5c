"""
Unit tests for the workspace data cache.
"""

import logging
from unittest.mock import Mock

import pytest

from timebill.services.data_cache_service import DataCache, cache_key, ttl_for


class FakeClock:
    def __init__(self, now: float = 1000.0):
        self.now = now

    def __call__(self) -> float:
        return self.now


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def cache(clock):
    cache = DataCache(clock=clock)
    yield cache
    cache.close()


class TestKeysAndTtls:
    """Test cases for key and TTL helpers."""

    def test_cache_key(self):
        assert cache_key("projects", "ws-1") == "projects-ws-1"

    @pytest.mark.parametrize(
        "resource,ttl",
        [
            ("projects", 300),
            ("clients", 300),
            ("timesheets", 120),
            ("invoices", 300),
            ("workspaceSettings", 600),
            ("somethingElse", 300),
        ],
    )
    def test_ttls(self, resource, ttl):
        assert ttl_for(resource) == ttl


class TestGetOrFetch:
    """Test cases for cached reads."""

    def test_miss_then_hit(self, cache):
        """Test that a fresh entry is returned without fetching."""
        fetcher = Mock(return_value=["p1"])

        assert cache.get_or_fetch("projects", "ws-1", fetcher) == ["p1"]
        assert cache.get_or_fetch("projects", "ws-1", fetcher) == ["p1"]
        assert fetcher.call_count == 1

    def test_expired_entry_refetched(self, cache, clock):
        """Test that entries expire after their resource TTL."""
        fetcher = Mock(side_effect=[["old"], ["new"]])
        cache.get_or_fetch("timesheets", "ws-1", fetcher)

        clock.now += 119
        assert cache.get_or_fetch("timesheets", "ws-1", fetcher) == ["old"]

        clock.now += 1
        assert cache.get_or_fetch("timesheets", "ws-1", fetcher) == ["new"]

    def test_ttl_override(self, cache, clock):
        fetcher = Mock(side_effect=[1, 2])
        cache.get_or_fetch("projects", "ws-1", fetcher, ttl=10)

        clock.now += 10

        assert cache.get_or_fetch("projects", "ws-1", fetcher) == 2

    def test_force_refresh(self, cache):
        """Test that force_refresh always calls the fetcher."""
        fetcher = Mock(side_effect=[1, 2])
        cache.get_or_fetch("projects", "ws-1", fetcher)

        assert cache.get_or_fetch("projects", "ws-1", fetcher, force_refresh=True) == 2

    def test_fetch_failure_propagates_and_caches_nothing(self, cache):
        """Test that a failed fetch leaves no entry behind."""
        failing = Mock(side_effect=RuntimeError("down"))

        with pytest.raises(RuntimeError):
            cache.get_or_fetch("projects", "ws-1", failing)

        assert not cache.is_fresh("projects", "ws-1")
        assert cache.get_statistics()["size"] == 0

    def test_workspaces_are_separate(self, cache):
        cache.get_or_fetch("projects", "ws-1", lambda: "a")

        assert cache.get_or_fetch("projects", "ws-2", lambda: "b") == "b"


class TestInvalidation:
    """Test cases for invalidation."""

    def test_invalidate_workspace(self, cache):
        """Test that only the workspace's entries are removed."""
        cache.get_or_fetch("projects", "ws-1", lambda: 1)
        cache.get_or_fetch("clients", "ws-1", lambda: 2)
        cache.get_or_fetch("projects", "ws-2", lambda: 3)

        assert cache.invalidate_workspace("ws-1") == 2
        assert not cache.is_fresh("projects", "ws-1")
        assert cache.is_fresh("projects", "ws-2")

    def test_invalidate_workspace_exact_id(self, cache):
        """Test that workspace "1" does not clear the entries of "ws-1"."""
        cache.get_or_fetch("projects", "ws-1", lambda: 1)
        cache.get_or_fetch("projects", "1", lambda: 2)

        assert cache.invalidate_workspace("1") == 1
        assert cache.is_fresh("projects", "ws-1")
        assert not cache.is_fresh("projects", "1")

    def test_invalidate_single(self, cache):
        cache.get_or_fetch("projects", "ws-1", lambda: 1)

        assert cache.invalidate("projects", "ws-1") is True
        assert cache.invalidate("projects", "ws-1") is False

    def test_clear(self, cache):
        cache.get_or_fetch("projects", "ws-1", lambda: 1)
        cache.get_or_fetch("projects", "ws-2", lambda: 1)

        cache.clear()

        assert cache.get_statistics()["size"] == 0


class TestPreload:
    """Test cases for background preloading."""

    def test_preload_fills_cache(self, cache):
        """Test that a preload stores the fetched data."""
        future = cache.preload("projects", "ws-1", lambda: ["p1"])
        future.result(timeout=5)

        fetcher = Mock()
        assert cache.get_or_fetch("projects", "ws-1", fetcher) == ["p1"]
        fetcher.assert_not_called()

    def test_preload_skipped_when_fresh(self, cache):
        cache.get_or_fetch("projects", "ws-1", lambda: 1)

        assert cache.preload("projects", "ws-1", lambda: 2) is None

    def test_preload_failure_logged_not_raised(self, cache, caplog):
        """Test that preload errors become warnings."""
        with caplog.at_level(logging.WARNING):
            future = cache.preload("projects", "ws-1", Mock(side_effect=RuntimeError("down")))
            future.result(timeout=5)

        assert future.exception() is None
        assert "Failed to preload projects" in caplog.text

    def test_preload_after_close(self, clock):
        cache = DataCache(clock=clock)
        cache.close()

        assert cache.preload("projects", "ws-1", lambda: 1) is None


class TestStatistics:
    """Test cases for statistics."""

    def test_hit_rate(self, cache):
        cache.get_or_fetch("projects", "ws-1", lambda: 1)
        cache.get_or_fetch("projects", "ws-1", lambda: 1)

        stats = cache.get_statistics()

        assert stats["hits"] == 1
        assert stats["misses"] == 1
        assert stats["fetches"] == 1
        assert stats["hit_rate_pct"] == 50.0
        assert stats["size"] == 1

    def test_context_manager_closes(self, clock):
        with DataCache(clock=clock) as cache:
            cache.get_or_fetch("projects", "ws-1", lambda: 1)

        assert cache.get_statistics()["size"] == 0
