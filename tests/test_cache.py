"""Tests for TTLCache and SingleFlight."""

import asyncio
from unittest.mock import AsyncMock

import pytest

from steam_favorites.client.cache import CacheCategory, CacheEntry, SingleFlight, TTLCache


class TestTTLCache:
    """Tests for TTLCache class."""

    @pytest.fixture
    def cache(self):
        """Create a cache instance for testing."""
        return TTLCache(default_ttl=60, max_size=100)

    @pytest.mark.asyncio
    async def test_set_and_get_basic(self, cache):
        """Basic set and get should work."""
        await cache.set("games", {"search": "portal"}, [{"name": "Portal"}])

        hit, value = await cache.get("games", {"search": "portal"})

        assert hit is True
        assert value == [{"name": "Portal"}]

    @pytest.mark.asyncio
    async def test_get_miss_returns_none(self, cache):
        """Cache miss should return (False, None)."""
        hit, value = await cache.get("nonexistent", None)

        assert hit is False
        assert value is None

    @pytest.mark.asyncio
    async def test_param_order_does_not_matter(self, cache):
        """Params are keyed independently of insertion order."""
        await cache.set("news", {"appid": 440, "count": 5}, "cached")

        hit, value = await cache.get("news", {"count": 5, "appid": 440})

        assert hit is True
        assert value == "cached"

    @pytest.mark.asyncio
    async def test_different_params_different_keys(self, cache):
        """Same endpoint with different params should be cached separately."""
        await cache.set("news", {"appid": 1}, "one")
        await cache.set("news", {"appid": 2}, "two")

        assert await cache.get("news", {"appid": 1}) == (True, "one")
        assert await cache.get("news", {"appid": 2}) == (True, "two")

    @pytest.mark.asyncio
    async def test_expired_entry_returns_miss(self, cache):
        """Expired entries should return cache miss and be dropped."""
        await cache.set("news", None, "stale", ttl=0)
        await asyncio.sleep(0.01)

        hit, value = await cache.get("news", None)

        assert hit is False
        assert value is None
        assert cache.stats["size"] == 0

    @pytest.mark.asyncio
    async def test_full_cache_purges_expired(self):
        """Reaching max_size purges expired entries before inserting."""
        cache = TTLCache(default_ttl=60, max_size=2)
        await cache.set("old", None, 1, ttl=0)
        await cache.set("keep", None, 2)
        await asyncio.sleep(0.01)

        await cache.set("new", None, 3)

        assert cache.stats["size"] == 2
        assert (await cache.get("keep"))[0] is True
        assert (await cache.get("new"))[0] is True

    @pytest.mark.asyncio
    async def test_stats_track_hits_and_misses(self, cache):
        """Stats should count hits and misses."""
        await cache.set("a", None, 1)
        await cache.get("a")
        await cache.get("b")

        stats = cache.stats
        assert stats["hits"] == 1
        assert stats["misses"] == 1
        assert stats["hit_rate"] == 50.0

    def test_stats_empty_cache(self, cache):
        """Hit rate is 0 before any lookup."""
        assert cache.stats["hit_rate"] == 0.0


class TestCacheEntry:
    """Tests for CacheEntry expiry."""

    def test_expired_compares_against_now(self):
        entry = CacheEntry(value=1, expires_at=100.0)

        assert entry.expired(now=100.5) is True
        assert entry.expired(now=99.0) is False


class TestCacheCategory:
    """Tests for cache TTL categories."""

    def test_app_list_ttl_is_one_day(self):
        assert CacheCategory.APP_LIST.value == 86400

    def test_news_ttl_is_five_minutes(self):
        assert CacheCategory.NEWS.value == 300

    def test_game_search_ttl_is_one_hour(self):
        assert CacheCategory.GAME_SEARCH.value == 3600


class TestSingleFlight:
    """Tests for SingleFlight."""

    @pytest.mark.asyncio
    async def test_concurrent_callers_share_one_load(self):
        """Callers arriving during a load await the same call."""
        flight = SingleFlight()
        calls = 0
        release = asyncio.Event()

        async def loader():
            nonlocal calls
            calls += 1
            await release.wait()
            return "catalog"

        waiters = [asyncio.ensure_future(flight.do("k", loader)) for _ in range(5)]
        await asyncio.sleep(0)
        assert flight.in_flight("k")
        release.set()
        results = await asyncio.gather(*waiters)

        assert results == ["catalog"] * 5
        assert calls == 1

    @pytest.mark.asyncio
    async def test_key_released_after_completion(self):
        """A later call starts a fresh load."""
        flight = SingleFlight()
        loader = AsyncMock(side_effect=["first", "second"])

        assert await flight.do("k", loader) == "first"
        await asyncio.sleep(0)
        assert not flight.in_flight("k")
        assert await flight.do("k", loader) == "second"
        assert loader.call_count == 2

    @pytest.mark.asyncio
    async def test_failure_reaches_all_waiters_and_is_not_kept(self):
        """Every waiter sees the error; the next call retries."""
        flight = SingleFlight()
        release = asyncio.Event()
        attempts = 0

        async def loader():
            nonlocal attempts
            attempts += 1
            await release.wait()
            if attempts == 1:
                raise RuntimeError("boom")
            return "ok"

        waiters = [asyncio.ensure_future(flight.do("k", loader)) for _ in range(3)]
        await asyncio.sleep(0)
        release.set()
        results = await asyncio.gather(*waiters, return_exceptions=True)

        assert all(isinstance(r, RuntimeError) for r in results)
        await asyncio.sleep(0)
        assert await flight.do("k", loader) == "ok"
        assert attempts == 2

    @pytest.mark.asyncio
    async def test_cancelled_waiter_does_not_cancel_load(self):
        """Cancelling one waiter leaves the shared load running for others."""
        flight = SingleFlight()
        release = asyncio.Event()

        async def loader():
            await release.wait()
            return 42

        first = asyncio.ensure_future(flight.do("k", loader))
        second = asyncio.ensure_future(flight.do("k", loader))
        await asyncio.sleep(0)
        first.cancel()
        release.set()

        assert await second == 42
        with pytest.raises(asyncio.CancelledError):
            await first
