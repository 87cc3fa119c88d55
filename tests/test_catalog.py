"""Tests for CatalogClient."""

import asyncio
from unittest.mock import AsyncMock, MagicMock, patch

import pytest

from steam_favorites.client.steam_client import SteamAPIError
from steam_favorites.favorites.catalog import CatalogClient, fold
from steam_favorites.favorites.models import CatalogEntry


APPS = [
    {"appid": 440, "name": "Team Fortress 2"},
    {"appid": 10, "name": "counter-Strike"},
    {"appid": 2050650, "name": "Pokémon Go Companion"},
    {"appid": 730, "name": "Counter-Strike 2"},
    {"appid": 0, "name": "Zero Id"},
    {"appid": 999, "name": ""},
    {"appid": -3, "name": "Negative"},
    {"appid": 570, "name": "Dota 2"},
    {"appid": 440, "name": "Duplicate TF2"},
    {"name": "No Id"},
]


@pytest.fixture
def mock_steam():
    """Create mock Steam client."""
    steam = MagicMock()
    steam.get_app_list = AsyncMock(return_value=list(APPS))
    return steam


@pytest.fixture
def catalog(mock_steam):
    """CatalogClient with a long TTL."""
    return CatalogClient(mock_steam, ttl=3600)


class TestFold:
    """Tests for the diacritic/case folding helper."""

    def test_strips_accents_and_case(self):
        assert fold("Pokémon GO") == "pokemon go"

    def test_casefold_sharp_s(self):
        assert fold("STRASSE") == fold("straße")


class TestFetchAll:
    """Tests for fetch_all."""

    @pytest.mark.asyncio
    async def test_discards_invalid_entries(self, catalog):
        entries = await catalog.fetch_all()

        ids = [e.app_id for e in entries]
        assert ids == [440, 10, 2050650, 730, 570]

    @pytest.mark.asyncio
    async def test_duplicate_id_keeps_first(self, catalog):
        entries = await catalog.fetch_all()

        tf2 = [e for e in entries if e.app_id == 440]
        assert tf2 == [CatalogEntry(440, "Team Fortress 2")]

    @pytest.mark.asyncio
    async def test_cached_after_first_fetch(self, catalog, mock_steam):
        await catalog.fetch_all()
        await catalog.fetch_all()

        assert mock_steam.get_app_list.call_count == 1
        assert catalog.is_loaded

    @pytest.mark.asyncio
    async def test_concurrent_callers_share_one_request(self, catalog, mock_steam):
        """Concurrent fetch_all calls must not issue duplicate downloads."""
        release = asyncio.Event()

        async def slow_app_list():
            await release.wait()
            return list(APPS)

        mock_steam.get_app_list.side_effect = slow_app_list

        waiters = [asyncio.ensure_future(catalog.fetch_all()) for _ in range(10)]
        await asyncio.sleep(0)
        release.set()
        results = await asyncio.gather(*waiters)

        assert mock_steam.get_app_list.call_count == 1
        assert all(r is results[0] for r in results)

    @pytest.mark.asyncio
    async def test_failure_propagates_and_is_not_cached(self, catalog, mock_steam):
        mock_steam.get_app_list.side_effect = [SteamAPIError("down", 503), list(APPS)]

        with pytest.raises(SteamAPIError):
            await catalog.fetch_all()
        entries = await catalog.fetch_all()

        assert len(entries) == 5
        assert mock_steam.get_app_list.call_count == 2

    @pytest.mark.asyncio
    async def test_invalidate_forces_refetch(self, catalog, mock_steam):
        await catalog.fetch_all()
        catalog.invalidate()
        assert not catalog.is_loaded
        await catalog.fetch_all()

        assert mock_steam.get_app_list.call_count == 2

    @pytest.mark.asyncio
    async def test_ttl_expiry_forces_refetch(self, mock_steam):
        catalog = CatalogClient(mock_steam, ttl=0)
        await catalog.fetch_all()
        await asyncio.sleep(0.01)
        await catalog.fetch_all()

        assert mock_steam.get_app_list.call_count == 2

    def test_ttl_from_env(self, mock_steam):
        with patch.dict("os.environ", {"STEAM_CATALOG_TTL": "60"}):
            catalog = CatalogClient(mock_steam)
        assert catalog.ttl == 60.0


class TestSearch:
    """Tests for search."""

    @pytest.mark.asyncio
    async def test_empty_query_sorted_case_insensitively(self, catalog):
        results = await catalog.search("", limit=3)

        assert [e.name for e in results] == [
            "counter-Strike",
            "Counter-Strike 2",
            "Dota 2",
        ]

    @pytest.mark.asyncio
    async def test_whitespace_query_treated_as_empty(self, catalog):
        results = await catalog.search("   ", limit=100)

        names = [e.name for e in results]
        assert names == sorted(names, key=str.casefold)
        assert len(results) == 5

    @pytest.mark.asyncio
    async def test_diacritic_insensitive_match(self, catalog):
        results = await catalog.search("pokemon")

        assert [e.app_id for e in results] == [2050650]

    @pytest.mark.asyncio
    async def test_accented_query_matches_plain_name(self, catalog):
        results = await catalog.search("FÖRTRESS")

        assert [e.app_id for e in results] == [440]

    @pytest.mark.asyncio
    async def test_matches_in_catalog_order_truncated(self, catalog):
        results = await catalog.search("counter", limit=1)

        assert [e.app_id for e in results] == [10]

    @pytest.mark.asyncio
    async def test_no_match(self, catalog):
        assert await catalog.search("half-life") == []

    @pytest.mark.asyncio
    async def test_non_positive_limit(self, catalog):
        assert await catalog.search("counter", limit=0) == []

    @pytest.mark.asyncio
    async def test_idempotent(self, catalog):
        assert await catalog.search("2") == await catalog.search("2")


class TestFetchByIds:
    """Tests for fetch_by_ids and get."""

    @pytest.mark.asyncio
    async def test_filters_and_sorts_by_name(self, catalog):
        results = await catalog.fetch_by_ids([570, 440, 730])

        assert [e.name for e in results] == ["Counter-Strike 2", "Dota 2", "Team Fortress 2"]

    @pytest.mark.asyncio
    async def test_unknown_ids_dropped(self, catalog):
        results = await catalog.fetch_by_ids([440, 7, 123456])

        assert [e.app_id for e in results] == [440]

    @pytest.mark.asyncio
    async def test_duplicates_collapse(self, catalog):
        results = await catalog.fetch_by_ids([440, 440, 440])

        assert len(results) == 1

    @pytest.mark.asyncio
    async def test_empty_ids_skip_fetch(self, catalog, mock_steam):
        assert await catalog.fetch_by_ids([]) == []
        mock_steam.get_app_list.assert_not_called()

    @pytest.mark.asyncio
    async def test_get_single(self, catalog):
        assert await catalog.get(570) == CatalogEntry(570, "Dota 2")
        assert await catalog.get(1) is None
