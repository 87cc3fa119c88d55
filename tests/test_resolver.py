"""Tests for FavoritesResolver."""

import asyncio
import time
from unittest.mock import AsyncMock, MagicMock

import pytest

from steam_favorites.client.steam_client import SteamAPIError
from steam_favorites.favorites.catalog import CatalogClient
from steam_favorites.favorites.models import (
    NameOutcome,
    NameResolution,
    ResolvedFavorite,
    steam_capsule_url,
)
from steam_favorites.favorites.name_resolver import NameResolverClient
from steam_favorites.favorites.resolver import FavoritesResolver


def make_catalog(apps):
    steam = MagicMock()
    steam.get_app_list = AsyncMock(return_value=apps)
    return CatalogClient(steam, ttl=3600), steam


def make_names(**by_id):
    """Stub NameResolverClient answering from {"app<id>": name | exception}."""
    names = MagicMock(spec=NameResolverClient)

    async def resolve(app_id, fallback_name=None):
        name = by_id.get(f"app{app_id}")
        if isinstance(name, Exception):
            return NameResolution(app_id, NameOutcome.ERROR, error=str(name))
        if name:
            return NameResolution(app_id, NameOutcome.MATCHED, name=name)
        return NameResolution(app_id, NameOutcome.NO_MATCH)

    names.resolve = AsyncMock(side_effect=resolve)
    return names


class TestResolve:
    """Tests for resolve."""

    @pytest.mark.asyncio
    async def test_empty_input_makes_no_calls(self):
        catalog_steam = MagicMock()
        catalog_steam.get_app_list = AsyncMock()
        names = make_names()
        resolver = FavoritesResolver(CatalogClient(catalog_steam), names)

        assert await resolver.resolve([]) == []
        catalog_steam.get_app_list.assert_not_called()
        names.resolve.assert_not_called()

    @pytest.mark.asyncio
    async def test_garbage_input_makes_no_calls(self):
        catalog, steam = make_catalog([])
        resolver = FavoritesResolver(catalog, make_names())

        assert await resolver.resolve(["abc", None]) == []
        steam.get_app_list.assert_not_called()

    @pytest.mark.asyncio
    async def test_resolver_failure_keeps_catalog_name(self):
        """[42, 7]: 42 in catalog with failing lookup, 7 unknown."""
        catalog, _ = make_catalog([{"appid": 42, "name": "Alpha"}])
        names = make_names(app42=RuntimeError("RAWG down"))
        resolver = FavoritesResolver(catalog, names)

        result = await resolver.resolve([42, 7])

        assert [(f.app_id, f.name) for f in result] == [(42, "Alpha")]
        assert result[0].name_outcome is NameOutcome.ERROR

    @pytest.mark.asyncio
    async def test_names_replaced_without_reordering(self):
        catalog, _ = make_catalog(
            [
                {"appid": 1, "name": "alpha"},
                {"appid": 2, "name": "Bravo"},
                {"appid": 3, "name": "charlie"},
            ]
        )
        names = make_names(app1="Zulu Deluxe", app3="Aardvark")
        resolver = FavoritesResolver(catalog, names)

        result = await resolver.resolve(["3", 2, "1"])

        assert [f.app_id for f in result] == [1, 2, 3]
        assert [f.name for f in result] == ["Zulu Deluxe", "Bravo", "Aardvark"]
        assert [f.catalog_name for f in result] == ["alpha", "Bravo", "charlie"]

    @pytest.mark.asyncio
    async def test_passes_catalog_name_as_fallback(self):
        catalog, _ = make_catalog([{"appid": 440, "name": "Team Fortress 2"}])
        names = make_names()
        resolver = FavoritesResolver(catalog, names)

        await resolver.resolve([440])

        names.resolve.assert_awaited_once_with(440, fallback_name="Team Fortress 2")

    @pytest.mark.asyncio
    async def test_unexpected_exception_isolated(self):
        """One lookup raising does not affect the others."""
        catalog, _ = make_catalog(
            [{"appid": 1, "name": "One"}, {"appid": 2, "name": "Two"}]
        )
        names = MagicMock()

        async def resolve(app_id, fallback_name=None):
            if app_id == 1:
                raise KeyError("boom")
            return NameResolution(app_id, NameOutcome.MATCHED, name="Two Remastered")

        names.resolve = AsyncMock(side_effect=resolve)
        resolver = FavoritesResolver(catalog, names)

        result = await resolver.resolve([1, 2])

        assert result == [
            ResolvedFavorite(1, "One", "One", NameOutcome.ERROR, steam_capsule_url(1)),
            ResolvedFavorite(
                2, "Two Remastered", "Two", NameOutcome.MATCHED, steam_capsule_url(2)
            ),
        ]

    @pytest.mark.asyncio
    async def test_catalog_failure_propagates(self):
        steam = MagicMock()
        steam.get_app_list = AsyncMock(side_effect=SteamAPIError("timeout"))
        names = make_names()
        resolver = FavoritesResolver(CatalogClient(steam), names)

        with pytest.raises(SteamAPIError):
            await resolver.resolve([440])
        names.resolve.assert_not_called()

    @pytest.mark.asyncio
    async def test_restartable(self):
        catalog, _ = make_catalog([{"appid": 5, "name": "Five"}])
        resolver = FavoritesResolver(catalog, make_names(app5="Five!"))

        first = await resolver.resolve([5])
        second = await resolver.resolve([5])

        assert first == second


class TestConcurrency:
    """Name lookups run concurrently."""

    @staticmethod
    def _slow_names(delay, tracker):
        names = MagicMock()

        async def resolve(app_id, fallback_name=None):
            tracker["active"] += 1
            tracker["peak"] = max(tracker["peak"], tracker["active"])
            await asyncio.sleep(delay)
            tracker["active"] -= 1
            return NameResolution(app_id, NameOutcome.MATCHED, name=f"Game {app_id}")

        names.resolve = AsyncMock(side_effect=resolve)
        return names

    @pytest.mark.asyncio
    async def test_fifty_lookups_take_about_one_lookup(self):
        apps = [{"appid": i, "name": f"App {i:02d}"} for i in range(1, 51)]
        catalog, _ = make_catalog(apps)
        await catalog.fetch_all()
        tracker = {"active": 0, "peak": 0}
        resolver = FavoritesResolver(catalog, self._slow_names(0.2, tracker))

        started = time.monotonic()
        result = await resolver.resolve(list(range(1, 51)))
        elapsed = time.monotonic() - started

        assert len(result) == 50
        assert tracker["peak"] == 50
        # Serial execution would take 10s
        assert elapsed < 1.0

    @pytest.mark.asyncio
    async def test_max_concurrency_caps_parallel_lookups(self):
        apps = [{"appid": i, "name": f"App {i}"} for i in range(1, 11)]
        catalog, _ = make_catalog(apps)
        tracker = {"active": 0, "peak": 0}
        resolver = FavoritesResolver(
            catalog, self._slow_names(0.01, tracker), max_concurrency=3
        )

        result = await resolver.resolve(list(range(1, 11)))

        assert len(result) == 10
        assert tracker["peak"] == 3

    @pytest.mark.asyncio
    async def test_cancellation_cancels_lookups(self):
        catalog, _ = make_catalog([{"appid": 1, "name": "One"}, {"appid": 2, "name": "Two"}])
        cancelled = []
        names = MagicMock()

        async def resolve(app_id, fallback_name=None):
            try:
                await asyncio.sleep(10)
            except asyncio.CancelledError:
                cancelled.append(app_id)
                raise

        names.resolve = AsyncMock(side_effect=resolve)
        resolver = FavoritesResolver(catalog, names)

        task = asyncio.ensure_future(resolver.resolve([1, 2]))
        await asyncio.sleep(0.05)
        task.cancel()

        with pytest.raises(asyncio.CancelledError):
            await task
        assert sorted(cancelled) == [1, 2]
