"""Turns stored favorite ids into display-ready favorites."""

import asyncio
import logging
from typing import Any

from steam_favorites.favorites.catalog import CatalogClient
from steam_favorites.favorites.coercion import coerce
from steam_favorites.favorites.models import (
    CatalogEntry,
    NameOutcome,
    NameResolution,
    ResolvedFavorite,
)
from steam_favorites.favorites.name_resolver import NameResolverClient


logger = logging.getLogger(__name__)


class FavoritesResolver:
    """
    Resolve a raw favorites value against the catalog and the name resolver.

    Steps:
    1. coerce the raw value to ids (no ids: return [] without any I/O)
    2. look the ids up in the catalog (failure propagates, nothing partial)
    3. resolve richer names for every entry concurrently, best-effort
    4. return entries in catalog name order, names replaced where resolved

    Each call starts from scratch; nothing is carried between calls.
    """

    def __init__(
        self,
        catalog: CatalogClient,
        names: NameResolverClient,
        max_concurrency: int | None = None,
    ):
        """
        Args:
            catalog: Catalog used to filter and order favorites.
            names: Secondary name source.
            max_concurrency: Cap on simultaneous name lookups (None: unbounded).
        """
        self.catalog = catalog
        self.names = names
        self._semaphore = (
            asyncio.Semaphore(max_concurrency) if max_concurrency else None
        )

    async def _resolve_one(self, entry: CatalogEntry) -> NameResolution:
        if self._semaphore is None:
            return await self.names.resolve(entry.app_id, fallback_name=entry.name)
        async with self._semaphore:
            return await self.names.resolve(entry.app_id, fallback_name=entry.name)

    async def resolve(self, raw_favorites: Any) -> list[ResolvedFavorite]:
        """
        Resolve a raw favorites value.

        Raises:
            SteamAPIError: If the catalog cannot be loaded.
        """
        ids = coerce(raw_favorites)
        if not ids:
            return []

        entries = await self.catalog.fetch_by_ids(ids)
        if not entries:
            return []

        results = await asyncio.gather(
            *(self._resolve_one(entry) for entry in entries),
            return_exceptions=True,
        )

        favorites = []
        for entry, result in zip(entries, results):
            if isinstance(result, asyncio.CancelledError):
                raise result
            if isinstance(result, BaseException):
                logger.warning(f"Name lookup for {entry.app_id} raised: {result!r}")
                result = NameResolution(entry.app_id, NameOutcome.ERROR, error=str(result))
            favorites.append(ResolvedFavorite.from_entry(entry, result))

        renamed = sum(1 for f in favorites if f.name != f.catalog_name)
        logger.debug(
            f"Resolved {len(favorites)} favorite(s) from {len(ids)} id(s), {renamed} renamed"
        )
        return favorites
