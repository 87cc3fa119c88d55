"""Cached Steam app catalog with search and id lookup."""

import logging
import os
import time
import unicodedata
from collections.abc import Iterable

from steam_favorites.client.cache import CacheCategory, SingleFlight
from steam_favorites.client.steam_client import SteamClient
from steam_favorites.favorites.models import CatalogEntry, FavoriteId


logger = logging.getLogger(__name__)

DEFAULT_SEARCH_LIMIT = 50


def fold(text: str) -> str:
    """Case- and diacritic-insensitive form of a string ("Pokémon" -> "pokemon")."""
    decomposed = unicodedata.normalize("NFKD", text)
    stripped = "".join(c for c in decomposed if not unicodedata.combining(c))
    return stripped.casefold()


def _name_key(entry: CatalogEntry) -> tuple[str, int]:
    return (entry.name.casefold(), entry.app_id)


class CatalogClient:
    """
    The full Steam app catalog (id -> name), fetched once and kept in memory.

    The catalog is refetched when older than `ttl` seconds or after
    `invalidate()`. Concurrent callers arriving while a fetch is running
    share that fetch instead of starting their own.
    """

    _FLIGHT_KEY = "app_list"

    def __init__(self, steam: SteamClient, ttl: float | None = None):
        """
        Args:
            steam: Client used to download the app list.
            ttl: Seconds before the cached catalog is considered stale.
                 Falls back to STEAM_CATALOG_TTL, then CacheCategory.APP_LIST.
        """
        self.steam = steam
        if ttl is None:
            ttl = float(os.getenv("STEAM_CATALOG_TTL", CacheCategory.APP_LIST.value))
        self.ttl = ttl
        self._entries: tuple[CatalogEntry, ...] | None = None
        self._by_id: dict[int, CatalogEntry] = {}
        self._loaded_at = 0.0
        self._flight: SingleFlight[tuple[CatalogEntry, ...]] = SingleFlight()

    @property
    def is_loaded(self) -> bool:
        return self._entries is not None and not self._is_stale()

    def _is_stale(self) -> bool:
        return time.monotonic() - self._loaded_at > self.ttl

    def invalidate(self) -> None:
        """Drop the cached catalog; the next call refetches it."""
        self._entries = None
        self._by_id = {}
        logger.debug("Catalog cache invalidated")

    async def fetch_all(self) -> tuple[CatalogEntry, ...]:
        """
        Return every catalog entry in catalog order.

        Raises:
            SteamAPIError: If the catalog has to be downloaded and that fails.
        """
        if self._entries is not None and not self._is_stale():
            return self._entries
        return await self._flight.do(self._FLIGHT_KEY, self._load)

    async def _load(self) -> tuple[CatalogEntry, ...]:
        started = time.monotonic()
        raw_apps = await self.steam.get_app_list()

        by_id: dict[int, CatalogEntry] = {}
        for raw in raw_apps:
            entry = CatalogEntry.from_api(raw)
            if entry is not None and entry.app_id not in by_id:
                by_id[entry.app_id] = entry

        entries = tuple(by_id.values())
        self._entries = entries
        self._by_id = by_id
        self._loaded_at = time.monotonic()
        logger.info(
            f"Loaded {len(entries)} catalog entries "
            f"({len(raw_apps) - len(entries)} discarded) "
            f"in {self._loaded_at - started:.2f}s"
        )
        return entries

    async def search(self, query: str, limit: int = DEFAULT_SEARCH_LIMIT) -> list[CatalogEntry]:
        """
        Search the catalog by name.

        A blank query lists the catalog alphabetically. Otherwise entries whose
        name contains the query, ignoring case and accents, are returned in
        catalog order. Both are truncated to `limit`.
        """
        if limit <= 0:
            return []
        entries = await self.fetch_all()

        if not query or not query.strip():
            return sorted(entries, key=_name_key)[:limit]

        needle = fold(query.strip())
        matches = []
        for entry in entries:
            if needle in fold(entry.name):
                matches.append(entry)
                if len(matches) >= limit:
                    break
        return matches

    async def fetch_by_ids(self, ids: Iterable[FavoriteId]) -> list[CatalogEntry]:
        """
        Catalog entries for the given ids, sorted by name ignoring case.

        Ids missing from the catalog are dropped; repeated ids yield one entry.
        """
        wanted = set(ids)
        if not wanted:
            return []
        index = self._index(await self.fetch_all())
        found = [index[i] for i in wanted if i in index]
        missing = len(wanted) - len(found)
        if missing:
            logger.debug(f"{missing} favorite id(s) not present in catalog")
        return sorted(found, key=_name_key)

    async def get(self, app_id: int) -> CatalogEntry | None:
        """Look up a single app by id."""
        index = self._index(await self.fetch_all())
        return index.get(app_id)

    def _index(self, entries: tuple[CatalogEntry, ...]) -> dict[int, CatalogEntry]:
        # entries may come from a load that has since been invalidated
        if entries is self._entries:
            return self._by_id
        return {e.app_id: e for e in entries}
