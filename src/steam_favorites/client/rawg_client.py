"""RAWG video game database client.

Used as the secondary source of display names for Steam apps and for
browsing the wider game catalog.

Reference: https://api.rawg.io/docs/
"""

import logging
import os
from typing import Any

import httpx

from steam_favorites.client.cache import CacheCategory, TTLCache


logger = logging.getLogger(__name__)

# RAWG caps page_size at 40
MAX_PAGE_SIZE = 40


class RawgAPIError(Exception):
    """Transport or server error from the RAWG API."""

    def __init__(self, message: str, status_code: int | None = None):
        super().__init__(message)
        self.status_code = status_code


class RawgClient:
    """Async client for the RAWG games endpoints."""

    BASE_URL = "https://api.rawg.io/api"

    def __init__(
        self,
        api_key: str | None = None,
        timeout: float = 15.0,
        enable_cache: bool = True,
        cache_max_size: int = 1000,
    ):
        """
        Args:
            api_key: RAWG key. Falls back to RAWG_API_KEY; omitted from requests when unset.
            timeout: Request timeout in seconds.
            enable_cache: Cache successful responses (searches for
                CacheCategory.GAME_SEARCH, game records for GAME_DETAIL).
            cache_max_size: Maximum number of cached responses.
        """
        self.api_key = api_key or os.getenv("RAWG_API_KEY")
        self._cache: TTLCache | None = None
        if enable_cache:
            self._cache = TTLCache(
                default_ttl=CacheCategory.GAME_SEARCH.value, max_size=cache_max_size
            )
        self._client = httpx.AsyncClient(
            timeout=timeout,
            headers={"Accept": "application/json"},
        )

    async def close(self) -> None:
        await self._client.aclose()

    async def __aenter__(self) -> "RawgClient":
        return self

    async def __aexit__(self, *args: Any) -> None:
        await self.close()

    async def _get(
        self,
        path: str,
        params: dict[str, Any] | None = None,
        ttl: int | None = None,
    ) -> dict[str, Any]:
        """
        GET a RAWG resource, through the cache.

        Raises:
            RawgAPIError: On network failure, non-2xx status or a body that is
                not a JSON object. Failures are never cached.
        """
        params = dict(params or {})

        if self._cache:
            hit, cached = await self._cache.get(path, params)
            if hit:
                logger.debug(f"Cache hit for RAWG {path} {params}")
                return cached

        query = dict(params)
        if self.api_key:
            query["key"] = self.api_key

        try:
            response = await self._client.get(f"{self.BASE_URL}/{path}", params=query)
            response.raise_for_status()
            data = response.json()
        except httpx.HTTPStatusError as e:
            raise RawgAPIError(str(e), e.response.status_code) from e
        except httpx.HTTPError as e:
            raise RawgAPIError(f"Request error: {e}") from e
        except ValueError as e:
            raise RawgAPIError(f"Invalid JSON from RAWG: {e}") from e

        if not isinstance(data, dict):
            raise RawgAPIError(f"Malformed RAWG response for {path}")

        if self._cache:
            await self._cache.set(path, params, data, ttl)
        return data

    async def search_games(self, search: str, page_size: int = 1) -> list[dict[str, Any]]:
        """
        Search games by free text.

        Args:
            search: Search text, e.g. a title or "steam appid:440"
            page_size: Number of results to ask for

        Returns:
            The "results" list ({id, name, slug, ...} dicts), possibly empty

        Raises:
            RawgAPIError: On network failure, non-2xx status or undecodable body
        """
        data = await self._get("games", {"search": search, "page_size": page_size})
        results = data.get("results")
        return results if isinstance(results, list) else []

    async def list_games(
        self,
        page: int = 1,
        page_size: int = 20,
        search: str | None = None,
        ordering: str | None = None,
    ) -> dict[str, Any]:
        """
        One page of the RAWG game list.

        Args:
            page: 1-based page number
            page_size: Games per page (1-40)
            search: Optional free-text filter
            ordering: Optional RAWG ordering, e.g. "-rating" or "-released"

        Returns:
            The raw page ({"count", "next", "previous", "results"})
        """
        if page < 1:
            raise ValueError("page must be >= 1")
        params: dict[str, Any] = {
            "page": page,
            "page_size": max(1, min(page_size, MAX_PAGE_SIZE)),
        }
        if search:
            params["search"] = search
        if ordering:
            params["ordering"] = ordering
        return await self._get("games", params)

    async def get_game(self, game_id: int) -> dict[str, Any]:
        """
        Full record for one RAWG game (description, ratings, platforms...).

        Raises:
            RawgAPIError: status_code 404 when the id is unknown
        """
        return await self._get(f"games/{game_id}", ttl=CacheCategory.GAME_DETAIL.value)
