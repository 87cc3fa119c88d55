"""GamerPower giveaways client.

GamerPower lists free games, DLC and beta keys currently being given away
across stores. No key is required.

Reference: https://www.gamerpower.com/api-read
"""

import logging
from typing import Any

import httpx

from steam_favorites.client.cache import CacheCategory, TTLCache


logger = logging.getLogger(__name__)

SORT_OPTIONS = ("date", "value", "popularity")
TYPE_OPTIONS = ("game", "loot", "beta")


class GamerPowerAPIError(Exception):
    """Transport or server error from the GamerPower API."""

    def __init__(self, message: str, status_code: int | None = None):
        super().__init__(message)
        self.status_code = status_code


class GamerPowerClient:
    """Async client for the GamerPower giveaways feed."""

    BASE_URL = "https://www.gamerpower.com/api"

    def __init__(
        self,
        timeout: float = 15.0,
        enable_cache: bool = True,
        cache_max_size: int = 100,
    ):
        self._cache: TTLCache | None = None
        if enable_cache:
            self._cache = TTLCache(
                default_ttl=CacheCategory.GIVEAWAYS.value, max_size=cache_max_size
            )
        self._client = httpx.AsyncClient(
            timeout=timeout,
            headers={"Accept": "application/json"},
        )

    async def close(self) -> None:
        await self._client.aclose()

    async def __aenter__(self) -> "GamerPowerClient":
        return self

    async def __aexit__(self, *args: Any) -> None:
        await self.close()

    async def get_giveaways(
        self,
        platform: str | None = None,
        giveaway_type: str | None = None,
        sort_by: str | None = None,
    ) -> list[dict[str, Any]]:
        """
        Live giveaways, optionally filtered.

        Args:
            platform: Store/platform slug, e.g. "steam", "epic-games-store", "pc"
            giveaway_type: One of "game", "loot", "beta"
            sort_by: One of "date", "value", "popularity"

        Returns:
            Raw giveaway dicts; empty when nothing is running

        Raises:
            GamerPowerAPIError: On network failure, non-2xx status or undecodable body
            ValueError: On an unknown type or sort option
        """
        if giveaway_type and giveaway_type not in TYPE_OPTIONS:
            raise ValueError(f"Unknown giveaway type: {giveaway_type}")
        if sort_by and sort_by not in SORT_OPTIONS:
            raise ValueError(f"Unknown sort option: {sort_by}")

        params: dict[str, Any] = {}
        if platform:
            params["platform"] = platform
        if giveaway_type:
            params["type"] = giveaway_type
        if sort_by:
            params["sort-by"] = sort_by

        if self._cache:
            hit, cached = await self._cache.get("giveaways", params)
            if hit:
                logger.debug(f"Cache hit for giveaways {params}")
                return cached

        try:
            response = await self._client.get(f"{self.BASE_URL}/giveaways", params=params)
            response.raise_for_status()
            data = response.json()
        except httpx.HTTPStatusError as e:
            raise GamerPowerAPIError(str(e), e.response.status_code) from e
        except httpx.HTTPError as e:
            raise GamerPowerAPIError(f"Request error: {e}") from e
        except ValueError as e:
            raise GamerPowerAPIError(f"Invalid JSON from GamerPower: {e}") from e

        # An empty feed comes back as {"status": 0, "status_message": "..."}
        if isinstance(data, dict):
            logger.info(f"No giveaways: {data.get('status_message', 'empty response')}")
            data = []
        elif not isinstance(data, list):
            raise GamerPowerAPIError("Malformed giveaways response")

        if self._cache:
            await self._cache.set("giveaways", params, data)
        return data
