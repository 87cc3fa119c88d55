"""Steam news (patch notes and announcements) for apps and favorites."""

import asyncio
import logging
from collections.abc import Iterable

from steam_favorites.client.steam_client import SteamAPIError, SteamClient
from steam_favorites.favorites.models import NewsItem, ResolvedFavorite


logger = logging.getLogger(__name__)

MAX_NEWS_COUNT = 25


class NewsClient:
    """Reads ISteamNews/GetNewsForApp."""

    def __init__(self, steam: SteamClient):
        self.steam = steam

    async def fetch_news(
        self, app_id: int, count: int = 10, max_length: int = 10000
    ) -> list[NewsItem]:
        """
        Latest news items for an app, newest first.

        Args:
            app_id: Steam app id
            count: Number of items (clamped to 1..25)
            max_length: Content excerpt length, 0 for full content

        Raises:
            SteamAPIError: On transport or server failure.
        """
        count = max(1, min(count, MAX_NEWS_COUNT))
        raw_items = await self.steam.get_news_for_app(
            app_id, count=count, max_length=max(0, max_length)
        )
        items = [NewsItem.from_api(raw) for raw in raw_items if isinstance(raw, dict)]
        return sorted(items, key=lambda item: item.date, reverse=True)

    async def fetch_favorites_news(
        self,
        favorites: Iterable[ResolvedFavorite],
        count: int = 3,
        max_length: int = 300,
    ) -> dict[int, list[NewsItem]]:
        """
        News for every favorite, fetched concurrently.

        An app whose feed cannot be fetched maps to an empty list; the
        other apps are unaffected.
        """
        app_ids = list(dict.fromkeys(f.app_id for f in favorites))

        async def fetch_one(app_id: int) -> list[NewsItem]:
            try:
                return await self.fetch_news(app_id, count=count, max_length=max_length)
            except SteamAPIError as e:
                logger.warning(f"News fetch failed for {app_id}: {e}")
                return []

        results = await asyncio.gather(*[fetch_one(aid) for aid in app_ids])
        return dict(zip(app_ids, results))
