"""Browsing outside the user's favorites: the RAWG game list and giveaways."""

import logging

from steam_favorites.client.gamerpower_client import GamerPowerClient
from steam_favorites.client.rawg_client import MAX_PAGE_SIZE, RawgAPIError, RawgClient
from steam_favorites.favorites.models import GameDetail, GamePage, Giveaway


logger = logging.getLogger(__name__)

DEFAULT_PAGE_SIZE = 20


class GameBrowser:
    """Paged game list and game records from RAWG."""

    def __init__(self, rawg: RawgClient):
        self.rawg = rawg

    async def browse(
        self,
        page: int = 1,
        page_size: int = DEFAULT_PAGE_SIZE,
        search: str | None = None,
        ordering: str | None = None,
    ) -> GamePage:
        """
        Fetch one page of games.

        Raises:
            ValueError: If page < 1
            RawgAPIError: On transport or server failure
        """
        page_size = max(1, min(page_size, MAX_PAGE_SIZE))
        search = search.strip() if search else None
        raw = await self.rawg.list_games(
            page=page, page_size=page_size, search=search, ordering=ordering
        )
        return GamePage.from_api(raw, page=page, page_size=page_size)

    async def detail(self, game_id: int) -> GameDetail | None:
        """
        Full record for one game, or None when RAWG does not know the id.

        Raises:
            RawgAPIError: On any failure other than 404
        """
        try:
            raw = await self.rawg.get_game(game_id)
        except RawgAPIError as e:
            if e.status_code == 404:
                logger.debug(f"RAWG has no game {game_id}")
                return None
            raise
        return GameDetail.from_api(raw)


class GiveawayFeed:
    """Live giveaways from GamerPower."""

    def __init__(self, gamerpower: GamerPowerClient):
        self.gamerpower = gamerpower

    async def current(
        self,
        platform: str | None = None,
        giveaway_type: str | None = None,
        sort_by: str | None = None,
        limit: int | None = None,
    ) -> list[Giveaway]:
        raw = await self.gamerpower.get_giveaways(
            platform=platform, giveaway_type=giveaway_type, sort_by=sort_by
        )
        giveaways = [g for g in map(Giveaway.from_api, raw) if g is not None]
        if limit is not None:
            giveaways = giveaways[: max(0, limit)]
        return giveaways
