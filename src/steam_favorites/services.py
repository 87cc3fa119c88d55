"""Construction of the service graph.

Every client and service is built here once and handed to whoever needs
it; nothing below this module reaches for a global instance.
"""

from dataclasses import dataclass

from steam_favorites.client import GamerPowerClient, RawgClient, SteamClient
from steam_favorites.favorites.auth import AuthProvider, EnvAuthProvider
from steam_favorites.favorites.browse import GameBrowser, GiveawayFeed
from steam_favorites.favorites.catalog import CatalogClient
from steam_favorites.favorites.name_resolver import NameResolverClient
from steam_favorites.favorites.news import NewsClient
from steam_favorites.favorites.resolver import FavoritesResolver
from steam_favorites.favorites.service import FavoritesService
from steam_favorites.favorites.store import FavoriteStore, JsonFileFavoriteStore


@dataclass
class Services:
    """Everything the endpoints talk to."""

    steam: SteamClient
    rawg: RawgClient
    gamerpower: GamerPowerClient
    catalog: CatalogClient
    names: NameResolverClient
    news: NewsClient
    favorites: FavoritesService
    games: GameBrowser
    giveaways: GiveawayFeed

    @classmethod
    def create(
        cls,
        steam: SteamClient | None = None,
        rawg: RawgClient | None = None,
        gamerpower: GamerPowerClient | None = None,
        auth: AuthProvider | None = None,
        store: FavoriteStore | None = None,
        catalog_ttl: float | None = None,
        max_name_lookups: int | None = None,
        keep_previous_on_error: bool = False,
    ) -> "Services":
        """Build the graph, filling unset collaborators from the environment."""
        steam = steam or SteamClient()
        rawg = rawg or RawgClient()
        gamerpower = gamerpower or GamerPowerClient()
        catalog = CatalogClient(steam, ttl=catalog_ttl)
        names = NameResolverClient(rawg)
        resolver = FavoritesResolver(catalog, names, max_concurrency=max_name_lookups)
        favorites = FavoritesService(
            auth or EnvAuthProvider(),
            store or JsonFileFavoriteStore(),
            resolver,
            keep_previous_on_error=keep_previous_on_error,
        )
        return cls(
            steam=steam,
            rawg=rawg,
            gamerpower=gamerpower,
            catalog=catalog,
            names=names,
            news=NewsClient(steam),
            favorites=favorites,
            games=GameBrowser(rawg),
            giveaways=GiveawayFeed(gamerpower),
        )

    async def close(self) -> None:
        await self.steam.close()
        await self.rawg.close()
        await self.gamerpower.close()
