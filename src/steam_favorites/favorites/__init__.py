"""Favorites reconciliation (id coercion, catalog, name resolution, state) and browsing."""

from .browse import GameBrowser, GiveawayFeed
from .catalog import CatalogClient
from .coercion import WireShape, classify, coerce
from .errors import FavoriteStoreError, FavoritesError, UnauthenticatedError
from .models import (
    CatalogEntry,
    FavoritesState,
    GameDetail,
    GamePage,
    GameSummary,
    Giveaway,
    NameOutcome,
    NameResolution,
    NewsItem,
    ResolvedFavorite,
)
from .name_resolver import NameResolverClient
from .news import NewsClient
from .resolver import FavoritesResolver
from .service import FavoritesService

__all__ = [
    "CatalogClient",
    "CatalogEntry",
    "FavoriteStoreError",
    "FavoritesError",
    "FavoritesResolver",
    "FavoritesService",
    "FavoritesState",
    "GameBrowser",
    "GameDetail",
    "GamePage",
    "GameSummary",
    "Giveaway",
    "GiveawayFeed",
    "NameOutcome",
    "NameResolution",
    "NameResolverClient",
    "NewsClient",
    "NewsItem",
    "ResolvedFavorite",
    "UnauthenticatedError",
    "WireShape",
    "classify",
    "coerce",
]
