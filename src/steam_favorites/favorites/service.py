"""Favorites state for one client session.

FavoritesService ties the auth collaborator, the favorites store and the
resolver together and keeps the resulting list in memory. It is reloaded on
every explicit trigger (sign in/out, refresh, add/remove).

Overlapping reloads are ordered by a request token: each reload takes the
next generation number, and only the newest one may write state. Results
of older reloads that finish late are dropped.
"""

import asyncio
import logging

from steam_favorites.client.steam_client import SteamAPIError
from steam_favorites.favorites.auth import AuthProvider
from steam_favorites.favorites.coercion import coerce
from steam_favorites.favorites.errors import FavoritesError, UnauthenticatedError
from steam_favorites.favorites.models import FavoritesState
from steam_favorites.favorites.resolver import FavoritesResolver
from steam_favorites.favorites.store import FavoriteStore


logger = logging.getLogger(__name__)


class FavoritesService:
    """Loads, mutates and holds the current user's resolved favorites."""

    def __init__(
        self,
        auth: AuthProvider,
        store: FavoriteStore,
        resolver: FavoritesResolver,
        keep_previous_on_error: bool = False,
    ):
        """
        Args:
            auth: Supplies the signed-in user.
            store: Where favorite ids are persisted.
            resolver: Turns stored ids into display-ready favorites.
            keep_previous_on_error: Keep the last good list when a reload
                fails instead of clearing it.
        """
        self.auth = auth
        self.store = store
        self.resolver = resolver
        self.keep_previous_on_error = keep_previous_on_error
        self._state = FavoritesState()
        self._generation = 0

    @property
    def state(self) -> FavoritesState:
        """A copy of the current state."""
        return self._state.snapshot()

    def _require_user(self) -> str:
        user_id = self.auth.current_user_id()
        if not self.auth.is_authenticated() or not user_id:
            raise UnauthenticatedError("Sign in to manage favorites")
        return user_id

    @staticmethod
    def _validate_app_id(app_id: int) -> int:
        if isinstance(app_id, bool) or not isinstance(app_id, int) or app_id <= 0:
            raise ValueError(f"Invalid app id: {app_id!r}")
        return app_id

    def _is_current(self, token: int) -> bool:
        return token == self._generation

    async def reload(self) -> FavoritesState:
        """
        Re-resolve favorites from the store.

        Without a signed-in user the list is cleared and nothing is fetched.
        Catalog and store failures are recorded in `state.error`; they do
        not raise.
        """
        self._generation += 1
        token = self._generation

        user_id = self.auth.current_user_id()
        if not self.auth.is_authenticated() or not user_id:
            self._state = FavoritesState(generation=token)
            return self.state

        self._state.loading = True
        try:
            raw = await self.store.read_raw(user_id)
            favorites = await self.resolver.resolve(raw)
        except asyncio.CancelledError:
            if self._is_current(token):
                self._state.loading = False
            raise
        except (SteamAPIError, FavoritesError) as e:
            if not self._is_current(token):
                logger.debug(f"Ignoring failure of superseded reload {token}: {e}")
                return self.state
            logger.warning(f"Failed to load favorites: {e}")
            previous = self._state.favorites if self.keep_previous_on_error else []
            self._state = FavoritesState(
                favorites=list(previous),
                error=f"Error loading favorites: {e}",
                generation=token,
            )
            return self.state

        if not self._is_current(token):
            logger.debug(f"Discarding result of superseded reload {token}")
            return self.state

        self._state = FavoritesState(favorites=favorites, generation=token)
        return self.state

    async def on_auth_changed(self) -> FavoritesState:
        """Reload after the user signed in or out."""
        return await self.reload()

    async def favorite_ids(self) -> list[int]:
        """Ids currently persisted for the signed-in user."""
        user_id = self._require_user()
        return coerce(await self.store.read_raw(user_id))

    async def add(self, app_id: int) -> FavoritesState:
        """
        Add an app to the signed-in user's favorites and reload.

        Raises:
            UnauthenticatedError: If nobody is signed in.
            ValueError: If app_id is not a positive integer or is not in
                the Steam catalog.
            SteamAPIError: If the catalog cannot be loaded.
        """
        user_id = self._require_user()
        self._validate_app_id(app_id)
        entry = await self.resolver.catalog.get(app_id)
        if entry is None:
            raise ValueError(f"App {app_id} is not in the Steam catalog")
        await self.store.add(user_id, app_id)
        logger.info(f"Added {app_id} ({entry.name}) to favorites of {user_id}")
        return await self.reload()

    async def remove(self, app_id: int) -> FavoritesState:
        """Remove an app from the signed-in user's favorites and reload."""
        user_id = self._require_user()
        self._validate_app_id(app_id)
        await self.store.remove(user_id, app_id)
        logger.info(f"Removed {app_id} from favorites of {user_id}")
        return await self.reload()

    async def toggle(self, app_id: int) -> bool:
        """
        Flip the favorite status of an app.

        Returns:
            True if the app is a favorite afterwards.
        """
        self._validate_app_id(app_id)
        if app_id in await self.favorite_ids():
            await self.remove(app_id)
            return False
        await self.add(app_id)
        return True

    def is_favorite(self, app_id: int) -> bool:
        """Whether the app is in the currently loaded list."""
        return any(f.app_id == app_id for f in self._state.favorites)
