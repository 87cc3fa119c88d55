"""Favorites tools: list, add, remove, toggle, check."""

from steam_favorites.endpoints.base import BaseEndpoint, endpoint
from steam_favorites.favorites.models import FavoritesState


_APP_ID_PARAM = {
    "app_id": {
        "type": "integer",
        "description": "Steam App ID (e.g., 440 for TF2)",
        "required": True,
        "minimum": 1,
    },
}


class Favorites(BaseEndpoint):
    """Tools over the signed-in user's favorite games."""

    def _format_state(self, state: FavoritesState, heading: str) -> str:
        if state.error:
            return f"Error: {state.error}"
        if not state.favorites:
            if not self.services.favorites.auth.is_authenticated():
                return "Not signed in. Set STEAM_USER_ID to manage favorites."
            return "No favorite games yet."

        output = [heading, f"{len(state.favorites)} favorite(s)", ""]
        for fav in state.favorites:
            line = f"  [{fav.app_id}] {fav.name}"
            if fav.name != fav.catalog_name:
                line += f" (Steam: {fav.catalog_name})"
            output.append(line)
        return "\n".join(output)

    @endpoint(
        name="list_favorites",
        description=(
            "List the signed-in user's favorite games, with display names "
            "enriched from RAWG where available."
        ),
        params={},
        supports_json=True,
    )
    async def list_favorites(self, format: str = "text") -> str:
        state = await self.services.favorites.reload()

        if format == "json":
            return self.to_json(
                {
                    "authenticated": self.services.favorites.auth.is_authenticated(),
                    "error": state.error,
                    "favorites": [f.to_dict() for f in state.favorites],
                }
            )
        return self._format_state(state, "Favorite games")

    @endpoint(
        name="add_favorite",
        description="Add a game to the signed-in user's favorites.",
        params=_APP_ID_PARAM,
    )
    async def add_favorite(self, app_id: int) -> str:
        state = await self.services.favorites.add(app_id)
        return self._format_state(state, f"Added {app_id} to favorites")

    @endpoint(
        name="remove_favorite",
        description="Remove a game from the signed-in user's favorites.",
        params=_APP_ID_PARAM,
    )
    async def remove_favorite(self, app_id: int) -> str:
        state = await self.services.favorites.remove(app_id)
        if not state.favorites and not state.error:
            return f"Removed {app_id} from favorites. No favorite games left."
        return self._format_state(state, f"Removed {app_id} from favorites")

    @endpoint(
        name="toggle_favorite",
        description="Add the game if it is not a favorite, remove it if it is.",
        params=_APP_ID_PARAM,
    )
    async def toggle_favorite(self, app_id: int) -> str:
        now_favorite = await self.services.favorites.toggle(app_id)
        if now_favorite:
            return f"App {app_id} is now a favorite."
        return f"App {app_id} is no longer a favorite."

    @endpoint(
        name="is_favorite",
        description="Check whether a game is in the signed-in user's favorites.",
        params=_APP_ID_PARAM,
    )
    async def is_favorite(self, app_id: int) -> str:
        ids = await self.services.favorites.favorite_ids()
        if app_id in ids:
            return f"App {app_id} is a favorite."
        return f"App {app_id} is not a favorite."
