"""Best-effort display names for Steam apps from RAWG.

Steam catalog names are often terse or stylized; RAWG usually has the
canonical title. A lookup never fails the caller: network errors and empty
results both degrade to "keep the catalog name", but the returned
NameResolution records which of the two happened.
"""

import logging

from steam_favorites.client.rawg_client import RawgAPIError, RawgClient
from steam_favorites.favorites.models import NameOutcome, NameResolution


logger = logging.getLogger(__name__)


class NameResolverClient:
    """Resolves a richer name for a Steam app id, with a name-based fallback."""

    def __init__(self, rawg: RawgClient):
        self.rawg = rawg

    @staticmethod
    def appid_query(app_id: int) -> str:
        """Search text that asks RAWG for the game linked to a Steam app id."""
        return f"steam appid:{app_id}"

    async def _first_hit(self, search: str) -> tuple[str | None, str | None, str | None]:
        """Return (name, image_url, error) for the first search hit."""
        try:
            results = await self.rawg.search_games(search, page_size=1)
        except RawgAPIError as e:
            logger.warning(f"RAWG lookup failed for {search!r}: {e}")
            return None, None, str(e)

        if not results or not isinstance(results[0], dict):
            return None, None, None
        name = results[0].get("name")
        if not isinstance(name, str) or not name.strip():
            return None, None, None
        image = results[0].get("background_image")
        if not isinstance(image, str) or not image:
            image = None
        return name.strip(), image, None

    async def resolve(self, app_id: int, fallback_name: str | None = None) -> NameResolution:
        """
        Look up a display name for `app_id`.

        Tries the app id token first, then `fallback_name` as free text when
        it is non-blank. Errors from either attempt are absorbed.
        """
        errors: list[str] = []

        name, image, error = await self._first_hit(self.appid_query(app_id))
        if error:
            errors.append(error)

        if name is None and fallback_name and fallback_name.strip():
            name, image, error = await self._first_hit(fallback_name.strip())
            if error:
                errors.append(error)

        if name is not None:
            resolution = NameResolution(
                app_id, NameOutcome.MATCHED, name=name, image_url=image
            )
        elif errors:
            resolution = NameResolution(app_id, NameOutcome.ERROR, error="; ".join(errors))
        else:
            resolution = NameResolution(app_id, NameOutcome.NO_MATCH)

        logger.debug(f"Name lookup for {app_id}: {resolution.outcome.value}")
        return resolution

    async def resolve_name(self, app_id: int, fallback_name: str | None = None) -> str | None:
        """The resolved name, or None when nothing usable was found."""
        resolution = await self.resolve(app_id, fallback_name)
        return resolution.name if resolution.matched else None
