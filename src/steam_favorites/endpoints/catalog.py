"""Steam catalog tools."""

from steam_favorites.endpoints.base import BaseEndpoint, endpoint
from steam_favorites.favorites.catalog import DEFAULT_SEARCH_LIMIT


class Catalog(BaseEndpoint):
    """Search over the cached Steam app list."""

    @endpoint(
        name="search_apps",
        description=(
            "Search Steam apps by name, ignoring case and accents "
            "(e.g. 'pokemon' finds 'Pokémon'). An empty query lists apps "
            "alphabetically. Returns App IDs and names."
        ),
        params={
            "query": {
                "type": "string",
                "description": "Name fragment to search for (may be empty)",
                "required": False,
                "default": "",
            },
            "limit": {
                "type": "integer",
                "description": "Maximum number of results (default: 50, max: 200)",
                "required": False,
                "default": DEFAULT_SEARCH_LIMIT,
                "minimum": 1,
                "maximum": 200,
            },
        },
        supports_json=True,
    )
    async def search_apps(
        self, query: str = "", limit: int = DEFAULT_SEARCH_LIMIT, format: str = "text"
    ) -> str:
        limit = max(1, min(limit, 200))
        entries = await self.services.catalog.search(query, limit=limit)

        if format == "json":
            return self.to_json(
                {
                    "query": query,
                    "count": len(entries),
                    "apps": [{"app_id": e.app_id, "name": e.name} for e in entries],
                }
            )

        if not entries:
            return f"No apps found matching '{query}'."

        favorites = self.services.favorites
        header = f"Apps matching '{query}':" if query.strip() else "Apps:"
        output = [header, f"Found {len(entries)} result(s)", ""]
        for entry in entries:
            star = " ★" if favorites.is_favorite(entry.app_id) else ""
            output.append(f"  [{entry.app_id}] {entry.name}{star}")
        return "\n".join(output)
