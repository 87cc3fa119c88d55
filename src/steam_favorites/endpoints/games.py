"""Game browsing tools over the RAWG catalog.

Reference: https://api.rawg.io/docs/#operation/games_list
"""

from steam_favorites.client.rawg_client import MAX_PAGE_SIZE
from steam_favorites.endpoints.base import BaseEndpoint, endpoint
from steam_favorites.endpoints.steam_news import truncate
from steam_favorites.favorites.browse import DEFAULT_PAGE_SIZE
from steam_favorites.favorites.models import GameSummary


ORDERING_OPTIONS = ["relevance", "-rating", "-released", "-added", "name", "-metacritic"]


def _summary_line(game: GameSummary) -> str:
    line = f"  [{game.game_id}] {game.name}"
    extras = []
    if game.released:
        extras.append(game.released[:4])
    if game.rating:
        extras.append(f"★ {game.rating:.1f}")
    if game.genres:
        extras.append(", ".join(game.genres[:3]))
    if extras:
        line += f" ({' | '.join(extras)})"
    return line


class Games(BaseEndpoint):
    """Paged browsing and game records from RAWG."""

    @endpoint(
        name="browse_games",
        description=(
            "Browse the RAWG game catalog page by page, optionally filtered by "
            "a search text. Returns RAWG game IDs for get_game_details."
        ),
        params={
            "page": {
                "type": "integer",
                "description": "Page number, starting at 1",
                "required": False,
                "default": 1,
                "minimum": 1,
            },
            "page_size": {
                "type": "integer",
                "description": f"Games per page (default: {DEFAULT_PAGE_SIZE}, max: {MAX_PAGE_SIZE})",
                "required": False,
                "default": DEFAULT_PAGE_SIZE,
                "minimum": 1,
                "maximum": MAX_PAGE_SIZE,
            },
            "search": {
                "type": "string",
                "description": "Optional title filter",
                "required": False,
                "default": "",
            },
            "ordering": {
                "type": "string",
                "description": "Sort order (default: relevance)",
                "required": False,
                "enum": ORDERING_OPTIONS,
                "default": "relevance",
            },
        },
        supports_json=True,
    )
    async def browse_games(
        self,
        page: int = 1,
        page_size: int = DEFAULT_PAGE_SIZE,
        search: str = "",
        ordering: str = "relevance",
        format: str = "text",
    ) -> str:
        if ordering not in ORDERING_OPTIONS:
            raise ValueError(f"Unknown ordering: {ordering}")
        result = await self.services.games.browse(
            page=page,
            page_size=page_size,
            search=search,
            ordering=None if ordering == "relevance" else ordering,
        )

        if format == "json":
            return self.to_json(
                {
                    "page": result.page,
                    "page_size": result.page_size,
                    "total": result.total,
                    "has_next": result.has_next,
                    "games": [g.to_dict() for g in result.games],
                }
            )

        if not result.games:
            if page > 1:
                return f"No games on page {page}."
            return "No games found."

        header = f"Games matching '{search}'" if search.strip() else "Games"
        output = [
            f"{header} (page {result.page})",
            f"Showing {len(result.games)} of {result.total} game(s)",
            "",
        ]
        output.extend(_summary_line(g) for g in result.games)
        if result.has_next:
            output.append("")
            output.append(f"More results: page={result.page + 1}")
        return "\n".join(output)

    @endpoint(
        name="get_game_details",
        description=(
            "Get the RAWG record for one game: description, release date, "
            "rating, Metacritic score, genres and platforms."
        ),
        params={
            "game_id": {
                "type": "integer",
                "description": "RAWG game ID (from browse_games)",
                "required": True,
                "minimum": 1,
            },
        },
        supports_json=True,
    )
    async def get_game_details(self, game_id: int, format: str = "text") -> str:
        detail = await self.services.games.detail(game_id)
        if detail is None:
            return f"Game {game_id} not found."

        if format == "json":
            return self.to_json(detail.to_dict())

        output = [f"{detail.name} [{detail.game_id}]"]
        if detail.released:
            output.append(f"Released: {detail.released}")
        if detail.rating is not None:
            output.append(f"Rating: {detail.rating:.2f}/5")
        if detail.metacritic is not None:
            output.append(f"Metacritic: {detail.metacritic}")
        if detail.genres:
            output.append(f"Genres: {', '.join(detail.genres)}")
        if detail.platforms:
            output.append(f"Platforms: {', '.join(detail.platforms)}")
        if detail.website:
            output.append(f"Website: {detail.website}")
        if detail.background_image:
            output.append(f"Image: {detail.background_image}")
        if detail.description:
            output.append("")
            output.append(truncate(detail.description, 1000))
        return "\n".join(output)
