"""Free game giveaways from GamerPower."""

from steam_favorites.client.gamerpower_client import SORT_OPTIONS, TYPE_OPTIONS
from steam_favorites.endpoints.base import BaseEndpoint, endpoint
from steam_favorites.endpoints.steam_news import truncate


class Giveaways(BaseEndpoint):
    """Live giveaways across stores."""

    @endpoint(
        name="get_giveaways",
        description=(
            "List free games, DLC and beta keys currently being given away. "
            "Filter by platform (e.g. 'steam', 'epic-games-store', 'pc')."
        ),
        params={
            "platform": {
                "type": "string",
                "description": "Platform slug (default: steam; empty for all)",
                "required": False,
                "default": "steam",
            },
            "giveaway_type": {
                "type": "string",
                "description": "Kind of giveaway",
                "required": False,
                "enum": list(TYPE_OPTIONS),
            },
            "sort_by": {
                "type": "string",
                "description": "Sort order",
                "required": False,
                "enum": list(SORT_OPTIONS),
            },
            "limit": {
                "type": "integer",
                "description": "Maximum number of giveaways (default: 20, max: 100)",
                "required": False,
                "default": 20,
                "minimum": 1,
                "maximum": 100,
            },
        },
        supports_json=True,
    )
    async def get_giveaways(
        self,
        platform: str = "steam",
        giveaway_type: str | None = None,
        sort_by: str | None = None,
        limit: int = 20,
        format: str = "text",
    ) -> str:
        limit = max(1, min(limit, 100))
        giveaways = await self.services.giveaways.current(
            platform=platform.strip() or None,
            giveaway_type=giveaway_type,
            sort_by=sort_by,
            limit=limit,
        )

        if format == "json":
            return self.to_json(
                {
                    "platform": platform or None,
                    "count": len(giveaways),
                    "giveaways": [
                        {
                            "id": g.giveaway_id,
                            "title": g.title,
                            "worth": g.worth,
                            "type": g.giveaway_type,
                            "platforms": g.platforms,
                            "end_date": g.end_date,
                            "url": g.url,
                            "image": g.image,
                        }
                        for g in giveaways
                    ],
                }
            )

        where = f" on {platform}" if platform.strip() else ""
        if not giveaways:
            return f"No active giveaways{where}."

        output = [f"Active giveaways{where}", f"Showing {len(giveaways)} giveaway(s)", ""]
        for g in giveaways:
            output.append(f"🎁 {g.title} (worth {g.worth})")
            details = [d for d in (g.giveaway_type, g.platforms) if d]
            if g.end_date:
                details.append(f"ends {g.end_date}")
            if details:
                output.append(f"   {' | '.join(details)}")
            if g.description:
                output.append(f"   {truncate(g.description, 200)}")
            if g.url:
                output.append(f"   Claim: {g.url}")
            output.append("")
        return "\n".join(output)
