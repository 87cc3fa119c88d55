"""Steam news tools: patch notes for one game or for every favorite.

Reference: https://partner.steamgames.com/doc/webapi/ISteamNews
"""

import re

from steam_favorites.endpoints.base import BaseEndpoint, endpoint
from steam_favorites.favorites.models import NewsItem


# Maximum excerpt length in text output
MAX_CONTENT_LENGTH = 500

_ENTITIES = {
    "&nbsp;": " ",
    "&amp;": "&",
    "&lt;": "<",
    "&gt;": ">",
    "&quot;": '"',
    "&#39;": "'",
}


def clean_html(text: str | None) -> str:
    """Strip tags and BBCode, decode common entities, collapse whitespace."""
    if not text:
        return ""
    clean = re.sub(r"<[^>]+>", " ", text)
    clean = re.sub(r"\[/?[a-z0-9*]+(?:=[^\]]*)?\]", " ", clean, flags=re.IGNORECASE)
    for entity, char in _ENTITIES.items():
        clean = clean.replace(entity, char)
    return re.sub(r"\s+", " ", clean).strip()


def truncate(text: str, limit: int = MAX_CONTENT_LENGTH) -> str:
    if len(text) <= limit:
        return text
    return text[:limit].rsplit(" ", 1)[0] + "..."


def format_item(item: NewsItem, indent: str = "") -> list[str]:
    published = item.published_at
    date_str = published.strftime("%Y-%m-%d %H:%M") if published else "Unknown date"

    lines = [f"{indent}📰 {item.title}"]
    byline = f"{indent}   {date_str}"
    if item.author:
        byline = f"{indent}   By: {item.author} | {date_str}"
    lines.append(byline)
    if item.feed_label:
        lines.append(f"{indent}   Source: {item.feed_label}")
    content = truncate(clean_html(item.contents))
    if content:
        lines.append(f"{indent}   {content}")
    if item.url:
        external = " [External]" if item.is_external_url else ""
        lines.append(f"{indent}   Link: {item.url}{external}")
    return lines


class SteamNews(BaseEndpoint):
    """Patch notes and announcements from ISteamNews."""

    @endpoint(
        name="get_news_for_app",
        description=(
            "Get news and patch notes for a game. "
            "Returns updates, community announcements, etc."
        ),
        params={
            "app_id": {
                "type": "integer",
                "description": "Steam App ID of the game (e.g., 440 for TF2, 730 for CS2)",
                "required": True,
            },
            "count": {
                "type": "integer",
                "description": "Number of news items to retrieve (default: 10, max: 25)",
                "required": False,
                "default": 10,
                "minimum": 1,
                "maximum": 25,
            },
            "max_length": {
                "type": "integer",
                "description": "Maximum length of content excerpt (0 = full content)",
                "required": False,
                "default": 300,
                "minimum": 0,
            },
        },
    )
    async def get_news_for_app(
        self, app_id: int, count: int = 10, max_length: int = 300
    ) -> str:
        items = await self.services.news.fetch_news(
            app_id, count=count, max_length=max_length
        )
        if not items:
            return f"No news found for App ID {app_id}."

        output = [f"News for App ID {app_id}", f"Showing {len(items)} article(s)", ""]
        for item in items:
            output.extend(format_item(item))
            output.append("")
        return "\n".join(output)

    @endpoint(
        name="get_favorites_news",
        description="Get the latest patch notes for every favorite game of the signed-in user.",
        params={
            "count": {
                "type": "integer",
                "description": "News items per game (default: 3, max: 10)",
                "required": False,
                "default": 3,
                "minimum": 1,
                "maximum": 10,
            },
        },
    )
    async def get_favorites_news(self, count: int = 3) -> str:
        count = max(1, min(count, 10))
        state = await self.services.favorites.reload()
        if state.error:
            return f"Error: {state.error}"
        if not state.favorites:
            return "No favorite games to show news for."

        news = await self.services.news.fetch_favorites_news(state.favorites, count=count)

        output = [f"News for {len(state.favorites)} favorite game(s)", ""]
        for fav in state.favorites:
            output.append(f"🎮 {fav.name} [{fav.app_id}]")
            items = news.get(fav.app_id, [])
            if not items:
                output.append("   No news available.")
            for item in items:
                output.extend(format_item(item, indent="   "))
            output.append("")
        return "\n".join(output)
