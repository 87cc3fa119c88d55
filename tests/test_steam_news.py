"""Tests for the Steam news tools."""

from unittest.mock import AsyncMock, MagicMock

import pytest

from steam_favorites.client.steam_client import SteamAPIError
from steam_favorites.endpoints.steam_news import SteamNews, clean_html, truncate
from steam_favorites.favorites.models import FavoritesState, NewsItem, ResolvedFavorite


@pytest.fixture
def mock_services():
    """Create mock services with a news client and favorites service."""
    services = MagicMock()
    services.news.fetch_news = AsyncMock(return_value=[])
    services.news.fetch_favorites_news = AsyncMock(return_value={})
    services.favorites.reload = AsyncMock(return_value=FavoritesState())
    return services


@pytest.fixture
def steam_news(mock_services):
    """Create SteamNews instance with mock services."""
    return SteamNews(mock_services)


def make_item(title: str, **kwargs) -> NewsItem:
    defaults = {
        "gid": title,
        "title": title,
        "url": "https://example.com/news",
        "contents": "Exciting news about the update!",
        "date": 1702000000,
    }
    defaults.update(kwargs)
    return NewsItem(**defaults)


class TestCleanHtml:
    """Tests for clean_html."""

    def test_strips_tags_and_bbcode(self):
        text = "<p>Hello</p> [b]world[/b] [url=https://x.y]link[/url]"
        assert clean_html(text) == "Hello world link"

    def test_decodes_entities(self):
        assert clean_html("Tom &amp; Jerry&nbsp;&lt;3") == "Tom & Jerry <3"

    def test_empty(self):
        assert clean_html(None) == ""
        assert clean_html("") == ""


class TestTruncate:
    """Tests for truncate."""

    def test_short_text_unchanged(self):
        assert truncate("short", 10) == "short"

    def test_cuts_on_word_boundary(self):
        assert truncate("one two three four", 10) == "one two..."


class TestGetNewsForApp:
    """Tests for get_news_for_app endpoint."""

    @pytest.mark.asyncio
    async def test_returns_news_items(self, steam_news, mock_services):
        """Should return formatted news items."""
        mock_services.news.fetch_news.return_value = [
            make_item("Big Update", author="Developer", feed_label="Steam Blog"),
        ]

        result = await steam_news.get_news_for_app(app_id=440)

        assert "News for App ID 440" in result
        assert "Showing 1 article(s)" in result
        assert "Big Update" in result
        assert "By: Developer" in result
        assert "Source: Steam Blog" in result
        assert "Exciting news" in result
        assert "https://example.com/news" in result
        assert "2023-12-08" in result

    @pytest.mark.asyncio
    async def test_no_news_found(self, steam_news):
        result = await steam_news.get_news_for_app(app_id=12345)

        assert result == "No news found for App ID 12345."

    @pytest.mark.asyncio
    async def test_passes_arguments(self, steam_news, mock_services):
        await steam_news.get_news_for_app(app_id=440, count=5, max_length=0)

        mock_services.news.fetch_news.assert_called_once_with(440, count=5, max_length=0)

    @pytest.mark.asyncio
    async def test_external_url_marked(self, steam_news, mock_services):
        mock_services.news.fetch_news.return_value = [
            make_item("Press", is_external_url=True),
        ]

        result = await steam_news.get_news_for_app(app_id=440)

        assert "[External]" in result

    @pytest.mark.asyncio
    async def test_error_propagates(self, steam_news, mock_services):
        mock_services.news.fetch_news.side_effect = SteamAPIError("down")

        with pytest.raises(SteamAPIError):
            await steam_news.get_news_for_app(app_id=440)


class TestGetFavoritesNews:
    """Tests for get_favorites_news endpoint."""

    @pytest.mark.asyncio
    async def test_groups_news_by_favorite(self, steam_news, mock_services):
        favorites = [
            ResolvedFavorite(440, "Team Fortress 2", "Team Fortress 2"),
            ResolvedFavorite(730, "Counter-Strike 2", "Counter-Strike 2"),
        ]
        mock_services.favorites.reload.return_value = FavoritesState(favorites=favorites)
        mock_services.news.fetch_favorites_news.return_value = {
            440: [make_item("TF2 Patch")],
            730: [],
        }

        result = await steam_news.get_favorites_news(count=2)

        assert "News for 2 favorite game(s)" in result
        assert "🎮 Team Fortress 2 [440]" in result
        assert "TF2 Patch" in result
        assert "No news available." in result
        mock_services.news.fetch_favorites_news.assert_called_once_with(favorites, count=2)

    @pytest.mark.asyncio
    async def test_count_clamped(self, steam_news, mock_services):
        mock_services.favorites.reload.return_value = FavoritesState(
            favorites=[ResolvedFavorite(440, "TF2", "TF2")]
        )

        await steam_news.get_favorites_news(count=50)

        assert mock_services.news.fetch_favorites_news.call_args[1]["count"] == 10

    @pytest.mark.asyncio
    async def test_no_favorites(self, steam_news, mock_services):
        result = await steam_news.get_favorites_news()

        assert result == "No favorite games to show news for."
        mock_services.news.fetch_favorites_news.assert_not_called()

    @pytest.mark.asyncio
    async def test_favorites_error(self, steam_news, mock_services):
        mock_services.favorites.reload.return_value = FavoritesState(
            error="Error loading favorites: down"
        )

        result = await steam_news.get_favorites_news()

        assert result == "Error: Error loading favorites: down"
