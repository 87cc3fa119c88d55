"""Data types shared by the favorites pipeline and the browse tools."""

from dataclasses import asdict, dataclass, field, replace
from datetime import datetime, timezone
from enum import Enum
from typing import Any


# A positive Steam app id
FavoriteId = int

STEAM_CAPSULE_URL = "https://cdn.cloudflare.steamstatic.com/steam/apps/{app_id}/capsule_184x69.jpg"


def steam_capsule_url(app_id: int) -> str:
    """Small store capsule image Steam serves for every app."""
    return STEAM_CAPSULE_URL.format(app_id=app_id)


@dataclass(frozen=True)
class CatalogEntry:
    """One app from the Steam catalog."""

    app_id: int
    name: str

    @classmethod
    def from_api(cls, raw: Any) -> "CatalogEntry | None":
        """
        Build an entry from an app list item ({"appid": ..., "name": ...}).

        Returns None for items without a positive integer id or a non-blank name.
        """
        if not isinstance(raw, dict):
            return None
        app_id = raw.get("appid")
        name = raw.get("name")
        if isinstance(app_id, bool) or not isinstance(app_id, int) or app_id <= 0:
            return None
        if not isinstance(name, str) or not name.strip():
            return None
        return cls(app_id=app_id, name=name)


class NameOutcome(Enum):
    """How a secondary name lookup ended."""

    MATCHED = "matched"
    NO_MATCH = "no_match"
    ERROR = "error"


@dataclass(frozen=True)
class NameResolution:
    """Result of resolving a richer display name for one app."""

    app_id: int
    outcome: NameOutcome
    name: str | None = None
    error: str | None = None
    image_url: str | None = None

    @property
    def matched(self) -> bool:
        return self.outcome is NameOutcome.MATCHED and bool(self.name)


@dataclass(frozen=True)
class ResolvedFavorite:
    """A favorite ready for display."""

    app_id: int
    name: str
    catalog_name: str
    name_outcome: NameOutcome = NameOutcome.NO_MATCH
    image_url: str | None = None

    @classmethod
    def from_entry(
        cls, entry: CatalogEntry, resolution: NameResolution
    ) -> "ResolvedFavorite":
        """
        Merge a catalog entry with its name lookup.

        The image comes from the matched RAWG record when it has one, else
        from the Steam capsule CDN.
        """
        matched = resolution.matched
        name = resolution.name if matched else entry.name
        image_url = resolution.image_url if matched else None
        return cls(
            app_id=entry.app_id,
            name=name,
            catalog_name=entry.name,
            name_outcome=resolution.outcome,
            image_url=image_url or steam_capsule_url(entry.app_id),
        )

    def to_dict(self) -> dict[str, Any]:
        data = asdict(self)
        data["name_outcome"] = self.name_outcome.value
        return data


@dataclass(frozen=True)
class NewsItem:
    """One Steam news post (patch notes, announcements, press)."""

    gid: str
    title: str
    url: str
    contents: str
    date: int
    author: str = ""
    feed_label: str = ""
    is_external_url: bool = False

    @property
    def published_at(self) -> datetime | None:
        if not self.date:
            return None
        return datetime.fromtimestamp(self.date, tz=timezone.utc)

    @classmethod
    def from_api(cls, raw: dict[str, Any]) -> "NewsItem":
        return cls(
            gid=str(raw.get("gid", "")),
            title=raw.get("title") or "Untitled",
            url=raw.get("url") or "",
            contents=raw.get("contents") or "",
            date=int(raw.get("date") or 0),
            author=raw.get("author") or "",
            feed_label=raw.get("feedlabel") or "",
            is_external_url=bool(raw.get("is_external_url", False)),
        )


def _names(items: Any, key: str = "name") -> tuple[str, ...]:
    """Names from a RAWG list of {"name": ...} or {"platform": {"name": ...}} dicts."""
    if not isinstance(items, list):
        return ()
    names = []
    for item in items:
        if isinstance(item, dict) and key in item and isinstance(item[key], dict):
            item = item[key]
        name = item.get("name") if isinstance(item, dict) else None
        if isinstance(name, str) and name:
            names.append(name)
    return tuple(names)


def _int(value: Any) -> int | None:
    if isinstance(value, bool) or not isinstance(value, int):
        return None
    return value


def _number(value: Any) -> float | None:
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        return None
    return float(value)


@dataclass(frozen=True)
class GameSummary:
    """One row of the RAWG game list."""

    game_id: int
    name: str
    released: str | None = None
    rating: float | None = None
    background_image: str | None = None
    genres: tuple[str, ...] = ()

    @classmethod
    def from_api(cls, raw: Any) -> "GameSummary | None":
        if not isinstance(raw, dict):
            return None
        game_id = _int(raw.get("id"))
        name = raw.get("name")
        if game_id is None:
            return None
        if not isinstance(name, str) or not name.strip():
            return None
        return cls(
            game_id=game_id,
            name=name,
            released=raw.get("released") or None,
            rating=_number(raw.get("rating")),
            background_image=raw.get("background_image") or None,
            genres=_names(raw.get("genres")),
        )

    def to_dict(self) -> dict[str, Any]:
        data = asdict(self)
        data["genres"] = list(self.genres)
        return data


@dataclass(frozen=True)
class GamePage:
    """A page of browse results."""

    page: int
    page_size: int
    total: int
    games: tuple[GameSummary, ...]
    has_next: bool

    @classmethod
    def from_api(cls, raw: dict[str, Any], page: int, page_size: int) -> "GamePage":
        results = raw.get("results")
        if not isinstance(results, list):
            results = []
        games = tuple(g for g in map(GameSummary.from_api, results) if g is not None)
        count = _int(raw.get("count"))
        return cls(
            page=page,
            page_size=page_size,
            total=len(games) if count is None else count,
            games=games,
            has_next=bool(raw.get("next")),
        )


@dataclass(frozen=True)
class GameDetail:
    """Full RAWG record for one game."""

    game_id: int
    name: str
    description: str = ""
    released: str | None = None
    rating: float | None = None
    metacritic: int | None = None
    background_image: str | None = None
    website: str | None = None
    genres: tuple[str, ...] = ()
    platforms: tuple[str, ...] = ()

    @classmethod
    def from_api(cls, raw: dict[str, Any]) -> "GameDetail | None":
        summary = GameSummary.from_api(raw)
        if summary is None:
            return None
        return cls(
            game_id=summary.game_id,
            name=summary.name,
            description=(raw.get("description_raw") or "").strip(),
            released=summary.released,
            rating=summary.rating,
            metacritic=_int(raw.get("metacritic")),
            background_image=summary.background_image,
            website=raw.get("website") or None,
            genres=summary.genres,
            platforms=_names(raw.get("platforms"), key="platform"),
        )

    def to_dict(self) -> dict[str, Any]:
        data = asdict(self)
        data["genres"] = list(self.genres)
        data["platforms"] = list(self.platforms)
        return data


@dataclass(frozen=True)
class Giveaway:
    """A live GamerPower giveaway."""

    giveaway_id: int
    title: str
    worth: str
    description: str
    image: str
    url: str
    platforms: str = ""
    giveaway_type: str = ""
    end_date: str | None = None

    @classmethod
    def from_api(cls, raw: Any) -> "Giveaway | None":
        if not isinstance(raw, dict):
            return None
        giveaway_id = _int(raw.get("id"))
        title = raw.get("title")
        if giveaway_id is None:
            return None
        if not isinstance(title, str) or not title.strip():
            return None
        end_date = raw.get("end_date")
        return cls(
            giveaway_id=giveaway_id,
            title=title,
            worth=raw.get("worth") or "N/A",
            description=raw.get("description") or "",
            image=raw.get("image") or "",
            url=raw.get("open_giveaway_url") or raw.get("open_giveaway") or "",
            platforms=raw.get("platforms") or "",
            giveaway_type=raw.get("type") or "",
            end_date=None if end_date in (None, "", "N/A") else end_date,
        )


@dataclass
class FavoritesState:
    """What a favorites screen renders: the list, an error and a loading flag."""

    favorites: list[ResolvedFavorite] = field(default_factory=list)
    error: str | None = None
    loading: bool = False
    generation: int = 0

    def snapshot(self) -> "FavoritesState":
        return replace(self, favorites=list(self.favorites))
