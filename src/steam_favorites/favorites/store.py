"""Persistence of per-user favorite ids.

Each user owns one document; favorites live in its "favoriteIds" field.
Writes are set operations (union / remove) merged into the document, so
other fields are left untouched. Reads hand back the field as stored,
whatever its shape; coercion happens in the resolver.
"""

import asyncio
import copy
import json
import logging
import os
import tempfile
from pathlib import Path
from typing import Any, Protocol

from steam_favorites.favorites.coercion import coerce, unique_ids
from steam_favorites.favorites.errors import FavoriteStoreError


logger = logging.getLogger(__name__)

FAVORITES_FIELD = "favoriteIds"
DEFAULT_STORE_PATH = "~/.steam_favorites/favorites.json"


class FavoriteStore(Protocol):
    async def read_raw(self, user_id: str) -> Any: ...

    async def add(self, user_id: str, app_id: int) -> None: ...

    async def remove(self, user_id: str, app_id: int) -> None: ...


def _merge_union(document: dict[str, Any], app_id: int) -> None:
    current = coerce(document.get(FAVORITES_FIELD))
    document[FAVORITES_FIELD] = unique_ids([*current, app_id])


def _merge_remove(document: dict[str, Any], app_id: int) -> None:
    current = coerce(document.get(FAVORITES_FIELD))
    document[FAVORITES_FIELD] = [i for i in unique_ids(current) if i != app_id]


class InMemoryFavoriteStore:
    """Documents kept in a dict; used by tests and ephemeral servers."""

    def __init__(self, documents: dict[str, dict[str, Any]] | None = None):
        self.documents: dict[str, dict[str, Any]] = documents or {}
        self._lock = asyncio.Lock()

    async def read_raw(self, user_id: str) -> Any:
        async with self._lock:
            document = self.documents.get(user_id)
            if document is None:
                return None
            return copy.deepcopy(document.get(FAVORITES_FIELD))

    async def add(self, user_id: str, app_id: int) -> None:
        async with self._lock:
            _merge_union(self.documents.setdefault(user_id, {}), app_id)

    async def remove(self, user_id: str, app_id: int) -> None:
        async with self._lock:
            _merge_remove(self.documents.setdefault(user_id, {}), app_id)


class JsonFileFavoriteStore:
    """
    All user documents in a single JSON object on disk: {user_id: document}.

    Writes go to a temporary file that replaces the original, so a crash
    never leaves a half-written store behind.
    """

    def __init__(self, path: str | os.PathLike[str] | None = None):
        """
        Args:
            path: Store file. Falls back to STEAM_FAVORITES_PATH, then
                  ~/.steam_favorites/favorites.json.
        """
        raw_path = path or os.getenv("STEAM_FAVORITES_PATH") or DEFAULT_STORE_PATH
        self.path = Path(raw_path).expanduser()
        self._lock = asyncio.Lock()

    def _load(self) -> dict[str, Any]:
        if not self.path.exists():
            return {}
        try:
            with self.path.open("r", encoding="utf-8") as f:
                data = json.load(f)
        except (OSError, json.JSONDecodeError) as e:
            raise FavoriteStoreError(f"Cannot read favorites store {self.path}: {e}") from e
        if not isinstance(data, dict):
            raise FavoriteStoreError(f"Favorites store {self.path} is not a JSON object")
        return data

    def _save(self, data: dict[str, Any]) -> None:
        try:
            self.path.parent.mkdir(parents=True, exist_ok=True)
            fd, tmp_name = tempfile.mkstemp(dir=self.path.parent, suffix=".tmp")
            with os.fdopen(fd, "w", encoding="utf-8") as f:
                json.dump(data, f, indent=2, sort_keys=True)
            os.replace(tmp_name, self.path)
        except OSError as e:
            raise FavoriteStoreError(f"Cannot write favorites store {self.path}: {e}") from e

    def _update(self, user_id: str, app_id: int, merge: Any) -> None:
        data = self._load()
        document = data.get(user_id)
        if not isinstance(document, dict):
            document = {}
        merge(document, app_id)
        data[user_id] = document
        self._save(data)
        logger.debug(f"Saved favorites for {user_id}: {document[FAVORITES_FIELD]}")

    async def read_raw(self, user_id: str) -> Any:
        async with self._lock:
            data = await asyncio.to_thread(self._load)
        document = data.get(user_id)
        if not isinstance(document, dict):
            return None
        return document.get(FAVORITES_FIELD)

    async def add(self, user_id: str, app_id: int) -> None:
        async with self._lock:
            await asyncio.to_thread(self._update, user_id, app_id, _merge_union)

    async def remove(self, user_id: str, app_id: int) -> None:
        async with self._lock:
            await asyncio.to_thread(self._update, user_id, app_id, _merge_remove)
