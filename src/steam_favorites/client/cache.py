"""Async caching primitives for the HTTP clients and the catalog.

Two pieces live here:
- TTLCache: an in-memory response cache with per-category TTLs
- SingleFlight: collapses concurrent loads of the same key into one call
"""

import asyncio
import hashlib
import json
import logging
import time
from collections.abc import Awaitable, Callable
from dataclasses import dataclass
from enum import Enum
from typing import Any, Generic, TypeVar


logger = logging.getLogger(__name__)

T = TypeVar("T")


class CacheCategory(Enum):
    """Cache categories with associated TTLs (in seconds)."""

    # The full app catalog is large and changes slowly
    APP_LIST = 86400  # 24 hours

    # Name lookups and browsing against the secondary catalog
    GAME_SEARCH = 3600  # 1 hour

    # Single game records barely change
    GAME_DETAIL = 86400  # 24 hours

    # Giveaways open and close through the day
    GIVEAWAYS = 600  # 10 minutes

    # Patch notes and announcements
    NEWS = 300  # 5 minutes

    # Default for unspecified endpoints
    DEFAULT = 300  # 5 minutes


@dataclass
class CacheEntry:
    """A cached value with its expiration time."""

    value: Any
    expires_at: float

    def expired(self, now: float | None = None) -> bool:
        return (now if now is not None else time.monotonic()) > self.expires_at


class TTLCache:
    """Async-safe TTL cache keyed by endpoint name and query parameters."""

    def __init__(self, default_ttl: int = 300, max_size: int = 1000):
        """
        Initialize the cache.

        Args:
            default_ttl: TTL in seconds for entries stored without one.
            max_size: Entry count at which expired entries are purged.
        """
        self._entries: dict[str, CacheEntry] = {}
        self._default_ttl = default_ttl
        self._max_size = max_size
        self._lock = asyncio.Lock()
        self._hits = 0
        self._misses = 0

    @staticmethod
    def make_key(endpoint: str, params: dict[str, Any] | None = None) -> str:
        """Hash an endpoint name and its (order-independent) params."""
        payload = json.dumps(
            {"endpoint": endpoint, "params": params or {}},
            sort_keys=True,
            default=str,
        )
        return hashlib.sha256(payload.encode()).hexdigest()

    async def get(
        self, endpoint: str, params: dict[str, Any] | None = None
    ) -> tuple[bool, Any]:
        """
        Look up a live entry.

        Returns:
            Tuple of (hit, value). Expired entries count as misses and are dropped.
        """
        key = self.make_key(endpoint, params)

        async with self._lock:
            entry = self._entries.get(key)
            if entry is not None and entry.expired():
                del self._entries[key]
                entry = None

            if entry is None:
                self._misses += 1
                return False, None

            self._hits += 1
            return True, entry.value

    async def set(
        self,
        endpoint: str,
        params: dict[str, Any] | None,
        value: Any,
        ttl: int | None = None,
    ) -> None:
        """Store a value, using the default TTL when none is given."""
        key = self.make_key(endpoint, params)
        ttl = self._default_ttl if ttl is None else ttl

        async with self._lock:
            if len(self._entries) >= self._max_size:
                self._purge_expired()
            self._entries[key] = CacheEntry(value=value, expires_at=time.monotonic() + ttl)

    def _purge_expired(self) -> int:
        # Caller holds the lock.
        now = time.monotonic()
        stale = [k for k, v in self._entries.items() if v.expired(now)]
        for key in stale:
            del self._entries[key]
        return len(stale)

    @property
    def stats(self) -> dict[str, Any]:
        """Size, hit and miss counters."""
        total = self._hits + self._misses
        return {
            "size": len(self._entries),
            "hits": self._hits,
            "misses": self._misses,
            "hit_rate": round(self._hits / total * 100, 1) if total else 0.0,
        }


class SingleFlight(Generic[T]):
    """Share one in-flight load per key between concurrent callers.

    The first caller for a key starts the loader in its own task; callers that
    arrive while it runs await the same task. Once the load settles the key is
    released, so a failed load is retried by the next caller rather than cached.

    Usage:
        flight: SingleFlight[list[int]] = SingleFlight()
        ids = await flight.do("catalog", fetch_catalog)
    """

    def __init__(self) -> None:
        self._inflight: dict[str, asyncio.Task[T]] = {}

    def in_flight(self, key: str) -> bool:
        return key in self._inflight

    async def do(self, key: str, loader: Callable[[], Awaitable[T]]) -> T:
        task = self._inflight.get(key)
        if task is None:
            task = asyncio.ensure_future(loader())
            self._inflight[key] = task
            task.add_done_callback(lambda _t: self._inflight.pop(key, None))
        else:
            logger.debug(f"Joining in-flight load for {key}")

        # shield() so one waiter being cancelled does not cancel the shared load
        return await asyncio.shield(task)
