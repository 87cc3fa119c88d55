"""Steam Web API client with rate limiting, caching, and error handling.

This client is the transport for the app catalog and the news feeds:
- Rate limiting shared across client instances
- TTL-based response caching per endpoint category
- Bounded retry with exponential backoff on timeouts, 429 and 5xx
- Every transport or server failure surfaces as SteamAPIError
"""

import asyncio
import logging
import os
import time
from typing import Any

import httpx

from steam_favorites.client.cache import CacheCategory, TTLCache


logger = logging.getLogger(__name__)

DEFAULT_RATE_LIMIT = 10.0


class SteamAPIError(Exception):
    """Transport or server error from the Steam Web API."""

    def __init__(self, message: str, status_code: int | None = None):
        super().__init__(message)
        self.status_code = status_code


class RateLimiter:
    """Spaces requests so that at most N start per second."""

    def __init__(self, requests_per_second: float = DEFAULT_RATE_LIMIT):
        """
        Initialize rate limiter.

        Args:
            requests_per_second: Maximum requests per second (default: 10)
        """
        self.requests_per_second = requests_per_second
        self.min_interval = 1.0 / requests_per_second
        self.last_request_time = 0.0
        self._lock = asyncio.Lock()

    async def acquire(self) -> None:
        """Wait until a request can be made within rate limits."""
        async with self._lock:
            now = time.monotonic()
            time_since_last = now - self.last_request_time
            if time_since_last < self.min_interval:
                await asyncio.sleep(self.min_interval - time_since_last)
            self.last_request_time = time.monotonic()


_global_rate_limiter: RateLimiter | None = None


def get_global_rate_limiter() -> RateLimiter:
    """Return the process-wide limiter, creating it from STEAM_RATE_LIMIT."""
    global _global_rate_limiter
    if _global_rate_limiter is None:
        rate = float(os.getenv("STEAM_RATE_LIMIT", DEFAULT_RATE_LIMIT))
        _global_rate_limiter = RateLimiter(rate)
    return _global_rate_limiter


def reset_global_rate_limiter() -> None:
    """Forget the process-wide limiter (used by tests)."""
    global _global_rate_limiter
    _global_rate_limiter = None


class SteamClient:
    """Async client for the Steam Web API."""

    BASE_URL = "https://api.steampowered.com"

    # Default TTLs for the methods this client calls (in seconds)
    DEFAULT_CACHE_TTLS: dict[str, int] = {
        "GetAppList": CacheCategory.APP_LIST.value,
        "GetNewsForApp": CacheCategory.NEWS.value,
    }

    def __init__(
        self,
        api_key: str | None = None,
        rate_limiter: RateLimiter | None = None,
        max_retries: int = 3,
        timeout: float = 30.0,
        enable_cache: bool = True,
        cache_max_size: int = 1000,
    ):
        """
        Initialize Steam API client.

        Args:
            api_key: Steam Web API key. Falls back to the STEAM_API_KEY env var.
                     The app list and news endpoints work without one.
            rate_limiter: Limiter to use. Defaults to the shared global limiter.
            max_retries: Maximum number of attempts per request.
            timeout: Request timeout in seconds.
            enable_cache: Whether to enable response caching (default: True).
            cache_max_size: Maximum number of cached entries (default: 1000).
        """
        self.api_key = api_key or os.getenv("STEAM_API_KEY")
        self.max_retries = max(1, max_retries)
        self.timeout = timeout
        self.rate_limiter = rate_limiter or get_global_rate_limiter()

        self._cache: TTLCache | None = None
        if enable_cache:
            self._cache = TTLCache(
                default_ttl=CacheCategory.DEFAULT.value, max_size=cache_max_size
            )

        self._client = httpx.AsyncClient(
            timeout=timeout,
            headers={"Accept": "application/json"},
        )

    async def close(self) -> None:
        """Close the HTTP client."""
        await self._client.aclose()

    @property
    def cache_stats(self) -> dict[str, Any] | None:
        """Get cache statistics, or None if caching is disabled."""
        if self._cache:
            return self._cache.stats
        return None

    async def __aenter__(self) -> "SteamClient":
        return self

    async def __aexit__(self, *args: Any) -> None:
        await self.close()

    def _build_url(self, interface: str, method: str, version: int = 1) -> str:
        """Build Steam API URL."""
        return f"{self.BASE_URL}/{interface}/{method}/v{version}/"

    def _get_cache_ttl(self, method: str) -> int:
        return self.DEFAULT_CACHE_TTLS.get(method, CacheCategory.DEFAULT.value)

    async def _request(
        self,
        method: str,
        url: str,
        params: dict[str, Any] | None = None,
    ) -> dict[str, Any]:
        """
        Make an HTTP request with rate limiting and retry logic.

        Args:
            method: HTTP method
            url: Request URL
            params: Query parameters (not mutated)

        Returns:
            Parsed JSON response

        Raises:
            SteamAPIError: On any transport or server failure
        """
        query = dict(params or {})
        if self.api_key:
            query["key"] = self.api_key
        query["format"] = "json"

        last_error: str = "no attempt made"

        for attempt in range(self.max_retries):
            await self.rate_limiter.acquire()

            try:
                response = await self._client.request(method, url, params=query)

                # Steam sometimes answers errors with an HTML page
                content_type = response.headers.get("content-type", "")
                if "text/html" in content_type:
                    raise SteamAPIError(
                        "Steam API returned HTML error page", response.status_code
                    )

                if response.status_code == 429:
                    last_error = "rate limited (429)"
                    wait_time = 2 ** (attempt + 1)
                    logger.warning(f"Rate limited, waiting {wait_time}s before retry")
                    if attempt < self.max_retries - 1:
                        await asyncio.sleep(wait_time)
                    continue

                if response.status_code in (401, 403):
                    raise SteamAPIError(
                        "Access forbidden - check STEAM_API_KEY", response.status_code
                    )

                response.raise_for_status()
                data = response.json()

            except httpx.TimeoutException as e:
                last_error = f"timeout: {e}"
                logger.warning(f"Request timeout (attempt {attempt + 1}/{self.max_retries})")
                if attempt < self.max_retries - 1:
                    await asyncio.sleep(2 ** attempt)
                continue

            except httpx.HTTPStatusError as e:
                status = e.response.status_code
                if status >= 500:
                    last_error = f"server error {status}"
                    logger.warning(
                        f"Server error {status} (attempt {attempt + 1}/{self.max_retries})"
                    )
                    if attempt < self.max_retries - 1:
                        await asyncio.sleep(2 ** attempt)
                    continue
                raise SteamAPIError(str(e), status) from e

            except httpx.HTTPError as e:
                raise SteamAPIError(f"HTTP error: {e}") from e

            except ValueError as e:
                raise SteamAPIError(f"Invalid JSON from Steam API: {e}") from e

            if not isinstance(data, dict):
                return {"data": data}
            return data

        raise SteamAPIError(f"Request failed after {self.max_retries} attempts: {last_error}")

    async def get(
        self,
        interface: str,
        method: str,
        version: int = 1,
        params: dict[str, Any] | None = None,
        bypass_cache: bool = False,
    ) -> dict[str, Any]:
        """
        Make a GET request to the Steam API.

        Args:
            interface: Steam API interface (e.g., "ISteamNews")
            method: API method (e.g., "GetNewsForApp")
            version: API version (default: 1)
            params: Additional query parameters
            bypass_cache: If True, skip the cache entirely for this call.

        Returns:
            API response data
        """
        url = self._build_url(interface, method, version)
        cache_key = f"{interface}.{method}.v{version}"
        use_cache = self._cache is not None and not bypass_cache

        if use_cache:
            hit, cached_data = await self._cache.get(cache_key, params)
            if hit:
                logger.debug(f"Cache hit for {cache_key}")
                return cached_data

        result = await self._request("GET", url, params=params)

        if use_cache:
            await self._cache.set(cache_key, params, result, self._get_cache_ttl(method))

        return result

    # Convenience methods for the endpoints this project consumes

    async def get_app_list(self) -> list[dict[str, Any]]:
        """
        Fetch the raw app list ({appid, name} dicts).

        The list is large; callers keep their own copy, so it is never
        stored in the response cache.
        """
        result = await self.get("ISteamApps", "GetAppList", version=2, bypass_cache=True)
        applist = result.get("applist")
        apps = applist.get("apps") if isinstance(applist, dict) else None
        if not isinstance(apps, list):
            raise SteamAPIError("Malformed app list response")
        return apps

    async def get_news_for_app(
        self, app_id: int, count: int = 10, max_length: int = 10000
    ) -> list[dict[str, Any]]:
        """Fetch raw news items for one app."""
        result = await self.get(
            "ISteamNews",
            "GetNewsForApp",
            version=2,
            params={"appid": app_id, "count": count, "maxlength": max_length},
        )
        appnews = result.get("appnews")
        if not isinstance(appnews, dict):
            raise SteamAPIError("Malformed news response")
        items = appnews.get("newsitems", [])
        if not isinstance(items, list):
            raise SteamAPIError("Malformed news response")
        return items
