"""Cached JSON fetching over HTTP.

GET requests go through CacheStore.get_or_set keyed by "<METHOD>:<url>"
(or an explicit cache key), so repeated reads within the TTL hit the
network once. Any other method bypasses the cache. Failed requests raise
ExternalServiceError and are never cached.
"""

from __future__ import annotations

from typing import Any, Mapping, Optional, Union

import httpx

from core.cache import CacheStore
from core.errors import ExternalServiceError, ValidationError


class FetchClient:
    def __init__(self, *, cache: CacheStore, timeout: float = 20.0, verify: bool = True) -> None:
        self._cache = cache
        self._timeout = float(timeout)
        self._verify = bool(verify)

    @property
    def cache(self) -> CacheStore:
        return self._cache

    @staticmethod
    def cache_key_for(url: str, method: Optional[str] = None) -> str:
        return f"{(method or 'GET').upper()}:{url}"

    async def cached_fetch(
        self,
        url: str,
        *,
        method: Optional[str] = None,
        headers: Optional[Mapping[str, str]] = None,
        content: Optional[Union[str, bytes]] = None,
        cache_key: Optional[str] = None,
        ttl_seconds: Optional[float] = None,
    ) -> Any:
        """Fetch `url` and return its decoded JSON body."""
        target = (url or "").strip()
        if not target:
            raise ValidationError("URL is empty")

        verb = (method or "").strip().upper() or "GET"
        if verb != "GET":
            return await self._request(verb, target, headers=headers, content=content)

        key = cache_key or self.cache_key_for(target, verb)

        async def fetch() -> Any:
            return await self._request("GET", target, headers=headers, content=content)

        return await self._cache.get_or_set(key, fetch, ttl_seconds)

    async def _request(
        self,
        method: str,
        url: str,
        *,
        headers: Optional[Mapping[str, str]] = None,
        content: Optional[Union[str, bytes]] = None,
    ) -> Any:
        try:
            async with httpx.AsyncClient(timeout=self._timeout, verify=self._verify) as c:
                r = await c.request(method, url, headers=dict(headers or {}), content=content)
                r.raise_for_status()
                return r.json()
        except httpx.HTTPStatusError as e:
            resp = e.response
            raise ExternalServiceError(f"HTTP {resp.status_code}: {resp.reason_phrase}") from e
        except httpx.HTTPError as e:
            raise ExternalServiceError(f"Request to {url} failed: {e}") from e
        except ValueError as e:
            raise ExternalServiceError(f"Response from {url} is not valid JSON: {e}") from e
