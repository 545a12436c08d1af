"""Composition root for the application's named caches.

Owns one CacheStore per preset (api, user_data, static) and their sweep
tasks. Consumers receive stores from a registry instance; there are no
module-level cache globals.
"""

from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass
from typing import Any, Dict, List, Optional

import config
from core.cache import CacheStore, EvictCallback
from core.errors import ValidationError
from core.models import CacheStats

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class CachePreset:
    name: str
    label: str
    ttl_seconds: float
    max_size: int


def default_presets() -> List[CachePreset]:
    return [
        CachePreset("api", "API", config.API_CACHE_TTL, config.API_CACHE_MAX_SIZE),
        CachePreset("user_data", "User data", config.USER_DATA_CACHE_TTL, config.USER_DATA_CACHE_MAX_SIZE),
        CachePreset("static", "Static", config.STATIC_CACHE_TTL, config.STATIC_CACHE_MAX_SIZE),
    ]


def _log_eviction(label: str) -> EvictCallback:
    def on_evict(key: str, value: Any) -> None:
        logger.debug("%s cache evicted: %s", label, key)

    return on_evict


class CacheRegistry:
    def __init__(self, stores: Dict[str, CacheStore]) -> None:
        self._stores = dict(stores)

    @classmethod
    def from_presets(
        cls,
        presets: List[CachePreset],
        *,
        sweep_interval_seconds: Optional[float] = config.CACHE_SWEEP_INTERVAL,
        single_flight: bool = config.CACHE_SINGLE_FLIGHT,
    ) -> "CacheRegistry":
        stores = {
            p.name: CacheStore(
                ttl_seconds=p.ttl_seconds,
                max_size=p.max_size,
                on_evict=_log_eviction(p.label),
                sweep_interval_seconds=sweep_interval_seconds,
                single_flight=single_flight,
                name=p.name,
            )
            for p in presets
        }
        return cls(stores)

    @classmethod
    def from_config(cls) -> "CacheRegistry":
        return cls.from_presets(default_presets())

    @property
    def api(self) -> CacheStore:
        return self.get("api")

    @property
    def user_data(self) -> CacheStore:
        return self.get("user_data")

    @property
    def static(self) -> CacheStore:
        return self.get("static")

    def names(self) -> List[str]:
        return list(self._stores)

    def get(self, name: str) -> CacheStore:
        key = (name or "").strip()
        try:
            return self._stores[key]
        except KeyError as e:
            raise ValidationError(f"Unknown cache: {name!r} (expected one of {self.names()})") from e

    def stats(self) -> Dict[str, CacheStats]:
        return {name: store.get_stats() for name, store in self._stores.items()}

    # --- Lifecycle ---

    def start(self) -> None:
        for store in self._stores.values():
            store.start()
        logger.info("Started cache sweepers: %s", ", ".join(self._stores))

    def dispose(self) -> None:
        for store in self._stores.values():
            store.dispose()

    async def aclose(self) -> None:
        # Close every store even if one sweep failed, then surface the first failure.
        results = await asyncio.gather(
            *(store.aclose() for store in self._stores.values()),
            return_exceptions=True,
        )
        for result in results:
            if isinstance(result, BaseException):
                raise result

    async def __aenter__(self) -> "CacheRegistry":
        self.start()
        return self

    async def __aexit__(self, *exc_info: object) -> None:
        await self.aclose()
