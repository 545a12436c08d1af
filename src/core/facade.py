"""Bound view over a single CacheStore.

Lets call sites hold "a cache" without caring which named store backs it;
use_cache() picks the registry's api store unless told otherwise.
"""

from __future__ import annotations

from typing import Any, Optional

from core.cache import CacheStore, ComputeFn, T
from core.models import CacheStats
from core.registry import CacheRegistry


class CacheFacade:
    def __init__(self, store: CacheStore) -> None:
        self._store = store

    @property
    def store(self) -> CacheStore:
        return self._store

    def get(self, key: str, default: Any = None) -> Any:
        return self._store.get(key, default)

    def set(self, key: str, data: Any, ttl_seconds: Optional[float] = None) -> None:
        self._store.set(key, data, ttl_seconds)

    async def get_or_set(self, key: str, compute_fn: ComputeFn[T], ttl_seconds: Optional[float] = None) -> T:
        return await self._store.get_or_set(key, compute_fn, ttl_seconds)

    def has(self, key: str) -> bool:
        return self._store.has(key)

    def delete(self, key: str) -> bool:
        return self._store.delete(key)

    def clear(self) -> None:
        self._store.clear()

    def get_stats(self) -> CacheStats:
        return self._store.get_stats()


def use_cache(store: Optional[CacheStore] = None, *, registry: CacheRegistry) -> CacheFacade:
    return CacheFacade(store if store is not None else registry.api)
