"""In-memory TTL cache with bounded size and recency-based eviction.

Entries carry their own TTL and a timestamp that is refreshed on every
successful read, so reads extend an entry's lifetime and the eviction
victim is always the least recently written-or-read entry. Expired entries
are dropped lazily on access and proactively by a periodic sweep task that
the store owns and cancels on dispose()/aclose().
"""

from __future__ import annotations

import asyncio
import inspect
import logging
import time
from dataclasses import dataclass
from typing import Any, Awaitable, Callable, Dict, Generic, List, Optional, TypeVar, Union

from core.errors import ValidationError
from core.models import CacheStats, EntryStats
from core.scheduler import PeriodicTask

logger = logging.getLogger(__name__)

T = TypeVar("T")

EvictCallback = Callable[[str, Any], None]
ComputeFn = Callable[[], Union[T, Awaitable[T]]]

DEFAULT_TTL_SECONDS = 5 * 60.0
DEFAULT_MAX_SIZE = 100
DEFAULT_SWEEP_INTERVAL_SECONDS = 60.0

_MISSING = object()


@dataclass(slots=True)
class CacheEntry(Generic[T]):
    data: T
    timestamp: float  # clock() of last write or successful read
    ttl: float
    hits: int = 0

    def is_expired(self, now: float) -> bool:
        return now - self.timestamp > self.ttl


def _consume_exception(fut: "asyncio.Future[Any]") -> None:
    # Mark the exception retrieved when no concurrent caller joined.
    if not fut.cancelled():
        fut.exception()


async def _resolve(compute_fn: ComputeFn[T]) -> T:
    result = compute_fn()
    if inspect.isawaitable(result):
        result = await result
    return result


class CacheStore:
    """Bounded, self-expiring key/value store.

    Every removal (delete, clear, capacity eviction, periodic sweep and
    lazy expiry in get) calls ``on_evict(key, data)`` exactly once.
    Overwriting a key with set() is an update and does not.

    ``on_evict`` is not guarded: if it raises, the operation in progress
    raises too and the entry being removed stays in place.
    """

    def __init__(
        self,
        *,
        ttl_seconds: float = DEFAULT_TTL_SECONDS,
        max_size: int = DEFAULT_MAX_SIZE,
        on_evict: Optional[EvictCallback] = None,
        sweep_interval_seconds: Optional[float] = DEFAULT_SWEEP_INTERVAL_SECONDS,
        single_flight: bool = False,
        clock: Optional[Callable[[], float]] = None,
        name: str = "cache",
    ) -> None:
        if ttl_seconds is None or float(ttl_seconds) < 0:
            raise ValidationError("ttl_seconds must be >= 0")
        if max_size is None or int(max_size) < 0:
            raise ValidationError("max_size must be >= 0")
        if sweep_interval_seconds is not None and float(sweep_interval_seconds) <= 0:
            raise ValidationError("sweep_interval_seconds must be positive or None")

        self.name = name
        self._default_ttl = float(ttl_seconds)
        self._max_size = int(max_size)
        self._on_evict = on_evict
        self._single_flight = bool(single_flight)
        self._clock = clock or time.monotonic

        self._store: Dict[str, CacheEntry[Any]] = {}
        self._inflight: Dict[str, "asyncio.Future[Any]"] = {}

        self._sweeper: Optional[PeriodicTask] = None
        if sweep_interval_seconds is not None:
            self._sweeper = PeriodicTask(
                self._purge_expired,
                interval_seconds=float(sweep_interval_seconds),
                name=f"{name}-sweep",
            )

    @property
    def max_size(self) -> int:
        return self._max_size

    @property
    def default_ttl(self) -> float:
        return self._default_ttl

    def __len__(self) -> int:
        return len(self._store)

    def __contains__(self, key: object) -> bool:
        # Raw membership; does not check expiry or touch the entry.
        return key in self._store

    def keys(self) -> List[str]:
        return list(self._store)

    # --- Core operations ---

    def set(self, key: str, data: Any, ttl_seconds: Optional[float] = None) -> None:
        ttl = self._default_ttl if ttl_seconds is None else float(ttl_seconds)
        if ttl < 0:
            raise ValidationError("ttl_seconds must be >= 0")

        if self._max_size == 0:
            # Nothing can be held: the value is evicted as soon as it arrives.
            if self._on_evict is not None:
                self._on_evict(key, data)
            return

        if key not in self._store and len(self._store) >= self._max_size:
            self._evict_one()

        self._store[key] = CacheEntry(data=data, timestamp=self._clock(), ttl=ttl)

    def get(self, key: str, default: Any = None) -> Any:
        entry = self._store.get(key)
        if entry is None:
            return default

        now = self._clock()
        if entry.is_expired(now):
            self._remove(key, entry)
            return default

        entry.hits += 1
        entry.timestamp = now
        return entry.data

    def has(self, key: str) -> bool:
        return self.get(key, _MISSING) is not _MISSING

    def delete(self, key: str) -> bool:
        entry = self._store.get(key)
        if entry is None:
            return False
        self._remove(key, entry)
        return True

    def clear(self) -> None:
        # Entries leave one at a time so a raising on_evict never re-notifies.
        for key, entry in list(self._store.items()):
            self._remove(key, entry)

    async def get_or_set(self, key: str, compute_fn: ComputeFn[T], ttl_seconds: Optional[float] = None) -> T:
        """Return the cached value for `key`, computing and storing it on a miss.

        `compute_fn` may return a value or an awaitable. Its errors propagate
        unchanged and nothing is stored. Without single_flight, callers that
        miss concurrently each run `compute_fn`; with it, they share the
        first caller's computation.
        """
        cached = self.get(key, _MISSING)
        if cached is not _MISSING:
            return cached

        if not self._single_flight:
            value = await _resolve(compute_fn)
            self.set(key, value, ttl_seconds)
            return value

        while True:
            pending = self._inflight.get(key)
            if pending is None:
                break
            logger.debug("%s: joining in-flight computation for %s", self.name, key)
            try:
                # Shield so one cancelled waiter does not cancel everyone's result.
                return await asyncio.shield(pending)
            except asyncio.CancelledError:
                # Only the leader was cancelled: take over the computation.
                if not pending.cancelled():
                    raise
            cached = self.get(key, _MISSING)
            if cached is not _MISSING:
                return cached

        future: "asyncio.Future[Any]" = asyncio.get_running_loop().create_future()
        future.add_done_callback(_consume_exception)
        self._inflight[key] = future
        try:
            value = await _resolve(compute_fn)
            self.set(key, value, ttl_seconds)
        except asyncio.CancelledError:
            future.cancel()
            raise
        except Exception as e:
            future.set_exception(e)
            raise
        else:
            future.set_result(value)
            return value
        finally:
            self._inflight.pop(key, None)

    def get_stats(self) -> CacheStats:
        now = self._clock()
        entries = [
            EntryStats(key=key, hits=entry.hits, age=now - entry.timestamp)
            for key, entry in self._store.items()
        ]
        size = len(self._store)
        total_hits = sum(e.hits for e in entries)
        hit_rate = total_hits / (total_hits + size) * 100 if total_hits > 0 else 0.0

        return CacheStats(
            size=size,
            max_size=self._max_size,
            hit_rate=round(hit_rate, 2),
            entries=sorted(entries, key=lambda e: e.hits, reverse=True),
        )

    # --- Sweeper lifecycle ---

    @property
    def sweeping(self) -> bool:
        return self._sweeper is not None and self._sweeper.running

    def start(self) -> None:
        """Start the periodic sweep on the running event loop."""
        if self._sweeper is not None:
            self._sweeper.start()

    def dispose(self) -> None:
        if self._sweeper is not None:
            self._sweeper.cancel()

    async def aclose(self) -> None:
        if self._sweeper is not None:
            await self._sweeper.aclose()

    async def __aenter__(self) -> "CacheStore":
        self.start()
        return self

    async def __aexit__(self, *exc_info: object) -> None:
        await self.aclose()

    # --- Internals ---

    def _remove(self, key: str, entry: CacheEntry[Any]) -> None:
        if self._on_evict is not None:
            self._on_evict(key, entry.data)
        self._store.pop(key, None)

    def _purge_expired(self) -> int:
        now = self._clock()
        expired = [key for key, entry in self._store.items() if entry.is_expired(now)]

        for key in expired:
            entry = self._store.get(key)
            if entry is not None:
                self._remove(key, entry)

        if expired:
            logger.debug("%s cleanup: removed %d expired entries", self.name, len(expired))
        return len(expired)

    def _evict_one(self) -> None:
        # O(n) scan; min() keeps the earliest-inserted key on timestamp ties.
        if not self._store:
            return
        victim, entry = min(self._store.items(), key=lambda kv: kv[1].timestamp)
        self._remove(victim, entry)
