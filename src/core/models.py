"""Immutable dataclasses describing cache statistics.

Returned by CacheStore.get_stats() and serialized by the MCP tools, so
every model exposes an as_dict() helper producing plain JSON data.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Dict, List


@dataclass(frozen=True)
class EntryStats:
    """Per-entry snapshot: key, read count and seconds since last touch."""

    key: str
    hits: int
    age: float

    def as_dict(self) -> Dict[str, Any]:
        return {"key": self.key, "hits": self.hits, "age": self.age}


@dataclass(frozen=True)
class CacheStats:
    """Store-level snapshot.

    hit_rate is total_hits / (total_hits + size) * 100. Misses are not
    tracked, so this is a popularity heuristic rather than a hit/miss ratio.
    """

    size: int
    max_size: int
    hit_rate: float
    entries: List[EntryStats] = field(default_factory=list)

    def as_dict(self) -> Dict[str, Any]:
        return {
            "size": self.size,
            "max_size": self.max_size,
            "hit_rate": self.hit_rate,
            "entries": [e.as_dict() for e in self.entries],
        }
