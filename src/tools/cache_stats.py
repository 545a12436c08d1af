"""MCP tool reporting statistics for the named caches.

Registers 'cache_stats', which returns size, capacity, hit rate and
per-entry hit counts for one cache or for every cache in the registry.
"""

from __future__ import annotations

from typing import Any, Dict, Optional

from mcp.server.fastmcp import FastMCP

from core.registry import CacheRegistry


def register(mcp: FastMCP, *, registry: CacheRegistry) -> None:
    @mcp.tool(name="cache_stats")
    async def cache_stats(cache: Optional[str] = None) -> Dict[str, Any]:
        """Return statistics for the named caches.

        Params:
          - cache: one of the registry names ("api", "user_data", "static").
            When omitted, every cache is reported.

        Returns:
          A mapping of cache name to {size, max_size, hit_rate, entries},
          where entries are sorted by descending hits. hit_rate is a
          popularity heuristic: misses are not counted.

        Raises:
          ValidationError for an unknown cache name.
        """
        if cache and cache.strip():
            store = registry.get(cache)
            return {store.name: store.get_stats().as_dict()}

        return {name: stats.as_dict() for name, stats in registry.stats().items()}
