"""MCP tool that empties one named cache."""

from __future__ import annotations

from typing import Any, Dict

from mcp.server.fastmcp import FastMCP

from core.errors import ValidationError
from core.registry import CacheRegistry


def register(mcp: FastMCP, *, registry: CacheRegistry) -> None:
    @mcp.tool(name="cache_clear")
    async def cache_clear(cache: str = "") -> Dict[str, Any]:
        """Remove every entry from a named cache and report how many were dropped."""
        if not cache or not cache.strip():
            raise ValidationError("Missing cache name")

        store = registry.get(cache)
        cleared = len(store)
        store.clear()
        return {"cache": store.name, "cleared": cleared}
