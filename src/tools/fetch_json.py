"""MCP tool that fetches JSON through the API cache.

Registers 'fetch_json', a thin wrapper over FetchClient.cached_fetch:
GET responses are served from cache within their TTL, other methods
always hit the network.
"""

from __future__ import annotations

from typing import Any, Optional

from mcp.server.fastmcp import FastMCP

from clients.fetch_client import FetchClient
from core.errors import ValidationError


def register(mcp: FastMCP, *, fetch_client: FetchClient) -> None:
    @mcp.tool(name="fetch_json")
    async def fetch_json(
        url: str = "",
        method: str = "GET",
        cache_key: Optional[str] = None,
        ttl_seconds: Optional[float] = None,
    ) -> Any:
        """Fetch a URL and return its decoded JSON body.

        Params:
          - url: absolute http(s) URL (required).
          - method: HTTP method (default "GET"). Only GET is cached.
          - cache_key: optional key overriding the default "<METHOD>:<url>".
          - ttl_seconds: optional lifetime for this entry; defaults to the
            API cache TTL.

        Raises:
          ValidationError for a missing URL; ExternalServiceError for
          non-2xx responses, network failures or invalid JSON.
        """
        if not url or not url.strip():
            raise ValidationError("Missing url")

        return await fetch_client.cached_fetch(
            url.strip(),
            method=method,
            cache_key=cache_key,
            ttl_seconds=ttl_seconds,
        )
