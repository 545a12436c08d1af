"""Server bootstrap for the cache MCP service.

Builds the cache registry and fetch client once, injects them into the
tools, and ties the caches' sweep tasks to the server lifespan before
starting the MCP server (stdio transport).
"""

from contextlib import asynccontextmanager
from typing import AsyncIterator, Dict

from mcp.server.fastmcp import FastMCP

from clients.fetch_client import FetchClient
from config import FETCH_TIMEOUT, HTTP_VERIFY, LOG_LEVEL
from core.logging_setup import configure_logging
from core.registry import CacheRegistry

from tools.cache_clear import register as register_cache_clear
from tools.cache_stats import register as register_cache_stats
from tools.fetch_json import register as register_fetch_json

registry = CacheRegistry.from_config()


@asynccontextmanager
async def lifespan(server: FastMCP) -> AsyncIterator[Dict[str, CacheRegistry]]:
    registry.start()
    try:
        yield {"registry": registry}
    finally:
        await registry.aclose()


mcp = FastMCP("cache-mcp", lifespan=lifespan)


def register_tools() -> None:
    fetch_client = FetchClient(cache=registry.api, timeout=FETCH_TIMEOUT, verify=HTTP_VERIFY)

    register_fetch_json(mcp, fetch_client=fetch_client)
    register_cache_stats(mcp, registry=registry)
    register_cache_clear(mcp, registry=registry)


def register_all() -> None:
    register_tools()


register_all()


def main() -> None:
    configure_logging(LOG_LEVEL)
    mcp.run(transport="stdio")


if __name__ == "__main__":
    main()
