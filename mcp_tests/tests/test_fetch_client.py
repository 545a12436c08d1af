import httpx
import pytest

from clients.fetch_client import FetchClient
from core.cache import CacheStore
from core.errors import ExternalServiceError, ValidationError


def _transport(handler):
    return httpx.MockTransport(handler)


@pytest.fixture
def requests_seen(monkeypatch):
    """Route httpx.AsyncClient through a MockTransport; returns (requests, set_handler)."""
    seen = []
    state = {"handler": lambda request: httpx.Response(200, json={"ok": True})}

    def handler(request: httpx.Request) -> httpx.Response:
        seen.append(request)
        return state["handler"](request)

    orig = httpx.AsyncClient

    def patched_async_client(*args, **kwargs):
        kwargs["transport"] = _transport(handler)
        return orig(*args, **kwargs)

    monkeypatch.setattr(httpx, "AsyncClient", patched_async_client)

    def set_handler(fn):
        state["handler"] = fn

    return seen, set_handler


def _client(clock):
    cache = CacheStore(ttl_seconds=120.0, max_size=50, sweep_interval_seconds=None, clock=clock)
    return FetchClient(cache=cache, timeout=5.0, verify=False)


@pytest.mark.asyncio
async def test_repeated_get_hits_network_once(requests_seen, clock):
    seen, set_handler = requests_seen
    set_handler(lambda request: httpx.Response(200, json={"mood": 7}))
    c = _client(clock)

    first = await c.cached_fetch("https://api.example/x")
    second = await c.cached_fetch("https://api.example/x")

    assert first == second == {"mood": 7}
    assert len(seen) == 1
    assert seen[0].method == "GET"
    assert c.cache.has("GET:https://api.example/x")


@pytest.mark.asyncio
async def test_lowercase_get_shares_cache_entry(requests_seen, clock):
    seen, _ = requests_seen
    c = _client(clock)

    await c.cached_fetch("https://api.example/x", method="get")
    await c.cached_fetch("https://api.example/x")

    assert len(seen) == 1


@pytest.mark.asyncio
async def test_get_refetches_after_ttl(requests_seen, clock):
    seen, _ = requests_seen
    c = _client(clock)

    await c.cached_fetch("https://api.example/x", ttl_seconds=1.0)
    clock.advance(2.0)
    await c.cached_fetch("https://api.example/x", ttl_seconds=1.0)

    assert len(seen) == 2


@pytest.mark.asyncio
async def test_explicit_cache_key(requests_seen, clock):
    seen, _ = requests_seen
    c = _client(clock)

    await c.cached_fetch("https://api.example/x?page=1", cache_key="moods")
    await c.cached_fetch("https://api.example/x?page=2", cache_key="moods")

    assert len(seen) == 1
    assert c.cache.keys() == ["moods"]


@pytest.mark.asyncio
async def test_non_get_bypasses_cache(requests_seen, clock):
    seen, set_handler = requests_seen
    set_handler(lambda request: httpx.Response(201, json={"created": True}))
    c = _client(clock)

    out1 = await c.cached_fetch("https://api.example/x", method="POST", content=b'{"mood": 5}')
    out2 = await c.cached_fetch("https://api.example/x", method="post", content=b'{"mood": 5}')

    assert out1 == out2 == {"created": True}
    assert [r.method for r in seen] == ["POST", "POST"]
    assert seen[0].content == b'{"mood": 5}'
    assert len(c.cache) == 0


@pytest.mark.asyncio
async def test_http_error_raises_and_is_not_cached(requests_seen, clock):
    seen, set_handler = requests_seen
    set_handler(lambda request: httpx.Response(500, text="boom"))
    c = _client(clock)

    with pytest.raises(ExternalServiceError) as excinfo:
        await c.cached_fetch("https://api.example/x")

    assert "HTTP 500" in str(excinfo.value)
    assert len(c.cache) == 0

    set_handler(lambda request: httpx.Response(200, json=[1, 2]))
    assert await c.cached_fetch("https://api.example/x") == [1, 2]
    assert len(seen) == 2


@pytest.mark.asyncio
async def test_non_get_error_raises(requests_seen, clock):
    _, set_handler = requests_seen
    set_handler(lambda request: httpx.Response(404, text="missing"))
    c = _client(clock)

    with pytest.raises(ExternalServiceError):
        await c.cached_fetch("https://api.example/x", method="DELETE")


@pytest.mark.asyncio
async def test_invalid_json_raises(requests_seen, clock):
    _, set_handler = requests_seen
    set_handler(lambda request: httpx.Response(200, text="<html>"))
    c = _client(clock)

    with pytest.raises(ExternalServiceError):
        await c.cached_fetch("https://api.example/x")

    assert len(c.cache) == 0


@pytest.mark.asyncio
async def test_transport_error_raises(requests_seen, clock):
    _, set_handler = requests_seen

    def fail(request):
        raise httpx.ConnectError("refused", request=request)

    set_handler(fail)
    c = _client(clock)

    with pytest.raises(ExternalServiceError):
        await c.cached_fetch("https://api.example/x")


@pytest.mark.asyncio
async def test_empty_url_raises(clock):
    c = _client(clock)

    with pytest.raises(ValidationError):
        await c.cached_fetch("   ")


def test_cache_key_for():
    assert FetchClient.cache_key_for("https://a/b") == "GET:https://a/b"
    assert FetchClient.cache_key_for("https://a/b", "get") == "GET:https://a/b"


@pytest.mark.asyncio
async def test_blank_method_is_treated_as_get(requests_seen, clock):
    seen, _ = requests_seen
    c = _client(clock)

    await c.cached_fetch("https://api.example/x", method="  ")
    await c.cached_fetch("https://api.example/x")

    assert [r.method for r in seen] == ["GET"]
    assert c.cache.keys() == ["GET:https://api.example/x"]
