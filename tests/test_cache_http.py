# tests/test_cache_http.py
"""
FetchCache TTL behaviour and HttpClient error mapping.

Network is faked with httpx.MockTransport; async code runs via asyncio.run.
"""
from __future__ import annotations

import asyncio

import httpx
import pytest

from eventfinder.deadline import Deadline
from eventfinder.errors import FetchTimeoutError, NetworkError
from eventfinder.sources.cache import FetchCache
from eventfinder.sources.http import HttpClient


class FakeClock:
    def __init__(self, now: float = 0.0) -> None:
        self.now = now

    def __call__(self) -> float:
        return self.now


# ---------------------------------------------------------------------------
# Cache
# ---------------------------------------------------------------------------

class TestFetchCache:
    def test_hit_within_ttl(self):
        clock = FakeClock()
        cache = FetchCache(ttl_s=600, clock=clock)
        cache.put("GET:https://a.test/", "<html>a</html>")
        clock.now = 599
        assert cache.get("GET:https://a.test/") == "<html>a</html>"

    def test_expired_entry_is_evicted(self):
        clock = FakeClock()
        cache = FetchCache(ttl_s=600, clock=clock)
        cache.put("k", "body")
        clock.now = 601
        assert cache.get("k") is None
        assert len(cache) == 0

    def test_overwrite_resets_age(self):
        clock = FakeClock()
        cache = FetchCache(ttl_s=10, clock=clock)
        cache.put("k", "old")
        clock.now = 8
        cache.put("k", "new")
        clock.now = 15
        assert cache.get("k") == "new"

    def test_miss(self):
        assert FetchCache().get("nope") is None


# ---------------------------------------------------------------------------
# HTTP client
# ---------------------------------------------------------------------------

def _client(handler, **kwargs) -> HttpClient:
    return HttpClient(FetchCache(), transport=httpx.MockTransport(handler), **kwargs)


def test_fetch_text_sends_identity_headers_and_caches():
    calls = []

    def handler(request: httpx.Request) -> httpx.Response:
        calls.append(request)
        return httpx.Response(200, text="<html>ok</html>")

    async def go():
        async with _client(handler, user_agent="TestAgent/1.0") as client:
            first = await client.fetch_text("https://events.test/list")
            second = await client.fetch_text("https://events.test/list")
            return first, second

    first, second = asyncio.run(go())
    assert first == second == "<html>ok</html>"
    assert len(calls) == 1
    assert calls[0].headers["User-Agent"] == "TestAgent/1.0"
    assert "en-US" in calls[0].headers["Accept-Language"]


def test_non_success_status_raises_and_is_not_cached():
    calls = []

    def handler(request: httpx.Request) -> httpx.Response:
        calls.append(request)
        return httpx.Response(404, text="missing")

    async def go():
        async with _client(handler) as client:
            for _ in range(2):
                with pytest.raises(NetworkError) as exc_info:
                    await client.fetch_text("https://events.test/gone")
                assert exc_info.value.status_code == 404
                assert exc_info.value.url == "https://events.test/gone"

    asyncio.run(go())
    assert len(calls) == 2


def test_transport_error_is_network_error():
    def handler(request: httpx.Request) -> httpx.Response:
        raise httpx.ConnectError("refused", request=request)

    async def go():
        async with _client(handler) as client:
            await client.fetch_text("https://events.test/")

    with pytest.raises(NetworkError):
        asyncio.run(go())


def test_transport_timeout_is_fetch_timeout():
    def handler(request: httpx.Request) -> httpx.Response:
        raise httpx.ReadTimeout("slow", request=request)

    async def go():
        async with _client(handler) as client:
            await client.fetch_text("https://events.test/")

    with pytest.raises(FetchTimeoutError):
        asyncio.run(go())


def test_slow_response_hits_per_fetch_timeout():
    async def handler(request: httpx.Request) -> httpx.Response:
        await asyncio.sleep(2)
        return httpx.Response(200, text="late")

    async def go():
        async with _client(handler, timeout_s=0.05) as client:
            await client.fetch_text("https://events.test/slow")

    with pytest.raises(FetchTimeoutError):
        asyncio.run(go())


def test_expired_deadline_skips_the_network():
    calls = []

    def handler(request: httpx.Request) -> httpx.Response:
        calls.append(request)
        return httpx.Response(200, text="x")

    async def go():
        async with _client(handler) as client:
            await client.fetch_text("https://events.test/", Deadline(0, clock=FakeClock(5.0)))

    with pytest.raises(FetchTimeoutError):
        asyncio.run(go())
    assert calls == []


def test_deadline_child_never_outlives_parent():
    clock = FakeClock(100.0)
    parent = Deadline(5, clock=clock)
    child = parent.child(60)
    assert child.remaining() == 5
    clock.now = 106
    assert child.expired
