"""Rate limiting middleware tests against an in-memory Redis stand-in."""

import pytest
import redis.asyncio as redis
from fastapi import FastAPI
from httpx import ASGITransport, AsyncClient

from onboard.middleware.rate_limit import RateLimitMiddleware


class FakeRedis:
    """Just enough of INCR / EXPIRE / TTL for a fixed window."""

    def __init__(self):
        self.counters: dict[str, int] = {}
        self.ttls: dict[str, int] = {}

    async def incr(self, key):
        self.counters[key] = self.counters.get(key, 0) + 1
        return self.counters[key]

    async def expire(self, key, seconds):
        self.ttls[key] = seconds
        return True

    async def ttl(self, key):
        return self.ttls.get(key, -1)


class BrokenRedis:
    async def incr(self, key):
        raise redis.ConnectionError("Connection refused")


def build_app(backend, limit: int = 2) -> FastAPI:
    app = FastAPI()

    async def factory():
        return backend

    app.add_middleware(
        RateLimitMiddleware,
        limit=limit,
        window=60,
        enabled=True,
        redis_factory=factory,
    )

    @app.get("/api/ping")
    async def ping():
        return {"ok": True}

    @app.get("/health")
    async def health():
        return {"ok": True}

    return app


def http(app: FastAPI) -> AsyncClient:
    return AsyncClient(transport=ASGITransport(app=app), base_url="http://test")


@pytest.mark.unit
@pytest.mark.asyncio
class TestRateLimit:

    async def test_blocks_after_limit(self):
        backend = FakeRedis()
        async with http(build_app(backend)) as client:
            first = await client.get("/api/ping")
            second = await client.get("/api/ping")
            third = await client.get("/api/ping")

        assert first.status_code == 200
        assert first.headers["X-RateLimit-Limit"] == "2"
        assert first.headers["X-RateLimit-Remaining"] == "1"
        assert second.headers["X-RateLimit-Remaining"] == "0"

        assert third.status_code == 429
        assert third.headers["Retry-After"] == "60"
        body = third.json()
        assert body["success"] is False
        assert body["error"]["code"] == "TOO_MANY_REQUESTS"

        assert list(backend.ttls.values()) == [60]

    async def test_counts_per_forwarded_ip(self):
        backend = FakeRedis()
        async with http(build_app(backend, limit=1)) as client:
            a = await client.get("/api/ping", headers={"X-Forwarded-For": "10.0.0.1, 172.16.0.1"})
            b = await client.get("/api/ping", headers={"X-Forwarded-For": "10.0.0.2"})
            again = await client.get("/api/ping", headers={"X-Forwarded-For": "10.0.0.1"})

        assert a.status_code == 200
        assert b.status_code == 200
        assert again.status_code == 429
        assert set(backend.counters) == {"ratelimit:ip:10.0.0.1", "ratelimit:ip:10.0.0.2"}

    async def test_paths_outside_api_are_not_limited(self):
        backend = FakeRedis()
        async with http(build_app(backend, limit=1)) as client:
            for _ in range(3):
                response = await client.get("/health")
                assert response.status_code == 200

        assert backend.counters == {}

    async def test_fails_open_when_redis_is_down(self):
        async with http(build_app(BrokenRedis(), limit=1)) as client:
            responses = [await client.get("/api/ping") for _ in range(3)]

        assert all(r.status_code == 200 for r in responses)
        assert "X-RateLimit-Remaining" not in responses[0].headers

    async def test_disabled_skips_redis(self):
        app = FastAPI()

        async def factory():
            raise AssertionError("redis should not be consulted")

        app.add_middleware(RateLimitMiddleware, limit=1, enabled=False, redis_factory=factory)

        @app.get("/api/ping")
        async def ping():
            return {"ok": True}

        async with http(app) as client:
            assert (await client.get("/api/ping")).status_code == 200
            assert (await client.get("/api/ping")).status_code == 200
