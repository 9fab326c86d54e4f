"""Middleware tests: request ID, rate limiting, CORS, error handling."""

from __future__ import annotations

from typing import Any

import pytest
from fastapi import FastAPI
from httpx import ASGITransport, AsyncClient


class _FakePipeline:
    def __init__(self, store: dict[str, int]) -> None:
        self.store = store
        self.ops: list[tuple[str, str]] = []

    def incr(self, key: str) -> None:
        self.ops.append(("incr", key))

    def expire(self, key: str, _seconds: int) -> None:
        self.ops.append(("expire", key))

    async def execute(self) -> list[Any]:
        results: list[Any] = []
        for op, key in self.ops:
            # Ignore the window suffix so a minute rollover mid-test cannot reset the count
            bucket = key.rsplit(":", 1)[0]
            if op == "incr":
                self.store[bucket] = self.store.get(bucket, 0) + 1
                results.append(self.store[bucket])
            else:
                results.append(True)
        return results


class _FakeRedis:
    def __init__(self) -> None:
        self.store: dict[str, int] = {}

    def pipeline(self) -> _FakePipeline:
        return _FakePipeline(self.store)


@pytest.mark.asyncio
async def test_request_id_generated(client: AsyncClient) -> None:
    """Request ID is auto-generated when not provided."""
    response = await client.get("/health")
    assert "x-request-id" in response.headers
    assert len(response.headers["x-request-id"]) == 36  # UUID format


@pytest.mark.asyncio
async def test_request_id_preserved(client: AsyncClient) -> None:
    """Custom request ID is echoed back in response."""
    response = await client.get("/health", headers={"X-Request-Id": "test-abc-123"})
    assert response.headers["x-request-id"] == "test-abc-123"


@pytest.mark.asyncio
async def test_malformed_request_id_replaced(client: AsyncClient) -> None:
    """Ids with unsafe characters or excessive length are not echoed back."""
    response = await client.get("/health", headers={"X-Request-Id": "bad id with spaces" + "x" * 80})
    assert response.headers["x-request-id"] != "bad id with spaces" + "x" * 80
    assert len(response.headers["x-request-id"]) == 36


@pytest.mark.asyncio
async def test_cors_preflight_skips_auth(client: AsyncClient) -> None:
    """Preflight on an authenticated route is answered by CORS, not rejected with 401."""
    response = await client.options(
        "/admin/users",
        headers={
            "Origin": "http://localhost:5173",
            "Access-Control-Request-Method": "GET",
        },
    )
    assert response.status_code == 200
    assert response.headers["access-control-allow-origin"] == "http://localhost:5173"


@pytest.mark.asyncio
async def test_404_returns_json(client: AsyncClient) -> None:
    """Unknown paths return 404 with JSON body."""
    response = await client.get("/nonexistent-path")
    assert response.status_code == 404
    assert response.headers["content-type"] == "application/json"
    assert response.json()["detail"] == "Not Found"


@pytest.mark.asyncio
async def test_validation_error_is_400(admin_client: AsyncClient) -> None:
    """Malformed input is reported as 400 with the offending fields."""
    response = await admin_client.get("/admin/stats/visits-over-time?days=abc")
    assert response.status_code == 400
    data = response.json()
    assert data["detail"] == "Validation error"
    assert data["errors"][0]["loc"][-1] == "days"


@pytest.mark.asyncio
async def test_rate_limit_headers_and_block(client: AsyncClient, monkeypatch: pytest.MonkeyPatch) -> None:
    """With Redis available, requests past the window budget get 429 with Retry-After."""
    fake = _FakeRedis()
    monkeypatch.setattr("matcha.middleware.rate_limit.get_redis_or_none", lambda: fake)

    # Middleware instances are built on first request; the configured budget is 300/min
    for _ in range(300):
        response = await client.get("/version")
        assert response.status_code == 200
    assert response.headers["x-ratelimit-remaining"] == "0"
    assert response.headers["x-ratelimit-limit"] == "300"

    response = await client.get("/version")
    assert response.status_code == 429
    assert "retry-after" in response.headers
    assert "detail" in response.json()


@pytest.mark.asyncio
async def test_health_exempt_from_rate_limit(client: AsyncClient, monkeypatch: pytest.MonkeyPatch) -> None:
    """Health checks never touch the rate limiter."""
    fake = _FakeRedis()
    monkeypatch.setattr("matcha.middleware.rate_limit.get_redis_or_none", lambda: fake)

    for _ in range(5):
        response = await client.get("/health")
        assert response.status_code == 200
    assert fake.store == {}


@pytest.mark.asyncio
async def test_rate_limit_budget_per_forwarded_ip(client: AsyncClient, monkeypatch: pytest.MonkeyPatch) -> None:
    """Clients behind the same proxy are limited by their forwarded address, not the proxy's."""
    fake = _FakeRedis()
    monkeypatch.setattr("matcha.middleware.rate_limit.get_redis_or_none", lambda: fake)
    first = {"X-Forwarded-For": "203.0.113.1, 10.0.0.1"}
    second = {"X-Forwarded-For": "198.51.100.99, 10.0.0.1"}

    for _ in range(300):
        response = await client.get("/version", headers=first)
        assert response.status_code == 200

    response = await client.get("/version", headers=second)
    assert response.status_code == 200
    assert response.headers["x-ratelimit-remaining"] == "299"

    response = await client.get("/version", headers=first)
    assert response.status_code == 429
    assert set(fake.store) == {"ratelimit:203.0.113.1", "ratelimit:198.51.100.99"}


@pytest.mark.asyncio
async def test_cors_preflight_allows_used_verbs(client: AsyncClient) -> None:
    response = await client.options(
        "/admin/announcements/1/deactivate",
        headers={
            "Origin": "http://localhost:5173",
            "Access-Control-Request-Method": "PATCH",
            "Access-Control-Request-Headers": "Authorization",
        },
    )
    assert response.status_code == 200
    assert "PATCH" in response.headers["access-control-allow-methods"]
    assert "PUT" not in response.headers["access-control-allow-methods"]


@pytest.mark.asyncio
async def test_unhandled_exception_returns_500_json(app: FastAPI) -> None:
    """An exception escaping a handler becomes a generic JSON 500."""

    @app.get("/explode")
    async def explode() -> None:
        msg = "database on fire"
        raise RuntimeError(msg)

    transport = ASGITransport(app=app, raise_app_exceptions=False)
    async with AsyncClient(transport=transport, base_url="http://test") as ac:
        response = await ac.get("/explode")

    assert response.status_code == 500
    assert response.json() == {"detail": "Internal server error"}
    assert "database on fire" not in response.text
