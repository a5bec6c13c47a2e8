# backend/tests/test_rate_limit.py
"""Tests for rate limiting and request id middleware."""
import pytest
from unittest.mock import AsyncMock, patch
from fastapi import FastAPI
from fastapi.testclient import TestClient
import redis.asyncio as redis

from bloxmarket.middleware.rate_limit import RateLimitMiddleware
from bloxmarket.middleware.request_id import RequestIdMiddleware


@pytest.fixture
def test_app():
    """Create a test FastAPI app with rate limiting middleware."""
    app = FastAPI()
    app.add_middleware(
        RateLimitMiddleware,
        redis_url="redis://localhost:6379/0",
        requests_per_minute=60,
        auth_requests_per_minute=5,
    )
    app.add_middleware(RequestIdMiddleware)

    @app.get("/api/trades")
    async def trades_endpoint():
        return {"status": "ok"}

    @app.get("/api/health")
    async def health_endpoint():
        return {"status": "healthy"}

    @app.post("/api/auth/login")
    async def login_endpoint():
        return {"status": "logged_in"}

    return app


def mock_redis_with_count(count: int) -> AsyncMock:
    mock_redis = AsyncMock()
    mock_redis.incr = AsyncMock(return_value=count)
    mock_redis.expire = AsyncMock(return_value=True)
    return mock_redis


def test_rate_limit_fails_open_on_redis_error(test_app):
    """Requests still go through when Redis is unavailable."""
    client = TestClient(test_app)

    with patch.object(
        RateLimitMiddleware,
        'get_redis',
        new_callable=AsyncMock,
        side_effect=redis.ConnectionError("Connection refused")
    ):
        response = client.get("/api/trades")

        assert response.status_code == 200


def test_rate_limit_returns_429_when_limit_exceeded(test_app):
    client = TestClient(test_app)

    with patch.object(
        RateLimitMiddleware,
        'get_redis',
        new_callable=AsyncMock,
        return_value=mock_redis_with_count(61)
    ):
        response = client.get("/api/trades")

        assert response.status_code == 429
        assert response.json() == {"error": "Too many requests. Please try again later."}
        assert 1 <= int(response.headers["Retry-After"]) <= 60
        assert response.headers["X-RateLimit-Remaining"] == "0"


def test_auth_endpoints_have_stricter_limit(test_app):
    client = TestClient(test_app)
    mock_redis = mock_redis_with_count(6)

    with patch.object(RateLimitMiddleware, 'get_redis', new_callable=AsyncMock, return_value=mock_redis):
        login = client.post("/api/auth/login")
        browse = client.get("/api/trades")

    assert login.status_code == 429
    assert browse.status_code == 200
    keys = [call.args[0] for call in mock_redis.incr.await_args_list]
    assert keys[0].startswith("rate_limit:auth:")
    assert not keys[1].startswith("rate_limit:auth:")


def test_first_hit_sets_window_expiry(test_app):
    client = TestClient(test_app)
    mock_redis = mock_redis_with_count(1)

    with patch.object(RateLimitMiddleware, 'get_redis', new_callable=AsyncMock, return_value=mock_redis):
        response = client.get("/api/trades")

    assert response.status_code == 200
    mock_redis.expire.assert_awaited_once()


def test_health_check_is_exempt(test_app):
    client = TestClient(test_app)

    with patch.object(RateLimitMiddleware, 'get_redis', new_callable=AsyncMock) as get_redis:
        response = client.get("/api/health")

    assert response.status_code == 200
    get_redis.assert_not_awaited()


def test_disabled_middleware_skips_redis():
    app = FastAPI()
    app.add_middleware(RateLimitMiddleware, enabled=False)

    @app.get("/api/trades")
    async def trades_endpoint():
        return {"status": "ok"}

    with patch.object(RateLimitMiddleware, 'get_redis', new_callable=AsyncMock) as get_redis:
        response = TestClient(app).get("/api/trades")

    assert response.status_code == 200
    get_redis.assert_not_awaited()


def test_request_id_is_echoed(test_app):
    client = TestClient(test_app)

    with patch.object(RateLimitMiddleware, 'get_redis', new_callable=AsyncMock, return_value=mock_redis_with_count(1)):
        generated = client.get("/api/trades")
        supplied = client.get("/api/trades", headers={"X-Request-ID": "abc-123"})

    assert generated.headers["X-Request-ID"]
    assert supplied.headers["X-Request-ID"] == "abc-123"


def test_unsafe_request_id_is_replaced(test_app):
    client = TestClient(test_app)

    with patch.object(RateLimitMiddleware, 'get_redis', new_callable=AsyncMock, return_value=mock_redis_with_count(1)):
        response = client.get("/api/trades", headers={"X-Request-ID": "<script>alert(1)</script>"})

    assert response.headers["X-Request-ID"] != "<script>alert(1)</script>"
    assert len(response.headers["X-Request-ID"]) == 32


def test_allowed_response_reports_remaining_quota(test_app):
    client = TestClient(test_app)

    with patch.object(RateLimitMiddleware, 'get_redis', new_callable=AsyncMock, return_value=mock_redis_with_count(15)):
        response = client.get("/api/trades")

    assert response.status_code == 200
    assert response.headers["X-RateLimit-Limit"] == "60"
    assert response.headers["X-RateLimit-Remaining"] == "45"
