"""Rate limiting middleware using Redis."""
import time
from typing import Callable, Optional

from fastapi import Request
from starlette.middleware.base import BaseHTTPMiddleware
from starlette.responses import JSONResponse, Response
import redis.asyncio as redis
import structlog

from bloxmarket.core.config import settings

logger = structlog.get_logger()

EXEMPT_PATHS = frozenset({"/health", "/api/health"})


class RateLimitMiddleware(BaseHTTPMiddleware):
    """
    Fixed one-minute window per client IP, stricter on auth endpoints.

    Redis errors let the request through.
    """

    def __init__(
        self,
        app,
        redis_url: Optional[str] = None,
        requests_per_minute: int = 120,
        auth_requests_per_minute: int = 10,
        enabled: bool = True,
    ):
        super().__init__(app)
        self.redis_url = redis_url or settings.redis_url
        self.requests_per_minute = requests_per_minute
        self.auth_requests_per_minute = auth_requests_per_minute
        self.enabled = enabled
        self._redis: redis.Redis | None = None

    async def get_redis(self) -> redis.Redis:
        """Get or create Redis connection."""
        if self._redis is None:
            self._redis = redis.from_url(self.redis_url)
        return self._redis

    async def dispatch(self, request: Request, call_next: Callable) -> Response:
        if not self.enabled or request.url.path in EXEMPT_PATHS or request.url.path.startswith("/uploads/"):
            return await call_next(request)

        client_ip = request.client.host if request.client else "unknown"

        is_auth_endpoint = "/auth/" in request.url.path
        limit = self.auth_requests_per_minute if is_auth_endpoint else self.requests_per_minute

        window = int(time.time() // 60)
        key = f"rate_limit:auth:{client_ip}:{window}" if is_auth_endpoint else f"rate_limit:{client_ip}:{window}"

        try:
            r = await self.get_redis()
            current = await r.incr(key)
            if current == 1:
                await r.expire(key, 60)
        except redis.RedisError as e:
            logger.warning("rate_limit_unavailable", error=str(e))
            return await call_next(request)

        headers = {
            "X-RateLimit-Limit": str(limit),
            "X-RateLimit-Remaining": str(max(limit - current, 0)),
        }
        if current > limit:
            logger.warning("rate_limit_exceeded", client_ip=client_ip, limit=limit)
            return JSONResponse(
                status_code=429,
                content={"error": "Too many requests. Please try again later."},
                headers={**headers, "Retry-After": str(60 - int(time.time()) % 60)},
            )

        response = await call_next(request)
        response.headers.update(headers)
        return response
