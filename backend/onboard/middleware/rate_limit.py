"""Rate limiting middleware using Redis.

Fixed window per client IP over everything under /api: the first request
of a window creates the counter with INCR and sets its TTL with EXPIRE;
once the counter passes the limit the request is answered with 429 until
the key expires. When Redis is unreachable requests are let through.
"""

import logging
from typing import Callable, Optional

import redis.asyncio as redis
from fastapi import Request, Response
from starlette.middleware.base import BaseHTTPMiddleware

from onboard.config import settings
from onboard.middleware.exceptions import TooManyRequestsError, create_error_response
from onboard.utils.redis_client import get_redis

logger = logging.getLogger(__name__)


class RateLimitMiddleware(BaseHTTPMiddleware):

    def __init__(
        self,
        app,
        limit: Optional[int] = None,
        window: Optional[int] = None,
        prefix: str = "/api",
        enabled: Optional[bool] = None,
        redis_factory: Callable = get_redis,
    ):
        super().__init__(app)
        self.limit = limit or settings.rate_limit_max_requests
        self.window = window or settings.rate_limit_window_seconds
        self.prefix = prefix
        self.enabled = settings.rate_limit_enabled if enabled is None else enabled
        self.redis_factory = redis_factory

    async def dispatch(self, request: Request, call_next: Callable) -> Response:
        if not self.enabled or not request.url.path.startswith(self.prefix):
            return await call_next(request)

        key = f"ratelimit:ip:{self._client_ip(request)}"
        allowed, remaining, retry_after = await self._check_rate_limit(key)

        if not allowed:
            # Middleware runs outside the exception handlers, so render directly
            exc = TooManyRequestsError()
            logger.warning("Rate limit exceeded for %s", key)
            return create_error_response(
                status_code=exc.status_code,
                message=exc.message,
                error_code=exc.error_code,
                headers={
                    "X-RateLimit-Limit": str(self.limit),
                    "X-RateLimit-Remaining": "0",
                    "X-RateLimit-Reset": str(retry_after),
                    "Retry-After": str(retry_after),
                },
            )

        response = await call_next(request)

        if remaining is not None:
            response.headers["X-RateLimit-Limit"] = str(self.limit)
            response.headers["X-RateLimit-Remaining"] = str(remaining)
            response.headers["X-RateLimit-Reset"] = str(retry_after)

        return response

    @staticmethod
    def _client_ip(request: Request) -> str:
        # Check for X-Forwarded-For (load balancer)
        forwarded = request.headers.get("x-forwarded-for")
        if forwarded:
            return forwarded.split(",")[0].strip()
        return request.client.host if request.client else "unknown"

    async def _check_rate_limit(self, key: str) -> tuple[bool, Optional[int], int]:
        """Count this request in the current window.

        Returns:
            (allowed, remaining, seconds until the window resets);
            remaining is None when Redis could not be consulted.
        """
        try:
            redis_client = await self.redis_factory()
            count = await redis_client.incr(key)
            if count == 1:
                await redis_client.expire(key, self.window)
            ttl = await redis_client.ttl(key)
        except (redis.RedisError, OSError) as e:
            # If Redis fails, allow request (fail open)
            logger.error(f"Rate limit check failed: {e}")
            return True, None, self.window

        retry_after = ttl if ttl and ttl > 0 else self.window
        if count > self.limit:
            return False, 0, retry_after
        return True, self.limit - count, retry_after
