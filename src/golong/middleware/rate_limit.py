"""Per-client request budget, counted in Redis fixed windows."""

import time
from typing import Any

from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint
from starlette.requests import Request
from starlette.responses import JSONResponse, Response

from golong.redis_client import get_redis

_EXEMPT_PATHS = frozenset({"/health", "/ready"})
_KEY_PREFIX = "golong:ratelimit"


class RateLimitMiddleware(BaseHTTPMiddleware):
    """429 once a client IP spends ``limit`` requests inside one window."""

    def __init__(self, app: Any, requests_per_window: int = 100, window_seconds: int = 60) -> None:  # noqa: ANN401
        super().__init__(app)
        self.limit = requests_per_window
        self.window_seconds = window_seconds

    def _budget_headers(self, used: int) -> dict[str, str]:
        return {
            "X-RateLimit-Limit": str(self.limit),
            "X-RateLimit-Remaining": str(max(0, self.limit - used)),
        }

    async def _count(self, request: Request) -> int | None:
        """Bump this client's counter; ``None`` when Redis is not set up."""
        try:
            redis = get_redis()
        except RuntimeError:
            return None

        host = request.client.host if request.client else "unknown"
        bucket = int(time.time()) // self.window_seconds
        key = f"{_KEY_PREFIX}:{host}:{bucket}"

        pipe = redis.pipeline()
        pipe.incr(key)
        pipe.expire(key, self.window_seconds + 1)
        used, _ = await pipe.execute()
        return int(used)

    async def dispatch(self, request: Request, call_next: RequestResponseEndpoint) -> Response:
        if request.method == "OPTIONS" or request.url.path in _EXEMPT_PATHS:
            return await call_next(request)

        used = await self._count(request)
        if used is None:
            return await call_next(request)

        if used > self.limit:
            return JSONResponse(
                status_code=429,
                content={"error": "Rate limit exceeded. Try again later."},
                headers={"Retry-After": str(self.window_seconds), **self._budget_headers(used)},
            )

        response = await call_next(request)
        response.headers.update(self._budget_headers(used))
        return response
