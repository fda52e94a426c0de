"""Login rate limiting (anti brute-force).

Fixed window per client IP on POST /api/v1/auth/login, in one MULTI:
    SET ratelimit:login:{ip} 0 EX 60 NX
    count = INCR ratelimit:login:{ip}
    count > LOGIN_RATE_LIMIT_PER_MINUTE → 429 + Retry-After

X-Forwarded-For is only read when TRUSTED_PROXY_COUNT proxies sit in front
of the app: the client address is the entry that many hops from the right,
since everything to its left is client supplied. If Redis is down the
request is let through; the limiter is a throttle, not an auth control.
"""

import logging
from collections.abc import Awaitable, Callable

from redis.exceptions import RedisError
from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint
from starlette.requests import Request
from starlette.responses import JSONResponse, Response
from starlette.types import ASGIApp

from config.settings import settings
from src.bl_common.errors import RateLimitError
from src.bl_common.redis_client import get_redis
from src.bl_common.response import error_response

logger = logging.getLogger(__name__)

LOGIN_PATH = "/api/v1/auth/login"
WINDOW_SECONDS = 60


def client_ip(request: Request, trusted_proxies: int = 0) -> str:
    peer = request.client.host if request.client else "unknown"
    if trusted_proxies <= 0:
        return peer
    hops = [h.strip() for h in request.headers.get("x-forwarded-for", "").split(",") if h.strip()]
    if len(hops) < trusted_proxies:
        return peer
    return hops[-trusted_proxies]


class LoginRateLimitMiddleware(BaseHTTPMiddleware):
    def __init__(
        self,
        app: ASGIApp,
        limit: int | None = None,
        redis_factory: Callable[[], Awaitable[object]] = get_redis,
        trusted_proxies: int | None = None,
    ) -> None:
        super().__init__(app)
        self._limit = settings.LOGIN_RATE_LIMIT_PER_MINUTE if limit is None else limit
        self._redis_factory = redis_factory
        self._trusted_proxies = (
            settings.TRUSTED_PROXY_COUNT if trusted_proxies is None else trusted_proxies
        )

    async def dispatch(self, request: Request, call_next: RequestResponseEndpoint) -> Response:
        if self._limit <= 0 or request.method != "POST" or request.url.path != LOGIN_PATH:
            return await call_next(request)

        ip = client_ip(request, self._trusted_proxies)
        key = f"ratelimit:login:{ip}"
        try:
            redis = await self._redis_factory()
            async with redis.pipeline(transaction=True) as pipe:  # type: ignore[attr-defined]
                _, count = await pipe.set(key, 0, ex=WINDOW_SECONDS, nx=True).incr(key).execute()
        except (RedisError, OSError) as exc:
            logger.warning("Rate limiter unavailable, letting login through: %s", exc)
            return await call_next(request)

        if count > self._limit:
            logger.warning("Login rate limit hit for %s (%d attempts)", ip, count)
            exc = RateLimitError(retry_after=WINDOW_SECONDS)
            resp = error_response(exc.code, exc.message)
            resp.request_id = getattr(request.state, "request_id", resp.request_id)
            return JSONResponse(
                status_code=exc.http_status,
                content=resp.model_dump(),
                headers={"Retry-After": str(exc.retry_after)},
            )
        return await call_next(request)
