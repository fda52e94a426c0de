"""FastAPI application entry point.

Run with: uvicorn src.main:app --reload --port 8000
"""

# ruff: noqa: E402  -- uvloop.install() must run before other imports

import uvloop

uvloop.install()

import logging
from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse

from config.settings import settings
from src.bl_account.api.router import router as account_router
from src.bl_common.database import engine
from src.bl_common.errors import (
    AppError,
    FieldValidationError,
    ForbiddenRoleError,
    GameTokenError,
    RateLimitError,
    ServiceUnavailableError,
    SessionRejectedError,
)
from src.bl_common.health import DatabaseHealth
from src.bl_common.redis_client import close_redis, get_redis
from src.bl_common.response import error_response
from src.bl_game.api.router import router as game_router
from src.bl_gateway.api.router import router as auth_router
from src.bl_gateway.auth.cookies import clear_game_cookie, clear_session_cookies
from src.bl_gateway.middleware.rate_limit import LoginRateLimitMiddleware
from src.bl_gateway.middleware.request_log import RequestLogMiddleware
from src.bl_ledger.api.router import router as history_router

logging.basicConfig(
    level=logging.DEBUG if settings.DEBUG else logging.INFO,
    format="%(asctime)s %(levelname)s %(name)s: %(message)s",
)
logger = logging.getLogger(__name__)

db_health = DatabaseHealth(engine)


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """Startup: verify DB (with retries) + Redis. Shutdown: dispose."""
    if not await db_health.check():
        raise ServiceUnavailableError()
    await get_redis()
    yield
    await engine.dispose()
    await close_redis()


app = FastAPI(
    title=settings.APP_NAME,
    version="0.1.0",
    lifespan=lifespan,
)

# Last added runs first: request_id must exist before the limiter answers.
app.add_middleware(LoginRateLimitMiddleware)
app.add_middleware(RequestLogMiddleware)


@app.exception_handler(AppError)
async def app_error_handler(request: Request, exc: AppError) -> JSONResponse:
    data = {"errors": exc.errors} if isinstance(exc, FieldValidationError) else None
    resp = error_response(exc.code, exc.message, data)
    resp.request_id = getattr(request.state, "request_id", resp.request_id)

    headers = {}
    if isinstance(exc, RateLimitError):
        headers["Retry-After"] = str(exc.retry_after)

    response = JSONResponse(
        status_code=exc.http_status,
        content=resp.model_dump(),
        headers=headers,
    )
    # A rejected identity discards every credential the client holds.
    if isinstance(exc, (SessionRejectedError, ForbiddenRoleError)):
        clear_session_cookies(response)
    elif isinstance(exc, GameTokenError):
        clear_game_cookie(response)
    return response


app.include_router(auth_router, prefix="/api/v1")
app.include_router(account_router, prefix="/api/v1")
app.include_router(history_router, prefix="/api/v1")
app.include_router(game_router, prefix="/api/v1")


@app.get("/health")
async def health() -> JSONResponse:
    healthy = await db_health.ping()
    return JSONResponse(
        status_code=200 if healthy else 503,
        content={
            "status": "healthy" if healthy else "unhealthy",
            "database": "up" if healthy else "down",
            "version": "0.1.0",
        },
    )
