"""Cookie transport for session tokens."""

from starlette.responses import Response

from config.settings import settings

SESSION_COOKIE = "token"
GAME_COOKIE = "game_token"


def set_session_cookie(response: Response, token: str) -> None:
    response.set_cookie(
        SESSION_COOKIE,
        token,
        max_age=settings.JWT_EXPIRE_MINUTES * 60,
        httponly=True,
        samesite="lax",
        secure=settings.COOKIE_SECURE,
        path="/",
    )


def set_game_cookie(response: Response, token: str) -> None:
    response.set_cookie(
        GAME_COOKIE,
        token,
        max_age=settings.GAME_TOKEN_EXPIRE_MINUTES * 60,
        httponly=True,
        samesite="lax",
        secure=settings.COOKIE_SECURE,
        path="/",
    )


def clear_game_cookie(response: Response) -> None:
    response.delete_cookie(GAME_COOKIE, path="/", samesite="lax", secure=settings.COOKIE_SECURE)


def clear_session_cookies(response: Response) -> None:
    """Drop every credential the client holds, forcing re-authentication."""
    response.delete_cookie(SESSION_COOKIE, path="/", samesite="lax", secure=settings.COOKIE_SECURE)
    clear_game_cookie(response)
