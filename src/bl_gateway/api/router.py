"""Auth API router: login, logout.

The identity token is set as an HttpOnly cookie and also returned in the
body for Bearer clients.
"""

from fastapi import APIRouter, Depends, Request, Response, status
from sqlalchemy.ext.asyncio import AsyncSession

from config.settings import settings
from src.bl_common.database import get_db_session
from src.bl_common.response import ApiResponse, success_response, with_request_id
from src.bl_gateway.auth.cookies import clear_session_cookies, set_session_cookie
from src.bl_gateway.user.schemas import LoginRequest, LoginResponse, SessionInfo
from src.bl_gateway.user.service import LoginService

router = APIRouter(prefix="/auth", tags=["auth"])
_service = LoginService()


@router.post(
    "/login",
    status_code=status.HTTP_200_OK,
    response_model=ApiResponse,
    summary="Sign in with username and password",
)
async def login(
    request: Request,
    response: Response,
    body: LoginRequest,
    db: AsyncSession = Depends(get_db_session),
) -> ApiResponse:
    account, token = await _service.login(db, body.username, body.password)
    set_session_cookie(response, token)

    data = LoginResponse(
        access_token=token,
        expires_in=settings.JWT_EXPIRE_MINUTES * 60,
        account=SessionInfo(
            account_id=account.id,
            username=account.username,
            name=account.name,
            role=account.role,
        ),
    )
    resp = success_response(data.model_dump(), message="Login successful")
    return with_request_id(resp, request)


@router.post(
    "/logout",
    status_code=status.HTTP_200_OK,
    response_model=ApiResponse,
    summary="Discard session and game cookies",
)
async def logout(request: Request, response: Response) -> ApiResponse:
    clear_session_cookies(response)
    return with_request_id(success_response(message="Logged out"), request)
