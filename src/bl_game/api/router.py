"""Bingo game API: user only.

The game state travels in the `game_token` cookie; every transition
answers with a fresh one.
"""

from typing import Annotated

from fastapi import APIRouter, Cookie, Depends, Query, Request, Response
from sqlalchemy.ext.asyncio import AsyncSession

from src.bl_account.domain.models import UserAccount
from src.bl_common.database import get_db_session
from src.bl_common.response import ApiResponse, success_response, with_request_id
from src.bl_game.application.schemas import CallRequest, ConfigureRequest
from src.bl_game.application.service import GameApplicationService
from src.bl_gateway.auth.cookies import GAME_COOKIE, set_game_cookie
from src.bl_gateway.auth.dependencies import require_user

router = APIRouter(tags=["game"])

_service = GameApplicationService()

GameCookie = Annotated[str | None, Cookie(alias=GAME_COOKIE)]


@router.post("/game/configure")
async def configure_game(
    body: ConfigureRequest,
    current: Annotated[UserAccount, Depends(require_user)],
    request: Request,
    response: Response,
) -> ApiResponse:
    data, token = _service.configure(current, body)
    set_game_cookie(response, token)
    return with_request_id(success_response(data.model_dump(), "Game configured"), request)


@router.get("/game/current")
async def current_game(
    current: Annotated[UserAccount, Depends(require_user)],
    request: Request,
    game_token: GameCookie = None,
) -> ApiResponse:
    data = _service.current(current, game_token)
    return with_request_id(success_response(data.model_dump()), request)


@router.post("/game/start")
async def start_game(
    current: Annotated[UserAccount, Depends(require_user)],
    db: Annotated[AsyncSession, Depends(get_db_session)],
    request: Request,
    response: Response,
    game_token: GameCookie = None,
) -> ApiResponse:
    data, token = await _service.start(db, current, game_token)
    set_game_cookie(response, token)
    return with_request_id(success_response(data.model_dump(), "Game started"), request)


@router.post("/game/call")
async def call_card(
    body: CallRequest,
    current: Annotated[UserAccount, Depends(require_user)],
    db: Annotated[AsyncSession, Depends(get_db_session)],
    request: Request,
    game_token: GameCookie = None,
) -> ApiResponse:
    data = await _service.call(db, current, game_token, body)
    return with_request_id(success_response(data.model_dump()), request)


@router.get("/games")
async def list_games(
    current: Annotated[UserAccount, Depends(require_user)],
    db: Annotated[AsyncSession, Depends(get_db_session)],
    request: Request,
    date: str | None = Query(None, description="YYYY-MM-DD; malformed dates are ignored"),
) -> ApiResponse:
    data = await _service.list_games(db, current, date)
    return with_request_id(success_response(data.model_dump()), request)
