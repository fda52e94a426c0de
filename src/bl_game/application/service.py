"""GameApplicationService: token transport around GameSessionEngine.

Decodes the caller's game token, runs the transition and mints the next
token. start() and call() run inside `unit_of_work(db)`: the debit and the
new GameRecord commit together or not at all.
"""

import re

from sqlalchemy.ext.asyncio import AsyncSession

from src.bl_account.domain.models import UserAccount
from src.bl_common.database import unit_of_work
from src.bl_common.errors import GameTokenError
from src.bl_common.money import santim_to_display
from src.bl_game.application.schemas import (
    CallRequest,
    CallResponse,
    ConfigureRequest,
    GameItem,
    GameListResponse,
    GameSessionResponse,
    StartResponse,
)
from src.bl_game.domain.engine import GameSessionEngine
from src.bl_game.domain.models import CallEvent, GameToken
from src.bl_game.domain.repository import GameRepositoryProtocol
from src.bl_game.infrastructure.persistence import GameRepository
from src.bl_gateway.auth.jwt_handler import create_game_token, decode_game_token
from src.bl_transfer.domain.repository import BalanceRepositoryProtocol
from src.bl_transfer.infrastructure.persistence import BalanceRepository

_DATE_RE = re.compile(r"^\d{4}-\d{2}-\d{2}$")


class GameApplicationService:
    def __init__(
        self,
        balances: BalanceRepositoryProtocol | None = None,
        games: GameRepositoryProtocol | None = None,
    ) -> None:
        self._games: GameRepositoryProtocol = games or GameRepository()
        self._engine = GameSessionEngine(balances or BalanceRepository(), self._games)

    @staticmethod
    def _load(user: UserAccount, raw_token: str | None) -> GameToken:
        if not raw_token:
            raise GameTokenError("No game session")
        return GameToken.from_claims(decode_game_token(raw_token, user.id))

    @staticmethod
    def _mint(user: UserAccount, token: GameToken) -> str:
        return create_game_token(user.id, token.to_claims())

    def configure(
        self, user: UserAccount, body: ConfigureRequest
    ) -> tuple[GameSessionResponse, str]:
        token = self._engine.configure(
            user, body.bet_amount, body.selected_cards, body.line_checker
        )
        return GameSessionResponse.from_token(token), self._mint(user, token)

    def current(self, user: UserAccount, raw_token: str | None) -> GameSessionResponse:
        token = self._engine.current(user, self._load(user, raw_token))
        return GameSessionResponse.from_token(token)

    async def start(
        self, db: AsyncSession, user: UserAccount, raw_token: str | None
    ) -> tuple[StartResponse, str]:
        token = self._load(user, raw_token)
        async with unit_of_work(db):
            record, started, balance = await self._engine.start(db, user, token)

        data = StartResponse(
            game_index=record.game_index,
            balance=balance,
            balance_display=santim_to_display(balance),
            session=GameSessionResponse.from_token(started),
        )
        return data, self._mint(user, started)

    async def call(
        self, db: AsyncSession, user: UserAccount, raw_token: str | None, body: CallRequest
    ) -> CallResponse:
        token = self._load(user, raw_token)
        event = CallEvent(card=body.card, winner=body.winner, lucky_passed=body.lucky_passed)
        async with unit_of_work(db):
            recorded = await self._engine.record_call(db, user, token, event)
        return CallResponse(game_index=token.game_index or 0, recorded=recorded)

    async def list_games(
        self, db: AsyncSession, user: UserAccount, date: str | None
    ) -> GameListResponse:
        """Newest first; a malformed date means no filter."""
        prefix = date if date and _DATE_RE.match(date) else None
        records = await self._games.list_for_user(db, user.id, prefix)
        total_commission = sum(r.commission for r in records)
        return GameListResponse(
            items=[GameItem.from_record(r) for r in records],
            total=len(records),
            total_commission=total_commission,
            total_commission_display=santim_to_display(total_commission),
        )
