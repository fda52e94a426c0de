"""GameSessionEngine: the bingo session state machine.

    Idle ──configure──▶ Configured ──start──▶ InProgress ──call──▶ InProgress
                                                   │
                                      (no more calls: Ended, implicit)

There is no server-side session: the caller round-trips a signed GameToken
and the engine returns the next one. Only start() moves money, and it
re-derives everything from durable state (commission, balance) rather than
from the token. Nothing here commits; the application service owns the
transaction.
"""

import logging
from collections.abc import Iterable
from typing import Any

from sqlalchemy.ext.asyncio import AsyncSession

from src.bl_account.domain.models import UserAccount
from src.bl_common.datetime_utils import time_label, utc_now
from src.bl_common.enums import GamePhase, Role
from src.bl_common.errors import GamePhaseError, InsufficientBalanceError
from src.bl_game.domain.models import CallEvent, GameRecord, GameToken
from src.bl_game.domain.payout import build_config, quote_for
from src.bl_game.domain.repository import GameRepositoryProtocol
from src.bl_transfer.domain.repository import BalanceRepositoryProtocol

logger = logging.getLogger(__name__)


class GameSessionEngine:
    def __init__(
        self,
        balances: BalanceRepositoryProtocol,
        games: GameRepositoryProtocol,
    ) -> None:
        self._balances = balances
        self._games = games

    def configure(
        self,
        user: UserAccount,
        bet_amount: Any,
        selected_cards: Iterable[Any],
        line_checker: Any,
    ) -> GameToken:
        """Idle/any → Configured. Validates and quotes; no money moves."""
        config = build_config(bet_amount, selected_cards, line_checker)
        game_quote = quote_for(config, user.user_commission)
        if user.balance < game_quote.required_balance:
            raise InsufficientBalanceError(game_quote.required_balance, user.balance)
        return GameToken(phase=GamePhase.CONFIGURED, config=config, quote=game_quote)

    def current(self, user: UserAccount, token: GameToken) -> GameToken:
        """A configured game the balance no longer covers cannot be played."""
        if token.phase == GamePhase.CONFIGURED:
            required = quote_for(token.config, user.user_commission).required_balance
            if user.balance < required:
                raise InsufficientBalanceError(required, user.balance)
        return token

    async def start(
        self, db: AsyncSession, user: UserAccount, token: GameToken
    ) -> tuple[GameRecord, GameToken, int]:
        """Configured → InProgress: debit the commission and open a GameRecord.

        Returns the record, the in-progress token and the balance left after
        the debit.

        The conditional debit holds the account row lock until commit, so
        concurrent starts for one user serialize and the index below is
        race-free.
        """
        if token.phase != GamePhase.CONFIGURED:
            raise GamePhaseError(GamePhase.CONFIGURED.value, token.phase.value)

        game_quote = quote_for(token.config, user.user_commission)
        balance = await self._balances.debit(
            db, user.id, Role.USER.value, game_quote.required_balance
        )

        now = utc_now()
        record = GameRecord(
            user_id=user.id,
            game_index=await self._games.next_index(db, user.id),
            game_start=now,
            game_end=now,
            bet_amount=token.config.bet_amount,
            picked_cards=list(token.config.selected_cards),
            dersh=game_quote.winning_amount,
            commission=game_quote.required_balance,
            created_by=user.username,
            shop_name=user.shop_label,
            time_label=time_label(now),
        )
        record = await self._games.insert(db, record)

        logger.info(
            "User %s started game %d: %d cards, commission %d santim",
            user.id,
            record.game_index,
            len(record.picked_cards),
            record.commission,
        )
        started = GameToken(
            phase=GamePhase.IN_PROGRESS,
            config=token.config,
            quote=game_quote,
            game_index=record.game_index,
        )
        return record, started, balance

    async def record_call(
        self, db: AsyncSession, user: UserAccount, token: GameToken, event: CallEvent
    ) -> bool:
        """InProgress → InProgress. Unknown index is a no-op, reported as False."""
        if token.phase != GamePhase.IN_PROGRESS or token.game_index is None:
            raise GamePhaseError(GamePhase.IN_PROGRESS.value, token.phase.value)

        applied = await self._games.record_call(db, user.id, token.game_index, event, utc_now())
        if not applied:
            logger.warning("Call for unknown game %d of user %s ignored", token.game_index, user.id)
        return applied
