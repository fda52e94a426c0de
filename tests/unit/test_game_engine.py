"""Unit tests for GameSessionEngine transitions and their money effects."""

import asyncio
import dataclasses

import pytest

from src.bl_account.domain.models import UserAccount
from src.bl_common.database import unit_of_work
from src.bl_common.enums import GamePhase
from src.bl_common.errors import (
    AccountSuspendedError,
    GamePhaseError,
    InsufficientBalanceError,
    PersistenceConflictError,
)
from src.bl_game.application.schemas import ConfigureRequest
from src.bl_game.application.service import GameApplicationService
from src.bl_game.domain.engine import GameSessionEngine
from src.bl_game.domain.models import CallEvent, GameToken
from tests.fakes import (
    FakeBalanceRepository,
    FakeGameRepository,
    FakeSession,
    InMemoryStore,
    make_account,
)


@pytest.fixture
def engine(balances: FakeBalanceRepository, games: FakeGameRepository) -> GameSessionEngine:
    return GameSessionEngine(balances, games)


@pytest.fixture
def user(store: InMemoryStore) -> UserAccount:
    return store.add(  # type: ignore[return-value]
        make_account(
            "user",
            "player0001",
            name="Bole Bingo",
            balance=10000,
            user_commission=20,
            shop_name="Bole Shop",
        )
    )


class TestConfigure:
    def test_configured_token_carries_quote(
        self, engine: GameSessionEngine, user: UserAccount
    ) -> None:
        token = engine.configure(user, 1000, [1, 2, 3, 4, 5], 1)
        assert token.phase == GamePhase.CONFIGURED
        assert token.quote.required_balance == 1000
        assert token.quote.winning_amount == 4000
        assert token.game_index is None

    def test_balance_must_cover_commission(
        self, engine: GameSessionEngine, user: UserAccount
    ) -> None:
        # 60 cards * 1000 * 20% = 12000 > 10000
        with pytest.raises(InsufficientBalanceError):
            engine.configure(user, 1000, list(range(1, 61)), 1)

    def test_small_game_needs_no_balance(
        self, engine: GameSessionEngine, user: UserAccount
    ) -> None:
        user.balance = 0
        token = engine.configure(user, 5000, [1, 2, 3], 1)
        assert token.quote.required_balance == 0

    def test_current_rechecks_balance(
        self, engine: GameSessionEngine, user: UserAccount
    ) -> None:
        token = engine.configure(user, 1000, [1, 2, 3, 4, 5], 1)
        user.balance = 500
        with pytest.raises(InsufficientBalanceError):
            engine.current(user, token)


class TestStart:
    async def test_start_debits_and_opens_record(
        self,
        engine: GameSessionEngine,
        user: UserAccount,
        store: InMemoryStore,
        db: FakeSession,
    ) -> None:
        token = engine.configure(user, 1000, [1, 2, 3, 4, 5], 1)
        record, started, _ = await engine.start(db, user, token)

        assert store.balance_of(user.id) == 9000
        assert record.game_index == 0
        assert record.commission == 1000
        assert record.dersh == 4000
        assert record.picked_cards == [1, 2, 3, 4, 5]
        assert record.created_by == "player0001"
        assert record.shop_name == "Bole Shop"
        assert started.phase == GamePhase.IN_PROGRESS
        assert started.game_index == 0

    async def test_reports_stored_balance_after_debit(
        self,
        engine: GameSessionEngine,
        user: UserAccount,
        store: InMemoryStore,
        db: FakeSession,
    ) -> None:
        snapshot = dataclasses.replace(user)
        token = engine.configure(snapshot, 1000, [1, 2, 3, 4, 5], 1)
        store.accounts[user.id].balance = 50000  # type: ignore[union-attr]

        _, _, balance = await engine.start(db, snapshot, token)
        assert balance == 49000
        assert balance == store.balance_of(user.id)

    async def test_service_response_uses_stored_balance(
        self,
        balances: FakeBalanceRepository,
        games: FakeGameRepository,
        user: UserAccount,
        store: InMemoryStore,
        db: FakeSession,
    ) -> None:
        service = GameApplicationService(balances, games)
        snapshot = dataclasses.replace(user)
        body = ConfigureRequest(bet_amount=1000, selected_cards=[1, 2, 3, 4, 5], line_checker=1)
        _, raw_token = service.configure(snapshot, body)
        store.accounts[user.id].balance = 50000  # type: ignore[union-attr]

        data, _ = await service.start(db, snapshot, raw_token)
        assert data.balance == store.balance_of(user.id) == 49000
        assert db.commits == 1

    async def test_indexes_increase_per_user(
        self, engine: GameSessionEngine, user: UserAccount, db: FakeSession
    ) -> None:
        token = engine.configure(user, 1000, [1, 2], 1)
        first, _, _ = await engine.start(db, user, token)
        second, _, _ = await engine.start(db, user, token)
        assert (first.game_index, second.game_index) == (0, 1)

    async def test_commission_uses_current_rate(
        self,
        engine: GameSessionEngine,
        user: UserAccount,
        store: InMemoryStore,
        db: FakeSession,
    ) -> None:
        token = engine.configure(user, 1000, [1, 2, 3, 4, 5], 1)
        user.user_commission = 50
        record, started, _ = await engine.start(db, user, token)
        assert record.commission == 2500
        assert started.quote.required_balance == 2500
        assert store.balance_of(user.id) == 7500

    async def test_cannot_start_twice_from_same_session(
        self, engine: GameSessionEngine, user: UserAccount, db: FakeSession
    ) -> None:
        token = engine.configure(user, 1000, [1, 2, 3, 4], 1)
        _, started, _ = await engine.start(db, user, token)
        with pytest.raises(GamePhaseError):
            await engine.start(db, user, started)

    async def test_concurrent_starts_never_overdraw(
        self,
        engine: GameSessionEngine,
        user: UserAccount,
        store: InMemoryStore,
        db: FakeSession,
    ) -> None:
        # 7 cards * 1000 * 100% = 7000 each; the balance covers one.
        user.user_commission = 100
        token = engine.configure(user, 1000, list(range(1, 8)), 1)
        results = await asyncio.gather(
            engine.start(db, user, token),
            engine.start(db, user, token),
            return_exceptions=True,
        )

        failures = [r for r in results if isinstance(r, InsufficientBalanceError)]
        assert len(failures) == 1
        assert store.balance_of(user.id) == 3000
        assert len(store.games) == 1

    async def test_commit_failure_rolls_back_debit_and_record(
        self, engine: GameSessionEngine, user: UserAccount, store: InMemoryStore
    ) -> None:
        db = FakeSession(fail_commit=True)
        token = engine.configure(user, 1000, [1, 2, 3, 4, 5], 1)
        with pytest.raises(PersistenceConflictError):
            async with unit_of_work(db):
                await engine.start(db, user, token)

        assert store.balance_of(user.id) == 10000
        assert store.games == {}

    async def test_suspended_user_cannot_start(
        self,
        engine: GameSessionEngine,
        user: UserAccount,
        store: InMemoryStore,
        db: FakeSession,
    ) -> None:
        token = engine.configure(user, 1000, [1, 2, 3, 4], 1)
        store.accounts[user.id].state = "suspended"
        with pytest.raises(AccountSuspendedError):
            await engine.start(db, user, token)


class TestRecordCall:
    async def _started(
        self, engine: GameSessionEngine, user: UserAccount, db: FakeSession
    ) -> GameToken:
        token = engine.configure(user, 1000, [1, 2, 3, 4], 1)
        _, started, _ = await engine.start(db, user, token)
        return started

    async def test_call_updates_record(
        self,
        engine: GameSessionEngine,
        user: UserAccount,
        store: InMemoryStore,
        db: FakeSession,
    ) -> None:
        started = await self._started(engine, user, db)
        assert await engine.record_call(db, user, started, CallEvent(card=3))
        assert await engine.record_call(db, user, started, CallEvent(card=4, winner=True))
        assert await engine.record_call(
            db, user, started, CallEvent(card=2, lucky_passed=True)
        )

        record = store.games[(user.id, 0)]
        assert record.on_calls == [3, 4, 2]
        assert record.winner_cards == [4]
        assert record.luckypassed_cards == [2]

    async def test_duplicate_call_is_idempotent(
        self,
        engine: GameSessionEngine,
        user: UserAccount,
        store: InMemoryStore,
        db: FakeSession,
    ) -> None:
        started = await self._started(engine, user, db)
        event = CallEvent(card=1, winner=True)
        await engine.record_call(db, user, started, event)
        await engine.record_call(db, user, started, event)

        record = store.games[(user.id, 0)]
        assert record.on_calls == [1]
        assert record.winner_cards == [1]

    async def test_unknown_game_is_a_no_op(
        self, engine: GameSessionEngine, user: UserAccount, db: FakeSession
    ) -> None:
        started = await self._started(engine, user, db)
        orphan = GameToken(
            phase=GamePhase.IN_PROGRESS,
            config=started.config,
            quote=started.quote,
            game_index=42,
        )
        assert await engine.record_call(db, user, orphan, CallEvent(card=1)) is False

    async def test_call_requires_started_game(
        self, engine: GameSessionEngine, user: UserAccount, db: FakeSession
    ) -> None:
        token = engine.configure(user, 1000, [1, 2, 3, 4], 1)
        with pytest.raises(GamePhaseError):
            await engine.record_call(db, user, token, CallEvent(card=1))

    async def test_call_never_moves_money(
        self,
        engine: GameSessionEngine,
        user: UserAccount,
        store: InMemoryStore,
        db: FakeSession,
    ) -> None:
        started = await self._started(engine, user, db)
        balance = store.balance_of(user.id)
        await engine.record_call(db, user, started, CallEvent(card=1, winner=True))
        assert store.balance_of(user.id) == balance
