"""GameRepository: game_records via raw SQL.

Card sets are INTEGER[] columns with set-add semantics: a card already in
the array is not appended again, so re-delivered events are harmless and
their order does not matter. game_end is last-write-wins.

A trigger on game_records rejects updates to the columns fixed at start.

Transaction ownership: the CALLER commits or rolls back.
"""

from datetime import datetime

from sqlalchemy import text
from sqlalchemy.ext.asyncio import AsyncSession

from src.bl_common.errors import InternalError
from src.bl_game.domain.models import CallEvent, GameRecord

_COLUMNS = """
    user_id, game_index, game_start, game_end, bet_amount, picked_cards,
    on_calls, winner_cards, luckypassed_cards, dersh, commission,
    created_by, shop_name, time_label
"""

_NEXT_INDEX_SQL = text("""
    SELECT COALESCE(MAX(game_index) + 1, 0) AS next_index
    FROM game_records
    WHERE user_id = :user_id
""")

_INSERT_GAME_SQL = text(f"""
    INSERT INTO game_records
        (user_id, game_index, game_start, game_end, bet_amount, picked_cards,
         dersh, commission, created_by, shop_name, time_label)
    VALUES
        (:user_id, :game_index, :game_start, :game_end, :bet_amount, :picked_cards,
         :dersh, :commission, :created_by, :shop_name, :time_label)
    RETURNING {_COLUMNS}
""")

_RECORD_CALL_SQL = text("""
    UPDATE game_records
    SET game_end = :at,
        on_calls = CASE
            WHEN CAST(:card AS INTEGER) IS NULL
              OR CAST(:card AS INTEGER) = ANY(on_calls) THEN on_calls
            ELSE array_append(on_calls, CAST(:card AS INTEGER)) END,
        luckypassed_cards = CASE
            WHEN CAST(:card AS INTEGER) IS NULL
              OR NOT CAST(:lucky AS BOOLEAN)
              OR CAST(:card AS INTEGER) = ANY(luckypassed_cards) THEN luckypassed_cards
            ELSE array_append(luckypassed_cards, CAST(:card AS INTEGER)) END,
        winner_cards = CASE
            WHEN CAST(:card AS INTEGER) IS NULL
              OR CAST(:lucky AS BOOLEAN)
              OR NOT CAST(:winner AS BOOLEAN)
              OR CAST(:card AS INTEGER) = ANY(winner_cards) THEN winner_cards
            ELSE array_append(winner_cards, CAST(:card AS INTEGER)) END
    WHERE user_id = :user_id AND game_index = :game_index
    RETURNING game_index
""")

_LIST_GAMES_SQL = text(f"""
    SELECT {_COLUMNS}
    FROM game_records
    WHERE user_id = :user_id
      AND (CAST(:date_prefix AS TEXT) IS NULL
           OR time_label LIKE CAST(:date_prefix AS TEXT) || '%')
    ORDER BY game_index DESC
""")


def _row_to_record(row: object) -> GameRecord:
    return GameRecord(
        user_id=str(row.user_id),  # type: ignore[attr-defined]
        game_index=row.game_index,  # type: ignore[attr-defined]
        game_start=row.game_start,  # type: ignore[attr-defined]
        game_end=row.game_end,  # type: ignore[attr-defined]
        bet_amount=row.bet_amount,  # type: ignore[attr-defined]
        picked_cards=list(row.picked_cards or []),  # type: ignore[attr-defined]
        on_calls=list(row.on_calls or []),  # type: ignore[attr-defined]
        winner_cards=list(row.winner_cards or []),  # type: ignore[attr-defined]
        luckypassed_cards=list(row.luckypassed_cards or []),  # type: ignore[attr-defined]
        dersh=row.dersh,  # type: ignore[attr-defined]
        commission=row.commission,  # type: ignore[attr-defined]
        created_by=row.created_by,  # type: ignore[attr-defined]
        shop_name=row.shop_name,  # type: ignore[attr-defined]
        time_label=row.time_label,  # type: ignore[attr-defined]
    )


class GameRepository:
    async def next_index(self, db: AsyncSession, user_id: str) -> int:
        result = await db.execute(_NEXT_INDEX_SQL, {"user_id": user_id})
        return int(result.scalar_one())

    async def insert(self, db: AsyncSession, record: GameRecord) -> GameRecord:
        result = await db.execute(
            _INSERT_GAME_SQL,
            {
                "user_id": record.user_id,
                "game_index": record.game_index,
                "game_start": record.game_start,
                "game_end": record.game_end,
                "bet_amount": record.bet_amount,
                "picked_cards": record.picked_cards,
                "dersh": record.dersh,
                "commission": record.commission,
                "created_by": record.created_by,
                "shop_name": record.shop_name,
                "time_label": record.time_label,
            },
        )
        row = result.fetchone()
        if row is None:
            raise InternalError("Game insert returned no rows")
        return _row_to_record(row)

    async def record_call(
        self,
        db: AsyncSession,
        user_id: str,
        game_index: int,
        event: CallEvent,
        at: datetime,
    ) -> bool:
        result = await db.execute(
            _RECORD_CALL_SQL,
            {
                "user_id": user_id,
                "game_index": game_index,
                "card": event.card,
                "winner": event.winner,
                "lucky": event.lucky_passed,
                "at": at,
            },
        )
        return result.fetchone() is not None

    async def list_for_user(
        self, db: AsyncSession, user_id: str, date_prefix: str | None = None
    ) -> list[GameRecord]:
        result = await db.execute(
            _LIST_GAMES_SQL, {"user_id": user_id, "date_prefix": date_prefix}
        )
        return [_row_to_record(row) for row in result.fetchall()]
