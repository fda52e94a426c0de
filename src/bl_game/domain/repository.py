"""Game record repository Protocol.

Immutable columns are written once by insert(); record_call() only touches
game_end and the three card sets.
"""

from datetime import datetime
from typing import Protocol

from sqlalchemy.ext.asyncio import AsyncSession

from src.bl_game.domain.models import CallEvent, GameRecord


class GameRepositoryProtocol(Protocol):
    async def next_index(self, db: AsyncSession, user_id: str) -> int: ...

    async def insert(self, db: AsyncSession, record: GameRecord) -> GameRecord: ...

    async def record_call(
        self,
        db: AsyncSession,
        user_id: str,
        game_index: int,
        event: CallEvent,
        at: datetime,
    ) -> bool:
        """Apply the event; False when no record has that index."""
        ...

    async def list_for_user(
        self, db: AsyncSession, user_id: str, date_prefix: str | None = None
    ) -> list[GameRecord]: ...
