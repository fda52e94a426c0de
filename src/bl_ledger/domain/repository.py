"""HistoryLedger repository Protocol. Append-only: no update, no delete."""

from typing import Protocol

from sqlalchemy.ext.asyncio import AsyncSession

from src.bl_ledger.domain.models import HistoryEntry


class HistoryRepositoryProtocol(Protocol):
    async def append(
        self, db: AsyncSession, owner_id: str, amount: int, recipient_username: str
    ) -> HistoryEntry: ...

    async def list_by_owner(self, db: AsyncSession, owner_id: str) -> list[HistoryEntry]: ...
