"""DB helpers for subadmin_history.

Called from TransferCoordinator within the transfer's transaction.
The table is append-only; a trigger rejects UPDATE and DELETE.
"""

from sqlalchemy import text
from sqlalchemy.ext.asyncio import AsyncSession

from src.bl_common.errors import InternalError
from src.bl_ledger.domain.models import HistoryEntry

_INSERT_HISTORY_SQL = text("""
    INSERT INTO subadmin_history (owner_id, amount, recipient_username)
    VALUES (:owner_id, :amount, :recipient_username)
    RETURNING id, owner_id, amount, recipient_username, created_at
""")

_LIST_HISTORY_SQL = text("""
    SELECT id, owner_id, amount, recipient_username, created_at
    FROM subadmin_history
    WHERE owner_id = :owner_id
    ORDER BY created_at DESC, id DESC
""")


def _row_to_entry(row: object) -> HistoryEntry:
    return HistoryEntry(
        id=row.id,  # type: ignore[attr-defined]
        owner_id=str(row.owner_id),  # type: ignore[attr-defined]
        amount=row.amount,  # type: ignore[attr-defined]
        recipient_username=row.recipient_username,  # type: ignore[attr-defined]
        created_at=row.created_at,  # type: ignore[attr-defined]
    )


class HistoryRepository:
    async def append(
        self, db: AsyncSession, owner_id: str, amount: int, recipient_username: str
    ) -> HistoryEntry:
        """Insert one row within the caller's transaction."""
        result = await db.execute(
            _INSERT_HISTORY_SQL,
            {
                "owner_id": owner_id,
                "amount": amount,
                "recipient_username": recipient_username,
            },
        )
        row = result.fetchone()
        if row is None:
            raise InternalError("History insert returned no rows")
        return _row_to_entry(row)

    async def list_by_owner(self, db: AsyncSession, owner_id: str) -> list[HistoryEntry]:
        result = await db.execute(_LIST_HISTORY_SQL, {"owner_id": owner_id})
        return [_row_to_entry(row) for row in result.fetchall()]
