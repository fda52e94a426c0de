"""HistoryApplicationService: read side of the SubAdmin transfer ledger."""

from sqlalchemy.ext.asyncio import AsyncSession

from src.bl_common.money import santim_to_display
from src.bl_ledger.application.schemas import HistoryEntryItem, HistoryResponse
from src.bl_ledger.domain.models import total_credited
from src.bl_ledger.domain.repository import HistoryRepositoryProtocol
from src.bl_ledger.infrastructure.ledger import HistoryRepository


class HistoryApplicationService:
    def __init__(self, repo: HistoryRepositoryProtocol | None = None) -> None:
        self._repo: HistoryRepositoryProtocol = repo or HistoryRepository()

    async def list_history(
        self, db: AsyncSession, owner_id: str, owner_name: str
    ) -> HistoryResponse:
        entries = await self._repo.list_by_owner(db, owner_id)
        total = total_credited(entries)
        return HistoryResponse(
            subadmin_name=owner_name,
            items=[HistoryEntryItem.from_entry(e) for e in entries],
            total_credited=total,
            total_credited_display=santim_to_display(total),
        )
