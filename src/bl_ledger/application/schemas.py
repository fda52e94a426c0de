"""Pydantic response schemas for the SubAdmin history API."""

from pydantic import BaseModel

from src.bl_common.money import santim_to_display
from src.bl_ledger.domain.models import HistoryEntry


class HistoryEntryItem(BaseModel):
    id: int
    amount: int
    amount_display: str
    recipient_username: str
    created_at: str  # ISO8601 string

    @classmethod
    def from_entry(cls, entry: HistoryEntry) -> "HistoryEntryItem":
        return cls(
            id=entry.id,
            amount=entry.amount,
            amount_display=santim_to_display(entry.amount),
            recipient_username=entry.recipient_username,
            created_at=entry.created_at.isoformat(),
        )


class HistoryResponse(BaseModel):
    subadmin_name: str
    items: list[HistoryEntryItem]
    total_credited: int
    total_credited_display: str
