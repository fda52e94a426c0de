"""Domain models for bl_ledger: pure dataclasses, no business logic."""

from dataclasses import dataclass
from datetime import datetime


@dataclass(frozen=True)
class HistoryEntry:
    id: int                          # BIGSERIAL
    owner_id: str                    # SubAdmin that issued the transfer
    amount: int                      # santim, negative = outflow
    recipient_username: str
    created_at: datetime


def total_credited(entries: list[HistoryEntry]) -> int:
    """Sum of absolute amounts: derived on read, never stored."""
    return sum(abs(e.amount) for e in entries)
