"""Transfer results: pure dataclasses."""

from dataclasses import dataclass

from src.bl_ledger.domain.models import HistoryEntry


@dataclass(frozen=True)
class TransferReceipt:
    """Balances observed inside the transaction that moved `amount`."""

    issuer_id: str
    recipient_id: str
    amount: int                      # santim, always > 0
    issuer_balance: int | None       # None when the issuer is an Admin (mints credit)
    recipient_balance: int
    history_entry: HistoryEntry | None = None
