"""TransferCoordinator: moves credit down the account hierarchy.

Admin → SubAdmin: issuance. The Admin is the source of all credit, so only
the SubAdmin side is written.
SubAdmin → User: allocation (new User) or top-up (existing User). The
SubAdmin is debited, the User credited and a `-amount` history entry is
appended for the SubAdmin.

Every step is a statement inside the caller's transaction; the coordinator
never commits. If any step raises, the caller rolls back and none of the
writes become visible: there is never a debit without its matching credit.

No idempotency: each call is a new transfer.
"""

import logging

from sqlalchemy.ext.asyncio import AsyncSession

from src.bl_account.domain.models import NewAccount, UserAccount
from src.bl_account.domain.repository import AccountRepositoryProtocol
from src.bl_common.enums import Role
from src.bl_common.errors import AccountNotFoundError
from src.bl_ledger.domain.repository import HistoryRepositoryProtocol
from src.bl_transfer.domain.models import TransferReceipt
from src.bl_transfer.domain.repository import BalanceRepositoryProtocol

logger = logging.getLogger(__name__)


def _require_positive(amount: int) -> None:
    # bool is an int subclass; True must not pass as 1 santim.
    if isinstance(amount, bool) or not isinstance(amount, int) or amount <= 0:
        raise ValueError(f"Transfer amount must be a positive integer, got {amount!r}")


class TransferCoordinator:
    def __init__(
        self,
        accounts: AccountRepositoryProtocol,
        balances: BalanceRepositoryProtocol,
        history: HistoryRepositoryProtocol,
    ) -> None:
        self._accounts = accounts
        self._balances = balances
        self._history = history

    async def allocate_new_user(
        self, db: AsyncSession, subadmin_id: str, draft: NewAccount, amount: int
    ) -> tuple[UserAccount, TransferReceipt]:
        """Create a User funded with `amount` taken from the SubAdmin."""
        _require_positive(amount)
        if draft.role != Role.USER:
            raise ValueError(f"Only users are funded at creation, got {draft.role}")

        issuer_balance = await self._balances.debit(db, subadmin_id, Role.SUBADMIN.value, amount)
        user = await self._accounts.insert_account(db, draft)
        recipient_balance = await self._balances.credit(db, user.id, Role.USER.value, amount)
        entry = await self._history.append(db, subadmin_id, -amount, user.username)

        created = await self._accounts.get_by_id(db, user.id)
        if not isinstance(created, UserAccount):
            raise AccountNotFoundError(user.id)

        logger.info(
            "Allocated %d santim: subadmin %s → new user %s", amount, subadmin_id, user.id
        )
        return created, TransferReceipt(
            issuer_id=subadmin_id,
            recipient_id=user.id,
            amount=amount,
            issuer_balance=issuer_balance,
            recipient_balance=recipient_balance,
            history_entry=entry,
        )

    async def top_up_user(
        self, db: AsyncSession, subadmin_id: str, user: UserAccount, amount: int
    ) -> TransferReceipt:
        """Move `amount` from the SubAdmin to an existing User."""
        _require_positive(amount)
        issuer_balance = await self._balances.debit(db, subadmin_id, Role.SUBADMIN.value, amount)
        recipient_balance = await self._balances.credit(db, user.id, Role.USER.value, amount)
        entry = await self._history.append(db, subadmin_id, -amount, user.username)

        logger.info("Top-up %d santim: subadmin %s → user %s", amount, subadmin_id, user.id)
        return TransferReceipt(
            issuer_id=subadmin_id,
            recipient_id=user.id,
            amount=amount,
            issuer_balance=issuer_balance,
            recipient_balance=recipient_balance,
            history_entry=entry,
        )

    async def issue_to_subadmin(
        self, db: AsyncSession, admin_id: str, subadmin_id: str, amount: int
    ) -> TransferReceipt:
        """Admin issuance: credit a SubAdmin with newly created funds."""
        _require_positive(amount)
        recipient_balance = await self._balances.credit(
            db, subadmin_id, Role.SUBADMIN.value, amount
        )
        logger.info("Issued %d santim: admin %s → subadmin %s", amount, admin_id, subadmin_id)
        return TransferReceipt(
            issuer_id=admin_id,
            recipient_id=subadmin_id,
            amount=amount,
            issuer_balance=None,
            recipient_balance=recipient_balance,
        )
