"""BalanceRepository: atomic PostgreSQL UPDATE ... RETURNING.

A result of 0 rows means a precondition failed (missing account, suspended
account or insufficient funds); a follow-up SELECT tells which, so the
caller gets a precise error while nothing has been written.

The conditional UPDATE takes the row lock. A concurrent writer on the same
account blocks on it and, under READ COMMITTED, re-checks the WHERE clause
against the committed balance, so two debits can never both pass on funds
that only cover one.

Transaction ownership: the CALLER commits or rolls back.
"""

from sqlalchemy import text
from sqlalchemy.ext.asyncio import AsyncSession

from src.bl_common.errors import (
    AccountNotFoundError,
    AccountSuspendedError,
    InsufficientBalanceError,
)

_DEBIT_SQL = text("""
    UPDATE accounts
    SET balance = balance - :amount,
        version = version + 1,
        updated_at = NOW()
    WHERE id = :account_id
      AND role = :role
      AND state = 'active'
      AND balance >= :amount
    RETURNING balance
""")

# initial_balance is a User-only snapshot of the balance right after funding.
_CREDIT_SQL = text("""
    UPDATE accounts
    SET balance = balance + :amount,
        credit = :amount,
        initial_balance = CASE WHEN role = 'user'
                               THEN balance + :amount
                               ELSE initial_balance END,
        last_credit_time = NOW(),
        version = version + 1,
        updated_at = NOW()
    WHERE id = :account_id
      AND role = :role
      AND state = 'active'
    RETURNING balance
""")

_PROBE_SQL = text("""
    SELECT state, balance
    FROM accounts
    WHERE id = :account_id AND role = :role
""")


class BalanceRepository:
    """Concrete repository: every mutation is one conditional statement."""

    async def debit(
        self, db: AsyncSession, account_id: str, role: str, amount: int
    ) -> int:
        result = await db.execute(
            _DEBIT_SQL, {"account_id": account_id, "role": role, "amount": amount}
        )
        row = result.fetchone()
        if row is None:
            await self._diagnose(db, account_id, role, amount)
        return int(row.balance)  # type: ignore[union-attr]

    async def credit(
        self, db: AsyncSession, account_id: str, role: str, amount: int
    ) -> int:
        result = await db.execute(
            _CREDIT_SQL, {"account_id": account_id, "role": role, "amount": amount}
        )
        row = result.fetchone()
        if row is None:
            await self._diagnose(db, account_id, role, None)
        return int(row.balance)  # type: ignore[union-attr]

    async def _diagnose(
        self, db: AsyncSession, account_id: str, role: str, amount: int | None
    ) -> None:
        """Raise the error explaining why a conditional UPDATE matched no row."""
        result = await db.execute(_PROBE_SQL, {"account_id": account_id, "role": role})
        row = result.fetchone()
        if row is None:
            raise AccountNotFoundError(account_id)
        if row.state != "active":
            raise AccountSuspendedError(account_id)
        raise InsufficientBalanceError(amount or 0, int(row.balance))
