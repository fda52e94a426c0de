"""Balance repository Protocol.

The only write path for `balance`, `credit`, `initial_balance` and
`last_credit_time`. Used by TransferCoordinator and the game engine, always
inside the caller's transaction.
"""

from typing import Protocol

from sqlalchemy.ext.asyncio import AsyncSession


class BalanceRepositoryProtocol(Protocol):
    async def debit(
        self, db: AsyncSession, account_id: str, role: str, amount: int
    ) -> int:
        """Subtract `amount` if the account is active and can cover it.

        Returns the new balance. Raises AccountNotFoundError,
        AccountSuspendedError or InsufficientBalanceError and changes nothing
        otherwise.
        """
        ...

    async def credit(
        self, db: AsyncSession, account_id: str, role: str, amount: int
    ) -> int:
        """Add `amount`, record it as the last credit, return the new balance."""
        ...
