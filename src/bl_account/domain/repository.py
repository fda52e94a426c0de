"""Repository Protocol: dependency inversion for testability.

Unit tests inject a fake that conforms to this Protocol.
Infrastructure layer provides the real implementation.

None of these methods touch `balance`, `credit` or `initial_balance`;
monetary columns are written only by bl_transfer and bl_game.
"""

from typing import Any, Protocol

from sqlalchemy.ext.asyncio import AsyncSession

from src.bl_account.domain.models import Account, NewAccount

# Columns update_fields() may write. Everything else is refused.
PROFILE_COLUMNS = frozenset(
    {
        "username",
        "name",
        "shop_name",
        "password_hash",
        "state",
        "user_commission",
        "owner_commission",
    }
)


class AccountRepositoryProtocol(Protocol):
    async def get_by_id(self, db: AsyncSession, account_id: str) -> Account | None: ...

    async def get_by_username(
        self, db: AsyncSession, username: str
    ) -> Account | None: ...

    async def get_owned(
        self, db: AsyncSession, account_id: str, role: str, created_by: str
    ) -> Account | None: ...

    async def list_owned(
        self, db: AsyncSession, role: str, created_by: str
    ) -> list[Account]: ...

    async def username_taken(
        self, db: AsyncSession, username: str, exclude_id: str | None = None
    ) -> bool: ...

    async def name_taken(
        self, db: AsyncSession, name: str, exclude_id: str | None = None
    ) -> bool: ...

    async def insert_account(self, db: AsyncSession, draft: NewAccount) -> Account: ...

    async def update_fields(
        self, db: AsyncSession, account_id: str, fields: dict[str, Any]
    ) -> Account | None: ...

    async def delete_owned(
        self, db: AsyncSession, account_id: str, role: str, created_by: str
    ) -> bool: ...
