"""AccountRepository: concrete implementation of AccountRepositoryProtocol.

Reads go through the ORM mapping; writes are single statements so they can
be composed inside the caller's transaction.

Transaction ownership: the CALLER (application service) commits or rolls
back via `unit_of_work(db)`.
"""

import uuid
from dataclasses import fields
from typing import Any

from sqlalchemy import delete, select, update
from sqlalchemy.ext.asyncio import AsyncSession

from src.bl_account.domain.models import ACCOUNT_TYPES, Account, NewAccount
from src.bl_account.domain.repository import PROFILE_COLUMNS
from src.bl_account.infrastructure.db_models import AccountORM
from src.bl_common.datetime_utils import utc_now
from src.bl_common.enums import AccountState


def _as_uuid(value: str | None) -> uuid.UUID | None:
    if value is None:
        return None
    try:
        return uuid.UUID(str(value))
    except ValueError:
        return None


def orm_to_account(row: AccountORM) -> Account:
    """Build the variant named by `row.role` from the columns it declares."""
    cls = ACCOUNT_TYPES[row.role]
    values: dict[str, Any] = {f.name: getattr(row, f.name) for f in fields(cls)}
    values["id"] = str(row.id)
    values["created_by"] = str(row.created_by) if row.created_by else None
    return cls(**values)  # type: ignore[return-value]


class AccountRepository:
    """Concrete repository: profile columns only, never balances."""

    async def get_by_id(self, db: AsyncSession, account_id: str) -> Account | None:
        key = _as_uuid(account_id)
        if key is None:
            return None
        result = await db.execute(select(AccountORM).where(AccountORM.id == key))
        row = result.scalar_one_or_none()
        return orm_to_account(row) if row else None

    async def get_by_username(self, db: AsyncSession, username: str) -> Account | None:
        # Case-sensitive: PostgreSQL's default collation compares exactly.
        result = await db.execute(
            select(AccountORM).where(AccountORM.username == username)
        )
        row = result.scalar_one_or_none()
        return orm_to_account(row) if row else None

    async def get_owned(
        self, db: AsyncSession, account_id: str, role: str, created_by: str
    ) -> Account | None:
        key, owner = _as_uuid(account_id), _as_uuid(created_by)
        if key is None or owner is None:
            return None
        result = await db.execute(
            select(AccountORM).where(
                AccountORM.id == key,
                AccountORM.role == role,
                AccountORM.created_by == owner,
            )
        )
        row = result.scalar_one_or_none()
        return orm_to_account(row) if row else None

    async def list_owned(
        self, db: AsyncSession, role: str, created_by: str
    ) -> list[Account]:
        owner = _as_uuid(created_by)
        if owner is None:
            return []
        result = await db.execute(
            select(AccountORM)
            .where(AccountORM.role == role, AccountORM.created_by == owner)
            .order_by(AccountORM.created_at.desc())
        )
        return [orm_to_account(row) for row in result.scalars().all()]

    async def username_taken(
        self, db: AsyncSession, username: str, exclude_id: str | None = None
    ) -> bool:
        stmt = select(AccountORM.id).where(AccountORM.username == username)
        excluded = _as_uuid(exclude_id)
        if excluded is not None:
            stmt = stmt.where(AccountORM.id != excluded)
        result = await db.execute(stmt.limit(1))
        return result.scalar_one_or_none() is not None

    async def name_taken(
        self, db: AsyncSession, name: str, exclude_id: str | None = None
    ) -> bool:
        stmt = select(AccountORM.id).where(AccountORM.name == name)
        excluded = _as_uuid(exclude_id)
        if excluded is not None:
            stmt = stmt.where(AccountORM.id != excluded)
        result = await db.execute(stmt.limit(1))
        return result.scalar_one_or_none() is not None

    async def insert_account(self, db: AsyncSession, draft: NewAccount) -> Account:
        """Insert with zero balances; funding is a separate transfer step."""
        row = AccountORM(
            id=uuid.uuid4(),
            role=draft.role,
            username=draft.username,
            name=draft.name,
            shop_name=draft.shop_name,
            password_hash=draft.password_hash,
            state=AccountState.ACTIVE.value,
            created_by=_as_uuid(draft.created_by),
            credit=0,
            balance=0,
            initial_balance=0,
            user_commission=draft.user_commission,
            owner_commission=draft.owner_commission,
            version=0,
            created_at=utc_now(),
            updated_at=utc_now(),
        )
        db.add(row)
        await db.flush()  # surfaces unique violations inside the transaction
        return orm_to_account(row)

    async def update_fields(
        self, db: AsyncSession, account_id: str, fields: dict[str, Any]
    ) -> Account | None:
        illegal = set(fields) - PROFILE_COLUMNS
        if illegal:
            raise ValueError(f"Not a profile column: {sorted(illegal)}")
        key = _as_uuid(account_id)
        if key is None:
            return None
        if not fields:
            return await self.get_by_id(db, account_id)
        result = await db.execute(
            update(AccountORM)
            .where(AccountORM.id == key)
            .values(**fields, version=AccountORM.version + 1, updated_at=utc_now())
            .returning(AccountORM)
        )
        row = result.scalar_one_or_none()
        return orm_to_account(row) if row else None

    async def delete_owned(
        self, db: AsyncSession, account_id: str, role: str, created_by: str
    ) -> bool:
        key, owner = _as_uuid(account_id), _as_uuid(created_by)
        if key is None or owner is None:
            return False
        result = await db.execute(
            delete(AccountORM)
            .where(
                AccountORM.id == key,
                AccountORM.role == role,
                AccountORM.created_by == owner,
            )
            .returning(AccountORM.id)
        )
        return result.scalar_one_or_none() is not None
