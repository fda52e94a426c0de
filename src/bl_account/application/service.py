"""AccountApplicationService: account CRUD, profile and funding reads.

Writes run inside `unit_of_work(db)`: commit on success, rollback on any
error. Anything that moves money is delegated to TransferCoordinator so the
profile edit and the transfer land in the same transaction.
"""

import logging
from typing import Any

from sqlalchemy.ext.asyncio import AsyncSession

from src.bl_account.application.field_updates import (
    ADMIN_RULES,
    PROFILE_RULES,
    SUBADMIN_RULES,
    USER_PROFILE_RULES,
    USER_RULES,
    FieldContext,
    FieldRule,
    UpdatePlan,
    UpdatePolicy,
    plan_updates,
)
from src.bl_account.application.schemas import (
    AccountItem,
    AccountListResponse,
    AdminCreateRequest,
    BalanceResponse,
    StatusResponse,
    SubAdminCreateRequest,
    UpdateResponse,
    UserCreateRequest,
)
from src.bl_account.domain.models import (
    Account,
    AdminAccount,
    NewAccount,
    SubAdminAccount,
    UserAccount,
)
from src.bl_account.domain.repository import AccountRepositoryProtocol
from src.bl_account.infrastructure.persistence import AccountRepository
from src.bl_common.database import unit_of_work
from src.bl_common.enums import Role
from src.bl_common.errors import AccountNotFoundError, FieldValidationError
from src.bl_ledger.domain.repository import HistoryRepositoryProtocol
from src.bl_ledger.infrastructure.ledger import HistoryRepository
from src.bl_transfer.domain.coordinator import TransferCoordinator
from src.bl_transfer.domain.repository import BalanceRepositoryProtocol
from src.bl_transfer.infrastructure.persistence import BalanceRepository

logger = logging.getLogger(__name__)

# Which rule table governs a creator's edits of each child role.
_CHILD_RULES: dict[Role, dict[str, FieldRule]] = {
    Role.ADMIN: ADMIN_RULES,
    Role.SUBADMIN: SUBADMIN_RULES,
    Role.USER: USER_RULES,
}

_CREATE_FIELDS: dict[Role, tuple[str, ...]] = {
    Role.ADMIN: ("name", "username", "password"),
    Role.SUBADMIN: ("name", "username", "password", "credit"),
    Role.USER: (
        "name",
        "username",
        "password",
        "credit",
        "user_commission",
        "owner_commission",
        "shop_name",
    ),
}


class AccountApplicationService:
    def __init__(
        self,
        accounts: AccountRepositoryProtocol | None = None,
        balances: BalanceRepositoryProtocol | None = None,
        history: HistoryRepositoryProtocol | None = None,
    ) -> None:
        self._accounts: AccountRepositoryProtocol = accounts or AccountRepository()
        self._transfers = TransferCoordinator(
            self._accounts,
            balances or BalanceRepository(),
            history or HistoryRepository(),
        )

    # ------------------------------------------------------------------
    # Create
    # ------------------------------------------------------------------

    async def _plan_create(
        self,
        db: AsyncSession,
        role: Role,
        values: dict[str, Any],
        issuer_balance: int | None = None,
    ) -> UpdatePlan:
        ctx = FieldContext(
            db=db, accounts=self._accounts, target=None, issuer_balance=issuer_balance
        )
        wanted = {k: v for k, v in values.items() if k in _CREATE_FIELDS[role] and v is not None}
        plan = await plan_updates(ctx, wanted, _CHILD_RULES[role])
        if plan.errors:
            raise FieldValidationError(plan.errors)
        return plan

    @staticmethod
    def _draft(role: Role, plan: UpdatePlan, creator: Account) -> NewAccount:
        fields = plan.profile
        return NewAccount(
            role=role.value,
            username=fields["username"],
            name=fields["name"],
            password_hash=fields["password_hash"],
            created_by=creator.id,
            user_commission=fields.get("user_commission", 20),
            owner_commission=fields.get("owner_commission", 20),
            shop_name=fields.get("shop_name"),
        )

    async def create_admin(
        self, db: AsyncSession, creator: AdminAccount, body: AdminCreateRequest
    ) -> AccountItem:
        async with unit_of_work(db):
            plan = await self._plan_create(db, Role.ADMIN, body.model_dump())
            admin = await self._accounts.insert_account(
                db, self._draft(Role.ADMIN, plan, creator)
            )
        logger.info("Admin %s created admin %s", creator.id, admin.id)
        return AccountItem.from_account(admin)

    async def create_subadmin(
        self, db: AsyncSession, creator: AdminAccount, body: SubAdminCreateRequest
    ) -> AccountItem:
        async with unit_of_work(db):
            plan = await self._plan_create(db, Role.SUBADMIN, body.model_dump())
            subadmin = await self._accounts.insert_account(
                db, self._draft(Role.SUBADMIN, plan, creator)
            )
            if plan.credit is not None:
                await self._transfers.issue_to_subadmin(db, creator.id, subadmin.id, plan.credit)
            created = await self._accounts.get_by_id(db, subadmin.id)
        logger.info("Admin %s created subadmin %s", creator.id, subadmin.id)
        return AccountItem.from_account(created or subadmin)

    async def create_user(
        self, db: AsyncSession, creator: SubAdminAccount, body: UserCreateRequest
    ) -> AccountItem:
        async with unit_of_work(db):
            plan = await self._plan_create(
                db, Role.USER, body.model_dump(), issuer_balance=creator.balance
            )
            if plan.credit is None:
                raise FieldValidationError(["credit: Credit is required"])
            user, _ = await self._transfers.allocate_new_user(
                db, creator.id, self._draft(Role.USER, plan, creator), plan.credit
            )
        return AccountItem.from_account(user)

    # ------------------------------------------------------------------
    # List / delete
    # ------------------------------------------------------------------

    async def list_children(
        self, db: AsyncSession, owner: Account, role: Role
    ) -> AccountListResponse:
        accounts = await self._accounts.list_owned(db, role.value, owner.id)
        return AccountListResponse(
            items=[AccountItem.from_account(a) for a in accounts],
            total=len(accounts),
        )

    async def delete_child(
        self, db: AsyncSession, owner: Account, role: Role, account_id: str
    ) -> None:
        async with unit_of_work(db):
            deleted = await self._accounts.delete_owned(db, account_id, role.value, owner.id)
            if not deleted:
                raise AccountNotFoundError(account_id)
        logger.info("%s %s deleted %s %s", owner.role, owner.id, role.value, account_id)

    # ------------------------------------------------------------------
    # Update
    # ------------------------------------------------------------------

    async def update_child(
        self,
        db: AsyncSession,
        owner: Account,
        role: Role,
        account_id: str,
        changes: dict[str, Any],
    ) -> UpdateResponse:
        """Creator edit, transactional policy: all fields apply or none do."""
        if not changes:
            raise FieldValidationError(["No fields to update"])

        async with unit_of_work(db):
            target = await self._accounts.get_owned(db, account_id, role.value, owner.id)
            if target is None:
                raise AccountNotFoundError(account_id)

            issuer_balance = owner.balance if isinstance(owner, SubAdminAccount) else None
            ctx = FieldContext(
                db=db, accounts=self._accounts, target=target, issuer_balance=issuer_balance
            )
            plan = await plan_updates(ctx, changes, _CHILD_RULES[role])
            updated = await self._apply(db, owner, target, plan, UpdatePolicy.TRANSACTIONAL)

        return UpdateResponse(account=AccountItem.from_account(updated), applied=plan.applied)

    async def update_profile(
        self, db: AsyncSession, account: Account, changes: dict[str, Any]
    ) -> UpdateResponse:
        """Self-service edit, best-effort policy: valid fields apply, others are reported."""
        fields = dict(changes)
        current_password = fields.pop("current_password", None)
        if not fields:
            raise FieldValidationError(["No fields to update"])

        rules = USER_PROFILE_RULES if isinstance(account, UserAccount) else PROFILE_RULES
        async with unit_of_work(db):
            ctx = FieldContext(
                db=db,
                accounts=self._accounts,
                target=account,
                current_password=current_password,
            )
            plan = await plan_updates(ctx, fields, rules)
            updated = await self._apply(db, account, account, plan, UpdatePolicy.BEST_EFFORT)

        return UpdateResponse(
            account=AccountItem.from_account(updated),
            applied=plan.applied,
            rejected=plan.errors,
        )

    async def _apply(
        self,
        db: AsyncSession,
        owner: Account,
        target: Account,
        plan: UpdatePlan,
        policy: UpdatePolicy,
    ) -> Account:
        if plan.errors and (policy == UpdatePolicy.TRANSACTIONAL or plan.is_empty):
            raise FieldValidationError(plan.errors)

        updated = await self._accounts.update_fields(db, target.id, plan.profile)
        if updated is None:
            raise AccountNotFoundError(target.id)

        if plan.credit is not None:
            if isinstance(updated, UserAccount):
                await self._transfers.top_up_user(db, owner.id, updated, plan.credit)
            elif isinstance(updated, SubAdminAccount):
                await self._transfers.issue_to_subadmin(db, owner.id, updated.id, plan.credit)
            updated = await self._accounts.get_by_id(db, target.id) or updated

        logger.info(
            "Account %s updated %s fields %s (%s)",
            owner.id,
            target.id,
            plan.applied,
            policy.value,
        )
        return updated

    # ------------------------------------------------------------------
    # Reads
    # ------------------------------------------------------------------

    def get_profile(self, account: Account) -> AccountItem:
        return AccountItem.from_account(account)

    def get_balance(self, account: UserAccount) -> BalanceResponse:
        return BalanceResponse.from_santim(account.balance)

    def get_status(self, account: SubAdminAccount | UserAccount) -> StatusResponse:
        return StatusResponse.from_account(account)
