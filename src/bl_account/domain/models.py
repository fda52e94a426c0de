"""Domain models for bl_account: pure dataclasses, no SQLAlchemy dependency.

Account is a sum type selected by `role`: every variant shares AccountBase,
SubAdmin adds its spendable balance, User adds balance, commissions and the
shop label. Game records and history entries are owned by their account but
modelled separately (bl_game / bl_ledger).
"""

from dataclasses import dataclass
from datetime import datetime
from typing import Union

from src.bl_common.enums import AccountState, Role


@dataclass
class AccountBase:
    id: str
    username: str
    name: str
    password_hash: str
    state: str
    created_by: str | None
    created_at: datetime
    updated_at: datetime

    @property
    def is_active(self) -> bool:
        return self.state == AccountState.ACTIVE


@dataclass
class AdminAccount(AccountBase):
    role: str = Role.ADMIN.value


@dataclass
class SubAdminAccount(AccountBase):
    credit: int = 0              # santim, last amount issued by the admin
    balance: int = 0             # santim, spendable on user allocations
    last_credit_time: datetime | None = None
    role: str = Role.SUBADMIN.value


@dataclass
class UserAccount(AccountBase):
    credit: int = 0              # santim, last amount allocated
    balance: int = 0             # santim, spendable on games
    initial_balance: int = 0     # santim, balance snapshot after last allocation
    last_credit_time: datetime | None = None
    user_commission: int = 20    # percent, 1-100
    owner_commission: int = 20   # percent, 1-100
    shop_name: str | None = None
    role: str = Role.USER.value

    @property
    def shop_label(self) -> str:
        return self.shop_name or self.name


Account = Union[AdminAccount, SubAdminAccount, UserAccount]

ACCOUNT_TYPES: dict[str, type[AccountBase]] = {
    Role.ADMIN.value: AdminAccount,
    Role.SUBADMIN.value: SubAdminAccount,
    Role.USER.value: UserAccount,
}


@dataclass
class NewAccount:
    """Validated input for an account that does not exist yet."""

    role: str
    username: str
    name: str
    password_hash: str
    created_by: str | None
    user_commission: int = 20
    owner_commission: int = 20
    shop_name: str | None = None
