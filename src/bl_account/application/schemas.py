"""Pydantic schemas for the account management API.

Create requests only pin down JSON types; length, complexity and uniqueness
rules run through field_updates so every rejected field is reported at once.
"""

from datetime import datetime

from pydantic import BaseModel, Field

from src.bl_account.domain.models import Account, SubAdminAccount, UserAccount
from src.bl_common.money import balance_status_percent, santim_to_display

# ---------------------------------------------------------------------------
# Request schemas
# ---------------------------------------------------------------------------


class AdminCreateRequest(BaseModel):
    name: str
    username: str
    password: str


class SubAdminCreateRequest(AdminCreateRequest):
    credit: int | None = Field(None, description="Opening credit in santim")


class UserCreateRequest(AdminCreateRequest):
    credit: int = Field(..., description="Opening credit in santim, taken from the subadmin")
    user_commission: int = 20
    owner_commission: int = 20
    shop_name: str | None = None


# ---------------------------------------------------------------------------
# Response schemas
# ---------------------------------------------------------------------------


def _iso(moment: datetime | None) -> str | None:
    return moment.isoformat() if moment else None


class AccountItem(BaseModel):
    id: str
    role: str
    username: str
    name: str
    state: str
    created_by: str | None
    created_at: str | None
    credit: int | None = None
    balance: int | None = None
    balance_display: str | None = None
    initial_balance: int | None = None
    last_credit_time: str | None = None
    user_commission: int | None = None
    owner_commission: int | None = None
    shop_name: str | None = None

    @classmethod
    def from_account(cls, account: Account) -> "AccountItem":
        item = cls(
            id=account.id,
            role=account.role,
            username=account.username,
            name=account.name,
            state=account.state,
            created_by=account.created_by,
            created_at=_iso(account.created_at),
        )
        if isinstance(account, (SubAdminAccount, UserAccount)):
            item.credit = account.credit
            item.balance = account.balance
            item.balance_display = santim_to_display(account.balance)
            item.last_credit_time = _iso(account.last_credit_time)
        if isinstance(account, UserAccount):
            item.initial_balance = account.initial_balance
            item.user_commission = account.user_commission
            item.owner_commission = account.owner_commission
            item.shop_name = account.shop_label
        return item


class AccountListResponse(BaseModel):
    items: list[AccountItem]
    total: int


class UpdateResponse(BaseModel):
    account: AccountItem
    applied: list[str]
    rejected: list[str] = []


class BalanceResponse(BaseModel):
    balance: int
    balance_display: str

    @classmethod
    def from_santim(cls, balance: int) -> "BalanceResponse":
        return cls(balance=balance, balance_display=santim_to_display(balance))


class StatusResponse(BaseModel):
    """Funding health: how much of the last credit is still spendable."""

    credit: int
    credit_display: str
    balance: int
    balance_display: str
    initial_balance: int | None = None
    status: int                        # percent of credit left, 0-100
    user_commission: int | None = None

    @classmethod
    def from_account(cls, account: SubAdminAccount | UserAccount) -> "StatusResponse":
        is_user = isinstance(account, UserAccount)
        return cls(
            credit=account.credit,
            credit_display=santim_to_display(account.credit),
            balance=account.balance,
            balance_display=santim_to_display(account.balance),
            initial_balance=account.initial_balance if is_user else None,
            status=balance_status_percent(account.balance, account.credit),
            user_commission=account.user_commission if is_user else None,
        )
