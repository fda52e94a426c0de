"""Per-field update dispatch for sparse account edits.

Each editable key maps to a FieldRule: `validate` turns the raw JSON value
into a clean value (or raises FieldRejected with a human message) and
`apply` records it on an UpdatePlan. Nothing is written while planning; the
service decides what to do with the plan according to one of two policies:

  TRANSACTIONAL  any rejected field → FieldValidationError, nothing written
                 (creator edits: Admin→Admin, Admin→SubAdmin, SubAdmin→User)
  BEST_EFFORT    valid fields are written, rejected ones are reported
                 (an account editing its own profile)

A suspended target accepts only `state`, unless the same request
re-activates it; `state` is therefore always planned first. A request that
suspends its target cannot also carry `credit`.
"""

import re
from collections.abc import Awaitable, Callable
from dataclasses import dataclass, field
from enum import Enum
from typing import Any

from sqlalchemy.ext.asyncio import AsyncSession

from src.bl_account.domain.models import Account
from src.bl_account.domain.repository import AccountRepositoryProtocol
from src.bl_common.enums import AccountState
from src.bl_gateway.auth.password import hash_password, verify_password

NAME_MIN_LENGTH = 4
USERNAME_MIN_LENGTH = 8
PASSWORD_MIN_LENGTH = 8
PASSWORD_MAX_BYTES = 72  # bcrypt input limit
SHOP_NAME_MAX_LENGTH = 128

_PASSWORD_CLASSES = (
    re.compile(r"[A-Z]"),
    re.compile(r"[a-z]"),
    re.compile(r"[0-9]"),
    re.compile(r"[^A-Za-z0-9]"),
)


class UpdatePolicy(str, Enum):
    TRANSACTIONAL = "transactional"
    BEST_EFFORT = "best_effort"


class FieldRejected(Exception):
    """A single field failed validation; the message is shown to the caller."""


@dataclass
class FieldContext:
    db: AsyncSession
    accounts: AccountRepositoryProtocol
    target: Account | None                 # None while creating an account
    issuer_balance: int | None = None      # spendable funds behind a `credit` field
    current_password: str | None = None    # required for self-service password change


@dataclass
class UpdatePlan:
    """Validated changes, grouped by how they are persisted."""

    profile: dict[str, Any] = field(default_factory=dict)   # plain column writes
    credit: int | None = None                                # transfer amount
    applied: list[str] = field(default_factory=list)         # request keys accepted
    errors: list[str] = field(default_factory=list)          # "key: message"

    @property
    def is_empty(self) -> bool:
        return not self.profile and self.credit is None


@dataclass(frozen=True)
class FieldRule:
    validate: Callable[[FieldContext, Any], Awaitable[Any]]
    apply: Callable[[UpdatePlan, Any], None]


# ---------------------------------------------------------------------------
# Validators
# ---------------------------------------------------------------------------


def _exclude_id(ctx: FieldContext) -> str | None:
    return ctx.target.id if ctx.target is not None else None


def _as_int(raw: Any, label: str) -> int:
    if isinstance(raw, bool):
        raise FieldRejected(f"{label} must be a whole number")
    if isinstance(raw, int):
        return raw
    if isinstance(raw, float) and raw.is_integer():
        return int(raw)
    if isinstance(raw, str) and raw.strip().lstrip("-").isdigit():
        return int(raw.strip())
    raise FieldRejected(f"{label} must be a whole number")


async def validate_name(ctx: FieldContext, raw: Any) -> str:
    if not isinstance(raw, str) or not raw.strip():
        raise FieldRejected("Name is required")
    name = raw.strip()
    if len(name) < NAME_MIN_LENGTH:
        raise FieldRejected(f"Name must be at least {NAME_MIN_LENGTH} characters")
    if await ctx.accounts.name_taken(ctx.db, name, _exclude_id(ctx)):
        raise FieldRejected("Name already exists")
    return name


async def validate_username(ctx: FieldContext, raw: Any) -> str:
    if not isinstance(raw, str) or not raw.strip():
        raise FieldRejected("Username is required")
    username = raw.strip()  # case preserved
    if len(username) < USERNAME_MIN_LENGTH:
        raise FieldRejected(f"Username must be at least {USERNAME_MIN_LENGTH} characters")
    if await ctx.accounts.username_taken(ctx.db, username, _exclude_id(ctx)):
        raise FieldRejected("Username already exists")
    return username


def check_password_strength(raw: Any) -> str:
    if not isinstance(raw, str) or not raw.strip():
        raise FieldRejected("Password is required")
    password = raw.strip()
    if len(password) < PASSWORD_MIN_LENGTH:
        raise FieldRejected(f"Password must be at least {PASSWORD_MIN_LENGTH} characters")
    if len(password.encode("utf-8")) > PASSWORD_MAX_BYTES:
        raise FieldRejected(f"Password must be at most {PASSWORD_MAX_BYTES} bytes")
    if not all(pattern.search(password) for pattern in _PASSWORD_CLASSES):
        raise FieldRejected(
            "Password must contain at least one uppercase letter, one lowercase "
            "letter, one number, and one special character"
        )
    return password


async def validate_password(ctx: FieldContext, raw: Any) -> str:
    """Returns the bcrypt hash, never the plain text."""
    password = check_password_strength(raw)
    if ctx.target is not None and verify_password(password, ctx.target.password_hash):
        raise FieldRejected("New password must be different from current password")
    return hash_password(password)


async def validate_own_password(ctx: FieldContext, raw: Any) -> str:
    """Self-service change: the current password must be supplied and correct."""
    if ctx.target is None or not ctx.current_password:
        raise FieldRejected("Current password is required")
    if not verify_password(ctx.current_password, ctx.target.password_hash):
        raise FieldRejected("Current password is incorrect")
    return await validate_password(ctx, raw)


async def validate_commission(ctx: FieldContext, raw: Any) -> int:
    value = _as_int(raw, "Commission")
    if not 1 <= value <= 100:
        raise FieldRejected("Commission must be between 1 and 100")
    return value


async def validate_credit(ctx: FieldContext, raw: Any) -> int:
    value = _as_int(raw, "Credit")
    if value <= 0:
        raise FieldRejected("Credit must be a positive number")
    # Early report only; the debit re-checks atomically.
    if ctx.issuer_balance is not None and ctx.issuer_balance < value:
        raise FieldRejected("Insufficient balance")
    return value


async def validate_state(ctx: FieldContext, raw: Any) -> str:
    states = [s.value for s in AccountState]
    if raw not in states:
        raise FieldRejected(f"State must be either {' or '.join(states)}")
    return str(raw)


async def validate_shop_name(ctx: FieldContext, raw: Any) -> str:
    if not isinstance(raw, str) or not raw.strip():
        raise FieldRejected("Shop name is required")
    shop_name = raw.strip()
    if len(shop_name) > SHOP_NAME_MAX_LENGTH:
        raise FieldRejected(f"Shop name must be at most {SHOP_NAME_MAX_LENGTH} characters")
    return shop_name


# ---------------------------------------------------------------------------
# Rule tables
# ---------------------------------------------------------------------------


def _column(name: str) -> Callable[[UpdatePlan, Any], None]:
    def _apply(plan: UpdatePlan, value: Any) -> None:
        plan.profile[name] = value

    return _apply


def _set_credit(plan: UpdatePlan, value: Any) -> None:
    plan.credit = value


NAME = FieldRule(validate_name, _column("name"))
USERNAME = FieldRule(validate_username, _column("username"))
PASSWORD = FieldRule(validate_password, _column("password_hash"))
OWN_PASSWORD = FieldRule(validate_own_password, _column("password_hash"))
STATE = FieldRule(validate_state, _column("state"))
CREDIT = FieldRule(validate_credit, _set_credit)
USER_COMMISSION = FieldRule(validate_commission, _column("user_commission"))
OWNER_COMMISSION = FieldRule(validate_commission, _column("owner_commission"))
SHOP_NAME = FieldRule(validate_shop_name, _column("shop_name"))

ADMIN_RULES: dict[str, FieldRule] = {
    "name": NAME,
    "username": USERNAME,
    "password": PASSWORD,
    "state": STATE,
}

SUBADMIN_RULES: dict[str, FieldRule] = {**ADMIN_RULES, "credit": CREDIT}

USER_RULES: dict[str, FieldRule] = {
    **SUBADMIN_RULES,
    "user_commission": USER_COMMISSION,
    "owner_commission": OWNER_COMMISSION,
    "shop_name": SHOP_NAME,
}

PROFILE_RULES: dict[str, FieldRule] = {
    "username": USERNAME,
    "password": OWN_PASSWORD,
}

USER_PROFILE_RULES: dict[str, FieldRule] = {
    **PROFILE_RULES,
    "user_commission": USER_COMMISSION,
}


async def plan_updates(
    ctx: FieldContext, changes: dict[str, Any], rules: dict[str, FieldRule]
) -> UpdatePlan:
    """Validate every key of `changes`, collecting one error per rejected key."""
    plan = UpdatePlan()
    ordered = sorted(changes.items(), key=lambda item: item[0] != "state")

    for key, raw in ordered:
        rule = rules.get(key)
        if rule is None:
            plan.errors.append(f'{key}: Field "{key}" is not allowed')
            continue
        if key != "state" and _is_locked(ctx, plan):
            plan.errors.append(f"{key}: Account is suspended")
            continue
        if key == "credit" and _planned_state(ctx, plan) == AccountState.SUSPENDED.value:
            plan.errors.append(f"{key}: Cannot transfer credit to an account being suspended")
            continue
        try:
            value = await rule.validate(ctx, raw)
        except FieldRejected as exc:
            plan.errors.append(f"{key}: {exc}")
            continue
        rule.apply(plan, value)
        plan.applied.append(key)

    return plan


def _is_locked(ctx: FieldContext, plan: UpdatePlan) -> bool:
    """Suspended targets stay read-only unless this request re-activates them."""
    if ctx.target is None or ctx.target.is_active:
        return False
    return plan.profile.get("state") != AccountState.ACTIVE.value


def _planned_state(ctx: FieldContext, plan: UpdatePlan) -> str | None:
    if "state" in plan.profile:
        return plan.profile["state"]
    return ctx.target.state if ctx.target is not None else None
