"""Unit tests for per-field update planning."""

import pytest

from src.bl_account.application.field_updates import (
    PROFILE_RULES,
    SUBADMIN_RULES,
    USER_PROFILE_RULES,
    USER_RULES,
    FieldContext,
    FieldRejected,
    check_password_strength,
    plan_updates,
)
from src.bl_account.domain.models import Account
from src.bl_gateway.auth.password import verify_password
from tests.fakes import FakeAccountRepository, FakeSession, InMemoryStore, make_account


@pytest.fixture
def target(store: InMemoryStore) -> Account:
    store.add(make_account("user", "takenname", name="Taken Name"))
    return store.add(make_account("user", "player0001", name="Player One"))


def _ctx(
    db: FakeSession,
    accounts: FakeAccountRepository,
    target: Account | None,
    **kwargs: object,
) -> FieldContext:
    return FieldContext(db=db, accounts=accounts, target=target, **kwargs)  # type: ignore[arg-type]


class TestPasswordStrength:
    def test_accepts_all_classes(self) -> None:
        assert check_password_strength("  Secret#123 ") == "Secret#123"

    @pytest.mark.parametrize("password", ["alllower#123", "UPPER#1234", "NoDigits#!x", "NoSpecial123"])
    def test_rejects_weak(self, password: str) -> None:
        with pytest.raises(FieldRejected):
            check_password_strength(password)

    def test_rejects_short(self) -> None:
        with pytest.raises(FieldRejected, match="at least 8"):
            check_password_strength("Ab#1")

    def test_rejects_beyond_bcrypt_limit(self) -> None:
        with pytest.raises(FieldRejected, match="at most 72"):
            check_password_strength("Aa#1" * 19)


class TestPlanUpdates:
    async def test_valid_fields_are_planned(
        self, db: FakeSession, accounts: FakeAccountRepository, target: Account
    ) -> None:
        plan = await plan_updates(
            _ctx(db, accounts, target),
            {"name": "New Shop Name", "user_commission": "15", "shop_name": " Kazanchis "},
            USER_RULES,
        )
        assert plan.errors == []
        assert plan.profile == {
            "name": "New Shop Name",
            "user_commission": 15,
            "shop_name": "Kazanchis",
        }
        assert sorted(plan.applied) == ["name", "shop_name", "user_commission"]

    async def test_every_rejected_field_is_reported(
        self, db: FakeSession, accounts: FakeAccountRepository, target: Account
    ) -> None:
        plan = await plan_updates(
            _ctx(db, accounts, target),
            {"name": "abc", "username": "takenname", "user_commission": 101, "role": "admin"},
            USER_RULES,
        )
        assert plan.profile == {}
        assert sorted(plan.errors) == sorted(
            [
                "name: Name must be at least 4 characters",
                "username: Username already exists",
                "user_commission: Commission must be between 1 and 100",
                'role: Field "role" is not allowed',
            ]
        )

    async def test_own_values_do_not_count_as_taken(
        self, db: FakeSession, accounts: FakeAccountRepository, target: Account
    ) -> None:
        plan = await plan_updates(
            _ctx(db, accounts, target),
            {"name": "Player One", "username": "player0001"},
            USER_RULES,
        )
        assert plan.errors == []

    async def test_username_keeps_case(
        self, db: FakeSession, accounts: FakeAccountRepository, target: Account
    ) -> None:
        plan = await plan_updates(
            _ctx(db, accounts, target), {"username": "PlayerMixed"}, USER_RULES
        )
        assert plan.profile["username"] == "PlayerMixed"

    async def test_password_is_hashed(
        self, db: FakeSession, accounts: FakeAccountRepository, target: Account
    ) -> None:
        plan = await plan_updates(
            _ctx(db, accounts, target), {"password": "Changed#456"}, USER_RULES
        )
        assert "password" not in plan.profile
        assert verify_password("Changed#456", plan.profile["password_hash"])

    async def test_password_must_change(
        self, db: FakeSession, accounts: FakeAccountRepository, target: Account
    ) -> None:
        plan = await plan_updates(
            _ctx(db, accounts, target), {"password": "Secret#123"}, USER_RULES
        )
        assert plan.errors == ["password: New password must be different from current password"]

    async def test_credit_checked_against_issuer_balance(
        self, db: FakeSession, accounts: FakeAccountRepository, target: Account
    ) -> None:
        plan = await plan_updates(
            _ctx(db, accounts, target, issuer_balance=5000), {"credit": 6000}, USER_RULES
        )
        assert plan.credit is None
        assert plan.errors == ["credit: Insufficient balance"]

    @pytest.mark.parametrize("credit", [0, -1, "ten", True])
    async def test_credit_must_be_positive_int(
        self, db: FakeSession, accounts: FakeAccountRepository, target: Account, credit: object
    ) -> None:
        plan = await plan_updates(_ctx(db, accounts, target), {"credit": credit}, SUBADMIN_RULES)
        assert plan.credit is None
        assert len(plan.errors) == 1

    async def test_credit_not_editable_on_profile(
        self, db: FakeSession, accounts: FakeAccountRepository, target: Account
    ) -> None:
        plan = await plan_updates(
            _ctx(db, accounts, target), {"credit": 1000}, USER_PROFILE_RULES
        )
        assert plan.errors == ['credit: Field "credit" is not allowed']


class TestSuspendedTarget:
    async def test_suspended_target_is_locked(
        self, db: FakeSession, accounts: FakeAccountRepository, target: Account
    ) -> None:
        target.state = "suspended"
        plan = await plan_updates(
            _ctx(db, accounts, target), {"name": "Another Name"}, USER_RULES
        )
        assert plan.errors == ["name: Account is suspended"]

    async def test_reactivation_unlocks_same_request(
        self, db: FakeSession, accounts: FakeAccountRepository, target: Account
    ) -> None:
        target.state = "suspended"
        plan = await plan_updates(
            _ctx(db, accounts, target),
            {"name": "Another Name", "state": "active"},
            USER_RULES,
        )
        assert plan.errors == []
        assert plan.profile == {"state": "active", "name": "Another Name"}

    async def test_suspending_still_allows_state(
        self, db: FakeSession, accounts: FakeAccountRepository, target: Account
    ) -> None:
        target.state = "suspended"
        plan = await plan_updates(_ctx(db, accounts, target), {"state": "suspended"}, USER_RULES)
        assert plan.errors == []

    async def test_suspending_rejects_credit_in_same_request(
        self, db: FakeSession, accounts: FakeAccountRepository, target: Account
    ) -> None:
        plan = await plan_updates(
            _ctx(db, accounts, target, issuer_balance=100000),
            {"state": "suspended", "credit": 5000},
            USER_RULES,
        )
        assert plan.errors == ["credit: Cannot transfer credit to an account being suspended"]
        assert plan.credit is None
        assert plan.profile == {"state": "suspended"}

    async def test_invalid_state(
        self, db: FakeSession, accounts: FakeAccountRepository, target: Account
    ) -> None:
        plan = await plan_updates(_ctx(db, accounts, target), {"state": "banned"}, USER_RULES)
        assert plan.errors == ["state: State must be either active or suspended"]


class TestOwnPassword:
    async def test_requires_current_password(
        self, db: FakeSession, accounts: FakeAccountRepository, target: Account
    ) -> None:
        plan = await plan_updates(
            _ctx(db, accounts, target), {"password": "Changed#456"}, PROFILE_RULES
        )
        assert plan.errors == ["password: Current password is required"]

    async def test_wrong_current_password(
        self, db: FakeSession, accounts: FakeAccountRepository, target: Account
    ) -> None:
        plan = await plan_updates(
            _ctx(db, accounts, target, current_password="Wrong#000"),
            {"password": "Changed#456"},
            PROFILE_RULES,
        )
        assert plan.errors == ["password: Current password is incorrect"]

    async def test_correct_current_password(
        self, db: FakeSession, accounts: FakeAccountRepository, target: Account
    ) -> None:
        plan = await plan_updates(
            _ctx(db, accounts, target, current_password="Secret#123"),
            {"password": "Changed#456"},
            PROFILE_RULES,
        )
        assert plan.applied == ["password"]
