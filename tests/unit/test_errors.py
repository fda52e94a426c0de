"""Tests for bl_common.errors and bl_common.response."""

from src.bl_common.errors import (
    AppError,
    DuplicateIdentityError,
    FieldValidationError,
    ForbiddenRoleError,
    GamePhaseError,
    InsufficientBalanceError,
    PersistenceConflictError,
    RateLimitError,
    SessionRejectedError,
)
from src.bl_common.response import ApiResponse, error_response, success_response


class TestAppError:
    def test_base_error(self) -> None:
        err = AppError(code=9002, message="Internal error")
        assert err.code == 9002
        assert err.message == "Internal error"
        assert err.http_status == 500

    def test_is_exception(self) -> None:
        assert isinstance(AppError(code=1001, message="test"), Exception)


class TestSpecificErrors:
    def test_insufficient_balance(self) -> None:
        err = InsufficientBalanceError(required=6500, available=3000)
        assert err.code == 2001
        assert err.http_status == 422
        assert "6500" in err.message
        assert "3000" in err.message

    def test_session_and_role_errors_share_message(self) -> None:
        """Callers cannot tell a missing account from a wrong role."""
        assert SessionRejectedError().message == ForbiddenRoleError().message
        assert SessionRejectedError().http_status == 401
        assert ForbiddenRoleError().http_status == 403

    def test_duplicate_identity_keeps_field(self) -> None:
        err = DuplicateIdentityError("username")
        assert err.code == 2004
        assert err.http_status == 409
        assert err.field == "username"
        assert err.message == "Username already exists"

    def test_field_validation_collects_errors(self) -> None:
        err = FieldValidationError(["name: too short", "credit: must be positive"])
        assert err.code == 2005
        assert err.errors == ["name: too short", "credit: must be positive"]
        assert "name: too short" in err.message

    def test_game_phase(self) -> None:
        err = GamePhaseError("configured", "in_progress")
        assert err.code == 3002
        assert err.http_status == 409

    def test_rate_limit_retry_after(self) -> None:
        assert RateLimitError(retry_after=30).retry_after == 30

    def test_persistence_conflict(self) -> None:
        err = PersistenceConflictError()
        assert err.code == 9003
        assert "nothing was changed" in err.message


class TestApiResponse:
    def test_success(self) -> None:
        resp = success_response({"id": "abc"})
        assert resp.code == 0
        assert resp.message == "success"
        assert resp.data == {"id": "abc"}
        assert resp.request_id.startswith("req_")

    def test_error(self) -> None:
        resp = error_response(2001, "Insufficient balance", {"errors": ["x"]})
        assert resp.code == 2001
        assert resp.data == {"errors": ["x"]}

    def test_serializes(self) -> None:
        dumped = ApiResponse(code=0, data=None).model_dump()
        assert set(dumped) == {"code", "message", "data", "timestamp", "request_id"}
