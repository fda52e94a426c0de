"""Unified error codes and custom exceptions.

Error code ranges:
  1xxx: Auth / session tokens
  2xxx: Accounts and transfers
  3xxx: Bingo game sessions
  9xxx: System
"""


class AppError(Exception):
    """Base application error."""

    def __init__(
        self,
        code: int,
        message: str,
        http_status: int = 500,
    ) -> None:
        self.code = code
        self.message = message
        self.http_status = http_status
        super().__init__(message)


# --- 1xxx: Auth / session ---

class InvalidCredentialsError(AppError):
    def __init__(self) -> None:
        super().__init__(1001, "Invalid username or password", 401)


class SessionRejectedError(AppError):
    """Identity token missing, forged, expired, or owner gone/suspended.

    The message is identical for every cause so callers cannot probe
    which accounts exist.
    """

    def __init__(self) -> None:
        super().__init__(1002, "Session is invalid, please sign in again", 401)


class ForbiddenRoleError(AppError):
    def __init__(self) -> None:
        super().__init__(1003, "Session is invalid, please sign in again", 403)


class GameTokenError(AppError):
    def __init__(self, detail: str = "Game session is invalid") -> None:
        super().__init__(1004, detail, 401)


# --- 2xxx: Accounts / transfers ---

class InsufficientBalanceError(AppError):
    def __init__(self, required: int, available: int) -> None:
        super().__init__(
            2001,
            f"Insufficient balance: required {required}, available {available}",
            422,
        )


class AccountNotFoundError(AppError):
    def __init__(self, account_id: str) -> None:
        super().__init__(2002, f"Account not found: {account_id}", 404)


class AccountSuspendedError(AppError):
    def __init__(self, account_id: str) -> None:
        super().__init__(2003, f"Account is suspended: {account_id}", 422)


class DuplicateIdentityError(AppError):
    def __init__(self, field: str) -> None:
        self.field = field
        super().__init__(2004, f"{field.capitalize()} already exists", 409)


class FieldValidationError(AppError):
    """One or more request fields were rejected; `errors` holds one line per field."""

    def __init__(self, errors: list[str]) -> None:
        self.errors = errors
        super().__init__(2005, "; ".join(errors), 422)


# --- 3xxx: Game sessions ---

class InvalidGameConfigError(AppError):
    def __init__(self, detail: str) -> None:
        super().__init__(3001, detail, 422)


class GamePhaseError(AppError):
    def __init__(self, expected: str, actual: str) -> None:
        super().__init__(
            3002, f"Game session is {actual}, expected {expected}", 409
        )


# --- 9xxx: System ---

class RateLimitError(AppError):
    def __init__(self, retry_after: int = 60) -> None:
        self.retry_after = retry_after
        super().__init__(9001, "Rate limit exceeded", 429)


class InternalError(AppError):
    def __init__(self, detail: str = "Internal server error") -> None:
        super().__init__(9002, detail, 500)


class PersistenceConflictError(AppError):
    def __init__(self) -> None:
        super().__init__(
            9003, "The operation could not be committed; nothing was changed", 409
        )


class ServiceUnavailableError(AppError):
    def __init__(self) -> None:
        super().__init__(9004, "Service unavailable - database unreachable", 503)
