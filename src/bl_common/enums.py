"""Global enums: must match DB CHECK constraints exactly."""

from enum import Enum


class Role(str, Enum):
    ADMIN = "admin"
    SUBADMIN = "subadmin"
    USER = "user"


class AccountState(str, Enum):
    ACTIVE = "active"
    SUSPENDED = "suspended"


class GamePhase(str, Enum):
    """Phase carried inside a game token. Idle = no token, Ended is implicit."""
    CONFIGURED = "configured"
    IN_PROGRESS = "in_progress"


class TokenType(str, Enum):
    ACCESS = "access"
    GAME = "game"
