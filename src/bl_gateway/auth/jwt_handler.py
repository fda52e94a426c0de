"""Session token codec: signed identity and game tokens.

Both kinds are HS256 JWTs signed with the process-wide JWT_SECRET and carried
by the client (cookie or Bearer header). A token is a capability, never a
source of truth for money: callers re-read balances from the database.

Two token types:
  - "access": identity {sub, role, name}
  - "game":   in-progress bingo configuration/state; `sub` is the account
              that configured it and must match the caller on decode.

The `type` claim is strictly enforced so a game token can never be used as
an identity token or vice versa.
"""

from dataclasses import dataclass
from datetime import UTC, datetime, timedelta
from typing import Any

from jose import JWTError, jwt

from config.settings import settings
from src.bl_common.enums import TokenType
from src.bl_common.errors import GameTokenError, SessionRejectedError

_ALGORITHM = settings.JWT_ALGORITHM  # "HS256"
_ACCESS_EXPIRE = timedelta(minutes=settings.JWT_EXPIRE_MINUTES)
_GAME_EXPIRE = timedelta(minutes=settings.GAME_TOKEN_EXPIRE_MINUTES)

# Claims the codec owns; game payloads may not override them.
_RESERVED_CLAIMS = frozenset({"sub", "type", "iat", "exp"})


@dataclass(frozen=True)
class IdentityClaims:
    account_id: str
    role: str
    name: str


def _encode(subject: str, token_type: TokenType, claims: dict[str, Any], ttl: timedelta) -> str:
    now = datetime.now(UTC)
    payload = {
        **claims,
        "sub": subject,
        "type": token_type.value,
        "iat": now,
        "exp": now + ttl,
    }
    return str(jwt.encode(payload, settings.JWT_SECRET, algorithm=_ALGORITHM))


def create_access_token(account_id: str, role: str, name: str) -> str:
    """Issue an identity token (default: 7 days, matching the cookie lifetime)."""
    return _encode(account_id, TokenType.ACCESS, {"role": role, "name": name}, _ACCESS_EXPIRE)


def create_game_token(account_id: str, claims: dict[str, Any]) -> str:
    """Issue a game-state token bound to `account_id`."""
    reserved = _RESERVED_CLAIMS & set(claims)
    if reserved:
        raise ValueError(f"Game claims may not set {sorted(reserved)}")
    return _encode(account_id, TokenType.GAME, claims, _GAME_EXPIRE)


def decode_token(token: str, expected_type: TokenType) -> dict[str, Any]:
    """Decode and validate a token's signature, expiry and type.

    Raises:
        SessionRejectedError: invalid identity token.
        GameTokenError: invalid game token.
    """
    payload: dict[str, Any] = {}
    try:
        payload = jwt.decode(
            token,
            settings.JWT_SECRET,
            algorithms=[_ALGORITHM],  # Explicit list prevents algorithm confusion
        )
    except JWTError:
        _raise_token_error(expected_type)

    if payload.get("type") != expected_type.value or not payload.get("sub"):
        _raise_token_error(expected_type)

    return payload


def decode_identity(token: str) -> IdentityClaims:
    payload = decode_token(token, TokenType.ACCESS)
    role, name = payload.get("role"), payload.get("name")
    if not isinstance(role, str) or not isinstance(name, str):
        raise SessionRejectedError()
    return IdentityClaims(account_id=str(payload["sub"]), role=role, name=name)


def decode_game_token(token: str, account_id: str) -> dict[str, Any]:
    """Decode a game token and check it was issued to `account_id`."""
    payload = decode_token(token, TokenType.GAME)
    if str(payload["sub"]) != account_id:
        raise GameTokenError("Game session belongs to another account")
    return {k: v for k, v in payload.items() if k not in _RESERVED_CLAIMS}


def _raise_token_error(expected_type: TokenType) -> None:
    """Raise the appropriate error based on which token type was expected."""
    if expected_type == TokenType.ACCESS:
        raise SessionRejectedError()
    raise GameTokenError()
