"""FastAPI dependencies: current account and role guards.

Usage in any protected router:
    from src.bl_gateway.auth.dependencies import require_user

    @router.get("/protected")
    async def protected(user: Annotated[UserAccount, Depends(require_user)]):
        ...

The identity token is read from the `token` cookie, falling back to an
`Authorization: Bearer` header. Every request re-reads the account so a
suspension takes effect immediately.
"""

import logging
from collections.abc import Awaitable, Callable
from typing import Any

from fastapi import Depends, Request
from fastapi.security import OAuth2PasswordBearer
from sqlalchemy.ext.asyncio import AsyncSession

from src.bl_account.domain.models import Account
from src.bl_account.domain.repository import AccountRepositoryProtocol
from src.bl_account.infrastructure.persistence import AccountRepository
from src.bl_common.database import get_db_session
from src.bl_common.enums import Role
from src.bl_common.errors import ForbiddenRoleError, SessionRejectedError
from src.bl_gateway.auth.cookies import SESSION_COOKIE
from src.bl_gateway.auth.jwt_handler import decode_identity

logger = logging.getLogger(__name__)

# tokenUrl tells Swagger UI where to get a token (used for the "Authorize" button)
oauth2_scheme = OAuth2PasswordBearer(tokenUrl="/api/v1/auth/login", auto_error=False)

_repo: AccountRepositoryProtocol = AccountRepository()


async def get_current_account(
    request: Request,
    bearer: str | None = Depends(oauth2_scheme),
    db: AsyncSession = Depends(get_db_session),
) -> Account:
    """Resolve the caller's account from its identity token.

    Missing, forged, expired, orphaned and suspended sessions all raise the
    same SessionRejectedError; the exception handler clears the cookies.
    """
    token = request.cookies.get(SESSION_COOKIE) or bearer
    if not token:
        raise SessionRejectedError()

    claims = decode_identity(token)
    account = await _repo.get_by_id(db, claims.account_id)
    if account is None or not account.is_active or account.role != claims.role:
        logger.warning("Rejected session for account %s", claims.account_id)
        raise SessionRejectedError()
    return account


def require_role(role: Role) -> Callable[..., Awaitable[Any]]:
    """Build a dependency that admits only accounts with `role`."""

    async def _guard(account: Account = Depends(get_current_account)) -> Account:
        if account.role != role:
            logger.warning("Account %s (%s) refused %s route", account.id, account.role, role.value)
            raise ForbiddenRoleError()
        return account

    return _guard


require_admin = require_role(Role.ADMIN)
require_subadmin = require_role(Role.SUBADMIN)
require_user = require_role(Role.USER)
