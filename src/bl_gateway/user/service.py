"""Login service: username/password → identity token.

Usernames are unique across all three roles, so one lookup resolves the
caller whatever kind of account it is.
"""

import logging

from sqlalchemy.ext.asyncio import AsyncSession

from src.bl_account.domain.models import Account
from src.bl_account.domain.repository import AccountRepositoryProtocol
from src.bl_account.infrastructure.persistence import AccountRepository
from src.bl_common.errors import InvalidCredentialsError
from src.bl_gateway.auth.jwt_handler import create_access_token
from src.bl_gateway.auth.password import verify_password

logger = logging.getLogger(__name__)


class LoginService:
    """Stateless service: instantiate once, reuse across requests."""

    def __init__(self, repo: AccountRepositoryProtocol | None = None) -> None:
        self._repo: AccountRepositoryProtocol = repo or AccountRepository()

    async def login(
        self, db: AsyncSession, username: str, password: str
    ) -> tuple[Account, str]:
        """Authenticate and return (account, access_token).

        Unknown username, wrong password and suspended account all raise
        InvalidCredentialsError so the response never reveals which one it was.
        """
        account = await self._repo.get_by_username(db, username.strip())
        if account is None or not verify_password(password, account.password_hash):
            raise InvalidCredentialsError()

        if not account.is_active:
            logger.warning("Login refused for suspended account %s", account.id)
            raise InvalidCredentialsError()

        token = create_access_token(account.id, account.role, account.name)
        logger.info("Account %s (%s) signed in", account.id, account.role)
        return account, token
