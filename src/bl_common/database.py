import logging
from collections.abc import AsyncGenerator, AsyncIterator
from contextlib import asynccontextmanager

from sqlalchemy.exc import DBAPIError, IntegrityError
from sqlalchemy.ext.asyncio import (
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)
from sqlalchemy.orm import DeclarativeBase

from config.settings import settings
from src.bl_common.errors import DuplicateIdentityError, PersistenceConflictError

logger = logging.getLogger(__name__)


class Base(DeclarativeBase):
    """Shared declarative base for all ORM models across modules."""

    pass


engine: AsyncEngine = create_async_engine(
    settings.DATABASE_URL,
    echo=settings.DEBUG,
    pool_size=20,
    max_overflow=10,
    pool_pre_ping=True,
)

async_session_factory = async_sessionmaker(
    engine,
    class_=AsyncSession,
    expire_on_commit=False,
)


async def get_db_session() -> AsyncGenerator[AsyncSession, None]:
    """FastAPI dependency: yields an AsyncSession, auto-closes after request."""
    async with async_session_factory() as session:
        yield session


# Unique constraints whose violation is a user-facing duplicate, not a conflict.
_DUPLICATE_CONSTRAINTS = {
    "uq_accounts_username": "username",
    "uq_accounts_name": "name",
}


@asynccontextmanager
async def unit_of_work(db: AsyncSession) -> AsyncIterator[AsyncSession]:
    """Commit everything issued inside the block, or nothing.

    Any exception rolls the transaction back. Store-level failures are
    translated: a unique-name violation becomes DuplicateIdentityError,
    anything else the driver raises becomes PersistenceConflictError.
    """
    try:
        yield db
        await db.commit()
    except IntegrityError as exc:
        await db.rollback()
        detail = str(exc.orig)
        for constraint, field in _DUPLICATE_CONSTRAINTS.items():
            if constraint in detail:
                raise DuplicateIdentityError(field) from exc
        logger.error("Integrity failure, transaction rolled back: %s", detail)
        raise PersistenceConflictError() from exc
    except DBAPIError as exc:
        await db.rollback()
        logger.error("Commit failed, transaction rolled back: %s", exc)
        raise PersistenceConflictError() from exc
    except BaseException:
        await db.rollback()
        raise
