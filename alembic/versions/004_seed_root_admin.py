"""004: seed root admin

Revision ID: 004
Revises: 003
Create Date: 2026-10-17
"""

from typing import Sequence, Union

import bcrypt
import sqlalchemy as sa
from alembic import op

from config.settings import settings

revision: str = "004"
down_revision: Union[str, None] = "003"
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    password_hash = bcrypt.hashpw(
        settings.ROOT_ADMIN_PASSWORD.encode("utf-8"),
        bcrypt.gensalt(rounds=settings.BCRYPT_ROUNDS),
    ).decode("utf-8")
    op.get_bind().execute(
        sa.text("""
            INSERT INTO accounts (role, username, name, password_hash, state)
            VALUES ('admin', :username, :name, :password_hash, 'active')
            ON CONFLICT (username) DO NOTHING
        """),
        {
            "username": settings.ROOT_ADMIN_USERNAME,
            "name": "Root Admin",
            "password_hash": password_hash,
        },
    )


def downgrade() -> None:
    op.get_bind().execute(
        sa.text("DELETE FROM accounts WHERE username = :username AND created_by IS NULL"),
        {"username": settings.ROOT_ADMIN_USERNAME},
    )
