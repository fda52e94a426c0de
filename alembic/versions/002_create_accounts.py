"""002: create accounts table

Revision ID: 002
Revises: 001
Create Date: 2026-10-17
"""
from typing import Sequence, Union
from alembic import op

revision: str = "002"
down_revision: Union[str, None] = "001"
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    # One table for all roles: username/name are unique across admins,
    # subadmins and users with a single constraint each (case-sensitive).
    op.execute("""
        CREATE TABLE accounts (
            id                  UUID         PRIMARY KEY DEFAULT gen_random_uuid(),
            role                VARCHAR(16)  NOT NULL,
            username            VARCHAR(64)  NOT NULL,
            name                VARCHAR(128) NOT NULL,
            shop_name           VARCHAR(128),
            password_hash       VARCHAR(255) NOT NULL,
            state               VARCHAR(16)  NOT NULL DEFAULT 'active',
            created_by          UUID         REFERENCES accounts(id) ON DELETE SET NULL,
            credit              BIGINT       NOT NULL DEFAULT 0,
            balance             BIGINT       NOT NULL DEFAULT 0,
            initial_balance     BIGINT       NOT NULL DEFAULT 0,
            last_credit_time    TIMESTAMPTZ,
            user_commission     INTEGER      NOT NULL DEFAULT 20,
            owner_commission    INTEGER      NOT NULL DEFAULT 20,
            version             BIGINT       NOT NULL DEFAULT 0,
            created_at          TIMESTAMPTZ  NOT NULL DEFAULT NOW(),
            updated_at          TIMESTAMPTZ  NOT NULL DEFAULT NOW(),
            CONSTRAINT uq_accounts_username          UNIQUE (username),
            CONSTRAINT uq_accounts_name              UNIQUE (name),
            CONSTRAINT ck_accounts_role              CHECK (role IN ('admin', 'subadmin', 'user')),
            CONSTRAINT ck_accounts_state             CHECK (state IN ('active', 'suspended')),
            CONSTRAINT ck_accounts_balance_gte_0     CHECK (balance >= 0),
            CONSTRAINT ck_accounts_credit_gte_0      CHECK (credit >= 0),
            CONSTRAINT ck_accounts_user_commission   CHECK (user_commission BETWEEN 1 AND 100),
            CONSTRAINT ck_accounts_owner_commission  CHECK (owner_commission BETWEEN 1 AND 100)
        );
    """)
    op.execute("CREATE INDEX idx_accounts_created_by ON accounts (created_by, role);")
    op.execute("""
        CREATE TRIGGER trg_accounts_updated_at
            BEFORE UPDATE ON accounts
            FOR EACH ROW EXECUTE FUNCTION fn_update_timestamp();
    """)
    op.execute("COMMENT ON TABLE accounts IS 'Admins, subadmins and users; amounts in santim';")


def downgrade() -> None:
    op.execute("DROP TABLE IF EXISTS accounts CASCADE;")
