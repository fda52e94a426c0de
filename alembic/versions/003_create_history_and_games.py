"""003: create subadmin_history and game_records

Revision ID: 003
Revises: 002
Create Date: 2026-10-17
"""
from typing import Sequence, Union
from alembic import op

revision: str = "003"
down_revision: Union[str, None] = "002"
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    op.execute("""
        CREATE TABLE subadmin_history (
            id                  BIGSERIAL    PRIMARY KEY,
            owner_id            UUID         NOT NULL REFERENCES accounts(id) ON DELETE CASCADE,
            amount              BIGINT       NOT NULL,
            recipient_username  VARCHAR(64)  NOT NULL,
            created_at          TIMESTAMPTZ  NOT NULL DEFAULT NOW(),
            CONSTRAINT ck_history_amount_ne_0 CHECK (amount <> 0)
        );
    """)
    op.execute(
        "CREATE INDEX idx_history_owner_created ON subadmin_history (owner_id, created_at DESC);"
    )
    op.execute("""
        CREATE TRIGGER trg_history_append_only
            BEFORE UPDATE OR DELETE ON subadmin_history
            FOR EACH ROW EXECUTE FUNCTION fn_reject_mutation();
    """)

    op.execute("""
        CREATE TABLE game_records (
            user_id             UUID         NOT NULL REFERENCES accounts(id) ON DELETE CASCADE,
            game_index          INTEGER      NOT NULL,
            game_start          TIMESTAMPTZ  NOT NULL,
            game_end            TIMESTAMPTZ  NOT NULL,
            bet_amount          BIGINT       NOT NULL,
            picked_cards        INTEGER[]    NOT NULL,
            on_calls            INTEGER[]    NOT NULL DEFAULT '{}',
            winner_cards        INTEGER[]    NOT NULL DEFAULT '{}',
            luckypassed_cards   INTEGER[]    NOT NULL DEFAULT '{}',
            dersh               BIGINT       NOT NULL,
            commission          BIGINT       NOT NULL,
            created_by          VARCHAR(64)  NOT NULL,
            shop_name           VARCHAR(128) NOT NULL,
            time_label          VARCHAR(32)  NOT NULL,
            PRIMARY KEY (user_id, game_index),
            CONSTRAINT ck_games_index_gte_0       CHECK (game_index >= 0),
            CONSTRAINT ck_games_bet_gt_0          CHECK (bet_amount > 0),
            CONSTRAINT ck_games_commission_gte_0  CHECK (commission >= 0)
        );
    """)
    # Columns fixed at game start may never change afterwards.
    op.execute("""
        CREATE OR REPLACE FUNCTION fn_game_records_immutable()
        RETURNS TRIGGER AS $$
        BEGIN
            IF NEW.user_id      IS DISTINCT FROM OLD.user_id
            OR NEW.game_index   IS DISTINCT FROM OLD.game_index
            OR NEW.game_start   IS DISTINCT FROM OLD.game_start
            OR NEW.bet_amount   IS DISTINCT FROM OLD.bet_amount
            OR NEW.picked_cards IS DISTINCT FROM OLD.picked_cards
            OR NEW.dersh        IS DISTINCT FROM OLD.dersh
            OR NEW.commission   IS DISTINCT FROM OLD.commission
            OR NEW.created_by   IS DISTINCT FROM OLD.created_by
            OR NEW.shop_name    IS DISTINCT FROM OLD.shop_name
            OR NEW.time_label   IS DISTINCT FROM OLD.time_label THEN
                RAISE EXCEPTION 'game_records: immutable column changed';
            END IF;
            RETURN NEW;
        END;
        $$ LANGUAGE plpgsql;
    """)
    op.execute("""
        CREATE TRIGGER trg_game_records_immutable
            BEFORE UPDATE ON game_records
            FOR EACH ROW EXECUTE FUNCTION fn_game_records_immutable();
    """)


def downgrade() -> None:
    op.execute("DROP TABLE IF EXISTS game_records CASCADE;")
    op.execute("DROP FUNCTION IF EXISTS fn_game_records_immutable();")
    op.execute("DROP TABLE IF EXISTS subadmin_history CASCADE;")
