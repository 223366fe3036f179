"""a03: create transactions table

Revision ID: a03
Revises: a02
Create Date: 2026-10-17
"""
from typing import Sequence, Union
from alembic import op

from src.pa_admin.infrastructure.schema import CREATE_TRANSACTIONS_TABLE

revision: str = "a03"
down_revision: Union[str, None] = "a02"
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    op.execute(CREATE_TRANSACTIONS_TABLE)
    op.execute(
        "CREATE INDEX idx_transactions_player ON transactions (player_id, time_stamp DESC);"
    )
    op.execute("COMMENT ON TABLE transactions IS 'Append-only purchase ledger';")


def downgrade() -> None:
    op.execute("DROP TABLE IF EXISTS transactions CASCADE;")
