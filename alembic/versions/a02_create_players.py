"""a02: create players table

Revision ID: a02
Revises: a01
Create Date: 2026-10-17
"""
from typing import Sequence, Union
from alembic import op

from src.pa_admin.infrastructure.schema import CREATE_PLAYERS_TABLE

revision: str = "a02"
down_revision: Union[str, None] = "a01"
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    op.execute(CREATE_PLAYERS_TABLE)
    op.execute("COMMENT ON TABLE players IS 'Buyers — planet_dollars debited per share bought';")


def downgrade() -> None:
    op.execute("DROP TABLE IF EXISTS players CASCADE;")
