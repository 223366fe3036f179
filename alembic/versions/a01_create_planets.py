"""a01: create planets table

Revision ID: a01
Revises:
Create Date: 2026-10-17
"""
from typing import Sequence, Union
from alembic import op

from src.pa_admin.infrastructure.schema import CREATE_PLANETS_TABLE

revision: str = "a01"
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    op.execute(CREATE_PLANETS_TABLE)
    op.execute("COMMENT ON TABLE planets IS 'Sellers — shares_available only ever decreases';")


def downgrade() -> None:
    op.execute("DROP TABLE IF EXISTS planets CASCADE;")
