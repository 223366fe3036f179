"""SQLAlchemy ORM models for pa_auction.

These map to the tables created by src.pa_admin.infrastructure.schema (CLI)
or the Alembic migrations. DO NOT add/remove columns here without changing
both. Used for bulk inserts; hot-path reads/writes use text() SQL.
"""

from sqlalchemy import BigInteger, String, Text
from sqlalchemy.orm import Mapped, mapped_column

from src.pa_common.database import Base


class PlanetORM(Base):
    __tablename__ = "planets"

    planet_id: Mapped[int] = mapped_column(BigInteger, primary_key=True, autoincrement=False)
    planet_name: Mapped[str | None] = mapped_column(String(1024), nullable=True)
    planet_value: Mapped[int | None] = mapped_column(BigInteger, nullable=True)
    shares_available: Mapped[int | None] = mapped_column(BigInteger, nullable=True)


class PlayerORM(Base):
    __tablename__ = "players"

    player_id: Mapped[str] = mapped_column(Text, primary_key=True)
    player_name: Mapped[str | None] = mapped_column(String(1024), nullable=True)
    planet_dollars: Mapped[int | None] = mapped_column(BigInteger, nullable=True)

