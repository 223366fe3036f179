# src/pa_admin/application/service.py
"""Admin application service — database creation and seeding."""
import csv
import logging
import uuid
from collections.abc import Awaitable
from pathlib import Path

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncConnection, AsyncSession

from config.settings import settings
from src.pa_admin.infrastructure.ddl import execute_ddl
from src.pa_admin.infrastructure.schema import TABLES, create_database_sql
from src.pa_auction.domain.models import Planet, Player
from src.pa_auction.domain.repository import AuctionRepositoryProtocol
from src.pa_auction.infrastructure.persistence import AuctionRepository
from src.pa_common.enums import DdlOutcome
from src.pa_common.errors import InvalidPlanetCsvError
from src.pa_common.id_generator import generate_planet_id, generate_player_id
from src.pa_common.store_errors import to_store_error
from src.pa_common.tracing import create_span

logger = logging.getLogger(__name__)


def parse_planets_csv(path: str | Path) -> list[tuple[str, int]]:
    """Read `name,value` lines. Blank lines are skipped; anything else malformed raises."""
    planets: list[tuple[str, int]] = []
    with open(path, newline="", encoding="utf-8") as f:
        for line_number, row in enumerate(csv.reader(f), start=1):
            if not row or all(not cell.strip() for cell in row):
                continue
            if len(row) < 2:
                raise InvalidPlanetCsvError(line_number, "expected 'PlanetName,PlanetValue'")
            name = row[0].strip()
            if not name:
                raise InvalidPlanetCsvError(line_number, "empty planet name")
            try:
                value = int(row[1].strip())
            except ValueError:
                raise InvalidPlanetCsvError(
                    line_number, f"value is not an integer: {row[1]!r}"
                ) from None
            if value < 0:
                raise InvalidPlanetCsvError(line_number, f"value must be >= 0, got {value}")
            planets.append((name, value))
    return planets


class AdminService:
    def __init__(self, repo: AuctionRepositoryProtocol | None = None) -> None:
        self._repo: AuctionRepositoryProtocol = repo or AuctionRepository()

    async def create_database(self, conn: AsyncConnection, database_id: str) -> DdlOutcome:
        """CREATE DATABASE on an AUTOCOMMIT connection to the admin database."""
        quoted = conn.dialect.identifier_preparer.quote(database_id)
        with create_span("admin.create_database", {"database_id": database_id}):
            return await execute_ddl(conn, create_database_sql(quoted))

    async def create_tables(self, conn: AsyncConnection) -> dict[str, DdlOutcome]:
        """planets, players, transactions — each one a no-op if it already exists."""
        outcomes: dict[str, DdlOutcome] = {}
        with create_span("admin.create_tables"):
            for name, statement in TABLES.items():
                outcomes[name] = await execute_ddl(conn, statement)
        return outcomes

    async def insert_planet(
        self, db: AsyncSession, planet_name: str, planet_value: int
    ) -> Planet:
        planet = self._new_planet(planet_name, planet_value)
        with create_span("admin.insert_planet", {"planet_id": planet.planet_id}):
            await self._commit_inserts(db, self._repo.insert_planets(db, [planet]))
        return planet

    async def batch_insert_planets(
        self, db: AsyncSession, rows: list[tuple[str, int]]
    ) -> int:
        """All rows in one transaction."""
        planets = [self._new_planet(name, value) for name, value in rows]
        with create_span("admin.batch_insert_planets", {"planets": len(planets)}):
            return await self._commit_inserts(db, self._repo.insert_planets(db, planets))

    async def batch_insert_players(
        self,
        db: AsyncSession,
        batch_count: int | None = None,
        batch_size: int | None = None,
    ) -> int:
        """`batch_count` transactions of `batch_size` generated players each.

        Id collisions are skipped by the store; replacements are generated
        until the batch is full.
        """
        batch_count = settings.PLAYER_BATCH_COUNT if batch_count is None else batch_count
        batch_size = settings.PLAYER_BATCH_SIZE if batch_size is None else batch_size
        total = 0
        with create_span("admin.batch_insert_players", {"batches": batch_count}):
            for batch in range(batch_count):
                total += await self._commit_inserts(db, self._fill_player_batch(db, batch_size))
                logger.debug("Inserted player batch %d/%d", batch + 1, batch_count)
        return total

    async def _fill_player_batch(self, db: AsyncSession, batch_size: int) -> int:
        inserted = 0
        while inserted < batch_size:
            players = [self._new_player() for _ in range(batch_size - inserted)]
            added = await self._repo.insert_players(db, players)
            if added < len(players):
                logger.info("Player id collision, regenerating %d", len(players) - added)
            inserted += added
        return inserted

    async def _commit_inserts(self, db: AsyncSession, work: Awaitable[int]) -> int:
        try:
            count = await work
            await db.commit()
        except SQLAlchemyError as e:
            await db.rollback()
            raise to_store_error(e) from e
        except Exception:
            await db.rollback()
            raise
        return count

    @staticmethod
    def _new_planet(planet_name: str, planet_value: int) -> Planet:
        return Planet(
            planet_id=generate_planet_id(),
            planet_name=planet_name,
            planet_value=planet_value,
            shares_available=settings.PLANET_STARTING_SHARES,
        )

    @staticmethod
    def _new_player() -> Player:
        return Player(
            player_id=generate_player_id(),
            player_name=f"Player-{uuid.uuid4().hex[:8]}",
            planet_dollars=settings.PLAYER_STARTING_DOLLARS,
        )
