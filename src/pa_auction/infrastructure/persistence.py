"""AuctionRepository — PostgreSQL implementation of AuctionRepositoryProtocol.

Selection uses TABLESAMPLE BERNOULLI so each attempt reads roughly
sample_percent of the table instead of scanning it. Settlement mutations are
guarded UPDATE ... RETURNING statements: 0 rows means the guard (shares left,
balance covers the amount) no longer held and nothing was changed.

Transaction ownership: the CALLER (AuctionApplicationService / AdminService)
commits or rolls back.
"""

from collections.abc import Sequence

from sqlalchemy import insert, text
from sqlalchemy.dialects.postgresql import insert as pg_insert
from sqlalchemy.ext.asyncio import AsyncSession

from src.pa_auction.domain.models import Planet, Player, TransactionRecord
from src.pa_auction.infrastructure.db_models import PlanetORM, PlayerORM
from src.pa_common.errors import InternalError

# ---------------------------------------------------------------------------
# SQL: selection
# ---------------------------------------------------------------------------

_SAMPLE_PLANET_SQL = text("""
    SELECT planet_id, planet_name, planet_value, shares_available
    FROM planets TABLESAMPLE BERNOULLI (:sample_percent)
    WHERE shares_available > 0
    LIMIT 1
""")

_SAMPLE_PLAYER_SQL = text("""
    SELECT player_id, player_name, planet_dollars
    FROM players TABLESAMPLE BERNOULLI (:sample_percent)
    WHERE planet_dollars >= :min_balance
    LIMIT 1
""")

_GET_PLANET_SQL = text("""
    SELECT planet_id, planet_name, planet_value, shares_available
    FROM planets
    WHERE planet_id = :planet_id
""")

_GET_PLANET_FOR_UPDATE_SQL = text("""
    SELECT planet_id, planet_name, planet_value, shares_available
    FROM planets
    WHERE planet_id = :planet_id
    FOR UPDATE
""")

_GET_PLAYER_SQL = text("""
    SELECT player_id, player_name, planet_dollars
    FROM players
    WHERE player_id = :player_id
""")

# ---------------------------------------------------------------------------
# SQL: settlement
# ---------------------------------------------------------------------------

_DECREMENT_SHARES_SQL = text("""
    UPDATE planets
    SET shares_available = shares_available - 1
    WHERE planet_id = :planet_id AND shares_available > 0
    RETURNING planet_id, planet_name, planet_value, shares_available
""")

_DEBIT_PLAYER_SQL = text("""
    UPDATE players
    SET planet_dollars = planet_dollars - :amount
    WHERE player_id = :player_id AND planet_dollars >= :amount
    RETURNING player_id, player_name, planet_dollars
""")

# time_stamp defaults to clock_timestamp() on the server
_INSERT_TRANSACTION_SQL = text("""
    INSERT INTO transactions (planet_id, player_id, amount)
    VALUES (:planet_id, :player_id, :amount)
    RETURNING planet_id, player_id, amount, time_stamp
""")


def _row_to_planet(row: object) -> Planet:
    return Planet(
        planet_id=row.planet_id,  # type: ignore[attr-defined]
        planet_name=row.planet_name,  # type: ignore[attr-defined]
        planet_value=row.planet_value,  # type: ignore[attr-defined]
        shares_available=row.shares_available,  # type: ignore[attr-defined]
    )


def _row_to_player(row: object) -> Player:
    return Player(
        player_id=row.player_id,  # type: ignore[attr-defined]
        player_name=row.player_name,  # type: ignore[attr-defined]
        planet_dollars=row.planet_dollars,  # type: ignore[attr-defined]
    )


def _row_to_transaction(row: object) -> TransactionRecord:
    return TransactionRecord(
        planet_id=row.planet_id,  # type: ignore[attr-defined]
        player_id=row.player_id,  # type: ignore[attr-defined]
        amount=row.amount,  # type: ignore[attr-defined]
        time_stamp=row.time_stamp,  # type: ignore[attr-defined]
    )


class AuctionRepository:
    """Concrete repository — every mutation is a single guarded statement."""

    async def sample_planet_with_shares(
        self, db: AsyncSession, sample_percent: float
    ) -> Planet | None:
        result = await db.execute(_SAMPLE_PLANET_SQL, {"sample_percent": sample_percent})
        row = result.fetchone()
        return _row_to_planet(row) if row else None

    async def sample_player_with_balance(
        self, db: AsyncSession, sample_percent: float, min_balance: int
    ) -> Player | None:
        result = await db.execute(
            _SAMPLE_PLAYER_SQL,
            {"sample_percent": sample_percent, "min_balance": min_balance},
        )
        row = result.fetchone()
        return _row_to_player(row) if row else None

    async def get_planet(self, db: AsyncSession, planet_id: int) -> Planet | None:
        result = await db.execute(_GET_PLANET_SQL, {"planet_id": planet_id})
        row = result.fetchone()
        return _row_to_planet(row) if row else None

    async def get_planet_for_update(
        self, db: AsyncSession, planet_id: int
    ) -> Planet | None:
        result = await db.execute(_GET_PLANET_FOR_UPDATE_SQL, {"planet_id": planet_id})
        row = result.fetchone()
        return _row_to_planet(row) if row else None

    async def get_player(self, db: AsyncSession, player_id: str) -> Player | None:
        result = await db.execute(_GET_PLAYER_SQL, {"player_id": player_id})
        row = result.fetchone()
        return _row_to_player(row) if row else None

    async def decrement_shares(self, db: AsyncSession, planet_id: int) -> Planet | None:
        result = await db.execute(_DECREMENT_SHARES_SQL, {"planet_id": planet_id})
        row = result.fetchone()
        return _row_to_planet(row) if row else None

    async def debit_player(
        self, db: AsyncSession, player_id: str, amount: int
    ) -> Player | None:
        result = await db.execute(
            _DEBIT_PLAYER_SQL, {"player_id": player_id, "amount": amount}
        )
        row = result.fetchone()
        return _row_to_player(row) if row else None

    async def insert_transaction(
        self, db: AsyncSession, planet_id: int, player_id: str, amount: int
    ) -> TransactionRecord:
        result = await db.execute(
            _INSERT_TRANSACTION_SQL,
            {"planet_id": planet_id, "player_id": player_id, "amount": amount},
        )
        row = result.fetchone()
        if row is None:
            raise InternalError("Transaction insert returned no rows")
        return _row_to_transaction(row)

    async def insert_planets(self, db: AsyncSession, planets: Sequence[Planet]) -> int:
        if not planets:
            return 0
        await db.execute(
            insert(PlanetORM),
            [
                {
                    "planet_id": p.planet_id,
                    "planet_name": p.planet_name,
                    "planet_value": p.planet_value,
                    "shares_available": p.shares_available,
                }
                for p in planets
            ],
        )
        return len(planets)

    async def insert_players(self, db: AsyncSession, players: Sequence[Player]) -> int:
        if not players:
            return 0
        stmt = (
            pg_insert(PlayerORM)
            .values(
                [
                    {
                        "player_id": p.player_id,
                        "player_name": p.player_name,
                        "planet_dollars": p.planet_dollars,
                    }
                    for p in players
                ]
            )
            .on_conflict_do_nothing(index_elements=[PlayerORM.player_id])
            .returning(PlayerORM.player_id)
        )
        result = await db.execute(stmt)
        return len(result.fetchall())
