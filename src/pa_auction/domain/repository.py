"""Repository Protocol — dependency inversion for testability.

Unit tests inject an in-memory store that conforms to this Protocol.
Infrastructure layer provides the PostgreSQL implementation.

All methods run inside the caller's transaction; none of them commit.
"""

from collections.abc import Sequence
from typing import Protocol

from sqlalchemy.ext.asyncio import AsyncSession

from src.pa_auction.domain.models import Planet, Player, TransactionRecord


class AuctionRepositoryProtocol(Protocol):
    # --- selection (statistical sample, not a full scan) ---

    async def sample_planet_with_shares(
        self, db: AsyncSession, sample_percent: float
    ) -> Planet | None: ...

    async def sample_player_with_balance(
        self, db: AsyncSession, sample_percent: float, min_balance: int
    ) -> Player | None: ...

    # --- point reads ---

    async def get_planet(self, db: AsyncSession, planet_id: int) -> Planet | None: ...

    async def get_planet_for_update(
        self, db: AsyncSession, planet_id: int
    ) -> Planet | None: ...

    async def get_player(self, db: AsyncSession, player_id: str) -> Player | None: ...

    # --- settlement mutations (None = guard failed, nothing changed) ---

    async def decrement_shares(self, db: AsyncSession, planet_id: int) -> Planet | None: ...

    async def debit_player(
        self, db: AsyncSession, player_id: str, amount: int
    ) -> Player | None: ...

    async def insert_transaction(
        self, db: AsyncSession, planet_id: int, player_id: str, amount: int
    ) -> TransactionRecord: ...

    # --- seeding ---

    async def insert_planets(self, db: AsyncSession, planets: Sequence[Planet]) -> int: ...

    async def insert_players(self, db: AsyncSession, players: Sequence[Player]) -> int:
        """Insert, skipping id collisions. Returns the number actually inserted."""
        ...
