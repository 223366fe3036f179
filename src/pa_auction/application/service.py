"""AuctionApplicationService — one settlement unit per call.

Each unit is select + settle inside a single transaction on the given
session: committed when SETTLED, rolled back otherwise. Store failures are
converted to StoreError (classified, see src.pa_common.store_errors) here and
nowhere else, so the retry policy only ever sees classified errors.
"""
import logging

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from config.settings import settings
from src.pa_auction.application.schemas import (
    PlanetResponse,
    PlayerResponse,
    PurchaseShareResponse,
)
from src.pa_auction.domain.models import MatchResult, Player, SettlementOutcome
from src.pa_auction.domain.repository import AuctionRepositoryProtocol
from src.pa_auction.domain.selector import RandomMatchSelector
from src.pa_auction.domain.settlement import SettlementTransaction
from src.pa_auction.infrastructure.persistence import AuctionRepository
from src.pa_common.enums import PricingPolicy
from src.pa_common.errors import PlanetNotFoundError, PlayerNotFoundError
from src.pa_common.id_generator import generate_player_id
from src.pa_common.store_errors import to_store_error
from src.pa_common.tracing import create_span

logger = logging.getLogger(__name__)


class AuctionApplicationService:
    def __init__(
        self,
        repo: AuctionRepositoryProtocol | None = None,
        pricing_policy: PricingPolicy | None = None,
        sample_percent: float | None = None,
    ) -> None:
        self._repo: AuctionRepositoryProtocol = repo or AuctionRepository()
        self._selector = RandomMatchSelector(
            self._repo,
            sample_percent if sample_percent is not None else settings.SAMPLE_PERCENT,
        )
        self._settlement = SettlementTransaction(
            self._repo, pricing_policy or PricingPolicy(settings.PRICING_POLICY)
        )

    async def settle_random(self, db: AsyncSession) -> SettlementOutcome:
        """Sampled buyer, sampled seller, one share."""
        with create_span("auction.settlement_unit") as span:
            try:
                selection = await self._selector.select(db)
                outcome = await self._settle(db, selection)
            except SQLAlchemyError as e:
                await db.rollback()
                raise to_store_error(e) from e
            span.set_attribute("auction.status", outcome.status.value)
            return outcome

    async def purchase_share(
        self, db: AsyncSession, player_name: str, player_id: str | None = None
    ) -> PurchaseShareResponse:
        """Web flow: create the player on first visit, then buy one share for them."""
        with create_span("auction.purchase_share", {"player_id": player_id}):
            try:
                if not player_id:
                    player = await self._create_player(db, player_name)
                    player_id = player.player_id
                selection = await self._selector.select_for_player(db, player_id)
                outcome = await self._settle(db, selection)
            except SQLAlchemyError as e:
                await db.rollback()
                raise to_store_error(e) from e
            return PurchaseShareResponse.from_outcome(player_id, outcome)

    async def get_player(self, db: AsyncSession, player_id: str) -> PlayerResponse:
        try:
            player = await self._repo.get_player(db, player_id)
        except SQLAlchemyError as e:
            raise to_store_error(e) from e
        if player is None:
            raise PlayerNotFoundError(player_id)
        return PlayerResponse.from_domain(player)

    async def get_planet(self, db: AsyncSession, planet_id: int) -> PlanetResponse:
        try:
            planet = await self._repo.get_planet(db, planet_id)
        except SQLAlchemyError as e:
            raise to_store_error(e) from e
        if planet is None:
            raise PlanetNotFoundError(planet_id)
        return PlanetResponse.from_domain(planet)

    async def _create_player(self, db: AsyncSession, player_name: str) -> Player:
        player = Player(
            player_id=generate_player_id(),
            player_name=player_name,
            planet_dollars=settings.PLAYER_STARTING_DOLLARS,
        )
        try:
            await self._repo.insert_players(db, [player])
            await db.commit()
        except Exception:
            await db.rollback()
            raise
        logger.info("Created player %s (%s)", player.player_id, player_name)
        return player

    async def _settle(self, db: AsyncSession, selection: MatchResult) -> SettlementOutcome:
        if selection.match is None:
            # Nothing was written; end the read transaction
            await db.rollback()
            return SettlementOutcome(
                status=selection.failure,  # type: ignore[arg-type]
                planet=selection.planet,
                player=selection.player,
            )
        try:
            outcome = await self._settlement.apply(db, selection.match)
            if outcome.settled:
                await db.commit()
            else:
                await db.rollback()
        except Exception:
            await db.rollback()
            raise
        logger.debug(
            "Settlement %s: planet=%s player=%s amount=%d",
            outcome.status.value,
            selection.match.planet.planet_id,
            selection.match.player.player_id,
            outcome.amount,
        )
        return outcome
