"""Settlement transaction — apply one matched share purchase.

Runs inside the caller's transaction and never commits:
  1. re-validate the match (planet id non-zero, player id non-empty)
  2. decrement the planet's shares_available by exactly 1
  3. debit the player by the share price
  4. append one transactions row (server-assigned time_stamp)

Any non-SETTLED outcome means the caller must roll back; steps are never
retried individually.
"""
import logging

from sqlalchemy.ext.asyncio import AsyncSession

from src.pa_auction.domain.models import Match, SettlementOutcome
from src.pa_auction.domain.repository import AuctionRepositoryProtocol
from src.pa_common.enums import PricingPolicy, SettlementStatus

logger = logging.getLogger(__name__)


class SettlementTransaction:
    def __init__(
        self,
        repo: AuctionRepositoryProtocol,
        pricing_policy: PricingPolicy = PricingPolicy.MATCH_TIME,
    ) -> None:
        self._repo = repo
        self._pricing_policy = pricing_policy

    async def apply(self, db: AsyncSession, match: Match) -> SettlementOutcome:
        planet_id = match.planet.planet_id
        player_id = match.player.player_id
        if planet_id == 0 or not player_id:
            logger.debug("PlanetId or PlayerId was invalid: %r / %r", planet_id, player_id)
            return SettlementOutcome(
                status=SettlementStatus.INVALID_MATCH, planet=match.planet, player=match.player
            )

        amount = match.cost_per_share
        if self._pricing_policy == PricingPolicy.COMMIT_TIME:
            current = await self._repo.get_planet_for_update(db, planet_id)
            if current is None or current.shares_available <= 0:
                return SettlementOutcome(
                    status=SettlementStatus.SHARES_EXHAUSTED,
                    planet=current or match.planet,
                    player=match.player,
                )
            amount = current.cost_per_share

        planet = await self._repo.decrement_shares(db, planet_id)
        if planet is None:
            return SettlementOutcome(
                status=SettlementStatus.SHARES_EXHAUSTED, planet=match.planet, player=match.player
            )

        player = await self._repo.debit_player(db, player_id, amount)
        if player is None:
            return SettlementOutcome(
                status=SettlementStatus.INSUFFICIENT_FUNDS,
                planet=planet,
                player=match.player,
                amount=amount,
            )

        record = await self._repo.insert_transaction(db, planet_id, player_id, amount)
        return SettlementOutcome(
            status=SettlementStatus.SETTLED,
            planet=planet,
            player=player,
            amount=amount,
            record=record,
        )
