"""Random match selection — pick one seller planet and one buyer player.

Both sides are chosen from a Bernoulli sample of their table rather than a
full scan. Finding nobody eligible inside the sample is a normal result
(MatchResult.failure set), never an exception.
"""
import logging

from sqlalchemy.ext.asyncio import AsyncSession

from src.pa_auction.domain.models import Match, MatchResult
from src.pa_auction.domain.repository import AuctionRepositoryProtocol
from src.pa_common.enums import SettlementStatus
from src.pa_common.errors import PlayerNotFoundError

logger = logging.getLogger(__name__)


class RandomMatchSelector:
    def __init__(self, repo: AuctionRepositoryProtocol, sample_percent: float) -> None:
        if not (0 < sample_percent <= 100):
            raise ValueError(f"sample_percent must be in (0, 100], got {sample_percent}")
        self._repo = repo
        self._sample_percent = sample_percent

    async def select(self, db: AsyncSession) -> MatchResult:
        """Sampled planet with shares left, then sampled player who can afford a share."""
        planet = await self._repo.sample_planet_with_shares(db, self._sample_percent)
        if planet is None:
            logger.debug("No planet with available shares in sample")
            return MatchResult(failure=SettlementStatus.NO_PLANET)

        cost = planet.cost_per_share
        player = await self._repo.sample_player_with_balance(db, self._sample_percent, cost)
        if player is None:
            logger.debug("No player with >= %d Planet Dollars in sample", cost)
            return MatchResult(failure=SettlementStatus.NO_PLAYER, planet=planet)

        return MatchResult(match=Match(planet=planet, player=player, cost_per_share=cost))

    async def select_for_player(self, db: AsyncSession, player_id: str) -> MatchResult:
        """Sampled planet for a known buyer (web purchase flow)."""
        player = await self._repo.get_player(db, player_id)
        if player is None:
            raise PlayerNotFoundError(player_id)

        planet = await self._repo.sample_planet_with_shares(db, self._sample_percent)
        if planet is None:
            return MatchResult(failure=SettlementStatus.NO_PLANET, player=player)

        cost = planet.cost_per_share
        if player.planet_dollars < cost:
            return MatchResult(
                failure=SettlementStatus.INSUFFICIENT_FUNDS, planet=planet, player=player
            )
        return MatchResult(match=Match(planet=planet, player=player, cost_per_share=cost))
