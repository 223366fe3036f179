"""Pydantic schemas for pa_auction API."""

from pydantic import BaseModel, Field

from src.pa_auction.domain.models import Planet, Player, SettlementOutcome
from src.pa_common.enums import SettlementStatus
from src.pa_common.planet_dollars import format_planet_dollars

# ---------------------------------------------------------------------------
# Request schemas
# ---------------------------------------------------------------------------


class PurchaseShareRequest(BaseModel):
    player_name: str = Field(..., min_length=1, max_length=1024, description="Display name")
    player_id: str | None = Field(
        None, description="Existing player; omit to create a new player"
    )


# ---------------------------------------------------------------------------
# Response schemas
# ---------------------------------------------------------------------------


class PlayerResponse(BaseModel):
    player_id: str
    player_name: str
    planet_dollars: int
    planet_dollars_display: str

    @classmethod
    def from_domain(cls, player: Player) -> "PlayerResponse":
        return cls(
            player_id=player.player_id,
            player_name=player.player_name,
            planet_dollars=player.planet_dollars,
            planet_dollars_display=format_planet_dollars(player.planet_dollars),
        )


class PlanetResponse(BaseModel):
    planet_id: int
    planet_name: str
    planet_value: int
    shares_available: int
    cost_per_share: int | None  # None once sold out

    @classmethod
    def from_domain(cls, planet: Planet) -> "PlanetResponse":
        return cls(
            planet_id=planet.planet_id,
            planet_name=planet.planet_name,
            planet_value=planet.planet_value,
            shares_available=planet.shares_available,
            cost_per_share=planet.cost_per_share if planet.shares_available > 0 else None,
        )


class PurchaseShareResponse(BaseModel):
    player_id: str
    settled: bool
    status: str
    message: str
    planet_id: int | None = None
    planet_name: str | None = None
    amount: int = 0
    planet_dollars: int | None = None

    @classmethod
    def from_outcome(cls, player_id: str, outcome: SettlementOutcome) -> "PurchaseShareResponse":
        return cls(
            player_id=player_id,
            settled=outcome.settled,
            status=outcome.status.value,
            message=describe_outcome(outcome),
            planet_id=outcome.planet.planet_id if outcome.planet else None,
            planet_name=outcome.planet.planet_name if outcome.planet else None,
            amount=outcome.amount,
            planet_dollars=outcome.player.planet_dollars if outcome.player else None,
        )


def describe_outcome(outcome: SettlementOutcome) -> str:
    """Human-readable status line shared by the web flow and the CLI."""
    planet_name = outcome.planet.planet_name if outcome.planet else ""
    player_name = outcome.player.player_name if outcome.player else ""
    if outcome.settled:
        balance = outcome.player.planet_dollars if outcome.player else 0
        return (
            f"1 Share of {planet_name} sold to {player_name} "
            f"for {format_planet_dollars(outcome.amount)} Planet Dollars. "
            f"{player_name} now has {format_planet_dollars(balance)} Planet Dollars."
        )
    if outcome.status == SettlementStatus.INSUFFICIENT_FUNDS and outcome.player:
        return (
            f"{format_planet_dollars(outcome.player.planet_dollars)} Planet Dollars "
            f"is not enough to purchase a share of {planet_name}"
        )
    if outcome.status == SettlementStatus.NO_PLAYER:
        return f"No player in sample can afford a share of {planet_name}. Please retry."
    if outcome.status == SettlementStatus.INVALID_MATCH:
        return "PlanetId or PlayerId was invalid."
    if outcome.status == SettlementStatus.ERROR:
        return f"Auction run attempt failed with an exception: {outcome.error}"
    return "Failed to acquire a valid Planet share. Please retry."
