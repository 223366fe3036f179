"""Domain models for pa_auction — pure dataclasses, no SQLAlchemy dependency."""

from collections import Counter
from collections.abc import Iterable
from dataclasses import dataclass, field
from datetime import datetime

from src.pa_common.enums import SettlementStatus
from src.pa_common.planet_dollars import cost_per_share


@dataclass
class Planet:
    planet_id: int
    planet_name: str
    planet_value: int        # Planet Dollars
    shares_available: int    # only ever decremented by settlement

    @property
    def cost_per_share(self) -> int:
        return cost_per_share(self.planet_value, self.shares_available)


@dataclass
class Player:
    player_id: str
    player_name: str
    planet_dollars: int


@dataclass
class TransactionRecord:
    """Append-only ledger row; time_stamp is assigned by the store."""
    planet_id: int
    player_id: str
    amount: int
    time_stamp: datetime | None = None


@dataclass
class Match:
    planet: Planet
    player: Player
    cost_per_share: int      # captured at selection time


@dataclass
class MatchResult:
    """Outcome of selection: a match, or the reason there is none."""
    match: Match | None = None
    failure: SettlementStatus | None = None
    planet: Planet | None = None
    player: Player | None = None

    @property
    def matched(self) -> bool:
        return self.match is not None


@dataclass
class SettlementOutcome:
    status: SettlementStatus
    planet: Planet | None = None
    player: Player | None = None
    amount: int = 0
    record: TransactionRecord | None = None
    error: str | None = None

    @property
    def settled(self) -> bool:
        return self.status == SettlementStatus.SETTLED


@dataclass
class AuctionSummary:
    requested: int
    purchased: int
    failed: int
    by_status: dict[str, int] = field(default_factory=dict)

    @classmethod
    def from_outcomes(
        cls, requested: int, outcomes: Iterable[SettlementOutcome]
    ) -> "AuctionSummary":
        counts = Counter(o.status.value for o in outcomes)
        purchased = counts.get(SettlementStatus.SETTLED.value, 0)
        return cls(
            requested=requested,
            purchased=purchased,
            failed=requested - purchased,
            by_status=dict(counts),
        )
