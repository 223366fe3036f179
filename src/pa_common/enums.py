"""Global enums — values are persisted in logs and returned by the API."""

from enum import Enum


class PricingPolicy(str, Enum):
    """Which cost-per-share a settlement debits.

    MATCH_TIME debits the price observed when the match was selected, even if
    the planet's inventory moved before commit. COMMIT_TIME re-reads the planet
    row under lock inside the settlement transaction and debits that price.
    """
    MATCH_TIME = "MATCH_TIME"
    COMMIT_TIME = "COMMIT_TIME"


class SettlementStatus(str, Enum):
    SETTLED = "SETTLED"
    # Match failures (normal outcomes, nothing written)
    NO_PLANET = "NO_PLANET"
    NO_PLAYER = "NO_PLAYER"
    INSUFFICIENT_FUNDS = "INSUFFICIENT_FUNDS"
    # Settlement aborts (rolled back)
    INVALID_MATCH = "INVALID_MATCH"
    SHARES_EXHAUSTED = "SHARES_EXHAUSTED"
    # Terminal store fault after the retry budget
    ERROR = "ERROR"


class StoreErrorKind(str, Enum):
    TRANSIENT_CONFLICT = "TRANSIENT_CONFLICT"
    RESOURCE_EXHAUSTED = "RESOURCE_EXHAUSTED"
    UNAVAILABLE = "UNAVAILABLE"
    ALREADY_EXISTS = "ALREADY_EXISTS"
    NOT_FOUND = "NOT_FOUND"
    CONSTRAINT_VIOLATION = "CONSTRAINT_VIOLATION"
    UNKNOWN = "UNKNOWN"

    @property
    def is_transient(self) -> bool:
        return self in _TRANSIENT_KINDS


_TRANSIENT_KINDS = frozenset({
    StoreErrorKind.TRANSIENT_CONFLICT,
    StoreErrorKind.RESOURCE_EXHAUSTED,
    StoreErrorKind.UNAVAILABLE,
})


class DdlOutcome(str, Enum):
    CREATED = "CREATED"
    ALREADY_EXISTS = "ALREADY_EXISTS"
