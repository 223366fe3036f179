"""Unified error codes and custom exceptions.

Error code ranges:
  1xxx: Planet
  2xxx: Player
  3xxx: Auction
  9xxx: System / store
"""

from src.pa_common.enums import StoreErrorKind


class AppError(Exception):
    """Base application error."""

    def __init__(
        self,
        code: int,
        message: str,
        http_status: int = 500,
    ) -> None:
        self.code = code
        self.message = message
        self.http_status = http_status
        super().__init__(message)


# --- 1xxx: Planet ---

class PlanetNotFoundError(AppError):
    def __init__(self, planet_id: int) -> None:
        super().__init__(1001, f"Planet not found: {planet_id}", 404)


class InvalidPlanetCsvError(AppError):
    def __init__(self, line_number: int, detail: str) -> None:
        super().__init__(1002, f"Invalid planet CSV line {line_number}: {detail}", 422)


# --- 2xxx: Player ---

class PlayerNotFoundError(AppError):
    def __init__(self, player_id: str) -> None:
        super().__init__(2001, f"Player not found: {player_id}", 404)


# --- 3xxx: Auction ---

class InvalidShareCountError(AppError):
    def __init__(self, number_of_shares: int) -> None:
        super().__init__(
            3001, f"Number of shares must be >= 0, got {number_of_shares}", 422
        )


# --- 9xxx: System ---

class InternalError(AppError):
    def __init__(self, detail: str = "Internal server error") -> None:
        super().__init__(9002, detail, 500)


class StoreError(AppError):
    """A classified failure reported by the relational store."""

    def __init__(self, kind: StoreErrorKind, detail: str) -> None:
        self.kind = kind
        http_status = 503 if kind.is_transient else 500
        super().__init__(9003, f"Store error ({kind.value}): {detail}", http_status)

    @property
    def is_transient(self) -> bool:
        return self.kind.is_transient
