"""Integer arithmetic for Planet Dollars.

All values, prices and balances are int Planet Dollars. No float, no Decimal.
"""


def cost_per_share(planet_value: int, shares_available: int) -> int:
    """Current price of one share: floor(value / shares).

    Derived, never stored; it drifts upward as shares are sold.
    """
    if shares_available <= 0:
        raise ValueError(f"No shares available to price, got {shares_available}")
    return planet_value // shares_available


def format_planet_dollars(amount: int) -> str:
    """Group thousands: 1000000 -> '1,000,000', -1200 -> '-1,200'."""
    return f"{amount:,}"
