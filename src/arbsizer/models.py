"""Shared data models for the arbitrage volume sizer.

CRITICAL: All monetary values and quantities use Decimal. Never use float.
"""

from dataclasses import dataclass
from decimal import Decimal
from enum import Enum


class OrderSide(str, Enum):
    """Order direction."""

    BUY = "buy"
    SELL = "sell"


class Leg(str, Enum):
    """One side of a two-venue arbitrage position."""

    LONG = "long"
    SHORT = "short"

    @property
    def other(self) -> "Leg":
        return Leg.SHORT if self is Leg.LONG else Leg.LONG


@dataclass(frozen=True)
class LegOrder:
    """A venue-legal order for one leg, ready to be placed."""

    venue: str
    symbol: str
    side: OrderSide
    quantity: Decimal
    price: Decimal


@dataclass(frozen=True)
class SizedEntry:
    """Result of sizing an entry: both orders plus the neutrality diagnostics."""

    long_order: LegOrder
    short_order: LegOrder
    long_volume: Decimal  # economic (fee-neutral) volume
    short_volume: Decimal
    market_neutrality_rating: Decimal
    minimum_profit: Decimal
