"""Venue fee model and fee-adjusted quantity helpers.

A venue either nets its fee out of the traded quantity itself (SERVER) or
leaves it to the caller (CLIENT). For client-side venues a buy order must be
widened and a sell order narrowed so that, after the venue takes its fee in
the base currency, the intended economic volume is what actually trades:

  buy:  order_volume = volume / (1 - rate)
  sell: order_volume = volume / (1 + rate)

Downstream math works on a uniform "fee as a fraction of economic volume"
basis, which for a client-side venue is rate / (1 - rate) on a buy and
rate / (1 + rate) on a sell.
"""

from dataclasses import dataclass
from decimal import Decimal
from enum import Enum

from arbsizer.exceptions import InvalidInputError
from arbsizer.volume.decimal_policy import divide, round_final

_ZERO = Decimal("0")
_ONE = Decimal("1")


class FeeComputation(str, Enum):
    """Who accounts for the fee in the traded quantity."""

    SERVER = "server"
    CLIENT = "client"


@dataclass(frozen=True)
class FeeRate:
    """A venue's total trading fee and its computation mode."""

    rate: Decimal
    computation: FeeComputation = FeeComputation.SERVER

    def __post_init__(self) -> None:
        if not _ZERO <= self.rate < _ONE:
            raise InvalidInputError(f"Fee rate must be in [0, 1), got {self.rate}")

    @property
    def is_client_side(self) -> bool:
        return self.computation is FeeComputation.CLIENT


def fee_adjusted_for_buy(fee: FeeRate, scale: int) -> Decimal:
    """Uniform-basis fee fraction for a buy leg."""
    if not fee.is_client_side:
        return fee.rate
    return divide(fee.rate, _ONE - fee.rate, scale)


def fee_adjusted_for_sell(fee: FeeRate, scale: int) -> Decimal:
    """Uniform-basis fee fraction for a sell leg."""
    if not fee.is_client_side:
        return fee.rate
    return divide(fee.rate, _ONE + fee.rate, scale)


def buy_base_fee(
    computation: FeeComputation,
    volume: Decimal,
    raw_fee: Decimal | None,
    from_order_volume: bool,
    scale: int,
) -> Decimal:
    """Quantity added to a buy leg's economic volume to get its order volume.

    Args:
        computation: The venue's fee computation mode.
        volume: Either the order volume or the economic volume.
        raw_fee: The venue's raw fee rate (None for server-side venues).
        from_order_volume: True when `volume` is already the order volume.
        scale: Scale of the returned amount.

    Returns:
        The fee amount in base currency, zero for server-side venues.
    """
    if computation is FeeComputation.SERVER or raw_fee is None:
        return _ZERO
    if from_order_volume:
        return round_final(volume * raw_fee, scale)
    return divide(volume * raw_fee, _ONE - raw_fee, scale)


def sell_base_fee(
    computation: FeeComputation,
    volume: Decimal,
    raw_fee: Decimal | None,
    from_order_volume: bool,
    scale: int,
) -> Decimal:
    """Quantity removed from a sell leg's economic volume to get its order volume.

    Mirror of buy_base_fee: from an order volume the fee is volume * rate,
    from an economic volume it is volume * rate / (1 + rate).
    """
    if computation is FeeComputation.SERVER or raw_fee is None:
        return _ZERO
    if from_order_volume:
        return round_final(volume * raw_fee, scale)
    return divide(volume * raw_fee, _ONE + raw_fee, scale)
