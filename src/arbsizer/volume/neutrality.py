"""Market-neutrality math for a long/short volume pair.

Buying and selling the same quantity is not market neutral once fees are
netted at exit: fees scale with traded notional, so the long leg must be
slightly larger than the short leg. The required ratio is

    target_ratio = (1 + short_fee) * (1 + exit_spread) / (1 - long_fee)

and it relates the legs as long_volume = short_volume * target_ratio.
Fees are uniform-basis fractions (see arbsizer.volume.fees).

All quotients are computed at the caller's intermediate scale.
"""

from decimal import Decimal

from arbsizer.volume.decimal_policy import CURRENCY_SCALE, divide, floor_to_scale, round_final

_ONE = Decimal("1")

# |rating - 1| at or below this counts as market neutral.
NEUTRALITY_TOLERANCE = Decimal("1")


def target_ratio(
    long_fee: Decimal, short_fee: Decimal, exit_spread: Decimal, scale: int
) -> Decimal:
    """Return the long/short volume ratio that cancels fees at exit."""
    return divide((_ONE + short_fee) * (_ONE + exit_spread), _ONE - long_fee, scale)


def short_from_long(
    long_volume: Decimal,
    long_fee: Decimal,
    short_fee: Decimal,
    exit_spread: Decimal,
    scale: int,
) -> Decimal:
    """Market-neutral short volume for a given long volume."""
    ratio = target_ratio(long_fee, short_fee, exit_spread, scale)
    return divide(long_volume, ratio, scale)


def long_from_short(
    short_volume: Decimal,
    long_fee: Decimal,
    short_fee: Decimal,
    exit_spread: Decimal,
    scale: int,
) -> Decimal:
    """Market-neutral long volume for a given short volume."""
    ratio = target_ratio(long_fee, short_fee, exit_spread, scale)
    return round_final(short_volume * ratio, scale)


def long_volume_from_exposures(
    long_max_exposure: Decimal,
    short_max_exposure: Decimal,
    long_price: Decimal,
    short_price: Decimal,
    long_fee: Decimal,
    short_fee: Decimal,
    exit_spread: Decimal,
    scale: int,
) -> Decimal:
    """Largest long volume whose position respects both venues' exposure caps.

    The long cap gives long_max_exposure / long_price directly. The short cap
    gives short_max_exposure / short_price on the short leg, which is the
    long volume short_max_exposure / short_price * target_ratio once the
    short leg is derived from the long one.
    """
    by_long_cap = divide(long_max_exposure, long_price, scale)
    ratio = target_ratio(long_fee, short_fee, exit_spread, scale)
    by_short_cap = divide(ratio * short_max_exposure, short_price, scale)
    return min(by_long_cap, by_short_cap)


def short_volume_from_exposures(
    long_max_exposure: Decimal,
    short_max_exposure: Decimal,
    long_price: Decimal,
    short_price: Decimal,
    long_fee: Decimal,
    short_fee: Decimal,
    exit_spread: Decimal,
    scale: int,
) -> Decimal:
    """Largest short volume whose position respects both venues' exposure caps."""
    by_short_cap = divide(short_max_exposure, short_price, scale)
    ratio = target_ratio(long_fee, short_fee, exit_spread, scale)
    by_long_cap = divide(long_max_exposure, ratio * long_price, scale)
    return min(by_short_cap, by_long_cap)


def market_neutrality_rating(
    long_volume: Decimal,
    short_volume: Decimal,
    long_fee: Decimal,
    short_fee: Decimal,
    exit_spread: Decimal,
    scale: int,
) -> Decimal:
    """Rate how well the volume pair compensates fees.

    1 means perfect market neutrality, 0 means the fees are not compensated
    at all and 2 means they are compensated twice. When the target ratio is
    exactly 1 (no fees, no spread) any pair other than 1:1 is infinitely far
    from neutral.
    """
    actual = divide(long_volume, short_volume, scale)
    target = target_ratio(long_fee, short_fee, exit_spread, scale)
    if target == _ONE:
        if actual == _ONE:
            return _ONE
        return Decimal("Infinity").copy_sign(actual - _ONE)
    return divide(actual - _ONE, target - _ONE, scale)


def is_market_neutral(rating: Decimal) -> bool:
    """True when the rating lies within [0, 2]."""
    return abs(rating - _ONE) <= NEUTRALITY_TOLERANCE


def minimum_profit(
    long_volume: Decimal,
    short_volume: Decimal,
    long_price: Decimal,
    short_price: Decimal,
    long_fee: Decimal,
    short_fee: Decimal,
) -> Decimal:
    """Estimated lower bound of the profit, floored to currency scale.

    Only meaningful when the rating is close to 1 and the exit happens
    exactly at the configured exit spread.
    """
    long_entry = long_volume * long_price * (_ONE + long_fee)
    short_entry = short_volume * short_price * (_ONE - short_fee)
    return floor_to_scale(short_entry - long_entry, CURRENCY_SCALE)
