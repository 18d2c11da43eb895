"""Entry trade volume construction.

Sizes the long (buy) and short (sell) legs of a new position so that:
- neither venue's maximum exposure is exceeded
- fees on both legs cancel out at the configured exit spread

Whichever leg is derived second is guaranteed to respect both exposure caps,
so the leg that drives depends on the target ratio: above 1 the long leg is
bounded first and the short leg derived from it, otherwise the reverse.
"""

from decimal import Decimal

from arbsizer.exceptions import InsufficientSizeError, InvalidInputError
from arbsizer.volume import neutrality
from arbsizer.volume.decimal_policy import intermediate_scale
from arbsizer.volume.fees import FeeRate, fee_adjusted_for_buy, fee_adjusted_for_sell
from arbsizer.volume.observer import LoggingVolumeObserver, VolumeEvent, VolumeObserver
from arbsizer.volume.trade_volume import LegVolume, TradeVolume, TradeVolumeKind

_ZERO = Decimal("0")
_MINUS_ONE = Decimal("-1")


def _validate_inputs(
    long_max_exposure: Decimal,
    short_max_exposure: Decimal,
    long_price: Decimal,
    short_price: Decimal,
    exit_spread: Decimal,
    long_scale: int,
    short_scale: int,
) -> None:
    positives = {
        "long_max_exposure": long_max_exposure,
        "short_max_exposure": short_max_exposure,
        "long_price": long_price,
        "short_price": short_price,
    }
    for name, value in positives.items():
        if not value > _ZERO:
            raise InvalidInputError(f"{name} must be positive, got {value}")
    for name, scale in (("long_scale", long_scale), ("short_scale", short_scale)):
        if isinstance(scale, bool) or not isinstance(scale, int) or scale < 0:
            raise InvalidInputError(f"{name} must be a non-negative integer, got {scale!r}")
    if not exit_spread > _MINUS_ONE:
        raise InvalidInputError(f"exit_spread must be greater than -1, got {exit_spread}")


def compute_entry_volumes(
    long_fee: FeeRate,
    short_fee: FeeRate,
    long_max_exposure: Decimal,
    short_max_exposure: Decimal,
    long_price: Decimal,
    short_price: Decimal,
    exit_spread: Decimal,
    long_scale: int,
    short_scale: int,
    observer: VolumeObserver | None = None,
) -> TradeVolume:
    """Compute the initial market-neutral entry volumes.

    Order volumes start equal to the economic volumes; call
    TradeVolume.adjust_order_volume before placing orders.

    Args:
        long_fee: Fee model of the long (buy) venue.
        short_fee: Fee model of the short (sell) venue.
        long_max_exposure: Maximum quote amount to spend on the long venue.
        short_max_exposure: Maximum quote amount to commit on the short venue.
        long_price: Current long venue price.
        short_price: Current short venue price.
        exit_spread: Spread the position is expected to close at.
        long_scale: Fractional digits legal for long venue quantities.
        short_scale: Fractional digits legal for short venue quantities.
        observer: Receives structured records; defaults to structlog.

    Returns:
        A TradeVolume of kind ENTRY.

    Raises:
        InvalidInputError: If a price or exposure is not positive, a scale is
            negative, or exit_spread <= -1.
        InsufficientSizeError: If the exposures are too small to yield a
            positive volume at the intermediate scale.
    """
    _validate_inputs(
        long_max_exposure,
        short_max_exposure,
        long_price,
        short_price,
        exit_spread,
        long_scale,
        short_scale,
    )
    observer = observer or LoggingVolumeObserver()
    scale = intermediate_scale(max(long_scale, short_scale))

    long_uniform_fee = fee_adjusted_for_buy(long_fee, scale)
    short_uniform_fee = fee_adjusted_for_sell(short_fee, scale)
    fees = (long_uniform_fee, short_uniform_fee, exit_spread, scale)

    ratio = neutrality.target_ratio(*fees)
    if ratio > 1:
        long_volume = neutrality.long_volume_from_exposures(
            long_max_exposure, short_max_exposure, long_price, short_price, *fees
        )
        short_volume = neutrality.short_from_long(long_volume, *fees)
    else:
        short_volume = neutrality.short_volume_from_exposures(
            long_max_exposure, short_max_exposure, long_price, short_price, *fees
        )
        long_volume = neutrality.long_from_short(short_volume, *fees)

    if long_volume <= _ZERO or short_volume <= _ZERO:
        raise InsufficientSizeError(
            f"Exposure too small for a positive volume at scale {scale} "
            f"(long={long_volume}, short={short_volume})"
        )

    trade_volume = TradeVolume(
        kind=TradeVolumeKind.ENTRY,
        long=LegVolume(
            fee_computation=long_fee.computation,
            fee=long_uniform_fee,
            base_fee=long_fee.rate if long_fee.is_client_side else None,
            scale=long_scale,
            volume=long_volume,
            order_volume=long_volume,
        ),
        short=LegVolume(
            fee_computation=short_fee.computation,
            fee=short_uniform_fee,
            base_fee=short_fee.rate if short_fee.is_client_side else None,
            scale=short_scale,
            volume=short_volume,
            order_volume=short_volume,
        ),
        intermediate_scale=scale,
        exit_spread=exit_spread,
        observer=observer,
    )
    observer(
        VolumeEvent(
            name="entry_volume_computed",
            level="debug",
            values=dict(
                long_volume=long_volume,
                short_volume=short_volume,
                target_ratio=ratio,
                long_fee_computation=long_fee.computation.value,
                short_fee_computation=short_fee.computation.value,
                long_max_exposure=long_max_exposure,
                short_max_exposure=short_max_exposure,
                long_price=long_price,
                short_price=short_price,
                long_fee=long_fee.rate,
                short_fee=short_fee.rate,
                exit_spread=exit_spread,
                long_scale=long_scale,
                short_scale=short_scale,
            ),
        )
    )
    return trade_volume
