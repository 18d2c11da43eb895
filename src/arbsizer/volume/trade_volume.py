"""Trade volume representation shared by every volume kind.

A TradeVolume holds, for the long and the short leg, the economic volume used
by the market-neutrality math and the order volume actually submitted to the
venue. Kinds differ only in how they are constructed (see
arbsizer.volume.entry) and in which side each leg trades; the order-volume
adjustment below works for any kind.

Adjustment flow (adjust_order_volume):
1. Reject client-side fee computation combined with a step size
2. Derive a market-neutral base at each leg's native scale
3. Select one branch of the flat adjustment table
4. Fix the driving leg's order volume, re-derive the other leg from it
5. Report per-leg before/after values to the observer
"""

from dataclasses import dataclass, field, replace
from decimal import Decimal
from enum import Enum

from arbsizer.exceptions import (
    IncompatibleConfigurationError,
    InsufficientSizeError,
    InvalidInputError,
)
from arbsizer.models import Leg, OrderSide
from arbsizer.volume import neutrality
from arbsizer.volume.decimal_policy import round_by_step, round_final
from arbsizer.volume.fees import FeeComputation, buy_base_fee, sell_base_fee
from arbsizer.volume.observer import LoggingVolumeObserver, VolumeEvent, VolumeObserver

_ZERO = Decimal("0")


class TradeVolumeKind(str, Enum):
    """Which trade a volume pair belongs to."""

    ENTRY = "entry"

    def side_of(self, leg: Leg) -> OrderSide:
        """Order side traded on a leg's venue."""
        # Entering buys on the long venue and sells on the short venue.
        return OrderSide.BUY if leg is Leg.LONG else OrderSide.SELL


class AdjustmentBranch(str, Enum):
    """Rows of the order-volume adjustment table, in priority order."""

    BOTH_STEPS = "both_steps"  # snap both legs independently
    LONG_STEP = "long_step"  # long snaps and drives
    SHORT_STEP = "short_step"  # short snaps and drives
    LONG_SCALE = "long_scale"  # no steps, long has the coarser or equal scale
    SHORT_SCALE = "short_scale"  # no steps, short has the coarser scale


def select_adjustment_branch(
    long_step: Decimal | None,
    short_step: Decimal | None,
    long_scale: int,
    short_scale: int,
) -> AdjustmentBranch:
    """Pick the single adjustment branch for a step/scale combination."""
    if long_step is not None and short_step is not None:
        return AdjustmentBranch.BOTH_STEPS
    if long_step is not None:
        return AdjustmentBranch.LONG_STEP
    if short_step is not None:
        return AdjustmentBranch.SHORT_STEP
    if long_scale <= short_scale:
        return AdjustmentBranch.LONG_SCALE
    return AdjustmentBranch.SHORT_SCALE


# Driving leg per branch; BOTH_STEPS has none.
_DRIVERS: dict[AdjustmentBranch, Leg] = {
    AdjustmentBranch.LONG_STEP: Leg.LONG,
    AdjustmentBranch.SHORT_STEP: Leg.SHORT,
    AdjustmentBranch.LONG_SCALE: Leg.LONG,
    AdjustmentBranch.SHORT_SCALE: Leg.SHORT,
}


@dataclass
class LegVolume:
    """Volume state of a single leg.

    fee is the uniform-basis fraction used by the neutrality math; base_fee is
    the venue's raw rate and is only kept for client-side computation.
    """

    fee_computation: FeeComputation
    fee: Decimal
    base_fee: Decimal | None
    scale: int
    volume: Decimal
    order_volume: Decimal


@dataclass
class TradeVolume:
    """Long/short volume pair for one candidate trade.

    Constructed once per opportunity, adjusted at most once with
    adjust_order_volume, then read by the order-placement caller. Instances
    are not shared between computations.
    """

    kind: TradeVolumeKind
    long: LegVolume
    short: LegVolume
    intermediate_scale: int
    exit_spread: Decimal
    observer: VolumeObserver = field(
        default_factory=LoggingVolumeObserver, repr=False, compare=False
    )

    # ------------------------------------------------------------------
    # Accessors
    # ------------------------------------------------------------------

    def leg(self, leg: Leg) -> LegVolume:
        return self.long if leg is Leg.LONG else self.short

    @property
    def long_volume(self) -> Decimal:
        return self.long.volume

    @property
    def short_volume(self) -> Decimal:
        return self.short.volume

    @property
    def long_order_volume(self) -> Decimal:
        return self.long.order_volume

    @property
    def short_order_volume(self) -> Decimal:
        return self.short.order_volume

    def target_ratio(self) -> Decimal:
        """Long/short volume ratio this pair aims for."""
        return neutrality.target_ratio(
            self.long.fee, self.short.fee, self.exit_spread, self.intermediate_scale
        )

    def market_neutrality_rating(self) -> Decimal:
        """1 is perfectly neutral, 0 leaves fees uncompensated, 2 doubles them."""
        return neutrality.market_neutrality_rating(
            self.long.volume,
            self.short.volume,
            self.long.fee,
            self.short.fee,
            self.exit_spread,
            self.intermediate_scale,
        )

    def is_market_neutral(self) -> bool:
        return neutrality.is_market_neutral(self.market_neutrality_rating())

    def minimum_profit(self, long_price: Decimal, short_price: Decimal) -> Decimal:
        """Estimated minimum profit in quote currency for the given entry prices."""
        return neutrality.minimum_profit(
            self.long.volume,
            self.short.volume,
            long_price,
            short_price,
            self.long.fee,
            self.short.fee,
        )

    # ------------------------------------------------------------------
    # Order-volume adjustment
    # ------------------------------------------------------------------

    def adjust_order_volume(
        self,
        long_step: Decimal | None = None,
        short_step: Decimal | None = None,
    ) -> None:
        """Turn economic volumes into venue-legal order volumes, in place.

        Whichever leg's order volume is fixed first drives: the other leg is
        re-derived from its rounded volume so the pair stays market neutral.
        When both venues declare a step size both legs are snapped
        independently and the resulting neutrality drift is reported.

        Args:
            long_step: Long venue's lot increment, or None.
            short_step: Short venue's lot increment, or None.

        Raises:
            IncompatibleConfigurationError: If a client-side fee venue
                declares a step size.
            InvalidInputError: If a step size is not positive.
            InsufficientSizeError: If rounding collapses a leg to zero.

        Volumes are left as they were when any of these is raised.
        """
        steps = {Leg.LONG: long_step, Leg.SHORT: short_step}
        self._check_steps(steps)

        before = {leg: self.leg(leg).volume for leg in Leg}
        snapshot = (replace(self.long), replace(self.short))

        branch = select_adjustment_branch(
            long_step, short_step, self.long.scale, self.short.scale
        )
        try:
            self._derive_neutral_base()
            self._emit("order_volume_branch_selected", level="debug", branch=branch.value)

            if branch is AdjustmentBranch.BOTH_STEPS:
                for leg in Leg:
                    self._snap_independently(leg, steps[leg])
            else:
                driver = _DRIVERS[branch]
                self._drive_from(driver, steps[driver])

            self._require_positive_volumes()
        except Exception:
            self.long, self.short = snapshot
            raise

        if branch is AdjustmentBranch.BOTH_STEPS:
            rating = self.market_neutrality_rating()
            # Unequal legs at a unit target ratio rate as +/-Infinity.
            if rating.is_finite():
                rating = round_final(rating, 3)
            self._emit("step_sizes_on_both_venues", market_neutrality_rating=rating)

        for leg in Leg:
            state = self.leg(leg)
            if before[leg] != state.order_volume:
                self._emit(
                    f"{self.kind.value}_volume_adjusted",
                    leg=leg,
                    before=before[leg],
                    volume=state.volume,
                    order_volume=state.order_volume,
                )

    def _check_steps(self, steps: dict[Leg, Decimal | None]) -> None:
        for leg, step in steps.items():
            if step is None:
                continue
            if step <= _ZERO:
                raise InvalidInputError(f"{leg.value} step size must be positive, got {step}")
            if self.leg(leg).fee_computation is FeeComputation.CLIENT:
                raise IncompatibleConfigurationError(
                    f"{leg.value} venue computes fees client-side and declares "
                    f"step size {step}; the two cannot be combined"
                )

    def _derive_neutral_base(self) -> None:
        """Round long to its scale, re-derive short, apply client-side fees."""
        self.long.volume = round_final(self.long.volume, self.long.scale)
        self.short.volume = round_final(
            self._derive(Leg.SHORT, self.long.volume), self.short.scale
        )
        for leg in Leg:
            state = self.leg(leg)
            state.order_volume = round_final(
                self._order_from_volume(leg, state.volume), state.scale
            )
            if state.fee_computation is FeeComputation.CLIENT:
                self._emit(
                    "client_side_fees_applied",
                    leg=leg,
                    volume=state.volume,
                    base_fees=abs(state.order_volume - state.volume),
                    order_volume=state.order_volume,
                )

    def _snap_independently(self, leg: Leg, step: Decimal) -> None:
        state = self.leg(leg)
        state.order_volume = round_final(round_by_step(state.order_volume, step), state.scale)
        state.volume = round_final(self._volume_from_order(leg, state.order_volume), state.scale)

    def _drive_from(self, driver: Leg, step: Decimal | None) -> None:
        """Fix the driver's order volume, then re-derive the follower from it."""
        lead = self.leg(driver)
        follower = driver.other
        follow = self.leg(follower)

        order_volume = lead.order_volume
        if step is not None:
            snapped = round_by_step(order_volume, step)
            self._emit(
                "order_volume_snapped",
                leg=driver,
                level="debug",
                order_volume=order_volume,
                step=step,
                snapped=snapped,
            )
            order_volume = snapped

        lead.order_volume = round_final(order_volume, lead.scale)
        lead.volume = round_final(self._volume_from_order(driver, lead.order_volume), lead.scale)

        follow.volume = round_final(self._derive(follower, lead.volume), follow.scale)
        follow.order_volume = round_final(
            self._order_from_volume(follower, follow.volume), follow.scale
        )
        self._emit(
            "follower_volume_derived",
            leg=follower,
            level="debug",
            driver_volume=lead.volume,
            volume=follow.volume,
            order_volume=follow.order_volume,
        )

    def _derive(self, leg: Leg, source_volume: Decimal) -> Decimal:
        """Market-neutral volume for `leg` from the other leg's volume."""
        derive = neutrality.short_from_long if leg is Leg.SHORT else neutrality.long_from_short
        return derive(
            source_volume,
            self.long.fee,
            self.short.fee,
            self.exit_spread,
            self.intermediate_scale,
        )

    def _order_from_volume(self, leg: Leg, volume: Decimal) -> Decimal:
        state = self.leg(leg)
        if self.kind.side_of(leg) is OrderSide.BUY:
            return volume + buy_base_fee(
                state.fee_computation, volume, state.base_fee, False, self.intermediate_scale
            )
        return volume - sell_base_fee(
            state.fee_computation, volume, state.base_fee, False, self.intermediate_scale
        )

    def _volume_from_order(self, leg: Leg, order_volume: Decimal) -> Decimal:
        state = self.leg(leg)
        if self.kind.side_of(leg) is OrderSide.BUY:
            return order_volume - buy_base_fee(
                state.fee_computation, order_volume, state.base_fee, True, self.intermediate_scale
            )
        return order_volume + sell_base_fee(
            state.fee_computation, order_volume, state.base_fee, True, self.intermediate_scale
        )

    def _require_positive_volumes(self) -> None:
        for leg in Leg:
            state = self.leg(leg)
            if state.volume <= _ZERO or state.order_volume <= _ZERO:
                raise InsufficientSizeError(
                    f"{leg.value} volume rounds to zero "
                    f"(volume={state.volume}, order_volume={state.order_volume})"
                )

    def _emit(self, name: str, leg: Leg | None = None, level: str = "info", **values: object) -> None:
        self.observer(VolumeEvent(name=name, leg=leg, level=level, values=values))
