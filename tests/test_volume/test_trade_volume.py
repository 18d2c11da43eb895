"""Tests for TradeVolume.adjust_order_volume and the adjustment decision table.

Verifies:
- Branch selection for every step/scale combination
- Step-constrained order volumes are exact step multiples
- The follower leg is re-derived from the driver's rounded volume
- Client-side fees cannot be combined with a step size
- Per-leg before/after events compare each leg with its own before value
"""

from decimal import Decimal
from itertools import product

import pytest

from arbsizer.exceptions import (
    IncompatibleConfigurationError,
    InsufficientSizeError,
    InvalidInputError,
)
from arbsizer.models import Leg
from arbsizer.volume.decimal_policy import round_final
from arbsizer.volume.entry import compute_entry_volumes
from arbsizer.volume.fees import FeeComputation, FeeRate
from arbsizer.volume.neutrality import long_from_short, short_from_long
from arbsizer.volume.observer import RecordingVolumeObserver
from arbsizer.volume.trade_volume import (
    AdjustmentBranch,
    TradeVolume,
    select_adjustment_branch,
)

# 1234.5678 / 33.3 = 37.0741081... -- the long exposure cap binds.
ODD_LONG_VOLUME = Decimal("37.07410811")


def _reference(
    long_fee: FeeRate,
    short_fee: FeeRate,
    observer: RecordingVolumeObserver | None = None,
) -> TradeVolume:
    """10000 / 100 on both venues, scale 6 on both legs."""
    return compute_entry_volumes(
        long_fee=long_fee,
        short_fee=short_fee,
        long_max_exposure=Decimal("10000"),
        short_max_exposure=Decimal("10000"),
        long_price=Decimal("100"),
        short_price=Decimal("100"),
        exit_spread=Decimal("0.002"),
        long_scale=6,
        short_scale=6,
        observer=observer or RecordingVolumeObserver(),
    )


def _odd(
    long_fee: FeeRate,
    short_fee: FeeRate,
    long_scale: int,
    short_scale: int,
    observer: RecordingVolumeObserver | None = None,
) -> TradeVolume:
    """Volumes that are not round at any legal scale."""
    return compute_entry_volumes(
        long_fee=long_fee,
        short_fee=short_fee,
        long_max_exposure=Decimal("1234.5678"),
        short_max_exposure=Decimal("10000"),
        long_price=Decimal("33.3"),
        short_price=Decimal("33.35"),
        exit_spread=Decimal("0.002"),
        long_scale=long_scale,
        short_scale=short_scale,
        observer=observer or RecordingVolumeObserver(),
    )


def _short_for(trade_volume: TradeVolume, long_volume: Decimal) -> Decimal:
    return round_final(
        short_from_long(
            long_volume,
            trade_volume.long.fee,
            trade_volume.short.fee,
            trade_volume.exit_spread,
            trade_volume.intermediate_scale,
        ),
        trade_volume.short.scale,
    )


def _long_for(trade_volume: TradeVolume, short_volume: Decimal) -> Decimal:
    return round_final(
        long_from_short(
            short_volume,
            trade_volume.long.fee,
            trade_volume.short.fee,
            trade_volume.exit_spread,
            trade_volume.intermediate_scale,
        ),
        trade_volume.long.scale,
    )


class TestSelectAdjustmentBranch:
    @pytest.mark.parametrize(
        ("long_step", "short_step", "long_scale", "short_scale", "expected"),
        [
            (Decimal("0.01"), Decimal("0.1"), 2, 1, AdjustmentBranch.BOTH_STEPS),
            (Decimal("0.01"), None, 8, 2, AdjustmentBranch.LONG_STEP),
            (None, Decimal("0.1"), 2, 8, AdjustmentBranch.SHORT_STEP),
            (None, None, 3, 6, AdjustmentBranch.LONG_SCALE),
            (None, None, 6, 6, AdjustmentBranch.LONG_SCALE),
            (None, None, 8, 2, AdjustmentBranch.SHORT_SCALE),
        ],
    )
    def test_table(
        self,
        long_step: Decimal | None,
        short_step: Decimal | None,
        long_scale: int,
        short_scale: int,
        expected: AdjustmentBranch,
    ) -> None:
        assert select_adjustment_branch(long_step, short_step, long_scale, short_scale) is expected


class TestNoStepSizes:
    def test_reference_scenario(self, server_fee: FeeRate) -> None:
        trade_volume = _reference(server_fee, server_fee)
        trade_volume.adjust_order_volume()

        assert trade_volume.long_order_volume == Decimal("100")
        assert trade_volume.short_volume == Decimal("99.600997")
        assert trade_volume.short_order_volume == Decimal("99.600997")
        assert trade_volume.is_market_neutral()

    def test_server_side_order_volume_equals_volume(self, server_fee: FeeRate) -> None:
        trade_volume = _odd(server_fee, server_fee, 3, 6)
        trade_volume.adjust_order_volume()
        assert trade_volume.long_order_volume == trade_volume.long_volume
        assert trade_volume.short_order_volume == trade_volume.short_volume

    def test_coarser_long_scale_drives(self, server_fee: FeeRate) -> None:
        trade_volume = _odd(server_fee, server_fee, 3, 6)
        trade_volume.adjust_order_volume()

        assert trade_volume.long_volume == Decimal("37.074")
        assert trade_volume.short_volume == _short_for(trade_volume, Decimal("37.074"))

    def test_coarser_short_scale_drives(self, server_fee: FeeRate) -> None:
        trade_volume = _odd(server_fee, server_fee, 8, 2)
        trade_volume.adjust_order_volume()

        short_volume = trade_volume.short_volume
        assert short_volume == round_final(short_volume, 2)
        assert trade_volume.long_volume == _long_for(trade_volume, short_volume)
        assert trade_volume.long_order_volume == trade_volume.long_volume
        assert trade_volume.is_market_neutral()


class TestLongStepSize:
    def test_order_volume_is_step_multiple(self, server_fee: FeeRate) -> None:
        step = Decimal("0.001")
        trade_volume = _odd(server_fee, server_fee, 3, 6)
        trade_volume.adjust_order_volume(long_step=step)

        assert trade_volume.long_order_volume == Decimal("37.074")
        assert trade_volume.long_order_volume % step == 0

    def test_short_derived_from_rounded_long(self, server_fee: FeeRate) -> None:
        trade_volume = _odd(server_fee, server_fee, 3, 6)
        assert trade_volume.long_volume == ODD_LONG_VOLUME
        trade_volume.adjust_order_volume(long_step=Decimal("0.001"))

        assert trade_volume.short_volume == _short_for(trade_volume, Decimal("37.074"))
        assert trade_volume.short_volume != _short_for(trade_volume, ODD_LONG_VOLUME)
        assert trade_volume.short_order_volume == trade_volume.short_volume

    def test_coarse_step(self, server_fee: FeeRate) -> None:
        trade_volume = _odd(server_fee, server_fee, 3, 6)
        trade_volume.adjust_order_volume(long_step=Decimal("0.01"))

        assert trade_volume.long_order_volume == Decimal("37.07")
        assert trade_volume.short_volume == _short_for(trade_volume, Decimal("37.07"))
        assert trade_volume.is_market_neutral()

    def test_step_larger_than_volume(self, server_fee: FeeRate) -> None:
        trade_volume = _odd(server_fee, server_fee, 3, 6)
        with pytest.raises(InsufficientSizeError):
            trade_volume.adjust_order_volume(long_step=Decimal("100"))

        assert trade_volume.long_volume == ODD_LONG_VOLUME
        assert trade_volume.long_order_volume == ODD_LONG_VOLUME
        assert trade_volume.short_order_volume == trade_volume.short_volume


class TestShortStepSize:
    def test_long_derived_from_snapped_short(self, server_fee: FeeRate) -> None:
        step = Decimal("0.01")
        trade_volume = _odd(server_fee, server_fee, 6, 4)
        trade_volume.adjust_order_volume(short_step=step)

        assert trade_volume.short_order_volume % step == 0
        assert trade_volume.short_volume == trade_volume.short_order_volume
        assert trade_volume.long_volume == _long_for(trade_volume, trade_volume.short_volume)
        assert trade_volume.long_order_volume == trade_volume.long_volume
        assert trade_volume.is_market_neutral()

    def test_client_side_long_with_short_step(self) -> None:
        """Client-side fees on the venue without a step are fine."""
        long_fee = FeeRate(Decimal("0.001"), FeeComputation.CLIENT)
        short_fee = FeeRate(Decimal("0.001"))
        trade_volume = _odd(long_fee, short_fee, 6, 4)
        trade_volume.adjust_order_volume(short_step=Decimal("0.01"))

        assert trade_volume.short_order_volume % Decimal("0.01") == 0
        assert trade_volume.long_order_volume > trade_volume.long_volume


class TestBothStepSizes:
    @pytest.mark.parametrize(
        ("long_step", "short_step"),
        list(product(["0.001", "0.01", "0.05", "1"], ["0.002", "0.1", "0.25"])),
    )
    def test_both_legs_are_step_multiples(
        self, server_fee: FeeRate, long_step: str, short_step: str
    ) -> None:
        trade_volume = _odd(server_fee, server_fee, 3, 6)
        trade_volume.adjust_order_volume(Decimal(long_step), Decimal(short_step))

        assert trade_volume.long_order_volume % Decimal(long_step) == 0
        assert trade_volume.short_order_volume % Decimal(short_step) == 0
        assert trade_volume.long_volume > 0
        assert trade_volume.short_volume > 0

    def test_reports_resulting_rating(
        self, server_fee: FeeRate, recorder: RecordingVolumeObserver
    ) -> None:
        trade_volume = _odd(server_fee, server_fee, 3, 6, observer=recorder)
        trade_volume.adjust_order_volume(Decimal("0.1"), Decimal("0.1"))

        (event,) = recorder.named("step_sizes_on_both_venues")
        rating = event.values["market_neutrality_rating"]
        assert rating == round_final(trade_volume.market_neutrality_rating(), 3)

    def test_economic_volumes_follow_snapped_orders(self, server_fee: FeeRate) -> None:
        trade_volume = _odd(server_fee, server_fee, 3, 6)
        trade_volume.adjust_order_volume(Decimal("0.1"), Decimal("0.1"))

        assert trade_volume.long_volume == Decimal("37.1")
        assert trade_volume.short_volume == trade_volume.short_order_volume

    def test_unit_target_ratio_reports_unbounded_rating(
        self, recorder: RecordingVolumeObserver
    ) -> None:
        no_fee = FeeRate(Decimal("0"))
        trade_volume = compute_entry_volumes(
            long_fee=no_fee,
            short_fee=no_fee,
            long_max_exposure=Decimal("1000"),
            short_max_exposure=Decimal("1000"),
            long_price=Decimal("10"),
            short_price=Decimal("10"),
            exit_spread=Decimal("0"),
            long_scale=6,
            short_scale=6,
            observer=recorder,
        )
        trade_volume.adjust_order_volume(Decimal("0.3"), Decimal("0.7"))

        assert trade_volume.long_order_volume == Decimal("99.9")
        assert trade_volume.short_order_volume == Decimal("100.1")
        (event,) = recorder.named("step_sizes_on_both_venues")
        assert event.values["market_neutrality_rating"] == Decimal("-Infinity")
        assert not trade_volume.is_market_neutral()


class TestClientSideFees:
    def test_buy_order_is_widened(self) -> None:
        long_fee = FeeRate(Decimal("0.001"), FeeComputation.CLIENT)
        trade_volume = _reference(long_fee, FeeRate(Decimal("0.001")))
        trade_volume.adjust_order_volume()

        assert trade_volume.long_order_volume == Decimal("100.100100")
        assert trade_volume.long_volume == Decimal("100")
        delivered = trade_volume.long_order_volume * (1 - Decimal("0.001"))
        assert abs(delivered - trade_volume.long_volume) <= Decimal("0.000001")

    def test_sell_order_is_narrowed(self, server_fee: FeeRate, client_fee: FeeRate) -> None:
        trade_volume = _reference(server_fee, client_fee)
        trade_volume.adjust_order_volume()

        assert trade_volume.short_order_volume < trade_volume.short_volume
        sold = trade_volume.short_order_volume * (1 + Decimal("0.002"))
        assert abs(sold - trade_volume.short_volume) <= Decimal("0.000001")

    def test_reports_client_side_fees(
        self, server_fee: FeeRate, client_fee: FeeRate, recorder: RecordingVolumeObserver
    ) -> None:
        trade_volume = _reference(server_fee, client_fee, observer=recorder)
        trade_volume.adjust_order_volume()

        (event,) = recorder.named("client_side_fees_applied")
        assert event.leg is Leg.SHORT
        assert event.values["order_volume"] < event.values["volume"]

    def test_client_side_short_drives(self, server_fee: FeeRate, client_fee: FeeRate) -> None:
        trade_volume = _odd(server_fee, client_fee, 8, 4)
        trade_volume.adjust_order_volume()

        order_volume = trade_volume.short_order_volume
        assert order_volume == round_final(order_volume, 4)
        assert order_volume < trade_volume.short_volume
        assert trade_volume.short_volume == round_final(
            order_volume * (1 + client_fee.rate), 4
        )
        assert trade_volume.long_volume == _long_for(trade_volume, trade_volume.short_volume)
        assert trade_volume.is_market_neutral()


class TestIncompatibleConfiguration:
    def test_client_side_short_with_short_step(
        self, server_fee: FeeRate, client_fee: FeeRate
    ) -> None:
        trade_volume = _reference(server_fee, client_fee)
        with pytest.raises(IncompatibleConfigurationError):
            trade_volume.adjust_order_volume(short_step=Decimal("0.01"))

    def test_client_side_long_with_long_step(
        self, server_fee: FeeRate, client_fee: FeeRate
    ) -> None:
        trade_volume = _reference(client_fee, server_fee)
        with pytest.raises(IncompatibleConfigurationError):
            trade_volume.adjust_order_volume(Decimal("0.01"), Decimal("0.01"))

    def test_rejected_before_any_mutation(
        self, server_fee: FeeRate, client_fee: FeeRate
    ) -> None:
        trade_volume = _odd(server_fee, client_fee, 3, 6)
        long_before = trade_volume.long_volume
        short_before = trade_volume.short_volume

        with pytest.raises(IncompatibleConfigurationError):
            trade_volume.adjust_order_volume(short_step=Decimal("0.01"))

        assert trade_volume.long_volume == long_before
        assert trade_volume.short_volume == short_before

    @pytest.mark.parametrize("step", ["0", "-0.01"])
    def test_non_positive_step(self, server_fee: FeeRate, step: str) -> None:
        trade_volume = _reference(server_fee, server_fee)
        with pytest.raises(InvalidInputError):
            trade_volume.adjust_order_volume(long_step=Decimal(step))


class TestAdjustedEvents:
    """Each leg's event compares that leg's own before and after values.

    A short leg whose volume changed while the long leg stayed put must still
    be reported; the long leg's comparison must not gate the short report.
    """

    def test_only_changed_short_leg_is_reported(
        self, server_fee: FeeRate, recorder: RecordingVolumeObserver
    ) -> None:
        trade_volume = _reference(server_fee, server_fee, observer=recorder)
        trade_volume.adjust_order_volume()

        events = recorder.named("entry_volume_adjusted")
        assert [event.leg for event in events] == [Leg.SHORT]
        assert events[0].values["before"] == Decimal("99.60099741")
        assert events[0].values["order_volume"] == Decimal("99.600997")

    def test_both_changed_legs_are_reported(
        self, server_fee: FeeRate, recorder: RecordingVolumeObserver
    ) -> None:
        trade_volume = _odd(server_fee, server_fee, 3, 6, observer=recorder)
        short_before = trade_volume.short_volume
        trade_volume.adjust_order_volume(long_step=Decimal("0.01"))

        events = {event.leg: event for event in recorder.named("entry_volume_adjusted")}
        assert set(events) == {Leg.LONG, Leg.SHORT}
        assert events[Leg.LONG].values["before"] == ODD_LONG_VOLUME
        assert events[Leg.LONG].values["order_volume"] == Decimal("37.07")
        assert events[Leg.SHORT].values["before"] == short_before
        assert events[Leg.SHORT].values["volume"] == trade_volume.short_volume

    def test_branch_is_reported(
        self, server_fee: FeeRate, recorder: RecordingVolumeObserver
    ) -> None:
        trade_volume = _reference(server_fee, server_fee, observer=recorder)
        trade_volume.adjust_order_volume()

        (event,) = recorder.named("order_volume_branch_selected")
        assert event.values["branch"] == AdjustmentBranch.LONG_SCALE.value
