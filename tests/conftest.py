"""Shared test fixtures for the arbitrage volume sizer."""

from decimal import Decimal

import pytest

from arbsizer.config import SizingSettings
from arbsizer.volume.fees import FeeComputation, FeeRate
from arbsizer.volume.observer import RecordingVolumeObserver


@pytest.fixture
def server_fee() -> FeeRate:
    """0.1% fee netted by the venue itself."""
    return FeeRate(Decimal("0.001"))


@pytest.fixture
def client_fee() -> FeeRate:
    """0.2% fee the caller must pre-compensate."""
    return FeeRate(Decimal("0.002"), FeeComputation.CLIENT)


@pytest.fixture
def recorder() -> RecordingVolumeObserver:
    return RecordingVolumeObserver()


@pytest.fixture
def sizing_settings() -> SizingSettings:
    """Sizing settings with a fixed 1000 exposure per leg."""
    return SizingSettings(
        exit_spread=Decimal("0.002"),
        fixed_exposure=Decimal("1000"),
    )
