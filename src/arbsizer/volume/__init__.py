"""Trade volume engine -- market-neutral leg sizing under fee, scale and step constraints."""

from arbsizer.volume.entry import compute_entry_volumes
from arbsizer.volume.fees import FeeComputation, FeeRate
from arbsizer.volume.observer import (
    LoggingVolumeObserver,
    RecordingVolumeObserver,
    VolumeEvent,
    VolumeObserver,
)
from arbsizer.volume.trade_volume import (
    AdjustmentBranch,
    LegVolume,
    TradeVolume,
    TradeVolumeKind,
    select_adjustment_branch,
)

__all__ = [
    "AdjustmentBranch",
    "FeeComputation",
    "FeeRate",
    "LegVolume",
    "LoggingVolumeObserver",
    "RecordingVolumeObserver",
    "TradeVolume",
    "TradeVolumeKind",
    "VolumeEvent",
    "VolumeObserver",
    "compute_entry_volumes",
    "select_adjustment_branch",
]
