"""Venue-specific type definitions.

All quantities use Decimal. Never use float for prices, quantities, or fees.
"""

from dataclasses import dataclass, field
from decimal import Decimal

from arbsizer.exceptions import InvalidInputError
from arbsizer.volume.fees import FeeRate

# Scale assumed when a venue declares neither a scale nor a step size.
DEFAULT_VOLUME_SCALE = 8


@dataclass(frozen=True)
class ScaleSpec:
    """Order quantity precision of a venue.

    A venue may declare a scale, a step size (lot increment), both, or
    neither. Without an explicit scale, the step's fractional digits are used.
    """

    scale: int | None = None
    step: Decimal | None = None

    def __post_init__(self) -> None:
        if self.scale is not None and self.scale < 0:
            raise InvalidInputError(f"Scale must be non-negative, got {self.scale}")
        if self.step is not None and self.step <= 0:
            raise InvalidInputError(f"Step size must be positive, got {self.step}")

    @property
    def volume_scale(self) -> int:
        if self.scale is not None:
            return self.scale
        if self.step is not None:
            return max(0, -self.step.normalize().as_tuple().exponent)
        return DEFAULT_VOLUME_SCALE


@dataclass(frozen=True)
class VenueInfo:
    """What the sizer needs to know about one venue and trading pair.

    Supplied by a VenueMetadataSource (fee cache and capability lookup).
    """

    name: str
    symbol: str
    fee: FeeRate
    scale: ScaleSpec = field(default_factory=ScaleSpec)
