"""Abstract venue metadata interface.

Defines what the sizer consumes from venue collaborators. Connectivity,
fee caching and capability lookup live in concrete implementations outside
this package.
"""

from abc import ABC, abstractmethod
from decimal import Decimal

from arbsizer.exchange.types import VenueInfo


class VenueMetadataSource(ABC):
    """Abstract base class for venue fee, precision and balance lookups."""

    @abstractmethod
    async def get_venue_info(self, venue: str, symbol: str) -> VenueInfo:
        """Return fee model and quantity precision for a venue's trading pair."""
        ...

    @abstractmethod
    async def fetch_available_balance(self, venue: str) -> Decimal:
        """Return the quote currency balance available for a new position."""
        ...
