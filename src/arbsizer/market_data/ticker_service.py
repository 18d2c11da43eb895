"""Shared in-memory price cache, keyed by venue and symbol.

The ticker polling collaborator writes prices here; the entry sizer reads
them. Access is serialized with an asyncio.Lock so concurrent opportunity
evaluations see consistent entries.
"""

import asyncio
import time
from decimal import Decimal

from arbsizer.logging import get_logger

logger = get_logger(__name__)


class TickerService:
    """Latest price and update time per (venue, symbol)."""

    def __init__(self) -> None:
        self._prices: dict[tuple[str, str], tuple[Decimal, float]] = {}
        self._lock = asyncio.Lock()

    async def update_price(
        self, venue: str, symbol: str, price: Decimal, timestamp: float | None = None
    ) -> None:
        """Store the latest price for a venue's symbol.

        Args:
            venue: Venue name (e.g., "kraken").
            symbol: Trading pair symbol (e.g., "BTC/USD").
            price: The latest price as Decimal.
            timestamp: Unix timestamp of the update; defaults to now.
        """
        async with self._lock:
            self._prices[(venue, symbol)] = (
                price,
                timestamp if timestamp is not None else time.time(),
            )

    async def get_price(self, venue: str, symbol: str) -> Decimal | None:
        """Return the latest cached price, or None if not cached."""
        async with self._lock:
            entry = self._prices.get((venue, symbol))
            return entry[0] if entry is not None else None

    async def get_price_age(self, venue: str, symbol: str) -> float | None:
        """Return seconds since the last update, or None if never updated."""
        async with self._lock:
            entry = self._prices.get((venue, symbol))
            if entry is None:
                return None
            return time.time() - entry[1]

    async def is_stale(
        self, venue: str, symbol: str, max_age_seconds: float = 60.0
    ) -> bool:
        """True if the price is missing or older than max_age_seconds."""
        age = await self.get_price_age(venue, symbol)
        if age is None:
            return True
        if age > max_age_seconds:
            logger.debug("price_stale", venue=venue, symbol=symbol, age=age)
            return True
        return False
