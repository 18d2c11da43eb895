"""Entry sizing for a two-venue arbitrage position.

All calculations use Decimal arithmetic exclusively -- no float conversions.

Sizing flow:
1. Determine each venue's max exposure from config and available balance
2. Compute market-neutral entry volumes (arbsizer.volume.entry)
3. Adjust order volumes to each venue's scale and step size
4. Return None if the result is not market neutral or not profitable enough
"""

from decimal import Decimal

from arbsizer.config import SizingSettings
from arbsizer.exceptions import PriceUnavailableError
from arbsizer.exchange.client import VenueMetadataSource
from arbsizer.exchange.types import VenueInfo
from arbsizer.logging import get_logger
from arbsizer.market_data.ticker_service import TickerService
from arbsizer.models import LegOrder, OrderSide, SizedEntry
from arbsizer.volume.decimal_policy import CURRENCY_SCALE, floor_to_scale
from arbsizer.volume.entry import compute_entry_volumes
from arbsizer.volume.observer import LoggingVolumeObserver, VolumeObserver

logger = get_logger(__name__)


class EntrySizer:
    """Sizes both legs of an entry from venue metadata, prices and balances.

    Args:
        settings: Sizing settings (exit spread, exposure limits, gates).
        observer: Receives the engine's volume events. Defaults to a
            structlog observer bound to the venue pair being sized.
    """

    def __init__(
        self,
        settings: SizingSettings | None = None,
        observer: VolumeObserver | None = None,
    ) -> None:
        self._settings = settings or SizingSettings()
        self._observer = observer

    def max_exposure(self, available_balance: Decimal) -> Decimal:
        """Maximum quote amount to commit on a venue.

        A configured fixed exposure wins when the balance covers it; otherwise
        the exposure is a fraction of the available balance.
        """
        fixed = self._settings.fixed_exposure
        if fixed is not None:
            if fixed <= available_balance:
                return fixed
            logger.warning(
                "fixed_exposure_exceeds_balance",
                fixed_exposure=str(fixed),
                available_balance=str(available_balance),
            )
        return floor_to_scale(
            available_balance * self._settings.exposure_fraction, CURRENCY_SCALE
        )

    def size(
        self,
        long_venue: VenueInfo,
        short_venue: VenueInfo,
        long_price: Decimal,
        short_price: Decimal,
        long_balance: Decimal,
        short_balance: Decimal,
    ) -> SizedEntry | None:
        """Compute venue-legal entry orders for both legs.

        Args:
            long_venue: Venue bought on.
            short_venue: Venue sold on.
            long_price: Current long venue price.
            short_price: Current short venue price.
            long_balance: Available quote balance on the long venue.
            short_balance: Available quote balance on the short venue.

        Returns:
            The sized entry, or None if it fails the neutrality or profit gate.

        Raises:
            InvalidInputError: If a price, exposure or fee is out of range.
            IncompatibleConfigurationError: If a venue combines client-side
                fees with a step size.
            InsufficientSizeError: If a leg rounds to zero.
        """
        observer = self._observer or LoggingVolumeObserver(
            logger.bind(long_venue=long_venue.name, short_venue=short_venue.name)
        )

        trade_volume = compute_entry_volumes(
            long_fee=long_venue.fee,
            short_fee=short_venue.fee,
            long_max_exposure=self.max_exposure(long_balance),
            short_max_exposure=self.max_exposure(short_balance),
            long_price=long_price,
            short_price=short_price,
            exit_spread=self._settings.exit_spread,
            long_scale=long_venue.scale.volume_scale,
            short_scale=short_venue.scale.volume_scale,
            observer=observer,
        )
        trade_volume.adjust_order_volume(long_venue.scale.step, short_venue.scale.step)

        rating = trade_volume.market_neutrality_rating()
        if self._settings.require_market_neutral and not trade_volume.is_market_neutral():
            logger.info(
                "entry_not_market_neutral",
                long_venue=long_venue.name,
                short_venue=short_venue.name,
                market_neutrality_rating=str(rating),
            )
            return None

        minimum_profit = trade_volume.minimum_profit(long_price, short_price)
        min_profit = self._settings.min_profit
        if min_profit is not None and minimum_profit < min_profit:
            logger.info(
                "entry_below_min_profit",
                long_venue=long_venue.name,
                short_venue=short_venue.name,
                minimum_profit=str(minimum_profit),
                min_profit=str(min_profit),
            )
            return None

        return SizedEntry(
            long_order=LegOrder(
                venue=long_venue.name,
                symbol=long_venue.symbol,
                side=OrderSide.BUY,
                quantity=trade_volume.long_order_volume,
                price=long_price,
            ),
            short_order=LegOrder(
                venue=short_venue.name,
                symbol=short_venue.symbol,
                side=OrderSide.SELL,
                quantity=trade_volume.short_order_volume,
                price=short_price,
            ),
            long_volume=trade_volume.long_volume,
            short_volume=trade_volume.short_volume,
            market_neutrality_rating=rating,
            minimum_profit=minimum_profit,
        )

    async def size_from_sources(
        self,
        long_venue: str,
        short_venue: str,
        symbol: str,
        metadata: VenueMetadataSource,
        tickers: TickerService,
    ) -> SizedEntry | None:
        """Look up metadata, balances and prices, then size the entry.

        Raises:
            PriceUnavailableError: If either venue has no cached price or its
                price is older than max_price_age.
        """
        long_info = await metadata.get_venue_info(long_venue, symbol)
        short_info = await metadata.get_venue_info(short_venue, symbol)

        long_price = await tickers.get_price(long_venue, symbol)
        short_price = await tickers.get_price(short_venue, symbol)
        if long_price is None or short_price is None:
            missing = long_venue if long_price is None else short_venue
            raise PriceUnavailableError(f"No price available for {symbol} on {missing}")
        max_age = self._settings.max_price_age
        for venue in (long_venue, short_venue):
            if await tickers.is_stale(venue, symbol, max_age_seconds=max_age):
                raise PriceUnavailableError(
                    f"Price for {symbol} on {venue} is older than {max_age}s"
                )

        long_balance = await metadata.fetch_available_balance(long_venue)
        short_balance = await metadata.fetch_available_balance(short_venue)

        return self.size(
            long_info,
            short_info,
            long_price,
            short_price,
            long_balance,
            short_balance,
        )
