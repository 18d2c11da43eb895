"""Market data layer -- shared price cache fed by the ticker collaborator."""

from arbsizer.market_data.ticker_service import TickerService

__all__ = ["TickerService"]
