"""Application wiring for the entry sizer.

Component wiring order (in build_sizer):
1. AppSettings (configuration, .env and environment)
2. Logging setup
3. EntrySizer (sizing settings, structlog volume observer)
"""

from arbsizer.config import AppSettings
from arbsizer.logging import get_logger, setup_logging
from arbsizer.position.sizing import EntrySizer


def build_sizer(settings: AppSettings | None = None) -> EntrySizer:
    """Load settings, configure logging and return a ready EntrySizer.

    Args:
        settings: Application settings; loaded from the environment if None.

    Returns:
        An EntrySizer using settings.sizing.
    """
    settings = settings or AppSettings()
    setup_logging(settings.log_level)

    logger = get_logger("arbsizer.main")
    sizing = settings.sizing
    logger.info(
        "entry_sizer_configured",
        exit_spread=str(sizing.exit_spread),
        exposure_fraction=str(sizing.exposure_fraction),
        fixed_exposure=str(sizing.fixed_exposure) if sizing.fixed_exposure is not None else None,
        require_market_neutral=sizing.require_market_neutral,
        max_price_age=sizing.max_price_age,
    )
    return EntrySizer(sizing)
