"""Configuration system using pydantic-settings with environment variable loading."""

from decimal import Decimal

from pydantic_settings import BaseSettings, SettingsConfigDict


class SizingSettings(BaseSettings):
    """Entry sizing parameters.

    exit_spread is the spread the position is expected to be closed at; it
    feeds the market-neutral volume ratio. Exposure is either a fixed amount
    of quote currency or a fraction of the venue's available balance.
    """

    model_config = SettingsConfigDict(env_prefix="SIZING_")

    exit_spread: Decimal = Decimal("0.002")  # 0.2%
    exposure_fraction: Decimal = Decimal("0.9")  # of available balance
    fixed_exposure: Decimal | None = None  # quote currency per leg
    require_market_neutral: bool = True
    min_profit: Decimal | None = None  # skip entries estimated below this
    max_price_age: float = 60.0  # seconds before a cached price is stale


class AppSettings(BaseSettings):
    """Root application settings, composing all sub-settings."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        env_nested_delimiter="__",
    )

    log_level: str = "INFO"
    sizing: SizingSettings = SizingSettings()
