from functools import lru_cache

from pydantic_settings import BaseSettings, SettingsConfigDict

from cashcast.models.enums import Environment


class EngineSettings(BaseSettings):
    ENV: Environment = Environment.DEV
    LOGGING_LEVEL: str = "INFO"

    DEFAULT_ORG_ID: str = "org-1"

    # Request bounds
    MAX_HORIZON_DAYS: int = 365
    MAX_ROLLING_WINDOW_DAYS: int = 365

    # Backtesting
    BACKTEST_MAX_PERIODS: int = 30
    BACKTEST_FRACTION: float = 0.2
    MAPE_TIE_TOLERANCE: float = 0.01

    # Trend-seasonal innovation term; uniform in [-amplitude/2, amplitude/2]
    NOISE_AMPLITUDE: float = 0.1
    RANDOM_SEED: int | None = None

    # Ensemble execution
    ENSEMBLE_PARALLEL: bool = False
    ENSEMBLE_MAX_WORKERS: int = 4

    FORECAST_TIMEOUT_SECONDS: float | None = None

    # Economic data cache lifetimes
    FOREX_CACHE_TTL_SECONDS: int = 60 * 60
    INDICATOR_CACHE_TTL_SECONDS: int = 24 * 60 * 60
    MARKET_CACHE_TTL_SECONDS: int = 15 * 60

    # pydantic settings config
    model_config = SettingsConfigDict(env_file=".env", extra="ignore", env_prefix="CASHCAST_", use_enum_values=True)


@lru_cache
def get_settings() -> EngineSettings:
    """Get engine settings instance."""
    return EngineSettings()
