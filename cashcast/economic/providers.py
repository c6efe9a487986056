"""
Economic data providers.

A provider exposes three async fetches: forex quotes, macroeconomic
indicators and market (index and commodity) quotes. The static provider
serves baseline values with a small random drift so that the engine can run
without any external data source.
"""

import logging
import threading
from datetime import datetime
from typing import Protocol

import numpy as np

from cashcast.models import EconomicIndicator, ForexRate, MarketData

logger = logging.getLogger(__name__)

# Currency pair -> baseline rate
BASE_FOREX_RATES = {
    "USD/EUR": 0.85,
    "GBP/USD": 1.27,
    "USD/JPY": 149.5,
    "AUD/USD": 0.66,
    "USD/CAD": 1.35,
    "USD/CHF": 0.88,
}

# (country, indicator, value, period)
BASE_INDICATORS = [
    ("US", "GDP Growth Rate", 2.4, "2024-Q1"),
    ("US", "Unemployment Rate", 3.7, "2024-02"),
    ("US", "Inflation Rate", 3.2, "2024-02"),
    ("US", "Federal Funds Rate", 5.25, "2024-02"),
    ("EU", "GDP Growth Rate", 0.8, "2024-Q1"),
    ("EU", "Inflation Rate", 2.6, "2024-02"),
]

# (symbol, name, baseline value)
BASE_INDICES = [
    ("^GSPC", "S&P 500", 4800.0),
    ("^IXIC", "NASDAQ", 15000.0),
    ("^DJI", "Dow Jones", 38000.0),
    ("^FTSE", "FTSE 100", 7600.0),
]
BASE_COMMODITIES = [
    ("GC=F", "Gold", 2050.0),
    ("CL=F", "Crude Oil", 78.0),
    ("SI=F", "Silver", 24.5),
    ("NG=F", "Natural Gas", 2.8),
]

FOREX_VOLATILITY = 0.02
INDEX_POINT_SWING = 200.0
COMMODITY_VOLATILITY = 0.02


class EconomicDataProvider(Protocol):
    """Source of economic data used to build scenarios."""

    async def get_forex_rates(self) -> list[ForexRate]: ...

    async def get_economic_indicators(self, country: str | None = None) -> list[EconomicIndicator]: ...

    async def get_market_data(self) -> list[MarketData]: ...


class StaticEconomicDataProvider:
    """
    Baseline economic data with seedable random drift.

    Each fetch moves every quote by a uniform draw around its baseline
    (forex and commodities by up to 1% either way, indices by up to 100
    points). Indicators are returned as is.
    """

    def __init__(self, seed: int | None = None) -> None:
        self._rng = np.random.default_rng(seed)
        self._lock = threading.Lock()

    def _jitter(self) -> float:
        """Uniform draw in [-0.5, 0.5)."""
        with self._lock:
            return float(self._rng.random() - 0.5)

    async def get_forex_rates(self) -> list[ForexRate]:
        now = datetime.now()
        rates = []
        for symbol, base_rate in BASE_FOREX_RATES.items():
            change = self._jitter() * FOREX_VOLATILITY * base_rate
            rates.append(
                ForexRate(
                    symbol=symbol,
                    rate=round(base_rate + change, 5),
                    timestamp=now,
                    change=round(change, 5),
                    change_percent=round(change / base_rate * 100, 3),
                )
            )
        return rates

    async def get_economic_indicators(self, country: str | None = None) -> list[EconomicIndicator]:
        now = datetime.now()
        return [
            EconomicIndicator(country=code, indicator=name, value=value, period=period, timestamp=now, unit="%")
            for code, name, value, period in BASE_INDICATORS
            if country is None or code == country
        ]

    async def get_market_data(self) -> list[MarketData]:
        now = datetime.now()
        quotes = []
        for symbol, name, base in BASE_INDICES:
            change = self._jitter() * INDEX_POINT_SWING
            quotes.append(self._quote(symbol, name, base, change, now))
        for symbol, name, base in BASE_COMMODITIES:
            change = self._jitter() * COMMODITY_VOLATILITY * base
            quotes.append(self._quote(symbol, name, base, change, now))
        return quotes

    @staticmethod
    def _quote(symbol: str, name: str, base: float, change: float, timestamp: datetime) -> MarketData:
        return MarketData(
            symbol=symbol,
            name=name,
            value=round(base + change, 2),
            change=round(change, 2),
            change_percent=round(change / base * 100, 3),
            timestamp=timestamp,
            market="US",
        )
