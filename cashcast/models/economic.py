"""
Economic data models.

Inputs from the economic-data provider and the scenario derived from them.
"""

from datetime import datetime

from pydantic import Field

from cashcast.models.common import FrozenModel


class ForexRate(FrozenModel):
    """Model for a currency pair quote."""

    # Pair symbol, e.g. "USD/EUR"
    symbol: str
    rate: float
    timestamp: datetime = Field(default_factory=datetime.now)
    change: float = 0.0
    change_percent: float = 0.0


class EconomicIndicator(FrozenModel):
    """Model for a macroeconomic indicator reading."""

    country: str
    # Indicator name, e.g. "GDP Growth Rate"
    indicator: str
    value: float
    # Reporting period, e.g. "2024-Q1"
    period: str = "Current"
    timestamp: datetime = Field(default_factory=datetime.now)
    unit: str = ""


class MarketData(FrozenModel):
    """Model for a market index or commodity quote."""

    symbol: str
    name: str
    value: float
    change: float = 0.0
    change_percent: float = 0.0
    timestamp: datetime = Field(default_factory=datetime.now)
    market: str = "US"


class EconomicScenario(FrozenModel):
    """Macroeconomic conditions applied to a base forecast."""

    # Annual GDP growth in percent
    gdp_growth: float = 0.0
    # Annual inflation in percent
    inflation_rate: float = 0.0
    # Policy interest rate in percent
    interest_rate: float = 0.0
    # Market volatility index
    market_volatility: float = 0.0
    forex_rates: list[ForexRate] = []


class ScenarioImpact(FrozenModel):
    """Multipliers derived from an EconomicScenario."""

    revenue_multiplier: float
    expense_multiplier: float
    cash_flow_adjustment: float
    confidence_adjustment: float
