import asyncio
import logging

import numpy as np

from cashcast.economic.providers import EconomicDataProvider
from cashcast.models import EconomicIndicator, EconomicScenario

logger = logging.getLogger(__name__)

GDP_INDICATORS = ("GDP Growth Rate",)
INFLATION_INDICATORS = ("Inflation Rate",)
INTEREST_INDICATORS = ("Federal Funds Rate", "Interest Rate", "Policy Rate")


def _indicator_value(indicators: list[EconomicIndicator], names: tuple[str, ...]) -> float | None:
    for indicator in indicators:
        if indicator.indicator in names:
            return indicator.value
    return None


async def build_economic_scenario(provider: EconomicDataProvider, country: str = "US") -> EconomicScenario:
    """
    Compose an EconomicScenario from a provider's current data.

    GDP growth, inflation and the policy rate come from the country's
    indicators (0 when a reading is missing). Market volatility is the mean
    absolute daily change, in percent, across all market quotes.
    """
    forex_rates, indicators, market_data = await asyncio.gather(
        provider.get_forex_rates(),
        provider.get_economic_indicators(country),
        provider.get_market_data(),
    )

    readings = {
        "gdp_growth": _indicator_value(indicators, GDP_INDICATORS),
        "inflation_rate": _indicator_value(indicators, INFLATION_INDICATORS),
        "interest_rate": _indicator_value(indicators, INTEREST_INDICATORS),
    }
    missing = [field for field, value in readings.items() if value is None]
    if missing:
        logger.warning("No %s readings for %s, using 0", ", ".join(missing), country)

    volatility = float(np.mean([abs(quote.change_percent) for quote in market_data])) if market_data else 0.0

    return EconomicScenario(
        **{field: value or 0.0 for field, value in readings.items()},
        market_volatility=volatility,
        forex_rates=forex_rates,
    )
