"""
Economic data sources and scenario construction.
"""

from .providers import EconomicDataProvider, StaticEconomicDataProvider
from .cache import CachedEconomicDataProvider
from .scenario import build_economic_scenario

__all__ = [
    "EconomicDataProvider",
    "StaticEconomicDataProvider",
    "CachedEconomicDataProvider",
    "build_economic_scenario",
]
