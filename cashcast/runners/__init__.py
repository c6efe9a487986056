"""
Forecasting runners.

Each runner turns a model spec and a daily net-flow series into forecast points.
"""

from .base import ModelRunner
from .arma import ArmaRunner
from .ensemble import EnsembleRunner
from .trend_seasonal import TrendSeasonalRunner

__all__ = ["ModelRunner", "ArmaRunner", "EnsembleRunner", "TrendSeasonalRunner"]
