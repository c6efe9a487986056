"""
Models module for the cashcast package.

This module contains Pydantic models used throughout the package.
"""

from .enums import (
    Environment,
    ModelKind,
    ModelStatus,
    ModelType,
    ScenarioType,
    TrendDirection,
    VotingStrategy,
)
from .common import BaseModel, FrozenModel
from .series import TimeSeriesPoint, Transaction
from .economic import (
    EconomicIndicator,
    EconomicScenario,
    ForexRate,
    MarketData,
    ScenarioImpact,
)
from .forecasting import (
    BacktestResult,
    ConfidenceInterval,
    ForecastPoint,
    ForecastResult,
    ModelPerformance,
)
from .model_spec import (
    ArmaParams,
    EnsembleMember,
    EnsembleParams,
    ForecastModelSpec,
    ModelEvaluation,
    ModelParameters,
    TrendSeasonalParams,
)
from .forecast_config import ForecastConfig
from .runway import RunwayAnalysis
from .variance import MonthlyVariance, VarianceAnalysis

__all__ = [
    # Enums
    "Environment",
    "ModelKind",
    "ModelStatus",
    "ModelType",
    "ScenarioType",
    "TrendDirection",
    "VotingStrategy",
    # Common models
    "BaseModel",
    "FrozenModel",
    # Series models
    "TimeSeriesPoint",
    "Transaction",
    # Economic models
    "EconomicIndicator",
    "EconomicScenario",
    "ForexRate",
    "MarketData",
    "ScenarioImpact",
    # Forecasting models
    "BacktestResult",
    "ConfidenceInterval",
    "ForecastPoint",
    "ForecastResult",
    "ModelPerformance",
    # Model specs
    "ArmaParams",
    "EnsembleMember",
    "EnsembleParams",
    "ForecastModelSpec",
    "ModelEvaluation",
    "ModelParameters",
    "TrendSeasonalParams",
    # Request config
    "ForecastConfig",
    # Runway
    "RunwayAnalysis",
    # Variance
    "MonthlyVariance",
    "VarianceAnalysis",
]
