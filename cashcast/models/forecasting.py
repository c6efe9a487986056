"""
Forecasting Models

Pydantic models for forecast points, backtests, model performance and the
final forecast result.
"""

from datetime import date, datetime

from pydantic import Field, model_validator

from cashcast.models.common import FrozenModel
from cashcast.models.economic import ScenarioImpact
from cashcast.models.enums import ModelKind, ScenarioType, TrendDirection

# Relative tolerance for float noise when checking band ordering
BOUND_TOLERANCE = 1e-9


class ForecastPoint(FrozenModel):
    """Model for a single forecast day."""

    # The date of the forecast
    date: date
    # The forecasted net flow
    predicted_value: float
    # Model confidence for this step
    confidence: float = Field(ge=0, le=1)
    # Lower bound of the confidence band
    lower_bound: float
    # Upper bound of the confidence band
    upper_bound: float
    # Direction relative to the previous value
    trend: TrendDirection = TrendDirection.STABLE
    # Formula components behind the prediction, for diagnostics
    factors: dict[str, float] | None = None

    @model_validator(mode="after")
    def check_bounds(self) -> "ForecastPoint":
        tolerance = BOUND_TOLERANCE * max(1.0, abs(self.predicted_value))
        if self.lower_bound > self.predicted_value + tolerance or self.predicted_value > self.upper_bound + tolerance:
            raise ValueError(
                f"bounds must satisfy lower_bound <= predicted_value <= upper_bound, got "
                f"{self.lower_bound} / {self.predicted_value} / {self.upper_bound}"
            )
        return self


class BacktestResult(FrozenModel):
    """One held-out period of a backtest."""

    period_label: str
    predicted: float
    actual: float
    # predicted - actual
    error: float
    # error / actual * 100, 0 when actual is 0
    error_percentage: float


class ModelPerformance(FrozenModel):
    """Accuracy metrics derived from a backtest."""

    mae: float
    rmse: float
    mape: float
    variance: float
    accuracy: float = Field(ge=0, le=1)
    confidence_score: float
    # 1-based rank within a selection run, 1 = best
    ranking: int | None = Field(default=None, ge=1)
    backtest_results: list[BacktestResult] = []


class ConfidenceInterval(FrozenModel):
    """Parallel lower/upper arrays of the forecast band."""

    lower: list[float] = []
    upper: list[float] = []


class ForecastResult(FrozenModel):
    """Output of a forecast request."""

    model_id: str
    model_kind: ModelKind
    org_id: str
    forecast: list[ForecastPoint]
    confidence_interval: ConfidenceInterval
    accuracy_metrics: ModelPerformance
    scenario_impact: ScenarioImpact | None = None
    generated_at: datetime = Field(default_factory=datetime.now)
    horizon_days: int = Field(ge=1)
    scenario: ScenarioType = ScenarioType.MODERATE
    confidence_level: float = 0.95
