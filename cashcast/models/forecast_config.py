from pydantic import Field, field_validator

from cashcast.models.common import BaseModel
from cashcast.models.economic import EconomicScenario
from cashcast.models.enums import ModelType, ScenarioType

MIN_HORIZON_DAYS = 1
MAX_HORIZON_DAYS = 365
MAX_ROLLING_WINDOW_DAYS = 365


def clamp_days(value: int, upper: int) -> int:
    """Clamp a day count into [1, upper]."""
    return max(1, min(int(value), upper))


class ForecastConfig(BaseModel):
    """Forecast request parameters."""

    org_id: str
    # Out-of-range horizons are clamped rather than rejected
    horizon_days: int = 30
    confidence_level: float = Field(default=0.95, ge=0.1, le=0.99)
    scenario: ScenarioType = ScenarioType.MODERATE
    economic_factors: EconomicScenario | None = None
    model_type: ModelType = ModelType.AUTO
    rolling_window_days: int = MAX_ROLLING_WINDOW_DAYS

    @field_validator("horizon_days")
    @classmethod
    def clamp_horizon(cls, value: int) -> int:
        return clamp_days(value, MAX_HORIZON_DAYS)

    @field_validator("rolling_window_days")
    @classmethod
    def clamp_rolling_window(cls, value: int) -> int:
        return clamp_days(value, MAX_ROLLING_WINDOW_DAYS)
