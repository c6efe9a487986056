from pydantic import Field

from cashcast.models.common import FrozenModel


class MonthlyVariance(FrozenModel):
    """Projected against actual net flow for one held-out calendar month."""

    # Calendar month as YYYY-MM
    month: str
    actual: float
    forecast: float
    # forecast - actual
    variance: float
    # variance relative to |actual|, in percent; 0 when actual is 0
    variance_percentage: float
    mape: float = Field(ge=0)


class VarianceAnalysis(FrozenModel):
    """Monthly backtest of a trend projection over the latest transactions."""

    monthly_accuracy: list[MonthlyVariance]
    overall_mape: float = Field(ge=0)
    test_period: str
    accuracy_percentage: float = Field(ge=0, le=100)
    rmse: float = Field(ge=0)
    mae: float = Field(ge=0)
    training_transactions: int = Field(ge=0)
    test_transactions: int = Field(ge=0)
