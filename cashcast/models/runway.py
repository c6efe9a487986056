from pydantic import Field

from cashcast.models.common import FrozenModel


class RunwayAnalysis(FrozenModel):
    """Cash runway derived from recent net flows."""

    # Months until the balance is exhausted; 999 when not burning cash
    runway_months: float = Field(ge=0)
    current_balance: float
    # Average monthly net flow over the trailing months (negative = burn)
    monthly_burn_rate: float
    trend_analysis: str
    significance: str
