# =============================================================================
# Runway Primitives
#
# Estimates how long the current balance lasts at the recent monthly burn.
#
# Family: runway
# Version: 1.0
#
# Dependencies:
#   - pandas as pd
# =============================================================================

from collections.abc import Iterable, Mapping
from datetime import date
from typing import Any

import pandas as pd

from cashcast.models import Transaction
from cashcast.models.runway import RunwayAnalysis
from cashcast.primitives.preprocessing import coerce_transactions

# Reported when the business is not burning cash
UNLIMITED_RUNWAY_MONTHS = 999.0

SIGNIFICANCE_BANDS = [
    (6, "CRITICAL: Immediate funding needed"),
    (12, "WARNING: Plan funding within 6 months"),
    (24, "STABLE: Good financial position"),
]
EXCELLENT = "EXCELLENT: Strong financial position"


def classify_runway(runway_months: float) -> str:
    """
    Map a runway length onto its significance band.

    Family: runway
    Version: 1.0
    """
    for limit, label in SIGNIFICANCE_BANDS:
        if runway_months < limit:
            return label
    return EXCELLENT


def calculate_runway(
    transactions: Iterable[Transaction | Mapping[str, Any]], as_of: date | None = None, months: int = 3
) -> RunwayAnalysis:
    """
    Calculate cash runway from transaction history.

    Only transactions dated before ``as_of`` count. The balance is the sum of
    their amounts. The burn rate is the average calendar-month net flow over
    the trailing ``months`` months.

    Family: runway
    Version: 1.0

    Args:
        transactions: Signed transaction records
        as_of: First day after the history; defaults to today
        months: Trailing months used for the burn rate

    Returns:
        RunwayAnalysis for the current balance and burn
    """
    as_of = as_of or date.today()
    records = [record for record in coerce_transactions(transactions) if record.date < as_of]

    if not records:
        return RunwayAnalysis(
            runway_months=UNLIMITED_RUNWAY_MONTHS,
            current_balance=0.0,
            monthly_burn_rate=0.0,
            trend_analysis="Neutral cash flow - break-even",
            significance=classify_runway(UNLIMITED_RUNWAY_MONTHS),
        )

    df = pd.DataFrame([{"date": r.date, "amount": r.amount} for r in records])
    df["date"] = pd.to_datetime(df["date"])
    current_balance = float(df["amount"].sum())

    cutoff = pd.Timestamp(as_of) - pd.DateOffset(months=months)
    recent = df[df["date"] >= cutoff]
    monthly_net_flows = recent.groupby(recent["date"].dt.to_period("M"))["amount"].sum()
    monthly_burn_rate = float(monthly_net_flows.mean()) if not monthly_net_flows.empty else 0.0

    if monthly_burn_rate < 0:
        runway_months = max(current_balance, 0.0) / abs(monthly_burn_rate)
        trend_analysis = "Negative cash flow - burning cash"
    else:
        runway_months = UNLIMITED_RUNWAY_MONTHS
        if monthly_burn_rate > 0:
            trend_analysis = "Positive cash flow - business is growing"
        else:
            trend_analysis = "Neutral cash flow - break-even"

    return RunwayAnalysis(
        runway_months=runway_months,
        current_balance=current_balance,
        monthly_burn_rate=monthly_burn_rate,
        trend_analysis=trend_analysis,
        significance=classify_runway(runway_months),
    )
