# =============================================================================
# Variance Primitives
#
# Monthly backtest of a simple trend projection:
# - Calendar-month net flow totals
# - Linear extrapolation of the next monthly total
# - Per-month variance and the overall MAPE on held-out transactions
#
# Family: variance
# Version: 1.0
#
# Dependencies:
#   - numpy as np
#   - pandas as pd
# =============================================================================

import math
from collections.abc import Iterable, Mapping
from typing import Any

import numpy as np
import pandas as pd

from cashcast.exceptions import InsufficientDataError, ValidationError
from cashcast.models import MonthlyVariance, Transaction, VarianceAnalysis
from cashcast.primitives.numeric import safe_divide
from cashcast.primitives.preprocessing import coerce_transactions

DEFAULT_TEST_FRACTION = 0.3
DEFAULT_TREND_MONTHS = 3
MIN_TRANSACTIONS = 2


def monthly_totals(df: pd.DataFrame) -> pd.Series:
    """
    Sum transaction amounts per calendar month.

    Family: variance
    Version: 1.0

    Args:
        df: Frame with datetime ``date`` and numeric ``amount`` columns

    Returns:
        Series of totals indexed by monthly period, oldest first
    """
    return df.groupby(df["date"].dt.to_period("M"))["amount"].sum().sort_index()


def project_monthly_total(training: pd.DataFrame, months: int = DEFAULT_TREND_MONTHS) -> float:
    """
    Extrapolate the next monthly total from the trailing training months.

    Family: variance
    Version: 1.0

    Args:
        training: Frame with datetime ``date`` and numeric ``amount`` columns
        months: Months before the last training date that feed the trend

    Returns:
        The last monthly total plus the average month-over-month step, the last
        total when only one month is available, or 0 for an empty frame
    """
    if training.empty:
        return 0.0

    cutoff = training["date"].max() - pd.DateOffset(months=months)
    totals = monthly_totals(training[training["date"] >= cutoff]).to_numpy(dtype=float)
    if totals.size >= 2:
        return float(totals[-1] + (totals[-1] - totals[0]) / (totals.size - 1))
    return float(totals[-1])


def calculate_variance_analysis(
    transactions: Iterable[Transaction | Mapping[str, Any]],
    test_fraction: float = DEFAULT_TEST_FRACTION,
    trend_months: int = DEFAULT_TREND_MONTHS,
) -> VarianceAnalysis:
    """
    Backtest a monthly trend projection on the latest share of transactions.

    Transactions are ordered by date and the last ``test_fraction`` of them is
    held out. Each held-out calendar month is compared against the monthly
    total projected from the training part.

    Family: variance
    Version: 1.0

    Args:
        transactions: Signed transaction records
        test_fraction: Share of transactions held out, strictly between 0 and 1
        trend_months: Trailing training months used for the projection

    Returns:
        VarianceAnalysis with one row per held-out month

    Raises:
        InsufficientDataError: If fewer than two transactions are given
        ValidationError: If test_fraction is outside (0, 1)
    """
    if not 0 < test_fraction < 1:
        raise ValidationError("test_fraction must be between 0 and 1", {"test_fraction": test_fraction})

    records = coerce_transactions(transactions)
    if len(records) < MIN_TRANSACTIONS:
        raise InsufficientDataError(
            f"Variance analysis needs at least {MIN_TRANSACTIONS} transactions, got {len(records)}",
            required_length=MIN_TRANSACTIONS,
            available_length=len(records),
        )

    df = pd.DataFrame([{"date": r.date, "amount": r.amount} for r in records])
    df["date"] = pd.to_datetime(df["date"])
    df = df.sort_values("date", kind="stable").reset_index(drop=True)

    split_index = math.floor(len(df) * (1 - test_fraction))
    training, testing = df.iloc[:split_index], df.iloc[split_index:]
    forecast_total = project_monthly_total(training, trend_months)

    rows = []
    for period, actual in monthly_totals(testing).items():
        actual = float(actual)
        variance = forecast_total - actual
        variance_percentage = safe_divide(variance, abs(actual), default_value=0.0) * 100
        rows.append(
            MonthlyVariance(
                month=str(period),
                actual=actual,
                forecast=forecast_total,
                variance=variance,
                variance_percentage=variance_percentage,
                mape=abs(variance_percentage),
            )
        )

    scored = [row.mape for row in rows if row.actual != 0]
    overall_mape = float(np.mean(scored)) if scored else 0.0
    variances = np.asarray([row.variance for row in rows], dtype=float)

    return VarianceAnalysis(
        monthly_accuracy=rows,
        overall_mape=overall_mape,
        test_period=f"{test_fraction * 100:g}% ({len(testing)} transactions)",
        accuracy_percentage=max(0.0, 100 - overall_mape),
        rmse=float(np.sqrt(np.mean(variances**2))),
        mae=float(np.mean(np.abs(variances))),
        training_transactions=len(training),
        test_transactions=len(testing),
    )
