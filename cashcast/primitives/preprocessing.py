# =============================================================================
# Series Preprocessing Primitives
#
# Turns raw transaction records into the equally spaced daily net-flow series
# consumed by the runners and the backtester.
#
# Family: preprocessing
# Version: 1.0
#
# Dependencies:
#   - pandas as pd
#   - numpy as np
# =============================================================================

import logging
from collections.abc import Iterable, Mapping, Sequence
from datetime import date, timedelta
from typing import Any

import numpy as np
import pandas as pd
from pydantic import ValidationError as PydanticValidationError

from cashcast.exceptions import InsufficientDataError, ValidationError
from cashcast.models import TimeSeriesPoint, Transaction
from cashcast.models.forecast_config import MAX_ROLLING_WINDOW_DAYS

logger = logging.getLogger(__name__)


def coerce_transactions(transactions: Iterable[Transaction | Mapping[str, Any]]) -> list[Transaction]:
    """
    Validate raw transaction records into Transaction models.

    Family: preprocessing
    Version: 1.0

    Raises:
        ValidationError: If a record has no parseable date or amount
    """
    records = []
    for index, record in enumerate(transactions):
        if isinstance(record, Transaction):
            records.append(record)
            continue
        try:
            records.append(Transaction.model_validate(record))
        except PydanticValidationError as e:
            raise ValidationError(f"Invalid transaction at index {index}", {"validation_errors": e.errors()}) from e
    return records


def build_daily_net_flow(
    transactions: Iterable[Transaction | Mapping[str, Any]],
    rolling_window_days: int = MAX_ROLLING_WINDOW_DAYS,
    as_of: date | None = None,
) -> list[TimeSeriesPoint]:
    """
    Build the daily net-flow series over a trailing rolling window.

    Family: preprocessing
    Version: 1.0

    Args:
        transactions: Records with a calendar date and a signed amount, in any order
        rolling_window_days: Window length in days, capped at 365
        as_of: First day after the window; defaults to today

    Returns:
        Exactly ``rolling_window_days`` points covering
        ``[as_of - rolling_window_days, as_of)``, with 0 on days without
        transactions.
    """
    window = max(1, min(int(rolling_window_days), MAX_ROLLING_WINDOW_DAYS))
    as_of = as_of or date.today()
    start = as_of - timedelta(days=window)
    days = pd.date_range(start=start, periods=window, freq="D")

    records = coerce_transactions(transactions)
    if records:
        df = pd.DataFrame([{"date": r.date, "amount": r.amount} for r in records])
        df["date"] = pd.to_datetime(df["date"])
        in_window = df[(df["date"] >= days[0]) & (df["date"] <= days[-1])]
        daily = in_window.groupby("date")["amount"].sum()
    else:
        daily = pd.Series(dtype=float)

    daily = daily.reindex(days, fill_value=0.0).astype(float)
    logger.debug(
        "Built %d-day net flow series from %d transactions (%d active days)",
        window,
        len(records),
        int((daily != 0).sum()),
    )
    return [TimeSeriesPoint(date=day.date(), net_flow=float(value)) for day, value in daily.items()]


def series_values(points: Sequence[TimeSeriesPoint]) -> np.ndarray:
    """
    Extract the numeric net-flow values from a point series.

    Family: preprocessing
    Version: 1.0
    """
    return np.asarray([point.net_flow for point in points], dtype=float)


def require_history(series: Sequence[float], required_length: int, model_id: str | None = None) -> None:
    """
    Ensure a series carries at least ``required_length`` observations.

    Family: preprocessing
    Version: 1.0

    Raises:
        InsufficientDataError: If the series is shorter than required
    """
    available = len(series)
    if available < required_length:
        raise InsufficientDataError(
            f"Need at least {required_length} observations, got {available}",
            required_length=required_length,
            available_length=available,
            model_id=model_id,
        )
