"""
Tabular export of forecast results.
"""

import logging
from collections.abc import Sequence
from pathlib import Path

import pandas as pd

from cashcast.models import ForecastResult, TimeSeriesPoint

logger = logging.getLogger(__name__)

EXPORT_COLUMNS = ["date", "actual", "forecast", "lower", "upper", "confidence"]


def forecast_to_frame(result: ForecastResult, history: Sequence[TimeSeriesPoint] | None = None) -> pd.DataFrame:
    """
    Flatten a forecast into one row per day.

    Args:
        result: The forecast to export
        history: Optional observed series; its days are emitted first with
            ``actual`` set and the forecast columns empty

    Returns:
        DataFrame with columns date, actual, forecast, lower, upper, confidence
    """
    history_rows = pd.DataFrame(
        {
            "date": [point.date for point in history or []],
            "actual": [point.net_flow for point in history or []],
        }
    )
    forecast_rows = pd.DataFrame(
        {
            "date": [point.date for point in result.forecast],
            "forecast": [point.predicted_value for point in result.forecast],
            "lower": [point.lower_bound for point in result.forecast],
            "upper": [point.upper_bound for point in result.forecast],
            "confidence": [point.confidence for point in result.forecast],
        }
    )

    df = pd.concat([history_rows, forecast_rows], ignore_index=True).reindex(columns=EXPORT_COLUMNS)
    df["date"] = pd.to_datetime(df["date"])
    return df


def export_forecast_csv(
    result: ForecastResult, path: str | Path, history: Sequence[TimeSeriesPoint] | None = None
) -> Path:
    """Write a forecast (and optional history) to a CSV file with ISO dates."""
    path = Path(path)
    df = forecast_to_frame(result, history)
    df.to_csv(path, index=False, date_format="%Y-%m-%d", float_format="%.2f")
    logger.info("Exported %d forecast rows for model %s to %s", len(result.forecast), result.model_id, path)
    return path
