# =============================================================================
# Time Series Primitives
#
# Closed-form building blocks of the forecasting runners:
# - Normalized linear trend
# - Sinusoidal seasonality
# - Autoregressive and moving-average components
# - Trend direction classification
#
# Family: time_series
# Version: 1.0
#
# Dependencies:
#   - numpy as np
#   - scipy.stats.linregress
# =============================================================================

import math
from collections.abc import Sequence

import numpy as np
from scipy.stats import linregress

from cashcast.models import TrendDirection
from cashcast.primitives.numeric import relative_change, safe_divide

SEASONAL_AMPLITUDE = 0.05
AR_COEFFICIENT = 0.5
MA_SCALE = 0.1
STABLE_TREND_THRESHOLD = 0.01


def calculate_normalized_trend(values: Sequence[float]) -> float:
    """
    Slope of a least-squares line through the values, divided by their mean.

    Family: time_series
    Version: 1.0

    Args:
        values: Equally spaced observations

    Returns:
        Relative slope per period; 0 for fewer than two values, a flat series
        or a zero mean
    """
    arr = np.asarray(values, dtype=float)
    if arr.size < 2 or np.all(arr == arr[0]):
        return 0.0

    result = linregress(np.arange(arr.size), arr)
    trend = safe_divide(result.slope, arr.mean(), default_value=0.0)
    return float(trend)


def calculate_seasonality(step: int, cycle: int) -> float:
    """
    Sinusoidal seasonal term ``0.05 * sin(2 * pi * step / cycle)``.

    Family: time_series
    Version: 1.0
    """
    return SEASONAL_AMPLITUDE * math.sin((2 * math.pi * step) / cycle)


def calculate_autoregressive(values: Sequence[float], order: int) -> float:
    """
    Weighted sum of the last ``order`` values with weight ``0.5 / lag``.

    Family: time_series
    Version: 1.0
    """
    if len(values) < order:
        return 0.0
    return float(sum(values[-lag] * (AR_COEFFICIENT / lag) for lag in range(1, order + 1)))


def calculate_moving_average(values: Sequence[float], order: int) -> float:
    """
    Mean of the last ``order`` values scaled by 0.1.

    Family: time_series
    Version: 1.0
    """
    if len(values) < order:
        return 0.0
    return float(np.mean(values[-order:]) * MA_SCALE)


def classify_trend(current_value: float, previous_value: float) -> TrendDirection:
    """
    Classify the move from previous_value to current_value.

    Changes within one percent of the previous value count as stable.

    Family: time_series
    Version: 1.0
    """
    change = relative_change(current_value, previous_value)
    if change > STABLE_TREND_THRESHOLD:
        return TrendDirection.UP
    if change < -STABLE_TREND_THRESHOLD:
        return TrendDirection.DOWN
    return TrendDirection.STABLE
