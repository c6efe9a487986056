# =============================================================================
# Backtesting Primitives
#
# Holds out the trailing slice of a series and scores a cheap one-step-ahead
# estimator per held-out period. The estimators are simplified proxies for
# the full runners; they exist to produce error samples for evaluation.
#
# Family: backtest
# Version: 1.0
#
# Dependencies:
#   - numpy as np
# =============================================================================

import math
from collections.abc import Sequence

import numpy as np

from cashcast.exceptions import InsufficientDataError
from cashcast.models import BacktestResult, ForecastModelSpec, ModelKind
from cashcast.primitives.numeric import safe_divide
from cashcast.primitives.time_series import calculate_normalized_trend

DEFAULT_MAX_PERIODS = 30
DEFAULT_TEST_FRACTION = 0.2
RECENT_WINDOW = 5
RECENT_WEIGHT = 0.7

# (member spec, weight) pairs resolved for an ensemble
EnsembleMembers = Sequence[tuple[ForecastModelSpec, float]]


def calculate_test_length(
    series_length: int, max_periods: int = DEFAULT_MAX_PERIODS, fraction: float = DEFAULT_TEST_FRACTION
) -> int:
    """
    Number of trailing periods held out: ``min(max_periods, floor(fraction * n))``.

    Family: backtest
    Version: 1.0
    """
    return min(max_periods, math.floor(fraction * series_length))


def estimate_trend_step(train: Sequence[float]) -> float:
    """
    One-step trend extrapolation ``last * (1 + trend(train))``.

    Family: backtest
    Version: 1.0
    """
    return float(train[-1] * (1 + calculate_normalized_trend(train)))


def estimate_arma_step(train: Sequence[float]) -> float:
    """
    Blend of the recent average (last five values) and the overall average.

    Family: backtest
    Version: 1.0
    """
    arr = np.asarray(train, dtype=float)
    recent_average = arr[-RECENT_WINDOW:].mean()
    overall_average = arr.mean()
    return float(recent_average * RECENT_WEIGHT + overall_average * (1 - RECENT_WEIGHT))


def estimate_single_step(
    model_spec: ForecastModelSpec, train: Sequence[float], members: EnsembleMembers | None = None
) -> float:
    """
    Simplified one-step prediction for a model kind.

    Ensembles blend their members' estimates by weight and fall back to
    persistence (the last training value) when no member can vote.

    Family: backtest
    Version: 1.0
    """
    if model_spec.kind == ModelKind.TREND_SEASONAL:
        return estimate_trend_step(train)
    if model_spec.kind == ModelKind.ARMA:
        return estimate_arma_step(train)

    votes = [
        (estimate_single_step(member, train), weight)
        for member, weight in members or []
        if member.kind != ModelKind.ENSEMBLE
    ]
    total_weight = sum(weight for _, weight in votes)
    if total_weight == 0:
        return float(train[-1])
    return float(sum(value * weight for value, weight in votes) / total_weight)


def run_backtest(
    model_spec: ForecastModelSpec,
    series: Sequence[float],
    members: EnsembleMembers | None = None,
    max_periods: int = DEFAULT_MAX_PERIODS,
    fraction: float = DEFAULT_TEST_FRACTION,
) -> list[BacktestResult]:
    """
    Backtest a model over the trailing slice of a series.

    Family: backtest
    Version: 1.0

    Args:
        model_spec: The model to score
        series: Daily net-flow values, oldest first
        members: Resolved members when model_spec is an ensemble
        max_periods: Upper bound on held-out periods
        fraction: Share of the series held out

    Returns:
        One BacktestResult per held-out period, oldest first, labelled ``T-i``

    Raises:
        InsufficientDataError: If the series is too short to hold out a period
    """
    values = np.asarray(series, dtype=float)
    n = values.size
    test_length = calculate_test_length(n, max_periods=max_periods, fraction=fraction)
    if test_length < 1:
        raise InsufficientDataError(
            "Series too short to hold out a backtest period",
            required_length=math.ceil(1 / fraction),
            available_length=n,
            model_id=model_spec.id,
        )

    results = []
    for i in range(test_length, 0, -1):
        train = values[: n - i]
        actual = float(values[n - i])
        predicted = estimate_single_step(model_spec, train, members)
        error = predicted - actual
        results.append(
            BacktestResult(
                period_label=f"T-{i}",
                predicted=predicted,
                actual=actual,
                error=error,
                error_percentage=safe_divide(error, actual, default_value=0.0) * 100,
            )
        )
    return results
