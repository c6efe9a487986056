# =============================================================================
# Evaluation Primitives
#
# Aggregates backtest errors into accuracy metrics:
# - MAE, RMSE, MAPE and error variance
# - Accuracy and confidence scores
# - Ranking of evaluated models
#
# Family: evaluation
# Version: 1.0
#
# Dependencies:
#   - numpy as np
# =============================================================================

from collections.abc import Sequence
from functools import cmp_to_key

import numpy as np

from cashcast.exceptions import ValidationError
from cashcast.models import BacktestResult, ModelPerformance
from cashcast.primitives.numeric import clamp

# MAPE reported when no backtest period has a non-zero actual
WORST_CASE_MAPE = 100.0
DEFAULT_TIE_TOLERANCE = 0.01


def calculate_mape(results: Sequence[BacktestResult]) -> float:
    """
    Mean absolute percentage error over periods whose actual is non-zero.

    Family: evaluation
    Version: 1.0

    Returns:
        MAPE in percent, or 100 when no period qualifies
    """
    percentage_errors = [abs(r.error / r.actual) * 100 for r in results if r.actual != 0]
    if not percentage_errors:
        return WORST_CASE_MAPE
    return float(np.mean(percentage_errors))


def evaluate_backtest(results: Sequence[BacktestResult]) -> ModelPerformance:
    """
    Score a backtest.

    Family: evaluation
    Version: 1.0

    Args:
        results: Backtest periods to aggregate

    Returns:
        A new ModelPerformance with mae, rmse, mape, variance, accuracy and
        confidence_score; ranking is left unset

    Raises:
        ValidationError: If there are no backtest periods
    """
    if not results:
        raise ValidationError("Cannot evaluate an empty backtest", {"backtest_results": "empty"})

    errors = np.asarray([r.error for r in results], dtype=float)
    abs_errors = np.abs(errors)

    mae = float(abs_errors.mean())
    rmse = float(np.sqrt((errors**2).mean()))
    mape = calculate_mape(results)
    variance = float(((abs_errors - mae) ** 2).mean())
    accuracy = clamp(1 - mape / 100, 0.0, 1.0)
    confidence_score = max(0.0, accuracy * (1 - variance / (mae + 1)))

    return ModelPerformance(
        mae=mae,
        rmse=rmse,
        mape=mape,
        variance=variance,
        accuracy=accuracy,
        confidence_score=confidence_score,
        backtest_results=list(results),
    )


def compare_performance(
    left: ModelPerformance, right: ModelPerformance, tie_tolerance: float = DEFAULT_TIE_TOLERANCE
) -> int:
    """
    Order by MAPE, breaking near-ties (within tie_tolerance) by variance.

    Family: evaluation
    Version: 1.0
    """
    if abs(left.mape - right.mape) < tie_tolerance:
        return (left.variance > right.variance) - (left.variance < right.variance)
    return (left.mape > right.mape) - (left.mape < right.mape)


def rank_performances(
    performances: Sequence[tuple[str, ModelPerformance]], tie_tolerance: float = DEFAULT_TIE_TOLERANCE
) -> list[tuple[str, ModelPerformance]]:
    """
    Rank (model_id, performance) pairs best first and stamp 1-based rankings.

    Family: evaluation
    Version: 1.0
    """
    ordered = sorted(
        performances,
        key=cmp_to_key(lambda a, b: compare_performance(a[1], b[1], tie_tolerance)),
    )
    return [
        (model_id, performance.model_copy(update={"ranking": index + 1}))
        for index, (model_id, performance) in enumerate(ordered)
    ]
