"""
Trend-Seasonal Runner

Extrapolates the last observed value by a normalized linear trend, a monthly
sinusoidal seasonality and an injected innovation term. Each prediction is
fed back into the lookback window of the next step.
"""

import logging
from datetime import date

from cashcast.models import ForecastModelSpec, ForecastPoint, ModelKind
from cashcast.primitives.preprocessing import require_history
from cashcast.primitives.time_series import calculate_normalized_trend, calculate_seasonality
from cashcast.runners.base import ModelRunner
from cashcast.utilities.deadline import Deadline

logger = logging.getLogger(__name__)

CONFIDENCE_DECAY = 0.05


class TrendSeasonalRunner(ModelRunner):
    """Trend plus seasonality extrapolation over a fixed lookback window."""

    name = "trend_seasonal"
    kind = ModelKind.TREND_SEASONAL

    def project(
        self,
        model_spec: ForecastModelSpec,
        values: list[float],
        horizon_days: int,
        start_date: date,
        deadline: Deadline,
    ) -> list[ForecastPoint]:
        params = model_spec.parameters
        lookback_length = params.sequence_length
        require_history(values, lookback_length, model_spec.id)

        points = []
        for step in range(horizon_days):
            deadline.check(f"{self.name} step {step}")

            lookback = values[-lookback_length:]
            trend = calculate_normalized_trend(lookback)
            seasonality = calculate_seasonality(step, params.seasonal_cycle)
            noise = self.noise.sample()

            last_value = lookback[-1]
            prediction = last_value * (1 + trend + seasonality + noise)
            confidence = self.decayed_confidence(model_spec.accuracy, step, CONFIDENCE_DECAY)

            points.append(
                self.build_point(
                    start_date,
                    step,
                    prediction,
                    confidence,
                    previous_value=last_value,
                    factors={"trend": trend, "seasonality": seasonality, "noise": noise},
                )
            )
            values.append(prediction)

        logger.debug("Projected %d days with %s model %s", horizon_days, self.name, model_spec.id)
        return points
