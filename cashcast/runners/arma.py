"""
Autoregressive-Moving-Average Runner

Closed-form AR and MA components with an optional seasonal term. Predictions
are chained back into the series so later steps build on earlier ones.
"""

import logging
from datetime import date

from cashcast.models import ForecastModelSpec, ForecastPoint, ModelKind
from cashcast.primitives.preprocessing import require_history
from cashcast.primitives.time_series import (
    calculate_autoregressive,
    calculate_moving_average,
    calculate_seasonality,
)
from cashcast.runners.base import ModelRunner
from cashcast.utilities.deadline import Deadline

logger = logging.getLogger(__name__)

CONFIDENCE_DECAY = 0.03


class ArmaRunner(ModelRunner):
    """AR(p) + MA(q) baseline with optional seasonality."""

    name = "arma"
    kind = ModelKind.ARMA

    def project(
        self,
        model_spec: ForecastModelSpec,
        values: list[float],
        horizon_days: int,
        start_date: date,
        deadline: Deadline,
    ) -> list[ForecastPoint]:
        params = model_spec.parameters
        require_history(values, params.required_history, model_spec.id)

        points = []
        for step in range(horizon_days):
            deadline.check(f"{self.name} step {step}")

            autoregressive = calculate_autoregressive(values, params.p)
            moving_average = calculate_moving_average(values, params.q)
            seasonal = calculate_seasonality(step, params.seasonal_period) if params.seasonal_period else 0.0

            prediction = autoregressive + moving_average + seasonal
            confidence = self.decayed_confidence(model_spec.accuracy, step, CONFIDENCE_DECAY)

            points.append(
                self.build_point(
                    start_date,
                    step,
                    prediction,
                    confidence,
                    previous_value=values[-1],
                    factors={"autoregressive": autoregressive, "moving_average": moving_average, "seasonal": seasonal},
                )
            )
            values.append(prediction)

        logger.debug("Projected %d days with %s model %s", horizon_days, self.name, model_spec.id)
        return points
