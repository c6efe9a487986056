import math
from abc import ABC, abstractmethod
from collections.abc import Sequence
from datetime import date, timedelta
from typing import Any

from cashcast.exceptions import ValidationError
from cashcast.models import EconomicScenario, ForecastModelSpec, ForecastPoint, ModelKind
from cashcast.noise import NoiseGenerator, ZeroNoise
from cashcast.primitives.numeric import clamp
from cashcast.primitives.scenario import apply_economic_scenario
from cashcast.primitives.time_series import classify_trend
from cashcast.utilities.deadline import Deadline


class ModelRunner(ABC):
    """Base class for all forecasting runners."""

    # Class attributes to be defined by subclasses
    name: str = ""
    description: str = ""
    version: str = "1.0"
    kind: ModelKind

    def __init__(self, noise: NoiseGenerator | None = None) -> None:
        """
        Initialize the runner.

        Args:
            noise: Innovation term generator. Defaults to zero noise.
        """
        if not self.name:
            self.name = self.__class__.__name__
        if not self.description and self.__doc__:
            self.description = self.__doc__.strip().split("\n")[0]

        self.noise = noise or ZeroNoise()

    def run(
        self,
        model_spec: ForecastModelSpec,
        series: Sequence[float],
        horizon_days: int,
        scenario: EconomicScenario | None = None,
        start_date: date | None = None,
        deadline: Deadline | None = None,
    ) -> list[ForecastPoint]:
        """
        Project ``horizon_days`` forecast points from a numeric series.

        Args:
            model_spec: The model to run; never mutated
            series: Daily net-flow values, oldest first; never mutated
            horizon_days: Number of days to project
            scenario: Optional economic scenario applied to the projection
            start_date: Day before the first forecast day; defaults to today
            deadline: Request deadline checked between steps

        Returns:
            Forecast points dated ``start_date + 1 .. start_date + horizon_days``

        Raises:
            ValidationError: If the spec kind does not match this runner
            InsufficientDataError: If the series is shorter than the model needs
            ForecastTimeoutError: If the deadline passes mid-run
        """
        self.validate_spec(model_spec)
        if horizon_days < 1:
            raise ValidationError("horizon_days must be at least 1", {"horizon_days": horizon_days})

        points = self.project(
            model_spec,
            [float(value) for value in series],
            horizon_days,
            start_date or date.today(),
            deadline or Deadline.never(),
        )
        if scenario is not None:
            points, _ = apply_economic_scenario(points, scenario)
        return points

    @abstractmethod
    def project(
        self,
        model_spec: ForecastModelSpec,
        values: list[float],
        horizon_days: int,
        start_date: date,
        deadline: Deadline,
    ) -> list[ForecastPoint]:
        """
        Produce the forecast. ``values`` is a private copy the runner may extend.
        """
        pass

    def validate_spec(self, model_spec: ForecastModelSpec) -> None:
        if model_spec.kind != self.kind:
            raise ValidationError(
                f"{self.name} cannot run models of kind '{model_spec.kind}'",
                {"kind": model_spec.kind, "expected_kind": self.kind},
            )

    @staticmethod
    def decayed_confidence(accuracy: float, step: int, decay_rate: float) -> float:
        """Confidence ``accuracy * e^(-decay_rate * step)``."""
        return clamp(accuracy * math.exp(-decay_rate * step), 0.0, 1.0)

    @staticmethod
    def build_point(
        start_date: date,
        step: int,
        prediction: float,
        confidence: float,
        previous_value: float,
        factors: dict[str, float] | None = None,
    ) -> ForecastPoint:
        """
        Build a forecast point with a symmetric band of ``|prediction| * (1 - confidence)``.
        """
        margin = abs(prediction) * (1 - confidence)
        return ForecastPoint(
            date=start_date + timedelta(days=step + 1),
            predicted_value=prediction,
            confidence=confidence,
            lower_bound=prediction - margin,
            upper_bound=prediction + margin,
            trend=classify_trend(prediction, previous_value),
            factors=factors,
        )

    @classmethod
    def get_info(cls) -> dict[str, Any]:
        """
        Get runner metadata.

        Returns:
            Dictionary with runner metadata
        """
        return {
            "name": cls.name or cls.__name__,
            "description": cls.description,
            "version": cls.version,
            "kind": cls.kind.value,
        }
