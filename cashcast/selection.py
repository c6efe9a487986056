"""
Model selection.

Picks the model that will produce a forecast. In automatic mode every model of
the org that is not inactive is backtested and the most accurate one wins, so
models left in error by an earlier request get another chance. Otherwise the
first active model of the requested kind is used as is.
"""

import logging
from collections.abc import Sequence

from cashcast.exceptions import CashcastError, InsufficientDataError, NoSuitableModelError
from cashcast.model_registry import ModelRegistry
from cashcast.models import (
    FrozenModel,
    ForecastModelSpec,
    ModelEvaluation,
    ModelKind,
    ModelStatus,
    ModelType,
)
from cashcast.primitives.backtest import DEFAULT_MAX_PERIODS, DEFAULT_TEST_FRACTION, run_backtest
from cashcast.primitives.evaluation import DEFAULT_TIE_TOLERANCE, evaluate_backtest, rank_performances
from cashcast.runners.ensemble import resolve_members

logger = logging.getLogger(__name__)


class Selection(FrozenModel):
    """Chosen model plus the evaluations that led to it."""

    model: ForecastModelSpec
    # Every evaluation run during selection, ranked successes first
    evaluations: list[ModelEvaluation] = []


class ModelSelector:
    """Chooses a forecasting model for an org. Never writes to the registry."""

    def __init__(
        self,
        registry: ModelRegistry,
        max_periods: int = DEFAULT_MAX_PERIODS,
        fraction: float = DEFAULT_TEST_FRACTION,
        tie_tolerance: float = DEFAULT_TIE_TOLERANCE,
    ) -> None:
        self.registry = registry
        self.max_periods = max_periods
        self.fraction = fraction
        self.tie_tolerance = tie_tolerance

    def evaluate_model(self, model_spec: ForecastModelSpec, series: Sequence[float]) -> ModelEvaluation:
        """
        Backtest and score one model.

        Failures are returned as an evaluation carrying the error instead of
        being raised.
        """
        members = resolve_members(model_spec, self.registry.find) if model_spec.kind == ModelKind.ENSEMBLE else None
        try:
            results = run_backtest(
                model_spec, series, members=members, max_periods=self.max_periods, fraction=self.fraction
            )
            performance = evaluate_backtest(results)
        except CashcastError as e:
            logger.warning("Evaluation of model %s failed: %s", model_spec.id, e.message)
            return ModelEvaluation(
                model_id=model_spec.id, error={"type": type(e).__name__, "message": e.message, **e.details}
            )
        return ModelEvaluation(model_id=model_spec.id, performance=performance)

    def evaluate_models(
        self, models: Sequence[ForecastModelSpec], series: Sequence[float]
    ) -> list[ModelEvaluation]:
        """
        Evaluate models and rank the successful ones.

        Returns:
            Ranked successful evaluations (best first) followed by the failed ones
        """
        evaluations = [self.evaluate_model(model, series) for model in models]
        succeeded = [(e.model_id, e.performance) for e in evaluations if e.succeeded]
        failed = [e for e in evaluations if not e.succeeded]

        ranked = rank_performances(succeeded, tie_tolerance=self.tie_tolerance)
        return [ModelEvaluation(model_id=model_id, performance=performance) for model_id, performance in ranked] + failed

    def select(self, org_id: str, model_type: ModelType, series: Sequence[float]) -> Selection:
        """
        Select a model for a forecast request.

        Args:
            org_id: Organization whose models are considered
            model_type: ``auto`` or a specific model kind
            series: Daily net-flow values used for backtesting in auto mode

        Returns:
            The selected model and the evaluations performed

        Raises:
            NoSuitableModelError: If no model qualifies. In auto mode the error
                carries the failed evaluations.
        """
        model_type = ModelType(model_type)

        if model_type != ModelType.AUTO:
            for model in self.registry.list_models(org_id=org_id, status=ModelStatus.ACTIVE):
                if model.kind == model_type:
                    logger.info("Using %s model %s for org %s", model.kind, model.id, org_id)
                    return Selection(model=model)
            raise NoSuitableModelError(
                f"No active {model_type.value} model for org '{org_id}'", org_id=org_id, model_type=model_type.value
            )

        candidates = [
            model for model in self.registry.list_models(org_id=org_id) if model.status != ModelStatus.INACTIVE
        ]
        evaluations = self.evaluate_models(candidates, series)
        best = next((e for e in evaluations if e.succeeded), None)
        if best is None:
            raise NoSuitableModelError(
                f"No model for org '{org_id}' could be evaluated",
                org_id=org_id,
                model_type=ModelType.AUTO.value,
                evaluations=evaluations,
            )

        model = self.registry.get(best.model_id)
        logger.info(
            "Selected %s model %s for org %s (mape=%.3f, variance=%.3f)",
            model.kind,
            model.id,
            org_id,
            best.performance.mape,
            best.performance.variance,
        )
        return Selection(model=model, evaluations=evaluations)


def insufficient_history(evaluations: Sequence[ModelEvaluation]) -> InsufficientDataError | None:
    """
    Rebuild the data error behind a set of failed evaluations.

    Returns an InsufficientDataError carrying the smallest history length that
    would let one of the models be scored, or None when any failure had
    another cause or nothing failed.
    """
    failures = [evaluation.error for evaluation in evaluations if not evaluation.succeeded]
    if not failures or any(error.get("type") != InsufficientDataError.__name__ for error in failures):
        return None

    data_details = [error["data_details"] for error in failures]
    required_length = min(details["required_length"] for details in data_details)
    available_length = data_details[0]["available_length"]
    return InsufficientDataError(
        f"Need at least {required_length} days of history, got {available_length}",
        required_length=required_length,
        available_length=available_length,
        model_id=data_details[0]["model_id"] if len(data_details) == 1 else None,
    )
