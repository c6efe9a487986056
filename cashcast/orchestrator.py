"""
Forecast orchestration.

Runs one forecast request end to end: preprocess transactions, select and
score a model, project the horizon, apply the economic scenario and assemble
the result. Registry write-back of evaluations happens here and nowhere else.
"""

import asyncio
import logging
from collections.abc import Iterable, Mapping, Sequence
from datetime import date, timedelta
from typing import Any

from cashcast.config import EngineSettings, get_settings
from cashcast.economic import EconomicDataProvider, build_economic_scenario
from cashcast.exceptions import ForecastTimeoutError, ModelEvaluationError, ModelRunError, NoSuitableModelError
from cashcast.model_registry import ModelRegistry
from cashcast.models import (
    ConfidenceInterval,
    ForecastConfig,
    ForecastModelSpec,
    ForecastResult,
    ModelEvaluation,
    ModelKind,
    ModelPerformance,
    ModelStatus,
    Transaction,
)
from cashcast.models.forecast_config import clamp_days
from cashcast.noise import NoiseGenerator, UniformNoise
from cashcast.primitives.preprocessing import build_daily_net_flow, series_values
from cashcast.primitives.scenario import apply_economic_scenario
from cashcast.registry import RunnerRegistry, autodiscover_runners
from cashcast.runners import ModelRunner
from cashcast.selection import ModelSelector, insufficient_history
from cashcast.utilities.deadline import Deadline

logger = logging.getLogger(__name__)

Transactions = Iterable[Transaction | Mapping[str, Any]]


class ForecastOrchestrator:
    """Entry point of the forecasting engine."""

    def __init__(
        self,
        registry: ModelRegistry,
        settings: EngineSettings | None = None,
        noise: NoiseGenerator | None = None,
    ) -> None:
        """
        Initialize the orchestrator.

        Args:
            registry: Shared model registry
            settings: Engine settings; defaults to the environment settings
            noise: Innovation term generator; defaults to seeded uniform noise
                from the settings
        """
        self.registry = registry
        self.settings = settings or get_settings()
        self.noise = noise or UniformNoise(amplitude=self.settings.NOISE_AMPLITUDE, seed=self.settings.RANDOM_SEED)
        self.selector = ModelSelector(
            registry,
            max_periods=self.settings.BACKTEST_MAX_PERIODS,
            fraction=self.settings.BACKTEST_FRACTION,
            tie_tolerance=self.settings.MAPE_TIE_TOLERANCE,
        )
        autodiscover_runners()

    def build_runner(self, kind: ModelKind | str) -> ModelRunner:
        """Create the runner for a model kind, wiring ensembles to the registry."""
        if kind == ModelKind.ENSEMBLE:
            return RunnerRegistry.create(
                kind,
                noise=self.noise,
                model_lookup=self.registry.find,
                runner_factory=self.build_runner,
                parallel=self.settings.ENSEMBLE_PARALLEL,
                max_workers=self.settings.ENSEMBLE_MAX_WORKERS,
            )
        return RunnerRegistry.create(kind, noise=self.noise)

    def prepare_series(self, transactions: Transactions, rolling_window_days: int, as_of: date) -> list[float]:
        window = clamp_days(rolling_window_days, self.settings.MAX_ROLLING_WINDOW_DAYS)
        points = build_daily_net_flow(transactions, rolling_window_days=window, as_of=as_of)
        return series_values(points).tolist()

    def write_back(self, evaluations: Sequence[ModelEvaluation]) -> None:
        """Store evaluation outcomes, driving each model's status machine."""
        for evaluation in evaluations:
            if evaluation.succeeded:
                self.registry.record_evaluation(evaluation.model_id, evaluation.performance)
            else:
                self.registry.record_failure(evaluation.model_id, evaluation.error)

    def generate_forecast(
        self,
        config: ForecastConfig,
        transactions: Transactions,
        as_of: date | None = None,
        deadline: Deadline | None = None,
    ) -> ForecastResult:
        """
        Generate a forecast for an org.

        Args:
            config: Request parameters
            transactions: The org's transaction history, in any order
            as_of: First day after the history window; forecasts start on this
                day. Defaults to today.
            deadline: Request deadline; defaults to the configured timeout

        Returns:
            A ForecastResult with exactly ``horizon_days`` points

        Raises:
            NoSuitableModelError: If no model qualifies
            InsufficientDataError: If the window is too short to run or score
                the model (auto mode: too short for every model)
            ModelRunError: If the model produced fewer points than requested
            ForecastTimeoutError: If the deadline passes
        """
        deadline = deadline or Deadline(self.settings.FORECAST_TIMEOUT_SECONDS)
        as_of = as_of or date.today()
        horizon_days = clamp_days(config.horizon_days, self.settings.MAX_HORIZON_DAYS)

        series = self.prepare_series(transactions, config.rolling_window_days, as_of)
        deadline.check("preprocessing")

        try:
            selection = self.selector.select(config.org_id, config.model_type, series)
        except NoSuitableModelError as e:
            self.write_back(e.evaluations)
            data_error = insufficient_history(e.evaluations)
            if data_error is not None:
                raise data_error from e
            raise
        self.write_back(selection.evaluations)
        model = self.registry.get(selection.model.id)
        deadline.check("model selection")

        runner = self.build_runner(model.kind)
        forecast = runner.run(
            model, series, horizon_days, start_date=as_of - timedelta(days=1), deadline=deadline
        )
        if len(forecast) < horizon_days:
            raise ModelRunError(
                f"Model {model.id} produced {len(forecast)} of {horizon_days} forecast points",
                model_id=model.id,
                details={"produced": len(forecast), "horizon_days": horizon_days},
            )

        scenario_impact = None
        if config.economic_factors is not None:
            forecast, scenario_impact = apply_economic_scenario(forecast, config.economic_factors)

        deadline.check("evaluation")
        performance = self._score_selected(model, series, selection.evaluations)

        logger.info(
            "Generated %d-day forecast for org %s with %s model %s",
            horizon_days,
            config.org_id,
            model.kind,
            model.id,
        )
        return ForecastResult(
            model_id=model.id,
            model_kind=model.kind,
            org_id=config.org_id,
            forecast=forecast,
            confidence_interval=ConfidenceInterval(
                lower=[point.lower_bound for point in forecast],
                upper=[point.upper_bound for point in forecast],
            ),
            accuracy_metrics=performance,
            scenario_impact=scenario_impact,
            horizon_days=horizon_days,
            scenario=config.scenario,
            confidence_level=config.confidence_level,
        )

    def _score_selected(
        self, model: ForecastModelSpec, series: Sequence[float], evaluations: Sequence[ModelEvaluation]
    ) -> ModelPerformance:
        evaluation = self.selector.evaluate_model(model, series)
        self.write_back([evaluation])
        if not evaluation.succeeded:
            data_error = insufficient_history([evaluation])
            if data_error is not None:
                raise data_error
            if model.performance is not None:
                logger.warning("Using stored performance for model %s", model.id)
                return model.performance
            raise ModelEvaluationError(
                f"Model {model.id} could not be evaluated", model_id=model.id, details=evaluation.error
            )

        # Keep the rank the model earned during selection
        ranking = next((e.performance.ranking for e in evaluations if e.model_id == model.id and e.succeeded), None)
        return evaluation.performance.model_copy(update={"ranking": ranking})

    def evaluate_models(
        self, org_id: str, transactions: Transactions, as_of: date | None = None
    ) -> list[ModelEvaluation]:
        """
        Backtest every non-inactive model of an org and store the outcomes.

        Training and error models take part, so this is how they become active.

        Returns:
            Ranked successful evaluations followed by the failed ones
        """
        series = self.prepare_series(transactions, self.settings.MAX_ROLLING_WINDOW_DAYS, as_of or date.today())
        models = [
            model for model in self.registry.list_models(org_id=org_id) if model.status != ModelStatus.INACTIVE
        ]
        evaluations = self.selector.evaluate_models(models, series)
        self.write_back(evaluations)
        logger.info(
            "Evaluated %d models for org %s (%d failed)",
            len(evaluations),
            org_id,
            sum(1 for e in evaluations if not e.succeeded),
        )
        return evaluations

    async def generate_forecast_async(
        self,
        config: ForecastConfig,
        transactions: Transactions,
        economic_provider: EconomicDataProvider | None = None,
        timeout: float | None = None,
        as_of: date | None = None,
    ) -> ForecastResult:
        """
        Asynchronous request boundary.

        When a provider is given and the config carries no economic factors,
        the scenario is built from the provider first. The computation then
        runs in a worker thread. Both stages share one deadline.

        Raises:
            ForecastTimeoutError: If the request does not finish within ``timeout``
        """
        timeout = timeout if timeout is not None else self.settings.FORECAST_TIMEOUT_SECONDS
        deadline = Deadline(timeout)
        transactions = list(transactions)

        try:
            if economic_provider is not None and config.economic_factors is None:
                scenario = await asyncio.wait_for(build_economic_scenario(economic_provider), deadline.remaining())
                config = config.model_copy(update={"economic_factors": scenario})

            return await asyncio.wait_for(
                asyncio.to_thread(self.generate_forecast, config, transactions, as_of, deadline),
                deadline.remaining(),
            )
        except asyncio.TimeoutError as e:
            raise ForecastTimeoutError(f"Forecast for org '{config.org_id}' timed out", timeout=timeout) from e
