"""
Ensemble Runner

Runs each member model and combines their forecasts step by step with a
weight-normalized average. A member that cannot produce a forecast simply
casts no vote.
"""

import logging
from collections.abc import Callable
from concurrent.futures import ThreadPoolExecutor, wait
from datetime import date, timedelta

from cashcast.exceptions import CashcastError, ForecastTimeoutError
from cashcast.models import ForecastModelSpec, ForecastPoint, ModelKind, ModelStatus
from cashcast.noise import NoiseGenerator
from cashcast.primitives.numeric import clamp
from cashcast.primitives.time_series import classify_trend
from cashcast.runners.arma import ArmaRunner
from cashcast.runners.base import ModelRunner
from cashcast.runners.trend_seasonal import TrendSeasonalRunner
from cashcast.utilities.deadline import Deadline

logger = logging.getLogger(__name__)

ModelLookup = Callable[[str], ForecastModelSpec | None]
RunnerFactory = Callable[[str], ModelRunner]

# (forecast, weight) for every member that voted
MemberVotes = list[tuple[list[ForecastPoint], float]]


def resolve_members(model_spec: ForecastModelSpec, model_lookup: ModelLookup) -> list[tuple[ForecastModelSpec, float]]:
    """
    Resolve an ensemble's member ids to (spec, weight) pairs.

    Unknown, inactive and nested ensemble members are dropped with a log line.
    """
    resolved = []
    for member in model_spec.parameters.members:
        member_spec = model_lookup(member.model_id)
        if member_spec is None:
            logger.warning("Ensemble %s: member %s not found, skipping", model_spec.id, member.model_id)
            continue
        if member_spec.kind == ModelKind.ENSEMBLE:
            logger.warning("Ensemble %s: nested ensemble %s is not supported, skipping", model_spec.id, member.model_id)
            continue
        if member_spec.status == ModelStatus.INACTIVE:
            logger.info("Ensemble %s: member %s is inactive, skipping", model_spec.id, member.model_id)
            continue
        resolved.append((member_spec, member.weight))
    return resolved


class EnsembleRunner(ModelRunner):
    """Weighted vote over the forecasts of registered member models."""

    name = "ensemble"
    kind = ModelKind.ENSEMBLE

    def __init__(
        self,
        noise: NoiseGenerator | None = None,
        model_lookup: ModelLookup | None = None,
        runner_factory: RunnerFactory | None = None,
        parallel: bool = False,
        max_workers: int = 4,
    ) -> None:
        """
        Initialize the ensemble runner.

        Args:
            noise: Noise generator handed to member runners built by the default factory
            model_lookup: Resolves a member model id to its spec, or None when unknown
            runner_factory: Builds the runner for a member kind
            parallel: Run members on a thread pool
            max_workers: Pool size when running in parallel
        """
        super().__init__(noise)
        self.model_lookup = model_lookup or (lambda model_id: None)
        self.runner_factory = runner_factory or self._default_runner_factory
        self.parallel = parallel
        self.max_workers = max_workers

    def _default_runner_factory(self, kind: str) -> ModelRunner:
        runners = {ModelKind.TREND_SEASONAL: TrendSeasonalRunner, ModelKind.ARMA: ArmaRunner}
        return runners[ModelKind(kind)](noise=self.noise)

    def project(
        self,
        model_spec: ForecastModelSpec,
        values: list[float],
        horizon_days: int,
        start_date: date,
        deadline: Deadline,
    ) -> list[ForecastPoint]:
        members = resolve_members(model_spec, self.model_lookup)
        if self.parallel and len(members) > 1:
            votes = self._run_members_parallel(model_spec, members, values, horizon_days, start_date, deadline)
        else:
            votes = self._run_members_sequential(model_spec, members, values, horizon_days, start_date, deadline)

        logger.debug("Ensemble %s: %d of %d members voted", model_spec.id, len(votes), len(model_spec.parameters.members))
        return self.combine_votes(votes, horizon_days, start_date, previous_value=values[-1] if values else 0.0)

    def _run_member(
        self,
        member_spec: ForecastModelSpec,
        values: list[float],
        horizon_days: int,
        start_date: date,
        deadline: Deadline,
    ) -> list[ForecastPoint]:
        runner = self.runner_factory(member_spec.kind)
        return runner.run(member_spec, values, horizon_days, start_date=start_date, deadline=deadline)

    def _run_members_sequential(self, model_spec, members, values, horizon_days, start_date, deadline) -> MemberVotes:
        votes = []
        for member_spec, weight in members:
            deadline.check(f"ensemble {model_spec.id}")
            try:
                forecast = self._run_member(member_spec, values, horizon_days, start_date, deadline)
            except ForecastTimeoutError:
                raise
            except CashcastError as e:
                logger.warning("Ensemble %s: member %s failed: %s", model_spec.id, member_spec.id, e)
                continue
            votes.append((forecast, weight))
        return votes

    def _run_members_parallel(self, model_spec, members, values, horizon_days, start_date, deadline) -> MemberVotes:
        executor = ThreadPoolExecutor(max_workers=self.max_workers, thread_name_prefix="ensemble")
        try:
            futures = [
                (executor.submit(self._run_member, member_spec, values, horizon_days, start_date, deadline), member_spec, weight)
                for member_spec, weight in members
            ]
            _, not_done = wait([future for future, _, _ in futures], timeout=deadline.remaining())
            if not_done:
                raise ForecastTimeoutError(f"Ensemble {model_spec.id} members did not finish in time", timeout=deadline.timeout)
        finally:
            # Running members stop at their next deadline check
            executor.shutdown(wait=False, cancel_futures=True)

        votes = []
        for future, member_spec, weight in futures:
            try:
                forecast = future.result()
            except ForecastTimeoutError:
                raise
            except CashcastError as e:
                logger.warning("Ensemble %s: member %s failed: %s", model_spec.id, member_spec.id, e)
                continue
            votes.append((forecast, weight))
        return votes

    def combine_votes(
        self, votes: MemberVotes, horizon_days: int, start_date: date, previous_value: float = 0.0
    ) -> list[ForecastPoint]:
        """
        Weight-normalized average of member forecasts per step.

        Steps where no member has a point, or every voting weight is zero, are
        omitted, so the result may be shorter than the horizon.
        """
        points = []
        for step in range(horizon_days):
            step_votes = [(forecast[step], weight) for forecast, weight in votes if step < len(forecast)]
            total_weight = sum(weight for _, weight in step_votes)
            if total_weight <= 0:
                continue

            prediction = sum(point.predicted_value * weight for point, weight in step_votes) / total_weight
            confidence = sum(point.confidence * weight for point, weight in step_votes) / total_weight
            lower_bound = sum(point.lower_bound * weight for point, weight in step_votes) / total_weight
            upper_bound = sum(point.upper_bound * weight for point, weight in step_votes) / total_weight

            points.append(
                ForecastPoint(
                    date=start_date + timedelta(days=step + 1),
                    predicted_value=prediction,
                    confidence=clamp(confidence, 0.0, 1.0),
                    lower_bound=min(lower_bound, prediction),
                    upper_bound=max(upper_bound, prediction),
                    trend=classify_trend(prediction, previous_value),
                    factors={"votes": float(len(step_votes)), "total_weight": total_weight},
                )
            )
            previous_value = prediction
        return points
