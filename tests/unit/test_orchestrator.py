"""
Tests for the forecast orchestrator.
"""

import asyncio
from datetime import timedelta

import pytest

from cashcast.economic import StaticEconomicDataProvider
from cashcast.exceptions import (
    ForecastTimeoutError,
    InsufficientDataError,
    ModelRunError,
    NoSuitableModelError,
)
from cashcast.model_registry import ModelRegistry, seed_default_models
from cashcast.models import (
    ArmaParams,
    EconomicScenario,
    EnsembleMember,
    EnsembleParams,
    ForecastConfig,
    ModelKind,
    ModelStatus,
    ModelType,
)
from cashcast.noise import ZeroNoise
from cashcast.orchestrator import ForecastOrchestrator
from cashcast.runners import ArmaRunner, EnsembleRunner, TrendSeasonalRunner
from cashcast.utilities.deadline import Deadline


class UnreachableProvider:
    """Economic data provider that must not be called."""

    async def get_forex_rates(self):
        raise AssertionError("provider should not be called")

    async def get_economic_indicators(self, country=None):
        raise AssertionError("provider should not be called")

    async def get_market_data(self):
        raise AssertionError("provider should not be called")


class SlowProvider(StaticEconomicDataProvider):
    """Economic data provider that takes too long to answer."""

    async def get_market_data(self):
        await asyncio.sleep(5)
        return await super().get_market_data()


class TestGenerateForecast:
    """Tests for ForecastOrchestrator.generate_forecast."""

    def test_auto_forecast(self, orchestrator, sample_transactions, as_of, org_id):
        """Test an automatic forecast end to end."""
        # Arrange
        config = ForecastConfig(org_id=org_id, horizon_days=30)

        # Act
        result = orchestrator.generate_forecast(config, sample_transactions, as_of=as_of)

        # Assert
        assert len(result.forecast) == 30
        assert result.horizon_days == 30
        assert result.org_id == org_id
        assert result.forecast[0].date == as_of
        assert result.forecast[-1].date == as_of + timedelta(days=29)
        assert result.accuracy_metrics.ranking == 1
        assert result.scenario_impact is None
        assert result.confidence_interval.lower == [p.lower_bound for p in result.forecast]
        assert result.confidence_interval.upper == [p.upper_bound for p in result.forecast]
        assert all(p.lower_bound <= p.predicted_value <= p.upper_bound for p in result.forecast)

    def test_horizon_clamped(self, orchestrator, sample_transactions, as_of, org_id):
        """Test that an oversized horizon yields a year of points."""
        config = ForecastConfig(org_id=org_id, horizon_days=1000, model_type=ModelType.ARMA)

        result = orchestrator.generate_forecast(config, sample_transactions, as_of=as_of)

        assert result.horizon_days == 365
        assert len(result.forecast) == 365

    @pytest.mark.parametrize("model_type", [ModelType.TREND_SEASONAL, ModelType.ARMA, ModelType.ENSEMBLE])
    def test_explicit_model_type(self, orchestrator, sample_transactions, as_of, org_id, model_type):
        """Test that explicit requests use the requested kind."""
        config = ForecastConfig(org_id=org_id, horizon_days=14, model_type=model_type)

        result = orchestrator.generate_forecast(config, sample_transactions, as_of=as_of)

        assert result.model_kind == model_type.value
        assert len(result.forecast) == 14

    def test_deterministic_with_zero_noise(self, engine_settings, sample_transactions, as_of, org_id):
        """Test that identical inputs give identical forecasts without noise."""
        # Arrange
        config = ForecastConfig(org_id=org_id, horizon_days=20)
        runs = []

        # Act
        for _ in range(2):
            registry = ModelRegistry()
            seed_default_models(registry, org_id)
            orchestrator = ForecastOrchestrator(registry, settings=engine_settings, noise=ZeroNoise())
            runs.append(orchestrator.generate_forecast(config, sample_transactions, as_of=as_of))

        # Assert
        first, second = runs
        assert first.model_id == second.model_id
        assert [p.predicted_value for p in first.forecast] == [p.predicted_value for p in second.forecast]
        assert [p.confidence for p in first.forecast] == [p.confidence for p in second.forecast]

    def test_scenario_applied(self, orchestrator, sample_transactions, as_of, org_id):
        """Test that economic factors reweight the forecast."""
        # Arrange
        scenario = EconomicScenario(gdp_growth=4, inflation_rate=2, market_volatility=10)
        base_config = ForecastConfig(org_id=org_id, horizon_days=5, model_type=ModelType.ARMA)
        scenario_config = base_config.model_copy(update={"economic_factors": scenario})

        # Act
        base = orchestrator.generate_forecast(base_config, sample_transactions, as_of=as_of)
        adjusted = orchestrator.generate_forecast(scenario_config, sample_transactions, as_of=as_of)

        # Assert
        assert adjusted.scenario_impact.revenue_multiplier == pytest.approx(1.02)
        assert adjusted.forecast[0].predicted_value == pytest.approx(base.forecast[0].predicted_value * 1.007)
        assert all(p.confidence >= 0.1 for p in adjusted.forecast)

    def test_write_back(self, orchestrator, seeded_registry, sample_transactions, as_of, org_id):
        """Test that selection evaluations are stored in the registry."""
        orchestrator.generate_forecast(ForecastConfig(org_id=org_id), sample_transactions, as_of=as_of)

        for model in seeded_registry.list_models(org_id=org_id):
            assert model.last_evaluated_at is not None
            assert model.performance is not None
            assert model.accuracy == model.performance.accuracy

    def test_insufficient_history(self, orchestrator, sample_transactions, as_of, org_id):
        """Test that a window shorter than the lookback fails explicitly."""
        config = ForecastConfig(
            org_id=org_id, rolling_window_days=10, model_type=ModelType.TREND_SEASONAL
        )

        with pytest.raises(InsufficientDataError):
            orchestrator.generate_forecast(config, sample_transactions, as_of=as_of)

    def test_short_window_in_auto_mode(self, orchestrator, seeded_registry, sample_transactions, as_of, org_id):
        """Test that a window too short for every model reports the history it needs."""
        # Arrange
        config = ForecastConfig(org_id=org_id, rolling_window_days=3)

        # Act
        with pytest.raises(InsufficientDataError) as exc_info:
            orchestrator.generate_forecast(config, sample_transactions, as_of=as_of)

        # Assert
        assert exc_info.value.required_length == 5
        assert exc_info.value.available_length == 3
        assert all(model.status == ModelStatus.ERROR for model in seeded_registry.list_models(org_id=org_id))

    def test_short_window_in_explicit_mode(self, orchestrator, seeded_registry, sample_transactions, as_of, org_id):
        """Test that a model that runs but cannot be scored reports the history it needs."""
        # Arrange
        config = ForecastConfig(org_id=org_id, rolling_window_days=4, horizon_days=5, model_type=ModelType.ARMA)

        # Act
        with pytest.raises(InsufficientDataError) as exc_info:
            orchestrator.generate_forecast(config, sample_transactions, as_of=as_of)

        # Assert
        assert exc_info.value.required_length == 5
        assert exc_info.value.available_length == 4
        assert exc_info.value.model_id == f"{org_id}-arma"

    def test_error_models_recover(self, orchestrator, seeded_registry, sample_transactions, as_of, org_id):
        """Test that models failed by a short window are reactivated by the next forecast."""
        # Arrange
        with pytest.raises(InsufficientDataError):
            orchestrator.generate_forecast(
                ForecastConfig(org_id=org_id, rolling_window_days=3), sample_transactions, as_of=as_of
            )

        # Act
        result = orchestrator.generate_forecast(ForecastConfig(org_id=org_id), sample_transactions, as_of=as_of)

        # Assert
        assert len(result.forecast) == 30
        assert result.accuracy_metrics.ranking == 1
        assert all(model.status == ModelStatus.ACTIVE for model in seeded_registry.list_models(org_id=org_id))

    def test_unknown_org(self, orchestrator, sample_transactions, as_of):
        """Test that an org without models has nothing to forecast with."""
        with pytest.raises(NoSuitableModelError) as exc_info:
            orchestrator.generate_forecast(ForecastConfig(org_id="nobody"), sample_transactions, as_of=as_of)

        assert exc_info.value.org_id == "nobody"

    def test_short_ensemble_result(self, engine_settings, sample_transactions, as_of):
        """Test that an ensemble without voters fails instead of returning a partial forecast."""
        # Arrange
        registry = ModelRegistry()
        registry.create_model(
            "acme",
            ModelKind.ENSEMBLE,
            EnsembleParams(members=[EnsembleMember(model_id="ghost")]),
            status=ModelStatus.ACTIVE,
            model_id="ens",
        )
        orchestrator = ForecastOrchestrator(registry, settings=engine_settings, noise=ZeroNoise())
        config = ForecastConfig(org_id="acme", model_type=ModelType.ENSEMBLE)

        # Act / Assert
        with pytest.raises(ModelRunError) as exc_info:
            orchestrator.generate_forecast(config, sample_transactions, as_of=as_of)

        assert exc_info.value.model_id == "ens"

    def test_expired_deadline(self, orchestrator, sample_transactions, as_of, org_id):
        """Test that an expired deadline fails the request."""
        with pytest.raises(ForecastTimeoutError):
            orchestrator.generate_forecast(
                ForecastConfig(org_id=org_id), sample_transactions, as_of=as_of, deadline=Deadline(0)
            )

    def test_parallel_ensemble(self, engine_settings, seeded_registry, sample_transactions, as_of, org_id):
        """Test that parallel member execution gives the sequential result."""
        config = ForecastConfig(org_id=org_id, horizon_days=10, model_type=ModelType.ENSEMBLE)
        sequential = ForecastOrchestrator(seeded_registry, settings=engine_settings, noise=ZeroNoise())
        parallel_settings = engine_settings.model_copy(update={"ENSEMBLE_PARALLEL": True})
        parallel = ForecastOrchestrator(seeded_registry, settings=parallel_settings, noise=ZeroNoise())

        first = sequential.generate_forecast(config, sample_transactions, as_of=as_of)
        second = parallel.generate_forecast(config, sample_transactions, as_of=as_of)

        assert [p.predicted_value for p in first.forecast] == pytest.approx([p.predicted_value for p in second.forecast])


class TestBuildRunner:
    """Tests for ForecastOrchestrator.build_runner."""

    def test_runner_kinds(self, orchestrator):
        """Test that each model kind maps to its runner."""
        assert isinstance(orchestrator.build_runner("trend_seasonal"), TrendSeasonalRunner)
        assert isinstance(orchestrator.build_runner(ModelKind.ARMA), ArmaRunner)

        ensemble = orchestrator.build_runner("ensemble")
        assert isinstance(ensemble, EnsembleRunner)
        assert ensemble.model_lookup == orchestrator.registry.find


class TestEvaluateModels:
    """Tests for ForecastOrchestrator.evaluate_models."""

    def test_training_models_are_activated(self, orchestrator, seeded_registry, sample_transactions, as_of, org_id):
        """Test that evaluation drives training models to active."""
        # Arrange
        seeded_registry.create_model(org_id, ModelKind.ARMA, ArmaParams(p=1, q=1), model_id="candidate")

        # Act
        evaluations = orchestrator.evaluate_models(org_id, sample_transactions, as_of=as_of)

        # Assert
        assert len(evaluations) == 4
        assert sorted(e.performance.ranking for e in evaluations) == [1, 2, 3, 4]
        assert seeded_registry.get("candidate").status == ModelStatus.ACTIVE

    def test_inactive_models_skipped(self, orchestrator, seeded_registry, sample_transactions, as_of, org_id):
        """Test that inactive models are not evaluated."""
        seeded_registry.update_model(f"{org_id}-arma", status=ModelStatus.INACTIVE)

        evaluations = orchestrator.evaluate_models(org_id, sample_transactions, as_of=as_of)

        assert f"{org_id}-arma" not in [e.model_id for e in evaluations]
        assert seeded_registry.get(f"{org_id}-arma").last_evaluated_at is None


class TestGenerateForecastAsync:
    """Tests for ForecastOrchestrator.generate_forecast_async."""

    @pytest.mark.asyncio
    async def test_without_provider(self, orchestrator, sample_transactions, as_of, org_id):
        """Test the async boundary without economic data."""
        result = await orchestrator.generate_forecast_async(
            ForecastConfig(org_id=org_id, horizon_days=7), sample_transactions, as_of=as_of
        )

        assert len(result.forecast) == 7
        assert result.scenario_impact is None

    @pytest.mark.asyncio
    async def test_with_provider(self, orchestrator, sample_transactions, as_of, org_id):
        """Test that the provider's scenario is applied."""
        result = await orchestrator.generate_forecast_async(
            ForecastConfig(org_id=org_id, horizon_days=7),
            sample_transactions,
            economic_provider=StaticEconomicDataProvider(seed=1),
            as_of=as_of,
        )

        # US GDP growth 2.4% and inflation 3.2%
        assert result.scenario_impact.revenue_multiplier == pytest.approx(1.012)
        assert result.scenario_impact.expense_multiplier == pytest.approx(1.0096)

    @pytest.mark.asyncio
    async def test_explicit_factors_win(self, orchestrator, sample_transactions, as_of, org_id):
        """Test that configured economic factors are not refetched."""
        config = ForecastConfig(org_id=org_id, horizon_days=3, economic_factors=EconomicScenario(gdp_growth=1))

        result = await orchestrator.generate_forecast_async(
            config, sample_transactions, economic_provider=UnreachableProvider(), as_of=as_of
        )

        assert result.scenario_impact.revenue_multiplier == pytest.approx(1.005)

    @pytest.mark.asyncio
    async def test_timeout(self, orchestrator, sample_transactions, as_of, org_id):
        """Test that a slow provider times the request out."""
        with pytest.raises(ForecastTimeoutError) as exc_info:
            await orchestrator.generate_forecast_async(
                ForecastConfig(org_id=org_id),
                sample_transactions,
                economic_provider=SlowProvider(seed=1),
                timeout=0.05,
                as_of=as_of,
            )

        assert exc_info.value.timeout == 0.05
