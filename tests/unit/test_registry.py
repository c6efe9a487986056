"""
Unit tests for the runner registry.
"""

import pytest

from cashcast.exceptions import ValidationError
from cashcast.models import ModelKind
from cashcast.noise import ZeroNoise
from cashcast.registry import RunnerRegistry, autodiscover_runners
from cashcast.runners import ArmaRunner, EnsembleRunner, TrendSeasonalRunner


class TestRunnerRegistry:
    """Tests for the RunnerRegistry class."""

    def test_autodiscover_runners(self):
        """Test that every built-in runner is registered by kind."""
        # Act
        autodiscover_runners()

        # Assert
        assert set(RunnerRegistry.list_all()) >= {"trend_seasonal", "arma", "ensemble"}
        assert RunnerRegistry.get("trend_seasonal") is TrendSeasonalRunner
        assert RunnerRegistry.get(ModelKind.ARMA) is ArmaRunner
        assert RunnerRegistry.get("ensemble") is EnsembleRunner

    def test_get_unknown_kind(self):
        """Test getting an unregistered kind."""
        assert RunnerRegistry.get("lstm") is None

    def test_create_passes_kwargs(self):
        """Test creating a runner instance with constructor arguments."""
        # Arrange
        autodiscover_runners()
        noise = ZeroNoise()

        # Act
        runner = RunnerRegistry.create("ensemble", noise=noise, parallel=True, max_workers=2)

        # Assert
        assert isinstance(runner, EnsembleRunner)
        assert runner.noise is noise
        assert runner.parallel is True
        assert runner.max_workers == 2

    def test_create_unknown_kind(self):
        """Test that creating an unknown kind raises ValidationError."""
        with pytest.raises(ValidationError):
            RunnerRegistry.create("lstm")

    def test_runner_info(self):
        """Test runner metadata."""
        info = ArmaRunner.get_info()

        assert info["name"] == "arma"
        assert info["kind"] == "arma"
        assert info["version"] == "1.0"
