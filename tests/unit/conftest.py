"""
Common fixtures for all tests in the cashcast package.
"""

import math
from datetime import date, timedelta

import pytest

from cashcast.config import EngineSettings
from cashcast.model_registry import ModelRegistry, seed_default_models
from cashcast.models import Transaction
from cashcast.noise import ZeroNoise
from cashcast.orchestrator import ForecastOrchestrator

ORG_ID = "org-test"


@pytest.fixture
def org_id():
    """Fixture providing the organization id used by the seeded registry."""
    return ORG_ID


@pytest.fixture
def as_of():
    """Fixture providing the first day after the history window."""
    return date(2024, 6, 1)


@pytest.fixture
def sample_transactions(as_of):
    """Fixture providing 400 days of positive daily transactions with a monthly cycle."""
    start = as_of - timedelta(days=400)
    return [
        Transaction(date=start + timedelta(days=i), amount=1000 + 100 * math.sin(2 * math.pi * i / 30) + i)
        for i in range(400)
    ]


@pytest.fixture
def rising_series():
    """Fixture providing a strictly increasing numeric series."""
    return [float(v) for v in range(1, 11)]


@pytest.fixture
def seeded_registry():
    """Fixture providing a registry seeded with the default models."""
    registry = ModelRegistry()
    seed_default_models(registry, ORG_ID)
    return registry


@pytest.fixture
def engine_settings():
    """Fixture providing engine settings with defaults."""
    return EngineSettings(RANDOM_SEED=7, FORECAST_TIMEOUT_SECONDS=None, ENSEMBLE_PARALLEL=False)


@pytest.fixture
def orchestrator(seeded_registry, engine_settings):
    """Fixture providing a deterministic orchestrator."""
    return ForecastOrchestrator(seeded_registry, settings=engine_settings, noise=ZeroNoise())
