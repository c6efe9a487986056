"""
Cash flow forecasting and model-evaluation engine.
"""

from .model_registry import ModelRegistry, seed_default_models
from .orchestrator import ForecastOrchestrator
from .selection import ModelSelector

__version__ = "0.1.0"

__all__ = ["ForecastOrchestrator", "ModelRegistry", "ModelSelector", "seed_default_models", "__version__"]
