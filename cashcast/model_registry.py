"""
In-memory registry of forecasting models.

Specs are immutable; every write replaces the whole spec for a model id under
that id's lock, so concurrent readers always see a complete spec.
"""

import logging
import threading
import uuid
from collections.abc import Iterable
from datetime import datetime
from typing import Any

from pydantic import ValidationError as PydanticValidationError

from cashcast.exceptions import ModelNotFoundError, ValidationError
from cashcast.models import (
    ArmaParams,
    EnsembleMember,
    EnsembleParams,
    ForecastModelSpec,
    ModelKind,
    ModelParameters,
    ModelPerformance,
    ModelStatus,
    TrendSeasonalParams,
)

logger = logging.getLogger(__name__)

# Status after a successful evaluation, keyed by the current status
_SUCCESS_TRANSITIONS = {
    ModelStatus.TRAINING: ModelStatus.ACTIVE,
    ModelStatus.ACTIVE: ModelStatus.ACTIVE,
    ModelStatus.ERROR: ModelStatus.ACTIVE,
    ModelStatus.INACTIVE: ModelStatus.INACTIVE,
}

# Status after a failed evaluation, keyed by the current status
_FAILURE_TRANSITIONS = {
    ModelStatus.TRAINING: ModelStatus.ERROR,
    ModelStatus.ACTIVE: ModelStatus.ERROR,
    ModelStatus.ERROR: ModelStatus.ERROR,
    ModelStatus.INACTIVE: ModelStatus.INACTIVE,
}


class ModelRegistry:
    """Thread-safe store of ForecastModelSpec records keyed by model id."""

    def __init__(self, models: Iterable[ForecastModelSpec] = ()) -> None:
        self._models: dict[str, ForecastModelSpec] = {}
        self._locks: dict[str, threading.Lock] = {}
        self._registry_lock = threading.Lock()
        for model in models:
            self.register(model)

    def _lock_for(self, model_id: str) -> threading.Lock:
        with self._registry_lock:
            return self._locks.setdefault(model_id, threading.Lock())

    def register(self, model: ForecastModelSpec) -> ForecastModelSpec:
        """
        Add a model to the registry.

        Raises:
            ValidationError: If a model with the same id is already registered
        """
        with self._registry_lock:
            if model.id in self._models:
                raise ValidationError(f"Model '{model.id}' is already registered", {"id": model.id})
            self._models[model.id] = model
            self._locks.setdefault(model.id, threading.Lock())
        logger.debug("Registered %s model %s for org %s", model.kind, model.id, model.org_id)
        return model

    def create_model(
        self,
        org_id: str,
        kind: ModelKind,
        parameters: ModelParameters | dict[str, Any],
        name: str = "",
        accuracy: float = 0.5,
        status: ModelStatus = ModelStatus.TRAINING,
        model_id: str | None = None,
    ) -> ForecastModelSpec:
        """Build, validate and register a new model spec."""
        try:
            model = ForecastModelSpec(
                id=model_id or str(uuid.uuid4()),
                org_id=org_id,
                name=name,
                kind=kind,
                status=status,
                accuracy=accuracy,
                parameters=parameters,
            )
        except PydanticValidationError as e:
            raise ValidationError("Invalid model definition", {"errors": e.errors()}) from e
        return self.register(model)

    def find(self, model_id: str) -> ForecastModelSpec | None:
        return self._models.get(model_id)

    def get(self, model_id: str) -> ForecastModelSpec:
        """
        Get a model by id.

        Raises:
            ModelNotFoundError: If the id is not registered
        """
        model = self._models.get(model_id)
        if model is None:
            raise ModelNotFoundError(f"Model '{model_id}' not found", model_id=model_id)
        return model

    def list_models(
        self,
        org_id: str | None = None,
        status: ModelStatus | None = None,
        kind: ModelKind | None = None,
    ) -> list[ForecastModelSpec]:
        """List models in registration order, optionally filtered."""
        models = list(self._models.values())
        if org_id is not None:
            models = [model for model in models if model.org_id == org_id]
        if status is not None:
            models = [model for model in models if model.status == status]
        if kind is not None:
            models = [model for model in models if model.kind == kind]
        return models

    def update_model(self, model_id: str, **changes: Any) -> ForecastModelSpec:
        """
        Replace a model with a validated copy carrying ``changes``.

        Raises:
            ModelNotFoundError: If the id is not registered
            ValidationError: If the changed spec is invalid
        """
        if "id" in changes and changes["id"] != model_id:
            raise ValidationError("Model id cannot be changed", {"id": changes["id"]})

        with self._lock_for(model_id):
            current = self.get(model_id)
            try:
                updated = ForecastModelSpec.model_validate({**current.model_dump(), **changes})
            except PydanticValidationError as e:
                raise ValidationError(f"Invalid update for model '{model_id}'", {"errors": e.errors()}) from e
            self._models[model_id] = updated
        return updated

    def delete_model(self, model_id: str) -> None:
        with self._registry_lock:
            if model_id not in self._models:
                raise ModelNotFoundError(f"Model '{model_id}' not found", model_id=model_id)
            del self._models[model_id]

    def record_evaluation(
        self, model_id: str, performance: ModelPerformance, evaluated_at: datetime | None = None
    ) -> ForecastModelSpec:
        """
        Store a successful evaluation.

        Overwrites accuracy and performance, stamps last_evaluated_at and moves
        training or error models to active.
        """
        with self._lock_for(model_id):
            current = self.get(model_id)
            status = _SUCCESS_TRANSITIONS[ModelStatus(current.status)]
            updated = current.model_copy(
                update={
                    "accuracy": performance.accuracy,
                    "performance": performance,
                    "status": status.value,
                    "last_evaluated_at": evaluated_at or datetime.now(),
                }
            )
            self._models[model_id] = updated

        if updated.status != current.status:
            logger.info("Model %s moved from %s to %s", model_id, current.status, updated.status)
        return updated

    def record_failure(self, model_id: str, error: dict[str, Any] | None = None) -> ForecastModelSpec:
        """Mark a failed evaluation; training and active models move to error."""
        with self._lock_for(model_id):
            current = self.get(model_id)
            status = _FAILURE_TRANSITIONS[ModelStatus(current.status)]
            updated = current.model_copy(update={"status": status.value, "last_evaluated_at": datetime.now()})
            self._models[model_id] = updated

        logger.warning("Model %s evaluation failed (%s -> %s): %s", model_id, current.status, updated.status, error)
        return updated

    def __len__(self) -> int:
        return len(self._models)

    def __contains__(self, model_id: object) -> bool:
        return model_id in self._models


def seed_default_models(registry: ModelRegistry, org_id: str) -> list[ForecastModelSpec]:
    """
    Register the reference trend-seasonal, ARMA and ensemble models for an org.

    Ids are derived from the org id so seeding several orgs never collides.
    """
    trend_seasonal = registry.create_model(
        org_id=org_id,
        kind=ModelKind.TREND_SEASONAL,
        parameters=TrendSeasonalParams(sequence_length=30),
        name="Trend-Seasonal Cash Flow Model",
        accuracy=0.87,
        status=ModelStatus.ACTIVE,
        model_id=f"{org_id}-trend-seasonal",
    )
    arma = registry.create_model(
        org_id=org_id,
        kind=ModelKind.ARMA,
        parameters=ArmaParams(p=2, q=2, seasonal_period=30),
        name="ARMA Baseline Model",
        accuracy=0.82,
        status=ModelStatus.ACTIVE,
        model_id=f"{org_id}-arma",
    )
    ensemble = registry.create_model(
        org_id=org_id,
        kind=ModelKind.ENSEMBLE,
        parameters=EnsembleParams(
            members=[
                EnsembleMember(model_id=trend_seasonal.id, weight=0.6),
                EnsembleMember(model_id=arma.id, weight=0.4),
            ]
        ),
        name="Ensemble Model",
        accuracy=0.91,
        status=ModelStatus.ACTIVE,
        model_id=f"{org_id}-ensemble",
    )
    return [trend_seasonal, arma, ensemble]
