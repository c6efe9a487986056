from enum import Enum


class ModelKind(str, Enum):
    """Forecasting model families understood by the runners"""

    TREND_SEASONAL = "trend_seasonal"
    ARMA = "arma"
    ENSEMBLE = "ensemble"


class ModelType(str, Enum):
    """Model choice on a forecast request; AUTO lets the selector rank candidates"""

    AUTO = "auto"
    TREND_SEASONAL = "trend_seasonal"
    ARMA = "arma"
    ENSEMBLE = "ensemble"


class ModelStatus(str, Enum):
    """Lifecycle status of a registered model."""

    ACTIVE = "active"
    TRAINING = "training"  # Registered, never successfully evaluated
    INACTIVE = "inactive"  # Excluded until reactivated
    ERROR = "error"  # Last evaluation failed


class TrendDirection(str, Enum):
    """Direction of a forecast point relative to the previous value."""

    UP = "up"
    DOWN = "down"
    STABLE = "stable"


class ScenarioType(str, Enum):
    """Planning posture requested by the caller"""

    CONSERVATIVE = "conservative"
    MODERATE = "moderate"
    AGGRESSIVE = "aggressive"


class VotingStrategy(str, Enum):
    """How ensemble members are combined"""

    WEIGHTED = "weighted"


class Environment(str, Enum):
    DEV = "dev"
    PROD = "prod"
