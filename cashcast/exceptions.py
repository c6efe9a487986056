from typing import Any, TypeAlias

# Type aliases for common types
ErrorDetails: TypeAlias = dict[str, Any]
InvalidFields: TypeAlias = dict[str, Any]
DataDetails: TypeAlias = dict[str, Any]


class CashcastError(Exception):
    """Base exception for all cashcast errors"""

    def __init__(self, message: str, details: ErrorDetails | None = None) -> None:
        self.message = message
        self.details = details or {}
        super().__init__(self.message)


class ValidationError(CashcastError):
    """Exception raised when input validation fails"""

    def __init__(self, message: str, invalid_fields: InvalidFields | None = None) -> None:
        details = {"invalid_fields": invalid_fields or {}}
        super().__init__(message, details)
        self.invalid_fields = invalid_fields or {}


class DataError(CashcastError):
    """Exception raised for data-related issues"""

    def __init__(self, message: str, data_details: DataDetails | None = None) -> None:
        details = {"data_details": data_details or {}}
        super().__init__(message, details)
        self.data_details = data_details or {}


class InsufficientDataError(DataError):
    """Exception raised when a series is shorter than a model's required lookback"""

    def __init__(
        self, message: str, required_length: int, available_length: int, model_id: str | None = None
    ) -> None:
        data_details = {
            "required_length": required_length,
            "available_length": available_length,
            "model_id": model_id,
        }
        super().__init__(message, data_details)
        self.required_length = required_length
        self.available_length = available_length
        self.model_id = model_id


class CalculationError(CashcastError):
    """Exception raised when a calculation fails"""

    pass


class ModelRunError(CalculationError):
    """Exception raised when a runner cannot produce a complete forecast"""

    def __init__(self, message: str, model_id: str, details: ErrorDetails | None = None) -> None:
        super().__init__(message, {"model_id": model_id, **(details or {})})
        self.model_id = model_id


class ModelError(CashcastError):
    """Exception raised for errors tied to a registered model"""

    def __init__(self, message: str, model_id: str, details: ErrorDetails | None = None) -> None:
        model_details = {"model_id": model_id, **(details or {})}
        super().__init__(message, model_details)
        self.model_id = model_id


class ModelNotFoundError(ModelError):
    """Exception raised when a model id is not in the registry"""

    pass


class ModelEvaluationError(ModelError):
    """Exception raised when backtesting or scoring a model fails"""

    pass


class NoSuitableModelError(CashcastError):
    """Exception raised when no active model matches an organization and model type"""

    def __init__(self, message: str, org_id: str, model_type: str, evaluations: list | None = None) -> None:
        super().__init__(message, {"org_id": org_id, "model_type": model_type})
        self.org_id = org_id
        self.model_type = model_type
        # Failed evaluations gathered before giving up, if any
        self.evaluations = evaluations or []


class ForecastTimeoutError(CashcastError):
    """Exception raised when a forecast request runs past its deadline"""

    def __init__(self, message: str, timeout: float | None = None) -> None:
        super().__init__(message, {"timeout": timeout})
        self.timeout = timeout


class EconomicDataError(CashcastError):
    """Exception raised when economic data cannot be fetched or interpreted"""

    def __init__(self, message: str, source: str, details: ErrorDetails | None = None) -> None:
        super().__init__(message, {"source": source, **(details or {})})
        self.source = source
