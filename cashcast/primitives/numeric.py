"""
Numeric operations primitives.
=============================================================================

Small numeric helpers shared by the forecasting primitives and runners.

Dependencies:
  - numpy as np
"""

import numpy as np

from cashcast.exceptions import ValidationError


def safe_divide(numerator: float, denominator: float, default_value: float | None = None) -> float | None:
    """
    Safely divide two numbers, handling zero denominator cases.

    Family: numeric
    Version: 1.0

    Args:
        numerator: The numerator value
        denominator: The denominator value
        default_value: Value to return if denominator is zero

    Returns:
        The division result, or default_value if denominator is zero

    Raises:
        ValidationError: If inputs are not numeric
    """
    try:
        numerator = float(numerator)
        denominator = float(denominator)
    except (TypeError, ValueError) as exc:
        raise ValidationError(
            "Both numerator and denominator must be numeric",
            {"numerator": numerator, "denominator": denominator},
        ) from exc

    if denominator == 0 or np.isnan(denominator):
        return default_value

    return numerator / denominator


def clamp(value: float, lower: float, upper: float) -> float:
    """
    Clamp a value into the closed interval [lower, upper].

    Family: numeric
    Version: 1.0

    Raises:
        ValidationError: If lower is greater than upper
    """
    if lower > upper:
        raise ValidationError("lower must not exceed upper", {"lower": lower, "upper": upper})
    return float(min(max(value, lower), upper))


def relative_change(current_value: float, reference_value: float) -> float:
    """
    Relative change of current_value against reference_value.

    Falls back to the absolute difference when the reference is zero so that a
    move away from zero still registers a direction.

    Family: numeric
    Version: 1.0
    """
    change = safe_divide(current_value - reference_value, abs(reference_value))
    if change is None:
        return float(current_value - reference_value)
    return change
