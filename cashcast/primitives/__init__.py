# primitives/__init__.py
# Import and expose all primitives for easy access

# Numeric primitives
from .numeric import clamp, relative_change, safe_divide

# Preprocessing primitives
from .preprocessing import build_daily_net_flow, coerce_transactions, require_history, series_values

# Time Series primitives
from .time_series import (
    calculate_autoregressive,
    calculate_moving_average,
    calculate_normalized_trend,
    calculate_seasonality,
    classify_trend,
)

# Backtest primitives
from .backtest import (
    calculate_test_length,
    estimate_arma_step,
    estimate_single_step,
    estimate_trend_step,
    run_backtest,
)

# Evaluation primitives
from .evaluation import calculate_mape, compare_performance, evaluate_backtest, rank_performances

# Scenario primitives
from .scenario import adjust_point, apply_economic_scenario, calculate_scenario_impact

# Runway primitives
from .runway import calculate_runway, classify_runway

# Variance primitives
from .variance import calculate_variance_analysis, monthly_totals, project_monthly_total

__all__ = [
    # Numeric primitives
    "clamp",
    "relative_change",
    "safe_divide",
    # Preprocessing primitives
    "build_daily_net_flow",
    "coerce_transactions",
    "require_history",
    "series_values",
    # Time Series primitives
    "calculate_autoregressive",
    "calculate_moving_average",
    "calculate_normalized_trend",
    "calculate_seasonality",
    "classify_trend",
    # Backtest primitives
    "calculate_test_length",
    "estimate_arma_step",
    "estimate_single_step",
    "estimate_trend_step",
    "run_backtest",
    # Evaluation primitives
    "calculate_mape",
    "compare_performance",
    "evaluate_backtest",
    "rank_performances",
    # Scenario primitives
    "adjust_point",
    "apply_economic_scenario",
    "calculate_scenario_impact",
    # Runway primitives
    "calculate_runway",
    "classify_runway",
    # Variance primitives
    "calculate_variance_analysis",
    "monthly_totals",
    "project_monthly_total",
]
