# =============================================================================
# Scenario Primitives
#
# Maps a macroeconomic scenario onto multiplicative adjustments and applies
# them to a base forecast.
#
# Family: scenario
# Version: 1.0
#
# Dependencies:
#   - None (standard Python)
# =============================================================================

from collections.abc import Sequence

from cashcast.models import EconomicScenario, ForecastPoint, ScenarioImpact
from cashcast.primitives.numeric import clamp

GDP_SENSITIVITY = 0.5
INFLATION_SENSITIVITY = 0.3
VOLATILITY_CASH_FLOW_FACTOR = -0.1
VOLATILITY_CONFIDENCE_FACTOR = -0.05
CONFIDENCE_FLOOR = 0.1


def calculate_scenario_impact(scenario: EconomicScenario) -> ScenarioImpact:
    """
    Derive revenue/expense multipliers and adjustments from a scenario.

    Family: scenario
    Version: 1.0
    """
    return ScenarioImpact(
        revenue_multiplier=1 + scenario.gdp_growth / 100 * GDP_SENSITIVITY,
        expense_multiplier=1 + scenario.inflation_rate / 100 * INFLATION_SENSITIVITY,
        cash_flow_adjustment=scenario.market_volatility * VOLATILITY_CASH_FLOW_FACTOR,
        confidence_adjustment=scenario.market_volatility * VOLATILITY_CONFIDENCE_FACTOR,
    )


def adjust_point(point: ForecastPoint, impact: ScenarioImpact) -> ForecastPoint:
    """
    Apply a ScenarioImpact to one forecast point.

    The prediction moves by half the net revenue/expense effect, so a neutral
    scenario leaves it unchanged. The scaled band is widened where needed so
    it still contains the adjusted prediction.

    Family: scenario
    Version: 1.0
    """
    predicted = point.predicted_value * (1 + (impact.revenue_multiplier - impact.expense_multiplier) / 2)
    lower = point.lower_bound * impact.revenue_multiplier
    upper = point.upper_bound * impact.revenue_multiplier

    return point.model_copy(
        update={
            "predicted_value": predicted,
            "confidence": clamp(point.confidence + impact.confidence_adjustment, CONFIDENCE_FLOOR, 1.0),
            "lower_bound": min(lower, upper, predicted),
            "upper_bound": max(lower, upper, predicted),
        }
    )


def apply_economic_scenario(
    forecast: Sequence[ForecastPoint], scenario: EconomicScenario
) -> tuple[list[ForecastPoint], ScenarioImpact]:
    """
    Reweight a base forecast under an economic scenario.

    Family: scenario
    Version: 1.0

    Args:
        forecast: Base forecast points
        scenario: Economic conditions to apply

    Returns:
        The adjusted points and the ScenarioImpact used
    """
    impact = calculate_scenario_impact(scenario)
    return [adjust_point(point, impact) for point in forecast], impact
