"""
Unit tests for the scenario primitives.
"""

from datetime import date

import pytest

from cashcast.models import EconomicScenario, ForecastPoint
from cashcast.primitives import apply_economic_scenario, calculate_scenario_impact


def make_point(predicted: float, lower: float, upper: float, confidence: float = 0.9) -> ForecastPoint:
    return ForecastPoint(
        date=date(2024, 1, 2), predicted_value=predicted, confidence=confidence, lower_bound=lower, upper_bound=upper
    )


@pytest.fixture
def reference_scenario():
    return EconomicScenario(gdp_growth=4, inflation_rate=2, market_volatility=10)


class TestCalculateScenarioImpact:
    """Tests for the calculate_scenario_impact function."""

    def test_reference_scenario(self, reference_scenario):
        """Test the multipliers of the reference scenario."""
        impact = calculate_scenario_impact(reference_scenario)

        assert impact.revenue_multiplier == pytest.approx(1.02)
        assert impact.expense_multiplier == pytest.approx(1.006)
        assert impact.cash_flow_adjustment == pytest.approx(-1.0)
        assert impact.confidence_adjustment == pytest.approx(-0.5)

    def test_neutral_scenario(self):
        """Test that an all-zero scenario is neutral."""
        impact = calculate_scenario_impact(EconomicScenario())

        assert impact.revenue_multiplier == 1.0
        assert impact.expense_multiplier == 1.0
        assert impact.confidence_adjustment == 0.0


class TestApplyEconomicScenario:
    """Tests for the apply_economic_scenario function."""

    def test_reference_example(self, reference_scenario):
        """Test the adjusted prediction, band and confidence of the reference example."""
        # Arrange
        forecast = [make_point(1000, 900, 1100, confidence=0.9)]

        # Act
        adjusted, impact = apply_economic_scenario(forecast, reference_scenario)

        # Assert
        point = adjusted[0]
        assert point.predicted_value == pytest.approx(1007.0)
        assert point.lower_bound == pytest.approx(918.0)
        assert point.upper_bound == pytest.approx(1122.0)
        assert point.confidence == pytest.approx(0.4)
        assert impact.revenue_multiplier == pytest.approx(1.02)

    def test_confidence_floor(self):
        """Test that confidence never drops below 0.1."""
        # Arrange
        forecast = [make_point(1000, 900, 1100, confidence=0.9)]

        # Act
        adjusted, _ = apply_economic_scenario(forecast, EconomicScenario(market_volatility=100))

        # Assert
        assert adjusted[0].confidence == pytest.approx(0.1)

    def test_neutral_scenario_keeps_prediction(self):
        """Test that a neutral scenario leaves the forecast unchanged."""
        forecast = [make_point(250, 200, 300)]

        adjusted, _ = apply_economic_scenario(forecast, EconomicScenario())

        assert adjusted[0].predicted_value == pytest.approx(250)
        assert adjusted[0].lower_bound == pytest.approx(200)
        assert adjusted[0].upper_bound == pytest.approx(300)

    def test_band_widened_to_contain_prediction(self):
        """Test that the band still contains a prediction moved outside it."""
        # Arrange
        forecast = [make_point(100, 100, 100, confidence=1.0)]

        # Act
        adjusted, _ = apply_economic_scenario(forecast, EconomicScenario(inflation_rate=100))

        # Assert
        point = adjusted[0]
        assert point.predicted_value == pytest.approx(85.0)
        assert point.lower_bound == pytest.approx(85.0)
        assert point.upper_bound == pytest.approx(100.0)

    def test_negative_prediction(self, reference_scenario):
        """Test that bounds stay ordered for outflows."""
        adjusted, _ = apply_economic_scenario([make_point(-100, -150, -50)], reference_scenario)

        point = adjusted[0]
        assert point.lower_bound <= point.predicted_value <= point.upper_bound

    def test_input_not_mutated(self, reference_scenario):
        """Test that the base forecast is left untouched."""
        forecast = [make_point(1000, 900, 1100)]

        apply_economic_scenario(forecast, reference_scenario)

        assert forecast[0].predicted_value == 1000
