"""
Unit tests for the variance primitives.
"""

import pandas as pd
import pytest

from cashcast.exceptions import InsufficientDataError, ValidationError
from cashcast.primitives import calculate_variance_analysis, monthly_totals, project_monthly_total

# Seven training transactions (Jan 100, Feb 200, Mar 300) and three held out (Apr 500, May 400)
TRANSACTIONS = [
    {"date": "2024-01-05", "amount": 50},
    {"date": "2024-01-20", "amount": 50},
    {"date": "2024-02-05", "amount": 100},
    {"date": "2024-02-20", "amount": 100},
    {"date": "2024-03-05", "amount": 100},
    {"date": "2024-03-15", "amount": 100},
    {"date": "2024-03-25", "amount": 100},
    {"date": "2024-04-10", "amount": 250},
    {"date": "2024-04-20", "amount": 250},
    {"date": "2024-05-10", "amount": 400},
]


def frame(rows):
    df = pd.DataFrame(rows)
    df["date"] = pd.to_datetime(df["date"])
    return df


class TestMonthlyTotals:
    """Tests for the monthly_totals function."""

    def test_sums_per_month(self):
        """Test that amounts are summed per calendar month in order."""
        totals = monthly_totals(frame(TRANSACTIONS[:7]))

        assert [str(period) for period in totals.index] == ["2024-01", "2024-02", "2024-03"]
        assert totals.tolist() == [100, 200, 300]


class TestProjectMonthlyTotal:
    """Tests for the project_monthly_total function."""

    def test_linear_step(self):
        """Test extrapolation by the average month-over-month step."""
        assert project_monthly_total(frame(TRANSACTIONS[:7])) == pytest.approx(400)

    def test_only_trailing_months(self):
        """Test that months before the trend window are ignored."""
        # Arrange
        rows = [{"date": "2023-06-10", "amount": 5000}, *TRANSACTIONS[:7]]

        # Act
        projected = project_monthly_total(frame(rows), months=3)

        # Assert
        assert projected == pytest.approx(400)

    def test_single_month(self):
        """Test that a single month is carried forward."""
        assert project_monthly_total(frame(TRANSACTIONS[:2])) == pytest.approx(100)

    def test_empty(self):
        """Test that no training data projects zero."""
        assert project_monthly_total(frame([{"date": "2024-01-01", "amount": 1}]).iloc[:0]) == 0.0


class TestCalculateVarianceAnalysis:
    """Tests for the calculate_variance_analysis function."""

    def test_monthly_variance(self):
        """Test per-month variance and the aggregate metrics."""
        # Act
        analysis = calculate_variance_analysis(TRANSACTIONS)

        # Assert
        april, may = analysis.monthly_accuracy
        assert april.month == "2024-04"
        assert april.actual == pytest.approx(500)
        assert april.forecast == pytest.approx(400)
        assert april.variance == pytest.approx(-100)
        assert april.variance_percentage == pytest.approx(-20)
        assert april.mape == pytest.approx(20)
        assert may.variance == pytest.approx(0)
        assert may.mape == pytest.approx(0)

        assert analysis.overall_mape == pytest.approx(10)
        assert analysis.accuracy_percentage == pytest.approx(90)
        assert analysis.rmse == pytest.approx(70.7106781)
        assert analysis.mae == pytest.approx(50)
        assert analysis.test_period == "30% (3 transactions)"
        assert analysis.training_transactions == 7
        assert analysis.test_transactions == 3

    def test_unsorted_input(self):
        """Test that transactions are ordered by date before splitting."""
        analysis = calculate_variance_analysis(list(reversed(TRANSACTIONS)))

        assert [row.month for row in analysis.monthly_accuracy] == ["2024-04", "2024-05"]
        assert analysis.overall_mape == pytest.approx(10)

    def test_zero_actual_month_excluded(self):
        """Test that a month netting to zero is reported but not scored."""
        # Arrange
        transactions = [
            *TRANSACTIONS[:7],
            {"date": "2024-04-10", "amount": 480},
            {"date": "2024-05-10", "amount": 200},
            {"date": "2024-05-20", "amount": -200},
        ]

        # Act
        analysis = calculate_variance_analysis(transactions)

        # Assert
        april, may = analysis.monthly_accuracy
        assert may.actual == 0
        assert may.variance_percentage == 0
        assert analysis.overall_mape == pytest.approx(april.mape)

    def test_accuracy_floor(self):
        """Test that accuracy never drops below zero."""
        # Arrange
        transactions = [*TRANSACTIONS[:7], {"date": "2024-04-10", "amount": 10}, {"date": "2024-04-11", "amount": 10}]

        # Act
        analysis = calculate_variance_analysis(transactions, test_fraction=0.2)

        # Assert
        assert analysis.overall_mape == pytest.approx(1900)
        assert analysis.accuracy_percentage == 0

    def test_too_few_transactions(self):
        """Test that a single transaction cannot be split."""
        with pytest.raises(InsufficientDataError) as exc_info:
            calculate_variance_analysis(TRANSACTIONS[:1])

        assert exc_info.value.data_details["required_length"] == 2
        assert exc_info.value.data_details["available_length"] == 1

    @pytest.mark.parametrize("test_fraction", [0, 1, 1.5])
    def test_invalid_fraction(self, test_fraction):
        """Test that the held-out share must be a proper fraction."""
        with pytest.raises(ValidationError):
            calculate_variance_analysis(TRANSACTIONS, test_fraction=test_fraction)
