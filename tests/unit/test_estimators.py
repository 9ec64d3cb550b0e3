"""Unit tests for the pluggable risk estimators."""

from datetime import timedelta
from decimal import Decimal

import pytest

from liquiditylink.exceptions import InvalidInputError
from liquiditylink.risk.estimators import (
    ConstantPerformanceEstimator,
    FlatTransactionCost,
    PriceRatioILEstimator,
    TimeDecayILEstimator,
    impermanent_loss_from_price_ratio,
)


class TestImpermanentLossFromPriceRatio:
    """Tests for the closed-form constant-product IL."""

    def test_unchanged_ratio_has_no_loss(self):
        """Test r = 1."""
        assert impermanent_loss_from_price_ratio(Decimal("1")) == Decimal("0")

    def test_four_x_move(self):
        """Test the textbook 4x price move (20% loss)."""
        assert impermanent_loss_from_price_ratio(Decimal("4")) == Decimal("20")

    def test_symmetric_in_direction(self):
        """Test that a 4x drop costs the same as a 4x rise."""
        up = impermanent_loss_from_price_ratio(Decimal("4"))
        down = impermanent_loss_from_price_ratio(Decimal("0.25"))

        assert abs(up - down) < Decimal("1e-20")

    def test_relative_to_initial_ratio(self):
        """Test that the ratio is taken against the deposit-time ratio."""
        assert impermanent_loss_from_price_ratio(Decimal("8"), Decimal("2")) == Decimal("20")

    def test_extreme_ratio_is_capped(self):
        """Test the 100% upper bound."""
        il = impermanent_loss_from_price_ratio(Decimal("1e12"))

        assert Decimal("99") < il <= Decimal("100")

    @pytest.mark.parametrize("ratio", ["0", "-1"])
    def test_non_positive_ratio_rejected(self, ratio):
        """Test that the ratio must be positive."""
        with pytest.raises(InvalidInputError) as exc_info:
            impermanent_loss_from_price_ratio(Decimal(ratio))

        assert exc_info.value.field == "price_ratio"


class TestTimeDecayILEstimator:
    """Tests for the age-based IL estimate."""

    @pytest.mark.parametrize("days,expected", [
        (0, "0"),
        (10, "1.0"),
        (49, "4.9"),
        (150, "15"),
        (400, "15"),
    ])
    def test_linear_then_capped(self, make_position, as_of, days, expected):
        """Test 0.1% per whole day up to 15%."""
        estimator = TimeDecayILEstimator()

        assert estimator.estimate(make_position(days=days), as_of) == Decimal(expected)

    def test_partial_days_truncated(self, make_position, as_of):
        """Test that only whole days count."""
        position = make_position(days=3)
        estimate = TimeDecayILEstimator().estimate(position, as_of + timedelta(hours=12))

        assert estimate == Decimal("0.3")

    def test_future_deposit_is_zero(self, make_position, as_of):
        """Test a deposit timestamp after the evaluation time."""
        position = make_position(days=-5)

        assert TimeDecayILEstimator().estimate(position, as_of) == Decimal("0")

    def test_custom_cap(self, make_position, as_of):
        """Test overriding the rate and cap."""
        estimator = TimeDecayILEstimator(per_day=Decimal("1"), cap=Decimal("5"))

        assert estimator.cap == Decimal("5")
        assert estimator.estimate(make_position(days=30), as_of) == Decimal("5")


class TestPriceRatioILEstimator:
    """Tests for the price-ratio IL estimator."""

    def test_known_position(self, make_position, as_of):
        """Test estimating from a recorded ratio."""
        estimator = PriceRatioILEstimator({"pos-1": "4"})

        assert estimator.estimate(make_position(), as_of) == Decimal("20")
        assert estimator.cap == Decimal("100")

    def test_unknown_position_is_zero(self, make_position, as_of):
        """Test that positions without a ratio have no loss."""
        estimator = PriceRatioILEstimator({})

        assert estimator.estimate(make_position(), as_of) == Decimal("0")


class TestDefaults:
    """Tests for the constant default estimators."""

    def test_performance_defaults(self, make_position, uniswap_pool):
        """Test the fixed performance estimates."""
        estimator = ConstantPerformanceEstimator()
        positions = [make_position()]

        assert estimator.expected_return(positions, [uniswap_pool]) == Decimal("12")
        assert estimator.volatility(positions, [uniswap_pool]) == Decimal("25")
        assert estimator.max_drawdown(positions) == Decimal("15")

    def test_flat_transaction_cost(self, make_position, aerodrome_pool):
        """Test that every move costs the same."""
        estimator = FlatTransactionCost(Decimal("75"))

        assert estimator.estimate(make_position()) == Decimal("75")
        assert estimator.estimate(make_position(), aerodrome_pool) == Decimal("75")
