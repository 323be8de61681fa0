#!/usr/bin/env python3
"""Tests for Money primitive type."""

from decimal import Decimal

import pytest

from homeledger.core.money import Money


class TestMoneyConstruction:
    """Test Money class construction."""

    @pytest.mark.currency
    def test_from_cents(self):
        """Test creating Money from minor units."""
        m = Money.from_cents(1234)
        assert m.to_cents() == 1234

    @pytest.mark.currency
    @pytest.mark.parametrize(
        "amount,expected_cents",
        [
            ("12.34", 1234),
            ("£12.34", 1234),
            ("£1,234.56", 123456),
            ("-45.99", -4599),
            ("0.005", 1),
            (12, 1200),
        ],
        ids=["plain", "symbol", "thousands", "negative", "half_up", "integer"],
    )
    def test_from_amount(self, amount, expected_cents):
        """Test parsing major-unit amounts."""
        assert Money.from_amount(amount).to_cents() == expected_cents

    @pytest.mark.currency
    def test_from_amount_rejects_garbage(self):
        """Test that non-numeric strings raise ValueError."""
        with pytest.raises(ValueError, match="Invalid amount"):
            Money.from_amount("twelve pounds")

    @pytest.mark.currency
    def test_to_decimal(self):
        """Test exact Decimal conversion."""
        assert Money.from_cents(-4599).to_decimal() == Decimal("-45.99")


class TestMoneyArithmetic:
    """Test Money arithmetic operations."""

    @pytest.mark.currency
    def test_addition_and_subtraction(self):
        a = Money.from_cents(1000)
        b = Money.from_cents(250)
        assert (a + b).to_cents() == 1250
        assert (a - b).to_cents() == 750
        assert (-a).to_cents() == -1000

    @pytest.mark.currency
    def test_multiplication(self):
        """Test multiplying Money by scalar."""
        assert (Money.from_cents(50) * 3).to_cents() == 150

    @pytest.mark.currency
    def test_sum_with_zero_start(self):
        """Test summing Money values from a zero start."""
        total = sum([Money.from_cents(1), Money.from_cents(2)], Money.zero())
        assert total == Money.from_cents(3)


class TestMoneyApportionment:
    """Test weighted and ratio apportionment with half-up rounding."""

    @pytest.mark.currency
    def test_value_at_weight(self):
        """A third of a pound rounds to 33 pence."""
        assert Money.from_cents(100).value_at_weight(1, 3) == Money.from_cents(33)
        assert Money.from_cents(200).value_at_weight(1, 3) == Money.from_cents(67)

    @pytest.mark.currency
    def test_value_at_weight_with_money_weights(self):
        cost = Money.from_amount(10000)
        share = cost.value_at_weight(Money.from_amount(4000), Money.from_amount(24000))
        assert share == Money.from_cents(166667)

    @pytest.mark.currency
    def test_value_at_weight_zero_denominator(self):
        """Test that a zero total weight yields zero."""
        assert Money.from_cents(500).value_at_weight(1, 0).is_zero()

    @pytest.mark.currency
    def test_value_at_ratio_and_dilution(self):
        assert Money.from_cents(1000).value_at_ratio(Decimal("0.8")) == Money.from_cents(800)
        assert Money.from_cents(1001).diluted(Decimal("0.5")) == Money.from_cents(501)

    @pytest.mark.currency
    def test_divide(self):
        assert Money.from_cents(2000).divide(4) == Money.from_cents(500)
        assert Money.from_cents(1000).divide(3) == Money.from_cents(333)


class TestMoneyComparison:
    """Test Money comparison operations."""

    @pytest.mark.currency
    def test_equality(self):
        """Test Money equality."""
        assert Money.from_cents(100) == Money.from_cents(100)
        assert Money.from_cents(100) != Money.from_cents(50)

    @pytest.mark.currency
    def test_comparison(self):
        """Test Money ordering."""
        small = Money.from_cents(50)
        large = Money.from_cents(100)

        assert small < large
        assert large > small
        assert small <= Money.from_cents(50)
        assert large >= Money.from_cents(100)

    @pytest.mark.currency
    def test_sign_predicates(self):
        assert Money.zero().is_zero()
        assert Money.from_cents(-1).is_nonzero()
        assert not Money.from_cents(-1).is_positive()
        assert Money.from_cents(-1234).abs() == Money.from_cents(1234)


class TestMoneyFormatting:
    """Test string formatting."""

    @pytest.mark.currency
    @pytest.mark.parametrize(
        "cents,currency,expected",
        [
            (123456, "GBP", "£1,234.56"),
            (-4599, "GBP", "-£45.99"),
            (5, "USD", "$0.05"),
            (100, "CHF", "CHF 1.00"),
        ],
        ids=["gbp", "negative", "usd", "unknown_currency"],
    )
    def test_format(self, cents, currency, expected):
        assert Money.from_cents(cents).format(currency) == expected

    @pytest.mark.currency
    def test_str_has_no_symbol(self):
        assert str(Money.from_cents(-4599)) == "-45.99"


class TestMoneyImmutability:
    """Test Money immutability."""

    @pytest.mark.currency
    def test_frozen_dataclass(self):
        """Test Money is immutable."""
        m = Money.from_cents(100)
        with pytest.raises(AttributeError):
            m.cents = 200  # type: ignore
