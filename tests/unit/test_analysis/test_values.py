#!/usr/bin/env python3
"""Tests for bucket attributes and the typed value store."""

import pytest

from homeledger.analysis.values import (
    AccountAttribute,
    BucketSnapshot,
    BucketValues,
    SecurityAttribute,
    ValueKind,
)
from homeledger.core.dates import FinancialDate
from homeledger.core.errors import AnalysisLogicError
from homeledger.core.money import Money
from homeledger.core.units import Price, Rate, Units


@pytest.mark.analysis
class TestAttributes:
    """Test attribute declarations."""

    def test_attribute_metadata(self):
        assert AccountAttribute.VALUATION.label == "valuation"
        assert AccountAttribute.VALUATION.kind is ValueKind.MONEY
        assert AccountAttribute.VALUATION.is_counter
        assert not AccountAttribute.VALUEDELTA.is_counter
        assert SecurityAttribute.UNITS.kind is ValueKind.UNITS
        assert not SecurityAttribute.PRICE.is_counter


@pytest.mark.analysis
class TestBucketValues:
    """Test typed reads and writes."""

    def test_missing_money_and_units_read_as_zero(self):
        values = BucketValues(SecurityAttribute)
        assert values.money(SecurityAttribute.COST) == Money.zero()
        assert values.units(SecurityAttribute.UNITS) == Units.zero()
        assert values.price(SecurityAttribute.PRICE) is None
        assert values.get_value(SecurityAttribute.COST) is None

    def test_set_value_enforces_kind(self):
        values = BucketValues(AccountAttribute)
        values.set_value(AccountAttribute.RATE, Rate.from_percentage(2))
        values.set_value(AccountAttribute.MATURITY, FinancialDate.from_string("2025-01-01"))
        with pytest.raises(TypeError, match="holds MONEY values"):
            values.set_value(AccountAttribute.VALUATION, 100)

    def test_typed_accessor_checks_kind(self):
        values = BucketValues(SecurityAttribute)
        with pytest.raises(TypeError):
            values.money(SecurityAttribute.UNITS)

    def test_foreign_attribute_rejected(self):
        values = BucketValues(AccountAttribute)
        with pytest.raises(TypeError, match="is not a AccountAttribute"):
            values.set_value(SecurityAttribute.COST, Money.zero())

    def test_adjust_money_skips_zero_delta(self):
        values = BucketValues(AccountAttribute)
        values.adjust_money(AccountAttribute.SPEND, Money.zero())
        assert AccountAttribute.SPEND not in values

        values.adjust_money(AccountAttribute.SPEND, Money.from_cents(250))
        values.adjust_money(AccountAttribute.SPEND, Money.from_cents(-50))
        assert values.money(AccountAttribute.SPEND) == Money.from_cents(200)

    def test_adjust_units(self):
        values = BucketValues(SecurityAttribute)
        values.adjust_units(SecurityAttribute.UNITS, Units.from_value(10))
        values.adjust_units(SecurityAttribute.UNITS, Units.from_value("-2.5"))
        assert values.units(SecurityAttribute.UNITS) == Units.from_value("7.5")

    def test_frozen_values_reject_writes(self):
        values = BucketValues(AccountAttribute)
        values.adjust_money(AccountAttribute.VALUATION, Money.from_cents(100))
        frozen = values.frozen()

        assert frozen.is_frozen
        assert frozen == values
        with pytest.raises(AnalysisLogicError):
            frozen.adjust_money(AccountAttribute.VALUATION, Money.from_cents(1))
        with pytest.raises(AnalysisLogicError):
            frozen.remove(AccountAttribute.VALUATION)

        thawed = frozen.copy()
        thawed.adjust_money(AccountAttribute.VALUATION, Money.from_cents(1))
        assert frozen.money(AccountAttribute.VALUATION) == Money.from_cents(100)

    def test_counters_drop_derived_attributes(self):
        values = BucketValues(SecurityAttribute)
        values.adjust_money(SecurityAttribute.COST, Money.from_cents(100))
        values.set_value(SecurityAttribute.PRICE, Price.from_value("1.50"))
        counters = values.counters()
        assert SecurityAttribute.COST in counters
        assert SecurityAttribute.PRICE not in counters

    def test_is_active(self):
        values = BucketValues(SecurityAttribute)
        assert not values.is_active()
        values.set_value(SecurityAttribute.COST, Money.zero())
        values.set_value(SecurityAttribute.VALUATION, Money.from_cents(100))
        assert not values.is_active()
        values.adjust_units(SecurityAttribute.UNITS, Units.from_value(1))
        assert values.is_active()

    def test_to_dict_uses_labels_in_declaration_order(self):
        values = BucketValues(AccountAttribute)
        values.adjust_money(AccountAttribute.SPEND, Money.from_cents(5))
        values.adjust_money(AccountAttribute.VALUATION, Money.from_cents(10))
        assert list(values.to_dict()) == ["valuation", "spend"]


@pytest.mark.analysis
class TestBucketSnapshot:
    """Test delta queries between current and base values."""

    def test_deltas(self):
        base = BucketValues(SecurityAttribute)
        base.adjust_money(SecurityAttribute.COST, Money.from_cents(100))
        base.adjust_units(SecurityAttribute.UNITS, Units.from_value(10))
        current = base.copy()
        current.adjust_money(SecurityAttribute.COST, Money.from_cents(50))
        current.adjust_units(SecurityAttribute.UNITS, Units.from_value(-4))

        snapshot = BucketSnapshot(current=current.frozen(), base=base.frozen())
        assert snapshot.money_delta(SecurityAttribute.COST) == Money.from_cents(50)
        assert snapshot.units_delta(SecurityAttribute.UNITS) == Units.from_value(-4)
        assert snapshot.money_delta(SecurityAttribute.GAINS).is_zero()
