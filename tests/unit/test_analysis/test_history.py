#!/usr/bin/env python3
"""Tests for bucket history and range slicing."""

import pytest

from homeledger.analysis.history import BucketHistory
from homeledger.analysis.values import AccountAttribute, BucketValues
from homeledger.core.dates import DateRange, FinancialDate
from homeledger.core.money import Money


def _values(cents: int) -> BucketValues:
    values = BucketValues(AccountAttribute)
    values.adjust_money(AccountAttribute.VALUATION, Money.from_cents(cents))
    return values


@pytest.fixture
def transactions(builder):
    ledger = (
        builder.transaction("2024-01-05", "current", "grocer", 1, "groceries")
        .transaction("2024-01-10", "current", "grocer", 2, "groceries")
        .transaction("2024-01-15", "current", "grocer", 3, "groceries")
        .build()
    )
    return ledger.transactions


@pytest.fixture
def history(transactions):
    history = BucketHistory(_values(1000))
    for cents, transaction in zip((900, 700, 400), transactions):
        history.register(transaction, _values(cents))
    return history


@pytest.mark.analysis
class TestBucketHistory:
    """Test registering and reading history."""

    def test_empty_history_is_idle(self):
        history = BucketHistory(_values(1000))
        assert history.is_idle()
        assert history.latest_values() == _values(1000)

    def test_register_stores_frozen_counters(self, transactions):
        history = BucketHistory(BucketValues(AccountAttribute))
        values = _values(500)
        values.set_value(AccountAttribute.VALUEDELTA, Money.from_cents(1))

        stored = history.register(transactions[0], values)
        assert stored.is_frozen
        assert AccountAttribute.VALUEDELTA not in stored
        assert history.values_for(transactions[0]) == stored
        assert history.values_for(transactions[1]) is None

    def test_latest_values_is_mutable_copy(self, history):
        latest = history.latest_values()
        assert latest.money(AccountAttribute.VALUATION) == Money.from_cents(400)
        latest.adjust_money(AccountAttribute.VALUATION, Money.from_cents(1))
        assert history.latest_values().money(AccountAttribute.VALUATION) == Money.from_cents(400)

    def test_reregistering_keeps_position(self, history, transactions):
        history.register(transactions[0], _values(950))
        assert history.transactions() == transactions
        assert history.values_for(transactions[0]).money(AccountAttribute.VALUATION) == Money.from_cents(950)
        assert history.latest_values().money(AccountAttribute.VALUATION) == Money.from_cents(400)


@pytest.mark.analysis
class TestHistorySlicing:
    """Test deriving histories over date ranges."""

    def test_for_date_drops_later_entries(self, history, transactions):
        sliced = BucketHistory.for_date(history, FinancialDate.from_string("2024-01-12"))
        assert sliced.transactions() == transactions[:2]
        assert sliced.base_values.money(AccountAttribute.VALUATION) == Money.from_cents(1000)
        assert sliced.latest_values().money(AccountAttribute.VALUATION) == Money.from_cents(700)

    def test_for_range_folds_earlier_entries_into_base(self, history, transactions):
        sliced = BucketHistory.for_range(history, DateRange.of("2024-01-06", "2024-01-31"))
        assert sliced.transactions() == transactions[1:]
        assert sliced.base_values.money(AccountAttribute.VALUATION) == Money.from_cents(900)
        assert sliced.latest_values().money(AccountAttribute.VALUATION) == Money.from_cents(400)

    def test_range_with_no_entries_is_idle(self, history):
        sliced = BucketHistory.for_range(history, DateRange.of("2024-02-01", "2024-02-28"))
        assert sliced.is_idle()
        assert len(sliced) == 0
        assert sliced.latest_values().money(AccountAttribute.VALUATION) == Money.from_cents(400)

    def test_range_before_history_keeps_base(self, history):
        sliced = BucketHistory.for_date(history, FinancialDate.from_string("2023-12-31"))
        assert sliced.is_idle()
        assert sliced.latest_values().money(AccountAttribute.VALUATION) == Money.from_cents(1000)
