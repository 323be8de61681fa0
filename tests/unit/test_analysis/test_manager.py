#!/usr/bin/env python3
"""Tests for the AnalysisManager cache."""

import pytest

from homeledger.analysis import AccountAttribute, AnalysisManager
from homeledger.core.dates import DateRange, FinancialDate
from homeledger.core.money import Money
from tests.fixtures.synthetic_data import scenario_builder


@pytest.fixture
def manager(scenario_ledger):
    return AnalysisManager(scenario_ledger)


@pytest.mark.analysis
class TestAnalysisManager:
    """Test caching of base and derived analyses."""

    def test_base_analysis_built_once(self, manager):
        assert manager.base_analysis() is manager.base_analysis()
        assert manager.get_analysis() is manager.base_analysis()
        assert manager.get_analysis(DateRange.unbounded()) is manager.base_analysis()

    def test_range_requests_are_cached(self, manager):
        date_range = DateRange.of("2024-01-01", "2024-01-08")
        first = manager.get_analysis(date_range)
        second = manager.get_analysis(DateRange.of("2024-01-01", "2024-01-08"))
        assert first is second
        assert manager.cached_ranges() == [date_range]
        assert first.source is manager.base_analysis()

    def test_snapshot_is_open_start_range(self, manager):
        as_of = FinancialDate.from_string("2024-01-08")
        assert manager.get_snapshot(as_of) is manager.get_analysis(DateRange(end=as_of))

    def test_new_data_clears_cache(self, manager):
        manager.get_analysis(DateRange.of("2024-01-01", "2024-01-08"))
        old_base = manager.base_analysis()

        new_ledger = scenario_builder().transaction("2024-01-20", "b", "a", "50.00", "transfer").build()
        manager.set_new_data(new_ledger)

        assert manager.cached_ranges() == []
        assert manager.ledger is new_ledger
        base = manager.base_analysis()
        assert base is not old_base
        assert base.get_bucket(new_ledger.accounts["a"]).values.money(AccountAttribute.VALUATION) == Money.from_amount(
            850
        )

    def test_no_ledger(self):
        manager = AnalysisManager()
        with pytest.raises(ValueError, match="No ledger loaded"):
            manager.get_analysis(DateRange.of("2024-01-01", "2024-01-31"))
