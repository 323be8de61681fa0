#!/usr/bin/env python3
"""
Tests for analysis report tables and valuation charts.
"""

import json
from decimal import Decimal

import pandas as pd
import pytest

from homeledger.analysis import OwnerKind, build_analysis
from homeledger.analysis.charts import create_valuation_chart, snapshot_dates, valuation_series
from homeledger.analysis.report import analysis_to_dataframe, summary, write_report
from homeledger.analysis.values import CategoryAttribute
from homeledger.core.dates import DateRange, FinancialDate
from homeledger.core.money import Money


def _day(text: str) -> FinancialDate:
    return FinancialDate.from_string(text)


@pytest.fixture
def analysis(scenario_ledger):
    return build_analysis(scenario_ledger)


@pytest.mark.analysis
class TestReportTables:
    """Test DataFrame and summary output."""

    def test_deposit_table(self, analysis):
        df = analysis_to_dataframe(analysis, OwnerKind.DEPOSIT)
        assert list(df.index) == ["Account A", "Account B"]
        assert list(df.columns) == ["valuation", "spend", "value_delta"]
        assert df.loc["Account A", "valuation"] == Decimal("800.00")
        assert df.loc["Account B", "valuation"] == Decimal("200.00")

    def test_columns_follow_attribute_order(self, analysis):
        df = analysis_to_dataframe(analysis, OwnerKind.SECURITY)
        assert list(df.columns)[:3] == ["units", "cost", "invested"]
        assert df.loc["Security S", "units"] == Decimal("10")

    def test_empty_kind(self, analysis):
        df = analysis_to_dataframe(analysis, OwnerKind.LOAN)
        assert df.empty
        assert isinstance(df, pd.DataFrame)

    def test_summary_totals(self, analysis):
        totals = summary(analysis)
        assert totals["accounts"] == 2
        assert totals["holdings"] == 1
        assert totals["account_valuation"] == Money.from_amount(1000)
        assert totals["holding_valuation"] == Money.from_amount(50)
        assert totals["dividends"] == Money.from_amount(50)
        assert totals["category_income"] == Money.from_amount(50)
        assert totals["chargeable_events"] == 0

    def test_write_report(self, analysis, temp_dir):
        written = write_report(analysis, temp_dir / "reports")
        names = [path.name for path in written]

        assert names[-1].endswith("_summary.json")
        assert any(name.endswith("_deposit.csv") for name in names)
        assert any(name.endswith("_security.csv") for name in names)
        assert not any(name.endswith("_loan.csv") for name in names)

        with open(written[-1]) as f:
            data = json.load(f)
        assert data["account_valuation"] == "1000.00"
        assert data["reporting_currency"] == "GBP"

        deposits = pd.read_csv(next(path for path in written if path.name.endswith("_deposit.csv")), index_col=0)
        assert deposits.loc["Account B", "valuation"] == pytest.approx(200.0)


@pytest.mark.analysis
class TestValuationCharts:
    """Test snapshot series and chart output."""

    def test_snapshot_dates(self):
        dates = snapshot_dates(_day("2024-01-15"), _day("2024-04-01"))
        assert [str(d) for d in dates] == ["2024-01-15", "2024-02-15", "2024-03-15", "2024-04-01"]

    def test_snapshot_dates_single_day(self):
        assert snapshot_dates(_day("2024-01-15"), _day("2024-01-15")) == [_day("2024-01-15")]

    def test_valuation_series(self, analysis):
        snapshots = [analysis.new_analysis(_day(text)) for text in ("2024-01-05", "2024-01-08", "2024-01-11")]
        df = valuation_series(snapshots)
        assert list(df.columns) == ["Accounts", "Holdings", "Total"]
        assert list(df["Accounts"]) == [1000.0, 1000.0, 1000.0]
        assert list(df["Holdings"]) == [0.0, 0.0, 50.0]
        assert df["Total"].iloc[-1] == 1050.0

    def test_create_chart(self, analysis, temp_dir):
        snapshots = [analysis.new_analysis(_day("2024-01-08")), analysis]
        output = create_valuation_chart(snapshots, temp_dir / "charts" / "valuation.png")
        assert output.exists()
        assert output.stat().st_size > 0

    def test_chart_needs_snapshots(self, temp_dir):
        with pytest.raises(ValueError, match="No snapshots"):
            create_valuation_chart([], temp_dir / "empty.png")


@pytest.mark.analysis
class TestRangeReports:
    """Income, expense and spend in a range view cover only that range."""

    @pytest.fixture
    def twice_yearly(self, builder):
        for when in ("2024-01-31", "2024-06-30"):
            builder.transaction(when, "employer", "current", "2000.00", "salary").transaction(
                when, "current", "grocer", "100.00", "groceries"
            )
        return build_analysis(builder.build())

    def test_summary_counts_only_the_range(self, twice_yearly):
        june = twice_yearly.new_analysis(DateRange.of("2024-06-01", "2024-06-30"))
        totals = summary(june)

        assert totals["category_income"] == Money.from_amount(2000)
        assert totals["category_expense"] == Money.from_amount(100)
        assert totals["spend"] == Money.from_amount(100)
        assert totals["payee_income"] == Money.from_amount(2000)
        assert totals["payee_expense"] == Money.from_amount(100)
        assert totals["account_valuation"] == Money.from_amount(4800)

    def test_full_analysis_counts_everything(self, twice_yearly):
        totals = summary(twice_yearly)
        assert totals["category_income"] == Money.from_amount(4000)
        assert totals["spend"] == Money.from_amount(200)

    def test_tables_and_category_totals_match_the_range(self, twice_yearly):
        june = twice_yearly.new_analysis(DateRange.of("2024-06-01", "2024-06-30"))

        categories = analysis_to_dataframe(june, OwnerKind.CATEGORY)
        assert categories.loc["Groceries", "expense"] == Decimal("100.00")
        assert categories.loc["Salary", "income"] == Decimal("2000.00")
        deposits = analysis_to_dataframe(june, OwnerKind.DEPOSIT)
        assert deposits.loc["Current Account", "spend"] == Decimal("100.00")
        assert deposits.loc["Current Account", "valuation"] == Decimal("4800.00")

        household = june.ledger.categories["household"]
        assert june.categories.produce_totals()[household].money(CategoryAttribute.EXPENSE) == Money.from_amount(100)
