#!/usr/bin/env python3
"""Tests for bucket helpers and bucket lists."""

import pytest

from homeledger.analysis import build_analysis
from homeledger.analysis.buckets import TaxBasis, is_reversed, tax_basis_for
from homeledger.analysis.registry import OwnerKind, owner_kind
from homeledger.analysis.values import CategoryAttribute
from homeledger.core.money import Money
from homeledger.ledger import CategoryClass


@pytest.fixture
def ledger(builder):
    builder.account("isa", "deposit", parent="bank", tax_free=True)
    return (
        builder.transaction("2024-01-02", "current", "grocer", 10, "groceries")
        .transaction("2024-01-03", "grocer", "current", 5, "groceries")
        .transaction("2024-01-04", "employer", "current", 100, "salary")
        .transaction("2024-01-05", "current", "employer", 20, "salary")
        .build()
    )


@pytest.mark.analysis
class TestTaxBasis:
    """Test category to tax basis mapping."""

    def test_category_classes_map_to_bases(self, ledger):
        assert tax_basis_for(ledger.categories["salary"]) is TaxBasis.SALARY
        assert tax_basis_for(ledger.categories["groceries"]) is TaxBasis.EXPENSE
        assert tax_basis_for(ledger.singular_category(CategoryClass.TAXCREDIT)) is TaxBasis.TAXPAID

    def test_unmapped_classes_are_other_income(self, ledger):
        assert tax_basis_for(ledger.categories["transfer"]) is TaxBasis.OTHERINCOME

    def test_tax_free_accounts_switch_basis(self, ledger):
        isa = ledger.accounts["isa"]
        assert tax_basis_for(ledger.categories["interest"], isa) is TaxBasis.TAXFREEINTEREST
        assert tax_basis_for(ledger.categories["dividend"], isa) is TaxBasis.TAXFREEDIVIDEND
        assert tax_basis_for(ledger.categories["salary"], isa) is TaxBasis.SALARY
        assert tax_basis_for(ledger.categories["interest"], ledger.accounts["current"]) is TaxBasis.INTEREST

    def test_display_name(self):
        assert str(TaxBasis.TAXFREEINTEREST) == "Taxfreeinterest"


@pytest.mark.analysis
class TestReversal:
    """Test refund and repayment detection."""

    def test_expense_paid_to_payee_is_natural(self, ledger):
        assert not is_reversed(ledger.transactions[0])

    def test_expense_paid_by_payee_is_refund(self, ledger):
        assert is_reversed(ledger.transactions[1])

    def test_income_from_payee_is_natural(self, ledger):
        assert not is_reversed(ledger.transactions[2])

    def test_income_paid_to_payee_is_repayment(self, ledger):
        assert is_reversed(ledger.transactions[3])


@pytest.mark.analysis
class TestOwnerKind:
    """Test which bucket list an owner belongs in."""

    @pytest.mark.parametrize(
        "account_id,kind",
        [
            ("current", OwnerKind.DEPOSIT),
            ("card", OwnerKind.DEPOSIT),
            ("grocer", OwnerKind.PAYEE),
            ("employer", OwnerKind.PAYEE),
            ("bank", OwnerKind.PAYEE),
            ("acme", OwnerKind.SECURITY),
            ("broker", OwnerKind.PORTFOLIO),
        ],
    )
    def test_accounts(self, ledger, account_id, kind):
        assert owner_kind(ledger.accounts[account_id]) is kind

    def test_categories_and_bases(self, ledger):
        assert owner_kind(ledger.categories["salary"]) is OwnerKind.CATEGORY
        assert owner_kind(TaxBasis.EXPENSE) is OwnerKind.TAXBASIS

    def test_unknown_owner(self):
        with pytest.raises(TypeError, match="cannot own a bucket"):
            owner_kind("current")


@pytest.mark.analysis
class TestCategoryTotals:
    """Test parent roll-ups of category buckets."""

    def test_children_roll_up_to_parent(self, builder):
        analysis = build_analysis(
            builder.transaction("2024-01-02", "current", "grocer", "12.50", "groceries")
            .transaction("2024-01-03", "current", "utility", "30.00", "utilities")
            .transaction("2024-01-04", "grocer", "current", "2.50", "groceries")
            .build()
        )
        totals = analysis.categories.produce_totals()
        household = analysis.ledger.categories["household"]

        assert set(totals) == {household, None}
        assert totals[household].money(CategoryAttribute.EXPENSE) == Money.from_amount("42.50")
        assert totals[household].money(CategoryAttribute.INCOME) == Money.from_amount("2.50")
        assert totals[None].money(CategoryAttribute.DELTA) == Money.from_amount("-40.00")

    def test_grandchildren_roll_up_to_every_ancestor(self, builder):
        analysis = build_analysis(
            builder.category("fruit", "expense", parent="groceries")
            .transaction("2024-01-02", "current", "grocer", "8.00", "fruit")
            .transaction("2024-01-03", "current", "grocer", "12.00", "groceries")
            .build()
        )
        totals = analysis.categories.produce_totals()
        categories = analysis.ledger.categories

        assert set(totals) == {categories["groceries"], categories["household"], None}
        assert totals[categories["groceries"]].money(CategoryAttribute.EXPENSE) == Money.from_amount(20)
        assert totals[categories["household"]].money(CategoryAttribute.EXPENSE) == Money.from_amount(20)
        assert totals[None].money(CategoryAttribute.EXPENSE) == Money.from_amount(20)

    def test_empty_analysis_has_no_totals(self, builder):
        assert build_analysis(builder.build()).categories.produce_totals() == {}
