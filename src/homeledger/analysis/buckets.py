#!/usr/bin/env python3
"""
Analysis Buckets

Per-owner accumulators of typed financial attributes. A bucket is created
lazily the first time the processor touches its owner, mutated only during
the processing pass and frozen afterwards. Derived buckets replay a slice of
their source bucket's history rather than reprocessing transactions.

Bucket kinds:
- AccountBucket: deposit, cash and loan balances
- SecurityBucket: units, cost basis, gains and dividends of a holding
- PortfolioBucket: totals over a portfolio's holdings
- PayeeBucket: income from and expense to a payee
- CategoryBucket: income and expense per transaction category
- TaxBasisBucket: gross, nett and tax credit per tax basis
"""

import logging
from enum import Enum
from typing import TYPE_CHECKING, Any

from ..core.dates import DateRange, FinancialDate
from ..core.money import Money
from ..core.units import Units
from ..ledger.models import Account, CategoryClass, Transaction, TransactionCategory
from .history import BucketHistory
from .values import (
    AccountAttribute,
    BucketSnapshot,
    BucketValues,
    CategoryAttribute,
    PayeeAttribute,
    SecurityAttribute,
    TaxBasisAttribute,
)

if TYPE_CHECKING:
    from .registry import Analysis

logger = logging.getLogger(__name__)


class TaxBasis(Enum):
    """Tax treatment groupings for income and expense."""

    SALARY = "salary"
    RENTAL = "rental"
    INTEREST = "interest"
    TAXFREEINTEREST = "taxfreeinterest"
    DIVIDEND = "dividend"
    TAXFREEDIVIDEND = "taxfreedividend"
    CAPITALGAINS = "capitalgains"
    TAXFREEGAINS = "taxfreegains"
    TAXABLEGAINS = "taxablegains"
    TAXPAID = "taxpaid"
    OTHERINCOME = "otherincome"
    EXPENSE = "expense"

    def __str__(self) -> str:
        return self.name.title()


_CATEGORY_TAX_BASIS = {
    CategoryClass.SALARY: TaxBasis.SALARY,
    CategoryClass.RENTALINCOME: TaxBasis.RENTAL,
    CategoryClass.ROOMRENTALINCOME: TaxBasis.RENTAL,
    CategoryClass.INTEREST: TaxBasis.INTEREST,
    CategoryClass.DIVIDEND: TaxBasis.DIVIDEND,
    CategoryClass.CAPITALGAIN: TaxBasis.CAPITALGAINS,
    CategoryClass.TAXFREEGAIN: TaxBasis.TAXFREEGAINS,
    CategoryClass.TAXABLEGAIN: TaxBasis.TAXABLEGAINS,
    CategoryClass.TAXCREDIT: TaxBasis.TAXPAID,
    CategoryClass.TAXRELIEF: TaxBasis.TAXPAID,
    CategoryClass.EXPENSE: TaxBasis.EXPENSE,
    CategoryClass.LOANINTERESTCHARGED: TaxBasis.EXPENSE,
    CategoryClass.WRITEOFF: TaxBasis.EXPENSE,
}

_TAX_FREE_BASIS = {
    TaxBasis.INTEREST: TaxBasis.TAXFREEINTEREST,
    TaxBasis.DIVIDEND: TaxBasis.TAXFREEDIVIDEND,
    TaxBasis.CAPITALGAINS: TaxBasis.TAXFREEGAINS,
}


def tax_basis_for(category: TransactionCategory, account: Account | None = None) -> TaxBasis:
    """Tax basis of a category, switched to the tax-free variant for tax-free accounts."""
    basis = _CATEGORY_TAX_BASIS.get(category.category_class, TaxBasis.OTHERINCOME)
    if account is not None and account.tax_free:
        return _TAX_FREE_BASIS.get(basis, basis)
    return basis


def is_reversed(transaction: Transaction) -> bool:
    """
    True when a transaction runs against its category's natural direction.

    An expense paid by a payee is a refund; income paid to a payee is a
    repayment.
    """
    if transaction.category.is_expense:
        return transaction.debit.is_payee
    return transaction.credit.is_payee


class AnalysisBucket:
    """Base class for all bucket kinds."""

    attribute_type: type[Enum]

    def __init__(
        self,
        owner: Any,
        analysis: "Analysis",
        history: BucketHistory | None = None,
        source: "AnalysisBucket | None" = None,
    ) -> None:
        self.owner = owner
        self.analysis = analysis
        self.source = source
        self.history = history if history is not None else BucketHistory(self.initial_values())
        self.values = self.history.latest_values()
        self.base_values = self.history.base_values.copy()

    def initial_values(self) -> BucketValues:
        """Values before any transaction."""
        return BucketValues(self.attribute_type)

    @classmethod
    def derive(cls, source: "AnalysisBucket", analysis: "Analysis", date_range: DateRange) -> "AnalysisBucket":
        """New bucket over the part of the source's history within a range."""
        history = BucketHistory.for_range(source.history, date_range)
        return cls(source.owner, analysis, history, source)

    @property
    def name(self) -> str:
        return str(self.owner)

    def register(self, transaction: Transaction) -> BucketValues:
        """Record the current values against a transaction."""
        return self.history.register(transaction, self.values)

    def get_value(self, attribute: Any) -> Any:
        return self.values.get_value(attribute)

    def snapshot(self) -> BucketSnapshot:
        """Immutable (current, base) pair for delta queries."""
        return BucketSnapshot(current=self.values.frozen(), base=self.base_values.frozen())

    def period_values(self) -> BucketValues:
        """Values for reporting, with flow counters limited to this bucket's window."""
        return self.snapshot().period_values()

    def is_active(self) -> bool:
        return self.values.is_active()

    def is_idle(self) -> bool:
        return self.history.is_idle()

    def calculate_derived(self, as_of: FinancialDate | None, base_as_of: FinancialDate | None) -> None:
        """Compute derived attributes at the cut-off."""

    def freeze(self) -> None:
        self.values = self.values.frozen()
        self.base_values = self.base_values.frozen()

    def _money_delta(self, attribute: Any) -> Money:
        return self.values.money(attribute) - self.base_values.money(attribute)

    def __repr__(self) -> str:
        return f"{type(self).__name__}({self.name})"


class AccountBucket(AnalysisBucket):
    """Balance of a deposit, cash, credit card or loan account."""

    attribute_type = AccountAttribute

    def initial_values(self) -> BucketValues:
        values = BucketValues(AccountAttribute)
        if self.owner.opening_balance is not None:
            values.adjust_money(AccountAttribute.VALUATION, self.owner.opening_balance)
        if self.owner.maturity is not None:
            values.set_value(AccountAttribute.MATURITY, self.owner.maturity)
        if self.owner.rate is not None:
            values.set_value(AccountAttribute.RATE, self.owner.rate)
        return values

    def _is_foreign(self) -> bool:
        return self.owner.is_foreign(self.analysis.reporting_currency)

    @property
    def valuation(self) -> Money:
        return self.values.money(AccountAttribute.VALUATION)

    def adjust_for_debit(self, transaction: Transaction) -> None:
        """Amount leaves the account."""
        self.values.adjust_money(AccountAttribute.SPEND, transaction.amount)
        self._adjust_valuation(transaction, -transaction.amount)

    def adjust_for_credit(self, transaction: Transaction) -> None:
        """Amount arrives in the account."""
        self._adjust_valuation(transaction, transaction.amount)

    def _adjust_valuation(self, transaction: Transaction, delta: Money) -> None:
        self.values.adjust_money(AccountAttribute.VALUATION, delta)
        if self._is_foreign():
            rate = self.analysis.rates.require_rate(self.owner.currency, transaction.date)
            self.values.adjust_money(AccountAttribute.FOREIGNVALUE, rate.to_foreign(delta))
        self.register(transaction)

    def calculate_derived(self, as_of: FinancialDate | None, base_as_of: FinancialDate | None) -> None:
        self.values.set_value(AccountAttribute.VALUEDELTA, self._money_delta(AccountAttribute.VALUATION))

        if not self._is_foreign() or as_of is None:
            return
        rate = self.analysis.rates.latest_rate(self.owner.currency, as_of)
        if rate is None:
            logger.warning(f"No {self.owner.currency} rate on or before {as_of}; {self.name} not revalued")
            return
        local = rate.to_local(self.values.money(AccountAttribute.FOREIGNVALUE))
        self.values.set_value(AccountAttribute.EXCHANGERATE, rate)
        self.values.set_value(AccountAttribute.LOCALVALUE, local)
        self.values.set_value(AccountAttribute.CURRENCYFLUCT, local - self.valuation)


class SecurityBucket(AnalysisBucket):
    """Units, cost basis, investment, realised gains and dividends of one holding."""

    attribute_type = SecurityAttribute

    @property
    def units(self) -> Units:
        return self.values.units(SecurityAttribute.UNITS)

    @property
    def cost(self) -> Money:
        return self.values.money(SecurityAttribute.COST)

    @property
    def invested(self) -> Money:
        return self.values.money(SecurityAttribute.INVESTED)

    def adjust_units(self, delta: Units) -> None:
        self.values.adjust_units(SecurityAttribute.UNITS, delta)

    def adjust_cost(self, delta: Money) -> None:
        self.values.adjust_money(SecurityAttribute.COST, delta)

    def adjust_invested(self, delta: Money) -> None:
        self.values.adjust_money(SecurityAttribute.INVESTED, delta)

    def adjust_gains(self, delta: Money) -> None:
        self.values.adjust_money(SecurityAttribute.GAINS, delta)

    def adjust_dividend(self, delta: Money) -> None:
        self.values.adjust_money(SecurityAttribute.DIVIDEND, delta)

    def _value_at(self, values: BucketValues, when: FinancialDate | None) -> bool:
        """Set PRICE and VALUATION on values at a date. False when the price is missing."""
        units = values.units(SecurityAttribute.UNITS)
        if units.is_zero():
            values.set_value(SecurityAttribute.VALUATION, Money.zero())
            return True
        if when is None:
            return False
        price = self.analysis.prices.latest_price(self.owner, when)
        if price is None:
            logger.warning(f"No price for {self.name} on or before {when}; holding not valued")
            return False
        values.set_value(SecurityAttribute.PRICE, price)
        values.set_value(SecurityAttribute.VALUATION, units.value_at_price(price))
        return True

    def calculate_derived(self, as_of: FinancialDate | None, base_as_of: FinancialDate | None) -> None:
        valued = self._value_at(self.values, as_of)
        base_valued = self._value_at(self.base_values, base_as_of)
        if not (valued and base_valued):
            return

        value_delta = self._money_delta(SecurityAttribute.VALUATION)
        market_growth = value_delta - self._money_delta(SecurityAttribute.INVESTED)
        self.values.set_value(SecurityAttribute.VALUEDELTA, value_delta)
        self.values.set_value(SecurityAttribute.MARKETGROWTH, market_growth)
        self.values.set_value(
            SecurityAttribute.UNREALISEDGAINS,
            self.values.money(SecurityAttribute.VALUATION) - self.cost,
        )
        self.values.set_value(
            SecurityAttribute.PROFIT,
            market_growth + self._money_delta(SecurityAttribute.DIVIDEND),
        )


_PORTFOLIO_TOTALS = (
    SecurityAttribute.COST,
    SecurityAttribute.INVESTED,
    SecurityAttribute.GAINS,
    SecurityAttribute.DIVIDEND,
    SecurityAttribute.VALUATION,
    SecurityAttribute.VALUEDELTA,
    SecurityAttribute.MARKETGROWTH,
    SecurityAttribute.UNREALISEDGAINS,
    SecurityAttribute.PROFIT,
)


class PortfolioBucket(AnalysisBucket):
    """Totals over the security holdings of one portfolio, built after the pass."""

    attribute_type = SecurityAttribute

    def add_holding(self, holding: SecurityBucket) -> None:
        for attribute in _PORTFOLIO_TOTALS:
            self.values.adjust_money(attribute, holding.values.money(attribute))
            self.base_values.adjust_money(attribute, holding.base_values.money(attribute))

    def is_idle(self) -> bool:
        return False


class PayeeBucket(AnalysisBucket):
    """Income received from and expense paid to a payee."""

    attribute_type = PayeeAttribute

    @property
    def income(self) -> Money:
        return self.values.money(PayeeAttribute.INCOME)

    @property
    def expense(self) -> Money:
        return self.values.money(PayeeAttribute.EXPENSE)

    def adjust_for_debit(self, transaction: Transaction) -> None:
        """The payee pays out: income, or a recovered expense."""
        if transaction.is_expense:
            self.values.adjust_money(PayeeAttribute.EXPENSE, -transaction.amount)
        else:
            self.values.adjust_money(PayeeAttribute.INCOME, transaction.amount)
        if transaction.has_tax_credit:
            self.values.adjust_money(PayeeAttribute.INCOME, transaction.tax_credit)
        self.register(transaction)

    def adjust_for_credit(self, transaction: Transaction) -> None:
        """The payee is paid."""
        self.values.adjust_money(PayeeAttribute.EXPENSE, transaction.amount)
        if transaction.is_expense and transaction.has_tax_credit:
            self.values.adjust_money(PayeeAttribute.EXPENSE, transaction.tax_credit)
        self.register(transaction)

    def adjust_for_tax_credit(self, transaction: Transaction) -> None:
        """Tax credit deemed received from the payee."""
        if transaction.has_tax_credit:
            self.values.adjust_money(PayeeAttribute.INCOME, transaction.tax_credit)
            self.register(transaction)

    def adjust_for_tax_payments(self, transaction: Transaction) -> None:
        """Tax deducted at source, posted against the tax authority."""
        if not transaction.has_tax_credit:
            return
        if transaction.is_expense:
            self.values.adjust_money(PayeeAttribute.INCOME, transaction.tax_credit)
        else:
            self.values.adjust_money(PayeeAttribute.EXPENSE, transaction.tax_credit)
        self.register(transaction)

    def add_expense(self, transaction: Transaction, amount: Money) -> None:
        self.values.adjust_money(PayeeAttribute.EXPENSE, amount)
        self.register(transaction)

    def subtract_expense(self, transaction: Transaction, amount: Money) -> None:
        self.values.adjust_money(PayeeAttribute.EXPENSE, -amount)
        self.register(transaction)

    def calculate_derived(self, as_of: FinancialDate | None, base_as_of: FinancialDate | None) -> None:
        self.values.set_value(
            PayeeAttribute.DELTA,
            self._money_delta(PayeeAttribute.INCOME) - self._money_delta(PayeeAttribute.EXPENSE),
        )


class CategoryBucket(AnalysisBucket):
    """Income and expense booked to one transaction category."""

    attribute_type = CategoryAttribute

    @property
    def income(self) -> Money:
        return self.values.money(CategoryAttribute.INCOME)

    @property
    def expense(self) -> Money:
        return self.values.money(CategoryAttribute.EXPENSE)

    def adjust_values(self, transaction: Transaction) -> None:
        """Book the gross amount as income or expense according to the category and direction."""
        amount = transaction.amount
        if transaction.has_tax_credit:
            amount = amount + transaction.tax_credit
        if amount.is_nonzero():
            if transaction.category.is_expense:
                attribute = CategoryAttribute.INCOME if is_reversed(transaction) else CategoryAttribute.EXPENSE
            else:
                attribute = CategoryAttribute.EXPENSE if is_reversed(transaction) else CategoryAttribute.INCOME
            self.values.adjust_money(attribute, amount)
        self.register(transaction)

    def add_income(self, transaction: Transaction, amount: Money) -> None:
        self.values.adjust_money(CategoryAttribute.INCOME, amount)
        self.register(transaction)

    def subtract_income(self, transaction: Transaction, amount: Money) -> None:
        self.values.adjust_money(CategoryAttribute.INCOME, -amount)
        self.register(transaction)

    def add_expense(self, transaction: Transaction, amount: Money) -> None:
        self.values.adjust_money(CategoryAttribute.EXPENSE, amount)
        self.register(transaction)

    def subtract_expense(self, transaction: Transaction, amount: Money) -> None:
        self.values.adjust_money(CategoryAttribute.EXPENSE, -amount)
        self.register(transaction)

    def calculate_derived(self, as_of: FinancialDate | None, base_as_of: FinancialDate | None) -> None:
        self.values.set_value(
            CategoryAttribute.DELTA,
            self._money_delta(CategoryAttribute.INCOME) - self._money_delta(CategoryAttribute.EXPENSE),
        )


class TaxBasisBucket(AnalysisBucket):
    """Gross, nett and tax credit totals for one tax basis."""

    attribute_type = TaxBasisAttribute

    def adjust_for_transaction(self, transaction: Transaction) -> None:
        """Book a transaction's amount and tax credit, negated for refunds and repayments."""
        nett = transaction.amount
        tax_credit = transaction.tax_credit if transaction.has_tax_credit else Money.zero()
        if is_reversed(transaction):
            nett, tax_credit = -nett, -tax_credit
        self.values.adjust_money(TaxBasisAttribute.GROSS, nett + tax_credit)
        self.values.adjust_money(TaxBasisAttribute.NETT, nett)
        self.values.adjust_money(TaxBasisAttribute.TAXCREDIT, tax_credit)
        self.register(transaction)

    def adjust_value(self, transaction: Transaction, value: Money) -> None:
        """Book a computed value, such as a gain, with no tax credit."""
        self.values.adjust_money(TaxBasisAttribute.GROSS, value)
        self.values.adjust_money(TaxBasisAttribute.NETT, value)
        self.register(transaction)


class BucketList:
    """Owner-keyed buckets of one kind. At most one bucket per owner."""

    def __init__(self, bucket_type: type[AnalysisBucket], analysis: "Analysis") -> None:
        self.bucket_type = bucket_type
        self.analysis = analysis
        self._buckets: dict[Any, AnalysisBucket] = {}

    def get_bucket(self, owner: Any) -> Any:
        """Existing bucket for the owner, or a new empty one registered for it."""
        bucket = self._buckets.get(owner)
        if bucket is None:
            bucket = self.bucket_type(owner, self.analysis)
            self._buckets[owner] = bucket
        return bucket

    def find(self, owner: Any) -> Any:
        """Existing bucket for the owner, or None."""
        return self._buckets.get(owner)

    def derive(self, analysis: "Analysis", date_range: DateRange) -> "BucketList":
        """Buckets derived over a range, keeping those active or touched within it."""
        derived = type(self)(self.bucket_type, analysis)
        for owner, bucket in self._buckets.items():
            new_bucket = self.bucket_type.derive(bucket, analysis, date_range)
            if new_bucket.is_active() or not new_bucket.is_idle():
                derived._buckets[owner] = new_bucket
        return derived

    def calculate_derived(self, as_of: FinancialDate | None, base_as_of: FinancialDate | None) -> None:
        for bucket in self:
            bucket.calculate_derived(as_of, base_as_of)

    def freeze(self) -> None:
        for bucket in self:
            bucket.freeze()

    def __iter__(self):
        return iter(list(self._buckets.values()))

    def __len__(self) -> int:
        return len(self._buckets)

    def __contains__(self, owner: object) -> bool:
        return owner in self._buckets


class CategoryBucketList(BucketList):
    """Category buckets with parent-category roll-ups."""

    def produce_totals(self) -> dict[TransactionCategory | None, BucketValues]:
        """
        Income, expense and delta over the window per parent category.

        Totals are kept for top-level categories and for every category with
        sub-categories. Each bucket is added to the total of every ancestor,
        and to its own when it has one, so a grandchild counts towards both
        its parent and the top-level category. The None key holds the grand
        total.
        """
        chains = {bucket.owner: _ancestors(bucket.owner) for bucket in self}
        parents = {ancestor for chain in chains.values() for ancestor in chain}

        totals: dict[TransactionCategory | None, BucketValues] = {}
        for bucket in self:
            keys = list(chains[bucket.owner])
            if bucket.owner.parent is None or bucket.owner in parents:
                keys.insert(0, bucket.owner)
            values = bucket.period_values()
            for key in (*keys, None):
                total = totals.setdefault(key, BucketValues(CategoryAttribute))
                for attribute in (CategoryAttribute.INCOME, CategoryAttribute.EXPENSE, CategoryAttribute.DELTA):
                    total.adjust_money(attribute, values.money(attribute))
        return totals


def _ancestors(category: TransactionCategory) -> list[TransactionCategory]:
    """Parent chain from the immediate parent to the root."""
    chain = []
    parent = category.parent
    while parent is not None and parent not in chain:
        chain.append(parent)
        parent = parent.parent
    return chain
