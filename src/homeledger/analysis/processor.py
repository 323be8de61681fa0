#!/usr/bin/env python3
"""
Transaction Processor

Single forward pass over a ledger's events that populates an Analysis.

Every transaction takes one of two paths:

- Standard: neither side holds units. Owners are substituted by category
  (interest is paid by the bank, not the account; loan charges land on the
  lender), then each side is booked to a payee, an auto-expense category or
  an account bucket, with tax credits posted to the tax authority.
- Capital: one side is a security holding. The category selects a handler
  that maintains units, cost basis, investment, realised gains and
  dividends, including splits, rights, demergers and takeovers.

Both dispatches are tables keyed by category class, so each rule can be read
and tested on its own.
"""

import logging
from collections.abc import Callable
from dataclasses import dataclass

from ..core.config import Config
from ..core.errors import AnalysisLogicError
from ..core.money import Money
from ..core.units import Rate, Units
from ..ledger.models import Account, AccountType, CategoryClass, Ledger, Transaction, TransactionCategory
from .buckets import SecurityBucket, TaxBasis, tax_basis_for
from .events import EventType
from .registry import Analysis

logger = logging.getLogger(__name__)


@dataclass
class ProcessorSettings:
    """Thresholds for the small-transaction rule on cash legs of capital events."""

    limit_value: Money
    limit_rate: Rate

    @classmethod
    def default(cls) -> "ProcessorSettings":
        return cls(limit_value=Money.from_amount(3000), limit_rate=Rate.from_percentage(5))

    @classmethod
    def from_config(cls, config: Config) -> "ProcessorSettings":
        return cls(
            limit_value=Money.from_amount(config.analysis.small_transaction_limit),
            limit_rate=Rate.from_percentage(config.analysis.small_transaction_rate),
        )

    def is_large(self, cash: Money, stock_value: Money) -> bool:
        """True when a cash amount exceeds both the absolute limit and the rate limit of a stock value."""
        return cash > self.limit_value and cash > self.limit_rate.of(stock_value)


@dataclass(frozen=True)
class Substitution:
    """Owners a standard transaction is really booked between."""

    debit: Account
    credit: Account
    child: Account | None = None


def _interest(t: Transaction) -> Substitution:
    # Interest is paid by the bank; the earning account is recorded against
    child = None if t.debit == t.credit else t.debit
    return Substitution(debit=_parent_of(t.debit), credit=t.credit, child=child)


def _loan_interest_earned(t: Transaction) -> Substitution:
    return Substitution(debit=_parent_of(t.debit), credit=t.credit)


def _rental_income(t: Transaction) -> Substitution:
    child = None if t.debit == t.credit else t.debit
    return Substitution(debit=_parent_of(t.credit), credit=t.credit, child=child)


def _loan_charge(t: Transaction) -> Substitution:
    return Substitution(debit=t.debit, credit=_parent_of(t.credit))


def _parent_of(account: Account) -> Account:
    if account.parent is None:
        raise AnalysisLogicError(f"{account} has no parent to book against")
    return account.parent


STANDARD_SUBSTITUTIONS: dict[CategoryClass, Callable[[Transaction], Substitution]] = {
    CategoryClass.INTEREST: _interest,
    CategoryClass.LOANINTERESTEARNED: _loan_interest_earned,
    CategoryClass.RENTALINCOME: _rental_income,
    CategoryClass.ROOMRENTALINCOME: _rental_income,
    CategoryClass.WRITEOFF: _loan_charge,
    CategoryClass.LOANINTERESTCHARGED: _loan_charge,
}


def substitute(transaction: Transaction) -> Substitution:
    """Resolve the owners a standard transaction is booked between."""
    rule = STANDARD_SUBSTITUTIONS.get(transaction.category.category_class)
    if rule is None:
        return Substitution(debit=transaction.debit, credit=transaction.credit)
    return rule(transaction)


class TransactionProcessor:
    """
    Builds an Analysis from a ledger in one pass.

    A processor instance owns the analysis it is building; use a new
    processor (or call run again) for each build.
    """

    def __init__(self, ledger: Ledger, settings: ProcessorSettings | None = None) -> None:
        self.ledger = ledger
        self.settings = settings or ProcessorSettings.default()
        self.analysis: Analysis | None = None
        self._capital_handlers: dict[CategoryClass, Callable[[Transaction], None]] = {
            CategoryClass.STOCKSPLIT: self._process_stock_split,
            CategoryClass.STOCKADJUST: self._process_stock_split,
            CategoryClass.STOCKRIGHTSTAKEN: self._process_transfer_in,
            CategoryClass.STOCKRIGHTSWAIVED: self._process_stock_rights_waived,
            CategoryClass.STOCKDEMERGER: self._process_stock_demerger,
            CategoryClass.STOCKTAKEOVER: self._process_stock_takeover,
            CategoryClass.DIVIDEND: self._process_dividend,
            CategoryClass.TRANSFER: self._process_capital_transfer,
            CategoryClass.EXPENSE: self._process_capital_transfer,
            CategoryClass.INHERITED: self._process_capital_transfer,
            CategoryClass.OTHERINCOME: self._process_capital_transfer,
        }

    def run(self) -> Analysis:
        """
        Process every transaction in date order and return the finalised analysis.

        Raises:
            AnalysisLogicError: On a transaction the rules cannot place
            MissingMarketDataError: When a required price or rate is absent
        """
        self.analysis = Analysis.from_ledger(self.ledger)
        logger.info(f"Analysing {len(self.ledger.transactions)} transactions")

        for event in self.analysis.event_iterator():
            if event.event_type is EventType.TRANSACTION:
                self.process_transaction(event.transaction)

        self.analysis.finalize()
        logger.info(
            f"Analysis complete: {len(self.analysis.account_buckets())} accounts, "
            f"{len(self.analysis.securities)} holdings, {len(self.analysis.charges)} chargeable events"
        )
        return self.analysis

    def process_transaction(self, transaction: Transaction) -> None:
        """Dispatch one transaction to the capital or standard path."""
        logger.debug(f"Processing {transaction}")
        if transaction.debit.has_units or transaction.credit.has_units:
            self._process_capital(transaction)
        else:
            self._process_standard(transaction)

    def _bucket(self, owner):
        return self.analysis.get_bucket(owner)

    def _security(self, owner: Account) -> SecurityBucket:
        return self.analysis.securities.get_bucket(owner)

    # Standard path

    def _process_standard(self, transaction: Transaction) -> None:
        owners = substitute(transaction)

        if owners.debit.auto_expense is not None:
            self._adjust_auto_expense(transaction, owners.debit, -transaction.amount)
        else:
            self._adjust_debit_owner(transaction, owners.debit)

        if owners.credit.auto_expense is not None:
            self._adjust_auto_expense(transaction, owners.credit, transaction.amount)
        else:
            self._adjust_credit_owner(transaction, owners.credit)

        if owners.child is not None:
            self._bucket(owners.child).register(transaction)

        self._adjust_tax_payments(transaction)
        if not transaction.category.is_transfer:
            self._adjust_categories(transaction, transaction.category, owners.child or transaction.debit)

    def _adjust_auto_expense(self, transaction: Transaction, account: Account, expense: Money) -> None:
        """Book an auto-expense account's flow as expense to its payee and category; the account is not valued."""
        payee = account.parent or account
        self.analysis.payees.get_bucket(payee).add_expense(transaction, expense)
        self._bucket(account.auto_expense).add_expense(transaction, expense)
        self._bucket(TaxBasis.EXPENSE).adjust_value(transaction, expense)

    def _adjust_debit_owner(self, transaction: Transaction, owner: Account) -> None:
        # Payees resolve to payee buckets, everything else to account buckets
        self._bucket(owner).adjust_for_debit(transaction)

    def _adjust_credit_owner(self, transaction: Transaction, owner: Account) -> None:
        # Cash legs can only land on accounts and payees
        if owner.has_units:
            raise AnalysisLogicError(
                f"Transaction {transaction.id} ({transaction.category.category_class.value}) "
                f"cannot pay cash into holding {owner}"
            )
        self._bucket(owner).adjust_for_credit(transaction)

    def _adjust_tax_payments(self, transaction: Transaction) -> None:
        if transaction.has_tax_credit:
            taxman = self.analysis.singular_account(AccountType.TAXMAN)
            self.analysis.payees.get_bucket(taxman).adjust_for_tax_payments(transaction)

    def _adjust_categories(self, transaction: Transaction, category: TransactionCategory, account: Account) -> None:
        """Book a transaction to its category, its tax basis and the tax credit category."""
        self._bucket(category).adjust_values(transaction)
        self._bucket(tax_basis_for(category, account)).adjust_for_transaction(transaction)

        if transaction.has_tax_credit:
            self._book_tax_credit(transaction, transaction.tax_credit)

    def _book_tax_credit(self, transaction: Transaction, tax_credit: Money) -> None:
        tax_category = self.analysis.singular_category(CategoryClass.TAXCREDIT)
        self._bucket(tax_category).add_expense(transaction, tax_credit)
        self._bucket(tax_basis_for(tax_category)).adjust_value(transaction, tax_credit)

    def _adjust_standard_gain(self, transaction: Transaction, holding: Account, gains: Money) -> None:
        """Realised gain or loss to the capital gains (or tax-free gains) category."""
        category_class = CategoryClass.TAXFREEGAIN if holding.tax_free else CategoryClass.CAPITALGAIN
        category = self.analysis.singular_category(category_class)
        bucket = self._bucket(category)
        if gains.is_positive():
            bucket.add_income(transaction, gains)
        else:
            bucket.subtract_expense(transaction, gains)
        self._bucket(tax_basis_for(category, holding)).adjust_value(transaction, gains)

    # Capital path

    def _process_capital(self, transaction: Transaction) -> None:
        handler = self._capital_handlers.get(transaction.category.category_class)
        if handler is None:
            raise AnalysisLogicError(
                f"Unexpected category class {transaction.category.category_class.value} "
                f"for security transaction {transaction.id}"
            )
        handler(transaction)

    def _process_capital_transfer(self, transaction: Transaction) -> None:
        if transaction.debit.is_life_bond:
            self._process_taxable_gain(transaction)
        elif not transaction.debit.has_units:
            self._process_transfer_in(transaction)
        elif transaction.credit.has_units:
            self._process_stock_exchange(transaction)
        else:
            self._process_transfer_out(transaction)

    def _process_stock_split(self, transaction: Transaction) -> None:
        """Unit count changes with no effect on cost or value."""
        delta = transaction.credit_units
        if delta is None:
            delta = -(transaction.debit_units or Units.zero())
        holding = self._security(transaction.credit)
        holding.adjust_units(delta)
        holding.register(transaction)

    def _process_transfer_in(self, transaction: Transaction) -> None:
        self._credit_xfer_in(transaction)
        self._adjust_tax_payments(transaction)
        self._adjust_debit_owner(transaction, transaction.debit)
        if not transaction.category.is_transfer:
            self._adjust_categories(transaction, transaction.category, transaction.credit)

    def _credit_xfer_in(self, transaction: Transaction) -> None:
        holding = self._security(transaction.credit)
        holding.adjust_cost(transaction.amount)
        holding.adjust_invested(transaction.amount)
        if transaction.credit_units is not None:
            holding.adjust_units(transaction.credit_units)
        holding.register(transaction)

    def _debit_xfer_out(self, transaction: Transaction) -> tuple[Money, Money]:
        """
        Dispose of part of the debit holding.

        The cost reduction is the disposed fraction of cost when units are
        given, else the whole amount, capped at the holding's cost.

        Returns:
            (cost reduction, realised gain)
        """
        holding = self._security(transaction.debit)
        amount = transaction.amount
        holding.adjust_invested(-amount)

        cost = holding.cost
        reduction = amount
        if transaction.debit_units is not None:
            units = holding.units
            reduction = cost.value_at_weight(transaction.debit_units.value, units.value)
            holding.adjust_units(-self._capped_units(transaction.debit_units, units))
        reduction = min(reduction, cost)
        holding.adjust_cost(-reduction)

        gains = amount - reduction
        if gains.is_nonzero():
            holding.adjust_gains(gains)
        holding.register(transaction)
        return reduction, gains

    @staticmethod
    def _capped_units(disposed: Units, held: Units) -> Units:
        if disposed > held:
            logger.warning(f"Disposal of {disposed} units exceeds holding of {held}; capped")
            return held
        return disposed

    def _process_transfer_out(self, transaction: Transaction) -> None:
        _, gains = self._debit_xfer_out(transaction)
        if gains.is_nonzero():
            self._adjust_standard_gain(transaction, transaction.debit, gains)
        self._adjust_credit_owner(transaction, transaction.credit)
        if not transaction.category.is_transfer:
            self._adjust_categories(transaction, transaction.category, transaction.debit)

    def _process_stock_exchange(self, transaction: Transaction) -> None:
        _, gains = self._debit_xfer_out(transaction)
        if gains.is_nonzero():
            self._adjust_standard_gain(transaction, transaction.debit, gains)
        self._credit_xfer_in(transaction)

    def _process_taxable_gain(self, transaction: Transaction) -> None:
        """Life-bond withdrawal: the gain is chargeable and taxed after the pass."""
        reduction, gains = self._debit_xfer_out(transaction)
        bond = transaction.debit

        self.analysis.payees.get_bucket(_parent_of(bond)).adjust_for_tax_credit(transaction)
        self._adjust_credit_owner(transaction, transaction.credit)

        category = self.analysis.singular_category(CategoryClass.TAXABLEGAIN)
        tax_credit = transaction.tax_credit if transaction.has_tax_credit else Money.zero()
        self._bucket(category).add_income(transaction, gains + tax_credit)
        if transaction.has_tax_credit:
            self._book_tax_credit(transaction, tax_credit)
        self._bucket(tax_basis_for(category)).adjust_value(transaction, gains + tax_credit)

        self._adjust_tax_payments(transaction)
        self.analysis.charges.add_event(transaction, gains)
        logger.debug(f"Taxable gain {gains} (cost reduction {reduction}) on {bond}")

    def _process_dividend(self, transaction: Transaction) -> None:
        holding_account = transaction.debit
        self.analysis.payees.get_bucket(_parent_of(holding_account)).adjust_for_debit(transaction)

        holding = self._security(holding_account)
        dividend = transaction.amount
        if transaction.has_tax_credit:
            dividend = dividend + transaction.tax_credit
        holding.adjust_dividend(dividend)

        if transaction.credit == holding_account:
            # Reinvested: the dividend buys more of the same holding
            holding.adjust_cost(transaction.amount)
            holding.adjust_invested(transaction.amount)
            if transaction.credit_units is not None:
                holding.adjust_units(transaction.credit_units)
            holding.register(transaction)
        elif transaction.credit.has_units:
            # Paid into another holding: a purchase of that holding
            holding.register(transaction)
            self._credit_xfer_in(transaction)
        else:
            holding.register(transaction)
            self._adjust_credit_owner(transaction, transaction.credit)

        self._adjust_tax_payments(transaction)
        self._adjust_categories(transaction, transaction.category, holding_account)

    def _process_stock_rights_waived(self, transaction: Transaction) -> None:
        """Proceeds of waived rights reduce cost; large sales are apportioned against holding value."""
        holding = self._security(transaction.debit)
        amount = transaction.amount
        holding.adjust_invested(-amount)

        cost = holding.cost
        price = self.analysis.prices.require_price(transaction.debit, transaction.date)
        value = holding.units.value_at_price(price)

        if self.settings.is_large(amount, value):
            reduction = cost.value_at_weight(amount, amount + value)
        else:
            reduction = amount
        reduction = min(reduction, cost)
        holding.adjust_cost(-reduction)

        gains = amount - reduction
        if gains.is_nonzero():
            holding.adjust_gains(gains)
            self._adjust_standard_gain(transaction, transaction.debit, gains)
        holding.register(transaction)

        self._adjust_credit_owner(transaction, transaction.credit)

    def _process_stock_demerger(self, transaction: Transaction) -> None:
        """Part of the debit holding's cost moves to the demerged credit holding."""
        if transaction.dilution is None:
            raise AnalysisLogicError(f"Demerger transaction {transaction.id} has no dilution")
        debit_holding = self._security(transaction.debit)
        cost = debit_holding.cost
        delta_cost = cost.diluted(transaction.dilution.value) - cost

        debit_holding.adjust_cost(delta_cost)
        debit_holding.adjust_invested(delta_cost)
        if transaction.debit_units is not None:
            debit_holding.adjust_units(-transaction.debit_units)
        debit_holding.register(transaction)

        credit_holding = self._security(transaction.credit)
        credit_holding.adjust_cost(-delta_cost)
        credit_holding.adjust_invested(-delta_cost)
        if transaction.credit_units is not None:
            credit_holding.adjust_units(transaction.credit_units)
        credit_holding.register(transaction)

    def _process_stock_takeover(self, transaction: Transaction) -> None:
        if transaction.third_party is not None and transaction.amount.is_nonzero():
            self._process_stock_and_cash_takeover(transaction)
        else:
            self._process_stock_only_takeover(transaction)

    def _process_stock_only_takeover(self, transaction: Transaction) -> None:
        """The acquired holding's cost carries over in full to the new holding."""
        debit_holding = self._security(transaction.debit)
        credit_holding = self._security(transaction.credit)
        new_units = transaction.credit_units or Units.zero()

        price = self.analysis.prices.require_price(transaction.credit, transaction.date)
        stock_value = new_units.value_at_price(price)
        cost = debit_holding.cost

        credit_holding.adjust_cost(cost)
        credit_holding.adjust_units(new_units)
        credit_holding.adjust_invested(stock_value)
        credit_holding.register(transaction)

        debit_holding.adjust_cost(-cost)
        debit_holding.adjust_units(-debit_holding.units)
        debit_holding.adjust_invested(-stock_value)
        debit_holding.register(transaction)

    def _process_stock_and_cash_takeover(self, transaction: Transaction) -> None:
        """Cost is split between the cash leg and the new holding; the cash leg realises a gain."""
        debit_holding = self._security(transaction.debit)
        credit_holding = self._security(transaction.credit)
        cash = transaction.amount
        new_units = transaction.credit_units or Units.zero()

        debit_price = self.analysis.prices.require_price(transaction.debit, transaction.date)
        credit_price = self.analysis.prices.require_price(transaction.credit, transaction.date)
        base_value = debit_holding.units.value_at_price(debit_price)
        stock_value = new_units.value_at_price(credit_price)
        cost = debit_holding.cost

        if self.settings.is_large(cash, base_value):
            cost_transfer = cost.value_at_weight(stock_value, cash + stock_value)
        elif cash > cost:
            cost_transfer = Money.zero()
        else:
            cost_transfer = cost - cash

        gains = cash - cost + cost_transfer
        if gains.is_nonzero():
            debit_holding.adjust_gains(gains)
            self._adjust_standard_gain(transaction, transaction.debit, gains)

        credit_holding.adjust_cost(cost_transfer)
        credit_holding.adjust_units(new_units)
        credit_holding.adjust_invested(stock_value)
        credit_holding.register(transaction)

        debit_holding.adjust_cost(-cost)
        debit_holding.adjust_units(-debit_holding.units)
        debit_holding.adjust_invested(-(stock_value + cash))
        debit_holding.register(transaction)

        self._adjust_credit_owner(transaction, transaction.third_party)


def build_analysis(ledger: Ledger, settings: ProcessorSettings | None = None) -> Analysis:
    """Run a processing pass over a ledger."""
    return TransactionProcessor(ledger, settings).run()


__all__ = [
    "ProcessorSettings",
    "STANDARD_SUBSTITUTIONS",
    "Substitution",
    "TransactionProcessor",
    "build_analysis",
    "substitute",
]
