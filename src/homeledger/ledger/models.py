#!/usr/bin/env python3
"""
Ledger Data Models

Read-only input to the analysis engine: accounts (including payees and
security holdings), transaction categories, transactions, security prices
and exchange rates. Owners compare and hash by id so that they can key
bucket maps.
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Any

from ..core.dates import FinancialDate
from ..core.money import Money
from ..core.units import Dilution, Price, Rate, Ratio, Units


class AccountType(Enum):
    """Account category types."""

    DEPOSIT = "deposit"
    SAVINGS = "savings"
    CASH = "cash"
    CREDITCARD = "creditcard"
    LOAN = "loan"
    PORTFOLIO = "portfolio"
    SHARES = "shares"
    UNITTRUST = "unittrust"
    LIFEBOND = "lifebond"
    PAYEE = "payee"
    EMPLOYER = "employer"
    INSTITUTION = "institution"
    TAXMAN = "taxman"
    OPENINGBALANCE = "openingbalance"


UNIT_BEARING_TYPES = frozenset({AccountType.SHARES, AccountType.UNITTRUST, AccountType.LIFEBOND})
PAYEE_TYPES = frozenset(
    {
        AccountType.PAYEE,
        AccountType.EMPLOYER,
        AccountType.INSTITUTION,
        AccountType.TAXMAN,
        AccountType.OPENINGBALANCE,
    }
)
SINGULAR_ACCOUNT_TYPES = frozenset({AccountType.TAXMAN, AccountType.OPENINGBALANCE})


class CategoryClass(Enum):
    """Transaction category classes that drive the analysis rules."""

    TRANSFER = "transfer"
    INTEREST = "interest"
    DIVIDEND = "dividend"
    SALARY = "salary"
    RENTALINCOME = "rentalincome"
    ROOMRENTALINCOME = "roomrentalincome"
    LOANINTERESTEARNED = "loaninterestearned"
    LOANINTERESTCHARGED = "loaninterestcharged"
    WRITEOFF = "writeoff"
    INHERITED = "inherited"
    OTHERINCOME = "otherincome"
    OPENINGBALANCE = "openingbalance"
    EXPENSE = "expense"
    TAXCREDIT = "taxcredit"
    CAPITALGAIN = "capitalgain"
    TAXFREEGAIN = "taxfreegain"
    TAXABLEGAIN = "taxablegain"
    TAXRELIEF = "taxrelief"
    STOCKSPLIT = "stocksplit"
    STOCKADJUST = "stockadjust"
    STOCKRIGHTSTAKEN = "stockrightstaken"
    STOCKRIGHTSWAIVED = "stockrightswaived"
    STOCKDEMERGER = "stockdemerger"
    STOCKTAKEOVER = "stocktakeover"


TRANSFER_CLASSES = frozenset(
    {
        CategoryClass.TRANSFER,
        CategoryClass.STOCKSPLIT,
        CategoryClass.STOCKADJUST,
        CategoryClass.STOCKRIGHTSTAKEN,
        CategoryClass.STOCKRIGHTSWAIVED,
        CategoryClass.STOCKDEMERGER,
        CategoryClass.STOCKTAKEOVER,
    }
)
EXPENSE_CLASSES = frozenset(
    {
        CategoryClass.EXPENSE,
        CategoryClass.LOANINTERESTCHARGED,
        CategoryClass.WRITEOFF,
        CategoryClass.TAXCREDIT,
    }
)
SINGULAR_CATEGORY_CLASSES = frozenset(
    {
        CategoryClass.TAXCREDIT,
        CategoryClass.CAPITALGAIN,
        CategoryClass.TAXFREEGAIN,
        CategoryClass.TAXABLEGAIN,
        CategoryClass.OPENINGBALANCE,
    }
)


@dataclass(frozen=True)
class TransactionCategory:
    """A transaction category, optionally nested under a parent category."""

    id: str
    name: str = field(compare=False)
    category_class: CategoryClass = field(compare=False)
    parent: "TransactionCategory | None" = field(default=None, compare=False, repr=False)

    @property
    def is_transfer(self) -> bool:
        """Transfers do not contribute to category totals."""
        return self.category_class in TRANSFER_CLASSES

    @property
    def is_expense(self) -> bool:
        return self.category_class in EXPENSE_CLASSES

    @property
    def is_income(self) -> bool:
        return not self.is_transfer and not self.is_expense

    @classmethod
    def from_dict(cls, data: dict[str, Any], parent: "TransactionCategory | None" = None) -> "TransactionCategory":
        return cls(
            id=str(data["id"]),
            name=data.get("name", str(data["id"])),
            category_class=CategoryClass(str(data["class"]).lower()),
            parent=parent,
        )

    def __str__(self) -> str:
        return self.name


@dataclass(frozen=True)
class Account:
    """
    Any owner an amount can move between.

    Covers bank and card accounts, portfolios, security holdings (which carry
    units) and payees. A security holding's parent is the payee that pays its
    dividends and its portfolio groups holdings for reporting. An account
    with an auto-expense category routes its flows into that category.
    """

    id: str
    name: str = field(compare=False)
    account_type: AccountType = field(compare=False)
    parent: "Account | None" = field(default=None, compare=False, repr=False)
    portfolio: "Account | None" = field(default=None, compare=False, repr=False)
    currency: str | None = field(default=None, compare=False)
    auto_expense: TransactionCategory | None = field(default=None, compare=False, repr=False)
    opening_balance: Money | None = field(default=None, compare=False)
    maturity: FinancialDate | None = field(default=None, compare=False)
    rate: Rate | None = field(default=None, compare=False)
    tax_free: bool = field(default=False, compare=False)
    closed: bool = field(default=False, compare=False)

    @property
    def has_units(self) -> bool:
        return self.account_type in UNIT_BEARING_TYPES

    @property
    def is_payee(self) -> bool:
        return self.account_type in PAYEE_TYPES

    @property
    def is_portfolio(self) -> bool:
        return self.account_type == AccountType.PORTFOLIO

    @property
    def is_life_bond(self) -> bool:
        return self.account_type == AccountType.LIFEBOND

    def is_foreign(self, reporting_currency: str) -> bool:
        """True when the account is held in a currency other than the reporting one."""
        return self.currency is not None and self.currency != reporting_currency

    def __str__(self) -> str:
        return self.name


@dataclass(frozen=True)
class Transaction:
    """
    An immutable ledger transaction.

    Amount moves from the debit owner to the credit owner. Ordering within a
    ledger is by date then id, where id is the ledger insertion order.
    """

    id: int
    date: FinancialDate
    debit: Account
    credit: Account
    amount: Money
    category: TransactionCategory
    third_party: Account | None = None
    tax_credit: Money | None = None
    debit_units: Units | None = None
    credit_units: Units | None = None
    dilution: Dilution | None = None
    years: int | None = None
    description: str | None = None

    @property
    def sort_key(self) -> tuple:
        return (self.date, self.id)

    @property
    def is_expense(self) -> bool:
        """The category classifies this transaction as an expense."""
        return self.category.is_expense

    @property
    def has_tax_credit(self) -> bool:
        return self.tax_credit is not None and self.tax_credit.is_nonzero()

    def __str__(self) -> str:
        return f"#{self.id} {self.date} {self.debit} -> {self.credit} {self.amount} ({self.category})"


@dataclass(frozen=True)
class SecurityPrice:
    """Closing price of a security holding on a date."""

    security: Account
    date: FinancialDate
    price: Price


@dataclass(frozen=True)
class ExchangeRate:
    """Value of one unit of a foreign currency in the reporting currency on a date."""

    currency: str
    date: FinancialDate
    rate: Ratio


@dataclass
class Ledger:
    """
    A fully materialised ledger.

    Transactions are kept in ledger order; their ids are that order.
    """

    accounts: dict[str, Account] = field(default_factory=dict)
    categories: dict[str, TransactionCategory] = field(default_factory=dict)
    transactions: list[Transaction] = field(default_factory=list)
    prices: list[SecurityPrice] = field(default_factory=list)
    rates: list[ExchangeRate] = field(default_factory=list)
    reporting_currency: str = "GBP"

    def find_singular_account(self, account_type: AccountType) -> Account | None:
        """
        The ledger's own system account of a type, or None.

        Raises:
            ValueError: If the type has no singular account
        """
        if account_type not in SINGULAR_ACCOUNT_TYPES:
            raise ValueError(f"{account_type.value} is not a singular account type")
        for account in self.accounts.values():
            if account.account_type == account_type:
                return account
        return None

    def find_singular_category(self, category_class: CategoryClass) -> TransactionCategory | None:
        """
        The ledger's own category of a well-known class, or None.

        Raises:
            ValueError: If the class has no singular category
        """
        if category_class not in SINGULAR_CATEGORY_CLASSES:
            raise ValueError(f"{category_class.value} is not a singular category class")
        for category in self.categories.values():
            if category.category_class == category_class:
                return category
        return None

    def singular_account(self, account_type: AccountType) -> Account:
        """
        The system account of a type.

        When the ledger has none, a standalone record keyed by the type name
        is returned. The ledger itself is never modified, and records are
        equal by id, so repeated calls resolve to the same bucket.
        """
        account = self.find_singular_account(account_type)
        if account is None:
            account = Account(id=account_type.value, name=account_type.name.title(), account_type=account_type)
        return account

    def singular_category(self, category_class: CategoryClass) -> TransactionCategory:
        """The category of a well-known class, synthesised like singular_account when absent."""
        category = self.find_singular_category(category_class)
        if category is None:
            category = TransactionCategory(
                id=category_class.value,
                name=category_class.name.title(),
                category_class=category_class,
            )
        return category

    def truncated(self, as_of: FinancialDate) -> "Ledger":
        """Copy of this ledger holding only records dated on or before a date."""
        return Ledger(
            accounts=dict(self.accounts),
            categories=dict(self.categories),
            transactions=[t for t in self.transactions if t.date <= as_of],
            prices=[p for p in self.prices if p.date <= as_of],
            rates=[r for r in self.rates if r.date <= as_of],
            reporting_currency=self.reporting_currency,
        )

    def date_span(self) -> tuple[FinancialDate, FinancialDate] | None:
        """First and last dated record, or None for an empty ledger."""
        dates = [t.date for t in self.transactions] + [p.date for p in self.prices] + [r.date for r in self.rates]
        if not dates:
            return None
        return min(dates), max(dates)

    def item_count(self) -> int:
        return len(self.transactions) + len(self.prices) + len(self.rates)
