#!/usr/bin/env python3
"""
Ledger Loader

Reads a ledger file (JSON or YAML) into a Ledger. Records reference each
other by id; every reference is resolved and checked here so that the
analysis engine only ever sees a consistent ledger.

File layout:
    reporting_currency: GBP
    categories:   [{id, name, class, parent}]
    accounts:     [{id, name, type, parent, portfolio, currency, auto_expense,
                    opening_balance, maturity, rate, tax_free, closed}]
    transactions: [{date, debit, credit, amount, category, third_party,
                    tax_credit, debit_units, credit_units, dilution, years,
                    description}]
    prices:       [{security, date, price}]
    rates:        [{currency, date, rate}]

Functions:
- load_ledger: Load a ledger file
- ledger_from_dict: Build a Ledger from parsed data
- ledger_to_dict: Inverse of ledger_from_dict, for saving
"""

import logging
from pathlib import Path
from typing import Any

import yaml

from ..core.dates import FinancialDate
from ..core.json_utils import read_json
from ..core.money import Money
from ..core.units import Dilution, Price, Rate, Ratio, Units
from .models import (
    Account,
    AccountType,
    ExchangeRate,
    Ledger,
    SecurityPrice,
    Transaction,
    TransactionCategory,
)

logger = logging.getLogger(__name__)

YAML_SUFFIXES = (".yaml", ".yml")


def _decimal_text(value: Any) -> Any:
    """YAML and JSON numbers arrive as floats; go through str so Decimal sees the written digits."""
    if isinstance(value, float):
        return repr(value)
    return value


def _money(value: Any) -> Money | None:
    if value is None:
        return None
    return Money.from_amount(_decimal_text(value))


def _date(value: Any) -> FinancialDate | None:
    if value is None:
        return None
    return FinancialDate.from_value(value)


def _build_in_dependency_order(records: list[dict], kind: str, build) -> dict[str, Any]:
    """
    Build records that refer to each other by id.

    Each pass builds every record whose references are already built;
    a pass that makes no progress means a missing id or a cycle.
    """
    built: dict[str, Any] = {}
    pending = list(records)
    while pending:
        remaining = []
        for record in pending:
            if "id" not in record:
                raise ValueError(f"{kind} record without id: {record}")
            item = build(record, built)
            if item is None:
                remaining.append(record)
            else:
                if item.id in built:
                    raise ValueError(f"Duplicate {kind} id: {item.id}")
                built[item.id] = item
        if len(remaining) == len(pending):
            ids = ", ".join(str(r["id"]) for r in remaining)
            raise ValueError(f"Unresolvable {kind} references for: {ids}")
        pending = remaining
    return built


def _reference(record: dict, key: str, built: dict) -> tuple[bool, Any]:
    """(ready, value) for an optional id reference within the same record kind."""
    ref = record.get(key)
    if ref is None:
        return True, None
    ref = str(ref)
    if ref in built:
        return True, built[ref]
    return False, None


def _lookup(table: dict, ref: Any, kind: str, context: str) -> Any:
    if ref is None:
        return None
    try:
        return table[str(ref)]
    except KeyError:
        raise ValueError(f"{context}: unknown {kind} '{ref}'") from None


def _parse_categories(records: list[dict]) -> dict[str, TransactionCategory]:
    def build(record: dict, built: dict) -> TransactionCategory | None:
        ready, parent = _reference(record, "parent", built)
        if not ready:
            return None
        return TransactionCategory.from_dict(record, parent)

    return _build_in_dependency_order(records, "category", build)


def _parse_accounts(
    records: list[dict], categories: dict[str, TransactionCategory], reporting_currency: str
) -> dict[str, Account]:
    def build(record: dict, built: dict) -> Account | None:
        parent_ready, parent = _reference(record, "parent", built)
        portfolio_ready, portfolio = _reference(record, "portfolio", built)
        if not (parent_ready and portfolio_ready):
            return None

        context = f"Account '{record['id']}'"
        account = Account(
            id=str(record["id"]),
            name=record.get("name", str(record["id"])),
            account_type=AccountType(str(record["type"]).lower()),
            parent=parent,
            portfolio=portfolio,
            currency=record.get("currency"),
            auto_expense=_lookup(categories, record.get("auto_expense"), "category", context),
            opening_balance=_money(record.get("opening_balance")),
            maturity=_date(record.get("maturity")),
            rate=Rate.from_percentage(_decimal_text(record["rate"])) if record.get("rate") is not None else None,
            tax_free=bool(record.get("tax_free", False)),
            closed=bool(record.get("closed", False)),
        )
        _validate_account(account, context, reporting_currency)
        return account

    return _build_in_dependency_order(records, "account", build)


def _validate_account(account: Account, context: str, reporting_currency: str) -> None:
    if account.portfolio is not None and not account.portfolio.is_portfolio:
        raise ValueError(f"{context}: portfolio '{account.portfolio.id}' is not a portfolio account")
    if account.opening_balance is not None and account.is_foreign(reporting_currency):
        raise ValueError(f"{context}: opening balances are only supported in {reporting_currency}")
    if account.has_units and account.parent is None:
        raise ValueError(f"{context}: security holdings need a parent payee")


def _parse_transaction(
    index: int,
    record: dict,
    accounts: dict[str, Account],
    categories: dict[str, TransactionCategory],
) -> Transaction:
    context = f"Transaction {index}"
    for key in ("date", "debit", "credit", "amount", "category"):
        if record.get(key) is None:
            raise ValueError(f"{context}: missing '{key}'")

    debit = _lookup(accounts, record["debit"], "account", context)
    credit = _lookup(accounts, record["credit"], "account", context)
    for side, account in (("debit", debit), ("credit", credit)):
        if account.is_portfolio:
            raise ValueError(f"{context}: portfolio '{account.id}' cannot be the {side} account")

    def units(key: str) -> Units | None:
        value = record.get(key)
        return Units.from_value(_decimal_text(value)) if value is not None else None

    dilution = record.get("dilution")
    years = record.get("years")
    return Transaction(
        id=index,
        date=FinancialDate.from_value(record["date"]),
        debit=debit,
        credit=credit,
        amount=Money.from_amount(_decimal_text(record["amount"])),
        category=_lookup(categories, record["category"], "category", context),
        third_party=_lookup(accounts, record.get("third_party"), "account", context),
        tax_credit=_money(record.get("tax_credit")),
        debit_units=units("debit_units"),
        credit_units=units("credit_units"),
        dilution=Dilution.from_value(_decimal_text(dilution)) if dilution is not None else None,
        years=int(years) if years is not None else None,
        description=record.get("description"),
    )


def ledger_from_dict(data: dict[str, Any]) -> Ledger:
    """
    Build a Ledger from parsed ledger data.

    Transaction ids follow file order, starting at 1.

    Raises:
        ValueError: On an unknown reference, a bad value or an invalid record
    """
    reporting_currency = str(data.get("reporting_currency", "GBP")).upper()
    categories = _parse_categories(data.get("categories") or [])
    accounts = _parse_accounts(data.get("accounts") or [], categories, reporting_currency)

    transactions = [
        _parse_transaction(index, record, accounts, categories)
        for index, record in enumerate(data.get("transactions") or [], start=1)
    ]

    prices = []
    for record in data.get("prices") or []:
        security = _lookup(accounts, record.get("security"), "account", "Price")
        if security is None or not security.has_units:
            raise ValueError(f"Price for '{record.get('security')}' does not name a security holding")
        prices.append(
            SecurityPrice(
                security=security,
                date=FinancialDate.from_value(record["date"]),
                price=Price.from_value(_decimal_text(record["price"])),
            )
        )

    rates = [
        ExchangeRate(
            currency=str(record["currency"]).upper(),
            date=FinancialDate.from_value(record["date"]),
            rate=Ratio.from_value(_decimal_text(record["rate"])),
        )
        for record in data.get("rates") or []
    ]

    return Ledger(
        accounts=accounts,
        categories=categories,
        transactions=transactions,
        prices=prices,
        rates=rates,
        reporting_currency=reporting_currency,
    )


def load_ledger(path: str | Path) -> Ledger:
    """
    Load a ledger from a JSON or YAML file.

    Args:
        path: Ledger file; .yaml/.yml is read as YAML, anything else as JSON

    Returns:
        The loaded Ledger

    Raises:
        FileNotFoundError: If the file does not exist
        ValueError: If the file content is not a valid ledger
    """
    path = Path(path)
    if not path.exists():
        raise FileNotFoundError(f"Ledger file not found: {path}")

    if path.suffix.lower() in YAML_SUFFIXES:
        with open(path, encoding="utf-8") as f:
            data = yaml.safe_load(f) or {}
    else:
        data = read_json(path)

    if not isinstance(data, dict):
        raise ValueError(f"Ledger file {path} must contain a mapping at the top level")

    ledger = ledger_from_dict(data)
    logger.info(
        f"Loaded ledger {path.name}: {len(ledger.accounts)} accounts, "
        f"{len(ledger.transactions)} transactions, {len(ledger.prices)} prices"
    )
    return ledger


def _optional(record: dict, key: str, value: Any) -> None:
    if value is not None and value is not False:
        record[key] = value


def ledger_to_dict(ledger: Ledger) -> dict[str, Any]:
    """Plain-data form of a ledger, readable by ledger_from_dict."""
    categories = []
    for category in ledger.categories.values():
        record: dict[str, Any] = {"id": category.id, "name": category.name, "class": category.category_class.value}
        _optional(record, "parent", category.parent.id if category.parent else None)
        categories.append(record)

    accounts = []
    for account in ledger.accounts.values():
        record = {"id": account.id, "name": account.name, "type": account.account_type.value}
        _optional(record, "parent", account.parent.id if account.parent else None)
        _optional(record, "portfolio", account.portfolio.id if account.portfolio else None)
        _optional(record, "currency", account.currency)
        _optional(record, "auto_expense", account.auto_expense.id if account.auto_expense else None)
        _optional(record, "opening_balance", account.opening_balance)
        _optional(record, "maturity", account.maturity)
        _optional(record, "rate", account.rate.value * 100 if account.rate else None)
        _optional(record, "tax_free", account.tax_free)
        _optional(record, "closed", account.closed)
        accounts.append(record)

    transactions = []
    for t in ledger.transactions:
        record = {
            "date": t.date,
            "debit": t.debit.id,
            "credit": t.credit.id,
            "amount": t.amount,
            "category": t.category.id,
        }
        _optional(record, "third_party", t.third_party.id if t.third_party else None)
        _optional(record, "tax_credit", t.tax_credit)
        _optional(record, "debit_units", t.debit_units)
        _optional(record, "credit_units", t.credit_units)
        _optional(record, "dilution", t.dilution)
        _optional(record, "years", t.years)
        _optional(record, "description", t.description)
        transactions.append(record)

    return {
        "reporting_currency": ledger.reporting_currency,
        "categories": categories,
        "accounts": accounts,
        "transactions": transactions,
        "prices": [{"security": p.security.id, "date": p.date, "price": p.price} for p in ledger.prices],
        "rates": [{"currency": r.currency, "date": r.date, "rate": r.rate} for r in ledger.rates],
    }
