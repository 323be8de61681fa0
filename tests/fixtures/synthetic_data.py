#!/usr/bin/env python3
"""
Synthetic Test Data Generators

Builds completely synthetic ledgers for unit, integration and CLI tests.
All names, amounts and dates are invented.

Note: Uses standard random module for test data generation (not cryptographic use).
"""

import copy
import random
from datetime import date, timedelta
from pathlib import Path
from typing import Any

import yaml

from homeledger.core.currency import cents_to_str
from homeledger.core.json_utils import write_json
from homeledger.ledger import Ledger, ledger_from_dict

HOUSEHOLD_CATEGORIES = [
    ("household", "expense", None),
    ("groceries", "expense", "household"),
    ("utilities", "expense", "household"),
    ("salary", "salary", None),
    ("interest", "interest", None),
    ("dividend", "dividend", None),
    ("transfer", "transfer", None),
    ("split", "stocksplit", None),
    ("rights_taken", "stockrightstaken", None),
    ("rights_waived", "stockrightswaived", None),
    ("demerger", "stockdemerger", None),
    ("takeover", "stocktakeover", None),
]

HOUSEHOLD_ACCOUNTS = [
    {"id": "bank", "name": "High Street Bank", "type": "institution"},
    {"id": "current", "name": "Current Account", "type": "deposit", "parent": "bank", "opening_balance": "1000.00"},
    {"id": "savings", "name": "Savings Account", "type": "savings", "parent": "bank"},
    {"id": "card", "name": "Credit Card", "type": "creditcard", "parent": "bank"},
    {"id": "grocer", "name": "Corner Grocer", "type": "payee"},
    {"id": "utility", "name": "Power Company", "type": "payee"},
    {"id": "employer", "name": "Example Employer", "type": "employer"},
    {"id": "acme_plc", "name": "Acme plc", "type": "payee"},
    {"id": "broker", "name": "Broker Portfolio", "type": "portfolio"},
    {"id": "acme", "name": "Acme Shares", "type": "shares", "parent": "acme_plc", "portfolio": "broker"},
]


class LedgerBuilder:
    """
    Fluent builder for ledger file data.

    Records are kept in the on-disk file layout, so ``build`` goes through
    the real loader and every reference is checked.
    """

    def __init__(self, reporting_currency: str = "GBP") -> None:
        self.data: dict[str, Any] = {
            "reporting_currency": reporting_currency,
            "categories": [],
            "accounts": [],
            "transactions": [],
            "prices": [],
            "rates": [],
        }

    @classmethod
    def household(cls) -> "LedgerBuilder":
        builder = cls()
        for category_id, category_class, parent in HOUSEHOLD_CATEGORIES:
            builder.category(category_id, category_class, parent=parent)
        for record in HOUSEHOLD_ACCOUNTS:
            builder.data["accounts"].append(dict(record))
        return builder

    def category(self, category_id: str, category_class: str, parent: str | None = None, name: str | None = None):
        record = {"id": category_id, "name": name or category_id.replace("_", " ").title(), "class": category_class}
        if parent is not None:
            record["parent"] = parent
        self.data["categories"].append(record)
        return self

    def account(self, account_id: str, account_type: str, name: str | None = None, **fields: Any):
        record = {"id": account_id, "name": name or account_id.replace("_", " ").title(), "type": account_type}
        record.update({key: value for key, value in fields.items() if value is not None})
        self.data["accounts"].append(record)
        return self

    def transaction(self, when: str, debit: str, credit: str, amount: Any, category: str, **fields: Any):
        record = {"date": when, "debit": debit, "credit": credit, "amount": amount, "category": category}
        record.update({key: value for key, value in fields.items() if value is not None})
        self.data["transactions"].append(record)
        return self

    def price(self, security: str, when: str, price: Any):
        self.data["prices"].append({"security": security, "date": when, "price": price})
        return self

    def rate(self, currency: str, when: str, rate: Any):
        self.data["rates"].append({"currency": currency, "date": when, "rate": rate})
        return self

    def to_dict(self) -> dict[str, Any]:
        return copy.deepcopy(self.data)

    def build(self) -> Ledger:
        return ledger_from_dict(self.to_dict())


def scenario_builder() -> LedgerBuilder:
    """
    Opening balance of 1000 in A on 2024-01-01, 200 moved A to B on
    2024-01-06 and a 50 dividend from S reinvested in S on 2024-01-11.
    """
    return (
        LedgerBuilder()
        .category("transfer", "transfer")
        .category("dividend", "dividend")
        .account("a", "deposit", name="Account A", opening_balance="1000.00")
        .account("b", "deposit", name="Account B")
        .account("s_plc", "payee", name="S plc")
        .account("s", "shares", name="Security S", parent="s_plc")
        .transaction("2024-01-06", "a", "b", "200.00", "transfer")
        .transaction("2024-01-11", "s", "s", "50.00", "dividend", credit_units=10)
        .price("s", "2024-01-11", "5.00")
    )


def generate_synthetic_ledger_data(
    num_transactions: int = 100,
    start_date: date | None = None,
    days: int = 365,
    seed: int | None = None,
) -> dict[str, Any]:
    """
    Generate a synthetic household ledger in file layout.

    Salary arrives monthly; the rest is a random mix of grocery and utility
    spending, card payments, savings transfers and share purchases, sales
    and dividends. Acme is priced every fortnight.

    Args:
        num_transactions: Number of random transactions besides salary
        start_date: First ledger date (default: 2024-01-01)
        days: Number of days the ledger spans
        seed: Random seed for repeatable data

    Returns:
        Ledger data as loaded by ledger_from_dict
    """
    rng = random.Random(seed)
    if start_date is None:
        start_date = date(2024, 1, 1)

    builder = LedgerBuilder.household()

    def day(offset: int) -> str:
        return (start_date + timedelta(days=offset)).isoformat()

    def amount(low: int, high: int) -> str:
        return cents_to_str(rng.randint(low, high)).replace(",", "")

    for offset in range(0, days + 1, 14):
        builder.price("acme", day(offset), f"{rng.randint(400, 800) / 100:.2f}")

    records = []
    for offset in range(0, days, 30):
        records.append((offset, ("employer", "current", amount(250_000, 300_000), "salary", {})))

    for _ in range(num_transactions):
        offset = rng.randint(0, days)
        kind = rng.choice(["groceries", "card_groceries", "utilities", "card_payment", "save", "buy", "sell", "dividend"])
        if kind == "groceries":
            record = ("current", "grocer", amount(500, 15_000), "groceries", {})
        elif kind == "card_groceries":
            record = ("card", "grocer", amount(500, 15_000), "groceries", {})
        elif kind == "utilities":
            record = ("current", "utility", amount(5_000, 20_000), "utilities", {})
        elif kind == "card_payment":
            record = ("current", "card", amount(5_000, 50_000), "transfer", {})
        elif kind == "save":
            record = ("current", "savings", amount(10_000, 100_000), "transfer", {})
        elif kind == "buy":
            record = ("current", "acme", amount(50_000, 200_000), "transfer", {"credit_units": rng.randint(50, 300)})
        elif kind == "sell":
            record = ("acme", "current", amount(20_000, 100_000), "transfer", {"debit_units": rng.randint(10, 100)})
        else:
            record = ("acme", "current", amount(1_000, 5_000), "dividend", {})
        records.append((offset, record))

    records.sort(key=lambda item: item[0])
    for offset, (debit, credit, value, category, extra) in records:
        builder.transaction(day(offset), debit, credit, value, category, **extra)

    return builder.to_dict()


def write_ledger_file(path: Path, data: dict[str, Any]) -> Path:
    """Write ledger data as YAML or JSON according to the file suffix."""
    path.parent.mkdir(parents=True, exist_ok=True)
    if path.suffix.lower() in (".yaml", ".yml"):
        with open(path, "w", encoding="utf-8") as f:
            yaml.safe_dump(data, f, default_flow_style=False, sort_keys=False)
    else:
        write_json(path, data)
    return path
