"""
Ledger Package

Read-only input to the analysis engine and the adapters that produce it.
"""

from .datastore import LedgerStore
from .loader import ledger_from_dict, ledger_to_dict, load_ledger
from .models import (
    Account,
    AccountType,
    CategoryClass,
    ExchangeRate,
    Ledger,
    SecurityPrice,
    Transaction,
    TransactionCategory,
)

__all__ = [
    "Account",
    "AccountType",
    "CategoryClass",
    "ExchangeRate",
    "Ledger",
    "LedgerStore",
    "SecurityPrice",
    "Transaction",
    "TransactionCategory",
    "ledger_from_dict",
    "ledger_to_dict",
    "load_ledger",
]
