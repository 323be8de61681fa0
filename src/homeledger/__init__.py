"""
homeledger - Household Ledger Analysis

Turns a ledger of dated transactions, security prices and exchange rates
into per-owner balance and gain/loss buckets, with point-in-time and
date-range snapshots and deferred tax on life-bond chargeable gains.

Domain Packages:
- core: Money and decimal primitives, dates, configuration, JSON helpers
- ledger: Ledger models, JSON/YAML loader and ledger store
- analysis: Buckets, event view, transaction processor, manager and reports
- cli: Command-line interface

Example Usage:
    from homeledger.ledger import load_ledger
    from homeledger.analysis import AnalysisManager

    manager = AnalysisManager(load_ledger("ledger.yaml"))
    snapshot = manager.get_snapshot(FinancialDate.from_string("2024-03-31"))
"""

__version__ = "0.1.0"
__author__ = "Karl Davis"

from .core.config import Environment, get_config
from .core.dates import DateRange, FinancialDate
from .core.money import Money

__all__ = [
    "DateRange",
    "Environment",
    "FinancialDate",
    "Money",
    "get_config",
]
