"""
Financial Analysis Package

Single-pass analysis of a ledger into per-owner buckets.

Key Components:
- processor: TransactionProcessor, the forward pass over ledger events
- registry: Analysis, the owner-keyed bucket lists for one date range
- buckets: Account, security, portfolio, payee, category and tax basis buckets
- events: EventLedgerView and its date-range windows
- chargeable: Life-bond chargeable gains and top-sliced tax apportionment
- manager: AnalysisManager, cached analyses per date range
- report, charts: pandas tables and matplotlib charts of analysis output
"""

from .buckets import TaxBasis
from .chargeable import ChargeableEvent, ChargeableEventList
from .events import EventLedgerView, EventType, EventWindow
from .manager import AnalysisManager
from .processor import ProcessorSettings, TransactionProcessor, build_analysis
from .registry import Analysis, OwnerKind
from .values import (
    AccountAttribute,
    BucketSnapshot,
    BucketValues,
    CategoryAttribute,
    PayeeAttribute,
    SecurityAttribute,
    TaxBasisAttribute,
)

__all__ = [
    "AccountAttribute",
    "Analysis",
    "AnalysisManager",
    "BucketSnapshot",
    "BucketValues",
    "CategoryAttribute",
    "ChargeableEvent",
    "ChargeableEventList",
    "EventLedgerView",
    "EventType",
    "EventWindow",
    "OwnerKind",
    "PayeeAttribute",
    "ProcessorSettings",
    "SecurityAttribute",
    "TaxBasis",
    "TaxBasisAttribute",
    "TransactionProcessor",
    "build_analysis",
]
