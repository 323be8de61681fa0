#!/usr/bin/env python3
"""
Bucket History

Chronological record of a bucket's counter values after each transaction
that touched it. Derived buckets are built by replaying a slice of their
source bucket's history, so a snapshot never needs to reprocess the ledger.
"""

from collections.abc import Iterator
from dataclasses import dataclass

from ..core.dates import DateRange, FinancialDate
from ..ledger.models import Transaction
from .values import BucketValues


@dataclass(frozen=True)
class HistoryEntry:
    """Counter values of a bucket immediately after a transaction."""

    transaction: Transaction
    values: BucketValues

    @property
    def date(self) -> FinancialDate:
        return self.transaction.date


class BucketHistory:
    """
    Ordered transaction-to-values history for one bucket.

    ``base_values`` are the values the history starts from: the opening
    values for a full build, or the state just before a range's start for a
    range view.
    """

    def __init__(self, base_values: BucketValues) -> None:
        self._base_values = base_values.counters().frozen()
        self._entries: dict[int, HistoryEntry] = {}

    @classmethod
    def for_range(cls, source: "BucketHistory", date_range: DateRange) -> "BucketHistory":
        """
        History restricted to a date range.

        Entries before the range fold into the base values; entries after it
        are dropped. An unbounded start keeps the source's base values.
        """
        base = source.base_values
        history = cls(base)
        for entry in source:
            if date_range.is_before(entry.date):
                base = entry.values
                continue
            if date_range.is_after(entry.date):
                break
            history._entries[entry.transaction.id] = entry
        history._base_values = base
        return history

    @classmethod
    def for_date(cls, source: "BucketHistory", as_of: FinancialDate) -> "BucketHistory":
        """History of everything up to and including a date."""
        return cls.for_range(source, DateRange(end=as_of))

    @property
    def base_values(self) -> BucketValues:
        return self._base_values

    def register(self, transaction: Transaction, values: BucketValues) -> BucketValues:
        """
        Record the values after a transaction.

        A transaction that touches the bucket more than once keeps its first
        position and its latest values.
        """
        snapshot = values.counters().frozen()
        self._entries[transaction.id] = HistoryEntry(transaction=transaction, values=snapshot)
        return snapshot

    def values_for(self, transaction: Transaction) -> BucketValues | None:
        entry = self._entries.get(transaction.id)
        return entry.values if entry else None

    def latest_values(self) -> BucketValues:
        """Mutable copy of the most recent values (or the base values when empty)."""
        if self._entries:
            return next(reversed(self._entries.values())).values.copy()
        return self._base_values.copy()

    def is_idle(self) -> bool:
        """True when no transaction is recorded."""
        return not self._entries

    def transactions(self) -> list[Transaction]:
        return [entry.transaction for entry in self._entries.values()]

    def __iter__(self) -> Iterator[HistoryEntry]:
        return iter(self._entries.values())

    def __len__(self) -> int:
        return len(self._entries)
