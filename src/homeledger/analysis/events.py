#!/usr/bin/env python3
"""
Event Ledger View

Chronological merge of the ledger's transactions, security prices and
exchange rates. Prices (and rates) sharing a date collapse into a single
event. The merged list is built once and never changes; range queries
return windows over the same storage.
"""

from bisect import bisect_left, bisect_right
from collections.abc import Iterator, Sequence
from dataclasses import dataclass, field
from enum import Enum

from ..core.dates import DateRange, FinancialDate
from ..ledger.models import ExchangeRate, Ledger, SecurityPrice, Transaction


class EventType(Enum):
    """Kinds of ledger event."""

    TRANSACTION = "transaction"
    PRICE = "price"
    XCHGRATE = "xchgrate"


@dataclass(frozen=True)
class LedgerEvent:
    """One entry in the event view."""

    event_type: EventType
    date: FinancialDate
    transaction: Transaction | None = None
    prices: tuple[SecurityPrice, ...] = field(default=())
    rates: tuple[ExchangeRate, ...] = field(default=())

    def __str__(self) -> str:
        if self.transaction is not None:
            return str(self.transaction)
        count = len(self.prices) or len(self.rates)
        return f"{self.date} {self.event_type.value} x{count}"


def _group_by_date(items: list, event_type: EventType, key: str) -> list[LedgerEvent]:
    grouped: dict[FinancialDate, list] = {}
    for item in items:
        grouped.setdefault(item.date, []).append(item)
    return [LedgerEvent(event_type=event_type, date=when, **{key: tuple(group)}) for when, group in grouped.items()]


class EventWindow(Sequence):
    """
    Contiguous slice ``[start, stop)`` of an EventLedgerView.

    Holds indices into the view's storage rather than a copy of the events.
    """

    def __init__(self, view: "EventLedgerView", start: int, stop: int) -> None:
        self.view = view
        self.start = start
        self.stop = stop

    def for_range(self, date_range: DateRange) -> "EventWindow":
        """
        Sub-window of events dated within an inclusive range.

        Start is the first index dated on or after range.start, stop the first
        index dated after range.end. An empty result is a zero-length window.
        """
        dates = self.view.dates
        start = self.start
        stop = self.stop
        if date_range.start is not None:
            start = bisect_left(dates, date_range.start, self.start, self.stop)
        if date_range.end is not None:
            stop = bisect_right(dates, date_range.end, self.start, self.stop)
        return EventWindow(self.view, start, max(start, stop))

    def for_date(self, as_of: FinancialDate) -> "EventWindow":
        """Sub-window of events dated on or before a date."""
        return self.for_range(DateRange(end=as_of))

    def transactions(self) -> Iterator[Transaction]:
        """Transactions in the window, in processing order."""
        for event in self:
            if event.transaction is not None:
                yield event.transaction

    def last_date(self) -> FinancialDate | None:
        return self.view.dates[self.stop - 1] if self.stop > self.start else None

    def __getitem__(self, index):
        if isinstance(index, slice):
            return [self[i] for i in range(*index.indices(len(self)))]
        if index < 0:
            index += len(self)
        if not 0 <= index < len(self):
            raise IndexError("event window index out of range")
        return self.view.events[self.start + index]

    def __iter__(self) -> Iterator[LedgerEvent]:
        events = self.view.events
        for index in range(self.start, self.stop):
            yield events[index]

    def __len__(self) -> int:
        return self.stop - self.start

    def __repr__(self) -> str:
        return f"EventWindow([{self.start}, {self.stop}) of {len(self.view.events)})"


class EventLedgerView(EventWindow):
    """
    Sorted, immutable merge of a ledger's events.

    Transactions come first in ledger order, followed by one PRICE event per
    price date and one XCHGRATE event per rate date; a stable sort by date
    then interleaves them, so same-day transactions precede same-day prices.
    """

    def __init__(self, events: tuple[LedgerEvent, ...]) -> None:
        self.events = events
        self.dates = [event.date for event in events]
        super().__init__(self, 0, len(events))

    @classmethod
    def from_ledger(cls, ledger: Ledger) -> "EventLedgerView":
        events = [
            LedgerEvent(event_type=EventType.TRANSACTION, date=transaction.date, transaction=transaction)
            for transaction in ledger.transactions
        ]
        events.extend(_group_by_date(ledger.prices, EventType.PRICE, "prices"))
        events.extend(_group_by_date(ledger.rates, EventType.XCHGRATE, "rates"))
        events.sort(key=lambda event: event.date)
        return cls(tuple(events))
