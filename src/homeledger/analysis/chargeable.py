#!/usr/bin/env python3
"""
Chargeable Events

Life-bond gains are taxed by "top slicing": each gain is divided by the
number of years it accrued over, tax is computed on the total of the slices,
and that tax is shared back across the events in proportion to their
slices before being scaled up by each event's years.
"""

import logging
from collections.abc import Iterator

from ..core.dates import DateRange, FinancialDate
from ..core.errors import AnalysisLogicError
from ..core.money import Money
from ..ledger.models import Transaction

logger = logging.getLogger(__name__)


class ChargeableEvent:
    """A taxable gain and its slice, with tax assigned once after the pass."""

    def __init__(self, transaction: Transaction, gains: Money) -> None:
        self.transaction = transaction
        self.gains = gains
        self.years = transaction.years if transaction.years and transaction.years > 0 else 1
        self.slice = gains.divide(self.years)
        self._taxation: Money | None = None

    @property
    def date(self) -> FinancialDate:
        return self.transaction.date

    @property
    def taxation(self) -> Money | None:
        """Tax on this event, or None before apply_tax."""
        return self._taxation

    def apply_tax(self, total_tax: Money, total_slice: Money) -> Money:
        """
        Take this event's share of the tax on the slice total.

        The share is ``total_tax * slice / total_slice``; the event's
        taxation is that share multiplied by its years.

        Raises:
            AnalysisLogicError: If tax has already been applied
        """
        if self._taxation is not None:
            raise AnalysisLogicError(f"Tax already applied to chargeable event {self.transaction.id}")
        portion = total_tax.value_at_weight(self.slice, total_slice)
        self._taxation = portion * self.years
        return self._taxation

    def __repr__(self) -> str:
        return f"ChargeableEvent({self.date}, gains={self.gains}, years={self.years}, slice={self.slice})"


class ChargeableEventList:
    """Append-only list of chargeable events. Totals are summed on demand."""

    def __init__(self, events: list[ChargeableEvent] | None = None) -> None:
        self._events: list[ChargeableEvent] = list(events) if events else []

    def add_event(self, transaction: Transaction, gains: Money) -> ChargeableEvent:
        event = ChargeableEvent(transaction, gains)
        self._events.append(event)
        logger.debug(f"Chargeable gain {gains} over {event.years} years from transaction {transaction.id}")
        return event

    def slice_total(self) -> Money:
        return sum((event.slice for event in self._events), Money.zero())

    def gains_total(self) -> Money:
        return sum((event.gains for event in self._events), Money.zero())

    def tax_total(self) -> Money:
        """Sum of assigned taxation; events not yet taxed count as zero."""
        return sum((event.taxation or Money.zero() for event in self._events), Money.zero())

    def apply_tax(self, tax: Money, total_slice: Money | None = None) -> None:
        """
        Apportion tax across every event. Call once, after all events are added.

        Args:
            tax: Tax due on the slice total
            total_slice: Slice total to apportion against (default: this list's)
        """
        if total_slice is None:
            total_slice = self.slice_total()
        for event in self._events:
            event.apply_tax(tax, total_slice)

    def for_range(self, date_range: DateRange) -> "ChargeableEventList":
        """Untaxed copies of the events dated within a range."""
        return ChargeableEventList(
            [
                ChargeableEvent(event.transaction, event.gains)
                for event in self._events
                if date_range.contains(event.date)
            ]
        )

    def for_date(self, as_of: FinancialDate) -> "ChargeableEventList":
        return self.for_range(DateRange(end=as_of))

    def is_empty(self) -> bool:
        return not self._events

    def __iter__(self) -> Iterator[ChargeableEvent]:
        return iter(self._events)

    def __len__(self) -> int:
        return len(self._events)
