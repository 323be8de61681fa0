#!/usr/bin/env python3
"""
FinancialDate and DateRange Primitive Types

Immutable date wrapper with consistent formatting for financial operations,
plus the inclusive date range used to key analyses and slice event views.
"""

from dataclasses import dataclass
from datetime import date, datetime, timedelta

from .errors import AnalysisLogicError


@dataclass(frozen=True)
class FinancialDate:
    """Immutable financial date wrapper with consistent formatting."""

    date: date

    @classmethod
    def from_string(cls, date_str: str, date_format: str = "%Y-%m-%d") -> "FinancialDate":
        """
        Parse from string in specified format.

        Args:
            date_str: Date string to parse
            date_format: Date format (default: ISO format "%Y-%m-%d")

        Returns:
            FinancialDate object
        """
        return cls(date=datetime.strptime(date_str, date_format).date())

    @classmethod
    def from_value(cls, value: "FinancialDate | date | str") -> "FinancialDate":
        """Coerce a date, ISO string or FinancialDate."""
        if isinstance(value, FinancialDate):
            return value
        if isinstance(value, datetime):
            return cls(date=value.date())
        if isinstance(value, date):
            return cls(date=value)
        return cls.from_string(str(value))

    @classmethod
    def today(cls) -> "FinancialDate":
        """Get today's date."""
        return cls(date=date.today())

    def to_iso_string(self) -> str:
        """Format as YYYY-MM-DD."""
        return self.date.isoformat()

    def add_days(self, days: int) -> "FinancialDate":
        """Date shifted by a number of days."""
        return FinancialDate(date=self.date + timedelta(days=days))

    def add_months(self, months: int) -> "FinancialDate":
        """Date shifted by whole months, clamped to the end of shorter months."""
        month_index = self.date.month - 1 + months
        year = self.date.year + month_index // 12
        month = month_index % 12 + 1
        day = self.date.day
        while True:
            try:
                return FinancialDate(date=date(year, month, day))
            except ValueError:
                day -= 1

    def age_days(self, other: "FinancialDate | None" = None) -> int:
        """
        Calculate days between this date and another (or today).

        Args:
            other: Other date to compare to (default: today)

        Returns:
            Number of days difference
        """
        if other is None:
            other = FinancialDate.today()
        return (other.date - self.date).days

    def __str__(self) -> str:
        """String representation."""
        return self.to_iso_string()

    def __eq__(self, other: object) -> bool:
        """Check equality."""
        if not isinstance(other, FinancialDate):
            return NotImplemented
        return self.date == other.date

    def __hash__(self) -> int:
        return hash(self.date)

    def __lt__(self, other: "FinancialDate") -> bool:
        """Less than comparison."""
        return self.date < other.date

    def __le__(self, other: "FinancialDate") -> bool:
        """Less than or equal comparison."""
        return self.date <= other.date

    def __gt__(self, other: "FinancialDate") -> bool:
        """Greater than comparison."""
        return self.date > other.date

    def __ge__(self, other: "FinancialDate") -> bool:
        """Greater than or equal comparison."""
        return self.date >= other.date

    def __repr__(self) -> str:
        """Repr format."""
        return f"FinancialDate(date={self.date!r})"


@dataclass(frozen=True)
class DateRange:
    """
    Inclusive date range ``[start, end]``.

    Either end may be None, meaning unbounded in that direction. Equality and
    hashing are structural on the two dates, so ranges can key a cache.
    """

    start: FinancialDate | None = None
    end: FinancialDate | None = None

    def __post_init__(self) -> None:
        if self.start is not None and self.end is not None and self.start > self.end:
            raise AnalysisLogicError(f"Malformed date range: {self.start} is after {self.end}")

    @classmethod
    def of(cls, start: "FinancialDate | date | str | None", end: "FinancialDate | date | str | None") -> "DateRange":
        """Build from loosely typed bounds."""
        return cls(
            start=FinancialDate.from_value(start) if start is not None else None,
            end=FinancialDate.from_value(end) if end is not None else None,
        )

    @classmethod
    def unbounded(cls) -> "DateRange":
        return cls()

    def contains(self, when: FinancialDate) -> bool:
        """True when the date lies within the range."""
        if self.start is not None and when < self.start:
            return False
        if self.end is not None and when > self.end:
            return False
        return True

    def is_before(self, when: FinancialDate) -> bool:
        """True when the date precedes the start of the range."""
        return self.start is not None and when < self.start

    def is_after(self, when: FinancialDate) -> bool:
        """True when the date follows the end of the range."""
        return self.end is not None and when > self.end

    def __str__(self) -> str:
        start = str(self.start) if self.start else "..."
        end = str(self.end) if self.end else "..."
        return f"{start} to {end}"
