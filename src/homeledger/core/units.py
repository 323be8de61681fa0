#!/usr/bin/env python3
"""
Decimal Primitive Types

Immutable wrappers for the non-money quantities used by security analysis:
unit holdings, prices per unit, percentage rates, exchange-rate ratios and
demerger dilution factors. All are backed by Decimal, never float.
"""

from dataclasses import dataclass
from decimal import ROUND_HALF_UP, Decimal, InvalidOperation

from .currency import decimal_to_cents
from .money import Money

UNITS_PLACES = Decimal("0.0001")


def _to_decimal(value: "Decimal | int | str") -> Decimal:
    if isinstance(value, float):
        raise TypeError("Use str or Decimal, not float")
    try:
        return Decimal(value)
    except InvalidOperation as e:
        raise ValueError(f"Invalid number: {value!r}") from e


@dataclass(frozen=True)
class Units:
    """
    Immutable quantity of security units, held to four decimal places.

    Examples:
        >>> Units.from_value("10.5") + Units.from_value(2)
        Units(value=Decimal('12.5000'))
        >>> Units.from_value(100).value_at_price(Price.from_value("1.25"))
        Money(cents=12500)
    """

    value: Decimal

    @classmethod
    def from_value(cls, value: "Decimal | int | str") -> "Units":
        """Create Units, quantised to four places."""
        return cls(value=_to_decimal(value).quantize(UNITS_PLACES, rounding=ROUND_HALF_UP))

    @classmethod
    def zero(cls) -> "Units":
        """Zero units."""
        return cls.from_value(0)

    def is_zero(self) -> bool:
        return self.value == 0

    def is_nonzero(self) -> bool:
        return self.value != 0

    def is_positive(self) -> bool:
        return self.value > 0

    def value_at_price(self, price: "Price") -> Money:
        """Market value of these units at a price."""
        return Money.from_cents(decimal_to_cents(self.value * price.value * 100))

    def __add__(self, other: "Units") -> "Units":
        return Units.from_value(self.value + other.value)

    def __sub__(self, other: "Units") -> "Units":
        return Units.from_value(self.value - other.value)

    def __neg__(self) -> "Units":
        return Units.from_value(-self.value)

    def __lt__(self, other: "Units") -> bool:
        return self.value < other.value

    def __le__(self, other: "Units") -> bool:
        return self.value <= other.value

    def __gt__(self, other: "Units") -> bool:
        return self.value > other.value

    def __ge__(self, other: "Units") -> bool:
        return self.value >= other.value

    def __str__(self) -> str:
        return f"{self.value:f}"


@dataclass(frozen=True)
class Price:
    """Money per unit in major currency units, e.g. Price(Decimal('2.3450'))."""

    value: Decimal

    @classmethod
    def from_value(cls, value: "Decimal | int | str") -> "Price":
        return cls(value=_to_decimal(value))

    def __str__(self) -> str:
        return f"{self.value:f}"


@dataclass(frozen=True)
class Rate:
    """Percentage rate held as a fraction (5% is Decimal('0.05'))."""

    value: Decimal

    @classmethod
    def from_value(cls, value: "Decimal | int | str") -> "Rate":
        return cls(value=_to_decimal(value))

    @classmethod
    def from_percentage(cls, percent: "Decimal | int | str") -> "Rate":
        return cls(value=_to_decimal(percent) / 100)

    def of(self, amount: Money) -> Money:
        """The share of an amount at this rate."""
        return amount.value_at_ratio(self.value)

    def __str__(self) -> str:
        return f"{(self.value * 100).normalize():f}%"


@dataclass(frozen=True)
class Ratio:
    """Exchange rate: reporting-currency value of one unit of a foreign currency."""

    value: Decimal

    @classmethod
    def from_value(cls, value: "Decimal | int | str") -> "Ratio":
        ratio = _to_decimal(value)
        if ratio <= 0:
            raise ValueError(f"Exchange rate must be positive: {value}")
        return cls(value=ratio)

    def to_local(self, foreign: Money) -> Money:
        """Convert a foreign-currency amount to the reporting currency."""
        return foreign.value_at_ratio(self.value)

    def to_foreign(self, local: Money) -> Money:
        """Convert a reporting-currency amount to the foreign currency."""
        return local.value_at_ratio(1 / self.value)

    def __str__(self) -> str:
        return f"{self.value:f}"


@dataclass(frozen=True)
class Dilution:
    """Share of cost retained by a security after a demerger, in (0, 1]."""

    value: Decimal

    @classmethod
    def from_value(cls, value: "Decimal | int | str") -> "Dilution":
        dilution = _to_decimal(value)
        if not 0 < dilution <= 1:
            raise ValueError(f"Dilution must be in (0, 1]: {value}")
        return cls(value=dilution)

    def __str__(self) -> str:
        return f"{self.value:f}"
