#!/usr/bin/env python3
"""
Money Primitive Type

Immutable currency value wrapper that uses integer minor units internally.
Prevents floating-point errors and provides type-safe currency operations.
"""

from dataclasses import dataclass
from decimal import Decimal

from .currency import (
    apportion_cents,
    cents_to_str,
    decimal_to_cents,
    format_cents,
    parse_amount_to_cents,
)


@dataclass(frozen=True)
class Money:
    """
    Immutable money value in minor units of the reporting currency.

    Supports both positive and negative amounts. Uses integer arithmetic
    throughout; ratios and weights are applied through Decimal and rounded
    half-up exactly once.

    Examples:
        >>> income = Money.from_cents(1234)
        >>> str(income)
        '12.34'

        >>> expense = Money.from_amount("-45.99")
        >>> expense.to_cents()
        -4599

        >>> (income + expense).abs()
        Money(cents=3365)
    """

    cents: int

    @classmethod
    def from_cents(cls, cents: int) -> "Money":
        """Create Money from minor units."""
        return cls(cents=cents)

    @classmethod
    def from_amount(cls, amount: str | int) -> "Money":
        """
        Parse from a major-unit string like '£123.45' or integer major units.

        Args:
            amount: String like "12.34" or integer like 12

        Returns:
            Money object
        """
        return cls(cents=parse_amount_to_cents(amount))

    @classmethod
    def zero(cls) -> "Money":
        """Zero amount."""
        return cls(cents=0)

    def to_cents(self) -> int:
        """Get value in minor units."""
        return self.cents

    def to_decimal(self) -> Decimal:
        """Get value in major units as an exact Decimal."""
        return Decimal(self.cents) / 100

    def format(self, currency: str = "GBP") -> str:
        """Format with currency symbol."""
        return format_cents(self.cents, currency)

    def abs(self) -> "Money":
        """Return absolute value of Money."""
        return Money(cents=abs(self.cents))

    def is_zero(self) -> bool:
        """True when the amount is zero."""
        return self.cents == 0

    def is_nonzero(self) -> bool:
        """True when the amount is not zero."""
        return self.cents != 0

    def is_positive(self) -> bool:
        """True when the amount is strictly positive."""
        return self.cents > 0

    def value_at_weight(self, numerator: "Money | Decimal | int", denominator: "Money | Decimal | int") -> "Money":
        """
        Apportion this amount by ``numerator / denominator``.

        Money weights are compared in minor units. A zero denominator
        yields zero.
        """
        num = numerator.cents if isinstance(numerator, Money) else numerator
        den = denominator.cents if isinstance(denominator, Money) else denominator
        return Money(cents=apportion_cents(self.cents, num, den))

    def value_at_ratio(self, ratio: Decimal) -> "Money":
        """Multiply by a decimal ratio, rounding half-up to the minor unit."""
        return Money(cents=decimal_to_cents(Decimal(self.cents) * ratio))

    def diluted(self, dilution: "Decimal") -> "Money":
        """Share of this amount retained after a dilution factor."""
        return self.value_at_ratio(dilution)

    def divide(self, divisor: int) -> "Money":
        """Divide by an integer count, rounding half-up."""
        return Money(cents=apportion_cents(self.cents, 1, divisor))

    def __add__(self, other: "Money") -> "Money":
        """Add two Money objects."""
        return Money(cents=self.cents + other.cents)

    def __sub__(self, other: "Money") -> "Money":
        """Subtract two Money objects."""
        return Money(cents=self.cents - other.cents)

    def __neg__(self) -> "Money":
        """Negate."""
        return Money(cents=-self.cents)

    def __mul__(self, scalar: int) -> "Money":
        """Multiply Money by integer scalar."""
        return Money(cents=self.cents * scalar)

    def __eq__(self, other: object) -> bool:
        """Check equality."""
        if not isinstance(other, Money):
            return NotImplemented
        return self.cents == other.cents

    def __lt__(self, other: "Money") -> bool:
        """Less than comparison."""
        return self.cents < other.cents

    def __le__(self, other: "Money") -> bool:
        """Less than or equal comparison."""
        return self.cents <= other.cents

    def __gt__(self, other: "Money") -> bool:
        """Greater than comparison."""
        return self.cents > other.cents

    def __ge__(self, other: "Money") -> bool:
        """Greater than or equal comparison."""
        return self.cents >= other.cents

    def __str__(self) -> str:
        """Format as major-unit string without symbol."""
        return cents_to_str(self.cents)

    def __repr__(self) -> str:
        """Repr format."""
        return f"Money(cents={self.cents})"
