#!/usr/bin/env python3
"""
Currency Conversion and Handling Utilities

Integer minor-unit arithmetic for the homeledger analysis engine.

Currency Systems:
- Internal calculations use minor units (pence/cents): 100 = 1.00
- Ledger files carry major-unit strings: "1234.56" or "£1,234.56"
- Prices, rates and unit counts are Decimals and are only converted to
  minor units at the point a Money value is produced

Key Principles:
- Never use floating-point arithmetic for currency calculations
- Round once, at the point a Decimal becomes an integer amount
"""

from decimal import ROUND_HALF_UP, Decimal, InvalidOperation

CURRENCY_SYMBOLS = {
    "GBP": "£",
    "USD": "$",
    "EUR": "€",
}


def cents_to_str(cents: int) -> str:
    """
    Convert minor units to a major-unit string using pure integer arithmetic.

    Example:
        cents_to_str(-4599) -> "-45.99"
    """
    is_negative = cents < 0
    abs_cents = abs(int(cents))

    major = abs_cents // 100
    remainder = abs_cents % 100

    if is_negative:
        return f"-{major:,}.{remainder:02d}"
    return f"{major:,}.{remainder:02d}"


def parse_amount_to_cents(amount: str | int) -> int:
    """
    Parse a major-unit amount to minor units.

    Integers are whole major units. Strings may carry a currency symbol and
    thousands separators; digits beyond the second decimal place are rounded
    half-up.

    Examples:
        parse_amount_to_cents("12.34") -> 1234
        parse_amount_to_cents("£1,234.56") -> 123456
        parse_amount_to_cents("-0.005") -> -1
        parse_amount_to_cents(12) -> 1200

    Raises:
        ValueError: If the string is not a number
    """
    if isinstance(amount, bool):
        raise ValueError(f"Invalid amount: {amount!r}")
    if isinstance(amount, int):
        return amount * 100

    clean = str(amount).strip()
    for symbol in CURRENCY_SYMBOLS.values():
        clean = clean.replace(symbol, "")
    clean = clean.replace(",", "").strip()

    if not clean:
        return 0

    try:
        return decimal_to_cents(Decimal(clean) * 100)
    except InvalidOperation as e:
        raise ValueError(f"Invalid amount: {amount!r}") from e


def decimal_to_cents(value: Decimal) -> int:
    """Round a Decimal number of minor units to the nearest whole unit (half-up)."""
    return int(value.quantize(Decimal(1), rounding=ROUND_HALF_UP))


def apportion_cents(cents: int, numerator: Decimal | int, denominator: Decimal | int) -> int:
    """
    Calculate ``cents * numerator / denominator`` rounded half-up.

    Args:
        cents: Amount to apportion
        numerator: Weight of the share being calculated
        denominator: Total weight

    Returns:
        Apportioned amount, 0 if the denominator is zero
    """
    if denominator == 0:
        return 0
    return decimal_to_cents(Decimal(cents) * Decimal(numerator) / Decimal(denominator))


def format_cents(cents: int, currency: str = "GBP") -> str:
    """Format minor units with the currency symbol, e.g. '£12.34' or '-£12.34'."""
    symbol = CURRENCY_SYMBOLS.get(currency, f"{currency} ")
    if cents < 0:
        return f"-{symbol}{cents_to_str(-cents)}"
    return f"{symbol}{cents_to_str(cents)}"
