#!/usr/bin/env python3
"""
Bucket Attributes and Typed Value Store

Each bucket kind has a closed attribute enum. Every attribute declares the
kind of value it holds and whether it is a counter (accumulated through the
processing pass and replayed from history) or derived (recomputed at each
cut-off). BucketValues enforces the declared kind on every write and offers
typed accessors that treat a missing attribute as zero.
"""

from dataclasses import dataclass
from enum import Enum
from typing import Any

from ..core.dates import FinancialDate
from ..core.errors import AnalysisLogicError
from ..core.money import Money
from ..core.units import Price, Rate, Ratio, Units


class ValueKind(Enum):
    """Kinds of value an attribute can hold."""

    MONEY = "money"
    UNITS = "units"
    PRICE = "price"
    RATE = "rate"
    RATIO = "ratio"
    DATE = "date"

    @property
    def value_type(self) -> type:
        return _VALUE_TYPES[self]


_VALUE_TYPES = {
    ValueKind.MONEY: Money,
    ValueKind.UNITS: Units,
    ValueKind.PRICE: Price,
    ValueKind.RATE: Rate,
    ValueKind.RATIO: Ratio,
    ValueKind.DATE: FinancialDate,
}


class _AttributeMixin:
    """
    Shared behaviour for attribute enums whose values are (label, kind, counter[, flow]).

    A flow counter accumulates movements (income, spend, gains) and is
    reported as its change over a window; other counters are balances.
    """

    def __init__(self, label: str, kind: ValueKind, counter: bool, flow: bool = False) -> None:
        self.label = label
        self.kind = kind
        self.is_counter = counter
        self.is_flow = flow


class AccountAttribute(_AttributeMixin, Enum):
    """Attributes of deposit, cash and loan buckets."""

    VALUATION = ("valuation", ValueKind.MONEY, True)
    FOREIGNVALUE = ("foreign_value", ValueKind.MONEY, True)
    SPEND = ("spend", ValueKind.MONEY, True, True)
    MATURITY = ("maturity", ValueKind.DATE, True)
    RATE = ("rate", ValueKind.RATE, True)
    EXCHANGERATE = ("exchange_rate", ValueKind.RATIO, False)
    LOCALVALUE = ("local_value", ValueKind.MONEY, False)
    CURRENCYFLUCT = ("currency_fluctuation", ValueKind.MONEY, False)
    VALUEDELTA = ("value_delta", ValueKind.MONEY, False)


class SecurityAttribute(_AttributeMixin, Enum):
    """Attributes of security holding and portfolio buckets."""

    UNITS = ("units", ValueKind.UNITS, True)
    COST = ("cost", ValueKind.MONEY, True)
    INVESTED = ("invested", ValueKind.MONEY, True)
    GAINS = ("gains", ValueKind.MONEY, True, True)
    DIVIDEND = ("dividend", ValueKind.MONEY, True, True)
    PRICE = ("price", ValueKind.PRICE, False)
    VALUATION = ("valuation", ValueKind.MONEY, False)
    VALUEDELTA = ("value_delta", ValueKind.MONEY, False)
    MARKETGROWTH = ("market_growth", ValueKind.MONEY, False)
    UNREALISEDGAINS = ("unrealised_gains", ValueKind.MONEY, False)
    PROFIT = ("profit", ValueKind.MONEY, False)


class PayeeAttribute(_AttributeMixin, Enum):
    """Attributes of payee buckets."""

    INCOME = ("income", ValueKind.MONEY, True, True)
    EXPENSE = ("expense", ValueKind.MONEY, True, True)
    DELTA = ("delta", ValueKind.MONEY, False)


class CategoryAttribute(_AttributeMixin, Enum):
    """Attributes of transaction category buckets."""

    INCOME = ("income", ValueKind.MONEY, True, True)
    EXPENSE = ("expense", ValueKind.MONEY, True, True)
    DELTA = ("delta", ValueKind.MONEY, False)


class TaxBasisAttribute(_AttributeMixin, Enum):
    """Attributes of tax basis buckets."""

    GROSS = ("gross", ValueKind.MONEY, True, True)
    NETT = ("nett", ValueKind.MONEY, True, True)
    TAXCREDIT = ("tax_credit", ValueKind.MONEY, True, True)


class BucketValues:
    """
    Attribute to value map for one bucket kind.

    Writes are checked against the attribute's declared kind. Once frozen,
    any write raises AnalysisLogicError.
    """

    def __init__(self, attribute_type: type[Enum], values: dict | None = None) -> None:
        self.attribute_type = attribute_type
        self._values: dict[Any, Any] = dict(values) if values else {}
        self._frozen = False

    def _check_attribute(self, attribute: Any) -> None:
        if not isinstance(attribute, self.attribute_type):
            raise TypeError(f"{attribute!r} is not a {self.attribute_type.__name__}")

    def set_value(self, attribute: Any, value: Any) -> None:
        """Set an attribute, enforcing its declared value kind."""
        self._check_attribute(attribute)
        if self._frozen:
            raise AnalysisLogicError(f"Cannot set {attribute.name} on frozen values")
        if not isinstance(value, attribute.kind.value_type):
            raise TypeError(f"{attribute.name} holds {attribute.kind.name} values, not {type(value).__name__}")
        self._values[attribute] = value

    def remove(self, attribute: Any) -> None:
        self._check_attribute(attribute)
        if self._frozen:
            raise AnalysisLogicError(f"Cannot remove {attribute.name} from frozen values")
        self._values.pop(attribute, None)

    def get_value(self, attribute: Any) -> Any:
        """Raw value, or None when unset."""
        self._check_attribute(attribute)
        return self._values.get(attribute)

    def _typed(self, attribute: Any, kind: ValueKind) -> Any:
        self._check_attribute(attribute)
        if attribute.kind is not kind:
            raise TypeError(f"{attribute.name} holds {attribute.kind.name} values, not {kind.name}")
        return self._values.get(attribute)

    def money(self, attribute: Any) -> Money:
        """Money value, zero when unset."""
        value = self._typed(attribute, ValueKind.MONEY)
        return value if value is not None else Money.zero()

    def units(self, attribute: Any) -> Units:
        """Units value, zero when unset."""
        value = self._typed(attribute, ValueKind.UNITS)
        return value if value is not None else Units.zero()

    def price(self, attribute: Any) -> Price | None:
        return self._typed(attribute, ValueKind.PRICE)

    def rate(self, attribute: Any) -> Rate | None:
        return self._typed(attribute, ValueKind.RATE)

    def ratio(self, attribute: Any) -> Ratio | None:
        return self._typed(attribute, ValueKind.RATIO)

    def date(self, attribute: Any) -> FinancialDate | None:
        return self._typed(attribute, ValueKind.DATE)

    def adjust_money(self, attribute: Any, delta: Money) -> None:
        """Add a delta to a money attribute. Zero deltas leave the attribute untouched."""
        if delta.is_nonzero():
            self.set_value(attribute, self.money(attribute) + delta)

    def adjust_units(self, attribute: Any, delta: Units) -> None:
        """Add a delta to a units attribute. Zero deltas leave the attribute untouched."""
        if delta.is_nonzero():
            self.set_value(attribute, self.units(attribute) + delta)

    def copy(self) -> "BucketValues":
        """Mutable copy of all values."""
        return BucketValues(self.attribute_type, self._values)

    def counters(self) -> "BucketValues":
        """Mutable copy holding only counter attributes."""
        return BucketValues(
            self.attribute_type,
            {attr: value for attr, value in self._values.items() if attr.is_counter},
        )

    def frozen(self) -> "BucketValues":
        """Read-only copy."""
        values = self.copy()
        values._frozen = True
        return values

    @property
    def is_frozen(self) -> bool:
        return self._frozen

    def is_active(self) -> bool:
        """True when any money or units counter is nonzero."""
        for attribute, value in self._values.items():
            if attribute.is_counter and isinstance(value, (Money, Units)) and value.is_nonzero():
                return True
        return False

    def items(self):
        return self._values.items()

    def to_dict(self) -> dict[str, Any]:
        """Values keyed by attribute label, in attribute declaration order."""
        return {attr.label: self._values[attr] for attr in self.attribute_type if attr in self._values}

    def __contains__(self, attribute: object) -> bool:
        return attribute in self._values

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, BucketValues):
            return NotImplemented
        return self.attribute_type is other.attribute_type and self._values == other._values

    def __repr__(self) -> str:
        body = ", ".join(f"{attr.name}={value}" for attr, value in self._values.items())
        return f"BucketValues({self.attribute_type.__name__}: {body})"


@dataclass(frozen=True)
class BucketSnapshot:
    """Immutable pair of current and base values used for delta queries."""

    current: BucketValues
    base: BucketValues

    def money_delta(self, attribute: Any) -> Money:
        return self.current.money(attribute) - self.base.money(attribute)

    def units_delta(self, attribute: Any) -> Units:
        return self.current.units(attribute) - self.base.units(attribute)

    def period_values(self) -> BucketValues:
        """
        Values as reported for the window: flow counters replaced by their
        movement since the base, balances and derived values as they stand.
        """
        values = self.current.copy()
        for attribute in self.current.attribute_type:
            if attribute.is_flow and (attribute in self.current or attribute in self.base):
                values.set_value(attribute, self.money_delta(attribute))
        return values.frozen()
