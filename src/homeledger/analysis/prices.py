#!/usr/bin/env python3
"""
Market Data Lookups

Latest-on-or-before lookups of security prices and exchange rates. The
``latest_*`` methods return None when nothing is known; the ``require_*``
methods raise MissingMarketDataError for calculations that cannot proceed
without a value.
"""

from bisect import bisect_right
from collections import defaultdict

from ..core.dates import FinancialDate
from ..core.errors import MissingMarketDataError
from ..core.units import Price, Ratio
from ..ledger.models import Account, ExchangeRate, SecurityPrice


class _DatedSeries:
    """Values sorted by date; a later value on the same date replaces the earlier one."""

    def __init__(self) -> None:
        self._by_date: dict[FinancialDate, object] = {}
        self._dates: list[FinancialDate] = []
        self._values: list[object] = []

    def add(self, when: FinancialDate, value: object) -> None:
        self._by_date[when] = value

    def seal(self) -> None:
        self._dates = sorted(self._by_date)
        self._values = [self._by_date[d] for d in self._dates]

    def latest(self, as_of: FinancialDate) -> object | None:
        index = bisect_right(self._dates, as_of)
        return self._values[index - 1] if index else None

    def __len__(self) -> int:
        return len(self._dates)


class SecurityPriceMap:
    """Price history per security holding."""

    def __init__(self, prices: list[SecurityPrice]) -> None:
        self._series: dict[Account, _DatedSeries] = defaultdict(_DatedSeries)
        for price in prices:
            self._series[price.security].add(price.date, price.price)
        for series in self._series.values():
            series.seal()

    def latest_price(self, security: Account, as_of: FinancialDate) -> Price | None:
        """Most recent price on or before a date, or None."""
        series = self._series.get(security)
        return series.latest(as_of) if series else None

    def require_price(self, security: Account, as_of: FinancialDate) -> Price:
        """
        Most recent price on or before a date.

        Raises:
            MissingMarketDataError: If the security has no price by that date
        """
        price = self.latest_price(security, as_of)
        if price is None:
            raise MissingMarketDataError("price", str(security), as_of)
        return price

    def __len__(self) -> int:
        return sum(len(series) for series in self._series.values())


class ExchangeRateMap:
    """Exchange-rate history per currency, relative to the reporting currency."""

    def __init__(self, rates: list[ExchangeRate], reporting_currency: str) -> None:
        self.reporting_currency = reporting_currency
        self._series: dict[str, _DatedSeries] = defaultdict(_DatedSeries)
        for rate in rates:
            self._series[rate.currency].add(rate.date, rate.rate)
        for series in self._series.values():
            series.seal()

    def latest_rate(self, currency: str, as_of: FinancialDate) -> Ratio | None:
        """Most recent rate on or before a date, or None. The reporting currency is always 1."""
        if currency == self.reporting_currency:
            return Ratio.from_value(1)
        series = self._series.get(currency)
        return series.latest(as_of) if series else None

    def require_rate(self, currency: str, as_of: FinancialDate) -> Ratio:
        """
        Most recent rate on or before a date.

        Raises:
            MissingMarketDataError: If the currency has no rate by that date
        """
        rate = self.latest_rate(currency, as_of)
        if rate is None:
            raise MissingMarketDataError("exchange rate", currency, as_of)
        return rate

    def __len__(self) -> int:
        return sum(len(series) for series in self._series.values())
