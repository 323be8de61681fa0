#!/usr/bin/env python3
"""
Analysis - the bucket registry for one reporting window.

An Analysis holds one owner-keyed bucket list per owner kind, the event
window it covers, the market data used to value holdings, and the
chargeable events raised in that window. A full build is populated by the
TransactionProcessor; derived analyses (point-in-time snapshots and range
views) are produced from a completed one without reprocessing.
"""

import logging
from enum import Enum
from typing import Any

from ..core.dates import DateRange, FinancialDate
from ..core.errors import AnalysisLogicError
from ..ledger.models import Account, AccountType, CategoryClass, Ledger, TransactionCategory
from .buckets import (
    AccountBucket,
    AnalysisBucket,
    BucketList,
    CategoryBucket,
    CategoryBucketList,
    PayeeBucket,
    PortfolioBucket,
    SecurityBucket,
    TaxBasis,
    TaxBasisBucket,
)
from .chargeable import ChargeableEventList
from .events import EventLedgerView, EventWindow
from .prices import ExchangeRateMap, SecurityPriceMap

logger = logging.getLogger(__name__)


class OwnerKind(Enum):
    """Bucket lists held by an Analysis."""

    DEPOSIT = "deposit"
    CASH = "cash"
    LOAN = "loan"
    PORTFOLIO = "portfolio"
    SECURITY = "security"
    PAYEE = "payee"
    CATEGORY = "category"
    TAXBASIS = "taxbasis"


_LIST_TYPES: dict[OwnerKind, tuple[type[AnalysisBucket], type[BucketList]]] = {
    OwnerKind.DEPOSIT: (AccountBucket, BucketList),
    OwnerKind.CASH: (AccountBucket, BucketList),
    OwnerKind.LOAN: (AccountBucket, BucketList),
    OwnerKind.PORTFOLIO: (PortfolioBucket, BucketList),
    OwnerKind.SECURITY: (SecurityBucket, BucketList),
    OwnerKind.PAYEE: (PayeeBucket, BucketList),
    OwnerKind.CATEGORY: (CategoryBucket, CategoryBucketList),
    OwnerKind.TAXBASIS: (TaxBasisBucket, BucketList),
}


def owner_kind(owner: Any) -> OwnerKind:
    """
    The bucket list an owner belongs in.

    Raises:
        TypeError: If the object cannot own a bucket
    """
    if isinstance(owner, TransactionCategory):
        return OwnerKind.CATEGORY
    if isinstance(owner, TaxBasis):
        return OwnerKind.TAXBASIS
    if isinstance(owner, Account):
        if owner.has_units:
            return OwnerKind.SECURITY
        if owner.is_portfolio:
            return OwnerKind.PORTFOLIO
        if owner.is_payee:
            return OwnerKind.PAYEE
        if owner.account_type == AccountType.CASH:
            return OwnerKind.CASH
        if owner.account_type == AccountType.LOAN:
            return OwnerKind.LOAN
        return OwnerKind.DEPOSIT
    raise TypeError(f"{type(owner).__name__} cannot own a bucket")


class Analysis:
    """
    Owner-keyed buckets for one date range.

    Buckets may be created through get_bucket until the analysis is
    finalised; after that the registry is frozen and lookups of unknown
    owners return an empty, unregistered bucket.
    """

    def __init__(
        self,
        ledger: Ledger,
        events: EventWindow,
        prices: SecurityPriceMap,
        rates: ExchangeRateMap,
        date_range: DateRange | None = None,
        charges: ChargeableEventList | None = None,
        source: "Analysis | None" = None,
    ) -> None:
        self.ledger = ledger
        self.reporting_currency = ledger.reporting_currency
        self.events = events
        self.prices = prices
        self.rates = rates
        self.date_range = date_range or DateRange.unbounded()
        self.charges = charges if charges is not None else ChargeableEventList()
        self.source = source
        self._lists: dict[OwnerKind, BucketList] = {
            kind: list_type(bucket_type, self) for kind, (bucket_type, list_type) in _LIST_TYPES.items()
        }
        # System accounts and categories resolved for this ledger, shared with derived analyses
        self._singulars: dict[Any, Any] = source._singulars if source is not None else {}
        self._frozen = False

    @classmethod
    def from_ledger(cls, ledger: Ledger) -> "Analysis":
        """Empty analysis over a whole ledger, ready for a processing pass."""
        return cls(
            ledger=ledger,
            events=EventLedgerView.from_ledger(ledger),
            prices=SecurityPriceMap(ledger.prices),
            rates=ExchangeRateMap(ledger.rates, ledger.reporting_currency),
        )

    @property
    def is_frozen(self) -> bool:
        return self._frozen

    @property
    def as_of(self) -> FinancialDate | None:
        """Cut-off date: the range end, else the last event in the window."""
        return self.date_range.end or self.events.last_date()

    def get_bucket(self, owner: Any) -> Any:
        """Bucket for an owner, created and registered on first use."""
        bucket_list = self._lists[owner_kind(owner)]
        if self._frozen:
            bucket = bucket_list.find(owner)
            if bucket is None:
                bucket = bucket_list.bucket_type(owner, self)
                bucket.freeze()
            return bucket
        return bucket_list.get_bucket(owner)

    def singular_account(self, account_type: AccountType) -> Account:
        """The system account of a type, held here when the ledger has none."""
        if account_type not in self._singulars:
            self._singulars[account_type] = self.ledger.singular_account(account_type)
        return self._singulars[account_type]

    def singular_category(self, category_class: CategoryClass) -> TransactionCategory:
        """The category of a well-known class, held here when the ledger has none."""
        if category_class not in self._singulars:
            self._singulars[category_class] = self.ledger.singular_category(category_class)
        return self._singulars[category_class]

    def buckets(self, kind: OwnerKind) -> BucketList:
        return self._lists[kind]

    @property
    def deposits(self) -> BucketList:
        return self._lists[OwnerKind.DEPOSIT]

    @property
    def cash(self) -> BucketList:
        return self._lists[OwnerKind.CASH]

    @property
    def loans(self) -> BucketList:
        return self._lists[OwnerKind.LOAN]

    @property
    def portfolios(self) -> BucketList:
        return self._lists[OwnerKind.PORTFOLIO]

    @property
    def securities(self) -> BucketList:
        return self._lists[OwnerKind.SECURITY]

    @property
    def payees(self) -> BucketList:
        return self._lists[OwnerKind.PAYEE]

    @property
    def categories(self) -> CategoryBucketList:
        return self._lists[OwnerKind.CATEGORY]  # type: ignore[return-value]

    @property
    def tax_bases(self) -> BucketList:
        return self._lists[OwnerKind.TAXBASIS]

    def account_buckets(self) -> list[AccountBucket]:
        """Deposit, cash and loan buckets together."""
        return [*self.deposits, *self.cash, *self.loans]

    def event_iterator(self):
        """Iterate the events this analysis covers."""
        return iter(self.events)

    def finalize(self) -> None:
        """
        Compute derived attributes at the cut-off, build portfolio totals and
        freeze every bucket.
        """
        if self._frozen:
            raise AnalysisLogicError("Analysis is already finalised")
        as_of = self.as_of
        base_as_of = self.date_range.start.add_days(-1) if self.date_range.start else None

        for kind, bucket_list in self._lists.items():
            if kind is not OwnerKind.PORTFOLIO:
                bucket_list.calculate_derived(as_of, base_as_of)

        for holding in self.securities:
            if holding.owner.portfolio is not None:
                self.portfolios.get_bucket(holding.owner.portfolio).add_holding(holding)

        for bucket_list in self._lists.values():
            bucket_list.freeze()
        self._frozen = True
        logger.debug(f"Finalised analysis for {self.date_range} as of {as_of}")

    def new_analysis(self, cutoff: FinancialDate | DateRange) -> "Analysis":
        """
        Derived analysis as of a date, or over a date range.

        Every bucket is re-derived from its own history; buckets with neither
        a balance nor activity in the window are dropped. This analysis is
        left untouched.

        Raises:
            AnalysisLogicError: If this analysis has not been finalised
        """
        if not self._frozen:
            raise AnalysisLogicError("Cannot derive from an analysis that is still being built")
        date_range = cutoff if isinstance(cutoff, DateRange) else DateRange(end=cutoff)

        derived = Analysis(
            ledger=self.ledger,
            events=self.events.for_range(date_range),
            prices=self.prices,
            rates=self.rates,
            date_range=date_range,
            charges=self.charges.for_range(date_range),
            source=self,
        )
        for kind, bucket_list in self._lists.items():
            if kind is not OwnerKind.PORTFOLIO:
                derived._lists[kind] = bucket_list.derive(derived, date_range)
        derived.finalize()
        return derived

    def __repr__(self) -> str:
        counts = ", ".join(f"{kind.value}={len(bucket_list)}" for kind, bucket_list in self._lists.items())
        return f"Analysis({self.date_range}: {counts})"
