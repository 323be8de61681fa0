#!/usr/bin/env python3
"""
Analysis Manager

Holds the completed analysis for the current ledger and caches derived
analyses per date range. Loading a new ledger drops the whole cache.
"""

import logging
import threading

from ..core.dates import DateRange, FinancialDate
from ..ledger.models import Ledger
from .processor import ProcessorSettings, TransactionProcessor
from .registry import Analysis

logger = logging.getLogger(__name__)


class AnalysisManager:
    """
    Cache of analyses keyed by date range.

    The full-ledger analysis is built on first request. Range and snapshot
    requests are derived from it and cached under their DateRange, which
    compares by start and end dates. All cache access is serialised by a
    re-entrant lock so that set_new_data cannot interleave with a lookup.
    """

    def __init__(self, ledger: Ledger | None = None, settings: ProcessorSettings | None = None) -> None:
        self.settings = settings or ProcessorSettings.default()
        self._lock = threading.RLock()
        self._ledger = ledger
        self._base: Analysis | None = None
        self._cache: dict[DateRange, Analysis] = {}

    @property
    def ledger(self) -> Ledger | None:
        return self._ledger

    def set_new_data(self, ledger: Ledger) -> None:
        """Rebind to a new ledger, discarding every cached analysis."""
        with self._lock:
            self._ledger = ledger
            self._base = None
            self._cache.clear()
        logger.info(f"Analysis cache cleared for new ledger ({len(ledger.transactions)} transactions)")

    def base_analysis(self) -> Analysis:
        """
        The full-ledger analysis, built on first use.

        Raises:
            ValueError: If no ledger has been set
        """
        with self._lock:
            if self._base is None:
                if self._ledger is None:
                    raise ValueError("No ledger loaded")
                self._base = TransactionProcessor(self._ledger, self.settings).run()
            return self._base

    def get_analysis(self, date_range: DateRange | None = None) -> Analysis:
        """
        Analysis over a date range, built or derived on a cache miss.

        An unbounded (or omitted) range returns the full-ledger analysis.
        """
        if date_range is None or (date_range.start is None and date_range.end is None):
            return self.base_analysis()

        with self._lock:
            cached = self._cache.get(date_range)
            if cached is not None:
                logger.debug(f"Analysis cache hit for {date_range}")
                return cached

            logger.debug(f"Analysis cache miss for {date_range}")
            analysis = self.base_analysis().new_analysis(date_range)
            self._cache[date_range] = analysis
            return analysis

    def get_snapshot(self, as_of: FinancialDate) -> Analysis:
        """Point-in-time analysis as of the end of a date."""
        return self.get_analysis(DateRange(end=as_of))

    def cached_ranges(self) -> list[DateRange]:
        with self._lock:
            return list(self._cache)
