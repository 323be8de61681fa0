#!/usr/bin/env python3
"""
Analysis Error Types

Failures raised while building or deriving an analysis. None of these are
recovered mid-pass: a raised error means the analysis is not valid.
"""


class AnalysisError(Exception):
    """Base class for analysis failures."""


class AnalysisLogicError(AnalysisError):
    """
    Internal inconsistency in the ledger or the engine.

    Raised for unknown capital categories, malformed date ranges and
    protocol violations such as applying tax to a chargeable event twice.
    """


class MissingMarketDataError(AnalysisError):
    """A price or exchange rate required for a calculation is not available."""

    def __init__(self, kind: str, owner: str, when: object) -> None:
        self.kind = kind
        self.owner = owner
        self.when = when
        super().__init__(f"No {kind} available for {owner} on or before {when}")
