#!/usr/bin/env python3
"""
DataStore Protocol - Standard interface for ledger data persistence.

Separates where ledger files live from the analysis that consumes them, so the
CLI and the analysis manager can ask about data freshness without knowing the
storage layout.
"""

from dataclasses import dataclass
from datetime import datetime
from typing import Protocol, TypeVar

T = TypeVar("T")


@dataclass(frozen=True)
class DataSummary:
    """Summary of a data store's current state for CLI display."""

    exists: bool
    last_updated: datetime | None
    age_days: int | None
    item_count: int | None
    size_bytes: int | None
    summary_text: str


class DataStore(Protocol[T]):
    """
    Protocol for data persistence and metadata queries.

    Type parameter T is the stored data type (for the ledger store, a Ledger).
    """

    def exists(self) -> bool:
        """
        Check if data exists in storage.

        Returns:
            True if data files exist, False otherwise
        """
        ...

    def load(self) -> T:
        """
        Load data from storage.

        Raises:
            FileNotFoundError: If data doesn't exist
            ValueError: If data is invalid/corrupted
        """
        ...

    def save(self, data: T) -> None:
        """Save data to storage."""
        ...

    def last_modified(self) -> datetime | None:
        """Timestamp of most recent modification, or None if data doesn't exist."""
        ...

    def age_days(self) -> int | None:
        """Days since last modification, or None if data doesn't exist."""
        ...

    def item_count(self) -> int | None:
        """Count of records in stored data, or None if data doesn't exist."""
        ...

    def size_bytes(self) -> int | None:
        """Total size of all data files in bytes, or None if data doesn't exist."""
        ...

    def summary_text(self) -> str:
        """Brief text description for display in CLI output and logs."""
        ...

    def to_data_summary(self) -> DataSummary:
        """Collect the metadata queries into one DataSummary."""
        ...
