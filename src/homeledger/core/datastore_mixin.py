#!/usr/bin/env python3
"""
DataStore Mixin - Common functionality for DataStore implementations.

Provides shared implementation of metadata methods and file caching
to reduce redundant file system operations.
"""

from abc import abstractmethod
from datetime import datetime
from pathlib import Path

from .datastore import DataSummary


class DataStoreMixin:
    """
    Mixin providing common DataStore functionality.

    Provides:
    - Cached file listing to reduce redundant glob operations
    - Common metadata methods (age_days, to_data_summary)
    - File stat aggregation helpers

    Subclasses must implement exists, last_modified, item_count,
    size_bytes and summary_text.
    """

    def __init__(self) -> None:
        self._file_cache: list[Path] | None = None
        self._cache_timestamp: float | None = None
        self._cache_ttl_seconds: float = 1.0

    def _invalidate_cache(self) -> None:
        """Invalidate the file cache."""
        self._file_cache = None
        self._cache_timestamp = None

    def _is_cache_valid(self) -> bool:
        if self._file_cache is None or self._cache_timestamp is None:
            return False
        elapsed = datetime.now().timestamp() - self._cache_timestamp
        return elapsed < self._cache_ttl_seconds

    def _get_files_cached(self, directory: Path, pattern: str) -> list[Path]:
        """
        Get list of files matching pattern with caching.

        Results are cached for one second so that a run of metadata queries
        only globs once.
        """
        if self._is_cache_valid():
            return self._file_cache  # type: ignore

        if directory.exists():
            self._file_cache = sorted(directory.glob(pattern))
        else:
            self._file_cache = []

        self._cache_timestamp = datetime.now().timestamp()
        return self._file_cache

    def _get_latest_file(self, files: list[Path]) -> Path | None:
        """Most recently modified file from list, or None if empty."""
        if not files:
            return None
        return max(files, key=lambda p: p.stat().st_mtime)

    def _get_total_size(self, files: list[Path]) -> int:
        return sum(f.stat().st_size for f in files)

    @abstractmethod
    def exists(self) -> bool:
        """Check if data exists in storage."""
        ...

    @abstractmethod
    def last_modified(self) -> datetime | None:
        """Get timestamp of most recent data modification."""
        ...

    @abstractmethod
    def item_count(self) -> int | None:
        """Get count of items/records in stored data."""
        ...

    @abstractmethod
    def size_bytes(self) -> int | None:
        """Get total storage size in bytes."""
        ...

    @abstractmethod
    def summary_text(self) -> str:
        """Get human-readable summary of current data state."""
        ...

    def age_days(self) -> int | None:
        """Days since last modification, or None if data doesn't exist."""
        last_mod = self.last_modified()
        if last_mod is None:
            return None
        return (datetime.now() - last_mod).days

    def to_data_summary(self) -> DataSummary:
        """Collect the metadata queries into one DataSummary."""
        return DataSummary(
            exists=self.exists(),
            last_updated=self.last_modified(),
            age_days=self.age_days(),
            item_count=self.item_count(),
            size_bytes=self.size_bytes(),
            summary_text=self.summary_text(),
        )
