#!/usr/bin/env python3
"""
Ledger DataStore

DataStore implementation for ledger files kept under the configured ledger
directory (data/ledger).
"""

import json
from datetime import datetime
from pathlib import Path

import yaml

from ..core.datastore_mixin import DataStoreMixin
from ..core.json_utils import format_json, write_json
from .loader import YAML_SUFFIXES, ledger_to_dict, load_ledger
from .models import Ledger


class LedgerStore(DataStoreMixin):
    """
    DataStore for ledger files.

    Loads the default ledger file when present, otherwise the most recently
    modified ledger file in the directory. Saves write the default file.
    """

    def __init__(self, ledger_dir: Path, default_file: str = "ledger.yaml"):
        """
        Initialize ledger store.

        Args:
            ledger_dir: Directory containing ledger files (data/ledger)
            default_file: Preferred ledger file name within the directory
        """
        super().__init__()
        self.ledger_dir = ledger_dir
        self.default_file = ledger_dir / default_file

    def _ledger_files(self) -> list[Path]:
        files = self._get_files_cached(self.ledger_dir, "*")
        return [f for f in files if f.suffix.lower() in (".json", *YAML_SUFFIXES)]

    def current_file(self) -> Path | None:
        """The file load() would read, or None."""
        if self.default_file.exists():
            return self.default_file
        return self._get_latest_file(self._ledger_files())

    def exists(self) -> bool:
        return self.current_file() is not None

    def load(self) -> Ledger:
        """
        Load the current ledger file.

        Raises:
            FileNotFoundError: If no ledger file exists
            ValueError: If the ledger is invalid
        """
        path = self.current_file()
        if path is None:
            raise FileNotFoundError(f"No ledger files found in {self.ledger_dir}")
        return load_ledger(path)

    def save(self, data: Ledger) -> None:
        """Write a ledger to the default file, as YAML or JSON by its suffix."""
        if self.default_file.suffix.lower() in YAML_SUFFIXES:
            self.ledger_dir.mkdir(parents=True, exist_ok=True)
            # Round-trip through JSON so Money, dates and Decimals become plain scalars
            plain = json.loads(format_json(ledger_to_dict(data)))
            with open(self.default_file, "w", encoding="utf-8") as f:
                yaml.safe_dump(plain, f, default_flow_style=False, sort_keys=False)
        else:
            write_json(self.default_file, ledger_to_dict(data))
        self._invalidate_cache()

    def last_modified(self) -> datetime | None:
        path = self.current_file()
        if path is None:
            return None
        return datetime.fromtimestamp(path.stat().st_mtime)

    def item_count(self) -> int | None:
        """Transactions, prices and rates in the current ledger."""
        if not self.exists():
            return None
        try:
            return self.load().item_count()
        except ValueError:
            return 0

    def size_bytes(self) -> int | None:
        files = self._ledger_files()
        if not files:
            return None
        return self._get_total_size(files)

    def summary_text(self) -> str:
        count = self.item_count()
        if count is None:
            return "No ledger found"
        return f"Ledger: {count} records"
