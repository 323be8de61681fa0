"""
Core Utilities Package

Shared primitives and infrastructure used by the ledger and analysis packages.

This package provides:
- Money with integer minor-unit arithmetic, plus Decimal units, prices and rates
- FinancialDate and inclusive DateRange
- Configuration management for environment-specific settings
- JSON helpers and the DataStore protocol
"""

from .config import (
    Config,
    Environment,
    get_config,
    get_data_dir,
    get_output_dir,
    is_development,
    is_production,
    is_test,
    reload_config,
)
from .currency import (
    apportion_cents,
    cents_to_str,
    format_cents,
    parse_amount_to_cents,
)
from .dates import DateRange, FinancialDate
from .errors import AnalysisError, AnalysisLogicError, MissingMarketDataError
from .money import Money
from .units import Dilution, Price, Rate, Ratio, Units

__all__ = [
    "AnalysisError",
    "AnalysisLogicError",
    # Configuration
    "Config",
    "DateRange",
    "Dilution",
    "Environment",
    "FinancialDate",
    "MissingMarketDataError",
    "Money",
    "Price",
    "Rate",
    "Ratio",
    "Units",
    # Currency utilities
    "apportion_cents",
    "cents_to_str",
    "format_cents",
    "get_config",
    "get_data_dir",
    "get_output_dir",
    "is_development",
    "is_production",
    "is_test",
    "parse_amount_to_cents",
    "reload_config",
]
