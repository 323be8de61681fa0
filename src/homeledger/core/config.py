#!/usr/bin/env python3
"""
Configuration Management for homeledger

Handles environment-based configuration with defaults and validation.
Supports multiple environments (development, test, production).
"""

import logging
import os
import tempfile
from dataclasses import dataclass
from decimal import Decimal, InvalidOperation
from enum import Enum
from pathlib import Path
from typing import Any

from dotenv import load_dotenv

from .currency import CURRENCY_SYMBOLS

# Load environment variables from .env file
load_dotenv()


class Environment(Enum):
    """Application environment types."""

    DEVELOPMENT = "development"
    TEST = "test"
    PRODUCTION = "production"


@dataclass
class LedgerConfig:
    """Where ledger files are found."""

    ledger_dir: Path
    default_file: str = "ledger.yaml"


@dataclass
class AnalysisConfig:
    """Analysis engine and reporting configuration."""

    output_dir: Path
    reporting_currency: str = "GBP"
    # Cash legs above both thresholds are apportioned against stock value
    small_transaction_limit: str = "3000"
    small_transaction_rate: str = "5"
    chart_width: int = 12
    chart_height: int = 8
    date_range_months: int = 12


@dataclass
class Config:
    """
    Main configuration class for homeledger.

    Loads configuration from environment variables with defaults and
    validation for each environment type.
    """

    environment: Environment

    # Core directories
    data_dir: Path
    output_dir: Path

    # Component configurations
    ledger: LedgerConfig
    analysis: AnalysisConfig

    # Application settings
    debug: bool = False
    log_level: str = "INFO"

    @classmethod
    def from_environment(cls) -> "Config":
        """Create configuration from environment variables."""
        env = Environment(os.getenv("HOMELEDGER_ENV", "development"))

        if env == Environment.TEST:
            default_test_dir = Path(tempfile.gettempdir()) / "test_homeledger"
            base_dir = Path(os.getenv("HOMELEDGER_DATA_DIR", str(default_test_dir)))
        else:
            base_dir = Path(os.getenv("HOMELEDGER_DATA_DIR", "./data")).expanduser().resolve()

        data_dir = base_dir
        output_dir = data_dir / "analysis"

        for directory in [data_dir, output_dir]:
            directory.mkdir(parents=True, exist_ok=True)

        ledger = LedgerConfig(
            ledger_dir=data_dir / "ledger",
            default_file=os.getenv("LEDGER_FILE", "ledger.yaml"),
        )

        analysis = AnalysisConfig(
            output_dir=output_dir / "reports",
            reporting_currency=os.getenv("REPORTING_CURRENCY", "GBP").upper(),
            small_transaction_limit=os.getenv("SMALL_TRANSACTION_LIMIT", "3000"),
            small_transaction_rate=os.getenv("SMALL_TRANSACTION_RATE", "5"),
            chart_width=int(os.getenv("CHART_WIDTH", "12")),
            chart_height=int(os.getenv("CHART_HEIGHT", "8")),
            date_range_months=int(os.getenv("ANALYSIS_MONTHS", "12")),
        )

        return cls(
            environment=env,
            data_dir=data_dir,
            output_dir=output_dir,
            ledger=ledger,
            analysis=analysis,
            debug=os.getenv("DEBUG", "false").lower() == "true",
            log_level=os.getenv("LOG_LEVEL", "INFO").upper(),
        )

    def validate(self) -> list:
        """Validate configuration and return list of errors."""
        errors = []

        for name, path in [
            ("data_dir", self.data_dir),
            ("output_dir", self.output_dir),
        ]:
            if not path.exists():
                errors.append(f"{name} does not exist: {path}")

        if self.analysis.reporting_currency not in CURRENCY_SYMBOLS:
            errors.append(f"Unsupported reporting currency: {self.analysis.reporting_currency}")

        try:
            if Decimal(self.analysis.small_transaction_limit) < 0:
                errors.append("Small transaction limit must be non-negative")
            rate = Decimal(self.analysis.small_transaction_rate)
            if rate < 0 or rate > 100:
                errors.append("Small transaction rate must be 0-100 percent")
        except InvalidOperation as e:
            errors.append(f"Invalid numeric configuration: {e}")

        if self.analysis.chart_width <= 0 or self.analysis.chart_height <= 0:
            errors.append("Chart dimensions must be positive")
        if self.analysis.date_range_months <= 0:
            errors.append("Analysis months must be positive")

        return errors

    def setup_logging(self) -> None:
        """Configure logging based on configuration."""
        level = getattr(logging, self.log_level, logging.INFO)

        if self.environment == Environment.DEVELOPMENT:
            format_str = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"
        else:
            format_str = "%(asctime)s - %(levelname)s - %(message)s"

        logging.basicConfig(level=level, format=format_str, datefmt="%Y-%m-%d %H:%M:%S")

        # Reduce noise from plotting libraries
        logging.getLogger("matplotlib").setLevel(logging.WARNING)
        logging.getLogger("PIL").setLevel(logging.WARNING)

    def to_dict(self) -> dict[str, Any]:
        """Convert configuration to dictionary."""
        result: dict[str, Any] = {}

        for field_name, field_value in self.__dict__.items():
            if hasattr(field_value, "__dict__") and not isinstance(field_value, Enum):
                nested_dict: dict[str, Any] = {}
                for nested_name, nested_value in field_value.__dict__.items():
                    if isinstance(nested_value, Path):
                        nested_dict[nested_name] = str(nested_value)
                    else:
                        nested_dict[nested_name] = nested_value
                result[field_name] = nested_dict
            elif isinstance(field_value, Path):
                result[field_name] = str(field_value)
            elif isinstance(field_value, Enum):
                result[field_name] = field_value.value
            else:
                result[field_name] = field_value

        return result


# Global configuration instance
_config: Config | None = None


def get_config() -> Config:
    """Get the global configuration instance."""
    global _config
    if _config is None:
        _config = Config.from_environment()

        errors = _config.validate()
        if errors:
            raise ValueError(f"Configuration validation failed: {'; '.join(errors)}")

        _config.setup_logging()

    return _config


def reload_config() -> Config:
    """Reload configuration from environment (useful for testing)."""
    global _config
    _config = None
    return get_config()


# Convenience functions
def get_data_dir() -> Path:
    """Get the data directory path."""
    return get_config().data_dir


def get_output_dir() -> Path:
    """Get the output directory path."""
    return get_config().output_dir


def is_development() -> bool:
    """Check if running in development environment."""
    return get_config().environment == Environment.DEVELOPMENT


def is_test() -> bool:
    """Check if running in test environment."""
    return get_config().environment == Environment.TEST


def is_production() -> bool:
    """Check if running in production environment."""
    return get_config().environment == Environment.PRODUCTION
