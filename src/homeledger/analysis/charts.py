#!/usr/bin/env python3
"""
Analysis Charts

Valuation over time from a series of point-in-time snapshots.
"""

import logging
from pathlib import Path

import matplotlib
import pandas as pd

matplotlib.use("Agg")  # Use non-interactive backend

import matplotlib.pyplot as plt  # noqa: E402

from ..core.dates import FinancialDate
from .registry import Analysis
from .values import AccountAttribute, SecurityAttribute

logger = logging.getLogger(__name__)


def valuation_series(snapshots: list[Analysis]) -> pd.DataFrame:
    """
    Account and holding valuation per snapshot, indexed by snapshot date.

    Columns are Accounts, Holdings and Total in major units.
    """
    rows = []
    for snapshot in snapshots:
        accounts = sum(
            (bucket.values.money(AccountAttribute.VALUATION).to_decimal() for bucket in snapshot.account_buckets()),
            start=0,
        )
        holdings = sum(
            (bucket.values.money(SecurityAttribute.VALUATION).to_decimal() for bucket in snapshot.securities),
            start=0,
        )
        as_of = snapshot.as_of
        rows.append(
            {
                "Date": pd.to_datetime(as_of.date if as_of else None),
                "Accounts": float(accounts),
                "Holdings": float(holdings),
                "Total": float(accounts + holdings),
            }
        )

    df = pd.DataFrame(rows, columns=["Date", "Accounts", "Holdings", "Total"])
    return df.set_index("Date")


def snapshot_dates(start: FinancialDate, end: FinancialDate) -> list[FinancialDate]:
    """Month-end style cut-offs from start to end, one month apart, always including end."""
    dates = []
    current = start
    while current < end:
        dates.append(current)
        current = current.add_months(1)
    dates.append(end)
    return dates


def create_valuation_chart(
    snapshots: list[Analysis],
    output_path: Path,
    figure_size: tuple[int, int] = (12, 8),
    currency_symbol: str = "£",
) -> Path:
    """
    Plot account, holding and total valuation across snapshots.

    Returns:
        Path to the saved image
    """
    if not snapshots:
        raise ValueError("No snapshots to chart")

    df = valuation_series(snapshots)
    output_path.parent.mkdir(parents=True, exist_ok=True)

    fig, ax = plt.subplots(figsize=figure_size)
    ax.plot(df.index, df["Accounts"], color="#2E86AB", linewidth=1.5, label="Accounts")
    ax.plot(df.index, df["Holdings"], color="#A23B72", linewidth=1.5, label="Holdings")
    ax.plot(df.index, df["Total"], color="#F18F01", linewidth=2.5, label="Total")

    ax.set_title("Valuation Over Time", fontsize=12, fontweight="bold")
    ax.set_ylabel(f"Valuation ({currency_symbol})", fontsize=10)
    ax.legend(loc="best", fontsize=8)
    ax.grid(True, alpha=0.3)
    ax.yaxis.set_major_formatter(plt.FuncFormatter(lambda x, p: f"{currency_symbol}{x / 1000:,.0f}k"))

    fig.tight_layout()
    fig.savefig(output_path, dpi=150, bbox_inches="tight")
    plt.close(fig)

    logger.info(f"Saved valuation chart with {len(df)} points to {output_path}")
    return output_path
