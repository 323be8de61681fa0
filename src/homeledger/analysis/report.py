#!/usr/bin/env python3
"""
Analysis Reports

Tabular export of a completed Analysis: one pandas DataFrame per owner kind,
a summary dictionary of headline totals, and a report writer that saves each
table as CSV plus the summary as JSON.
"""

import logging
from datetime import datetime
from pathlib import Path
from typing import Any

import pandas as pd

from ..core.json_utils import write_json
from ..core.money import Money
from ..core.units import Units
from .registry import Analysis, OwnerKind
from .values import AccountAttribute, CategoryAttribute, PayeeAttribute, SecurityAttribute

logger = logging.getLogger(__name__)


def _plain(value: Any) -> Any:
    """Cell value for a DataFrame: money as Decimal, other primitives as their number or string."""
    if isinstance(value, Money):
        return value.to_decimal()
    if isinstance(value, Units):
        return value.value
    if hasattr(value, "value"):
        return value.value
    if hasattr(value, "to_iso_string"):
        return value.to_iso_string()
    return value


def analysis_to_dataframe(analysis: Analysis, kind: OwnerKind) -> pd.DataFrame:
    """
    One row per bucket of a kind, one column per attribute label.

    Rows are indexed by owner name and sorted by it. Attributes a bucket
    never set are NaN. Flow counters (income, expense, spend, gains,
    dividends) cover only the analysis window; balances are as at its end.
    """
    rows = []
    for bucket in analysis.buckets(kind):
        row = {"owner": bucket.name}
        for label, value in bucket.period_values().to_dict().items():
            row[label] = _plain(value)
        rows.append(row)

    if not rows:
        return pd.DataFrame(columns=["owner"]).set_index("owner")

    df = pd.DataFrame(rows).set_index("owner").sort_index()
    labels = [attr.label for attr in analysis.buckets(kind).bucket_type.attribute_type]
    return df[[label for label in labels if label in df.columns]]


def _total(buckets, attribute) -> Money:
    return sum((bucket.period_values().money(attribute) for bucket in buckets), Money.zero())


def summary(analysis: Analysis) -> dict[str, Any]:
    """Headline totals for an analysis; flows are totals within its window."""
    accounts = analysis.account_buckets()
    securities = list(analysis.securities)
    category_totals = analysis.categories.produce_totals().get(None)

    return {
        "date_range": str(analysis.date_range),
        "as_of": analysis.as_of,
        "reporting_currency": analysis.reporting_currency,
        "accounts": len(accounts),
        "holdings": len(securities),
        "account_valuation": _total(accounts, AccountAttribute.VALUATION),
        "account_value_delta": _total(accounts, AccountAttribute.VALUEDELTA),
        "spend": _total(accounts, AccountAttribute.SPEND),
        "holding_valuation": _total(securities, SecurityAttribute.VALUATION),
        "holding_cost": _total(securities, SecurityAttribute.COST),
        "realised_gains": _total(securities, SecurityAttribute.GAINS),
        "dividends": _total(securities, SecurityAttribute.DIVIDEND),
        "profit": _total(securities, SecurityAttribute.PROFIT),
        "payee_income": _total(analysis.payees, PayeeAttribute.INCOME),
        "payee_expense": _total(analysis.payees, PayeeAttribute.EXPENSE),
        "category_income": category_totals.money(CategoryAttribute.INCOME) if category_totals else Money.zero(),
        "category_expense": category_totals.money(CategoryAttribute.EXPENSE) if category_totals else Money.zero(),
        "chargeable_events": len(analysis.charges),
        "chargeable_gains": analysis.charges.gains_total(),
        "chargeable_slices": analysis.charges.slice_total(),
    }


def write_report(analysis: Analysis, output_dir: Path) -> list[Path]:
    """
    Save every non-empty bucket table as CSV and the summary as JSON.

    Returns:
        Paths of the files written, summary last
    """
    output_dir.mkdir(parents=True, exist_ok=True)
    timestamp = datetime.now().strftime("%Y-%m-%d_%H-%M-%S")
    written = []

    for kind in OwnerKind:
        df = analysis_to_dataframe(analysis, kind)
        if df.empty:
            continue
        path = output_dir / f"{timestamp}_{kind.value}.csv"
        df.to_csv(path)
        written.append(path)

    summary_path = output_dir / f"{timestamp}_summary.json"
    write_json(summary_path, summary(analysis))
    written.append(summary_path)

    logger.info(f"Wrote {len(written)} report files to {output_dir}")
    return written
