#!/usr/bin/env python3
"""
Analysis CLI - Ledger Analysis Commands

Command-line interface for full and date-range analyses, point-in-time
snapshots, chargeable gains and valuation charts.
"""

from datetime import datetime
from pathlib import Path

import click

from ..analysis import AnalysisManager, ProcessorSettings
from ..analysis.charts import create_valuation_chart, snapshot_dates
from ..analysis.report import summary, write_report
from ..analysis.values import AccountAttribute, SecurityAttribute
from ..core.config import Config
from ..core.currency import CURRENCY_SYMBOLS
from ..core.dates import DateRange, FinancialDate
from ..core.errors import AnalysisError
from ..core.money import Money
from ..ledger import Ledger, LedgerStore, load_ledger

# Failures the commands report as a clean CLI error
HANDLED_ERRORS = (AnalysisError, FileNotFoundError, ValueError)


def _parse_date(value: str | None, option: str) -> FinancialDate | None:
    if value is None:
        return None
    try:
        return FinancialDate.from_string(value)
    except ValueError:
        raise click.ClickException(f"Invalid {option} date: {value}. Use YYYY-MM-DD") from None


def _load(ledger_file: str | None, config: Config) -> Ledger:
    """Load the named ledger file, or the configured ledger."""
    if ledger_file:
        return load_ledger(Path(ledger_file))
    return LedgerStore(config.ledger.ledger_dir, config.ledger.default_file).load()


def _manager(ledger_file: str | None, config: Config) -> AnalysisManager:
    return AnalysisManager(_load(ledger_file, config), ProcessorSettings.from_config(config))


def _fmt(money: Money, config: Config) -> str:
    return money.format(config.analysis.reporting_currency)


@click.command()
@click.argument("ledger_file", required=False)
@click.option("--start", help="Start date (YYYY-MM-DD), defaults to the start of the ledger")
@click.option("--end", help="End date (YYYY-MM-DD), defaults to the end of the ledger")
@click.option("--output-dir", help="Override output directory")
@click.option("--verbose", "-v", is_flag=True, help="Enable verbose output")
@click.pass_context
def analyze(
    ctx: click.Context,
    ledger_file: str | None,
    start: str | None,
    end: str | None,
    output_dir: str | None,
    verbose: bool,
) -> None:
    """
    Analyse a ledger over a date range and write CSV and JSON reports.

    Examples:
      homeledger analyze ledger.yaml
      homeledger analyze ledger.yaml --start 2024-04-06 --end 2025-04-05
    """
    config: Config = ctx.obj["config"]
    verbose = verbose or ctx.obj.get("verbose", False)
    output_path = Path(output_dir) if output_dir else config.analysis.output_dir

    try:
        date_range = DateRange(start=_parse_date(start, "start"), end=_parse_date(end, "end"))
        manager = _manager(ledger_file, config)

        if verbose:
            click.echo("Ledger Analysis")
            click.echo(f"Date range: {date_range}")
            click.echo(f"Output directory: {output_path}")
            click.echo()

        click.echo("[ANALYSIS] Processing ledger...")
        analysis = manager.get_analysis(date_range)
        files = write_report(analysis, output_path)
        totals = summary(analysis)
    except HANDLED_ERRORS as e:
        click.echo(f"❌ Error during analysis: {e}", err=True)
        raise click.ClickException(str(e)) from e

    click.echo(f"\n✅ Reports saved to: {output_path}")
    click.echo("\n[SUMMARY]")
    click.echo(f"   Accounts: {totals['accounts']}  Holdings: {totals['holdings']}")
    click.echo(f"   Account Valuation: {_fmt(totals['account_valuation'], config)}")
    click.echo(f"   Holding Valuation: {_fmt(totals['holding_valuation'], config)}")
    click.echo(f"   Realised Gains: {_fmt(totals['realised_gains'], config)}")
    click.echo(f"   Dividends: {_fmt(totals['dividends'], config)}")
    click.echo(f"   Income: {_fmt(totals['category_income'], config)}")
    click.echo(f"   Expense: {_fmt(totals['category_expense'], config)}")

    if verbose:
        for path in files:
            click.echo(f"   {path.name}")


@click.command()
@click.argument("ledger_file", required=False)
@click.option("--date", "date_str", required=True, help="Snapshot date (YYYY-MM-DD)")
@click.pass_context
def snapshot(ctx: click.Context, ledger_file: str | None, date_str: str) -> None:
    """
    Show balances and holdings as of the end of a date.

    Example:
      homeledger snapshot ledger.yaml --date 2024-12-31
    """
    config: Config = ctx.obj["config"]
    as_of = _parse_date(date_str, "snapshot")

    try:
        analysis = _manager(ledger_file, config).get_snapshot(as_of)
    except HANDLED_ERRORS as e:
        raise click.ClickException(str(e)) from e

    click.echo(f"Snapshot as of {as_of}")
    click.echo("=" * 60)

    click.echo("\nAccounts:")
    for bucket in sorted(analysis.account_buckets(), key=lambda b: b.name):
        click.echo(f"  {bucket.name:<30} {_fmt(bucket.values.money(AccountAttribute.VALUATION), config):>15}")

    if len(analysis.securities):
        click.echo("\nHoldings:")
        for bucket in sorted(analysis.securities, key=lambda b: b.name):
            valuation = bucket.values.get_value(SecurityAttribute.VALUATION)
            shown = _fmt(valuation, config) if valuation is not None else "unpriced"
            click.echo(
                f"  {bucket.name:<30} {str(bucket.units):>12} units  "
                f"cost {_fmt(bucket.cost, config):>12}  value {shown:>12}"
            )


@click.command()
@click.argument("ledger_file", required=False)
@click.option("--tax", "tax_str", required=True, help="Tax due on the total of the slices")
@click.option("--start", help="Start date (YYYY-MM-DD)")
@click.option("--end", help="End date (YYYY-MM-DD)")
@click.pass_context
def chargeable(
    ctx: click.Context, ledger_file: str | None, tax_str: str, start: str | None, end: str | None
) -> None:
    """
    Apportion tax across the chargeable gains of a date range.

    Example:
      homeledger chargeable ledger.yaml --tax 1250.00 --start 2024-04-06 --end 2025-04-05
    """
    config: Config = ctx.obj["config"]

    try:
        tax = Money.from_amount(tax_str)
        date_range = DateRange(start=_parse_date(start, "start"), end=_parse_date(end, "end"))
        charges = _manager(ledger_file, config).get_analysis(date_range).charges
        if not charges.is_empty():
            charges.apply_tax(tax)
    except HANDLED_ERRORS as e:
        raise click.ClickException(str(e)) from e

    if charges.is_empty():
        click.echo("No chargeable events in range.")
        return

    click.echo("Chargeable Events:")
    click.echo("=" * 60)
    for event in charges:
        click.echo(
            f"  {event.date}  gains {_fmt(event.gains, config):>12}  years {event.years:>2}  "
            f"slice {_fmt(event.slice, config):>12}  tax {_fmt(event.taxation, config):>12}"
        )
    click.echo(f"\n  Total gains: {_fmt(charges.gains_total(), config)}")
    click.echo(f"  Total slices: {_fmt(charges.slice_total(), config)}")
    click.echo(f"  Total tax: {_fmt(charges.tax_total(), config)}")


@click.command()
@click.argument("ledger_file", required=False)
@click.option("--months", type=int, help="Months to chart back from the end of the ledger")
@click.option("--output-file", help="Chart image path")
@click.pass_context
def chart(ctx: click.Context, ledger_file: str | None, months: int | None, output_file: str | None) -> None:
    """
    Chart account and holding valuation month by month.

    Example:
      homeledger chart ledger.yaml --months 24
    """
    config: Config = ctx.obj["config"]
    if months is None:
        months = config.analysis.date_range_months
    if months <= 0:
        raise click.ClickException("--months must be positive")

    try:
        manager = _manager(ledger_file, config)
        span = manager.ledger.date_span()
        if span is None:
            raise click.ClickException("Ledger has no dated records to chart")
        first, last = span
        start = max(first, last.add_months(-months))
        snapshots = [manager.get_snapshot(when) for when in snapshot_dates(start, last)]

        if output_file:
            output_path = Path(output_file)
        else:
            timestamp = datetime.now().strftime("%Y-%m-%d_%H-%M-%S")
            output_path = config.analysis.output_dir / f"{timestamp}_valuation.png"

        create_valuation_chart(
            snapshots,
            output_path,
            figure_size=(config.analysis.chart_width, config.analysis.chart_height),
            currency_symbol=CURRENCY_SYMBOLS.get(config.analysis.reporting_currency, ""),
        )
    except HANDLED_ERRORS as e:
        raise click.ClickException(str(e)) from e

    click.echo(f"✅ Chart saved to: {output_path}")
