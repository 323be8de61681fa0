#!/usr/bin/env python3
"""
Main CLI Entry Point for homeledger

Provides unified command-line interface for ledger analysis.
"""

import logging
import os

import click

from ..core.config import get_config


@click.group()
@click.option(
    "--config-env",
    type=click.Choice(["development", "test", "production"]),
    help="Override environment configuration",
)
@click.option("--verbose", "-v", is_flag=True, help="Enable verbose output")
@click.option("--debug", is_flag=True, help="Enable debug logging")
@click.pass_context
def main(ctx: click.Context, config_env: str | None, verbose: bool, debug: bool) -> None:
    """
    homeledger - Household Ledger Analysis

    Balances, cost basis, gains, income and expense by account, holding,
    payee, category and tax basis, for any date or date range.
    """
    # Ensure context object exists
    ctx.ensure_object(dict)

    # Set environment if specified
    if config_env:
        os.environ["HOMELEDGER_ENV"] = config_env

    # Configure debug logging if requested
    if debug:
        os.environ["LOG_LEVEL"] = "DEBUG"
        logging.getLogger().setLevel(logging.DEBUG)
        logging.getLogger("homeledger").setLevel(logging.DEBUG)

    # Store global options
    ctx.obj["verbose"] = verbose
    ctx.obj["debug"] = debug
    ctx.obj["config"] = get_config()

    if verbose:
        click.echo(f"Environment: {ctx.obj['config'].environment.value}")
        click.echo(f"Data directory: {ctx.obj['config'].data_dir}")

    if debug:
        click.echo("Debug logging enabled")


@main.command()
@click.pass_context
def version(ctx: click.Context) -> None:
    """Show version information."""
    from homeledger import __author__, __version__

    click.echo(f"homeledger v{__version__}")
    click.echo(f"Author: {__author__}")


@main.command()
@click.pass_context
def config(ctx: click.Context) -> None:
    """Show current configuration."""
    config_obj = ctx.obj["config"]

    click.echo("Current Configuration:")
    click.echo(f"  Environment: {config_obj.environment.value}")
    click.echo(f"  Data Directory: {config_obj.data_dir}")
    click.echo(f"  Ledger Directory: {config_obj.ledger.ledger_dir}")
    click.echo(f"  Output Directory: {config_obj.output_dir}")
    click.echo(f"  Reporting Currency: {config_obj.analysis.reporting_currency}")
    click.echo(
        f"  Small Transaction Limit: {config_obj.analysis.small_transaction_limit} "
        f"({config_obj.analysis.small_transaction_rate}%)"
    )
    click.echo(f"  Debug Mode: {config_obj.debug}")
    click.echo(f"  Log Level: {config_obj.log_level}")


# Import analysis commands
from .analysis import analyze, chargeable, chart, snapshot  # noqa: E402

main.add_command(analyze)
main.add_command(snapshot)
main.add_command(chargeable)
main.add_command(chart)


if __name__ == "__main__":
    main()
