#!/usr/bin/env python3
"""Portfolio allocation CLI tool.

This script inspects a portfolio file and the currency tables:
- Show class summaries, per-asset deltas and validation findings
- Convert an amount between supported currencies
- Show the fallback rate table rebased onto another default currency

Usage:
    python scripts/view_allocation.py analyze portfolio.yaml
    python scripts/view_allocation.py analyze portfolio.yaml --no-targets
    python scripts/view_allocation.py convert 100 USD GBP
    python scripts/view_allocation.py rebase EUR USD
    python scripts/view_allocation.py --config config/custom.yaml analyze portfolio.yaml
"""

import sys
from pathlib import Path
from typing import Optional

import click
import pandas as pd
from rich.console import Console
from rich.table import Table

# Add project root to path
project_root = Path(__file__).parent.parent
sys.path.insert(0, str(project_root))

from portfolio_engine.allocation.report import allocation_to_dataframe, summaries_to_dataframe
from portfolio_engine.api.portfolio_api import PortfolioAPI
from portfolio_engine.currency.rates import (
    SUPPORTED_CURRENCIES,
    convert_amount,
    format_currency_value,
    is_valid_currency,
    recalculate_fallback_rates,
)
from portfolio_engine.utils.config import EngineSettings, load_engine_settings
from portfolio_engine.utils.exceptions import PortfolioEngineError
from portfolio_engine.utils.loader import load_portfolio
from portfolio_engine.utils.logging import setup_logging

console = Console()

ACTION_STYLES = {
    "BUY": "green",
    "INVEST": "green",
    "SELL": "red",
    "SAVE": "yellow",
    "HOLD": "white",
    "EXCLUDED": "dim",
}


def _money(value: Optional[float], currency: str) -> str:
    if value is None or pd.isna(value):
        return "-"
    return format_currency_value(value, currency)


def _percent(value: Optional[float]) -> str:
    if value is None or pd.isna(value):
        return "-"
    return f"{value:.2f}%"


def _action(action: str) -> str:
    style = ACTION_STYLES.get(action, "white")
    return f"[{style}]{action}[/{style}]"


def create_class_table(df: pd.DataFrame, currency: str) -> Table:
    """Create asset class summary table.

    Args:
        df: DataFrame from summaries_to_dataframe
        currency: Display currency

    Returns:
        Rich Table with one row per asset class
    """
    table = Table(title="Asset Classes", show_header=True, header_style="bold magenta")
    table.add_column("Class", style="cyan", no_wrap=True)
    table.add_column("Mode")
    table.add_column("Current", justify="right")
    table.add_column("Current %", justify="right")
    table.add_column("Target %", justify="right")
    table.add_column("Target", justify="right")
    table.add_column("Delta", justify="right")
    table.add_column("Action")

    for row in df.itertuples(index=False):
        table.add_row(
            row.asset_class,
            row.target_mode,
            _money(row.current_total, currency),
            _percent(row.current_pct),
            _percent(row.target_pct),
            _money(row.target_total, currency),
            _money(row.delta, currency),
            _action(row.action),
        )

    return table


def create_asset_table(df: pd.DataFrame, currency: str) -> Table:
    """Create per-asset delta table.

    Args:
        df: DataFrame from allocation_to_dataframe
        currency: Display currency

    Returns:
        Rich Table with one row per asset
    """
    table = Table(title="Assets", show_header=True, header_style="bold magenta")
    table.add_column("Asset", style="cyan", no_wrap=True)
    table.add_column("Ticker")
    table.add_column("Class")
    table.add_column("Target")
    table.add_column("Current", justify="right")
    table.add_column("Current %", justify="right")
    table.add_column("Target Value", justify="right")
    table.add_column("Delta", justify="right")
    table.add_column("Action")

    for row in df.itertuples(index=False):
        table.add_row(
            row.name,
            row.ticker,
            row.asset_class,
            row.target,
            _money(row.current_value, currency),
            _percent(row.current_pct),
            _money(row.target_value, currency),
            _money(row.delta, currency),
            _action(row.action),
        )

    return table


@click.group()
@click.option(
    "--config",
    "config_file",
    type=click.Path(dir_okay=False),
    default=None,
    help="Configuration file (default: config/default.yaml)",
)
@click.pass_context
def cli(ctx: click.Context, config_file: Optional[str]):
    """Portfolio Allocation Tool"""
    try:
        settings = load_engine_settings(config_file)
    except PortfolioEngineError as e:
        console.print(f"[red]Configuration error:[/red] {e}")
        sys.exit(1)

    setup_logging(level=settings.log_level)
    ctx.obj = settings


@cli.command()
@click.argument("portfolio_file", type=click.Path())
@click.option(
    "--targets/--no-targets",
    default=True,
    help="Show the per-asset delta table",
)
@click.pass_obj
def analyze(settings: EngineSettings, portfolio_file: str, targets: bool):
    """Analyze a portfolio file against its allocation targets.

    PORTFOLIO_FILE: YAML or JSON portfolio description
    """
    try:
        portfolio = load_portfolio(portfolio_file)
    except PortfolioEngineError as e:
        console.print(f"[red]Error:[/red] {e}")
        sys.exit(1)

    api = PortfolioAPI(settings)
    options = portfolio.options
    allocation = api.analyze(
        portfolio.assets,
        asset_class_targets=options.asset_class_targets,
        portfolio_value=options.portfolio_value,
        cash_delta_amount=options.cash_delta_amount,
    )
    currency = settings.default_currency

    console.print(f"\n[bold]Portfolio:[/bold] {portfolio_file}")
    console.print(f"Total value: {format_currency_value(allocation.total_value, currency)}")
    console.print(f"Total holdings: {format_currency_value(allocation.total_holdings, currency)}\n")

    console.print(create_class_table(summaries_to_dataframe(allocation), currency))

    if targets:
        console.print()
        console.print(create_asset_table(allocation_to_dataframe(allocation), currency))

    if allocation.is_valid:
        console.print("\n[green]Allocation is valid[/green]")
    else:
        console.print("\n[red]Validation errors:[/red]")
        for error in allocation.validation_errors:
            console.print(f"  - {error}")


def _require_currency(code: str) -> str:
    code = code.upper()
    if not is_valid_currency(code):
        supported = ", ".join(c.code for c in SUPPORTED_CURRENCIES)
        console.print(f"[red]Unsupported currency:[/red] {code} (supported: {supported})")
        sys.exit(1)
    return code


@cli.command()
@click.argument("amount", type=float)
@click.argument("from_currency")
@click.argument("to_currency")
@click.pass_obj
def convert(settings: EngineSettings, amount: float, from_currency: str, to_currency: str):
    """Convert AMOUNT from one currency to another using the fallback rates.

    Examples:

        \b
        python scripts/view_allocation.py convert 100 USD GBP
    """
    from_currency = _require_currency(from_currency)
    to_currency = _require_currency(to_currency)

    result = convert_amount(amount, from_currency, to_currency, settings.fallback_rates)
    console.print(
        f"{format_currency_value(amount, from_currency)} {from_currency} = "
        f"{format_currency_value(result, to_currency)} {to_currency}"
    )


@cli.command()
@click.argument("old_currency")
@click.argument("new_currency")
@click.pass_obj
def rebase(settings: EngineSettings, old_currency: str, new_currency: str):
    """Show the fallback rate table rebased from OLD_CURRENCY onto NEW_CURRENCY."""
    old_currency = _require_currency(old_currency)
    new_currency = _require_currency(new_currency)

    # Configured rates are relative to the configured default currency
    before_rates = recalculate_fallback_rates(
        settings.fallback_rates, settings.default_currency, old_currency
    )
    rates = recalculate_fallback_rates(before_rates, old_currency, new_currency)

    table = Table(
        title=f"Rates relative to {new_currency}",
        show_header=True,
        header_style="bold magenta",
    )
    table.add_column("Currency", style="cyan", no_wrap=True)
    table.add_column("Name")
    table.add_column(f"Before ({old_currency})", justify="right")
    table.add_column(f"After ({new_currency})", justify="right")

    for info in SUPPORTED_CURRENCIES:
        before = before_rates.get(info.code)
        after = rates.get(info.code)
        table.add_row(
            info.code,
            info.name,
            "-" if before is None else f"{before:.4f}",
            "-" if after is None else f"{after:.4f}",
        )

    console.print(table)


if __name__ == "__main__":
    cli()
