"""
Command-Line Interface for CashProj.

Purpose
-------
Runs projections and contribution previews from instrument files without
writing Python code.

Commands
--------
- project: Month-by-month income, expense and balance projection
- contribution: Contribution breakdown and take-home for a gross wage
- config: Validate instrument files

Example Usage
-------------
    # 24-month projection starting from a balance of 1,000
    $ cashproj project -c instruments.json -m 24 -b 1000 --start 2025-01

    # Save the projection
    $ cashproj project -c instruments.json -m 36 -o results/projection.json

    # Take-home on a 6,000 wage at age 40, with a 1.5-month bonus
    $ cashproj contribution 6000 --age 40 --bonus 9000

    # Validate configuration
    $ cashproj config validate instruments.json
"""

from __future__ import annotations

import json
import logging
import sys
from decimal import InvalidOperation
from pathlib import Path
from typing import Optional

import click
from pydantic import ValidationError as PydanticValidationError

from . import __version__
from .exceptions import CashProjError


def _import_rich():
    """Lazy import Rich for better startup time."""
    from rich.console import Console
    from rich.table import Table
    from rich.panel import Panel
    return Console, Table, Panel


def _get_console():
    Console, *_ = _import_rich()
    return Console()


def _configure_logging(debug: bool, level: str) -> None:
    logging.basicConfig(
        level=logging.DEBUG if debug else getattr(logging, level),
        format="%(levelname)s %(name)s: %(message)s",
    )


def _fail(message: str) -> None:
    click.echo(message, err=True)
    sys.exit(1)


# Errors a command reports and exits on; anything else is a bug and propagates
USER_ERRORS = (CashProjError, PydanticValidationError, OSError, ValueError, InvalidOperation)


@click.group()
@click.version_option(version=__version__, prog_name="cashproj")
@click.option("--quiet", "-q", is_flag=True, help="Suppress non-essential output")
@click.pass_context
def main(ctx: click.Context, quiet: bool) -> None:
    """
    CashProj - Household cash-flow projection.

    Projects monthly income, expenses and running balance from income and
    expense instruments, with statutory contribution deductions.

    Use 'cashproj COMMAND --help' for command-specific help.
    """
    from .config import AppSettings

    try:
        settings = AppSettings()
    except PydanticValidationError as e:
        _fail(f"Invalid CASHPROJ_* settings: {e}")

    _configure_logging(settings.debug, settings.log_level)
    ctx.ensure_object(dict)
    ctx.obj["quiet"] = quiet
    ctx.obj["settings"] = settings
    ctx.obj["console"] = _get_console()


@main.command()
@click.option(
    "--config", "-c",
    type=click.Path(exists=True, path_type=Path),
    required=True,
    help="Path to instruments file (JSON)"
)
@click.option(
    "--months", "-m",
    type=int,
    default=None,
    help="Projection horizon in months (default: CASHPROJ_DEFAULT_HORIZON_MONTHS or 12)"
)
@click.option(
    "--balance", "-b",
    type=str,
    default="0",
    help="Starting balance (default: 0)"
)
@click.option(
    "--start",
    type=str,
    default=None,
    help="First projected month as YYYY-MM (default: current month)"
)
@click.option(
    "--output", "-o",
    type=click.Path(path_type=Path),
    default=None,
    help="Write the projection to this JSON file"
)
@click.pass_context
def project(
    ctx: click.Context,
    config: Path,
    months: Optional[int],
    balance: str,
    start: Optional[str],
    output: Optional[Path],
) -> None:
    """
    Run a monthly cash-flow projection.

    Example:
        cashproj project -c instruments.json -m 24 -b 1000 --start 2025-01
    """
    console = ctx.obj["console"]
    quiet = ctx.obj.get("quiet", False)
    settings = ctx.obj["settings"]

    from .projection import compute_projection_metrics, project_monthly_balance
    from .serialization import load_portfolio, save_projection
    from .utils import parse_year_month

    horizon = settings.default_horizon_months if months is None else months

    try:
        start_month = parse_year_month(start) if start else None
        portfolio = load_portfolio(config)
        points = project_monthly_balance(
            portfolio.income_instruments(),
            portfolio.expense_instruments(),
            horizon,
            balance,
            start=start_month,
            scheme=portfolio.scheme(),
        )
    except USER_ERRORS as e:
        _fail(f"Error running projection: {e}")

    metrics = compute_projection_metrics(points)

    if not quiet:
        _, Table, _ = _import_rich()

        table = Table(title="Monthly Projection", show_header=True)
        table.add_column("Month", style="cyan")
        table.add_column("Income", justify="right")
        table.add_column("Expense", justify="right")
        table.add_column("Balance", justify="right")
        table.add_column("Cumulative", style="green", justify="right")
        table.add_column("Notes")

        for p in points:
            notes = ", ".join(item.name for item in p.special_items)
            table.add_row(
                p.month_label,
                f"{p.income:,.2f}",
                f"{p.expense:,.2f}",
                f"{p.monthly_balance:,.2f}",
                f"{p.cumulative_balance:,.2f}",
                notes,
            )
        console.print(table)

    click.echo(f"Ending balance: {metrics.ending_balance:,.2f}")
    if metrics.min_cumulative_month is not None:
        click.echo(
            f"Lowest balance: {metrics.min_cumulative_balance:,.2f} ({metrics.min_cumulative_month})"
        )
    click.echo(f"Months with a deficit: {metrics.negative_months}")

    if output:
        try:
            save_projection(points, output, starting_balance=balance)
        except OSError as e:
            _fail(f"Error writing {output}: {e}")
        if not quiet:
            click.echo(f"Projection saved to {output}")


@main.command()
@click.argument("gross", type=str)
@click.option("--age", "-a", type=int, default=None, help="Contributor age (default: CASHPROJ_DEFAULT_AGE or 30)")
@click.option("--bonus", type=str, default=None, help="Bonus amount paid on top of the monthly wage")
@click.option("--json", "as_json", is_flag=True, help="Print the breakdown as JSON")
@click.pass_context
def contribution(
    ctx: click.Context,
    gross: str,
    age: Optional[int],
    bonus: Optional[str],
    as_json: bool,
) -> None:
    """
    Show the contribution breakdown for a monthly gross wage.

    Example:
        cashproj contribution 6000 --age 40
    """
    console = ctx.obj["console"]
    quiet = ctx.obj.get("quiet", False)
    settings = ctx.obj["settings"]

    from .contribution import (
        compute_bonus_contribution,
        compute_contribution,
        compute_sub_account_allocation,
    )

    age = settings.default_age if age is None else age

    try:
        result = compute_contribution(gross, age)
        accounts = compute_sub_account_allocation(result.total_amount, age)
        bonus_result = compute_bonus_contribution(gross, bonus, age) if bonus is not None else None
    except USER_ERRORS as e:
        _fail(f"Error computing contribution: {e}")

    if as_json:
        data = {
            "age": age,
            "contribution": result.as_dict(),
            "sub_accounts": {k: str(v) for k, v in accounts.items()},
        }
        if bonus_result is not None:
            data["bonus"] = bonus_result.as_dict()
        click.echo(json.dumps(data, indent=2))
        return

    if quiet:
        click.echo(f"Net take-home: {result.net_take_home:,.2f}")
        return

    _, Table, _ = _import_rich()
    table = Table(title=f"Contribution (age {age})", show_header=True)
    table.add_column("Item", style="cyan")
    table.add_column("Amount", style="green", justify="right")
    table.add_row("Gross wage", f"{result.gross_amount:,.2f}")
    table.add_row("Applicable wage", f"{result.applicable_amount:,.2f}")
    table.add_row("Employee share", f"{result.employee_amount:,.2f}")
    table.add_row("Employer share", f"{result.employer_amount:,.2f}")
    table.add_row("Total contribution", f"{result.total_amount:,.2f}")
    table.add_row("Net take-home", f"{result.net_take_home:,.2f}")
    for name, value in accounts.items():
        table.add_row(f"  {name.upper()}", f"{value:,.2f}")
    if bonus_result is not None:
        table.add_row("", "")
        table.add_row("Bonus", f"{bonus_result.bonus_amount:,.2f}")
        table.add_row("Bonus subject to contribution", f"{bonus_result.applicable_amount:,.2f}")
        table.add_row("Bonus employee share", f"{bonus_result.employee_amount:,.2f}")
        table.add_row("Bonus take-home", f"{bonus_result.bonus_amount - bonus_result.employee_amount:,.2f}")
    console.print(table)


@main.group()
def config() -> None:
    """
    Configuration management commands.

    Validate instrument files.
    """
    pass


@config.command("validate")
@click.argument("config_file", type=click.Path(exists=True, path_type=Path))
@click.pass_context
def config_validate(ctx: click.Context, config_file: Path) -> None:
    """
    Validate an instruments file.

    Checks that the file is valid JSON and conforms to the expected schema.

    Example:
        cashproj config validate instruments.json
    """
    console = ctx.obj["console"]
    quiet = ctx.obj.get("quiet", False)

    from .expenses import expense_monthly_equivalent
    from .serialization import load_portfolio

    try:
        portfolio = load_portfolio(config_file)
        scheme = portfolio.scheme()
    except USER_ERRORS as e:
        _fail(f"Configuration validation failed: {e}")

    expenses = portfolio.expense_instruments()
    active = [e for e in expenses if e.participates]
    monthly_cost = sum((expense_monthly_equivalent(e) for e in active), 0)

    if quiet:
        click.echo("Configuration is valid")
        return

    from rich.panel import Panel

    info = (
        "[bold]Instruments File Valid[/bold]\n\n"
        f"[cyan]Incomes:[/cyan] {len(portfolio.incomes)}\n"
        f"[cyan]Expenses:[/cyan] {len(expenses)} ({len(active)} recurring)\n"
        f"[cyan]Average monthly recurring cost:[/cyan] {monthly_cost:,.2f}\n"
        f"[cyan]Wage ceiling:[/cyan] {scheme.ordinary_wage_ceiling:,}\n"
    )
    for inc in portfolio.incomes:
        info += f"  - {inc.name}: {inc.amount} {inc.frequency}\n"
    console.print(Panel(info, title="Configuration Summary", border_style="green"))
    click.echo("Configuration is valid")


if __name__ == "__main__":
    main()
