"""
Command-line interface for the nsescan screener.
"""

import asyncio
import sys
from datetime import date, datetime
from pathlib import Path
from typing import List, Optional, Tuple

import click
from rich.console import Console
from rich.table import Table

from . import __version__
from .analysis import SectorAnalysisOrchestrator, StockAnalysisOrchestrator
from .config import Config
from .dates import (
    Direction,
    analysis_window,
    encode_query_window,
    format_display_date,
    is_business_day,
    navigate,
)
from .datasource import HttpMarketDataSource, InMemoryMarketDataSource, MarketDataSource
from .exceptions import AnalysisFailure, ScreenerError
from .logger import configure_logging, get_logger
from .models.analysis import AnalysisReport, Verdict

console = Console()
logger = get_logger(__name__)

CANDLE_STYLES = {"bullish": "green", "bearish": "red"}


def _parse_anchor(ctx: click.Context, param: click.Parameter, value: Optional[datetime]) -> Optional[date]:
    if value is None:
        return None
    anchor = value.date()
    if not is_business_day(anchor):
        raise click.BadParameter(f"{anchor.isoformat()} is a weekend, pick a business day")
    return anchor


anchor_argument = click.argument(
    "anchor",
    type=click.DateTime(formats=["%Y-%m-%d"]),
    callback=_parse_anchor
)

fixture_option = click.option(
    "--fixture",
    type=click.Path(exists=True, dir_okay=False, path_type=Path),
    help="Serve market data from a JSON fixture instead of the API"
)

json_option = click.option(
    "--json", "as_json",
    is_flag=True,
    help="Print the report as JSON"
)


@click.group()
@click.version_option(version=__version__, prog_name="nsescan")
@click.option(
    "--env-file",
    type=click.Path(exists=True, dir_okay=False, path_type=Path),
    help="Path to a .env file"
)
@click.option(
    "--verbose",
    "-v",
    is_flag=True,
    help="Enable verbose logging"
)
@click.pass_context
def main(ctx: click.Context, env_file: Optional[Path], verbose: bool) -> None:
    """
    nsescan: three-day volume/candle screener for NSE sectors and stocks.

    Finds instruments whose volume rose strictly over the last three
    business days while the latest candle reversed the previous one.
    """
    ctx.ensure_object(dict)

    try:
        config = Config.load_from_env(str(env_file) if env_file else None)
    except Exception as e:
        click.echo(f"Error loading configuration: {e}", err=True)
        sys.exit(1)

    if verbose:
        config.logging.level = "DEBUG"

    configure_logging(
        level=config.logging.level,
        log_file=config.logging.file_path,
        max_size=config.logging.max_size,
        backup_count=config.logging.backup_count
    )
    ctx.obj["config"] = config


@main.command()
@anchor_argument
def window(anchor: date) -> None:
    """Show the three-day window for ANCHOR (YYYY-MM-DD)."""
    days = analysis_window(anchor)

    table = Table(title=f"📅 Analysis window for {anchor.isoformat()}", show_header=True)
    table.add_column("Day", style="cyan")
    table.add_column("Date")
    table.add_column("Weekday")
    for label, day in zip(("day3 (anchor)", "day2", "day1"), days):
        table.add_row(label, format_display_date(day), day.strftime("%A"))
    console.print(table)

    console.print(f"Query dates: [bold]{encode_query_window(days)}[/bold]")
    console.print(f"Previous business day: {navigate(anchor, Direction.BACKWARD).isoformat()}")
    next_day = navigate(anchor, Direction.FORWARD)
    if next_day != anchor:
        console.print(f"Next business day: {next_day.isoformat()}")


@main.command()
@anchor_argument
@click.option(
    "--sector", "-s", "sectors",
    multiple=True,
    help="Sector index to screen (repeatable, defaults to the configured list)"
)
@fixture_option
@json_option
@click.pass_context
def sectors(
    ctx: click.Context,
    anchor: date,
    sectors: Tuple[str, ...],
    fixture: Optional[Path],
    as_json: bool
) -> None:
    """Screen sector indices for ANCHOR (YYYY-MM-DD); only matches are listed."""
    config: Config = ctx.obj["config"]

    async def run() -> AnalysisReport:
        async with _build_source(config, fixture) as source:
            orchestrator = SectorAnalysisOrchestrator.from_config(source, config)
            return await orchestrator.run(anchor, list(sectors) or None)

    report = _execute(run)
    if as_json:
        click.echo(report.model_dump_json(indent=2))
        return
    _print_sector_report(report)


@main.command()
@anchor_argument
@click.argument("symbols", nargs=-1, required=True)
@fixture_option
@json_option
@click.option(
    "--failed/--no-failed",
    default=True,
    show_default=True,
    help="Include stocks that did not match"
)
@click.pass_context
def stocks(
    ctx: click.Context,
    anchor: date,
    symbols: Tuple[str, ...],
    fixture: Optional[Path],
    as_json: bool,
    failed: bool
) -> None:
    """Screen SYMBOLS for ANCHOR (YYYY-MM-DD)."""
    config: Config = ctx.obj["config"]

    async def run() -> AnalysisReport:
        async with _build_source(config, fixture) as source:
            orchestrator = StockAnalysisOrchestrator.from_config(source, config)
            return await orchestrator.run(anchor, [s.upper() for s in symbols])

    report = _execute(run)
    if as_json:
        click.echo(report.model_dump_json(indent=2))
        return
    _print_stock_report(report, include_failed=failed)


def _build_source(config: Config, fixture: Optional[Path]) -> MarketDataSource:
    if fixture:
        return InMemoryMarketDataSource.from_json_file(fixture)
    return HttpMarketDataSource(config.datasource)


def _execute(run) -> AnalysisReport:
    try:
        return asyncio.run(run())
    except AnalysisFailure as e:
        logger.error(f"Analysis failed: {e}")
        console.print(f"[red]✗[/red] Analysis failed: {e}")
        sys.exit(1)
    except ScreenerError as e:
        logger.error(str(e))
        console.print(f"[red]✗[/red] {e}")
        sys.exit(1)
    except KeyboardInterrupt:
        console.print("\n[yellow]Analysis cancelled[/yellow]")
        sys.exit(130)


def _day_cells(verdict: Verdict) -> List[str]:
    cells = []
    for record in verdict.records[:3]:
        style = CANDLE_STYLES[record.candle_type.value]
        cells.append(
            f"{format_display_date(record.date)}\n"
            f"vol {record.volume:,}\n"
            f"[{style}]{record.candle_type.value}[/{style}] {record.open} → {record.close}"
        )
    return cells


def _print_sector_report(report: AnalysisReport) -> None:
    if not report.verdicts:
        console.print(
            f"[yellow]No sector matched the pattern for {report.anchor_date.isoformat()}[/yellow]"
        )
        return

    table = Table(title=f"📊 Sector matches for {report.anchor_date.isoformat()}", show_header=True)
    table.add_column("Sector", style="cyan")
    table.add_column("Pattern", style="bold")
    for label in ("Anchor day", "Previous day", "Oldest day"):
        table.add_column(label)

    for verdict in report.verdicts:
        table.add_row(verdict.display_name, verdict.pattern_type.value, *_day_cells(verdict))
    console.print(table)


def _print_stock_report(report: AnalysisReport, include_failed: bool = True) -> None:
    verdicts = report.verdicts if include_failed else report.passed
    if not verdicts:
        console.print(
            f"[yellow]No stock results for {report.anchor_date.isoformat()}[/yellow]"
        )
        return

    table = Table(title=f"🏢 Stock screen for {report.anchor_date.isoformat()}", show_header=True)
    table.add_column("Symbol", style="cyan")
    table.add_column("Company")
    table.add_column("Result")
    table.add_column("Pattern")
    table.add_column("Reason")

    for verdict in verdicts:
        result = "[green]✓ passed[/green]" if verdict.passed else "[red]✗ failed[/red]"
        pattern = verdict.pattern_type.value if verdict.pattern_type else "-"
        table.add_row(verdict.instrument_id, verdict.display_name, result, pattern, verdict.reason)
    console.print(table)
    console.print(
        f"{report.passed_count} passed, {report.failed_count} failed "
        f"of {len(report.verdicts)} evaluated"
    )


if __name__ == "__main__":
    main()
