"""CLI for the ``networth`` package.

Reads a ledger file, replays it, prints the summary and optionally opens a
chart of the monthly history. Business logic lives in ``networth.parser``,
``networth.engine``, ``networth.summary`` and ``networth.graph``.
"""

from __future__ import annotations

from pathlib import Path
from typing import Annotated, Dict, List, Optional

import typer
from rich.console import Console

from .config import (
    DEFAULT_BROWSER, ROUNDING_MODES,
    GraphColours, GraphOptions, ReportOptions, load_palette,
)
from .core import LedgerError
from .engine import LedgerState, spending
from .graph import graph
from .logging_setup import configure_logging, get_logger
from .parser import parse_text
from .summary import report

app = typer.Typer(
    name="networth",
    help="Net worth and spending report for a plain-text ledger",
    no_args_is_help=True,
    add_completion=False,
)
console = Console()
err_console = Console(stderr=True)

logger = get_logger(__name__)


def _parse_aliases(pairs: List[str]) -> Dict[str, str]:
    aliases = {}
    for pair in pairs:
        name, sep, alias = pair.partition("=")
        if not sep or not name.strip() or not alias.strip():
            raise typer.BadParameter(f"expected NAME=ALIAS, got {pair!r}", param_hint="--alias")
        aliases[name.strip()] = alias.strip()
    return aliases


@app.command()
def main(
    ledger: Annotated[Path, typer.Argument(help="Ledger file to read")],
    redact: Annotated[
        bool, typer.Option("--redact", "-r", help="Show values relative to total holdings")
    ] = False,
    draw_graph: Annotated[
        bool, typer.Option("--graph", "-g", help="Draw the monthly history")
    ] = False,
    palette: Annotated[
        Optional[Path], typer.Option("--palette", "-p", help="File to read colours from")
    ] = None,
    colours: Annotated[
        Optional[List[int]],
        typer.Option("--colours", "-c", help="Palette lines to get colours from (bg, fg, col0, col1, ...)"),
    ] = None,
    browser: Annotated[
        str, typer.Option("--browser", "-b", help="Program to show the graph in")
    ] = DEFAULT_BROWSER,
    graph_accounts: Annotated[
        Optional[List[str]], typer.Option("--graph-accounts", help="Accounts to graph")
    ] = None,
    summary_accounts: Annotated[
        Optional[List[str]], typer.Option("--summary-accounts", help="Accounts to list in the summary")
    ] = None,
    year_digits: Annotated[
        int, typer.Option("--date-year-digits", help="Year digits in graph labels (0-4)")
    ] = 4,
    month_digit: Annotated[
        bool, typer.Option("--date-month-digit", help="Month numbers instead of names in graph labels")
    ] = False,
    rounding: Annotated[
        str, typer.Option("--rounding", help="none, whole or cents")
    ] = "cents",
    min_asset_worth: Annotated[
        float, typer.Option("--min-asset-worth", help="Hide assets worth less than this")
    ] = 0.0,
    alias: Annotated[
        Optional[List[str]], typer.Option("--alias", help="Display NAME as ALIAS (NAME=ALIAS)")
    ] = None,
    log_level: Annotated[
        Optional[str], typer.Option("--log-level", envvar="NETWORTH_LOG_LEVEL", help="Logging level")
    ] = None,
) -> None:
    """Print the net worth summary of LEDGER."""
    configure_logging(log_level)

    if rounding not in ROUNDING_MODES:
        raise typer.BadParameter(f"must be one of {', '.join(ROUNDING_MODES)}", param_hint="--rounding")

    try:
        text = ledger.read_text(encoding="utf-8")
    except (OSError, UnicodeDecodeError) as e:
        err_console.print(f"[red]Error reading ledger:[/red] {e}")
        raise typer.Exit(1)

    transactions, names = parse_text(text)
    state = LedgerState()
    history = spending(transactions, state)
    logger.info("%d transactions, %d names, %d months", len(transactions), len(names), len(history))

    report_options = ReportOptions(
        redact=redact,
        rounding=rounding,
        includes=tuple(summary_accounts or ()),
        aliases=_parse_aliases(alias or []),
        min_asset_worth=min_asset_worth,
    )
    norm_fac = report(names, state, history, report_options, console)

    if not draw_graph:
        return

    try:
        graph_colours = load_palette(palette, colours or []) if palette is not None else None
    except LedgerError as e:
        err_console.print(f"[red]Error:[/red] {e}")
        raise typer.Exit(1)

    options = GraphOptions(
        includes=tuple(graph_accounts or ()),
        browser=browser,
        year_digits=year_digits,
        use_month_name=not month_digit,
        colours=graph_colours or GraphColours(),
    )
    try:
        path = graph(
            norm_fac, names, history, options.includes, options.colours, options.browser,
            options.year_digits, options.use_month_name, options.output_dir,
        )
    except OSError as e:
        err_console.print(f"[red]Error opening graph:[/red] {e}")
        raise typer.Exit(1)
    logger.info("graph written to %s", path)


if __name__ == "__main__":
    app()
