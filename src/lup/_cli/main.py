import logging
import operator
from enum import StrEnum
from pathlib import Path
from typing import Annotated, Any

import typer
from rich.console import Console
from rich.logging import RichHandler
from rich.markup import escape
from rich.panel import Panel
from rich.table import Table

from lup._errors import LoopError, ValueTypeError
from lup._eval import evaluate
from lup._io import DataFileError, check_table_shape, export_report_to_toml, get_table, load_data_file
from lup._loops import LoopKind
from lup._models import Array, LoopReport, array_depth, describe_shape
from lup._secret import Secret
from lup._space import by

from .config import ConfigError, LupConfig, get_config

app = typer.Typer()

logger = logging.getLogger(__name__)
# Console for stderr (info/errors)
err_console = Console(stderr=True)
# Console for stdout (results)
out_console = Console()

_CLI_KINDS = (LoopKind.ANY, LoopKind.ALL, LoopKind.MAX, LoopKind.MIN, LoopKind.SUM, LoopKind.PROD)


class Comparison(StrEnum):
    """Comparison applied to table elements (any/all) or to the extremum (max/min)."""

    LT = "lt"
    LE = "le"
    GT = "gt"
    GE = "ge"
    EQ = "eq"
    NE = "ne"


@app.callback()
def callback(
    *,
    verbose: bool = typer.Option(default=False, help="Enable verbose output"),
) -> None:
    """Evidence-tracking loops over TOML tables."""
    log_level = logging.DEBUG if verbose else logging.INFO

    # Configure rich logging handler to output to stderr
    logging.basicConfig(
        level=log_level,
        format="%(message)s",
        handlers=[
            RichHandler(
                console=err_console,
                show_time=False,
                show_path=verbose,
                rich_tracebacks=True,
            ),
        ],
    )


def _load_config() -> LupConfig:
    try:
        return get_config()
    except ConfigError as e:
        err_console.print(f"[red]Configuration error: {e}[/red]")
        raise typer.Exit(code=1) from e


def _cell_at(array: Array, indices: tuple[int, ...]) -> Any:
    item: Any = array
    for index in indices:
        item = item[index]
    return item


def _to_number(cell: object, *, as_float: bool) -> int | float:
    """Convert a table element to a number, rejecting strings and booleans."""
    if isinstance(cell, bool) or not isinstance(cell, (int, float)):
        msg = f"Expected a numeric table element, got {cell!r}"
        raise ValueTypeError(msg)
    return float(cell) if as_float else cell


def parse_threshold(raw: str, cell: object) -> object:
    """Interpret a threshold given on the command line like the element it is compared with."""
    if isinstance(cell, bool):
        lowered = raw.lower()
        if lowered not in ("true", "false"):
            msg = f"Threshold {raw!r} is not a boolean"
            raise typer.BadParameter(msg)
        return lowered == "true"
    if isinstance(cell, (int, float)):
        try:
            return float(raw)
        except ValueError:
            msg = f"Threshold {raw!r} is not a number"
            raise typer.BadParameter(msg) from None
    return raw


def run_table_loop(
    kind: LoopKind,
    array: Array,
    comparison: Comparison | None = None,
    threshold: str | None = None,
) -> Secret[Any, Any] | Any:
    """Run a loop over every element of a (nested) table.

    The index space is derived from the table itself, one index per nesting
    level. For `any`/`all` the comparison is the per-element predicate; for
    `max`/`min` it is applied to the extremum, keeping its evidence.
    """
    space = by(array, depth=array_depth(array))

    if kind in (LoopKind.ANY, LoopKind.ALL):
        if comparison is None or threshold is None:
            msg = f"'{kind}' needs --op and --threshold"
            raise typer.BadParameter(msg)
        op = getattr(operator, comparison.value)

        def predicate(*indices: int) -> bool:
            cell = _cell_at(array, indices)
            return op(cell, parse_threshold(threshold, cell))

        return evaluate(kind, space, predicate)

    if kind in (LoopKind.MAX, LoopKind.MIN):
        if (comparison is None) != (threshold is None):
            msg = f"'{kind}' needs both --op and --threshold to compare the result, or neither"
            raise typer.BadParameter(msg)
        result = evaluate(kind, space, lambda *indices: _to_number(_cell_at(array, indices), as_float=True))
        if comparison is not None and threshold is not None:
            result = getattr(result, comparison.value)(parse_threshold(threshold, result.value))
        return result

    if kind in (LoopKind.SUM, LoopKind.PROD):
        if comparison is not None or threshold is not None:
            msg = f"'{kind}' does not take --op or --threshold"
            raise typer.BadParameter(msg)
        return evaluate(kind, space, lambda *indices: _to_number(_cell_at(array, indices), as_float=False))

    msg = f"Loop kind '{kind}' is not available from the command line"
    raise typer.BadParameter(msg)


def _render_report(report: LoopReport) -> Panel:
    table = Table(show_header=False, box=None)
    table.add_column("Field", style="dim")
    table.add_column("Value")

    value_str = escape(repr(report.value))
    if report.passed is True:
        value_str = f"[green]{value_str}[/green]"
    elif report.passed is False:
        value_str = f"[red]{value_str}[/red]"

    table.add_row("Value", value_str)
    table.add_row("Evidence", escape(repr(report.evidence)) if report.evidence is not None else "[dim]none[/dim]")
    if report.evidence is not None:
        table.add_row("Witness", escape(repr(report.witness)))
    if report.comparison is not None:
        table.add_row("Comparison", escape(report.comparison))

    return Panel(
        table,
        title=f"[bold]{report.kind} over {escape(report.table)}[/bold]",
        border_style="cyan",
    )


@app.command()
def run(  # noqa: C901, PLR0913
    kind: Annotated[
        LoopKind,
        typer.Argument(help="Loop kind: any, all, max, min, sum or prod"),
    ],
    table: Annotated[
        str | None,
        typer.Argument(help="Name of the table under \\[tables] (defaults to \\[tool.lup].table)"),
    ] = None,
    *,
    input: Annotated[  # noqa: A002
        Path | None,
        typer.Option("-i", "--input", help="Path to input TOML data file"),
    ] = None,
    output: Annotated[
        Path | None,
        typer.Option("-o", "--output", help="Path to output TOML report"),
    ] = None,
    op: Annotated[
        Comparison | None,
        typer.Option("--op", help="Comparison: per element for any/all, on the extremum for max/min"),
    ] = None,
    threshold: Annotated[
        str | None,
        typer.Option("--threshold", help="Value to compare with"),
    ] = None,
    json: Annotated[
        bool,
        typer.Option("--json", help="Print the report as JSON on stdout"),
    ] = False,
    verify: Annotated[
        bool,
        typer.Option("--verify", help="Exit non-zero if a boolean result is false"),
    ] = False,
) -> None:
    """Run one loop over a table and report its value and evidence."""
    config = _load_config()

    if kind not in _CLI_KINDS:
        err_console.print(f"[red]Error: Loop kind '{kind}' is not available from the command line[/red]")
        raise typer.Exit(code=1)

    effective_input = input if input is not None else config.input
    if effective_input is None:
        err_console.print("[red]Error: Input file required. Use -i/--input or configure \\[tool.lup].input[/red]")
        raise typer.Exit(code=1)

    effective_table = table if table is not None else config.table
    if effective_table is None:
        err_console.print("[red]Error: Table name required. Pass it as an argument or configure \\[tool.lup].table[/red]")
        raise typer.Exit(code=1)

    effective_output = output if output is not None else config.output

    err_console.print(f"[cyan]Loading input from:[/cyan] {effective_input}")
    try:
        data_file = load_data_file(effective_input)
        array = get_table(data_file, effective_table)
        check_table_shape(effective_table, array)
    except DataFileError as e:
        err_console.print(f"[red]Error: {escape(str(e))}[/red]")
        raise typer.Exit(code=1) from e

    logger.debug(f"Table '{effective_table}' has shape {describe_shape(array)}")

    try:
        result = run_table_loop(kind, array, op, threshold)
    except LoopError as e:
        err_console.print(f"[red]Error: {escape(str(e))}[/red]")
        raise typer.Exit(code=1) from e

    comparison = f"{op} {threshold}" if op is not None and threshold is not None else None
    report = LoopReport.from_result(kind, effective_table, array, result, comparison)

    if json:
        out_console.print_json(report.model_dump_json())
    else:
        out_console.print(_render_report(report))

    if effective_output is not None:
        err_console.print(f"[cyan]Exporting report to:[/cyan] {effective_output}")
        export_report_to_toml(report, effective_output)

    if verify and report.passed is False:
        err_console.print("[red]✗ Result is false[/red]")
        raise typer.Exit(code=1)

    raise typer.Exit(code=0)


@app.command()
def tables(
    *,
    input: Annotated[  # noqa: A002
        Path | None,
        typer.Option("-i", "--input", help="Path to input TOML data file"),
    ] = None,
) -> None:
    """List the tables of a data file with their shapes."""
    config = _load_config()

    effective_input = input if input is not None else config.input
    if effective_input is None:
        err_console.print("[red]Error: Input file required. Use -i/--input or configure \\[tool.lup].input[/red]")
        raise typer.Exit(code=1)

    try:
        data_file = load_data_file(effective_input)
    except DataFileError as e:
        err_console.print(f"[red]Error: {escape(str(e))}[/red]")
        raise typer.Exit(code=1) from e

    table = Table(show_header=True, header_style="bold cyan")
    table.add_column("Table", style="bold")
    table.add_column("Depth", justify="right", style="yellow")
    table.add_column("Shape", justify="right", style="green")

    for name, array in data_file.tables.items():
        table.add_row(escape(name), str(array_depth(array)), describe_shape(array))

    out_console.print(
        Panel(
            table,
            title=f"[bold]{escape(str(effective_input))}[/bold]",
            subtitle=f"[dim]{len(data_file.tables)} tables[/dim]",
            border_style="cyan",
        ),
    )


def main() -> None:
    app()
