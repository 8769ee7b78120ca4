"""Shared terminal output helpers."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from rich.logging import RichHandler
from rich.table import Table

from shipmark.exceptions import ShipmarkError

if TYPE_CHECKING:
    from collections.abc import Iterable

    from rich.console import Console

    from shipmark.core.version import BumpOption
    from shipmark.handlers.base import WriteResult


def configure_logging(err_console: Console, verbose: bool = False) -> None:
    """Send library logging to stderr through rich."""
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(message)s",
        datefmt="[%X]",
        handlers=[RichHandler(console=err_console, show_path=False, markup=False)],
        force=True,
    )


def print_error(err_console: Console, error: BaseException, context: str | None = None) -> None:
    """Print an error and, for shipmark errors, its suggestions."""
    label = f"{context}:" if context else "Error:"
    message = error.message if isinstance(error, ShipmarkError) else str(error)
    err_console.print(f"[red]✖ {label}[/] {message}", highlight=False)

    suggestions = error.suggestions if isinstance(error, ShipmarkError) else []
    if suggestions:
        err_console.print("[dim]Suggestions:[/]")
        for suggestion in suggestions:
            err_console.print(f"  [dim]•[/] {suggestion}", highlight=False)


def print_write_results(
    results: Iterable[WriteResult],
    console: Console,
    err_console: Console,
) -> bool:
    """Print one line per written file. Returns True if every write succeeded."""
    ok = True
    for result in results:
        if result.success:
            console.print(f"  [green]✓[/] Updated {result.filepath} [dim]({result.handler})[/]")
        else:
            ok = False
            err_console.print(f"  [red]✖[/] {result.filepath}: {result.error}")
    return ok


def bump_options_table(options: list[BumpOption]) -> Table:
    """Numbered table of bump choices, in the order of ``options``."""
    table = Table(show_header=False, box=None, padding=(0, 2))
    for number, option in enumerate(options, start=1):
        table.add_row(f"[bold]{number}[/]", _colorize_bump(option.type), f"→ [cyan]{option.version}[/]")
    return table


def _colorize_bump(bump_type: str) -> str:
    color = {"major": "red", "minor": "yellow", "patch": "green"}.get(bump_type, "magenta")
    return f"[{color}]{bump_type}[/]"
