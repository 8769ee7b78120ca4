"""Implementation of the 'sync' command.

Checks that every configured version file carries the same version.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

from rich.table import Table

from shipmark.cli.commands.common import load_config_or_exit

if TYPE_CHECKING:
    from pathlib import Path

    from rich.console import Console

    from shipmark.handlers import HandlerRegistry


def run_sync(
    project_path: Path,
    registry: HandlerRegistry,
    console: Console,
    err_console: Console,
) -> None:
    """Report the version of each file and exit with status 1 on mismatch."""
    config = load_config_or_exit(project_path, err_console)
    result = registry.validate_version_sync(config.version.files, project_path)

    table = Table(title="Version files", title_justify="left")
    table.add_column("File")
    table.add_column("Version")
    table.add_column("Status")
    for entry in config.version.file_entries:
        version = result.versions.get(entry.path)
        if version is None:
            status = "[yellow]no version[/]"
        elif entry.path in result.mismatches:
            status = "[red]mismatch[/]"
        else:
            status = "[green]ok[/]"
        table.add_row(entry.path, version or "-", status)
    console.print(table)

    if not result.synced:
        err_console.print(
            f"[red]✖ Version files are out of sync:[/] {', '.join(result.mismatches)}\n"
            "[dim]Run [cyan]shipmark version set <version>[/] to align them.[/]"
        )
        raise SystemExit(1)

    console.print("[green]✓ All version files are in sync[/]")
