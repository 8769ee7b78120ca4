"""Implementation of the 'version' commands.

``version show`` prints the current version, ``version bump`` computes the
next one and ``version set`` writes an explicit one. Both writing commands
update every configured version file through the handler registry.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

from shipmark.cli.commands.common import load_config_or_exit, prompt_bump_type
from shipmark.cli.output import print_error, print_write_results
from shipmark.core.version import Version, clean, is_valid
from shipmark.exceptions import ValidationError
from shipmark.vcs import GitRepository

if TYPE_CHECKING:
    from pathlib import Path

    from rich.console import Console

    from shipmark.handlers import HandlerRegistry


def run_show(
    project_path: Path,
    registry: HandlerRegistry,
    console: Console,
    err_console: Console,
) -> None:
    """Print the version of every configured file and the latest tag."""
    config = load_config_or_exit(project_path, err_console)

    primary, results = registry.read_version_from_files(config.version.files, project_path)
    for result in results:
        if result.version:
            console.print(f"  [dim]{result.filepath}:[/] [cyan]{result.version}[/]")
        elif result.error:
            err_console.print(f"  [yellow]![/] {result.filepath}: {result.error}")
        else:
            console.print(f"  [dim]{result.filepath}:[/] [yellow]no version[/]")

    repo = GitRepository(project_path)
    latest_tag = repo.get_latest_tag() if repo.is_repo() else None
    if latest_tag:
        console.print(f"  [dim]Latest tag:[/] [cyan]{latest_tag}[/] ({clean(latest_tag)})")
        pending = repo.count_commits_since(latest_tag)
        if pending:
            console.print(f"  [dim]Commits since tag:[/] [yellow]{pending}[/]")

    if primary is None and latest_tag is None:
        console.print("[yellow]No version found.[/]")
        console.print("[dim]Add a version file to the config or create a git tag.[/]")


def run_bump(
    project_path: Path,
    bump_type: str | None,
    prerelease: str | None,
    dry_run: bool,
    registry: HandlerRegistry,
    console: Console,
    err_console: Console,
) -> None:
    """Bump the version in all configured files.

    Args:
        project_path: Project directory
        bump_type: Bump type; prompts for one when None
        prerelease: Prerelease channel, defaults to the configured one
        dry_run: Only show the new version
        registry: Handler registry used to read and write version files
        console: Console for standard output
        err_console: Console for error output
    """
    config = load_config_or_exit(project_path, err_console)
    channel = prerelease or config.version.prerelease_channel

    current_str = registry.read_version_from_files(config.version.files, project_path)[0]
    if current_str is None:
        print_error(
            err_console,
            ValidationError(
                "No version found in the configured version files",
                [f"Checked: {', '.join(entry.path for entry in config.version.file_entries)}"],
            ),
        )
        raise SystemExit(1)

    try:
        current = Version.parse(current_str)
        if bump_type is None:
            bump_type = prompt_bump_type(current, channel, console)
        next_version = current.bump(bump_type, channel)
    except ValidationError as e:
        print_error(err_console, e)
        raise SystemExit(1) from e

    console.print(f"\n  [dim]Bump:[/]    {bump_type}")
    console.print(f"  [dim]Current:[/] {current_str}")
    console.print(f"  [dim]New:[/]     [green]{next_version}[/]\n")

    _apply(
        project_path,
        str(next_version),
        config.version.files,
        dry_run,
        registry,
        console,
        err_console,
    )


def run_set(
    project_path: Path,
    new_version: str,
    dry_run: bool,
    registry: HandlerRegistry,
    console: Console,
    err_console: Console,
) -> None:
    """Write an explicit version to all configured files."""
    config = load_config_or_exit(project_path, err_console)

    version = clean(new_version)
    if not is_valid(version):
        print_error(
            err_console,
            ValidationError(
                f"Invalid version format: {new_version}",
                ["Version must follow semver format", "Examples: 1.0.0, 2.1.3-beta.1"],
            ),
        )
        raise SystemExit(1)

    current_str = registry.read_version_from_files(config.version.files, project_path)[0]
    if current_str:
        console.print(f"\n  [dim]Current:[/] {current_str}")
    console.print(f"  [dim]New:[/]     [green]{version}[/]\n")

    _apply(project_path, version, config.version.files, dry_run, registry, console, err_console)


def _apply(
    project_path: Path,
    version: str,
    entries: list,
    dry_run: bool,
    registry: HandlerRegistry,
    console: Console,
    err_console: Console,
) -> None:
    if dry_run:
        console.print("[yellow]Dry run mode - no changes made[/]")
        return

    results = registry.write_version_to_files(entries, version, project_path)
    if not print_write_results(results, console, err_console):
        raise SystemExit(1)
    console.print(f"[green]Version set to {version}[/]")
