"""Implementation of the 'status' command."""

from __future__ import annotations

from collections import Counter
from typing import TYPE_CHECKING

from rich.table import Table

from shipmark.cli.commands.common import load_config_or_exit, parse_project_commits
from shipmark.cli.output import print_error
from shipmark.core.changelog import type_labels
from shipmark.core.commits import COMMIT_TYPE_ORDER, OTHER_TYPE, calculate_bump
from shipmark.core.version import Version
from shipmark.exceptions import ShipmarkError, ValidationError
from shipmark.vcs import GitRepository

if TYPE_CHECKING:
    from pathlib import Path

    from rich.console import Console

    from shipmark.handlers import HandlerRegistry

# Commits listed with --verbose
MAX_LISTED_COMMITS = 20


def run_status(
    project_path: Path,
    verbose: bool,
    registry: HandlerRegistry,
    console: Console,
    err_console: Console,
) -> None:
    """Show the repository state and what the next release would be.

    Args:
        project_path: Project directory
        verbose: Also list the pending commits
        registry: Handler registry used to read the current version
        console: Console for standard output
        err_console: Console for error output
    """
    config = load_config_or_exit(project_path, err_console)
    repo = GitRepository(project_path)

    try:
        repo.ensure_repo()
        has_commits = repo.has_commits()
        branch = repo.current_branch() if has_commits else "(no commits)"
        dirty = repo.is_dirty()
        has_remote = repo.has_remote()
        latest_tag = repo.get_latest_tag()
        commits = (
            parse_project_commits(repo.get_commits(latest_tag), config) if has_commits else []
        )
    except ShipmarkError as e:
        print_error(err_console, e)
        raise SystemExit(1) from e

    current = registry.read_version_from_files(config.version.files, project_path)[0]

    overview = Table(show_header=False, box=None, padding=(0, 2))
    overview.add_row("[dim]Branch[/]", f"[cyan]{branch}[/]")
    overview.add_row("[dim]Version[/]", f"[cyan]{current}[/]" if current else "[yellow]not found[/]")
    overview.add_row("[dim]Latest tag[/]", f"[cyan]{latest_tag}[/]" if latest_tag else "[dim]none[/]")
    overview.add_row("[dim]Remote[/]", "[green]connected[/]" if has_remote else "[dim]not configured[/]")
    overview.add_row(
        "[dim]Working tree[/]", "[yellow]uncommitted changes[/]" if dirty else "[green]clean[/]"
    )
    console.print("[bold]Repository[/]")
    console.print(overview)

    if not commits:
        console.print("\n[green]No changes since last release[/]")
        return

    since = latest_tag or "the beginning"
    console.print(f"\n[bold]{len(commits)}[/] commits since [cyan]{since}[/]")

    labels = type_labels(config.changelog)
    counts = Counter(commit.type for commit in commits if commit.type != OTHER_TYPE)
    summary = Table(show_header=False, box=None, padding=(0, 2))
    for commit_type in sorted(counts, key=_type_rank):
        summary.add_row(f"[dim]{labels.get(commit_type, commit_type)}[/]", str(counts[commit_type]))
    breaking = sum(1 for commit in commits if commit.breaking)
    if breaking:
        summary.add_row("[red]Breaking changes[/]", f"[red]{breaking}[/]")
    if summary.row_count:
        console.print(summary)

    if verbose:
        console.print("\n[bold]Commits[/]")
        for commit in commits[:MAX_LISTED_COMMITS]:
            scope = f"({commit.scope})" if commit.scope else ""
            color = "red" if commit.breaking else "dim"
            console.print(
                f"  [dim]{commit.short_hash}[/] [{color}]{commit.type}{scope}[/]: {commit.subject}",
                highlight=False,
            )
        if len(commits) > MAX_LISTED_COMMITS:
            console.print(f"  [dim]... and {len(commits) - MAX_LISTED_COMMITS} more[/]")

    bump = calculate_bump(commits, conventional=config.commits.conventional)
    if bump is None:
        console.print("\n[dim]No releasable changes.[/]")
        return

    console.print(f"\n[dim]Suggested bump:[/] [bold]{bump}[/]")
    if current:
        try:
            next_version = Version.parse(current).bump(bump)
        except ValidationError as e:
            err_console.print(f"[yellow]![/] Cannot suggest a next version: {e.message}")
            return
        console.print(f"[dim]Next version:[/]   [cyan]{next_version}[/]")
        console.print("[dim]Run[/] [cyan]shipmark release[/] [dim]to create it.[/]")


def _type_rank(commit_type: str) -> int:
    if commit_type in COMMIT_TYPE_ORDER:
        return COMMIT_TYPE_ORDER.index(commit_type)
    return len(COMMIT_TYPE_ORDER)
