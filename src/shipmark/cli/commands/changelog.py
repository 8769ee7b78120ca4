"""Implementation of the 'changelog' command."""

from __future__ import annotations

from collections import Counter
from datetime import UTC, datetime
from typing import TYPE_CHECKING

from shipmark.cli.commands.common import load_config_or_exit, parse_project_commits
from shipmark.cli.output import print_error
from shipmark.core.changelog import (
    generate_changelog_entry,
    preview_changelog,
    type_labels,
    update_changelog_file,
)
from shipmark.core.version import clean
from shipmark.exceptions import ShipmarkError
from shipmark.vcs import GitRepository, normalize_remote_url

if TYPE_CHECKING:
    from pathlib import Path

    from rich.console import Console

    from shipmark.handlers import HandlerRegistry


def run_changelog(
    project_path: Path,
    from_ref: str | None,
    to_ref: str,
    output: str | None,
    preview: bool,
    version: str | None,
    registry: HandlerRegistry,
    console: Console,
    err_console: Console,
) -> None:
    """Generate or update the changelog from commits.

    Args:
        project_path: Project directory
        from_ref: First ref of the range (default: latest tag)
        to_ref: Last ref of the range
        output: Changelog file (default: configured file)
        preview: Print the entry instead of writing it
        version: Version for the entry heading (default: current version)
        registry: Handler registry used to read the current version
        console: Console for standard output
        err_console: Console for error output
    """
    config = load_config_or_exit(project_path, err_console)
    repo = GitRepository(project_path)

    try:
        repo.ensure_repo()
        from_ref = from_ref or repo.get_latest_tag()
        commits = parse_project_commits(repo.get_commits(from_ref, to_ref), config)
    except ShipmarkError as e:
        print_error(err_console, e)
        raise SystemExit(1) from e

    start = f"[cyan]{from_ref}[/]" if from_ref else "[dim]beginning[/]"
    console.print(f"Generating changelog from {start} to [cyan]{to_ref}[/]")

    if not commits:
        console.print("[yellow]No commits found in range.[/]")
        return

    if version is None:
        primary = registry.read_version_from_files(config.version.files, project_path)[0]
        version = clean(primary) if primary else "Unreleased"

    labels = type_labels(config.changelog)
    if preview:
        console.print(f"\n[bold]Changelog Preview - {version}[/]")
        for line in preview_changelog(commits, labels):
            console.print(f"  {line}", highlight=False)
        return

    entry = generate_changelog_entry(
        version=version,
        date=datetime.now(UTC).strftime("%Y-%m-%d"),
        commits=commits,
        config=config.changelog,
        repo_url=normalize_remote_url(repo.get_remote_url()),
    )
    changelog_path = project_path / (output or config.changelog.file)
    try:
        update_changelog_file(changelog_path, entry, version)
    except ShipmarkError as e:
        print_error(err_console, e)
        raise SystemExit(1) from e
    console.print(f"  [green]✓[/] Changelog written to [cyan]{changelog_path.name}[/]")

    counts = Counter(commit.type for commit in commits)
    for commit_type, count in counts.most_common():
        console.print(f"  [dim]{labels.get(commit_type, commit_type)}:[/] {count}")
    breaking = sum(1 for commit in commits if commit.breaking)
    if breaking:
        console.print(f"  [red]Breaking changes:[/] {breaking}")
