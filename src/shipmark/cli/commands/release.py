"""Implementation of the 'release' command.

The release command bumps the version in every configured file, updates
the changelog, commits, tags and pushes.
"""

from __future__ import annotations

from datetime import UTC, datetime
from typing import TYPE_CHECKING

from rich.panel import Panel
from rich.prompt import Confirm

from shipmark.cli.commands.common import (
    load_config_or_exit,
    parse_project_commits,
    prompt_bump_type,
)
from shipmark.cli.output import print_error, print_write_results
from shipmark.core.changelog import (
    generate_changelog_entry,
    preview_changelog,
    type_labels,
    update_changelog_file,
)
from shipmark.core.commits import calculate_bump
from shipmark.core.version import BumpType, Version
from shipmark.exceptions import GitError, ShipmarkError, ValidationError
from shipmark.vcs import GitRepository, normalize_remote_url

if TYPE_CHECKING:
    from pathlib import Path

    from rich.console import Console

    from shipmark.config import ShipmarkConfig
    from shipmark.core.commits import ParsedCommit
    from shipmark.core.version import PrereleaseChannel
    from shipmark.handlers import HandlerRegistry


def run_release(
    project_path: Path,
    dry_run: bool,
    skip_changelog: bool,
    skip_tag: bool,
    skip_push: bool,
    prerelease: str | None,
    bump_type: str | None,
    yes: bool,
    registry: HandlerRegistry,
    console: Console,
    err_console: Console,
) -> None:
    """Run the release command.

    Args:
        project_path: Project directory
        dry_run: Only show what would happen
        skip_changelog: Do not update the changelog
        skip_tag: Do not create a tag
        skip_push: Do not push to the remote
        prerelease: Prerelease channel (alpha, beta, rc)
        bump_type: Explicit bump type; derived from commits with --yes,
            prompted for otherwise
        yes: Do not ask for confirmation
        registry: Handler registry used to read and write version files
        console: Console for standard output
        err_console: Console for error output
    """
    config = load_config_or_exit(project_path, err_console)
    repo = GitRepository(project_path)

    try:
        repo.ensure_repo()
        if not repo.has_commits():
            raise GitError(
                "No commits found in repository",
                ["Make sure you have at least one commit", 'Run: git commit -m "Initial commit"'],
            )
        latest_tag = repo.get_latest_tag()
        current = _current_version(project_path, config, registry, latest_tag, console)
        commits = parse_project_commits(repo.get_commits(latest_tag), config)
    except ShipmarkError as e:
        print_error(err_console, e)
        raise SystemExit(1) from e

    console.print(f"[blue]ℹ[/] [bold]{len(commits)}[/] commits since last release")
    if not commits and not yes:
        if not Confirm.ask("No new commits since last release. Continue anyway?", default=False):
            console.print("Release cancelled")
            return

    labels = type_labels(config.changelog)
    if commits:
        console.print("\n[bold]Changelog Preview[/]")
        for line in preview_changelog(commits, labels):
            console.print(f"  [dim]{line}[/]", highlight=False)

    channel = prerelease or config.version.prerelease_channel
    try:
        if bump_type is None:
            bump_type = _select_bump(current, commits, config, prerelease, yes, channel, console)
        next_version = current.bump(bump_type, channel)
    except ValidationError as e:
        print_error(err_console, e)
        raise SystemExit(1) from e

    version_str = str(next_version)
    tag_name = config.version.tag_name(version_str)
    push = config.git.push and not skip_push

    console.print(
        Panel(
            f"[dim]Version:[/]   [bold]{version_str}[/]\n"
            f"[dim]Tag:[/]       {'[yellow]skipped[/]' if skip_tag else tag_name}\n"
            f"[dim]Commits:[/]   {len(commits)}\n"
            f"[dim]Changelog:[/] {'[yellow]skipped[/]' if skip_changelog else '[green]yes[/]'}\n"
            f"[dim]Push:[/]      {'[green]yes[/]' if push else '[yellow]skipped[/]'}",
            title="Release Summary",
            border_style="cyan",
        )
    )

    if dry_run:
        console.print("[yellow]Dry run mode - no changes will be made[/]")
        return

    if not yes and not Confirm.ask(f"Release [cyan]{version_str}[/]?", default=True):
        console.print("Release cancelled")
        return

    if not skip_tag and repo.tag_exists(tag_name):
        print_error(
            err_console,
            GitError(f"Tag {tag_name} already exists", [f"Delete it with: git tag -d {tag_name}"]),
        )
        raise SystemExit(1)

    results = registry.write_version_to_files(config.version.files, version_str, project_path)
    if not print_write_results(results, console, err_console):
        err_console.print("[red]Release aborted: some version files could not be updated.[/]")
        raise SystemExit(1)
    changed_files = [result.filepath for result in results]

    try:
        if not skip_changelog:
            entry = generate_changelog_entry(
                version=version_str,
                date=datetime.now(UTC).strftime("%Y-%m-%d"),
                commits=commits,
                config=config.changelog,
                repo_url=normalize_remote_url(repo.get_remote_url()),
            )
            update_changelog_file(project_path / config.changelog.file, entry, version_str)
            changed_files.append(str(config.changelog.file))
            console.print(f"  [green]✓[/] Updated {config.changelog.file}")

        message = config.version.commit_message.format(version=version_str)
        repo.commit(message, changed_files, sign=config.git.sign_commits)
        console.print(f"  [green]✓[/] Committed: {message}")

        if not skip_tag:
            repo.create_tag(
                tag_name,
                config.version.tag_message.format(version=version_str),
                sign=config.git.sign_tags,
            )
            console.print(f"  [green]✓[/] Created tag {tag_name}")

        if push:
            repo.push(include_tags=config.git.push_tags and not skip_tag)
            console.print("  [green]✓[/] Pushed to remote")
    except ShipmarkError as e:
        print_error(err_console, e)
        raise SystemExit(1) from e

    console.print(f"\n[green]Released {version_str}![/]")


def _current_version(
    project_path: Path,
    config: ShipmarkConfig,
    registry: HandlerRegistry,
    latest_tag: str | None,
    console: Console,
) -> Version:
    """Current version from the version files, else the latest tag, else 0.0.0."""
    primary = registry.read_version_from_files(config.version.files, project_path)[0]
    if primary:
        console.print(f"[blue]ℹ[/] Current version: [cyan]{primary}[/]")
        return Version.parse(primary)
    if latest_tag:
        console.print(f"[blue]ℹ[/] Latest tag: [cyan]{latest_tag}[/]")
        return Version.parse(latest_tag.removeprefix(config.version.tag_prefix))
    console.print("[blue]ℹ[/] No version found, starting from 0.0.0")
    return Version(0, 0, 0)


def _select_bump(
    current: Version,
    commits: list[ParsedCommit],
    config: ShipmarkConfig,
    prerelease: str | None,
    yes: bool,
    channel: PrereleaseChannel | str,
    console: Console,
) -> BumpType:
    if not yes:
        return prompt_bump_type(current, channel, console)
    if prerelease:
        return BumpType.PRERELEASE

    derived = calculate_bump(commits, conventional=config.commits.conventional)
    if derived is None:
        raise ValidationError(
            "No releasable changes found",
            ["Use --bump to force a specific bump type"],
        )
    console.print(f"[blue]ℹ[/] Derived bump from commits: [bold]{derived}[/]")
    return derived
