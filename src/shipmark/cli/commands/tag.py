"""Implementation of the 'tag' commands."""

from __future__ import annotations

from typing import TYPE_CHECKING

from rich.prompt import Confirm
from rich.table import Table

from shipmark.cli.commands.common import load_config_or_exit
from shipmark.cli.output import print_error
from shipmark.core.version import clean, is_valid
from shipmark.exceptions import GitError, ShipmarkError, ValidationError
from shipmark.vcs import GitRepository

if TYPE_CHECKING:
    from pathlib import Path

    from rich.console import Console

    from shipmark.config import ShipmarkConfig
    from shipmark.handlers import HandlerRegistry


def run_tag_list(
    project_path: Path,
    limit: int,
    console: Console,
    err_console: Console,
) -> None:
    """List tags, highest version first."""
    repo = GitRepository(project_path)
    try:
        repo.ensure_repo()
        tags = repo.get_tags()
    except ShipmarkError as e:
        print_error(err_console, e)
        raise SystemExit(1) from e

    if not tags:
        console.print("[blue]ℹ[/] No tags found")
        return

    table = Table(show_edge=False)
    table.add_column("Tag", style="cyan")
    table.add_column("Version", style="dim")
    for tag in tags[:limit]:
        table.add_row(tag, clean(tag))
    console.print(table)

    if len(tags) > limit:
        console.print(f"[dim]Showing {limit} of {len(tags)} tags. Use --limit to show more.[/]")


def run_tag_latest(project_path: Path, console: Console, err_console: Console) -> None:
    """Show the latest tag and how many commits follow it."""
    repo = GitRepository(project_path)
    try:
        repo.ensure_repo()
        latest_tag = repo.get_latest_tag()
        pending = repo.count_commits_since(latest_tag) if latest_tag else 0
    except ShipmarkError as e:
        print_error(err_console, e)
        raise SystemExit(1) from e

    if latest_tag is None:
        console.print("[blue]ℹ[/] No tags found")
        return
    console.print(f"  [dim]Latest tag:[/]    [cyan]{latest_tag}[/]")
    console.print(f"  [dim]Commits since:[/] {pending}")


def run_tag_create(
    project_path: Path,
    version: str | None,
    message: str | None,
    sign: bool | None,
    push: bool,
    registry: HandlerRegistry,
    console: Console,
    err_console: Console,
) -> None:
    """Create an annotated tag for a version.

    Args:
        project_path: Project directory
        version: Version or tag name (default: current version)
        message: Tag message (default: configured template)
        sign: Sign the tag (default: configured setting)
        push: Push the tag to the remote
        registry: Handler registry used to read the current version
        console: Console for standard output
        err_console: Console for error output
    """
    config = load_config_or_exit(project_path, err_console)
    repo = GitRepository(project_path)

    try:
        repo.ensure_repo()
        if version is None:
            version = registry.read_version_from_files(config.version.files, project_path)[0]
            if version is None:
                raise ValidationError(
                    "No version found",
                    ["Pass the version to tag", "Or add a version file to the config"],
                )

        version_str = clean(version.removeprefix(config.version.tag_prefix))
        if not is_valid(version_str):
            raise ValidationError(
                f"Invalid version format: {version}",
                ["Version must follow semver format", "Examples: 1.0.0, 2.1.3-beta.1"],
            )

        tag_name = config.version.tag_name(version_str)
        if repo.tag_exists(tag_name):
            raise GitError(
                f"Tag {tag_name} already exists",
                [f"Delete it first: shipmark tag delete {tag_name}", "Or tag a different version"],
            )

        repo.create_tag(
            tag_name,
            message or config.version.tag_message.format(version=version_str),
            sign=config.git.sign_tags if sign is None else sign,
        )
        console.print(f"  [green]✓[/] Created tag [cyan]{tag_name}[/]")

        if push:
            repo.push_tag(tag_name)
            console.print("  [green]✓[/] Pushed tag to remote")
    except ShipmarkError as e:
        print_error(err_console, e)
        raise SystemExit(1) from e


def run_tag_delete(
    project_path: Path,
    version: str,
    remote: bool,
    yes: bool,
    console: Console,
    err_console: Console,
) -> None:
    """Delete a tag locally and, with ``remote``, from the remote.

    Args:
        project_path: Project directory
        version: Version or tag name
        remote: Also delete the tag from the remote
        yes: Do not ask for confirmation
        console: Console for standard output
        err_console: Console for error output
    """
    config = load_config_or_exit(project_path, err_console)
    repo = GitRepository(project_path)
    tag_name = _tag_name(version, config)

    try:
        repo.ensure_repo()
        if not repo.tag_exists(tag_name):
            raise GitError(f"Tag {tag_name} does not exist", ["List available tags: shipmark tag list"])
    except ShipmarkError as e:
        print_error(err_console, e)
        raise SystemExit(1) from e

    if not yes and not Confirm.ask(f"Delete tag [cyan]{tag_name}[/]?", default=False, console=console):
        console.print("Cancelled")
        return

    try:
        repo.delete_tag(tag_name)
        console.print(f"  [green]✓[/] Deleted tag [cyan]{tag_name}[/] locally")
        if remote and repo.has_remote():
            repo.delete_remote_tag(tag_name)
            console.print("  [green]✓[/] Deleted tag from remote")
    except ShipmarkError as e:
        print_error(err_console, e)
        raise SystemExit(1) from e


def _tag_name(version: str, config: ShipmarkConfig) -> str:
    """``version`` as a tag name; names that already carry the prefix are kept."""
    prefix = config.version.tag_prefix
    if prefix and version.startswith(prefix):
        return version
    return config.version.tag_name(version)
