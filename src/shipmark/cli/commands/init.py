"""Implementation of the 'init' command.

Writes a ``.shipmarkrc.yml`` for the project, either with the defaults
(``--yes``) or from answers to a few questions.
"""

from __future__ import annotations

from pathlib import Path
from typing import TYPE_CHECKING

from rich.panel import Panel
from rich.prompt import Confirm, Prompt

from shipmark.cli.output import print_error
from shipmark.config import ShipmarkConfig, find_config_file, save_config
from shipmark.exceptions import ShipmarkError
from shipmark.vcs import GitRepository

if TYPE_CHECKING:
    from rich.console import Console

# Manifests picked up as version files when present
KNOWN_VERSION_FILES = ("package.json", "pyproject.toml")


def run_init(
    project_path: Path,
    yes: bool,
    force: bool,
    console: Console,
    err_console: Console,
) -> None:
    """Create the shipmark configuration file.

    Args:
        project_path: Project directory
        yes: Use the defaults without asking
        force: Overwrite an existing configuration file
        console: Console for standard output
        err_console: Console for error output
    """
    console.print("[bold]shipmark setup[/]\n")

    existing = find_config_file(project_path)
    if existing and not force:
        console.print(f"[yellow]![/] Configuration already exists: [cyan]{existing.name}[/]")
        console.print("[dim]Use --force to overwrite.[/]")
        return

    repo = GitRepository(project_path)
    try:
        if not repo.is_repo():
            console.print("[yellow]![/] Not a git repository")
            if not yes and Confirm.ask("Initialize git repository?", default=True, console=console):
                repo.init()
                console.print("  [green]✓[/] Git repository initialized")
    except ShipmarkError as e:
        print_error(err_console, e)
        raise SystemExit(1) from e

    config = default_config(project_path)
    if not yes:
        config = _ask(config, console)

    try:
        path = save_config(config, project_path)
    except ShipmarkError as e:
        print_error(err_console, e)
        raise SystemExit(1) from e

    console.print(f"  [green]✓[/] Created [cyan]{path.name}[/]\n")
    console.print(
        Panel(
            f"[dim]Version files:[/] {', '.join(entry.path for entry in config.version.file_entries)}\n"
            f"[dim]Changelog:[/]     {config.changelog.file}\n"
            f"[dim]Tag prefix:[/]    {config.version.tag_prefix or '(none)'}\n"
            f"[dim]Auto push:[/]     {_yes_no(config.git.push)}\n"
            f"[dim]Sign tags:[/]     {_yes_no(config.git.sign_tags)}\n"
            f"[dim]Conventional:[/]  {_yes_no(config.commits.conventional)}",
            title="Configuration",
            border_style="cyan",
        )
    )
    console.print("\n[dim]Next: run[/] [cyan]shipmark status[/] [dim]to see pending changes.[/]")


def default_config(project_path: Path) -> ShipmarkConfig:
    """Defaults, with the version files found in ``project_path``."""
    config = ShipmarkConfig()
    found = [name for name in KNOWN_VERSION_FILES if (project_path / name).is_file()]
    if found:
        config.version.files = list(found)
    return config


def _ask(config: ShipmarkConfig, console: Console) -> ShipmarkConfig:
    changelog_file = Prompt.ask("Changelog file", default=str(config.changelog.file), console=console)
    tag_prefix = Prompt.ask("Tag prefix", default=config.version.tag_prefix, console=console)
    commit_message = Prompt.ask(
        "Commit message template", default=config.version.commit_message, console=console
    )
    push = Confirm.ask("Push after release?", default=config.git.push, console=console)
    sign_tags = Confirm.ask("Sign tags with GPG?", default=config.git.sign_tags, console=console)
    conventional = Confirm.ask(
        "Use conventional commits?", default=config.commits.conventional, console=console
    )

    config.changelog.file = Path(changelog_file)
    config.version.tag_prefix = tag_prefix
    config.version.commit_message = commit_message
    config.git.push = push
    config.git.push_tags = push
    config.git.sign_tags = sign_tags
    config.commits.conventional = conventional
    return config


def _yes_no(value: bool) -> str:
    return "[green]yes[/]" if value else "[dim]no[/]"
