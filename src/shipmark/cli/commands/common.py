"""Helpers shared by command implementations."""

from __future__ import annotations

from typing import TYPE_CHECKING

from rich.prompt import IntPrompt

from shipmark.cli.output import bump_options_table, print_error
from shipmark.config import ShipmarkConfig, load_config
from shipmark.core.changelog import type_labels
from shipmark.core.commits import parse_commits
from shipmark.core.version import get_bump_options
from shipmark.exceptions import ShipmarkError

if TYPE_CHECKING:
    from collections.abc import Iterable
    from pathlib import Path

    from rich.console import Console

    from shipmark.core.commits import ParsedCommit, RawCommit
    from shipmark.core.version import BumpType, PrereleaseChannel, Version


def load_config_or_exit(project_path: Path, err_console: Console) -> ShipmarkConfig:
    try:
        return load_config(project_path)
    except ShipmarkError as e:
        print_error(err_console, e, "Error loading config")
        raise SystemExit(1) from e


def parse_project_commits(commits: Iterable[RawCommit], config: ShipmarkConfig) -> list[ParsedCommit]:
    """Parse commits under the project's commit settings.

    Unless custom types are allowed, only types with a changelog label
    count as conventional.
    """
    known_types = None if config.commits.allow_custom_types else type_labels(config.changelog)
    return parse_commits(commits, known_types)


def prompt_bump_type(
    version: Version,
    channel: PrereleaseChannel | str,
    console: Console,
) -> BumpType:
    """Show the numbered bump options and ask the user to pick one."""
    options = get_bump_options(version, channel)
    console.print("\n[bold]Select version bump:[/]")
    console.print(bump_options_table(options))
    choice = IntPrompt.ask(
        "Choice",
        console=console,
        choices=[str(number) for number in range(1, len(options) + 1)],
        default=1,
    )
    return options[choice - 1].type
