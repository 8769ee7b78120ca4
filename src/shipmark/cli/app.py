"""shipmark command line interface."""

from dataclasses import dataclass
from pathlib import Path
from typing import Optional

import typer
from rich.console import Console

from shipmark import __version__
from shipmark.cli.output import configure_logging
from shipmark.handlers import HandlerRegistry, create_default_registry

app = typer.Typer(
    help="Release automation: version bumps, changelogs and tags from conventional commits.",
    no_args_is_help=True,
)
version_app = typer.Typer(help="Show or bump the project version.")
app.add_typer(version_app, name="version")
tag_app = typer.Typer(help="Manage release tags.")
app.add_typer(tag_app, name="tag")

console = Console()
err_console = Console(stderr=True)


@dataclass
class State:
    """Objects shared by all commands of one invocation."""

    project_path: Path
    registry: HandlerRegistry


def _version_callback(value: bool) -> None:
    if value:
        console.print(f"shipmark {__version__}")
        raise typer.Exit()


@app.callback()
def main_callback(
    ctx: typer.Context,
    cwd: Optional[Path] = typer.Option(
        None, "--cwd", "-C", help="Project directory (default: current directory)"
    ),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Show debug logging"),
    show_version: bool = typer.Option(
        False,
        "--version",
        callback=_version_callback,
        is_eager=True,
        help="Show the shipmark version and exit",
    ),
) -> None:
    configure_logging(err_console, verbose)
    ctx.obj = State(
        project_path=(cwd or Path.cwd()).resolve(),
        registry=create_default_registry(),
    )


@app.command()
def init(
    ctx: typer.Context,
    yes: bool = typer.Option(False, "--yes", "-y", help="Use the default configuration"),
    force: bool = typer.Option(False, "--force", "-f", help="Overwrite an existing configuration"),
) -> None:
    """Create a .shipmarkrc.yml for this project."""
    from shipmark.cli.commands.init import run_init

    state: State = ctx.obj
    run_init(state.project_path, yes, force, console, err_console)


@app.command()
def status(
    ctx: typer.Context,
    verbose: bool = typer.Option(False, "--verbose", "-v", help="List the pending commits"),
) -> None:
    """Show the repository state and the suggested next release."""
    from shipmark.cli.commands.status import run_status

    state: State = ctx.obj
    run_status(state.project_path, verbose, state.registry, console, err_console)


@version_app.command("show")
def version_show(ctx: typer.Context) -> None:
    """Show the current version."""
    from shipmark.cli.commands.version import run_show

    state: State = ctx.obj
    run_show(state.project_path, state.registry, console, err_console)


@version_app.command("bump")
def version_bump(
    ctx: typer.Context,
    bump_type: Optional[str] = typer.Argument(
        None, help="patch, minor, major, prepatch, preminor, premajor or prerelease"
    ),
    prerelease: Optional[str] = typer.Option(
        None, "--prerelease", "-p", help="Prerelease channel (alpha, beta, rc)"
    ),
    dry_run: bool = typer.Option(False, "--dry-run", "-d", help="Preview without writing"),
) -> None:
    """Bump the version in all configured files."""
    from shipmark.cli.commands.version import run_bump

    state: State = ctx.obj
    run_bump(
        state.project_path,
        bump_type,
        prerelease,
        dry_run,
        state.registry,
        console,
        err_console,
    )


@version_app.command("set")
def version_set(
    ctx: typer.Context,
    new_version: str = typer.Argument(..., help="Version to write, e.g. 2.0.0"),
    dry_run: bool = typer.Option(False, "--dry-run", "-d", help="Preview without writing"),
) -> None:
    """Set a specific version in all configured files."""
    from shipmark.cli.commands.version import run_set

    state: State = ctx.obj
    run_set(state.project_path, new_version, dry_run, state.registry, console, err_console)


@tag_app.command("list")
def tag_list(
    ctx: typer.Context,
    limit: int = typer.Option(10, "--limit", "-n", min=1, help="Number of tags to show"),
) -> None:
    """List tags, highest version first."""
    from shipmark.cli.commands.tag import run_tag_list

    state: State = ctx.obj
    run_tag_list(state.project_path, limit, console, err_console)


@tag_app.command("latest")
def tag_latest(ctx: typer.Context) -> None:
    """Show the latest tag."""
    from shipmark.cli.commands.tag import run_tag_latest

    state: State = ctx.obj
    run_tag_latest(state.project_path, console, err_console)


@tag_app.command("create")
def tag_create(
    ctx: typer.Context,
    version: Optional[str] = typer.Argument(None, help="Version to tag (default: current version)"),
    message: Optional[str] = typer.Option(None, "--message", "-m", help="Tag message"),
    sign: Optional[bool] = typer.Option(
        None, "--sign/--no-sign", help="Sign the tag with GPG (default: configured)"
    ),
    push: bool = typer.Option(False, "--push", "-p", help="Push the tag to the remote"),
) -> None:
    """Create a release tag."""
    from shipmark.cli.commands.tag import run_tag_create

    state: State = ctx.obj
    run_tag_create(
        state.project_path,
        version,
        message,
        sign,
        push,
        state.registry,
        console,
        err_console,
    )


@tag_app.command("delete")
def tag_delete(
    ctx: typer.Context,
    version: str = typer.Argument(..., help="Version or tag name"),
    remote: bool = typer.Option(False, "--remote", "-r", help="Also delete from the remote"),
    yes: bool = typer.Option(False, "--yes", "-y", help="Skip confirmation"),
) -> None:
    """Delete a release tag."""
    from shipmark.cli.commands.tag import run_tag_delete

    state: State = ctx.obj
    run_tag_delete(state.project_path, version, remote, yes, console, err_console)


@app.command()
def sync(ctx: typer.Context) -> None:
    """Check that all configured version files agree."""
    from shipmark.cli.commands.sync import run_sync

    state: State = ctx.obj
    run_sync(state.project_path, state.registry, console, err_console)


@app.command()
def changelog(
    ctx: typer.Context,
    from_ref: Optional[str] = typer.Option(
        None, "--from", "-f", help="Starting tag or commit (default: latest tag)"
    ),
    to_ref: str = typer.Option("HEAD", "--to", "-t", help="Ending ref"),
    output: Optional[str] = typer.Option(
        None, "--output", "-o", help="Output file (default: configured changelog)"
    ),
    preview: bool = typer.Option(False, "--preview", "-p", help="Preview without writing"),
    version: Optional[str] = typer.Option(
        None, "--release-version", "-V", help="Version for the entry heading"
    ),
) -> None:
    """Generate or update the changelog from commits."""
    from shipmark.cli.commands.changelog import run_changelog

    state: State = ctx.obj
    run_changelog(
        state.project_path,
        from_ref,
        to_ref,
        output,
        preview,
        version,
        state.registry,
        console,
        err_console,
    )


@app.command()
def release(
    ctx: typer.Context,
    dry_run: bool = typer.Option(False, "--dry-run", "-d", help="Preview without changes"),
    skip_changelog: bool = typer.Option(False, "--skip-changelog", help="Skip changelog update"),
    skip_tag: bool = typer.Option(False, "--skip-tag", help="Skip tag creation"),
    skip_push: bool = typer.Option(False, "--skip-push", help="Skip pushing to remote"),
    prerelease: Optional[str] = typer.Option(
        None, "--prerelease", "-p", help="Prerelease channel (alpha, beta, rc)"
    ),
    bump_type: Optional[str] = typer.Option(
        None, "--bump", "-b", help="Bump type (default: derived from commits with --yes)"
    ),
    yes: bool = typer.Option(False, "--yes", "-y", help="Skip confirmation prompts"),
) -> None:
    """Bump, update the changelog, commit, tag and push a release."""
    from shipmark.cli.commands.release import run_release

    state: State = ctx.obj
    run_release(
        state.project_path,
        dry_run,
        skip_changelog,
        skip_tag,
        skip_push,
        prerelease,
        bump_type,
        yes,
        state.registry,
        console,
        err_console,
    )


def main() -> None:
    app()
