"""Command-line interface for release-train."""

from __future__ import annotations

from typing import Annotated

import typer
from rich.console import Console

from release_train import __version__
from release_train.cli.commands.parse import run_parse
from release_train.cli.commands.release import run_release
from release_train.core.catalog import parse_timestamp
from release_train.core.version import ReleaseType
from release_train.log import setup_logging

app = typer.Typer(
    name="release-train",
    help="Version and changelog decisions for development, rc and production releases.",
    no_args_is_help=True,
    add_completion=False,
)

console = Console()
err_console = Console(stderr=True)


def _version_callback(value: bool) -> None:
    if value:
        console.print(f"release-train {__version__}")
        raise typer.Exit()


@app.callback()
def main(
    version: Annotated[
        bool,
        typer.Option(
            "--version",
            callback=_version_callback,
            is_eager=True,
            help="Show the version and exit.",
        ),
    ] = False,
) -> None:
    """release-train command line."""


@app.command()
def release(
    channel: Annotated[
        ReleaseType | None,
        typer.Option("--channel", "-c", help="Release channel (defaults to INPUT_RELEASE_TYPE)."),
    ] = None,
    sha: Annotated[
        str | None,
        typer.Option("--sha", help="Triggering commit (defaults to GITHUB_SHA)."),
    ] = None,
    commit_date: Annotated[
        str | None,
        typer.Option(
            "--commit-date",
            help="Authored time of the triggering commit, ISO-8601 with timezone. "
            "Looked up on GitHub when omitted.",
        ),
    ] = None,
    repository: Annotated[
        str | None,
        typer.Option("--repo", help="owner/repo (defaults to GITHUB_REPOSITORY)."),
    ] = None,
    dry_run: Annotated[
        bool | None,
        typer.Option("--dry-run/--execute", help="Only compute and print the release."),
    ] = None,
    output_file: Annotated[
        str | None,
        typer.Option("--output-file", help="Append outputs here (defaults to GITHUB_OUTPUT)."),
    ] = None,
    verbose: Annotated[bool, typer.Option("--verbose", "-v", help="Debug logging.")] = False,
) -> None:
    """Decide the next version and changelog, then publish them."""
    setup_logging(verbose)

    parsed_date = None
    if commit_date is not None:
        try:
            parsed_date = parse_timestamp(commit_date)
        except ValueError as e:
            raise typer.BadParameter(str(e), param_hint="--commit-date") from e
        if parsed_date is None:
            raise typer.BadParameter(
                f"not an ISO-8601 timestamp: {commit_date!r}", param_hint="--commit-date"
            )

    run_release(
        channel=channel.value if channel else None,
        sha=sha,
        commit_date=parsed_date,
        repository=repository,
        dry_run=dry_run,
        output_file=output_file,
        console=console,
        err_console=err_console,
    )


@app.command()
def parse(
    value: Annotated[str, typer.Argument(help="Tag name, e.g. v1.2.3-rc.1+abc1234.")],
) -> None:
    """Show how a tag name parses."""
    run_parse(value, console, err_console)


if __name__ == "__main__":
    app()
