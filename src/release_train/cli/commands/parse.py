"""Implementation of the 'parse' command."""

from __future__ import annotations

from typing import TYPE_CHECKING

from rich.table import Table

from release_train.core.version import parse_version

if TYPE_CHECKING:
    from rich.console import Console


def run_parse(value: str, console: Console, err_console: Console) -> None:
    """Print the fields of a version tag, or fail if it is not one."""
    version = parse_version(value)
    if version is None:
        err_console.print(f"[red]Not a release tag:[/] {value}")
        raise SystemExit(1)

    table = Table(title=value, show_header=False)
    table.add_row("major", str(version.major))
    table.add_row("minor", str(version.minor))
    table.add_row("patch", str(version.patch))
    table.add_row("release type", str(version.release_type))
    table.add_row("release candidate", str(version.release_candidate or "-"))
    table.add_row("build hash", version.build_hash or "-")
    console.print(table)
