"""Implementation of the 'release' command.

The release command decides the next version and changelog for the
triggering commit and, unless running dry, publishes them.
"""

from __future__ import annotations

import os
import uuid
from pathlib import Path
from typing import TYPE_CHECKING, Any

from rich.markdown import Markdown
from rich.panel import Panel

from release_train.config import load_config
from release_train.core.release import TriggerContext, plan_release
from release_train.exceptions import ConfigError, ReleaseTrainError
from release_train.notify import SlackNotifier
from release_train.vcs import GitHubClient

if TYPE_CHECKING:
    from collections.abc import Mapping
    from datetime import datetime

    from rich.console import Console

    from release_train.core.release import ReleasePlan


def run_release(
    *,
    channel: str | None,
    sha: str | None,
    commit_date: datetime | None,
    repository: str | None,
    dry_run: bool | None,
    output_file: str | None,
    console: Console,
    err_console: Console,
    environ: Mapping[str, str] | None = None,
    project_path: str | None = None,
) -> None:
    """Run the release command.

    Args:
        channel: Release channel override
        sha: Triggering commit override
        commit_date: Triggering commit timestamp; looked up when omitted
        repository: ``owner/repo`` override
        dry_run: Compute and print only, overriding the environment
        output_file: File to append pipeline outputs to
        console: Console for standard output
        err_console: Console for error output
        environ: Environment mapping, defaults to ``os.environ``
        project_path: Directory holding pyproject.toml
    """
    overrides: dict[str, Any] = {
        "channel": channel,
        "commit_sha": sha,
        "commit_date": commit_date,
        "repository": repository,
        "dry_run": dry_run,
        "output_file": output_file,
    }

    # Load configuration before any network activity
    try:
        config = load_config(
            os.environ if environ is None else environ,
            overrides=overrides,
            project_path=Path(project_path) if project_path else Path.cwd(),
        )
    except ConfigError as e:
        err_console.print(f"[red]Configuration error:[/] {e}")
        raise SystemExit(1) from e

    with GitHubClient(config.github) as github:
        try:
            when = config.commit_date or github.get_commit_date(config.commit_sha)
            context = TriggerContext(
                commit_sha=config.commit_sha,
                commit_date=when,
                repository=config.github.repository,
            )
            plan = plan_release(
                config.channel,
                context,
                releases=github,
                commits=github,
                branches=config.branches,
                max_pages=config.max_pages,
            )
        except ReleaseTrainError as e:
            err_console.print(f"[red]Error planning {config.channel} release:[/] {e}")
            raise SystemExit(1) from e

        _print_plan(plan, console)

        mode_str = "[yellow]DRY-RUN[/]" if config.dry_run else "[green]EXECUTING[/]"
        console.print(f"\n{mode_str} - Releasing [green]{plan.version.tag_name}[/]\n")

        if config.dry_run:
            console.print(
                Panel(
                    "[bold]Would make the following changes:[/]\n\n"
                    f"  • Create tag [cyan]{plan.version.tag_name}[/] "
                    f"on [cyan]{config.commit_sha[:7]}[/]\n"
                    f"  • Create {'pre-release' if plan.prerelease else 'release'} "
                    f"on [cyan]{config.github.repository}[/]\n"
                    + (
                        f"  • Notify Slack channel [cyan]{config.slack.channel}[/]"
                        if config.slack.enabled
                        else "  • Skip Slack notification (not configured)"
                    ),
                    title="[yellow]Dry Run Preview[/]",
                    border_style="yellow",
                )
            )
            if config.output_file is not None:
                write_outputs(config.output_file, plan.outputs())
            return

        try:
            created = github.publish(
                plan.version.tag_name,
                config.commit_sha,
                plan.changelog,
                prerelease=plan.prerelease,
            )
        except ReleaseTrainError as e:
            err_console.print(f"[red]Error publishing release:[/] {e}")
            raise SystemExit(1) from e
        console.print(f"  [green]✓[/] Created release {created.html_url}")

        # only a published release is handed to the pipeline
        if config.output_file is not None:
            write_outputs(config.output_file, plan.outputs())

    if config.slack.enabled:
        notifier = SlackNotifier(config.slack, timeout=config.github.timeout)
        try:
            notifier.post_release(
                plan.version.tag_name, config.github.repository, created.html_url
            )
        except ReleaseTrainError as e:
            err_console.print(f"[red]Error notifying Slack:[/] {e}")
            raise SystemExit(1) from e
        finally:
            notifier.close()
        console.print(f"  [green]✓[/] Notified {config.slack.channel}")

    console.print(
        Panel(
            f"[green]Released {plan.version.canonical}![/]",
            title="[green]Release Complete[/]",
            border_style="green",
        )
    )


def _print_plan(plan: ReleasePlan, console: Console) -> None:
    dev = plan.development_baseline.display_name
    prod = plan.production_baseline.display_name
    console.print(
        Panel(
            f"Channel:            [cyan]{plan.channel}[/]\n"
            f"Development base:   [cyan]{dev}[/]\n"
            f"Production base:    [cyan]{prod}[/]\n"
            f"Version:            [green]{plan.version.canonical}[/]\n"
            f"Normalized:         [green]{plan.version.normalized}[/]",
            title="Release Plan",
        )
    )
    console.print(Panel(Markdown(plan.changelog), title="Changelog"))


def write_outputs(path: Path, outputs: Mapping[str, str]) -> None:
    """Append outputs in the GitHub Actions ``$GITHUB_OUTPUT`` format.

    Multi-line values use the heredoc form with a random delimiter.
    """
    lines: list[str] = []
    for key, value in outputs.items():
        if "\n" in value:
            delimiter = f"ghadelimiter_{uuid.uuid4().hex}"
            lines.append(f"{key}<<{delimiter}\n{value}\n{delimiter}")
        else:
            lines.append(f"{key}={value}")
    with path.open("a", encoding="utf-8") as f:
        f.write("\n".join(lines) + "\n")
