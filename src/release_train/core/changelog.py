"""Changelog generation from classified commits.

Sections are rendered in a fixed order, each only when it has entries::

    ## Breaking Changes
    ## New Features
    ## Bug Fixes
    ## Chores
    ## Tasks
    ## Refactors

Entries keep the order of the commit range they came from. An empty
changelog falls back to a single generic line.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

from release_train.core.commits import ChangeCategory, group_commits_by_category
from release_train.core.version import ReleaseType

if TYPE_CHECKING:
    from collections.abc import Iterable

    from release_train.core.commits import Commit

FALLBACK_CHANGELOG = "General bug fixes and improvements"

DEVELOPMENT_HEADING = "Changes since last development release"
PRODUCTION_HEADING = "All changes since last production release"


def format_commit_for_changelog(commit: Commit) -> str:
    """Render one changelog bullet."""
    return f"- {commit.headline.strip()}"


def generate_changelog(commits: Iterable[Commit]) -> str:
    """Render a single-range changelog.

    Args:
        commits: Commits in range order

    Returns:
        Markdown changelog body
    """
    grouped = group_commits_by_category(commits)

    sections: list[str] = []
    for category in ChangeCategory:
        entries = grouped[category]
        if not entries:
            continue
        lines = [f"## {category.section_title}"]
        lines.extend(format_commit_for_changelog(commit) for commit in entries)
        sections.append("\n".join(lines))

    if not sections:
        return FALLBACK_CHANGELOG
    return "\n\n".join(sections)


def generate_dual_changelog(
    development_commits: Iterable[Commit],
    production_commits: Iterable[Commit],
) -> str:
    """Render the two stacked documents used for development releases."""
    return (
        f"# {DEVELOPMENT_HEADING}\n\n"
        f"{generate_changelog(development_commits)}\n\n"
        f"# {PRODUCTION_HEADING}\n\n"
        f"{generate_changelog(production_commits)}"
    )


def generate_changelog_for_channel(
    channel: ReleaseType,
    development_commits: Iterable[Commit],
    production_commits: Iterable[Commit],
) -> str:
    """Pick the changelog shape for a channel.

    Development releases get both ranges; rc and production releases only
    describe what changed since the last production release.
    """
    if channel is ReleaseType.DEVELOPMENT:
        return generate_dual_changelog(development_commits, production_commits)
    return generate_changelog(production_commits)
