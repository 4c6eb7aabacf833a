"""Release planning.

Ties the engine together for one run: load the catalog, pick baselines
relative to the triggering commit, fetch the two commit ranges, then
compute the version and the changelog. Nothing here talks to the network
directly; sources are passed in.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Protocol

from release_train.core.baseline import select_development_baseline, select_production_baseline
from release_train.core.bump import compute_next_version
from release_train.core.catalog import load_catalog
from release_train.core.changelog import generate_changelog_for_channel
from release_train.core.version import ReleaseType
from release_train.exceptions import MalformedReleaseError

if TYPE_CHECKING:
    from datetime import datetime

    from release_train.config.models import BranchesConfig
    from release_train.core.bump import NextVersion
    from release_train.core.catalog import PagedReleaseSource, Release
    from release_train.core.commits import Commit

logger = logging.getLogger(__name__)


class CommitRangeSource(Protocol):
    """Anything that can list commits on a branch, oldest first.

    ``since`` and ``until`` are both inclusive. ``label`` names the range
    in error messages.
    """

    def fetch_commit_range(
        self,
        branch: str,
        since: datetime | None,
        until: datetime | None,
        *,
        label: str | None = None,
    ) -> list[Commit]: ...


@dataclass(frozen=True, slots=True)
class TriggerContext:
    """The commit that triggered this run."""

    commit_sha: str
    commit_date: datetime
    repository: str = ""


@dataclass(frozen=True)
class ReleasePlan:
    """Everything decided for a release, before anything is published."""

    channel: ReleaseType
    version: NextVersion
    changelog: str
    production_baseline: Release
    development_baseline: Release
    development_commits: list[Commit] = field(default_factory=list)
    production_commits: list[Commit] = field(default_factory=list)

    @property
    def prerelease(self) -> bool:
        return self.channel.is_prerelease

    def outputs(self) -> dict[str, str]:
        """Values handed to the surrounding pipeline."""
        return {
            "version": self.version.canonical,
            "normalized_version": self.version.normalized,
            "numeric_version": self.version.numeric,
            "changelog": self.changelog,
        }


def _after_baseline(commits: list[Commit], baseline: Release) -> list[Commit]:
    """Drop the baseline's tagged commit and anything older.

    The range starts at the tagged commit's own timestamp, so that commit
    comes back with it. ``commits`` is oldest first.
    """
    if not baseline.commit_id:
        return commits
    for index, commit in enumerate(commits):
        if commit.id == baseline.commit_id:
            return commits[index + 1 :]
    return commits


def plan_release(
    channel: ReleaseType,
    context: TriggerContext,
    releases: PagedReleaseSource,
    commits: CommitRangeSource,
    branches: BranchesConfig,
    *,
    max_pages: int | None = None,
) -> ReleasePlan:
    """Decide the version and changelog for a release.

    Args:
        channel: Channel being released
        context: Triggering commit
        releases: Paged source of prior releases
        commits: Commit history source
        branches: Channel to branch mapping
        max_pages: Optional ceiling for release pagination

    Returns:
        The release plan

    Raises:
        UpstreamQueryError: If a fetch fails
        PaginationStallError: If release pagination stops advancing
        MalformedReleaseError: If the development baseline carries no version
    """
    catalog = load_catalog(releases, max_pages=max_pages)
    versioned = catalog.sorted_by_release_date()

    production_baseline = select_production_baseline(versioned, context.commit_date)
    development_baseline = select_development_baseline(versioned, context.commit_date)

    if development_baseline.version_info is None:
        raise MalformedReleaseError(
            f"Baseline {development_baseline.display_name!r} is not a version tag",
            name=development_baseline.display_name,
        )

    branch = branches.for_channel(channel)
    development_commits = _after_baseline(
        commits.fetch_commit_range(
            branch, development_baseline.tag_date, context.commit_date, label="development"
        ),
        development_baseline,
    )
    production_commits = _after_baseline(
        commits.fetch_commit_range(
            branch, production_baseline.release_date, context.commit_date, label="production"
        ),
        production_baseline,
    )
    logger.info(
        "%d commits since %s, %d since %s on %s",
        len(development_commits),
        development_baseline.display_name,
        len(production_commits),
        production_baseline.display_name,
        branch,
    )

    version = compute_next_version(
        channel,
        development_baseline.version_info,
        development_commits,
        context.commit_sha,
        releases=versioned,
        production_date=production_baseline.release_date,
        at_time=context.commit_date,
    )
    changelog = generate_changelog_for_channel(channel, development_commits, production_commits)

    return ReleasePlan(
        channel=channel,
        version=version,
        changelog=changelog,
        production_baseline=production_baseline,
        development_baseline=development_baseline,
        development_commits=development_commits,
        production_commits=production_commits,
    )
