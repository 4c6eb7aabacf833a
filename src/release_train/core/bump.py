"""Next-version computation per release channel.

- development: bump the development baseline by the most severe commit
  since it and tag the result ``-development+<hash>``.
- rc: reuse the development baseline's numbers and add an rc ordinal
  counting release candidates since the last production release.
- production: promote the development baseline's numbers as they are.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import TYPE_CHECKING

from release_train.core.commits import calculate_bump
from release_train.core.version import BumpType, ReleaseType, VersionInfo, format_version

if TYPE_CHECKING:
    from collections.abc import Iterable
    from datetime import datetime

    from release_train.core.catalog import Release
    from release_train.core.commits import Commit

logger = logging.getLogger(__name__)

SHORT_HASH_LENGTH = 7


@dataclass(frozen=True, slots=True)
class NextVersion:
    """The version chosen for this release and its renderings."""

    major: int
    minor: int
    patch: int
    suffix: str
    version_info: VersionInfo
    bump: BumpType = BumpType.NONE

    @property
    def canonical(self) -> str:
        """Tag form, e.g. ``v1.3.0-development+abcdef1``."""
        return f"v{self.numeric}{self.suffix}"

    @property
    def normalized(self) -> str:
        """Canonical form with ``+`` replaced, safe for tag names."""
        return self.canonical.replace("+", "-")

    @property
    def numeric(self) -> str:
        return f"{self.major}.{self.minor}.{self.patch}"

    @property
    def tag_name(self) -> str:
        """Name used for the git tag and the release.

        Kept canonical so later runs can parse it back from the catalog.
        """
        return self.canonical

    def __str__(self) -> str:
        return self.canonical


def count_release_candidates(
    releases: Iterable[Release],
    since: datetime | None,
    until: datetime,
) -> int:
    """Count rc releases published after ``since`` and no later than ``until``.

    The lower bound is exclusive, the upper bound inclusive. ``since=None``
    means no production release exists and every earlier rc counts.
    """
    count = 0
    for release in releases:
        if release.release_type is not ReleaseType.RC or release.release_date is None:
            continue
        if since is not None and release.release_date <= since:
            continue
        if release.release_date <= until:
            count += 1
    return count


def _short_hash(commit_hash: str) -> str:
    short = commit_hash.strip().lower()[:SHORT_HASH_LENGTH]
    if not short:
        raise ValueError("A commit hash is required for pre-release versions")
    return short


def compute_next_version(
    channel: ReleaseType,
    dev_baseline: VersionInfo,
    commits: Iterable[Commit],
    commit_hash: str,
    *,
    releases: Iterable[Release] = (),
    production_date: datetime | None = None,
    at_time: datetime | None = None,
) -> NextVersion:
    """Compute the version for a release on ``channel``.

    Args:
        channel: Release channel being published
        dev_baseline: Version of the development baseline release
        commits: Commits since the development baseline (development only)
        commit_hash: Hash of the triggering commit
        releases: Full release catalog (rc only)
        production_date: Release date of the production baseline (rc only)
        at_time: Triggering commit timestamp (rc only)

    Returns:
        The next version

    Raises:
        ValueError: If rc is requested without ``at_time`` or a hash is missing
    """
    bump = BumpType.NONE

    if channel is ReleaseType.DEVELOPMENT:
        bump = calculate_bump(commits)
        bumped = dev_baseline.bump(bump)
        info = VersionInfo(
            bumped.major,
            bumped.minor,
            bumped.patch,
            ReleaseType.DEVELOPMENT,
            build_hash=_short_hash(commit_hash),
        )
        logger.info("Bump level %s from %s", bump, dev_baseline.numeric)
    elif channel is ReleaseType.RC:
        if at_time is None:
            raise ValueError("rc versions need the triggering timestamp")
        ordinal = 1 + count_release_candidates(releases, production_date, at_time)
        info = VersionInfo(
            dev_baseline.major,
            dev_baseline.minor,
            dev_baseline.patch,
            ReleaseType.RC,
            release_candidate=ordinal,
            build_hash=_short_hash(commit_hash),
        )
        logger.info("Release candidate %d for %s", ordinal, dev_baseline.numeric)
    else:
        info = VersionInfo(
            dev_baseline.major,
            dev_baseline.minor,
            dev_baseline.patch,
            ReleaseType.PRODUCTION,
        )

    canonical = format_version(info)
    return NextVersion(
        major=info.major,
        minor=info.minor,
        patch=info.patch,
        suffix=canonical[len(f"v{info.numeric}") :],
        version_info=info,
        bump=bump,
    )
