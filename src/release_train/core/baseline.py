"""Baseline selection.

The production baseline bounds the changelog, so it is chosen by the time
the release was published. The development baseline bounds versioning,
so it is chosen by the time its tagged commit was authored; a commit that
lands between tagging and publishing must not be skipped.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from release_train.core.catalog import Release, sort_by_release_date
from release_train.core.version import ReleaseType

if TYPE_CHECKING:
    from collections.abc import Callable, Iterable
    from datetime import datetime

logger = logging.getLogger(__name__)


def _select(
    releases: Iterable[Release],
    release_type: ReleaseType,
    at_time: datetime,
    date_of: Callable[[Release], datetime | None],
) -> Release:
    for release in sort_by_release_date(list(releases)):
        if release.version_info is None or release.is_draft:
            continue
        if release.version_info.release_type is not release_type:
            continue
        when = date_of(release)
        if when is not None and when <= at_time:
            logger.info("Selected %s baseline %s", release_type, release.display_name)
            return release

    logger.info("No %s release before %s, using v0.0.0", release_type, at_time.isoformat())
    return Release.zero(release_type)


def select_production_baseline(releases: Iterable[Release], at_time: datetime) -> Release:
    """Most recently published production release at or before ``at_time``.

    Args:
        releases: Releases in any order; unversioned and draft releases are skipped
        at_time: Reference timestamp (the triggering commit's authored time)

    Returns:
        The baseline release, or a synthetic ``v0.0.0`` production release
    """
    return _select(releases, ReleaseType.PRODUCTION, at_time, lambda r: r.release_date)


def select_development_baseline(releases: Iterable[Release], at_time: datetime) -> Release:
    """Latest development release whose tagged commit was authored by ``at_time``.

    Candidates are still scanned newest-published first; only the cut-off
    uses the tag commit date.

    Args:
        releases: Releases in any order; unversioned and draft releases are skipped
        at_time: Reference timestamp (the triggering commit's authored time)

    Returns:
        The baseline release, or a synthetic ``v0.0.0`` development release
    """
    return _select(releases, ReleaseType.DEVELOPMENT, at_time, lambda r: r.tag_date)
