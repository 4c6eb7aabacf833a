"""Core business logic for release-train.

This module contains the fundamental building blocks:
- Version tag parsing and formatting
- Commit classification by prefix
- Release catalog loading and baseline selection
- Next-version computation per channel
- Changelog generation
"""

from __future__ import annotations

from release_train.core.baseline import select_development_baseline, select_production_baseline
from release_train.core.bump import NextVersion, compute_next_version, count_release_candidates
from release_train.core.catalog import (
    PaginationGuard,
    Release,
    ReleaseCatalog,
    ReleasePage,
    load_catalog,
)
from release_train.core.changelog import (
    generate_changelog,
    generate_changelog_for_channel,
    generate_dual_changelog,
)
from release_train.core.commits import (
    ChangeCategory,
    ClassifiedCommit,
    Commit,
    calculate_bump,
    classify_commit,
    classify_commits,
    group_commits_by_category,
)
from release_train.core.release import ReleasePlan, TriggerContext, plan_release
from release_train.core.version import (
    BumpType,
    ReleaseType,
    VersionInfo,
    format_version,
    parse_version,
)

__all__ = [
    # Version
    "BumpType",
    # Commits
    "ChangeCategory",
    "ClassifiedCommit",
    "Commit",
    # Bump
    "NextVersion",
    # Catalog
    "PaginationGuard",
    "Release",
    "ReleaseCatalog",
    "ReleasePage",
    # Planning
    "ReleasePlan",
    "ReleaseType",
    "TriggerContext",
    "VersionInfo",
    "calculate_bump",
    "classify_commit",
    "classify_commits",
    "compute_next_version",
    "count_release_candidates",
    "format_version",
    # Changelog
    "generate_changelog",
    "generate_changelog_for_channel",
    "generate_dual_changelog",
    "group_commits_by_category",
    "load_catalog",
    "parse_version",
    "plan_release",
    # Baselines
    "select_development_baseline",
    "select_production_baseline",
]
