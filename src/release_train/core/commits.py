"""Commit classification by conventional prefix.

Only a fixed set of prefixes is recognised, matched against the start of
the trimmed, lower-cased commit headline:

    breaking:   -> major bump
    feat:       -> minor bump
    fix:        -> patch bump
    chore:      -> patch bump
    task:       -> patch bump
    refactor:   -> patch bump

Commits with any other message do not move the version and do not
appear in the changelog.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from enum import StrEnum
from typing import TYPE_CHECKING

from release_train.core.version import BumpType

if TYPE_CHECKING:
    from collections.abc import Iterable


class ChangeCategory(StrEnum):
    """Change categories, declared from most to least severe."""

    BREAKING = "breaking"
    FEATURE = "feature"
    FIX = "fix"
    CHORE = "chore"
    TASK = "task"
    REFACTOR = "refactor"

    @property
    def prefix(self) -> str:
        return _PREFIXES[self]

    @property
    def section_title(self) -> str:
        """Changelog section heading."""
        return _TITLES[self]

    @property
    def bump(self) -> BumpType:
        if self is ChangeCategory.BREAKING:
            return BumpType.MAJOR
        if self is ChangeCategory.FEATURE:
            return BumpType.MINOR
        return BumpType.PATCH


_PREFIXES = {
    ChangeCategory.BREAKING: "breaking:",
    ChangeCategory.FEATURE: "feat:",
    ChangeCategory.FIX: "fix:",
    ChangeCategory.CHORE: "chore:",
    ChangeCategory.TASK: "task:",
    ChangeCategory.REFACTOR: "refactor:",
}

_TITLES = {
    ChangeCategory.BREAKING: "Breaking Changes",
    ChangeCategory.FEATURE: "New Features",
    ChangeCategory.FIX: "Bug Fixes",
    ChangeCategory.CHORE: "Chores",
    ChangeCategory.TASK: "Tasks",
    ChangeCategory.REFACTOR: "Refactors",
}


@dataclass(frozen=True, slots=True)
class Commit:
    """A commit as returned by the commit-history source."""

    id: str
    message: str
    short_id: str = ""
    authored_date: datetime | None = None

    @property
    def headline(self) -> str:
        """First line of the commit message."""
        return self.message.splitlines()[0] if self.message else ""

    @property
    def category(self) -> ChangeCategory | None:
        return classify_commit(self.headline)


def classify_commit(message: str) -> ChangeCategory | None:
    """Map a commit message to its change category.

    Args:
        message: Commit message (or headline)

    Returns:
        The first category whose prefix starts the message, or None
    """
    normalized = message.strip().lower()
    for category in ChangeCategory:
        if normalized.startswith(category.prefix):
            return category
    return None


@dataclass(frozen=True, slots=True)
class ClassifiedCommit:
    """A commit paired with its category, None when unclassified."""

    commit: Commit
    category: ChangeCategory | None


def classify_commits(commits: Iterable[Commit]) -> list[ClassifiedCommit]:
    """Classify every commit, keeping input order and dropping nothing."""
    return [ClassifiedCommit(commit, commit.category) for commit in commits]


def calculate_bump(commits: Iterable[Commit]) -> BumpType:
    """Determine the bump level implied by the most severe commit.

    Args:
        commits: Commits in the release range

    Returns:
        MAJOR, MINOR, PATCH, or NONE if nothing is classified
    """
    bump = BumpType.NONE
    for commit in commits:
        category = commit.category
        if category is None:
            continue
        if category.bump.value > bump.value:
            bump = category.bump
            if bump is BumpType.MAJOR:
                break
    return bump


def group_commits_by_category(
    commits: Iterable[Commit],
) -> dict[ChangeCategory, list[Commit]]:
    """Group classified commits, keeping the order they were received in.

    Every category is present in the result, possibly with an empty list.
    Unclassified commits are dropped.
    """
    grouped: dict[ChangeCategory, list[Commit]] = {category: [] for category in ChangeCategory}
    for commit in commits:
        category = commit.category
        if category is not None:
            grouped[category].append(commit)
    return grouped
