"""Shared fixtures for release-train tests."""

from __future__ import annotations

from collections.abc import Callable
from datetime import datetime

import pytest

from release_train.core.catalog import RawReleaseNode, RawTagCommit, Release, ReleasePage
from release_train.core.commits import Commit
from release_train.core.version import parse_version


class FakeReleaseSource:
    """PagedReleaseSource serving a fixed list of pages."""

    def __init__(self, pages: list[ReleasePage]) -> None:
        self.pages = pages
        self.cursors: list[str | None] = []

    def fetch_release_page(self, cursor: str | None) -> ReleasePage:
        self.cursors.append(cursor)
        return self.pages[len(self.cursors) - 1]


class FakeCommitSource:
    """CommitRangeSource answering from a callable."""

    def __init__(self, answer: Callable[[str, datetime | None, datetime | None], list[Commit]]):
        self.answer = answer
        self.calls: list[tuple[str, datetime | None, datetime | None]] = []
        self.labels: list[str | None] = []

    def fetch_commit_range(
        self,
        branch: str,
        since: datetime | None,
        until: datetime | None,
        *,
        label: str | None = None,
    ) -> list[Commit]:
        self.calls.append((branch, since, until))
        self.labels.append(label)
        return self.answer(branch, since, until)


@pytest.fixture
def make_release() -> Callable[..., Release]:
    """Factory for decoded releases."""

    def _make(
        name: str,
        released: datetime,
        tagged: datetime | None = None,
        *,
        draft: bool = False,
        commit_id: str = "f" * 40,
    ) -> Release:
        return Release(
            display_name=name,
            version_info=parse_version(name),
            release_date=released,
            tag_date=tagged or released,
            commit_id=commit_id,
            is_draft=draft,
        )

    return _make


@pytest.fixture
def make_node() -> Callable[..., RawReleaseNode]:
    """Factory for raw release nodes."""

    def _make(
        name: str | None,
        updated_at: str | None = "2024-01-01T12:00:00Z",
        authored_date: str | None = "2024-01-01T11:00:00Z",
        *,
        draft: bool = False,
        commit_hash: str | None = "a" * 40,
    ) -> RawReleaseNode:
        return RawReleaseNode(
            name=name,
            updated_at=updated_at,
            is_draft=draft,
            tag_commit=RawTagCommit(authored_date=authored_date, commit_hash=commit_hash),
        )

    return _make


@pytest.fixture
def feat_commit() -> Commit:
    return Commit("feat123", "feat: add user authentication", "feat123")


@pytest.fixture
def fix_commit() -> Commit:
    return Commit("fix456", "fix: handle null response", "fix456")


@pytest.fixture
def breaking_commit() -> Commit:
    return Commit("brk789", "breaking: drop v1 endpoints", "brk789")


@pytest.fixture
def sample_commits() -> list[Commit]:
    """A mixed range, oldest first."""
    return [
        Commit("c1", "feat: add login", "c1"),
        Commit("c2", "fix: correct totals", "c2"),
        Commit("c3", "Merge pull request #12 from acme/topic", "c3"),
        Commit("c4", "chore: bump deps", "c4"),
        Commit("c5", "task: update copy", "c5"),
        Commit("c6", "refactor: split service", "c6"),
        Commit("c7", "breaking: remove legacy API", "c7"),
        Commit("c8", "feat: add logout", "c8"),
    ]


@pytest.fixture
def release_source() -> type[FakeReleaseSource]:
    """The fake paged release source class."""
    return FakeReleaseSource


@pytest.fixture
def commit_source() -> type[FakeCommitSource]:
    """The fake commit range source class."""
    return FakeCommitSource
