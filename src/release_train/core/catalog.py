"""Release catalog: paginated fetch and decode of prior releases.

Releases arrive from the hosting platform as raw wire records. Decoding
happens in two stages:

1. ``decode_release_node`` maps the JSON shape into a ``RawReleaseNode``.
2. ``decode_release`` validates the raw node and produces a ``Release``,
   raising ``MalformedReleaseError`` when a required field is unusable.

A release whose name is not a version tag is *not* malformed. It decodes
to a ``Release`` without ``version_info``, stays in the catalog and is
ignored by every selection step.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from datetime import datetime
from typing import TYPE_CHECKING, Any, Protocol

from release_train.core.version import ReleaseType, VersionInfo, parse_version, zero_version
from release_train.exceptions import MalformedReleaseError, PaginationStallError

if TYPE_CHECKING:
    from collections.abc import Iterator

logger = logging.getLogger(__name__)


# =============================================================================
# Wire records
# =============================================================================


@dataclass(frozen=True, slots=True)
class RawTagCommit:
    authored_date: str | None
    commit_hash: str | None


@dataclass(frozen=True, slots=True)
class RawReleaseNode:
    """A release node exactly as the platform reported it."""

    name: str | None
    updated_at: str | None
    is_draft: bool
    tag_commit: RawTagCommit | None


@dataclass(frozen=True, slots=True)
class ReleasePage:
    """One page of the paginated release listing."""

    edges: list[RawReleaseNode] = field(default_factory=list)
    next_cursor: str | None = None
    has_next_page: bool = False


class PagedReleaseSource(Protocol):
    """Anything that can hand out release pages by cursor."""

    def fetch_release_page(self, cursor: str | None) -> ReleasePage: ...


# =============================================================================
# Domain entity
# =============================================================================


@dataclass(frozen=True, slots=True)
class Release:
    """A prior release, annotated with its parsed version.

    Attributes:
        display_name: Raw tag/release name
        version_info: Parsed version, None if the name is not a version tag
        release_date: Last-updated time of the release object
        tag_date: Authored time of the tagged commit
        commit_id: Full hash of the tagged commit
        is_draft: Whether the release is still a draft
    """

    display_name: str
    version_info: VersionInfo | None
    release_date: datetime | None
    tag_date: datetime | None
    commit_id: str
    is_draft: bool = False

    @property
    def release_type(self) -> ReleaseType | None:
        return self.version_info.release_type if self.version_info else None

    @property
    def is_synthetic(self) -> bool:
        """True for the zero baseline that stands in for "no release yet"."""
        return self.release_date is None and not self.commit_id

    @classmethod
    def zero(cls, release_type: ReleaseType) -> Release:
        """Synthetic ``v0.0.0`` baseline with no dates and no commit."""
        version = zero_version(release_type)
        return cls(
            display_name=str(version),
            version_info=version,
            release_date=None,
            tag_date=None,
            commit_id="",
        )


def parse_timestamp(value: str | None) -> datetime | None:
    """Parse an ISO-8601 timestamp as returned by GitHub (``2024-01-01T00:00:00Z``)."""
    if not value:
        return None
    try:
        parsed = datetime.fromisoformat(value.replace("Z", "+00:00"))
    except ValueError:
        return None
    if parsed.tzinfo is None:
        raise ValueError(f"Timestamp {value!r} has no timezone")
    return parsed


def decode_release_node(data: dict[str, Any]) -> RawReleaseNode:
    """Map a GraphQL release node into a raw wire record.

    Expected shape::

        {"name": ..., "updatedAt": ..., "isDraft": ...,
         "tag": {"name": ...},
         "tagCommit": {"authoredDate": ..., "oid": ...}}

    The tag name is preferred; the release name is used when there is no tag.
    """
    name = (data.get("tag") or {}).get("name") or data.get("name")
    tag_commit = data.get("tagCommit")
    return RawReleaseNode(
        name=name,
        updated_at=data.get("updatedAt"),
        is_draft=bool(data.get("isDraft", False)),
        tag_commit=(
            RawTagCommit(
                authored_date=tag_commit.get("authoredDate"),
                commit_hash=tag_commit.get("oid") or tag_commit.get("commitHash"),
            )
            if isinstance(tag_commit, dict)
            else None
        ),
    )


def decode_release(node: RawReleaseNode) -> Release:
    """Validate a raw release node into a Release.

    Raises:
        MalformedReleaseError: If the name, update time or tag commit is unusable
    """
    if not node.name:
        raise MalformedReleaseError("Release node has no name")

    try:
        release_date = parse_timestamp(node.updated_at)
    except ValueError as e:
        raise MalformedReleaseError(str(e), name=node.name) from e
    if release_date is None:
        raise MalformedReleaseError(
            f"Release {node.name!r} has no valid update time", name=node.name
        )

    if node.tag_commit is None or not node.tag_commit.commit_hash:
        raise MalformedReleaseError(f"Release {node.name!r} has no tag commit", name=node.name)

    try:
        tag_date = parse_timestamp(node.tag_commit.authored_date)
    except ValueError as e:
        raise MalformedReleaseError(str(e), name=node.name) from e
    if tag_date is None:
        raise MalformedReleaseError(
            f"Release {node.name!r} has no valid tag commit date", name=node.name
        )

    return Release(
        display_name=node.name,
        version_info=parse_version(node.name),
        release_date=release_date,
        tag_date=tag_date,
        commit_id=node.tag_commit.commit_hash,
        is_draft=node.is_draft,
    )


# =============================================================================
# Pagination
# =============================================================================


class PaginationGuard:
    """Detects a paginated source that stopped moving forward.

    A page that reports more data must hand back a cursor different from
    the one it was requested with; otherwise the next request would fetch
    the same page again. Pages with zero edges but a fresh cursor count as
    progress.
    """

    def __init__(self, what: str = "release", max_pages: int | None = None) -> None:
        self.what = what
        self.max_pages = max_pages
        self.pages = 0

    def advance(self, requested: str | None, next_cursor: str | None, has_next_page: bool) -> None:
        """Record a page fetched with cursor ``requested``.

        Raises:
            PaginationStallError: If the cursor did not move or the page limit was hit
        """
        self.pages += 1

        if not has_next_page:
            return

        if next_cursor is None or next_cursor == requested:
            raise PaginationStallError(
                f"{self.what.capitalize()} pagination stalled on page {self.pages}: "
                f"cursor {requested!r} did not advance",
                cursor=requested,
            )

        if self.max_pages is not None and self.pages >= self.max_pages:
            raise PaginationStallError(
                f"{self.what.capitalize()} pagination did not finish "
                f"within {self.max_pages} pages",
                cursor=next_cursor,
            )


class ReleaseCatalog:
    """All known releases of a repository, in the order they were received."""

    def __init__(self, releases: list[Release], malformed: int = 0) -> None:
        self.releases = releases
        self.malformed = malformed

    def __iter__(self) -> Iterator[Release]:
        return iter(self.releases)

    def __len__(self) -> int:
        return len(self.releases)

    def versioned(self) -> list[Release]:
        """Releases whose name parsed as a version tag."""
        return [release for release in self.releases if release.version_info is not None]

    def sorted_by_release_date(self) -> list[Release]:
        """Versioned releases, newest first. Ties keep their received order."""
        return sort_by_release_date(self.versioned())


def sort_by_release_date(releases: list[Release]) -> list[Release]:
    """Stable sort, newest release date first; undated releases go last."""
    return sorted(
        releases,
        key=lambda r: r.release_date.timestamp() if r.release_date else float("-inf"),
        reverse=True,
    )


def load_catalog(source: PagedReleaseSource, *, max_pages: int | None = None) -> ReleaseCatalog:
    """Fetch every release page and decode the result.

    Args:
        source: Paged release source
        max_pages: Optional hard limit on the number of pages

    Returns:
        Catalog holding every decodable release in page order

    Raises:
        PaginationStallError: If the source keeps returning the same cursor
        UpstreamQueryError: Propagated from the source
    """
    guard = PaginationGuard(max_pages=max_pages)
    raw: list[RawReleaseNode] = []
    cursor: str | None = None

    while True:
        page = source.fetch_release_page(cursor)
        guard.advance(cursor, page.next_cursor, page.has_next_page)
        raw.extend(page.edges)
        logger.debug("Fetched release page %d with %d edges", guard.pages, len(page.edges))
        if not page.has_next_page:
            break
        cursor = page.next_cursor

    releases: list[Release] = []
    malformed = 0
    for node in raw:
        try:
            releases.append(decode_release(node))
        except MalformedReleaseError as e:
            malformed += 1
            logger.warning("Skipping malformed release node: %s", e)

    logger.info(
        "Loaded %d releases over %d pages (%d versioned, %d malformed)",
        len(releases),
        guard.pages,
        sum(1 for r in releases if r.version_info is not None),
        malformed,
    )
    return ReleaseCatalog(releases, malformed=malformed)
