"""GitHub API client.

Implements the release and commit-history sources over the GraphQL API,
plus the REST calls used around a run: looking up the triggering commit
and publishing the tag, ref and release.

Every failed request is fatal. There are no retries.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import TYPE_CHECKING, Any

import httpx

from release_train.core.catalog import (
    PaginationGuard,
    ReleasePage,
    decode_release_node,
    parse_timestamp,
)
from release_train.core.commits import Commit
from release_train.exceptions import PublishError, UpstreamQueryError

if TYPE_CHECKING:
    from datetime import datetime
    from types import TracebackType

    from release_train.config.models import GitHubConfig

logger = logging.getLogger(__name__)

RELEASES_QUERY = """
query GetReleases($owner: String!, $name: String!, $first: Int!, $after: String) {
  repository(owner: $owner, name: $name) {
    releases(first: $first, after: $after, orderBy: {field: CREATED_AT, direction: DESC}) {
      pageInfo {
        hasNextPage
        endCursor
      }
      edges {
        node {
          name
          updatedAt
          isDraft
          tag {
            name
          }
          tagCommit {
            authoredDate
            oid
          }
        }
      }
    }
  }
}
"""

COMMITS_QUERY = """
query GetCommits(
  $owner: String!
  $name: String!
  $qualifiedName: String!
  $first: Int!
  $after: String
  $since: GitTimestamp
  $until: GitTimestamp
) {
  repository(owner: $owner, name: $name) {
    ref(qualifiedName: $qualifiedName) {
      target {
        __typename
        ... on Commit {
          history(first: $first, after: $after, since: $since, until: $until) {
            pageInfo {
              hasNextPage
              endCursor
            }
            nodes {
              oid
              abbreviatedOid
              message
              authoredDate
            }
          }
        }
      }
    }
  }
}
"""


@dataclass(frozen=True, slots=True)
class CreatedRelease:
    """What GitHub returned for a newly created release."""

    id: int
    html_url: str
    tag_name: str


def _timestamp(value: datetime | None) -> str | None:
    return value.isoformat() if value is not None else None


class GitHubClient:
    """Client for one GitHub repository.

    Use as a context manager so the underlying HTTP connection pool is
    closed::

        with GitHubClient(config.github) as github:
            plan = plan_release(..., releases=github, commits=github, ...)
    """

    def __init__(
        self,
        config: GitHubConfig,
        *,
        transport: httpx.BaseTransport | None = None,
    ) -> None:
        if not config.owner or not config.repo:
            raise ValueError("GitHubClient needs an owner and a repository name")
        self.config = config
        self.owner = config.owner
        self.repo = config.repo

        headers = {
            "Accept": "application/vnd.github+json",
            "X-GitHub-Api-Version": "2022-11-28",
        }
        if config.token is not None:
            headers["Authorization"] = f"bearer {config.token.get_secret_value()}"

        self._http = httpx.Client(
            headers=headers,
            timeout=config.timeout,
            transport=transport,
        )

    def __enter__(self) -> GitHubClient:
        return self

    def __exit__(
        self,
        exc_type: type[BaseException] | None,
        exc: BaseException | None,
        tb: TracebackType | None,
    ) -> None:
        self.close()

    def close(self) -> None:
        self._http.close()

    # -------------------------------------------------------------------------
    # Transport helpers
    # -------------------------------------------------------------------------

    def _graphql(self, query: str, variables: dict[str, Any], step: str) -> dict[str, Any]:
        try:
            response = self._http.post(
                self.config.graphql_url,
                json={"query": query, "variables": variables},
            )
            response.raise_for_status()
            payload = response.json()
        except httpx.HTTPStatusError as e:
            raise UpstreamQueryError(
                f"GitHub GraphQL API returned HTTP {e.response.status_code}",
                step=step,
            ) from e
        except (httpx.HTTPError, ValueError) as e:
            raise UpstreamQueryError(f"GitHub GraphQL request failed: {e}", step=step) from e

        if payload.get("errors"):
            messages = "; ".join(str(err.get("message", err)) for err in payload["errors"])
            raise UpstreamQueryError(
                f"GitHub GraphQL API reported errors: {messages}",
                step=step,
                errors=payload["errors"],
            )

        repository = (payload.get("data") or {}).get("repository")
        if repository is None:
            raise UpstreamQueryError(
                f"Repository {self.owner}/{self.repo} not found",
                step=step,
            )
        return repository

    def _rest(
        self,
        method: str,
        path: str,
        step: str,
        *,
        json: dict[str, Any] | None = None,
        error: type[UpstreamQueryError] | type[PublishError] = UpstreamQueryError,
    ) -> dict[str, Any]:
        url = f"{self.config.api_url.rstrip('/')}/repos/{self.owner}/{self.repo}/{path}"
        try:
            response = self._http.request(method, url, json=json)
            response.raise_for_status()
            return response.json()
        except httpx.HTTPStatusError as e:
            raise error(
                f"GitHub API returned HTTP {e.response.status_code} for {method} {path}",
                step=step,
            ) from e
        except (httpx.HTTPError, ValueError) as e:
            raise error(f"GitHub API request failed: {e}", step=step) from e

    # -------------------------------------------------------------------------
    # Sources
    # -------------------------------------------------------------------------

    def fetch_release_page(self, cursor: str | None) -> ReleasePage:
        """Fetch one page of releases, newest first."""
        repository = self._graphql(
            RELEASES_QUERY,
            {
                "owner": self.owner,
                "name": self.repo,
                "first": self.config.page_size,
                "after": cursor,
            },
            step="fetch releases",
        )
        releases = repository.get("releases") or {}
        page_info = releases.get("pageInfo") or {}
        edges = [
            decode_release_node(edge["node"])
            for edge in releases.get("edges") or []
            if edge and edge.get("node")
        ]
        return ReleasePage(
            edges=edges,
            next_cursor=page_info.get("endCursor"),
            has_next_page=bool(page_info.get("hasNextPage")),
        )

    def fetch_commit_range(
        self,
        branch: str,
        since: datetime | None,
        until: datetime | None,
        *,
        label: str | None = None,
    ) -> list[Commit]:
        """List commits on ``branch`` between two timestamps, oldest first.

        Both bounds are inclusive.

        Args:
            branch: Branch name
            since: Lower bound, None for the full history
            until: Upper bound, None for no limit
            label: Which range this is, for error messages

        Raises:
            UpstreamQueryError: If the query fails or the branch does not exist
        """
        step = f"fetch commits ({label}) on {branch}" if label else f"fetch commits on {branch}"
        guard = PaginationGuard("commit history")
        cursor: str | None = None
        commits: list[Commit] = []

        while True:
            repository = self._graphql(
                COMMITS_QUERY,
                {
                    "owner": self.owner,
                    "name": self.repo,
                    "qualifiedName": f"refs/heads/{branch}",
                    "first": self.config.page_size,
                    "after": cursor,
                    "since": _timestamp(since),
                    "until": _timestamp(until),
                },
                step=step,
            )
            ref = repository.get("ref")
            if ref is None:
                raise UpstreamQueryError(f"Branch {branch!r} not found", step=step)
            target = ref.get("target") or {}
            if target.get("__typename") != "Commit":
                raise UpstreamQueryError(
                    f"Branch {branch!r} does not point at a commit", step=step
                )

            history = target.get("history") or {}
            page_info = history.get("pageInfo") or {}
            for node in history.get("nodes") or []:
                if not node:
                    continue
                commits.append(
                    Commit(
                        id=node["oid"],
                        message=node.get("message") or "",
                        short_id=node.get("abbreviatedOid") or node["oid"][:7],
                        authored_date=parse_timestamp(node.get("authoredDate")),
                    )
                )

            next_cursor = page_info.get("endCursor")
            has_next_page = bool(page_info.get("hasNextPage"))
            guard.advance(cursor, next_cursor, has_next_page)
            if not has_next_page:
                break
            cursor = next_cursor

        # GitHub lists history newest first
        commits.reverse()
        logger.debug("Fetched %d commits on %s", len(commits), branch)
        return commits

    def get_commit_date(self, sha: str) -> datetime:
        """Authored timestamp of a commit."""
        data = self._rest("GET", f"git/commits/{sha}", step=f"look up commit {sha[:7]}")
        try:
            date = parse_timestamp((data.get("author") or {}).get("date"))
        except ValueError as e:
            raise UpstreamQueryError(str(e), step=f"look up commit {sha[:7]}") from e
        if date is None:
            raise UpstreamQueryError(
                f"Commit {sha} has no author date", step=f"look up commit {sha[:7]}"
            )
        return date

    # -------------------------------------------------------------------------
    # Sinks
    # -------------------------------------------------------------------------

    def create_tag(self, tag: str, sha: str, message: str | None = None) -> str:
        """Create an annotated tag object and return its sha."""
        data = self._rest(
            "POST",
            "git/tags",
            step=f"create tag {tag}",
            json={"tag": tag, "message": message or tag, "object": sha, "type": "commit"},
            error=PublishError,
        )
        return data["sha"]

    def create_ref(self, tag: str, tag_sha: str) -> None:
        """Point ``refs/tags/<tag>`` at a tag object."""
        self._rest(
            "POST",
            "git/refs",
            step=f"create ref for {tag}",
            json={"ref": f"refs/tags/{tag}", "sha": tag_sha},
            error=PublishError,
        )

    def create_release(self, tag: str, body: str, *, prerelease: bool) -> CreatedRelease:
        """Create a published release for an existing tag."""
        data = self._rest(
            "POST",
            "releases",
            step=f"create release {tag}",
            json={
                "tag_name": tag,
                "name": tag,
                "body": body,
                "draft": False,
                "prerelease": prerelease,
            },
            error=PublishError,
        )
        logger.info("Created release %s at %s", tag, data.get("html_url"))
        return CreatedRelease(
            id=data.get("id", 0),
            html_url=data.get("html_url", ""),
            tag_name=data.get("tag_name", tag),
        )

    def publish(self, tag: str, sha: str, body: str, *, prerelease: bool) -> CreatedRelease:
        """Create tag, ref and release in order."""
        tag_sha = self.create_tag(tag, sha)
        self.create_ref(tag, tag_sha)
        return self.create_release(tag, body, prerelease=prerelease)
