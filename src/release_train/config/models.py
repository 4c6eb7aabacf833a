"""Configuration models.

One ``ReleaseTrainConfig`` is built at process start and passed down to
everything that needs it. Nothing below the CLI reads the environment.
"""

from __future__ import annotations

from datetime import datetime
from pathlib import Path

from pydantic import BaseModel, ConfigDict, Field, SecretStr, field_validator

from release_train.core.version import ReleaseType


class GitHubConfig(BaseModel):
    """GitHub API access."""

    model_config = ConfigDict(extra="forbid")

    token: SecretStr | None = None
    owner: str | None = None
    repo: str | None = None
    api_url: str = "https://api.github.com"
    graphql_url: str = "https://api.github.com/graphql"
    page_size: int = Field(default=50, ge=1, le=100)
    timeout: float = Field(default=30.0, gt=0)

    @property
    def repository(self) -> str:
        """``owner/repo`` slug."""
        return f"{self.owner}/{self.repo}"


class SlackConfig(BaseModel):
    """Slack notification target."""

    model_config = ConfigDict(extra="forbid")

    token: SecretStr | None = None
    channel: str | None = None
    api_url: str = "https://slack.com/api"

    @property
    def enabled(self) -> bool:
        return self.token is not None and bool(self.channel)


class BranchesConfig(BaseModel):
    """Upstream branch each channel releases from."""

    model_config = ConfigDict(extra="forbid")

    development: str = "development"
    rc: str = "qa"
    production: str = "production"

    def for_channel(self, channel: ReleaseType) -> str:
        return getattr(self, channel.value)


class ReleaseTrainConfig(BaseModel):
    """Root configuration for one release run."""

    model_config = ConfigDict(extra="forbid")

    channel: ReleaseType
    commit_sha: str
    commit_date: datetime | None = None
    dry_run: bool = False
    output_file: Path | None = None
    max_pages: int | None = Field(default=None, ge=1)

    github: GitHubConfig = Field(default_factory=GitHubConfig)
    slack: SlackConfig = Field(default_factory=SlackConfig)
    branches: BranchesConfig = Field(default_factory=BranchesConfig)

    @field_validator("commit_sha")
    @classmethod
    def _validate_sha(cls, value: str) -> str:
        value = value.strip().lower()
        if not value or any(c not in "0123456789abcdef" for c in value):
            raise ValueError(f"not a commit hash: {value!r}")
        return value

    @field_validator("commit_date")
    @classmethod
    def _require_timezone(cls, value: datetime | None) -> datetime | None:
        if value is not None and value.tzinfo is None:
            raise ValueError("commit_date must include a timezone")
        return value

    @property
    def branch(self) -> str:
        """Branch the configured channel releases from."""
        return self.branches.for_channel(self.channel)
