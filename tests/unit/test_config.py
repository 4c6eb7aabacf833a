"""Tests for configuration loading and validation."""

from __future__ import annotations

from datetime import UTC, datetime
from pathlib import Path

import pytest
from pydantic import ValidationError

from release_train.config.loader import (
    config_from_environ,
    extract_release_train_config,
    find_pyproject_toml,
    load_config,
    load_pyproject_toml,
)
from release_train.config.models import (
    BranchesConfig,
    GitHubConfig,
    ReleaseTrainConfig,
    SlackConfig,
)
from release_train.core.version import ReleaseType
from release_train.exceptions import ConfigNotFoundError, ConfigValidationError

ENV = {
    "GITHUB_SHA": "ABCDEF1234567890",
    "GITHUB_REPOSITORY": "acme/shop",
    "INPUT_GITHUB_TOKEN": "ghp_secret",
    "INPUT_RELEASE_TYPE": "rc",
}


class TestReleaseTrainConfig:
    """Tests for ReleaseTrainConfig model."""

    def test_minimal_config(self):
        config = ReleaseTrainConfig(channel="development", commit_sha="abc123")

        assert config.channel is ReleaseType.DEVELOPMENT
        assert config.dry_run is False
        assert config.output_file is None
        assert config.branch == "development"

    def test_nested_defaults(self):
        config = ReleaseTrainConfig(channel="rc", commit_sha="abc123")

        assert config.github.api_url == "https://api.github.com"
        assert config.github.page_size == 50
        assert config.slack.enabled is False
        assert config.branch == "qa"

    def test_sha_normalized(self):
        config = ReleaseTrainConfig(channel="rc", commit_sha=" ABC123 ")
        assert config.commit_sha == "abc123"

    def test_invalid_sha(self):
        with pytest.raises(ValidationError):
            ReleaseTrainConfig(channel="rc", commit_sha="not-a-sha")

    def test_invalid_channel(self):
        with pytest.raises(ValidationError):
            ReleaseTrainConfig(channel="beta", commit_sha="abc123")

    def test_naive_commit_date_rejected(self):
        with pytest.raises(ValidationError):
            ReleaseTrainConfig(
                channel="rc", commit_sha="abc123", commit_date=datetime(2024, 1, 1)
            )

    def test_unknown_keys_rejected(self):
        with pytest.raises(ValidationError):
            ReleaseTrainConfig(channel="rc", commit_sha="abc123", colour="blue")


class TestBranchesConfig:
    """Tests for BranchesConfig model."""

    def test_default_mapping(self):
        branches = BranchesConfig()

        assert branches.for_channel(ReleaseType.DEVELOPMENT) == "development"
        assert branches.for_channel(ReleaseType.RC) == "qa"
        assert branches.for_channel(ReleaseType.PRODUCTION) == "production"

    def test_custom_mapping(self):
        assert BranchesConfig(production="main").for_channel(ReleaseType.PRODUCTION) == "main"


class TestGitHubConfig:
    """Tests for GitHubConfig model."""

    def test_repository_slug(self):
        assert GitHubConfig(owner="acme", repo="shop").repository == "acme/shop"

    def test_token_is_secret(self):
        config = GitHubConfig(token="ghp_secret")
        assert "ghp_secret" not in repr(config)
        assert config.token.get_secret_value() == "ghp_secret"

    def test_page_size_bounds(self):
        with pytest.raises(ValidationError):
            GitHubConfig(page_size=0)
        with pytest.raises(ValidationError):
            GitHubConfig(page_size=101)


class TestSlackConfig:
    """Tests for SlackConfig model."""

    def test_enabled_needs_token_and_channel(self):
        assert not SlackConfig(token="xoxb").enabled
        assert not SlackConfig(channel="#releases").enabled
        assert SlackConfig(token="xoxb", channel="#releases").enabled


class TestConfigFromEnviron:
    """Tests for config_from_environ()."""

    def test_actions_environment(self):
        data = config_from_environ(
            {
                **ENV,
                "INPUT_SLACK_TOKEN": "xoxb",
                "INPUT_SLACK_CHANNEL": "#releases",
                "RELEASE_DRY_RUN": "true",
                "GITHUB_OUTPUT": "/tmp/out",
            }
        )

        assert data["commit_sha"] == "ABCDEF1234567890"
        assert data["channel"] == "rc"
        assert data["dry_run"] is True
        assert data["output_file"] == "/tmp/out"
        assert data["github"] == {"token": "ghp_secret", "owner": "acme", "repo": "shop"}
        assert data["slack"] == {"token": "xoxb", "channel": "#releases"}

    def test_fallback_names(self):
        data = config_from_environ({"GITHUB_TOKEN": "t", "RELEASE_CHANNEL": "Production"})

        assert data["github"]["token"] == "t"
        assert data["channel"] == "production"

    def test_empty_environment(self):
        assert config_from_environ({}) == {}

    def test_bad_repository(self):
        with pytest.raises(ConfigValidationError):
            config_from_environ({"GITHUB_REPOSITORY": "no-slash"})


class TestLoadPyprojectToml:
    """Tests for load_pyproject_toml() and find_pyproject_toml()."""

    def test_load_nonexistent_raises(self, tmp_path: Path):
        with pytest.raises(ConfigNotFoundError):
            load_pyproject_toml(tmp_path / "nonexistent.toml")

    def test_invalid_toml(self, tmp_path: Path):
        path = tmp_path / "pyproject.toml"
        path.write_text("[tool.release-train\n")

        with pytest.raises(ConfigValidationError):
            load_pyproject_toml(path)

    def test_find_in_parent_dir(self, tmp_path: Path):
        (tmp_path / "pyproject.toml").write_text("[project]\nname = 'x'\n")
        subdir = tmp_path / "src" / "package"
        subdir.mkdir(parents=True)

        assert find_pyproject_toml(subdir) == (tmp_path / "pyproject.toml").resolve()

    def test_extract_missing_section(self):
        assert extract_release_train_config({"project": {"name": "x"}}) == {}


class TestLoadConfig:
    """Tests for load_config()."""

    def test_from_environment(self):
        config = load_config(ENV)

        assert config.channel is ReleaseType.RC
        assert config.commit_sha == "abcdef1234567890"
        assert config.github.repository == "acme/shop"
        assert config.github.token.get_secret_value() == "ghp_secret"

    def test_overrides_win(self):
        when = datetime(2024, 1, 1, tzinfo=UTC)
        config = load_config(
            ENV,
            overrides={
                "channel": "production",
                "commit_sha": "123abc",
                "commit_date": when,
                "repository": "other/repo",
                "dry_run": True,
                "token": "override",
                "output_file": None,
            },
        )

        assert config.channel is ReleaseType.PRODUCTION
        assert config.commit_sha == "123abc"
        assert config.commit_date == when
        assert config.github.repository == "other/repo"
        assert config.github.token.get_secret_value() == "override"
        assert config.dry_run is True

    def test_pyproject_defaults(self, tmp_path: Path):
        (tmp_path / "pyproject.toml").write_text(
            """\
[tool.release-train]
max_pages = 20

[tool.release-train.branches]
production = "main"

[tool.release-train.github]
page_size = 100
"""
        )
        config = load_config(ENV, project_path=tmp_path)

        assert config.branches.production == "main"
        assert config.branches.rc == "qa"
        assert config.github.page_size == 100
        assert config.github.repository == "acme/shop"
        assert config.max_pages == 20

    def test_missing_pyproject_is_fine(self, tmp_path: Path):
        config = load_config(ENV, project_path=tmp_path / "nowhere")
        assert config.channel is ReleaseType.RC

    def test_missing_context_reported(self):
        """Missing keys are all named, before any validation."""
        with pytest.raises(ConfigValidationError) as exc_info:
            load_config({"GITHUB_REPOSITORY": "acme/shop"})

        assert exc_info.value.missing == ["commit_sha", "channel", "github.token"]

    def test_missing_repository(self):
        env = {k: v for k, v in ENV.items() if k != "GITHUB_REPOSITORY"}
        with pytest.raises(ConfigValidationError, match="github.repository"):
            load_config(env)

    def test_invalid_values_wrapped(self):
        with pytest.raises(ConfigValidationError, match="Invalid configuration"):
            load_config({**ENV, "INPUT_RELEASE_TYPE": "beta"})
