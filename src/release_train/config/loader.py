"""Configuration loading.

Settings come from three layers, later layers winning:

1. ``[tool.release-train]`` in ``pyproject.toml`` (optional defaults)
2. The process environment, passed in explicitly as a mapping
3. Command-line overrides

Environment keys follow the GitHub Actions conventions::

    GITHUB_SHA, GITHUB_REPOSITORY, GITHUB_TOKEN / INPUT_GITHUB_TOKEN,
    INPUT_RELEASE_TYPE / RELEASE_CHANNEL, INPUT_SLACK_TOKEN,
    INPUT_SLACK_CHANNEL, RELEASE_DRY_RUN, GITHUB_OUTPUT,
    GITHUB_API_URL, GITHUB_GRAPHQL_URL
"""

from __future__ import annotations

import tomllib
from pathlib import Path
from typing import TYPE_CHECKING, Any

from pydantic import ValidationError

from release_train.config.models import ReleaseTrainConfig
from release_train.exceptions import ConfigNotFoundError, ConfigValidationError

if TYPE_CHECKING:
    from collections.abc import Mapping

TOOL_SECTION = "release-train"

_TRUTHY = {"1", "true", "yes", "on"}


def find_pyproject_toml(start: Path | None = None) -> Path:
    """Find pyproject.toml in ``start`` or one of its parents.

    Raises:
        ConfigNotFoundError: If no pyproject.toml exists up to the filesystem root
    """
    current = (start or Path.cwd()).resolve()
    for directory in (current, *current.parents):
        candidate = directory / "pyproject.toml"
        if candidate.is_file():
            return candidate
    raise ConfigNotFoundError(f"No pyproject.toml found in {current} or its parents")


def load_pyproject_toml(path: Path) -> dict[str, Any]:
    """Read and parse a pyproject.toml file.

    Raises:
        ConfigNotFoundError: If the file does not exist
        ConfigValidationError: If the file is not valid TOML
    """
    if not path.is_file():
        raise ConfigNotFoundError(f"Configuration file not found: {path}")
    try:
        with path.open("rb") as f:
            return tomllib.load(f)
    except tomllib.TOMLDecodeError as e:
        raise ConfigValidationError(f"Invalid TOML in {path}: {e}") from e


def extract_release_train_config(pyproject: dict[str, Any]) -> dict[str, Any]:
    """Return the ``[tool.release-train]`` table, or an empty dict."""
    return dict(pyproject.get("tool", {}).get(TOOL_SECTION, {}))


def config_from_environ(environ: Mapping[str, str]) -> dict[str, Any]:
    """Translate environment variables into raw config values."""
    data: dict[str, Any] = {}
    github: dict[str, Any] = {}
    slack: dict[str, Any] = {}

    if sha := environ.get("GITHUB_SHA"):
        data["commit_sha"] = sha
    if channel := environ.get("INPUT_RELEASE_TYPE") or environ.get("RELEASE_CHANNEL"):
        data["channel"] = channel.strip().lower()
    if dry_run := environ.get("RELEASE_DRY_RUN"):
        data["dry_run"] = dry_run.strip().lower() in _TRUTHY
    if output := environ.get("GITHUB_OUTPUT"):
        data["output_file"] = output

    if token := environ.get("INPUT_GITHUB_TOKEN") or environ.get("GITHUB_TOKEN"):
        github["token"] = token
    if repository := environ.get("GITHUB_REPOSITORY"):
        github.update(_split_repository(repository))
    if api_url := environ.get("GITHUB_API_URL"):
        github["api_url"] = api_url
    if graphql_url := environ.get("GITHUB_GRAPHQL_URL"):
        github["graphql_url"] = graphql_url

    if slack_token := environ.get("INPUT_SLACK_TOKEN"):
        slack["token"] = slack_token
    if slack_channel := environ.get("INPUT_SLACK_CHANNEL"):
        slack["channel"] = slack_channel

    if github:
        data["github"] = github
    if slack:
        data["slack"] = slack
    return data


def _split_repository(repository: str) -> dict[str, str]:
    owner, sep, repo = repository.strip().partition("/")
    if not sep or not owner or not repo:
        raise ConfigValidationError(f"Repository must look like 'owner/repo', got {repository!r}")
    return {"owner": owner, "repo": repo}


def _merge(base: dict[str, Any], update: Mapping[str, Any]) -> dict[str, Any]:
    merged = dict(base)
    for key, value in update.items():
        if isinstance(value, dict) and isinstance(merged.get(key), dict):
            merged[key] = _merge(merged[key], value)
        else:
            merged[key] = value
    return merged


def _missing_keys(data: dict[str, Any]) -> list[str]:
    missing = [key for key in ("commit_sha", "channel") if not data.get(key)]
    github = data.get("github", {})
    if not github.get("token"):
        missing.append("github.token")
    if not github.get("owner") or not github.get("repo"):
        missing.append("github.repository")
    return missing


def load_config(
    environ: Mapping[str, str],
    *,
    overrides: Mapping[str, Any] | None = None,
    project_path: Path | None = None,
) -> ReleaseTrainConfig:
    """Build the run configuration.

    Args:
        environ: Environment mapping (the CLI passes ``os.environ``)
        overrides: Values from the command line; ``repository`` may be
            given as an ``owner/repo`` slug
        project_path: Directory to search for pyproject.toml; skipped if None

    Returns:
        Validated configuration

    Raises:
        ConfigValidationError: If required run context is missing or invalid
    """
    data: dict[str, Any] = {}

    if project_path is not None:
        try:
            pyproject = find_pyproject_toml(project_path)
        except ConfigNotFoundError:
            pyproject = None
        if pyproject is not None:
            data = extract_release_train_config(load_pyproject_toml(pyproject))

    data = _merge(data, config_from_environ(environ))

    if overrides:
        cli = {key: value for key, value in overrides.items() if value is not None}
        if repository := cli.pop("repository", None):
            cli["github"] = _split_repository(repository)
        if token := cli.pop("token", None):
            cli = _merge(cli, {"github": {"token": token}})
        data = _merge(data, cli)

    missing = _missing_keys(data)
    if missing:
        raise ConfigValidationError(
            f"Missing required configuration: {', '.join(missing)}",
            missing=missing,
        )

    try:
        return ReleaseTrainConfig.model_validate(data)
    except ValidationError as e:
        raise ConfigValidationError(f"Invalid configuration: {e}") from e
