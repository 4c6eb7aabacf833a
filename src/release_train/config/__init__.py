"""Configuration management for release-train."""

from __future__ import annotations

from release_train.config.loader import load_config
from release_train.config.models import (
    BranchesConfig,
    GitHubConfig,
    ReleaseTrainConfig,
    SlackConfig,
)

__all__ = [
    "BranchesConfig",
    "GitHubConfig",
    "ReleaseTrainConfig",
    "SlackConfig",
    "load_config",
]
