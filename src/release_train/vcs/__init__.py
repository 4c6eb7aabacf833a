"""Version control hosting integrations."""

from __future__ import annotations

from release_train.vcs.github import CreatedRelease, GitHubClient

__all__ = ["CreatedRelease", "GitHubClient"]
