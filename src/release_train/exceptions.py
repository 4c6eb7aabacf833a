"""Exception hierarchy for release-train.

Every fatal condition of a run derives from :class:`ReleaseTrainError`,
so the CLI can report it once and exit. A release name that fails the
version grammar is not an error and never raises.
"""

from __future__ import annotations

from typing import Any


class ReleaseTrainError(Exception):
    """Base exception for all release-train errors."""


# =============================================================================
# Configuration
# =============================================================================


class ConfigError(ReleaseTrainError):
    """Configuration could not be loaded."""


class ConfigNotFoundError(ConfigError):
    """A configuration file that was asked for does not exist."""


class ConfigValidationError(ConfigError):
    """Required run context is missing or invalid."""

    def __init__(self, message: str, missing: list[str] | None = None) -> None:
        super().__init__(message)
        self.missing = missing or []


# =============================================================================
# Upstream queries
# =============================================================================


class UpstreamQueryError(ReleaseTrainError):
    """A release or commit-range fetch failed or returned an error payload."""

    def __init__(
        self,
        message: str,
        *,
        step: str | None = None,
        errors: list[Any] | None = None,
    ) -> None:
        super().__init__(message)
        self.step = step
        self.errors = errors or []

    def __str__(self) -> str:
        base = super().__str__()
        if self.step:
            return f"{base} (while trying to {self.step})"
        return base


class MalformedReleaseError(ReleaseTrainError):
    """A raw release node could not be decoded into a Release."""

    def __init__(self, message: str, name: str | None = None) -> None:
        super().__init__(message)
        self.name = name


class PaginationStallError(ReleaseTrainError):
    """Paginated fetch stopped making progress."""

    def __init__(self, message: str, cursor: str | None = None) -> None:
        super().__init__(message)
        self.cursor = cursor


# =============================================================================
# Downstream sinks
# =============================================================================


class PublishError(ReleaseTrainError):
    """Creating a tag, ref or release, or posting a notification, failed."""

    def __init__(self, message: str, *, step: str | None = None) -> None:
        super().__init__(message)
        self.step = step
