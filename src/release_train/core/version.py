"""Version tag parsing and formatting.

Release tags follow a small, fixed grammar::

    v<major>.<minor>.<patch>                      production
    v<major>.<minor>.<patch>-development+<hash>   development
    v<major>.<minor>.<patch>-rc.<n>+<hash>        release candidate

Anything else is not a release tag. ``parse_version`` returns ``None``
for such strings instead of raising, because callers simply skip them.
"""

from __future__ import annotations

import re
from dataclasses import dataclass, replace
from enum import Enum, StrEnum

VERSION_PATTERN = re.compile(
    r"""
    ^v
    (?P<major>\d+)\.(?P<minor>\d+)\.(?P<patch>\d+)
    (?:
        -(?:(?P<development>development)|rc\.(?P<rc>\d+))
        \+(?P<hash>[0-9a-f]+)
    )?
    \Z
    """,
    re.VERBOSE | re.ASCII,
)


class ReleaseType(StrEnum):
    """Release channel a version belongs to."""

    DEVELOPMENT = "development"
    RC = "rc"
    PRODUCTION = "production"

    @property
    def is_prerelease(self) -> bool:
        return self is not ReleaseType.PRODUCTION


class BumpType(Enum):
    """Magnitude of a version increment."""

    NONE = 0
    PATCH = 1
    MINOR = 2
    MAJOR = 3

    def __str__(self) -> str:
        return self.name.lower()


@dataclass(frozen=True, slots=True)
class VersionInfo:
    """A parsed release version.

    Attributes:
        major: Major version number
        minor: Minor version number
        patch: Patch version number
        release_type: Channel the version was released on
        release_candidate: rc ordinal, set only for rc versions
        build_hash: Abbreviated commit hash from the build metadata
    """

    major: int
    minor: int
    patch: int
    release_type: ReleaseType = ReleaseType.PRODUCTION
    release_candidate: int | None = None
    build_hash: str | None = None

    def __post_init__(self) -> None:
        if min(self.major, self.minor, self.patch) < 0:
            raise ValueError(f"Version components must be non-negative: {self.core}")
        if self.release_type is ReleaseType.RC:
            if self.release_candidate is None or self.release_candidate < 1:
                raise ValueError("rc versions need a positive release candidate number")
        elif self.release_candidate is not None:
            raise ValueError(f"{self.release_type} versions cannot carry an rc number")

    @property
    def core(self) -> tuple[int, int, int]:
        """The (major, minor, patch) triple anchoring the release line."""
        return (self.major, self.minor, self.patch)

    @property
    def numeric(self) -> str:
        """Bare numeric version, e.g. ``1.2.3``."""
        return f"{self.major}.{self.minor}.{self.patch}"

    def bump(self, bump_type: BumpType) -> VersionInfo:
        """Return a copy with the numeric part incremented.

        Lower components are reset to zero. ``BumpType.NONE`` returns the
        version unchanged.
        """
        if bump_type is BumpType.MAJOR:
            return replace(self, major=self.major + 1, minor=0, patch=0)
        if bump_type is BumpType.MINOR:
            return replace(self, minor=self.minor + 1, patch=0)
        if bump_type is BumpType.PATCH:
            return replace(self, patch=self.patch + 1)
        return self

    def __str__(self) -> str:
        return format_version(self)


def zero_version(release_type: ReleaseType) -> VersionInfo:
    """The ``0.0.0`` version used when no prior release exists."""
    return VersionInfo(0, 0, 0, release_type)


def parse_version(value: str) -> VersionInfo | None:
    """Parse a release tag name.

    Args:
        value: Tag or release name, e.g. ``v1.2.3-rc.2+abc1234``

    Returns:
        Parsed version, or None if the string is not a release tag
    """
    match = VERSION_PATTERN.match(value)
    if match is None:
        return None

    if match.group("development"):
        release_type = ReleaseType.DEVELOPMENT
    elif match.group("rc") is not None:
        release_type = ReleaseType.RC
    else:
        release_type = ReleaseType.PRODUCTION

    rc = match.group("rc")
    if rc is not None and int(rc) < 1:
        return None

    return VersionInfo(
        major=int(match.group("major")),
        minor=int(match.group("minor")),
        patch=int(match.group("patch")),
        release_type=release_type,
        release_candidate=int(rc) if rc is not None else None,
        build_hash=match.group("hash"),
    )


def format_suffix(version: VersionInfo) -> str:
    """Render the pre-release suffix (``-rc.2+abc1234``), empty for production."""
    if version.release_type is ReleaseType.PRODUCTION:
        return ""
    if version.release_type is ReleaseType.RC:
        label = f"-rc.{version.release_candidate}"
    else:
        label = "-development"
    if version.build_hash:
        return f"{label}+{version.build_hash}"
    return label


def format_version(version: VersionInfo) -> str:
    """Render a version in canonical tag form."""
    return f"v{version.numeric}{format_suffix(version)}"
