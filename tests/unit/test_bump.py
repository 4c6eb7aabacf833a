"""Tests for next-version computation."""

from __future__ import annotations

from datetime import UTC, datetime

import pytest

from release_train.core.bump import compute_next_version, count_release_candidates
from release_train.core.commits import Commit
from release_train.core.version import BumpType, ReleaseType, VersionInfo, parse_version

HASH = "abcdef1234567890"


def _at(day: int, hour: int = 12) -> datetime:
    return datetime(2024, 1, day, hour, tzinfo=UTC)


def _commits(*messages: str) -> list[Commit]:
    return [Commit(f"c{i}", message) for i, message in enumerate(messages)]


class TestDevelopmentChannel:
    """Development versions bump from the development baseline."""

    def test_minor_dominates_patch(self):
        """fix + feat + chore on v1.2.3 gives v1.3.0."""
        version = compute_next_version(
            ReleaseType.DEVELOPMENT,
            VersionInfo(1, 2, 3, ReleaseType.DEVELOPMENT, build_hash="0000000"),
            _commits("fix: a", "feat: b", "chore: c"),
            "abcdef1234",
        )

        assert version.canonical == "v1.3.0-development+abcdef1"
        assert version.normalized == "v1.3.0-development-abcdef1"
        assert version.numeric == "1.3.0"
        assert version.suffix == "-development+abcdef1"
        assert version.bump is BumpType.MINOR

    def test_breaking_dominates(self):
        version = compute_next_version(
            ReleaseType.DEVELOPMENT,
            VersionInfo(1, 2, 3, ReleaseType.DEVELOPMENT, build_hash="0"),
            _commits("feat: a", "breaking: b", "fix: c", "feat: d"),
            HASH,
        )
        assert (version.major, version.minor, version.patch) == (2, 0, 0)

    def test_patch_bump(self):
        version = compute_next_version(
            ReleaseType.DEVELOPMENT,
            VersionInfo(1, 2, 3, ReleaseType.DEVELOPMENT, build_hash="0"),
            _commits("refactor: tidy"),
            HASH,
        )
        assert version.numeric == "1.2.4"

    def test_no_classified_commits(self):
        """Without classified commits the numbers stay, only the hash changes."""
        version = compute_next_version(
            ReleaseType.DEVELOPMENT,
            VersionInfo(1, 2, 3, ReleaseType.DEVELOPMENT, build_hash="0"),
            _commits("Merge branch 'x'"),
            HASH,
        )
        assert version.canonical == "v1.2.3-development+abcdef1"

    def test_from_zero_baseline(self):
        """First breaking commit on an empty history gives v1.0.0, first fix v0.0.1."""
        zero = VersionInfo(0, 0, 0, ReleaseType.DEVELOPMENT)

        breaking = compute_next_version(
            ReleaseType.DEVELOPMENT, zero, _commits("breaking: x"), HASH
        )
        fix = compute_next_version(ReleaseType.DEVELOPMENT, zero, _commits("fix: x"), HASH)

        assert breaking.numeric == "1.0.0"
        assert fix.numeric == "0.0.1"

    def test_hash_is_lowercased_and_truncated(self):
        version = compute_next_version(
            ReleaseType.DEVELOPMENT, VersionInfo(1, 0, 0), [], "ABCDEF1234"
        )
        assert version.suffix == "-development+abcdef1"

    def test_tag_name_is_canonical(self):
        """Tags keep the '+' so later runs can parse them back."""
        version = compute_next_version(
            ReleaseType.DEVELOPMENT, VersionInfo(1, 0, 0), _commits("fix: a"), HASH
        )
        assert version.tag_name == "v1.0.1-development+abcdef1"
        assert parse_version(version.tag_name) == version.version_info

    def test_hash_required(self):
        with pytest.raises(ValueError, match="commit hash"):
            compute_next_version(ReleaseType.DEVELOPMENT, VersionInfo(1, 0, 0), [], "  ")

    @pytest.mark.parametrize(
        "messages",
        [(), ("fix: a",), ("feat: a", "chore: b"), ("breaking: a",), ("docs: a", "task: b")],
    )
    def test_round_trip(self, messages: tuple[str, ...]):
        """Calculated versions parse back to the same identity."""
        version = compute_next_version(
            ReleaseType.DEVELOPMENT,
            VersionInfo(3, 1, 4, ReleaseType.DEVELOPMENT, build_hash="1"),
            _commits(*messages),
            HASH,
        )
        parsed = parse_version(version.canonical)

        assert parsed.core == version.version_info.core
        assert parsed.release_type is ReleaseType.DEVELOPMENT
        assert parsed.release_candidate is None


class TestRcChannel:
    """rc versions reuse development numbers and count prior candidates."""

    def test_first_rc(self):
        version = compute_next_version(
            ReleaseType.RC,
            VersionInfo(1, 3, 0, ReleaseType.DEVELOPMENT, build_hash="0"),
            _commits("breaking: ignored for rc"),
            HASH,
            releases=[],
            production_date=_at(1),
            at_time=_at(5),
        )

        assert version.canonical == "v1.3.0-rc.1+abcdef1"
        assert version.normalized == "v1.3.0-rc.1-abcdef1"

    def test_counts_prior_candidates(self, make_release):
        releases = [
            make_release("v1.2.0-rc.1+aaa", _at(2)),
            make_release("v1.3.0-rc.1+bbb", _at(3)),
            make_release("v1.3.0-rc.2+ccc", _at(4)),
            make_release("v1.3.0-development+ddd", _at(4)),
        ]
        version = compute_next_version(
            ReleaseType.RC,
            VersionInfo(1, 3, 0, ReleaseType.DEVELOPMENT, build_hash="0"),
            [],
            HASH,
            releases=releases,
            production_date=_at(2),
            at_time=_at(5),
        )

        assert version.version_info.release_candidate == 3
        assert parse_version(version.canonical).release_candidate == 3

    def test_requires_timestamp(self):
        with pytest.raises(ValueError, match="timestamp"):
            compute_next_version(ReleaseType.RC, VersionInfo(1, 0, 0), [], HASH)


class TestCountReleaseCandidates:
    """Boundary behaviour of the rc counting window."""

    def test_release_at_production_date_excluded(self, make_release):
        """The lower bound is exclusive."""
        releases = [make_release("v1.0.0-rc.1+aaa", _at(2))]
        assert count_release_candidates(releases, since=_at(2), until=_at(5)) == 0

    def test_release_at_trigger_time_included(self, make_release):
        """The upper bound is inclusive."""
        releases = [make_release("v1.0.0-rc.1+aaa", _at(5))]
        assert count_release_candidates(releases, since=_at(2), until=_at(5)) == 1

    def test_release_after_trigger_excluded(self, make_release):
        releases = [make_release("v1.0.0-rc.1+aaa", _at(6))]
        assert count_release_candidates(releases, since=_at(2), until=_at(5)) == 0

    def test_no_production_release_counts_all_earlier(self, make_release):
        releases = [
            make_release("v0.1.0-rc.1+aaa", _at(1)),
            make_release("v0.1.0-rc.2+bbb", _at(3)),
            make_release("v0.1.0-rc.3+ccc", _at(9)),
        ]
        assert count_release_candidates(releases, since=None, until=_at(5)) == 2

    def test_only_rc_releases_count(self, make_release):
        releases = [
            make_release("v1.0.0", _at(3)),
            make_release("v1.0.0-development+aaa", _at(3)),
            make_release("preview", _at(3)),
        ]
        assert count_release_candidates(releases, since=_at(1), until=_at(5)) == 0


class TestProductionChannel:
    """Production versions promote the development numbers."""

    def test_promotes_development_numbers(self):
        version = compute_next_version(
            ReleaseType.PRODUCTION,
            VersionInfo(1, 3, 0, ReleaseType.DEVELOPMENT, build_hash="0"),
            _commits("breaking: not reclassified"),
            HASH,
        )

        assert version.canonical == "v1.3.0"
        assert version.normalized == "v1.3.0"
        assert version.suffix == ""
        assert version.tag_name == "v1.3.0"

    def test_zero(self):
        version = compute_next_version(
            ReleaseType.PRODUCTION, VersionInfo(0, 0, 0, ReleaseType.DEVELOPMENT), [], ""
        )
        assert version.canonical == "v0.0.0"
