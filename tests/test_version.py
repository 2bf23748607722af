"""Tests for the version model: parsing, increments, prerelease tagging."""

import pytest
from gitsemver.errors import VersionParseError
from gitsemver.version import (
    IncrementLevel, Version, increment, parse_version, with_prerelease,
)


class TestIncrementLevel:
    """Verify level parsing and ordering."""

    def test_parse_names(self):
        assert IncrementLevel.parse('major') is IncrementLevel.MAJOR
        assert IncrementLevel.parse('minor') is IncrementLevel.MINOR
        assert IncrementLevel.parse('patch') is IncrementLevel.PATCH

    def test_parse_case_insensitive(self):
        assert IncrementLevel.parse('Minor') is IncrementLevel.MINOR
        assert IncrementLevel.parse(' PATCH ') is IncrementLevel.PATCH

    def test_parse_passthrough(self):
        assert IncrementLevel.parse(IncrementLevel.MAJOR) is IncrementLevel.MAJOR

    def test_parse_invalid(self):
        with pytest.raises(ValueError, match="invalid increment level"):
            IncrementLevel.parse('feature')

    def test_ordering(self):
        assert IncrementLevel.MAJOR > IncrementLevel.MINOR > IncrementLevel.PATCH
        assert max(IncrementLevel) is IncrementLevel.MAJOR

    def test_ordering_inclusive(self):
        assert IncrementLevel.MAJOR >= IncrementLevel.MINOR
        assert IncrementLevel.PATCH <= IncrementLevel.MINOR
        assert IncrementLevel.MINOR <= IncrementLevel.MINOR
        assert not IncrementLevel.PATCH >= IncrementLevel.MAJOR

    def test_str(self):
        assert str(IncrementLevel.MINOR) == 'minor'


class TestParseVersion:
    """Verify tag names are parsed strictly."""

    def test_plain(self):
        v = parse_version('1.2.3')
        assert (v.major, v.minor, v.patch) == (1, 2, 3)
        assert v.prerelease is None

    def test_prerelease_and_build(self):
        v = parse_version('1.2.3-rc.1+build.5')
        assert v.prerelease == 'rc.1'
        assert v.build == 'build.5'

    def test_prefix_stripped(self):
        assert parse_version('v1.2.3', prefix='v') == Version(1, 2, 3)

    def test_prefix_optional(self):
        """A name without the prefix still parses."""
        assert parse_version('1.2.3', prefix='v') == Version(1, 2, 3)

    def test_prefix_not_stripped_by_default(self):
        with pytest.raises(VersionParseError):
            parse_version('v1.2.3')

    @pytest.mark.parametrize('name', ['release', '1.2', '1.2.3.4', '01.2.3', ''])
    def test_invalid(self, name):
        with pytest.raises(VersionParseError):
            parse_version(name)


class TestIncrement:
    """Verify increments reset lower fields and clear metadata."""

    def test_major(self):
        assert increment(Version(1, 2, 3), IncrementLevel.MAJOR) == Version(2, 0, 0)

    def test_minor(self):
        assert increment(Version(1, 2, 3), IncrementLevel.MINOR) == Version(1, 3, 0)

    def test_patch(self):
        assert increment(Version(1, 2, 3), IncrementLevel.PATCH) == Version(1, 2, 4)

    def test_accepts_level_name(self):
        assert increment(Version(1, 2, 3), 'minor') == Version(1, 3, 0)

    def test_clears_prerelease_and_build(self):
        v = increment(parse_version('1.2.3-rc.1+abc'), IncrementLevel.PATCH)
        assert str(v) == '1.2.4'

    @pytest.mark.parametrize('level', list(IncrementLevel))
    @pytest.mark.parametrize('start', ['0.0.0', '1.2.3', '1.2.3-alpha', '9.9.9+meta'])
    def test_strictly_increases(self, start, level):
        before = parse_version(start)
        assert increment(before, level) > before

    def test_does_not_mutate(self):
        v = Version(1, 0, 0)
        increment(v, IncrementLevel.MAJOR)
        assert v == Version(1, 0, 0)


class TestWithPrerelease:
    """Verify prerelease replacement."""

    def test_sets_prerelease(self):
        v = with_prerelease(Version(2, 3, 4), 'my-fix.abc1234')
        assert str(v) == '2.3.4-my-fix.abc1234'

    def test_replaces_existing(self):
        v = with_prerelease(parse_version('2.3.4-rc.1'), 'feature.1')
        assert str(v) == '2.3.4-feature.1'

    def test_keeps_triple(self):
        v = with_prerelease(Version(2, 3, 4), 'x')
        assert (v.major, v.minor, v.patch) == (2, 3, 4)

    def test_sorts_before_release(self):
        assert with_prerelease(Version(2, 3, 4), 'x.1') < Version(2, 3, 4)

    @pytest.mark.parametrize('identifier', ['', '.abc', 'bad..dots', 'spa ce', 'x.1+meta'])
    def test_invalid_identifier(self, identifier):
        with pytest.raises(VersionParseError):
            with_prerelease(Version(1, 0, 0), identifier)

    def test_plus_not_taken_as_build(self):
        with pytest.raises(VersionParseError, match="x.1\\+meta"):
            with_prerelease(Version(2, 3, 4), 'x.1+meta')

    def test_base_build_kept(self):
        v = with_prerelease(parse_version('2.3.4+ci.9'), 'x.1')
        assert (v.prerelease, v.build) == ('x.1', 'ci.9')
