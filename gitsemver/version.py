"""Semantic version model: parsing, increments and prerelease tagging.

Versions are ``semver.Version`` values, which already implement semantic
versioning precedence (numeric triple first, then prerelease identifiers,
build metadata ignored). Everything here returns new values; nothing
mutates a version in place.
"""

import enum
import functools

import semver

from gitsemver.errors import VersionParseError

Version = semver.Version

ZERO = Version(0, 0, 0)


@functools.total_ordering
class IncrementLevel(enum.Enum):
    """Which part of the version a commit bumps."""

    MAJOR = "major"
    MINOR = "minor"
    PATCH = "patch"

    @property
    def rank(self):
        return _RANKS[self]

    def __lt__(self, other):
        if not isinstance(other, IncrementLevel):
            return NotImplemented
        return self.rank < other.rank

    def __str__(self):
        return self.value

    @classmethod
    def parse(cls, name):
        """Parse 'major', 'minor' or 'patch' (case-insensitive).

        Raises ValueError for anything else, so it can be used directly as
        an argparse ``type=``.
        """
        if isinstance(name, cls):
            return name
        try:
            return cls(str(name).strip().lower())
        except ValueError:
            choices = ", ".join(level.value for level in cls)
            raise ValueError(
                f"invalid increment level {name!r} (choose from {choices})"
            ) from None


_RANKS = {
    IncrementLevel.PATCH: 0,
    IncrementLevel.MINOR: 1,
    IncrementLevel.MAJOR: 2,
}


def parse_version(name, prefix=""):
    """Parse a tag name into a Version.

    ``prefix`` is stripped from the front of ``name`` when present (e.g.
    ``"v"`` for ``v1.2.3`` tags). Raises VersionParseError when the rest is
    not a strict ``MAJOR.MINOR.PATCH[-PRE][+BUILD]`` string.
    """
    text = name
    if prefix and text.startswith(prefix):
        text = text[len(prefix):]
    try:
        return Version.parse(text)
    except (ValueError, TypeError) as e:
        raise VersionParseError(f"not a semantic version: {name!r}") from e


def increment(version, level):
    """Return ``version`` bumped by ``level``, with prerelease and build cleared."""
    level = IncrementLevel.parse(level)
    if level is IncrementLevel.MAJOR:
        return version.bump_major()
    if level is IncrementLevel.MINOR:
        return version.bump_minor()
    return version.bump_patch()


def with_prerelease(version, identifier):
    """Return ``version`` with its prerelease replaced by ``identifier``.

    The result is re-parsed so an identifier that would make an invalid
    version (empty, illegal characters, empty dot-separated part) raises
    VersionParseError instead of producing a broken string. The parsed
    prerelease must equal ``identifier`` exactly, so a ``+`` cannot slip
    through as build metadata.
    """
    if not identifier:
        raise VersionParseError("prerelease identifier is empty")
    candidate = version.replace(prerelease=identifier)
    try:
        parsed = Version.parse(str(candidate))
    except ValueError as e:
        raise VersionParseError(
            f"invalid prerelease identifier {identifier!r}"
        ) from e
    if parsed.prerelease != identifier:
        raise VersionParseError(f"invalid prerelease identifier {identifier!r}")
    return parsed
