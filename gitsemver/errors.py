"""Exceptions raised by gitsemver.

Everything fatal derives from GitSemverError so the CLI has a single
place to turn failures into an error message and a non-zero exit.
"""


class GitSemverError(RuntimeError):
    """Base class for fatal gitsemver errors."""


class ConfigurationError(GitSemverError):
    """Invalid option value, e.g. a match expression that does not compile."""


class RepositoryError(GitSemverError):
    """The repository could not be read (no repo, no HEAD, missing branch...)."""


class DerivationError(GitSemverError):
    """No increment level could be derived for a commit."""


class VersionParseError(ValueError):
    """A string is not a valid semantic version."""
