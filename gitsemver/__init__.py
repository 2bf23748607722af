"""Derive a semantic version for the HEAD commit from git tags and history."""

from gitsemver._version import __version__, __app_name__, PIP_VERSION

__all__ = ["__version__", "__app_name__", "PIP_VERSION"]
