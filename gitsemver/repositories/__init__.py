"""Read-only commit graph implementations."""

from gitsemver.repositories.base import CommitInfo, RepositoryBase, TagRef


def open_repository(path="."):
    """Return the repository implementation for ``path`` (a git working tree)."""
    from gitsemver.repositories.git import GitRepository
    return GitRepository(path)


__all__ = ["CommitInfo", "RepositoryBase", "TagRef", "open_repository"]
