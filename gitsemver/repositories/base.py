"""Abstract base class for read-only commit graph access."""

from abc import ABC, abstractmethod


class CommitInfo:
    """A commit as seen by the resolver."""

    def __init__(self, id, timestamp, parents=(), summary=None):
        self.id = id
        self.timestamp = timestamp        # committer time, seconds since epoch
        self.parents = tuple(parents)     # parents[0] is the mainline parent
        self.summary = summary            # first line of the message, or None

    def __eq__(self, other):
        if not isinstance(other, CommitInfo):
            return NotImplemented
        return self.id == other.id

    def __hash__(self):
        return hash(self.id)

    def __repr__(self):
        return (f"CommitInfo(id={self.id!r}, timestamp={self.timestamp}, "
                f"summary={self.summary!r})")


class TagRef:
    """A tag reference.

    ``target`` is what the ref points at: the commit for a lightweight tag,
    the tag object for an annotated one. ``peeled`` is the commit an
    annotated tag resolves to (None for lightweight tags).
    """

    def __init__(self, name, target, peeled=None):
        self.name = name
        self.target = target
        self.peeled = peeled

    def __repr__(self):
        return f"TagRef(name={self.name!r}, target={self.target!r}, peeled={self.peeled!r})"


class RepositoryBase(ABC):
    """Abstract interface for reading a repository's commit graph.

    Implementations never modify the repository.
    """

    @abstractmethod
    def head(self):
        """Return the CommitInfo HEAD resolves to."""
        pass

    @abstractmethod
    def head_shorthand(self):
        """Return HEAD's short ref name (branch name, or 'HEAD' if detached)."""
        pass

    @abstractmethod
    def branch_tip(self, name):
        """Return the CommitInfo at the tip of local branch ``name``."""
        pass

    @abstractmethod
    def get_commit(self, commit_id):
        """Return the CommitInfo for ``commit_id``."""
        pass

    @abstractmethod
    def tags(self):
        """Yield a TagRef for every tag reference."""
        pass

    @abstractmethod
    def short_id(self, commit):
        """Return the abbreviated id of ``commit``."""
        pass

    def first_parent(self, commit):
        """Return the mainline parent of ``commit``, or None for a root commit."""
        if not commit.parents:
            return None
        return self.get_commit(commit.parents[0])

    def walk_first_parent(self, commit):
        """Yield ``commit`` and then each first parent back to the root.

        Backends that can stream history faster may override this.
        """
        while commit is not None:
            yield commit
            commit = self.first_parent(commit)
