"""In-memory commit graph.

Holds a hand-built graph of commits, branches and tags. Used by the test
suite and by callers that want to resolve a version without a checkout.
"""

from gitsemver.errors import RepositoryError
from gitsemver.repositories.base import RepositoryBase, TagRef


class InMemoryRepository(RepositoryBase):

    def __init__(self, commits=(), branches=None, tags=(), head=None,
                 head_ref=None, short_length=7):
        self._commits = {c.id: c for c in commits}
        self._branches = dict(branches or {})
        self._tags = [t if isinstance(t, TagRef) else TagRef(*t) for t in tags]
        self._head = head
        self._head_ref = head_ref
        self._short_length = short_length

    def head(self):
        if self._head is None:
            raise RepositoryError("reference 'HEAD' not found")
        return self.get_commit(self._head)

    def head_shorthand(self):
        return self._head_ref or "HEAD"

    def branch_tip(self, name):
        try:
            commit_id = self._branches[name]
        except KeyError:
            raise RepositoryError(f"cannot locate local branch '{name}'") from None
        return self.get_commit(commit_id)

    def get_commit(self, commit_id):
        try:
            return self._commits[commit_id]
        except KeyError:
            raise RepositoryError(f"commit {commit_id} not found") from None

    def tags(self):
        return iter(self._tags)

    def short_id(self, commit):
        return commit.id[:self._short_length]
