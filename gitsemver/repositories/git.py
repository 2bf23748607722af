"""git command line implementation of commit graph access.

Only read-only plumbing commands are used. Every invocation passes
``-c safe.directory=*`` so repositories owned by another user (CI
containers, mounted volumes) can be read without touching global config.
"""

import logging
import os
import subprocess

from gitsemver.errors import RepositoryError
from gitsemver.repositories.base import CommitInfo, RepositoryBase, TagRef

logger = logging.getLogger(__name__)

GIT = "git"

# One commit per line: id, committer time, parent ids, subject.
# The subject (%s) never contains a newline.
FIELD_SEP = "\x1f"
LOG_FORMAT = "%H%x1f%ct%x1f%P%x1f%s"
TAG_FORMAT = "%(refname)%1f%(objectname)%1f%(objecttype)%1f%(*objectname)"
TAG_PREFIX = "refs/tags/"


def _parse_commit(line):
    commit_id, timestamp, parents, summary = line.rstrip("\r\n").split(FIELD_SEP, 3)
    return CommitInfo(
        id=commit_id,
        timestamp=int(timestamp),
        parents=parents.split(),
        summary=summary or None,
    )


class GitRepository(RepositoryBase):

    def __init__(self, path="."):
        self.path = os.fspath(path)
        self._commits = {}
        self.git_dir = self._git("rev-parse", "--git-dir").strip()
        logger.debug(f"Opened repository at {self.path} (git dir: {self.git_dir})")

    def _command(self, *args):
        return [GIT, "-c", "safe.directory=*", "-C", self.path, *args]

    def _git(self, *args, check=True):
        """Run a git command and return its stdout.

        With check=False a non-zero exit returns None instead of raising.
        """
        cmd = self._command(*args)
        logger.debug(f"Running: {' '.join(cmd)}")
        try:
            proc = subprocess.run(
                cmd, capture_output=True, encoding="utf-8", errors="replace",
            )
        except FileNotFoundError as e:
            raise RepositoryError(f"git executable not found: {GIT}") from e
        except OSError as e:
            raise RepositoryError(f"failed to run git: {e}") from e
        if proc.returncode != 0:
            if not check:
                return None
            message = proc.stderr.strip() or f"exit status {proc.returncode}"
            raise RepositoryError(f"git {args[0]} failed: {message}")
        return proc.stdout

    def _resolve(self, revision):
        out = self._git("rev-parse", "--verify", "--quiet", f"{revision}^{{commit}}",
                        check=False)
        if not out:
            return None
        return out.strip()

    def head(self):
        commit_id = self._resolve("HEAD")
        if commit_id is None:
            raise RepositoryError("reference 'HEAD' not found")
        return self.get_commit(commit_id)

    def head_shorthand(self):
        return self._git("rev-parse", "--abbrev-ref", "HEAD").strip()

    def branch_tip(self, name):
        commit_id = self._resolve(f"refs/heads/{name}")
        if commit_id is None:
            raise RepositoryError(f"cannot locate local branch '{name}'")
        return self.get_commit(commit_id)

    def get_commit(self, commit_id):
        commit = self._commits.get(commit_id)
        if commit is None:
            out = self._git("log", "-1", "--no-show-signature",
                            f"--format={LOG_FORMAT}", commit_id, "--")
            if not out.strip():
                raise RepositoryError(f"commit {commit_id} not found")
            commit = _parse_commit(out)
            self._commits[commit.id] = commit
        return commit

    def walk_first_parent(self, commit):
        """Stream first-parent history from a single ``git log`` process.

        The process is killed if the caller stops iterating early, so
        finding a recent tag does not read the whole history.
        """
        cmd = self._command("log", "--first-parent", "--no-show-signature",
                            f"--format={LOG_FORMAT}", commit.id, "--")
        logger.debug(f"Running: {' '.join(cmd)}")
        try:
            proc = subprocess.Popen(
                cmd, stdout=subprocess.PIPE, stderr=subprocess.PIPE,
                encoding="utf-8", errors="replace",
            )
        except FileNotFoundError as e:
            raise RepositoryError(f"git executable not found: {GIT}") from e
        except OSError as e:
            raise RepositoryError(f"failed to run git: {e}") from e

        finished = False
        try:
            for line in proc.stdout:
                if not line.strip():
                    continue
                current = _parse_commit(line)
                self._commits.setdefault(current.id, current)
                yield current
            finished = True
        finally:
            if not finished:
                proc.kill()
            _, stderr = proc.communicate()

        if proc.returncode != 0:
            message = stderr.strip() or f"exit status {proc.returncode}"
            raise RepositoryError(f"git log failed: {message}")

    def tags(self):
        out = self._git("for-each-ref", f"--format={TAG_FORMAT}", "refs/tags")
        for line in out.splitlines():
            if not line.strip():
                continue
            refname, objectname, objecttype, peeled = line.split(FIELD_SEP, 3)
            name = refname[len(TAG_PREFIX):] if refname.startswith(TAG_PREFIX) else refname
            yield TagRef(
                name=name,
                target=objectname,
                peeled=(peeled or None) if objecttype == "tag" else None,
            )

    def short_id(self, commit):
        return self._git("rev-parse", "--short", commit.id).strip()
