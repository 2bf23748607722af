"""Core version resolution logic (repository-agnostic).

Resolution walks first-parent history backward from HEAD to the nearest
commit carrying a semantic version tag, collecting one increment decision
per commit on the way. On the main branch every decision is applied to the
tag's version, oldest first. Anywhere else HEAD's own decision is dropped
and the result becomes a prerelease named after the branch and commit.
"""

import contextlib
import logging
import re

from gitsemver.errors import ConfigurationError, DerivationError, VersionParseError
from gitsemver.version import (
    ZERO, IncrementLevel, increment, parse_version, with_prerelease,
)

logger = logging.getLogger(__name__)

DEFAULT_MAIN_BRANCH = "main"
DEFAULT_INCREMENT = IncrementLevel.PATCH
DEFAULT_MATCH_EXPRESSION = r"^Merge .*(patch|minor|major)/[\w-]+"


def _parse_level(value, option):
    if value is None:
        return None
    try:
        return IncrementLevel.parse(value)
    except ValueError as e:
        raise ConfigurationError(f"{option}: {e}") from None


class ResolveOptions:
    """Settings for one resolution run.

    Values are validated on construction so a bad match expression or
    increment level fails before the repository is touched.

      main_branch:         local branch whose first-parent history produces
                           release versions
      prerelease_id:       prerelease identifier (default: last path
                           segment of the current branch name)
      prerelease_revision: prerelease revision (default: short commit id)
      increment:           level forced for HEAD, ignoring its summary
      default_increment:   level for commits whose summary does not match;
                           None means such commits are an error
      match_expression:    regex whose first group names an increment level
      skip_unmatched:      unmatched ancestors contribute no increment
                           (never applies to HEAD)
      tag_prefix:          prefix stripped from tag names before parsing
    """

    def __init__(self, main_branch=DEFAULT_MAIN_BRANCH, prerelease_id=None,
                 prerelease_revision=None, increment=None,
                 default_increment=DEFAULT_INCREMENT,
                 match_expression=DEFAULT_MATCH_EXPRESSION,
                 skip_unmatched=False, tag_prefix=""):
        self.main_branch = main_branch
        self.prerelease_id = prerelease_id
        self.prerelease_revision = prerelease_revision
        self.increment = _parse_level(increment, "increment")
        self.default_increment = _parse_level(default_increment, "default increment")
        self.match_expression = match_expression
        self.skip_unmatched = skip_unmatched
        self.tag_prefix = tag_prefix or ""

        try:
            self.pattern = re.compile(match_expression)
        except re.error as e:
            raise ConfigurationError(
                f"invalid match expression {match_expression!r}: {e}"
            ) from None
        if self.pattern.groups < 1:
            raise ConfigurationError(
                f"match expression {match_expression!r} needs a capture group "
                "naming the increment level"
            )

    @classmethod
    def from_args(cls, args):
        """Build options from parsed command-line arguments."""
        return cls(
            main_branch=args.main_branch,
            prerelease_id=args.prerelease_id,
            prerelease_revision=args.prerelease_revision,
            increment=args.increment,
            default_increment=args.default_increment,
            match_expression=args.match_expression,
            skip_unmatched=args.skip_unmatched_commits,
            tag_prefix=args.tag_prefix,
        )


class IncrementRecord:
    """The increment one commit contributes (level None = contributes nothing)."""

    def __init__(self, commit_id, level, summary=None):
        self.commit_id = commit_id
        self.level = level
        self.summary = summary

    def __eq__(self, other):
        if not isinstance(other, IncrementRecord):
            return NotImplemented
        return (self.commit_id, self.level) == (other.commit_id, other.level)

    def __repr__(self):
        return f"IncrementRecord(commit_id={self.commit_id!r}, level={self.level})"


class Resolution:
    """Outcome of a resolution run."""

    def __init__(self, version, base_version, head, branch, head_is_main,
                 tag_commit=None, increments=()):
        self.version = version
        self.base_version = base_version
        self.head = head
        self.branch = branch
        self.head_is_main = head_is_main
        self.tag_commit = tag_commit
        self.increments = list(increments)  # walk order: HEAD first

    @property
    def head_is_tagged(self):
        return self.tag_commit is not None and self.tag_commit == self.head.id

    def to_dict(self):
        return {
            'version': str(self.version),
            'base_version': str(self.base_version),
            'tag_commit': self.tag_commit,
            'head': self.head.id,
            'branch': self.branch,
            'head_is_main': self.head_is_main,
            'head_is_tagged': self.head_is_tagged,
            'increments': [
                {
                    'commit': r.commit_id,
                    'level': r.level.value if r.level is not None else None,
                    'summary': r.summary,
                }
                for r in reversed(self.increments)
            ],
        }

    def __str__(self):
        return str(self.version)


def slug(s):
    """Lowercase ``s`` and collapse every run of non-alphanumerics to one hyphen.

    >>> slug("feature/My Fix!")
    'my-fix'
    """
    return re.sub(r"[\W_]+", "-", s).strip("-").lower()


def build_tag_index(repository, prefix=""):
    """Map commit (and tag object) ids to the version their tag names.

    Tags whose names are not semantic versions are ignored. Annotated tags
    are indexed under both the tag object and the commit it points at.
    When two tags land on the same id the highest version wins (ties broken
    by the greater tag name), whatever order the repository lists them in.
    """
    index = {}
    names = {}
    for ref in repository.tags():
        try:
            version = parse_version(ref.name, prefix)
        except VersionParseError:
            logger.debug(f"Ignoring non-semver tag {ref.name!r}")
            continue
        for commit_id in (ref.target, ref.peeled):
            if commit_id is None:
                continue
            existing = index.get(commit_id)
            if existing is not None and names[commit_id] != ref.name:
                keep = (existing, names[commit_id]) > (version, ref.name)
                logger.warning(
                    f"Tags {names[commit_id]!r} and {ref.name!r} both point at "
                    f"{commit_id[:12]}; using {existing if keep else version}"
                )
                if keep:
                    continue
            index[commit_id] = version
            names[commit_id] = ref.name
    logger.debug(f"Indexed {len(index)} tagged id(s)")
    return index


def is_on_branch(repository, target, branch_tip):
    """Return True if ``target`` is in the first-parent history of ``branch_tip``.

    The walk stops as soon as it reaches a commit older than ``target``,
    which assumes committer timestamps never decrease along first-parent
    history. A commit rewritten with an older timestamp can therefore be
    reported as off-branch.
    """
    with contextlib.closing(repository.walk_first_parent(branch_tip)) as walk:
        for commit in walk:
            if commit.id == target.id:
                return True
            if commit.timestamp < target.timestamp:
                return False
    return False


def _summary_level(summary, pattern):
    if summary is None:
        return None
    match = pattern.search(summary)
    if match is None or match.group(1) is None:
        return None
    try:
        return IncrementLevel.parse(match.group(1))
    except ValueError:
        logger.debug(f"Captured {match.group(1)!r} is not an increment level")
        return None


def classify_commit(commit, options, is_head=False):
    """Decide which increment ``commit`` contributes.

    Order: forced increment (HEAD only), then the level named by the
    match expression, then the default level. With skip_unmatched an
    unmatched ancestor yields None; HEAD always gets a level.
    """
    if is_head and options.increment is not None:
        return options.increment
    level = _summary_level(commit.summary, options.pattern)
    if level is not None:
        return level
    if options.skip_unmatched and not is_head:
        return None
    if options.default_increment is None:
        raise DerivationError(
            f"cannot derive version increment level from commit summary "
            f"of {commit.id}: {commit.summary!r}"
        )
    return options.default_increment


def locate_tag(repository, head, tag_index, options, head_is_main=True):
    """Walk back from ``head`` to the nearest tagged commit.

    Returns ``(base_version, tag_commit_id, records)``. ``records`` holds an
    IncrementRecord for every commit passed before the tag, HEAD first.
    Off the main branch HEAD is not classified and its record has no level.
    Without any tag in history the base version is 0.0.0 and the tag commit
    is None.
    """
    records = []
    with contextlib.closing(repository.walk_first_parent(head)) as walk:
        for commit in walk:
            version = tag_index.get(commit.id)
            if version is not None:
                logger.debug(f"Nearest tag {version} at {commit.id}")
                return version, commit.id, records
            if commit.id != head.id:
                level = classify_commit(commit, options)
            elif head_is_main:
                level = classify_commit(commit, options, is_head=True)
            else:
                level = None
            logger.debug(f"{commit.id[:12]} -> {level or 'none'}: {commit.summary}")
            records.append(IncrementRecord(commit.id, level, commit.summary))
    logger.debug("No version tag in history, starting from 0.0.0")
    return ZERO, None, records


def apply_increments(version, records):
    """Apply ``records`` (walk order, newest first) oldest first."""
    for record in reversed(records):
        if record.level is not None:
            version = increment(version, record.level)
    return version


def prerelease_identifier(repository, head, branch, options):
    """Build "<id>.<revision>" for a non-main HEAD.

    Without an explicit id the last path segment of the branch name is used,
    so "feature/My Fix!" becomes "my-fix".
    """
    if options.prerelease_id is not None:
        name = options.prerelease_id
    else:
        name = branch.rsplit("/", 1)[-1]
    revision = options.prerelease_revision
    if revision is None:
        revision = repository.short_id(head)
    return f"{slug(name)}.{revision}"


def resolve(repository, options=None):
    """Resolve the version of ``repository``'s HEAD. Returns a Resolution."""
    if options is None:
        options = ResolveOptions()

    head = repository.head()
    branch = repository.head_shorthand()
    main_tip = repository.branch_tip(options.main_branch)
    head_is_main = is_on_branch(repository, head, main_tip)
    logger.debug(f"HEAD {head.id} on {branch!r}, "
                 f"{'on' if head_is_main else 'not on'} {options.main_branch!r}")

    tag_index = build_tag_index(repository, options.tag_prefix)
    base, tag_commit, records = locate_tag(repository, head, tag_index, options,
                                           head_is_main=head_is_main)
    result = Resolution(base, base, head, branch, head_is_main,
                        tag_commit=tag_commit, increments=records)

    if result.head_is_tagged:
        logger.debug(f"HEAD already tagged {base}")
        return result

    result.version = apply_increments(base, records)
    if not head_is_main:
        identifier = prerelease_identifier(repository, head, branch, options)
        result.version = with_prerelease(result.version, identifier)
    logger.debug(f"Resolved {base} -> {result.version}")
    return result
