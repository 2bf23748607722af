"""Command-line interface for git-semver."""

import argparse
import json
import logging
import sys

from gitsemver import __version__, __app_name__
from gitsemver.core import (
    DEFAULT_INCREMENT, DEFAULT_MAIN_BRANCH, DEFAULT_MATCH_EXPRESSION,
    ResolveOptions, resolve,
)
from gitsemver.errors import GitSemverError, VersionParseError
from gitsemver.repositories import open_repository
from gitsemver.version import IncrementLevel


def _increment_level(value):
    try:
        return IncrementLevel.parse(value)
    except ValueError as e:
        raise argparse.ArgumentTypeError(str(e)) from None


def build_parser():
    parser = argparse.ArgumentParser(
        prog=__app_name__,
        description="Generate a semantic versioning compliant tag for your HEAD commit.",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""\
examples:
  %(prog)s                                 Version for HEAD (release on main, prerelease elsewhere)
  %(prog)s -m master                       Treat "master" as the main branch
  %(prog)s -i minor                        Force a minor bump for HEAD
  %(prog)s -p rc -r 1                      Prerelease "rc.1" instead of <branch>.<short id>
  %(prog)s --skip-unmatched-commits        Only merges naming a level bump the version
  %(prog)s --tag-prefix v                  Read tags written as v1.2.3
  %(prog)s --json                          Show how the version was derived

how it works:
  Walks first-parent history from HEAD to the nearest semver tag (0.0.0 if
  none). Each commit on the way contributes the level named by the first
  group of --match-expression in its summary, else --default-increment.
  On the main branch all increments are applied oldest first. On any other
  branch HEAD's own increment is dropped and the version gets a prerelease
  of <branch slug>.<short commit id>. A tagged HEAD prints its tag as is.

The repository is only read, never modified.""",
    )
    parser.add_argument(
        '--version', action='version',
        version=f'{__app_name__} {__version__}'
    )
    parser.add_argument(
        '--main-branch', '-m', default=DEFAULT_MAIN_BRANCH,
        help='Name of the main branch, e.g. "master" or "trunk" (default: %(default)s)'
    )
    parser.add_argument(
        '--prerelease-id', '-p', default=None,
        help='Prerelease identifier for non-main branches '
             '(default: slug of the last segment of the branch name)'
    )
    parser.add_argument(
        '--prerelease-revision', '-r', default=None,
        help='Prerelease revision for non-main branches (default: short commit hash)'
    )
    parser.add_argument(
        '--increment', '-i', type=_increment_level, default=None,
        metavar='LEVEL',
        help='Force the increment level for HEAD (major, minor or patch), '
             'ignoring its commit summary'
    )
    parser.add_argument(
        '--default-increment', type=_increment_level, default=DEFAULT_INCREMENT,
        metavar='LEVEL',
        help='Increment level for commits whose summary does not match, '
             'e.g. direct commits to main (default: %(default)s)'
    )
    parser.add_argument(
        '--match-expression', '-e', default=DEFAULT_MATCH_EXPRESSION,
        metavar='REGEX',
        help='Regular expression whose first group names the increment level '
             'in a commit summary (default: %(default)s)'
    )
    parser.add_argument(
        '--skip-unmatched-commits', action='store_true',
        help='Ancestor commits whose summary does not match contribute no increment'
    )
    parser.add_argument(
        '--tag-prefix', default='', metavar='PREFIX',
        help='Prefix stripped from tag names before parsing, e.g. "v"'
    )
    parser.add_argument(
        '--directory', '-C', default='.', metavar='PATH',
        help='Repository to read (default: current directory)'
    )
    parser.add_argument(
        '--json', dest='json_output', action='store_true',
        help='Output the version and how it was derived as JSON'
    )
    parser.add_argument(
        '--verbose', '-v', action='store_true',
        help='Verbose logging output (on stderr)'
    )
    return parser


def main(argv=None):
    parser = build_parser()
    args = parser.parse_args(argv)

    # Logging goes to stderr; stdout carries only the version
    level = logging.DEBUG if args.verbose else logging.WARNING
    logging.basicConfig(
        level=level,
        format='%(levelname)s: %(message)s',
    )

    try:
        options = ResolveOptions.from_args(args)
        repository = open_repository(args.directory)
        result = resolve(repository, options)
    except (GitSemverError, VersionParseError) as e:
        print(f"Error: {e}", file=sys.stderr)
        sys.exit(1)

    if args.json_output:
        _print_json(result)
    else:
        print(result.version)


def _print_json(result):
    print(json.dumps(result.to_dict(), indent=2))
