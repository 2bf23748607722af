"""
Version information for gitsemver.

This file is the canonical source for version numbers. setup.py reads it
with exec (the package isn't installed yet at build time).

Format: MAJOR.MINOR.PATCH[-PHASE]
Example: 0.3.0-beta

To bump version: edit MAJOR, MINOR, PATCH below
"""

# Version components - edit these for version bumps
MAJOR = 0
MINOR = 3
PATCH = 0
PHASE = None  # None, "alpha", "beta", "rc1", etc.
PRE_RELEASE_NUM = 0  # PEP 440 pre-release number (e.g., a1, b2)

__app_name__ = "git-semver"


def get_version():
    """Return the semantic version string (MAJOR.MINOR.PATCH[-PHASE])."""
    base = f"{MAJOR}.{MINOR}.{PATCH}"
    if PHASE:
        base = f"{base}-{PHASE}"
    return base


def get_pip_version():
    """
    Return PEP 440 compliant version for pip/setuptools.

    - 0.3.0        -> 0.3.0
    - 0.3.0-alpha  -> 0.3.0a0
    - 0.3.0-rc1    -> 0.3.0rc1
    """
    base = f"{MAJOR}.{MINOR}.{PATCH}"
    phase_map = {"alpha": f"a{PRE_RELEASE_NUM}", "beta": f"b{PRE_RELEASE_NUM}"}
    if PHASE:
        base += phase_map.get(PHASE, PHASE)
    return base


__version__ = get_version()

# For convenience in imports
VERSION = __version__
PIP_VERSION = get_pip_version()
