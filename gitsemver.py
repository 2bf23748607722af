#!/usr/bin/env python3
"""Top-level wrapper script for git-semver.

Allows running directly: python gitsemver.py [args]
"""

from gitsemver.cli import main

if __name__ == "__main__":
    main()
