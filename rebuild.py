#!/usr/bin/env python3
"""
gobin-rebuild - Rebuild Go binaries after a toolchain upgrade.

Scans GOBIN (defaults to $GOPATH/bin) with "go version -m" to find the
module path, module version and Go version of each binary, then runs
"go install path@version" for every binary built with a Go version other
than the active one.

Usage:
    rebuild.py              # Rebuild binaries built with another Go version
    rebuild.py -u           # Reinstall every binary at @latest
    rebuild.py --dry-run    # Show the plan without installing anything
"""

import os
import sys

# Add current directory to path
sys.path.insert(0, os.path.dirname(os.path.abspath(__file__)))

from gobin_rebuild.cli import main


if __name__ == "__main__":
    sys.exit(main())
