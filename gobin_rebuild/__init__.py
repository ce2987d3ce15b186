"""
gobin-rebuild - Keep Go binaries in GOBIN in sync with the installed toolchain.

Core Modules:
- Discovery: GOBIN resolution, active go version, ``go version -m`` inventory
- Parsing: Binary records from ``go version -m`` output
- Planning: Skip / rebuild-pinned / rebuild-latest / skip-unrebuildable decisions
- Execution: ``go install path@version`` in a scratch directory
- Reporting: Summary of skipped and failed programs
"""

__version__ = "1.0.0"

VERSION = __version__

# Parsing
from .inventory import (
    DEVEL_VERSION,
    BinaryRecord,
    reduce_line,
    parse_inventory,
)

# Planning
from .planner import (
    LATEST,
    RebuildAction,
    PlanItem,
    plan_rebuild,
    plan_rebuilds,
    compare_toolchain_versions,
)

# Execution
from .commands import CommandRunner, SubprocessRunner, CommandError
from .executor import (
    BatchOutcome,
    ScratchDirectory,
    rebuild,
    execute_plan,
)

# Reporting
from .report import format_report, print_report, render_plan_table

# Discovery
from .toolchain import DiscoveryError, get_gobin, get_go_version, inspect_gobin

# Foundation
from .config import Config, Timeouts, load_config, load_config_file
from .logging_config import setup_logging, get_logger

__all__ = [
    # Version
    "__version__",
    "VERSION",
    # Parsing
    "DEVEL_VERSION",
    "BinaryRecord",
    "reduce_line",
    "parse_inventory",
    # Planning
    "LATEST",
    "RebuildAction",
    "PlanItem",
    "plan_rebuild",
    "plan_rebuilds",
    "compare_toolchain_versions",
    # Execution
    "CommandRunner",
    "SubprocessRunner",
    "CommandError",
    "BatchOutcome",
    "ScratchDirectory",
    "rebuild",
    "execute_plan",
    # Reporting
    "format_report",
    "print_report",
    "render_plan_table",
    # Discovery
    "DiscoveryError",
    "get_gobin",
    "get_go_version",
    "inspect_gobin",
    # Foundation
    "Config",
    "Timeouts",
    "load_config",
    "load_config_file",
    # Logging
    "setup_logging",
    "get_logger",
]
