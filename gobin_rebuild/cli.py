"""
Command line entry point.

Rebuilds binaries in GOBIN that were built with a Go version different
from the active one, using ``go install path@version``. With ``-u``
every binary is reinstalled at ``@latest`` instead.
"""

from __future__ import annotations

import argparse
import sys
from typing import Sequence

from . import __version__
from .commands import CommandRunner, SubprocessRunner
from .config import Config, load_config
from .executor import BatchOutcome, execute_plan
from .inventory import parse_inventory
from .logging_config import get_logger, setup_logging
from .planner import describe_drift, plan_rebuilds
from .report import print_report, render_plan_table
from .toolchain import DiscoveryError, get_go_version, get_gobin, inspect_gobin


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="rebuild-gobin",
        description=(
            "Rebuild binaries under GOBIN that were built with a Go version "
            "different from the currently installed one."
        ),
    )
    parser.add_argument(
        "-u", dest="upgrade", action="store_true",
        help="reinstall programs using their '@latest' version",
    )
    parser.add_argument(
        "-n", "--dry-run", action="store_true",
        help="show what would be rebuilt without running go install",
    )
    parser.add_argument("-v", "--verbose", action="store_true", help="enable debug output")
    parser.add_argument("-q", "--quiet", action="store_true", help="only show warnings and errors")
    parser.add_argument("--config", metavar="PATH", help="path to a configuration file")
    parser.add_argument("--log-file", metavar="PATH", help="also write a debug log to PATH")
    parser.add_argument("--version", action="version", version=f"%(prog)s {__version__}")
    return parser


def run(
    upgrade: bool = False,
    config: Config | None = None,
    runner: CommandRunner | None = None,
    dry_run: bool = False,
    verbose: bool = False,
) -> BatchOutcome:
    """
    Inspect GOBIN, plan and execute rebuilds, and report problems.

    Raises:
        DiscoveryError: If GOBIN, its inventory or the go version cannot be determined
    """
    logger = get_logger()
    config = config or Config()
    runner = runner or SubprocessRunner()
    go = config.go_command
    timeouts = config.timeouts

    gobin = get_gobin(runner, go, timeouts.env_seconds, verbose)
    text = inspect_gobin(runner, gobin, go, timeouts.inspect_seconds)
    records = parse_inventory(gobin, text)
    logger.debug(f"Found {len(records)} binaries with module information in {gobin}")

    active_version = get_go_version(runner, go, timeouts.env_seconds)
    logger.debug(f"Active toolchain: {active_version}")

    items = plan_rebuilds(records, active_version, upgrade)
    for item in items:
        if item.needs_rebuild():
            logger.debug(f"{item.path}: {describe_drift(item.record, active_version)}")

    if dry_run:
        print(render_plan_table(items))

    outcome = execute_plan(items, runner, go, dry_run=dry_run)
    logger.debug(outcome.summary())
    print_report(outcome, logger)
    return outcome


def main(argv: Sequence[str] | None = None) -> int:
    args = build_parser().parse_args(argv)
    logger = setup_logging(verbose=args.verbose, quiet=args.quiet, log_file=args.log_file)

    try:
        config = load_config(args.config, verbose=args.verbose)
    except ValueError as e:
        logger.error(str(e))
        return 1

    try:
        run(
            upgrade=args.upgrade or config.upgrade,
            config=config,
            dry_run=args.dry_run,
            verbose=args.verbose,
        )
    except DiscoveryError as e:
        logger.error(str(e))
        return 1
    except KeyboardInterrupt:
        logger.error("interrupted")
        return 130
    return 0


if __name__ == "__main__":
    sys.exit(main())
