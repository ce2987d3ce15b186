"""
Rebuild execution.

Runs ``go install path@version`` for every planned rebuild inside a
shared scratch directory, so the install is not affected by whatever
go.mod happens to be in the current directory. Failures are collected
in a ``BatchOutcome`` and never stop the batch.
"""

from __future__ import annotations

import shutil
import tempfile
from dataclasses import dataclass, field
from typing import Sequence

from .commands import CommandRunner, SubprocessRunner
from .logging_config import get_logger
from .planner import PlanItem, RebuildAction


SCRATCH_PREFIX = "rebuild-gobin-"


@dataclass
class BatchOutcome:
    """
    Accumulated per-item results of one run.

    Attributes:
        skipped_unrebuildable: Paths skipped because of the "(devel)" module version
        failed: Paths whose go install did not succeed
        rebuilt: Paths that were reinstalled successfully
    """
    skipped_unrebuildable: list[str] = field(default_factory=list)
    failed: list[str] = field(default_factory=list)
    rebuilt: list[str] = field(default_factory=list)

    def has_problems(self) -> bool:
        return bool(self.skipped_unrebuildable or self.failed)

    def summary(self) -> str:
        return (
            f"{len(self.rebuilt)} rebuilt, {len(self.failed)} failed, "
            f"{len(self.skipped_unrebuildable)} skipped (devel)"
        )


class ScratchDirectory:
    """
    Temporary working directory created on first use.

    Removed when the context exits, on every exit path, if it was ever
    created.
    """

    def __init__(self, prefix: str = SCRATCH_PREFIX):
        self.prefix = prefix
        self._path: str | None = None

    @property
    def created(self) -> bool:
        return self._path is not None

    @property
    def path(self) -> str:
        if self._path is None:
            self._path = tempfile.mkdtemp(prefix=self.prefix)
            get_logger().debug(f"Created scratch directory {self._path}")
        return self._path

    def cleanup(self) -> None:
        if self.created:
            shutil.rmtree(self._path, ignore_errors=True)
            get_logger().debug(f"Removed scratch directory {self._path}")
            self._path = None

    def __enter__(self) -> ScratchDirectory:
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.cleanup()


def validate_spec(spec: str) -> None:
    """
    Check a go install argument has the ``path@version`` shape.

    Raises:
        ValueError: If spec is empty or does not contain exactly one "@"
    """
    if not spec or spec.count("@") != 1:
        raise ValueError(f"invalid path@version spec: {spec!r}")
    path, _, version = spec.partition("@")
    if not path or not version:
        raise ValueError(f"invalid path@version spec: {spec!r}")


def rebuild(
    spec: str,
    workdir: str,
    runner: CommandRunner,
    go_command: str = "go",
) -> bool:
    """
    Run ``go install <spec>`` in ``workdir``.

    Output of the go tool goes straight to the terminal.

    Returns:
        True if go install exited with status 0
    """
    validate_spec(spec)
    command = [go_command, "install", spec]
    get_logger().info(f"running: {' '.join(command)}")
    exit_code = runner.stream(command, cwd=workdir)
    if exit_code != 0:
        get_logger().debug(f"{' '.join(command)}: exit status {exit_code}")
    return exit_code == 0


def execute_plan(
    items: Sequence[PlanItem],
    runner: CommandRunner | None = None,
    go_command: str = "go",
    dry_run: bool = False,
    outcome: BatchOutcome | None = None,
) -> BatchOutcome:
    """
    Carry out a rebuild plan in order.

    Args:
        items: Planned items
        runner: Command runner (subprocess-backed if None)
        go_command: Go executable
        dry_run: Only log the commands that would run
        outcome: Accumulator to extend (a fresh one if None)

    Returns:
        BatchOutcome with skipped and failed paths
    """
    logger = get_logger()
    if runner is None:
        runner = SubprocessRunner()
    if outcome is None:
        outcome = BatchOutcome()

    with ScratchDirectory() as scratch:
        for item in items:
            if item.action is RebuildAction.SKIP:
                logger.debug(f"{item.path}: up to date ({item.record.toolchain_version})")
                continue
            if item.action is RebuildAction.SKIP_UNREBUILDABLE:
                logger.debug(f"{item.path}: no module version to rebuild from")
                outcome.skipped_unrebuildable.append(item.path)
                continue

            spec = item.spec()
            if dry_run:
                logger.info(f"would run: {go_command} install {spec}")
                continue

            if rebuild(spec, scratch.path, runner, go_command):
                outcome.rebuilt.append(item.path)
            else:
                outcome.failed.append(item.path)

    return outcome
