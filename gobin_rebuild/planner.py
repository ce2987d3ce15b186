"""
Rebuild planning.

Decides per binary whether it has to be reinstalled and at which
version.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Sequence

from packaging import version as pkg_version

from .inventory import BinaryRecord


LATEST = "latest"


class RebuildAction(str, Enum):
    SKIP = "skip"
    REBUILD_PINNED = "rebuild-pinned"
    REBUILD_LATEST = "rebuild-latest"
    SKIP_UNREBUILDABLE = "skip-unrebuildable"


@dataclass(frozen=True)
class PlanItem:
    """
    Planned action for a single binary.

    Attributes:
        record: Record the decision was made for
        action: What to do with the binary
        target_version: Version to request from go install, None when not rebuilding
    """
    record: BinaryRecord
    action: RebuildAction
    target_version: str | None = None

    @property
    def path(self) -> str:
        return self.record.path

    def needs_rebuild(self) -> bool:
        return self.action in (RebuildAction.REBUILD_PINNED, RebuildAction.REBUILD_LATEST)

    def spec(self) -> str:
        """Return the ``path@version`` argument for go install."""
        if not self.needs_rebuild():
            raise ValueError(f"{self.path}: action {self.action.value} does not rebuild")
        return f"{self.path}@{self.target_version}"


def _toolchain_key(toolchain: str) -> pkg_version.Version:
    return pkg_version.parse(toolchain.strip().removeprefix("go"))


def compare_toolchain_versions(v1: str, v2: str) -> int:
    """
    Compare two Go toolchain version strings (e.g. "go1.20.5", "go1.22rc1").

    Returns:
        -1 if v1 < v2, 0 if v1 == v2, 1 if v1 > v2
    """
    try:
        ver1 = _toolchain_key(v1)
        ver2 = _toolchain_key(v2)
    except pkg_version.InvalidVersion:
        # devel toolchains ("devel +4de4480dc3 ...") have no ordering
        ver1, ver2 = v1, v2  # type: ignore[assignment]

    if ver1 < ver2:
        return -1
    elif ver1 > ver2:
        return 1
    else:
        return 0


def describe_drift(record: BinaryRecord, active_version: str) -> str:
    """Human-readable note on how the binary's toolchain relates to the active one."""
    cmp = compare_toolchain_versions(record.toolchain_version, active_version)
    if cmp < 0:
        relation = "older than"
    elif cmp > 0:
        relation = "newer than"
    elif record.toolchain_version == active_version:
        relation = "same as"
    else:
        relation = "equivalent to"
    return f"built with {record.toolchain_version}, {relation} active {active_version}"


def plan_rebuild(record: BinaryRecord, active_version: str, upgrade: bool = False) -> PlanItem:
    """
    Decide what to do with one binary.

    Without ``upgrade`` a binary built by the active toolchain is left
    alone. With ``upgrade`` every binary is reinstalled at ``@latest``,
    whatever toolchain built it. Binaries with a "(devel)" module
    version cannot be reinstalled from the module proxy and are
    reported instead.

    Args:
        record: Valid binary record
        active_version: Version of the active go toolchain (e.g. "go1.21.3")
        upgrade: Reinstall at "latest" instead of the recorded version

    Returns:
        PlanItem for the record
    """
    if not upgrade and record.toolchain_version == active_version:
        return PlanItem(record, RebuildAction.SKIP)
    if record.is_devel():
        return PlanItem(record, RebuildAction.SKIP_UNREBUILDABLE)
    if upgrade:
        return PlanItem(record, RebuildAction.REBUILD_LATEST, LATEST)
    return PlanItem(record, RebuildAction.REBUILD_PINNED, record.module_version)


def plan_rebuilds(
    records: Sequence[BinaryRecord],
    active_version: str,
    upgrade: bool = False,
) -> list[PlanItem]:
    """Plan every record, preserving order."""
    return [plan_rebuild(record, active_version, upgrade) for record in records]
