"""
End-of-run reporting and plan rendering.
"""

from __future__ import annotations

import logging
from typing import Sequence

from wcwidth import wcswidth

from .executor import BatchOutcome
from .logging_config import get_logger
from .planner import PlanItem, RebuildAction


SKIPPED_HEADER = "Skipped the following programs because of the (devel) module version:"
FAILED_HEADER = "There were errors installing the following modules, see the full log above:"

ACTION_LABELS = {
    RebuildAction.SKIP: "up to date",
    RebuildAction.REBUILD_PINNED: "rebuild",
    RebuildAction.REBUILD_LATEST: "upgrade",
    RebuildAction.SKIP_UNREBUILDABLE: "skip (devel)",
}


def format_report(outcome: BatchOutcome) -> str:
    """
    Render the summary of skipped and failed programs.

    Sections are only included when non-empty.

    Returns:
        Report text, or "" when nothing was skipped or failed
    """
    lines: list[str] = []
    if outcome.skipped_unrebuildable:
        lines.append(SKIPPED_HEADER)
        lines.extend(f"  {path}" for path in outcome.skipped_unrebuildable)
    if outcome.failed:
        lines.append(FAILED_HEADER)
        lines.extend(f"  {path}" for path in outcome.failed)
    return "\n".join(lines)


def print_report(outcome: BatchOutcome, logger: logging.Logger | None = None) -> bool:
    """
    Log the report, if there is anything to report.

    Returns:
        True if a report was written
    """
    if not outcome.has_problems():
        return False
    report = format_report(outcome)
    logger = logger or get_logger()
    for line in report.splitlines():
        logger.warning(line)
    return True


def _display_width(text: str) -> int:
    width = wcswidth(text)
    return width if width >= 0 else len(text)


def _pad(text: str, width: int) -> str:
    return text + " " * max(0, width - _display_width(text))


def render_plan_table(items: Sequence[PlanItem]) -> str:
    """
    Format a plan as an aligned table.

    Columns: module path, toolchain the binary was built with, recorded
    module version, and the planned action.
    """
    headers = ("path", "built with", "version", "action")
    rows = [headers]
    for item in items:
        action = ACTION_LABELS[item.action]
        if item.needs_rebuild():
            action = f"{action} @{item.target_version}"
        rows.append((
            item.path,
            item.record.toolchain_version,
            item.record.module_version,
            action,
        ))

    widths = [max(_display_width(row[col]) for row in rows) for col in range(len(headers))]
    lines = []
    for row in rows:
        cells = [_pad(cell, widths[i]) for i, cell in enumerate(row[:-1])]
        cells.append(row[-1])
        lines.append("  ".join(cells))
    return "\n".join(lines)
