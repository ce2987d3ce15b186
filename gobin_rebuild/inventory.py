"""
Parsing of ``go version -m`` output into binary records.

For a directory the go tool prints one block per binary::

    /home/user/go/bin/httpstat: go1.20.5
            path    github.com/davecheney/httpstat
            mod     github.com/davecheney/httpstat  v1.0.0  h1:3o8o...
            dep     github.com/fatih/color  v1.10.0 h1:s36x...
            build   -compiler=gc

A block starts with a line prefixed by the directory path. Only the
``path`` and ``mod`` lines matter here; everything else is ignored.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Iterable

from .common import vlog


# Module version reported for binaries built from a local source tree
DEVEL_VERSION = "(devel)"


@dataclass(frozen=True)
class BinaryRecord:
    """
    One installed binary as described by ``go version -m``.

    Attributes:
        path: Import path of the main package (e.g. "golang.org/x/tools/cmd/stringer")
        module_version: Module version, pseudo-version or "(devel)"
        toolchain_version: Go version the binary was built with (e.g. "go1.20.5")
    """
    path: str = ""
    module_version: str = ""
    toolchain_version: str = ""

    def valid(self) -> bool:
        return bool(self.path and self.module_version and self.toolchain_version)

    def empty(self) -> bool:
        return not (self.path or self.module_version or self.toolchain_version)

    def is_devel(self) -> bool:
        return self.module_version == DEVEL_VERSION


def is_record_boundary(line: str, gobin: str) -> bool:
    """Whether ``line`` starts the block of a new binary inside ``gobin``."""
    return bool(gobin) and line.startswith(gobin)


def toolchain_from_header(line: str) -> str:
    """Return the text after the first ": " of a block header, or ""."""
    _, sep, rest = line.partition(": ")
    return rest if sep else ""


def reduce_line(
    current: BinaryRecord,
    line: str,
    gobin: str,
) -> tuple[BinaryRecord, BinaryRecord | None]:
    """
    Fold one line of output into the record under construction.

    Args:
        current: Record accumulated so far
        line: Next line of ``go version -m`` output
        gobin: Directory that was inspected

    Returns:
        Tuple of (record under construction, completed record or None)
    """
    if is_record_boundary(line, gobin):
        emitted = current if current.valid() else None
        if emitted is None and not current.empty():
            vlog(f"Dropping incomplete record: {current}")
        return BinaryRecord(toolchain_version=toolchain_from_header(line)), emitted

    fields = line.split()
    if len(fields) == 2 and fields[0] == "path":
        return BinaryRecord(fields[1], current.module_version, current.toolchain_version), None
    if len(fields) >= 3 and fields[0] == "mod":
        return BinaryRecord(current.path, fields[2], current.toolchain_version), None
    return current, None


def iter_records(gobin: str, lines: Iterable[str]) -> Iterable[BinaryRecord]:
    """Yield valid records in the order their blocks appear."""
    current = BinaryRecord()
    for line in lines:
        current, emitted = reduce_line(current, line, gobin)
        if emitted is not None:
            yield emitted
    if current.valid():
        yield current
    elif not current.empty():
        vlog(f"Dropping incomplete record: {current}")


def parse_inventory(gobin: str, text: str) -> list[BinaryRecord]:
    """
    Parse ``go version -m <gobin>`` output.

    Blocks missing any of path, module version or toolchain version
    (binaries built without module information, non-Go files) are
    dropped without error.

    Args:
        gobin: Directory that was inspected, as passed to the go tool
        text: Raw command output

    Returns:
        Valid records in output order
    """
    return list(iter_records(gobin, text.splitlines()))
