"""
Discovery through the go tool.

Resolves the binary install directory, the active toolchain version and
the raw ``go version -m`` inventory. Any failure here is fatal for the
run and surfaces as ``DiscoveryError``.
"""

from __future__ import annotations

import json
import os
from typing import Any, Sequence

from .commands import CommandError, CommandRunner
from .common import vlog
from .config import DEFAULT_ENV_TIMEOUT, DEFAULT_INSPECT_TIMEOUT


class DiscoveryError(Exception):
    """A prerequisite step of the run failed."""


def _run(
    runner: CommandRunner,
    args: Sequence[str],
    timeout: float,
    step: str,
) -> str:
    try:
        return runner.output(args, timeout=timeout)
    except CommandError as e:
        raise DiscoveryError(f"cannot {step}: {e.message}") from e


def go_env(
    runner: CommandRunner,
    names: Sequence[str],
    go_command: str = "go",
    timeout: float = DEFAULT_ENV_TIMEOUT,
) -> dict[str, str]:
    """
    Query ``go env -json`` for the given variables.

    Raises:
        DiscoveryError: If the command fails or its output is not a JSON object
    """
    output = _run(runner, [go_command, "env", "-json", *names], timeout, "run go env")
    try:
        data: Any = json.loads(output)
    except json.JSONDecodeError as e:
        raise DiscoveryError(f"cannot parse go env output: {e}") from e
    if not isinstance(data, dict):
        raise DiscoveryError("cannot parse go env output: expected a JSON object")
    return {name: str(data.get(name) or "") for name in names}


def get_gobin(
    runner: CommandRunner,
    go_command: str = "go",
    timeout: float = DEFAULT_ENV_TIMEOUT,
    verbose: bool = False,
) -> str:
    """
    Resolve the directory go install puts binaries into.

    Returns:
        GOBIN if set, otherwise the bin directory of the first GOPATH entry

    Raises:
        DiscoveryError: If neither GOBIN nor GOPATH is available
    """
    env = go_env(runner, ("GOBIN", "GOPATH"), go_command, timeout)
    if env["GOBIN"]:
        vlog(f"Using GOBIN: {env['GOBIN']}", verbose)
        return env["GOBIN"]

    gopath = env["GOPATH"].split(os.pathsep)[0]
    if not gopath:
        raise DiscoveryError("go env reports neither GOBIN nor GOPATH")
    gobin = os.path.join(gopath, "bin")
    vlog(f"Using GOPATH bin directory: {gobin}", verbose)
    return gobin


def get_go_version(
    runner: CommandRunner,
    go_command: str = "go",
    timeout: float = DEFAULT_ENV_TIMEOUT,
) -> str:
    """
    Return the active toolchain version, e.g. "go1.21.3".

    ``go version`` prints "go version go1.21.3 linux/amd64"; the prefix
    and the platform suffix are stripped.

    Raises:
        DiscoveryError: If the version cannot be determined
    """
    env = go_env(runner, ("GOOS", "GOARCH"), go_command, timeout)
    output = _run(runner, [go_command, "version"], timeout, "run go version").strip()

    version = output.removeprefix("go version")
    if env["GOOS"] and env["GOARCH"]:
        version = version.removesuffix(f"{env['GOOS']}/{env['GOARCH']}")
    version = version.strip()

    if not version:
        raise DiscoveryError(f"cannot parse go version output: {output!r}")
    return version


def inspect_gobin(
    runner: CommandRunner,
    gobin: str,
    go_command: str = "go",
    timeout: float = DEFAULT_INSPECT_TIMEOUT,
) -> str:
    """Return the raw ``go version -m <gobin>`` output."""
    return _run(runner, [go_command, "version", "-m", gobin], timeout, f"inspect {gobin}")
