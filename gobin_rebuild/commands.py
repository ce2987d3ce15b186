"""
Command execution used by discovery and rebuild steps.

Everything that talks to the go tool goes through a ``CommandRunner`` so
parsing, planning and reporting can be exercised without spawning
processes.
"""

from __future__ import annotations

import subprocess
from typing import Sequence


# Exit code reported by shells for "command not found"
COMMAND_NOT_FOUND = 127
# Exit code reported by shells for "permission denied" and similar
COMMAND_NOT_EXECUTABLE = 126


class CommandError(Exception):
    """
    A captured command could not be run or exited unsuccessfully.

    Attributes:
        message: Human-readable error message
        command: The command that was run
        exit_code: Process exit code, or None if it never completed
    """
    def __init__(
        self,
        message: str,
        command: Sequence[str] = (),
        exit_code: int | None = None,
    ):
        self.message = message
        self.command = tuple(command)
        self.exit_code = exit_code
        super().__init__(message)


class CommandRunner:
    """Interface for running external commands."""

    def output(self, args: Sequence[str], timeout: float | None = None) -> str:
        """Run a command and return its captured stdout."""
        raise NotImplementedError

    def stream(self, args: Sequence[str], cwd: str | None = None) -> int:
        """Run a command with stdout/stderr passed through, return exit code."""
        raise NotImplementedError


class SubprocessRunner(CommandRunner):
    """``CommandRunner`` backed by :mod:`subprocess`."""

    def output(self, args: Sequence[str], timeout: float | None = None) -> str:
        command = list(args)
        try:
            proc = subprocess.run(
                command,
                stdout=subprocess.PIPE,
                stderr=subprocess.PIPE,
                stdin=subprocess.DEVNULL,
                text=True,
                errors="surrogateescape",
                timeout=timeout,
                check=False,
            )
        except subprocess.TimeoutExpired as e:
            raise CommandError(
                f"{' '.join(command)}: timed out after {timeout}s", command
            ) from e
        except OSError as e:
            raise CommandError(f"{' '.join(command)}: {e}", command) from e

        if proc.returncode != 0:
            message = f"{' '.join(command)}: exit status {proc.returncode}"
            stderr = (proc.stderr or "").strip()
            if stderr:
                message += f": {stderr[:200]}"
            raise CommandError(message, command, proc.returncode)

        return proc.stdout or ""

    def stream(self, args: Sequence[str], cwd: str | None = None) -> int:
        command = list(args)
        try:
            proc = subprocess.run(
                command,
                cwd=cwd,
                stdin=subprocess.DEVNULL,
                check=False,
            )
        except FileNotFoundError:
            return COMMAND_NOT_FOUND
        except OSError:
            return COMMAND_NOT_EXECUTABLE
        return proc.returncode
