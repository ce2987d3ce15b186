"""
Shared test helpers.
"""

from __future__ import annotations

import os
from pathlib import Path

import pytest

from gobin_rebuild.commands import CommandError, CommandRunner


FIXTURES_DIR = Path(__file__).parent / "fixtures"


class FakeRunner(CommandRunner):
    """
    CommandRunner that answers from canned data.

    Attributes:
        outputs: Captured command output keyed by argument tuple; an
            exception value is raised instead of returned
        exit_codes: go install exit status keyed by path@version spec
        output_calls: (args, timeout) of every captured command
        stream_calls: (args, cwd, cwd_existed) of every streamed command
    """

    def __init__(self, outputs=None, exit_codes=None):
        self.outputs = dict(outputs or {})
        self.exit_codes = dict(exit_codes or {})
        self.output_calls = []
        self.stream_calls = []

    def output(self, args, timeout=None):
        key = tuple(args)
        self.output_calls.append((key, timeout))
        result = self.outputs.get(key)
        if result is None:
            raise CommandError(f"unexpected command: {' '.join(key)}", key, 1)
        if isinstance(result, Exception):
            raise result
        return result

    def stream(self, args, cwd=None):
        args = tuple(args)
        self.stream_calls.append((args, cwd, cwd is not None and os.path.isdir(cwd)))
        return self.exit_codes.get(args[-1], 0)


def go_discovery_outputs(
    gobin_env='{"GOBIN": "", "GOPATH": "/home/user/go"}',
    inventory="",
    version="go version go1.21.3 linux/amd64\n",
    gobin="/home/user/go/bin",
    go="go",
):
    """Canned outputs for the three discovery steps."""
    return {
        (go, "env", "-json", "GOBIN", "GOPATH"): gobin_env,
        (go, "env", "-json", "GOOS", "GOARCH"): '{"GOOS": "linux", "GOARCH": "amd64"}',
        (go, "version"): version,
        (go, "version", "-m", gobin): inventory,
    }


@pytest.fixture
def fake_runner():
    """Factory for FakeRunner instances."""
    return FakeRunner


@pytest.fixture
def inventory_text():
    """Sample ``go version -m`` output for /home/user/go/bin."""
    return (FIXTURES_DIR / "go_version_m.txt").read_text(encoding="utf-8")


@pytest.fixture
def discovery_outputs():
    """Factory for canned discovery outputs."""
    return go_discovery_outputs
