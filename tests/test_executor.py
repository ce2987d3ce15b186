"""
Tests for rebuild execution (gobin_rebuild/executor.py).
"""

import os
from unittest.mock import MagicMock, patch

import pytest

from gobin_rebuild.commands import SubprocessRunner
from gobin_rebuild.executor import (
    BatchOutcome,
    ScratchDirectory,
    execute_plan,
    rebuild,
    validate_spec,
)
from gobin_rebuild.inventory import DEVEL_VERSION, BinaryRecord
from gobin_rebuild.planner import plan_rebuilds


ALPHA = BinaryRecord("example.com/alpha", "v1.2.0", "go1.20")
BETA = BinaryRecord("example.com/beta", DEVEL_VERSION, "go1.19.4")
GAMMA = BinaryRecord("example.com/gamma/cmd/gamma", "v0.3.1", "go1.20")


class TestBatchOutcome:
    """Tests for BatchOutcome dataclass."""

    def test_starts_empty(self):
        """Test a new outcome is empty."""
        outcome = BatchOutcome()
        assert outcome.skipped_unrebuildable == []
        assert outcome.failed == []
        assert outcome.has_problems() is False

    def test_has_problems(self):
        """Test skipped and failed paths count as problems."""
        assert BatchOutcome(failed=["x"]).has_problems() is True
        assert BatchOutcome(skipped_unrebuildable=["x"]).has_problems() is True
        assert BatchOutcome(rebuilt=["x"]).has_problems() is False

    def test_summary(self):
        """Test outcome summary line."""
        outcome = BatchOutcome(skipped_unrebuildable=["a"], failed=["b", "c"], rebuilt=["d"])
        assert outcome.summary() == "1 rebuilt, 2 failed, 1 skipped (devel)"


class TestScratchDirectory:
    """Tests for the lazily created scratch directory."""

    def test_not_created_until_used(self):
        """Test nothing is created until the path is requested."""
        with patch("gobin_rebuild.executor.tempfile.mkdtemp") as mock_mkdtemp:
            with ScratchDirectory() as scratch:
                assert scratch.created is False
            mock_mkdtemp.assert_not_called()

    def test_created_once_and_removed(self):
        """Test the directory is created once and removed on exit."""
        with ScratchDirectory() as scratch:
            first = scratch.path
            second = scratch.path
            assert first == second
            assert os.path.isdir(first)
            assert os.path.basename(first).startswith("rebuild-gobin-")
        assert not os.path.exists(first)

    def test_removed_on_error(self):
        """Test the directory is removed when the block raises."""
        with pytest.raises(RuntimeError):
            with ScratchDirectory() as scratch:
                path = scratch.path
                raise RuntimeError("boom")
        assert not os.path.exists(path)

    def test_cleanup_without_use(self):
        """Test cleanup of a never-created directory does nothing."""
        with patch("gobin_rebuild.executor.shutil.rmtree") as mock_rmtree:
            scratch = ScratchDirectory()
            scratch.cleanup()
            assert scratch.created is False
        mock_rmtree.assert_not_called()


class TestSpec:
    """Tests for path@version specs."""

    def test_valid_spec(self):
        """Test a well-formed spec."""
        validate_spec("example.com/alpha@latest")

    @pytest.mark.parametrize("spec", [
        "",
        "example.com/alpha",
        "example.com/alpha@v1@v2",
        "@v1.0.0",
        "example.com/alpha@",
    ])
    def test_invalid_spec(self, spec):
        """Test malformed specs."""
        with pytest.raises(ValueError, match="invalid path@version spec"):
            validate_spec(spec)


class TestRebuild:
    """Tests for a single go install."""

    def test_rebuild_success(self, fake_runner, tmp_path):
        """Test successful go install."""
        runner = fake_runner()
        assert rebuild("example.com/alpha@v1.2.0", str(tmp_path), runner) is True
        assert runner.stream_calls == [
            (("go", "install", "example.com/alpha@v1.2.0"), str(tmp_path), True),
        ]

    def test_rebuild_failure(self, fake_runner, tmp_path):
        """Test failed go install."""
        runner = fake_runner(exit_codes={"example.com/alpha@v1.2.0": 1})
        assert rebuild("example.com/alpha@v1.2.0", str(tmp_path), runner) is False

    def test_rebuild_custom_go_command(self, fake_runner, tmp_path):
        """Test rebuild with a custom go executable."""
        runner = fake_runner()
        rebuild("example.com/alpha@latest", str(tmp_path), runner, go_command="go1.22.0")
        assert runner.stream_calls[0][0][0] == "go1.22.0"

    def test_rebuild_rejects_bad_spec(self, fake_runner, tmp_path):
        """Test bad specs never reach the runner."""
        runner = fake_runner()
        with pytest.raises(ValueError):
            rebuild("example.com/alpha", str(tmp_path), runner)
        assert runner.stream_calls == []


class TestExecutePlan:
    """Tests for executing a whole plan."""

    def test_pinned_rebuild_and_devel_skip(self, fake_runner):
        """Test pinned rebuild next to a devel skip."""
        runner = fake_runner()
        items = plan_rebuilds([ALPHA, BETA], "go1.21")
        outcome = execute_plan(items, runner)

        assert [call[0] for call in runner.stream_calls] == [
            ("go", "install", "example.com/alpha@v1.2.0"),
        ]
        assert outcome.skipped_unrebuildable == ["example.com/beta"]
        assert outcome.failed == []
        assert outcome.rebuilt == ["example.com/alpha"]

    def test_no_rebuild_creates_no_scratch_directory(self, fake_runner):
        """Test a plan with nothing to install creates no directory."""
        runner = fake_runner()
        items = plan_rebuilds([ALPHA, BETA], "go1.20")
        with patch("gobin_rebuild.executor.tempfile.mkdtemp") as mock_mkdtemp:
            outcome = execute_plan(items, runner)
        mock_mkdtemp.assert_not_called()
        assert runner.stream_calls == []
        assert outcome.skipped_unrebuildable == ["example.com/beta"]

    def test_failure_does_not_stop_batch(self, fake_runner):
        """Test a failed install does not stop the batch."""
        runner = fake_runner(exit_codes={"example.com/alpha@v1.2.0": 1})
        items = plan_rebuilds([ALPHA, GAMMA], "go1.21")
        outcome = execute_plan(items, runner)

        assert len(runner.stream_calls) == 2
        assert outcome.failed == ["example.com/alpha"]
        assert outcome.rebuilt == ["example.com/gamma/cmd/gamma"]

    def test_scratch_directory_shared_and_removed(self, fake_runner):
        """Test all installs share one scratch directory."""
        runner = fake_runner()
        items = plan_rebuilds([ALPHA, GAMMA], "go1.21", upgrade=True)
        execute_plan(items, runner)

        workdirs = {call[1] for call in runner.stream_calls}
        assert len(workdirs) == 1
        assert all(call[2] for call in runner.stream_calls)
        assert not os.path.exists(workdirs.pop())

    def test_upgrade_uses_latest(self, fake_runner):
        """Test upgrade installs at latest."""
        runner = fake_runner()
        execute_plan(plan_rebuilds([ALPHA], "go1.20", upgrade=True), runner)
        assert runner.stream_calls[0][0] == ("go", "install", "example.com/alpha@latest")

    def test_scratch_directory_removed_when_runner_raises(self, fake_runner):
        """Test scratch directory cleanup when the runner raises."""
        runner = fake_runner()
        created = []

        def exploding_stream(args, cwd=None):
            created.append(cwd)
            raise RuntimeError("runner crashed")

        runner.stream = exploding_stream
        with pytest.raises(RuntimeError):
            execute_plan(plan_rebuilds([ALPHA], "go1.21"), runner)
        assert created and not os.path.exists(created[0])

    def test_dry_run_runs_nothing(self, fake_runner):
        """Test dry run runs nothing."""
        runner = fake_runner()
        with patch("gobin_rebuild.executor.tempfile.mkdtemp") as mock_mkdtemp:
            outcome = execute_plan(plan_rebuilds([ALPHA, BETA], "go1.21"), runner, dry_run=True)
        mock_mkdtemp.assert_not_called()
        assert runner.stream_calls == []
        assert outcome.rebuilt == []
        assert outcome.skipped_unrebuildable == ["example.com/beta"]

    def test_extends_given_outcome(self, fake_runner):
        """Test results are added to a given outcome."""
        outcome = BatchOutcome(failed=["earlier"])
        result = execute_plan(plan_rebuilds([BETA], "go1.21"), fake_runner(), outcome=outcome)
        assert result is outcome
        assert outcome.failed == ["earlier"]
        assert outcome.skipped_unrebuildable == ["example.com/beta"]

    @patch("gobin_rebuild.commands.subprocess.run")
    def test_unexecutable_go_command_fails_item(self, mock_run):
        """Test an unexecutable go command fails only its item."""
        mock_run.side_effect = [PermissionError(13, "Permission denied", "go"), MagicMock(returncode=0)]
        outcome = execute_plan(plan_rebuilds([ALPHA, GAMMA], "go1.21"), SubprocessRunner())

        assert mock_run.call_count == 2
        assert outcome.failed == ["example.com/alpha"]
        assert outcome.rebuilt == ["example.com/gamma/cmd/gamma"]
