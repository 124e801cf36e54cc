# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.
"""Tests for subprocess helpers and the per-invocation process context."""

from __future__ import annotations

import sys
from pathlib import Path

import pytest

from swift_bundler.errors import EnvironmentProblem, MissingToolError, OperationCancelledError
from swift_bundler.process import (
    TIMEOUT_EXIT_STATUS,
    CommandOptions,
    ProcessContext,
    SubprocessExecutionError,
    SubprocessRunner,
    normalize_command,
    run_command,
)

PYTHON = sys.executable


def test_normalize_command_resolves_bare_names() -> None:
    assert normalize_command(Path(PYTHON), ["-V"]) == [PYTHON, "-V"]
    with pytest.raises(MissingToolError):
        normalize_command("definitely-not-a-real-tool-for-swift-bundler")


def test_normalize_command_rejects_missing_absolute_path(tmp_path: Path) -> None:
    adb = tmp_path / "platform-tools" / "adb"

    with pytest.raises(MissingToolError) as excinfo:
        normalize_command(adb, ["devices"])

    assert excinfo.value.tool == "adb"
    assert excinfo.value.expected == adb
    assert excinfo.value.remediation is not None


@pytest.mark.skipif(sys.platform == "win32", reason="POSIX execute permissions")
def test_launch_failures_become_environment_problems(tmp_path: Path) -> None:
    tool = tmp_path / "not-executable"
    tool.write_text("#!/bin/sh\n", encoding="utf-8")
    tool.chmod(0o644)

    with pytest.raises(EnvironmentProblem, match="Failed to start") as excinfo:
        run_command([str(tool)])
    assert isinstance(excinfo.value.__cause__, OSError)

    with pytest.raises(EnvironmentProblem, match="Failed to start"):
        ProcessContext().spawn_detached([str(tool)])


def test_run_command_captures_output() -> None:
    completed = run_command([PYTHON, "-c", "print('hello')"])

    assert completed.returncode == 0
    assert completed.stdout.strip() == "hello"


def test_run_command_raises_on_failure() -> None:
    with pytest.raises(SubprocessExecutionError) as excinfo:
        run_command([PYTHON, "-c", "import sys; sys.stderr.write('boom'); sys.exit(4)"])

    assert excinfo.value.returncode == 4
    assert excinfo.value.stderr == "boom"
    assert "boom" in str(excinfo.value)


def test_run_command_reports_status_without_check() -> None:
    completed = run_command([PYTHON, "-c", "raise SystemExit(2)"], options=CommandOptions(check=False))

    assert completed.returncode == 2


def test_run_command_timeout_maps_to_status() -> None:
    completed = run_command(
        [PYTHON, "-c", "import time; time.sleep(5)"],
        options=CommandOptions(check=False, timeout=0.2),
    )

    assert completed.returncode == TIMEOUT_EXIT_STATUS
    assert "timed out" in completed.stderr


def test_run_command_requires_arguments() -> None:
    with pytest.raises(ValueError):
        run_command([])


def test_context_sleep_and_cancel() -> None:
    context = ProcessContext()

    assert context.sleep(0.001)
    context.check_cancelled()

    context.cancel()

    assert context.cancelled
    assert not context.sleep(5)
    with pytest.raises(OperationCancelledError) as excinfo:
        context.check_cancelled()
    assert excinfo.value.exit_code == 130


def test_context_manager_cancels_on_error() -> None:
    context = ProcessContext()

    with pytest.raises(RuntimeError), context:
        raise RuntimeError("interrupted")

    assert context.cancelled
    assert context.children == ()


def test_context_manager_leaves_clean_exit_uncancelled() -> None:
    with ProcessContext() as context:
        pass

    assert not context.cancelled


def test_run_attached_returns_exit_status() -> None:
    context = ProcessContext()

    assert context.run_attached([PYTHON, "-c", "raise SystemExit(3)"]) == 3
    assert context.children == ()


def test_run_attached_refuses_after_cancel() -> None:
    context = ProcessContext()
    context.cancel()

    with pytest.raises(OperationCancelledError):
        context.run_attached([PYTHON, "-c", "pass"])


def test_subprocess_runner(tmp_path: Path) -> None:
    runner = SubprocessRunner(ProcessContext())

    assert runner.get_output(PYTHON, ["-c", "import os; print(os.getcwd())"], cwd=tmp_path).strip() == str(
        tmp_path.resolve(),
    )
    assert runner.succeeds(PYTHON, ["-c", "pass"])
    assert not runner.succeeds(PYTHON, ["-c", "raise SystemExit(1)"])
    assert not runner.succeeds("definitely-not-a-real-tool-for-swift-bundler")


def test_subprocess_runner_reports_missing_absolute_tool(tmp_path: Path) -> None:
    runner = SubprocessRunner(ProcessContext())
    missing = tmp_path / "bin" / "tool"

    with pytest.raises(MissingToolError):
        runner.get_output(missing, ["--version"])
    assert not runner.succeeds(missing)
