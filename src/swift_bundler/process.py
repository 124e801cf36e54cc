# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.
"""Shell-free subprocess helpers and the per-invocation child process registry."""

from __future__ import annotations

import shutil

# Commands are passed as argument lists; ``shell=True`` is never used.
import subprocess  # nosec B404
import threading
from collections.abc import Mapping, Sequence
from dataclasses import dataclass
from pathlib import Path
from subprocess import CompletedProcess
from types import TracebackType
from typing import Final, Protocol

from .errors import BundlerError, EnvironmentProblem, MissingToolError, OperationCancelledError

TIMEOUT_EXIT_STATUS: Final[int] = 124
_TERMINATE_GRACE_SECONDS: Final[float] = 5.0


@dataclass(slots=True, frozen=True)
class CommandOptions:
    """Execution options applied by :func:`run_command`."""

    cwd: Path | None = None
    env: Mapping[str, str] | None = None
    check: bool = True
    capture_output: bool = True
    timeout: float | None = None
    discard_stdin: bool = True


class SubprocessExecutionError(BundlerError):
    """Raised when a subprocess exits with a non-zero status while ``check`` is true."""

    def __init__(
        self,
        command: Sequence[str],
        returncode: int,
        stdout: str | None,
        stderr: str | None,
    ) -> None:
        """Initialise the error with captured subprocess metadata.

        Args:
            command: Normalised command sequence that was executed.
            returncode: Exit status reported by the subprocess.
            stdout: Captured standard output stream.
            stderr: Captured standard error stream.
        """

        super().__init__(
            f"Command '{' '.join(command)}' exited with status {returncode}. "
            f"stderr: {(stderr or '').strip() or '<none>'}",
        )
        self.command = tuple(command)
        self.returncode = returncode
        self.stdout = stdout
        self.stderr = stderr


def _ensure_text(value: str | bytes | None) -> str | None:
    if value is None or isinstance(value, str):
        return value
    return value.decode(errors="ignore")


def _launch_failure(command: Sequence[str], exc: OSError) -> EnvironmentProblem:
    return EnvironmentProblem(
        f"Failed to start '{command[0]}': {exc.strerror or exc}",
        remediation="Check that the file exists and is executable",
    )


def normalize_command(executable: str | Path, args: Sequence[str] = ()) -> list[str]:
    """Return ``[executable, *args]`` with the executable resolved against ``PATH``.

    Args:
        executable: Absolute path to a program, or a bare program name.
        args: Arguments passed to the program.

    Returns:
        list[str]: Argument list suitable for :mod:`subprocess`.

    Raises:
        MissingToolError: If a bare program name is not found on ``PATH``
            or an absolute path does not exist.
    """

    head = Path(executable)
    if head.is_absolute():
        if not head.exists():
            raise MissingToolError(head.name, head, remediation=f"Ensure '{head.name}' is installed at '{head.parent}'")
        return [str(head), *args]
    resolved = shutil.which(str(executable))
    if resolved is None:
        raise MissingToolError(str(executable), remediation=f"Ensure '{executable}' is installed and on PATH")
    return [resolved, *args]


def run_command(
    args: Sequence[str],
    *,
    options: CommandOptions | None = None,
) -> CompletedProcess[str]:
    """Execute ``args`` after normalising the executable path.

    A timeout is reported as exit status 124 with a note appended to stderr.

    Args:
        args: Command and argument sequence to execute.
        options: Options configuring execution semantics.

    Returns:
        CompletedProcess: Subprocess execution metadata.

    Raises:
        ValueError: If ``args`` is empty.
        MissingToolError: If the executable cannot be resolved on ``PATH``.
        EnvironmentProblem: If the operating system refuses to start the executable.
        SubprocessExecutionError: When ``check`` is true and the process exits
            with a non-zero status.
    """

    if not args:
        raise ValueError("subprocess command requires at least one argument")
    head, *rest = args
    normalized = normalize_command(head, rest)
    resolved = options or CommandOptions()

    try:
        completed: CompletedProcess[str] = subprocess.run(  # nosec B603
            normalized,
            cwd=str(resolved.cwd) if resolved.cwd is not None else None,
            env=dict(resolved.env) if resolved.env is not None else None,
            check=False,
            capture_output=resolved.capture_output,
            text=True,
            timeout=resolved.timeout,
            stdin=subprocess.DEVNULL if resolved.discard_stdin else None,
        )
    except subprocess.TimeoutExpired as exc:
        stderr = _ensure_text(exc.stderr)
        timeout_msg = f"Command timed out after {resolved.timeout:.1f}s"
        completed = subprocess.CompletedProcess(
            args=normalized,
            returncode=TIMEOUT_EXIT_STATUS,
            stdout=_ensure_text(exc.stdout) or "",
            stderr=f"{stderr}\n{timeout_msg}" if stderr else timeout_msg,
        )
    except OSError as exc:
        raise _launch_failure(normalized, exc) from exc

    if resolved.check and completed.returncode != 0:
        raise SubprocessExecutionError(normalized, completed.returncode, completed.stdout, completed.stderr)
    return completed


class ProcessContext:
    """Per-invocation registry of spawned children plus a cancellation signal.

    Attached children are tracked so that :meth:`terminate_children` can stop them
    when the invocation is interrupted. Detached children run in their own session
    and are never tracked.
    """

    def __init__(self) -> None:
        self._cancelled = threading.Event()
        self._lock = threading.Lock()
        self._children: dict[int, subprocess.Popen[bytes]] = {}

    @property
    def cancelled(self) -> bool:
        return self._cancelled.is_set()

    def cancel(self) -> None:
        """Signal cancellation to every waiter of this context."""

        self._cancelled.set()

    def check_cancelled(self) -> None:
        """Raise :class:`OperationCancelledError` once :meth:`cancel` has been called."""

        if self._cancelled.is_set():
            raise OperationCancelledError()

    def sleep(self, interval: float) -> bool:
        """Wait ``interval`` seconds unless cancelled first.

        Args:
            interval: Seconds to wait.

        Returns:
            bool: ``True`` when the full interval elapsed, ``False`` on cancellation.
        """

        return not self._cancelled.wait(interval)

    def spawn_detached(self, command: Sequence[str], *, cwd: Path | None = None) -> subprocess.Popen[bytes]:
        """Start ``command`` in a new session with all output discarded."""

        try:
            return subprocess.Popen(  # nosec B603
                list(command),
                cwd=str(cwd) if cwd is not None else None,
                stdin=subprocess.DEVNULL,
                stdout=subprocess.DEVNULL,
                stderr=subprocess.DEVNULL,
                start_new_session=True,
            )
        except OSError as exc:
            raise _launch_failure(command, exc) from exc

    def run_attached(self, command: Sequence[str], *, cwd: Path | None = None) -> int:
        """Run ``command`` with inherited stdio, tracked until it exits.

        Args:
            command: Normalised command to execute.
            cwd: Optional working directory.

        Returns:
            int: Exit status of the child.

        Raises:
            OperationCancelledError: If the context was cancelled while waiting.
        """

        self.check_cancelled()
        try:
            process = subprocess.Popen(list(command), cwd=str(cwd) if cwd is not None else None)  # nosec B603
        except OSError as exc:
            raise _launch_failure(command, exc) from exc
        with self._lock:
            self._children[process.pid] = process
        try:
            while True:
                try:
                    return process.wait(timeout=0.1)
                except subprocess.TimeoutExpired:
                    if self._cancelled.is_set():
                        self._terminate(process)
                        raise OperationCancelledError() from None
        finally:
            with self._lock:
                self._children.pop(process.pid, None)

    @property
    def children(self) -> tuple[int, ...]:
        """Return the pids of attached children that are still tracked."""

        with self._lock:
            return tuple(self._children)

    def terminate_children(self) -> None:
        """Terminate every tracked attached child."""

        with self._lock:
            children = list(self._children.values())
            self._children.clear()
        for process in children:
            self._terminate(process)

    @staticmethod
    def _terminate(process: subprocess.Popen[bytes]) -> None:
        if process.poll() is not None:
            return
        process.terminate()
        try:
            process.wait(timeout=_TERMINATE_GRACE_SECONDS)
        except subprocess.TimeoutExpired:
            process.kill()

    def __enter__(self) -> ProcessContext:
        return self

    def __exit__(
        self,
        exc_type: type[BaseException] | None,
        exc: BaseException | None,
        traceback: TracebackType | None,
    ) -> None:
        if exc_type is not None:
            self.cancel()
        self.terminate_children()


class ProcessRunner(Protocol):
    """Collaborator contract used by every component that invokes external tools."""

    def get_output(self, executable: str | Path, args: Sequence[str] = (), *, cwd: Path | None = None) -> str:
        """Return stdout of the command or raise :class:`SubprocessExecutionError`."""

    def run_and_wait(self, executable: str | Path, args: Sequence[str] = (), *, cwd: Path | None = None) -> None:
        """Run the command with inherited stdio, raising on a non-zero exit status."""

    def succeeds(self, executable: str | Path, args: Sequence[str] = (), *, cwd: Path | None = None) -> bool:
        """Return whether the command exits with status zero."""

    def spawn_detached(self, executable: str | Path, args: Sequence[str] = ()) -> None:
        """Start the command detached from the caller with output discarded."""

    def run_attached(self, executable: str | Path, args: Sequence[str] = ()) -> int:
        """Run the command tied to the caller's lifetime and return its exit status."""


@dataclass(slots=True)
class SubprocessRunner:
    """:class:`ProcessRunner` backed by :func:`run_command` and a :class:`ProcessContext`."""

    context: ProcessContext
    timeout: float | None = None

    def get_output(self, executable: str | Path, args: Sequence[str] = (), *, cwd: Path | None = None) -> str:
        self.context.check_cancelled()
        completed = run_command(
            [str(executable), *args],
            options=CommandOptions(cwd=cwd, timeout=self.timeout),
        )
        return completed.stdout or ""

    def run_and_wait(self, executable: str | Path, args: Sequence[str] = (), *, cwd: Path | None = None) -> None:
        self.context.check_cancelled()
        run_command(
            [str(executable), *args],
            options=CommandOptions(cwd=cwd, capture_output=False, discard_stdin=False),
        )

    def succeeds(self, executable: str | Path, args: Sequence[str] = (), *, cwd: Path | None = None) -> bool:
        self.context.check_cancelled()
        try:
            completed = run_command(
                [str(executable), *args],
                options=CommandOptions(cwd=cwd, check=False, timeout=self.timeout),
            )
        except MissingToolError:
            return False
        return completed.returncode == 0

    def spawn_detached(self, executable: str | Path, args: Sequence[str] = ()) -> None:
        self.context.spawn_detached(normalize_command(executable, args))

    def run_attached(self, executable: str | Path, args: Sequence[str] = ()) -> int:
        return self.context.run_attached(normalize_command(executable, args))


__all__ = [
    "CommandOptions",
    "ProcessContext",
    "ProcessRunner",
    "SubprocessExecutionError",
    "SubprocessRunner",
    "TIMEOUT_EXIT_STATUS",
    "normalize_command",
    "run_command",
]
