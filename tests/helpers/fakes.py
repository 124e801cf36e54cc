# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.

"""Fake process runners and loggers standing in for external tools."""

from __future__ import annotations

from collections.abc import Callable, Sequence
from dataclasses import dataclass, field
from pathlib import Path

from swift_bundler.process import SubprocessExecutionError

Response = str | BaseException | Callable[[], str]


def command_failure(command: Sequence[str], returncode: int = 1, stderr: str = "") -> SubprocessExecutionError:
    """Return the error a real runner raises for a failed command."""

    return SubprocessExecutionError(list(command), returncode, "", stderr)


def scripted(*outputs: str | BaseException) -> Callable[[], str]:
    """Return a response that yields ``outputs`` in turn, repeating the last one."""

    remaining = list(outputs)

    def respond() -> str:
        output = remaining.pop(0) if len(remaining) > 1 else remaining[0]
        if isinstance(output, BaseException):
            raise output
        return output

    return respond


@dataclass
class FakeRunner:
    """In-memory :class:`~swift_bundler.process.ProcessRunner` keyed by full command line."""

    responses: dict[tuple[str, ...], Response] = field(default_factory=dict)
    calls: list[tuple[str, ...]] = field(default_factory=list)
    detached: list[tuple[str, ...]] = field(default_factory=list)
    attached: list[tuple[str, ...]] = field(default_factory=list)
    attached_status: int = 0

    def add(self, executable: str | Path, *args: str, output: Response = "") -> None:
        self.responses[(str(executable), *args)] = output

    def _respond(self, executable: str | Path, args: Sequence[str]) -> str:
        key = (str(executable), *args)
        self.calls.append(key)
        response = self.responses.get(key)
        if response is None:
            raise command_failure(key, 1, "unexpected command")
        if isinstance(response, BaseException):
            raise response
        if callable(response):
            return response()
        return response

    def get_output(self, executable: str | Path, args: Sequence[str] = (), *, cwd: Path | None = None) -> str:
        return self._respond(executable, args)

    def run_and_wait(self, executable: str | Path, args: Sequence[str] = (), *, cwd: Path | None = None) -> None:
        self._respond(executable, args)

    def succeeds(self, executable: str | Path, args: Sequence[str] = (), *, cwd: Path | None = None) -> bool:
        try:
            self._respond(executable, args)
        except SubprocessExecutionError:
            return False
        return True

    def spawn_detached(self, executable: str | Path, args: Sequence[str] = ()) -> None:
        self.detached.append((str(executable), *args))

    def run_attached(self, executable: str | Path, args: Sequence[str] = ()) -> int:
        self.attached.append((str(executable), *args))
        return self.attached_status

    def called(self, *prefix: str) -> bool:
        return any(call[: len(prefix)] == prefix for call in self.calls)


@dataclass
class RecordingLogger:
    """Logger capturing diagnostics per level."""

    debugs: list[str] = field(default_factory=list)
    infos: list[str] = field(default_factory=list)
    warnings: list[str] = field(default_factory=list)

    def debug(self, message: str) -> None:
        self.debugs.append(message)

    def info(self, message: str) -> None:
        self.infos.append(message)

    def warn(self, message: str) -> None:
        self.warnings.append(message)


__all__ = ["FakeRunner", "RecordingLogger", "Response", "command_failure", "scripted"]
