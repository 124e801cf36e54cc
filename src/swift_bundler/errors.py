# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.
"""Error taxonomy shared by the platform resolution engine."""

from __future__ import annotations

from collections.abc import Iterable, Mapping
from pathlib import Path
from typing import Final

ISSUE_TRACKER_URL: Final[str] = "https://github.com/moreSwift/swift-bundler/issues/new"


def join_grammatically(items: Iterable[object]) -> str:
    """Return ``items`` joined as an English list (``a, b and c``).

    Args:
        items: Values rendered with :func:`str` and quoted with single quotes.

    Returns:
        str: Human-readable list of the quoted values.
    """

    quoted = [f"'{item}'" for item in items]
    if not quoted:
        return "nothing"
    if len(quoted) == 1:
        return quoted[0]
    return f"{', '.join(quoted[:-1])} and {quoted[-1]}"


class BundlerError(RuntimeError):
    """Base class for errors surfaced to users of the bundler."""

    def __init__(self, message: str, *, exit_code: int = 1) -> None:
        """Initialise the error with a message and exit code.

        Args:
            message: Human-readable error message shown to the user.
            exit_code: Exit status associated with the failure.
        """

        super().__init__(message)
        self.message = message
        self.exit_code = exit_code


# Not-found errors -----------------------------------------------------------


class NotFoundError(BundlerError):
    """Raised when a requested resource could not be located."""

    def __init__(
        self,
        message: str,
        *,
        query: Mapping[str, str] | None = None,
        attempted: Iterable[Path | str] = (),
    ) -> None:
        """Initialise the error with the query that failed.

        Args:
            message: Human-readable error message.
            query: Parameters of the failed lookup.
            attempted: Locations searched, in the order they were tried.
        """

        super().__init__(message)
        self.query: dict[str, str] = dict(query or {})
        self.attempted: tuple[Path | str, ...] = tuple(attempted)


class NoMatchingSDKError(NotFoundError):
    """Raised when no installed Swift SDK matches a host/target query."""


class NoMatchingToolchainError(NotFoundError):
    """Raised when no toolchain is compatible with a Swift SDK."""


class UnresolvedDependencyError(NotFoundError):
    """Raised when a declared shared library cannot be found in any search directory."""


class DeviceNotFoundError(NotFoundError):
    """Raised when a device specifier matches no known device."""


class SimulatorNotFoundError(NotFoundError):
    """Raised when a search term matches no simulator or emulator."""


class NoSuitableSimulatorError(NotFoundError):
    """Raised when a single-architecture simulator build has no destination simulator."""


# Parse errors ---------------------------------------------------------------


class ParseError(BundlerError):
    """Raised when external text (manifest, banner, tool output) is malformed."""

    def __init__(self, raw_text: str, reason: str, *, position: int | None = None, subject: str = "input") -> None:
        """Initialise the error with the offending text.

        Args:
            raw_text: The text that failed to parse.
            reason: Explanation of what was expected.
            position: Character offset where parsing failed, when known.
            subject: Short description of what was being parsed.
        """

        location = f" at index {position}" if position is not None else ""
        super().__init__(f"Could not parse {subject} '{raw_text}'{location}: {reason}")
        self.raw_text = raw_text
        self.reason = reason
        self.position = position


class CompilerVersionParseError(ParseError):
    """Raised when a compiler version banner cannot be parsed."""

    def __init__(self, raw_text: str, reason: str, *, position: int | None = None) -> None:
        super().__init__(raw_text, reason, position=position, subject="Swift compiler version string")


class ManifestParseError(ParseError):
    """Raised when an artifact bundle or SDK manifest is malformed."""

    def __init__(self, path: Path, reason: str) -> None:
        super().__init__(str(path), reason, subject="manifest")
        self.path = path


class DestinationParseError(ParseError):
    """Raised when an xcodebuild destination line is malformed."""

    def __init__(self, raw_text: str, reason: str, *, position: int | None = None) -> None:
        super().__init__(raw_text, reason, position=position, subject="Xcode destination")


class ToolOutputParseError(ParseError):
    """Raised when the output of an external tool has an unexpected shape."""

    def __init__(self, tool: str, raw_text: str, reason: str) -> None:
        super().__init__(raw_text, reason, subject=f"'{tool}' output")
        self.tool = tool


# Invariant failures ---------------------------------------------------------


class InvariantFailure(BundlerError):
    """Raised when execution reaches a branch the design treats as unreachable."""

    def __init__(self, message: str) -> None:
        super().__init__(
            f"Invariant failure: {message}. This is a bug; please open an issue at {ISSUE_TRACKER_URL}",
        )
        self.detail = message


# Environment errors ---------------------------------------------------------


class EnvironmentProblem(BundlerError):
    """Raised when the host environment lacks a required tool or component."""

    def __init__(self, message: str, *, remediation: str | None = None) -> None:
        full = f"{message}. {remediation}" if remediation else message
        super().__init__(full)
        self.remediation = remediation


class AndroidSDKNotFoundError(EnvironmentProblem):
    """Raised when no Android SDK installation can be located."""


class MissingToolError(EnvironmentProblem):
    """Raised when an expected executable is missing."""

    def __init__(self, tool: str, expected: Path | None = None, *, remediation: str | None = None) -> None:
        message = f"Failed to locate '{tool}' executable"
        if expected is not None:
            message += f"; expected location was '{expected}'"
        super().__init__(message, remediation=remediation)
        self.tool = tool
        self.expected = expected


class UnsupportedHostError(EnvironmentProblem):
    """Raised when the host platform/architecture cannot perform an operation."""


# Usage errors ---------------------------------------------------------------


class UsageError(BundlerError):
    """Raised when a request is well-formed but cannot be satisfied as asked."""


class UnsupportedArchitectureError(UsageError):
    """Raised when an architecture is not supported by the target platform."""


class UniversalBuildDestinationError(UsageError):
    """Raised when a universal build is combined with a concrete device."""


class CannotAttachToBootedEmulatorError(UsageError):
    """Raised when attaching to an emulator that is already running."""


class UnsupportedSDKError(UsageError):
    """Raised when an SDK cannot be used for the requested operation."""


# Time-driven failures -------------------------------------------------------


class BootTimeoutError(BundlerError):
    """Raised when an emulator does not come up within the configured attempts."""


class OperationCancelledError(BundlerError):
    """Raised when the enclosing invocation was cancelled."""

    def __init__(self, message: str = "Operation cancelled") -> None:
        super().__init__(message, exit_code=130)


__all__ = [
    "AndroidSDKNotFoundError",
    "BootTimeoutError",
    "BundlerError",
    "CannotAttachToBootedEmulatorError",
    "CompilerVersionParseError",
    "DestinationParseError",
    "DeviceNotFoundError",
    "EnvironmentProblem",
    "ISSUE_TRACKER_URL",
    "InvariantFailure",
    "ManifestParseError",
    "MissingToolError",
    "NoMatchingSDKError",
    "NoMatchingToolchainError",
    "NoSuitableSimulatorError",
    "NotFoundError",
    "OperationCancelledError",
    "ParseError",
    "SimulatorNotFoundError",
    "ToolOutputParseError",
    "UniversalBuildDestinationError",
    "UnresolvedDependencyError",
    "UnsupportedArchitectureError",
    "UnsupportedHostError",
    "UnsupportedSDKError",
    "UsageError",
    "join_grammatically",
]
