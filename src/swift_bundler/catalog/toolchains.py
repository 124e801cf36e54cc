# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.

"""Swift toolchain records and discovery of installed toolchains."""

from __future__ import annotations

import json
from collections.abc import Sequence
from dataclasses import dataclass
from enum import StrEnum
from pathlib import Path
from typing import Any, Final

from ..config import BundlerSettings
from ..errors import BundlerError, MissingToolError, ToolOutputParseError
from ..logging import BufferedLogger, DiagnosticLogger, get_logger
from ..platforms import HostPlatform
from ..process import ProcessRunner
from .manifests import load_toolchain_info_plist
from .scanner import dedupe, existing_resolved_directories, list_subdirectories, scan_in_order

COMMAND_LINE_TOOLS_ROOT: Final[Path] = Path("/Library/Developer/CommandLineTools")
SYSTEM_TOOLCHAINS_DIR: Final[Path] = Path("/Library/Developer/Toolchains")
INFO_PLIST: Final[str] = "Info.plist"
XCODE_TOOLCHAIN_INFO_PLIST: Final[str] = "ToolchainInfo.plist"


class ToolchainKind(StrEnum):
    """How a toolchain was installed, judged from the manifests it ships."""

    XCODE_TOOLCHAIN = "xcodeToolchain"
    COMMAND_LINE_TOOLS = "commandLineTools"
    STANDALONE = "standalone"
    UNKNOWN = "unknown"


@dataclass(frozen=True, slots=True)
class SwiftToolchain:
    """A loaded toolchain with a working ``swift`` executable."""

    root: Path
    display_name: str
    compiler_version_string: str
    kind: ToolchainKind

    @property
    def swift_executable(self) -> Path:
        return swift_executable(self.root)

    def to_dict(self) -> dict[str, Any]:
        return {
            "root": str(self.root),
            "displayName": self.display_name,
            "compilerVersionString": self.compiler_version_string,
            "kind": self.kind.value,
        }


@dataclass(frozen=True, slots=True)
class ToolchainCandidate:
    """A directory that may hold a toolchain, prior to validation."""

    root: Path
    is_command_line_tools: bool = False


def swift_executable(root: Path) -> Path:
    """Return where a toolchain rooted at ``root`` keeps its ``swift`` executable."""

    return root / "usr" / "bin" / "swift"


def query_compiler_version(runner: ProcessRunner, swift: Path) -> str:
    """Return ``compilerVersion`` from ``swift -print-target-info``.

    Raises:
        SubprocessExecutionError: If the compiler exits with a non-zero status.
        ToolOutputParseError: If the output is not the expected JSON document.
    """

    output = runner.get_output(swift, ["-print-target-info"])
    try:
        payload = json.loads(output)
    except json.JSONDecodeError as exc:
        raise ToolOutputParseError("swift -print-target-info", output, f"invalid JSON: {exc.msg}") from exc
    version = payload.get("compilerVersion") if isinstance(payload, dict) else None
    if not isinstance(version, str):
        raise ToolOutputParseError("swift -print-target-info", output, "missing 'compilerVersion' string")
    return version


def load_toolchain(
    candidate: ToolchainCandidate,
    *,
    runner: ProcessRunner,
    logger: DiagnosticLogger,
) -> SwiftToolchain:
    """Validate ``candidate`` and classify the toolchain it contains.

    Classification checks, in order: CommandLineTools (decided by how the candidate
    was discovered), a swift.org ``Info.plist``, an Xcode ``ToolchainInfo.plist``.
    Anything else is loaded as an unknown toolchain with a warning.

    Raises:
        MissingToolError: If the toolchain has no ``swift`` executable.
        SubprocessExecutionError: If querying the compiler fails.
        ToolOutputParseError: If the compiler output cannot be parsed.
        ManifestParseError: If ``Info.plist`` exists but is malformed.
    """

    root = candidate.root
    swift = swift_executable(root)
    if not swift.exists():
        raise MissingToolError("swift", swift)
    version = query_compiler_version(runner, swift)

    if candidate.is_command_line_tools:
        return SwiftToolchain(root, f"{version} (CommandLineTools)", version, ToolchainKind.COMMAND_LINE_TOOLS)
    info_plist = root / INFO_PLIST
    if info_plist.exists():
        manifest = load_toolchain_info_plist(info_plist)
        return SwiftToolchain(root, manifest.display_name, version, ToolchainKind.STANDALONE)
    if (root / XCODE_TOOLCHAIN_INFO_PLIST).exists():
        return SwiftToolchain(root, f"{version} (Xcode)", version, ToolchainKind.XCODE_TOOLCHAIN)
    logger.warn(
        f"Discovered toolchain at '{root}' which doesn't match any known toolchain structure, "
        "but does have a Swift executable. Loading it as an unknown toolchain kind",
    )
    return SwiftToolchain(root, f"{version} (unknown)", version, ToolchainKind.UNKNOWN)


class ToolchainCatalog:
    """Enumerates Swift toolchains installed on the host."""

    def __init__(
        self,
        settings: BundlerSettings,
        runner: ProcessRunner,
        *,
        host_platform: HostPlatform | None = None,
        search_directories: Sequence[Path] | None = None,
        command_line_tools: Path | None = COMMAND_LINE_TOOLS_ROOT,
        logger: DiagnosticLogger | None = None,
    ) -> None:
        self._settings = settings
        self._runner = runner
        self._host_platform = host_platform or HostPlatform.current()
        self._search_directories = list(search_directories) if search_directories is not None else None
        self._command_line_tools = command_line_tools
        self._logger = logger or get_logger()

    def search_directories(self) -> list[Path]:
        """Return existing, symlink-resolved directories that may contain toolchains."""

        if self._search_directories is not None:
            return existing_resolved_directories(self._search_directories)
        candidates: list[Path] = []
        if self._host_platform is HostPlatform.MACOS:
            candidates.append(self._settings.home / "Library" / "Developer" / "Toolchains")
            candidates.append(SYSTEM_TOOLCHAINS_DIR)
            xcode_toolchains = self._xcode_toolchains_directory()
            if xcode_toolchains is not None:
                candidates.append(xcode_toolchains)
        if self._settings.swiftly_toolchains_dir is not None:
            candidates.append(self._settings.swiftly_toolchains_dir)
        # Swiftly's default directory on macOS is already covered above.
        if self._host_platform is HostPlatform.LINUX:
            candidates.append(self._settings.home / ".local" / "share" / "swiftly" / "toolchains")
        return existing_resolved_directories(candidates)

    def _xcode_toolchains_directory(self) -> Path | None:
        try:
            developer = Path(self._runner.get_output("xcode-select", ["-p"]).strip())
        except BundlerError as exc:
            self._logger.debug(f"Failed to locate Xcode installation, may not be installed: {exc}")
            return None
        toolchains = developer / "Toolchains"
        if not toolchains.is_dir():
            self._logger.debug(
                f"Xcode developer directory '{developer}' has no 'Toolchains' subdirectory; "
                "probably a CommandLineTools installation",
            )
            return None
        return toolchains

    def candidates(self) -> list[ToolchainCandidate]:
        """Return candidate toolchain roots without validating them."""

        directories = self.search_directories()
        self._logger.debug(f"Toolchain search directories: {', '.join(str(path) for path in directories) or '<none>'}")
        roots: list[Path] = []
        for directory in directories:
            try:
                roots.extend(entry.resolve() for entry in list_subdirectories(directory))
            except OSError as exc:
                self._logger.warn(f"Failed to enumerate toolchains in '{directory}': {exc}")
        result = [ToolchainCandidate(root) for root in dedupe(roots)]
        if (
            self._host_platform is HostPlatform.MACOS
            and self._command_line_tools is not None
            and self._command_line_tools.is_dir()
        ):
            result.append(ToolchainCandidate(self._command_line_tools, is_command_line_tools=True))
        return result

    def enumerate(self) -> list[SwiftToolchain]:
        """Load every candidate; a candidate that fails is skipped with a warning."""

        results = scan_in_order(self.candidates(), self._load, max_workers=self._settings.scan_workers)
        toolchains: list[SwiftToolchain] = []
        for toolchain, buffer in results:
            buffer.replay(self._logger)
            if toolchain is not None:
                toolchains.append(toolchain)
        return toolchains

    def _load(self, candidate: ToolchainCandidate) -> tuple[SwiftToolchain | None, BufferedLogger]:
        buffer = BufferedLogger()
        buffer.debug(f"Loading Swift toolchain root={candidate.root}")
        try:
            return load_toolchain(candidate, runner=self._runner, logger=buffer), buffer
        except BundlerError as exc:
            buffer.warn(f"Failed to load toolchain at '{candidate.root}': {exc}")
            return None, buffer


__all__ = [
    "COMMAND_LINE_TOOLS_ROOT",
    "SwiftToolchain",
    "ToolchainCandidate",
    "ToolchainCatalog",
    "ToolchainKind",
    "load_toolchain",
    "query_compiler_version",
    "swift_executable",
]
