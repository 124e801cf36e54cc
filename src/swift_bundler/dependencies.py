# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.
"""Transitive closure of the shared libraries a native binary needs at load time."""

from __future__ import annotations

import shutil
import string
from collections.abc import Callable, Iterable, Sequence
from dataclasses import dataclass, field
from pathlib import Path
from typing import Final

from .catalog.sdks import SwiftSDK
from .errors import BundlerError, UnresolvedDependencyError
from .logging import DiagnosticLogger, get_logger
from .platforms import BuildArchitecture
from .process import ProcessRunner

_HEX_DIGITS: Final[frozenset[str]] = frozenset(string.hexdigits)
_NEEDED_TAG: Final[str] = "(NEEDED)"
_SHARED_LIBRARY_PREFIX: Final[str] = "Shared library: ["
_READELF_HEADER_LINES: Final[int] = 2

ANDROID_LIBRARY_SUBDIRECTORIES: Final[dict[BuildArchitecture, str]] = {
    BuildArchitecture.ARM64: "aarch64-linux-android",
    BuildArchitecture.ARMV7: "arm-linux-androideabi",
    BuildArchitecture.X86_64: "x86_64-linux-android",
}

DependencyLister = Callable[[Path], list[str]]


class DependencyInspectionError(BundlerError):
    """Raised when the dynamic section of a library cannot be read."""


@dataclass(frozen=True, slots=True)
class SharedObject:
    """A resolved shared library.

    Equality and hashing use ``location`` only; ``must_copy_into_bundle`` is false
    for libraries the target system already provides.
    """

    location: Path
    must_copy_into_bundle: bool = field(default=True, compare=False)


@dataclass(frozen=True, slots=True)
class SearchDirectory:
    """A directory searched for dependencies, with the copy policy for its hits."""

    location: Path
    requires_copying: bool = True


def parse_needed_line(line: str) -> str | None:
    """Return the library name from a ``readelf -d`` ``NEEDED`` row, else ``None``.

    Rows look like ``0x0000000000000001 (NEEDED) Shared library: [libc.so]``,
    optionally indented.
    """

    rest = line.lstrip()
    if not rest.startswith("0x"):
        return None
    index = 2
    while index < len(rest) and rest[index] in _HEX_DIGITS:
        index += 1
    if index == 2:
        return None
    rest = rest[index:].lstrip()
    if not rest.startswith(_NEEDED_TAG):
        return None
    rest = rest[len(_NEEDED_TAG) :].lstrip()
    if not rest.startswith(_SHARED_LIBRARY_PREFIX):
        return None
    rest = rest[len(_SHARED_LIBRARY_PREFIX) :]
    end = rest.find("]")
    if end < 0:
        return None
    return rest[:end]


def parse_needed_entries(output: str) -> list[str]:
    """Return every ``NEEDED`` library name in ``readelf -d`` output.

    The first two lines are headers; rows that are not ``NEEDED`` entries are ignored.
    """

    names: list[str] = []
    for line in output.split("\n")[_READELF_HEADER_LINES:]:
        name = parse_needed_line(line)
        if name is not None:
            names.append(name)
    return names


@dataclass(slots=True)
class ReadelfDependencyLister:
    """Lists declared dependencies by running ``readelf -d`` on a library."""

    runner: ProcessRunner
    readelf: Path

    def __call__(self, library: Path) -> list[str]:
        try:
            output = self.runner.get_output(self.readelf, ["-d", str(library)])
        except BundlerError as exc:
            raise DependencyInspectionError(
                f"Failed to enumerate dynamic dependencies of library '{library}': {exc}",
            ) from exc
        return parse_needed_entries(output)


def resolve_dependency(name: str, search_directories: Sequence[SearchDirectory], *, required_by: Path) -> SharedObject:
    """Locate ``name`` in the first search directory that contains it.

    Raises:
        UnresolvedDependencyError: If no directory contains ``name``; every attempted
            location is reported in search order.
    """

    attempted: list[Path] = []
    for directory in search_directories:
        candidate = directory.location / name
        if candidate.exists():
            return SharedObject(candidate, must_copy_into_bundle=directory.requires_copying)
        attempted.append(candidate)
    listing = "\n".join(f"* {path}" for path in attempted)
    raise UnresolvedDependencyError(
        f"Failed to locate dependency '{name}' of library '{required_by}'. Attempted:\n{listing}",
        query={"dependency": name, "library": str(required_by)},
        attempted=attempted,
    )


def dependency_closure(
    library: Path,
    list_dependencies: DependencyLister,
    search_directories: Sequence[SearchDirectory],
    *,
    logger: DiagnosticLogger | None = None,
) -> list[SharedObject]:
    """Walk the dependency graph of ``library``.

    Args:
        library: The starting shared library or executable.
        list_dependencies: Returns the bare ``NEEDED`` names of a library, one
            external invocation per library.
        search_directories: Directories in priority order.
        logger: Receives a debug line per expanded library.

    Returns:
        list[SharedObject]: Each dependency once, in discovery order.

    Raises:
        UnresolvedDependencyError: If any dependency cannot be located.
        DependencyInspectionError: If a library's dependencies cannot be listed.
    """

    log = logger or get_logger()
    queue: list[Path] = [library]
    seen: set[SharedObject] = set()
    closure: list[SharedObject] = []
    while queue:
        current = queue.pop()
        names = list_dependencies(current)
        log.debug(f"Dependencies of library={current}: {', '.join(names) or '<none>'}")
        for name in names:
            dependency = resolve_dependency(name, search_directories, required_by=current)
            if dependency in seen:
                continue
            seen.add(dependency)
            closure.append(dependency)
            queue.append(dependency.location)
    return closure


def android_search_directories(
    products_directory: Path,
    sdk: SwiftSDK,
    architecture: BuildArchitecture,
    api: int,
) -> list[SearchDirectory]:
    """Return the dependency search order used for Android bundles.

    Products and the SDK's Swift runtime come first. Each SDK library directory
    then contributes its triple subdirectory (bundled) followed by the API-level
    subdirectory, whose libraries ship with the system.
    """

    subdirectory = ANDROID_LIBRARY_SUBDIRECTORIES[architecture]
    directories = [SearchDirectory(products_directory), SearchDirectory(sdk.resources_dir / "android")]
    for library_dir in sdk.library_dirs:
        directories.append(SearchDirectory(library_dir / subdirectory, requires_copying=True))
        directories.append(SearchDirectory(library_dir / subdirectory / str(api), requires_copying=False))
    return directories


def copy_bundled_dependencies(dependencies: Iterable[SharedObject], destination: Path) -> list[Path]:
    """Copy the dependencies that must ship with the bundle into ``destination``.

    Returns:
        list[Path]: Paths of the copied files.

    Raises:
        DependencyInspectionError: If a file cannot be copied.
    """

    destination.mkdir(parents=True, exist_ok=True)
    copied: list[Path] = []
    for dependency in dependencies:
        if not dependency.must_copy_into_bundle:
            continue
        target = destination / dependency.location.name
        try:
            shutil.copy2(dependency.location, target)
        except OSError as exc:
            raise DependencyInspectionError(
                f"Failed to copy dynamic dependency '{dependency.location}' to '{target}': {exc}",
            ) from exc
        copied.append(target)
    return copied


__all__ = [
    "ANDROID_LIBRARY_SUBDIRECTORIES",
    "DependencyInspectionError",
    "DependencyLister",
    "ReadelfDependencyLister",
    "SearchDirectory",
    "SharedObject",
    "android_search_directories",
    "copy_bundled_dependencies",
    "dependency_closure",
    "parse_needed_entries",
    "parse_needed_line",
    "resolve_dependency",
]
