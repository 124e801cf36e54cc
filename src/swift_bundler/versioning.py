# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.
"""Compiler banner parsing and tool version helpers.

Swift compilers report their version in a free-form banner, for example::

    Apple Swift version 6.1.2 (swiftlang-6.1.2.1.2 clang-1700.0.13.5)
    SwiftWasm Swift version 5.9.2 (swift-5.9.2-RELEASE)
    Apple Swift version 6.3-dev (LLVM 732b15bc343f6d4, Swift aec3d15e6fbe41c)
    Swift version 6.3-dev effective-5.10 (Swift aec3d15e6fbe41c)
    swift-driver version: 1.120.5 Apple Swift version 6.1.2 (swiftlang-6.1.2.1.2 clang-1700.0.13.5)

:func:`parse_compiler_version` turns these into :class:`CompilerVersion` records.
"""

from __future__ import annotations

from collections.abc import Iterable
from dataclasses import dataclass
from typing import Final

from packaging.version import InvalidVersion, Version

from .errors import CompilerVersionParseError
from .logging import DiagnosticLogger

VERSION_MARKER: Final[str] = "Swift version "
DRIVER_PREFIX: Final[str] = "swift-driver version: "
COMMA_SECTION_PREFIX: Final[str] = "Swift "
SPACE_SECTION_PREFIXES: Final[tuple[str, ...]] = ("swift-", "swiftlang-")


@dataclass(frozen=True, slots=True)
class CompilerVersion:
    """Parsed Swift compiler version."""

    full_version_string: str
    variant: str | None
    short_version: str
    exact_version: str

    def exact_equals(self, other: CompilerVersion) -> bool:
        return self.exact_version == other.exact_version

    def short_equals(self, other: CompilerVersion) -> bool:
        return self.short_version == other.short_version

    def is_compatible_with(self, other: CompilerVersion) -> bool:
        """Return ``True`` when the versions are exact-equal or short-equal."""

        return self.exact_equals(other) or self.short_equals(other)


def _find(text: str, needle: str, start: int, reason: str) -> int:
    index = text.find(needle, start)
    if index < 0:
        raise CompilerVersionParseError(text, reason, position=start)
    return index


def parse_compiler_version(banner: str) -> CompilerVersion:
    """Parse a Swift compiler version banner.

    Args:
        banner: Output of ``swift -version`` or the ``compilerVersion`` field of
            ``swift -print-target-info``.

    Returns:
        CompilerVersion: Parsed variant, short version and exact version.

    Raises:
        CompilerVersionParseError: If the banner lacks the ``Swift version`` marker,
            the parenthesised section, or a recognisable exact version entry.
    """

    marker = _find(banner, VERSION_MARKER, 0, f"expected '{VERSION_MARKER.strip()}' marker")
    variant_part = banner[:marker]
    short_start = marker + len(VERSION_MARKER)
    short_end = _find(banner, " ", short_start, "expected a space after the short version")
    short_version = banner[short_start:short_end]
    section_start = _find(banner, "(", short_end, "expected a parenthesised version section") + 1
    section_end = _find(banner, ")", section_start, "expected ')' closing the version section")
    section = banner[section_start:section_end]

    # The comma separated form can hold a single entry, so "Swift " selects the branch.
    if COMMA_SECTION_PREFIX in section:
        entry = next((part for part in section.split(", ") if part.startswith(COMMA_SECTION_PREFIX)), None)
        if entry is None:
            raise CompilerVersionParseError(
                section,
                f"expected to find version preceded by '{COMMA_SECTION_PREFIX}' within the parenthesised section",
                position=section_start,
            )
        exact_version = entry[len(COMMA_SECTION_PREFIX) :]
    else:
        exact_version = ""
        for token in section.split():
            prefix = next((prefix for prefix in SPACE_SECTION_PREFIXES if token.startswith(prefix)), None)
            if prefix is not None:
                exact_version = token[len(prefix) :]
                break
        else:
            raise CompilerVersionParseError(
                section,
                "expected to find version preceded by "
                f"'{SPACE_SECTION_PREFIXES[0]}' or '{SPACE_SECTION_PREFIXES[1]}' within the parenthesised section",
                position=section_start,
            )

    return CompilerVersion(
        full_version_string=banner,
        variant=_parse_variant(variant_part),
        short_version=short_version,
        exact_version=exact_version,
    )


def _parse_variant(raw: str) -> str | None:
    trimmed = raw.strip()
    if not trimmed:
        return None
    if trimmed.startswith(DRIVER_PREFIX):
        parts = trimmed.split(" ", 3)
        return parts[3] if len(parts) == 4 else None
    return trimmed


def parse_tool_version(name: str) -> Version | None:
    """Return ``name`` as a :class:`packaging.version.Version`, or ``None`` if unparsable."""

    try:
        return Version(name)
    except InvalidVersion:
        return None


def sorted_tool_versions(
    names: Iterable[str],
    *,
    logger: DiagnosticLogger | None = None,
    subject: str = "version",
) -> list[tuple[Version, str]]:
    """Sort directory names such as NDK or build-tools versions in ascending order.

    Names that are not valid versions are skipped with a warning.

    Args:
        names: Candidate version strings.
        logger: Optional logger receiving warnings for unparsable names.
        subject: Noun used in warnings.

    Returns:
        list[tuple[Version, str]]: Parsed versions paired with their original text.
    """

    parsed: list[tuple[Version, str]] = []
    for name in names:
        version = parse_tool_version(name)
        if version is None:
            if logger is not None:
                logger.warn(f"Skipping {subject} '{name}' with unparsable version")
            continue
        parsed.append((version, name))
    parsed.sort(key=lambda entry: entry[0])
    return parsed


__all__ = [
    "CompilerVersion",
    "parse_compiler_version",
    "parse_tool_version",
    "sorted_tool_versions",
]
