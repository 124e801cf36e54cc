# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.
"""Selection of the SDK and toolchain that best fit a build request.

Both selectors are deterministic and prefer forward progress: when several
candidates are equally good, one is chosen by a stable key and a warning names
the alternatives.
"""

from __future__ import annotations

from collections.abc import Iterable, Sequence
from dataclasses import dataclass

from .catalog.sdks import SwiftSDK, android_sdk_compiler_version_string
from .catalog.toolchains import SwiftToolchain
from .errors import CompilerVersionParseError, NoMatchingSDKError, NoMatchingToolchainError, UnsupportedSDKError
from .logging import DiagnosticLogger, get_logger
from .platforms import BuildArchitecture, HostPlatform, host_triple
from .versioning import CompilerVersion, parse_compiler_version


def filter_sdks(
    sdks: Iterable[SwiftSDK],
    *,
    host_platform: HostPlatform,
    host_architecture: BuildArchitecture,
    target_triple: str,
) -> list[SwiftSDK]:
    """Return the SDKs targeting ``target_triple`` that accept the computed host triple."""

    host = host_triple(host_platform, host_architecture)
    return [sdk for sdk in sdks if sdk.triple == target_triple and sdk.supports_host_triple(host)]


def select_sdk(
    sdks: Iterable[SwiftSDK],
    *,
    host_platform: HostPlatform,
    host_architecture: BuildArchitecture,
    target_triple: str,
    logger: DiagnosticLogger | None = None,
) -> SwiftSDK:
    """Select the SDK for a host and target.

    Matches are ordered by :attr:`SwiftSDK.generally_unique_identifier`; the first
    wins and any others are listed in a warning.

    Args:
        sdks: Candidate SDKs, typically from :meth:`SDKCatalog.enumerate`.
        host_platform: Platform performing the build.
        host_architecture: Architecture of the build machine.
        target_triple: Exact target triple requested.
        logger: Receives the ambiguity warning.

    Returns:
        SwiftSDK: The selected SDK.

    Raises:
        NoMatchingSDKError: If no SDK matches.
    """

    log = logger or get_logger()
    matches = sorted(
        filter_sdks(
            sdks,
            host_platform=host_platform,
            host_architecture=host_architecture,
            target_triple=target_triple,
        ),
        key=lambda sdk: sdk.generally_unique_identifier,
    )
    if not matches:
        raise NoMatchingSDKError(
            f"No Swift SDKs match host platform '{host_platform.value}', host architecture "
            f"'{host_architecture.value}', and target triple '{target_triple}'",
            query={
                "host_platform": host_platform.value,
                "host_architecture": host_architecture.value,
                "target_triple": target_triple,
            },
        )
    chosen = matches[0]
    if len(matches) > 1:
        listing = "\n".join(f"* {sdk.generally_unique_identifier}" for sdk in matches)
        log.warn(
            f"Multiple SDKs match host platform '{host_platform.value}', host architecture "
            f"'{host_architecture.value}', and target triple '{target_triple}':\n{listing}\n"
            f"Using {chosen.generally_unique_identifier}",
        )
    return chosen


@dataclass(frozen=True, slots=True)
class ToolchainMatch:
    """A toolchain paired with its parsed compiler version."""

    toolchain: SwiftToolchain
    version: CompilerVersion

    def score(self, target: CompilerVersion) -> tuple[int, int]:
        return int(self.version.exact_equals(target)), int(self.version.short_equals(target))

    def sort_key(self, target: CompilerVersion) -> tuple[int, int, str]:
        return (*self.score(target), str(self.toolchain.root))


def rank_toolchains(
    toolchains: Iterable[SwiftToolchain],
    target: CompilerVersion,
    *,
    logger: DiagnosticLogger | None = None,
) -> list[ToolchainMatch]:
    """Return compatible toolchains in increasing order of relevance.

    Toolchains whose banner cannot be parsed are skipped with a warning.
    """

    log = logger or get_logger()
    parsed: list[ToolchainMatch] = []
    for toolchain in toolchains:
        try:
            version = parse_compiler_version(toolchain.compiler_version_string)
        except CompilerVersionParseError:
            log.warn(
                f"Failed to parse toolchain compiler version '{toolchain.compiler_version_string}' "
                f"of toolchain at '{toolchain.root}'; skipping",
            )
            continue
        if version.is_compatible_with(target):
            parsed.append(ToolchainMatch(toolchain, version))
    parsed.sort(key=lambda match: match.sort_key(target))
    return parsed


def select_toolchain_for_version(
    toolchains: Iterable[SwiftToolchain],
    target: CompilerVersion,
    *,
    subject: str,
    logger: DiagnosticLogger | None = None,
) -> SwiftToolchain:
    """Pick the toolchain that best matches ``target``.

    Exact-version matches beat short-version matches; equal scores are ordered by
    root path and the last wins. A shared best score is only a warning.

    Raises:
        NoMatchingToolchainError: If no toolchain is even short-equal.
    """

    log = logger or get_logger()
    ranked = rank_toolchains(toolchains, target, logger=log)
    log.debug(f"Toolchain candidates in increasing relevance: {[str(match.toolchain.root) for match in ranked]}")
    if not ranked:
        raise NoMatchingToolchainError(
            f"Failed to find a Swift toolchain compatible with {subject} "
            f"(compiler version '{target.full_version_string}')",
            query={"subject": subject, "compiler_version": target.full_version_string},
        )
    best = ranked[-1]
    best_score = best.score(target)
    tied = [match for match in ranked if match.score(target) == best_score]
    if len(tied) > 1:
        log.warn(
            f"Found multiple Swift toolchains compatible with {subject}. Choosing one at "
            f"'{best.toolchain.root}'. Use '-v' to see all compatible toolchains",
        )
        log.debug(f"Compatible toolchains: {', '.join(str(match.toolchain.root) for match in tied)}")
    return best.toolchain


def select_toolchain_for_android_sdk(
    sdk: SwiftSDK,
    toolchains: Sequence[SwiftToolchain],
    *,
    logger: DiagnosticLogger | None = None,
) -> SwiftToolchain:
    """Select the toolchain compatible with an Android Swift SDK.

    Raises:
        UnsupportedSDKError: If ``sdk`` is not an Android SDK.
        ManifestParseError: If the SDK's compiler version cannot be read.
        CompilerVersionParseError: If the SDK's compiler version cannot be parsed.
        NoMatchingToolchainError: If no installed toolchain is compatible.
    """

    if not sdk.is_android:
        raise UnsupportedSDKError(
            f"Toolchain matching is only supported for Android SDKs, got '{sdk.generally_unique_identifier}'",
        )
    version = parse_compiler_version(android_sdk_compiler_version_string(sdk))
    return select_toolchain_for_version(
        toolchains,
        version,
        subject=f"Android SDK '{sdk.generally_unique_identifier}'",
        logger=logger,
    )


__all__ = [
    "ToolchainMatch",
    "filter_sdks",
    "rank_toolchains",
    "select_sdk",
    "select_toolchain_for_android_sdk",
    "select_toolchain_for_version",
]
