# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.
"""Tests for compiler banner parsing and tool version sorting."""

from __future__ import annotations

import pytest
from packaging.version import Version

from swift_bundler.errors import CompilerVersionParseError
from swift_bundler.versioning import CompilerVersion, parse_compiler_version, sorted_tool_versions
from tests.helpers.fakes import RecordingLogger


@pytest.mark.parametrize(
    ("banner", "variant", "short", "exact"),
    [
        ("Apple Swift version 6.1.2 (swiftlang-6.1.2.1.2 clang-1700.0.13.5)", "Apple", "6.1.2", "6.1.2.1.2"),
        ("SwiftWasm Swift version 5.9.2 (swift-5.9.2-RELEASE)", "SwiftWasm", "5.9.2", "5.9.2-RELEASE"),
        ("Swift version 6.3-dev effective-5.10 (Swift aec3d15e6fbe41c)", None, "6.3-dev", "aec3d15e6fbe41c"),
        (
            "swift-driver version: 1.120.5 Apple Swift version 6.1.2 (swiftlang-6.1.2.1.2 clang-1700.0.13.5)",
            "Apple",
            "6.1.2",
            "6.1.2.1.2",
        ),
        (
            "Apple Swift version 6.3-dev (LLVM 732b15bc343f6d4, Swift aec3d15e6fbe41c)",
            "Apple",
            "6.3-dev",
            "aec3d15e6fbe41c",
        ),
    ],
)
def test_parse_compiler_version_banners(banner: str, variant: str | None, short: str, exact: str) -> None:
    version = parse_compiler_version(banner)

    assert version.variant == variant
    assert version.short_version == short
    assert version.exact_version == exact
    assert version.full_version_string == banner


@pytest.mark.parametrize(
    "banner",
    [
        "clang version 17.0.0",
        "Apple Swift version 6.1.2",
        "Apple Swift version 6.1.2 (swiftlang-6.1.2.1.2",
        "Apple Swift version 6.1.2 (clang-1700.0.13.5)",
        "Apple Swift version 6.1.2 (LLVM abc, Clang def)",
    ],
)
def test_parse_compiler_version_rejects_malformed_banners(banner: str) -> None:
    with pytest.raises(CompilerVersionParseError) as excinfo:
        parse_compiler_version(banner)

    assert excinfo.value.reason


def test_compatibility_uses_exact_or_short_equality() -> None:
    release = CompilerVersion("a", "Apple", "6.1.2", "6.1.2.1.2")
    rebuilt = CompilerVersion("b", None, "6.1.2", "6.1.2.1.3")
    other = CompilerVersion("c", None, "6.0", "6.1.2.1.2")
    unrelated = CompilerVersion("d", None, "5.10", "5.10.1")

    assert release.is_compatible_with(rebuilt)
    assert release.is_compatible_with(other)
    assert not release.is_compatible_with(unrelated)


def test_sorted_tool_versions_orders_numerically_and_skips_garbage() -> None:
    logger = RecordingLogger()

    parsed = sorted_tool_versions(["34.0.0", "9.0.0", "latest", "30.0.3"], logger=logger, subject="build tools")

    assert [name for _, name in parsed] == ["9.0.0", "30.0.3", "34.0.0"]
    assert parsed[-1][0] == Version("34.0.0")
    assert logger.warnings == ["Skipping build tools 'latest' with unparsable version"]
