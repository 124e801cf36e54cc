# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.

"""Builders for on-disk artifact bundles and toolchains used across tests."""

from __future__ import annotations

import json
from pathlib import Path
from typing import Any

from tests.helpers.fakes import FakeRunner

ANDROID_TRIPLE = "aarch64-unknown-linux-android28"
APPLE_BANNER = "Apple Swift version 6.1.2 (swiftlang-6.1.2.1.2 clang-1700.0.13.5)"


def write_json(path: Path, payload: Any) -> None:
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(json.dumps(payload), encoding="utf-8")


def make_bundle(
    directory: Path,
    name: str,
    *,
    artifact: str = "swift-android",
    triples: dict[str, dict[str, Any]] | None = None,
    host_triples: list[str] | None = None,
    schema_version: str = "4.0",
) -> Path:
    """Create an artifact bundle with one ``swiftSDK`` artifact and one variant."""

    bundle = directory / name
    variant: dict[str, Any] = {"path": "sdk"}
    if host_triples is not None:
        variant["supportedHostTriples"] = host_triples
    write_json(
        bundle / "info.json",
        {
            "schemaVersion": "1.0",
            "artifacts": {
                artifact: {"type": "swiftSDK", "version": "0.1", "variants": [variant]},
                "tools": {"type": "executable", "variants": [{"path": "bin"}]},
            },
        },
    )
    write_json(
        bundle / "sdk" / "swift-sdk.json",
        {
            "schemaVersion": schema_version,
            "targetTriples": triples or {ANDROID_TRIPLE: {"sdkRootPath": "sysroot"}},
        },
    )
    return bundle


def make_toolchain(root: Path, runner: FakeRunner, *, banner: str = APPLE_BANNER) -> Path:
    """Create ``root/usr/bin/swift`` and register its target-info output."""

    swift = root / "usr" / "bin" / "swift"
    swift.parent.mkdir(parents=True)
    swift.write_text("#!/bin/sh\n", encoding="utf-8")
    runner.add(swift, "-print-target-info", output=json.dumps({"compilerVersion": banner, "target": {}}))
    return root


__all__ = ["ANDROID_TRIPLE", "APPLE_BANNER", "make_bundle", "make_toolchain", "write_json"]
