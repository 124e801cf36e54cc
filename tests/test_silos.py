# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.
"""Tests for stable hashing and SDK silo links."""

from __future__ import annotations

import os
from pathlib import Path

import pytest

from swift_bundler.filesystem import (
    SDK_SILOS_DIRECTORY,
    FileSystemError,
    ensure_directory,
    populated_sdk_silo,
    stable_hash,
    stable_hash_hex,
)


def test_stable_hash_is_djb2() -> None:
    assert stable_hash("") == 5381
    assert stable_hash("a") == 5381 * 33 + ord("a")
    assert stable_hash_hex("a") == f"{5381 * 33 + ord('a'):08x}"


def test_stable_hash_wraps_to_64_bits() -> None:
    value = stable_hash("/Users/someone/Library/org.swift.swiftpm/swift-sdks/android.artifactbundle" * 4)

    assert 0 <= value < 2**64
    assert len(stable_hash_hex("anything")) == 8


def test_populated_silo_links_bundle(tmp_path: Path) -> None:
    bundle = tmp_path / "sdks" / "android.artifactbundle"
    bundle.mkdir(parents=True)
    cache = tmp_path / "cache"

    silo = populated_sdk_silo(bundle, "swift-android", cache)

    link = silo / f"android.artifactbundle-{stable_hash_hex(str(bundle))}"
    assert silo == cache / SDK_SILOS_DIRECTORY / "swift-android"
    assert link.is_symlink()
    assert link.resolve() == bundle.resolve()
    assert populated_sdk_silo(bundle, "swift-android", cache) == silo
    assert os.listdir(silo) == [link.name]


def test_populated_silo_replaces_stale_link(tmp_path: Path) -> None:
    bundle = tmp_path / "sdks" / "android.artifactbundle"
    bundle.mkdir(parents=True)
    elsewhere = tmp_path / "elsewhere"
    elsewhere.mkdir()
    cache = tmp_path / "cache"
    silo = cache / SDK_SILOS_DIRECTORY / "swift-android"
    silo.mkdir(parents=True)
    link = silo / f"android.artifactbundle-{stable_hash_hex(str(bundle))}"
    link.symlink_to(elsewhere, target_is_directory=True)

    populated_sdk_silo(bundle, "swift-android", cache)

    assert link.resolve() == bundle.resolve()


def test_distinct_bundles_get_distinct_links(tmp_path: Path) -> None:
    first = tmp_path / "a" / "sdk.artifactbundle"
    second = tmp_path / "b" / "sdk.artifactbundle"
    first.mkdir(parents=True)
    second.mkdir(parents=True)
    cache = tmp_path / "cache"

    populated_sdk_silo(first, "sdk", cache)
    silo = populated_sdk_silo(second, "sdk", cache)

    assert len(os.listdir(silo)) == 2


def test_ensure_directory_reports_failures(tmp_path: Path) -> None:
    blocker = tmp_path / "file"
    blocker.write_text("", encoding="utf-8")

    with pytest.raises(FileSystemError, match="Failed to create directory"):
        ensure_directory(blocker / "child")
