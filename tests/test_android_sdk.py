# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.
"""Tests for locating the Android SDK, its tools and NDKs."""

from __future__ import annotations

from pathlib import Path

import pytest
from packaging.version import Version

from swift_bundler.android.sdk import (
    AndroidSDK,
    android_sdk_guesses,
    llvm_prebuilt_directory,
    locate_android_sdk,
    locate_readelf,
)
from swift_bundler.config import BundlerSettings
from swift_bundler.errors import AndroidSDKNotFoundError, EnvironmentProblem, MissingToolError, UnsupportedHostError
from swift_bundler.platforms import BuildArchitecture, HostPlatform
from tests.helpers.fakes import RecordingLogger


def make_dirs(root: Path, *names: str) -> None:
    for name in names:
        (root / name).mkdir(parents=True)


def test_android_home_takes_precedence(home: Path, android_sdk_root: Path) -> None:
    make_dirs(home, "Android/Sdk")
    settings = BundlerSettings(home=home, android_home=android_sdk_root)

    assert locate_android_sdk(settings, HostPlatform.LINUX) == AndroidSDK(android_sdk_root)


def test_invalid_android_home_is_reported(home: Path, tmp_path: Path) -> None:
    make_dirs(home, "Android/Sdk")
    settings = BundlerSettings(home=home, android_home=tmp_path / "missing")

    with pytest.raises(AndroidSDKNotFoundError, match="does not exist") as excinfo:
        locate_android_sdk(settings, HostPlatform.LINUX)

    assert excinfo.value.remediation is not None


def test_default_location_is_guessed(home: Path) -> None:
    make_dirs(home, "Library/Android/sdk")

    assert locate_android_sdk(BundlerSettings(home=home), HostPlatform.MACOS).root == home / "Library/Android/sdk"


def test_missing_sdk_lists_every_guess(home: Path) -> None:
    with pytest.raises(AndroidSDKNotFoundError) as excinfo:
        locate_android_sdk(BundlerSettings(home=home), HostPlatform.LINUX)

    assert f"Tried '$ANDROID_HOME' and '{home / 'Android' / 'Sdk'}'" in str(excinfo.value)


def test_windows_guess_prefers_local_app_data(home: Path, tmp_path: Path) -> None:
    local = tmp_path / "Local"

    assert android_sdk_guesses(BundlerSettings(home=home, local_app_data=local), HostPlatform.WINDOWS) == [
        local / "Android" / "sdk",
    ]
    assert android_sdk_guesses(BundlerSettings(home=home), HostPlatform.WINDOWS) == [
        home / "AppData" / "Local" / "Android" / "sdk",
    ]


def test_require_tool(android_sdk_root: Path) -> None:
    sdk = AndroidSDK(android_sdk_root)
    sdk.emulator.unlink()

    assert sdk.require_tool("adb") == android_sdk_root / "platform-tools" / "adb"
    with pytest.raises(MissingToolError) as excinfo:
        sdk.require_tool("emulator")
    assert excinfo.value.expected == sdk.emulator


def test_build_tool_versions_are_sorted_and_skip_junk(tmp_path: Path) -> None:
    make_dirs(tmp_path, "build-tools/34.0.0", "build-tools/30.0.3", "build-tools/35.0.0-rc1", "build-tools/latest")
    logger = RecordingLogger()
    sdk = AndroidSDK(tmp_path)

    versions = sdk.build_tool_versions(logger=logger)

    assert versions == [Version("30.0.3"), Version("34.0.0"), Version("35.0.0rc1")]
    assert sdk.default_compilation_version(logger=logger) == Version("35.0.0rc1")
    assert "Skipping build tools 'latest' with unparsable version" in logger.warnings


def test_missing_build_tools(tmp_path: Path) -> None:
    sdk = AndroidSDK(tmp_path)

    with pytest.raises(EnvironmentProblem, match="missing a build-tools subdirectory"):
        sdk.build_tool_versions()

    make_dirs(tmp_path, "build-tools")
    with pytest.raises(EnvironmentProblem, match="No build tools found"):
        sdk.default_compilation_version()


def test_latest_ndk(tmp_path: Path) -> None:
    make_dirs(tmp_path, "ndk/26.1.10909125", "ndk/25.2.9519653", "ndk/27.0.12077973")
    sdk = AndroidSDK(tmp_path)

    assert sdk.ndk_directories(logger=RecordingLogger()) == [
        tmp_path / "ndk" / "25.2.9519653",
        tmp_path / "ndk" / "26.1.10909125",
        tmp_path / "ndk" / "27.0.12077973",
    ]
    assert sdk.latest_ndk(logger=RecordingLogger()) == tmp_path / "ndk" / "27.0.12077973"


def test_latest_ndk_without_installations(tmp_path: Path) -> None:
    with pytest.raises(EnvironmentProblem, match="No NDK installations found"):
        AndroidSDK(tmp_path).latest_ndk()


@pytest.mark.parametrize(
    ("host_platform", "architecture", "prebuilt"),
    [
        (HostPlatform.LINUX, BuildArchitecture.X86_64, "linux-x86_64"),
        (HostPlatform.MACOS, BuildArchitecture.ARM64, "darwin-x86_64"),
        (HostPlatform.WINDOWS, BuildArchitecture.X86_64, "windows-x86_64"),
    ],
)
def test_llvm_prebuilt_directory(
    tmp_path: Path,
    host_platform: HostPlatform,
    architecture: BuildArchitecture,
    prebuilt: str,
) -> None:
    directory = tmp_path / "toolchains" / "llvm" / "prebuilt" / prebuilt
    directory.mkdir(parents=True)

    assert llvm_prebuilt_directory(tmp_path, host_platform, architecture) == directory


def test_llvm_prebuilts_require_x86_64_off_macos(tmp_path: Path) -> None:
    with pytest.raises(UnsupportedHostError):
        llvm_prebuilt_directory(tmp_path, HostPlatform.LINUX, BuildArchitecture.ARM64)


def test_locate_readelf(tmp_path: Path) -> None:
    bin_directory = tmp_path / "toolchains" / "llvm" / "prebuilt" / "linux-x86_64" / "bin"
    bin_directory.mkdir(parents=True)

    with pytest.raises(MissingToolError):
        locate_readelf(tmp_path, HostPlatform.LINUX, BuildArchitecture.X86_64)

    readelf = bin_directory / "llvm-readelf"
    readelf.write_text("", encoding="utf-8")
    assert locate_readelf(tmp_path, HostPlatform.LINUX, BuildArchitecture.X86_64) == readelf
