# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.
"""Locating the Android SDK and the tools it ships."""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
from typing import Final

from packaging.version import Version

from ..config import BundlerSettings
from ..errors import (
    AndroidSDKNotFoundError,
    EnvironmentProblem,
    MissingToolError,
    UnsupportedHostError,
    join_grammatically,
)
from ..logging import DiagnosticLogger, get_logger
from ..platforms import BuildArchitecture, HostPlatform
from ..versioning import sorted_tool_versions

ANDROID_HOME_VARIABLE: Final[str] = "ANDROID_HOME"
BUILD_TOOLS_DIRECTORY: Final[str] = "build-tools"
NDK_DIRECTORY: Final[str] = "ndk"
_PREBUILT_PLATFORM_NAMES: Final[dict[HostPlatform, str]] = {
    HostPlatform.LINUX: "linux",
    HostPlatform.MACOS: "darwin",
    HostPlatform.WINDOWS: "windows",
}


def android_sdk_guesses(settings: BundlerSettings, host_platform: HostPlatform) -> list[Path]:
    """Return the default Android SDK install locations for ``host_platform``."""

    if host_platform is HostPlatform.MACOS:
        return [settings.home / "Library" / "Android" / "sdk"]
    if host_platform is HostPlatform.LINUX:
        return [settings.home / "Android" / "Sdk"]
    local_app_data = settings.local_app_data or settings.home / "AppData" / "Local"
    return [local_app_data / "Android" / "sdk"]


@dataclass(frozen=True, slots=True)
class AndroidSDK:
    """An Android SDK installation rooted at ``root``."""

    root: Path

    @property
    def adb(self) -> Path:
        return self.root / "platform-tools" / "adb"

    @property
    def avdmanager(self) -> Path:
        return self.root / "cmdline-tools" / "latest" / "bin" / "avdmanager"

    @property
    def emulator(self) -> Path:
        return self.root / "emulator" / "emulator"

    def require_tool(self, name: str) -> Path:
        """Return the path of ``adb``, ``avdmanager`` or ``emulator`` if it exists.

        Raises:
            MissingToolError: If the executable is not installed.
        """

        path: Path = getattr(self, name)
        if not path.exists():
            raise MissingToolError(
                name,
                path,
                remediation=f"Install it with the Android SDK manager for the SDK at '{self.root}'",
            )
        return path

    def build_tool_versions(self, *, logger: DiagnosticLogger | None = None) -> list[Version]:
        """Return installed build-tools versions in ascending order.

        Raises:
            EnvironmentProblem: If the SDK has no ``build-tools`` directory.
        """

        build_tools = self.root / BUILD_TOOLS_DIRECTORY
        try:
            names = [entry.name for entry in build_tools.iterdir() if entry.is_dir()]
        except OSError as exc:
            raise EnvironmentProblem(f"The Android SDK '{self.root}' is missing a build-tools subdirectory") from exc
        parsed = sorted_tool_versions(names, logger=logger or get_logger(), subject="build tools")
        return [version for version, _ in parsed]

    def default_compilation_version(self, *, logger: DiagnosticLogger | None = None) -> Version:
        """Return the newest installed build-tools version.

        Raises:
            EnvironmentProblem: If no build tools are installed.
        """

        versions = self.build_tool_versions(logger=logger)
        if not versions:
            raise EnvironmentProblem(f"No build tools found at ./{BUILD_TOOLS_DIRECTORY} in Android SDK at {self.root}")
        return versions[-1]

    def ndk_directories(self, *, logger: DiagnosticLogger | None = None) -> list[Path]:
        """Return installed NDK directories ordered by ascending version."""

        ndk_root = self.root / NDK_DIRECTORY
        if not ndk_root.exists():
            return []
        names = [entry.name for entry in ndk_root.iterdir() if entry.is_dir()]
        parsed = sorted_tool_versions(names, logger=logger or get_logger(), subject="NDK")
        return [ndk_root / name for _, name in parsed]

    def latest_ndk(self, *, logger: DiagnosticLogger | None = None) -> Path:
        """Return the newest installed NDK.

        Raises:
            EnvironmentProblem: If no NDK is installed.
        """

        ndks = self.ndk_directories(logger=logger)
        if not ndks:
            raise EnvironmentProblem(
                f"No NDK installations found. Searched '{self.root / NDK_DIRECTORY}'",
                remediation="Install an NDK with the Android SDK manager",
            )
        return ndks[-1]


def llvm_prebuilt_directory(ndk: Path, host_platform: HostPlatform, host_architecture: BuildArchitecture) -> Path:
    """Return the NDK's LLVM prebuilt directory for the host.

    NDK LLVM prebuilts are only distributed for x86_64 (Apple Silicon Macs run them
    under Rosetta).

    Raises:
        UnsupportedHostError: If the host cannot run the prebuilts.
        EnvironmentProblem: If the prebuilt directory is missing.
    """

    if host_platform is not HostPlatform.MACOS and host_architecture is not BuildArchitecture.X86_64:
        raise UnsupportedHostError(
            "NDK LLVM prebuilts are only distributed for x86_64; "
            f"{host_platform.value} + {host_architecture.value} is not supported",
        )
    directory = ndk / "toolchains" / "llvm" / "prebuilt" / f"{_PREBUILT_PLATFORM_NAMES[host_platform]}-x86_64"
    if not directory.is_dir():
        raise EnvironmentProblem(
            f"Expected NDK LLVM prebuilts to be located at '{directory}', but the directory does not exist",
        )
    return directory


def locate_readelf(ndk: Path, host_platform: HostPlatform, host_architecture: BuildArchitecture) -> Path:
    """Return the NDK's ``llvm-readelf``.

    Raises:
        MissingToolError: If the tool is missing from the prebuilt directory.
    """

    readelf = llvm_prebuilt_directory(ndk, host_platform, host_architecture) / "bin" / "llvm-readelf"
    if not readelf.exists():
        raise MissingToolError("llvm-readelf", readelf)
    return readelf


def locate_android_sdk(settings: BundlerSettings, host_platform: HostPlatform | None = None) -> AndroidSDK:
    """Locate the Android SDK.

    ``ANDROID_HOME`` takes precedence and must point at an existing directory;
    otherwise the platform's default install locations are tried.

    Raises:
        AndroidSDKNotFoundError: If ``ANDROID_HOME`` is invalid or no guess exists.
    """

    if settings.android_home is not None:
        if not settings.android_home.is_dir():
            raise AndroidSDKNotFoundError(
                f"The {ANDROID_HOME_VARIABLE} environment variable points to a directory that does not exist "
                f"({settings.android_home})",
                remediation=(
                    "Either update its value to point to a valid Android SDK, or unset it to let the SDK "
                    "be located automatically"
                ),
            )
        return AndroidSDK(settings.android_home)

    guesses = android_sdk_guesses(settings, host_platform or HostPlatform.current())
    for guess in guesses:
        if guess.is_dir():
            return AndroidSDK(guess)
    tried = join_grammatically([f"${ANDROID_HOME_VARIABLE}", *(str(guess) for guess in guesses)])
    raise AndroidSDKNotFoundError(
        f"Failed to locate the Android SDK. Tried {tried}",
        remediation=(
            f"If the SDK is correctly installed, set the {ANDROID_HOME_VARIABLE} environment variable "
            "to the absolute path of the SDK"
        ),
    )


__all__ = [
    "ANDROID_HOME_VARIABLE",
    "AndroidSDK",
    "android_sdk_guesses",
    "llvm_prebuilt_directory",
    "locate_android_sdk",
    "locate_readelf",
]
