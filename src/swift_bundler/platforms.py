# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.
"""Platforms, architectures and target triples understood by the bundler."""

from __future__ import annotations

import platform as _platform
import sys
from collections.abc import Iterable
from dataclasses import dataclass
from enum import StrEnum
from typing import Final

from .errors import UnsupportedHostError, UsageError


class OS(StrEnum):
    """Operating systems that bundles can target."""

    MACOS = "macOS"
    IOS = "iOS"
    VISIONOS = "visionOS"
    TVOS = "tvOS"
    LINUX = "linux"
    WINDOWS = "windows"
    ANDROID = "android"

    @property
    def display_name(self) -> str:
        return _OS_DISPLAY_NAMES.get(self, self.value)

    @property
    def is_apple(self) -> bool:
        return self in {OS.MACOS, OS.IOS, OS.VISIONOS, OS.TVOS}


_OS_DISPLAY_NAMES: Final[dict[OS, str]] = {
    OS.LINUX: "Linux",
    OS.WINDOWS: "Windows",
    OS.ANDROID: "Android",
}

SIMULATOR_OSES: Final[tuple[OS, ...]] = (OS.IOS, OS.VISIONOS, OS.TVOS, OS.ANDROID)


class Platform(StrEnum):
    """Build platforms in their fixed listing order."""

    MACOS = "macOS"
    MAC_CATALYST = "macCatalyst"
    IOS = "iOS"
    IOS_SIMULATOR = "iOSSimulator"
    VISIONOS = "visionOS"
    VISIONOS_SIMULATOR = "visionOSSimulator"
    TVOS = "tvOS"
    TVOS_SIMULATOR = "tvOSSimulator"
    LINUX = "linux"
    WINDOWS = "windows"
    ANDROID = "android"

    @property
    def sort_index(self) -> int:
        """Return the position of the platform in the fixed enumeration order."""

        return _PLATFORM_ORDER[self]

    @property
    def os(self) -> OS:
        return _PLATFORM_OS[self]

    @property
    def is_simulator(self) -> bool:
        return self in {Platform.IOS_SIMULATOR, Platform.VISIONOS_SIMULATOR, Platform.TVOS_SIMULATOR}

    @property
    def is_apple(self) -> bool:
        return self in APPLE_PLATFORM_CAPABILITIES


_PLATFORM_ORDER: Final[dict[Platform, int]] = {platform: index for index, platform in enumerate(Platform)}
_PLATFORM_OS: Final[dict[Platform, OS]] = {
    Platform.MACOS: OS.MACOS,
    Platform.MAC_CATALYST: OS.MACOS,
    Platform.IOS: OS.IOS,
    Platform.IOS_SIMULATOR: OS.IOS,
    Platform.VISIONOS: OS.VISIONOS,
    Platform.VISIONOS_SIMULATOR: OS.VISIONOS,
    Platform.TVOS: OS.TVOS,
    Platform.TVOS_SIMULATOR: OS.TVOS,
    Platform.LINUX: OS.LINUX,
    Platform.WINDOWS: OS.WINDOWS,
    Platform.ANDROID: OS.ANDROID,
}


class HostPlatform(StrEnum):
    """Platforms the bundler itself can run on."""

    MACOS = "macOS"
    LINUX = "linux"
    WINDOWS = "windows"

    @classmethod
    def current(cls) -> HostPlatform:
        """Return the host platform of the running interpreter.

        Raises:
            UnsupportedHostError: If the interpreter runs on an unrecognised system.
        """

        if sys.platform == "darwin":
            return cls.MACOS
        if sys.platform.startswith("linux"):
            return cls.LINUX
        if sys.platform in {"win32", "cygwin"}:
            return cls.WINDOWS
        raise UnsupportedHostError(f"Unsupported host platform '{sys.platform}'")

    @property
    def platform(self) -> Platform:
        return Platform(self.value)


class BuildArchitecture(StrEnum):
    """Architectures that bundles can be built for."""

    X86_64 = "x86_64"
    ARM64 = "arm64"
    ARMV7 = "armv7"

    @classmethod
    def host(cls) -> BuildArchitecture:
        """Return the architecture of the running interpreter.

        Raises:
            UnsupportedHostError: If the machine architecture is not supported.
        """

        machine = _platform.machine().lower()
        if machine in {"x86_64", "amd64"}:
            return cls.X86_64
        if machine in {"arm64", "aarch64"}:
            return cls.ARM64
        raise UnsupportedHostError(f"Unsupported host architecture '{machine}'")

    def argument(self, platform: Platform) -> str:
        """Return the spelling build tools expect for this architecture on ``platform``."""

        if self is BuildArchitecture.ARM64 and platform in {Platform.LINUX, Platform.ANDROID, Platform.WINDOWS}:
            return "aarch64"
        return self.value

    @property
    def android_name(self) -> str:
        """Return the ABI name Android tooling uses for the architecture."""

        return _ANDROID_ABI_NAMES[self]


_ANDROID_ABI_NAMES: Final[dict[BuildArchitecture, str]] = {
    BuildArchitecture.ARM64: "arm64-v8a",
    BuildArchitecture.ARMV7: "armeabi-v7a",
    BuildArchitecture.X86_64: "x86_64",
}


@dataclass(frozen=True, slots=True)
class ApplePlatformCapabilities:
    """Static facts about an Apple platform used when picking build destinations."""

    architectures: tuple[BuildArchitecture, ...]
    destination_name: str
    destination_variant: str | None = None
    is_simulator: bool = False


_ARM64_ONLY: Final[tuple[BuildArchitecture, ...]] = (BuildArchitecture.ARM64,)
_UNIVERSAL: Final[tuple[BuildArchitecture, ...]] = (BuildArchitecture.ARM64, BuildArchitecture.X86_64)

APPLE_PLATFORM_CAPABILITIES: dict[Platform, ApplePlatformCapabilities] = {
    Platform.MACOS: ApplePlatformCapabilities(_UNIVERSAL, "macOS"),
    Platform.MAC_CATALYST: ApplePlatformCapabilities(_UNIVERSAL, "macOS", destination_variant="Mac Catalyst"),
    Platform.IOS: ApplePlatformCapabilities(_ARM64_ONLY, "iOS"),
    Platform.IOS_SIMULATOR: ApplePlatformCapabilities(_UNIVERSAL, "iOS Simulator", is_simulator=True),
    Platform.VISIONOS: ApplePlatformCapabilities(_ARM64_ONLY, "visionOS"),
    Platform.VISIONOS_SIMULATOR: ApplePlatformCapabilities(_ARM64_ONLY, "visionOS Simulator", is_simulator=True),
    Platform.TVOS: ApplePlatformCapabilities(_ARM64_ONLY, "tvOS"),
    Platform.TVOS_SIMULATOR: ApplePlatformCapabilities(_UNIVERSAL, "tvOS Simulator", is_simulator=True),
}

# Android triples carry the API level as a numeric suffix.
_ANDROID_TRIPLE_PREFIXES: Final[dict[BuildArchitecture, str]] = {
    BuildArchitecture.ARM64: "aarch64-unknown-linux-android",
    BuildArchitecture.X86_64: "x86_64-unknown-linux-android",
    BuildArchitecture.ARMV7: "armv7-unknown-linux-androideabi",
}


def apple_capabilities(platform: Platform) -> ApplePlatformCapabilities:
    """Return the capabilities of an Apple ``platform``.

    Raises:
        UsageError: If ``platform`` is not an Apple platform.
    """

    try:
        return APPLE_PLATFORM_CAPABILITIES[platform]
    except KeyError:
        raise UsageError(f"Platform '{platform.value}' is not an Apple platform") from None


def host_triple(host_platform: HostPlatform, host_architecture: BuildArchitecture) -> str:
    """Return the host triple as spelled in Swift SDK ``supportedHostTriples`` lists.

    macOS is represented by a ``darwin`` system rather than ``macosx``.

    Args:
        host_platform: Platform performing the build.
        host_architecture: Architecture of the build machine.

    Returns:
        str: Triple such as ``arm64-apple-darwin`` or ``x86_64-unknown-linux``.
    """

    if host_platform is HostPlatform.MACOS:
        vendor, system = "apple", "darwin"
    else:
        vendor, system = "unknown", host_platform.value
    return f"{host_architecture.argument(host_platform.platform)}-{vendor}-{system}"


def android_target_triple(architecture: BuildArchitecture, api: int) -> str:
    """Return the Android target triple for ``architecture`` at API level ``api``."""

    return f"{_ANDROID_TRIPLE_PREFIXES[architecture]}{api}"


def parse_platforms(values: Iterable[str]) -> list[Platform]:
    """Parse platform identifiers, raising :class:`ValueError` on unknown names."""

    return [Platform(value) for value in values]


__all__ = [
    "APPLE_PLATFORM_CAPABILITIES",
    "ApplePlatformCapabilities",
    "BuildArchitecture",
    "HostPlatform",
    "OS",
    "Platform",
    "SIMULATOR_OSES",
    "android_target_triple",
    "apple_capabilities",
    "host_triple",
    "parse_platforms",
]
