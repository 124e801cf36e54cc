# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.
"""Unified device model spanning host machines, Apple and Android devices.

Devices come in four shapes: the host itself, the Mac Catalyst pseudo-host, a
connected Apple device or simulator, and a connected Android device or emulator.
All of them expose the same projected fields (``id``, ``name``, ``platform``,
``status``, ``is_simulator`` and ``is_host``) and share a single total order
used for every listing.
"""

from __future__ import annotations

from collections.abc import Iterable
from dataclasses import dataclass
from enum import StrEnum
from typing import Any, Final, TypeAlias

from ..platforms import OS, HostPlatform, Platform

HOST_DEVICE_NAME: Final[str] = "host"
MAC_CATALYST_DEVICE_NAME: Final[str] = "macCatalyst"
GENERIC_UNAVAILABLE_REASON: Final[str] = "unavailable"


class DeviceStatusKind(StrEnum):
    """Lifecycle states a device can be observed in."""

    AVAILABLE = "available"
    SUMMONABLE = "summonable"
    UNAVAILABLE = "unavailable"


_STATUS_RANK: Final[dict[DeviceStatusKind, int]] = {
    DeviceStatusKind.AVAILABLE: 0,
    DeviceStatusKind.SUMMONABLE: 1,
    DeviceStatusKind.UNAVAILABLE: 2,
}


@dataclass(frozen=True, slots=True)
class DeviceStatus:
    """Device status; ``reason`` is only set for unavailable devices."""

    kind: DeviceStatusKind
    reason: str | None = None

    @classmethod
    def available(cls) -> DeviceStatus:
        return cls(DeviceStatusKind.AVAILABLE)

    @classmethod
    def summonable(cls) -> DeviceStatus:
        return cls(DeviceStatusKind.SUMMONABLE)

    @classmethod
    def unavailable(cls, reason: str) -> DeviceStatus:
        return cls(DeviceStatusKind.UNAVAILABLE, reason)

    @property
    def rank(self) -> int:
        return _STATUS_RANK[self.kind]

    def __str__(self) -> str:
        if self.kind is DeviceStatusKind.UNAVAILABLE:
            return f"unavailable: {self.reason}"
        return self.kind.value


@dataclass(frozen=True, slots=True)
class HostDevice:
    """The machine running the bundler."""

    host_platform: HostPlatform

    @property
    def id(self) -> str | None:
        return None

    @property
    def name(self) -> str:
        return HOST_DEVICE_NAME

    @property
    def platform(self) -> Platform:
        return self.host_platform.platform

    @property
    def status(self) -> DeviceStatus:
        return DeviceStatus.available()

    @property
    def is_simulator(self) -> bool:
        return False

    @property
    def is_host(self) -> bool:
        return True

    def describe(self, *, include_id: bool = False) -> str:
        return f"{self.host_platform.value} host machine"


@dataclass(frozen=True, slots=True)
class MacCatalystDevice:
    """Mac Catalyst apps run on the host, but only when the host is a Mac."""

    host_platform: HostPlatform

    @property
    def id(self) -> str | None:
        return None

    @property
    def name(self) -> str:
        return MAC_CATALYST_DEVICE_NAME

    @property
    def platform(self) -> Platform:
        return Platform.MAC_CATALYST

    @property
    def status(self) -> DeviceStatus:
        if self.host_platform is HostPlatform.MACOS:
            return DeviceStatus.available()
        return DeviceStatus.unavailable(GENERIC_UNAVAILABLE_REASON)

    @property
    def is_simulator(self) -> bool:
        return False

    @property
    def is_host(self) -> bool:
        return True

    def describe(self, *, include_id: bool = False) -> str:
        return "Mac Catalyst host machine"


@dataclass(frozen=True, slots=True)
class AppleDevice:
    """A connected Apple device or simulator (never macOS or Mac Catalyst)."""

    platform: Platform
    name: str
    id: str
    status: DeviceStatus

    @property
    def is_simulator(self) -> bool:
        return self.platform.is_simulator

    @property
    def is_host(self) -> bool:
        return False

    def describe(self, *, include_id: bool = False) -> str:
        suffix = f", id: {self.id}" if include_id else ""
        return f"{self.name} ({self.platform.value}{suffix})"


@dataclass(frozen=True, slots=True)
class AndroidDevice:
    """A connected Android device or emulator."""

    id: str
    name: str
    is_emulator: bool
    status: DeviceStatus

    @property
    def platform(self) -> Platform:
        return Platform.ANDROID

    @property
    def is_simulator(self) -> bool:
        return self.is_emulator

    @property
    def is_host(self) -> bool:
        return False

    def describe(self, *, include_id: bool = False) -> str:
        details = ["Android"]
        if self.is_emulator:
            details.append("emulator")
        if include_id:
            details.append(f"id: {self.id}")
        return f"{self.name} ({', '.join(details)})"


Device: TypeAlias = HostDevice | MacCatalystDevice | AppleDevice | AndroidDevice

DeviceSortKey: TypeAlias = tuple[int, int, int, str, int, str]


def device_sort_key(device: Device) -> DeviceSortKey:
    """Return the key that gives every device listing its stable order.

    Platform order first, then physical before virtual, then status rank
    (available, summonable, unavailable), then name. Devices without an id sort
    ahead of devices with one, and ids break any remaining tie.
    """

    return (
        device.platform.sort_index,
        int(device.is_simulator),
        device.status.rank,
        device.name,
        0 if device.id is None else 1,
        device.id or "",
    )


def sort_devices(devices: Iterable[Device]) -> list[Device]:
    return sorted(devices, key=device_sort_key)


def device_from_apple_platform(
    platform: Platform,
    *,
    name: str,
    id: str,  # noqa: A002
    status: DeviceStatus,
    host_platform: HostPlatform,
) -> Device:
    """Build the device for an Apple destination.

    There is only ever one macOS destination, so its id is ignored and the host
    device is returned; Mac Catalyst maps to the Catalyst pseudo-host.
    """

    if platform is Platform.MACOS:
        return HostDevice(HostPlatform.MACOS)
    if platform is Platform.MAC_CATALYST:
        return MacCatalystDevice(host_platform)
    return AppleDevice(platform, name, id, status)


def device_to_dict(device: Device) -> dict[str, Any]:
    """Return the JSON-friendly view used by ``--json`` listings."""

    return {
        "id": device.id,
        "name": device.name,
        "platform": device.platform.value,
        "status": device.status.kind.value,
        "reason": device.status.reason,
        "isSimulator": device.is_simulator,
        "isHost": device.is_host,
    }


_SIMULATOR_PLATFORMS: Final[dict[OS, Platform]] = {
    OS.IOS: Platform.IOS_SIMULATOR,
    OS.VISIONOS: Platform.VISIONOS_SIMULATOR,
    OS.TVOS: Platform.TVOS_SIMULATOR,
}


@dataclass(frozen=True, slots=True)
class Simulator:
    """A simulator or emulator as reported by simctl or avdmanager.

    Android emulators use their AVD name as both ``id`` and ``name``.
    """

    id: str
    name: str
    is_available: bool
    is_booted: bool
    os: OS

    @property
    def status(self) -> DeviceStatus:
        if not self.is_available:
            return DeviceStatus.unavailable(GENERIC_UNAVAILABLE_REASON)
        if self.is_booted:
            return DeviceStatus.available()
        return DeviceStatus.summonable()

    def to_device(self) -> Device:
        """Project the simulator into the unified device model."""

        if self.os is OS.ANDROID:
            return AndroidDevice(self.id, self.name, True, self.status)
        return AppleDevice(_SIMULATOR_PLATFORMS[self.os], self.name, self.id, self.status)

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "name": self.name,
            "os": self.os.value,
            "isAvailable": self.is_available,
            "isBooted": self.is_booted,
        }


def simulator_sort_key(simulator: Simulator) -> tuple[str, str, str]:
    return simulator.name, simulator.id, simulator.os.display_name


__all__ = [
    "AndroidDevice",
    "AppleDevice",
    "Device",
    "DeviceSortKey",
    "DeviceStatus",
    "DeviceStatusKind",
    "HostDevice",
    "MacCatalystDevice",
    "Simulator",
    "device_from_apple_platform",
    "device_sort_key",
    "device_to_dict",
    "simulator_sort_key",
    "sort_devices",
]
