# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.
"""Tests for parsing xcodebuild destinations and simctl device listings."""

from __future__ import annotations

import json
from pathlib import Path

import pytest

from swift_bundler.devices.apple import AppleDeviceLister, AppleDeviceListingError, parse_simctl_devices, runtime_os
from swift_bundler.devices.models import AppleDevice, DeviceStatus, MacCatalystDevice, Simulator
from swift_bundler.devices.xcode import (
    destination_section,
    parse_destination,
    parse_destination_fields,
    parse_destination_list,
)
from swift_bundler.errors import DestinationParseError, ToolOutputParseError
from swift_bundler.platforms import OS, HostPlatform, Platform
from tests.helpers.fakes import FakeRunner, command_failure

SHOW_DESTINATIONS = """Command line invocation:
    /Applications/Xcode.app/Contents/Developer/usr/bin/xcodebuild -showdestinations -scheme Dummy

\tAvailable destinations for the "Dummy" scheme:
\t\t{ platform:macOS, arch:arm64, id:00006000-001A, name:My Mac }
\t\t{ platform:macOS, arch:arm64, variant:Mac Catalyst, id:00006000-001A, name:My Mac }
\t\t{ platform:macOS, arch:arm64, variant:Designed for [iPad,iPhone], id:00006000-001A, name:My Mac }
\t\t{ platform:DriverKit, name:Any DriverKit Host }
\t\t{ platform:iOS, id:dvtdevice-DVTiPhonePlaceholder-iphoneos:placeholder, name:Any iOS Device }
\t\t{ platform:iOS, arch:arm64, id:00008110-000E, name:Work iPhone }
\t\t{ platform:iOS, arch:arm64, id:00008030-0019, name:Old iPhone, error:iPhone is locked }
\t\t{ platform:iOS Simulator, id:5E3A2F1C-ABCD, OS:17.5, name:iPhone 15 }

\tIneligible destinations for the "Dummy" scheme:
\t\t{ platform:watchOS, id:dvtdevice-DVTiOSDeviceWatchPlaceholder, name:Any watchOS Device }
"""


def test_parse_destination_fields_handles_bracketed_commas() -> None:
    fields = parse_destination_fields(
        "\t\t{ platform:macOS, arch:arm64, variant:Designed for [iPad,iPhone], id:ABC, name:My Mac }",
    )

    assert fields == {
        "platform": "macOS",
        "arch": "arm64",
        "variant": "Designed for [iPad,iPhone]",
        "id": "ABC",
        "name": "My Mac",
    }


@pytest.mark.parametrize(
    "line",
    [
        "platform:iOS, name:iPhone }",
        "{ platform:iOS, name:iPhone",
        "{ platform iOS }",
        "{ platform:iOS, variant:Designed for [iPad,iPhone }",
    ],
)
def test_parse_destination_fields_reports_position(line: str) -> None:
    with pytest.raises(DestinationParseError) as excinfo:
        parse_destination_fields(line)

    assert excinfo.value.position is not None
    assert excinfo.value.raw_text == line


def test_parse_destination_variants() -> None:
    phone = parse_destination("{ platform:iOS, id:A1, name:Work iPhone }", host_platform=HostPlatform.MACOS)
    locked = parse_destination(
        "{ platform:iOS, id:A2, name:Old iPhone, error:iPhone is locked }",
        host_platform=HostPlatform.MACOS,
    )
    catalyst = parse_destination(
        "{ platform:macOS, variant:Mac Catalyst, id:M, name:My Mac }",
        host_platform=HostPlatform.MACOS,
    )

    assert phone == AppleDevice(Platform.IOS, "Work iPhone", "A1", DeviceStatus.available())
    assert locked == AppleDevice(Platform.IOS, "Old iPhone", "A2", DeviceStatus.unavailable("iPhone is locked"))
    assert catalyst == MacCatalystDevice(HostPlatform.MACOS)


@pytest.mark.parametrize(
    "line",
    [
        "{ platform:DriverKit, id:D, name:Any DriverKit Host }",
        "{ platform:iOS, id:dvtdevice-DVTiPhonePlaceholder-iphoneos:placeholder, name:Any iOS Device }",
        "{ platform:iOS Simulator, name:Any iOS Simulator Device }",
        "{ platform:macOS, variant:Designed for [iPad,iPhone], id:M, name:My Mac }",
    ],
)
def test_parse_destination_skips_generic_and_unsupported(line: str) -> None:
    assert parse_destination(line, host_platform=HostPlatform.MACOS) is None


def test_parse_destination_requires_platform_and_name() -> None:
    with pytest.raises(DestinationParseError, match="Missing platform"):
        parse_destination("{ id:A, name:Thing }", host_platform=HostPlatform.MACOS)
    with pytest.raises(DestinationParseError, match="Missing name"):
        parse_destination("{ platform:iOS, id:A }", host_platform=HostPlatform.MACOS)


def test_parse_destination_list_drops_host_destinations() -> None:
    devices = parse_destination_list(SHOW_DESTINATIONS, "Dummy", host_platform=HostPlatform.MACOS)

    assert devices == [
        AppleDevice(Platform.IOS, "Work iPhone", "00008110-000E", DeviceStatus.available()),
        AppleDevice(Platform.IOS, "Old iPhone", "00008030-0019", DeviceStatus.unavailable("iPhone is locked")),
        AppleDevice(Platform.IOS_SIMULATOR, "iPhone 15", "5E3A2F1C-ABCD", DeviceStatus.available()),
    ]


def test_destination_section_missing_header() -> None:
    with pytest.raises(DestinationParseError, match="Couldn't locate destination section"):
        destination_section(SHOW_DESTINATIONS, "Other")


def test_apple_device_lister_uses_dummy_package(tmp_path: Path, runner: FakeRunner) -> None:
    runner.add("swift", "package", "init", "--name", "Dummy")
    runner.add("xcodebuild", "-showdestinations", "-scheme", "Dummy", output=SHOW_DESTINATIONS)
    lister = AppleDeviceLister(runner, scratch_directory=tmp_path)
    stale = lister.dummy_package / "Package.swift"
    stale.parent.mkdir(parents=True)
    stale.write_text("// stale", encoding="utf-8")

    devices = lister.list_devices()

    assert len(devices) == 3
    assert not stale.exists()
    assert lister.dummy_package.is_dir()
    assert runner.calls == [
        ("swift", "package", "init", "--name", "Dummy"),
        ("xcodebuild", "-showdestinations", "-scheme", "Dummy"),
    ]


def test_apple_device_lister_wraps_xcodebuild_failures(tmp_path: Path, runner: FakeRunner) -> None:
    runner.add("swift", "package", "init", "--name", "Dummy")
    runner.add("xcodebuild", "-showdestinations", "-scheme", "Dummy", output=command_failure(["xcodebuild"], 70))

    with pytest.raises(AppleDeviceListingError, match="Failed to list Xcode destinations"):
        AppleDeviceLister(runner, scratch_directory=tmp_path).list_devices()


@pytest.mark.parametrize(
    ("runtime", "expected"),
    [
        ("com.apple.CoreSimulator.SimRuntime.iOS-17-5", OS.IOS),
        ("com.apple.CoreSimulator.SimRuntime.xrOS-1-2", OS.VISIONOS),
        ("com.apple.CoreSimulator.SimRuntime.visionOS-2-0", OS.VISIONOS),
        ("com.apple.CoreSimulator.SimRuntime.tvOS-17-5", OS.TVOS),
        ("com.apple.CoreSimulator.SimRuntime.watchOS-10-5", None),
    ],
)
def test_runtime_os(runtime: str, expected: OS | None) -> None:
    assert runtime_os(runtime) is expected


def test_parse_simctl_devices() -> None:
    output = json.dumps(
        {
            "devices": {
                "com.apple.CoreSimulator.SimRuntime.iOS-17-5": [
                    {"udid": "A", "name": "iPhone 15", "state": "Booted", "isAvailable": True},
                    {"udid": "B", "name": "iPad Air", "state": "Shutdown", "isAvailable": False},
                ],
                "com.apple.CoreSimulator.SimRuntime.watchOS-10-5": [
                    {"udid": "W", "name": "Apple Watch", "state": "Shutdown", "isAvailable": True},
                ],
                "com.apple.CoreSimulator.SimRuntime.tvOS-17-5": [
                    {"udid": "T", "name": "Apple TV", "state": "Shutdown"},
                ],
            },
        },
    )

    assert parse_simctl_devices(output) == [
        Simulator("A", "iPhone 15", True, True, OS.IOS),
        Simulator("B", "iPad Air", False, False, OS.IOS),
        Simulator("T", "Apple TV", True, False, OS.TVOS),
    ]


def test_parse_simctl_devices_rejects_unexpected_json() -> None:
    with pytest.raises(ToolOutputParseError):
        parse_simctl_devices('{"runtimes": []}')
