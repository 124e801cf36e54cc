# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.
"""Apple devices via ``xcodebuild`` and Apple simulators via ``simctl``."""

from __future__ import annotations

import shutil
import tempfile
from pathlib import Path
from typing import Final

from pydantic import BaseModel, ConfigDict, Field, ValidationError

from ..errors import BundlerError, ToolOutputParseError
from ..logging import DiagnosticLogger, get_logger
from ..platforms import OS, HostPlatform
from ..process import ProcessRunner
from .models import Device, Simulator
from .xcode import parse_destination_list

DUMMY_PACKAGE_NAME: Final[str] = "Dummy"
DUMMY_PACKAGE_DIRECTORY: Final[str] = "SwiftBundlerDummyPackage"
SIMULATOR_APP: Final[str] = "Simulator"
BOOTED_STATE: Final[str] = "Booted"
_RUNTIME_PREFIX: Final[str] = "com.apple.CoreSimulator.SimRuntime."
# simctl runtime identifier prefix -> OS; watchOS runtimes are not supported.
_RUNTIME_OSES: Final[tuple[tuple[str, OS], ...]] = (
    ("iOS-", OS.IOS),
    ("xrOS-", OS.VISIONOS),
    ("visionOS-", OS.VISIONOS),
    ("tvOS-", OS.TVOS),
)


class AppleDeviceListingError(BundlerError):
    """Raised when connected Apple devices cannot be enumerated."""


class _SimctlDevice(BaseModel):
    model_config = ConfigDict(frozen=True, populate_by_name=True, extra="ignore")

    udid: str
    name: str
    state: str
    is_available: bool = Field(default=True, alias="isAvailable")


class _SimctlDeviceList(BaseModel):
    model_config = ConfigDict(frozen=True, extra="ignore")

    devices: dict[str, list[_SimctlDevice]]


def runtime_os(runtime: str) -> OS | None:
    """Return the OS of a simctl runtime identifier, or ``None`` when unsupported."""

    name = runtime.removeprefix(_RUNTIME_PREFIX)
    for prefix, os_ in _RUNTIME_OSES:
        if name.startswith(prefix):
            return os_
    return None


def parse_simctl_devices(output: str) -> list[Simulator]:
    """Parse ``xcrun simctl list devices --json`` output.

    Raises:
        ToolOutputParseError: If the output does not match simctl's JSON shape.
    """

    try:
        listing = _SimctlDeviceList.model_validate_json(output)
    except ValidationError as exc:
        raise ToolOutputParseError("simctl list devices", output, str(exc)) from exc
    simulators: list[Simulator] = []
    for runtime, devices in listing.devices.items():
        os_ = runtime_os(runtime)
        if os_ is None:
            continue
        simulators.extend(
            Simulator(device.udid, device.name, device.is_available, device.state == BOOTED_STATE, os_)
            for device in devices
        )
    return simulators


class AppleDeviceLister:
    """Lists connected Apple devices and simulators known to Xcode.

    ``xcodebuild`` only reports destinations for a scheme, so a throw-away Swift
    package is created in the temporary directory for every listing.
    """

    def __init__(
        self,
        runner: ProcessRunner,
        *,
        host_platform: HostPlatform = HostPlatform.MACOS,
        scratch_directory: Path | None = None,
    ) -> None:
        self._runner = runner
        self._host_platform = host_platform
        self._scratch_directory = scratch_directory or Path(tempfile.gettempdir()) / "swift-bundler"

    @property
    def dummy_package(self) -> Path:
        return self._scratch_directory / DUMMY_PACKAGE_DIRECTORY

    def _create_dummy_package(self) -> Path:
        package = self.dummy_package
        try:
            if package.exists():
                shutil.rmtree(package)
            package.mkdir(parents=True)
            self._runner.get_output("swift", ["package", "init", "--name", DUMMY_PACKAGE_NAME], cwd=package)
        except (OSError, BundlerError) as exc:
            raise AppleDeviceListingError(f"Failed to create dummy package at '{package}': {exc}") from exc
        return package

    def list_devices(self) -> list[Device]:
        """Return connected Apple devices and simulators, excluding host destinations.

        Raises:
            AppleDeviceListingError: If the dummy package or ``xcodebuild`` fails.
            DestinationParseError: If the destination listing is malformed.
        """

        package = self._create_dummy_package()
        try:
            output = self._runner.get_output(
                "xcodebuild",
                ["-showdestinations", "-scheme", DUMMY_PACKAGE_NAME],
                cwd=package,
            )
        except BundlerError as exc:
            raise AppleDeviceListingError(f"Failed to list Xcode destinations: {exc}") from exc
        return parse_destination_list(output, DUMMY_PACKAGE_NAME, host_platform=self._host_platform)


class AppleSimulatorManager:
    """Lists and boots simulators managed by ``simctl``."""

    def __init__(self, runner: ProcessRunner, *, logger: DiagnosticLogger | None = None) -> None:
        self._runner = runner
        self._logger = logger or get_logger()

    def list_simulators(self) -> list[Simulator]:
        return parse_simctl_devices(self._runner.get_output("xcrun", ["simctl", "list", "devices", "--json"]))

    def list_available_simulators(self) -> list[Simulator]:
        return [simulator for simulator in self.list_simulators() if simulator.is_available]

    def boot(self, identifier: str) -> None:
        self._runner.run_and_wait("xcrun", ["simctl", "boot", identifier])

    def open_simulator_app(self) -> None:
        self._logger.info(f"Opening '{SIMULATOR_APP}.app'")
        self._runner.run_and_wait("open", ["-a", SIMULATOR_APP])


__all__ = [
    "AppleDeviceListingError",
    "AppleDeviceLister",
    "AppleSimulatorManager",
    "DUMMY_PACKAGE_NAME",
    "parse_simctl_devices",
    "runtime_os",
]
