# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.
"""Listing and resolving devices and simulators across Apple and Android."""

from __future__ import annotations

from collections.abc import Iterable, Sequence
from typing import Final

from ..android.adb import AndroidDebugBridge
from ..android.emulator import AndroidVirtualDevice, AndroidVirtualDeviceManager, BootOutcome
from ..android.sdk import AndroidSDK, locate_android_sdk
from ..config import BundlerSettings
from ..errors import AndroidSDKNotFoundError, DeviceNotFoundError, SimulatorNotFoundError
from ..logging import DiagnosticLogger, get_logger
from ..platforms import OS, SIMULATOR_OSES, HostPlatform, Platform
from ..process import ProcessContext, ProcessRunner
from .apple import AppleDeviceLister, AppleSimulatorManager
from .models import (
    AndroidDevice,
    Device,
    DeviceStatus,
    HostDevice,
    MacCatalystDevice,
    Simulator,
    simulator_sort_key,
    sort_devices,
)

HOST_SPECIFIER: Final[str] = "host"
_PHYSICAL_PLATFORMS: Final[dict[OS, Platform]] = {
    OS.MACOS: Platform.MACOS,
    OS.IOS: Platform.IOS,
    OS.VISIONOS: Platform.VISIONOS,
    OS.TVOS: Platform.TVOS,
    OS.LINUX: Platform.LINUX,
    OS.WINDOWS: Platform.WINDOWS,
    OS.ANDROID: Platform.ANDROID,
}


def physical_platform(os_: OS) -> Platform:
    """Return the platform of physical devices running ``os_``."""

    return _PHYSICAL_PLATFORMS[os_]


def filter_by_search_term(devices: Sequence[Device], search_term: str) -> list[Device]:
    """Keep devices whose id or name contains ``search_term``.

    An exact id match is moved to the front; the relative order of the rest is
    preserved.
    """

    matches = [
        device
        for device in devices
        if (device.id is not None and search_term in device.id) or search_term in device.name
    ]
    return sorted(matches, key=lambda device: 0 if device.id == search_term else 1)


class DeviceManager:
    """Enumerates the host, connected Apple devices and connected Android devices."""

    def __init__(
        self,
        settings: BundlerSettings,
        runner: ProcessRunner,
        *,
        host_platform: HostPlatform | None = None,
        apple_lister: AppleDeviceLister | None = None,
        logger: DiagnosticLogger | None = None,
    ) -> None:
        self._settings = settings
        self._runner = runner
        self._host_platform = host_platform or HostPlatform.current()
        self._apple_lister = apple_lister or AppleDeviceLister(runner, host_platform=self._host_platform)
        self._logger = logger or get_logger()

    @property
    def host_device(self) -> HostDevice:
        return HostDevice(self._host_platform)

    def _android_sdk(self) -> AndroidSDK | None:
        try:
            return locate_android_sdk(self._settings, self._host_platform)
        except AndroidSDKNotFoundError:
            return None

    def _android_devices(self, sdk: AndroidSDK) -> list[Device]:
        adb = AndroidDebugBridge(self._runner, sdk.require_tool("adb"))
        return [
            AndroidDevice(device.identifier, device.model, device.is_emulator, DeviceStatus.available())
            for device in adb.connected_devices(logger=self._logger)
        ]

    def list_devices(
        self,
        platforms: Iterable[Platform] | None = None,
        search_term: str | None = None,
    ) -> list[Device]:
        """List every known device, including simulators and host pseudo-devices.

        Args:
            platforms: Restrict the listing to these platforms; all when omitted.
            search_term: Keep devices whose id or name contains the term, with an
                exact id match first.

        Returns:
            list[Device]: Devices in their stable listing order.
        """

        wanted = set(platforms) if platforms is not None else set(Platform)
        devices: list[Device] = [self.host_device]
        if self._host_platform is HostPlatform.MACOS and any(platform.is_apple for platform in wanted):
            self._logger.debug("Enumerating Apple devices and simulators")
            devices.extend(self._apple_lister.list_devices())

        sdk = self._android_sdk() if Platform.ANDROID in wanted else None
        if sdk is not None:
            self._logger.debug("Enumerating Android devices and emulators")
            devices.extend(self._android_devices(sdk))
        else:
            self._logger.debug("Android SDK not found")

        if self._host_platform is HostPlatform.MACOS:
            devices.append(MacCatalystDevice(self._host_platform))

        devices = sort_devices(device for device in devices if device.platform in wanted)
        if search_term:
            return filter_by_search_term(devices, search_term)
        return devices

    def list_physical_devices(
        self,
        oses: Iterable[OS] | None = None,
        search_term: str | None = None,
    ) -> list[Device]:
        """List connected physical devices, excluding simulators and host machines."""

        platforms = [physical_platform(os_) for os_ in oses] if oses is not None else None
        return [
            device
            for device in self.list_devices(platforms, search_term)
            if not device.is_simulator and not device.is_host
        ]

    def resolve(self, specifier: str, platform: Platform | None = None) -> Device:
        """Resolve a device specifier (an id, part of a name, or ``host``).

        Raises:
            DeviceNotFoundError: If nothing matches ``specifier`` on ``platform``.
        """

        query = {"specifier": specifier, "platform": platform.value if platform else None}
        not_found = DeviceNotFoundError(
            f"Device not found for specifier '{specifier}'"
            + (f" with platform '{platform.value}'" if platform else ""),
            query=query,
        )
        if specifier == HOST_SPECIFIER:
            if platform is None or platform is self._host_platform.platform:
                return self.host_device
            raise not_found

        matches = self.list_devices([platform] if platform is not None else None, specifier)
        if not matches:
            raise not_found
        match = matches[0]
        if len(matches) > 1:
            self._logger.warn(f"Multiple devices matched '{specifier}'; using '{match.describe(include_id=True)}'")
            self._logger.debug(f"Matching devices: {[device.describe(include_id=True) for device in matches]}")
        return match


class SimulatorManager:
    """Enumerates and boots Apple simulators and Android emulators."""

    def __init__(
        self,
        settings: BundlerSettings,
        runner: ProcessRunner,
        context: ProcessContext,
        *,
        host_platform: HostPlatform | None = None,
        apple_simulators: AppleSimulatorManager | None = None,
        logger: DiagnosticLogger | None = None,
    ) -> None:
        self._settings = settings
        self._runner = runner
        self._context = context
        self._host_platform = host_platform or HostPlatform.current()
        self._logger = logger or get_logger()
        self._apple = apple_simulators or AppleSimulatorManager(runner, logger=self._logger)

    def _avd_manager(self) -> AndroidVirtualDeviceManager | None:
        try:
            sdk = locate_android_sdk(self._settings, self._host_platform)
        except AndroidSDKNotFoundError:
            return None
        return AndroidVirtualDeviceManager(sdk, self._runner, self._context, self._settings, logger=self._logger)

    def _android_simulators(self, manager: AndroidVirtualDeviceManager) -> list[Simulator]:
        booted = set(manager.booted_virtual_devices())
        return [
            Simulator(device.name, device.name, True, device in booted, OS.ANDROID)
            for device in manager.list_virtual_devices()
        ]

    def list_simulators(
        self,
        oses: Iterable[OS] | None = None,
        search_term: str | None = None,
        *,
        booted: bool | None = None,
    ) -> list[Simulator]:
        """List simulators and emulators.

        Args:
            oses: Restrict to these simulator OSes; all when omitted.
            search_term: Keep simulators whose name contains the term or whose id
                equals it.
            booted: When set, keep only booted (``True``) or non-booted (``False``)
                simulators.

        Returns:
            list[Simulator]: Simulators ordered by name, id and OS display name.
        """

        wanted = set(oses) if oses is not None else set(SIMULATOR_OSES)
        simulators: list[Simulator] = []
        if self._host_platform is HostPlatform.MACOS and any(os_.is_apple for os_ in wanted):
            self._logger.debug("Enumerating Apple simulators")
            simulators.extend(simulator for simulator in self._apple.list_simulators() if simulator.os in wanted)

        if OS.ANDROID in wanted:
            manager = self._avd_manager()
            if manager is None:
                self._logger.warn("Android SDK not found, skipping Android emulators")
            else:
                self._logger.debug("Enumerating Android emulators")
                simulators.extend(self._android_simulators(manager))

        simulators.sort(key=simulator_sort_key)
        if search_term:
            simulators = [
                simulator
                for simulator in simulators
                if search_term in simulator.name or simulator.id == search_term
            ]
        if booted is not None:
            simulators = [simulator for simulator in simulators if simulator.is_booted == booted]
        return simulators

    def list_available_simulators(self, oses: Iterable[OS] | None = None) -> list[Simulator]:
        return [simulator for simulator in self.list_simulators(oses) if simulator.is_available]

    def locate_simulator(self, search_term: str, oses: Iterable[OS] | None = None) -> Simulator:
        """Return the first simulator matching ``search_term``.

        Raises:
            SimulatorNotFoundError: If no simulator matches.
        """

        oses = list(oses) if oses is not None else None
        simulators = self.list_simulators(oses, search_term)
        if not simulators:
            described = ", ".join(os_.display_name for os_ in oses) if oses else "any OS"
            raise SimulatorNotFoundError(
                f"Failed to locate simulator matching '{search_term}' ({described})",
                query={"search_term": search_term, "oses": [os_.value for os_ in oses or ()]},
            )
        simulator = simulators[0]
        if len(simulators) > 1:
            self._logger.warn(f"Multiple simulators match '{search_term}', using '{simulator.name}'")
            self._logger.debug(f"Matching simulators: {[candidate.id for candidate in simulators]}")
        return simulator

    def boot_simulator(
        self,
        simulator: Simulator,
        *,
        attach: bool = False,
        additional_arguments: Sequence[str] = (),
    ) -> BootOutcome:
        """Boot ``simulator`` with simctl or the Android emulator.

        Raises:
            AndroidSDKNotFoundError: If an Android emulator is requested without an SDK.
        """

        if simulator.os is not OS.ANDROID:
            self._apple.boot(simulator.id)
            self._apple.open_simulator_app()
            return BootOutcome.BOOTED
        sdk = locate_android_sdk(self._settings, self._host_platform)
        manager = AndroidVirtualDeviceManager(sdk, self._runner, self._context, self._settings, logger=self._logger)
        return manager.boot(
            AndroidVirtualDevice(simulator.id),
            attach=attach,
            additional_arguments=additional_arguments,
        )


__all__ = [
    "DeviceManager",
    "HOST_SPECIFIER",
    "SimulatorManager",
    "filter_by_search_term",
    "physical_platform",
]
