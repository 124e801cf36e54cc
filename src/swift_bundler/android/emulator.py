# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.
"""Android virtual device enumeration and the boot-and-poll workflow."""

from __future__ import annotations

from collections.abc import Sequence
from dataclasses import dataclass
from enum import StrEnum

from ..config import BundlerSettings
from ..errors import (
    BootTimeoutError,
    BundlerError,
    CannotAttachToBootedEmulatorError,
    EnvironmentProblem,
    OperationCancelledError,
)
from ..logging import DiagnosticLogger, get_logger
from ..process import ProcessContext, ProcessRunner, SubprocessExecutionError
from .adb import AndroidDebugBridge
from .sdk import AndroidSDK


class BootOutcome(StrEnum):
    """Result of :meth:`AndroidVirtualDeviceManager.boot`."""

    ALREADY_BOOTED = "alreadyBooted"
    BOOTED = "booted"
    EXITED = "exited"


@dataclass(frozen=True, slots=True)
class AndroidVirtualDevice:
    """An emulator definition known to ``avdmanager``."""

    name: str


def parse_avd_list(output: str) -> list[AndroidVirtualDevice]:
    """Parse ``avdmanager list avd --compact`` output, one AVD name per line."""

    return [AndroidVirtualDevice(line.strip()) for line in output.strip().splitlines() if line.strip()]


class AndroidVirtualDeviceManager:
    """Lists AVDs and boots them, polling ``adb`` until the emulator is usable."""

    def __init__(
        self,
        sdk: AndroidSDK,
        runner: ProcessRunner,
        context: ProcessContext,
        settings: BundlerSettings,
        *,
        logger: DiagnosticLogger | None = None,
    ) -> None:
        self._sdk = sdk
        self._runner = runner
        self._context = context
        self._settings = settings
        self._logger = logger or get_logger()
        self._bridge: AndroidDebugBridge | None = None

    @property
    def _adb(self) -> AndroidDebugBridge:
        if self._bridge is None:
            self._bridge = AndroidDebugBridge(self._runner, self._sdk.require_tool("adb"))
        return self._bridge

    def list_virtual_devices(self) -> list[AndroidVirtualDevice]:
        """Return every AVD reported by ``avdmanager``."""

        avdmanager = self._sdk.require_tool("avdmanager")
        return parse_avd_list(self._runner.get_output(avdmanager, ["list", "avd", "--compact"]))

    def booted_virtual_devices(self, *, ready_only: bool = False) -> list[AndroidVirtualDevice]:
        """Return AVDs with a running emulator attached to ``adb``.

        Args:
            ready_only: Only include emulators whose package service is up.
        """

        booted: list[AndroidVirtualDevice] = []
        for identifier in self._adb.device_identifiers(logger=self._logger):
            if not self._adb.is_emulator(identifier):
                continue
            if ready_only and not self._adb.is_ready_for_install(identifier):
                continue
            booted.append(AndroidVirtualDevice(self._adb.avd_name(identifier)))
        return booted

    def is_booted(self, device: AndroidVirtualDevice, *, ready_only: bool = True) -> bool:
        return device in self.booted_virtual_devices(ready_only=ready_only)

    def boot(
        self,
        device: AndroidVirtualDevice,
        *,
        attach: bool = False,
        additional_arguments: Sequence[str] = (),
    ) -> BootOutcome:
        """Boot ``device`` unless it is already running.

        Detached boots return once ``adb`` reports the emulator ready for installs.
        Attached boots tie the emulator to this process and return when it exits.

        Args:
            device: AVD to boot.
            attach: Run the emulator attached instead of detached.
            additional_arguments: Extra arguments for the ``emulator`` binary.

        Returns:
            BootOutcome: How the request was satisfied.

        Raises:
            CannotAttachToBootedEmulatorError: If ``attach`` is requested for an
                emulator that is already running.
            BootTimeoutError: If ``boot_max_attempts`` polls elapse first.
            OperationCancelledError: If the invocation is cancelled while waiting.
            SubprocessExecutionError: If an attached emulator exits unsuccessfully.
        """

        if self.is_booted(device):
            if attach:
                raise CannotAttachToBootedEmulatorError(
                    f"Cannot attach to emulator '{device.name}' because it is already running",
                )
            self._logger.warn(f"Emulator '{device.name}' is already booted")
            return BootOutcome.ALREADY_BOOTED

        emulator = self._sdk.require_tool("emulator")
        arguments = ["-avd", device.name, *additional_arguments]
        if attach:
            self._logger.info(f"Booting emulator '{device.name}' (attached)")
            status = self._runner.run_attached(emulator, arguments)
            if status != 0:
                raise SubprocessExecutionError([str(emulator), *arguments], status, None, None)
            return BootOutcome.EXITED

        self._logger.info(f"Booting emulator '{device.name}'")
        self._runner.spawn_detached(emulator, arguments)
        self.wait_until_booted(device)
        return BootOutcome.BOOTED

    def wait_until_booted(self, device: AndroidVirtualDevice) -> None:
        """Poll ``adb`` every ``boot_poll_interval`` seconds until ``device`` is ready.

        Raises:
            BootTimeoutError: If ``boot_max_attempts`` polls elapse first.
            OperationCancelledError: If the invocation is cancelled while waiting.
        """

        interval = self._settings.boot_poll_interval
        max_attempts = self._settings.boot_max_attempts
        attempts = 0
        while True:
            self._context.check_cancelled()
            try:
                if self.is_booted(device):
                    self._logger.debug(f"Emulator ready avd={device.name} attempts={attempts + 1}")
                    return
            except EnvironmentProblem:
                raise
            except BundlerError as exc:
                # adb is unreliable while an emulator is still starting up.
                self._logger.debug(f"Boot poll failed for avd={device.name}: {exc}")
            attempts += 1
            if max_attempts is not None and attempts >= max_attempts:
                raise BootTimeoutError(
                    f"Emulator '{device.name}' did not become ready after {attempts} checks "
                    f"({interval:g}s apart)",
                )
            if not self._context.sleep(interval):
                raise OperationCancelledError(f"Cancelled while waiting for emulator '{device.name}' to boot")


__all__ = [
    "AndroidVirtualDevice",
    "AndroidVirtualDeviceManager",
    "BootOutcome",
    "parse_avd_list",
]
